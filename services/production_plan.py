# services/production_plan.py
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from config import DEFAULT_UNIT_COST
from models import Holiday, ProductionPlan, ProductionPlanItem, WorkQueue
from services.errors import ServiceError
from services.work_queue import get_team, team_queue

logger = logging.getLogger(__name__)


@dataclass
class PlannedJob:
    sub_job_id: int
    order_number: Optional[str]
    customer_name: Optional[str]
    product_name: Optional[str]
    color_name: Optional[str]
    size_name: Optional[str]
    quantity: int
    completion_date: date
    job_cost: float
    remaining_capacity: float
    priority: int


def is_working_day(d: date, holidays: Iterable[date]) -> bool:
    return d.weekday() < 5 and d not in set(holidays)


def next_working_day(d: date, holidays: Iterable[date]) -> date:
    hs = set(holidays)
    d = d + timedelta(days=1)
    while not is_working_day(d, hs):
        d += timedelta(days=1)
    return d


def job_cost(entry: WorkQueue) -> float:
    sj = entry.sub_job
    if sj.total_cost is not None and float(sj.total_cost) > 0:
        return float(sj.total_cost)
    return (sj.quantity or 0) * DEFAULT_UNIT_COST


def calculate_plan(
    queue: Sequence[WorkQueue],
    daily_capacity: float,
    start_date: date,
    holidays: Iterable[date] = (),
) -> List[PlannedJob]:
    """
    ไล่คิวตาม priority ใช้ต้นทุนต่อวันของทีมเป็นกำลังการผลิตต่อวัน
    งานที่ต้นทุนเกินกำลังที่เหลือของวัน -> เลื่อนไปวันทำงานถัดไป (ข้ามเสาร์-อาทิตย์/วันหยุด)
    """
    if daily_capacity <= 0:
        raise ServiceError(f"Team has no daily cost to plan with (got {daily_capacity})")

    hs = set(holidays)
    current = start_date if is_working_day(start_date, hs) else next_working_day(start_date, hs)
    remaining = daily_capacity
    planned: List[PlannedJob] = []

    for idx, entry in enumerate(queue, start=1):
        cost = job_cost(entry)
        if cost > remaining:
            current = next_working_day(current, hs)
            remaining = daily_capacity
        remaining -= cost

        sj = entry.sub_job
        wo = sj.work_order
        planned.append(PlannedJob(
            sub_job_id=sj.id,
            order_number=wo.order_number if wo else None,
            customer_name=wo.customer.name if wo and wo.customer else None,
            product_name=sj.product_name,
            color_name=sj.color.name if sj.color else None,
            size_name=sj.size.name if sj.size else None,
            quantity=sj.quantity,
            completion_date=current,
            job_cost=round(cost, 2),
            remaining_capacity=round(remaining, 2),
            priority=idx,
        ))
    return planned


def tenant_holidays(db: Session, tenant_id: str) -> List[date]:
    return list(db.scalars(select(Holiday.date).where(Holiday.tenant_id == tenant_id)).all())


def plan_team(
    db: Session,
    tenant_id: str,
    *,
    team_id: int,
    start_date: date,
    save: bool = True,
    name: Optional[str] = None,
):
    team = get_team(db, tenant_id, team_id)
    queue = team_queue(db, tenant_id, team.id)
    planned = calculate_plan(queue, team.cost_per_day, start_date, tenant_holidays(db, tenant_id))

    plan = None
    if save:
        plan = ProductionPlan(
            tenant_id=tenant_id,
            team_id=team.id,
            name=name or f"แผนการผลิต {team.name} - {start_date:%d/%m/%Y}",
            start_date=start_date,
        )
        for p in planned:
            plan.items.append(ProductionPlanItem(
                sub_job_id=p.sub_job_id,
                order_number=p.order_number,
                customer_name=p.customer_name,
                product_name=p.product_name,
                color_name=p.color_name,
                size_name=p.size_name,
                quantity=p.quantity,
                completion_date=p.completion_date,
                job_cost=p.job_cost,
                priority=p.priority,
            ))
        db.add(plan)
        db.commit()
        db.refresh(plan)
    logger.info("team %s planned: %d jobs from %s (saved=%s)", team.id, len(planned), start_date, save)
    return team, planned, plan
