# services/work_logs.py
import logging
from collections import OrderedDict
from datetime import date
from decimal import Decimal
from io import BytesIO
from typing import Any, Dict, List, Optional

from openpyxl import Workbook
from openpyxl.styles import Font
from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from models import DailyWorkLog, Employee, SubJob, Team, WorkOrder
from services.errors import NotFoundError, ServiceError
from utils.code_generator import next_report_number

logger = logging.getLogger(__name__)

LOG_STATUSES = ("in_progress", "completed", "paused")

LOG_FIELDS = (
    "date",
    "team_id",
    "employee_id",
    "work_order_id",
    "sub_job_id",
    "work_step_id",
    "hours_worked",
    "quantity_completed",
    "work_description",
    "status",
    "notes",
)


def get_log(db: Session, tenant_id: str, log_id: int) -> DailyWorkLog:
    log = db.get(DailyWorkLog, log_id)
    if not log or log.tenant_id != tenant_id:
        raise NotFoundError("Daily work log not found")
    return log


def _validate_refs(db: Session, tenant_id: str, data: Dict[str, Any]):
    for key, model, label in (
        ("team_id", Team, "Team"),
        ("employee_id", Employee, "Employee"),
        ("work_order_id", WorkOrder, "Work order"),
    ):
        obj_id = data.get(key)
        if obj_id is None:
            continue
        obj = db.get(model, obj_id)
        if not obj or obj.tenant_id != tenant_id:
            raise NotFoundError(f"{label} not found")

    sub_job_id = data.get("sub_job_id")
    if sub_job_id is not None:
        sj = db.get(SubJob, sub_job_id)
        if not sj or sj.work_order.tenant_id != tenant_id:
            raise NotFoundError("Sub job not found")
        if data.get("work_order_id") is not None and sj.work_order_id != data["work_order_id"]:
            raise ServiceError("Sub job does not belong to the selected work order")
        if sj.quantity is not None and (data.get("quantity_completed") or 0) > sj.quantity:
            raise ServiceError("quantityCompleted must not exceed the sub job quantity")

    if data.get("status") is not None and data["status"] not in LOG_STATUSES:
        raise ServiceError(f"status must be one of {', '.join(LOG_STATUSES)}")


def list_logs(
    db: Session,
    tenant_id: str,
    *,
    day: Optional[date] = None,
    team_id: Optional[int] = None,
) -> List[DailyWorkLog]:
    stmt = select(DailyWorkLog).where(DailyWorkLog.tenant_id == tenant_id)
    if day is not None:
        stmt = stmt.where(DailyWorkLog.date == day)
    if team_id is not None:
        stmt = stmt.where(DailyWorkLog.team_id == team_id)
    return list(db.scalars(stmt.order_by(DailyWorkLog.date.desc(), DailyWorkLog.id.desc())).all())


def create_log(db: Session, tenant_id: str, data: Dict[str, Any]) -> DailyWorkLog:
    _validate_refs(db, tenant_id, data)
    if data.get("sub_job_id") is not None and data.get("work_order_id") is None:
        data["work_order_id"] = db.get(SubJob, data["sub_job_id"]).work_order_id

    log = DailyWorkLog(
        tenant_id=tenant_id,
        report_number=next_report_number(db, tenant_id, data["date"]),
    )
    for f in LOG_FIELDS:
        if data.get(f) is not None:
            setattr(log, f, data[f])
    db.add(log)
    db.commit()
    db.refresh(log)
    return log


def update_log(db: Session, tenant_id: str, log_id: int, data: Dict[str, Any]) -> DailyWorkLog:
    log = get_log(db, tenant_id, log_id)
    merged = {f: getattr(log, f) for f in LOG_FIELDS}
    merged.update(data)
    _validate_refs(db, tenant_id, merged)
    for k, v in data.items():
        if k in LOG_FIELDS:
            setattr(log, k, v)
    db.commit()
    db.refresh(log)
    return log


def delete_log(db: Session, tenant_id: str, log_id: int) -> None:
    log = get_log(db, tenant_id, log_id)
    db.delete(log)
    db.commit()


# =========================================
# ================ Reports ================
# =========================================

def team_revenue(
    db: Session,
    tenant_id: str,
    *,
    team_id: int,
    start_date: date,
    end_date: date,
) -> List[Dict[str, Any]]:
    """รายได้ทีมต่อวัน = sum(quantity_completed * production_cost ของ sub job)"""
    if end_date < start_date:
        raise ServiceError("endDate must not be before startDate")
    team = db.get(Team, team_id)
    if not team or team.tenant_id != tenant_id:
        raise NotFoundError("Team not found")

    logs = db.scalars(
        select(DailyWorkLog)
        .options(joinedload(DailyWorkLog.sub_job).joinedload(SubJob.work_order).joinedload(WorkOrder.customer))
        .where(
            DailyWorkLog.tenant_id == tenant_id,
            DailyWorkLog.team_id == team.id,
            DailyWorkLog.date >= start_date,
            DailyWorkLog.date <= end_date,
        )
        .order_by(DailyWorkLog.date.asc(), DailyWorkLog.id.asc())
    ).all()

    by_day: "OrderedDict[date, Dict[str, Any]]" = OrderedDict()
    for log in logs:
        day = by_day.setdefault(log.date, {"date": log.date, "revenue": Decimal("0"), "quantity": 0, "jobs": []})
        sj = log.sub_job
        unit_price = Decimal(str(sj.production_cost)) if sj is not None else Decimal("0")
        qty = log.quantity_completed or 0
        revenue = (unit_price * qty).quantize(Decimal("0.01"))
        day["revenue"] += revenue
        day["quantity"] += qty
        day["jobs"].append({
            "log_id": log.id,
            "order_number": sj.work_order.order_number if sj is not None else None,
            "customer_name": sj.work_order.customer.name if sj is not None and sj.work_order.customer else None,
            "product_name": sj.product_name if sj is not None else None,
            "quantity": qty,
            "unit_price": float(unit_price),
            "revenue": float(revenue),
        })

    out = []
    for d in by_day.values():
        d["revenue"] = float(d["revenue"])
        out.append(d)
    return out


EXPORT_HEADER = [
    "Report No", "Date", "Team", "Order No", "Product", "Work Step",
    "Hours", "Qty Completed", "Status", "Description", "Notes",
]


def export_logs_xlsx(logs: List[DailyWorkLog]) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Daily Work Logs"
    ws.append(EXPORT_HEADER)
    for cell in ws[1]:
        cell.font = Font(bold=True)

    for log in logs:
        ws.append([
            log.report_number,
            log.date,
            log.team.name if log.team else None,
            log.work_order.order_number if log.work_order else None,
            log.sub_job.product_name if log.sub_job else None,
            log.work_step.name if log.work_step else None,
            float(log.hours_worked or 0),
            log.quantity_completed,
            log.status,
            log.work_description,
            log.notes,
        ])

    buf = BytesIO()
    wb.save(buf)
    logger.info("exported %d daily work logs", len(logs))
    return buf.getvalue()
