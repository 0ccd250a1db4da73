# services/work_queue.py
import logging
from typing import List, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session, joinedload

from models import SubJob, Team, WorkOrder, WorkQueue, WorkStep
from services.errors import ConflictError, NotFoundError, ServiceError, WorkStepMismatchError

logger = logging.getLogger(__name__)

# ใบสั่งงานที่สถานะนี้เท่านั้นที่ดึงเข้าคิวได้
QUEUEABLE_ORDER_STATUSES = ("approved", "in_progress")
CLOSED_SUB_JOB_STATUSES = ("completed", "cancelled")


def get_team(db: Session, tenant_id: str, team_id: int) -> Team:
    team = db.get(Team, team_id)
    if not team or team.tenant_id != tenant_id:
        raise NotFoundError("Team not found")
    return team


def _get_sub_job(db: Session, tenant_id: str, sub_job_id: int) -> SubJob:
    sj = db.get(SubJob, sub_job_id)
    if not sj or sj.work_order.tenant_id != tenant_id:
        raise NotFoundError("Sub job not found")
    return sj


def team_work_step_ids(db: Session, team: Team) -> List[int]:
    # teams.department_id -> work_steps.department_id
    return list(
        db.scalars(
            select(WorkStep.id)
            .join(Team, Team.department_id == WorkStep.department_id)
            .where(Team.id == team.id)
            .order_by(WorkStep.order.asc(), WorkStep.id.asc())
        ).all()
    )


def add_job_to_queue(
    db: Session,
    tenant_id: str,
    *,
    sub_job_id: int,
    team_id: int,
    priority: int = 1,
) -> WorkQueue:
    sj = _get_sub_job(db, tenant_id, sub_job_id)
    team = get_team(db, tenant_id, team_id)

    step_ids = team_work_step_ids(db, team)
    if sj.work_step_id not in step_ids:
        raise WorkStepMismatchError(sj.work_step_id, step_ids)

    dup = (
        db.query(WorkQueue)
        .filter(WorkQueue.sub_job_id == sj.id, WorkQueue.team_id == team.id)
        .first()
    )
    if dup:
        raise ConflictError("Sub job already in this team's queue")

    q = WorkQueue(
        tenant_id=tenant_id,
        sub_job_id=sj.id,
        team_id=team.id,
        priority=priority or 1,
        status="pending",
    )
    db.add(q)
    db.commit()
    db.refresh(q)
    logger.info("sub job %s queued for team %s (priority %s)", sj.id, team.id, q.priority)
    return q


def team_queue(db: Session, tenant_id: str, team_id: int) -> List[WorkQueue]:
    team = get_team(db, tenant_id, team_id)
    return list(
        db.scalars(
            select(WorkQueue)
            .options(
                joinedload(WorkQueue.sub_job).joinedload(SubJob.work_order).joinedload(WorkOrder.customer),
                joinedload(WorkQueue.sub_job).joinedload(SubJob.color),
                joinedload(WorkQueue.sub_job).joinedload(SubJob.size),
            )
            .where(WorkQueue.team_id == team.id)
            .order_by(WorkQueue.priority.asc(), WorkQueue.id.asc())
        ).all()
    )


def reorder_queue(db: Session, tenant_id: str, team_id: int, ordered_item_ids: Sequence[int]) -> List[WorkQueue]:
    """priority = ลำดับ (เริ่ม 1) ตามที่ส่งมา ทำใน transaction เดียว"""
    team = get_team(db, tenant_id, team_id)
    rows = {
        q.id: q
        for q in db.scalars(select(WorkQueue).where(WorkQueue.team_id == team.id)).all()
    }
    unknown = [i for i in ordered_item_ids if i not in rows]
    if unknown:
        raise ServiceError(f"Queue items {unknown} are not in team {team.id}'s queue")
    try:
        for idx, qid in enumerate(ordered_item_ids, start=1):
            rows[qid].priority = idx
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("team %s queue reordered (%d items)", team.id, len(ordered_item_ids))
    return team_queue(db, tenant_id, team.id)


def remove_from_queue(db: Session, tenant_id: str, queue_id: int) -> None:
    q = db.get(WorkQueue, queue_id)
    if not q or q.tenant_id != tenant_id:
        raise NotFoundError("Queue item not found")
    db.delete(q)
    db.commit()


def clear_team_queue(db: Session, tenant_id: str, team_id: int) -> int:
    team = get_team(db, tenant_id, team_id)
    res = db.execute(delete(WorkQueue).where(WorkQueue.team_id == team.id))
    db.commit()
    removed = res.rowcount or 0
    logger.info("team %s queue cleared (%d removed)", team.id, removed)
    return removed


def available_sub_jobs(db: Session, tenant_id: str, work_step_id: Optional[int]) -> List[SubJob]:
    """sub jobs ของขั้นตอนงานนี้ ที่ใบสั่งงาน approved/in_progress ยังไม่เสร็จ/ยกเลิก และยังไม่อยู่ในคิว"""
    queued = select(WorkQueue.sub_job_id)
    stmt = (
        select(SubJob)
        .join(WorkOrder, WorkOrder.id == SubJob.work_order_id)
        .options(joinedload(SubJob.work_order).joinedload(WorkOrder.customer))
        .where(
            WorkOrder.tenant_id == tenant_id,
            WorkOrder.status.in_(QUEUEABLE_ORDER_STATUSES),
            SubJob.status.notin_(CLOSED_SUB_JOB_STATUSES),
            SubJob.id.notin_(queued),
        )
        .order_by(WorkOrder.delivery_date.asc(), WorkOrder.id.asc(), SubJob.sort_order.asc())
    )
    if work_step_id is not None:
        stmt = stmt.where(SubJob.work_step_id == work_step_id)
    return list(db.scalars(stmt).unique().all())
