# routers/sub_jobs.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from database import get_db
from deps.authz import require_page_access
from deps.tenant import get_tenant_id
from models import Department, SubJob, Team, WorkStep
from schemas import AvailableSubJobOut, SubJobDraftOut, SubJobGenerateIn, SubJobOut
from services.sub_job_generator import generate_sub_job_drafts
from services.work_orders import get_work_order
from services.work_queue import available_sub_jobs

router = APIRouter(prefix="/sub-jobs", tags=["sub-jobs"])


def _available_row(sj: SubJob) -> dict:
    out = SubJobOut.model_validate(sj).model_dump()
    out.update(
        order_number=sj.work_order.order_number,
        customer_name=sj.work_order.customer.name if sj.work_order.customer else None,
        delivery_date=sj.work_order.delivery_date,
    )
    return out


@router.get(
    "/available",
    response_model=List[AvailableSubJobOut],
    dependencies=[Depends(require_page_access("/production/work-queue"))],
)
def list_available(
    work_step_id: Optional[int] = Query(None, alias="workStepId"),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    """sub jobs ที่ดึงเข้าคิวได้ (ใบสั่งงาน approved / in_progress และยังไม่อยู่ในคิว)"""
    return [_available_row(sj) for sj in available_sub_jobs(db, tenant_id, work_step_id)]


@router.get(
    "/by-work-order/{work_order_id}",
    response_model=List[SubJobOut],
    dependencies=[Depends(require_page_access("/production/work-orders"))],
)
def list_by_work_order(work_order_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    wo = get_work_order(db, tenant_id, work_order_id)
    return wo.sub_jobs


@router.post(
    "/generate",
    response_model=List[SubJobDraftOut],
    dependencies=[Depends(require_page_access("/production/work-orders"))],
)
def generate(payload: SubJobGenerateIn, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    """สร้าง draft (ไม่บันทึก) แผนก x ขั้นตอน x สี x ไซส์ x ทีม"""
    depts = (
        db.query(Department)
        .filter(Department.tenant_id == tenant_id, Department.id.in_(payload.department_ids))
        .all()
    )
    missing = set(payload.department_ids) - {d.id for d in depts}
    if missing:
        raise HTTPException(404, f"Department not found: {sorted(missing)}")

    steps_by_dept = {d.id: [] for d in depts}
    for s in (
        db.query(WorkStep)
        .filter(WorkStep.department_id.in_(steps_by_dept.keys()))
        .order_by(WorkStep.order.asc(), WorkStep.id.asc())
    ):
        steps_by_dept[s.department_id].append(s.id)

    teams_by_dept = {}
    if payload.team_ids:
        for t in (
            db.query(Team)
            .filter(Team.tenant_id == tenant_id, Team.id.in_(payload.team_ids))
            .order_by(Team.id.asc())
        ):
            teams_by_dept.setdefault(t.department_id, []).append(t.id)

    quantities = {(q.department_id, q.color_id, q.size_id): q.quantity for q in payload.quantities}
    return generate_sub_job_drafts(
        department_ids=payload.department_ids,
        color_ids=payload.color_ids,
        size_ids=payload.size_ids,
        quantities=quantities,
        work_steps_by_department=steps_by_dept,
        teams_by_department=teams_by_dept,
        product_name=payload.product_name,
        production_cost=payload.production_cost,
    )
