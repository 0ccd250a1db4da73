# routers/work_queues.py
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from database import get_db
from deps.authz import require_page_access
from deps.tenant import get_tenant_id
from models import WorkQueue
from schemas import AddJobIn, ClearQueueOut, QueueEntryOut, QueueItemOut, QueueReorderIn
from services import work_queue as svc

router = APIRouter(
    prefix="/work-queues",
    tags=["work-queues"],
    dependencies=[Depends(require_page_access("/production/work-queue"))],
)


def queue_item(q: WorkQueue) -> dict:
    sj = q.sub_job
    wo = sj.work_order
    return {
        "id": q.id,
        "sub_job_id": sj.id,
        "team_id": q.team_id,
        "priority": q.priority,
        "status": q.status,
        "work_order_id": wo.id,
        "order_number": wo.order_number,
        "customer_name": wo.customer.name if wo.customer else None,
        "delivery_date": wo.delivery_date,
        "product_name": sj.product_name,
        "work_step_id": sj.work_step_id,
        "color_id": sj.color_id,
        "color_name": sj.color.name if sj.color else None,
        "size_id": sj.size_id,
        "size_name": sj.size.name if sj.size else None,
        "quantity": sj.quantity,
        "production_cost": sj.production_cost,
        "total_cost": sj.total_cost,
    }


@router.get("/team/{team_id}", response_model=List[QueueItemOut])
def get_team_queue(team_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    return [queue_item(q) for q in svc.team_queue(db, tenant_id, team_id)]


@router.post("/add-job", response_model=QueueEntryOut, status_code=201)
def add_job(payload: AddJobIn, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    # ขั้นตอนงานของ sub job ต้องอยู่ในแผนกของทีม ไม่งั้น 400
    return svc.add_job_to_queue(
        db, tenant_id,
        sub_job_id=payload.sub_job_id,
        team_id=payload.team_id,
        priority=payload.priority,
    )


@router.put("/reorder", response_model=List[QueueItemOut])
def reorder(payload: QueueReorderIn, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    rows = svc.reorder_queue(db, tenant_id, payload.team_id, payload.queue_ids)
    return [queue_item(q) for q in rows]


@router.delete("/team/{team_id}/clear", response_model=ClearQueueOut)
def clear_team(team_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    return {"removed": svc.clear_team_queue(db, tenant_id, team_id)}


@router.delete("/{queue_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove(queue_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    svc.remove_from_queue(db, tenant_id, queue_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
