# routers/work_orders.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session, selectinload

from database import get_db
from deps.authz import require_page_access
from deps.tenant import get_tenant_id
from models import WorkOrder
from schemas import (
    OrderCountIn, OrderCountOut,
    PriceCheckIn, PriceCheckOut, QueueStatusOut,
    SubJobOut, SubJobReorderIn,
    WorkOrderCreate, WorkOrderOut, WorkOrderUpdate, WorkOrderUpdateOut,
)
from services import work_orders as svc
from services.price_change import has_queued_jobs, price_check
from utils.code_generator import count_work_orders_in_month

router = APIRouter(
    prefix="/work-orders",
    tags=["work-orders"],
    dependencies=[Depends(require_page_access("/production/work-orders"))],
)


@router.get("", response_model=List[WorkOrderOut])
def list_work_orders(
    status_: Optional[str] = Query(None, alias="status"),
    customer_id: Optional[int] = Query(None, alias="customerId"),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    qry = (
        db.query(WorkOrder)
        .options(selectinload(WorkOrder.sub_jobs))
        .filter(WorkOrder.tenant_id == tenant_id)
    )
    if status_:
        qry = qry.filter(WorkOrder.status == status_)
    if customer_id is not None:
        qry = qry.filter(WorkOrder.customer_id == customer_id)
    return qry.order_by(WorkOrder.created_at.desc(), WorkOrder.id.desc()).all()


# ---------- นับใบสั่งงานของเดือน (ใช้ออกเลข JBYYYYMM###) ----------
@router.post("/count", response_model=OrderCountOut)
def count_work_orders(payload: OrderCountIn, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    n = count_work_orders_in_month(db, tenant_id, payload.year, payload.month)
    return {"count": n, "next_order_number": f"JB{payload.year}{payload.month:02d}{n + 1:03d}"}


@router.post("", response_model=WorkOrderOut, status_code=201)
def create_work_order(payload: WorkOrderCreate, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    data = payload.model_dump(exclude={"sub_jobs"})
    items = [s.model_dump() for s in payload.sub_jobs]
    return svc.create_work_order(db, tenant_id, data, items)


@router.get("/{work_order_id}", response_model=WorkOrderOut)
def get_work_order(work_order_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    return svc.get_work_order(db, tenant_id, work_order_id)


@router.put("/{work_order_id}", response_model=WorkOrderUpdateOut)
def update_work_order(
    work_order_id: int,
    payload: WorkOrderUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    """
    แก้ไขใบสั่งงาน ถ้าส่ง subJobs มา = รายการทั้งหมดที่ต้องการ (reconcile)
    ไม่บล็อกเมื่อราคาเปลี่ยน แค่แจ้ง priceChanged / hasQueuedJobs / needsReplanning กลับไป
    """
    data = payload.model_dump(exclude_unset=True, exclude={"sub_jobs"})
    items = None
    if payload.sub_jobs is not None:
        items = [s.model_dump() for s in payload.sub_jobs]
    wo, result, flags = svc.update_work_order(db, tenant_id, work_order_id, data, items)

    out = WorkOrderOut.model_validate(wo).model_dump()
    out.update(flags)
    if result is not None:
        out["reconciliation"] = {"kept": result.kept, "inserted": result.inserted, "deleted": result.deleted}
    return out


@router.delete("/{work_order_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_work_order(work_order_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    svc.delete_work_order(db, tenant_id, work_order_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{work_order_id}/sub-jobs/reorder", response_model=List[SubJobOut])
def reorder_sub_jobs(
    work_order_id: int,
    payload: SubJobReorderIn,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    return svc.reorder_sub_jobs(db, tenant_id, work_order_id, payload.sub_job_ids)


@router.post("/{work_order_id}/price-check", response_model=PriceCheckOut)
def check_price_change(
    work_order_id: int,
    payload: PriceCheckIn,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    wo = svc.get_work_order(db, tenant_id, work_order_id)
    return price_check(db, wo.id, [s.model_dump() for s in payload.sub_jobs])


@router.get("/{work_order_id}/queue-status", response_model=QueueStatusOut)
def queue_status(work_order_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    wo = svc.get_work_order(db, tenant_id, work_order_id)
    return {"has_queued_jobs": has_queued_jobs(db, wo.id)}
