# services/work_orders.py
import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from models import Color, Customer, Department, Size, SubJob, WorkOrder, WorkStep, WorkType
from services.errors import NotFoundError, ServiceError
from services.price_change import detect_price_change, has_queued_jobs
from utils.code_generator import next_work_order_number

logger = logging.getLogger(__name__)

SUB_JOB_FIELDS = (
    "product_name",
    "department_id",
    "work_step_id",
    "color_id",
    "size_id",
    "quantity",
    "production_cost",
)

WORK_ORDER_FIELDS = (
    "quotation_id",
    "customer_id",
    "title",
    "description",
    "work_type_id",
    "delivery_date",
    "notes",
    "status",
    "priority",
)


@dataclass
class ReconcileResult:
    """ผลการเทียบ sub jobs เดิมกับรายการใหม่"""
    kept: List[int] = field(default_factory=list)
    inserted: List[int] = field(default_factory=list)
    deleted: List[int] = field(default_factory=list)


def _money(v: Any) -> Decimal:
    try:
        return Decimal(str(v if v is not None else 0))
    except (InvalidOperation, ValueError):
        return Decimal("0")


def line_total(quantity: Any, production_cost: Any) -> Decimal:
    return (_money(quantity) * _money(production_cost)).quantize(Decimal("0.01"))


def _natural_key(item: Any) -> tuple:
    def g(name):
        return item.get(name) if isinstance(item, dict) else getattr(item, name)
    return tuple(g(f) for f in ("product_name", "department_id", "work_step_id", "color_id", "size_id"))


def get_work_order(db: Session, tenant_id: str, work_order_id: int) -> WorkOrder:
    wo = db.get(WorkOrder, work_order_id)
    if not wo or wo.tenant_id != tenant_id:
        raise NotFoundError("Work order not found")
    return wo


def _check_owned(db: Session, model, obj_id: Optional[int], tenant_id: str, label: str):
    if obj_id is None:
        return
    obj = db.get(model, obj_id)
    if not obj or obj.tenant_id != tenant_id:
        raise NotFoundError(f"{label} not found")


def _check_sub_job_refs(db: Session, tenant_id: str, item: Dict[str, Any]):
    _check_owned(db, Department, item.get("department_id"), tenant_id, "Department")
    _check_owned(db, WorkStep, item.get("work_step_id"), tenant_id, "Work step")
    _check_owned(db, Color, item.get("color_id"), tenant_id, "Color")
    _check_owned(db, Size, item.get("size_id"), tenant_id, "Size")


def _apply_sub_job(sj: SubJob, item: Dict[str, Any], position: int):
    for f in SUB_JOB_FIELDS:
        if f in item:
            setattr(sj, f, item[f])
    sj.quantity = int(sj.quantity or 0)
    sj.production_cost = _money(sj.production_cost)
    sj.total_cost = line_total(sj.quantity, sj.production_cost)
    sj.sort_order = item["sort_order"] if item.get("sort_order") is not None else position


def recompute_total(work_order: WorkOrder) -> Decimal:
    total = sum((_money(sj.total_cost) for sj in work_order.sub_jobs), Decimal("0"))
    work_order.total_amount = total
    return total


def reconcile_sub_jobs(
    db: Session,
    work_order: WorkOrder,
    items: Sequence[Dict[str, Any]],
) -> ReconcileResult:
    """
    ทำให้ sub jobs ของใบสั่งงานตรงกับ items (รายการทั้งหมดที่ต้องการ)
    - มี id ตรงกับของเดิม -> แก้ไขแถวเดิม (kept)
    - ไม่มี id -> หาแถวเดิมที่ยังไม่ถูกจับคู่ด้วย (สินค้า, แผนก, ขั้นตอน, สี, ไซส์) ถ้าไม่เจอ -> เพิ่มใหม่ (inserted)
    - แถวเดิมที่ไม่ถูกจับคู่ -> ลบ พร้อม queue entries และ plan items (deleted)
    flush อย่างเดียว ผู้เรียกเป็นคน commit/rollback
    """
    tenant_id = work_order.tenant_id
    existing = {sj.id: sj for sj in work_order.sub_jobs}
    claimed = set()
    result = ReconcileResult()
    unmatched = []

    for pos, item in enumerate(items, start=1):
        _check_sub_job_refs(db, tenant_id, item)
        sj = existing.get(item.get("id")) if item.get("id") is not None else None
        if sj is not None and sj.id not in claimed:
            _apply_sub_job(sj, item, pos)
            claimed.add(sj.id)
            result.kept.append(sj.id)
        else:
            unmatched.append((pos, item))

    for pos, item in unmatched:
        key = _natural_key(item)
        match = next(
            (sj for sid, sj in existing.items() if sid not in claimed and _natural_key(sj) == key),
            None,
        )
        if match is not None:
            _apply_sub_job(match, item, pos)
            claimed.add(match.id)
            result.kept.append(match.id)
            continue
        sj = SubJob()
        _apply_sub_job(sj, item, pos)
        work_order.sub_jobs.append(sj)
        db.flush()
        result.inserted.append(sj.id)

    for sid, sj in existing.items():
        if sid not in claimed:
            # delete-orphan: ลบ sub job + work_queues + production_plan_items
            work_order.sub_jobs.remove(sj)
            result.deleted.append(sid)

    recompute_total(work_order)
    db.flush()
    logger.info(
        "work order %s sub jobs reconciled: kept=%d inserted=%d deleted=%d",
        work_order.order_number, len(result.kept), len(result.inserted), len(result.deleted),
    )
    return result


def create_work_order(
    db: Session,
    tenant_id: str,
    data: Dict[str, Any],
    sub_jobs: Iterable[Dict[str, Any]] = (),
) -> WorkOrder:
    _check_owned(db, Customer, data.get("customer_id"), tenant_id, "Customer")
    _check_owned(db, WorkType, data.get("work_type_id"), tenant_id, "Work type")

    order_number = (data.get("order_number") or "").strip() or next_work_order_number(db, tenant_id)
    wo = WorkOrder(tenant_id=tenant_id, order_number=order_number)
    for f in WORK_ORDER_FIELDS:
        if data.get(f) is not None:
            setattr(wo, f, data[f])
    try:
        db.add(wo)
        for pos, item in enumerate(sub_jobs, start=1):
            _check_sub_job_refs(db, tenant_id, item)
            sj = SubJob()
            _apply_sub_job(sj, item, pos)
            wo.sub_jobs.append(sj)
        recompute_total(wo)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(wo)
    logger.info("work order %s created with %d sub jobs", wo.order_number, len(wo.sub_jobs))
    return wo


def update_work_order(
    db: Session,
    tenant_id: str,
    work_order_id: int,
    data: Dict[str, Any],
    sub_jobs: Optional[Sequence[Dict[str, Any]]] = None,
):
    """
    แก้ไขใบสั่งงาน + (ถ้าส่ง sub_jobs มา) reconcile ใน transaction เดียว
    คืน (work_order, ReconcileResult|None, flags) โดย flags เทียบราคาจาก snapshot ก่อนแก้
    """
    wo = get_work_order(db, tenant_id, work_order_id)
    if "customer_id" in data:
        _check_owned(db, Customer, data.get("customer_id"), tenant_id, "Customer")
    if "work_type_id" in data:
        _check_owned(db, WorkType, data.get("work_type_id"), tenant_id, "Work type")

    flags = {"price_changed": False, "has_queued_jobs": False, "needs_replanning": False}
    result = None
    try:
        if sub_jobs is not None:
            snapshot = [
                {
                    "id": sj.id,
                    "product_name": sj.product_name,
                    "color_id": sj.color_id,
                    "size_id": sj.size_id,
                    "production_cost": sj.production_cost,
                }
                for sj in wo.sub_jobs
            ]
            flags["price_changed"] = detect_price_change(snapshot, sub_jobs)
            flags["has_queued_jobs"] = has_queued_jobs(db, wo.id)
            flags["needs_replanning"] = flags["price_changed"] and flags["has_queued_jobs"]

        for f in WORK_ORDER_FIELDS:
            if f in data:
                setattr(wo, f, data[f])
        if sub_jobs is not None:
            result = reconcile_sub_jobs(db, wo, sub_jobs)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(wo)
    if flags["needs_replanning"]:
        logger.warning("work order %s: production cost changed while jobs are queued", wo.order_number)
    return wo, result, flags


def delete_work_order(db: Session, tenant_id: str, work_order_id: int) -> None:
    wo = get_work_order(db, tenant_id, work_order_id)
    db.delete(wo)
    db.commit()
    logger.info("work order %s deleted", wo.order_number)


def reorder_sub_jobs(db: Session, tenant_id: str, work_order_id: int, ordered_ids: Sequence[int]) -> List[SubJob]:
    wo = get_work_order(db, tenant_id, work_order_id)
    by_id = {sj.id: sj for sj in wo.sub_jobs}
    unknown = [i for i in ordered_ids if i not in by_id]
    if unknown:
        raise ServiceError(f"Sub jobs {unknown} do not belong to work order {work_order_id}")
    for idx, sid in enumerate(ordered_ids, start=1):
        by_id[sid].sort_order = idx
    db.commit()
    return list(
        db.scalars(
            select(SubJob).where(SubJob.work_order_id == wo.id).order_by(SubJob.sort_order.asc(), SubJob.id.asc())
        ).all()
    )
