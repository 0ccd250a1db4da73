# services/price_change.py
from typing import Any, Iterable, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from models import SubJob, WorkQueue


def _get(item: Any, *names: str):
    """อ่านค่าได้ทั้ง dict (camelCase/snake_case) และ ORM object"""
    for n in names:
        if isinstance(item, Mapping):
            if n in item:
                return item[n]
        elif hasattr(item, n):
            return getattr(item, n)
    return None


def _cost(item: Any) -> float:
    v = _get(item, "production_cost", "productionCost")
    try:
        return float(v)
    except (TypeError, ValueError):
        return 0.0


def _natural_key(item: Any):
    return (
        _get(item, "product_name", "productName"),
        _get(item, "color_id", "colorId"),
        _get(item, "size_id", "sizeId"),
    )


def _find_original(current: Any, original: list) -> Optional[Any]:
    cid = _get(current, "id")
    if cid is not None:
        for o in original:
            if _get(o, "id") == cid:
                return o
    # รายการใหม่ (ไม่มี id) -> จับคู่ด้วย ชื่อสินค้า + สี + ไซส์
    key = _natural_key(current)
    for o in original:
        if _natural_key(o) == key:
            return o
    return None


def detect_price_change(original: Iterable[Any], current: Iterable[Any]) -> bool:
    """True ถ้ามี sub job ที่จับคู่ได้แล้ว production cost ไม่เท่ากับ snapshot"""
    original = list(original)
    for cur in current:
        orig = _find_original(cur, original)
        if orig is not None and _cost(orig) != _cost(cur):
            return True
    return False


def has_queued_jobs(db: Session, work_order_id: int) -> bool:
    q = (
        select(WorkQueue.id)
        .join(SubJob, SubJob.id == WorkQueue.sub_job_id)
        .where(SubJob.work_order_id == work_order_id)
        .limit(1)
    )
    return db.execute(q).first() is not None


def price_check(db: Session, work_order_id: int, incoming: Iterable[Any]) -> dict:
    saved = db.scalars(select(SubJob).where(SubJob.work_order_id == work_order_id)).all()
    price_changed = detect_price_change(saved, incoming)
    queued = has_queued_jobs(db, work_order_id)
    return {
        "price_changed": price_changed,
        "has_queued_jobs": queued,
        "needs_replanning": price_changed and queued,
    }
