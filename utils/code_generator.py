# utils/code_generator.py
import re
from datetime import date
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from models import DailyWorkLog, WorkOrder


def count_work_orders_in_month(db: Session, tenant_id: str, year: int, month: int) -> int:
    prefix = f"JB{year}{month:02d}"
    return db.scalar(
        select(func.count(WorkOrder.id)).where(
            WorkOrder.tenant_id == tenant_id,
            WorkOrder.order_number.like(f"{prefix}%"),
        )
    ) or 0


def next_work_order_number(db: Session, tenant_id: str, today: Optional[date] = None) -> str:
    """
    เลขใบสั่งงาน JB<YYYY><MM><seq:03d> เช่น JB202510001
    seq = จำนวนใบสั่งงานของเดือนนั้น + 1
    นับแล้วบวกเฉยๆ ไม่มี lock: สร้างพร้อมกันสองคำขอได้เลขซ้ำ
    """
    d = today or date.today()
    seq = count_work_orders_in_month(db, tenant_id, d.year, d.month) + 1
    return f"JB{d.year}{d.month:02d}{seq:03d}"


def next_report_number(db: Session, tenant_id: str, day: date) -> str:
    """
    เลขรายงานประจำวัน RP<YYYYMMDD><seq:03d> ดูเลขท้ายที่มากสุดของวันนั้นแล้ว +1
    """
    base = f"RP{day:%Y%m%d}"
    pat = re.compile(rf"^{re.escape(base)}(\d+)$")
    max_n = 0
    rows = db.execute(
        select(DailyWorkLog.report_number).where(
            DailyWorkLog.tenant_id == tenant_id,
            DailyWorkLog.report_number.like(f"{base}%"),
        )
    ).all()
    for (code,) in rows:
        m = pat.match(code or "")
        if m:
            n = int(m.group(1))
            if n > max_n:
                max_n = n
    return f"{base}{str(max_n + 1).zfill(3)}"
