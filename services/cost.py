# services/cost.py
"""
คำนวณต้นทุนแรงงานต่อวัน

    base           = count * wage
    overhead       = base * overhead% / 100
    with_overhead  = base + overhead
    management     = with_overhead * management% / 100
    total          = with_overhead + management

ถ้า input ตัวไหนไม่มี (None) หรือแปลงเป็นตัวเลขไม่ได้ -> คืน 0 (ไม่ raise)
ค่าติดลบไม่ถูกกันที่นี่ (validate ที่ schema ของ API)
"""
from decimal import Decimal
from typing import Iterable, Optional, Union

Number = Union[int, float, Decimal, str, None]


def _to_float(v: Number) -> Optional[float]:
    if v is None or isinstance(v, bool):
        return None
    try:
        return float(v)
    except (TypeError, ValueError):
        return None


def daily_cost(count: Number, wage: Number, overhead_pct: Number, management_pct: Number) -> float:
    values = [_to_float(v) for v in (count, wage, overhead_pct, management_pct)]
    if any(v is None for v in values):
        return 0
    c, w, oh, mg = values

    base = c * w
    overhead_cost = base * (oh / 100)
    with_overhead = base + overhead_cost
    management_cost = with_overhead * (mg / 100)
    return with_overhead + management_cost


def team_daily_cost(employees: Iterable) -> float:
    """รวมต้นทุนต่อวันของทุกกลุ่มพนักงานที่ status = active"""
    total = 0.0
    for e in employees:
        if (getattr(e, "status", "active") or "active") != "active":
            continue
        total += daily_cost(e.count, e.average_wage, e.overhead_percentage, e.management_percentage)
    return total
