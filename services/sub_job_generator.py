# services/sub_job_generator.py
"""สร้าง draft sub jobs แบบ Cartesian: แผนก x ขั้นตอนงานของแผนก x สี x ไซส์ x ทีมของแผนก"""
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from services.work_orders import line_total

QuantityKey = Tuple[int, int, int]   # (department_id, color_id, size_id)


def generate_sub_job_drafts(
    *,
    department_ids: Sequence[int],
    color_ids: Sequence[int],
    size_ids: Sequence[int],
    quantities: Mapping[QuantityKey, Any],
    work_steps_by_department: Mapping[int, Iterable[Any]],
    teams_by_department: Optional[Mapping[int, Iterable[Any]]] = None,
    product_name: str = "",
    production_cost: Any = 0,
) -> List[Dict[str, Any]]:
    """
    - quantity มาจาก quantities[(department, color, size)] ต้อง > 0 ถึงจะสร้าง
    - ถ้าแผนกไม่มีทีมที่เลือก -> สร้าง 1 รายการต่อชุด โดย team_id = None
    ไม่บันทึกอะไรลงฐานข้อมูล
    """
    teams_by_department = teams_by_department or {}
    # id ซ้ำในรายการเลือก = เลือกครั้งเดียว (คงลำดับเดิม)
    department_ids = list(dict.fromkeys(department_ids))
    color_ids = list(dict.fromkeys(color_ids))
    size_ids = list(dict.fromkeys(size_ids))
    drafts: List[Dict[str, Any]] = []

    for dept_id in department_ids:
        steps = list(work_steps_by_department.get(dept_id, []))
        team_ids = [getattr(t, "id", t) for t in teams_by_department.get(dept_id, [])] or [None]
        for step in steps:
            step_id = getattr(step, "id", step)
            for color_id in color_ids:
                for size_id in size_ids:
                    try:
                        qty = int(quantities.get((dept_id, color_id, size_id)) or 0)
                    except (TypeError, ValueError):
                        qty = 0
                    if qty <= 0:
                        continue
                    for team_id in team_ids:
                        drafts.append({
                            "product_name": product_name,
                            "department_id": dept_id,
                            "work_step_id": step_id,
                            "color_id": color_id,
                            "size_id": size_id,
                            "team_id": team_id,
                            "quantity": qty,
                            "production_cost": production_cost,
                            "total_cost": line_total(qty, production_cost),
                        })

    for pos, d in enumerate(drafts, start=1):
        d["sort_order"] = pos
    return drafts
