# routers/reports.py
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from database import get_db
from deps.authz import require_page_access
from deps.tenant import get_tenant_id
from schemas import TeamRevenueDayOut
from services.work_logs import export_logs_xlsx, list_logs, team_revenue

router = APIRouter(
    prefix="/reports",
    tags=["reports"],
    dependencies=[Depends(require_page_access("/production/production-reports"))],
)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/team-revenue", response_model=List[TeamRevenueDayOut])
def get_team_revenue(
    team_id: int = Query(..., alias="teamId"),
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    """รายได้ทีมรายวัน = จำนวนที่ทำเสร็จ x ต้นทุนผลิตต่อชิ้นของ sub job"""
    return team_revenue(db, tenant_id, team_id=team_id, start_date=start_date, end_date=end_date)


@router.get("/daily-work-logs/export")
def export_daily_work_logs(
    day: Optional[date] = Query(None, alias="date"),
    team_id: Optional[int] = Query(None, alias="teamId"),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    logs = list_logs(db, tenant_id, day=day, team_id=team_id)
    content = export_logs_xlsx(logs)
    filename = f"daily_work_logs_{day:%Y%m%d}.xlsx" if day else "daily_work_logs.xlsx"
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
