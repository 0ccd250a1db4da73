# routers/daily_work_logs.py
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from database import get_db
from deps.authz import require_page_access
from deps.tenant import get_tenant_id
from schemas import DailyWorkLogCreate, DailyWorkLogOut, DailyWorkLogUpdate
from services import work_logs as svc

router = APIRouter(
    prefix="/daily-work-logs",
    tags=["daily-work-logs"],
    dependencies=[Depends(require_page_access("/production/daily-work-log"))],
)


@router.get("", response_model=List[DailyWorkLogOut])
def list_logs(
    day: Optional[date] = Query(None, alias="date"),
    team_id: Optional[int] = Query(None, alias="teamId"),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    return svc.list_logs(db, tenant_id, day=day, team_id=team_id)


@router.post("", response_model=DailyWorkLogOut, status_code=201)
def create_log(payload: DailyWorkLogCreate, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    # reportNumber ออกให้อัตโนมัติ RPYYYYMMDD###
    return svc.create_log(db, tenant_id, payload.model_dump())


@router.get("/{log_id}", response_model=DailyWorkLogOut)
def get_log(log_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    return svc.get_log(db, tenant_id, log_id)


@router.put("/{log_id}", response_model=DailyWorkLogOut)
def update_log(
    log_id: int,
    payload: DailyWorkLogUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    return svc.update_log(db, tenant_id, log_id, payload.model_dump(exclude_unset=True))


@router.delete("/{log_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_log(log_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    svc.delete_log(db, tenant_id, log_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
