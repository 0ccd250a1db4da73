# routers/holidays.py
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from database import get_db
from deps.authz import require_page_access
from deps.tenant import get_tenant_id
from models import Holiday
from schemas import HolidayCreate, HolidayOut

router = APIRouter(
    prefix="/holidays",
    tags=["holidays"],
    dependencies=[Depends(require_page_access("/production/calendar"))],
)


@router.get("", response_model=List[HolidayOut])
def list_holidays(
    year: Optional[int] = Query(None, ge=2000, le=9999),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    qry = db.query(Holiday).filter(Holiday.tenant_id == tenant_id)
    if year is not None:
        qry = qry.filter(Holiday.date >= date(year, 1, 1), Holiday.date <= date(year, 12, 31))
    return qry.order_by(Holiday.date.asc()).all()


@router.post("", response_model=HolidayOut, status_code=201)
def create_holiday(payload: HolidayCreate, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    if db.query(Holiday).filter(Holiday.tenant_id == tenant_id, Holiday.date == payload.date).first():
        raise HTTPException(409, "Holiday already exists for this date")
    h = Holiday(tenant_id=tenant_id, **payload.model_dump())
    db.add(h)
    db.commit()
    db.refresh(h)
    return h


@router.delete("/{holiday_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_holiday(holiday_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    h = db.get(Holiday, holiday_id)
    if not h or h.tenant_id != tenant_id:
        raise HTTPException(404, "Holiday not found")
    db.delete(h)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
