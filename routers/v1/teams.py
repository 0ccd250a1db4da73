# routers/teams.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session, selectinload

from database import get_db
from deps.authz import require_page_access
from deps.tenant import get_tenant_id
from models import Team
from routers.v1.departments import get_department
from schemas import TeamCreate, TeamOut, TeamUpdate

router = APIRouter(
    prefix="/teams",
    tags=["teams"],
    dependencies=[Depends(require_page_access("/production/organization"))],
)


def get_team(db: Session, tenant_id: str, team_id: int) -> Team:
    t = db.get(Team, team_id)
    if not t or t.tenant_id != tenant_id:
        raise HTTPException(404, "Team not found")
    return t


@router.get("", response_model=List[TeamOut])
def list_teams(
    department_id: Optional[int] = Query(None, alias="departmentId"),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    # costPerDay ต้องใช้ employees -> โหลดมาพร้อมกัน
    qry = db.query(Team).options(selectinload(Team.employees)).filter(Team.tenant_id == tenant_id)
    if department_id is not None:
        qry = qry.filter(Team.department_id == department_id)
    return qry.order_by(Team.name.asc()).all()


@router.post("", response_model=TeamOut, status_code=201)
def create_team(payload: TeamCreate, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    get_department(db, tenant_id, payload.department_id)
    t = Team(tenant_id=tenant_id, **payload.model_dump())
    db.add(t)
    db.commit()
    db.refresh(t)
    return t


@router.get("/{team_id}", response_model=TeamOut)
def get_team_one(team_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    return get_team(db, tenant_id, team_id)


@router.put("/{team_id}", response_model=TeamOut)
@router.patch("/{team_id}", response_model=TeamOut)
def update_team(
    team_id: int,
    payload: TeamUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    t = get_team(db, tenant_id, team_id)
    data = payload.model_dump(exclude_unset=True)
    if data.get("department_id") is not None:
        get_department(db, tenant_id, data["department_id"])
    for k, v in data.items():
        setattr(t, k, v)
    db.commit()
    db.refresh(t)
    return t


@router.delete("/{team_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_team(team_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    t = get_team(db, tenant_id, team_id)
    db.delete(t)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
