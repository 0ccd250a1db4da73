# routers/employees.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from database import get_db
from deps.authz import require_page_access
from deps.tenant import get_tenant_id
from models import Employee
from routers.v1.teams import get_team
from schemas import DailyCostOut, EmployeeCreate, EmployeeOut, EmployeeUpdate
from services.cost import daily_cost

router = APIRouter(
    prefix="/employees",
    tags=["employees"],
    dependencies=[Depends(require_page_access("/production/organization"))],
)


def _get_employee(db: Session, tenant_id: str, employee_id: int) -> Employee:
    emp = db.get(Employee, employee_id)
    if not emp or emp.tenant_id != tenant_id:
        raise HTTPException(status_code=404, detail="Employee not found")
    return emp


@router.get("", response_model=List[EmployeeOut])
def list_employees(
    team_id: Optional[int] = Query(None, alias="teamId"),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    qry = db.query(Employee).filter(Employee.tenant_id == tenant_id)
    if team_id is not None:
        qry = qry.filter(Employee.team_id == team_id)
    return qry.order_by(Employee.team_id.asc(), Employee.id.asc()).all()


# ---------- ตัวคำนวณต้นทุนต่อวัน (ต้องอยู่เหนือ /{employee_id}) ----------
@router.get("/daily-cost", response_model=DailyCostOut)
def calc_daily_cost(
    count: Optional[float] = Query(None),
    average_wage: Optional[float] = Query(None, alias="averageWage"),
    overhead_percentage: Optional[float] = Query(None, alias="overheadPercentage"),
    management_percentage: Optional[float] = Query(None, alias="managementPercentage"),
):
    return {"daily_cost": daily_cost(count, average_wage, overhead_percentage, management_percentage)}


@router.get("/by-team/{team_id}", response_model=List[EmployeeOut])
def list_by_team(team_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    team = get_team(db, tenant_id, team_id)
    return db.query(Employee).filter(Employee.team_id == team.id).order_by(Employee.id.asc()).all()


@router.post("", response_model=EmployeeOut, status_code=201)
def create_employee(payload: EmployeeCreate, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    get_team(db, tenant_id, payload.team_id)
    emp = Employee(tenant_id=tenant_id, **payload.model_dump())
    db.add(emp)
    db.commit()
    db.refresh(emp)
    return emp


@router.get("/{employee_id}", response_model=EmployeeOut)
def get_employee(employee_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    return _get_employee(db, tenant_id, employee_id)


@router.put("/{employee_id}", response_model=EmployeeOut)
@router.patch("/{employee_id}", response_model=EmployeeOut)
def update_employee(
    employee_id: int,
    payload: EmployeeUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    emp = _get_employee(db, tenant_id, employee_id)
    data = payload.model_dump(exclude_unset=True)
    if data.get("team_id") is not None:
        get_team(db, tenant_id, data["team_id"])
    for k, v in data.items():
        setattr(emp, k, v)
    db.commit()
    db.refresh(emp)
    return emp


@router.delete("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_employee(employee_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    emp = _get_employee(db, tenant_id, employee_id)
    db.delete(emp)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
