# routers/departments.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from database import get_db
from deps.authz import require_page_access
from deps.tenant import get_tenant_id
from models import Department, WorkStep
from schemas import DepartmentCreate, DepartmentOut, DepartmentUpdate, WorkStepOut

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/departments",
    tags=["departments"],
    dependencies=[Depends(require_page_access("/production/organization"))],
)


def get_department(db: Session, tenant_id: str, department_id: int) -> Department:
    d = db.get(Department, department_id)
    if not d or d.tenant_id != tenant_id:
        raise HTTPException(404, "Department not found")
    return d


@router.get("", response_model=List[DepartmentOut])
def list_departments(db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    return (
        db.query(Department)
        .filter(Department.tenant_id == tenant_id)
        .order_by(Department.name.asc())
        .all()
    )


@router.post("", response_model=DepartmentOut, status_code=201)
def create_department(payload: DepartmentCreate, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    d = Department(tenant_id=tenant_id, **payload.model_dump())
    db.add(d)
    db.commit()
    db.refresh(d)
    return d


@router.get("/{department_id}", response_model=DepartmentOut)
def get_department_one(department_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    return get_department(db, tenant_id, department_id)


@router.get("/{department_id}/work-steps", response_model=List[WorkStepOut])
def list_department_work_steps(
    department_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    d = get_department(db, tenant_id, department_id)
    return (
        db.query(WorkStep)
        .filter(WorkStep.department_id == d.id)
        .order_by(WorkStep.order.asc(), WorkStep.id.asc())
        .all()
    )


@router.put("/{department_id}", response_model=DepartmentOut)
@router.patch("/{department_id}", response_model=DepartmentOut)
def update_department(
    department_id: int,
    payload: DepartmentUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    d = get_department(db, tenant_id, department_id)
    for k, v in payload.model_dump(exclude_unset=True).items():
        setattr(d, k, v)
    db.commit()
    db.refresh(d)
    return d


@router.delete("/{department_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_department(department_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    d = get_department(db, tenant_id, department_id)
    n_teams, n_steps = len(d.teams), len(d.work_steps)
    # cascade: ทีม (+พนักงาน, คิว) และขั้นตอนงาน ลบใน transaction เดียว
    db.delete(d)
    db.commit()
    logger.info("department %s deleted with %d teams and %d work steps", department_id, n_teams, n_steps)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
