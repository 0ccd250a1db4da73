# routers/work_steps.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from database import get_db
from deps.authz import require_page_access
from deps.tenant import get_tenant_id
from models import WorkStep
from routers.v1.departments import get_department
from schemas import WorkStepCreate, WorkStepOut, WorkStepUpdate

router = APIRouter(
    prefix="/work-steps",
    tags=["work-steps"],
    dependencies=[Depends(require_page_access("/production/work-steps"))],
)


def _get_step(db: Session, tenant_id: str, step_id: int) -> WorkStep:
    s = db.get(WorkStep, step_id)
    if not s or s.tenant_id != tenant_id:
        raise HTTPException(404, "Work step not found")
    return s


@router.get("", response_model=List[WorkStepOut])
def list_work_steps(
    department_id: Optional[int] = Query(None, alias="departmentId"),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    qry = db.query(WorkStep).filter(WorkStep.tenant_id == tenant_id)
    if department_id is not None:
        qry = qry.filter(WorkStep.department_id == department_id)
    return qry.order_by(WorkStep.department_id.asc(), WorkStep.order.asc(), WorkStep.id.asc()).all()


@router.post("", response_model=WorkStepOut, status_code=201)
def create_work_step(payload: WorkStepCreate, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    get_department(db, tenant_id, payload.department_id)
    s = WorkStep(tenant_id=tenant_id, **payload.model_dump())
    db.add(s)
    db.commit()
    db.refresh(s)
    return s


@router.get("/{step_id}", response_model=WorkStepOut)
def get_work_step(step_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    return _get_step(db, tenant_id, step_id)


@router.put("/{step_id}", response_model=WorkStepOut)
@router.patch("/{step_id}", response_model=WorkStepOut)
def update_work_step(
    step_id: int,
    payload: WorkStepUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    s = _get_step(db, tenant_id, step_id)
    data = payload.model_dump(exclude_unset=True)
    if data.get("department_id") is not None:
        get_department(db, tenant_id, data["department_id"])
    for k, v in data.items():
        setattr(s, k, v)
    db.commit()
    db.refresh(s)
    return s


@router.delete("/{step_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_work_step(step_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    s = _get_step(db, tenant_id, step_id)
    db.delete(s)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
