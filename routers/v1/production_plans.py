# routers/production_plans.py
from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from database import get_db
from deps.authz import require_page_access
from deps.tenant import get_tenant_id
from models import ProductionPlan
from schemas import PlanCalculateIn, PlanCalculateOut, ProductionPlanItemOut, ProductionPlanOut
from services.production_plan import plan_team

router = APIRouter(
    prefix="/production-plans",
    tags=["production-plans"],
    dependencies=[Depends(require_page_access("/production/work-queue-planning"))],
)


def _get_plan(db: Session, tenant_id: str, plan_id: int) -> ProductionPlan:
    p = db.get(ProductionPlan, plan_id)
    if not p or p.tenant_id != tenant_id:
        raise HTTPException(404, "Production plan not found")
    return p


@router.post("/calculate", response_model=PlanCalculateOut)
def calculate(payload: PlanCalculateIn, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    """วันเสร็จของแต่ละงานในคิวทีม ใช้ต้นทุนต่อวันของทีมเป็นกำลังการผลิต"""
    team, planned, plan = plan_team(
        db, tenant_id,
        team_id=payload.team_id,
        start_date=payload.start_date,
        save=payload.save,
        name=payload.name,
    )
    return {
        "team_id": team.id,
        "daily_capacity": team.cost_per_day,
        "plan_id": plan.id if plan is not None else None,
        "jobs": [asdict(p) for p in planned],
    }


@router.get("", response_model=List[ProductionPlanOut])
def list_plans(
    team_id: Optional[int] = Query(None, alias="teamId"),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    qry = db.query(ProductionPlan).filter(ProductionPlan.tenant_id == tenant_id)
    if team_id is not None:
        qry = qry.filter(ProductionPlan.team_id == team_id)
    return qry.order_by(ProductionPlan.id.desc()).all()


@router.get("/{plan_id}/items", response_model=List[ProductionPlanItemOut])
def plan_items(plan_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    return _get_plan(db, tenant_id, plan_id).items


@router.delete("/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_plan(plan_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    p = _get_plan(db, tenant_id, plan_id)
    db.delete(p)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
