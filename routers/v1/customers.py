# routers/customers.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from database import get_db
from deps.authz import require_page_access
from deps.tenant import get_tenant_id
from models import Customer, WorkOrder
from schemas import APIBase, CustomerCreate, CustomerOut, CustomerUpdate

router = APIRouter(
    prefix="/customers",
    tags=["customers"],
    dependencies=[Depends(require_page_access("/customers"))],
)

# ---------- schema สำหรับ page (offset) ----------
class CustomerPage(APIBase):
  items: List[CustomerOut]
  total: int
  page: int
  per_page: int
  pages: int


def _get_customer(db: Session, tenant_id: str, customer_id: int) -> Customer:
  c = db.get(Customer, customer_id)
  if not c or c.tenant_id != tenant_id:
    raise HTTPException(404, "Customer not found")
  return c


@router.get("", response_model=List[CustomerOut])
def list_customers(
    q: Optional[str] = Query(None, description="Search by name / company / tax id"),
    active_only: bool = Query(False, alias="activeOnly"),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    qry = db.query(Customer).filter(Customer.tenant_id == tenant_id)
    if q and q.strip():
        like = f"%{q.strip()}%"
        qry = qry.filter(or_(
            Customer.name.ilike(like),
            Customer.company_name.ilike(like),
            Customer.tax_id.ilike(like),
        ))
    if active_only:
        qry = qry.filter(Customer.is_active.is_(True))
    return qry.order_by(Customer.name.asc(), Customer.id.asc()).all()


# ---------- list + pagination (ต้องอยู่เหนือ /{customer_id}) ----------
@router.get("/page", response_model=CustomerPage)
def list_customers_page(
    q: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=1000),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    base_q = db.query(Customer).filter(Customer.tenant_id == tenant_id)
    if q and q.strip():
        like = f"%{q.strip()}%"
        base_q = base_q.filter(or_(Customer.name.ilike(like), Customer.company_name.ilike(like)))

    total = base_q.count()
    items = base_q.order_by(Customer.id.desc()).offset((page - 1) * per_page).limit(per_page).all()
    pages = (total + per_page - 1) // per_page
    return {
        "items": items,
        "total": total,
        "page": page,
        "per_page": per_page,
        "pages": max(pages, 1),
    }


@router.post("", response_model=CustomerOut, status_code=201)
def create_customer(payload: CustomerCreate, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
  data = payload.model_dump()
  data["name"] = data["name"].strip()
  if not data["name"]:
    raise HTTPException(400, "Customer name is required")
  c = Customer(tenant_id=tenant_id, **data)
  db.add(c); db.commit(); db.refresh(c)
  return c

@router.get("/{customer_id}", response_model=CustomerOut)
def get_customer(customer_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
  return _get_customer(db, tenant_id, customer_id)

@router.put("/{customer_id}", response_model=CustomerOut)
@router.patch("/{customer_id}", response_model=CustomerOut)
def update_customer(
    customer_id: int,
    payload: CustomerUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
  c = _get_customer(db, tenant_id, customer_id)
  for k, v in payload.model_dump(exclude_unset=True).items():
    setattr(c, k, v)
  db.commit(); db.refresh(c)
  return c

@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(customer_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
  c = _get_customer(db, tenant_id, customer_id)
  if db.query(WorkOrder.id).filter(WorkOrder.customer_id == c.id).first():
    raise HTTPException(400, "Customer has work orders; cannot delete")
  db.delete(c); db.commit()
  return Response(status_code=status.HTTP_204_NO_CONTENT)
