# routers/page_access.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from deps.authz import require_page_access
from deps.tenant import get_tenant_id
from models import Role
from schemas import (
    PageAccessBulkUpdate, PageAccessConfigOut, PageAccessIn, PageAccessOut,
    RoleCreate, RoleOut, RoleUpdate,
)
from services import page_access as svc

logger = logging.getLogger(__name__)

PAGE = "/page-access-management"
_guard = [Depends(require_page_access(PAGE))]

router = APIRouter(prefix="/page-access", tags=["page-access"], dependencies=_guard)
roles_router = APIRouter(prefix="/roles", tags=["roles"], dependencies=_guard)
management_router = APIRouter(prefix="/page-access-management", tags=["page-access"], dependencies=_guard)


# ---------------------------
# Page access rows
# ---------------------------
@router.get("", response_model=List[PageAccessOut])
def list_page_access(
    role_id: int = Query(..., alias="roleId"),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    return svc.get_page_access(db, tenant_id, role_id)


@router.post("", response_model=PageAccessOut)
def upsert_page_access(payload: PageAccessIn, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    """หาแถว (role, pageUrl) ถ้าไม่มีสร้างใหม่ แล้วตั้ง accessLevel"""
    return svc.upsert_page_access(db, tenant_id, payload.model_dump())


@router.post("/bulk", response_model=List[PageAccessOut])
def bulk_upsert(payload: List[PageAccessIn], db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    return svc.bulk_upsert_page_access(db, tenant_id, [p.model_dump() for p in payload])


# ---------------------------
# Roles
# ---------------------------
@roles_router.get("", response_model=List[RoleOut])
def list_roles(db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    return db.query(Role).filter(Role.tenant_id == tenant_id).order_by(Role.id.asc()).all()


@roles_router.post("", response_model=RoleOut, status_code=201)
def create_role(payload: RoleCreate, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    name = payload.name.strip()
    if db.query(Role).filter(Role.tenant_id == tenant_id, Role.name == name).first():
        raise HTTPException(409, "Role name already exists")
    r = Role(
        tenant_id=tenant_id,
        name=name,
        display_name=payload.display_name or name,
        description=payload.description,
    )
    db.add(r)
    db.commit()
    db.refresh(r)
    return r


@roles_router.put("/{role_id}", response_model=RoleOut)
def update_role(role_id: int, payload: RoleUpdate, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    r = svc.get_role(db, tenant_id, role_id)
    for k, v in payload.model_dump(exclude_unset=True).items():
        setattr(r, k, v)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(409, "Role name already exists")
    db.refresh(r)
    return r


@roles_router.delete("/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_role(role_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    r = svc.get_role(db, tenant_id, role_id)
    db.delete(r)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@roles_router.get("/{role_id}/page-access", response_model=List[PageAccessOut])
def role_page_access(role_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    return svc.get_page_access(db, tenant_id, role_id)


# ---------------------------
# หน้าจัดการสิทธิ์
# ---------------------------
@management_router.get("/config", response_model=PageAccessConfigOut)
def management_config(db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    return svc.management_config(db, tenant_id)


@management_router.post("/bulk-update", response_model=List[PageAccessOut])
def management_bulk_update(
    payload: PageAccessBulkUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
):
    return svc.bulk_upsert_page_access(db, tenant_id, [p.model_dump() for p in payload.updates])


@management_router.post("/create-all")
def management_create_all(db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    created = svc.create_all_page_access(db, tenant_id)
    return {"created": created}
