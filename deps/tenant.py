# deps/tenant.py
import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

import config
from database import get_db
from deps.auth import get_optional_user
from models import Tenant, User

logger = logging.getLogger(__name__)

TENANT_HEADER = "X-Tenant-ID"


def ensure_default_tenant(db: Session) -> Tenant:
    """สร้าง tenant สำหรับ dev ถ้ายังไม่มี"""
    t = db.get(Tenant, config.DEFAULT_TENANT_ID)
    if t is None:
        t = Tenant(id=config.DEFAULT_TENANT_ID, name="Default Company", slug="default", plan="basic")
        db.add(t)
        db.commit()
        db.refresh(t)
        logger.info("default tenant %s created", t.id)
    return t


def get_tenant_id(
    request: Request,
    db: Session = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user),
) -> str:
    """tenant ของคำขอ: user ที่ login -> header X-Tenant-ID -> DEFAULT_TENANT_ID"""
    if user is not None:
        return user.tenant_id

    tenant_id = (request.headers.get(TENANT_HEADER) or "").strip() or config.DEFAULT_TENANT_ID
    if tenant_id == config.DEFAULT_TENANT_ID:
        return ensure_default_tenant(db).id

    t = db.get(Tenant, tenant_id)
    if not t or not t.is_active:
        raise HTTPException(404, "Tenant not found")
    return t.id
