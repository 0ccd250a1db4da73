# deps/authz.py
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

import config
from database import get_db
from deps.auth import get_optional_user          # << ชี้มาที่ deps.auth
from models import User
from services.page_access import METHOD_LEVEL, access_level_for, has_permission

def require_page_access(page_url: str, level: Optional[str] = None):
    """
    ตรวจสิทธิ์ระดับหน้า (role x page_url)
    - level ไม่ระบุ -> ใช้ตาม method: GET=view, POST/DELETE=create, PUT/PATCH=edit
    - role admin ผ่านทุกหน้า
    - AUTH_ENABLED=false (dev) -> ไม่ตรวจ
    """
    def dep(
        request: Request,
        user: Optional[User] = Depends(get_optional_user),
        db: Session = Depends(get_db),
    ):
        if not config.AUTH_ENABLED:
            return
        if user is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
                                detail="Not authenticated",
                                headers={"WWW-Authenticate": "Bearer"})
        if user.is_admin:
            return
        need = level or METHOD_LEVEL.get(request.method.upper(), "view")
        have = access_level_for(db, user.role_id, page_url)
        if not has_permission(have, need):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN,
                                detail=f"Missing access: {page_url} ({need})")
    return dep
