# services/page_access.py
import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from config import PAGE_MANIFEST_PATH
from models import PageAccess, Role
from services.errors import NotFoundError, ServiceError

logger = logging.getLogger(__name__)

ACCESS_LEVELS = ("none", "view", "edit", "create")
LEVEL_RANK = {lvl: i for i, lvl in enumerate(ACCESS_LEVELS)}
LEVEL_ALIASES = {"read": "view"}

# method -> สิทธิ์ขั้นต่ำ (ลบ = ต้องมีสิทธิ์ create)
METHOD_LEVEL = {
    "GET": "view",
    "HEAD": "view",
    "OPTIONS": "view",
    "POST": "create",
    "PUT": "edit",
    "PATCH": "edit",
    "DELETE": "create",
}


def normalize_level(level: Optional[str]) -> str:
    lvl = (level or "none").strip().lower()
    lvl = LEVEL_ALIASES.get(lvl, lvl)
    if lvl not in LEVEL_RANK:
        raise ServiceError(f"Invalid access level: {level}")
    return lvl


def has_permission(user_level: Optional[str], required_level: str) -> bool:
    return LEVEL_RANK[normalize_level(user_level)] >= LEVEL_RANK[normalize_level(required_level)]


# ---------- page manifest ----------
@lru_cache(maxsize=4)
def _read_manifest(path: str) -> Dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def load_manifest(path: Optional[Path] = None) -> Dict[str, Any]:
    return _read_manifest(str(path or PAGE_MANIFEST_PATH))


def list_pages(path: Optional[Path] = None) -> List[Dict[str, str]]:
    return list(load_manifest(path).get("pages", []))


def page_name_for(page_url: str) -> str:
    for p in list_pages():
        if p["url"] == page_url:
            return p["name"]
    # ไม่มีใน manifest -> ใช้ segment สุดท้ายของ path
    segments = [s for s in page_url.split("/") if s]
    return segments[-1].replace("-", " ") if segments else page_url


# ---------- roles / rows ----------
def get_role(db: Session, tenant_id: str, role_id: int) -> Role:
    role = db.get(Role, role_id)
    if not role or role.tenant_id != tenant_id:
        raise NotFoundError("Role not found")
    return role


def get_page_access(db: Session, tenant_id: str, role_id: int) -> List[PageAccess]:
    role = get_role(db, tenant_id, role_id)
    return list(
        db.scalars(
            select(PageAccess).where(PageAccess.role_id == role.id).order_by(PageAccess.page_url.asc())
        ).all()
    )


def access_level_for(db: Session, role_id: Optional[int], page_url: str) -> str:
    if role_id is None:
        return "none"
    row = db.scalars(
        select(PageAccess).where(PageAccess.role_id == role_id, PageAccess.page_url == page_url)
    ).first()
    return row.access_level if row else "none"


def _upsert(db: Session, tenant_id: str, item: Dict[str, Any]) -> PageAccess:
    role = get_role(db, tenant_id, item["role_id"])
    page_url = (item.get("page_url") or "").strip()
    if not page_url:
        raise ServiceError("pageUrl is required")
    level = normalize_level(item.get("access_level"))

    row = db.scalars(
        select(PageAccess).where(PageAccess.role_id == role.id, PageAccess.page_url == page_url)
    ).first()
    if row is None:
        row = PageAccess(role_id=role.id, page_url=page_url)
        db.add(row)
    row.page_name = item.get("page_name") or row.page_name or page_name_for(page_url)
    row.access_level = level
    db.flush()
    return row


def upsert_page_access(db: Session, tenant_id: str, item: Dict[str, Any]) -> PageAccess:
    try:
        row = _upsert(db, tenant_id, item)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(row)
    return row


def bulk_upsert_page_access(db: Session, tenant_id: str, items: Iterable[Dict[str, Any]]) -> List[PageAccess]:
    """ทุกแถวสำเร็จหรือไม่สำเร็จพร้อมกัน"""
    rows = []
    try:
        for item in items:
            rows.append(_upsert(db, tenant_id, item))
        db.commit()
    except Exception:
        db.rollback()
        raise
    for r in rows:
        db.refresh(r)
    logger.info("page access bulk update: %d rows", len(rows))
    return rows


def create_all_page_access(db: Session, tenant_id: str) -> int:
    """สร้างแถว (none) ให้ครบทุก role x ทุกหน้าใน manifest"""
    roles = db.scalars(select(Role).where(Role.tenant_id == tenant_id)).all()
    pages = list_pages()
    created = 0
    for role in roles:
        have = set(db.scalars(select(PageAccess.page_url).where(PageAccess.role_id == role.id)).all())
        for p in pages:
            if p["url"] in have:
                continue
            db.add(PageAccess(role_id=role.id, page_url=p["url"], page_name=p["name"], access_level="none"))
            created += 1
    db.commit()
    logger.info("page access create-all: %d rows created for %d roles", created, len(roles))
    return created


def management_config(db: Session, tenant_id: str) -> Dict[str, Any]:
    roles = db.scalars(select(Role).where(Role.tenant_id == tenant_id).order_by(Role.id.asc())).all()
    role_ids = [r.id for r in roles]
    current = []
    if role_ids:
        current = db.scalars(
            select(PageAccess).where(PageAccess.role_id.in_(role_ids)).order_by(PageAccess.role_id, PageAccess.page_url)
        ).all()
    return {
        "roles": roles,
        "pages": list_pages(),
        "current_access": current,
        "manifest_version": load_manifest().get("version"),
    }
