from typing import Callable, List, Optional, Sequence, Type

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import Session

from database import get_db
from deps.authz import require_page_access
from deps.tenant import get_tenant_id


def make_crud_router(
    Model,
    prefix: str,
    *,
    create_schema: Type[BaseModel],
    update_schema: Type[BaseModel],
    out_schema: Type[BaseModel],
    page_url: str,
    label: Optional[str] = None,
    list_order_by: Optional[Sequence] = None,
    unique_fields: Optional[List[str]] = None,
    before_delete: Optional[Callable[[Session, object], None]] = None,
):
    """
    สร้าง CRUD router (แยก tenant) ให้ Model:
    - GET    /{prefix}            : list
    - GET    /{prefix}/{id}       : get one
    - POST   /{prefix}            : create
    - PUT    /{prefix}/{id}       : update (เฉพาะ field ที่ส่งมา)
    - PATCH  /{prefix}/{id}       : update (เหมือน PUT)
    - DELETE /{prefix}/{id}       : delete
    id ของ tenant อื่น -> 404
    """
    label = label or Model.__name__
    router = APIRouter(
        prefix=f"/{prefix}",
        tags=[prefix],
        dependencies=[Depends(require_page_access(page_url))],
    )

    def _get_owned(db: Session, tenant_id: str, item_id: int):
        obj = db.get(Model, item_id)
        if not obj or obj.tenant_id != tenant_id:
            raise HTTPException(404, f"{label} not found")
        return obj

    def _check_unique(db: Session, tenant_id: str, data: dict, self_id: Optional[int] = None):
        for f in unique_fields or []:
            if data.get(f) is None:
                continue
            exists = db.scalars(
                select(Model).where(Model.tenant_id == tenant_id, getattr(Model, f) == data[f])
            ).first()
            if exists and exists.id != self_id:
                raise HTTPException(409, f"{f} already exists")

    @router.get("", response_model=List[out_schema])
    def list_items(db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
        stmt = select(Model).where(Model.tenant_id == tenant_id)
        order = list_order_by if list_order_by is not None else (Model.id.asc(),)
        stmt = stmt.order_by(*order)
        return db.scalars(stmt).all()

    @router.get("/{item_id}", response_model=out_schema)
    def get_item(item_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
        return _get_owned(db, tenant_id, item_id)

    @router.post("", response_model=out_schema, status_code=status.HTTP_201_CREATED)
    def create_item(
        payload: create_schema,  # type: ignore[valid-type]
        db: Session = Depends(get_db),
        tenant_id: str = Depends(get_tenant_id),
    ):
        data = payload.model_dump()
        _check_unique(db, tenant_id, data)
        obj = Model(tenant_id=tenant_id, **data)
        db.add(obj)
        db.commit()
        db.refresh(obj)
        return obj

    def _update(item_id: int, payload: BaseModel, db: Session, tenant_id: str):
        obj = _get_owned(db, tenant_id, item_id)
        data = payload.model_dump(exclude_unset=True)
        _check_unique(db, tenant_id, data, self_id=obj.id)
        for k, v in data.items():
            setattr(obj, k, v)
        db.commit()
        db.refresh(obj)
        return obj

    @router.put("/{item_id}", response_model=out_schema)
    def update_item(
        item_id: int,
        payload: update_schema,  # type: ignore[valid-type]
        db: Session = Depends(get_db),
        tenant_id: str = Depends(get_tenant_id),
    ):
        return _update(item_id, payload, db, tenant_id)

    @router.patch("/{item_id}", response_model=out_schema)
    def patch_item(
        item_id: int,
        payload: update_schema,  # type: ignore[valid-type]
        db: Session = Depends(get_db),
        tenant_id: str = Depends(get_tenant_id),
    ):
        return _update(item_id, payload, db, tenant_id)

    @router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_item(item_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
        obj = _get_owned(db, tenant_id, item_id)
        if before_delete:
            before_delete(db, obj)
        db.delete(obj)
        db.commit()
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
