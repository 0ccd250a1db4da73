# routers/master_data.py
"""สี / ไซส์ / ประเภทงาน: CRUD ธรรมดา ใช้ generic router"""
from generic_router import make_crud_router
from models import Color, Size, WorkType
from schemas import (
    ColorCreate, ColorOut, ColorUpdate,
    SizeCreate, SizeOut, SizeUpdate,
    WorkTypeCreate, WorkTypeOut, WorkTypeUpdate,
)

PAGE = "/master-data"

colors_router = make_crud_router(
    Color,
    "colors",
    create_schema=ColorCreate,
    update_schema=ColorUpdate,
    out_schema=ColorOut,
    page_url=PAGE,
    list_order_by=(Color.sort_order.asc(), Color.name.asc()),
    unique_fields=["name"],
)

sizes_router = make_crud_router(
    Size,
    "sizes",
    create_schema=SizeCreate,
    update_schema=SizeUpdate,
    out_schema=SizeOut,
    page_url=PAGE,
    list_order_by=(Size.sort_order.asc(), Size.name.asc()),
)

work_types_router = make_crud_router(
    WorkType,
    "work-types",
    create_schema=WorkTypeCreate,
    update_schema=WorkTypeUpdate,
    out_schema=WorkTypeOut,
    page_url=PAGE,
    label="Work type",
    list_order_by=(WorkType.sort_order.asc(), WorkType.name.asc()),
    unique_fields=["code"],
)
