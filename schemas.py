from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# =========================
# ===== Base (Pydantic v2)
# =========================
class APIBase(BaseModel):
    """
    Base สำหรับทุก schema:
    - from_attributes=True: รองรับแปลงจาก ORM (SQLAlchemy)
    - JSON ออกเป็น camelCase, รับเข้าได้ทั้ง camelCase และ snake_case
    """
    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


def _reject_null(cls, v):
    # PATCH/PUT: ไม่ส่ง field = ไม่แก้, ส่ง null มาใน field ที่ห้ามว่าง = 422
    if v is None:
        raise ValueError("must not be null")
    return v


AccessLevel = Literal["none", "view", "edit", "create"]

# =========================================
# ============== Auth / Tenant ============
# =========================================
class TenantOut(APIBase):
    id: str
    name: str
    slug: str
    plan: str
    is_active: bool


class LoginIn(APIBase):
    username: str
    password: str


class RegisterIn(APIBase):
    username: str = Field(min_length=3)
    password: str = Field(min_length=6)
    email: Optional[str] = None
    first_name: str = ""
    last_name: str = ""
    role_id: Optional[int] = None


class UserOut(APIBase):
    id: int
    username: str
    email: Optional[str] = None
    first_name: str
    last_name: str
    role_id: Optional[int] = None
    tenant_id: str
    is_active: bool


class LoginOut(APIBase):
    access_token: str
    token_type: str = "bearer"
    user: UserOut
    tenant: Optional[TenantOut] = None


# =========================================
# ============ Roles / Page Access ========
# =========================================
class RoleCreate(APIBase):
    name: str
    display_name: Optional[str] = None
    description: Optional[str] = None


class RoleUpdate(APIBase):
    name: Optional[str] = None
    display_name: Optional[str] = None
    description: Optional[str] = None

    not_null = field_validator("name")(_reject_null)


class RoleOut(APIBase):
    id: int
    name: str
    display_name: Optional[str] = None
    description: Optional[str] = None


class PageAccessIn(APIBase):
    role_id: int
    page_url: str
    page_name: Optional[str] = None
    access_level: str = "none"   # none / view / edit / create ("read" = view)


class PageAccessOut(APIBase):
    id: int
    role_id: int
    page_url: str
    page_name: str
    access_level: AccessLevel


class PageAccessBulkUpdate(APIBase):
    updates: List[PageAccessIn]


class PageInfo(APIBase):
    url: str
    name: str


class PageAccessConfigOut(APIBase):
    roles: List[RoleOut]
    pages: List[PageInfo]
    current_access: List[PageAccessOut]
    manifest_version: Optional[int] = None


# =========================================
# =============== Master Data =============
# =========================================
class ColorCreate(APIBase):
    name: str
    code: Optional[str] = None
    description: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True


class ColorUpdate(APIBase):
    name: Optional[str] = None
    code: Optional[str] = None
    description: Optional[str] = None
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None

    not_null = field_validator("name", "sort_order", "is_active")(_reject_null)


class ColorOut(ColorCreate):
    id: int


class SizeCreate(APIBase):
    name: str
    category: Optional[str] = None
    description: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True


class SizeUpdate(APIBase):
    name: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None

    not_null = field_validator("name", "sort_order", "is_active")(_reject_null)


class SizeOut(SizeCreate):
    id: int


class WorkTypeCreate(APIBase):
    name: str
    code: Optional[str] = None
    description: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True


class WorkTypeUpdate(APIBase):
    name: Optional[str] = None
    code: Optional[str] = None
    description: Optional[str] = None
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None

    not_null = field_validator("name", "sort_order", "is_active")(_reject_null)


class WorkTypeOut(WorkTypeCreate):
    id: int


class CustomerCreate(APIBase):
    name: str
    company_name: Optional[str] = None
    tax_id: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    postal_code: Optional[str] = None
    contact_person: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool = True


class CustomerUpdate(APIBase):
    name: Optional[str] = None
    company_name: Optional[str] = None
    tax_id: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    postal_code: Optional[str] = None
    contact_person: Optional[str] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None

    not_null = field_validator("name", "is_active")(_reject_null)


class CustomerOut(CustomerCreate):
    id: int


# =========================================
# ============= Organization ==============
# =========================================
DepartmentType = Literal["production", "quality", "management", "support"]


class DepartmentCreate(APIBase):
    name: str
    type: DepartmentType = "production"
    manager: Optional[str] = None
    location: Optional[str] = None
    status: str = "active"


class DepartmentUpdate(APIBase):
    name: Optional[str] = None
    type: Optional[DepartmentType] = None
    manager: Optional[str] = None
    location: Optional[str] = None
    status: Optional[str] = None

    not_null = field_validator("name", "type", "status")(_reject_null)


class DepartmentOut(DepartmentCreate):
    id: int


class TeamCreate(APIBase):
    name: str
    department_id: int
    leader: Optional[str] = None
    description: Optional[str] = None
    status: str = "active"


class TeamUpdate(APIBase):
    name: Optional[str] = None
    department_id: Optional[int] = None
    leader: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None

    not_null = field_validator("name", "department_id", "status")(_reject_null)


class TeamOut(TeamCreate):
    id: int
    cost_per_day: float = 0


class EmployeeCreate(APIBase):
    team_id: int
    count: int = Field(1, ge=1)
    average_wage: float = Field(0, ge=0)
    overhead_percentage: float = Field(0, ge=0, le=100)
    management_percentage: float = Field(0, ge=0, le=100)
    description: Optional[str] = None
    status: str = "active"


class EmployeeUpdate(APIBase):
    team_id: Optional[int] = None
    count: Optional[int] = Field(None, ge=1)
    average_wage: Optional[float] = Field(None, ge=0)
    overhead_percentage: Optional[float] = Field(None, ge=0, le=100)
    management_percentage: Optional[float] = Field(None, ge=0, le=100)
    description: Optional[str] = None
    status: Optional[str] = None

    not_null = field_validator(
        "team_id", "count", "average_wage", "overhead_percentage", "management_percentage", "status",
    )(_reject_null)


class EmployeeOut(APIBase):
    id: int
    team_id: int
    count: int
    average_wage: float
    overhead_percentage: float
    management_percentage: float
    description: Optional[str] = None
    status: str
    daily_cost: float


class DailyCostOut(APIBase):
    daily_cost: float


class WorkStepCreate(APIBase):
    name: str
    department_id: int
    description: Optional[str] = None
    duration: int = Field(0, ge=0)
    required_skills: List[str] = []
    order: int = 0
    status: str = "active"


class WorkStepUpdate(APIBase):
    name: Optional[str] = None
    department_id: Optional[int] = None
    description: Optional[str] = None
    duration: Optional[int] = Field(None, ge=0)
    required_skills: Optional[List[str]] = None
    order: Optional[int] = None
    status: Optional[str] = None

    not_null = field_validator(
        "name", "department_id", "duration", "required_skills", "order", "status",
    )(_reject_null)


class WorkStepOut(WorkStepCreate):
    id: int

    @field_validator("required_skills", mode="before")
    @classmethod
    def _skills_none(cls, v):
        return v or []


# =========================================
# ======= Work Orders / Sub Jobs ==========
# =========================================
WorkOrderStatus = Literal["draft", "approved", "in_progress", "completed", "cancelled"]
SubJobStatus = Literal["pending", "in_progress", "completed", "cancelled"]


class SubJobIn(APIBase):
    id: Optional[int] = None
    product_name: str
    department_id: Optional[int] = None
    work_step_id: Optional[int] = None
    color_id: Optional[int] = None
    size_id: Optional[int] = None
    quantity: int = Field(0, ge=0)
    production_cost: float = Field(0, ge=0)
    sort_order: Optional[int] = None


class SubJobOut(APIBase):
    id: int
    work_order_id: int
    product_name: str
    department_id: Optional[int] = None
    work_step_id: Optional[int] = None
    color_id: Optional[int] = None
    size_id: Optional[int] = None
    quantity: int
    production_cost: float
    total_cost: float
    sort_order: int
    status: SubJobStatus


class WorkOrderCreate(APIBase):
    order_number: Optional[str] = None   # ไม่ส่งมา -> ออกเลขให้ JBYYYYMM###
    quotation_id: Optional[int] = None
    customer_id: int
    title: str
    description: Optional[str] = None
    work_type_id: Optional[int] = None
    delivery_date: Optional[dt.date] = None
    notes: Optional[str] = None
    status: WorkOrderStatus = "draft"
    priority: int = 3
    sub_jobs: List[SubJobIn] = []


class WorkOrderUpdate(APIBase):
    quotation_id: Optional[int] = None
    customer_id: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    work_type_id: Optional[int] = None
    delivery_date: Optional[dt.date] = None
    notes: Optional[str] = None
    status: Optional[WorkOrderStatus] = None
    priority: Optional[int] = None
    # ส่งมา = รายการทั้งหมดที่ต้องการ (ไม่ส่ง = ไม่แตะ sub jobs)
    sub_jobs: Optional[List[SubJobIn]] = None

    not_null = field_validator("customer_id", "title", "status", "priority")(_reject_null)


class WorkOrderOut(APIBase):
    id: int
    order_number: str
    quotation_id: Optional[int] = None
    customer_id: int
    title: str
    description: Optional[str] = None
    work_type_id: Optional[int] = None
    delivery_date: Optional[dt.date] = None
    notes: Optional[str] = None
    total_amount: float
    status: WorkOrderStatus
    priority: int
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None
    sub_jobs: List[SubJobOut] = []


class ReconcileOut(APIBase):
    kept: List[int]
    inserted: List[int]
    deleted: List[int]


class PriceCheckOut(APIBase):
    price_changed: bool
    has_queued_jobs: bool
    needs_replanning: bool


class WorkOrderUpdateOut(WorkOrderOut):
    price_changed: bool = False
    has_queued_jobs: bool = False
    needs_replanning: bool = False
    reconciliation: Optional[ReconcileOut] = None


class PriceCheckIn(APIBase):
    sub_jobs: List[SubJobIn]


class QueueStatusOut(APIBase):
    has_queued_jobs: bool


class OrderCountIn(APIBase):
    year: int = Field(ge=2000, le=9999)
    month: int = Field(ge=1, le=12)


class OrderCountOut(APIBase):
    count: int
    next_order_number: str


class SubJobReorderIn(APIBase):
    sub_job_ids: List[int]


# =========================================
# ============ Sub Job Generator ==========
# =========================================
class QuantityCell(APIBase):
    department_id: int
    color_id: int
    size_id: int
    quantity: int = Field(0, ge=0)


class SubJobGenerateIn(APIBase):
    department_ids: List[int]
    team_ids: List[int] = []
    color_ids: List[int]
    size_ids: List[int]
    quantities: List[QuantityCell] = []
    product_name: str = ""
    production_cost: float = Field(0, ge=0)


class SubJobDraftOut(APIBase):
    product_name: str
    department_id: int
    work_step_id: int
    color_id: int
    size_id: int
    team_id: Optional[int] = None
    quantity: int
    production_cost: float
    total_cost: float
    sort_order: int


# =========================================
# =============== Work Queue ==============
# =========================================
class AddJobIn(APIBase):
    sub_job_id: int
    team_id: int
    priority: int = Field(1, ge=1)


class QueueReorderIn(APIBase):
    team_id: int
    queue_ids: List[int]


class QueueItemOut(APIBase):
    id: int
    sub_job_id: int
    team_id: int
    priority: int
    status: str
    work_order_id: int
    order_number: str
    customer_name: Optional[str] = None
    delivery_date: Optional[dt.date] = None
    product_name: str
    work_step_id: Optional[int] = None
    color_id: Optional[int] = None
    color_name: Optional[str] = None
    size_id: Optional[int] = None
    size_name: Optional[str] = None
    quantity: int
    production_cost: float
    total_cost: float


class QueueEntryOut(APIBase):
    id: int
    sub_job_id: int
    team_id: int
    priority: int
    status: str


class ClearQueueOut(APIBase):
    removed: int


class AvailableSubJobOut(SubJobOut):
    order_number: str
    customer_name: Optional[str] = None
    delivery_date: Optional[dt.date] = None


# =========================================
# ======== Holidays / Production Plan =====
# =========================================
class HolidayCreate(APIBase):
    date: dt.date
    name: str
    type: str = "company"


class HolidayOut(HolidayCreate):
    id: int


class PlanCalculateIn(APIBase):
    team_id: int
    start_date: dt.date
    save: bool = True
    name: Optional[str] = None


class PlannedJobOut(APIBase):
    sub_job_id: int
    order_number: Optional[str] = None
    customer_name: Optional[str] = None
    product_name: Optional[str] = None
    color_name: Optional[str] = None
    size_name: Optional[str] = None
    quantity: int
    completion_date: dt.date
    job_cost: float
    remaining_capacity: float
    priority: int


class PlanCalculateOut(APIBase):
    team_id: int
    daily_capacity: float
    plan_id: Optional[int] = None
    jobs: List[PlannedJobOut]


class ProductionPlanOut(APIBase):
    id: int
    team_id: int
    name: str
    start_date: dt.date
    status: str


class ProductionPlanItemOut(APIBase):
    id: int
    plan_id: int
    sub_job_id: int
    order_number: Optional[str] = None
    customer_name: Optional[str] = None
    product_name: Optional[str] = None
    color_name: Optional[str] = None
    size_name: Optional[str] = None
    quantity: int
    completion_date: dt.date
    job_cost: float
    priority: int


# =========================================
# ============ Daily Work Logs ============
# =========================================
WorkLogStatus = Literal["in_progress", "completed", "paused"]


class DailyWorkLogCreate(APIBase):
    date: dt.date
    team_id: Optional[int] = None
    employee_id: Optional[int] = None
    work_order_id: Optional[int] = None
    sub_job_id: Optional[int] = None
    work_step_id: Optional[int] = None
    hours_worked: float = Field(0, ge=0, le=24)
    quantity_completed: int = Field(0, ge=0)
    work_description: str = ""
    status: WorkLogStatus = "in_progress"
    notes: Optional[str] = None


class DailyWorkLogUpdate(APIBase):
    date: Optional[dt.date] = None
    team_id: Optional[int] = None
    employee_id: Optional[int] = None
    work_order_id: Optional[int] = None
    sub_job_id: Optional[int] = None
    work_step_id: Optional[int] = None
    hours_worked: Optional[float] = Field(None, ge=0, le=24)
    quantity_completed: Optional[int] = Field(None, ge=0)
    work_description: Optional[str] = None
    status: Optional[WorkLogStatus] = None
    notes: Optional[str] = None

    not_null = field_validator("date", "hours_worked", "quantity_completed", "work_description", "status")(_reject_null)


class DailyWorkLogOut(APIBase):
    id: int
    report_number: str
    date: dt.date
    team_id: Optional[int] = None
    employee_id: Optional[int] = None
    work_order_id: Optional[int] = None
    sub_job_id: Optional[int] = None
    work_step_id: Optional[int] = None
    hours_worked: float
    quantity_completed: int
    work_description: str
    status: str
    notes: Optional[str] = None


class RevenueJobOut(APIBase):
    log_id: int
    order_number: Optional[str] = None
    customer_name: Optional[str] = None
    product_name: Optional[str] = None
    quantity: int
    unit_price: float
    revenue: float


class TeamRevenueDayOut(APIBase):
    date: dt.date
    revenue: float
    quantity: int
    jobs: List[RevenueJobOut]


class MessageOut(APIBase):
    message: str
    detail: Optional[Dict[str, Any]] = None
