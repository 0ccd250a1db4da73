# models.py
import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.orm import relationship

from database import Base
from services.cost import daily_cost, team_daily_cost


def _uuid() -> str:
    return str(uuid.uuid4())


# =========================================
# ============ Tenant / Auth ==============
# =========================================

class Tenant(Base):
    __tablename__ = "tenants"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String, nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)
    plan = Column(String, nullable=False, default="basic")
    is_active = Column(Boolean, nullable=False, default=True, server_default=text("true"))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Tenant(slug={self.slug})>"


class Role(Base):
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True)
    tenant_id = Column(String(36), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)            # e.g. admin, manager, operator
    display_name = Column(String, nullable=True)
    description = Column(Text, nullable=True)

    page_accesses = relationship(
        "PageAccess",
        back_populates="role",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (UniqueConstraint("tenant_id", "name", name="uq_roles_tenant_name"),)

    def __repr__(self):
        return f"<Role(name={self.name})>"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    username = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, nullable=True)
    password_hash = Column(String, nullable=False)
    first_name = Column(String, nullable=False, default="")
    last_name = Column(String, nullable=False, default="")
    role_id = Column(Integer, ForeignKey("roles.id", ondelete="SET NULL"), nullable=True, index=True)
    tenant_id = Column(String(36), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    last_login_at = Column(DateTime(timezone=True), nullable=True)

    role = relationship("Role")
    tenant = relationship("Tenant")

    @property
    def is_admin(self) -> bool:
        return bool(self.role and self.role.name == "admin")

    def __repr__(self):
        return f"<User(username={self.username}, active={self.is_active})>"


class PageAccess(Base):
    __tablename__ = "page_access"

    id = Column(Integer, primary_key=True)
    role_id = Column(Integer, ForeignKey("roles.id", ondelete="CASCADE"), nullable=False, index=True)
    page_url = Column(String, nullable=False)
    page_name = Column(String, nullable=False)
    access_level = Column(String, nullable=False, default="none")  # none / view / edit / create

    role = relationship("Role", back_populates="page_accesses")

    __table_args__ = (
        UniqueConstraint("role_id", "page_url", name="uq_page_access_role_page"),
        CheckConstraint(
            "access_level IN ('none','view','edit','create')",
            name="ck_page_access_level",
        ),
    )

    def __repr__(self):
        return f"<PageAccess(role_id={self.role_id}, page={self.page_url}, level={self.access_level})>"


# =========================================
# =============== Master ==================
# =========================================

class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True)
    tenant_id = Column(String(36), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    company_name = Column(String, nullable=True)
    tax_id = Column(String, nullable=True)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    address = Column(Text, nullable=True)
    postal_code = Column(String, nullable=True)
    contact_person = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    work_orders = relationship("WorkOrder", back_populates="customer")

    def __repr__(self):
        return f"<Customer(name={self.name})>"


class Color(Base):
    __tablename__ = "colors"

    id = Column(Integer, primary_key=True)
    tenant_id = Column(String(36), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    code = Column(String, nullable=True)          # รหัสสี เช่น #FF0000
    description = Column(Text, nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    def __repr__(self):
        return f"<Color(name={self.name})>"


class Size(Base):
    __tablename__ = "sizes"

    id = Column(Integer, primary_key=True)
    tenant_id = Column(String(36), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)         # S, M, L, XL หรือ 28, 30, 32
    category = Column(String, nullable=True)      # เสื้อผ้า, รองเท้า, หมวก
    description = Column(Text, nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    def __repr__(self):
        return f"<Size(name={self.name})>"


class WorkType(Base):
    __tablename__ = "work_types"

    id = Column(Integer, primary_key=True)
    tenant_id = Column(String(36), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    code = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    def __repr__(self):
        return f"<WorkType(name={self.name})>"


# =========================================
# ============= Organization ==============
# =========================================

class Department(Base):
    __tablename__ = "departments"

    id = Column(Integer, primary_key=True)
    tenant_id = Column(String(36), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False, default="production")   # production / quality / management / support
    manager = Column(String, nullable=True)
    location = Column(String, nullable=True)
    status = Column(String, nullable=False, default="active")

    # ลบแผนก -> ลบทีมและขั้นตอนงานของแผนกไปด้วย
    teams = relationship("Team", back_populates="department", cascade="all, delete-orphan")
    work_steps = relationship(
        "WorkStep",
        back_populates="department",
        cascade="all, delete-orphan",
        order_by="WorkStep.order",
    )

    def __repr__(self):
        return f"<Department(name={self.name})>"


class Team(Base):
    __tablename__ = "teams"

    id = Column(Integer, primary_key=True)
    tenant_id = Column(String(36), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    department_id = Column(Integer, ForeignKey("departments.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    leader = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    status = Column(String, nullable=False, default="active")

    department = relationship("Department", back_populates="teams")
    employees = relationship("Employee", back_populates="team", cascade="all, delete-orphan")
    queue_entries = relationship("WorkQueue", back_populates="team", cascade="all, delete-orphan")
    production_plans = relationship("ProductionPlan", back_populates="team", cascade="all, delete-orphan")

    @property
    def cost_per_day(self) -> float:
        return team_daily_cost(self.employees)

    def __repr__(self):
        return f"<Team(name={self.name})>"


class Employee(Base):
    """กลุ่มพนักงานในทีม (count = จำนวนคน) ใช้คำนวณต้นทุนต่อวัน"""
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True)
    tenant_id = Column(String(36), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    count = Column(Integer, nullable=False, default=1)
    average_wage = Column(Numeric(12, 2), nullable=False, default=0)
    overhead_percentage = Column(Numeric(5, 2), nullable=False, default=0)
    management_percentage = Column(Numeric(5, 2), nullable=False, default=0)
    description = Column(Text, nullable=True)
    status = Column(String, nullable=False, default="active")

    team = relationship("Team", back_populates="employees")

    __table_args__ = (CheckConstraint("count >= 1", name="ck_employees_count_positive"),)

    @property
    def daily_cost(self) -> float:
        return daily_cost(
            self.count,
            self.average_wage,
            self.overhead_percentage,
            self.management_percentage,
        )

    def __repr__(self):
        return f"<Employee(team_id={self.team_id}, count={self.count})>"


class WorkStep(Base):
    __tablename__ = "work_steps"

    id = Column(Integer, primary_key=True)
    tenant_id = Column(String(36), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    department_id = Column(Integer, ForeignKey("departments.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    duration = Column(Integer, nullable=False, default=0)      # นาที
    required_skills = Column(JSON, nullable=False, default=list)
    order = Column(Integer, nullable=False, default=0)
    status = Column(String, nullable=False, default="active")

    department = relationship("Department", back_populates="work_steps")

    __table_args__ = (Index("ix_work_steps_dept_order", "department_id", "order"),)

    def __repr__(self):
        return f"<WorkStep(name={self.name}, order={self.order})>"


# =========================================
# ======= Work Orders / Sub Jobs ==========
# =========================================

class WorkOrder(Base):
    __tablename__ = "work_orders"

    id = Column(Integer, primary_key=True)
    tenant_id = Column(String(36), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    # JBYYYYMM### (ไม่มี unique constraint: เลขจาก count ต่อเดือน)
    order_number = Column(String, nullable=False, index=True)
    quotation_id = Column(Integer, nullable=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="RESTRICT"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    work_type_id = Column(Integer, ForeignKey("work_types.id", ondelete="SET NULL"), nullable=True)
    delivery_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)
    total_amount = Column(Numeric(14, 2), nullable=False, default=0)
    status = Column(String, nullable=False, default="draft")   # draft / approved / in_progress / completed / cancelled
    priority = Column(Integer, nullable=False, default=3)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    customer = relationship("Customer", back_populates="work_orders")
    work_type = relationship("WorkType")
    sub_jobs = relationship(
        "SubJob",
        back_populates="work_order",
        cascade="all, delete-orphan",
        order_by="SubJob.sort_order",
    )

    __table_args__ = (Index("ix_work_orders_tenant_created", "tenant_id", "created_at"),)

    def __repr__(self):
        return f"<WorkOrder(order_number={self.order_number})>"


class SubJob(Base):
    __tablename__ = "sub_jobs"

    id = Column(Integer, primary_key=True)
    work_order_id = Column(Integer, ForeignKey("work_orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_name = Column(String, nullable=False)
    department_id = Column(Integer, ForeignKey("departments.id", ondelete="SET NULL"), nullable=True, index=True)
    work_step_id = Column(Integer, ForeignKey("work_steps.id", ondelete="SET NULL"), nullable=True, index=True)
    color_id = Column(Integer, ForeignKey("colors.id", ondelete="SET NULL"), nullable=True)
    size_id = Column(Integer, ForeignKey("sizes.id", ondelete="SET NULL"), nullable=True)
    quantity = Column(Integer, nullable=False, default=0)
    production_cost = Column(Numeric(12, 2), nullable=False, default=0)   # ต่อชิ้น
    total_cost = Column(Numeric(14, 2), nullable=False, default=0)        # quantity * production_cost
    sort_order = Column(Integer, nullable=False, default=0)
    status = Column(String, nullable=False, default="pending")   # pending / in_progress / completed / cancelled

    work_order = relationship("WorkOrder", back_populates="sub_jobs")
    department = relationship("Department")
    work_step = relationship("WorkStep")
    color = relationship("Color")
    size = relationship("Size")
    queue_entries = relationship("WorkQueue", back_populates="sub_job", cascade="all, delete-orphan")
    plan_items = relationship("ProductionPlanItem", back_populates="sub_job", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<SubJob(id={self.id}, product={self.product_name}, qty={self.quantity})>"


# =========================================
# ========== Work Queue / Planning ========
# =========================================

class WorkQueue(Base):
    __tablename__ = "work_queues"

    id = Column(Integer, primary_key=True)
    tenant_id = Column(String(36), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    sub_job_id = Column(Integer, ForeignKey("sub_jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    priority = Column(Integer, nullable=False, default=1)
    status = Column(String, nullable=False, default="pending")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    sub_job = relationship("SubJob", back_populates="queue_entries")
    team = relationship("Team", back_populates="queue_entries")

    __table_args__ = (Index("ix_work_queues_team_priority", "team_id", "priority"),)

    def __repr__(self):
        return f"<WorkQueue(team_id={self.team_id}, sub_job_id={self.sub_job_id}, priority={self.priority})>"


class Holiday(Base):
    __tablename__ = "holidays"

    id = Column(Integer, primary_key=True)
    tenant_id = Column(String(36), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False, default="company")   # national / company

    __table_args__ = (UniqueConstraint("tenant_id", "date", name="uq_holidays_tenant_date"),)

    def __repr__(self):
        return f"<Holiday(date={self.date}, name={self.name})>"


class ProductionPlan(Base):
    __tablename__ = "production_plans"

    id = Column(Integer, primary_key=True)
    tenant_id = Column(String(36), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    start_date = Column(Date, nullable=False)
    status = Column(String, nullable=False, default="active")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    team = relationship("Team", back_populates="production_plans")
    items = relationship(
        "ProductionPlanItem",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="ProductionPlanItem.priority",
    )


class ProductionPlanItem(Base):
    __tablename__ = "production_plan_items"

    id = Column(Integer, primary_key=True)
    plan_id = Column(Integer, ForeignKey("production_plans.id", ondelete="CASCADE"), nullable=False, index=True)
    sub_job_id = Column(Integer, ForeignKey("sub_jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    order_number = Column(String, nullable=True)
    customer_name = Column(String, nullable=True)
    product_name = Column(String, nullable=True)
    color_name = Column(String, nullable=True)
    size_name = Column(String, nullable=True)
    quantity = Column(Integer, nullable=False, default=0)
    completion_date = Column(Date, nullable=False)
    job_cost = Column(Numeric(14, 2), nullable=False, default=0)
    priority = Column(Integer, nullable=False, default=1)

    plan = relationship("ProductionPlan", back_populates="items")
    sub_job = relationship("SubJob", back_populates="plan_items")


# =========================================
# ============ Daily Work Logs ============
# =========================================

class DailyWorkLog(Base):
    __tablename__ = "daily_work_logs"

    id = Column(Integer, primary_key=True)
    tenant_id = Column(String(36), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    report_number = Column(String, nullable=False, index=True)   # RPYYYYMMDD###
    date = Column(Date, nullable=False, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="SET NULL"), nullable=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True)
    work_order_id = Column(Integer, ForeignKey("work_orders.id", ondelete="SET NULL"), nullable=True)
    sub_job_id = Column(Integer, ForeignKey("sub_jobs.id", ondelete="SET NULL"), nullable=True)
    work_step_id = Column(Integer, ForeignKey("work_steps.id", ondelete="SET NULL"), nullable=True)
    hours_worked = Column(Numeric(6, 2), nullable=False, default=0)
    quantity_completed = Column(Integer, nullable=False, default=0)
    work_description = Column(Text, nullable=False, default="")
    status = Column(String, nullable=False, default="in_progress")   # in_progress / completed / paused
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    team = relationship("Team")
    work_order = relationship("WorkOrder")
    sub_job = relationship("SubJob")
    work_step = relationship("WorkStep")

    __table_args__ = (Index("ix_daily_work_logs_tenant_date", "tenant_id", "date"),)

    def __repr__(self):
        return f"<DailyWorkLog(report_number={self.report_number}, date={self.date})>"
