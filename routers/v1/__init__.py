# routers/v1/__init__.py
from fastapi import APIRouter

from . import (
    auth, master_data, customers, departments, teams, employees, work_steps,
    work_orders, sub_jobs, work_queues, page_access, holidays, production_plans,
    daily_work_logs, reports,
)

api_v1 = APIRouter()
api_v1.include_router(auth.router)

# master data: colors / sizes / work-types
api_v1.include_router(master_data.colors_router)
api_v1.include_router(master_data.sizes_router)
api_v1.include_router(master_data.work_types_router)
api_v1.include_router(customers.router)

# โครงสร้างองค์กร
api_v1.include_router(departments.router)
api_v1.include_router(teams.router)
api_v1.include_router(employees.router)
api_v1.include_router(work_steps.router)

# ใบสั่งงาน + คิวงาน
api_v1.include_router(work_orders.router)
api_v1.include_router(sub_jobs.router)
api_v1.include_router(work_queues.router)
api_v1.include_router(holidays.router)
api_v1.include_router(production_plans.router)

# สิทธิ์: page-access / roles / หน้าจัดการ
api_v1.include_router(page_access.router)
api_v1.include_router(page_access.roles_router)
api_v1.include_router(page_access.management_router)

api_v1.include_router(daily_work_logs.router)
api_v1.include_router(reports.router)

__all__ = ["api_v1"]
