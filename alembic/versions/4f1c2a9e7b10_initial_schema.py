"""initial schema

Revision ID: 4f1c2a9e7b10
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4f1c2a9e7b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _tenant_fk():
    return sa.Column('tenant_id', sa.String(length=36),
                     sa.ForeignKey('tenants.id', ondelete='CASCADE'), nullable=False, index=True)


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'tenants',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('slug', sa.String(), nullable=False),
        sa.Column('plan', sa.String(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_tenants_slug', 'tenants', ['slug'], unique=True)

    op.create_table(
        'roles',
        sa.Column('id', sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('display_name', sa.String(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.UniqueConstraint('tenant_id', 'name', name='uq_roles_tenant_name'),
    )

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('password_hash', sa.String(), nullable=False),
        sa.Column('first_name', sa.String(), nullable=False),
        sa.Column('last_name', sa.String(), nullable=False),
        sa.Column('role_id', sa.Integer(), sa.ForeignKey('roles.id', ondelete='SET NULL'), nullable=True, index=True),
        _tenant_fk(),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    op.create_table(
        'page_access',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('role_id', sa.Integer(), sa.ForeignKey('roles.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('page_url', sa.String(), nullable=False),
        sa.Column('page_name', sa.String(), nullable=False),
        sa.Column('access_level', sa.String(), nullable=False),
        sa.UniqueConstraint('role_id', 'page_url', name='uq_page_access_role_page'),
        sa.CheckConstraint("access_level IN ('none','view','edit','create')", name='ck_page_access_level'),
    )

    op.create_table(
        'customers',
        sa.Column('id', sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('company_name', sa.String(), nullable=True),
        sa.Column('tax_id', sa.String(), nullable=True),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('postal_code', sa.String(), nullable=True),
        sa.Column('contact_person', sa.String(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
    )

    for name, extra in (
        ('colors', [sa.Column('code', sa.String(), nullable=True)]),
        ('sizes', [sa.Column('category', sa.String(), nullable=True)]),
        ('work_types', [sa.Column('code', sa.String(), nullable=True)]),
    ):
        op.create_table(
            name,
            sa.Column('id', sa.Integer(), primary_key=True),
            _tenant_fk(),
            sa.Column('name', sa.String(), nullable=False),
            *extra,
            sa.Column('description', sa.Text(), nullable=True),
            sa.Column('sort_order', sa.Integer(), nullable=False),
            sa.Column('is_active', sa.Boolean(), nullable=False),
        )

    op.create_table(
        'departments',
        sa.Column('id', sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('manager', sa.String(), nullable=True),
        sa.Column('location', sa.String(), nullable=True),
        sa.Column('status', sa.String(), nullable=False),
    )

    op.create_table(
        'teams',
        sa.Column('id', sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column('department_id', sa.Integer(), sa.ForeignKey('departments.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('leader', sa.String(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(), nullable=False),
    )

    op.create_table(
        'employees',
        sa.Column('id', sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column('team_id', sa.Integer(), sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('count', sa.Integer(), nullable=False),
        sa.Column('average_wage', sa.Numeric(12, 2), nullable=False),
        sa.Column('overhead_percentage', sa.Numeric(5, 2), nullable=False),
        sa.Column('management_percentage', sa.Numeric(5, 2), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(), nullable=False),
        sa.CheckConstraint('count >= 1', name='ck_employees_count_positive'),
    )

    op.create_table(
        'work_steps',
        sa.Column('id', sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column('department_id', sa.Integer(), sa.ForeignKey('departments.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('duration', sa.Integer(), nullable=False),
        sa.Column('required_skills', sa.JSON(), nullable=False),
        sa.Column('order', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
    )
    op.create_index('ix_work_steps_dept_order', 'work_steps', ['department_id', 'order'])

    op.create_table(
        'work_orders',
        sa.Column('id', sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column('order_number', sa.String(), nullable=False, index=True),
        sa.Column('quotation_id', sa.Integer(), nullable=True),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('customers.id', ondelete='RESTRICT'), nullable=False, index=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('work_type_id', sa.Integer(), sa.ForeignKey('work_types.id', ondelete='SET NULL'), nullable=True),
        sa.Column('delivery_date', sa.Date(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('total_amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('priority', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_work_orders_tenant_created', 'work_orders', ['tenant_id', 'created_at'])

    op.create_table(
        'sub_jobs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('work_order_id', sa.Integer(), sa.ForeignKey('work_orders.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('product_name', sa.String(), nullable=False),
        sa.Column('department_id', sa.Integer(), sa.ForeignKey('departments.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('work_step_id', sa.Integer(), sa.ForeignKey('work_steps.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('color_id', sa.Integer(), sa.ForeignKey('colors.id', ondelete='SET NULL'), nullable=True),
        sa.Column('size_id', sa.Integer(), sa.ForeignKey('sizes.id', ondelete='SET NULL'), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('production_cost', sa.Numeric(12, 2), nullable=False),
        sa.Column('total_cost', sa.Numeric(14, 2), nullable=False),
        sa.Column('sort_order', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
    )

    op.create_table(
        'work_queues',
        sa.Column('id', sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column('sub_job_id', sa.Integer(), sa.ForeignKey('sub_jobs.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('team_id', sa.Integer(), sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('priority', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_work_queues_team_priority', 'work_queues', ['team_id', 'priority'])

    op.create_table(
        'holidays',
        sa.Column('id', sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.UniqueConstraint('tenant_id', 'date', name='uq_holidays_tenant_date'),
    )

    op.create_table(
        'production_plans',
        sa.Column('id', sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column('team_id', sa.Integer(), sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        'production_plan_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('plan_id', sa.Integer(), sa.ForeignKey('production_plans.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('sub_job_id', sa.Integer(), sa.ForeignKey('sub_jobs.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('order_number', sa.String(), nullable=True),
        sa.Column('customer_name', sa.String(), nullable=True),
        sa.Column('product_name', sa.String(), nullable=True),
        sa.Column('color_name', sa.String(), nullable=True),
        sa.Column('size_name', sa.String(), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('completion_date', sa.Date(), nullable=False),
        sa.Column('job_cost', sa.Numeric(14, 2), nullable=False),
        sa.Column('priority', sa.Integer(), nullable=False),
    )

    op.create_table(
        'daily_work_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column('report_number', sa.String(), nullable=False, index=True),
        sa.Column('date', sa.Date(), nullable=False, index=True),
        sa.Column('team_id', sa.Integer(), sa.ForeignKey('teams.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id', ondelete='SET NULL'), nullable=True),
        sa.Column('work_order_id', sa.Integer(), sa.ForeignKey('work_orders.id', ondelete='SET NULL'), nullable=True),
        sa.Column('sub_job_id', sa.Integer(), sa.ForeignKey('sub_jobs.id', ondelete='SET NULL'), nullable=True),
        sa.Column('work_step_id', sa.Integer(), sa.ForeignKey('work_steps.id', ondelete='SET NULL'), nullable=True),
        sa.Column('hours_worked', sa.Numeric(6, 2), nullable=False),
        sa.Column('quantity_completed', sa.Integer(), nullable=False),
        sa.Column('work_description', sa.Text(), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_daily_work_logs_tenant_date', 'daily_work_logs', ['tenant_id', 'date'])


def downgrade() -> None:
    """Downgrade schema."""
    for name in (
        'daily_work_logs', 'production_plan_items', 'production_plans', 'holidays',
        'work_queues', 'sub_jobs', 'work_orders', 'work_steps', 'employees', 'teams',
        'departments', 'work_types', 'sizes', 'colors', 'customers', 'page_access',
        'users', 'roles', 'tenants',
    ):
        op.drop_table(name)
