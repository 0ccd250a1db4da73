"""Pytest fixtures: in-memory SQLite, TestClient and a seeded organization."""
import os
from types import SimpleNamespace

import pytest

# 1. ตั้ง DB สำหรับเทสต์ก่อน import app / database
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["AUTH_ENABLED"] = "false"

from fastapi.testclient import TestClient

from database import Base, SessionLocal, engine
from deps.auth import get_password_hash
from deps.tenant import ensure_default_tenant
from main import app
from models import (
    Color,
    Customer,
    Department,
    Employee,
    Role,
    Size,
    Team,
    Tenant,
    User,
    WorkStep,
)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def tenant(db):
    return ensure_default_tenant(db)


@pytest.fixture
def other_tenant(db):
    t = Tenant(id="11111111-2222-3333-4444-555555555555", name="Other Co", slug="other")
    db.add(t)
    db.commit()
    return t


@pytest.fixture
def client(db, tenant):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def org(db, tenant):
    """
    แผนกเย็บ (ตัด -> เย็บ) + ทีม A, แผนกสกรีน (สกรีน) + ทีม B
    ลูกค้า 1 ราย สี 2 ไซส์ 2
    """
    sewing = Department(tenant_id=tenant.id, name="Sewing", type="production")
    printing = Department(tenant_id=tenant.id, name="Printing", type="production")
    db.add_all([sewing, printing])
    db.flush()

    cut = WorkStep(tenant_id=tenant.id, department_id=sewing.id, name="Cut", order=1)
    sew = WorkStep(tenant_id=tenant.id, department_id=sewing.id, name="Sew", order=2)
    screen = WorkStep(tenant_id=tenant.id, department_id=printing.id, name="Screen", order=1)
    team_a = Team(tenant_id=tenant.id, department_id=sewing.id, name="Team A")
    team_b = Team(tenant_id=tenant.id, department_id=printing.id, name="Team B")
    db.add_all([cut, sew, screen, team_a, team_b])
    db.flush()

    db.add(Employee(
        tenant_id=tenant.id, team_id=team_a.id, count=5,
        average_wage=400, overhead_percentage=15, management_percentage=10,
    ))
    customer = Customer(tenant_id=tenant.id, name="ACME Garments")
    red = Color(tenant_id=tenant.id, name="Red", code="#FF0000", sort_order=1)
    blue = Color(tenant_id=tenant.id, name="Blue", code="#0000FF", sort_order=2)
    m = Size(tenant_id=tenant.id, name="M", sort_order=1)
    l = Size(tenant_id=tenant.id, name="L", sort_order=2)
    db.add_all([customer, red, blue, m, l])
    db.commit()

    return SimpleNamespace(
        sewing=sewing, printing=printing,
        cut=cut, sew=sew, screen=screen,
        team_a=team_a, team_b=team_b,
        customer=customer,
        red=red, blue=blue, m=m, l=l,
    )


@pytest.fixture
def make_user(db, tenant):
    def _make(username, password="secret123", role_name=None):
        role = None
        if role_name:
            role = db.query(Role).filter(Role.tenant_id == tenant.id, Role.name == role_name).first()
            if role is None:
                role = Role(tenant_id=tenant.id, name=role_name, display_name=role_name.title())
                db.add(role)
                db.flush()
        u = User(
            username=username,
            password_hash=get_password_hash(password),
            tenant_id=tenant.id,
            role_id=role.id if role else None,
        )
        db.add(u)
        db.commit()
        return u
    return _make
