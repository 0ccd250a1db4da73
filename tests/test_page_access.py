import pytest

import config
from models import PageAccess, Role
from services.errors import NotFoundError, ServiceError
from services.page_access import (
    bulk_upsert_page_access,
    create_all_page_access,
    get_page_access,
    has_permission,
    list_pages,
    management_config,
    normalize_level,
    page_name_for,
    upsert_page_access,
)


@pytest.fixture
def role(db, tenant):
    r = Role(tenant_id=tenant.id, name="operator", display_name="Operator")
    db.add(r)
    db.commit()
    return r


@pytest.mark.parametrize(
    "have,need,ok",
    [
        ("create", "edit", True),
        ("edit", "edit", True),
        ("view", "edit", False),
        ("none", "view", False),
        ("read", "view", True),
        (None, "view", False),
    ],
)
def test_has_permission_ordering(have, need, ok):
    assert has_permission(have, need) is ok


def test_invalid_level_is_rejected():
    assert normalize_level(" VIEW ") == "view"
    with pytest.raises(ServiceError):
        normalize_level("admin")


def test_manifest_pages():
    urls = [p["url"] for p in list_pages()]
    assert "/production/work-orders" in urls
    assert len(urls) == len(set(urls))
    assert page_name_for("/production/work-queue") == "คิวงาน"
    assert page_name_for("/not/in-manifest") == "in manifest"


def test_upsert_creates_then_updates(db, tenant, role):
    row = upsert_page_access(db, tenant.id, {"role_id": role.id, "page_url": "/customers", "access_level": "view"})
    again = upsert_page_access(db, tenant.id, {"role_id": role.id, "page_url": "/customers", "access_level": "edit"})

    assert again.id == row.id
    assert again.access_level == "edit"
    assert again.page_name == "ลูกค้า"
    assert db.query(PageAccess).count() == 1


def test_upsert_for_other_tenant_role_is_not_found(db, other_tenant, role):
    with pytest.raises(NotFoundError):
        upsert_page_access(db, other_tenant.id, {"role_id": role.id, "page_url": "/", "access_level": "view"})


def test_bulk_is_all_or_nothing(db, tenant, role):
    with pytest.raises(ServiceError):
        bulk_upsert_page_access(db, tenant.id, [
            {"role_id": role.id, "page_url": "/customers", "access_level": "view"},
            {"role_id": role.id, "page_url": "/reports", "access_level": "superuser"},
        ])
    assert db.query(PageAccess).count() == 0

    rows = bulk_upsert_page_access(db, tenant.id, [
        {"role_id": role.id, "page_url": "/customers", "access_level": "view"},
        {"role_id": role.id, "page_url": "/reports", "access_level": "read"},
    ])
    assert [r.access_level for r in rows] == ["view", "view"]


def test_create_all_fills_missing_rows(db, tenant, role):
    upsert_page_access(db, tenant.id, {"role_id": role.id, "page_url": "/customers", "access_level": "create"})
    n_pages = len(list_pages())

    assert create_all_page_access(db, tenant.id) == n_pages - 1
    assert create_all_page_access(db, tenant.id) == 0

    rows = get_page_access(db, tenant.id, role.id)
    assert len(rows) == n_pages
    assert {r.page_url: r.access_level for r in rows}["/customers"] == "create"


def test_management_config(db, tenant, role):
    cfg = management_config(db, tenant.id)
    assert [r.name for r in cfg["roles"]] == ["operator"]
    assert cfg["manifest_version"] == 1
    assert cfg["current_access"] == []


# ---------------------------
# enforcement ผ่าน API
# ---------------------------
@pytest.fixture
def auth_on(monkeypatch):
    monkeypatch.setattr(config, "AUTH_ENABLED", True)


def _login(client, username, password="secret123"):
    r = client.post("/api/auth/login", json={"username": username, "password": password})
    assert r.status_code == 200, r.text
    return r


def test_anonymous_request_is_rejected_when_auth_enabled(client, auth_on):
    assert client.get("/api/colors").status_code == 401


def test_view_access_allows_get_but_not_post(db, tenant, client, auth_on, make_user):
    user = make_user("viewer", role_name="operator")
    upsert_page_access(db, tenant.id, {"role_id": user.role_id, "page_url": "/master-data", "access_level": "view"})
    _login(client, "viewer")

    assert client.get("/api/colors").status_code == 200
    r = client.post("/api/colors", json={"name": "Green"})
    assert r.status_code == 403
    assert "/master-data" in r.json()["detail"]
    # ไม่มีแถวสิทธิ์ = none
    assert client.get("/api/customers").status_code == 403


def test_admin_role_bypasses_page_checks(client, auth_on, make_user):
    make_user("boss", role_name="admin")
    _login(client, "boss")
    assert client.post("/api/colors", json={"name": "Green"}).status_code == 201


def test_bearer_token_works_without_cookie(client, auth_on, make_user):
    make_user("api", role_name="admin")
    token = client.post("/api/auth/login", json={"username": "api", "password": "secret123"}).json()["accessToken"]
    client.cookies.clear()
    assert client.get("/api/colors", headers={"Authorization": f"Bearer {token}"}).status_code == 200
