"""End-to-end ผ่าน TestClient: camelCase, tenant isolation, error mapping"""
import logging
from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from openpyxl import load_workbook

from main import app
from services import work_queue


def _sub_job(org, name, step=None, qty=10, cost=20, **extra):
    item = {
        "productName": name,
        "departmentId": org.sewing.id,
        "workStepId": (step or org.cut).id,
        "colorId": org.red.id,
        "sizeId": org.m.id,
        "quantity": qty,
        "productionCost": cost,
    }
    item.update(extra)
    return item


@pytest.fixture
def work_order(client, org):
    r = client.post("/api/work-orders", json={
        "customerId": org.customer.id,
        "title": "Team shirts",
        "status": "approved",
        "deliveryDate": "2026-11-30",
        "subJobs": [_sub_job(org, "Shirt"), _sub_job(org, "Shirt", step=org.screen, cost=5)],
    })
    assert r.status_code == 201, r.text
    return r.json()


# ---------------------------
# master data / organization
# ---------------------------
def test_color_crud_camel_case(client, tenant):
    r = client.post("/api/colors", json={"name": "Red", "code": "#F00", "sortOrder": 2})
    assert r.status_code == 201
    color = r.json()
    assert color["sortOrder"] == 2 and color["isActive"] is True

    assert client.post("/api/colors", json={"name": "Red"}).status_code == 409

    r = client.patch(f"/api/colors/{color['id']}", json={"is_active": False})
    assert r.json()["isActive"] is False

    assert [c["name"] for c in client.get("/api/colors").json()] == ["Red"]
    assert client.delete(f"/api/colors/{color['id']}").status_code == 204
    assert client.get(f"/api/colors/{color['id']}").status_code == 404


def test_other_tenant_gets_404(client, org, other_tenant):
    headers = {"X-Tenant-ID": other_tenant.id}
    assert client.get(f"/api/colors/{org.red.id}", headers=headers).status_code == 404
    assert client.get(f"/api/teams/{org.team_a.id}", headers=headers).status_code == 404
    assert client.get("/api/departments", headers=headers).json() == []


def test_unknown_tenant_header_is_404(client):
    assert client.get("/api/colors", headers={"X-Tenant-ID": "nope"}).status_code == 404


def test_employee_daily_cost_and_validation(client, org):
    r = client.post("/api/employees", json={
        "teamId": org.team_b.id,
        "count": 5,
        "averageWage": 400,
        "overheadPercentage": 15,
        "managementPercentage": 10,
    })
    assert r.status_code == 201
    assert r.json()["dailyCost"] == pytest.approx(2530.0)

    team = client.get(f"/api/teams/{org.team_b.id}").json()
    assert team["costPerDay"] == pytest.approx(2530.0)

    assert client.post("/api/employees", json={"teamId": org.team_b.id, "count": 0}).status_code == 422
    assert client.post("/api/employees", json={"teamId": org.team_b.id, "overheadPercentage": 101}).status_code == 422
    assert client.post("/api/employees", json={"teamId": org.team_b.id, "averageWage": -1}).status_code == 422


def test_daily_cost_calculator_endpoint(client):
    r = client.get("/api/employees/daily-cost", params={
        "count": 5, "averageWage": 400, "overheadPercentage": 15, "managementPercentage": 10,
    })
    assert r.json()["dailyCost"] == pytest.approx(2530.0)
    assert client.get("/api/employees/daily-cost", params={"count": 5}).json()["dailyCost"] == 0


def test_teams_filter_and_department_steps(client, org):
    teams = client.get("/api/teams", params={"departmentId": org.printing.id}).json()
    assert [t["name"] for t in teams] == ["Team B"]

    steps = client.get(f"/api/departments/{org.sewing.id}/work-steps").json()
    assert [s["name"] for s in steps] == ["Cut", "Sew"]
    assert steps[0]["requiredSkills"] == []

    by_team = client.get(f"/api/employees/by-team/{org.team_a.id}").json()
    assert len(by_team) == 1


def test_delete_department_cascades(client, org):
    dept, team = org.sewing.id, org.team_a.id
    assert client.delete(f"/api/departments/{dept}").status_code == 204
    assert client.get(f"/api/teams/{team}").status_code == 404
    assert client.get("/api/work-steps", params={"departmentId": dept}).json() == []


@pytest.mark.parametrize(
    "path,payload",
    [
        ("/api/teams/{team}", {"departmentId": None}),
        ("/api/teams/{team}", {"name": None}),
        ("/api/departments/{dept}", {"status": None}),
        ("/api/colors/{color}", {"name": None}),
        ("/api/employees/{emp}", {"count": None}),
    ],
)
def test_null_for_required_field_is_422(client, org, path, payload):
    emp = client.get(f"/api/employees/by-team/{org.team_a.id}").json()[0]["id"]
    url = path.format(team=org.team_a.id, dept=org.sewing.id, color=org.red.id, emp=emp)
    assert client.put(url, json=payload).status_code == 422
    assert client.patch(url, json=payload).status_code == 422


def test_optional_field_can_be_cleared(client, org):
    client.put(f"/api/teams/{org.team_a.id}", json={"leader": "Somsri"})
    r = client.patch(f"/api/teams/{org.team_a.id}", json={"leader": None})
    assert r.status_code == 200
    assert r.json()["leader"] is None
    assert r.json()["departmentId"] == org.sewing.id


def test_team_requires_known_department(client):
    assert client.post("/api/teams", json={"name": "Ghost", "departmentId": 999}).status_code == 404


# ---------------------------
# work orders
# ---------------------------
def test_create_work_order(work_order):
    assert work_order["orderNumber"].startswith("JB")
    assert work_order["totalAmount"] == pytest.approx(250.0)
    assert [s["sortOrder"] for s in work_order["subJobs"]] == [1, 2]
    assert work_order["subJobs"][0]["totalCost"] == pytest.approx(200.0)


def test_count_endpoint(client, work_order):
    year, month = int(work_order["orderNumber"][2:6]), int(work_order["orderNumber"][6:8])
    r = client.post("/api/work-orders/count", json={"year": year, "month": month})
    assert r.json() == {"count": 1, "nextOrderNumber": f"JB{year}{month:02d}002"}
    assert client.post("/api/work-orders/count", json={"year": 2026, "month": 13}).status_code == 422


def test_update_reports_price_change_and_reconciliation(client, org, work_order):
    shirt, screen = work_order["subJobs"]
    q = client.post("/api/work-queues/add-job", json={"subJobId": shirt["id"], "teamId": org.team_a.id})
    assert q.status_code == 201

    r = client.put(f"/api/work-orders/{work_order['id']}", json={
        "title": "Team shirts (rev)",
        "subJobs": [_sub_job(org, "Shirt", cost=22, id=shirt["id"]), _sub_job(org, "Cap", qty=3)],
    })
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["priceChanged"] is True
    assert body["hasQueuedJobs"] is True
    assert body["needsReplanning"] is True
    assert body["reconciliation"]["kept"] == [shirt["id"]]
    assert body["reconciliation"]["deleted"] == [screen["id"]]
    assert [s["productName"] for s in body["subJobs"]] == ["Shirt", "Cap"]
    assert body["totalAmount"] == pytest.approx(10 * 22 + 3 * 20)

    status = client.get(f"/api/work-orders/{work_order['id']}/queue-status").json()
    assert status == {"hasQueuedJobs": True}


def test_price_check_endpoint(client, org, work_order):
    shirt = work_order["subJobs"][0]
    r = client.post(f"/api/work-orders/{work_order['id']}/price-check", json={
        "subJobs": [_sub_job(org, "Shirt", cost=20, id=shirt["id"])],
    })
    assert r.json() == {"priceChanged": False, "hasQueuedJobs": False, "needsReplanning": False}


def test_reorder_sub_jobs_endpoint(client, work_order):
    a, b = (s["id"] for s in work_order["subJobs"])
    r = client.put(f"/api/work-orders/{work_order['id']}/sub-jobs/reorder", json={"subJobIds": [b, a]})
    assert [s["id"] for s in r.json()] == [b, a]
    assert client.put(
        f"/api/work-orders/{work_order['id']}/sub-jobs/reorder", json={"subJobIds": [12345]}
    ).status_code == 400


@pytest.mark.parametrize("field", ["title", "customerId", "status", "priority"])
def test_null_work_order_field_is_422(client, work_order, field):
    r = client.put(f"/api/work-orders/{work_order['id']}", json={field: None})
    assert r.status_code == 422
    assert client.get(f"/api/work-orders/{work_order['id']}").json()["title"] == "Team shirts"


def test_generate_ignores_repeated_department(client, org):
    r = client.post("/api/sub-jobs/generate", json={
        "departmentIds": [org.sewing.id, org.sewing.id],
        "colorIds": [org.red.id],
        "sizeIds": [org.m.id],
        "quantities": [{"departmentId": org.sewing.id, "colorId": org.red.id, "sizeId": org.m.id, "quantity": 3}],
    })
    assert [d["workStepId"] for d in r.json()] == [org.cut.id, org.sew.id]


def test_unknown_customer_is_404(client):
    r = client.post("/api/work-orders", json={"customerId": 999, "title": "x"})
    assert r.status_code == 404
    assert r.json()["detail"] == "Customer not found"


def test_customer_with_orders_cannot_be_deleted(client, org, work_order):
    assert client.delete(f"/api/customers/{org.customer.id}").status_code == 400


def test_delete_work_order(client, org, work_order):
    client.post("/api/work-queues/add-job", json={"subJobId": work_order["subJobs"][0]["id"], "teamId": org.team_a.id})
    assert client.delete(f"/api/work-orders/{work_order['id']}").status_code == 204
    assert client.get(f"/api/work-queues/team/{org.team_a.id}").json() == []


# ---------------------------
# work queue / sub jobs
# ---------------------------
def test_add_job_mismatch_is_400(client, org, work_order):
    screen = work_order["subJobs"][1]
    r = client.post("/api/work-queues/add-job", json={"subJobId": screen["id"], "teamId": org.team_a.id})
    assert r.status_code == 400
    assert "Work step mismatch" in r.json()["detail"]


def test_add_job_duplicate_is_409(client, org, work_order):
    payload = {"subJobId": work_order["subJobs"][0]["id"], "teamId": org.team_a.id}
    assert client.post("/api/work-queues/add-job", json=payload).status_code == 201
    assert client.post("/api/work-queues/add-job", json=payload).status_code == 409


def test_queue_flow(client, org, work_order):
    shirt, screen = work_order["subJobs"]
    available = client.get("/api/sub-jobs/available", params={"workStepId": org.cut.id}).json()
    assert [s["id"] for s in available] == [shirt["id"]]
    assert available[0]["customerName"] == "ACME Garments"

    client.post("/api/work-queues/add-job", json={"subJobId": shirt["id"], "teamId": org.team_a.id})
    assert client.get("/api/sub-jobs/available", params={"workStepId": org.cut.id}).json() == []

    items = client.get(f"/api/work-queues/team/{org.team_a.id}").json()
    assert len(items) == 1
    assert items[0]["orderNumber"] == work_order["orderNumber"]
    assert items[0]["colorName"] == "Red"

    cleared = client.delete(f"/api/work-queues/team/{org.team_a.id}/clear").json()
    assert cleared == {"removed": 1}


def test_queue_reorder_endpoint(client, org):
    r = client.post("/api/work-orders", json={
        "customerId": org.customer.id, "title": "two cuts", "status": "approved",
        "subJobs": [_sub_job(org, "A"), _sub_job(org, "B")],
    })
    ids = [s["id"] for s in r.json()["subJobs"]]
    qids = [
        client.post("/api/work-queues/add-job", json={"subJobId": i, "teamId": org.team_a.id}).json()["id"]
        for i in ids
    ]
    r = client.put("/api/work-queues/reorder", json={"teamId": org.team_a.id, "queueIds": qids[::-1]})
    assert [(q["id"], q["priority"]) for q in r.json()] == [(qids[1], 1), (qids[0], 2)]

    assert client.delete(f"/api/work-queues/{qids[0]}").status_code == 204
    assert client.delete(f"/api/work-queues/{qids[0]}").status_code == 404


def test_generate_sub_jobs(client, org):
    quantities = [
        {"departmentId": org.sewing.id, "colorId": c.id, "sizeId": s.id, "quantity": 10}
        for c in (org.red, org.blue) for s in (org.m, org.l)
    ]
    r = client.post("/api/sub-jobs/generate", json={
        "departmentIds": [org.sewing.id],
        "colorIds": [org.red.id, org.blue.id],
        "sizeIds": [org.m.id, org.l.id],
        "quantities": quantities,
        "productName": "Polo",
        "productionCost": 15,
    })
    drafts = r.json()
    assert len(drafts) == 2 * 4
    assert all(d["teamId"] is None for d in drafts)
    assert drafts[0]["totalCost"] == pytest.approx(150.0)


def test_sub_jobs_by_work_order(client, work_order):
    rows = client.get(f"/api/sub-jobs/by-work-order/{work_order['id']}").json()
    assert [r["id"] for r in rows] == [s["id"] for s in work_order["subJobs"]]


# ---------------------------
# planning / holidays / logs / reports
# ---------------------------
def test_production_plan_endpoints(client, org, work_order):
    client.post("/api/work-queues/add-job", json={"subJobId": work_order["subJobs"][0]["id"], "teamId": org.team_a.id})
    assert client.post("/api/holidays", json={"date": "2026-10-19", "name": "Company day"}).status_code == 201
    assert client.post("/api/holidays", json={"date": "2026-10-19", "name": "dup"}).status_code == 409

    r = client.post("/api/production-plans/calculate", json={"teamId": org.team_a.id, "startDate": "2026-10-17"})
    body = r.json()
    assert body["dailyCapacity"] == pytest.approx(2530.0)
    assert body["jobs"][0]["completionDate"] == "2026-10-20"

    plans = client.get("/api/production-plans", params={"teamId": org.team_a.id}).json()
    assert [p["id"] for p in plans] == [body["planId"]]
    items = client.get(f"/api/production-plans/{body['planId']}/items").json()
    assert items[0]["orderNumber"] == work_order["orderNumber"]
    assert client.delete(f"/api/production-plans/{body['planId']}").status_code == 204


def test_plan_for_team_without_cost_is_400(client, org):
    r = client.post("/api/production-plans/calculate", json={"teamId": org.team_b.id, "startDate": "2026-10-19"})
    assert r.status_code == 400


def test_daily_work_logs_and_reports(client, org, work_order):
    shirt = work_order["subJobs"][0]
    r = client.post("/api/daily-work-logs", json={
        "date": "2026-10-19",
        "teamId": org.team_a.id,
        "subJobId": shirt["id"],
        "hoursWorked": 7.5,
        "quantityCompleted": 6,
        "workDescription": "cut panels",
    })
    assert r.status_code == 201, r.text
    log = r.json()
    assert log["reportNumber"] == "RP20261019001"
    assert log["workOrderId"] == work_order["id"]

    assert client.post("/api/daily-work-logs", json={
        "date": "2026-10-19", "subJobId": shirt["id"], "quantityCompleted": 11,
    }).status_code == 400

    r = client.put(f"/api/daily-work-logs/{log['id']}", json={"status": "completed"})
    assert r.json()["status"] == "completed"

    revenue = client.get("/api/reports/team-revenue", params={
        "teamId": org.team_a.id, "startDate": "2026-10-01", "endDate": "2026-10-31",
    }).json()
    assert revenue[0]["revenue"] == pytest.approx(120.0)
    assert revenue[0]["quantity"] == 6

    r = client.get("/api/reports/daily-work-logs/export", params={"date": "2026-10-19"})
    assert r.headers["content-type"].startswith("application/vnd.openxmlformats")
    assert load_workbook(BytesIO(r.content)).active.max_row == 2

    assert client.delete(f"/api/daily-work-logs/{log['id']}").status_code == 204
    assert client.get("/api/daily-work-logs", params={"date": "2026-10-19"}).json() == []


# ---------------------------
# page access / roles / auth
# ---------------------------
def test_page_access_endpoints(client, tenant):
    role = client.post("/api/roles", json={"name": "planner"}).json()
    assert role["displayName"] == "planner"

    r = client.post("/api/page-access", json={
        "roleId": role["id"], "pageUrl": "/production/work-queue", "accessLevel": "edit",
    })
    assert r.json()["pageName"] == "คิวงาน"

    r = client.post("/api/page-access/bulk", json=[
        {"roleId": role["id"], "pageUrl": "/production/work-queue", "accessLevel": "create"},
        {"roleId": role["id"], "pageUrl": "/reports", "accessLevel": "read"},
    ])
    assert [row["accessLevel"] for row in r.json()] == ["create", "view"]

    assert client.post("/api/page-access", json={
        "roleId": role["id"], "pageUrl": "/reports", "accessLevel": "owner",
    }).status_code == 400

    created = client.post("/api/page-access-management/create-all").json()["created"]
    cfg = client.get("/api/page-access-management/config").json()
    assert created == len(cfg["pages"]) - 2
    assert len(cfg["currentAccess"]) == len(cfg["pages"])

    rows = client.get(f"/api/roles/{role['id']}/page-access").json()
    assert rows == client.get("/api/page-access", params={"roleId": role["id"]}).json()

    r = client.post("/api/page-access-management/bulk-update", json={"updates": [
        {"roleId": role["id"], "pageUrl": "/", "accessLevel": "view"},
    ]})
    assert r.json()[0]["accessLevel"] == "view"


def test_login_logout_and_current_user(client, make_user):
    make_user("somchai", role_name="admin")
    assert client.get("/api/auth/user").status_code == 401
    assert client.post("/api/auth/login", json={"username": "somchai", "password": "wrong"}).status_code == 401

    r = client.post("/api/auth/login", json={"username": "somchai", "password": "secret123"})
    assert r.status_code == 200
    assert r.json()["tenant"]["slug"] == "default"
    assert client.get("/api/auth/user").json()["username"] == "somchai"

    client.post("/api/auth/logout")
    assert client.get("/api/auth/user").status_code == 401


def test_register(client, tenant):
    r = client.post("/api/auth/register", json={"username": "newbie", "password": "secret123", "firstName": "New"})
    assert r.status_code == 201
    assert r.json()["tenantId"] == tenant.id
    assert client.post("/api/auth/register", json={"username": "newbie", "password": "secret123"}).status_code == 409


# ---------------------------
# error handler
# ---------------------------
def test_unhandled_error_is_500_and_logged_with_traceback(db, tenant, org, monkeypatch, caplog):
    def boom(*args, **kwargs):
        raise RuntimeError("queue store unavailable")

    monkeypatch.setattr(work_queue, "clear_team_queue", boom)
    with TestClient(app, raise_server_exceptions=False) as c, caplog.at_level(logging.ERROR, logger="erp"):
        r = c.delete(f"/api/work-queues/team/{org.team_a.id}/clear")

    assert r.status_code == 500
    assert r.json() == {"detail": "Internal server error"}
    record = next(rec for rec in caplog.records if rec.name == "erp")
    assert "DELETE" in record.getMessage()
    assert record.exc_info[0] is RuntimeError
