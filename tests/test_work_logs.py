from datetime import date
from io import BytesIO

import pytest
from openpyxl import load_workbook

from services.errors import NotFoundError, ServiceError
from services.work_logs import (
    EXPORT_HEADER,
    create_log,
    export_logs_xlsx,
    list_logs,
    team_revenue,
    update_log,
)
from services.work_orders import create_work_order

DAY = date(2026, 10, 19)


@pytest.fixture
def sub_job(db, tenant, org):
    wo = create_work_order(
        db, tenant.id,
        {"customer_id": org.customer.id, "title": "Logged", "status": "in_progress"},
        [{"product_name": "Jacket", "work_step_id": org.sew.id, "quantity": 40, "production_cost": 12.5}],
    )
    return wo.sub_jobs[0]


def _log(db, tenant, org, sub_job, day=DAY, qty=10, **extra):
    data = {
        "date": day,
        "team_id": org.team_a.id,
        "sub_job_id": sub_job.id,
        "work_step_id": org.sew.id,
        "hours_worked": 8,
        "quantity_completed": qty,
        "work_description": "sewing",
    }
    data.update(extra)
    return create_log(db, tenant.id, data)


def test_report_numbers_run_per_day(db, tenant, org, sub_job):
    first = _log(db, tenant, org, sub_job)
    second = _log(db, tenant, org, sub_job)
    next_day = _log(db, tenant, org, sub_job, day=date(2026, 10, 20))

    assert first.report_number == "RP20261019001"
    assert second.report_number == "RP20261019002"
    assert next_day.report_number == "RP20261020001"
    # work order มาจาก sub job อัตโนมัติ
    assert first.work_order_id == sub_job.work_order_id


def test_quantity_cannot_exceed_sub_job(db, tenant, org, sub_job):
    with pytest.raises(ServiceError):
        _log(db, tenant, org, sub_job, qty=41)


def test_sub_job_must_belong_to_work_order(db, tenant, org, sub_job):
    other = create_work_order(db, tenant.id, {"customer_id": org.customer.id, "title": "Other"})
    with pytest.raises(ServiceError):
        _log(db, tenant, org, sub_job, work_order_id=other.id)


def test_update_revalidates(db, tenant, org, sub_job):
    log = _log(db, tenant, org, sub_job)
    updated = update_log(db, tenant.id, log.id, {"status": "completed", "quantity_completed": 40})
    assert (updated.status, updated.quantity_completed) == ("completed", 40)

    with pytest.raises(ServiceError):
        update_log(db, tenant.id, log.id, {"quantity_completed": 99})


def test_other_tenant_cannot_update_log(db, tenant, other_tenant, org, sub_job):
    with pytest.raises(NotFoundError):
        update_log(db, other_tenant.id, _log(db, tenant, org, sub_job).id, {"notes": "x"})


def test_list_filters(db, tenant, org, sub_job):
    _log(db, tenant, org, sub_job)
    _log(db, tenant, org, sub_job, day=date(2026, 10, 20), team_id=org.team_b.id)

    assert len(list_logs(db, tenant.id)) == 2
    assert len(list_logs(db, tenant.id, day=DAY)) == 1
    assert len(list_logs(db, tenant.id, team_id=org.team_b.id)) == 1


def test_team_revenue_per_day(db, tenant, org, sub_job):
    _log(db, tenant, org, sub_job, qty=10)
    _log(db, tenant, org, sub_job, qty=4)
    _log(db, tenant, org, sub_job, day=date(2026, 10, 21), qty=2)

    days = team_revenue(db, tenant.id, team_id=org.team_a.id, start_date=DAY, end_date=date(2026, 10, 31))

    assert [(d["date"], d["quantity"], d["revenue"]) for d in days] == [
        (DAY, 14, 175.0),
        (date(2026, 10, 21), 2, 25.0),
    ]
    assert days[0]["jobs"][0]["customer_name"] == "ACME Garments"
    assert days[0]["jobs"][0]["unit_price"] == 12.5


def test_team_revenue_rejects_reversed_range(db, tenant, org):
    with pytest.raises(ServiceError):
        team_revenue(db, tenant.id, team_id=org.team_a.id, start_date=DAY, end_date=date(2026, 10, 1))


def test_export_xlsx(db, tenant, org, sub_job):
    _log(db, tenant, org, sub_job)
    _log(db, tenant, org, sub_job, qty=3)

    wb = load_workbook(BytesIO(export_logs_xlsx(list_logs(db, tenant.id))))
    ws = wb.active
    assert [c.value for c in ws[1]] == EXPORT_HEADER
    assert ws.max_row == 3
    assert ws.cell(row=2, column=5).value == "Jacket"
