import pytest

from models import WorkQueue
from services.errors import ConflictError, NotFoundError, ServiceError, WorkStepMismatchError
from services.work_orders import create_work_order
from services.work_queue import (
    add_job_to_queue,
    available_sub_jobs,
    clear_team_queue,
    remove_from_queue,
    reorder_queue,
    team_queue,
    team_work_step_ids,
)


def _order(db, tenant, org, status="approved", steps=None):
    steps = steps or [org.cut, org.sew, org.screen]
    return create_work_order(
        db, tenant.id,
        {"customer_id": org.customer.id, "title": f"{status} order", "status": status},
        [
            {
                "product_name": f"Item {s.name}",
                "department_id": s.department_id,
                "work_step_id": s.id,
                "color_id": org.red.id,
                "size_id": org.m.id,
                "quantity": 10,
                "production_cost": 15,
            }
            for s in steps
        ],
    )


def test_team_work_steps_come_from_department(db, org):
    assert team_work_step_ids(db, org.team_a) == [org.cut.id, org.sew.id]
    assert team_work_step_ids(db, org.team_b) == [org.screen.id]


def test_add_job_rejects_mismatched_work_step(db, tenant, org):
    wo = _order(db, tenant, org)
    screen_job = wo.sub_jobs[2]

    with pytest.raises(WorkStepMismatchError) as exc:
        add_job_to_queue(db, tenant.id, sub_job_id=screen_job.id, team_id=org.team_a.id)

    assert exc.value.sub_job_step_id == org.screen.id
    assert exc.value.team_step_ids == [org.cut.id, org.sew.id]
    assert isinstance(exc.value, ServiceError)
    assert db.query(WorkQueue).count() == 0


def test_add_job_creates_pending_entry_and_rejects_duplicate(db, tenant, org):
    wo = _order(db, tenant, org)
    q = add_job_to_queue(db, tenant.id, sub_job_id=wo.sub_jobs[0].id, team_id=org.team_a.id, priority=4)
    assert (q.status, q.priority, q.tenant_id) == ("pending", 4, tenant.id)

    with pytest.raises(ConflictError):
        add_job_to_queue(db, tenant.id, sub_job_id=wo.sub_jobs[0].id, team_id=org.team_a.id)


def test_add_job_unknown_team_is_not_found(db, tenant, org):
    wo = _order(db, tenant, org)
    with pytest.raises(NotFoundError):
        add_job_to_queue(db, tenant.id, sub_job_id=wo.sub_jobs[0].id, team_id=9999)


def test_reorder_sets_priority_by_position(db, tenant, org):
    wo = _order(db, tenant, org)
    cut_q = add_job_to_queue(db, tenant.id, sub_job_id=wo.sub_jobs[0].id, team_id=org.team_a.id)
    sew_q = add_job_to_queue(db, tenant.id, sub_job_id=wo.sub_jobs[1].id, team_id=org.team_a.id)

    rows = reorder_queue(db, tenant.id, org.team_a.id, [sew_q.id, cut_q.id])
    assert [(r.id, r.priority) for r in rows] == [(sew_q.id, 1), (cut_q.id, 2)]
    assert [r.id for r in team_queue(db, tenant.id, org.team_a.id)] == [sew_q.id, cut_q.id]


def test_reorder_rejects_items_from_other_team(db, tenant, org):
    wo = _order(db, tenant, org)
    a_q = add_job_to_queue(db, tenant.id, sub_job_id=wo.sub_jobs[0].id, team_id=org.team_a.id)
    b_q = add_job_to_queue(db, tenant.id, sub_job_id=wo.sub_jobs[2].id, team_id=org.team_b.id)

    with pytest.raises(ServiceError):
        reorder_queue(db, tenant.id, org.team_a.id, [b_q.id, a_q.id])
    db.expire_all()
    assert db.get(WorkQueue, a_q.id).priority == 1


def test_clear_and_remove(db, tenant, org):
    wo = _order(db, tenant, org)
    a1 = add_job_to_queue(db, tenant.id, sub_job_id=wo.sub_jobs[0].id, team_id=org.team_a.id)
    add_job_to_queue(db, tenant.id, sub_job_id=wo.sub_jobs[1].id, team_id=org.team_a.id)
    add_job_to_queue(db, tenant.id, sub_job_id=wo.sub_jobs[2].id, team_id=org.team_b.id)

    remove_from_queue(db, tenant.id, a1.id)
    assert clear_team_queue(db, tenant.id, org.team_a.id) == 1
    assert db.query(WorkQueue).count() == 1

    with pytest.raises(NotFoundError):
        remove_from_queue(db, tenant.id, a1.id)


def test_available_sub_jobs_filters_status_and_queued(db, tenant, org):
    approved = _order(db, tenant, org, steps=[org.cut, org.cut])
    _order(db, tenant, org, status="draft", steps=[org.cut])
    add_job_to_queue(db, tenant.id, sub_job_id=approved.sub_jobs[0].id, team_id=org.team_a.id)

    rows = available_sub_jobs(db, tenant.id, org.cut.id)
    assert [r.id for r in rows] == [approved.sub_jobs[1].id]
    assert available_sub_jobs(db, tenant.id, org.screen.id) == []
