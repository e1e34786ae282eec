from __future__ import annotations

from datetime import datetime

import pytest

from compliance_engine.domain.entities import TaskStatusEntity
from compliance_engine.domain.enums import StatusRole
from compliance_engine.domain.errors import NotEligibleError, StatusNotConfiguredError
from compliance_engine.services.task_service import TaskService


def _pending(store, template, month: int):
    start = datetime(2025, month, 1)
    return store.add_task(
        parent_task_id=template.id,
        is_recurring=False,
        is_auto_generated=True,
        needs_approval=True,
        compliance_start_date=start,
        compliance_end_date=datetime(2025, month, 28, 23, 59, 59, 999000),
    )


def test_activate_moves_task_in_progress(store, clock) -> None:
    task = store.add_task(is_recurring=False)
    service = TaskService(store, clock=clock)

    activated = service.activate_task(task.id, 1)

    assert activated.status_id == 12
    assert activated.activated_at == clock()


def test_activate_unknown_task_returns_none(store, clock) -> None:
    assert TaskService(store, clock=clock).activate_task(999, 1) is None


def test_cancel_then_resume(store, clock) -> None:
    task = store.add_task(is_recurring=False)
    service = TaskService(store, clock=clock)

    canceled = service.cancel_task(task.id, 1)
    assert canceled.status_id == 13
    assert canceled.is_canceled
    assert canceled.canceled_at == clock()

    resumed = service.resume_task(task.id, 1)
    assert resumed.status_id == 12
    assert not resumed.is_canceled
    assert resumed.canceled_at is None
    assert resumed.activated_at == clock()


def test_resume_requires_canceled_task(store, clock) -> None:
    task = store.add_task(is_recurring=False)

    with pytest.raises(NotEligibleError):
        TaskService(store, clock=clock).resume_task(task.id, 1)


def test_cancel_without_canceled_status_raises(store, clock) -> None:
    store.statuses = [status for status in store.statuses if status.name != "Canceled"]
    task = store.add_task(is_recurring=False)

    with pytest.raises(StatusNotConfiguredError):
        TaskService(store, clock=clock).cancel_task(task.id, 1)


def test_archived_status_counts_as_canceled(store, clock) -> None:
    store.statuses = [status for status in store.statuses if status.name != "Canceled"]
    store.statuses.append(TaskStatusEntity(id=19, tenant_id=1, name="Archived", rank=9))
    task = store.add_task(is_recurring=False)

    canceled = TaskService(store, clock=clock).cancel_task(task.id, 1)

    assert canceled.status_id == 19


def test_explicit_status_role_wins_over_name(store, clock) -> None:
    store.statuses.append(
        TaskStatusEntity(id=15, tenant_id=1, name="Working", rank=5, role=StatusRole.IN_PROGRESS)
    )
    task = store.add_task(is_recurring=False)

    activated = TaskService(store, clock=clock).activate_task(task.id, 1)

    assert activated.status_id == 15


def test_reject_deletes_pending_instance(store, clock) -> None:
    template = store.add_task()
    instance = _pending(store, template, 6)
    service = TaskService(store, clock=clock)

    assert service.reject_task(instance.id, 1)
    assert instance.id not in store.tasks


def test_delete_refuses_regular_and_approved_tasks(store, clock) -> None:
    template = store.add_task()
    instance = _pending(store, template, 6)
    service = TaskService(store, clock=clock)
    service.approve_task(instance.id, 1)

    assert service.delete_task(template.id, 1) is False
    assert service.delete_task(instance.id, 1) is False
    assert instance.id in store.tasks


def test_list_pending_orders_by_period(store, clock) -> None:
    template = store.add_task()
    june = _pending(store, template, 6)
    april = _pending(store, template, 4)

    pending = TaskService(store, clock=clock).list_pending_approvals(1)

    assert [task.id for task in pending] == [april.id, june.id]


def test_approve_all_pending_leaves_newest_recurring(store, clock) -> None:
    template = store.add_task()
    june = _pending(store, template, 6)
    april = _pending(store, template, 4)
    service = TaskService(store, clock=clock)

    assert service.approve_all_pending(1) == 2

    assert service.list_pending_approvals(1) == []
    [from_april] = store.regular_children(april.id)
    [from_june] = store.regular_children(june.id)
    assert not from_april.is_recurring
    assert from_june.is_recurring
    assert not store.tasks[template.id].is_recurring
