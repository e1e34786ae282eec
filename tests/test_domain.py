from __future__ import annotations

from datetime import datetime

from compliance_engine.domain.entities import TaskStatusEntity
from compliance_engine.domain.enums import StatusRole, TaskRole
from compliance_engine.domain.lineage import TaskLineage
from compliance_engine.domain.statuses import resolve_status


def _status(status_id: int, name: str, rank: float, role: StatusRole | None = None) -> TaskStatusEntity:
    return TaskStatusEntity(id=status_id, tenant_id=1, name=name, rank=rank, role=role)


def test_resolve_status_legacy_conventions() -> None:
    statuses = [
        _status(3, "Cancelled", 4),
        _status(2, "Work in progress", 3),
        _status(1, "New", 1),
        _status(4, "Review", 2),
    ]

    assert resolve_status(statuses, StatusRole.INITIAL).id == 1
    assert resolve_status(statuses, StatusRole.IN_PROGRESS).id == 4
    assert resolve_status(statuses, StatusRole.CANCELED).id == 3


def test_resolve_status_ignores_rows_tagged_with_other_roles() -> None:
    statuses = [
        _status(1, "Open", 1, StatusRole.INITIAL),
        _status(2, "Waiting", 2, StatusRole.CANCELED),
        _status(3, "Doing", 3, StatusRole.IN_PROGRESS),
    ]

    assert resolve_status(statuses, StatusRole.IN_PROGRESS).id == 3
    assert resolve_status(statuses, StatusRole.CANCELED).id == 2


def test_resolve_status_missing_returns_none() -> None:
    assert resolve_status([_status(1, "New", 1)], StatusRole.CANCELED) is None


def test_lineage_roles_and_latest_period(store) -> None:
    template = store.add_task()
    older = store.add_task(
        parent_task_id=template.id,
        is_recurring=False,
        is_auto_generated=True,
        needs_approval=True,
        compliance_end_date=datetime(2025, 5, 31, 23, 59, 59, 999000),
    )
    newer = store.add_task(
        parent_task_id=template.id,
        is_recurring=False,
        is_auto_generated=True,
        needs_approval=True,
        compliance_end_date=datetime(2025, 6, 30),
    )
    approved = store.add_task(parent_task_id=older.id, is_recurring=False)
    loose = store.add_task(is_recurring=False)

    lineage = TaskLineage(store.get_tasks(1))

    assert lineage.role_of(template) is TaskRole.TEMPLATE
    assert lineage.role_of(older) is TaskRole.INSTANCE
    assert lineage.role_of(approved) is TaskRole.APPROVED
    assert lineage.role_of(loose) is TaskRole.REGULAR
    assert [t.id for t in lineage.siblings_of(older)] == [newer.id]
    assert [t.id for t in lineage.regular_children_of(older.id)] == [approved.id]
    assert not lineage.is_latest_period(older)
    assert lineage.is_latest_period(newer)


def test_child_of_regular_task_is_not_an_approved_task(store) -> None:
    parent = store.add_task(is_recurring=False)
    follow_up = store.add_task(parent_task_id=parent.id, is_recurring=False)

    lineage = TaskLineage(store.get_tasks(1))

    assert lineage.role_of(follow_up) is TaskRole.REGULAR
