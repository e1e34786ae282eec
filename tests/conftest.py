from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from dataclasses import replace  # noqa: E402
from datetime import datetime  # noqa: E402

import pytest  # noqa: E402

from compliance_engine.domain.entities import TaskEntity, TaskStatusEntity, TenantEntity  # noqa: E402
from compliance_engine.domain.errors import StorageError  # noqa: E402
from compliance_engine.domain.filters import TaskFilters  # noqa: E402

NOW = datetime(2025, 5, 20, 9, 0)


class FakeStore:
    def __init__(self) -> None:
        self.tasks: dict[int, TaskEntity] = {}
        self.statuses: list[TaskStatusEntity] = []
        self.settings: dict[tuple[int, str], str] = {}
        self.tenants: list[TenantEntity] = []
        self.fail_create_for_parent: set[int] = set()
        self._id = 1

    def list_tenants(self) -> list[TenantEntity]:
        return list(self.tenants)

    def get_tasks(self, tenant_id, client_id=None, entity_id=None, is_admin=None) -> list[TaskEntity]:
        filters = TaskFilters(client_id, entity_id, is_admin)
        return [t for t in self.tasks.values() if t.tenant_id == tenant_id and filters.matches(t)]

    def get_task(self, task_id: int, tenant_id: int) -> TaskEntity | None:
        task = self.tasks.get(task_id)
        return task if task and task.tenant_id == tenant_id else None

    def create_task(self, data: dict) -> TaskEntity:
        if data.get("parent_task_id") in self.fail_create_for_parent:
            raise StorageError("insert failed")
        task = TaskEntity(id=self._id, created_at=NOW, updated_at=NOW, **data)
        self.tasks[task.id] = task
        self._id += 1
        return task

    def update_task(self, task_id: int, tenant_id: int, data: dict) -> TaskEntity | None:
        task = self.get_task(task_id, tenant_id)
        if not task:
            return None
        updated = replace(task, **data)
        self.tasks[task_id] = updated
        return updated

    def claim_for_approval(self, task_id: int, tenant_id: int) -> bool:
        task = self.get_task(task_id, tenant_id)
        if not task or not task.is_auto_generated or not task.needs_approval:
            return False
        self.tasks[task_id] = replace(task, needs_approval=False)
        return True

    def delete_task(self, task_id: int, tenant_id: int) -> bool:
        if not self.get_task(task_id, tenant_id):
            return False
        del self.tasks[task_id]
        return True

    def get_task_statuses(self, tenant_id: int) -> list[TaskStatusEntity]:
        return sorted((s for s in self.statuses if s.tenant_id == tenant_id), key=lambda s: s.rank)

    def get_tenant_setting(self, tenant_id: int, key: str) -> str | None:
        return self.settings.get((tenant_id, key))

    def set_tenant_setting(self, tenant_id: int, key: str, value: str) -> None:
        self.settings[(tenant_id, key)] = value

    # test helpers

    def add_tenant(self, tenant_id: int, with_statuses: bool = True) -> None:
        self.tenants.append(TenantEntity(id=tenant_id, name=f"Tenant {tenant_id}"))
        if with_statuses:
            base = tenant_id * 10
            self.statuses.extend([
                TaskStatusEntity(id=base + 1, tenant_id=tenant_id, name="New", rank=1),
                TaskStatusEntity(id=base + 2, tenant_id=tenant_id, name="In Progress", rank=2),
                TaskStatusEntity(id=base + 3, tenant_id=tenant_id, name="Canceled", rank=3),
            ])

    def add_task(self, **overrides) -> TaskEntity:
        data = {
            "tenant_id": 1,
            "assignee_id": 7,
            "due_date": datetime(2025, 5, 25),
            "status_id": 11,
            "client_id": 10,
            "entity_id": 20,
            "service_type_id": 3,
            "task_category_id": 4,
            "task_type": "Regular",
            "task_details": "File monthly sales tax return",
            "currency": "USD",
            "service_rate": 150.0,
            "is_recurring": True,
            "compliance_frequency": "monthly",
        }
        data.update(overrides)
        return self.create_task(data)

    def regular_children(self, task_id: int) -> list[TaskEntity]:
        return [t for t in self.tasks.values() if t.parent_task_id == task_id and not t.is_auto_generated]

    def instances(self) -> list[TaskEntity]:
        return [t for t in self.tasks.values() if t.is_auto_generated]


@pytest.fixture
def store() -> FakeStore:
    fake = FakeStore()
    fake.add_tenant(1)
    return fake


@pytest.fixture
def clock():
    return lambda: NOW
