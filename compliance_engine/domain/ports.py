from __future__ import annotations

from typing import Optional, Protocol

from .entities import TaskEntity, TaskStatusEntity, TenantEntity


class TaskStore(Protocol):
    """Storage the engine reads and writes through.

    Every call is scoped by tenant. Adapters raise ``StorageError`` on
    database failures and must give read-your-writes consistency between
    consecutive calls.
    """

    def list_tenants(self) -> list[TenantEntity]: ...

    def get_tasks(
        self,
        tenant_id: int,
        client_id: int | None = None,
        entity_id: int | None = None,
        is_admin: bool | None = None,
    ) -> list[TaskEntity]: ...

    def get_task(self, task_id: int, tenant_id: int) -> Optional[TaskEntity]: ...

    def create_task(self, data: dict) -> TaskEntity: ...

    def update_task(self, task_id: int, tenant_id: int, data: dict) -> Optional[TaskEntity]: ...

    def claim_for_approval(self, task_id: int, tenant_id: int) -> bool:
        """Flip ``needs_approval`` from true to false in one conditional write.

        Returns True only for the caller whose write changed the row.
        """
        ...

    def delete_task(self, task_id: int, tenant_id: int) -> bool: ...

    def get_task_statuses(self, tenant_id: int) -> list[TaskStatusEntity]: ...

    def get_tenant_setting(self, tenant_id: int, key: str) -> Optional[str]: ...

    def set_tenant_setting(self, tenant_id: int, key: str, value: str) -> None: ...
