from __future__ import annotations


class TaskEngineError(Exception):
    """Base class for errors raised by the recurring task engine."""


class TaskNotFoundError(TaskEngineError):
    def __init__(self, task_id: int, tenant_id: int) -> None:
        super().__init__(f"Task {task_id} not found for tenant {tenant_id}")
        self.task_id = task_id
        self.tenant_id = tenant_id


class NotEligibleError(TaskEngineError):
    """The task exists but is not in a state that allows the operation."""


class StatusNotConfiguredError(TaskEngineError):
    def __init__(self, tenant_id: int, role: str) -> None:
        super().__init__(f"No '{role}' task status configured for tenant {tenant_id}")
        self.tenant_id = tenant_id
        self.role = role


class MissingRequiredFieldsError(TaskEngineError):
    def __init__(self, task_id: int | None, fields: list[str]) -> None:
        super().__init__(f"Task {task_id} is missing required fields: {', '.join(fields)}")
        self.task_id = task_id
        self.fields = fields


class StorageError(TaskEngineError):
    """Raised by store adapters when the underlying database call fails."""
