from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from compliance_engine.domain.entities import TaskEntity, TaskStatusEntity
from compliance_engine.domain.enums import StatusRole
from compliance_engine.domain.errors import NotEligibleError, StatusNotConfiguredError
from compliance_engine.domain.ports import TaskStore
from compliance_engine.domain.statuses import resolve_status

from .approval import ApprovalWorkflow

logger = logging.getLogger(__name__)


class TaskService:
    def __init__(
        self,
        store: TaskStore,
        approval: ApprovalWorkflow | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._store = store
        self._approval = approval or ApprovalWorkflow(store)
        self._clock = clock

    def list_pending_approvals(self, tenant_id: int) -> list[TaskEntity]:
        pending = [
            task
            for task in self._store.get_tasks(tenant_id)
            if task.is_auto_generated and task.needs_approval
        ]
        return sorted(pending, key=lambda task: (task.compliance_start_date or datetime.max, task.id))

    def approve_task(self, task_id: int, tenant_id: int, *, resume: bool = False) -> bool:
        return self._approval.approve_task(task_id, tenant_id, resume=resume)

    def approve_all_pending(self, tenant_id: int) -> int:
        # oldest period first so only the newest one ends up recurring
        approved = 0
        for task in self.list_pending_approvals(tenant_id):
            if self._approval.approve_task(task.id, tenant_id):
                approved += 1
        logger.info("Approved %d pending task(s) for tenant %s", approved, tenant_id)
        return approved

    def activate_task(self, task_id: int, tenant_id: int) -> TaskEntity | None:
        if not self._store.get_task(task_id, tenant_id):
            return None
        status = self._require_status(tenant_id, StatusRole.IN_PROGRESS)
        return self._store.update_task(
            task_id,
            tenant_id,
            {"status_id": status.id, "activated_at": self._clock()},
        )

    def cancel_task(self, task_id: int, tenant_id: int) -> TaskEntity | None:
        task = self._store.get_task(task_id, tenant_id)
        if not task:
            return None
        if task.is_canceled:
            return task
        status = self._require_status(tenant_id, StatusRole.CANCELED)
        return self._store.update_task(
            task_id,
            tenant_id,
            {"status_id": status.id, "is_canceled": True, "canceled_at": self._clock()},
        )

    def resume_task(self, task_id: int, tenant_id: int) -> TaskEntity | None:
        task = self._store.get_task(task_id, tenant_id)
        if not task:
            return None
        if not task.is_canceled:
            raise NotEligibleError(f"Task {task_id} is not canceled")
        status = self._require_status(tenant_id, StatusRole.IN_PROGRESS)
        data = {"status_id": status.id, "is_canceled": False, "canceled_at": None}
        if task.activated_at is None:
            data["activated_at"] = self._clock()
        return self._store.update_task(task_id, tenant_id, data)

    def reject_task(self, task_id: int, tenant_id: int) -> bool:
        rejected = self.delete_task(task_id, tenant_id)
        if rejected:
            logger.info("Rejected auto-generated task %s for tenant %s", task_id, tenant_id)
        return rejected

    def delete_task(self, task_id: int, tenant_id: int) -> bool:
        """Hard-delete an auto-generated task that is still awaiting approval."""
        task = self._store.get_task(task_id, tenant_id)
        if not task or not task.is_auto_generated or not task.needs_approval:
            logger.warning("Task %s for tenant %s is not a pending auto-generated task", task_id, tenant_id)
            return False
        return self._store.delete_task(task_id, tenant_id)

    def _require_status(self, tenant_id: int, role: StatusRole) -> TaskStatusEntity:
        status = resolve_status(self._store.get_task_statuses(tenant_id), role)
        if status is None:
            raise StatusNotConfiguredError(tenant_id, role)
        return status
