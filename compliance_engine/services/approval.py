"""Approval of auto-generated recurring task instances.

Approving an instance creates exactly one regular task for its compliance
period. When the instance covers the latest period generated from its
template, the new regular task becomes the recurrence source and the template
stops recurring.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from compliance_engine.domain.entities import TaskEntity
from compliance_engine.domain.errors import (
    MissingRequiredFieldsError,
    NotEligibleError,
    TaskEngineError,
    TaskNotFoundError,
)
from compliance_engine.domain.lineage import TaskLineage
from compliance_engine.domain.periods import end_of_day, is_one_time, period_from_start, period_label
from compliance_engine.domain.ports import TaskStore

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("tenant_id", "assignee_id", "due_date", "status_id")

_COPIED_FIELDS = (
    "tenant_id",
    "is_admin",
    "client_id",
    "entity_id",
    "service_type_id",
    "task_category_id",
    "assignee_id",
    "due_date",
    "status_id",
    "compliance_frequency",
    "compliance_duration",
    "compliance_year",
    "currency",
    "service_rate",
    "invoice_id",
)


class ApprovalWorkflow:
    def __init__(self, store: TaskStore) -> None:
        self._store = store

    def approve_task(self, task_id: int, tenant_id: int, *, resume: bool = False) -> bool:
        """Approve an auto-generated task; returns False when it cannot be approved.

        A second call for an already approved task is a no-op that returns True.
        ``resume`` re-runs an approval whose earlier attempt locked the task but
        failed before the regular task was written.
        """
        try:
            self.approve(task_id, tenant_id, resume=resume)
        except TaskEngineError as exc:
            logger.error("Approval of task %s for tenant %s failed: %s", task_id, tenant_id, exc)
            return False
        return True

    def approve(self, task_id: int, tenant_id: int, *, resume: bool = False) -> Optional[TaskEntity]:
        """Raising variant of ``approve_task``.

        Returns the created regular task, or None when one already existed.
        """
        task = self._store.get_task(task_id, tenant_id)
        if task is None:
            raise TaskNotFoundError(task_id, tenant_id)
        if not task.is_auto_generated:
            raise NotEligibleError(f"Task {task_id} is not auto-generated")

        logger.info(
            "Approving task %s: %s | client %s | %s",
            task_id,
            task.task_type,
            task.client_id,
            task.compliance_period or "no period",
        )

        claimed = task.needs_approval and self._store.claim_for_approval(task_id, tenant_id)

        lineage = TaskLineage(self._store.get_tasks(tenant_id))
        existing = lineage.regular_children_of(task_id)
        if existing:
            logger.info("Task %s already approved as task %s, nothing to create", task_id, existing[0].id)
            return None
        if not claimed:
            if not resume:
                raise NotEligibleError(
                    f"Task {task_id} is locked by another approval or an earlier approval did not finish"
                )
            logger.warning("Resuming interrupted approval of task %s", task_id)

        source = lineage.get(task_id) or task
        is_latest = lineage.is_latest_period(source)
        one_time = is_one_time(source.compliance_frequency)
        logger.debug("Task %s latest period: %s", task_id, is_latest)

        missing = [field for field in REQUIRED_FIELDS if getattr(source, field) is None]
        if missing:
            raise MissingRequiredFieldsError(task_id, missing)

        start, end, label = self._authoritative_period(source)
        data = {field: getattr(source, field) for field in _COPIED_FIELDS}
        data.update(
            {
                "task_type": source.task_type or "Regular",
                "task_details": source.task_details or "",
                "next_to_do": source.next_to_do or "",
                "parent_task_id": source.id,
                "is_auto_generated": False,
                "needs_approval": False,
                "is_recurring": is_latest and not one_time,
                "compliance_start_date": start,
                "compliance_end_date": end,
                "compliance_period": label,
            }
        )
        created = self._store.create_task(data)
        logger.info(
            "Created regular task %s from task %s (recurring=%s)",
            created.id,
            task_id,
            created.is_recurring,
        )

        if is_latest and source.parent_task_id is not None:
            self._store.update_task(source.parent_task_id, tenant_id, {"is_recurring": False})
            logger.info("Recurrence moved from task %s to task %s", source.parent_task_id, created.id)

        return created

    @staticmethod
    def _authoritative_period(
        task: TaskEntity,
    ) -> tuple[Optional[datetime], Optional[datetime], Optional[str]]:
        if task.compliance_start_date and task.compliance_frequency:
            period = period_from_start(
                task.compliance_frequency, task.compliance_duration, task.compliance_start_date
            )
            if period is not None:
                label = period_label(
                    period.start, period.end, task.compliance_frequency, task.compliance_duration
                )
                return period.start, period.end, label

        logger.debug("Keeping stored compliance dates for task %s", task.id)
        end = end_of_day(task.compliance_end_date) if task.compliance_end_date else None
        return task.compliance_start_date, end, task.compliance_period
