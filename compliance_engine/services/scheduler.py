from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from compliance_engine.domain.entities import TaskEntity
from compliance_engine.domain.enums import Frequency, SettingKey, StatusRole, TaskRole
from compliance_engine.domain.errors import StatusNotConfiguredError, TaskEngineError
from compliance_engine.domain.lineage import TaskLineage
from compliance_engine.domain.periods import (
    DUE_DATE_OFFSET_DAYS,
    MONTHLY_CUTOFF_DAY,
    CompliancePeriod,
    due_date_for,
    end_of_day,
    next_period,
    parse_frequency,
    period_label,
    start_of_day,
)
from compliance_engine.domain.ports import TaskStore
from compliance_engine.domain.statuses import resolve_status

from .approval import ApprovalWorkflow

logger = logging.getLogger(__name__)

DEFAULT_LEAD_DAYS = 14


def _matches_period(task: TaskEntity, template: TaskEntity, period: CompliancePeriod) -> bool:
    if task.task_category_id != template.task_category_id:
        return False
    if task.service_type_id != template.service_type_id:
        return False
    if task.compliance_start_date is None or task.compliance_end_date is None:
        return False
    if start_of_day(task.compliance_start_date) != period.start:
        return False
    if end_of_day(task.compliance_end_date) != period.end:
        return False
    awaiting_approval = task.is_auto_generated and task.needs_approval
    recurring_regular = not task.is_auto_generated and task.is_recurring
    return awaiting_approval or recurring_regular


class RecurrenceScheduler:
    """Materializes the next compliance period of every recurring template."""

    def __init__(
        self,
        store: TaskStore,
        approval: ApprovalWorkflow | None = None,
        clock: Callable[[], datetime] = datetime.now,
        default_lead_days: int = DEFAULT_LEAD_DAYS,
        due_date_offset_days: int = DUE_DATE_OFFSET_DAYS,
    ) -> None:
        self._store = store
        self._approval = approval or ApprovalWorkflow(store)
        self._clock = clock
        self._default_lead_days = default_lead_days
        self._due_date_offset_days = due_date_offset_days

    def generate_for_all_tenants(self, lead_days_override: int | None = None) -> dict[int, int]:
        """Run generation tenant by tenant; returns created counts per tenant."""
        results: dict[int, int] = {}
        for tenant in self._store.list_tenants():
            try:
                results[tenant.id] = len(self.generate_for_tenant(tenant.id, lead_days_override))
            except Exception:  # noqa: BLE001
                logger.exception("Recurring task generation failed for tenant %s", tenant.id)
        logger.info("Recurring task generation completed for %d tenants", len(results))
        return results

    def generate_for_tenant(
        self, tenant_id: int, lead_days_override: int | None = None
    ) -> list[TaskEntity]:
        lead_days = self._resolve_lead_days(tenant_id, lead_days_override)
        now = self._clock()
        tasks = self._store.get_tasks(tenant_id)
        lineage = TaskLineage(tasks)
        templates = [
            task
            for task in tasks
            if lineage.role_of(task) is TaskRole.TEMPLATE and not task.is_canceled
        ]

        created: list[TaskEntity] = []
        for template in templates:
            try:
                instance = self._process_template(
                    template, lineage, lead_days, lead_days_override, now
                )
            except TaskEngineError as exc:
                logger.error("Skipping recurring task %s for tenant %s: %s", template.id, tenant_id, exc)
                continue
            except Exception:  # noqa: BLE001
                logger.exception("Failed to process recurring task %s for tenant %s", template.id, tenant_id)
                continue
            if instance is not None:
                created.append(instance)

        logger.info("Generated %d recurring task(s) for tenant %s", len(created), tenant_id)
        return created

    def _resolve_lead_days(self, tenant_id: int, override: int | None) -> int:
        if override is not None:
            return override
        raw = self._store.get_tenant_setting(tenant_id, SettingKey.LEAD_DAYS)
        if raw is None or not raw.strip():
            return self._default_lead_days
        try:
            return int(raw)
        except ValueError:
            logger.warning(
                "Invalid lead days %r for tenant %s, using %d", raw, tenant_id, self._default_lead_days
            )
            return self._default_lead_days

    def _auto_approve_enabled(self, tenant_id: int) -> bool:
        raw = self._store.get_tenant_setting(tenant_id, SettingKey.AUTO_APPROVE)
        return raw is not None and raw.strip().lower() == "true"

    def _process_template(
        self,
        template: TaskEntity,
        lineage: TaskLineage,
        lead_days: int,
        lead_days_override: int | None,
        now: datetime,
    ) -> Optional[TaskEntity]:
        if not template.compliance_frequency:
            return None

        recurrence = parse_frequency(template.compliance_frequency, template.compliance_duration)
        if recurrence is not None and recurrence.is_one_time and lineage.instances_of(template.id):
            # a one-time period is anchored on the run date, so it can only be matched by lineage
            logger.debug("One-time task %s already has an instance", template.id)
            return None

        period = next_period(
            template.compliance_frequency, template.compliance_duration, now, today=now
        )
        if period is None:
            logger.warning(
                "Unsupported compliance frequency %r on task %s",
                template.compliance_frequency,
                template.id,
            )
            return None

        if self._period_exists(template, period):
            logger.debug("Period %s already exists for task %s", f"{period.start:%Y-%m-%d}", template.id)
            return None

        due_date = due_date_for(period.end, self._due_date_offset_days)
        if not self._within_lead_time(template, due_date, lead_days, lead_days_override, now):
            return None

        return self._create_instance(template, period, due_date)

    def _period_exists(self, template: TaskEntity, period: CompliancePeriod) -> bool:
        existing = self._store.get_tasks(
            template.tenant_id,
            template.client_id,
            template.entity_id,
            template.is_admin,
        )
        return any(_matches_period(task, template, period) for task in existing)

    @staticmethod
    def _within_lead_time(
        template: TaskEntity,
        due_date: datetime,
        lead_days: int,
        lead_days_override: int | None,
        now: datetime,
    ) -> bool:
        if lead_days_override == 0:
            return True
        recurrence = parse_frequency(template.compliance_frequency, template.compliance_duration)
        if recurrence.frequency is Frequency.MONTHLY and now.day > MONTHLY_CUTOFF_DAY:
            return True
        return now >= due_date - timedelta(days=lead_days)

    def _create_instance(
        self, template: TaskEntity, period: CompliancePeriod, due_date: datetime
    ) -> TaskEntity:
        tenant_id = template.tenant_id
        initial = resolve_status(self._store.get_task_statuses(tenant_id), StatusRole.INITIAL)
        if initial is None:
            raise StatusNotConfiguredError(tenant_id, StatusRole.INITIAL)
        auto_approve = self._auto_approve_enabled(tenant_id)

        label = period_label(
            period.start, period.end, template.compliance_frequency, template.compliance_duration
        )
        instance = self._store.create_task(
            {
                "tenant_id": tenant_id,
                "is_admin": template.is_admin,
                "task_type": template.task_type,
                "client_id": template.client_id,
                "entity_id": template.entity_id,
                "service_type_id": template.service_type_id,
                "task_category_id": template.task_category_id,
                "assignee_id": template.assignee_id,
                "due_date": due_date,
                "status_id": initial.id,
                "task_details": template.task_details,
                "next_to_do": template.next_to_do,
                "parent_task_id": template.id,
                "is_recurring": False,
                "is_auto_generated": True,
                "needs_approval": True,
                "compliance_frequency": template.compliance_frequency,
                "compliance_duration": template.compliance_duration,
                "compliance_year": period.year,
                "compliance_start_date": period.start,
                "compliance_end_date": period.end,
                "compliance_period": label,
                "currency": template.currency,
                "service_rate": template.service_rate,
            }
        )
        logger.info(
            "Created recurring task instance %s from task %s for %s (%s to %s)",
            instance.id,
            template.id,
            label,
            f"{period.start:%Y-%m-%d}",
            f"{period.end:%Y-%m-%d}",
        )

        if auto_approve:
            if not self._approval.approve_task(instance.id, tenant_id):
                logger.warning("Auto-approval of task %s did not complete", instance.id)
            instance = self._store.get_task(instance.id, tenant_id) or instance
        return instance
