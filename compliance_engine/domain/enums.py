from __future__ import annotations

from enum import StrEnum


class Frequency(StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    SEMI_ANNUAL = "semi-annual"
    YEARLY = "yearly"
    ONE_TIME = "one-time"


class StatusRole(StrEnum):
    INITIAL = "initial"
    IN_PROGRESS = "in_progress"
    CANCELED = "canceled"


class TaskRole(StrEnum):
    TEMPLATE = "template"
    INSTANCE = "instance"
    APPROVED = "approved"
    REGULAR = "regular"


class SettingKey(StrEnum):
    LEAD_DAYS = "recurring_task_lead_days"
    AUTO_APPROVE = "auto_approve_recurring_tasks"
