from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .enums import StatusRole


@dataclass(frozen=True)
class TaskEntity:
    id: int
    tenant_id: int
    assignee_id: int | None
    due_date: Optional[datetime]
    status_id: int | None
    task_type: str = "Regular"
    is_admin: bool = False
    client_id: int | None = None
    entity_id: int | None = None
    service_type_id: int | None = None
    task_category_id: int | None = None
    task_details: str | None = None
    next_to_do: str | None = None
    parent_task_id: int | None = None
    is_recurring: bool = False
    is_auto_generated: bool = False
    needs_approval: bool = False
    is_canceled: bool = False
    canceled_at: Optional[datetime] = None
    activated_at: Optional[datetime] = None
    compliance_frequency: str | None = None
    compliance_duration: str | None = None
    compliance_year: str | None = None
    compliance_start_date: Optional[datetime] = None
    compliance_end_date: Optional[datetime] = None
    compliance_period: str | None = None
    currency: str | None = None
    service_rate: float | None = None
    invoice_id: int | None = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class TaskStatusEntity:
    id: int
    tenant_id: int
    name: str
    rank: float
    role: StatusRole | None = None
    description: str | None = None


@dataclass(frozen=True)
class TenantEntity:
    id: int
    name: str
    created_at: Optional[datetime] = None
