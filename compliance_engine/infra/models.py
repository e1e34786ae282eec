from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from .db import Base


def utcnow() -> datetime:
    return datetime.utcnow()


class TenantModel(Base):
    __tablename__ = "tenants"

    id = Column(Integer, primary_key=True)
    name = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)


class TenantSettingModel(Base):
    __tablename__ = "tenant_settings"
    __table_args__ = (UniqueConstraint("tenant_id", "key", name="uq_tenant_settings_tenant_key"),)

    id = Column(Integer, primary_key=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    key = Column(String(100), nullable=False)
    value = Column(Text, nullable=False, default="")
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)


class TaskStatusModel(Base):
    __tablename__ = "task_statuses"
    __table_args__ = (
        UniqueConstraint("tenant_id", "name", name="uq_task_statuses_tenant_name"),
        UniqueConstraint("tenant_id", "rank", name="uq_task_statuses_tenant_rank"),
    )

    id = Column(Integer, primary_key=True)
    tenant_id = Column(Integer, nullable=False, index=True)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    rank = Column(Float, nullable=False)
    role = Column(String(20), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)


class TaskModel(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True)
    tenant_id = Column(Integer, nullable=False, index=True)
    is_admin = Column(Boolean, nullable=False, default=False)
    task_type = Column(String(50), nullable=False, default="Regular")
    client_id = Column(Integer, nullable=True, index=True)
    entity_id = Column(Integer, nullable=True)
    service_type_id = Column(Integer, nullable=True)
    task_category_id = Column(Integer, nullable=True)
    assignee_id = Column(Integer, nullable=False)
    due_date = Column(DateTime, nullable=False)
    status_id = Column(Integer, nullable=False)
    task_details = Column(Text, nullable=True)
    next_to_do = Column(Text, nullable=True)
    parent_task_id = Column(Integer, ForeignKey("tasks.id", ondelete="SET NULL"), nullable=True, index=True)
    is_recurring = Column(Boolean, nullable=False, default=False)
    is_auto_generated = Column(Boolean, nullable=False, default=False)
    needs_approval = Column(Boolean, nullable=False, default=False)
    is_canceled = Column(Boolean, nullable=False, default=False)
    canceled_at = Column(DateTime, nullable=True)
    activated_at = Column(DateTime, nullable=True)
    compliance_frequency = Column(String(50), nullable=True)
    compliance_duration = Column(String(50), nullable=True)
    compliance_year = Column(String(20), nullable=True)
    compliance_start_date = Column(DateTime, nullable=True)
    compliance_end_date = Column(DateTime, nullable=True)
    compliance_period = Column(String(50), nullable=True)
    currency = Column(String(10), nullable=True)
    service_rate = Column(Float, nullable=True)
    invoice_id = Column(Integer, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
