from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from compliance_engine.domain.entities import TaskEntity, TaskStatusEntity, TenantEntity
from compliance_engine.domain.enums import StatusRole
from compliance_engine.domain.errors import StorageError
from compliance_engine.domain.filters import TaskFilters

from .db import SessionLocal
from .models import TaskModel, TaskStatusModel, TenantModel, TenantSettingModel, utcnow

_TASK_FIELDS = tuple(column.name for column in TaskModel.__table__.columns)


def _to_entity(model: TaskModel) -> TaskEntity:
    return TaskEntity(**{field: getattr(model, field) for field in _TASK_FIELDS})


def _to_status(model: TaskStatusModel) -> TaskStatusEntity:
    return TaskStatusEntity(
        id=model.id,
        tenant_id=model.tenant_id,
        name=model.name,
        rank=model.rank,
        role=StatusRole(model.role) if model.role else None,
        description=model.description,
    )


def _to_tenant(model: TenantModel) -> TenantEntity:
    return TenantEntity(id=model.id, name=model.name, created_at=model.created_at)


def _apply_filters(stmt, filters: TaskFilters) -> object:
    if filters.client_id is not None:
        stmt = stmt.where(TaskModel.client_id == filters.client_id)
    if filters.entity_id is not None:
        stmt = stmt.where(TaskModel.entity_id == filters.entity_id)
    if filters.is_admin is not None:
        stmt = stmt.where(TaskModel.is_admin.is_(filters.is_admin))
    return stmt


class TaskRepository:
    """SQLAlchemy implementation of the ``TaskStore`` port.

    Each call runs in its own session and commits its own unit of work.
    """

    def __init__(self, session_factory: sessionmaker | None = None) -> None:
        self._session_factory = session_factory or SessionLocal

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as exc:
            session.rollback()
            raise StorageError(str(exc)) from exc
        finally:
            session.close()

    def list_tenants(self) -> list[TenantEntity]:
        with self._session() as session:
            stmt = select(TenantModel).order_by(TenantModel.id.asc())
            return [_to_tenant(tenant) for tenant in session.scalars(stmt)]

    def create_tenant(self, name: str) -> TenantEntity:
        with self._session() as session:
            tenant = TenantModel(name=name)
            session.add(tenant)
            session.commit()
            session.refresh(tenant)
            return _to_tenant(tenant)

    def get_tasks(
        self,
        tenant_id: int,
        client_id: int | None = None,
        entity_id: int | None = None,
        is_admin: bool | None = None,
    ) -> list[TaskEntity]:
        with self._session() as session:
            stmt = select(TaskModel).where(TaskModel.tenant_id == tenant_id)
            stmt = _apply_filters(stmt, TaskFilters(client_id, entity_id, is_admin))
            stmt = stmt.order_by(TaskModel.id.asc())
            return [_to_entity(task) for task in session.scalars(stmt)]

    def get_task(self, task_id: int, tenant_id: int) -> Optional[TaskEntity]:
        with self._session() as session:
            task = self._scoped(session, task_id, tenant_id)
            return _to_entity(task) if task else None

    def create_task(self, data: dict) -> TaskEntity:
        with self._session() as session:
            task = TaskModel(**data)
            session.add(task)
            session.commit()
            session.refresh(task)
            return _to_entity(task)

    def update_task(self, task_id: int, tenant_id: int, data: dict) -> Optional[TaskEntity]:
        with self._session() as session:
            task = self._scoped(session, task_id, tenant_id)
            if not task:
                return None
            for key, value in data.items():
                setattr(task, key, value)
            session.commit()
            session.refresh(task)
            return _to_entity(task)

    def claim_for_approval(self, task_id: int, tenant_id: int) -> bool:
        with self._session() as session:
            result = session.execute(
                update(TaskModel)
                .where(
                    TaskModel.id == task_id,
                    TaskModel.tenant_id == tenant_id,
                    TaskModel.is_auto_generated.is_(True),
                    TaskModel.needs_approval.is_(True),
                )
                .values(needs_approval=False, updated_at=utcnow())
                .execution_options(synchronize_session=False)
            )
            session.commit()
            return result.rowcount == 1

    def delete_task(self, task_id: int, tenant_id: int) -> bool:
        with self._session() as session:
            task = self._scoped(session, task_id, tenant_id)
            if not task:
                return False
            session.delete(task)
            session.commit()
            return True

    def get_task_statuses(self, tenant_id: int) -> list[TaskStatusEntity]:
        with self._session() as session:
            stmt = (
                select(TaskStatusModel)
                .where(TaskStatusModel.tenant_id == tenant_id)
                .order_by(TaskStatusModel.rank.asc())
            )
            return [_to_status(status) for status in session.scalars(stmt)]

    def create_task_status(
        self,
        tenant_id: int,
        name: str,
        rank: float,
        role: StatusRole | None = None,
        description: str | None = None,
    ) -> TaskStatusEntity:
        with self._session() as session:
            status = TaskStatusModel(
                tenant_id=tenant_id,
                name=name,
                rank=rank,
                role=role.value if role else None,
                description=description,
            )
            session.add(status)
            session.commit()
            session.refresh(status)
            return _to_status(status)

    def get_tenant_setting(self, tenant_id: int, key: str) -> Optional[str]:
        with self._session() as session:
            return session.scalar(
                select(TenantSettingModel.value).where(
                    TenantSettingModel.tenant_id == tenant_id,
                    TenantSettingModel.key == str(key),
                )
            )

    def set_tenant_setting(self, tenant_id: int, key: str, value: str) -> None:
        with self._session() as session:
            setting = session.scalar(
                select(TenantSettingModel).where(
                    TenantSettingModel.tenant_id == tenant_id,
                    TenantSettingModel.key == str(key),
                )
            )
            if setting is None:
                session.add(TenantSettingModel(tenant_id=tenant_id, key=str(key), value=value))
            else:
                setting.value = value
            session.commit()

    @staticmethod
    def _scoped(session: Session, task_id: int, tenant_id: int) -> Optional[TaskModel]:
        return session.scalar(
            select(TaskModel).where(TaskModel.id == task_id, TaskModel.tenant_id == tenant_id)
        )
