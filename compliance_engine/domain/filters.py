from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TaskFilters:
    """Client/entity/admin scope applied on top of the tenant boundary."""

    client_id: int | None = None
    entity_id: int | None = None
    is_admin: bool | None = None

    def matches(self, task) -> bool:
        if self.client_id is not None and task.client_id != self.client_id:
            return False
        if self.entity_id is not None and task.entity_id != self.entity_id:
            return False
        if self.is_admin is not None and task.is_admin != self.is_admin:
            return False
        return True
