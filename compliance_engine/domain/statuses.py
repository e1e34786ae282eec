from __future__ import annotations

from typing import Callable, Iterable, Optional

from .entities import TaskStatusEntity
from .enums import StatusRole


def _is_initial(status: TaskStatusEntity) -> bool:
    return status.rank == 1


def _is_in_progress(status: TaskStatusEntity) -> bool:
    return "progress" in status.name.lower() or status.rank == 2


def _is_canceled(status: TaskStatusEntity) -> bool:
    name = status.name.lower()
    return "cancel" in name or "archived" in name


# Used only for status rows created before the role column existed.
_LEGACY_MATCHERS: dict[StatusRole, Callable[[TaskStatusEntity], bool]] = {
    StatusRole.INITIAL: _is_initial,
    StatusRole.IN_PROGRESS: _is_in_progress,
    StatusRole.CANCELED: _is_canceled,
}


def resolve_status(
    statuses: Iterable[TaskStatusEntity], role: StatusRole
) -> Optional[TaskStatusEntity]:
    """Pick the tenant status that plays ``role``.

    An explicit role wins; untagged rows fall back to the name/rank convention.
    """
    ordered = sorted(statuses, key=lambda status: status.rank)
    for status in ordered:
        if status.role == role:
            return status
    matcher = _LEGACY_MATCHERS[role]
    return next((status for status in ordered if status.role is None and matcher(status)), None)
