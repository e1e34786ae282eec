from __future__ import annotations

from collections import defaultdict
from typing import Iterable, Optional

from .entities import TaskEntity
from .enums import TaskRole
from .periods import end_of_day, is_one_time


class TaskLineage:
    """Id-keyed view over a tenant's template -> instance -> approved chains."""

    def __init__(self, tasks: Iterable[TaskEntity]) -> None:
        self._tasks: dict[int, TaskEntity] = {task.id: task for task in tasks}
        self._children: dict[int, list[int]] = defaultdict(list)
        for task in self._tasks.values():
            if task.parent_task_id is not None:
                self._children[task.parent_task_id].append(task.id)

    def get(self, task_id: int) -> Optional[TaskEntity]:
        return self._tasks.get(task_id)

    def children_of(self, task_id: int) -> list[TaskEntity]:
        return [self._tasks[child_id] for child_id in self._children.get(task_id, [])]

    def regular_children_of(self, task_id: int) -> list[TaskEntity]:
        return [task for task in self.children_of(task_id) if not task.is_auto_generated]

    def instances_of(self, template_id: int) -> list[TaskEntity]:
        return [task for task in self.children_of(template_id) if task.is_auto_generated]

    def siblings_of(self, task: TaskEntity) -> list[TaskEntity]:
        if task.parent_task_id is None:
            return []
        return [sibling for sibling in self.instances_of(task.parent_task_id) if sibling.id != task.id]

    def role_of(self, task: TaskEntity) -> TaskRole:
        if task.is_auto_generated:
            return TaskRole.INSTANCE
        if task.is_recurring:
            return TaskRole.TEMPLATE
        parent = self.get(task.parent_task_id) if task.parent_task_id is not None else None
        if parent is not None and parent.is_auto_generated:
            return TaskRole.APPROVED
        return TaskRole.REGULAR

    def is_latest_period(self, task: TaskEntity) -> bool:
        """True unless a sibling instance covers a strictly later period end."""
        if is_one_time(task.compliance_frequency) or task.parent_task_id is None:
            return True
        if task.compliance_end_date is None:
            return True
        own_end = end_of_day(task.compliance_end_date)
        for sibling in self.siblings_of(task):
            if sibling.compliance_end_date and end_of_day(sibling.compliance_end_date) > own_end:
                return False
        return True
