from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Iterable, Optional, Protocol

from taskboard.domain.analytics import analyze_tasks
from taskboard.domain.clock import Clock, local_now
from taskboard.domain.entities import SubtaskEntity, TaskEntity, TaskMetrics, TaskUpdate
from taskboard.domain.enums import Priority
from taskboard.domain.errors import ForbiddenError, NotFoundError
from taskboard.domain.filters import TaskFilters
from taskboard.domain.query import group_by_due_date, render_view
from taskboard.domain.subtasks import add_subtask, new_subtask_id, remove_subtask, toggle_subtask
from taskboard.domain.validation import normalize_priority, validate_subtasks, validate_title

logger = logging.getLogger(__name__)


class TaskStore(Protocol):
    def list_tasks(self, owner_id: str) -> list[TaskEntity]: ...

    def get_task(self, task_id: str) -> TaskEntity | None: ...

    def create_task(self, owner_id: str, data: dict[str, Any]) -> TaskEntity: ...

    def update_task(self, task_id: str, data: dict[str, Any]) -> TaskEntity | None: ...

    def delete_task(self, task_id: str) -> bool: ...


class TaskService:
    """Owner-scoped task use cases.

    Every method takes the resolved owner id first; tasks that belong to a
    different owner raise ``ForbiddenError``.
    """

    def __init__(self, repo: TaskStore, clock: Clock = local_now) -> None:
        self._repo = repo
        self._clock = clock

    def list_tasks(self, owner_id: str, filters: TaskFilters | None = None) -> list[TaskEntity]:
        return render_view(self._repo.list_tasks(owner_id), filters or TaskFilters())

    def get_task(self, owner_id: str, task_id: str) -> TaskEntity:
        task = self._repo.get_task(task_id)
        if task is None:
            raise NotFoundError(f"Task {task_id} not found")
        if task.owner_id != owner_id:
            logger.warning("Owner %s tried to access task %s", owner_id, task_id)
            raise ForbiddenError(f"Task {task_id} belongs to another user")
        return task

    def create_task(
        self,
        owner_id: str,
        title: str,
        description: str = "",
        due_date: Optional[datetime] = None,
        priority: Priority | str | None = None,
        subtask_titles: Iterable[str] = (),
    ) -> TaskEntity:
        subtasks = validate_subtasks(
            SubtaskEntity(id=new_subtask_id(), title=subtask_title) for subtask_title in subtask_titles
        )
        task = self._repo.create_task(
            owner_id,
            {
                "title": validate_title(title),
                "description": description or "",
                "is_completed": False,
                "due_date": due_date,
                "completed_at": None,
                "priority": normalize_priority(priority),
                "subtasks": subtasks,
                "created_at": self._clock(),
            },
        )
        logger.info("Created task %s for owner %s", task.id, owner_id)
        return task

    def update_task(self, owner_id: str, task_id: str, update: TaskUpdate) -> TaskEntity:
        current = self.get_task(owner_id, task_id)
        changes = update.changes()

        if "title" in changes:
            changes["title"] = validate_title(changes["title"])
        if "description" in changes:
            changes["description"] = changes["description"] or ""
        if "priority" in changes:
            changes["priority"] = normalize_priority(changes["priority"])
        if "subtasks" in changes:
            changes["subtasks"] = validate_subtasks(changes["subtasks"])
        if "is_completed" in changes:
            changes["is_completed"] = bool(changes["is_completed"])
            if changes["is_completed"] and not current.is_completed:
                changes["completed_at"] = self._clock()
            elif not changes["is_completed"]:
                changes["completed_at"] = None

        return self._save(task_id, changes)

    def toggle_completion(self, owner_id: str, task_id: str) -> TaskEntity:
        current = self.get_task(owner_id, task_id)
        return self.update_task(owner_id, task_id, TaskUpdate(is_completed=not current.is_completed))

    def toggle_subtask(self, owner_id: str, task_id: str, subtask_id: str) -> TaskEntity:
        current = self.get_task(owner_id, task_id)
        updated = toggle_subtask(current, subtask_id, self._clock())
        if updated.is_completed != current.is_completed:
            logger.info(
                "Task %s %s by subtask %s",
                task_id,
                "completed" if updated.is_completed else "reopened",
                subtask_id,
            )
        return self._save(
            task_id,
            {
                "subtasks": updated.subtasks,
                "is_completed": updated.is_completed,
                "completed_at": updated.completed_at,
            },
        )

    def add_subtask(self, owner_id: str, task_id: str, title: str) -> TaskEntity:
        updated = add_subtask(self.get_task(owner_id, task_id), title)
        return self._save(task_id, {"subtasks": updated.subtasks})

    def remove_subtask(self, owner_id: str, task_id: str, subtask_id: str) -> TaskEntity:
        updated = remove_subtask(self.get_task(owner_id, task_id), subtask_id)
        return self._save(task_id, {"subtasks": updated.subtasks})

    def delete_task(self, owner_id: str, task_id: str) -> None:
        self.get_task(owner_id, task_id)
        if not self._repo.delete_task(task_id):
            raise NotFoundError(f"Task {task_id} not found")
        logger.info("Deleted task %s", task_id)

    def get_analytics(self, owner_id: str) -> TaskMetrics | None:
        return analyze_tasks(self._repo.list_tasks(owner_id), self._clock())

    def get_calendar(self, owner_id: str) -> dict[date, list[TaskEntity]]:
        return group_by_due_date(self._repo.list_tasks(owner_id))

    def _save(self, task_id: str, changes: dict[str, Any]) -> TaskEntity:
        task = self._repo.update_task(task_id, changes)
        if task is None:
            raise NotFoundError(f"Task {task_id} not found")
        return task
