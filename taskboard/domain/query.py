from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from .clock import as_local
from .entities import TaskEntity
from .enums import TaskFilter, TaskSort
from .filters import TaskFilters


def _apply_filter(tasks: list[TaskEntity], filter_key: str) -> list[TaskEntity]:
    if filter_key == TaskFilter.COMPLETED.value:
        return [task for task in tasks if task.is_completed]
    if filter_key == TaskFilter.PENDING.value:
        return [task for task in tasks if not task.is_completed]
    return tasks


def _apply_search(tasks: list[TaskEntity], search: str | None) -> list[TaskEntity]:
    needle = (search or "").lower()
    if not needle:
        return tasks
    return [
        task
        for task in tasks
        if needle in task.title.lower() or needle in (task.description or "").lower()
    ]


def _apply_due_on(tasks: list[TaskEntity], due_on: Optional[date]) -> list[TaskEntity]:
    if due_on is None:
        return tasks
    return [
        task for task in tasks if task.due_date is not None and as_local(task.due_date).date() == due_on
    ]


def _apply_sort(tasks: list[TaskEntity], sort_key: str) -> list[TaskEntity]:
    if sort_key == TaskSort.DATE_ASC.value:
        return sorted(tasks, key=lambda task: as_local(task.created_at))

    if sort_key in (TaskSort.DUE_DATE_ASC.value, TaskSort.DUE_DATE_DESC.value):
        dated = [task for task in tasks if task.due_date is not None]
        undated = [task for task in tasks if task.due_date is None]
        dated.sort(
            key=lambda task: as_local(task.due_date),
            reverse=sort_key == TaskSort.DUE_DATE_DESC.value,
        )
        # Tasks without a due date trail in both directions.
        return dated + undated

    return sorted(tasks, key=lambda task: as_local(task.created_at), reverse=True)


def render_tasks(
    tasks: Iterable[TaskEntity],
    filter_key: str = TaskFilter.ALL.value,
    sort_key: str = TaskSort.DATE_DESC.value,
    search: str | None = "",
    due_on: Optional[date] = None,
) -> list[TaskEntity]:
    """Produce the ordered task list for the given view state.

    Filter, search and due-day selection are applied first, then the sort.
    Unknown filter keys keep every task and unknown sort keys fall back to
    newest first. The input is never mutated; a new list is returned.
    """
    result = list(tasks)
    result = _apply_filter(result, filter_key)
    result = _apply_search(result, search)
    result = _apply_due_on(result, due_on)
    return _apply_sort(result, sort_key)


def render_view(tasks: Iterable[TaskEntity], filters: TaskFilters) -> list[TaskEntity]:
    return render_tasks(
        tasks,
        filter_key=filters.filter_key,
        sort_key=filters.sort_key,
        search=filters.search,
        due_on=filters.due_on,
    )


def group_by_due_date(tasks: Iterable[TaskEntity]) -> dict[date, list[TaskEntity]]:
    grouped: dict[date, list[TaskEntity]] = {}
    for task in tasks:
        if task.due_date is None:
            continue
        grouped.setdefault(as_local(task.due_date).date(), []).append(task)
    return dict(sorted(grouped.items()))
