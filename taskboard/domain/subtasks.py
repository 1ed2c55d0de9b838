from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime

from .entities import SubtaskEntity, SubtaskProgress, TaskEntity
from .errors import NotFoundError
from .validation import validate_title


def new_subtask_id() -> str:
    return uuid.uuid4().hex


def toggle_subtask(task: TaskEntity, subtask_id: str, now: datetime) -> TaskEntity:
    """Flip one subtask and derive the parent completion from the result.

    A task whose subtasks all become done is completed and stamped with
    ``now``; a completed task that gets an open subtask back is reopened.
    """
    if not any(subtask.id == subtask_id for subtask in task.subtasks):
        raise NotFoundError(f"Subtask {subtask_id} not found on task {task.id}")

    subtasks = tuple(
        replace(subtask, is_completed=not subtask.is_completed)
        if subtask.id == subtask_id
        else subtask
        for subtask in task.subtasks
    )
    updated = replace(task, subtasks=subtasks)

    all_done = all(subtask.is_completed for subtask in subtasks)
    if all_done and not task.is_completed:
        return replace(updated, is_completed=True, completed_at=now)
    if not all_done and task.is_completed:
        return replace(updated, is_completed=False, completed_at=None)
    return updated


# Adding or removing subtasks never recomputes the parent completion state;
# only toggle_subtask does.
def add_subtask(task: TaskEntity, title: str) -> TaskEntity:
    subtask = SubtaskEntity(id=new_subtask_id(), title=validate_title(title))
    return replace(task, subtasks=task.subtasks + (subtask,))


def remove_subtask(task: TaskEntity, subtask_id: str) -> TaskEntity:
    remaining = tuple(subtask for subtask in task.subtasks if subtask.id != subtask_id)
    if len(remaining) == len(task.subtasks):
        raise NotFoundError(f"Subtask {subtask_id} not found on task {task.id}")
    return replace(task, subtasks=remaining)


def subtask_progress(task: TaskEntity) -> SubtaskProgress:
    completed = sum(1 for subtask in task.subtasks if subtask.is_completed)
    return SubtaskProgress(completed=completed, total=len(task.subtasks))
