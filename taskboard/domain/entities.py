from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from .enums import Priority


class _Unset(Enum):
    UNSET = "unset"

    def __repr__(self) -> str:
        return "UNSET"


UNSET = _Unset.UNSET


@dataclass(frozen=True)
class SubtaskEntity:
    id: str
    title: str
    is_completed: bool = False


@dataclass(frozen=True)
class TaskEntity:
    id: str
    owner_id: str
    title: str
    description: str
    is_completed: bool
    created_at: datetime
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    priority: Priority = Priority.MEDIUM
    subtasks: tuple[SubtaskEntity, ...] = ()


@dataclass(frozen=True)
class TaskUpdate:
    """Partial update of the user-editable task fields.

    Fields left as ``UNSET`` are not touched; ``due_date=None`` clears the
    due date.
    """

    title: str | _Unset = UNSET
    description: str | _Unset = UNSET
    is_completed: bool | _Unset = UNSET
    due_date: Optional[datetime] | _Unset = UNSET
    priority: Priority | str | _Unset = UNSET
    subtasks: tuple[SubtaskEntity, ...] | _Unset = UNSET

    def changes(self) -> dict[str, Any]:
        return {
            name: value
            for name, value in (
                ("title", self.title),
                ("description", self.description),
                ("is_completed", self.is_completed),
                ("due_date", self.due_date),
                ("priority", self.priority),
                ("subtasks", self.subtasks),
            )
            if value is not UNSET
        }


@dataclass(frozen=True)
class SubtaskProgress:
    completed: int
    total: int

    @property
    def percent(self) -> float:
        if not self.total:
            return 0.0
        return self.completed / self.total * 100


@dataclass(frozen=True)
class CompletionBucket:
    label: str
    on_time: int = 0
    late: int = 0

    @property
    def total(self) -> int:
        return self.on_time + self.late


@dataclass(frozen=True)
class TaskMetrics:
    total_count: int
    completed_count: int
    completion_rate: float
    on_time_rate: float
    overdue_count: int
    weekly: list[CompletionBucket] = field(default_factory=list)
    monthly: list[CompletionBucket] = field(default_factory=list)
