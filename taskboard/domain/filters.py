from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from .enums import TaskFilter, TaskSort


@dataclass(frozen=True)
class TaskFilters:
    filter_key: str = TaskFilter.ALL.value
    sort_key: str = TaskSort.DATE_DESC.value
    search: str | None = None
    due_on: Optional[date] = None
