from __future__ import annotations

from enum import StrEnum


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskFilter(StrEnum):
    ALL = "all"
    COMPLETED = "completed"
    PENDING = "pending"


class TaskSort(StrEnum):
    DATE_ASC = "date-asc"
    DATE_DESC = "date-desc"
    DUE_DATE_ASC = "due-date-asc"
    DUE_DATE_DESC = "due-date-desc"
