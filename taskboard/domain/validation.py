from __future__ import annotations

from typing import Iterable

from .entities import SubtaskEntity
from .enums import Priority
from .errors import ValidationError

MAX_TITLE_LENGTH = 200


def validate_title(title: str | None) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationError("Title must not be empty")
    if len(cleaned) > MAX_TITLE_LENGTH:
        raise ValidationError(f"Title must be at most {MAX_TITLE_LENGTH} characters")
    return cleaned


def normalize_priority(value: Priority | str | None) -> Priority:
    # The default only applies when the value is omitted.
    if value is None:
        return Priority.MEDIUM
    if isinstance(value, Priority):
        return value
    try:
        return Priority(value)
    except ValueError:
        allowed = ", ".join(p.value for p in Priority)
        raise ValidationError(f"Invalid priority {value!r}; expected one of: {allowed}") from None


def validate_subtasks(subtasks: Iterable[SubtaskEntity]) -> tuple[SubtaskEntity, ...]:
    cleaned: list[SubtaskEntity] = []
    seen: set[str] = set()
    for subtask in subtasks:
        if subtask.id in seen:
            raise ValidationError(f"Duplicate subtask id {subtask.id!r}")
        seen.add(subtask.id)
        cleaned.append(
            SubtaskEntity(
                id=subtask.id,
                title=validate_title(subtask.title),
                is_completed=bool(subtask.is_completed),
            )
        )
    return tuple(cleaned)
