from __future__ import annotations

import pytest

from taskboard.domain.entities import SubtaskEntity
from taskboard.domain.enums import Priority
from taskboard.domain.errors import ValidationError
from taskboard.domain.validation import normalize_priority, validate_subtasks, validate_title


def test_title_is_trimmed() -> None:
    assert validate_title("  Plan trip ") == "Plan trip"


@pytest.mark.parametrize("title", ["", "   ", None, "x" * 201])
def test_bad_titles_are_rejected(title) -> None:
    with pytest.raises(ValidationError):
        validate_title(title)


def test_priority_defaults_only_when_omitted() -> None:
    assert normalize_priority(None) is Priority.MEDIUM
    assert normalize_priority("high") is Priority.HIGH
    assert normalize_priority(Priority.LOW) is Priority.LOW
    with pytest.raises(ValidationError):
        normalize_priority("urgent")
    with pytest.raises(ValidationError):
        normalize_priority("")


def test_subtasks_need_titles_and_unique_ids() -> None:
    cleaned = validate_subtasks([SubtaskEntity(id="a", title=" one ")])
    assert cleaned == (SubtaskEntity(id="a", title="one"),)

    with pytest.raises(ValidationError):
        validate_subtasks([SubtaskEntity(id="a", title=" ")])
    with pytest.raises(ValidationError):
        validate_subtasks([SubtaskEntity(id="a", title="one"), SubtaskEntity(id="a", title="two")])
