from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from taskboard.domain.entities import SubtaskEntity, TaskUpdate
from taskboard.domain.enums import Priority
from taskboard.domain.errors import ForbiddenError, NotFoundError, ValidationError
from taskboard.domain.filters import TaskFilters
from taskboard.services.task_service import TaskService

from tests.fakes import FakeClock, FakeRepo


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 6, 3, 9, 0))


@pytest.fixture()
def repo() -> FakeRepo:
    return FakeRepo()


@pytest.fixture()
def service(repo: FakeRepo, clock: FakeClock) -> TaskService:
    return TaskService(repo, clock=clock)


def test_create_task_applies_defaults(service: TaskService, clock: FakeClock) -> None:
    task = service.create_task("alice", "  Write tests ", subtask_titles=["one", "two"])

    assert task.title == "Write tests"
    assert task.priority is Priority.MEDIUM
    assert task.is_completed is False
    assert task.completed_at is None
    assert task.created_at == clock.now
    assert [s.title for s in task.subtasks] == ["one", "two"]
    assert len({s.id for s in task.subtasks}) == 2


def test_create_task_rejects_invalid_input(service: TaskService) -> None:
    with pytest.raises(ValidationError):
        service.create_task("alice", "   ")
    with pytest.raises(ValidationError):
        service.create_task("alice", "Title", priority="urgent")
    with pytest.raises(ValidationError):
        service.create_task("alice", "Title", subtask_titles=[""])


def test_other_owner_is_forbidden(service: TaskService) -> None:
    task = service.create_task("alice", "Private")

    with pytest.raises(ForbiddenError):
        service.get_task("bob", task.id)
    with pytest.raises(ForbiddenError):
        service.update_task("bob", task.id, TaskUpdate(title="Mine now"))
    with pytest.raises(ForbiddenError):
        service.delete_task("bob", task.id)


def test_missing_task_is_not_found(service: TaskService) -> None:
    with pytest.raises(NotFoundError):
        service.get_task("alice", "nope")
    with pytest.raises(NotFoundError):
        service.toggle_completion("alice", "nope")


def test_list_tasks_is_scoped_and_rendered(service: TaskService, clock: FakeClock) -> None:
    first = service.create_task("alice", "Groceries")
    clock.advance(hours=1)
    second = service.create_task("alice", "Taxes", description="file the return")
    service.create_task("bob", "Groceries for bob")
    service.toggle_completion("alice", first.id)

    assert [t.id for t in service.list_tasks("alice")] == [second.id, first.id]
    pending = service.list_tasks("alice", TaskFilters(filter_key="pending"))
    assert [t.id for t in pending] == [second.id]
    found = service.list_tasks("alice", TaskFilters(search="RETURN"))
    assert [t.id for t in found] == [second.id]


def test_toggle_completion_stamps_and_clears_timestamp(service: TaskService, clock: FakeClock) -> None:
    task = service.create_task("alice", "Ship it")
    clock.advance(days=1)

    done = service.toggle_completion("alice", task.id)
    assert done.is_completed is True
    assert done.completed_at == clock.now

    reopened = service.toggle_completion("alice", task.id)
    assert reopened.is_completed is False
    assert reopened.completed_at is None


def test_update_keeps_completion_timestamp_when_already_done(service: TaskService, clock: FakeClock) -> None:
    task = service.create_task("alice", "Ship it")
    done = service.update_task("alice", task.id, TaskUpdate(is_completed=True))
    clock.advance(hours=2)

    again = service.update_task("alice", task.id, TaskUpdate(is_completed=True, title="Shipped"))
    assert again.completed_at == done.completed_at
    assert again.title == "Shipped"


def test_partial_update_touches_only_given_fields(service: TaskService) -> None:
    due = datetime(2024, 7, 1)
    task = service.create_task("alice", "Report", description="draft", due_date=due, priority="high")

    updated = service.update_task("alice", task.id, TaskUpdate(description="final"))
    assert updated.description == "final"
    assert updated.due_date == due
    assert updated.priority is Priority.HIGH

    cleared = service.update_task("alice", task.id, TaskUpdate(due_date=None, priority="low"))
    assert cleared.due_date is None
    assert cleared.priority is Priority.LOW


def test_update_validates_fields(service: TaskService) -> None:
    task = service.create_task("alice", "Report")
    with pytest.raises(ValidationError):
        service.update_task("alice", task.id, TaskUpdate(title=" "))
    with pytest.raises(ValidationError):
        service.update_task("alice", task.id, TaskUpdate(priority="later"))
    with pytest.raises(ValidationError):
        service.update_task(
            "alice",
            task.id,
            TaskUpdate(subtasks=(SubtaskEntity(id="x", title="a"), SubtaskEntity(id="x", title="b"))),
        )


def test_toggle_subtask_propagates_and_persists(service: TaskService, repo: FakeRepo, clock: FakeClock) -> None:
    task = service.create_task("alice", "Move", subtask_titles=["pack", "drive"])
    pack, drive = task.subtasks

    service.toggle_subtask("alice", task.id, pack.id)
    assert repo.get_task(task.id).is_completed is False

    clock.advance(hours=3)
    completed = service.toggle_subtask("alice", task.id, drive.id)
    assert completed.is_completed is True
    assert completed.completed_at == clock.now
    assert repo.get_task(task.id) == completed

    reopened = service.toggle_subtask("alice", task.id, pack.id)
    assert reopened.is_completed is False
    assert reopened.completed_at is None


def test_toggle_unknown_subtask_is_not_found(service: TaskService) -> None:
    task = service.create_task("alice", "Move")
    with pytest.raises(NotFoundError):
        service.toggle_subtask("alice", task.id, "missing")


def test_adding_and_removing_subtasks_skip_propagation(service: TaskService) -> None:
    task = service.create_task("alice", "Move", subtask_titles=["pack"])
    done = service.toggle_subtask("alice", task.id, task.subtasks[0].id)
    assert done.is_completed is True

    extended = service.add_subtask("alice", task.id, "unpack")
    assert extended.is_completed is True
    assert [s.title for s in extended.subtasks] == ["pack", "unpack"]

    reopened = service.toggle_subtask("alice", task.id, extended.subtasks[0].id)
    assert reopened.is_completed is False
    trimmed = service.remove_subtask("alice", task.id, extended.subtasks[0].id)
    assert [s.title for s in trimmed.subtasks] == ["unpack"]
    assert trimmed.is_completed is False


def test_delete_task(service: TaskService, repo: FakeRepo) -> None:
    task = service.create_task("alice", "Temporary")
    service.delete_task("alice", task.id)
    assert repo.tasks == []
    with pytest.raises(NotFoundError):
        service.delete_task("alice", task.id)


def test_analytics_and_calendar(service: TaskService, clock: FakeClock) -> None:
    assert service.get_analytics("alice") is None

    due = clock.now + timedelta(days=2)
    task = service.create_task("alice", "Plan", due_date=due)
    service.create_task("alice", "Late one", due_date=clock.now - timedelta(days=1))
    service.toggle_completion("alice", task.id)

    metrics = service.get_analytics("alice")
    assert metrics.completion_rate == 50
    assert metrics.on_time_rate == 100
    assert metrics.overdue_count == 1
    assert metrics.weekly[-1].on_time == 1

    calendar = service.get_calendar("alice")
    assert list(calendar) == [(clock.now - timedelta(days=1)).date(), due.date()]
