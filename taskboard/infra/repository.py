from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from taskboard.domain.clock import as_local
from taskboard.domain.entities import SubtaskEntity, TaskEntity
from taskboard.domain.enums import Priority
from taskboard.domain.errors import ValidationError

from .db import SessionLocal
from .models import SubtaskModel, TaskModel, UserModel

logger = logging.getLogger(__name__)

TASK_FIELDS = frozenset(
    {"title", "description", "is_completed", "due_date", "completed_at", "priority", "created_at"}
)


def _to_entity(model: TaskModel) -> TaskEntity:
    return TaskEntity(
        id=model.id,
        owner_id=model.owner_id,
        title=model.title,
        description=model.description,
        is_completed=model.is_completed,
        created_at=model.created_at,
        due_date=model.due_date,
        completed_at=model.completed_at,
        priority=Priority(model.priority),
        subtasks=tuple(
            SubtaskEntity(id=subtask.id, title=subtask.title, is_completed=subtask.is_completed)
            for subtask in model.subtasks
        ),
    )


def _to_subtask_models(subtasks: tuple[SubtaskEntity, ...]) -> list[SubtaskModel]:
    return [
        SubtaskModel(id=subtask.id, title=subtask.title, is_completed=subtask.is_completed, sort_order=index)
        for index, subtask in enumerate(subtasks, start=1)
    ]


def _apply_fields(task: TaskModel, data: dict[str, Any]) -> None:
    for key, value in data.items():
        if key == "subtasks":
            task.subtasks = _to_subtask_models(tuple(value))
        elif key == "priority":
            task.priority = Priority(value).value
        elif key in TASK_FIELDS:
            # DateTime columns are naive; aware values are stored as local time.
            if isinstance(value, datetime):
                value = as_local(value)
            setattr(task, key, value)
        else:
            raise ValueError(f"Unknown task field {key!r}")


class TaskRepository:
    def __init__(self, session_factory: sessionmaker | None = None) -> None:
        self._session_factory = session_factory or SessionLocal

    def list_tasks(self, owner_id: str) -> list[TaskEntity]:
        with self._session_factory() as session:
            stmt = (
                select(TaskModel)
                .where(TaskModel.owner_id == owner_id)
                .order_by(TaskModel.created_at.desc())
            )
            return [_to_entity(task) for task in session.scalars(stmt)]

    def get_task(self, task_id: str) -> Optional[TaskEntity]:
        with self._session_factory() as session:
            task = session.get(TaskModel, task_id)
            return _to_entity(task) if task else None

    def create_task(self, owner_id: str, data: dict[str, Any]) -> TaskEntity:
        with self._session_factory() as session:
            task = TaskModel(owner_id=owner_id)
            _apply_fields(task, data)
            session.add(task)
            session.commit()
            session.refresh(task)
            logger.debug("Inserted task %s for owner %s", task.id, owner_id)
            return _to_entity(task)

    def update_task(self, task_id: str, data: dict[str, Any]) -> Optional[TaskEntity]:
        with self._session_factory() as session:
            task = session.get(TaskModel, task_id)
            if not task:
                return None
            _apply_fields(task, data)
            session.commit()
            session.refresh(task)
            return _to_entity(task)

    def delete_task(self, task_id: str) -> bool:
        with self._session_factory() as session:
            task = session.get(TaskModel, task_id)
            if not task:
                return False
            session.delete(task)
            session.commit()
            return True


class UserRepository:
    def __init__(self, session_factory: sessionmaker | None = None) -> None:
        self._session_factory = session_factory or SessionLocal

    def create_user(self, name: str, email: str) -> str:
        email = email.strip().lower()
        if not name.strip() or "@" not in email:
            raise ValidationError("A user needs a name and a valid email")
        with self._session_factory() as session:
            user = UserModel(name=name.strip(), email=email)
            session.add(user)
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                raise ValidationError(f"User with email {email} already exists") from None
            return user.id

    def get_by_email(self, email: str) -> Optional[str]:
        with self._session_factory() as session:
            return session.scalar(select(UserModel.id).where(UserModel.email == email.strip().lower()))

    def exists(self, user_id: str) -> bool:
        with self._session_factory() as session:
            return session.get(UserModel, user_id) is not None
