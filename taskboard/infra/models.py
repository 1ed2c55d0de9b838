from __future__ import annotations

import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from taskboard.domain.clock import local_now

from .db import Base


def new_id() -> str:
    return uuid.uuid4().hex


class UserModel(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(200), nullable=False)
    email = Column(String(320), nullable=False, unique=True)
    created_at = Column(DateTime, nullable=False, default=local_now)


class TaskModel(Base):
    __tablename__ = "tasks"

    id = Column(String(32), primary_key=True, default=new_id)
    owner_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    is_completed = Column(Boolean, nullable=False, default=False, index=True)
    priority = Column(String(10), nullable=False, default="medium")
    due_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=local_now)
    updated_at = Column(DateTime, nullable=False, default=local_now, onupdate=local_now)
    completed_at = Column(DateTime, nullable=True)

    subtasks = relationship(
        "SubtaskModel",
        order_by="SubtaskModel.sort_order",
        cascade="all, delete-orphan",
    )


class SubtaskModel(Base):
    __tablename__ = "subtasks"

    pk = Column(Integer, primary_key=True)
    id = Column(String(32), nullable=False, default=new_id)
    task_id = Column(String(32), ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    is_completed = Column(Boolean, nullable=False, default=False)
    sort_order = Column(Integer, nullable=False, default=0)
