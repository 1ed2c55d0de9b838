from __future__ import annotations


class TaskError(Exception):
    """Base class for errors raised by the task core."""


class ValidationError(TaskError):
    pass


class NotFoundError(TaskError):
    pass


class ForbiddenError(TaskError):
    """The task exists but belongs to another owner."""
