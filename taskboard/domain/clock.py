from __future__ import annotations

from datetime import datetime
from typing import Callable

Clock = Callable[[], datetime]


def local_now() -> datetime:
    return datetime.now()


def as_local(value: datetime) -> datetime:
    """Return ``value`` as a naive local datetime."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)
