from __future__ import annotations

from collections import Counter
from datetime import date, datetime, timedelta
from typing import Iterable

from .clock import as_local
from .entities import CompletionBucket, TaskEntity, TaskMetrics

WEEK_DAYS = 7
MONTHS = 6

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
MONTH_LABELS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def is_counted_complete(task: TaskEntity) -> bool:
    return task.is_completed and task.completed_at is not None


def is_on_time(task: TaskEntity) -> bool:
    if task.completed_at is None or task.due_date is None:
        return False
    return as_local(task.completed_at) <= as_local(task.due_date)


def is_overdue(task: TaskEntity, now: datetime) -> bool:
    return not task.is_completed and task.due_date is not None and as_local(task.due_date) < now


def analyze_tasks(tasks: Iterable[TaskEntity], now: datetime) -> TaskMetrics | None:
    """Compute dashboard metrics for a task collection.

    Returns ``None`` for an empty collection so callers can tell "nothing to
    show" apart from an all-zero dashboard.
    """
    tasks = list(tasks)
    if not tasks:
        return None

    now = as_local(now)
    completed = [task for task in tasks if is_counted_complete(task)]
    with_due_date = [task for task in completed if task.due_date is not None]
    on_time_count = sum(1 for task in with_due_date if is_on_time(task))

    return TaskMetrics(
        total_count=len(tasks),
        completed_count=len(completed),
        completion_rate=len(completed) / len(tasks) * 100,
        on_time_rate=on_time_count / len(with_due_date) * 100 if with_due_date else 0.0,
        overdue_count=sum(1 for task in tasks if is_overdue(task, now)),
        weekly=weekly_buckets(completed, now.date()),
        monthly=monthly_buckets(completed, now.date()),
    )


def weekly_buckets(completed: list[TaskEntity], today: date) -> list[CompletionBucket]:
    """One bucket per calendar day, the six days before ``today`` then today."""
    on_time: Counter[date] = Counter()
    late: Counter[date] = Counter()
    for task in completed:
        day = as_local(task.completed_at).date()
        (on_time if is_on_time(task) else late)[day] += 1

    buckets = []
    for offset in range(WEEK_DAYS - 1, -1, -1):
        day = today - timedelta(days=offset)
        buckets.append(
            CompletionBucket(
                label=WEEKDAY_LABELS[day.weekday()],
                on_time=on_time[day],
                late=late[day],
            )
        )
    return buckets


def monthly_buckets(completed: list[TaskEntity], today: date) -> list[CompletionBucket]:
    """One bucket per calendar month, the five months before ``today``'s then its own."""
    on_time: Counter[tuple[int, int]] = Counter()
    late: Counter[tuple[int, int]] = Counter()
    for task in completed:
        finished = as_local(task.completed_at)
        key = (finished.year, finished.month)
        (on_time if is_on_time(task) else late)[key] += 1

    buckets = []
    for offset in range(MONTHS - 1, -1, -1):
        year, month = _shift_month(today.year, today.month, -offset)
        buckets.append(
            CompletionBucket(
                label=MONTH_LABELS[month - 1],
                on_time=on_time[(year, month)],
                late=late[(year, month)],
            )
        )
    return buckets


def _shift_month(year: int, month: int, months: int) -> tuple[int, int]:
    shifted_year = year + (month - 1 + months) // 12
    shifted_month = (month - 1 + months) % 12 + 1
    return shifted_year, shifted_month
