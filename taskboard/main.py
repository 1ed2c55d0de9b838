from __future__ import annotations

import argparse
import logging
import sys
from datetime import date, datetime

from taskboard.config import SETTINGS
from taskboard.domain.entities import TaskEntity, TaskMetrics
from taskboard.domain.enums import Priority, TaskFilter, TaskSort
from taskboard.domain.errors import TaskError, ValidationError
from taskboard.domain.filters import TaskFilters
from taskboard.domain.subtasks import subtask_progress
from taskboard.infra.db import init_db
from taskboard.infra.logging import setup_logging
from taskboard.infra.repository import TaskRepository, UserRepository
from taskboard.services.task_service import TaskService

logger = logging.getLogger(__name__)


def _parse_datetime(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date/time: {value!r}") from None


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date: {value!r}") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser("taskboard", description="Personal task manager")
    parser.add_argument("--owner", default=SETTINGS.default_owner, help="Owner id (or TASKBOARD_OWNER)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Echo log records to the console")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("init-db", help="Create the database schema")

    p_user = sub.add_parser("add-user", help="Register an owner and print its id")
    p_user.add_argument("name")
    p_user.add_argument("email")

    p_list = sub.add_parser("list", help="List tasks")
    p_list.add_argument("--filter", default=TaskFilter.ALL.value, choices=[f.value for f in TaskFilter])
    p_list.add_argument("--sort", default=TaskSort.DATE_DESC.value, choices=[s.value for s in TaskSort])
    p_list.add_argument("--search", default="")
    p_list.add_argument("--due-on", type=_parse_date)

    p_add = sub.add_parser("add", help="Create a task")
    p_add.add_argument("title")
    p_add.add_argument("--description", default="")
    p_add.add_argument("--due", type=_parse_datetime, help="Due date, ISO format")
    p_add.add_argument("--priority", choices=[p.value for p in Priority])
    p_add.add_argument("--subtask", action="append", default=[], help="Subtask title (repeatable)")

    p_toggle = sub.add_parser("toggle", help="Toggle task completion")
    p_toggle.add_argument("task_id")

    p_toggle_sub = sub.add_parser("toggle-subtask", help="Toggle a subtask")
    p_toggle_sub.add_argument("task_id")
    p_toggle_sub.add_argument("subtask_id")

    p_add_sub = sub.add_parser("add-subtask", help="Append a subtask")
    p_add_sub.add_argument("task_id")
    p_add_sub.add_argument("title")

    p_remove_sub = sub.add_parser("remove-subtask", help="Remove a subtask")
    p_remove_sub.add_argument("task_id")
    p_remove_sub.add_argument("subtask_id")

    p_delete = sub.add_parser("delete", help="Delete a task")
    p_delete.add_argument("task_id")

    sub.add_parser("stats", help="Show completion analytics")
    sub.add_parser("calendar", help="Show tasks grouped by due date")
    return parser


def format_task(task: TaskEntity) -> str:
    mark = "x" if task.is_completed else " "
    line = f"[{mark}] {task.id}  {task.title}  ({task.priority.value})"
    if task.due_date:
        line += f"  due {task.due_date:%Y-%m-%d %H:%M}"
    if task.subtasks:
        progress = subtask_progress(task)
        line += f"  {progress.completed}/{progress.total}"
        for subtask in task.subtasks:
            line += f"\n      [{'x' if subtask.is_completed else ' '}] {subtask.id}  {subtask.title}"
    return line


def format_metrics(metrics: TaskMetrics | None) -> str:
    if metrics is None:
        return "Not enough data. Complete some tasks to see your analytics."
    lines = [
        f"Completion rate: {metrics.completion_rate:.0f}%",
        f"On-time rate:    {metrics.on_time_rate:.0f}%",
        f"Overdue tasks:   {metrics.overdue_count}",
        "",
        "Last 7 days (on-time/late):",
    ]
    lines.extend(f"  {bucket.label}  {bucket.on_time}/{bucket.late}" for bucket in metrics.weekly)
    lines.append("Last 6 months (on-time/late):")
    lines.extend(f"  {bucket.label}  {bucket.on_time}/{bucket.late}" for bucket in metrics.monthly)
    return "\n".join(lines)


def _require_owner(args: argparse.Namespace, users: UserRepository) -> str:
    if not args.owner:
        raise ValidationError("No owner given; pass --owner or set TASKBOARD_OWNER")
    if not users.exists(args.owner):
        raise ValidationError(f"Unknown owner {args.owner}")
    return args.owner


def run(args: argparse.Namespace, service: TaskService, users: UserRepository) -> str:
    if args.cmd == "add-user":
        existing = users.get_by_email(args.email)
        if existing:
            logger.info("User %s is already registered", args.email)
            return existing
        return users.create_user(args.name, args.email)

    owner_id = _require_owner(args, users)
    if args.cmd == "list":
        filters = TaskFilters(
            filter_key=args.filter,
            sort_key=args.sort,
            search=args.search,
            due_on=args.due_on,
        )
        tasks = service.list_tasks(owner_id, filters)
        return "\n".join(format_task(task) for task in tasks) or "No tasks found."
    if args.cmd == "add":
        task = service.create_task(
            owner_id,
            args.title,
            description=args.description,
            due_date=args.due,
            priority=args.priority,
            subtask_titles=args.subtask,
        )
        return format_task(task)
    if args.cmd == "toggle":
        return format_task(service.toggle_completion(owner_id, args.task_id))
    if args.cmd == "toggle-subtask":
        return format_task(service.toggle_subtask(owner_id, args.task_id, args.subtask_id))
    if args.cmd == "add-subtask":
        return format_task(service.add_subtask(owner_id, args.task_id, args.title))
    if args.cmd == "delete":
        service.delete_task(owner_id, args.task_id)
        return f"Deleted {args.task_id}"
    if args.cmd == "remove-subtask":
        return format_task(service.remove_subtask(owner_id, args.task_id, args.subtask_id))
    if args.cmd == "stats":
        return format_metrics(service.get_analytics(owner_id))

    # calendar
    lines = []
    for day, tasks in service.get_calendar(owner_id).items():
        lines.append(f"{day:%Y-%m-%d}")
        lines.extend(f"  {format_task(task)}" for task in tasks)
    return "\n".join(lines) or "No tasks with a due date."


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(verbose=args.verbose)
    try:
        init_db(create_schema=args.cmd == "init-db")
    except Exception as exc:  # noqa: BLE001
        logger.exception("Database is not reachable")
        sys.stderr.write(f"DB error: {exc}\n")
        return 1
    if args.cmd == "init-db":
        print("Database ready.")
        return 0

    service = TaskService(TaskRepository())
    try:
        print(run(args, service, UserRepository()))
    except TaskError as exc:
        logger.warning("%s failed: %s", args.cmd, exc)
        sys.stderr.write(f"error: {exc}\n")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
