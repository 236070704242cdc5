# src/taskboard/cli/commands.py

from __future__ import annotations

import logging
import shlex
from collections.abc import Callable
from datetime import datetime

from ..core.state import AppState
from ..tasks.task_errors import NotFoundError, PersistenceError, TaskStoreError
from ..tasks.task_models import Task, TaskPriority, TaskStatus
from ..tasks.task_query import (
    DEFAULT_DATE_FORMAT,
    SHORT_DATE_FORMAT,
    STATUS_ALL,
    filter_and_search,
    recent,
    task_date_label,
    upcoming,
    visible_tags,
)
from ..tasks.task_stats import (
    active_count,
    completion_rate,
    compute_stats,
    priority_distribution,
    productivity_score,
    status_distribution,
)

CommandHandler = Callable[[AppState, list[str], datetime], str]

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = {
    "title": "title",
    "description": "description",
    "desc": "description",
    "priority": "priority",
    "due": "due_date",
    "status": "status",
    "tags": "tags",
}


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, /list, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str, now: datetime | None = None) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Store errors (unknown id, bad input, failed save) become replies.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError as e:
            return f"Could not parse command: {e}"
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        if now is None:
            now = datetime.now().astimezone()

        try:
            return handler(state, args, now)
        except NotFoundError as e:
            return f"No task with id {e.task_id}."
        except PersistenceError as e:
            logger.error("Command /%s not saved: %s", name, e)
            return f"Not saved: {e}"
        except TaskStoreError as e:
            return f"Error: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _date_format(state: AppState) -> str:
    return str(getattr(state.settings, "date_format", DEFAULT_DATE_FORMAT))


def _limit(args: list[str], default: int) -> int:
    if not args:
        return default
    try:
        return int(args[0])
    except ValueError:
        return default


def format_task(task: Task, now: datetime, fmt: str = DEFAULT_DATE_FORMAT) -> str:
    shown, hidden = visible_tags(task.tags)
    tag_str = " ".join(f"#{t}" for t in shown)
    if hidden:
        tag_str += f" +{hidden}"
    label = task_date_label(task, now, fmt=fmt)
    line = f"[{task.id}] {task.status.value:<11} {task.priority.value:<6} {label:<14} {task.title}"
    return f"{line}  {tag_str}" if tag_str else line


def _format_list(tasks: tuple[Task, ...], now: datetime, fmt: str, empty: str) -> str:
    if not tasks:
        return empty
    return "\n".join(format_task(t, now, fmt) for t in tasks)


def cmd_help(state: AppState, args: list[str], now: datetime) -> str:
    return registry.build_help()


def cmd_list(state: AppState, args: list[str], now: datetime) -> str:
    """
    /list                  -> all tasks
    /list pending          -> only pending
    /list completed doc    -> completed tasks mentioning "doc"
    /list report           -> any status, mentioning "report"
    """
    status = STATUS_ALL
    if args and args[0].lower() in {STATUS_ALL, *(s.value for s in TaskStatus)}:
        status = args[0].lower()
        args = args[1:]
    term = " ".join(args)

    tasks = filter_and_search(state.task_store.snapshot(), status, term)
    empty = "No tasks match." if term else "No tasks yet. Use /add to create one."
    return _format_list(tasks, now, _date_format(state), empty)


def cmd_add(state: AppState, args: list[str], now: datetime) -> str:
    """
    /add <low|medium|high> <YYYY-MM-DD> <title...> [#tag ...] [-- description...]
    """
    if len(args) < 3:
        return "Usage: /add <low|medium|high> <YYYY-MM-DD> <title...> [#tag ...] [-- description...]"

    priority, due, rest = args[0].lower(), args[1], args[2:]
    description = ""
    if "--" in rest:
        cut = rest.index("--")
        description = " ".join(rest[cut + 1 :])
        rest = rest[:cut]

    tags = [w[1:] for w in rest if w.startswith("#") and len(w) > 1]
    title = " ".join(w for w in rest if not (w.startswith("#") and len(w) > 1))

    task = state.task_store.create(
        {
            "title": title,
            "description": description,
            "priority": priority,
            "dueDate": due,
            "tags": tags,
        }
    )
    return f"Added task [{task.id}]: {task.title}"


def cmd_edit(state: AppState, args: list[str], now: datetime) -> str:
    """
    /edit <id> <title|description|priority|due|status|tags> <value...>
    """
    if len(args) < 3:
        fields = "|".join(k for k in _EDITABLE_FIELDS if k != "desc")
        return f"Usage: /edit <id> <{fields}> <value...>"

    task_id, field_name, values = args[0], args[1].lower(), args[2:]
    field = _EDITABLE_FIELDS.get(field_name)
    if field is None:
        return f"Unknown field: {field_name}."

    value: object
    if field == "tags":
        value = [t.lstrip("#") for v in values for t in v.replace(",", " ").split() if t.lstrip("#")]
    else:
        value = " ".join(values)

    task = state.task_store.update(task_id, {field: value})
    return f"Updated task [{task.id}]: {field_name} changed."


def _set_status(state: AppState, args: list[str], status: TaskStatus) -> str:
    if not args:
        return "Usage: give a task id."
    task = state.task_store.update(args[0], {"status": status})
    return f"Task [{task.id}] is now {task.status.value}."


def cmd_start(state: AppState, args: list[str], now: datetime) -> str:
    return _set_status(state, args, TaskStatus.IN_PROGRESS)


def cmd_done(state: AppState, args: list[str], now: datetime) -> str:
    return _set_status(state, args, TaskStatus.COMPLETED)


def cmd_reopen(state: AppState, args: list[str], now: datetime) -> str:
    return _set_status(state, args, TaskStatus.PENDING)


def cmd_rm(state: AppState, args: list[str], now: datetime) -> str:
    if not args:
        return "Usage: /rm <id>"
    if state.task_store.delete(args[0]):
        return f"Deleted task [{args[0]}]."
    return f"No task with id {args[0]} (nothing to delete)."


def cmd_show(state: AppState, args: list[str], now: datetime) -> str:
    if not args:
        return "Usage: /show <id>"
    task = state.task_store.get(args[0])
    if task is None:
        return f"No task with id {args[0]}."
    created = task.created_at.astimezone(now.tzinfo).strftime("%Y-%m-%d %H:%M")
    return (
        f"[{task.id}] {task.title}\n"
        f"  Status:   {task.status.value}\n"
        f"  Priority: {task.priority.value}\n"
        f"  Due:      {task.due_date.isoformat()} ({task_date_label(task, now, fmt=_date_format(state))})\n"
        f"  Created:  {created}\n"
        f"  Tags:     {', '.join(task.tags) or '-'}\n"
        f"  {task.description or '(no description)'}"
    )


def cmd_stats(state: AppState, args: list[str], now: datetime) -> str:
    tasks = state.task_store.snapshot()
    stats = compute_stats(tasks, now)
    prio = priority_distribution(tasks)
    chart = " ".join(f"{label}={count}" for label, count in status_distribution(stats).items())
    return (
        "Stats:\n"
        f"  Total: {stats.total}  Completed: {stats.completed}  "
        f"In progress: {stats.in_progress}  Pending: {stats.pending}  Overdue: {stats.overdue}\n"
        f"  Active: {active_count(stats)}\n"
        f"  Completion rate: {completion_rate(stats)}%\n"
        f"  Productivity score: {productivity_score(stats)}\n"
        f"  Priorities: high={prio[TaskPriority.HIGH]} "
        f"medium={prio[TaskPriority.MEDIUM]} low={prio[TaskPriority.LOW]}\n"
        f"  Chart: {chart}"
    )


def cmd_recent(state: AppState, args: list[str], now: datetime) -> str:
    n = _limit(args, int(getattr(state.settings, "recent_limit", 5)))
    tasks = recent(state.task_store.snapshot(), n)
    return _format_list(tasks, now, SHORT_DATE_FORMAT, "No tasks yet.")


def cmd_upcoming(state: AppState, args: list[str], now: datetime) -> str:
    n = _limit(args, int(getattr(state.settings, "upcoming_limit", 5)))
    tasks = upcoming(state.task_store.snapshot(), n)
    return _format_list(tasks, now, SHORT_DATE_FORMAT, "Nothing due. All tasks are completed.")


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register(
    "list", cmd_list, help_text="List tasks: /list [all|pending|in-progress|completed] [search...]."
)
registry.register(
    "add",
    cmd_add,
    help_text="Add a task: /add <priority> <YYYY-MM-DD> <title...> [#tag ...] [-- description].",
)
registry.register("edit", cmd_edit, help_text="Edit one field: /edit <id> <field> <value...>.")
registry.register("start", cmd_start, help_text="Mark a task in progress: /start <id>.")
registry.register("done", cmd_done, help_text="Mark a task completed: /done <id>.")
registry.register("reopen", cmd_reopen, help_text="Move a task back to pending: /reopen <id>.")
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <id>.", aliases=["delete"])
registry.register("show", cmd_show, help_text="Show task details: /show <id>.")
registry.register("stats", cmd_stats, help_text="Show totals, completion rate, priority mix and status chart.")
registry.register("recent", cmd_recent, help_text="Most recently created tasks: /recent [n].")
registry.register("upcoming", cmd_upcoming, help_text="Soonest due open tasks: /upcoming [n].")
