# src/todo_companion/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from typing import cast

from ..core.state import AppState
from ..tasks.errors import ValidationError
from ..tasks.formatting import format_relative, parse_when
from ..tasks.lifecycle import status_of
from ..tasks.task_api import set_filter, stats_line, visible_tasks
from ..tasks.task_models import Task, TaskEdit, TaskFilter, TaskStatus

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

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

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- argument helpers ----

_TIME_OPTIONS = {"start": "start_time", "deadline": "deadline", "due": "deadline", "remind": "reminder"}


class _Options:
    def __init__(self) -> None:
        self.text_parts: list[str] = []
        self.times: dict[str, datetime | None] = {}
        self.location: str | None = None
        self.location_set = False
        self.starred: bool | None = None


def _parse_options(args: list[str], now: datetime) -> _Options:
    """
    Split "@key=value" options from free text.

    @start=, @deadline= (alias @due=), @remind= take a time (see parse_when) or "none";
    @at=<place> sets the location ("_" for spaces); @star / @nostar set the flag.
    """
    opts = _Options()
    for token in args:
        if not token.startswith("@"):
            opts.text_parts.append(token)
            continue

        key, _, value = token[1:].partition("=")
        key = key.lower()

        if key == "star":
            opts.starred = True
        elif key == "nostar":
            opts.starred = False
        elif key == "at":
            opts.location = value.replace("_", " ").strip() or None
            opts.location_set = True
        elif key in _TIME_OPTIONS:
            field_name = _TIME_OPTIONS[key]
            if value.lower() in ("", "none", "-"):
                opts.times[field_name] = None
            else:
                opts.times[field_name] = parse_when(value, now)
        else:
            raise ValueError(f"unknown option @{key}")
    return opts


def _resolve(state: AppState, ref: str) -> Task | None:
    """
    Resolve a task reference: a 1-based position in the current listing,
    or "#<id>" for a raw task id.
    """
    ref = ref.strip()
    try:
        if ref.startswith("#"):
            return state.store.get(int(ref[1:]))
        pos = int(ref)
    except ValueError:
        return None
    tasks = visible_tasks(state)
    if 1 <= pos <= len(tasks):
        return tasks[pos - 1]
    return None


def render_task(task: Task, now: datetime, position: int | None = None) -> str:
    status = status_of(task, now)
    mark = {TaskStatus.COMPLETED: "x", TaskStatus.IN_PROGRESS: ">", TaskStatus.NOT_STARTED: " "}[status]
    star = "* " if task.starred else ""
    head = f"{position:>2}. " if position is not None else ""
    line = f"{head}[{mark}] {star}{task.text}"

    details: list[str] = []
    if task.start_time:
        details.append(f"start: {format_relative(task.start_time, now)}")
    if task.deadline:
        details.append(f"deadline: {format_relative(task.deadline, now)}")
    if task.reminder:
        details.append(f"remind: {format_relative(task.reminder, now)}")
    if task.location:
        details.append(f"at: {task.location}")
    if task.completed:
        details.append(f"used: {task.time_used}")
    elif status == TaskStatus.NOT_STARTED:
        details.append("not started")
    else:
        details.append("in progress")

    return f"{line}  ({'; '.join(details)})"


# ---- handlers ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <text> [@start=..] [@deadline=..] [@remind=..] [@at=place] [@star]
    """
    try:
        opts = _parse_options(args, state.clock())
        task = state.store.add(
            " ".join(opts.text_parts),
            start_time=opts.times.get("start_time"),
            deadline=opts.times.get("deadline"),
            reminder=opts.times.get("reminder"),
            location=opts.location,
            starred=bool(opts.starred),
        )
    except ValidationError as e:
        return f"Not added: {e}."
    except ValueError as e:
        return f"Bad option: {e}."
    return f"Task added: {render_task(task, state.clock())}"


def cmd_list(state: AppState, args: list[str]) -> str:
    if args:
        set_filter(state, args[0])
    now = state.clock()
    tasks = visible_tasks(state)
    header = f"[{state.current_filter.value}] {stats_line(state)}"
    if not tasks:
        return f"{header}\n  (nothing here)"
    lines = [header]
    lines.extend(render_task(t, now, i) for i, t in enumerate(tasks, start=1))
    return "\n".join(lines)


def cmd_filter(state: AppState, args: list[str]) -> str:
    if not args:
        names = ", ".join(f.value for f in TaskFilter)
        return f"Current filter: {state.current_filter.value}. Available: {names}."
    return f"Filter set to {set_filter(state, args[0]).value}."


def cmd_done(state: AppState, args: list[str]) -> str:
    """
    /done <n> toggles the task: start it if its start time has come,
    otherwise complete or reactivate it.
    """
    if not args:
        return "Usage: /done <n>"
    task = _resolve(state, args[0])
    if task is None:
        return f"No task {args[0]}."
    updated = state.store.toggle(task.id)
    if updated is None:
        return f"No task {args[0]}."
    if status_of(updated, state.clock()) == TaskStatus.COMPLETED:
        return f"Completed in {updated.time_used}: {updated.text}"
    return f"Task in progress: {updated.text}"


def cmd_start(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /start <n>"
    task = _resolve(state, args[0])
    if task is None:
        return f"No task {args[0]}."
    if state.store.start(task.id) is None:
        return f"Task {args[0]} is already started or completed."
    return f"Task started: {task.text}"


def cmd_star(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /star <n>"
    task = _resolve(state, args[0])
    if task is None or state.store.toggle_star(task.id) is None:
        return f"No task {args[0]}."
    return f"{'Starred' if task.starred else 'Unstarred'}: {task.text}"


def cmd_edit(state: AppState, args: list[str]) -> str:
    """
    /edit <n> [new text] [@start=..|none] [@deadline=..|none] [@remind=..|none] [@at=..] [@star|@nostar]

    Fields not mentioned keep their current value.
    """
    if not args:
        return "Usage: /edit <n> [text] [options]"
    task = _resolve(state, args[0])
    if task is None:
        return f"No task {args[0]}."

    try:
        opts = _parse_options(args[1:], state.clock())
    except ValueError as e:
        return f"Bad option: {e}."

    edit = TaskEdit.from_task(task)
    if opts.text_parts:
        edit = replace(edit, text=" ".join(opts.text_parts))
    if opts.times:
        edit = replace(edit, **opts.times)
    if opts.location_set:
        edit = replace(edit, location=opts.location)
    if opts.starred is not None:
        edit = replace(edit, starred=opts.starred)

    try:
        updated = state.store.edit(task.id, edit)
    except ValidationError as e:
        return f"Not updated: {e}."
    if updated is None:
        return f"No task {args[0]}."
    return f"Task updated: {render_task(updated, state.clock())}"


def cmd_delete(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /delete <n>"
    task = _resolve(state, args[0])
    if task is None or not state.store.delete(task.id):
        return f"No task {args[0]}."
    return f"Task deleted: {task.text}"


def cmd_clear(state: AppState, args: list[str]) -> str:
    removed = state.store.clear_completed()
    if removed == 0:
        return "No completed tasks to clear."
    return f"Cleared {removed} completed task(s)."


def cmd_stats(state: AppState, args: list[str]) -> str:
    return stats_line(state)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register(
    "add",
    cmd_add,
    help_text="Add a task: /add <text> [@start=+1h] [@deadline=18:00] [@remind=+10m] [@at=place] [@star].",
)
registry.register(
    "list",
    cmd_list,
    help_text="List tasks: /list [all|active|completed|starred|not-started].",
    aliases=["ls"],
)
registry.register("filter", cmd_filter, help_text="Show or set the current filter.")
registry.register(
    "done",
    cmd_done,
    help_text="Toggle a task: starts it when due, else completes/reactivates it.",
    aliases=["toggle"],
)
registry.register("start", cmd_start, help_text="Start a not-started task now.")
registry.register("star", cmd_star, help_text="Toggle the star on a task.")
registry.register("edit", cmd_edit, help_text="Edit a task: /edit <n> [text] [options].")
registry.register("delete", cmd_delete, help_text="Delete a task.", aliases=["rm"])
registry.register("clear", cmd_clear, help_text="Remove all completed tasks.")
registry.register("stats", cmd_stats, help_text="Show task counts.")
