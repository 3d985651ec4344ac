"""
Tool: Transition Executor
Purpose: Apply a status transition and its side effects to a task snapshot

Given the options the user picked for each scenario, the executor works out
every field that changes: actual start/end timestamps, planned start and due
dates, and one activity-log entry. It either returns a complete new snapshot
or an error; the input snapshot is never modified.

Steps:
    1. Guard check, reserved option values, required subtasks
    2. Manual values supplied by the date picker (field_updates), due not before start
    3. Exit effects, keyed by the old status
    4. Entry effects, generic for in-progress/done, then per (from, to) cell
    5. Invariant check and activity-log entry

Usage:
    from taskflow.tasks.executor import execute_transition

    result = execute_transition(task, "backlog", "todo", {"set_start": "set_start"})
    if result["success"]:
        task = result["task"]
    else:
        print(result["error"])
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime
from itertools import product
from typing import Any

from taskflow.logging_config import get_logger
from taskflow.tasks import (
    ACTION_STATUS_CHANGED,
    CANCEL_OPTION,
    INVALID_OPTION,
    MAX_REDIRECT_DEPTH,
    PLANNING_OFFSET,
)
from taskflow.tasks.activity import append_activity, status_change_details
from taskflow.tasks.guard import validate_transition
from taskflow.tasks.models import (
    ACTUAL_END_FIELDS,
    ACTUAL_START_FIELDS,
    DATETIME_FIELDS,
    SCHEDULE_FIELDS,
    Status,
    TaskSnapshot,
    parse_datetime,
)
from taskflow.tasks.schedule import validate_date_time_range

logger = get_logger(__name__)

BACKLOG = Status.BACKLOG
TODO = Status.TODO
IN_PROGRESS = Status.IN_PROGRESS
DONE = Status.DONE
OVERDUE = Status.OVERDUE

# Fields each manual-entry option expects in field_updates
MANUAL_REQUIREMENTS: dict[str, tuple[str, ...]] = {
    "manual_start": ACTUAL_START_FIELDS,
    "manual_times": ACTUAL_START_FIELDS + ACTUAL_END_FIELDS,
    "adjust_time": ("start_date",),
}

# Option values that replace the requested target, per (from, to) cell
REDIRECTS: dict[tuple[Status, Status], dict[str, tuple[Status, dict[str, str]]]] = {
    (BACKLOG, TODO): {"switch_to_progress": (IN_PROGRESS, {"record_start": "record_start"})},
    (IN_PROGRESS, TODO): {"suggest_backlog": (BACKLOG, {})},
}

Fields = dict[str, datetime | None]
EntryEffect = Callable[[Fields, frozenset[str], datetime], None]


def _failure(error: str, error_type: str) -> dict[str, Any]:
    return {"success": False, "error": error, "error_type": error_type}


def _clear(fields: Fields, names: tuple[str, ...]) -> None:
    for name in names:
        fields[name] = None


def _set_now(fields: Fields, names: tuple[str, ...], now: datetime) -> None:
    for name in names:
        fields[name] = now


def _is_past(value: datetime | None, now: datetime) -> bool:
    return value is not None and value < now


# ─────────────────────────────────────────────────────────────────────────────
# Shared entry effects
# ─────────────────────────────────────────────────────────────────────────────


def _schedule_future_start(fields: Fields, now: datetime, force: bool = False) -> None:
    start = fields["start_date"]
    if force or start is None or start <= now:
        fields["start_date"] = now + PLANNING_OFFSET
        fields["start_time"] = None


def _force_overdue(fields: Fields, now: datetime) -> None:
    if not _is_past(fields["due_date"], now):
        fields["due_date"] = now - PLANNING_OFFSET
        fields["due_time"] = None


def _complete(fields: Fields, chosen: frozenset[str], now: datetime) -> None:
    if "update_due_to_now" in chosen:
        fields["due_date"] = now
        fields["due_time"] = None


# ─────────────────────────────────────────────────────────────────────────────
# Cell entry effects
# ─────────────────────────────────────────────────────────────────────────────


def _no_effects(fields: Fields, chosen: frozenset[str], now: datetime) -> None:
    return None


def _backlog_to_todo(fields: Fields, chosen: frozenset[str], now: datetime) -> None:
    _schedule_future_start(fields, now, force=bool(chosen & {"set_start", "update_start"}))


def _backlog_to_in_progress(fields: Fields, chosen: frozenset[str], now: datetime) -> None:
    if "record_start" in chosen:
        _set_now(fields, ACTUAL_START_FIELDS, now)
        if fields["start_date"] is None:
            fields["start_date"] = now
            fields["start_time"] = None
    if "set_planned" in chosen:
        fields["start_date"] = now
        fields["start_time"] = None
        _set_now(fields, ACTUAL_START_FIELDS, now)


def _backlog_to_done(fields: Fields, chosen: frozenset[str], now: datetime) -> None:
    if "auto_record" in chosen:
        fields["start_date"] = now
        fields["start_time"] = None
        _set_now(fields, ACTUAL_START_FIELDS + ACTUAL_END_FIELDS, now)
    _complete(fields, chosen, now)


def _backlog_to_overdue(fields: Fields, chosen: frozenset[str], now: datetime) -> None:
    _force_overdue(fields, now)
    if fields["start_date"] is None:
        fields["start_date"] = fields["due_date"] - PLANNING_OFFSET
        fields["start_time"] = None


def _to_overdue(fields: Fields, chosen: frozenset[str], now: datetime) -> None:
    _force_overdue(fields, now)


def _todo_to_backlog(fields: Fields, chosen: frozenset[str], now: datetime) -> None:
    _clear(fields, SCHEDULE_FIELDS)


def _todo_to_in_progress(fields: Fields, chosen: frozenset[str], now: datetime) -> None:
    if chosen & {"start_early", "start_now"}:
        _set_now(fields, ACTUAL_START_FIELDS, now)
    if "reschedule" in chosen:
        fields["start_date"] = now
        fields["start_time"] = None
        _set_now(fields, ACTUAL_START_FIELDS, now)


def _todo_to_done(fields: Fields, chosen: frozenset[str], now: datetime) -> None:
    if "auto_record" in chosen:
        _set_now(fields, ACTUAL_START_FIELDS + ACTUAL_END_FIELDS, now)
    _complete(fields, chosen, now)


def _in_progress_to_backlog(fields: Fields, chosen: frozenset[str], now: datetime) -> None:
    _clear(fields, SCHEDULE_FIELDS + ACTUAL_START_FIELDS)


def _done_to_backlog(fields: Fields, chosen: frozenset[str], now: datetime) -> None:
    if "keep_times" not in chosen:
        _clear(fields, SCHEDULE_FIELDS)
    _clear(fields, ACTUAL_START_FIELDS + ACTUAL_END_FIELDS)


def _done_to_todo(fields: Fields, chosen: frozenset[str], now: datetime) -> None:
    _clear(fields, ACTUAL_START_FIELDS + ACTUAL_END_FIELDS)
    _schedule_future_start(fields, now, force="set_future_start" in chosen)


def _done_to_in_progress(fields: Fields, chosen: frozenset[str], now: datetime) -> None:
    _clear(fields, ACTUAL_END_FIELDS)
    if "fresh_start" in chosen:
        _set_now(fields, ACTUAL_START_FIELDS, now)
    if fields["start_date"] is None or fields["start_date"] > now:
        fields["start_date"] = now
        fields["start_time"] = None
    if _is_past(fields["due_date"], now):
        fields["due_date"] = now + PLANNING_OFFSET
        fields["due_time"] = None


def _done_to_overdue(fields: Fields, chosen: frozenset[str], now: datetime) -> None:
    _clear(fields, ACTUAL_END_FIELDS)
    if "set_past_due" in chosen:
        fields["due_date"] = now - PLANNING_OFFSET
        fields["due_time"] = None
    _force_overdue(fields, now)


def _overdue_to_backlog(fields: Fields, chosen: frozenset[str], now: datetime) -> None:
    _clear(fields, ACTUAL_START_FIELDS + ACTUAL_END_FIELDS)


def _overdue_to_todo(fields: Fields, chosen: frozenset[str], now: datetime) -> None:
    _clear(fields, ACTUAL_START_FIELDS + ACTUAL_END_FIELDS)
    _schedule_future_start(fields, now, force="update_start" in chosen)


def _overdue_to_in_progress(fields: Fields, chosen: frozenset[str], now: datetime) -> None:
    if "record_start" in chosen:
        _set_now(fields, ACTUAL_START_FIELDS, now)


def _overdue_to_done(fields: Fields, chosen: frozenset[str], now: datetime) -> None:
    if "auto_start" in chosen:
        _set_now(fields, ACTUAL_START_FIELDS, now)
    _complete(fields, chosen, now)


ENTRY_EFFECTS: dict[tuple[Status, Status], EntryEffect] = {
    (BACKLOG, BACKLOG): _no_effects,
    (BACKLOG, TODO): _backlog_to_todo,
    (BACKLOG, IN_PROGRESS): _backlog_to_in_progress,
    (BACKLOG, DONE): _backlog_to_done,
    (BACKLOG, OVERDUE): _backlog_to_overdue,
    (TODO, BACKLOG): _todo_to_backlog,
    (TODO, TODO): _no_effects,
    (TODO, IN_PROGRESS): _todo_to_in_progress,
    (TODO, DONE): _todo_to_done,
    (TODO, OVERDUE): _to_overdue,
    (IN_PROGRESS, BACKLOG): _in_progress_to_backlog,
    (IN_PROGRESS, TODO): _no_effects,
    (IN_PROGRESS, IN_PROGRESS): _no_effects,
    (IN_PROGRESS, DONE): _complete,
    (IN_PROGRESS, OVERDUE): _to_overdue,
    (DONE, BACKLOG): _done_to_backlog,
    (DONE, TODO): _done_to_todo,
    (DONE, IN_PROGRESS): _done_to_in_progress,
    (DONE, DONE): _no_effects,
    (DONE, OVERDUE): _done_to_overdue,
    (OVERDUE, BACKLOG): _overdue_to_backlog,
    (OVERDUE, TODO): _overdue_to_todo,
    (OVERDUE, IN_PROGRESS): _overdue_to_in_progress,
    (OVERDUE, DONE): _overdue_to_done,
    (OVERDUE, OVERDUE): _no_effects,
}

_missing_cells = set(product(Status, Status)) - ENTRY_EFFECTS.keys()
if _missing_cells:
    raise RuntimeError(f"Entry effect table is missing cells: {sorted(_missing_cells)}")


# ─────────────────────────────────────────────────────────────────────────────
# Exit and generic entry effects
# ─────────────────────────────────────────────────────────────────────────────


def _apply_exit_effects(fields: Fields, source: Status, target: Status) -> None:
    if source == IN_PROGRESS and target not in (DONE, OVERDUE):
        _clear(fields, ACTUAL_START_FIELDS)
    elif source == DONE and target != IN_PROGRESS:
        _clear(fields, ACTUAL_END_FIELDS)


def _enter_in_progress(fields: Fields, chosen: frozenset[str], now: datetime) -> None:
    if "use_planned_as_actual" in chosen:
        fields["actual_start_date"] = fields["start_date"] or now
        fields["actual_start_time"] = fields["start_time"] or now
    elif "set_actual_to_now" in chosen:
        _set_now(fields, ACTUAL_START_FIELDS, now)
    else:
        if fields["actual_start_date"] is None:
            fields["actual_start_date"] = fields["start_date"] or now
        if fields["actual_start_time"] is None:
            fields["actual_start_time"] = fields["start_time"] or now


def _enter_done(fields: Fields, chosen: frozenset[str], now: datetime) -> None:
    if "manual_times" not in chosen:
        _set_now(fields, ACTUAL_END_FIELDS, now)
    if not chosen & {"manual_start", "manual_times"}:
        for name in ACTUAL_START_FIELDS:
            if fields[name] is None:
                fields[name] = now


def _find_redirect(
    source: Status, target: Status, chosen: frozenset[str]
) -> tuple[Status, dict[str, str]] | None:
    for value, redirect in REDIRECTS.get((source, target), {}).items():
        if value in chosen:
            return redirect
    return None


def _parse_field_updates(field_updates: Mapping[str, Any] | None) -> Fields:
    updates: Fields = {}
    for name, value in (field_updates or {}).items():
        if name not in DATETIME_FIELDS:
            raise ValueError(f"Field {name!r} cannot be set during a transition")
        updates[name] = parse_datetime(value)
    return updates


# ─────────────────────────────────────────────────────────────────────────────
# Public API
# ─────────────────────────────────────────────────────────────────────────────


def execute_transition(
    task: TaskSnapshot,
    from_status: str | Status,
    to_status: str | Status,
    selected_options: Mapping[str, str] | None = None,
    is_create_mode: bool = False,
    field_updates: Mapping[str, Any] | None = None,
    now: datetime | None = None,
    user_id: str = "user",
) -> dict[str, Any]:
    """
    Apply a transition to a snapshot.

    Args:
        task: Snapshot to transform (left untouched)
        from_status: Current status
        to_status: Requested status
        selected_options: One chosen option per scenario; only values are read
        is_create_mode: True while the task is being created (no history)
        field_updates: Dates typed in by the user for manual-entry options
        now: Clock override (defaults to datetime.now())
        user_id: Recorded on the activity-log entry

    Returns:
        dict with success, the new task and its final status, or an error
        and error_type
    """
    now = now or datetime.now()
    options = dict(selected_options or {})

    try:
        source = Status.coerce(from_status)
        target = Status.coerce(to_status)
    except ValueError as e:
        return _failure(str(e), "guard_rejection")

    values = set(options.values())
    if INVALID_OPTION in values:
        return _failure("Cannot perform this transition with current task data", "invalid_option")
    if CANCEL_OPTION in values:
        return _failure("Transition cancelled", "cancelled")

    try:
        updates = _parse_field_updates(field_updates)
    except ValueError as e:
        return _failure(str(e), "invalid_field")

    requested = target
    for depth in range(MAX_REDIRECT_DEPTH + 1):
        validation = validate_transition(task, source, target, now=now)
        if not validation["is_valid"]:
            return _failure(validation.get("message") or "Invalid transition", "guard_rejection")

        redirect = _find_redirect(source, target, frozenset(options.values()))
        if redirect is None:
            break
        if depth == MAX_REDIRECT_DEPTH:
            return _failure("Too many redirects for this transition", "guard_rejection")

        target, options = redirect[0], dict(redirect[1])
        logger.info(
            "transition_redirected",
            task_id=task.id,
            from_status=source.value,
            requested=requested.value,
            redirected_to=target.value,
        )

    chosen = frozenset(options.values())

    if target == DONE and task.has_incomplete_required_subtasks() and "force_complete" not in chosen:
        return _failure(
            "Some required subtasks are not completed",
            "required_subtasks",
        )

    for option, required in MANUAL_REQUIREMENTS.items():
        if option in chosen:
            missing = [name for name in required if updates.get(name) is None]
            if missing:
                return _failure(
                    f"Option {option!r} needs values for: {', '.join(missing)}",
                    "missing_manual_values",
                )

    fields: Fields = {name: getattr(task, name) for name in DATETIME_FIELDS}
    fields.update(updates)

    if updates.keys() & set(SCHEDULE_FIELDS):
        range_check = validate_date_time_range(
            fields["start_date"], fields["start_time"], fields["due_date"], fields["due_time"]
        )
        if not range_check["is_valid"]:
            return _failure(range_check["message"], "invalid_range")

    _apply_exit_effects(fields, source, target)
    if target == IN_PROGRESS:
        _enter_in_progress(fields, chosen, now)
    elif target == DONE:
        _enter_done(fields, chosen, now)
    ENTRY_EFFECTS[(source, target)](fields, chosen, now)

    if target == IN_PROGRESS and (fields["actual_start_date"] is None or fields["actual_start_time"] is None):
        return _failure("In-progress tasks need an actual start date and time", "missing_manual_values")
    if target == DONE and (fields["actual_end_date"] is None or fields["actual_end_time"] is None):
        return _failure("Done tasks need an actual end date and time", "missing_manual_values")

    activity_log = list(task.activity_log)
    if not is_create_mode:
        activity_log = append_activity(
            activity_log,
            ACTION_STATUS_CHANGED,
            status_change_details(source, target),
            user_id=user_id,
            now=now,
        )

    updated = task.with_changes(status=target, activity_log=activity_log, **fields)

    logger.info(
        "transition_executed",
        task_id=task.id,
        from_status=source.value,
        to_status=target.value,
        options=sorted(chosen),
    )

    return {
        "success": True,
        "task": updated,
        "status": target.value,
        "redirected": target != requested,
        "message": status_change_details(source, target),
    }


__all__ = [
    "ENTRY_EFFECTS",
    "MANUAL_REQUIREMENTS",
    "REDIRECTS",
    "execute_transition",
]
