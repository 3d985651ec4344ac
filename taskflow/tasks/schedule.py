"""
Tool: Schedule Validation
Purpose: Check start/due date-times proposed by the date picker

The picker hands over the final start and due values together with an
on_success callback. The callback runs only when the proposal is accepted;
otherwise the picker stays open and nothing changes.

A due date before the start date is rejected outright. It is never snapped
to the start date behind the user's back.

Usage:
    from taskflow.tasks.schedule import validate_schedule

    accepted = validate_schedule(task, final_start, final_due, on_success=close_picker)
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

from taskflow.logging_config import get_logger
from taskflow.tasks.models import TaskSnapshot

logger = get_logger(__name__)


def combine_date_time(date: datetime | None, time: datetime | None) -> datetime | None:
    """Date part from `date`, hour and minute from `time` when present."""
    if date is None:
        return None
    if time is None:
        return date
    return date.replace(hour=time.hour, minute=time.minute, second=0, microsecond=0)


def validate_date_time_range(
    start_date: datetime | None,
    start_time: datetime | None,
    due_date: datetime | None,
    due_time: datetime | None,
) -> dict[str, Any]:
    """Due must not be before start. Missing either side is fine."""
    start = combine_date_time(start_date, start_time)
    due = combine_date_time(due_date, due_time)

    if start is not None and due is not None and due < start:
        return {
            "is_valid": False,
            "type": "invalid-range",
            "message": "Due date/time cannot be before start date/time",
        }
    return {"is_valid": True, "type": "valid"}


def validate_overdue(
    due_date: datetime | None,
    due_time: datetime | None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Flag a due date/time that has already passed."""
    now = now or datetime.now()
    due = combine_date_time(due_date, due_time)
    if due is not None and due < now:
        return {"is_valid": False, "type": "overdue", "message": "Due date/time is in the past"}
    return {"is_valid": True, "type": "valid"}


def validate_date_time(
    start_date: datetime | None,
    start_time: datetime | None,
    due_date: datetime | None,
    due_time: datetime | None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Range check first, then the overdue check."""
    range_check = validate_date_time_range(start_date, start_time, due_date, due_time)
    if not range_check["is_valid"]:
        return range_check
    return validate_overdue(due_date, due_time, now=now)


def validate_schedule(
    task: TaskSnapshot,
    final_start: datetime | None,
    final_due: datetime | None,
    on_success: Callable[[], Any],
    now: datetime | None = None,
) -> bool:
    """
    Accept or refuse a schedule proposed by the picker.

    Overdue due dates are accepted; the status suggester moves the task to
    overdue afterwards. Only an inverted range is refused.

    Args:
        task: Task being edited
        final_start: Proposed start date-time
        final_due: Proposed due date-time
        on_success: Called once, only when the proposal is accepted
        now: Clock override (defaults to datetime.now())

    Returns:
        True when accepted
    """
    check = validate_date_time_range(final_start, None, final_due, None)
    if not check["is_valid"]:
        logger.info("schedule_rejected", task_id=task.id, reason=check["message"])
        return False

    overdue = validate_overdue(final_due, None, now=now)
    if not overdue["is_valid"]:
        logger.info("schedule_overdue", task_id=task.id)

    on_success()
    return True
