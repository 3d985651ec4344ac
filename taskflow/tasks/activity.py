"""
Tool: Activity Log
Purpose: Append-only history entries for tasks

The log is ordered by timestamp and never rewritten. New entries are
appended to a copy of the list; an entry is never stamped earlier than the
one before it, even if the caller's clock went backwards.

Usage:
    from taskflow.tasks.activity import append_activity, status_change_details

    log = append_activity(task.activity_log, "status_changed",
                          status_change_details("todo", "done"))
"""

from __future__ import annotations

from datetime import datetime

from taskflow.tasks import ACTION_CREATED
from taskflow.tasks.models import ActivityLogEntry, Status, generate_id


def status_change_details(from_status: str | Status, to_status: str | Status) -> str:
    return f"Status changed from {Status.coerce(from_status).value} to {Status.coerce(to_status).value}"


def make_entry(
    action: str,
    details: str,
    user_id: str = "user",
    timestamp: datetime | None = None,
) -> ActivityLogEntry:
    return ActivityLogEntry(
        id=generate_id(),
        action=action,
        details=details,
        user_id=user_id,
        timestamp=timestamp or datetime.now(),
    )


def append_activity(
    log: list[ActivityLogEntry],
    action: str,
    details: str,
    user_id: str = "user",
    now: datetime | None = None,
) -> list[ActivityLogEntry]:
    """
    Return a new log with one entry appended.

    Args:
        log: Existing entries (left untouched)
        action: Entry action, e.g. "status_changed"
        details: Human-readable description
        user_id: Who made the change
        now: Timestamp for the entry (defaults to datetime.now())

    Returns:
        New list ending with the added entry
    """
    timestamp = now or datetime.now()
    if log and log[-1].timestamp > timestamp:
        timestamp = log[-1].timestamp
    return [*log, make_entry(action, details, user_id=user_id, timestamp=timestamp)]


def initial_activity_log(user_id: str = "user", now: datetime | None = None) -> list[ActivityLogEntry]:
    """History for a task once it has been persisted for the first time."""
    now = now or datetime.now()
    details = f"Task created at {now:%b} {now.day}, {now.year}, {now:%I:%M %p}"
    return [make_entry(ACTION_CREATED, details, user_id=user_id, timestamp=now)]


def is_monotonic(log: list[ActivityLogEntry]) -> bool:
    return all(a.timestamp <= b.timestamp for a, b in zip(log, log[1:]))
