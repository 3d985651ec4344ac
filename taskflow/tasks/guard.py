"""
Tool: Transition Guard
Purpose: Reject status changes that no user choice could make valid

Only structurally impossible moves are blocked here. Everything else is
provisionally allowed and handed to the scenario resolver, which decides
whether the user has to answer anything first.

Usage:
    from taskflow.tasks.guard import validate_transition

    check = validate_transition(task, "in-progress", "todo")
    if not check["is_valid"]:
        print(check["message"])
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from taskflow.tasks.models import Status, TaskSnapshot


def validate_transition(
    task: TaskSnapshot,
    from_status: str | Status,
    to_status: str | Status,
    now: datetime | None = None,
) -> dict[str, Any]:
    """
    Check whether a transition is possible at all.

    Args:
        task: Snapshot being moved
        from_status: Status the caller believes the task is in
        to_status: Requested status
        now: Clock override (defaults to datetime.now())

    Returns:
        dict with is_valid and, when invalid, a message
    """
    now = now or datetime.now()

    try:
        source = Status.coerce(from_status)
        target = Status.coerce(to_status)
    except ValueError as e:
        return {"is_valid": False, "message": str(e)}

    if task.status != source:
        return {
            "is_valid": False,
            "message": f"Task is {task.status.value}, not {source.value}",
        }

    if source == target:
        return {"is_valid": False, "message": f"Task is already {target.value}"}

    # Work has demonstrably begun; only a full reset to backlog undoes that
    if source == Status.IN_PROGRESS and target == Status.TODO:
        if task.start_date is not None and task.start_date <= now:
            return {
                "is_valid": False,
                "message": "Cannot return to todo: task has already started",
            }

    return {"is_valid": True}
