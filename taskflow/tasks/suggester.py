"""
Tool: Status Suggester
Purpose: Status implied by the clock and a task's planned dates

Users edit dates far more often than they drag tasks between columns. The
suggester looks at start/due dates against the current time and says which
status the task should probably be in. It never changes anything; callers
decide whether to apply the suggestion.

Usage:
    from taskflow.tasks.suggester import suggest_status, apply_suggested_status

    suggested = suggest_status(task)
    if suggested and suggested != task.status:
        task = apply_suggested_status(task)
"""

from __future__ import annotations

from datetime import datetime

from taskflow.tasks.models import Status, TaskSnapshot


def suggest_status(task: TaskSnapshot, now: datetime | None = None) -> Status | None:
    """
    Suggest a status from the task's dates. First matching rule wins.

    Args:
        task: Snapshot to inspect
        now: Clock override (defaults to datetime.now())

    Returns:
        Suggested status, or None when the current one is fine
    """
    now = now or datetime.now()
    start = task.start_date
    due = task.due_date
    status = task.status

    # Dates edited after completion can reopen a done task
    if status == Status.DONE:
        if due is not None and due > now:
            return Status.IN_PROGRESS if start is not None and start <= now else Status.TODO
        return None

    if task.is_overdue(now) and status != Status.OVERDUE:
        return Status.OVERDUE

    if start is not None:
        if start <= now and status in (Status.TODO, Status.BACKLOG):
            return Status.IN_PROGRESS
        if start > now and status in (Status.BACKLOG, Status.IN_PROGRESS):
            return Status.TODO

    if status == Status.BACKLOG and (start is not None or due is not None):
        return Status.TODO

    if start is None and due is None and status in (Status.TODO, Status.IN_PROGRESS):
        return Status.BACKLOG

    return None


def apply_suggested_status(task: TaskSnapshot, now: datetime | None = None) -> TaskSnapshot:
    """
    Move a task to its suggested status without going through the executor.

    This is the auto-apply path used while the user edits dates: no scenarios,
    no activity-log entry. Entering in-progress fills a missing actual start
    from the planned start, or from now.
    """
    now = now or datetime.now()
    suggested = suggest_status(task, now=now)
    if suggested is None or suggested == task.status:
        return task

    changes: dict = {"status": suggested}
    if suggested == Status.IN_PROGRESS and not task.has_actual_start:
        changes["actual_start_date"] = task.actual_start_date or task.start_date or now
        changes["actual_start_time"] = task.actual_start_time or task.start_time or now
    return task.with_changes(**changes)
