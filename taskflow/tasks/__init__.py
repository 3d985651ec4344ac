"""Task Engine - status transitions for the five-state task lifecycle

A task is always in exactly one of backlog, todo, in-progress, done or
overdue. Moving between them is never just a field write: starting work
records when it actually started, finishing records when it ended, and
some moves only make sense once the user has picked how the dates should
change.

Components:
    models.py: TaskSnapshot, Subtask, ActivityLogEntry, Scenario
    guard.py: Reject transitions that are impossible for the task's data
    scenarios.py: Decision points the user must answer before a transition
    executor.py: Apply a transition and its side effects to a snapshot
    suggester.py: Status implied by the clock and the task's dates
    restoration.py: Clone-and-recreate for tasks the provider holds as done
    schedule.py: Start/due validation for the date picker
    activity.py: Append-only activity log helpers

Usage:
    from taskflow.tasks.guard import validate_transition
    from taskflow.tasks.scenarios import resolve_scenarios
    from taskflow.tasks.executor import execute_transition

    check = validate_transition(task, "in-progress", "todo")
    if check["is_valid"]:
        scenarios = resolve_scenarios(task, "in-progress", "todo")
        # ...collect one option per scenario from the user...
        result = execute_transition(task, "in-progress", "todo", selected)
"""

from datetime import timedelta

# Reserved option values
INVALID_OPTION = "invalid"
CANCEL_OPTION = "cancel"

# Planned dates pushed forward/back when the engine has to invent one
PLANNING_OFFSET = timedelta(hours=1)

# A redirect option may swap the target status once, never more
MAX_REDIRECT_DEPTH = 1

# Activity log actions
ACTION_STATUS_CHANGED = "status_changed"
ACTION_RESTORED = "restored"
ACTION_CREATED = "created"

__all__ = [
    "INVALID_OPTION",
    "CANCEL_OPTION",
    "PLANNING_OFFSET",
    "MAX_REDIRECT_DEPTH",
    "ACTION_STATUS_CHANGED",
    "ACTION_RESTORED",
    "ACTION_CREATED",
]
