"""
Tool: Scenario Resolver
Purpose: Work out which decisions the user must make before a transition

A transition such as "backlog -> todo" is ambiguous when the task has no
start date: the engine could invent one, or the user may want to pick it.
The resolver returns those decision points as Scenarios. An empty list
means the transition is direct and can be executed straight away.

Rules, first match wins:
    1. Moving to done with incomplete required subtasks: one blocking
       scenario offering force_complete or cancel, nothing else.
    2. The guard rejects the move: one scenario whose only real answer is
       the "invalid" sentinel.
    3. Moving to in-progress without full planned/actual start data: one
       scenario asking where the actual start should come from.
    4. Otherwise the (from, to) table below.

Usage:
    from taskflow.tasks.scenarios import resolve_scenarios

    scenarios = resolve_scenarios(task, "backlog", "todo")
    for scenario in scenarios:
        print(scenario.title, scenario.option_values)
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from itertools import product

from taskflow.tasks import CANCEL_OPTION, INVALID_OPTION
from taskflow.tasks.guard import validate_transition
from taskflow.tasks.models import Scenario, ScenarioOption, Status, TaskSnapshot

BACKLOG = Status.BACKLOG
TODO = Status.TODO
IN_PROGRESS = Status.IN_PROGRESS
DONE = Status.DONE
OVERDUE = Status.OVERDUE

# Options whose values the caller has to supply through field_updates
MANUAL_ENTRY_OPTIONS = frozenset({"manual_start", "manual_times", "adjust_time"})

# Options that send the executor to a different target status
REDIRECT_OPTIONS: dict[str, Status] = {
    "suggest_backlog": Status.BACKLOG,
    "switch_to_progress": Status.IN_PROGRESS,
}

CellBuilder = Callable[[TaskSnapshot, datetime], list[Scenario]]


def _option(label: str, value: str, description: str | None = None) -> ScenarioOption:
    return ScenarioOption(label=label, value=value, description=description)


def _cancel(label: str = "Cancel") -> ScenarioOption:
    return ScenarioOption(label=label, value=CANCEL_OPTION)


def format_display_date(value: datetime | None) -> str:
    """Short date for option labels, e.g. 'Mon, Jan 15, 2024'."""
    if value is None:
        return "Select date"
    return f"{value:%a}, {value:%b} {value.day}, {value.year}"


def format_display_time(value: datetime | None) -> str:
    """12-hour clock time, e.g. '02:30 PM'."""
    if value is None:
        return ""
    return value.strftime("%I:%M %p")


# ─────────────────────────────────────────────────────────────────────────────
# Shared scenarios
# ─────────────────────────────────────────────────────────────────────────────


def _required_subtasks_scenario() -> Scenario:
    return Scenario(
        title="Incomplete Required Subtasks",
        options=[
            _option(
                "Complete anyway",
                "force_complete",
                "Mark as done even though required subtasks are still open",
            ),
            _cancel(),
        ],
    )


def _invalid_transition_scenario(message: str) -> Scenario:
    return Scenario(
        title="Invalid Transition",
        options=[
            _option(
                message,
                INVALID_OPTION,
                "This status change is not allowed given current task data",
            ),
            _cancel(),
        ],
    )


def _missing_start_fields_scenario() -> Scenario:
    return Scenario(
        title="Missing Required Fields",
        options=[
            _option(
                "Use planned start as actual start time",
                "use_planned_as_actual",
                "Copy the planned start date and time into the actual start",
            ),
            _option(
                "Set actual start time to now",
                "set_actual_to_now",
                "Record the current time as the actual start",
            ),
            _cancel("Cancel transition"),
        ],
    )


def _restore_notice_scenario() -> Scenario:
    return Scenario(
        title="Google Tasks Limitation Notice",
        options=[
            _option(
                "I understand this will create a new task",
                "acknowledge_restore",
                "Completed tasks cannot be reopened on Google Tasks. "
                "A restored copy is created and the original is removed if possible.",
            ),
            _cancel(),
        ],
    )


def _overdue_completion(task: TaskSnapshot, now: datetime) -> list[Scenario]:
    if task.due_date is None or task.due_date >= now:
        return []
    return [
        Scenario(
            title="Overdue Completion",
            options=[
                _option(
                    "Complete as overdue",
                    "complete_overdue",
                    "Mark as done and keep the missed due date",
                ),
                _option(
                    "Update due date to now",
                    "update_due_to_now",
                    "Move the due date to the completion time",
                ),
                _cancel(),
            ],
        )
    ]


def _mark_overdue(task: TaskSnapshot, now: datetime) -> list[Scenario]:
    if task.due_date is None:
        return [
            Scenario(
                title="Missing Due Date",
                options=[
                    _option(
                        "Set due date in past",
                        "set_past_due",
                        "Add a due date one hour ago so the task is overdue",
                    ),
                    _cancel(),
                ],
            )
        ]
    if task.due_date >= now:
        return [
            Scenario(
                title="Cannot Mark as Overdue",
                options=[
                    _option(
                        "Due date hasn't passed yet",
                        INVALID_OPTION,
                        "Wait for the due date or move it into the past",
                    ),
                    _option("Set due date to past", "force_past_due"),
                    _cancel(),
                ],
            )
        ]
    return []


def _reset_confirmation(description: str) -> list[Scenario]:
    return [
        Scenario(
            title="Reset Task Data",
            options=[_option("Reset time fields", "reset", description), _cancel()],
        )
    ]


# ─────────────────────────────────────────────────────────────────────────────
# Table cells
# ─────────────────────────────────────────────────────────────────────────────


def _direct(task: TaskSnapshot, now: datetime) -> list[Scenario]:
    return []


def _backlog_to_todo(task: TaskSnapshot, now: datetime) -> list[Scenario]:
    if task.start_date is None:
        return [
            Scenario(
                title="Schedule Task",
                options=[
                    _option(
                        "Auto-schedule (in one hour)",
                        "set_start",
                        "Set the start time one hour from now",
                    ),
                    _option("Adjust date & time", "adjust_time", "Open calendar to set specific dates"),
                    _cancel(),
                ],
            )
        ]
    if task.start_date <= now:
        return [
            Scenario(
                title="Invalid Start Time",
                options=[
                    _option("Adjust to future date", "adjust_time", "Set start time to a future date"),
                    _option(
                        "Switch to in-progress instead",
                        "switch_to_progress",
                        "Start working on the task immediately",
                    ),
                    _cancel(),
                ],
            )
        ]
    when = format_display_date(task.start_date)
    if task.start_time is not None:
        when = f"{when} at {format_display_time(task.start_time)}"
    return [
        Scenario(
            title="Move to Scheduled",
            options=[
                _option(f"Confirm ({when})", "confirm"),
                _option("Adjust schedule", "adjust_time", "Change date and time"),
                _cancel(),
            ],
        )
    ]


def _backlog_to_in_progress(task: TaskSnapshot, now: datetime) -> list[Scenario]:
    return [
        Scenario(
            title="Start Task",
            options=[
                _option("Set specific schedule", "adjust_time", "Choose exact start and due dates"),
                _option("Start now", "record_start", "Record the actual start as now"),
                _option(
                    "Start now and plan from now",
                    "set_planned",
                    "Set both planned and actual start to now",
                ),
                _cancel(),
            ],
        )
    ]


def _backlog_to_done(task: TaskSnapshot, now: datetime) -> list[Scenario]:
    scenarios = [
        Scenario(
            title="Complete Task",
            options=[
                _option(
                    "Auto-record start and end times",
                    "auto_record",
                    "Set both times to now (instant completion)",
                ),
                _option("Enter times manually", "manual_times", "Specify when the task was actually done"),
                _cancel(),
            ],
        )
    ]
    return scenarios + _overdue_completion(task, now)


def _todo_to_backlog(task: TaskSnapshot, now: datetime) -> list[Scenario]:
    return _reset_confirmation("Clear scheduling information")


def _todo_to_in_progress(task: TaskSnapshot, now: datetime) -> list[Scenario]:
    if task.start_date is not None and task.start_date > now:
        return [
            Scenario(
                title="Early Start",
                options=[
                    _option("Start now (early)", "start_early", "Begin before the scheduled start time"),
                    _option(
                        "Reschedule start time to now",
                        "reschedule",
                        "Move the planned start to the current time",
                    ),
                    _cancel(),
                ],
            )
        ]
    return []


def _todo_to_done(task: TaskSnapshot, now: datetime) -> list[Scenario]:
    scenarios = [
        Scenario(
            title="Complete Without Progress",
            options=[
                _option("Auto-record start and end times", "auto_record", "Set both start and end time to now"),
                _option("Enter times manually", "manual_times", "Specify actual start and end times"),
                _cancel(),
            ],
        )
    ]
    return scenarios + _overdue_completion(task, now)


def _in_progress_to_backlog(task: TaskSnapshot, now: datetime) -> list[Scenario]:
    return [
        Scenario(
            title="Stop Work and Reset",
            options=[
                _option(
                    "Reset to unscheduled state",
                    "reset_to_backlog",
                    "Clear all time data and return to backlog",
                ),
                _cancel(),
            ],
        )
    ]


def _in_progress_to_todo(task: TaskSnapshot, now: datetime) -> list[Scenario]:
    if task.start_date is None or task.start_date <= now:
        return [
            Scenario(
                title="Cannot Return to Todo",
                options=[
                    _option(
                        "Task has already started",
                        INVALID_OPTION,
                        "Use backlog instead to reset the task",
                    ),
                    _option("Reset to backlog instead", "suggest_backlog"),
                    _cancel(),
                ],
            )
        ]
    return [
        Scenario(
            title="Stop Work Confirmation",
            options=[
                _option("Reset actual times", "reset", "Stop work and return to scheduled state"),
                _cancel(),
            ],
        )
    ]


def _in_progress_to_done(task: TaskSnapshot, now: datetime) -> list[Scenario]:
    return _overdue_completion(task, now)


def _overdue_to_backlog(task: TaskSnapshot, now: datetime) -> list[Scenario]:
    return _reset_confirmation("Clear all actual start/end times and return to unscheduled state")


def _overdue_to_todo(task: TaskSnapshot, now: datetime) -> list[Scenario]:
    if task.start_date is None or task.start_date <= now:
        return [
            Scenario(
                title="Update Start Time",
                options=[
                    _option(
                        "Set new future start time",
                        "update_start",
                        "Set start time one hour from now to make the task schedulable",
                    ),
                    _option("Adjust date & time", "adjust_time", "Open calendar to set specific dates"),
                    _cancel(),
                ],
            )
        ]
    return []


def _overdue_to_in_progress(task: TaskSnapshot, now: datetime) -> list[Scenario]:
    if task.actual_start_date is None:
        return [
            Scenario(
                title="Start Time Recording",
                options=[
                    _option(
                        "Record actual start time now",
                        "record_start",
                        "Begin working on this overdue task immediately",
                    ),
                    _cancel(),
                ],
            )
        ]
    return []


def _overdue_to_done(task: TaskSnapshot, now: datetime) -> list[Scenario]:
    scenarios = []
    if task.actual_start_date is None:
        scenarios.append(
            Scenario(
                title="Missing Start Time",
                options=[
                    _option("Auto-assign start time to now", "auto_start", "Set the actual start to now"),
                    _option("Enter start time manually", "manual_start", "Specify when the task actually started"),
                    _cancel(),
                ],
            )
        )
    return scenarios + _overdue_completion(task, now)


def _done_to_backlog(task: TaskSnapshot, now: datetime) -> list[Scenario]:
    return [
        _restore_notice_scenario(),
        Scenario(
            title="Reset Task Data",
            options=[
                _option(
                    "Reset all time fields",
                    "reset",
                    "Clear all scheduling and actual times for the new task",
                ),
                _option(
                    "Keep original schedule",
                    "keep_times",
                    "Preserve the planned start and due dates in the new task",
                ),
            ],
        ),
    ]


def _done_to_todo(task: TaskSnapshot, now: datetime) -> list[Scenario]:
    scenarios = [_restore_notice_scenario()]
    if task.start_date is None or task.start_date <= now:
        scenarios.append(
            Scenario(
                title="Schedule New Task",
                options=[
                    _option(
                        "Set future start time",
                        "set_future_start",
                        "Schedule the new task to start in one hour",
                    ),
                    _option("Adjust date & time", "adjust_time", "Open calendar to set specific dates"),
                ],
            )
        )
    return scenarios


def _done_to_in_progress(task: TaskSnapshot, now: datetime) -> list[Scenario]:
    return [
        _restore_notice_scenario(),
        Scenario(
            title="Work Resumption",
            options=[
                _option("Start fresh with current time", "fresh_start", "Record the actual start as now"),
                _option(
                    "Keep original start time",
                    "keep_original_start",
                    "Preserve when work originally started",
                ),
            ],
        ),
    ]


def _done_to_overdue(task: TaskSnapshot, now: datetime) -> list[Scenario]:
    return [
        _restore_notice_scenario(),
        Scenario(
            title="Overdue Task Setup",
            options=[
                _option(
                    "Set past due date to make overdue",
                    "set_past_due",
                    "Move the due date to one hour ago",
                ),
                _option(
                    "Keep existing due date if past",
                    "keep_due_if_past",
                    "Maintain the original due date when it has already passed",
                ),
            ],
        ),
    ]


TRANSITION_TABLE: dict[tuple[Status, Status], CellBuilder] = {
    (BACKLOG, BACKLOG): _direct,
    (BACKLOG, TODO): _backlog_to_todo,
    (BACKLOG, IN_PROGRESS): _backlog_to_in_progress,
    (BACKLOG, DONE): _backlog_to_done,
    (BACKLOG, OVERDUE): _mark_overdue,
    (TODO, BACKLOG): _todo_to_backlog,
    (TODO, TODO): _direct,
    (TODO, IN_PROGRESS): _todo_to_in_progress,
    (TODO, DONE): _todo_to_done,
    (TODO, OVERDUE): _mark_overdue,
    (IN_PROGRESS, BACKLOG): _in_progress_to_backlog,
    (IN_PROGRESS, TODO): _in_progress_to_todo,
    (IN_PROGRESS, IN_PROGRESS): _direct,
    (IN_PROGRESS, DONE): _in_progress_to_done,
    (IN_PROGRESS, OVERDUE): _mark_overdue,
    (DONE, BACKLOG): _done_to_backlog,
    (DONE, TODO): _done_to_todo,
    (DONE, IN_PROGRESS): _done_to_in_progress,
    (DONE, DONE): _direct,
    (DONE, OVERDUE): _done_to_overdue,
    (OVERDUE, BACKLOG): _overdue_to_backlog,
    (OVERDUE, TODO): _overdue_to_todo,
    (OVERDUE, IN_PROGRESS): _overdue_to_in_progress,
    (OVERDUE, DONE): _overdue_to_done,
    (OVERDUE, OVERDUE): _direct,
}

_missing_cells = set(product(Status, Status)) - TRANSITION_TABLE.keys()
if _missing_cells:
    raise RuntimeError(f"Transition table is missing cells: {sorted(_missing_cells)}")


# ─────────────────────────────────────────────────────────────────────────────
# Public API
# ─────────────────────────────────────────────────────────────────────────────


def get_table_scenarios(
    task: TaskSnapshot,
    from_status: str | Status,
    to_status: str | Status,
    now: datetime | None = None,
) -> list[Scenario]:
    """Look up the (from, to) table only, skipping the priority rules."""
    now = now or datetime.now()
    cell = TRANSITION_TABLE[(Status.coerce(from_status), Status.coerce(to_status))]
    return cell(task, now)


def resolve_scenarios(
    task: TaskSnapshot,
    from_status: str | Status,
    to_status: str | Status,
    now: datetime | None = None,
) -> list[Scenario]:
    """
    Return the decisions needed before a transition can execute.

    Args:
        task: Snapshot being moved
        from_status: Current status
        to_status: Requested status
        now: Clock override (defaults to datetime.now())

    Returns:
        List of scenarios; empty when the transition is direct
    """
    now = now or datetime.now()

    try:
        requested = Status.coerce(to_status)
    except ValueError:
        requested = None

    if requested == Status.DONE and task.has_incomplete_required_subtasks():
        return [_required_subtasks_scenario()]

    validation = validate_transition(task, from_status, to_status, now=now)
    if not validation["is_valid"]:
        return [_invalid_transition_scenario(validation.get("message") or "Cannot perform this transition")]

    source = Status.coerce(from_status)
    target = Status.coerce(to_status)

    if target == Status.IN_PROGRESS:
        has_start_fields = (
            task.start_time is not None
            and task.start_date is not None
            and task.actual_start_time is not None
            and task.actual_start_date is not None
        )
        if not has_start_fields:
            return [_missing_start_fields_scenario()]

    return TRANSITION_TABLE[(source, target)](task, now)


def requires_user_input(
    task: TaskSnapshot,
    from_status: str | Status,
    to_status: str | Status,
    now: datetime | None = None,
) -> bool:
    """True when some option needs values typed in by the user."""
    return any(
        option.value in MANUAL_ENTRY_OPTIONS
        for scenario in resolve_scenarios(task, from_status, to_status, now=now)
        for option in scenario.options
    )


def get_suggested_alternatives(
    task: TaskSnapshot,
    from_status: str | Status,
    to_status: str | Status,
    now: datetime | None = None,
) -> list[Status]:
    """Statuses the resolver offers instead of the requested one."""
    suggestions: list[Status] = []
    for scenario in resolve_scenarios(task, from_status, to_status, now=now):
        for option in scenario.options:
            alternative = REDIRECT_OPTIONS.get(option.value)
            if alternative is not None and alternative not in suggestions:
                suggestions.append(alternative)
    return suggestions


__all__ = [
    "MANUAL_ENTRY_OPTIONS",
    "REDIRECT_OPTIONS",
    "TRANSITION_TABLE",
    "format_display_date",
    "format_display_time",
    "get_suggested_alternatives",
    "get_table_scenarios",
    "requires_user_input",
    "resolve_scenarios",
]
