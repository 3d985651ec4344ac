"""
Tool: Task Models
Purpose: Data structures shared by the transition engine

Usage:
    from taskflow.tasks.models import TaskSnapshot, Status, Subtask, Scenario

    task = TaskSnapshot.from_dict({"title": "File taxes", "status": "todo"})
    later = task.with_changes(status=Status.IN_PROGRESS)

A TaskSnapshot is immutable by convention: engine functions never mutate the
snapshot they are given and always hand back a new one. Dates are naive local
datetimes, matching datetime.now().
"""

from __future__ import annotations

import dataclasses
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any


def generate_id() -> str:
    """Generate a short unique ID."""
    return uuid.uuid4().hex[:12]


def parse_datetime(value: Any) -> datetime | None:
    """Accept a datetime, an ISO-8601 string or None.

    Values carrying an offset ("Z", "+02:00") are converted to naive local
    time so they compare against datetime.now().
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError as e:
            raise ValueError(f"Invalid datetime: {value!r}") from e
    if not isinstance(value, datetime):
        raise ValueError(f"Invalid datetime: {value!r}")
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def format_datetime(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


class Status(StrEnum):
    """Task lifecycle states."""

    BACKLOG = "backlog"
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"
    OVERDUE = "overdue"

    @classmethod
    def coerce(cls, value: str | Status) -> Status:
        """Turn a wire value into a Status, raising ValueError if unknown."""
        try:
            return cls(value)
        except ValueError as e:
            valid = ", ".join(s.value for s in cls)
            raise ValueError(f"Invalid status {value!r}. Must be one of: {valid}") from e


# Fields the schedule picker may write directly
SCHEDULE_FIELDS = ("start_date", "start_time", "due_date", "due_time")
ACTUAL_START_FIELDS = ("actual_start_date", "actual_start_time")
ACTUAL_END_FIELDS = ("actual_end_date", "actual_end_time")
DATETIME_FIELDS = SCHEDULE_FIELDS + ACTUAL_START_FIELDS + ACTUAL_END_FIELDS


@dataclass
class Subtask:
    """
    One checklist item inside a task.

    A subtask with required_completed set blocks the parent from reaching
    done until it is completed or the user explicitly overrides.
    """

    id: str
    title: str
    completed: bool = False
    required_completed: bool = False

    @property
    def is_blocking(self) -> bool:
        return self.required_completed and not self.completed

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Subtask:
        return cls(
            id=data.get("id") or generate_id(),
            title=data.get("title", ""),
            completed=bool(data.get("completed", False)),
            required_completed=bool(data.get("required_completed", False)),
        )


@dataclass
class ActivityLogEntry:
    """A single line of task history. Never edited once written."""

    id: str
    action: str
    details: str
    user_id: str
    timestamp: datetime
    comment: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "action": self.action,
            "details": self.details,
            "user_id": self.user_id,
            "timestamp": self.timestamp.isoformat(),
            "comment": self.comment,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ActivityLogEntry:
        timestamp = parse_datetime(data.get("timestamp"))
        if timestamp is None:
            raise ValueError("Activity log entry requires a timestamp")
        return cls(
            id=data.get("id") or generate_id(),
            action=data["action"],
            details=data.get("details", ""),
            user_id=data.get("user_id", "user"),
            timestamp=timestamp,
            comment=data.get("comment"),
        )


@dataclass
class TaskSnapshot:
    """
    The complete data for one task at a moment in time.

    Planned schedule (start/due) and execution record (actual start/end) are
    kept apart: the planned fields belong to the user, the actual fields are
    written only by status transitions.
    """

    id: str
    title: str
    status: Status = Status.BACKLOG
    description: str = ""
    priority: str = "medium"
    tags: list[str] = field(default_factory=list)
    collection: str = ""

    # Planned schedule
    start_date: datetime | None = None
    start_time: datetime | None = None
    due_date: datetime | None = None
    due_time: datetime | None = None

    # Execution record
    actual_start_date: datetime | None = None
    actual_start_time: datetime | None = None
    actual_end_date: datetime | None = None
    actual_end_time: datetime | None = None

    subtasks: list[Subtask] = field(default_factory=list)
    activity_log: list[ActivityLogEntry] = field(default_factory=list)

    def with_changes(self, **changes: Any) -> TaskSnapshot:
        """Return a copy with the given fields replaced.

        Lists are copied so the new snapshot never shares them with this one.
        """
        changes.setdefault("tags", list(self.tags))
        changes.setdefault("subtasks", [dataclasses.replace(s) for s in self.subtasks])
        changes.setdefault("activity_log", list(self.activity_log))
        return dataclasses.replace(self, **changes)

    @property
    def has_actual_start(self) -> bool:
        return self.actual_start_date is not None and self.actual_start_time is not None

    @property
    def has_actual_end(self) -> bool:
        return self.actual_end_date is not None and self.actual_end_time is not None

    def has_incomplete_required_subtasks(self) -> bool:
        return any(subtask.is_blocking for subtask in self.subtasks)

    def is_overdue(self, now: datetime) -> bool:
        """Overdue means the due date has passed and the task is not done.

        Both the scenario resolver and the status suggester go through this
        so they can never disagree about a finished task with a past due date.
        """
        return self.due_date is not None and self.due_date < now and self.status != Status.DONE

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "status": self.status.value,
            "description": self.description,
            "priority": self.priority,
            "tags": list(self.tags),
            "collection": self.collection,
        }
        for name in DATETIME_FIELDS:
            data[name] = format_datetime(getattr(self, name))
        data["subtasks"] = [s.to_dict() for s in self.subtasks]
        data["activity_log"] = [e.to_dict() for e in self.activity_log]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TaskSnapshot:
        """Build a snapshot from a dict, raising ValueError on bad values."""
        kwargs: dict[str, Any] = {
            "id": data.get("id") or generate_id(),
            "title": data.get("title") or "",
            "status": Status.coerce(data.get("status") or Status.BACKLOG),
            "description": data.get("description") or "",
            "priority": data.get("priority") or "medium",
            "tags": list(data.get("tags") or []),
            "collection": data.get("collection") or "",
        }
        for name in DATETIME_FIELDS:
            kwargs[name] = parse_datetime(data.get(name))
        kwargs["subtasks"] = [Subtask.from_dict(s) for s in data.get("subtasks") or []]
        kwargs["activity_log"] = [ActivityLogEntry.from_dict(e) for e in data.get("activity_log") or []]
        return cls(**kwargs)


@dataclass
class ScenarioOption:
    """One selectable answer inside a scenario."""

    label: str
    value: str
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"label": self.label, "value": self.value}
        if self.description:
            data["description"] = self.description
        return data


@dataclass
class Scenario:
    """A decision the user has to make before a transition can run."""

    title: str
    options: list[ScenarioOption]

    @property
    def option_values(self) -> list[str]:
        return [option.value for option in self.options]

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "options": [o.to_dict() for o in self.options]}
