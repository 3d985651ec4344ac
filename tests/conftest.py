"""Shared test fixtures for taskflow tests.

This module provides common fixtures used across all test modules:
- A fixed clock so date rules are deterministic
- A task factory and ready-made snapshots in each status
- Default engine configuration

Usage:
    def test_something(now, make_task):
        task = make_task(status="todo", start_date=now)
        ...
"""

from collections.abc import Callable
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from taskflow.config_models import TaskEngineConfig
from taskflow.tasks.models import ActivityLogEntry, Status, Subtask, TaskSnapshot


# ─────────────────────────────────────────────────────────────────────────────
# Path Constants
# ─────────────────────────────────────────────────────────────────────────────

PROJECT_ROOT = Path(__file__).parent.parent
PACKAGE_DIR = PROJECT_ROOT / "taskflow"

# Monday, noon
FIXED_NOW = datetime(2024, 1, 15, 12, 0)
HOUR = timedelta(hours=1)
DAY = timedelta(days=1)


# ─────────────────────────────────────────────────────────────────────────────
# Clock Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def now() -> datetime:
    """Fixed current time used by every engine call in tests."""
    return FIXED_NOW


@pytest.fixture
def past(now: datetime) -> datetime:
    """One day before now."""
    return now - DAY


@pytest.fixture
def future(now: datetime) -> datetime:
    """One day after now."""
    return now + DAY


# ─────────────────────────────────────────────────────────────────────────────
# Task Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def make_task() -> Callable[..., TaskSnapshot]:
    """Factory for snapshots with sensible defaults.

    Returns:
        Callable accepting any TaskSnapshot field as a keyword
    """

    def _make(**fields) -> TaskSnapshot:
        fields.setdefault("id", "task_abc123")
        fields.setdefault("title", "File taxes")
        if "status" in fields:
            fields["status"] = Status.coerce(fields["status"])
        return TaskSnapshot(**fields)

    return _make


@pytest.fixture
def backlog_task(make_task) -> TaskSnapshot:
    """Unscheduled task with no dates."""
    return make_task(status="backlog")


@pytest.fixture
def todo_task(make_task, now) -> TaskSnapshot:
    """Task scheduled to start tomorrow, due in two days."""
    return make_task(status="todo", start_date=now + DAY, due_date=now + 2 * DAY)


@pytest.fixture
def in_progress_task(make_task, now) -> TaskSnapshot:
    """Task that started an hour ago and is due tomorrow."""
    started = now - HOUR
    return make_task(
        status="in-progress",
        start_date=started,
        start_time=started,
        due_date=now + DAY,
        actual_start_date=started,
        actual_start_time=started,
    )


@pytest.fixture
def done_task(make_task, now) -> TaskSnapshot:
    """Completed task with a full execution record and some history."""
    started = now - 2 * DAY
    finished = now - DAY
    return make_task(
        status="done",
        tags=["finance"],
        start_date=started,
        due_date=now + DAY,
        actual_start_date=started,
        actual_start_time=started,
        actual_end_date=finished,
        actual_end_time=finished,
        subtasks=[Subtask(id="sub_1", title="Find receipts", completed=True)],
        activity_log=[
            ActivityLogEntry(
                id="log_1",
                action="status_changed",
                details="Status changed from in-progress to done",
                user_id="user",
                timestamp=finished,
            )
        ],
    )


@pytest.fixture
def overdue_task(make_task, now) -> TaskSnapshot:
    """Task whose due date passed yesterday and was never started."""
    return make_task(status="overdue", start_date=now - 2 * DAY, due_date=now - DAY)


@pytest.fixture
def blocking_subtasks() -> list[Subtask]:
    """One finished subtask and one required subtask still open."""
    return [
        Subtask(id="sub_1", title="Gather documents", completed=True, required_completed=True),
        Subtask(id="sub_2", title="Sign the form", completed=False, required_completed=True),
    ]


# ─────────────────────────────────────────────────────────────────────────────
# Config Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def engine_config() -> TaskEngineConfig:
    """Engine settings with all defaults."""
    return TaskEngineConfig()
