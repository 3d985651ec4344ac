"""Tests for taskflow/tasks/suggester.py

The suggester proposes a status from dates alone. It must agree with the
resolver about overdue tasks and settle after one application.
"""

from datetime import datetime, timedelta
from itertools import product

import pytest

from taskflow.tasks.models import Status, TaskSnapshot
from taskflow.tasks.suggester import apply_suggested_status, suggest_status

NOW = datetime(2024, 1, 15, 12, 0)
HOUR = timedelta(hours=1)
DAY = timedelta(days=1)


class TestSuggestStatus:
    """Tests for the ordered suggestion rules."""

    def test_past_due_suggests_overdue(self, make_task):
        task = make_task(status="todo", start_date=NOW - DAY, due_date=NOW - HOUR)
        assert suggest_status(task, now=NOW) == Status.OVERDUE

    def test_already_overdue_stays(self, overdue_task):
        assert suggest_status(overdue_task, now=NOW) is None

    def test_done_with_past_due_is_left_alone(self, make_task):
        """Should never call a finished task overdue."""
        task = make_task(status="done", due_date=NOW - DAY)
        assert suggest_status(task, now=NOW) is None

    def test_done_with_future_due_and_started(self, make_task):
        task = make_task(status="done", start_date=NOW - HOUR, due_date=NOW + DAY)
        assert suggest_status(task, now=NOW) == Status.IN_PROGRESS

    def test_done_with_future_due_not_started(self, make_task):
        task = make_task(status="done", start_date=NOW + HOUR, due_date=NOW + DAY)
        assert suggest_status(task, now=NOW) == Status.TODO

    def test_elapsed_start_suggests_in_progress(self, make_task):
        task = make_task(status="todo", start_date=NOW - HOUR, due_date=NOW + DAY)
        assert suggest_status(task, now=NOW) == Status.IN_PROGRESS

    def test_future_start_moves_in_progress_back_to_todo(self, make_task):
        task = make_task(status="in-progress", start_date=NOW + HOUR)
        assert suggest_status(task, now=NOW) == Status.TODO

    def test_backlog_with_future_start_suggests_todo(self, make_task):
        task = make_task(status="backlog", start_date=NOW + DAY)
        assert suggest_status(task, now=NOW) == Status.TODO

    def test_backlog_with_due_only_suggests_todo(self, make_task):
        task = make_task(status="backlog", due_date=NOW + DAY)
        assert suggest_status(task, now=NOW) == Status.TODO

    def test_todo_without_dates_suggests_backlog(self, make_task):
        assert suggest_status(make_task(status="todo"), now=NOW) == Status.BACKLOG

    def test_backlog_without_dates_stays(self, backlog_task):
        assert suggest_status(backlog_task, now=NOW) is None

    def test_utc_due_date_from_dict(self):
        """Should compare "Z" dates without raising."""
        task = TaskSnapshot.from_dict({"status": "todo", "due_date": "2024-01-14T09:00:00Z"})
        assert suggest_status(task, now=NOW) == Status.OVERDUE

    @pytest.mark.parametrize("status", list(Status))
    def test_same_snapshot_same_suggestion(self, make_task, status):
        """Should return the same answer when asked twice about an unchanged snapshot."""
        task = make_task(status=status, start_date=NOW - HOUR, due_date=NOW + DAY)
        before = task.to_dict()
        assert suggest_status(task, now=NOW) == suggest_status(task, now=NOW)
        assert task.to_dict() == before


class TestApplySuggestedStatus:
    """Tests for the auto-apply path."""

    def test_fills_actual_start_on_in_progress(self, make_task):
        task = make_task(status="todo", start_date=NOW - HOUR, start_time=NOW - HOUR, due_date=NOW + DAY)
        updated = apply_suggested_status(task, now=NOW)
        assert updated.status == Status.IN_PROGRESS
        assert updated.actual_start_date == NOW - HOUR

    def test_writes_no_history(self, make_task):
        task = make_task(status="todo", due_date=NOW - DAY)
        assert apply_suggested_status(task, now=NOW).activity_log == []

    def test_returns_same_task_when_nothing_to_do(self, backlog_task):
        assert apply_suggested_status(backlog_task, now=NOW) is backlog_task

    @pytest.mark.parametrize(
        ("status", "start", "due"),
        list(product(Status, [None, NOW - DAY, NOW + DAY], [None, NOW - HOUR, NOW + 2 * DAY])),
    )
    def test_suggestion_settles_after_one_step(self, make_task, status, start, due):
        """Should suggest nothing further once the suggestion is applied."""
        task = make_task(status=status, start_date=start, due_date=due)
        once = apply_suggested_status(task, now=NOW)
        assert suggest_status(once, now=NOW) in (None, once.status)
