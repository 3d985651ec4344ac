"""Tests for taskflow/tasks/models.py

The models carry task data between the engine components:
- Status parsing from wire values
- Snapshot copying without shared lists
- Overdue and required-subtask queries
- Dict serialisation with ISO-8601 dates
"""

from datetime import datetime, timedelta, timezone

import pytest

from taskflow.tasks.models import (
    ActivityLogEntry,
    Scenario,
    ScenarioOption,
    Status,
    Subtask,
    TaskSnapshot,
    generate_id,
    parse_datetime,
)


# ─────────────────────────────────────────────────────────────────────────────
# Helper Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestHelpers:
    """Tests for id generation and datetime parsing."""

    def test_generate_id_is_unique(self):
        """Should produce distinct short ids."""
        ids = {generate_id() for _ in range(100)}
        assert len(ids) == 100
        assert all(len(i) == 12 for i in ids)

    def test_parse_datetime_accepts_iso_string(self):
        """Should parse ISO-8601 strings."""
        assert parse_datetime("2024-01-15T09:30:00") == datetime(2024, 1, 15, 9, 30)

    def test_parse_datetime_passes_through_datetime(self, now):
        """Should return datetimes unchanged."""
        assert parse_datetime(now) is now

    def test_parse_datetime_empty_is_none(self):
        """Should treat None and empty string as missing."""
        assert parse_datetime(None) is None
        assert parse_datetime("") is None

    def test_parse_datetime_rejects_garbage(self):
        """Should raise ValueError for unparseable values."""
        with pytest.raises(ValueError, match="Invalid datetime"):
            parse_datetime("next tuesday")
        with pytest.raises(ValueError):
            parse_datetime(42)

    def test_parse_datetime_utc_becomes_naive_local(self):
        """Should convert offset-aware values to naive local time."""
        parsed = parse_datetime("2024-01-14T09:00:00Z")
        expected = datetime(2024, 1, 14, 9, 0, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
        assert parsed.tzinfo is None
        assert parsed == expected

    def test_parse_datetime_offset_and_aware_datetime(self):
        """Should treat "+00:00" strings and aware datetimes the same way as "Z"."""
        aware = datetime(2030, 1, 16, 9, 0, tzinfo=timezone.utc)
        assert parse_datetime("2030-01-16T09:00:00+00:00") == parse_datetime(aware)
        assert parse_datetime(aware).tzinfo is None


# ─────────────────────────────────────────────────────────────────────────────
# Status Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestStatus:
    """Tests for the Status enum."""

    def test_wire_values(self):
        """Should keep the hyphenated in-progress spelling."""
        assert [s.value for s in Status] == ["backlog", "todo", "in-progress", "done", "overdue"]

    def test_coerce_from_string(self):
        assert Status.coerce("in-progress") is Status.IN_PROGRESS

    def test_coerce_from_member(self):
        assert Status.coerce(Status.DONE) is Status.DONE

    def test_coerce_unknown_lists_valid_values(self):
        """Should name the accepted values in the error."""
        with pytest.raises(ValueError, match="Must be one of: backlog, todo"):
            Status.coerce("pending")


# ─────────────────────────────────────────────────────────────────────────────
# Snapshot Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestTaskSnapshot:
    """Tests for TaskSnapshot behaviour."""

    def test_defaults(self):
        task = TaskSnapshot(id="t1", title="Call the bank")
        assert task.status == Status.BACKLOG
        assert task.priority == "medium"
        assert task.subtasks == []
        assert task.activity_log == []

    def test_with_changes_leaves_original_untouched(self, todo_task):
        """Should return a new snapshot and keep the original as it was."""
        changed = todo_task.with_changes(status=Status.DONE)
        assert changed.status == Status.DONE
        assert todo_task.status == Status.TODO

    def test_with_changes_copies_lists(self, done_task):
        """Should never share tags, subtasks or history with the original."""
        copy = done_task.with_changes()
        copy.tags.append("extra")
        copy.activity_log.clear()
        copy.subtasks[0].completed = False

        assert done_task.tags == ["finance"]
        assert len(done_task.activity_log) == 1
        assert done_task.subtasks[0].completed is True

    def test_actual_start_needs_both_fields(self, make_task, now):
        assert make_task(actual_start_date=now).has_actual_start is False
        assert make_task(actual_start_date=now, actual_start_time=now).has_actual_start is True

    def test_required_subtasks_block(self, make_task, blocking_subtasks):
        assert make_task(subtasks=blocking_subtasks).has_incomplete_required_subtasks() is True

    def test_optional_open_subtask_does_not_block(self, make_task):
        subtasks = [Subtask(id="s", title="Nice to have", completed=False, required_completed=False)]
        assert make_task(subtasks=subtasks).has_incomplete_required_subtasks() is False


class TestIsOverdue:
    """Tests for the shared overdue predicate."""

    def test_past_due_not_done(self, make_task, now):
        assert make_task(status="todo", due_date=now - timedelta(minutes=1)).is_overdue(now) is True

    def test_done_is_never_overdue(self, make_task, now):
        """Should not flag a finished task with a missed due date."""
        assert make_task(status="done", due_date=now - timedelta(days=3)).is_overdue(now) is False

    def test_due_exactly_now_is_not_overdue(self, make_task, now):
        assert make_task(status="todo", due_date=now).is_overdue(now) is False

    def test_no_due_date(self, make_task, now):
        assert make_task(status="todo").is_overdue(now) is False


# ─────────────────────────────────────────────────────────────────────────────
# Serialisation Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestSerialisation:
    """Tests for to_dict/from_dict."""

    def test_to_dict_uses_iso_strings(self, in_progress_task):
        data = in_progress_task.to_dict()
        assert data["status"] == "in-progress"
        assert data["actual_start_date"] == "2024-01-15T11:00:00"
        assert data["actual_end_date"] is None

    def test_from_dict_restores_snapshot(self, done_task):
        """Should rebuild an equal snapshot from its dict."""
        assert TaskSnapshot.from_dict(done_task.to_dict()) == done_task

    def test_from_dict_generates_missing_id(self):
        task = TaskSnapshot.from_dict({"title": "Water plants"})
        assert task.id
        assert task.status == Status.BACKLOG

    def test_from_dict_with_utc_dates_compares_with_now(self, now):
        """Should load JavaScript-style "Z" dates as naive values."""
        task = TaskSnapshot.from_dict({"status": "todo", "due_date": "2024-01-14T09:00:00Z"})
        assert task.due_date.tzinfo is None
        assert task.is_overdue(now)

    def test_from_dict_rejects_unknown_status(self):
        with pytest.raises(ValueError):
            TaskSnapshot.from_dict({"title": "x", "status": "archived"})

    def test_activity_entry_requires_timestamp(self):
        with pytest.raises(ValueError, match="timestamp"):
            ActivityLogEntry.from_dict({"action": "created", "details": "x"})

    def test_scenario_to_dict_omits_empty_description(self):
        scenario = Scenario(
            title="Reset Task Data",
            options=[ScenarioOption("Reset", "reset", "Clear dates"), ScenarioOption("Cancel", "cancel")],
        )
        data = scenario.to_dict()
        assert data["options"][0] == {"label": "Reset", "value": "reset", "description": "Clear dates"}
        assert data["options"][1] == {"label": "Cancel", "value": "cancel"}
        assert scenario.option_values == ["reset", "cancel"]
