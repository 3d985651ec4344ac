#!/usr/bin/env python3
"""
Taskflow Command Line Interface

Runs the transition engine over a task stored as JSON and prints the
result as JSON.

Usage:
    taskflow --action validate --task-file task.json --from todo --to in-progress
    taskflow --action scenarios --task-file task.json --from backlog --to todo
    taskflow --action execute --task-file task.json --from backlog --to todo \\
        --options '{"Schedule Task": "set_start"}'
    taskflow --action execute --task-file task.json --from todo --to done \\
        --options '{"Complete Without Progress": "manual_times"}' \\
        --updates '{"actual_start_date": "2024-01-15T09:00", ...}'
    taskflow --action suggest --task-file task.json
    taskflow --action clone --task-file task.json --to todo

Output:
    JSON result with success status and data. Exit code 1 on failure.
"""

import argparse
import json
import sys
from datetime import datetime
from typing import Any

from taskflow import __version__
from taskflow.config_models import TaskEngineConfig, load_engine_config
from taskflow.logging_config import setup_logging
from taskflow.tasks.executor import execute_transition
from taskflow.tasks.guard import validate_transition
from taskflow.tasks.models import TaskSnapshot, parse_datetime
from taskflow.tasks.restoration import clone_for_status
from taskflow.tasks.scenarios import get_suggested_alternatives, resolve_scenarios
from taskflow.tasks.suggester import suggest_status


def _fail(message: str) -> None:
    print(json.dumps({"success": False, "error": message}))
    sys.exit(1)


def _load_task(path: str) -> TaskSnapshot:
    with open(path) as f:
        return TaskSnapshot.from_dict(json.load(f))


def _load_json_arg(raw: str | None, flag: str) -> dict[str, Any]:
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"{flag} is not valid JSON: {e}") from e
    if not isinstance(value, dict):
        raise ValueError(f"{flag} must be a JSON object")
    return value


def run(args: argparse.Namespace, config: TaskEngineConfig) -> dict[str, Any]:
    """Dispatch one action and return its JSON-ready result."""
    task = _load_task(args.task_file)
    now = parse_datetime(args.now) if args.now else datetime.now()
    from_status = args.from_status or task.status.value

    if args.action in ("validate", "scenarios", "execute", "clone") and not args.to_status:
        raise ValueError(f"--to required for {args.action}")

    if args.action == "validate":
        result = validate_transition(task, from_status, args.to_status, now=now)
        return {"success": result["is_valid"], **result}

    if args.action == "scenarios":
        scenarios = resolve_scenarios(task, from_status, args.to_status, now=now)
        return {
            "success": True,
            "requires_input": bool(scenarios),
            "scenarios": [s.to_dict() for s in scenarios],
            "alternatives": get_suggested_alternatives(task, from_status, args.to_status, now=now),
        }

    if args.action == "execute":
        result = execute_transition(
            task,
            from_status,
            args.to_status,
            selected_options=_load_json_arg(args.options, "--options"),
            is_create_mode=args.create_mode,
            field_updates=_load_json_arg(args.updates, "--updates"),
            now=now,
            user_id=config.activity.user_id,
        )
        if result["success"]:
            result["task"] = result["task"].to_dict()
        return result

    if args.action == "suggest":
        suggested = suggest_status(task, now=now)
        return {
            "success": True,
            "current": task.status.value,
            "suggested": suggested.value if suggested else None,
        }

    if args.action == "clone":
        clone = clone_for_status(task, args.to_status, now=now, config=config)
        return {"success": True, "task": clone.to_dict()}

    raise ValueError(f"Unknown action: {args.action}")


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        prog="taskflow",
        description="Task status transition engine",
    )
    parser.add_argument(
        "--action",
        required=True,
        choices=["validate", "scenarios", "execute", "suggest", "clone"],
        help="Action to perform",
    )
    parser.add_argument("--task-file", required=True, help="Path to the task JSON")
    parser.add_argument("--from", dest="from_status", help="Current status (defaults to the task's)")
    parser.add_argument("--to", dest="to_status", help="Requested status")
    parser.add_argument("--options", help="Chosen options as JSON, one per scenario title")
    parser.add_argument("--updates", help="Manually entered dates as JSON")
    parser.add_argument("--create-mode", action="store_true", help="Task is being created (no history)")
    parser.add_argument("--now", help="Clock override, ISO-8601")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    args = parser.parse_args(argv)

    config = load_engine_config()
    setup_logging(config.logging)

    try:
        result = run(args, config)
    except (OSError, ValueError) as e:
        _fail(str(e))
        return

    print(json.dumps(result, indent=2, default=str))
    if not result.get("success"):
        sys.exit(1)


if __name__ == "__main__":
    main()
