"""
Taskflow - task lifecycle engine

Tasks move through five states (backlog, todo, in-progress, done, overdue).
This package holds the transition engine that guards, explains and applies
those moves, plus the adapters that keep an external task-list provider in
step with it.

Components:
    tasks/: Guard, scenario resolver, executor, status suggester, restoration
    providers/: External task-list providers (Google Tasks, in-memory)
    config_models.py: Validated settings loaded from args/task_engine.yaml
    logging_config.py: structlog setup shared by the CLI and library code
    cli.py: JSON command line over the engine

Usage:
    from taskflow.tasks.models import TaskSnapshot
    from taskflow.tasks.scenarios import resolve_scenarios
    from taskflow.tasks.executor import execute_transition

    scenarios = resolve_scenarios(task, "backlog", "todo")
    result = execute_transition(task, "backlog", "todo", {"set_start": "set_start"})
"""

from pathlib import Path

__version__ = "0.1.0"

# Path constants
PROJECT_ROOT = Path(__file__).parent.parent
ARGS_DIR = PROJECT_ROOT / "args"

__all__ = [
    "__version__",
    "PROJECT_ROOT",
    "ARGS_DIR",
]
