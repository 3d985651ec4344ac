"""Taskflow Test Suite

Test organization:
- unit/tasks/: Transition engine (guard, scenarios, executor, suggester,
  schedule, activity, restoration)
- unit/providers/: Task providers (in-memory, Google Tasks over MockTransport)
- unit/: Config loading and the CLI

Running tests:
    pytest

    # Specific module
    pytest tests/unit/tasks/
"""
