"""Task Providers: external task-list backends

This package contains adapters for the systems that store tasks:
- google_tasks.py: Google Tasks REST API (tasks/v1)
- memory.py: In-process store with the same done-task restriction

All providers implement the TaskProvider abstract base class from base.py.
"""

from taskflow.providers.base import (
    ProviderConstraintError,
    ProviderError,
    ProviderNetworkError,
    TaskProvider,
)

__all__ = [
    "ProviderConstraintError",
    "ProviderError",
    "ProviderNetworkError",
    "TaskProvider",
    "get_provider",
]


def get_provider(config=None) -> TaskProvider:
    """Build the provider named in args/task_engine.yaml."""
    from taskflow.config_models import load_engine_config

    config = config or load_engine_config()
    name = config.provider.name

    if name == "memory":
        from taskflow.providers.memory import InMemoryTaskProvider

        return InMemoryTaskProvider()
    if name == "google_tasks":
        from taskflow.providers.google_tasks import GoogleTasksProvider

        return GoogleTasksProvider(config.provider.google_tasks)

    raise ValueError(f"Unknown task provider: {name}. Available: memory, google_tasks")
