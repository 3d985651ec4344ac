"""
Tool: Task Provider Base
Purpose: Abstract base class for external task-list providers

Defines the interface the restoration adapter and callers use to push task
snapshots to wherever tasks are stored. Providers in the wild treat a
completed task as final: it can be created or deleted, but not updated.

Usage:
    from taskflow.providers.base import TaskProvider
    from taskflow.providers.google_tasks import GoogleTasksProvider

    provider = GoogleTasksProvider(config)
    created = await provider.create(task)
"""

from abc import ABC, abstractmethod

from taskflow.tasks.models import TaskSnapshot


class ProviderError(Exception):
    """A provider call failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ProviderConstraintError(ProviderError):
    """The provider refuses this kind of change, e.g. updating a done task."""


class ProviderNetworkError(ProviderError):
    """The provider could not be reached."""


class TaskProvider(ABC):
    """
    Abstract base class for task-list providers.

    Every method raises a ProviderError subclass on failure; callers that
    need result dicts wrap the calls themselves.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name (e.g., 'google_tasks', 'memory')."""
        pass

    @abstractmethod
    async def get(self, task_id: str) -> TaskSnapshot:
        """
        Fetch a task by ID.

        Raises:
            ProviderError: task missing or request failed
        """
        pass

    @abstractmethod
    async def create(self, task: TaskSnapshot) -> TaskSnapshot:
        """
        Store a new task.

        Args:
            task: Snapshot to store; its id is replaced by the provider's

        Returns:
            The stored snapshot carrying the provider-assigned id
        """
        pass

    @abstractmethod
    async def update(self, task: TaskSnapshot) -> TaskSnapshot:
        """
        Overwrite an existing task.

        Raises:
            ProviderConstraintError: the stored task is already done
        """
        pass

    @abstractmethod
    async def delete(self, task_id: str) -> None:
        """Remove a task."""
        pass

    async def close(self) -> None:
        """Release network resources. No-op by default."""
        return None
