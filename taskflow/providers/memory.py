"""
In-memory Task Provider

Keeps tasks in a dict for tests, scripts and offline use. It applies the
same rule as hosted task lists: once a task is stored as done it can only
be deleted, never updated.
"""

from __future__ import annotations

from taskflow.logging_config import get_logger
from taskflow.providers.base import ProviderConstraintError, ProviderError, TaskProvider
from taskflow.tasks.models import Status, TaskSnapshot, generate_id

logger = get_logger(__name__)


class InMemoryTaskProvider(TaskProvider):
    """Dict-backed provider. Not shared between processes."""

    def __init__(self, tasks: list[TaskSnapshot] | None = None):
        self._tasks: dict[str, TaskSnapshot] = {}
        for task in tasks or []:
            self._tasks[task.id] = task

    @property
    def provider_name(self) -> str:
        return "memory"

    @property
    def tasks(self) -> list[TaskSnapshot]:
        return list(self._tasks.values())

    async def get(self, task_id: str) -> TaskSnapshot:
        try:
            return self._tasks[task_id]
        except KeyError:
            raise ProviderError(f"Task not found: {task_id}", status_code=404) from None

    async def create(self, task: TaskSnapshot) -> TaskSnapshot:
        stored = task.with_changes(id=generate_id())
        self._tasks[stored.id] = stored
        logger.debug("task_created", provider="memory", task_id=stored.id)
        return stored

    async def update(self, task: TaskSnapshot) -> TaskSnapshot:
        current = await self.get(task.id)
        if current.status == Status.DONE:
            raise ProviderConstraintError(f"Task {task.id} is completed and cannot be updated")
        self._tasks[task.id] = task
        return task

    async def delete(self, task_id: str) -> None:
        if self._tasks.pop(task_id, None) is None:
            raise ProviderError(f"Task not found: {task_id}", status_code=404)
