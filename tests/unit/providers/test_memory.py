"""Tests for taskflow/providers/memory.py and the provider factory"""

import pytest

from taskflow.config_models import ProviderConfig, TaskEngineConfig
from taskflow.providers import get_provider
from taskflow.providers.base import ProviderConstraintError, ProviderError
from taskflow.providers.google_tasks import GoogleTasksProvider
from taskflow.providers.memory import InMemoryTaskProvider
from taskflow.tasks.models import Status


class TestProviderFactory:
    """Tests for get_provider."""

    def test_memory_provider(self):
        provider = get_provider(TaskEngineConfig())
        assert isinstance(provider, InMemoryTaskProvider)
        assert provider.provider_name == "memory"

    def test_google_tasks_provider(self):
        config = TaskEngineConfig(provider=ProviderConfig(name="google_tasks"))
        assert isinstance(get_provider(config), GoogleTasksProvider)

    def test_unknown_provider_raises(self):
        config = TaskEngineConfig(provider=ProviderConfig(name="trello"))
        with pytest.raises(ValueError, match="Unknown task provider"):
            get_provider(config)


class TestInMemoryTaskProvider:
    """Tests for the dict-backed provider."""

    @pytest.mark.asyncio
    async def test_create_assigns_new_id(self, todo_task):
        provider = InMemoryTaskProvider()
        created = await provider.create(todo_task)
        assert created.id != todo_task.id
        assert await provider.get(created.id) == created

    @pytest.mark.asyncio
    async def test_update_open_task(self, todo_task):
        provider = InMemoryTaskProvider([todo_task])
        await provider.update(todo_task.with_changes(status=Status.DONE))
        assert (await provider.get(todo_task.id)).status == Status.DONE

    @pytest.mark.asyncio
    async def test_update_done_task_refused(self, done_task):
        """Should treat stored done tasks as final."""
        provider = InMemoryTaskProvider([done_task])
        with pytest.raises(ProviderConstraintError):
            await provider.update(done_task.with_changes(status=Status.TODO))

    @pytest.mark.asyncio
    async def test_get_missing(self):
        with pytest.raises(ProviderError) as exc_info:
            await InMemoryTaskProvider().get("nope")
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_delete(self, done_task):
        provider = InMemoryTaskProvider([done_task])
        await provider.delete(done_task.id)
        assert provider.tasks == []
        with pytest.raises(ProviderError):
            await provider.delete(done_task.id)
