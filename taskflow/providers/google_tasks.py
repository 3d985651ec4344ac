"""
Google Tasks Provider

Stores task snapshots in a Google Tasks list through the tasks/v1 REST API.
Google Tasks only knows two states, needsAction and completed, so the
five-state status and the schedule/execution fields travel as JSON metadata
in the task notes.

Completed tasks are treated as final: update() refuses them with
ProviderConstraintError and callers restore them by creating a copy.

Authentication: an OAuth access token, passed in or read from the
environment variable named in args/task_engine.yaml. Token refresh is the
caller's job.

API Documentation: https://developers.google.com/tasks/reference/rest
"""

from __future__ import annotations

import json
import os
from datetime import datetime
from typing import Any

import httpx

from taskflow.config_models import GoogleTasksConfig
from taskflow.logging_config import get_logger
from taskflow.providers.base import (
    ProviderConstraintError,
    ProviderError,
    ProviderNetworkError,
    TaskProvider,
)
from taskflow.tasks.models import (
    DATETIME_FIELDS,
    Status,
    TaskSnapshot,
    format_datetime,
)

logger = get_logger(__name__)

GOOGLE_COMPLETED = "completed"
GOOGLE_NEEDS_ACTION = "needsAction"


def build_task_notes(task: TaskSnapshot) -> str:
    """Serialise everything Google Tasks has no field for."""
    metadata: dict[str, Any] = {
        "description": task.description,
        "status": task.status.value,
        "priority": task.priority,
        "collection": task.collection,
        "tags": list(task.tags),
    }
    for name in DATETIME_FIELDS:
        metadata[name] = format_datetime(getattr(task, name))
    metadata["subtasks"] = [s.to_dict() for s in task.subtasks]
    return json.dumps(metadata, separators=(",", ":"))


def parse_task_notes(notes: str | None) -> dict[str, Any]:
    """Read metadata written by build_task_notes; plain notes become the description."""
    if not notes:
        return {}
    try:
        metadata = json.loads(notes)
    except json.JSONDecodeError:
        return {"description": notes}
    return metadata if isinstance(metadata, dict) else {"description": notes}


def to_google_payload(task: TaskSnapshot, config: GoogleTasksConfig) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "title": (task.title or "New Task").strip()[: config.max_title_length],
        "status": GOOGLE_COMPLETED if task.status == Status.DONE else GOOGLE_NEEDS_ACTION,
    }

    # Google keeps only the date part of due
    due = task.due_date or task.due_time
    if due is not None:
        payload["due"] = due.strftime("%Y-%m-%dT00:00:00.000Z")

    notes = build_task_notes(task)
    if len(notes) <= config.max_notes_length:
        payload["notes"] = notes
    elif task.description:
        payload["notes"] = task.description[: config.max_notes_length - 100]

    return payload


def from_google_payload(data: dict[str, Any], template: TaskSnapshot | None = None) -> TaskSnapshot:
    """
    Build a snapshot from a Google Tasks resource.

    Fields missing from the notes metadata are taken from `template` (the
    snapshot that was sent), so a round trip loses nothing.
    """
    base = template.to_dict() if template else {}
    metadata = parse_task_notes(data.get("notes"))

    merged: dict[str, Any] = {**base, **metadata}
    merged["id"] = data["id"]
    merged["title"] = data.get("title") or base.get("title") or ""

    if data.get("status") == GOOGLE_COMPLETED:
        merged["status"] = Status.DONE.value
    elif merged.get("status") in (None, "", Status.DONE.value):
        merged["status"] = Status.TODO.value

    if not merged.get("due_date") and data.get("due"):
        # Google keeps only the calendar day, so the UTC midnight is not shifted
        merged["due_date"] = datetime.fromisoformat(data["due"]).replace(tzinfo=None)

    return TaskSnapshot.from_dict(merged)


class GoogleTasksProvider(TaskProvider):
    """
    Google Tasks provider for a single task list.

    One httpx.AsyncClient is created lazily and reused; call close() when done.
    """

    def __init__(
        self,
        config: GoogleTasksConfig | None = None,
        access_token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize Google Tasks provider.

        Args:
            config: Provider settings from args/task_engine.yaml
            access_token: OAuth token (falls back to the configured env var)
            transport: Custom httpx transport (for testing)
        """
        self._config = config or GoogleTasksConfig()
        self._access_token = access_token or os.getenv(self._config.access_token_env)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def provider_name(self) -> str:
        return "google_tasks"

    @property
    def task_list_id(self) -> str:
        return self._config.task_list_id

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if not self._access_token:
            raise ProviderError(
                f"Google Tasks access token missing. Set {self._config.access_token_env}."
            )
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._config.api_base,
                headers={
                    "Authorization": f"Bearer {self._access_token}",
                    "Content-Type": "application/json",
                },
                timeout=self._config.timeout_seconds,
                transport=self._transport,
            )
        return self._client

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        data: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make API request with error handling."""
        client = await self._get_client()

        try:
            response = await client.request(method.upper(), endpoint, json=data)
            response.raise_for_status()
            return response.json() if response.content else {}

        except httpx.HTTPStatusError as e:
            logger.error(
                "google_tasks_api_error",
                method=method.upper(),
                endpoint=endpoint,
                status_code=e.response.status_code,
                body=e.response.text,
            )
            raise ProviderError(
                f"Google Tasks API error: {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            logger.error("google_tasks_request_error", method=method.upper(), endpoint=endpoint, error=str(e))
            raise ProviderNetworkError(f"Google Tasks request error: {e}") from e

    def _task_path(self, task_id: str | None = None) -> str:
        path = f"/lists/{self.task_list_id}/tasks"
        return f"{path}/{task_id}" if task_id else path

    async def get(self, task_id: str) -> TaskSnapshot:
        data = await self._make_request("GET", self._task_path(task_id))
        return from_google_payload(data)

    async def create(self, task: TaskSnapshot) -> TaskSnapshot:
        payload = to_google_payload(task, self._config)
        data = await self._make_request("POST", self._task_path(), payload)
        logger.info("google_task_created", task_id=data.get("id"))
        return from_google_payload(data, template=task)

    async def update(self, task: TaskSnapshot) -> TaskSnapshot:
        current = await self._make_request("GET", self._task_path(task.id))
        if current.get("status") == GOOGLE_COMPLETED:
            logger.warning("google_task_update_refused", task_id=task.id, reason="completed")
            raise ProviderConstraintError(
                f"Google Tasks does not allow updating completed task {task.id}"
            )

        payload = to_google_payload(task, self._config)
        payload["id"] = task.id
        data = await self._make_request("PATCH", self._task_path(task.id), payload)
        return from_google_payload(data, template=task)

    async def delete(self, task_id: str) -> None:
        await self._make_request("DELETE", self._task_path(task_id))
        logger.info("google_task_deleted", task_id=task_id)

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None
