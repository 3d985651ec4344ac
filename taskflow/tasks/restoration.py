"""
Tool: Done-State Restoration
Purpose: Move completed tasks out of done on providers that forbid it

Hosted task lists such as Google Tasks refuse to edit a completed task.
Instead of updating it, restoration creates a copy in the requested status
and then tries to delete the original. The two calls are not atomic: if the
delete fails the copy is kept and the result says the original is still
there.

Usage:
    from taskflow.tasks.restoration import apply_status_change, restore

    moved = execute_transition(task, "done", "todo", selected)["task"]
    result = await apply_status_change(moved, "todo", provider, from_status="done")
    if result.get("requires_confirmation"):
        result = await restore(moved, "todo", provider)
"""

from __future__ import annotations

import dataclasses
from datetime import datetime
from typing import Any

from taskflow.config_models import TaskEngineConfig, load_engine_config
from taskflow.logging_config import get_logger
from taskflow.providers.base import ProviderError, TaskProvider
from taskflow.tasks import ACTION_RESTORED
from taskflow.tasks.activity import append_activity
from taskflow.tasks.executor import execute_transition
from taskflow.tasks.models import ACTUAL_END_FIELDS, Status, TaskSnapshot, generate_id

logger = get_logger(__name__)


def is_transition_allowed(from_status: str | Status, to_status: str | Status) -> bool:
    """False exactly when leaving done, which hosted lists cannot do in place."""
    return not (Status.coerce(from_status) == Status.DONE and Status.coerce(to_status) != Status.DONE)


def _reopen(task: TaskSnapshot, target: Status, now: datetime, config: TaskEngineConfig) -> TaskSnapshot:
    if target == Status.DONE:
        raise ValueError("Task is already done")
    if task.status == target:
        return task
    if task.status != Status.DONE:
        raise ValueError(f"Only completed tasks can be restored (task is {task.status.value})")

    # Untouched done task: apply the done -> target effects with default choices
    result = execute_transition(
        task,
        Status.DONE,
        target,
        is_create_mode=True,
        now=now,
        user_id=config.activity.user_id,
    )
    if not result["success"]:
        raise ValueError(result["error"])
    return result["task"]


def clone_for_status(
    task: TaskSnapshot,
    target_status: str | Status,
    now: datetime | None = None,
    config: TaskEngineConfig | None = None,
) -> TaskSnapshot:
    """
    Build the not-yet-stored copy that replaces a completed task.

    `task` is either the completed task itself or the snapshot
    execute_transition returned for the move out of done (its status
    already equal to `target_status`). A completed task is first run
    through the done -> target effects so both inputs produce the same
    dates.

    The copy gets a new id, a suffixed title, fresh subtask ids and the
    restoration tag (added once). The history is carried over with one
    "restored" entry appended. The execution end is cleared since the
    copy is no longer finished.

    Args:
        task: Completed task, or its transitioned snapshot
        target_status: Status for the copy
        now: Clock override (defaults to datetime.now())
        config: Engine settings (defaults to args/task_engine.yaml)

    Returns:
        New snapshot; the input is untouched

    Raises:
        ValueError: Unknown or done target, or a task that was never done
    """
    config = config or load_engine_config()
    now = now or datetime.now()
    target = Status.coerce(target_status)
    restoration = config.restoration

    reopened = _reopen(task, target, now, config)

    tags = list(reopened.tags)
    if restoration.tag not in tags:
        tags.append(restoration.tag)

    activity_log = append_activity(
        reopened.activity_log,
        ACTION_RESTORED,
        f"Task restored from completed state to {target.value}",
        user_id=config.activity.user_id,
        now=now,
    )

    return reopened.with_changes(
        id=generate_id(),
        title=f"{reopened.title} {restoration.title_suffix}",
        status=target,
        tags=tags,
        subtasks=[dataclasses.replace(s, id=generate_id()) for s in reopened.subtasks],
        activity_log=activity_log,
        **{name: None for name in ACTUAL_END_FIELDS},
    )


async def restore(
    task: TaskSnapshot,
    target_status: str | Status,
    provider: TaskProvider,
    delete_original: bool | None = None,
    now: datetime | None = None,
    config: TaskEngineConfig | None = None,
) -> dict[str, Any]:
    """
    Create the restored copy on the provider, then remove the original.

    `task` may be the completed task or the executor's result for the move
    out of done; the executor keeps the id, so task.id is the original to
    delete either way. A failed create leaves nothing behind and is
    returned as an error. A failed delete is logged and reported through
    original_retained; it is not retried.

    Returns:
        {"success": True, "task": created, "original_retained": bool}
        or {"success": False, "error": str}
    """
    config = config or load_engine_config()
    if delete_original is None:
        delete_original = config.restoration.delete_original

    try:
        clone = clone_for_status(task, target_status, now=now, config=config)
    except ValueError as e:
        return {"success": False, "error": str(e)}

    try:
        created = await provider.create(clone)
    except ProviderError as e:
        logger.error("restore_create_failed", task_id=task.id, provider=provider.provider_name, error=str(e))
        return {"success": False, "error": str(e) or "Failed to create restored task"}

    original_retained = True
    if delete_original:
        try:
            await provider.delete(task.id)
            original_retained = False
        except ProviderError as e:
            logger.warning(
                "restore_delete_failed",
                task_id=task.id,
                restored_id=created.id,
                error=str(e),
            )

    logger.info(
        "task_restored",
        task_id=task.id,
        restored_id=created.id,
        status=clone.status.value,
        original_retained=original_retained,
    )

    return {"success": True, "task": created, "original_retained": original_retained}


async def apply_status_change(
    task: TaskSnapshot,
    target_status: str | Status,
    provider: TaskProvider,
    from_status: str | Status | None = None,
) -> dict[str, Any]:
    """
    Push a status change to the provider, asking for confirmation when the
    provider cannot do it in place.

    Pass the executor's result together with the status it left as
    `from_status`; without it the snapshot's own status is taken as the
    starting point. Only the status is replaced here.
    """
    try:
        target = Status.coerce(target_status)
        source = Status.coerce(from_status) if from_status is not None else task.status
    except ValueError as e:
        return {"success": False, "error": str(e)}

    if not is_transition_allowed(source, target):
        return {
            "success": False,
            "requires_confirmation": True,
            "error": (
                f"{provider.provider_name} does not support restoring completed tasks. "
                "Create a new task instead?"
            ),
        }

    try:
        updated = await provider.update(task.with_changes(status=target))
    except ProviderError as e:
        logger.error("status_update_failed", task_id=task.id, provider=provider.provider_name, error=str(e))
        return {"success": False, "error": str(e) or "Failed to update task status"}

    return {"success": True, "task": updated}


__all__ = [
    "apply_status_change",
    "clone_for_status",
    "is_transition_allowed",
    "restore",
]
