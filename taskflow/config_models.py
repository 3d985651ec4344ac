from __future__ import annotations

import logging
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field

from taskflow import ARGS_DIR

logger = logging.getLogger(__name__)


# =============================================================================
# TaskEngineConfig (args/task_engine.yaml)
# =============================================================================

class ActivityConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    user_id: str = Field(default="user")


class RestorationConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    title_suffix: str = Field(default="(Restored)")
    tag: str = Field(default="restored")
    delete_original: bool = Field(default=True)


class GoogleTasksConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    api_base: str = Field(default="https://tasks.googleapis.com/tasks/v1")
    task_list_id: str = Field(default="@default")
    timeout_seconds: float = Field(default=30.0, gt=0)
    max_title_length: int = Field(default=1024, ge=1)
    max_notes_length: int = Field(default=8192, ge=1)
    access_token_env: str = Field(default="GOOGLE_TASKS_ACCESS_TOKEN")


class ProviderConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    name: str = Field(default="memory")
    google_tasks: GoogleTasksConfig = Field(default_factory=GoogleTasksConfig)


class LoggingConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    level: str = Field(default="WARNING")
    json_output: bool = Field(default=False)


class TaskEngineConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    activity: ActivityConfig = Field(default_factory=ActivityConfig)
    restoration: RestorationConfig = Field(default_factory=RestorationConfig)
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Loader
# =============================================================================

_CONFIG_MAP: dict[str, type[BaseModel]] = {
    "task_engine": TaskEngineConfig,
}


def load_and_validate(config_name: str, model_class: type[BaseModel] | None = None) -> BaseModel:
    if model_class is None:
        model_class = _CONFIG_MAP.get(config_name)
        if model_class is None:
            raise ValueError(f"Unknown config: {config_name}. Available: {list(_CONFIG_MAP.keys())}")

    yaml_path = ARGS_DIR / f"{config_name}.yaml"

    try:
        if yaml_path.exists():
            with open(yaml_path) as f:
                raw = yaml.safe_load(f) or {}
        else:
            raw = {}

        return model_class.model_validate(raw)
    except Exception as e:
        logger.warning(f"Config validation failed for {config_name}: {e}, using defaults")
        return model_class()


def load_engine_config() -> TaskEngineConfig:
    """Load args/task_engine.yaml, falling back to defaults."""
    return load_and_validate("task_engine", TaskEngineConfig)  # type: ignore[return-value]


__all__ = [
    "ActivityConfig",
    "GoogleTasksConfig",
    "LoggingConfig",
    "ProviderConfig",
    "RestorationConfig",
    "TaskEngineConfig",
    "load_and_validate",
    "load_engine_config",
]
