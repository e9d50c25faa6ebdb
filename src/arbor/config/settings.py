from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

CONFIG_FILENAME = "arbor.yaml"


class StepConfig(BaseModel):
    name: str = ""
    enabled: bool | None = None
    condition: dict[str, Any] = Field(default_factory=dict)
    args: list[str] = Field(default_factory=list)
    command: str = ""
    from_: str = Field(default="", alias="from")
    to: str = ""
    key: str = ""
    keys: list[str] = Field(default_factory=list)
    value: str = ""
    store_as: str = ""
    file: str = ""
    source: str = ""
    source_file: str = ""
    type: str = ""

    model_config = {"populate_by_name": True}

    @field_validator("args", "keys", mode="before")
    @classmethod
    def _coerce_str_list(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, (str, int, float, bool)):
            value = [value]
        if isinstance(value, list):
            return [str(item) for item in value]
        return value

    @field_validator("condition", mode="before")
    @classmethod
    def _none_condition(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("value", "command", mode="before")
    @classmethod
    def _coerce_scalar(cls, value: Any) -> Any:
        if isinstance(value, (int, float, bool)):
            return str(value)
        return value

    def is_enabled(self) -> bool:
        return self.enabled is None or self.enabled


class CleanupStepConfig(BaseModel):
    name: str
    condition: dict[str, Any] = Field(default_factory=dict)

    @field_validator("condition", mode="before")
    @classmethod
    def _none_condition(cls, value: Any) -> Any:
        return {} if value is None else value


class PreFlightConfig(BaseModel):
    condition: dict[str, Any] = Field(default_factory=dict)


class ScaffoldConfig(BaseModel):
    pre_flight: PreFlightConfig | None = None
    steps: list[StepConfig] = Field(default_factory=list)
    override: bool = False


class CleanupConfig(BaseModel):
    steps: list[CleanupStepConfig] = Field(default_factory=list)


class ToolConfig(BaseModel):
    version_file: str = ""

    model_config = {"extra": "allow"}


class ArborConfig(BaseModel):
    preset: str = ""
    site_name: str = ""
    default_branch: str = "main"
    scaffold: ScaffoldConfig = ScaffoldConfig()
    cleanup: CleanupConfig = CleanupConfig()
    tools: dict[str, ToolConfig] = Field(default_factory=dict)
    config_dir: Path | None = None


def find_config_file(start: Path | None = None) -> Path | None:
    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


def parse_config(raw: dict[str, Any]) -> ArborConfig:
    return ArborConfig.model_validate(raw)


def load_config(start: Path | None = None) -> ArborConfig:
    config_path = find_config_file(start)

    if config_path is not None:
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}
        config = parse_config(raw)
        config.config_dir = config_path.parent
    else:
        config = ArborConfig()

    preset_env = os.environ.get("ARBOR_PRESET")
    if preset_env is not None:
        config.preset = preset_env

    site_name_env = os.environ.get("ARBOR_SITE_NAME")
    if site_name_env is not None:
        config.site_name = site_name_env

    return config
