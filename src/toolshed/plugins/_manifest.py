"""Optional ``toolshed.plugin.toml`` shipped in a plugin's root directory."""

from __future__ import annotations

import tomllib
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import ToolshedError

MANIFEST_FILENAME = "toolshed.plugin.toml"


class ScriptData(BaseModel):
    """Literal output that replaces running the matching script."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)
    data: str | None = None


class ExecEnvSettings(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)
    # jinja2 templates; their rendered values identify one exec-env cache entry
    cache_key: list[str] | None = Field(None, alias="cache-key")

    @field_validator("cache_key", mode="before")
    @classmethod
    def _coerce_single(cls, v: object) -> object:
        if isinstance(v, str):
            return [v]
        return v


class PluginToml(BaseModel):
    """Contents of toolshed.plugin.toml. Every table is optional."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)
    list_aliases: ScriptData = Field(default_factory=ScriptData, alias="list-aliases")
    list_legacy_filenames: ScriptData = Field(
        default_factory=ScriptData, alias="list-legacy-filenames"
    )
    exec_env: ExecEnvSettings = Field(default_factory=ExecEnvSettings, alias="exec-env")


def load_plugin_toml(plugin_path: Path) -> PluginToml:
    """Read the manifest from ``plugin_path``; a missing file means defaults."""
    path = plugin_path / MANIFEST_FILENAME
    if not path.is_file():
        return PluginToml()
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ToolshedError(f"Invalid plugin manifest {path}: {e}") from e
    try:
        return PluginToml.model_validate(data)
    except ValidationError as e:
        raise ToolshedError(f"Invalid plugin manifest {path}: {e}") from e
