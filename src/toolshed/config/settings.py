"""Runtime settings and the builder that merges overrides from several sources."""

from __future__ import annotations

import os
from datetime import timedelta
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

MissingRuntimeBehavior = Literal["autoinstall", "prompt", "warn", "ignore"]
LogLevel = Literal["trace", "debug", "info", "warn", "warning", "error"]

_TRUTHY = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_log_level() -> LogLevel:
    if _env_bool("TOOLSHED_TRACE"):
        return "trace"
    if _env_bool("TOOLSHED_DEBUG"):
        return "debug"
    level = os.environ.get("TOOLSHED_LOG_LEVEL", "info").strip().lower()
    if level in ("trace", "debug", "info", "warn", "warning", "error"):
        return level  # type: ignore[return-value]
    return "info"


class Settings(BaseModel):
    """Resolved settings consumed by plugins and version resolution.

    Attributes:
        jobs: Number of tool version lists resolved or installed in parallel.
        verbose: Echo plugin script stderr even when the script succeeds.
        raw: Pass script output straight through; forces ``jobs=1``.
        prefer_stale: Never expire remote version caches by age.
    """

    model_config = ConfigDict(extra="forbid")
    experimental: bool = False
    missing_runtime_behavior: MissingRuntimeBehavior = "warn"
    always_keep_download: bool = False
    always_keep_install: bool = False
    legacy_version_file: bool = True
    plugin_autoupdate_last_check_duration: timedelta = timedelta(days=7)
    trusted_config_paths: list[Path] = []
    verbose: bool = False
    asdf_compat: bool = False
    jobs: int = Field(4, ge=1)
    shorthands_file: Path | None = None
    disable_default_shorthands: bool = False
    log_level: LogLevel = "info"
    raw: bool = False
    prefer_stale: bool = False

    @classmethod
    def from_env(cls) -> Settings:
        trusted = os.environ.get("TOOLSHED_TRUSTED_CONFIG_PATHS", "")
        shorthands_file = os.environ.get("TOOLSHED_SHORTHANDS_FILE")
        return cls(
            experimental=_env_bool("TOOLSHED_EXPERIMENTAL"),
            always_keep_download=_env_bool("TOOLSHED_ALWAYS_KEEP_DOWNLOAD"),
            always_keep_install=_env_bool("TOOLSHED_ALWAYS_KEEP_INSTALL"),
            trusted_config_paths=[Path(p) for p in trusted.split(os.pathsep) if p],
            verbose=_env_bool("TOOLSHED_VERBOSE"),
            asdf_compat=_env_bool("TOOLSHED_ASDF_COMPAT"),
            jobs=max(_env_int("TOOLSHED_JOBS", 4), 1),
            shorthands_file=Path(shorthands_file) if shorthands_file else None,
            disable_default_shorthands=_env_bool("TOOLSHED_DISABLE_DEFAULT_SHORTHANDS"),
            log_level=_env_log_level(),
            raw=_env_bool("TOOLSHED_RAW"),
            prefer_stale=_env_bool("TOOLSHED_PREFER_STALE"),
        )

    def to_dict(self) -> dict[str, str]:
        """Render every setting as a display string (durations in minutes)."""
        out: dict[str, str] = {}
        for key, value in self.model_dump().items():
            if value is None:
                continue
            if isinstance(value, bool):
                out[key] = str(value).lower()
            elif isinstance(value, timedelta):
                out[key] = str(int(value.total_seconds() // 60))
            elif isinstance(value, list):
                out[key] = str([str(v) for v in value])
            else:
                out[key] = str(value)
        return out


class SettingsBuilder(BaseModel):
    """Partial settings from one source (env, global config, project config)."""

    experimental: bool | None = None
    missing_runtime_behavior: MissingRuntimeBehavior | None = None
    always_keep_download: bool | None = None
    always_keep_install: bool | None = None
    legacy_version_file: bool | None = None
    plugin_autoupdate_last_check_duration: timedelta | None = None
    trusted_config_paths: list[Path] = []
    verbose: bool | None = None
    asdf_compat: bool | None = None
    jobs: int | None = Field(None, ge=1)
    shorthands_file: Path | None = None
    disable_default_shorthands: bool | None = None
    log_level: LogLevel | None = None
    raw: bool | None = None
    prefer_stale: bool | None = None

    def merge(self, other: SettingsBuilder) -> SettingsBuilder:
        """Overlay the values set on ``other``; trusted paths accumulate."""
        for name in type(self).model_fields:
            value = getattr(other, name)
            if name == "trusted_config_paths":
                self.trusted_config_paths = [*self.trusted_config_paths, *value]
            elif value is not None:
                setattr(self, name, value)
        return self

    def build(self, base: Settings | None = None) -> Settings:
        settings = (base or Settings.from_env()).model_copy(deep=True)
        for name in type(self).model_fields:
            value = getattr(self, name)
            if name == "trusted_config_paths":
                settings.trusted_config_paths.extend(value)
            elif value is not None:
                setattr(settings, name, value)

        env_behavior = os.environ.get("TOOLSHED_MISSING_RUNTIME_BEHAVIOR", "").strip().lower()
        if env_behavior in ("autoinstall", "prompt", "warn", "ignore"):
            settings.missing_runtime_behavior = env_behavior  # type: ignore[assignment]

        if settings.raw:
            settings.verbose = True
            settings.jobs = 1
        return settings
