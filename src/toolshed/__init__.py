"""Version resolution and plugin execution for a polyglot tool version manager."""

from __future__ import annotations

from .cache import CacheManager
from .config import Config, Settings, SettingsBuilder, init_logging, load_config
from .dirs import Dirs
from .env_diff import EnvDiff, EnvDiffOperation
from .errors import (
    FetchError,
    GitError,
    InvalidRequestError,
    InvalidVersionError,
    PluginInstallError,
    PluginNotInstalledError,
    ScriptExecutionError,
    ToolshedError,
    UnsupportedOperationError,
    VersionResolutionError,
)
from .plugins import ExternalPlugin, InMemoryPlugin, Plugin, Script, ScriptManager
from .progress import LoggingProgressReport, ProgressReport, QuietProgressReport
from .toolset import (
    PathRequest,
    PrefixRequest,
    RefRequest,
    SystemRequest,
    ToolSource,
    Toolset,
    ToolVersion,
    ToolVersionList,
    ToolVersionRequest,
    VersionRequest,
)

__all__ = [
    "CacheManager",
    "Config",
    "Dirs",
    "EnvDiff",
    "EnvDiffOperation",
    "ExternalPlugin",
    "FetchError",
    "GitError",
    "InMemoryPlugin",
    "InvalidRequestError",
    "InvalidVersionError",
    "LoggingProgressReport",
    "PathRequest",
    "Plugin",
    "PluginInstallError",
    "PluginNotInstalledError",
    "PrefixRequest",
    "ProgressReport",
    "QuietProgressReport",
    "RefRequest",
    "Script",
    "ScriptExecutionError",
    "ScriptManager",
    "Settings",
    "SettingsBuilder",
    "SystemRequest",
    "ToolSource",
    "ToolVersion",
    "ToolVersionList",
    "ToolVersionRequest",
    "Toolset",
    "ToolshedError",
    "UnsupportedOperationError",
    "VersionRequest",
    "init_logging",
    "load_config",
]
