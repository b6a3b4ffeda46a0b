"""Plugin kinds and the script machinery behind external plugins."""

from __future__ import annotations

from ._in_memory import InMemoryPlugin
from ._manifest import MANIFEST_FILENAME, PluginToml, load_plugin_toml
from ._plugin import Plugin, PluginType
from ._script_manager import (
    DOWNLOAD,
    EXEC_ENV,
    INSTALL,
    LATEST_STABLE,
    LIST_ALIASES,
    LIST_ALL,
    LIST_BIN_PATHS,
    LIST_LEGACY_FILENAMES,
    UNINSTALL,
    Script,
    ScriptManager,
)
from .external import ExternalPlugin

__all__ = [
    "DOWNLOAD",
    "EXEC_ENV",
    "INSTALL",
    "LATEST_STABLE",
    "LIST_ALIASES",
    "LIST_ALL",
    "LIST_BIN_PATHS",
    "LIST_LEGACY_FILENAMES",
    "MANIFEST_FILENAME",
    "UNINSTALL",
    "ExternalPlugin",
    "InMemoryPlugin",
    "Plugin",
    "PluginToml",
    "PluginType",
    "Script",
    "ScriptManager",
    "load_plugin_toml",
]
