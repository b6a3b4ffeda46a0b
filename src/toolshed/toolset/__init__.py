"""Version requests and their resolution against plugins."""

from __future__ import annotations

from ._toolset import Toolset
from .request import (
    PathRequest,
    PrefixRequest,
    RefRequest,
    SystemRequest,
    ToolVersionRequest,
    VersionRequest,
)
from .tool_version import ToolVersion
from .tool_version_list import ToolSource, ToolVersionList

__all__ = [
    "PathRequest",
    "PrefixRequest",
    "RefRequest",
    "SystemRequest",
    "ToolSource",
    "ToolVersion",
    "ToolVersionList",
    "ToolVersionRequest",
    "Toolset",
    "VersionRequest",
]
