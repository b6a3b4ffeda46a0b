"""User-facing version specifiers, before they are resolved."""

from __future__ import annotations

from dataclasses import dataclass
from functools import total_ordering
from pathlib import Path
from typing import TYPE_CHECKING

from ..errors import InvalidRequestError

if TYPE_CHECKING:
    from ..config import Config
    from ..plugins import Plugin
    from .tool_version import ToolVersion


@total_ordering
@dataclass(frozen=True)
class ToolVersionRequest:
    """Base of the request variants. Requests order by their rendered version."""

    plugin_name: str

    @staticmethod
    def parse(plugin_name: str, s: str) -> ToolVersionRequest:
        """Parse ``ref:<r>``, ``prefix:<p>``, ``path:<p>``, ``system`` or a version."""
        kind, sep, rest = s.partition(":")
        if not sep:
            if s == "system":
                return SystemRequest(plugin_name)
            return VersionRequest(plugin_name, s)
        if kind == "ref":
            return RefRequest(plugin_name, rest)
        if kind == "prefix":
            return PrefixRequest(plugin_name, rest)
        if kind == "path":
            return PathRequest(plugin_name, Path(rest))
        raise InvalidRequestError(s)

    def version(self) -> str:
        raise NotImplementedError

    def resolve(
        self,
        config: Config,
        plugin: Plugin,
        opts: dict[str, str] | None = None,
        latest_versions: bool = False,
    ) -> ToolVersion:
        from .tool_version import ToolVersion

        return ToolVersion.resolve(config, plugin, self, opts or {}, latest_versions)

    def __str__(self) -> str:
        return f"{self.plugin_name}@{self.version()}"

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ToolVersionRequest):
            return NotImplemented
        return self.version() < other.version()


@dataclass(frozen=True)
class VersionRequest(ToolVersionRequest):
    """An exact or fuzzy version such as ``18``, ``18.2.0``, ``lts`` or ``latest``."""

    requested: str

    def version(self) -> str:
        return self.requested


@dataclass(frozen=True)
class PrefixRequest(ToolVersionRequest):
    prefix: str

    def version(self) -> str:
        return f"prefix-{self.prefix}"


@dataclass(frozen=True)
class RefRequest(ToolVersionRequest):
    """A git ref (branch, tag, sha) built from source."""

    ref: str

    def version(self) -> str:
        return f"ref-{self.ref}"


@dataclass(frozen=True)
class PathRequest(ToolVersionRequest):
    """A tool installed outside toolshed at ``path``."""

    path: Path

    def version(self) -> str:
        return f"path-{self.path}"


@dataclass(frozen=True)
class SystemRequest(ToolVersionRequest):
    """Use whatever is on PATH outside toolshed."""

    def version(self) -> str:
        return "system"
