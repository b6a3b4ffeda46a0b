"""Resolution of a ToolVersionRequest into a concrete, installable version."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from .._hash import hash_to_str
from ..dirs import is_runtime_symlink
from ..errors import UnsupportedOperationError, VersionResolutionError
from ..versions import find_latest, version_sub
from .request import (
    PathRequest,
    PrefixRequest,
    RefRequest,
    SystemRequest,
    ToolVersionRequest,
    VersionRequest,
)

if TYPE_CHECKING:
    from ..config import Config
    from ..plugins import Plugin

logger = logging.getLogger(__name__)


def pathname(request: ToolVersionRequest) -> str:
    """Directory name used under installs/, downloads/ and cache/ for ``request``."""
    if isinstance(request, VersionRequest):
        return request.requested
    if isinstance(request, PrefixRequest):
        return f"prefix-{request.prefix}"
    if isinstance(request, RefRequest):
        return f"ref-{request.ref}"
    if isinstance(request, PathRequest):
        return f"path-{hash_to_str(str(request.path))}"
    if isinstance(request, SystemRequest):
        return "system"
    raise TypeError(f"Unknown request type: {type(request)}")


@dataclass
class ToolVersion:
    """A single resolved version of a tool for a particular plugin.

    Attributes:
        request: The request this version was resolved from.
        version: Concrete version string (``system``, ``ref-<r>`` and
            ``path-<p>`` for the non-version requests).
        install_path: ``<installs>/<plugin>/<pathname>``; same pathname, same directory.
        opts: User options, exposed to plugin scripts as environment variables.
    """

    request: ToolVersionRequest
    plugin_name: str
    version: str
    install_path: Path
    cache_path: Path
    download_path: Path
    opts: dict[str, str] = field(default_factory=dict)

    @classmethod
    def new(
        cls,
        plugin: Plugin,
        request: ToolVersionRequest,
        opts: dict[str, str],
        version: str,
    ) -> ToolVersion:
        name = pathname(request)
        return cls(
            request=request,
            plugin_name=plugin.name,
            version=version,
            install_path=plugin.dirs.installs / plugin.name / name,
            cache_path=plugin.dirs.cache / plugin.name / name,
            download_path=plugin.dirs.downloads / plugin.name / name,
            opts=dict(opts),
        )

    @classmethod
    def resolve(
        cls,
        config: Config,
        plugin: Plugin,
        request: ToolVersionRequest,
        opts: dict[str, str],
        latest_versions: bool = False,
    ) -> ToolVersion:
        """Resolve ``request`` against ``plugin``.

        ``latest_versions`` demands live data: installed versions are not
        preferred for ``latest`` or exact matches.
        """
        if isinstance(request, VersionRequest):
            return cls._resolve_version(
                config, plugin, request, request.requested, opts, latest_versions
            )
        if isinstance(request, PrefixRequest):
            return cls._resolve_prefix(config, plugin, request, request.prefix, opts)
        if isinstance(request, PathRequest):
            return cls._resolve_path(plugin, request.path, opts)
        return cls.new(plugin, request, opts, request.version())

    @classmethod
    def _resolve_version(
        cls,
        config: Config,
        plugin: Plugin,
        request: ToolVersionRequest,
        v: str,
        opts: dict[str, str],
        latest_versions: bool,
    ) -> ToolVersion:
        v = config.resolve_alias(plugin, v)
        kind, sep, rest = v.partition(":")
        if sep and kind == "ref":
            return cls._resolve_ref(plugin, rest, opts)
        if sep and kind == "path":
            return cls._resolve_path(plugin, Path(rest), opts)
        if sep and kind == "prefix":
            return cls._resolve_prefix(config, plugin, request, rest, opts)

        def build(version: str) -> ToolVersion:
            return cls.new(plugin, request, opts, version)

        existing_path = plugin.installs_path / v
        if existing_path.exists() and not is_runtime_symlink(existing_path):
            # already installed, no need to fetch the remote versions
            return build(v)

        settings = config.settings
        if v == "latest":
            if not latest_versions:
                installed = plugin.latest_installed_version()
                if installed is not None:
                    return build(installed)
            latest = _latest_version(config, plugin)
            if latest is not None:
                return build(latest)
        if not latest_versions and v in plugin.list_installed_versions_matching(v):
            return build(v)
        if v in _versions_matching(config, plugin, v):
            return build(v)
        if "!-" in v:
            tv = cls._resolve_bang(config, plugin, request, v, opts)
            if tv is not None:
                return tv
        return cls._resolve_prefix(config, plugin, request, v, opts)

    @classmethod
    def _resolve_bang(
        cls,
        config: Config,
        plugin: Plugin,
        request: ToolVersionRequest,
        v: str,
        opts: dict[str, str],
    ) -> ToolVersion | None:
        """Resolve ``12.0.0!-1`` to the newest ``11``, ``12.1.0!-0.1`` to the newest ``12.0``."""
        wanted, _, minus = v.partition("!-")
        if wanted == "latest":
            latest = _latest_version(config, plugin)
            if latest is None:
                raise VersionResolutionError(str(request), f"No latest version found for {plugin.name}")
            wanted = latest
        else:
            wanted = config.resolve_alias(plugin, wanted)
        target = version_sub(wanted, minus)
        logger.debug("%s: %s resolved to target %s", plugin.name, v, target)
        version = _latest_version(config, plugin, target)
        if version is None:
            return None
        return cls.new(plugin, request, opts, version)

    @classmethod
    def _resolve_prefix(
        cls,
        config: Config,
        plugin: Plugin,
        request: ToolVersionRequest,
        prefix: str,
        opts: dict[str, str],
    ) -> ToolVersion:
        matches = _versions_matching(config, plugin, prefix)
        # nothing matched: keep the prefix itself, it may not be released yet
        version = matches[-1] if matches else prefix
        return cls.new(plugin, request, opts, version)

    @classmethod
    def _resolve_ref(cls, plugin: Plugin, ref: str, opts: dict[str, str]) -> ToolVersion:
        request = RefRequest(plugin.name, ref)
        return cls.new(plugin, request, opts, request.version())

    @classmethod
    def _resolve_path(cls, plugin: Plugin, path: Path, opts: dict[str, str]) -> ToolVersion:
        request = PathRequest(plugin.name, Path(path).expanduser().resolve(strict=True))
        return cls.new(plugin, request, opts, request.version())

    def is_installed(self) -> bool:
        """System tools are always present; path tools live at their own path."""
        if isinstance(self.request, SystemRequest):
            return True
        if isinstance(self.request, PathRequest):
            return self.request.path.exists()
        return self.install_path.exists()

    def __str__(self) -> str:
        return f"{self.plugin_name}@{self.version}"


def _versions_matching(config: Config, plugin: Plugin, query: str) -> list[str]:
    try:
        return plugin.list_versions_matching(config.settings, query)
    except UnsupportedOperationError:
        logger.debug("%s cannot list remote versions, using installed versions", plugin.name)
        return plugin.list_installed_versions_matching(query)


def _latest_version(config: Config, plugin: Plugin, query: str | None = None) -> str | None:
    if query is None:
        stable = plugin.latest_stable_version(config.settings)
        if stable is not None:
            return stable
        query = "latest"
    return find_latest(_versions_matching(config, plugin, query))
