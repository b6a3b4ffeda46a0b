"""Per tool-version caches for bin paths and exec-env output."""

from __future__ import annotations

import os
import threading
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

import jinja2

from .._hash import hash_to_str
from ..cache import CacheManager
from ..errors import ToolshedError

if TYPE_CHECKING:
    from ..config import Config
    from ..toolset.tool_version import ToolVersion
    from .external import ExternalPlugin

_jinja = jinja2.Environment(autoescape=False, keep_trailing_newline=False)


def render_cache_key(config: Config, tv: ToolVersion, templates: list[str]) -> str:
    """Render each template and hash the results into a file-name-safe key."""
    context = {
        "env": dict(os.environ),
        "project_root": str(config.project_root) if config.project_root else "",
        "opts": tv.opts,
        "version": tv.version,
        "plugin_name": tv.plugin_name,
    }
    try:
        parts = [_jinja.from_string(t).render(context).strip() for t in templates]
    except jinja2.TemplateError as e:
        raise ToolshedError(f"Failed to render exec-env cache key for {tv}: {e}") from e
    return hash_to_str("\n".join(parts))


class ExternalPluginCache:
    """Holds one ``CacheManager`` per tool version so repeat lookups stay in memory."""

    def __init__(self) -> None:
        self._bin_paths: dict[Path, CacheManager[list[str]]] = {}
        self._exec_env: dict[Path, CacheManager[dict[str, str]]] = {}
        self._lock = threading.Lock()

    def list_bin_paths(
        self,
        config: Config,
        plugin: ExternalPlugin,
        tv: ToolVersion,
        fetch: Callable[[], list[Path]],
    ) -> list[Path]:
        with self._lock:
            cm = self._bin_paths.get(tv.install_path)
            if cm is None:
                cm = CacheManager(
                    tv.cache_path / "list_bin_paths.json.z",
                    list[str],
                    fresh_files=_fresh_files(config, plugin, tv),
                )
                self._bin_paths[tv.install_path] = cm
        paths = cm.get_or_try_init(lambda: [str(p) for p in fetch()])
        return [Path(p) for p in paths]

    def exec_env(
        self,
        config: Config,
        plugin: ExternalPlugin,
        tv: ToolVersion,
        fetch: Callable[[], dict[str, str]],
    ) -> dict[str, str]:
        with self._lock:
            cm = self._exec_env.get(tv.install_path)
            if cm is None:
                cache_key = plugin.toml.exec_env.cache_key
                if cache_key:
                    key = render_cache_key(config, tv, cache_key)
                    path = tv.cache_path / "exec_env" / f"{key}.json.z"
                else:
                    path = tv.cache_path / "exec_env.json.z"
                cm = CacheManager(
                    path, dict[str, str], fresh_files=_fresh_files(config, plugin, tv)
                )
                self._exec_env[tv.install_path] = cm
        return dict(cm.get_or_try_init(fetch))


def _fresh_files(config: Config, plugin: ExternalPlugin, tv: ToolVersion) -> list[Path]:
    return [config.dirs.root, plugin.plugin_path, tv.install_path]
