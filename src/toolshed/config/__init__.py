"""Settings, on-disk layout and the plugins known to this installation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from ..dirs import Dirs
from ..plugins import ExternalPlugin
from ..shorthands import build_shorthands
from .settings import Settings, SettingsBuilder

if TYPE_CHECKING:
    from ..plugins import Plugin

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


@dataclass
class Config:
    """Everything version resolution and plugins need from the outside world.

    Attributes:
        plugins: Plugins by name.
        aliases: User aliases, ``{plugin: {alias: version}}``; checked before
            the plugin's own aliases.
        shorthands: Short plugin names mapped to repository URLs.
        project_root: Directory of the project config, when there is one.
    """

    settings: Settings
    dirs: Dirs
    plugins: dict[str, Plugin] = field(default_factory=dict)
    aliases: dict[str, dict[str, str]] = field(default_factory=dict)
    shorthands: dict[str, str] = field(default_factory=dict)
    project_root: Path | None = None

    def get_repo_url(self, name: str) -> str | None:
        return self.shorthands.get(name)

    def resolve_alias(self, plugin: Plugin, token: str) -> str:
        """Map ``token`` through user aliases, then plugin aliases; unknown tokens pass through."""
        user_aliases = self.aliases.get(plugin.name, {})
        if token in user_aliases:
            return user_aliases[token]
        plugin_aliases = plugin.get_aliases(self.settings)
        if token in plugin_aliases:
            return plugin_aliases[token]
        return token

    def get_or_create_plugin(self, name: str) -> Plugin:
        """Return the known plugin ``name``, registering an (uninstalled) external one if needed."""
        plugin = self.plugins.get(name)
        if plugin is None:
            plugin = ExternalPlugin(name, self.dirs, self.settings)
            self.plugins[name] = plugin
        return plugin


def load_config(
    settings: Settings | None = None,
    dirs: Dirs | None = None,
    project_root: Path | None = None,
) -> Config:
    """Build a Config from the environment.

    settings: defaults to ``SettingsBuilder().build()`` (TOOLSHED_* variables)
    dirs: defaults to ``Dirs.from_env()``
    project_root: if set, exported to plugin scripts as TOOLSHED_PROJECT_ROOT
    """
    settings = settings or SettingsBuilder().build()
    dirs = dirs or Dirs.from_env()
    config = Config(
        settings=settings,
        dirs=dirs,
        shorthands=build_shorthands(settings),
        project_root=Path(project_root) if project_root is not None else None,
    )
    if dirs.plugins.is_dir():
        for path in sorted(dirs.plugins.iterdir()):
            if path.name.startswith(".") or not path.is_dir():
                continue
            config.plugins[path.name] = ExternalPlugin(path.name, dirs, settings)
    logger.debug("loaded %d plugins from %s", len(config.plugins), dirs.plugins)
    return config


def init_logging(settings: Settings) -> None:
    """Configure the root logger from ``settings.log_level``."""
    logging.basicConfig(
        level=_LOG_LEVELS.get(settings.log_level, logging.INFO),
        format="%(levelname)s %(name)s: %(message)s",
    )


__all__ = [
    "Config",
    "Settings",
    "SettingsBuilder",
    "init_logging",
    "load_config",
]
