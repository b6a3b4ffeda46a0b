from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .tool_version_list import ToolVersionList

if TYPE_CHECKING:
    from ..config import Config
    from ..plugins import Plugin
    from .tool_version import ToolVersion

logger = logging.getLogger(__name__)


@dataclass
class Toolset:
    """The tool version lists in effect, in precedence order."""

    lists: list[ToolVersionList] = field(default_factory=list)

    def add(self, tvl: ToolVersionList) -> None:
        self.lists.append(tvl)

    def resolve(self, config: Config, latest_versions: bool = False) -> None:
        """Resolve all lists concurrently, ``settings.jobs`` at a time."""
        if not self.lists:
            return
        workers = max(1, min(config.settings.jobs, len(self.lists)))
        logger.debug("resolving %d tool version lists with %d workers", len(self.lists), workers)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(tvl.resolve_all, config, latest_versions) for tvl in self.lists]
            for future in futures:
                future.result()

    def list_current_versions(self, config: Config) -> list[tuple[Plugin, ToolVersion]]:
        current = []
        for tvl in self.lists:
            plugin = config.plugins.get(tvl.plugin_name)
            if plugin is None:
                continue
            current.extend((plugin, tv) for tv in tvl.versions)
        return current

    def list_missing_versions(self, config: Config) -> list[tuple[Plugin, ToolVersion]]:
        """Resolved versions that still need installing."""
        return [
            (plugin, tv)
            for plugin, tv in self.list_current_versions(config)
            if not tv.is_installed()
        ]
