from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from .request import ToolVersionRequest
from .tool_version import ToolVersion

if TYPE_CHECKING:
    from ..config import Config

logger = logging.getLogger(__name__)


class ToolSource(str, Enum):
    """Where a set of requests for a tool came from."""

    ARGUMENT = "argument"
    ENVIRONMENT = "environment"
    TOOL_VERSIONS = "tool_versions"
    LEGACY_VERSION_FILE = "legacy_version_file"
    CONFIG_FILE = "config_file"


@dataclass
class ToolVersionList:
    """Ordered requests for one tool from one source, and what they resolved to."""

    plugin_name: str
    source: ToolSource
    requests: list[tuple[ToolVersionRequest, dict[str, str]]] = field(default_factory=list)
    versions: list[ToolVersion] = field(default_factory=list)

    def add_request(self, request: ToolVersionRequest, opts: dict[str, str] | None = None) -> None:
        self.requests.append((request, dict(opts or {})))

    def resolve_all(self, config: Config, latest_versions: bool = False) -> None:
        """Resolve every request in order, replacing ``versions``.

        A request that fails is logged and skipped; the others still resolve.
        """
        self.versions = []
        plugin = config.plugins.get(self.plugin_name)
        if plugin is None or not plugin.is_installed():
            logger.debug("plugin %s is not installed", self.plugin_name)
            return
        for request, opts in self.requests:
            try:
                tv = ToolVersion.resolve(config, plugin, request, opts, latest_versions)
            except Exception as e:
                logger.warning("failed to resolve tool version %s: %s", request, _chain(e))
                continue
            self.versions.append(tv)


def _chain(err: BaseException) -> str:
    messages = []
    cur: BaseException | None = err
    while cur is not None:
        messages.append(str(cur) or type(cur).__name__)
        cur = cur.__cause__ or cur.__context__
    return ": ".join(messages)
