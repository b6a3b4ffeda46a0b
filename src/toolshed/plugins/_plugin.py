"""The capability interface every plugin kind implements."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from ..dirs import Dirs, is_runtime_symlink
from ..errors import UnsupportedOperationError
from ..versions import find_latest, fuzzy_match_filter, sort_versions

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ..config import Config
    from ..config.settings import Settings
    from ..progress import ProgressReport
    from ..toolset.tool_version import ToolVersion

logger = logging.getLogger(__name__)

PluginType = Literal["core", "external"]


class Plugin(ABC):
    """A named backend that lists, installs and describes versions of one tool.

    Method bodies here are the fallbacks used by built-in ("core") plugins;
    script-backed plugins override them. Only ``list_remote_versions`` and
    ``install_version`` must be provided.
    """

    kind: PluginType = "core"

    def __init__(self, name: str, dirs: Dirs) -> None:
        self.name = name
        self.dirs = dirs

    @property
    def installs_path(self) -> Path:
        return self.dirs.installs / self.name

    @property
    def downloads_path(self) -> Path:
        return self.dirs.downloads / self.name

    @property
    def cache_path(self) -> Path:
        return self.dirs.cache / self.name

    # --- capabilities ---

    @abstractmethod
    def list_remote_versions(self, settings: Settings) -> list[str]: ...

    def latest_stable_version(self, settings: Settings) -> str | None:
        return None

    def get_remote_url(self) -> str | None:
        return None

    def is_installed(self) -> bool:
        return True

    def install(self, config: Config, progress: ProgressReport) -> None:
        return None

    def update(self, ref: str | None = None) -> None:
        return None

    def uninstall(self, progress: ProgressReport) -> None:
        return None

    def get_aliases(self, settings: Settings) -> dict[str, str]:
        return {}

    def legacy_filenames(self, settings: Settings) -> list[str]:
        return []

    def parse_legacy_file(self, path: Path, settings: Settings) -> str:
        return Path(path).read_text(encoding="utf-8").strip()

    def external_commands(self) -> list[list[str]]:
        return []

    def execute_external_command(self, command: str, args: Sequence[str]) -> None:
        raise UnsupportedOperationError(self.name, f"command {command}")

    @abstractmethod
    def install_version(
        self, config: Config, tv: ToolVersion, progress: ProgressReport
    ) -> None: ...

    def uninstall_version(self, config: Config, tv: ToolVersion) -> None:
        return None

    def list_bin_paths(self, config: Config, tv: ToolVersion) -> list[Path]:
        return [tv.install_path / "bin"]

    def exec_env(self, config: Config, tv: ToolVersion) -> dict[str, str]:
        return {}

    # --- version queries built on the capabilities ---

    def list_installed_versions(self) -> list[str]:
        if not self.installs_path.is_dir():
            return []
        versions = [
            p.name
            for p in self.installs_path.iterdir()
            if p.is_dir() and not p.name.startswith(".") and not is_runtime_symlink(p)
        ]
        return sort_versions(versions)

    def latest_installed_version(self) -> str | None:
        return find_latest(self.list_installed_versions())

    def list_installed_versions_matching(self, query: str) -> list[str]:
        return fuzzy_match_filter(self.list_installed_versions(), query)

    def list_versions_matching(self, settings: Settings, query: str) -> list[str]:
        return fuzzy_match_filter(self.list_remote_versions(settings), query)

    def latest_version(self, settings: Settings, query: str | None = None) -> str | None:
        """Newest version matching ``query``.

        Without a query this is the plugin's latest stable version, falling
        back to the newest stable-looking remote version.
        """
        if query is not None:
            return find_latest(self.list_versions_matching(settings, query))
        stable = self.latest_stable_version(settings)
        if stable is not None:
            return stable
        return self.latest_version(settings, "latest")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Plugin):
            return NotImplemented
        return self.kind == other.kind and self.name == other.name

    def __hash__(self) -> int:
        return hash((self.kind, self.name))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"
