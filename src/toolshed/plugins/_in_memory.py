"""In-memory core plugin for testing (no scripts, no network)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ._plugin import Plugin

if TYPE_CHECKING:
    from ..config import Config
    from ..config.settings import Settings
    from ..dirs import Dirs
    from ..progress import ProgressReport
    from ..toolset.tool_version import ToolVersion


class InMemoryPlugin(Plugin):
    """Serves a fixed version list; ``install_version`` creates the install directory."""

    def __init__(
        self,
        name: str,
        dirs: Dirs,
        remote_versions: list[str] | None = None,
        latest_stable: str | None = None,
        aliases: dict[str, str] | None = None,
        installed: bool = True,
    ) -> None:
        super().__init__(name, dirs)
        self.remote_versions = list(remote_versions or [])
        self.latest_stable = latest_stable
        self.aliases = dict(aliases or {})
        self.installed = installed
        self.remote_calls = 0
        self.installed_versions: list[str] = []

    def list_remote_versions(self, settings: Settings) -> list[str]:
        self.remote_calls += 1
        return list(self.remote_versions)

    def latest_stable_version(self, settings: Settings) -> str | None:
        return self.latest_stable

    def get_aliases(self, settings: Settings) -> dict[str, str]:
        return dict(self.aliases)

    def is_installed(self) -> bool:
        return self.installed

    def install_version(self, config: Config, tv: ToolVersion, progress: ProgressReport) -> None:
        progress.set_message("installing")
        (tv.install_path / "bin").mkdir(parents=True, exist_ok=True)
        self.installed_versions.append(tv.version)
