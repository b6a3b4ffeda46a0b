"""Plugins backed by asdf-style scripts cloned into the plugins directory."""

from __future__ import annotations

import logging
import os
import shutil
from datetime import timedelta
from pathlib import Path
from typing import TYPE_CHECKING, NoReturn

from .._hash import hash_to_str
from ..cache import CacheManager
from ..env_diff import EnvDiff
from ..errors import (
    PluginInstallError,
    PluginNotInstalledError,
    ScriptExecutionError,
    ToolshedError,
    UnsupportedOperationError,
)
from ..git import Git
from ..toolset.request import PathRequest, RefRequest, SystemRequest
from ._cache import ExternalPluginCache
from ._manifest import load_plugin_toml
from ._plugin import Plugin
from ._script_manager import (
    DOWNLOAD,
    EXEC_ENV,
    INSTALL,
    LATEST_STABLE,
    LIST_ALIASES,
    LIST_ALL,
    LIST_BIN_PATHS,
    LIST_LEGACY_FILENAMES,
    SCRIPT_ENV_FLAG,
    UNINSTALL,
    Script,
    ScriptManager,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ..config import Config
    from ..config.settings import Settings
    from ..dirs import Dirs
    from ..progress import ProgressReport
    from ..toolset.tool_version import ToolVersion

logger = logging.getLogger(__name__)

REMOTE_CACHE_TTL = timedelta(days=1)


class ExternalPlugin(Plugin):
    """A plugin installed to ``<data>/plugins/<name>`` and driven by its ``bin/`` scripts.

    Attributes:
        plugin_path: Directory holding the plugin checkout.
        repo_url: Repository bound when the plugin was added, if any.
        toml: Parsed toolshed.plugin.toml (defaults when absent).
    """

    kind = "external"

    def __init__(
        self,
        name: str,
        dirs: Dirs,
        settings: Settings | None = None,
        repo_url: str | None = None,
    ) -> None:
        super().__init__(name, dirs)
        self.plugin_path = dirs.plugins / name
        self.repo_url = repo_url
        self.prefer_stale = settings.prefer_stale if settings is not None else False
        self.toml = load_plugin_toml(self.plugin_path)
        self.script_man = ScriptManager(
            self.plugin_path,
            {
                "TOOLSHED_PLUGIN_NAME": name,
                "TOOLSHED_PLUGIN_PATH": str(self.plugin_path),
                "TOOLSHED_SHIMS_DIR": str(dirs.shims),
            },
        )
        self._init_caches()

    def _init_caches(self) -> None:
        ttl = None if self.prefer_stale else REMOTE_CACHE_TTL

        def fresh(script: Script) -> list[Path]:
            return [self.plugin_path, self.script_man.get_script_path(script)]

        self.remote_version_cache: CacheManager[list[str]] = CacheManager(
            self.cache_path / "remote_versions.json.z",
            list[str],
            fresh_duration=ttl,
            fresh_files=fresh(LIST_ALL),
        )
        self.latest_stable_cache: CacheManager[str | None] = CacheManager(
            self.cache_path / "latest_stable.json.z",
            str | None,
            fresh_duration=ttl,
            fresh_files=fresh(LATEST_STABLE),
        )
        self.alias_cache: CacheManager[list[tuple[str, str]]] = CacheManager(
            self.cache_path / "aliases.json.z",
            list[tuple[str, str]],
            fresh_files=fresh(LIST_ALIASES),
        )
        self.legacy_filename_cache: CacheManager[list[str]] = CacheManager(
            self.cache_path / "legacy_filenames.json.z",
            list[str],
            fresh_files=fresh(LIST_LEGACY_FILENAMES),
        )
        self.cache = ExternalPluginCache()

    # --- remote data ---

    def list_remote_versions(self, settings: Settings) -> list[str]:
        if not self.script_man.script_exists(LIST_ALL):
            raise UnsupportedOperationError(self.name, "listing remote versions")
        try:
            versions = self.remote_version_cache.get_or_try_init(
                lambda: self._fetch_remote_versions(settings)
            )
        except ScriptExecutionError as e:
            raise _wrap(e, f"Failed listing remote versions for plugin {self.name}") from e
        return list(versions)

    def latest_stable_version(self, settings: Settings) -> str | None:
        if not self.script_man.script_exists(LATEST_STABLE):
            return None
        try:
            return self.latest_stable_cache.get_or_try_init(
                lambda: self._fetch_latest_stable(settings)
            )
        except ScriptExecutionError as e:
            raise _wrap(e, f"Failed fetching latest stable version for plugin {self.name}") from e

    def get_aliases(self, settings: Settings) -> dict[str, str]:
        if self.toml.list_aliases.data is not None:
            return dict(_parse_aliases(self.toml.list_aliases.data))
        if not self.script_man.script_exists(LIST_ALIASES):
            return {}
        try:
            aliases = self.alias_cache.get_or_try_init(
                lambda: _parse_aliases(self.script_man.read(settings, LIST_ALIASES))
            )
        except ScriptExecutionError as e:
            raise _wrap(e, f"Failed fetching aliases for plugin {self.name}") from e
        return dict(aliases)

    def legacy_filenames(self, settings: Settings) -> list[str]:
        if self.toml.list_legacy_filenames.data is not None:
            return self.toml.list_legacy_filenames.data.split()
        if not self.script_man.script_exists(LIST_LEGACY_FILENAMES):
            return []
        try:
            return list(
                self.legacy_filename_cache.get_or_try_init(
                    lambda: self.script_man.read(settings, LIST_LEGACY_FILENAMES).split()
                )
            )
        except ScriptExecutionError as e:
            raise _wrap(e, f"Failed fetching legacy filenames for plugin {self.name}") from e

    def parse_legacy_file(self, path: Path, settings: Settings) -> str:
        path = Path(path)
        cached = self._fetch_cached_legacy_file(path)
        if cached is not None:
            return cached
        logger.debug("parsing legacy file: %s", path)
        script = Script.parse_legacy_file(path)
        if self.script_man.script_exists(script):
            version = self.script_man.read(settings, script)
        else:
            version = path.read_text(encoding="utf-8")
        version = version.strip()
        self._write_legacy_cache(path, version)
        return version

    def _fetch_remote_versions(self, settings: Settings) -> list[str]:
        return self.script_man.read(settings, LIST_ALL).split()

    def _fetch_latest_stable(self, settings: Settings) -> str | None:
        latest = self.script_man.read(settings, LATEST_STABLE).strip()
        return latest or None

    def _legacy_cache_file_path(self, legacy_file: Path) -> Path:
        return self.cache_path / "legacy" / f"{hash_to_str(str(legacy_file))}.txt"

    def _fetch_cached_legacy_file(self, legacy_file: Path) -> str | None:
        fp = self._legacy_cache_file_path(legacy_file)
        try:
            if fp.stat().st_mtime < legacy_file.stat().st_mtime:
                return None
            return fp.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None

    def _write_legacy_cache(self, legacy_file: Path, version: str) -> None:
        fp = self._legacy_cache_file_path(legacy_file)
        fp.parent.mkdir(parents=True, exist_ok=True)
        fp.write_text(version, encoding="utf-8")

    # --- plugin lifecycle ---

    def get_remote_url(self) -> str | None:
        return Git(self.plugin_path).get_remote_url()

    def is_installed(self) -> bool:
        return self.plugin_path.exists()

    def install(self, config: Config, progress: ProgressReport) -> None:
        repository = self.repo_url or config.get_repo_url(self.name)
        if repository is None:
            raise PluginInstallError(self.name, f"No repository found for plugin {self.name}")
        repo_url, repo_ref = Git.split_url_and_ref(repository)
        logger.debug("install %s %s", self.name, repository)

        if self.is_installed():
            self.uninstall(progress)

        git = Git(self.plugin_path)
        progress.set_message(f"cloning {repo_url}")
        git.clone(repo_url)
        if repo_ref:
            progress.set_message(f"checking out {repo_ref}")
            git.update(repo_ref)

        self.toml = load_plugin_toml(self.plugin_path)
        self._init_caches()
        progress.set_message("loading plugin remote versions")
        if self.script_man.script_exists(LIST_ALL):
            self.list_remote_versions(config.settings)
        if self.script_man.script_exists(LIST_ALIASES):
            progress.set_message("getting plugin aliases")
            self.get_aliases(config.settings)
        if self.script_man.script_exists(LIST_LEGACY_FILENAMES):
            progress.set_message("getting plugin legacy filenames")
            self.legacy_filenames(config.settings)

        sha = git.current_sha_short()
        progress.finish_with_message(f"{repo_url}#{sha}")

    def update(self, ref: str | None = None) -> None:
        if self.plugin_path.is_symlink():
            logger.warning("Plugin: %s is a symlink, not updating", self.name)
            return
        git = Git(self.plugin_path)
        if not git.is_repo():
            logger.warning("Plugin %s is not a git repository, not updating", self.name)
            return
        prev, post = git.update(ref)
        logger.debug("updated plugin %s: %s -> %s", self.name, prev, post)
        self.toml = load_plugin_toml(self.plugin_path)
        self._init_caches()

    def uninstall(self, progress: ProgressReport) -> None:
        if not self.is_installed():
            return
        progress.set_message("uninstalling")
        for directory in (self.downloads_path, self.installs_path, self.plugin_path):
            if not directory.exists() and not directory.is_symlink():
                continue
            progress.set_message(f"removing {directory}")
            try:
                if directory.is_symlink():
                    directory.unlink()
                else:
                    shutil.rmtree(directory)
            except OSError as e:
                raise PluginInstallError(
                    self.name, f"Failed to remove directory {directory}: {e}"
                ) from e
        self._init_caches()

    def external_commands(self) -> list[list[str]]:
        command_path = self.plugin_path / "lib" / "commands"
        if not self.is_installed() or not command_path.is_dir():
            return []
        commands = []
        for entry in sorted(command_path.iterdir()):
            name = entry.name
            if not entry.is_file() or not name.startswith("command-") or not name.endswith(".bash"):
                continue
            parts = name.removeprefix("command-").removesuffix(".bash").split("-")
            commands.append([self.name, *parts])
        return commands

    def execute_external_command(self, command: str, args: Sequence[str]) -> NoReturn:
        """Run ``lib/commands/command-<command>.bash`` and exit with its status."""
        if not self.is_installed():
            raise PluginNotInstalledError(self.name)
        path = self.plugin_path / "lib" / "commands" / f"command-{command}.bash"
        raise SystemExit(self.script_man.run_external(path, args))

    # --- tool versions ---

    def install_version(self, config: Config, tv: ToolVersion, progress: ProgressReport) -> None:
        sm = self.script_man_for_tv(config, tv)
        if sm.script_exists(DOWNLOAD):
            progress.set_message("downloading")
            sm.run_by_line(config.settings, DOWNLOAD, progress)
        progress.set_message("installing")
        sm.run_by_line(config.settings, INSTALL, progress)

    def uninstall_version(self, config: Config, tv: ToolVersion) -> None:
        sm = self.script_man_for_tv(config, tv)
        if sm.script_exists(UNINSTALL):
            sm.run(config.settings, UNINSTALL)

    def list_bin_paths(self, config: Config, tv: ToolVersion) -> list[Path]:
        return self.cache.list_bin_paths(
            config, self, tv, lambda: self._fetch_bin_paths(config, tv)
        )

    def exec_env(self, config: Config, tv: ToolVersion) -> dict[str, str]:
        if isinstance(tv.request, SystemRequest):
            return {}
        # inside a plugin script already; sourcing exec-env again would recurse
        if not self.script_man.script_exists(EXEC_ENV) or SCRIPT_ENV_FLAG in os.environ:
            return {}
        return self.cache.exec_env(config, self, tv, lambda: self._fetch_exec_env(config, tv))

    def _fetch_bin_paths(self, config: Config, tv: ToolVersion) -> list[Path]:
        if isinstance(tv.request, SystemRequest):
            return []
        if self.script_man.script_exists(LIST_BIN_PATHS):
            output = self.script_man_for_tv(config, tv).read(config.settings, LIST_BIN_PATHS)
            bin_paths = output.split()
        else:
            bin_paths = ["bin"]
        return [tv.install_path / p for p in bin_paths]

    def _fetch_exec_env(self, config: Config, tv: ToolVersion) -> dict[str, str]:
        sm = self.script_man_for_tv(config, tv)
        diff = EnvDiff.from_bash_script(sm.get_script_path(EXEC_ENV), sm.full_env())
        return {
            p.key: p.value
            for p in diff.to_patches()
            if p.kind in ("add", "change") and p.value is not None
        }

    def script_man_for_tv(self, config: Config, tv: ToolVersion) -> ScriptManager:
        """Script manager carrying the install/download locations of ``tv``."""
        request = tv.request
        if isinstance(request, SystemRequest):
            raise ToolshedError(f"{tv} is a system tool and has no plugin environment")
        if isinstance(request, RefRequest):
            install_type, install_version = "ref", request.ref
        elif isinstance(request, PathRequest):
            install_type, install_version = "path", tv.version
        else:
            install_type, install_version = "version", tv.version

        sm = self.script_man
        for key, value in tv.opts.items():
            sm = sm.with_env(f"TOOLSHED_TOOL_OPTS__{key.upper()}", value)
        if config.project_root is not None:
            sm = sm.with_env("TOOLSHED_PROJECT_ROOT", config.project_root)
        for prefix in ("TOOLSHED", "ASDF"):
            sm = (
                sm.with_env(f"{prefix}_INSTALL_PATH", tv.install_path)
                .with_env(f"{prefix}_DOWNLOAD_PATH", tv.download_path)
                .with_env(f"{prefix}_INSTALL_TYPE", install_type)
                .with_env(f"{prefix}_INSTALL_VERSION", install_version)
            )
        return sm


def _parse_aliases(data: str) -> list[tuple[str, str]]:
    aliases = []
    for line in data.splitlines():
        parts = line.split()
        if len(parts) != 2:
            if parts:
                logger.debug("invalid alias line: %s", line)
            continue
        aliases.append((parts[0], parts[1]))
    return aliases


def _wrap(err: ScriptExecutionError, context: str) -> ScriptExecutionError:
    return ScriptExecutionError(err.script, err.exit_code, err.stderr, message=f"{context}: {err}")
