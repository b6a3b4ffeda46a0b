"""Locates and runs the scripts under a plugin's ``bin/`` directory."""

from __future__ import annotations

import collections
import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, cast

from ..errors import ScriptExecutionError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from typing import IO

    from ..config.settings import Settings
    from ..progress import ProgressReport

logger = logging.getLogger(__name__)

# set for every script so nested invocations can detect they run inside one
SCRIPT_ENV_FLAG = "__TOOLSHED_SCRIPT"

# lines of streamed output kept for error messages
_OUTPUT_TAIL = 50


@dataclass(frozen=True)
class Script:
    name: str
    args: tuple[str, ...] = ()

    @classmethod
    def parse_legacy_file(cls, path: Path | str) -> Script:
        return cls("parse-legacy-file", (str(path),))

    def __str__(self) -> str:
        return self.name


LIST_ALL = Script("list-all")
LATEST_STABLE = Script("latest-stable")
LIST_ALIASES = Script("list-aliases")
LIST_LEGACY_FILENAMES = Script("list-legacy-filenames")
LIST_BIN_PATHS = Script("list-bin-paths")
EXEC_ENV = Script("exec-env")
DOWNLOAD = Script("download")
INSTALL = Script("install")
UNINSTALL = Script("uninstall")


class ScriptManager:
    """Runs plugin scripts with an injected environment.

    Instances are cheap to copy; ``with_env`` returns a new manager so a
    per-version manager can be derived from the plugin's base one.
    """

    def __init__(self, plugin_path: Path, env: dict[str, str] | None = None) -> None:
        self.plugin_path = Path(plugin_path)
        self.env: dict[str, str] = dict(env or {})

    def with_env(self, key: str, value: str | Path) -> ScriptManager:
        env = dict(self.env)
        env[key] = str(value)
        return ScriptManager(self.plugin_path, env)

    def get_script_path(self, script: Script) -> Path:
        return self.plugin_path / "bin" / script.name

    def script_exists(self, script: Script) -> bool:
        return self.get_script_path(script).is_file()

    def cmd(self, script: Script) -> list[str]:
        return [str(self.get_script_path(script)), *script.args]

    def full_env(self) -> dict[str, str]:
        env = dict(os.environ)
        env.update(self.env)
        env[SCRIPT_ENV_FLAG] = "1"
        return env

    def read(self, settings: Settings, script: Script) -> str:
        """Run ``script`` with output captured and return its stdout."""
        result = self._run_captured(script)
        stderr = result.stderr.strip()
        if result.returncode != 0:
            raise ScriptExecutionError(self.get_script_path(script), result.returncode, stderr)
        if settings.verbose and stderr:
            logger.info("%s: %s", script, stderr)
        return result.stdout

    def run(self, settings: Settings, script: Script) -> None:
        self.read(settings, script)

    def run_by_line(self, settings: Settings, script: Script, progress: ProgressReport) -> None:
        """Run ``script``, feeding each output line to ``progress``.

        In raw mode the script inherits the terminal and nothing is captured.
        """
        path = self.get_script_path(script)
        if settings.raw:
            try:
                result = subprocess.run(self.cmd(script), env=self.full_env())
            except OSError as e:
                raise ScriptExecutionError(path, None, message=f"failed to run {path}: {e}") from e
            if result.returncode != 0:
                raise ScriptExecutionError(path, result.returncode)
            return

        tail: collections.deque[str] = collections.deque(maxlen=_OUTPUT_TAIL)
        try:
            proc = subprocess.Popen(
                self.cmd(script),
                env=self.full_env(),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
            )
        except OSError as e:
            raise ScriptExecutionError(path, None, message=f"failed to run {path}: {e}") from e
        with proc:
            for line in cast("IO[str]", proc.stdout):
                line = line.rstrip()
                tail.append(line)
                if line:
                    progress.set_message(line)
                if settings.verbose:
                    logger.info("%s: %s", script, line)
        if proc.returncode != 0:
            raise ScriptExecutionError(path, proc.returncode, "\n".join(tail).strip())

    def run_external(self, path: Path, args: Sequence[str]) -> int:
        """Run an arbitrary plugin executable attached to the terminal."""
        try:
            result = subprocess.run([str(path), *args], env=self.full_env())
        except OSError as e:
            raise ScriptExecutionError(path, None, message=f"failed to run {path}: {e}") from e
        return result.returncode

    def _run_captured(self, script: Script) -> subprocess.CompletedProcess[str]:
        path = self.get_script_path(script)
        logger.debug("running %s", " ".join(self.cmd(script)))
        try:
            return subprocess.run(
                self.cmd(script),
                env=self.full_env(),
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                errors="replace",
            )
        except OSError as e:
            raise ScriptExecutionError(path, None, message=f"failed to run {path}: {e}") from e
