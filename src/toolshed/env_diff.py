"""Capture the environment changes made by sourcing a bash script."""

from __future__ import annotations

import subprocess
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from .errors import ScriptExecutionError

# set or touched by bash itself on every invocation
_IGNORED_KEYS = frozenset({"_", "SHLVL", "PWD", "OLDPWD"})

_DIFF_SCRIPT = """\
env -0
printf '%s' "$1"
. "$2" 1>&2
env -0
"""


@dataclass(frozen=True)
class EnvDiffOperation:
    kind: Literal["add", "change", "remove"]
    key: str
    value: str | None = None


@dataclass
class EnvDiff:
    """Difference between two environment snapshots.

    Attributes:
        old: Environment before the script was sourced.
        new: Environment after the script was sourced.
    """

    old: dict[str, str]
    new: dict[str, str]

    @classmethod
    def from_bash_script(cls, script: Path, env: Mapping[str, str]) -> EnvDiff:
        """Source ``script`` in a bash subshell seeded with ``env``.

        Both snapshots come from the same process, separated by a random
        delimiter on stdout.
        """
        delimiter = f"__TOOLSHED_ENV_DIFF_{uuid.uuid4().hex}__"
        try:
            result = subprocess.run(
                ["bash", "-c", _DIFF_SCRIPT, "bash", delimiter, str(script)],
                env=dict(env),
                capture_output=True,
            )
        except OSError as e:
            raise ScriptExecutionError(script, None, message=f"failed to run {script}: {e}") from e
        stderr = result.stderr.decode(errors="replace").strip()
        if result.returncode != 0:
            raise ScriptExecutionError(script, result.returncode, stderr)

        stdout = result.stdout.decode(errors="replace")
        before, sep, after = stdout.partition(delimiter)
        if not sep:
            raise ScriptExecutionError(
                script,
                result.returncode,
                stderr,
                message=f"failed to parse environment output of {script}",
            )
        return cls(old=_parse_env(before), new=_parse_env(after))

    def to_patches(self) -> list[EnvDiffOperation]:
        patches: list[EnvDiffOperation] = []
        for key in sorted(self.old.keys() | self.new.keys()):
            if key in _IGNORED_KEYS:
                continue
            if key not in self.old:
                patches.append(EnvDiffOperation("add", key, self.new[key]))
            elif key not in self.new:
                patches.append(EnvDiffOperation("remove", key))
            elif self.old[key] != self.new[key]:
                patches.append(EnvDiffOperation("change", key, self.new[key]))
        return patches


def _parse_env(output: str) -> dict[str, str]:
    env: dict[str, str] = {}
    for entry in output.split("\0"):
        key, sep, value = entry.partition("=")
        if sep and key:
            env[key] = value
    return env
