from __future__ import annotations

import logging
import re
import subprocess
from pathlib import Path

from .errors import GitError

logger = logging.getLogger(__name__)

# "https://host/repo.git#v1.2" or "git@host:org/repo.git@v1.2"
_REF_SUFFIX = re.compile(r"^(?P<url>.+?\.git|.+?)[#@](?P<ref>[^#@/:]+)$")


class Git:
    """Thin wrapper over the git CLI for a single working directory."""

    def __init__(self, dir: Path) -> None:
        self.dir = Path(dir)

    def is_repo(self) -> bool:
        return (self.dir / ".git").exists()

    def clone(self, url: str) -> None:
        logger.debug("cloning %s to %s", url, self.dir)
        self.dir.parent.mkdir(parents=True, exist_ok=True)
        _run(["git", "clone", "-q", "--depth", "1", url, str(self.dir)], self.dir)

    def update(self, ref: str | None = None) -> tuple[str, str]:
        """Fetch and check out ``ref`` (default: the remote HEAD).

        Returns the (previous, new) short commit hashes.
        """
        ref = ref or self._default_branch()
        logger.debug("updating %s to %s", self.dir, ref)
        prev = self.current_sha_short()
        self._git("fetch", "--prune", "--update-head-ok", "origin", f"{ref}:{ref}")
        self._git("-c", "advice.detachedHead=false", "checkout", "--force", ref)
        post = self.current_sha_short()
        return prev, post

    def current_sha_short(self) -> str:
        return self._git("rev-parse", "--short", "HEAD")

    def current_sha(self) -> str:
        return self._git("rev-parse", "HEAD")

    def get_remote_url(self) -> str | None:
        if not self.is_repo():
            return None
        try:
            return self._git("config", "--get", "remote.origin.url")
        except GitError:
            return None

    @staticmethod
    def split_url_and_ref(combined: str) -> tuple[str, str | None]:
        """Split ``url#ref`` / ``url@ref`` into its parts.

        An ``@`` is only treated as a ref separator after the host part, so
        ``git@github.com:org/repo.git`` keeps its user prefix.
        """
        if not combined.strip():
            raise GitError(f"Invalid repository url: {combined!r}")
        head, sep, tail = combined.rpartition("#")
        if sep:
            if not head or not tail:
                raise GitError(f"Invalid repository url: {combined!r}")
            return head, tail
        m = _REF_SUFFIX.match(combined)
        if m and "/" in m.group("url"):
            return m.group("url"), m.group("ref")
        return combined, None

    def _default_branch(self) -> str:
        out = self._git("symbolic-ref", "--short", "refs/remotes/origin/HEAD")
        return out.removeprefix("origin/")

    def _git(self, *args: str) -> str:
        return _run(["git", "-C", str(self.dir), *args], self.dir)


def _run(cmd: list[str], path: Path) -> str:
    try:
        result = subprocess.run(cmd, capture_output=True, text=True)
    except FileNotFoundError as e:
        raise GitError("git is not installed or not in PATH", path=path) from e
    if result.returncode != 0:
        raise GitError(
            f"{' '.join(cmd)} failed: {result.stderr.strip()}",
            path=path,
        )
    return result.stdout.strip()
