"""On-disk layout: plugins, installs, downloads, cache and shims roots."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Dirs:
    root: Path
    cache: Path

    @property
    def plugins(self) -> Path:
        return self.root / "plugins"

    @property
    def installs(self) -> Path:
        return self.root / "installs"

    @property
    def downloads(self) -> Path:
        return self.root / "downloads"

    @property
    def shims(self) -> Path:
        return self.root / "shims"

    @classmethod
    def from_root(cls, root: Path) -> Dirs:
        """Keep everything, cache included, under a single directory."""
        root = Path(root)
        return cls(root=root, cache=root / "cache")

    @classmethod
    def from_env(cls) -> Dirs:
        """Build from TOOLSHED_DATA_DIR / TOOLSHED_CACHE_DIR, falling back to XDG dirs."""
        home = Path.home()
        data_home = Path(os.environ.get("XDG_DATA_HOME") or home / ".local" / "share")
        cache_home = Path(os.environ.get("XDG_CACHE_HOME") or home / ".cache")
        root = os.environ.get("TOOLSHED_DATA_DIR")
        cache = os.environ.get("TOOLSHED_CACHE_DIR")
        return cls(
            root=Path(root) if root else data_home / "toolshed",
            cache=Path(cache) if cache else cache_home / "toolshed",
        )


def is_runtime_symlink(path: Path) -> bool:
    """True for relative ``installs/<plugin>/<short>`` links pointing at a real install."""
    return path.is_symlink() and os.readlink(path).startswith("./")
