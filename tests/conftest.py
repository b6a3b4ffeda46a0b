"""Shared fixtures: an isolated data directory and script-backed plugin factories."""

from pathlib import Path

import pytest

from toolshed import Config, Dirs, ExternalPlugin, Settings
from toolshed.plugins import MANIFEST_FILENAME


def write_script(path: Path, body: str) -> Path:
    """Write an executable bash script."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/usr/bin/env bash\n" + body + "\n")
    path.chmod(0o755)
    return path


@pytest.fixture
def dirs(tmp_path: Path) -> Dirs:
    return Dirs.from_root(tmp_path / "data")


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def config(settings: Settings, dirs: Dirs) -> Config:
    return Config(settings=settings, dirs=dirs)


@pytest.fixture
def calls(tmp_path: Path):
    """Call counter backed by files outside the plugin and data dirs.

    ``calls.record(name)`` is a shell snippet appending to the counter,
    ``calls(name)`` returns how many times it ran.
    """
    counter_dir = tmp_path / "calls"
    counter_dir.mkdir()

    class Calls:
        def record(self, name: str) -> str:
            return f'echo x >> "{counter_dir / name}"'

        def __call__(self, name: str) -> int:
            path = counter_dir / name
            if not path.exists():
                return 0
            return len(path.read_text().splitlines())

    return Calls()


@pytest.fixture
def make_plugin(dirs: Dirs, settings: Settings):
    """Create ``<data>/plugins/<name>`` with the given bin/ scripts and manifest."""

    def _make(
        name: str = "tiny",
        scripts: dict[str, str] | None = None,
        manifest: str | None = None,
    ) -> ExternalPlugin:
        plugin_path = dirs.plugins / name
        plugin_path.mkdir(parents=True, exist_ok=True)
        for script, body in (scripts or {}).items():
            write_script(plugin_path / "bin" / script, body)
        if manifest is not None:
            (plugin_path / MANIFEST_FILENAME).write_text(manifest)
        return ExternalPlugin(name, dirs, settings)

    return _make
