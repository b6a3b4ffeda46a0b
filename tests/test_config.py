"""Tests for Config, load_config, init_logging and Dirs."""

import logging
import os
from pathlib import Path

from toolshed import (
    Config,
    Dirs,
    ExternalPlugin,
    InMemoryPlugin,
    Settings,
    init_logging,
    load_config,
)
from toolshed.dirs import is_runtime_symlink


def test_load_config_discovers_installed_plugins(dirs, tmp_path):
    (dirs.plugins / "tiny").mkdir(parents=True)
    (dirs.plugins / "node").mkdir()
    (dirs.plugins / ".hidden").mkdir()
    (dirs.plugins / "README").write_text("")

    config = load_config(Settings(), dirs, project_root=tmp_path)

    assert sorted(config.plugins) == ["node", "tiny"]
    assert isinstance(config.plugins["tiny"], ExternalPlugin)
    assert config.project_root == tmp_path
    assert config.get_repo_url("nodejs") is not None


def test_load_config_without_plugins_dir(dirs):
    config = load_config(Settings(disable_default_shorthands=True), dirs)
    assert config.plugins == {}
    assert config.shorthands == {}
    assert config.get_repo_url("tiny") is None


def test_resolve_alias(config, dirs):
    plugin = InMemoryPlugin("tiny", dirs, aliases={"lts": "18", "stable": "16"})
    config.aliases = {"tiny": {"lts": "20"}}
    assert config.resolve_alias(plugin, "lts") == "20"
    assert config.resolve_alias(plugin, "stable") == "16"
    assert config.resolve_alias(plugin, "1.2.3") == "1.2.3"


def test_get_or_create_plugin(config):
    plugin = config.get_or_create_plugin("tiny")
    assert isinstance(plugin, ExternalPlugin)
    assert not plugin.is_installed()
    assert config.get_or_create_plugin("tiny") is plugin


def test_init_logging_maps_levels(monkeypatch):
    seen = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: seen.update(kwargs))
    init_logging(Settings(log_level="trace"))
    assert seen["level"] == logging.DEBUG
    init_logging(Settings(log_level="warn"))
    assert seen["level"] == logging.WARNING


def test_dirs_layout(tmp_path):
    dirs = Dirs.from_root(tmp_path)
    assert dirs.plugins == tmp_path / "plugins"
    assert dirs.installs == tmp_path / "installs"
    assert dirs.downloads == tmp_path / "downloads"
    assert dirs.shims == tmp_path / "shims"
    assert dirs.cache == tmp_path / "cache"


def test_dirs_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("TOOLSHED_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("TOOLSHED_CACHE_DIR", raising=False)
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "xdg-cache"))
    dirs = Dirs.from_env()
    assert dirs.root == tmp_path / "data"
    assert dirs.cache == Path(tmp_path / "xdg-cache" / "toolshed")


def test_is_runtime_symlink(tmp_path):
    (tmp_path / "18.2.0").mkdir()
    os.symlink("./18.2.0", tmp_path / "18")
    os.symlink(str(tmp_path / "18.2.0"), tmp_path / "absolute")
    assert is_runtime_symlink(tmp_path / "18")
    assert not is_runtime_symlink(tmp_path / "absolute")
    assert not is_runtime_symlink(tmp_path / "18.2.0")
