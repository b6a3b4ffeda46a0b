"""Tests for ToolVersionList and Toolset resolution."""

import logging

from toolshed import (
    InMemoryPlugin,
    PathRequest,
    Settings,
    SystemRequest,
    ToolSource,
    Toolset,
    ToolVersionList,
    VersionRequest,
)


def _tvl(plugin_name, *versions, source=ToolSource.ARGUMENT):
    tvl = ToolVersionList(plugin_name, source)
    for v in versions:
        tvl.add_request(VersionRequest(plugin_name, v))
    return tvl


def test_tool_source_values():
    assert ToolSource("tool_versions") is ToolSource.TOOL_VERSIONS
    assert ToolSource.LEGACY_VERSION_FILE.value == "legacy_version_file"


def test_resolve_in_request_order(config, dirs):
    config.plugins["tiny"] = InMemoryPlugin("tiny", dirs, remote_versions=["1.0.0", "2.0.0"])
    tvl = _tvl("tiny", "2", "1")
    tvl.resolve_all(config)
    assert [tv.version for tv in tvl.versions] == ["2.0.0", "1.0.0"]


def test_unknown_plugin_leaves_versions_empty(config):
    tvl = _tvl("missing", "1.0.0")
    tvl.resolve_all(config)
    assert tvl.versions == []


def test_plugin_not_installed_leaves_versions_empty(config, dirs):
    plugin = InMemoryPlugin("tiny", dirs, remote_versions=["1.0.0"], installed=False)
    config.plugins["tiny"] = plugin
    tvl = _tvl("tiny", "1.0.0")
    tvl.resolve_all(config)
    assert tvl.versions == []
    assert plugin.remote_calls == 0


def test_failing_request_is_isolated(config, dirs, tmp_path, caplog):
    config.plugins["tiny"] = InMemoryPlugin("tiny", dirs, remote_versions=["1.0.0", "2.0.0"])
    tvl = ToolVersionList("tiny", ToolSource.TOOL_VERSIONS)
    tvl.add_request(VersionRequest("tiny", "1.0!-5"))
    tvl.add_request(PathRequest("tiny", tmp_path / "nope"))
    tvl.add_request(VersionRequest("tiny", "2.0.0"), {"build": "debug"})

    with caplog.at_level(logging.WARNING):
        tvl.resolve_all(config)

    assert [tv.version for tv in tvl.versions] == ["2.0.0"]
    assert tvl.versions[0].opts == {"build": "debug"}
    assert caplog.text.count("failed to resolve tool version") == 2
    assert "tiny@1.0!-5" in caplog.text


def test_toolset_resolves_all_lists(dirs, config):
    config.settings = Settings(jobs=2)
    tiny = InMemoryPlugin("tiny", dirs, remote_versions=["1.0.0", "2.0.0"])
    node = InMemoryPlugin("node", dirs, remote_versions=["18.0.0", "20.1.0"])
    config.plugins.update({"tiny": tiny, "node": node})
    (tiny.installs_path / "1.0.0").mkdir(parents=True)

    ts = Toolset()
    ts.add(_tvl("node", "20"))
    ts.add(_tvl("tiny", "1.0.0", "2"))
    ts.add(_tvl("missing", "1"))
    ts.resolve(config)

    current = [(p.name, tv.version) for p, tv in ts.list_current_versions(config)]
    assert current == [("node", "20.1.0"), ("tiny", "1.0.0"), ("tiny", "2.0.0")]
    missing = [(p.name, tv.version) for p, tv in ts.list_missing_versions(config)]
    assert missing == [("node", "20.1.0"), ("tiny", "2.0.0")]


def test_empty_toolset(config):
    ts = Toolset()
    ts.resolve(config)
    assert ts.list_current_versions(config) == []


def test_path_and_system_versions_are_not_missing(config, dirs, tmp_path):
    config.plugins["tiny"] = InMemoryPlugin("tiny", dirs, remote_versions=["1.0.0"])
    local = tmp_path / "local-tiny"
    local.mkdir()
    tvl = ToolVersionList("tiny", ToolSource.TOOL_VERSIONS)
    tvl.add_request(PathRequest("tiny", local))
    tvl.add_request(SystemRequest("tiny"))
    tvl.add_request(VersionRequest("tiny", "1.0.0"))

    ts = Toolset()
    ts.add(tvl)
    ts.resolve(config)

    current = [tv.version for _, tv in ts.list_current_versions(config)]
    assert current[0].startswith("path-")
    assert current[1:] == ["system", "1.0.0"]
    missing = [tv.version for _, tv in ts.list_missing_versions(config)]
    assert missing == ["1.0.0"]


def test_path_version_missing_once_its_directory_is_gone(config, dirs, tmp_path):
    config.plugins["tiny"] = InMemoryPlugin("tiny", dirs)
    local = tmp_path / "local-tiny"
    local.mkdir()
    tvl = ToolVersionList("tiny", ToolSource.ARGUMENT)
    tvl.add_request(PathRequest("tiny", local))
    ts = Toolset()
    ts.add(tvl)
    ts.resolve(config)
    assert ts.list_missing_versions(config) == []

    local.rmdir()
    assert len(ts.list_missing_versions(config)) == 1
