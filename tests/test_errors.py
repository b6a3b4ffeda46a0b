from pathlib import Path

import pytest

from toolshed.errors import (
    FetchError,
    GitError,
    InvalidRequestError,
    InvalidVersionError,
    PluginInstallError,
    PluginNotInstalledError,
    ScriptExecutionError,
    ToolshedError,
    UnsupportedOperationError,
    VersionResolutionError,
)


def test_script_execution_error_message():
    err = ScriptExecutionError(Path("/p/bin/list-all"), 2, "boom")
    assert str(err) == "error running /p/bin/list-all: exited with code 2\nboom"
    assert err.exit_code == 2
    assert err.stderr == "boom"


def test_script_execution_error_custom_message():
    err = ScriptExecutionError("install", None, message="failed to run install")
    assert str(err) == "failed to run install"
    assert err.exit_code is None


def test_context_attributes():
    assert UnsupportedOperationError("tiny", "listing remote versions").plugin == "tiny"
    assert PluginNotInstalledError("tiny").plugin == "tiny"
    assert PluginInstallError("tiny", "clone failed").plugin == "tiny"
    assert VersionResolutionError("tiny@9").request == "tiny@9"
    assert InvalidVersionError("x.y").version == "x.y"
    assert InvalidRequestError("foo:1").value == "foo:1"
    assert FetchError("offline").url is None
    assert GitError("not a repo", path=Path("/p")).path == Path("/p")


@pytest.mark.parametrize(
    "err",
    [
        ScriptExecutionError("list-all", 1),
        UnsupportedOperationError("tiny", "x"),
        PluginNotInstalledError("tiny"),
        PluginInstallError("tiny", "x"),
        VersionResolutionError("tiny@1"),
        InvalidVersionError("x"),
        InvalidRequestError("x"),
        FetchError("x"),
        GitError("x"),
    ],
)
def test_all_errors_are_toolshed_errors(err):
    with pytest.raises(ToolshedError):
        raise err
