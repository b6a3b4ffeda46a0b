from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class ToolshedError(Exception):
    """Base class for every error raised by toolshed."""


class ScriptExecutionError(ToolshedError):
    """Raised when a plugin script cannot be started or exits non-zero.

    Attributes:
        script: Path of the script that was run.
        exit_code: Process exit status, or None if the process never started.
        stderr: Captured standard error (or merged output when streamed).
    """

    def __init__(
        self,
        script: Path | str,
        exit_code: int | None,
        stderr: str = "",
        message: str | None = None,
    ) -> None:
        self.script = script
        self.exit_code = exit_code
        self.stderr = stderr
        if message is None:
            message = f"error running {script}: exited with code {exit_code}"
            if stderr:
                message += f"\n{stderr}"
        super().__init__(message)


class UnsupportedOperationError(ToolshedError):
    """Raised when a plugin has no way to perform an operation."""

    def __init__(self, plugin: str, operation: str) -> None:
        self.plugin = plugin
        self.operation = operation
        super().__init__(f"Plugin {plugin} does not support {operation}")


class PluginNotInstalledError(ToolshedError):
    def __init__(self, plugin: str) -> None:
        self.plugin = plugin
        super().__init__(f"Plugin not installed: {plugin}")


class PluginInstallError(ToolshedError):
    """Raised when installing, updating or uninstalling a plugin fails."""

    def __init__(self, plugin: str, message: str) -> None:
        self.plugin = plugin
        super().__init__(message)


class VersionResolutionError(ToolshedError):
    """Raised when no version satisfies a request."""

    def __init__(self, request: str, message: str | None = None) -> None:
        self.request = request
        super().__init__(message or f"Unable to resolve {request}")


class InvalidVersionError(ToolshedError):
    """Raised when a version string cannot be parsed for arithmetic."""

    def __init__(self, version: str, message: str | None = None) -> None:
        self.version = version
        super().__init__(message or f"Invalid version: {version}")


class InvalidRequestError(ToolshedError):
    """Raised on a malformed version specifier such as ``foo:1.2``."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Invalid tool version request: {value}")


class FetchError(ToolshedError):
    """Raised when a remote fetch fails (network, HTTP error, bad payload).

    Attributes:
        url: The URL or source that failed, if applicable.
    """

    def __init__(self, message: str, url: str | None = None) -> None:
        self.url = url
        super().__init__(message)


class GitError(ToolshedError):
    """Raised when a git command fails.

    Attributes:
        path: The repository directory the command ran against.
    """

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.path = path
        super().__init__(message)
