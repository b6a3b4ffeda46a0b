"""Progress reporting for long-running plugin operations."""

from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class ProgressReport(Protocol):
    """Receives status messages while a plugin or tool version installs."""

    def set_message(self, message: str) -> None: ...
    def finish_with_message(self, message: str) -> None: ...


class QuietProgressReport:
    """Records messages without printing them."""

    def __init__(self) -> None:
        self.messages: list[str] = []
        self.finished: str | None = None

    def set_message(self, message: str) -> None:
        self.messages.append(message)

    def finish_with_message(self, message: str) -> None:
        self.finished = message


class LoggingProgressReport:
    """Forwards messages to the logger, prefixed with what is being worked on."""

    def __init__(self, prefix: str) -> None:
        self.prefix = prefix

    def set_message(self, message: str) -> None:
        logger.info("%s %s", self.prefix, message)

    def finish_with_message(self, message: str) -> None:
        logger.info("%s %s", self.prefix, message)
