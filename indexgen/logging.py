"""Logging utilities for indexgen commands."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List

_LOGGER_NAME = "indexgen"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the indexgen hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure the indexgen logger with console output and optional file sink."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers so repeated CLI invocations in one process do not duplicate output.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter("[indexgen] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


class WarningLog:
    """Collects non-fatal warnings for the index while mirroring them to a logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or get_logger()
        self.messages: List[str] = []

    def warn(self, message: str, *args: object) -> None:
        text = message % args if args else message
        self.messages.append(text)
        self._logger.warning(text)

    def extend(self, messages: Iterable[str]) -> None:
        self.messages.extend(messages)

    def __len__(self) -> int:
        return len(self.messages)


__all__ = ["WarningLog", "configure_logging", "get_logger"]
