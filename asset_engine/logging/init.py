from __future__ import annotations

import logging
import sys
from typing import TextIO

"""Console logging for the import harness.

Each emitted line starts with a label (INFO, WARN, ERROR or SUMMARY; DEBUG with
--debug) so wrapper scripts can grep the output. Package modules log through
``logging.getLogger(__name__)`` and reach the single handler installed on the
``asset_engine`` logger. DEBUG lines name the emitting module, e.g.
``DEBUG [rules.engine] rule matched id=r-ram ...``.
"""

__all__ = [
    "setup_logging",
    "get_logger",
    "log_summary",
    "set_debug",
    "reset_logging",
    "LabeledFormatter",
    "LOGGER_NAME",
    "SUMMARY_LEVEL",
]

LOGGER_NAME = "asset_engine"
SUMMARY_LEVEL = 25  # INFO(20) と WARNING(30) の間

_logger: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    LABELS = {
        logging.DEBUG: "DEBUG",
        logging.INFO: "INFO",
        SUMMARY_LEVEL: "SUMMARY",
        logging.WARNING: "WARN",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "CRITICAL",
    }

    def _origin(self, record: logging.LogRecord) -> str:
        prefix = LOGGER_NAME + "."
        if record.levelno > logging.DEBUG or not record.name.startswith(prefix):
            return ""
        return f"[{record.name[len(prefix):]}] "

    def format(self, record: logging.LogRecord) -> str:
        label = self.LABELS.get(record.levelno, record.levelname)
        line = f"{label} {self._origin(record)}{record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(stream: TextIO | None = None) -> logging.Logger:
    """Install the labeled stdout handler once and return the application logger."""
    global _logger
    if _logger is not None:
        return _logger

    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.INFO)
    # reset_logging 後の再設定でハンドラが二重にならないようにする
    for old in list(logger.handlers):
        logger.removeHandler(old)

    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handler.setLevel(logging.INFO)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    return _logger if _logger is not None else setup_logging()


def set_debug(enabled: bool = True) -> None:
    logger = get_logger()
    level = logging.DEBUG if enabled else logging.INFO
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)


def log_summary(message: str) -> None:
    """Emit ``SUMMARY <message>``."""
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Forget the configured logger so the next setup_logging() starts fresh (tests)."""
    global _logger
    _logger = None
