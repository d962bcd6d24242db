from __future__ import annotations

import logging
import sys

"""Console logging for stamps-bulk.

Every console line starts with a label: INFO, WARN, ERROR or SUMMARY (DEBUG
only with --debug). Module loggers created with logging.getLogger(__name__)
sit below the "stamps_bulk" logger and print through its single stdout handler.

Per-row validation issues also go to the JSON Lines file managed by
stamps_bulk.logging.error_log.
"""

__all__ = [
    "setup_logging",
    "get_logger",
    "log_summary",
    "reset_logging",
    "LOGGER_NAME",
    "SUMMARY_LEVEL",
]

LOGGER_NAME = "stamps_bulk"

# INFO(20) と WARNING(30) の間
SUMMARY_LEVEL = 25

_LABELS: dict[int, str] = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    SUMMARY_LEVEL: "SUMMARY",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "CRITICAL",
}

_configured: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    """Render a record as "<LABEL> <message>"."""

    LEVEL_LABELS = _LABELS

    def format(self, record: logging.LogRecord) -> str:
        label = self.LEVEL_LABELS.get(record.levelno, record.levelname)
        return f"{label} {record.getMessage()}"


def _console_handler() -> logging.Handler:
    # sys.stdout はハンドラ生成時点のものを掴む
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(LabeledFormatter())
    return handler


def _apply_level(logger: logging.Logger, level: int) -> None:
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)


def setup_logging(debug: bool = False) -> logging.Logger:
    """Attach the labeled stdout handler to the "stamps_bulk" logger.

    Calling it again returns the same logger. With debug=True an already
    configured logger is switched to DEBUG as well.
    """
    global _configured

    if _configured is None:
        logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
        logger = logging.getLogger(LOGGER_NAME)
        logger.handlers.clear()
        logger.addHandler(_console_handler())
        # root にも流すと二重出力になる
        logger.propagate = False
        _configured = logger
        _apply_level(logger, logging.INFO)

    if debug:
        _apply_level(_configured, logging.DEBUG)
    return _configured


def get_logger() -> logging.Logger:
    return _configured if _configured is not None else setup_logging()


def log_summary(message: str) -> None:
    """Emit one SUMMARY line."""
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Forget the configured logger so the next setup_logging() starts fresh (tests)."""
    global _configured
    _configured = None
