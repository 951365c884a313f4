# packages/circuits_builder/log.py
import logging
import os
import sys

from pythonjsonlogger import jsonlogger

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

LOGGER_NAME = "circuits_builder"

_LABELS = {
    logging.DEBUG: ("DEBUG", "\033[0;36m"),
    logging.INFO: ("INFO", "\033[0;34m"),
    SUCCESS: ("SUCCESS", "\033[0;32m"),
    logging.WARNING: ("WARN", "\033[1;33m"),
    logging.ERROR: ("ERROR", "\033[0;31m"),
    logging.CRITICAL: ("ERROR", "\033[0;31m"),
}
_RESET = "\033[0m"


class LabelFormatter(logging.Formatter):
    """Renders records as ``[LABEL] message`` with an optional colour."""

    def __init__(self, color: bool = True):
        super().__init__("%(message)s")
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        label, code = _LABELS.get(record.levelno, (record.levelname, ""))
        message = super().format(record)
        if self.color and code:
            return f"{code}[{label}]{_RESET} {message}"
        return f"[{label}] {message}"


def _use_color(stream) -> bool:
    if os.getenv("NO_COLOR"):
        return False
    return hasattr(stream, "isatty") and stream.isatty()


def configure(level: str | None = None, fmt: str | None = None, stream=None) -> logging.Logger:
    """Install a single handler on the package logger and return it."""
    stream = stream or sys.stdout
    fmt = (fmt or os.getenv("CIRCUITS_LOG_FORMAT", "text")).lower()
    level = (level or os.getenv("CIRCUITS_LOG_LEVEL", "INFO")).upper()

    handler = logging.StreamHandler(stream)
    if fmt == "json":
        handler.setFormatter(jsonlogger.JsonFormatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    else:
        handler.setFormatter(LabelFormatter(color=_use_color(stream)))

    logger = logging.getLogger(LOGGER_NAME)
    for old in list(logger.handlers):
        logger.removeHandler(old)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    if not name:
        return logging.getLogger(LOGGER_NAME)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def success(logger: logging.Logger, msg: str, *args) -> None:
    logger.log(SUCCESS, msg, *args)
