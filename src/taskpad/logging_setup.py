# src/taskpad/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "taskpad.log"
LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Console thresholds by logger-name prefix. Longest matching prefix wins.
# The overdue checker runs on its own thread and would break into the prompt.
_CONSOLE_THRESHOLDS: dict[str, int] = {
    "taskpad.": logging.NOTSET,
    "taskpad.tasks.task_scheduler": logging.WARNING,
    "py.warnings": logging.ERROR,
}
_OTHER_LOGGERS_THRESHOLD = logging.ERROR


class _ConsoleNoiseFilter(logging.Filter):
    """Keep the REPL readable: our own records pass, everyone else only on ERROR."""

    def filter(self, record: logging.LogRecord) -> bool:
        best = ""
        for prefix in _CONSOLE_THRESHOLDS:
            if record.name.startswith(prefix) and len(prefix) > len(best):
                best = prefix
        threshold = _CONSOLE_THRESHOLDS[best] if best else _OTHER_LOGGERS_THRESHOLD
        return record.levelno >= threshold


def _drop_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskpad",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Send filtered records to stderr and everything to <log_dir>/taskpad.log.

    Meant to run once from the entry point, before the store loads.
    Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    _drop_handlers(root)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(formatter)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    log_file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    log_file_handler.setLevel(file_level)
    log_file_handler.setFormatter(formatter)
    root.addHandler(log_file_handler)

    logging.captureWarnings(True)
    return log_file
