"""SolrQuery logging utilities.

The library modules log through child loggers of ``SolrQuery`` and never
install handlers themselves; only the CLI calls ``configure_logging``.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Final


_LEVEL_ABBREV: Final[dict[int, str]] = {
    logging.DEBUG: "DEBG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERRO",
    logging.CRITICAL: "ERRO",
}


class _AbbrevLevelFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 - record is stdlib name
        record.levelabbr = _LEVEL_ABBREV.get(record.levelno, record.levelname[:4])
        return super().format(record)


log = logging.getLogger("SolrQuery")
log.addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Return a child of the package logger, e.g. ``SolrQuery.transport``."""
    return log.getChild(name)


def configure_logging(
    *,
    level: str = "INFO",
    action: str | None = None,
    log_to_file: bool = False,
    log_dir: str = "log",
) -> Path | None:
    """Install console (and optionally file) handlers on the package logger.

    Uses format: mm-dd HH:MM:SS [<LVL>] <message>

    Args:
        level: Console logging level (e.g., INFO, DEBUG).
        action: CLI command name; the log file goes to ``<log_dir>/<action>/``.
        log_to_file: Whether to mirror logs to a file at DEBUG level.
        log_dir: Base directory for log files.

    Returns:
        Path of the log file, or None when logging only to the console.
    """
    resolved_level = getattr(logging, (level or "INFO").upper(), logging.INFO)

    formatter = _AbbrevLevelFormatter(
        fmt="%(asctime)s [%(levelabbr)s] %(message)s",
        datefmt="%m-%d %H:%M:%S",
    )

    log.handlers.clear()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(resolved_level)
    stream_handler.setFormatter(formatter)
    log.addHandler(stream_handler)

    log_path: Path | None = None
    if log_to_file and action:
        action_dir = Path(log_dir or "log") / action
        action_dir.mkdir(parents=True, exist_ok=True)
        log_path = action_dir / f"{action}_{datetime.now().strftime('%m%d%H%M%S')}.log"
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        log.addHandler(file_handler)

    log.setLevel(logging.DEBUG if log_path else resolved_level)
    log.propagate = False
    return log_path
