"""Setup logging configuration."""

import logging
import sys
from pathlib import Path
from typing import Optional

DEFAULT_LOG_FILE = "logs/db2erd.log"

FORMATS = {
    "detailed": (
        "%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s",
        "%Y-%m-%d %H:%M:%S",
    ),
    "simple": ("%(levelname)s | %(name)s | %(message)s", None),
}


def _resolve_log_path(log_file: Optional[str]) -> Path:
    # Relative paths are anchored at the DB2ERD package root
    db2erd_root = Path(__file__).parent.parent.parent
    log_path = Path(log_file or DEFAULT_LOG_FILE)
    if not log_path.is_absolute():
        log_path = db2erd_root / log_path
    return log_path


def _build_formatter(format_type: str) -> logging.Formatter:
    fmt, datefmt = FORMATS.get(format_type, FORMATS["simple"])
    return logging.Formatter(fmt=fmt, datefmt=datefmt)


def clear_log_file(log_file: Optional[str] = None) -> None:
    """
    Delete the log file so the next run starts with an empty one.

    Args:
        log_file: Path to log file (relative to DB2ERD root). If None, uses default.
    """
    log_path = _resolve_log_path(log_file)
    if not log_path.exists():
        return
    try:
        log_path.unlink()
    except PermissionError:
        # Locked by another process (e.g. an open editor on Windows)
        logging.getLogger(__name__).warning(f"Cannot clear log file {log_path}; it is locked")


def setup_logging(
    level: str = "INFO",
    format_type: str = "detailed",
    log_to_file: bool = False,
    log_file: Optional[str] = None,
    clear_existing: bool = False,
) -> None:
    """
    Configure the root logger for an analysis run.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL);
            unknown names fall back to INFO
        format_type: "simple" or "detailed"
        log_to_file: Also write to ``log_file``
        log_file: Path to log file (relative to DB2ERD root unless absolute)
        clear_existing: Delete the log file before attaching the file handler
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    formatter = _build_formatter(format_type)

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_to_file:
        if clear_existing:
            clear_log_file(log_file)
        log_path = _resolve_log_path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Logger for a DB2ERD module (pass ``__name__``)."""
    return logging.getLogger(name)
