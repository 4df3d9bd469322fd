"""Logging setup.

Logs go to `tweakport.log` inside the configured log directory, rotated by
size, and to the console.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

_LOG_FORMAT = "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s"
_LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_LOG_FILE_NAME = "tweakport.log"

# Track installed handlers so reconfiguration replaces them
_file_handler: logging.Handler | None = None
_console_handler: logging.Handler | None = None


def setup_logging(
    level: str = "INFO",
    log_dir: str | os.PathLike | None = None,
    max_size_mb: int = 10,
    backup_count: int = 5,
) -> None:
    """Configure the root logger.

    - File handler: size-based rotation (skipped when log_dir is None).
    - Console handler: stderr.
    """
    global _file_handler, _console_handler

    level_str = (level or "INFO").strip().upper()
    if level_str not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        level_str = "INFO"
    log_level = getattr(logging, level_str, logging.INFO)

    max_size_mb = max(1, min(500, int(max_size_mb or 10)))
    backup_count = max(0, int(backup_count or 0))

    root = logging.getLogger()

    if _file_handler and _file_handler in root.handlers:
        root.removeHandler(_file_handler)
        _file_handler.close()
    _file_handler = None
    if _console_handler and _console_handler in root.handlers:
        root.removeHandler(_console_handler)

    formatter = logging.Formatter(_LOG_FORMAT, datefmt=_LOG_DATE_FORMAT)

    if log_dir is not None:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(
            directory / _LOG_FILE_NAME,
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding="utf-8",
        )
        fh.setLevel(log_level)
        fh.setFormatter(formatter)
        root.addHandler(fh)
        _file_handler = fh

    ch = logging.StreamHandler()
    ch.setLevel(log_level)
    ch.setFormatter(formatter)
    root.addHandler(ch)
    _console_handler = ch

    root.setLevel(log_level)

    logging.getLogger("tweakport").debug(
        "Logging configured: level=%s, dir=%s, max size=%d MB",
        level_str,
        log_dir,
        max_size_mb,
    )
