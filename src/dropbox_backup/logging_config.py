"""Logging configuration for dropbox-backup."""

import sys
from pathlib import Path

from loguru import logger

CONSOLE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} {level.icon} {message}"
AUDIT_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {message}"


def configure_logging(*, verbose: bool = False, log_file: Path | None = None) -> None:
    """Configure loguru: stderr at INFO (DEBUG if verbose), plus an optional audit file.

    The audit file always records DEBUG, so every per-file state transition of
    a run can be reconstructed afterwards regardless of console verbosity.
    """
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO", format=CONSOLE_FORMAT)
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level="DEBUG",
            format=AUDIT_FORMAT,
            rotation="10 MB",
            retention=5,
            encoding="utf-8",
        )
