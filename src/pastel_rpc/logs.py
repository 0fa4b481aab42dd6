"""Loguru sinks for the CLI and long-running callers."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional, Union

from loguru import logger

LOG_FORMAT = "{time:YYYY-MM-DDTHH:mm:ss.SSSZ} - {level} - {message}"
LOG_FILE_NAME = "pastel_rpc_wrapper.log"


def configure_logging(
    log_dir: Optional[Union[str, Path]] = "logs",
    level: str = "INFO",
    console: bool = True,
) -> Optional[Path]:
    """
    Replace loguru's default sink with a console sink and a rotating file.

    Args:
        log_dir: Directory for the log file; None disables file logging
        level: Minimum level for both sinks
        console: Whether to log to stderr

    Returns:
        Path of the log file, if one was configured
    """
    logger.remove()

    if console:
        logger.add(sys.stderr, level=level, format=LOG_FORMAT)

    if log_dir is None:
        return None

    log_path = Path(log_dir) / LOG_FILE_NAME
    log_path.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        str(log_path),
        level=level,
        format=LOG_FORMAT,
        rotation="10 MB",
        retention="14 days",
        compression="zip",
        enqueue=True,
        encoding="utf-8",
        backtrace=False,
        diagnose=False,
    )
    return log_path
