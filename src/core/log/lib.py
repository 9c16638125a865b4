"""Core logging implementation for jsonform."""

import logging
import sys
from typing import Optional

__all__ = ["get_logger", "setup_logging"]


def setup_logging(level: int | str | None = None, stream=sys.stderr) -> None:
    """Configure basic logging.

    Args:
        level: Logging level. Defaults to FORM_LOG_LEVEL from the environment.
        stream: Output stream.
    """
    if level is None:
        from src.config import EnvVar, get_environment

        level = get_environment(EnvVar.FORM_LOG_LEVEL)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=stream,
    )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Name of the logger, nested under the "jsonform" logger.

    Returns:
        Logger instance.
    """
    if not name:
        return logging.getLogger("jsonform")
    return logging.getLogger(f"jsonform.{name}")
