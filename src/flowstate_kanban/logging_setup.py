from __future__ import annotations

import sys
from typing import Any, Optional

from loguru import logger

from .constants import DEFAULT_LOG_LEVEL

LOG_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> "
    "<level>{level: <8}</level> "
    "<cyan>{name}</cyan> | {message}"
)


def configure_logging(level: str = DEFAULT_LOG_LEVEL, sink: Optional[Any] = None) -> int:
    """Route board logs to a single sink (stderr by default) and return its handler id."""
    logger.remove()
    return logger.add(
        sink if sink is not None else sys.stderr,
        level=level.upper(),
        format=LOG_FORMAT,
    )
