"""Logging levels and CLI logging setup."""

from __future__ import annotations

import logging

TRACE = 5
logging.addLevelName(TRACE, "TRACE")


def level_for(verbosity: int) -> int:
    """Map the ``-v`` count to a logging level (0=info, 1=debug, 2+=trace)."""
    if verbosity <= 0:
        return logging.INFO
    if verbosity == 1:
        return logging.DEBUG
    return TRACE


def configure(verbosity: int) -> None:
    logging.basicConfig(
        level=level_for(verbosity),
        format="[%(levelname)s] %(message)s",
    )
