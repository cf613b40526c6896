"""Traversal of a context's source tree."""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path
from typing import Iterator

from ..core.log import TRACE
from ..core.models import Context

logger = logging.getLogger(__name__)


def _log_walk_error(exc: OSError) -> None:
    logger.warning(f"Skipping unreadable directory: {exc}")


def walk_context(context: Context) -> Iterator[Path]:
    """Yield paths of regular files under the context root, relative to it.

    Symlinks are neither followed nor yielded, directories on another device
    are not entered, and entries are visited in sorted order.
    """
    root = context.source_root
    root_device = os.lstat(root).st_dev

    for dirpath, dirnames, filenames in os.walk(
        root, followlinks=False, onerror=_log_walk_error
    ):
        current = Path(dirpath)

        kept: list[str] = []
        for name in sorted(dirnames):
            info = os.lstat(current / name)
            if stat.S_ISLNK(info.st_mode):
                logger.log(TRACE, f"Skipping symlinked directory {current / name}")
            elif info.st_dev != root_device:
                logger.debug(f"Not crossing into another filesystem at {current / name}")
            else:
                kept.append(name)
        dirnames[:] = kept

        for name in sorted(filenames):
            path = current / name
            mode = os.lstat(path).st_mode
            if not stat.S_ISREG(mode):
                logger.log(TRACE, f"Skipping non-regular file {path}")
                continue
            yield path.relative_to(root)
