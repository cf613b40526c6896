"""Mode and ownership normalization for everything written under the destination."""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path

from ..core.errors import PermissionsError
from ..core.log import TRACE
from ..core.models import Identity

logger = logging.getLogger(__name__)

DIRECTORY_MODE = 0o755
FILE_MODE = 0o644


class PermissionManager:
    """Applies fixed modes and the resolved owner/group to a path."""

    def __init__(self, identity: Identity) -> None:
        self.identity = identity

    def apply(self, path: Path) -> None:
        """Normalize mode and ownership of ``path``; symlinks are skipped.

        Raises:
            PermissionsError: When the path is missing or chmod/chown fails
        """
        try:
            info = os.lstat(path)
        except OSError as exc:
            raise PermissionsError(path, f"cannot stat: {exc.strerror or exc}") from exc

        if stat.S_ISLNK(info.st_mode):
            logger.log(TRACE, f"Path {path} is a symlink, skipping permissions")
            return

        mode = DIRECTORY_MODE if stat.S_ISDIR(info.st_mode) else FILE_MODE
        try:
            os.chmod(path, mode)
            os.chown(path, self.identity.uid, self.identity.gid)
        except OSError as exc:
            raise PermissionsError(
                path,
                f"cannot set mode {mode:o} and owner "
                f"{self.identity.uid}:{self.identity.gid}: {exc.strerror or exc}",
            ) from exc
