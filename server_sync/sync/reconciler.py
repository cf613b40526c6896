"""Per-file decision procedure: render, compare, back up, write, normalize."""

from __future__ import annotations

import difflib
import logging
import os
import stat
from pathlib import Path

from ..core.errors import BackupError, RenderError, WriteError
from ..core.log import TRACE
from ..core.models import FileRecord, Outcome, Settings
from ..rendering.engine import TemplateError, TemplateRegistry, render_text
from ..rendering.io import atomic_write_bytes
from .classifier import decode_utf8
from .permissions import FILE_MODE, PermissionManager

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".bak"


def backup_path(destination: Path) -> Path:
    """Sibling path holding the previous content of ``destination``."""
    return destination.with_name(destination.name + BACKUP_SUFFIX)


def log_diff(existing: str, candidate: str) -> None:
    """Log deleted and inserted lines between two texts at info level."""
    for line in difflib.ndiff(
        existing.splitlines(keepends=True), candidate.splitlines(keepends=True)
    ):
        if line.startswith(("- ", "+ ")):
            content = line[2:].rstrip("\r\n")
            logger.info(f"{line[0]} {content}")


class Reconciler:
    """Brings one destination file in line with its source record."""

    def __init__(
        self,
        settings: Settings,
        registry: TemplateRegistry,
        permissions: PermissionManager,
    ) -> None:
        self.settings = settings
        self.registry = registry
        self.permissions = permissions

    @property
    def destination_root(self) -> Path:
        return self.settings.destination_root

    def check_inside(self, destination: Path, directory: Path) -> None:
        """Fail when ``directory`` resolves outside the destination root through a symlink."""
        resolved = directory.resolve()
        if not resolved.is_relative_to(self.destination_root.resolve()):
            raise WriteError(
                destination, f"{directory} resolves to {resolved}, outside the destination root"
            )

    def ensure_dirs(self, destination: Path) -> None:
        """Create missing ancestors of ``destination`` below the root, top down.

        Each created directory gets directory permissions and ownership.
        Existing directories are left as they are.
        """
        ancestors = [
            parent
            for parent in destination.parents
            if parent != self.destination_root
            and parent.is_relative_to(self.destination_root)
        ]

        for ancestor in reversed(ancestors):
            if ancestor.is_symlink():
                logger.log(TRACE, f"Passing over symlinked directory {ancestor}")
                continue
            if ancestor.exists():
                if not ancestor.is_dir():
                    raise WriteError(destination, f"{ancestor} exists and is not a directory")
                continue

            self.check_inside(destination, ancestor.parent)
            logger.debug(f"Creating new directory {ancestor}")
            try:
                os.mkdir(ancestor)
            except FileExistsError:
                logger.log(TRACE, f"Directory {ancestor} appeared concurrently")
            except OSError as exc:
                raise WriteError(
                    destination, f"cannot create directory {ancestor}: {exc.strerror or exc}"
                ) from exc
            self.permissions.apply(ancestor)

        self.check_inside(destination, destination.parent)

    def candidate(self, record: FileRecord) -> bytes:
        """Bytes the destination should hold after reconciliation."""
        if record.text is None:
            return record.source_bytes

        try:
            rendered = render_text(
                self.registry,
                record.absolute_source.name,
                record.text,
                record.context.name,
                self.settings.variables,
            )
            return rendered.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise RenderError(
                record.absolute_source, f"rendered text is not valid UTF-8: {exc.reason}"
            ) from exc
        except TemplateError as exc:
            raise RenderError(record.absolute_source, f"cannot render template: {exc}") from exc

    def read_existing(self, destination: Path) -> bytes | None:
        """Current destination content, or None when there is no destination yet."""
        try:
            info = os.lstat(destination)
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise WriteError(destination, f"cannot stat: {exc.strerror or exc}") from exc

        if stat.S_ISDIR(info.st_mode):
            raise WriteError(destination, "destination is a directory")

        try:
            return destination.read_bytes()
        except OSError as exc:
            raise WriteError(
                destination, f"cannot read existing file: {exc.strerror or exc}"
            ) from exc

    def is_current(self, record: FileRecord, existing: bytes, candidate: bytes) -> bool:
        if record.text is None:
            return existing == candidate

        existing_text = decode_utf8(existing)
        candidate_text = candidate.decode("utf-8")
        if existing_text is None:
            logger.info(f"{record.absolute_destination} is not valid UTF-8, replacing it")
            return False

        log_diff(existing_text, candidate_text)
        return existing_text == candidate_text

    def backup(self, destination: Path) -> Path:
        """Move ``destination`` aside, replacing any previous backup."""
        backup = backup_path(destination)
        logger.log(TRACE, f"Backing up {destination} to {backup}")
        try:
            if backup.is_dir() and not backup.is_symlink():
                raise BackupError(destination, f"backup path {backup} is a directory")
            if os.path.lexists(backup):
                os.remove(backup)
            os.rename(destination, backup)
        except OSError as exc:
            raise BackupError(
                destination, f"cannot move to {backup}: {exc.strerror or exc}"
            ) from exc
        return backup

    def write(self, destination: Path, data: bytes) -> None:
        logger.log(TRACE, f"Writing {destination}")
        try:
            atomic_write_bytes(destination, data, mode=FILE_MODE)
        except OSError as exc:
            raise WriteError(destination, f"cannot write: {exc.strerror or exc}") from exc

    def reconcile(self, record: FileRecord) -> Outcome:
        """Run the decision procedure for one file.

        Raises:
            FileSyncError: Any per-file failure; partial work is not rolled back
        """
        destination = record.absolute_destination
        logger.log(TRACE, f"Templating {record.absolute_source} to {destination}")

        self.ensure_dirs(destination)
        candidate = self.candidate(record)
        existing = self.read_existing(destination)

        if existing is not None and self.is_current(record, existing, candidate):
            logger.debug(f"File {destination} is up to date")
            outcome = Outcome.UNCHANGED
        else:
            if existing is not None:
                self.backup(destination)
                outcome = Outcome.UPDATED
            else:
                outcome = Outcome.CREATED
            self.write(destination, candidate)
            logger.info(f"{outcome.value.capitalize()} {destination}")

        self.permissions.apply(destination)
        return outcome
