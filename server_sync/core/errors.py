"""Error taxonomy for a synchronization run."""

from __future__ import annotations

from pathlib import Path


class ServerSyncError(Exception):
    """Base class for every error raised by server-sync."""


class ConfigError(ServerSyncError):
    """Raised when settings cannot be resolved or a run precondition fails."""


class FetchError(ServerSyncError):
    """Raised when the configuration repository cannot be fetched."""


class FileSyncError(ServerSyncError):
    """Raised when a single file cannot be reconciled.

    The run continues with the next file; the failure is tallied.
    """

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message


class SourceReadError(FileSyncError):
    """Raised when a source file cannot be read."""


class RenderError(FileSyncError):
    """Raised on a template syntax error or an undefined variable."""


class BackupError(FileSyncError):
    """Raised when an existing destination cannot be moved to its backup."""


class WriteError(FileSyncError):
    """Raised when the destination (or one of its directories) cannot be written."""


class PermissionsError(FileSyncError):
    """Raised when mode or ownership cannot be applied."""
