"""Server-sync - materialize per-context configuration trees onto a host.

Pulls a configuration repository, renders its text files through Jinja2 with
environment-driven variables and replaces destination files with backups.
The library entry points are :func:`resolve_settings` and :func:`synchronize`;
the ``server-sync`` console script wraps both.
"""

import logging

from .cli import main
from .core.errors import ConfigError, FetchError, FileSyncError, ServerSyncError
from .core.models import Settings, SyncReport
from .environment.resolver import resolve_settings
from .sync.driver import synchronize

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ConfigError",
    "FetchError",
    "FileSyncError",
    "ServerSyncError",
    "Settings",
    "SyncReport",
    "main",
    "resolve_settings",
    "synchronize",
]
