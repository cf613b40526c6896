"""Run orchestration: fetch, then every context in order, file by file."""

from __future__ import annotations

import logging

from ..core.errors import ConfigError, FileSyncError
from ..core.models import Context, FileFailure, Settings, SyncReport
from ..rendering.engine import TemplateRegistry
from ..repository.fetcher import fetch_repository
from .classifier import classify
from .enumerator import walk_context
from .permissions import PermissionManager
from .reconciler import Reconciler

logger = logging.getLogger(__name__)


def check_sources(settings: Settings) -> None:
    """Fail before any write when a context has no source directory."""
    for context in settings.contexts:
        if not context.source_root.is_dir():
            raise ConfigError(
                f"Context {context.name!r} has no directory at {context.source_root}"
            )


def sync_context(context: Context, reconciler: Reconciler, report: SyncReport) -> None:
    """Reconcile every file of one context; file failures are recorded, not raised."""
    logger.info(f"Processing context {context.name}")
    logger.debug(f"Source root: {context.source_root}")

    destination_root = reconciler.destination_root
    for relative_path in walk_context(context):
        try:
            record = classify(context, relative_path, destination_root)
            outcome = reconciler.reconcile(record)
        except FileSyncError as exc:
            logger.error(f"[{context.name}] {exc}")
            report.failures.append(
                FileFailure(path=exc.path, context=context.name, error=exc.message)
            )
            continue
        report.record(outcome)

    report.contexts.append(context.name)


def synchronize(
    settings: Settings,
    *,
    fetch: bool = True,
    registry: TemplateRegistry | None = None,
) -> SyncReport:
    """Fetch the repository and materialize every context into the destination.

    Args:
        settings: Resolved settings for this run
        fetch: Clone/pull the repository first
        registry: Template registry to use (a fresh one by default)

    Returns:
        Report of what happened to every file

    Raises:
        FetchError: When the repository cannot be fetched
        ConfigError: When a context directory is missing
    """
    if fetch:
        fetch_repository(settings.repo_storage, settings.repo_url, settings.repo_branch)
    else:
        logger.info("Skipping repository fetch")

    check_sources(settings)

    reconciler = Reconciler(
        settings,
        registry if registry is not None else TemplateRegistry(),
        PermissionManager(settings.identity),
    )
    report = SyncReport()
    for context in settings.contexts:
        sync_context(context, reconciler, report)

    logger.info(f"Synchronized {len(report.contexts)} context(s): {report.summary()}")
    return report
