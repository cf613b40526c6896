"""Local checkout of the configuration repository."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from ..core.errors import FetchError
from ._utils import ensure, run_logged

logger = logging.getLogger(__name__)


def _git(args: list[str], *, cwd: Path | None = None) -> str:
    try:
        result = run_logged(["git", *args], cwd=cwd)
    except subprocess.CalledProcessError as exc:
        output = ((exc.stdout or "") + (exc.stderr or "")).strip()
        raise FetchError(
            f"git {args[0]} failed with exit code {exc.returncode}: {output}"
        ) from exc
    except OSError as exc:
        raise FetchError(f"Cannot run git {args[0]}: {exc}") from exc
    return result.stdout.strip()


def fetch_repository(repo_storage: Path, repo_url: str | None, branch: str) -> None:
    """Ensure ``repo_storage`` is a checkout of ``branch``.

    Clones ``repo_url`` when the storage path does not exist yet, pulls
    otherwise, then checks out ``branch``. Nothing is rolled back on failure.

    Raises:
        FetchError: When git is missing or any git step exits non-zero
    """
    missing = ensure(["git"])
    if missing:
        raise FetchError(f"missing dependency: {', '.join(missing)}")

    if not repo_storage.exists():
        if not repo_url:
            raise FetchError(
                f"Repository storage {repo_storage} does not exist and no repository URL is set"
            )
        logger.info(f"Cloning {repo_url} into {repo_storage}")
        _git(["clone", repo_url, str(repo_storage)])
    else:
        if not repo_storage.is_dir():
            raise FetchError(f"Repository storage {repo_storage} is not a directory")
        output = _git(["pull"], cwd=repo_storage)
        if output.startswith("Already up to date"):
            logger.info("Repository is already up to date!")
        else:
            logger.info("Successfully synchronized with repository!")

    _git(["checkout", branch], cwd=repo_storage)
    logger.debug(f"Checked out {branch} in {repo_storage}")
