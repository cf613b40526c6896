from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Iterable

from ..core.log import TRACE

logger = logging.getLogger(__name__)


def run_logged(
    cmd: Iterable[str],
    *,
    cwd: Path | None = None,
    check: bool = True,
) -> subprocess.CompletedProcess[str]:
    """
    Run a subprocess with captured output and replay it to the log.
    Returns the CompletedProcess; raises CalledProcessError when check=True.
    """
    cmd_list = list(cmd)
    logger.log(TRACE, f"Running {' '.join(cmd_list)}")
    result = subprocess.run(
        cmd_list,
        cwd=str(cwd) if cwd is not None else None,
        capture_output=True,
        text=True,
    )
    for line in (result.stdout + result.stderr).splitlines():
        logger.debug(f"{cmd_list[0]}: {line}")
    if check and result.returncode != 0:
        raise subprocess.CalledProcessError(
            result.returncode, result.args, output=result.stdout, stderr=result.stderr
        )
    return result


def ensure(commands: Iterable[str]) -> list[str]:
    """Return the commands missing from PATH."""
    return [name for name in commands if shutil.which(name) is None]
