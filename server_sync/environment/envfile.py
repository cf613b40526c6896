"""Reader for ``.server_env`` style KEY=VALUE files."""

from __future__ import annotations

import logging
from pathlib import Path

from ..core.errors import ConfigError

logger = logging.getLogger(__name__)


def read_env(path: Path) -> list[tuple[str, str]]:
    """Read KEY=VALUE pairs in file order.

    Blank lines, ``#`` comments and lines without ``=`` are skipped. Values are
    kept verbatim apart from the surrounding whitespace of the line.
    """
    pairs: list[tuple[str, str]] = []
    with path.open(encoding="utf-8") as handle:
        for raw in handle:
            line = raw.strip()
            if line == "" or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            key = key.strip()
            if key.startswith("export "):
                key = key[len("export ") :].strip()
            if key == "":
                continue
            pairs.append((key, value))
    return pairs


def load_env_file(path: Path) -> dict[str, str]:
    """Load an env-file into a mapping, rejecting duplicate keys.

    A missing file yields an empty mapping.
    """
    if not path.exists():
        logger.debug(f"Env file {path} not found; continuing without it")
        return {}
    if not path.is_file():
        raise ConfigError(f"Env file {path} is not a regular file")

    try:
        pairs = read_env(path)
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Cannot read env file {path}: {exc}") from exc

    entries: dict[str, str] = {}
    for key, value in pairs:
        if key in entries:
            raise ConfigError(f"Duplicate key {key!r} in env file {path}")
        entries[key] = value

    logger.debug(f"Loaded {len(entries)} variable(s) from {path}")
    return entries
