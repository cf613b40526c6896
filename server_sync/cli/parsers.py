"""CLI argument parsers and validators."""

from __future__ import annotations

from ..environment import resolver


def join_contexts(values: list[str]) -> str | None:
    """Merge repeated ``--contexts`` values into one delimited list."""
    parts = [value for value in values if value.strip()]
    if not parts:
        return None
    return ",".join(parts)


def cli_options(
    *,
    repo: str,
    branch: str,
    dest: str,
    contexts: list[str],
    repo_storage: str,
) -> dict[str, str | None]:
    """Map CLI flags to option names; unset flags map to None."""
    return {
        resolver.REPO: repo or None,
        resolver.BRANCH: branch or None,
        resolver.DESTINATION: dest or None,
        resolver.CONTEXTS: join_contexts(contexts),
        resolver.REPO_STORAGE: repo_storage or None,
    }
