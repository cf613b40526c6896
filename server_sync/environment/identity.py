"""Owner and group resolution against the POSIX account databases."""

from __future__ import annotations

import grp
import logging
import pwd

from ..core.errors import ConfigError
from ..core.log import TRACE
from ..core.models import Identity

logger = logging.getLogger(__name__)


def _is_numeric(spec: str) -> bool:
    return spec.strip().isdigit()


def resolve_uid(owner_spec: str) -> int:
    """Return the uid for a numeric spec or an account name."""
    spec = owner_spec.strip()
    if spec == "":
        raise ConfigError("Owner is empty")
    if _is_numeric(spec):
        return int(spec)
    try:
        return pwd.getpwnam(spec).pw_uid
    except KeyError as exc:
        raise ConfigError(f"Unknown user {spec!r}") from exc


def resolve_gid(group_spec: str) -> int:
    """Return the gid for a numeric spec or a group name."""
    spec = group_spec.strip()
    if spec == "":
        raise ConfigError("Group is empty")
    if _is_numeric(spec):
        return int(spec)
    try:
        return grp.getgrnam(spec).gr_gid
    except KeyError as exc:
        raise ConfigError(f"Unknown group {spec!r}") from exc


def primary_gid(uid: int) -> int:
    try:
        return pwd.getpwuid(uid).pw_gid
    except KeyError as exc:
        raise ConfigError(
            f"No group given and uid {uid} has no password entry to take a primary group from"
        ) from exc


def resolve_identity(owner_spec: str, group_spec: str | None) -> Identity:
    """Resolve owner and group specs to numeric ids.

    The group falls back to the owner's primary group when not given.
    """
    uid = resolve_uid(owner_spec)
    gid = resolve_gid(group_spec) if group_spec else primary_gid(uid)
    logger.log(TRACE, f"Resolved owner {owner_spec!r}/{group_spec!r} to {uid}:{gid}")
    return Identity(uid=uid, gid=gid)
