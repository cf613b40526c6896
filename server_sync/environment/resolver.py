"""Settings resolution from CLI flags, the env-file and the process environment."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Mapping

from ..core.errors import ConfigError
from ..core.log import TRACE
from ..core.models import Context, Settings
from .envfile import load_env_file
from .identity import resolve_identity

logger = logging.getLogger(__name__)

REPO = "SERVER_SYNC_REPO"
BRANCH = "SERVER_SYNC_BRANCH"
DESTINATION = "SERVER_SYNC_DESTINATION"
CONTEXTS = "SERVER_SYNC_CONTEXTS"
REPO_STORAGE = "SERVER_SYNC_REPO_STORAGE"
ENV_FILE = "SERVER_SYNC_ENV"

DEFAULT_BRANCH = "master"
DEFAULT_REPO_STORAGE = "/tmp/server-sync/"
DEFAULT_ENV_FILE = ".server_env"

_CONTEXT_SEPARATORS = re.compile(r"[,;]")


class OptionSources:
    """Lookup chain for named options: CLI flag, env-file entry, process env.

    The first source holding a non-blank value wins.
    """

    def __init__(
        self,
        cli: Mapping[str, str | None],
        env_file: Mapping[str, str],
        environ: Mapping[str, str],
    ) -> None:
        self.cli = cli
        self.env_file = env_file
        self.environ = environ

    def get(self, name: str) -> str | None:
        for label, source in (
            ("command args", self.cli),
            ("env file", self.env_file),
            ("process env", self.environ),
        ):
            value = source.get(name)
            if value is not None and value.strip() != "":
                logger.log(TRACE, f"Found {name} in {label}")
                return value
        logger.log(TRACE, f"Couldn't find {name} in any source")
        return None

    def variables(self) -> dict[str, str]:
        """Template variables: env-file entries overlaid by the process env."""
        merged = dict(self.env_file)
        merged.update(self.environ)
        return merged


def parse_contexts(raw: str) -> list[str]:
    """Split a context list on ``,`` or ``;`` keeping the input order."""
    names = [part.strip() for part in _CONTEXT_SEPARATORS.split(raw)]
    if any(name == "" for name in names):
        raise ConfigError(f"Empty context name in {raw!r}")
    return names


def resolve_destination(raw: str) -> Path:
    destination = Path(raw).expanduser().resolve()
    if destination == Path(destination.anchor):
        raise ConfigError(f"Refusing to use filesystem root {destination} as destination")
    if not destination.exists():
        raise ConfigError(f"Destination {destination} does not exist")
    if not destination.is_dir():
        raise ConfigError(f"Destination {destination} is not a directory")
    return destination


def resolve_settings(
    cli: Mapping[str, str | None],
    env_file: Path,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Build the read-only settings snapshot for one run.

    Args:
        cli: Values given on the command line keyed by option name
            (``SERVER_SYNC_*``, ``UID``, ...); ``None`` means not given
        env_file: Path to the ``.server_env`` file (may be missing)
        environ: Process environment, defaults to ``os.environ``

    Returns:
        Frozen settings

    Raises:
        ConfigError: When a required option is missing or invalid
    """
    environ = dict(os.environ if environ is None else environ)
    sources = OptionSources(cli, load_env_file(env_file), environ)

    raw_contexts = sources.get(CONTEXTS)
    if raw_contexts is None:
        raise ConfigError("No contexts to sync!")

    raw_destination = sources.get(DESTINATION)
    if raw_destination is None:
        raise ConfigError(f"No destination given (--dest or {DESTINATION})")
    destination_root = resolve_destination(raw_destination)

    repo_storage = Path(sources.get(REPO_STORAGE) or DEFAULT_REPO_STORAGE).expanduser()
    repo_storage = repo_storage.absolute()

    contexts = tuple(
        Context.under(repo_storage, name) for name in parse_contexts(raw_contexts)
    )

    owner_spec = sources.get("UID") or sources.get("USER")
    if owner_spec is None:
        raise ConfigError("Cannot determine owner: set UID or USER")
    group_spec = sources.get("GID") or sources.get("GROUP")
    identity = resolve_identity(owner_spec, group_spec)

    settings = Settings(
        destination_root=destination_root,
        repo_storage=repo_storage,
        repo_url=sources.get(REPO),
        repo_branch=sources.get(BRANCH) or DEFAULT_BRANCH,
        contexts=contexts,
        variables=sources.variables(),
        owner_spec=owner_spec,
        group_spec=group_spec,
        identity=identity,
    )

    logger.debug(f"Contexts: {[context.name for context in settings.contexts]}")
    logger.debug(f"Destination root: {settings.destination_root}")
    logger.debug(f"Repository storage: {settings.repo_storage}")
    logger.log(TRACE, f"Variables: {sorted(settings.variables)}")
    return settings
