"""Main CLI application."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from typing_extensions import Annotated

from ..core import log
from ..core.errors import ConfigError, FetchError
from ..environment import resolver
from ..sync import driver
from .parsers import cli_options

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FILE_FAILURES = 1
EXIT_CONFIG = 19
EXIT_FETCH = 20

app = typer.Typer(
    name="server-sync",
    help="Materialize per-context configuration trees from a git repository.",
    add_completion=False,
)


@app.command()
def sync(
    verbose: Annotated[
        int,
        typer.Option(
            "-v",
            "--verbose",
            count=True,
            help="Increase verbosity (-v debug, -vv trace).",
        ),
    ] = 0,
    env_file: Annotated[
        str,
        typer.Option(
            "--env-file",
            "-e",
            envvar=resolver.ENV_FILE,
            help="Path to the env-file with settings and template variables.",
            metavar="PATH",
        ),
    ] = resolver.DEFAULT_ENV_FILE,
    repo: Annotated[
        str,
        typer.Option("--repo", "-r", help="Remote repository URL.", metavar="URL"),
    ] = "",
    branch: Annotated[
        str,
        typer.Option(
            "--branch", "-b", help="Branch to check out (default: master).", metavar="NAME"
        ),
    ] = "",
    dest: Annotated[
        str,
        typer.Option("--dest", "-d", help="Destination root directory.", metavar="DIR"),
    ] = "",
    contexts: Annotated[
        list[str],
        typer.Option(
            "--contexts",
            "-c",
            help="Context names, separated by ',' or ';'. Repeatable.",
            metavar="NAMES",
        ),
    ] = [],
    repo_storage: Annotated[
        str,
        typer.Option(
            "--repo-storage",
            help=f"Local checkout path (default: {resolver.DEFAULT_REPO_STORAGE}).",
            metavar="DIR",
        ),
    ] = "",
    no_fetch: Annotated[
        bool,
        typer.Option(
            "--no-fetch",
            help="Use the existing checkout without cloning or pulling.",
        ),
    ] = False,
) -> None:
    """Pull the configuration repository and sync every context into the destination."""
    log.configure(verbose)

    logger.debug("Starting server-sync")

    try:
        settings = resolver.resolve_settings(
            cli_options(
                repo=repo,
                branch=branch,
                dest=dest,
                contexts=contexts,
                repo_storage=repo_storage,
            ),
            Path(env_file),
        )
    except ConfigError as exc:
        logger.error(str(exc))
        raise typer.Exit(code=EXIT_CONFIG) from exc

    try:
        report = driver.synchronize(settings, fetch=not no_fetch)
    except FetchError as exc:
        logger.error(str(exc))
        raise typer.Exit(code=EXIT_FETCH) from exc
    except ConfigError as exc:
        logger.error(str(exc))
        raise typer.Exit(code=EXIT_CONFIG) from exc

    if report.exit_code != EXIT_OK:
        logger.warning(f"{report.failed} file(s) failed")
        raise typer.Exit(code=EXIT_FILE_FAILURES)

    logger.info("Done!")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
