"""
taghash Typer CLI Application

Resolves tags to hashes and hashes to tags from the command line, and
exposes maintenance commands for the local cache database.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated

import typer

from taghash import __version__
from taghash.cli.common.error_handler import handle_cli_error
from taghash.cli.common.options import (
    CacheDirOption,
    CacheTTLOption,
    ConfigOption,
    LogLevelOption,
)
from taghash.cli.common.setup import build_container, load_cli_settings
from taghash.cli.output import format_hashes, format_tag
from taghash.services.git import current_repository
from taghash.services.ttl_policy import CacheTTL
from taghash.shared.constants import CLIHelp, OutputFormat
from taghash.shared.context import OperationContext
from taghash.shared.errors import ErrorCode, ErrorContext, InvalidInputError
from taghash.shared.models import Repository, is_sha


def version_callback(value: bool) -> None:
    """Print version information and exit."""
    if value:
        typer.echo(f"{CLIHelp.APP_NAME} {__version__}")
        raise typer.Exit


app = typer.Typer(
    name=CLIHelp.APP_NAME,
    help=CLIHelp.APP_DESCRIPTION,
    add_completion=False,
    no_args_is_help=True,
)

cache_app = typer.Typer(help=CLIHelp.CACHE_APP_HELP, no_args_is_help=True)
app.add_typer(cache_app, name="cache")


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version information and exit.",
        ),
    ] = False,
) -> None:
    """Resolve git tags and hashes of GitHub repositories."""


@app.command("resolve", help=CLIHelp.RESOLVE_HELP)
def resolve_command(
    values: Annotated[list[str], typer.Argument(help=CLIHelp.VALUES_HELP)],
    repo: Annotated[str | None, typer.Option("--repo", "-R", help=CLIHelp.REPO_HELP)] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", case_sensitive=False, help=CLIHelp.FORMAT_HELP),
    ] = OutputFormat.TEXT,
    show_base_tag: Annotated[
        bool, typer.Option("--show-base-tag", help=CLIHelp.SHOW_BASE_TAG_HELP)
    ] = False,
    cache_dir: CacheDirOption = None,
    cache_ttl: CacheTTLOption = None,
    no_cache: Annotated[bool, typer.Option("--no-cache", help=CLIHelp.NO_CACHE_HELP)] = False,
    timeout: Annotated[
        float | None, typer.Option("--timeout", min=0, help=CLIHelp.TIMEOUT_HELP)
    ] = None,
    log_level: LogLevelOption = None,
    config: ConfigOption = None,
) -> None:
    try:
        settings = load_cli_settings(config, cache_dir, log_level)

        ttl = CacheTTL.parse(cache_ttl or settings.cache.ttl)
        if no_cache:
            ttl = ttl.without_query_cache()

        if repo:
            repository = Repository.parse(repo, default_host=settings.api.host)
        else:
            repository = current_repository(executable=settings.git.executable)

        container = build_container(settings, ttl)
        context = OperationContext.with_timeout(timeout)

        with container.resolver() as resolver:
            client = container.graphql_client()
            try:
                if no_cache:
                    resolver.clear_all()
                    client.clear_cache()

                for value in values:
                    if is_sha(value):
                        for entry in resolver.resolve_hash(repository, value, context):
                            typer.echo(
                                format_tag(entry, output_format, show_base_tag=show_base_tag)
                            )
                    else:
                        entry = resolver.resolve_tag(repository, value, context)
                        typer.echo(format_hashes(entry, output_format))
            finally:
                client.close()

    except typer.Exit:
        raise
    except (Exception, KeyboardInterrupt) as e:
        exit_code = handle_cli_error(e, "resolve")
        raise typer.Exit(exit_code) from e


@cache_app.command("prune", help=CLIHelp.PRUNE_HELP)
def prune_command(
    as_of: Annotated[str | None, typer.Option("--as-of", help=CLIHelp.AS_OF_HELP)] = None,
    cache_dir: CacheDirOption = None,
    log_level: LogLevelOption = None,
    config: ConfigOption = None,
) -> None:
    try:
        threshold = _parse_as_of(as_of)
        settings = load_cli_settings(config, cache_dir, log_level)
        container = build_container(settings)

        with container.cache_db() as store:
            count = store.prune(threshold)
        typer.echo(f"pruned {count} expired entries")

    except (Exception, KeyboardInterrupt) as e:
        exit_code = handle_cli_error(e, "cache prune")
        raise typer.Exit(exit_code) from e


@cache_app.command("clear", help=CLIHelp.CLEAR_HELP)
def clear_command(
    cache_dir: CacheDirOption = None,
    log_level: LogLevelOption = None,
    config: ConfigOption = None,
) -> None:
    try:
        settings = load_cli_settings(config, cache_dir, log_level)
        container = build_container(settings)

        with container.cache_db() as store:
            count = store.clear()
        client = container.graphql_client()
        try:
            client.clear_cache()
        finally:
            client.close()
        typer.echo(f"cleared {count} entries")

    except (Exception, KeyboardInterrupt) as e:
        exit_code = handle_cli_error(e, "cache clear")
        raise typer.Exit(exit_code) from e


@cache_app.command("info", help=CLIHelp.INFO_HELP)
def info_command(
    cache_dir: CacheDirOption = None,
    log_level: LogLevelOption = None,
    config: ConfigOption = None,
) -> None:
    try:
        settings = load_cli_settings(config, cache_dir, log_level)
        container = build_container(settings)

        with container.cache_db() as store:
            info = store.get_cache_info()
        typer.echo(f"database: {info['db_path']}")
        typer.echo(f"entries: {info['total_entries']}")
        typer.echo(f"valid: {info['valid_entries']}")
        typer.echo(f"expired: {info['expired_entries']}")
        typer.echo(f"ttl: {container.cache_ttl()}")

    except (Exception, KeyboardInterrupt) as e:
        exit_code = handle_cli_error(e, "cache info")
        raise typer.Exit(exit_code) from e


def _parse_as_of(value: str | None) -> datetime:
    """Parse an ISO-8601 ``--as-of`` value; naive times are taken as UTC."""
    if value is None:
        return datetime.now(timezone.utc)
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError as e:
        raise InvalidInputError(
            ErrorCode.VALIDATION_ERROR,
            f"invalid --as-of timestamp: {value}",
            ErrorContext(operation="cache_prune", additional_data={"as_of": value}),
            e,
        ) from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def run() -> None:
    """Console script entry point."""
    app()


__all__ = ["app", "run"]
