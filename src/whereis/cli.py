from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

import click
from rich.console import Console

from . import __version__
from .batch import parse_ip, run_batch
from .cli_errors import handle_cli_errors
from .config import AppSettings, ConfigStore, save_api_key
from .fastah import FastahClient
from .http_client import get_client
from .logging_config import setup_logging
from .policy import Action, ErrorKind, ErrorPolicy

logger = logging.getLogger(__name__)


def _validate_ip_option(ctx: click.Context, param: click.Parameter, value: str) -> str:
    if value == "-":
        return value
    canonical = parse_ip(value.strip())
    if canonical is None:
        raise click.BadParameter(f"{value!r} is not an IPv4 or IPv6 address")
    return canonical


def _build_policy(strict: bool, warn_skipped: bool) -> ErrorPolicy:
    policy = ErrorPolicy.strict() if strict else ErrorPolicy()
    if warn_skipped:
        policy = policy.with_action(ErrorKind.MALFORMED_INPUT, Action.WARN)
    return policy


def _lookup_logic(
    settings: AppSettings,
    lines: Iterable[str],
    compare: Optional[bool],
    database: Optional[Path],
    policy: ErrorPolicy,
    warn_skipped: bool,
) -> None:
    api_key = settings.require_api_key()
    if compare is None:
        # Comparison was not asked for; a missing database just turns it off.
        policy = policy.with_action(ErrorKind.LOCAL_OPEN_FAILURE, Action.IGNORE)

    with get_client(settings) as http:
        remote = FastahClient(http, api_key, settings.fastah_endpoint)
        result = run_batch(
            lines,
            remote,
            compare=compare is not False,
            database_path=database or settings.mmdb_path,
            policy=policy,
            compare_requested=compare is True,
        )

    if warn_skipped and result.skipped:
        logger.warning("Skipped %d line(s) that were not IP addresses", result.skipped)
    logger.info(
        "Looked up %d address(es): %d remote error(s), %d local error(s)",
        result.processed,
        result.remote_errors,
        result.local_errors,
    )
    result.table.render(Console())


@click.group(invoke_without_command=True)
@click.version_option(version=__version__)
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="config file (default is $HOME/.whereis.yaml)",
)
@click.option("--log-level", type=str, help="DEBUG, INFO, WARNING or ERROR.")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Also write log records to this file.",
)
@click.option(
    "--log-format",
    type=click.Choice(["simple", "detailed"]),
    default="simple",
    show_default=True,
    help="detailed adds timestamps, logger names and source lines.",
)
@click.option(
    "--ip",
    "-i",
    "ip",
    default="-",
    show_default=True,
    callback=_validate_ip_option,
    help="IP address to lookup, or - to read one address per line from stdin.",
)
@click.option(
    "--compare/--no-compare",
    default=None,
    help="Compare with the local GeoLite2-City database (default: when it can be opened).",
)
@click.option(
    "--database",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Local database path (default is $HOME/GeoLite2-City.mmdb).",
)
@click.option("--strict", is_flag=True, help="Abort on the first failed lookup.")
@click.option("--warn-skipped", is_flag=True, help="Warn about lines that are not IP addresses.")
@click.pass_context
@handle_cli_errors(context="Lookup")
def cli(
    ctx: click.Context,
    config_file: Optional[Path],
    log_level: Optional[str],
    log_file: Optional[Path],
    log_format: str,
    ip: str,
    compare: Optional[bool],
    database: Optional[Path],
    strict: bool,
    warn_skipped: bool,
) -> None:
    """
    Finds approximate location, city, country or timezone for a specified IP address.

    For example: whereis --ip=202.94.72.116
    """
    store = ConfigStore(config_file)
    settings = AppSettings.from_store(store)
    setup_logging(log_level or settings.log_level, log_file=log_file, format_style=log_format)
    ctx.obj = {"store": store, "settings": settings}

    if ctx.invoked_subcommand is not None:
        return

    policy = _build_policy(strict, warn_skipped)
    if ip != "-":
        _lookup_logic(settings, [ip], compare, database, policy, warn_skipped)
        return
    with click.open_file("-", "r") as stdin:
        _lookup_logic(settings, stdin, compare, database, policy, warn_skipped)


@cli.command()
@click.option(
    "--fastah-api-key",
    required=True,
    help="Fastah API Key from console.api.getfastah.com",
)
@click.pass_context
@handle_cli_errors(context="Init")
def init(ctx: click.Context, fastah_api_key: str) -> None:
    """Save the Fastah API key in the local config file ($HOME/.whereis.yaml)."""
    store: ConfigStore = ctx.obj["store"]
    save_api_key(store, fastah_api_key)
    click.echo(f"Saved Fastah API key to {store.path}")


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":  # pragma: no cover - module execution convenience
    main()
