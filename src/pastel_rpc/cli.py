"""
pastel-rpc CLI

Command-line interface for the resilient pasteld JSON-RPC proxy.

Every command resolves credentials from the environment (or .env) and
falls back to ~/.pastel/pastel.conf; calls are retried with exponential
backoff before an error is reported.

Commands:
  call        - Call any RPC method
  height      - Current block height and hash
  block       - Block by height or hash
  balance     - Address balance
  tx          - Decoded raw transaction
  verify      - Verify a PastelID signature
  username    - Usernames registered to a PastelID
  pastelid    - PastelID behind a username
  supernodes  - Supernode list / lookup
  ticket      - Ticket with activation ticket
  tickets     - All tickets by type
  collection  - Registration tickets of a collection
  testnet-pastelid - New testnet PastelID with its key file
  config      - Show resolved RPC settings
  health      - Daemon health check
  info        - Endpoint, retry budget and command list
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from .commands.common import CliSettings
from .config import resolve_rpc_settings
from .logs import configure_logging
from .proxy.errors import RpcProxyError

VERSION = "1.0.0"


# ============ Banner ============


def _print_banner() -> None:
    click.secho(f"pastel-rpc {VERSION}", fg="cyan", bold=True)
    click.secho("asyncio JSON-RPC client for pasteld, with retry and backoff", dim=True)
    click.echo()


# ============ Main CLI Group ============


@click.group(invoke_without_command=True)
@click.version_option(version=VERSION, prog_name="pastel-rpc")
@click.option(
    "--conf-dir",
    envvar="PASTEL_CONF_DIR",
    default=None,
    help="Directory holding pastel.conf (default: ~/.pastel)",
)
@click.option(
    "--env-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="dotenv file with RPC_* settings (default: ./.env)",
)
@click.option(
    "--reconnect-timeout",
    envvar="PASTEL_RPC_RECONNECT_TIMEOUT",
    type=float,
    default=15.0,
    show_default=True,
    help="Base backoff in seconds; doubles after each failed attempt",
)
@click.option(
    "--reconnect-amount",
    envvar="PASTEL_RPC_RECONNECT_AMOUNT",
    type=click.IntRange(min=0),
    default=2,
    show_default=True,
    help="Retries after the first attempt",
)
@click.option(
    "--request-timeout",
    envvar="PASTEL_RPC_REQUEST_TIMEOUT",
    type=float,
    default=20.0,
    show_default=True,
    help="Per-attempt HTTP timeout in seconds",
)
@click.option(
    "--log-dir",
    envvar="PASTEL_RPC_LOG_DIR",
    default="logs",
    show_default=True,
    help="Directory for the rotating log file",
)
@click.option("--no-log-file", is_flag=True, help="Log to the console only")
@click.option(
    "--log-level",
    envvar="PASTEL_RPC_LOG_LEVEL",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    show_default=True,
)
@click.pass_context
def cli(
    ctx: click.Context,
    conf_dir: Optional[str],
    env_file: Optional[Path],
    reconnect_timeout: float,
    reconnect_amount: int,
    request_timeout: float,
    log_dir: str,
    no_log_file: bool,
    log_level: str,
) -> None:
    """pastel-rpc: resilient JSON-RPC client for pasteld."""
    if reconnect_timeout < 0 or request_timeout <= 0:
        raise click.BadParameter("timeouts must be positive")
    ctx.obj = CliSettings(
        conf_dir=conf_dir,
        env_file=env_file,
        reconnect_timeout=reconnect_timeout,
        reconnect_amount=reconnect_amount,
        request_timeout=request_timeout,
    )
    configure_logging(None if no_log_file else log_dir, level=log_level.upper())
    if ctx.invoked_subcommand is None:
        _print_banner()
        click.echo(ctx.get_help())


# ============ Top-level Commands ============

from .commands.call import call
from .commands.chain import balance, block, health, height, tx
from .commands.pastelid import pastelid_for_username, testnet_pastelid, username, verify
from .commands.settings import show_config
from .commands.supernodes import supernodes
from .commands.tickets import collection, ticket, tickets

cli.add_command(call)
cli.add_command(height)
cli.add_command(block)
cli.add_command(balance)
cli.add_command(tx)
cli.add_command(verify)
cli.add_command(username)
cli.add_command(pastelid_for_username)
cli.add_command(supernodes)
cli.add_command(ticket)
cli.add_command(tickets)
cli.add_command(collection)
cli.add_command(testnet_pastelid)
cli.add_command(show_config)
cli.add_command(health)


# ============ Info ============


def _backoff_schedule(settings: CliSettings) -> str:
    waits = [settings.reconnect_timeout * 2**n for n in range(settings.reconnect_amount)]
    return ", ".join(f"{wait:g}s" for wait in waits) or "none"


@cli.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """Show the resolved endpoint, the retry budget and the commands."""
    settings: CliSettings = ctx.obj
    _print_banner()

    try:
        endpoint = resolve_rpc_settings(
            conf_dir=settings.conf_dir, env_path=settings.env_file
        ).to_endpoint()
        click.echo(f"Endpoint:  {endpoint.url}")
    except RpcProxyError as exc:
        click.echo("Endpoint:  " + click.style(f"unusable ({exc.label})", fg="yellow"))
        click.secho(f"           {exc}", dim=True)

    click.echo(
        f"Attempts:  {settings.reconnect_amount + 1}, "
        f"{settings.request_timeout:g}s each, waits {_backoff_schedule(settings)}"
    )
    click.echo()

    group = ctx.parent.command if ctx.parent else cli
    for name in sorted(group.list_commands(ctx)):
        command = group.get_command(ctx, name)
        click.echo(f"  {name:<17} {command.get_short_help_str(limit=60)}")


def main() -> None:
    cli(prog_name="pastel-rpc")
