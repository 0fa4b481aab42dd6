"""
Chain - Block, balance and transaction queries, plus a daemon health check.
"""

from __future__ import annotations

import sys
from typing import Optional

import click

from ..utils import check_daemon_health
from .common import CliSettings, echo_json, open_operations, pass_settings, run_or_exit


@click.command()
@pass_settings
def height(settings: CliSettings) -> None:
    """Show the current block height and best block hash."""
    state = run_or_exit(lambda: open_operations(settings).get_current_block_height_and_hash())
    click.echo(f"Height: {state['best_block_height']}")
    click.echo(f"Hash:   {state['best_block_hash']}")


@click.command()
@click.argument("height_or_hash", required=False)
@pass_settings
def block(settings: CliSettings, height_or_hash: Optional[str]) -> None:
    """Show a block by height or hash (latest block when omitted)."""

    async def _run():
        operations = open_operations(settings)
        if height_or_hash is None:
            return await operations.get_last_block_data()
        return await operations.get_block(height_or_hash)

    echo_json(run_or_exit(_run))


@click.command()
@click.argument("address")
@pass_settings
def balance(settings: CliSettings, address: str) -> None:
    """Show the balance held at ADDRESS."""
    result = run_or_exit(lambda: open_operations(settings).check_address_balance(address))
    click.echo(f"{address}: {result}")


@click.command()
@click.argument("txid")
@pass_settings
def tx(settings: CliSettings, txid: str) -> None:
    """Show the decoded raw transaction TXID."""
    echo_json(run_or_exit(lambda: open_operations(settings).get_raw_transaction(txid)))


@click.command()
@click.option("--min-height", default=100_000, type=int, show_default=True)
@pass_settings
def health(settings: CliSettings, min_height: int) -> None:
    """Check that pasteld answers with a plausible chain height."""
    healthy = run_or_exit(lambda: check_daemon_health(open_operations(settings), min_height))
    if healthy:
        click.secho("pasteld is healthy", fg="green")
        return
    click.secho("pasteld is NOT healthy", fg="red")
    sys.exit(1)
