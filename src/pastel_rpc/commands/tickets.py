"""
Tickets - Look up a single ticket, a collection's registrations, or dump every ticket type.
"""

from __future__ import annotations

import sys

import click

from .common import CliSettings, echo_json, open_operations, pass_settings, run_or_exit


@click.command()
@click.argument("txid")
@pass_settings
def ticket(settings: CliSettings, txid: str) -> None:
    """Show the ticket registered in TXID, with its activation ticket."""
    result = run_or_exit(lambda: open_operations(settings).get_ticket(txid))
    if result is None:
        click.secho("No ticket found for this txid", fg="yellow")
        sys.exit(1)
    echo_json(result)


@click.command()
@click.option("--verbose", "-v", is_flag=True, help="Log progress per ticket type")
@pass_settings
def tickets(settings: CliSettings, verbose: bool) -> None:
    """Dump all tickets grouped by ticket type."""
    echo_json(run_or_exit(lambda: open_operations(settings).get_all_tickets(verbose=verbose)))


@click.command()
@click.argument("txid")
@pass_settings
def collection(settings: CliSettings, txid: str) -> None:
    """Show the registration tickets of the collection ticket TXID."""
    result = run_or_exit(
        lambda: open_operations(settings).get_registration_tickets_for_collection(txid)
    )
    if result is None:
        click.secho("No registration tickets found for this collection", fg="yellow")
        sys.exit(1)
    if isinstance(result, str):
        click.secho(result, fg="yellow")
        sys.exit(1)
    echo_json(result)
