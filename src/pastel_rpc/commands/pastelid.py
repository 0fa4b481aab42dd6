"""
PastelID - Signature verification, username <-> PastelID lookups and testnet keys.
"""

from __future__ import annotations

import sys

import click

from .common import CliSettings, echo_json, open_operations, pass_settings, run_or_exit


@click.command()
@click.option("--pastelid", required=True, help="PastelID that signed the message")
@click.option("--message", required=True, help="Message that was signed")
@click.option("--signature", required=True, help="Signature to verify")
@click.option("--algorithm", default="ed448", show_default=True)
@pass_settings
def verify(
    settings: CliSettings,
    pastelid: str,
    message: str,
    signature: str,
    algorithm: str,
) -> None:
    """Verify a message signature made with a PastelID."""
    result = run_or_exit(
        lambda: open_operations(settings).verify_message_with_pastelid(
            pastelid, message, signature, algorithm
        )
    )
    click.echo(f"Verification Result: {result}")


@click.command()
@click.argument("pastelid")
@pass_settings
def username(settings: CliSettings, pastelid: str) -> None:
    """Show the username(s) registered to PASTELID."""
    result = run_or_exit(lambda: open_operations(settings).get_usernames_from_pastelid(pastelid))
    if result is None:
        click.secho("Error! No username found for this pastelid", fg="red")
        sys.exit(1)
    names = [result] if isinstance(result, str) else result
    for name in names:
        click.echo(name)


@click.command("pastelid")
@click.argument("name")
@pass_settings
def pastelid_for_username(settings: CliSettings, name: str) -> None:
    """Show the PastelID that registered username NAME."""
    result = run_or_exit(lambda: open_operations(settings).get_pastelid_from_username(name))
    if result is None:
        click.secho("Error! No pastelid found for this username", fg="red")
        sys.exit(1)
    click.echo(result)


@click.command("testnet-pastelid")
@click.option("--password", prompt=True, hide_input=True, help="Passphrase for the new key")
@click.option("--verbose", "-v", is_flag=True, help="Log each step")
@pass_settings
def testnet_pastelid(settings: CliSettings, password: str, verbose: bool) -> None:
    """Create a testnet PastelID and print it with its base64 key file."""
    result = run_or_exit(
        lambda: open_operations(settings).testnet_pastelid_file_dispenser(password, verbose=verbose)
    )
    if not result["pastelid"]:
        click.secho("Error! The daemon did not return a new pastelid", fg="red")
        sys.exit(1)
    echo_json(result)
