"""
Supernodes - List supernodes or look one up by PastelID / pubkey.
"""

from __future__ import annotations

from typing import Optional

import click

from .common import CliSettings, echo_json, open_operations, pass_settings, run_or_exit


@click.command()
@click.option("--pastelid", default=None, help="Only the supernode with this PastelID (extKey)")
@click.option("--pubkey", default=None, help="Only the supernode with this collateral pubkey")
@click.option("--top", is_flag=True, help="Show 'masternode top' instead of the full list")
@pass_settings
def supernodes(
    settings: CliSettings,
    pastelid: Optional[str],
    pubkey: Optional[str],
    top: bool,
) -> None:
    """Show supernodes as JSON keyed by txid_vout."""
    if pastelid and pubkey:
        raise click.UsageError("--pastelid and --pubkey are mutually exclusive")

    async def _run():
        operations = open_operations(settings)
        if top:
            return await operations.check_masternode_top()
        if pastelid:
            return await operations.get_sn_data_from_pastelid(pastelid)
        if pubkey:
            return await operations.get_sn_data_from_sn_pubkey(pubkey)
        return await operations.check_supernode_list()

    echo_json(run_or_exit(_run))
