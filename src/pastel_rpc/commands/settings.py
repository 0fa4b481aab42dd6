"""
Settings - Show where RPC credentials come from, optionally persisting them.
"""

from __future__ import annotations

import sys

import click

from ..config import resolve_rpc_settings, write_rpc_settings_to_env_file
from ..proxy.errors import RpcProxyError
from .common import CliSettings, pass_settings


@click.command("config")
@click.option(
    "--write-env",
    is_flag=True,
    help="Persist the resolved settings to the .env file",
)
@pass_settings
def show_config(settings: CliSettings, write_env: bool) -> None:
    """Show the resolved RPC endpoint (password masked)."""
    try:
        resolved = resolve_rpc_settings(
            conf_dir=settings.conf_dir,
            env_path=settings.env_file,
        )
        endpoint = resolved.to_endpoint()
    except RpcProxyError as exc:
        click.secho(f"ERROR ({exc.label}): {exc}", fg="red", err=True)
        sys.exit(exc.exit_code)

    click.echo(f"  URL:       {endpoint.url}")
    click.echo(f"  User:      {endpoint.username}")
    click.echo(f"  Password:  {'*' * 8}")
    for key, value in sorted(resolved.other_flags.items()):
        click.echo(f"  {key}: {value}")
    click.echo()
    click.echo(f"  Reconnect timeout:  {settings.reconnect_timeout:g}s")
    click.echo(f"  Reconnect amount:   {settings.reconnect_amount}")
    click.echo(f"  Request timeout:    {settings.request_timeout:g}s")
    if write_env:
        written = write_rpc_settings_to_env_file(resolved, settings.env_file)
        click.echo(f"  Written to: {written}")
