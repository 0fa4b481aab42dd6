"""
Call - Execute an arbitrary pasteld RPC method.

Generic escape hatch for methods without a dedicated command.
"""

from __future__ import annotations

from typing import Optional

import click

from .common import CliSettings, echo_json, open_proxy, parse_param, pass_settings, run_or_exit


@click.command()
@click.argument("method")
@click.argument("params", nargs=-1)
@click.option(
    "--service-name",
    default=None,
    help="Namespace prefix; the wire method becomes SERVICE_NAME.METHOD",
)
@click.option(
    "--raw-strings",
    is_flag=True,
    help="Pass every PARAM as a string instead of parsing it as JSON",
)
@pass_settings
def call(
    settings: CliSettings,
    method: str,
    params: tuple[str, ...],
    service_name: Optional[str],
    raw_strings: bool,
) -> None:
    """
    Call METHOD with PARAMS and print the result as JSON.

    Each PARAM is parsed as JSON when possible (numbers, true/false,
    objects, arrays); anything else is sent as a string.
    """
    values = list(params) if raw_strings else [parse_param(p) for p in params]

    async def _run():
        proxy = open_proxy(settings, service_name=service_name)
        return await proxy.call(method, *values)

    echo_json(run_or_exit(_run))
