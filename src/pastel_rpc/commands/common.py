"""Shared plumbing for CLI commands: settings object, proxy factory, output."""

from __future__ import annotations

import asyncio
import json
import sys
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, TypeVar

import click

from ..models import EngineConfig
from ..operations import PastelBlockchainOperations
from ..proxy.codec import dumps_json
from ..proxy.engine import AsyncAuthServiceProxy, create_rpc_connection
from ..proxy.errors import RpcProxyError
from ..proxy.transport import HttpTransport, Transport

T = TypeVar("T")


@dataclass
class CliSettings:
    conf_dir: Optional[str] = None
    env_file: Optional[Path] = None
    reconnect_timeout: float = 15.0
    reconnect_amount: int = 2
    request_timeout: float = 20.0

    def engine_config(self) -> EngineConfig:
        return EngineConfig(
            reconnect_timeout=self.reconnect_timeout,
            reconnect_amount=self.reconnect_amount,
            request_timeout=self.request_timeout,
        )


pass_settings = click.make_pass_decorator(CliSettings, ensure=True)


def make_transport() -> Transport:
    return HttpTransport()


def open_proxy(settings: CliSettings, service_name: Optional[str] = None) -> AsyncAuthServiceProxy:
    return create_rpc_connection(
        conf_dir=settings.conf_dir,
        env_path=settings.env_file,
        service_name=service_name,
        config=settings.engine_config(),
        transport=make_transport(),
    )


def open_operations(settings: CliSettings) -> PastelBlockchainOperations:
    return PastelBlockchainOperations(open_proxy(settings))


def run_or_exit(factory: Callable[[], Awaitable[T]]) -> T:
    """Run a coroutine; report RPC failures in red and exit with their code."""
    try:
        return asyncio.run(factory())
    except RpcProxyError as exc:
        click.secho(f"ERROR ({exc.label}): {exc}", fg="red", err=True)
        sys.exit(exc.exit_code)


def echo_json(value: Any) -> None:
    click.echo(dumps_json(value, indent=2, sort_keys=True))


def parse_param(raw: str) -> Any:
    """JSON when it parses (numbers, booleans, objects), else the raw string."""
    try:
        return json.loads(raw, parse_float=Decimal)
    except ValueError:
        return raw
