from __future__ import annotations

import asyncio
import base64
import hashlib
import socket
import time
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

import httpx
from loguru import logger

from .proxy.errors import RpcProxyError

if TYPE_CHECKING:
    from .operations import PastelBlockchainOperations


MAINNET_ADDRESS_PREFIX = "Pt"
TESTNET_ADDRESS_PREFIX = "tP"
TRANSPARENT_ADDRESS_LENGTH = 35


def sha256_hex(data: bytes | str) -> str:
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).hexdigest()


def basic_auth_token(username: str, password: str) -> str:
    return base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")


def unix_to_iso(timestamp: int | float | str) -> str:
    return (
        datetime.fromtimestamp(int(timestamp), tz=timezone.utc)
        .isoformat()
        .replace("+00:00", "Z")
    )


def elapsed_minutes(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 60


def minutes_since(start: datetime) -> float:
    now = datetime.now(start.tzinfo) if start.tzinfo else datetime.now()
    return elapsed_minutes(start, now)


class Timer:
    """Context manager that logs how long its block took."""

    def __init__(self, label: str = "") -> None:
        self.label = label
        self.start: Optional[float] = None
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def stop(self) -> float:
        if self.start is not None:
            self.elapsed = time.perf_counter() - self.start
        prefix = f"{self.label} " if self.label else ""
        logger.info(f"{prefix}({self.elapsed:.2f} seconds to complete)")
        return self.elapsed


def is_valid_transparent_address(address: str, testnet: bool = False) -> bool:
    prefix = TESTNET_ADDRESS_PREFIX if testnet else MAINNET_ADDRESS_PREFIX
    return len(address) == TRANSPARENT_ADDRESS_LENGTH and address.startswith(prefix)


async def is_resolvable_host(host: str) -> bool:
    loop = asyncio.get_running_loop()
    try:
        await loop.getaddrinfo(host, None)
    except (socket.gaierror, UnicodeError) as exc:
        logger.error(f"Validation Error: {exc}")
        return False
    return True


async def get_external_ip(url: str = "https://ifconfig.me", timeout: float = 10.0) -> str:
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.get(url, headers={"User-Agent": "curl/8"})
            response.raise_for_status()
    except httpx.HTTPError as exc:
        logger.error(f"Error fetching external IP: {exc}")
        return ""
    return response.text.strip()


async def check_daemon_health(
    operations: "PastelBlockchainOperations",
    min_height: int = 100_000,
) -> bool:
    """Report whether pasteld answers with a plausible chain height."""
    try:
        state = await operations.get_current_block_height_and_hash()
    except RpcProxyError as exc:
        logger.error(f"Problem querying pasteld: {exc}")
        return False

    height = state.get("best_block_height")
    if isinstance(height, int) and height > min_height:
        logger.info("Pasteld is running correctly!")
        return True
    logger.warning(f"Pasteld is not running correctly (height={height!r})")
    return False
