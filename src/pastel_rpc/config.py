"""
RPC settings for pasteld.

Credentials come from the environment first (``RPC_HOST``, ``RPC_PORT``,
``RPC_USER``, ``RPC_PASSWORD``, optionally loaded from a .env file) and
fall back to the node's own ``pastel.conf``.

Engine tuning comes from ``PASTEL_RPC_RECONNECT_TIMEOUT``,
``PASTEL_RPC_RECONNECT_AMOUNT`` and ``PASTEL_RPC_REQUEST_TIMEOUT``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional, Union

from dotenv import load_dotenv
from loguru import logger

from .models import Endpoint, EngineConfig
from .proxy.errors import MissingCredentialsError


PASTEL_DIR = Path.home() / ".pastel"
PASTEL_CONF_NAME = "pastel.conf"
DEFAULT_ENV_PATH = Path(".env")
DEFAULT_RPC_HOST = "127.0.0.1"
DEFAULT_RPC_PORT = "19932"


class NetworkMode(str, Enum):
    MAINNET = "mainnet"
    TESTNET = "testnet"
    DEVNET = "devnet"
    REGTEST = "regtest"
    UNKNOWN = "unknown"


DEFAULT_RPC_PORTS = {
    NetworkMode.MAINNET: "9932",
    NetworkMode.TESTNET: "19932",
    NetworkMode.DEVNET: "29932",
    NetworkMode.REGTEST: "18232",
}


@dataclass(frozen=True)
class RpcSettings:
    host: Optional[str] = None
    port: Optional[str] = None
    user: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)
    other_flags: dict[str, str] = field(default_factory=dict)

    @property
    def missing(self) -> list[str]:
        fields = (
            ("RPC_HOST", self.host),
            ("RPC_PORT", self.port),
            ("RPC_USER", self.user),
            ("RPC_PASSWORD", self.password),
        )
        return [name for name, value in fields if not value]

    @property
    def complete(self) -> bool:
        return not self.missing

    def to_endpoint(self) -> Endpoint:
        if self.missing:
            raise MissingCredentialsError(self.missing)
        return Endpoint(
            host=self.host,  # type: ignore[arg-type]
            port=self.port,  # type: ignore[arg-type]
            username=self.user,  # type: ignore[arg-type]
            password=self.password,  # type: ignore[arg-type]
        )


def _split_setting(line: str) -> Optional[tuple[str, str]]:
    line = line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    key, value = line.split("=", 1)
    return key.strip(), value.strip()


def get_network_mode(lines: Iterable[str]) -> NetworkMode:
    """Detect ``mainnet=1`` / ``testnet=1`` / ... in pastel.conf lines."""
    for line in lines:
        setting = _split_setting(line)
        if setting is None:
            continue
        key, value = setting
        try:
            mode = NetworkMode(key)
        except ValueError:
            continue
        if mode is not NetworkMode.UNKNOWN and value == "1":
            return mode
    return NetworkMode.UNKNOWN


def _resolve_conf_dir(conf_dir: Optional[Union[str, Path]]) -> Path:
    if not conf_dir:
        conf_dir = os.environ.get("PASTEL_CONF_DIR") or PASTEL_DIR
    return Path(conf_dir).expanduser().resolve()


def read_rpc_settings_from_file(conf_dir: Optional[Union[str, Path]] = None) -> RpcSettings:
    """
    Read RPC settings from ``<conf_dir>/pastel.conf``.

    Args:
        conf_dir: Directory holding pastel.conf (default: $PASTEL_CONF_DIR or ~/.pastel)

    Returns:
        RpcSettings; host is always 127.0.0.1, the port follows the
        network mode unless ``rpcport`` is set.

    Raises:
        FileNotFoundError: If pastel.conf does not exist
    """
    conf_path = _resolve_conf_dir(conf_dir) / PASTEL_CONF_NAME
    lines = conf_path.read_text(encoding="utf-8").splitlines()

    port = DEFAULT_RPC_PORT
    mode = get_network_mode(lines)
    if mode is not NetworkMode.UNKNOWN:
        port = DEFAULT_RPC_PORTS[mode]

    user: Optional[str] = None
    password: Optional[str] = None
    other_flags: dict[str, str] = {}
    for line in lines:
        setting = _split_setting(line)
        if setting is None:
            continue
        key, value = setting
        if key == "rpcport":
            port = value
        elif key == "rpcuser":
            user = value
        elif key == "rpcpassword":
            password = value
        elif key != "rpchost":
            other_flags[key] = value

    return RpcSettings(
        host=DEFAULT_RPC_HOST,
        port=port,
        user=user,
        password=password,
        other_flags=other_flags,
    )


def load_rpc_settings_from_env(env_path: Optional[Path] = None) -> RpcSettings:
    """Read RPC settings from the environment, after loading ``env_path`` if present."""
    env_path = env_path or DEFAULT_ENV_PATH
    if env_path.exists():
        load_dotenv(env_path, override=False)
    return RpcSettings(
        host=os.environ.get("RPC_HOST"),
        port=os.environ.get("RPC_PORT"),
        user=os.environ.get("RPC_USER"),
        password=os.environ.get("RPC_PASSWORD"),
    )


def write_rpc_settings_to_env_file(settings: RpcSettings, env_path: Optional[Path] = None) -> Path:
    """
    Persist RPC settings to a .env file.

    Args:
        settings: Settings to write (``other_flags`` are appended verbatim)
        env_path: Path to .env file (default: ./.env)

    Returns:
        Path to the written .env file
    """
    env_path = env_path or DEFAULT_ENV_PATH
    env_path.parent.mkdir(parents=True, exist_ok=True)

    lines = [
        f"RPC_HOST={settings.host or ''}",
        f"RPC_PORT={settings.port or ''}",
        f"RPC_USER={settings.user or ''}",
        f"RPC_PASSWORD={settings.password or ''}",
    ]
    lines.extend(f"{key}={value}" for key, value in settings.other_flags.items())
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    # Credentials inside; owner-only on Unix
    if os.name != "nt":
        env_path.chmod(0o600)

    return env_path


def resolve_rpc_settings(
    conf_dir: Optional[Union[str, Path]] = None,
    env_path: Optional[Path] = None,
    write_env: bool = False,
) -> RpcSettings:
    settings = load_rpc_settings_from_env(env_path)
    if settings.complete:
        return settings

    logger.info(
        "RPC settings not found in environment variables. "
        "Attempting to read from configuration file..."
    )
    try:
        from_file = read_rpc_settings_from_file(conf_dir)
    except FileNotFoundError as exc:
        raise MissingCredentialsError(
            settings.missing, hint=f"No {PASTEL_CONF_NAME} found: {exc.filename}"
        ) from exc

    merged = RpcSettings(
        host=settings.host or from_file.host,
        port=settings.port or from_file.port,
        user=settings.user or from_file.user,
        password=settings.password or from_file.password,
        other_flags=from_file.other_flags,
    )
    if write_env and merged.complete:
        written = write_rpc_settings_to_env_file(merged, env_path)
        logger.info(f"RPC settings have been written to {written}")
    return merged


def resolve_endpoint(
    conf_dir: Optional[Union[str, Path]] = None,
    env_path: Optional[Path] = None,
    write_env: bool = False,
) -> Endpoint:
    """
    Resolve the pasteld endpoint.

    Raises:
        MissingCredentialsError: If host, port, user or password is still unknown
        InvalidEndpointError: If the port is not an integer in 1..65535
    """
    return resolve_rpc_settings(conf_dir, env_path, write_env).to_endpoint()


def _env_number(name: str, default: float, cast: type = float):
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return cast(default)
    try:
        return cast(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def load_engine_config() -> EngineConfig:
    """Load engine tuning from the environment."""
    return EngineConfig(
        reconnect_timeout=_env_number("PASTEL_RPC_RECONNECT_TIMEOUT", 15.0),
        reconnect_amount=_env_number("PASTEL_RPC_RECONNECT_AMOUNT", 2, int),
        request_timeout=_env_number("PASTEL_RPC_REQUEST_TIMEOUT", 20.0),
    )
