__all__ = [
    # Models
    "Endpoint",
    "EngineConfig",
    "CallEnvelope",
    "RpcOutcome",
    # Proxy engine
    "AsyncAuthServiceProxy",
    "RequestIdCounter",
    "create_rpc_connection",
    # Retry
    "RetryPolicy",
    "RetryController",
    # Transport
    "HttpTransport",
    "RawResponse",
    "Transport",
    # Errors
    "ErrorKind",
    "RpcProxyError",
    "MissingCredentialsError",
    "InvalidEndpointError",
    "TransportError",
    "NetworkError",
    "RequestTimeoutError",
    "MalformedResponseError",
    "RpcError",
    "RpcCancelledError",
    # Configuration
    "NetworkMode",
    "RpcSettings",
    "load_engine_config",
    "load_rpc_settings_from_env",
    "read_rpc_settings_from_file",
    "resolve_endpoint",
    "resolve_rpc_settings",
    "write_rpc_settings_to_env_file",
    # Blockchain operations
    "PastelBlockchainOperations",
    # Logging
    "configure_logging",
]

from .models import CallEnvelope, Endpoint, EngineConfig, RpcOutcome
from .proxy.errors import (
    ErrorKind,
    InvalidEndpointError,
    MalformedResponseError,
    MissingCredentialsError,
    NetworkError,
    RequestTimeoutError,
    RpcCancelledError,
    RpcError,
    RpcProxyError,
    TransportError,
)
from .proxy.transport import HttpTransport, RawResponse, Transport
from .proxy.retry import RetryController, RetryPolicy
from .proxy.engine import AsyncAuthServiceProxy, RequestIdCounter, create_rpc_connection
from .config import (
    NetworkMode,
    RpcSettings,
    load_engine_config,
    load_rpc_settings_from_env,
    read_rpc_settings_from_file,
    resolve_endpoint,
    resolve_rpc_settings,
    write_rpc_settings_to_env_file,
)
from .operations import PastelBlockchainOperations
from .logs import configure_logging
