"""
Error taxonomy for the RPC proxy.

Every failure a call can end with is an ``RpcProxyError`` tagged with an
``ErrorKind``, so callers can branch on ``exc.kind`` (or on
``RpcOutcome.kind``) instead of inspecting exception types. ``exit_code``
is what the CLI exits with when the error reaches the top level.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    MALFORMED_RESPONSE = "malformed_response"
    RPC_ERROR = "rpc_error"
    MISSING_CREDENTIALS = "missing_credentials"
    INVALID_ENDPOINT = "invalid_endpoint"
    CANCELLED = "cancelled"


class RpcProxyError(RuntimeError):
    """Base class; only subclasses carry a kind, so a bare instance is never retried."""

    kind: Optional[ErrorKind] = None
    exit_code: int = 1

    @property
    def label(self) -> str:
        return self.kind.value if self.kind is not None else "unclassified"


class MissingCredentialsError(RpcProxyError):
    """Raised before any network attempt when the endpoint is incomplete."""

    kind = ErrorKind.MISSING_CREDENTIALS
    exit_code = 2

    def __init__(self, missing: list[str], hint: str = "") -> None:
        self.missing = list(missing)
        message = f"Missing RPC credentials: {', '.join(self.missing)}"
        if hint:
            message = f"{message}. {hint}"
        super().__init__(message)


class InvalidEndpointError(RpcProxyError, ValueError):
    """Endpoint settings that can never be dialed, such as a port outside 1..65535."""

    kind = ErrorKind.INVALID_ENDPOINT
    exit_code = 8


class TransportError(RpcProxyError):
    """Base for failures where no usable HTTP response was received."""


class NetworkError(TransportError):
    kind = ErrorKind.NETWORK_ERROR
    exit_code = 3

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


class RequestTimeoutError(TransportError):
    kind = ErrorKind.TIMEOUT
    exit_code = 4

    def __init__(self, timeout: float, url: str) -> None:
        super().__init__(f"No response from {url} within {timeout:g} seconds")
        self.timeout = timeout
        self.url = url


class MalformedResponseError(RpcProxyError):
    kind = ErrorKind.MALFORMED_RESPONSE
    exit_code = 5

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        if status_code is not None:
            message = f"{message} (HTTP {status_code})"
        super().__init__(message)
        self.status_code = status_code


class RpcError(RpcProxyError):
    """A well-formed JSON-RPC error object returned by the daemon."""

    kind = ErrorKind.RPC_ERROR
    exit_code = 6

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        super().__init__(f"RPC error {code}: {message}")
        self.code = code
        self.message = message
        self.data = data

    @classmethod
    def from_error_object(cls, error: dict[str, Any]) -> "RpcError":
        code = error.get("code")
        try:
            code = int(code)
        except (TypeError, ValueError):
            code = -1
        message = error.get("message")
        return cls(code, "" if message is None else str(message), error.get("data"))


class RpcCancelledError(RpcProxyError):
    kind = ErrorKind.CANCELLED
    exit_code = 7
