"""
JSON-RPC codec - Build request envelopes and decode daemon responses.

Amounts travel as ``decimal.Decimal`` in both directions: outgoing
Decimals are rendered as their exact string form, incoming JSON floats
are parsed into Decimals.
"""

from __future__ import annotations

import json
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Optional, Sequence

from ..models import CallEnvelope
from .errors import MalformedResponseError, RpcError

if TYPE_CHECKING:
    from .transport import RawResponse


JSONRPC_VERSION = "1.0"


def qualify_method(method: str, service_name: Optional[str] = None) -> str:
    """Return the wire method name, ``service_name.method`` when namespaced."""
    if service_name:
        return f"{service_name}.{method}"
    return method


def encode_request(
    method: str,
    params: Sequence[Any],
    request_id: int,
    service_name: Optional[str] = None,
) -> CallEnvelope:
    """
    Build the envelope for one logical call.

    Args:
        method: RPC method name (e.g., "getblock")
        params: Positional parameters, passed through unvalidated
        request_id: Identifier drawn from the engine's counter
        service_name: Optional namespace prefix

    Returns:
        CallEnvelope ready for the transport
    """
    return CallEnvelope(
        method=qualify_method(method, service_name),
        params=list(params),
        request_id=request_id,
        version=JSONRPC_VERSION,
    )


def _encode_special(obj: Any) -> Any:
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, (tuple, set, frozenset)):
        return list(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def dumps_json(payload: Any, **kwargs: Any) -> str:
    return json.dumps(payload, default=_encode_special, **kwargs)


def dumps_envelope(envelope: CallEnvelope) -> bytes:
    return dumps_json(envelope.to_dict()).encode("utf-8")


def decode_response(raw: "RawResponse") -> Any:
    """
    Decode a raw HTTP response into the call's result.

    Raises:
        MalformedResponseError: Body is not a JSON-RPC response object
        RpcError: The daemon returned a non-null ``error`` member
    """
    try:
        data = json.loads(raw.body, parse_float=Decimal)
    except (ValueError, UnicodeDecodeError) as exc:
        raise MalformedResponseError(
            f"Response body is not valid JSON: {exc}", raw.status_code
        ) from exc

    if not isinstance(data, dict):
        raise MalformedResponseError(
            "Unexpected JSON-RPC response (non-object)", raw.status_code
        )

    error = data.get("error")
    if error is not None:
        if not isinstance(error, dict):
            raise MalformedResponseError(
                f"Unexpected JSON-RPC error member: {error!r}", raw.status_code
            )
        raise RpcError.from_error_object(error)

    if "result" not in data:
        raise MalformedResponseError(
            "Unexpected JSON-RPC response (missing result)", raw.status_code
        )
    return data["result"]
