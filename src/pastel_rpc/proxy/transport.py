"""
HTTP transport - One authenticated POST per attempt.

No retries and no state shared between calls: each ``send`` opens its own
``httpx.AsyncClient``. Pass an ``httpx.AsyncBaseTransport`` (for example
``httpx.MockTransport``) to route requests somewhere other than the network.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional, Protocol

import httpx

from ..models import CallEnvelope, Endpoint
from .codec import dumps_envelope
from .errors import NetworkError, RequestTimeoutError


@dataclass(frozen=True)
class RawResponse:
    status_code: int
    body: bytes


class Transport(Protocol):
    async def send(
        self, envelope: CallEnvelope, endpoint: Endpoint, timeout: float
    ) -> RawResponse:
        ...


class HttpTransport:
    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        verify: bool = True,
    ) -> None:
        self._transport = transport
        self._verify = verify

    async def send(
        self, envelope: CallEnvelope, endpoint: Endpoint, timeout: float
    ) -> RawResponse:
        """
        POST the envelope to the endpoint.

        Any HTTP status is returned as a RawResponse; the decoder decides
        whether the body is usable.

        Raises:
            RequestTimeoutError: No complete response within ``timeout``
            NetworkError: DNS, connect, reset, TLS or protocol failure
        """
        headers = {
            "Authorization": endpoint.authorization,
            "Content-Type": "application/json",
        }
        body = dumps_envelope(envelope)
        try:
            return await asyncio.wait_for(
                self._post(endpoint.url, body, headers, timeout), timeout
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise RequestTimeoutError(timeout, endpoint.url) from exc
        except httpx.RequestError as exc:
            raise NetworkError(
                f"{type(exc).__name__} while calling {endpoint.url}: {exc}", cause=exc
            ) from exc

    async def _post(
        self, url: str, body: bytes, headers: dict[str, str], timeout: float
    ) -> RawResponse:
        async with httpx.AsyncClient(
            timeout=timeout, transport=self._transport, verify=self._verify
        ) as client:
            response = await client.post(url, content=body, headers=headers)
            return RawResponse(status_code=response.status_code, body=response.content)
