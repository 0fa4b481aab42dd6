"""
Retry/backoff state machine around a single logical call.

    Attempting(0) --ok--> Succeeded
    Attempting(n) --fail, retryable, n < reconnect_amount--> sleep -> Attempting(n+1)
    Attempting(n) --fail, otherwise--> Failed

The wait after attempt ``n`` fails is ``reconnect_timeout * 2**n``.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Union

from loguru import logger

from ..models import EngineConfig
from .errors import ErrorKind, RpcProxyError

SleepFn = Callable[[float], Awaitable[Any]]
AttemptFn = Callable[[int], Awaitable[Any]]


NEVER_RETRIED = frozenset(
    {ErrorKind.MISSING_CREDENTIALS, ErrorKind.INVALID_ENDPOINT, ErrorKind.CANCELLED}
)


@dataclass(frozen=True)
class RetryPolicy:
    """Which failure kinds are worth another attempt."""

    retry_on: frozenset[ErrorKind] = field(
        default_factory=lambda: frozenset(
            {
                ErrorKind.NETWORK_ERROR,
                ErrorKind.TIMEOUT,
                ErrorKind.MALFORMED_RESPONSE,
                ErrorKind.RPC_ERROR,
            }
        )
    )

    @classmethod
    def blanket(cls) -> "RetryPolicy":
        """Retry every failure the daemon or network can produce."""
        return cls()

    @classmethod
    def transient_only(cls) -> "RetryPolicy":
        """Fail fast on RPC errors; those are usually deterministic."""
        return cls(
            frozenset(
                {
                    ErrorKind.NETWORK_ERROR,
                    ErrorKind.TIMEOUT,
                    ErrorKind.MALFORMED_RESPONSE,
                }
            )
        )

    def is_retryable(self, error: RpcProxyError) -> bool:
        return error.kind not in NEVER_RETRIED and error.kind in self.retry_on


@dataclass(frozen=True)
class Attempting:
    attempt: int


@dataclass(frozen=True)
class Succeeded:
    value: Any
    attempts: int


@dataclass(frozen=True)
class Failed:
    error: RpcProxyError
    attempts: int


RetryState = Union[Attempting, Succeeded, Failed]


def transition(
    state: Attempting,
    error: RpcProxyError,
    config: EngineConfig,
    policy: RetryPolicy,
) -> Union[Attempting, Failed]:
    """Next state after ``state``'s attempt failed with ``error``."""
    if state.attempt < config.reconnect_amount and policy.is_retryable(error):
        return Attempting(state.attempt + 1)
    return Failed(error=error, attempts=state.attempt + 1)


class RetryController:
    def __init__(
        self,
        config: EngineConfig,
        policy: Optional[RetryPolicy] = None,
        sleep: Optional[SleepFn] = None,
    ) -> None:
        self.config = config
        self.policy = policy or RetryPolicy.blanket()
        self._sleep = sleep or asyncio.sleep

    async def run(self, attempt_fn: AttemptFn, label: str = "call") -> Any:
        """
        Drive ``attempt_fn`` until it succeeds or the budget is spent.

        Args:
            attempt_fn: Coroutine function taking the 0-based attempt number
            label: Used in log lines (method name and request id)

        Returns:
            The value of the first successful attempt

        Raises:
            RpcProxyError: The last attempt's error once in ``Failed``
        """
        state: RetryState = Attempting(0)
        while isinstance(state, Attempting):
            try:
                value = await attempt_fn(state.attempt)
            except RpcProxyError as exc:
                next_state = transition(state, exc, self.config, self.policy)
                if isinstance(next_state, Failed):
                    state = next_state
                    break
                delay = self.config.backoff_delay(state.attempt)
                logger.info(
                    f"{label}: reconnect attempt #{state.attempt + 1} failed "
                    f"({exc.label}: {exc}), retrying in {delay:g} seconds."
                )
                await self._sleep(delay)
                state = next_state
            else:
                state = Succeeded(value=value, attempts=state.attempt + 1)

        if isinstance(state, Failed):
            if self.policy.is_retryable(state.error):
                logger.error(
                    f"{label}: reconnect attempts exceeded after {state.attempts} "
                    f"attempt(s), operation failed."
                )
            else:
                logger.error(f"{label}: {state.error.label} is not retried: {state.error}")
            raise state.error
        return state.value
