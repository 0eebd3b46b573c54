"""
Settle-all concurrency helper.

Runs a fixed set of fallible awaitables concurrently and reports every
outcome, success or failure, without short-circuiting on the first failure.
"""

import asyncio
import logging
from collections.abc import Awaitable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from ..providers.base import ProviderTimeoutError, describe_failure

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """A call that fulfilled."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """A call that rejected; ``error`` is the exception it raised."""

    error: Exception

    @property
    def ok(self) -> bool:
        return False

    @property
    def reason(self) -> str:
        return describe_failure(self.error)


Outcome = Ok[Any] | Err


def value_or_none(outcome: Outcome) -> Any:
    """Unwrap a fulfilled outcome, mapping a rejection to None."""
    if isinstance(outcome, Ok):
        return outcome.value
    return None


async def _settle(
    call: Awaitable[T], label: str, timeout: float | None
) -> Ok[T] | Err:
    if timeout is None:
        try:
            return Ok(await call)
        except Exception as e:
            logger.warning(f"{label} failed: {describe_failure(e)}")
            return Err(e)

    task = asyncio.ensure_future(call)
    try:
        done, _ = await asyncio.wait({task}, timeout=timeout)
    except asyncio.CancelledError:
        task.cancel()
        raise
    if not done:
        task.cancel()
        await asyncio.wait({task})
        if not task.cancelled() and task.exception() is not None:
            # Failed while being cancelled; the deadline still applies
            logger.debug(f"{label} raised during cancellation: {describe_failure(task.exception())}")
        logger.warning(f"{label} did not settle within {timeout:g}s")
        return Err(ProviderTimeoutError(timeout))

    # A TimeoutError raised by the call itself is an ordinary failure
    try:
        return Ok(task.result())
    except Exception as e:
        logger.warning(f"{label} failed: {describe_failure(e)}")
        return Err(e)


async def settle_all(
    calls: Sequence[Awaitable[Any]],
    labels: Sequence[str] | None = None,
    timeout: float | None = None,
) -> list[Outcome]:
    """
    Await every call and return one outcome per call, in call order.

    All calls are scheduled before any is awaited. Exceptions raised by a
    call are captured as ``Err``; a call exceeding ``timeout`` seconds is
    cancelled and captured as ``Err(ProviderTimeoutError)``. Cancellation of
    the caller itself is not absorbed.

    Args:
        calls: Awaitables to run concurrently
        labels: Optional names used in log messages
        timeout: Optional per-call deadline in seconds

    Returns:
        List of Ok/Err outcomes aligned with ``calls``
    """
    if labels is None:
        labels = [f"call {i}" for i in range(len(calls))]
    if len(labels) != len(calls):
        raise ValueError("labels must align with calls")

    return list(
        await asyncio.gather(
            *(_settle(call, label, timeout) for call, label in zip(calls, labels))
        )
    )
