"""Tagged query results and the boundary that converts exceptions into them."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

import httpx
from pydantic import ValidationError

from .models import Fault, FaultSource

T = TypeVar("T")


class GatewayError(RuntimeError):
    """Raised inside an operation when the gateway reports a domain-level problem."""

    def __init__(self, message: str, source: FaultSource = FaultSource.TRANSPORT) -> None:
        super().__init__(message)
        self.source = source


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    payload: T


@dataclass(frozen=True, slots=True)
class Failure:
    fault: Fault

    @property
    def message(self) -> str:
        return self.fault.message


Result = Union[Success[T], Failure]


def fault_from_exception(exc: Exception, default_source: FaultSource = FaultSource.TRANSPORT) -> Fault:
    """Map an exception to a fault, inferring the source from its type."""

    if isinstance(exc, GatewayError):
        source = exc.source
    elif isinstance(exc, httpx.HTTPError):
        source = FaultSource.TRANSPORT
    elif isinstance(exc, ValidationError):
        source = FaultSource.VALIDATION
    elif isinstance(exc, ValueError):
        source = FaultSource.DECODE
    else:
        source = default_source
    message = str(exc) or type(exc).__name__
    return Fault(message=message, source=source)


async def error_boundary(
    operation: Callable[[], Awaitable[T | Failure]],
    *,
    default_source: FaultSource = FaultSource.TRANSPORT,
) -> Success[T] | Failure:
    """Await ``operation`` once and return a tagged result instead of raising.

    An operation may also return a ``Failure`` directly when it detects a
    problem without raising; that value is passed through as-is.
    """

    try:
        value = await operation()
    except Exception as exc:
        return Failure(fault_from_exception(exc, default_source))
    if isinstance(value, Failure):
        return value
    return Success(value)


__all__ = [
    "Failure",
    "GatewayError",
    "Result",
    "Success",
    "error_boundary",
    "fault_from_exception",
]
