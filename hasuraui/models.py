"""Shared dataclasses used across the store, executor and decoder modules."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class FaultSource(str, Enum):
    """Where a normalized failure originated."""

    TRANSPORT = "transport"
    DECODE = "decode"
    GATEWAY_GRAPHQL = "gateway-graphql"
    GATEWAY_SQL = "gateway-sql"
    VALIDATION = "validation"


@dataclass(frozen=True, slots=True)
class Fault:
    """Normalized error value surfaced to callers instead of an exception."""

    message: str
    source: FaultSource


@dataclass(frozen=True, slots=True)
class ConnectionRecord:
    """Endpoint + admin secret identifying one gateway instance."""

    id: str
    endpoint_url: str
    secret: str
    name: str = ""

    @property
    def configured(self) -> bool:
        return bool(self.endpoint_url and self.secret)


class ConnectionStatus(str, Enum):
    """Lifecycle of the currently selected connection."""

    IDLE = "idle"
    TESTING = "testing"
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


@dataclass(frozen=True, slots=True)
class Idle:
    status = ConnectionStatus.IDLE


@dataclass(frozen=True, slots=True)
class Testing:
    status = ConnectionStatus.TESTING


@dataclass(frozen=True, slots=True)
class Healthy:
    status = ConnectionStatus.HEALTHY


@dataclass(frozen=True, slots=True)
class Unhealthy:
    """Probe failed; carries the fault produced by the probe query."""

    fault: Fault
    status = ConnectionStatus.UNHEALTHY


ConnectionState = Union[Idle, Testing, Healthy, Unhealthy]


__all__ = [
    "ConnectionRecord",
    "ConnectionState",
    "ConnectionStatus",
    "Fault",
    "FaultSource",
    "Healthy",
    "Idle",
    "Testing",
    "Unhealthy",
]
