"""Connection and query store for Hasura GraphQL/SQL gateways."""

from __future__ import annotations

from .config import AppConfig, load_config, save_config
from .connections import ConnectionStore, GatewayStore
from .debounce import Debouncer, ProfileEditor
from .decoders import RowsPayload
from .models import (
    ConnectionRecord,
    ConnectionState,
    ConnectionStatus,
    Fault,
    FaultSource,
    Healthy,
    Idle,
    Testing,
    Unhealthy,
)
from .query import GatewayClient, QueryExecutor
from .results import Failure, GatewayError, Result, Success, error_boundary
from .session import SessionManager
from .storage import JsonFileStorage, KeyValueStorage, MemoryStorage

__all__ = [
    "AppConfig",
    "ConnectionRecord",
    "ConnectionState",
    "ConnectionStatus",
    "ConnectionStore",
    "Debouncer",
    "Failure",
    "Fault",
    "FaultSource",
    "GatewayClient",
    "GatewayError",
    "GatewayStore",
    "Healthy",
    "Idle",
    "JsonFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "ProfileEditor",
    "QueryExecutor",
    "Result",
    "RowsPayload",
    "SessionManager",
    "Success",
    "Testing",
    "Unhealthy",
    "error_boundary",
    "load_config",
    "save_config",
]
