"""Single-connection store plus the query/health plumbing shared with the session manager."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Mapping

from .config import AppConfig
from .decoders import RowsPayload
from .models import (
    ConnectionRecord,
    ConnectionState,
    Fault,
    FaultSource,
    Healthy,
    Idle,
    Testing,
    Unhealthy,
)
from .query import GatewayClient, QueryExecutor
from .results import Failure, Success
from .storage import (
    ConnectionSnapshot,
    JsonFileStorage,
    KeyValueStorage,
    load_snapshot,
    remove_snapshot,
    save_snapshot,
)

LOG = logging.getLogger(__name__)

PROBE_SQL = "SELECT 1"
NO_SERVER_MESSAGE = "No server selected"

StoreListener = Callable[["GatewayStore"], None]


class GatewayStore(ABC):
    """Query execution and connection health for whichever record is active.

    Subclasses decide which record is active via ``active_record``. Concurrent
    queries are not isolated: the last one to finish owns ``is_loading`` and
    ``last_error``.
    """

    def __init__(self, *, executor: QueryExecutor | None = None) -> None:
        self._executor: QueryExecutor = executor or GatewayClient()
        self._state: ConnectionState = Idle()
        self._is_loading = False
        self._last_error: Fault | None = None
        self._listeners: set[StoreListener] = set()

    @property
    def state(self) -> ConnectionState:
        """Health of the active connection."""

        return self._state

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def last_error(self) -> Fault | None:
        """Fault from the most recent query, cleared by the next success."""

        return self._last_error

    @property
    @abstractmethod
    def active_record(self) -> ConnectionRecord | None:
        """Record queries and probes run against, or None when nothing is active."""

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Subscribe to store mutations; returns an unsubscribe handle."""

        self._listeners.add(listener)

        def _unsubscribe() -> None:
            self._listeners.discard(listener)

        return _unsubscribe

    async def test_connection(self) -> bool:
        """Probe the active connection with ``SELECT 1`` and record its health."""

        record = self.active_record
        if record is None or not record.configured:
            return False
        self._set_state(Testing())
        result = await self.execute_sql(PROBE_SQL)
        if isinstance(result, Failure):
            self._set_state(Unhealthy(result.fault))
            return False
        self._set_state(Healthy())
        return True

    async def execute_graphql(
        self,
        query: str,
        variables: Mapping[str, Any] | None = None,
    ) -> Success[Any] | Failure:
        """Run a GraphQL query against the active connection."""

        record = self._queryable_record()
        if record is None:
            return self._no_server()
        self._begin_query()
        result = await self._executor.execute_graphql(record, query, variables)
        self._finish_query(result)
        return result

    async def execute_sql(self, sql: str, *, allow_mutations: bool = False) -> Success[RowsPayload] | Failure:
        """Run raw SQL against the active connection, read-only unless mutations are allowed."""

        record = self._queryable_record()
        if record is None:
            return self._no_server()
        self._begin_query()
        result = await self._executor.execute_sql(record, sql, allow_mutations=allow_mutations)
        self._finish_query(result)
        return result

    def _queryable_record(self) -> ConnectionRecord | None:
        record = self.active_record
        if record is None or not record.endpoint_url:
            return None
        return record

    def _no_server(self) -> Failure:
        failure = Failure(Fault(message=NO_SERVER_MESSAGE, source=FaultSource.VALIDATION))
        self._last_error = failure.fault
        self._notify()
        return failure

    def _begin_query(self) -> None:
        self._is_loading = True
        self._notify()

    def _finish_query(self, result: Success[Any] | Failure) -> None:
        self._is_loading = False
        self._last_error = result.fault if isinstance(result, Failure) else None
        if isinstance(result, Failure):
            LOG.debug(
                "Gateway query failed",
                extra={"source": result.fault.source.value, "fault": result.fault.message},
            )
        self._notify()

    def _set_state(self, state: ConnectionState) -> None:
        if state != self._state:
            LOG.debug(
                "Connection state changed",
                extra={"from": self._state.status.value, "to": state.status.value},
            )
        self._state = state
        self._notify()

    def _notify(self) -> None:
        for listener in tuple(self._listeners):
            listener(self)


class ConnectionStore(GatewayStore):
    """Store holding exactly one endpoint/secret pair."""

    RECORD_ID = "default"

    def __init__(
        self,
        *,
        storage: KeyValueStorage | None = None,
        storage_key: str = "hasura_connection",
        executor: QueryExecutor | None = None,
    ) -> None:
        super().__init__(executor=executor)
        self._storage = storage
        self._storage_key = storage_key
        self._endpoint_url = ""
        self._secret = ""
        snapshot = load_snapshot(storage, storage_key, ConnectionSnapshot)
        if snapshot is not None:
            self._endpoint_url = snapshot.server
            self._secret = snapshot.admin_password

    @classmethod
    def from_config(cls, config: AppConfig, *, executor: QueryExecutor | None = None) -> ConnectionStore:
        """Build a store persisting to the configured storage file."""

        return cls(
            storage=JsonFileStorage(config.storage_path),
            storage_key=config.connection_key,
            executor=executor or GatewayClient(timeout=config.request_timeout),
        )

    @property
    def endpoint_url(self) -> str:
        return self._endpoint_url

    @property
    def secret(self) -> str:
        return self._secret

    @property
    def record(self) -> ConnectionRecord:
        return ConnectionRecord(id=self.RECORD_ID, endpoint_url=self._endpoint_url, secret=self._secret)

    @property
    def active_record(self) -> ConnectionRecord | None:
        return self.record

    def update_connection(self, endpoint_url: str, secret: str) -> None:
        """Replace the endpoint and secret; unchanged values are a no-op."""

        if self._apply(endpoint_url, secret):
            save_snapshot(
                self._storage,
                self._storage_key,
                ConnectionSnapshot(server=self._endpoint_url, admin_password=self._secret),
            )

    def clear_connection(self) -> None:
        """Forget the connection and drop its persisted snapshot."""

        self._apply("", "")
        remove_snapshot(self._storage, self._storage_key)

    def _apply(self, endpoint_url: str, secret: str) -> bool:
        if endpoint_url == self._endpoint_url and secret == self._secret:
            return False
        self._endpoint_url = endpoint_url
        self._secret = secret
        self._set_state(Idle())
        return True


__all__ = [
    "ConnectionStore",
    "GatewayStore",
    "NO_SERVER_MESSAGE",
    "PROBE_SQL",
    "StoreListener",
]
