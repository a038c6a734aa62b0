"""HTTP client issuing GraphQL and raw-SQL requests against a Hasura gateway."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Mapping, Protocol

import httpx

from .decoders import RowsPayload, decode_graphql, decode_sql
from .models import ConnectionRecord
from .results import Failure, Success, error_boundary

LOG = logging.getLogger(__name__)

ADMIN_SECRET_HEADER = "x-hasura-admin-secret"
GRAPHQL_PATH = "/v1/graphql"
SQL_PATH = "/v2/query"


class QueryExecutor(Protocol):
    """Interface the stores use to reach the gateway."""

    async def execute_graphql(
        self,
        record: ConnectionRecord,
        query: str,
        variables: Mapping[str, Any] | None = None,
    ) -> Success[Any] | Failure: ...

    async def execute_sql(
        self,
        record: ConnectionRecord,
        sql: str,
        *,
        allow_mutations: bool = False,
    ) -> Success[RowsPayload] | Failure: ...


class GatewayClient:
    """Runs queries against the gateway via httpx.

    An injected ``client`` is reused across requests and left open; without
    one, a short-lived client is opened per request.
    """

    def __init__(self, client: httpx.AsyncClient | None = None, *, timeout: float = 10.0) -> None:
        self._client = client
        self._timeout = timeout

    async def execute_graphql(
        self,
        record: ConnectionRecord,
        query: str,
        variables: Mapping[str, Any] | None = None,
    ) -> Success[Any] | Failure:
        payload = {"query": query, "variables": dict(variables or {})}

        async def _run() -> Any:
            response = await self._post(record, GRAPHQL_PATH, payload)
            return _unwrap(decode_graphql(response.json(), response.status_code))

        return await error_boundary(_run)

    async def execute_sql(
        self,
        record: ConnectionRecord,
        sql: str,
        *,
        allow_mutations: bool = False,
    ) -> Success[RowsPayload] | Failure:
        payload = {
            "type": "run_sql",
            "args": {
                "source": "default",
                "sql": sql,
                "cascade": False,
                "read_only": not allow_mutations,
            },
        }

        async def _run() -> RowsPayload | Failure:
            response = await self._post(record, SQL_PATH, payload)
            return _unwrap(decode_sql(response.json(), response.status_code))

        return await error_boundary(_run)

    async def _post(self, record: ConnectionRecord, path: str, payload: Mapping[str, Any]) -> httpx.Response:
        url = record.endpoint_url.rstrip("/") + path
        headers = {"Content-Type": "application/json", ADMIN_SECRET_HEADER: record.secret}
        started = time.perf_counter()
        async with self._session() as client:
            response = await client.post(url, json=payload, headers=headers)
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        LOG.debug(
            "Gateway request completed",
            extra={"url": url, "status": response.status_code, "elapsed_ms": elapsed_ms},
        )
        return response

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=httpx.Timeout(self._timeout)) as client:
            yield client


def _unwrap(decoded: Success[Any] | Failure) -> Any:
    if isinstance(decoded, Failure):
        return decoded
    return decoded.payload


__all__ = [
    "ADMIN_SECRET_HEADER",
    "GatewayClient",
    "QueryExecutor",
]
