"""Decoders for the envelopes returned by the gateway's GraphQL and SQL endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, ValidationError

from .models import Fault, FaultSource
from .results import Failure, Success

GRAPHQL_FALLBACK_MESSAGE = "GraphQL query failed"
SQL_FALLBACK_MESSAGE = "SQL query failed"


class SqlTuplesBody(BaseModel):
    """Successful ``run_sql`` response."""

    model_config = ConfigDict(strict=True)

    result_type: Literal["TuplesOk"]
    result: list[list[Any]]


class SqlErrorDetail(BaseModel):
    model_config = ConfigDict(strict=True)

    description: str | None
    exec_status: str
    hint: str | None
    message: str
    status_code: str


class SqlInternalError(BaseModel):
    """Postgres diagnostics Hasura attaches to failed statements."""

    model_config = ConfigDict(strict=True)

    arguments: list[Any]
    error: SqlErrorDetail
    prepared: bool
    statement: str


class SqlErrorBody(BaseModel):
    """Non-2xx ``run_sql`` response."""

    model_config = ConfigDict(strict=True)

    error: str
    path: str
    code: str
    internal: SqlInternalError | None = None


@dataclass(frozen=True, slots=True)
class RowsPayload:
    """Rows returned by a SQL query; the first row is the header row."""

    rows: tuple[tuple[Any, ...], ...]
    result_kind: Literal["rows"] = "rows"


def is_success_status(status_code: int) -> bool:
    return 200 <= status_code < 300


def summarize_validation_error(exc: ValidationError) -> str:
    """Collapse a pydantic error report into a single line."""

    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "$"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


def decode_graphql(body: Any, status_code: int = 200) -> Success[Any] | Failure:
    """Decode a GraphQL response envelope into its ``data`` payload."""

    if not isinstance(body, dict):
        if is_success_status(status_code):
            message = f"Expected a GraphQL response object, got {type(body).__name__}"
            return Failure(Fault(message=message, source=FaultSource.DECODE))
        return _graphql_status_failure(status_code)
    errors = body.get("errors")
    if isinstance(errors, list) and errors:
        first = errors[0]
        message = first.get("message") if isinstance(first, dict) else None
        if not isinstance(message, str) or not message:
            message = GRAPHQL_FALLBACK_MESSAGE
        return Failure(Fault(message=message, source=FaultSource.GATEWAY_GRAPHQL))
    if not is_success_status(status_code):
        return _graphql_status_failure(status_code)
    return Success(body.get("data"))


def decode_sql(body: Any, status_code: int = 200) -> Success[RowsPayload] | Failure:
    """Decode a ``run_sql`` response, validating it against the strict schemas."""

    if not is_success_status(status_code):
        try:
            error_body = SqlErrorBody.model_validate(body)
        except ValidationError as exc:
            return _validation_failure(exc)
        message = error_body.error or SQL_FALLBACK_MESSAGE
        return Failure(Fault(message=message, source=FaultSource.GATEWAY_SQL))
    try:
        tuples = SqlTuplesBody.model_validate(body)
    except ValidationError as exc:
        return _validation_failure(exc)
    return Success(RowsPayload(rows=tuple(tuple(row) for row in tuples.result)))


def _validation_failure(exc: ValidationError) -> Failure:
    return Failure(Fault(message=summarize_validation_error(exc), source=FaultSource.VALIDATION))


def _graphql_status_failure(status_code: int) -> Failure:
    message = f"{GRAPHQL_FALLBACK_MESSAGE} (HTTP {status_code})"
    return Failure(Fault(message=message, source=FaultSource.GATEWAY_GRAPHQL))


__all__ = [
    "RowsPayload",
    "SqlErrorBody",
    "SqlTuplesBody",
    "decode_graphql",
    "decode_sql",
    "summarize_validation_error",
]
