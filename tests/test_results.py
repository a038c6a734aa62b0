"""Tests for the result normalizer."""

from __future__ import annotations

import json

import httpx
import pytest
from pydantic import BaseModel

from hasuraui.models import Fault, FaultSource
from hasuraui.results import Failure, GatewayError, Success, error_boundary


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.mark.anyio
async def test_error_boundary_wraps_return_value() -> None:
    calls: list[int] = []

    async def _operation() -> int:
        calls.append(1)
        return 42

    result = await error_boundary(_operation)

    assert result == Success(42)
    assert calls == [1]


@pytest.mark.anyio
async def test_error_boundary_uses_gateway_error_source() -> None:
    async def _operation() -> None:
        raise GatewayError("permission denied", FaultSource.GATEWAY_SQL)

    result = await error_boundary(_operation)

    assert isinstance(result, Failure)
    assert result.fault == Fault("permission denied", FaultSource.GATEWAY_SQL)


@pytest.mark.anyio
async def test_error_boundary_maps_transport_errors() -> None:
    async def _operation() -> None:
        raise httpx.ConnectError("connection refused")

    result = await error_boundary(_operation)

    assert isinstance(result, Failure)
    assert result.fault.source is FaultSource.TRANSPORT
    assert result.message == "connection refused"


@pytest.mark.anyio
async def test_error_boundary_maps_decode_and_validation_errors() -> None:
    class _Shape(BaseModel):
        value: int

    async def _bad_json() -> object:
        return json.loads("<html>")

    async def _bad_shape() -> object:
        return _Shape.model_validate({"value": "nope"})

    decode = await error_boundary(_bad_json)
    validation = await error_boundary(_bad_shape)

    assert isinstance(decode, Failure) and decode.fault.source is FaultSource.DECODE
    assert isinstance(validation, Failure) and validation.fault.source is FaultSource.VALIDATION


@pytest.mark.anyio
async def test_error_boundary_falls_back_to_default_source() -> None:
    async def _operation() -> None:
        raise RuntimeError("boom")

    result = await error_boundary(_operation, default_source=FaultSource.GATEWAY_GRAPHQL)

    assert isinstance(result, Failure)
    assert result.fault == Fault("boom", FaultSource.GATEWAY_GRAPHQL)


@pytest.mark.anyio
async def test_error_boundary_passes_failures_through() -> None:
    failure = Failure(Fault("bad rows", FaultSource.VALIDATION))

    async def _operation() -> Failure:
        return failure

    assert await error_boundary(_operation) is failure
