"""Tests for the debounce helper and the profile editor."""

from __future__ import annotations

import asyncio

import pytest

from hasuraui.debounce import Debouncer, ProfileEditor
from hasuraui.decoders import RowsPayload
from hasuraui.models import Healthy, Idle
from hasuraui.results import Success
from hasuraui.session import SessionManager


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


class _ProbeStub:
    def __init__(self) -> None:
        self.probes: list[str] = []

    async def execute_graphql(self, record, query, variables=None):  # type: ignore[no-untyped-def]
        raise AssertionError("graphql should not be called")

    async def execute_sql(self, record, sql, *, allow_mutations=False):  # type: ignore[no-untyped-def]
        self.probes.append(record.endpoint_url)
        return Success(RowsPayload(rows=(("1",),)))


@pytest.mark.anyio
async def test_debouncer_runs_latest_submission_once() -> None:
    debouncer = Debouncer(delay=0.01)
    calls: list[int] = []

    for value in range(3):

        async def _record(value: int = value) -> None:
            calls.append(value)

        debouncer.submit(_record)
    await asyncio.sleep(0.05)

    assert calls == [2]


@pytest.mark.anyio
async def test_debouncer_cancel_drops_pending_call() -> None:
    debouncer = Debouncer(delay=0.01)
    calls: list[int] = []

    async def _record() -> None:
        calls.append(1)

    debouncer.submit(_record)
    assert debouncer.pending is True
    debouncer.cancel()
    await asyncio.sleep(0.03)

    assert calls == []
    assert debouncer.pending is False


@pytest.mark.anyio
async def test_profile_editor_saves_immediately_and_probes_once() -> None:
    executor = _ProbeStub()
    manager = SessionManager(executor=executor)
    record_id = manager.add_connection("S1", "", "")
    editor = ProfileEditor(manager, record_id, delay=0.01)

    editor.edit("S1", "http://h", "p")
    editor.edit("S1", "http://h", "pw")
    editor.edit("S1", "http://host", "pw")

    assert manager.get(record_id).endpoint_url == "http://host"
    assert manager.state == Idle()
    await asyncio.sleep(0.05)

    assert executor.probes == ["http://host"]
    assert manager.state == Healthy()


@pytest.mark.anyio
async def test_profile_editor_close_cancels_probe() -> None:
    executor = _ProbeStub()
    manager = SessionManager(executor=executor)
    record_id = manager.add_connection("S1", "", "")
    editor = ProfileEditor(manager, record_id, delay=0.01)

    editor.edit("S1", "http://h", "pw")
    assert editor.probe_pending is True
    editor.close()
    await asyncio.sleep(0.03)

    assert executor.probes == []


@pytest.mark.anyio
async def test_profile_editor_skips_probe_for_unselected_profile() -> None:
    executor = _ProbeStub()
    manager = SessionManager(executor=executor)
    selected = manager.add_connection("S1", "http://good", "pw")
    other = manager.add_connection("S2", "http://h2", "pw2")
    editor = ProfileEditor(manager, other, delay=0.01)

    editor.edit("S2", "http://broken", "bad")
    await asyncio.sleep(0.05)

    assert manager.get(other).endpoint_url == "http://broken"
    assert manager.selected_id == selected
    assert editor.probe_pending is False
    assert executor.probes == []
    assert manager.state == Idle()


@pytest.mark.anyio
async def test_profile_editor_drops_probe_when_deselected_before_it_runs() -> None:
    executor = _ProbeStub()
    manager = SessionManager(executor=executor)
    first = manager.add_connection("S1", "http://h", "pw")
    second = manager.add_connection("S2", "http://h2", "pw2")
    editor = ProfileEditor(manager, first, delay=0.01)

    editor.edit("S1", "http://host", "pw")
    manager.select_connection(second)
    await asyncio.sleep(0.05)

    assert executor.probes == []
    assert manager.state == Idle()


@pytest.mark.anyio
async def test_debouncer_logs_failures(caplog: pytest.LogCaptureFixture) -> None:
    debouncer = Debouncer(delay=0.01)

    async def _explode() -> None:
        raise RuntimeError("boom")

    debouncer.submit(_explode)
    await asyncio.sleep(0.05)

    assert "Debounced call failed" in caplog.text
    assert "boom" in caplog.text
    assert debouncer.pending is False
