"""Async debounce helper and the profile editor that uses it to probe connections."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from .session import SessionManager

LOG = logging.getLogger(__name__)


class Debouncer:
    """Utility that coalesces rapid-fire calls into a single coroutine run."""

    def __init__(self, delay: float = 0.5) -> None:
        self._delay = delay
        self._task: asyncio.Task[Any] | None = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def submit(self, coro_factory: Callable[[], Awaitable[Any]]) -> None:
        """Schedule a coroutine, cancelling any pending invocation."""

        if self._task:
            self._task.cancel()
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._runner(coro_factory))

    def cancel(self) -> None:
        """Cancel any pending invocation."""

        if self._task:
            self._task.cancel()
            self._task = None

    async def _runner(self, coro_factory: Callable[[], Awaitable[Any]]) -> None:
        try:
            await asyncio.sleep(self._delay)
            await coro_factory()
        except asyncio.CancelledError:
            return
        except Exception:
            LOG.exception("Debounced call failed")


class ProfileEditor:
    """Edits one profile, saving immediately and probing it once edits settle."""

    def __init__(self, manager: SessionManager, record_id: str, *, delay: float = 0.5) -> None:
        self._manager = manager
        self._record_id = record_id
        self._debouncer = Debouncer(delay)

    @property
    def record_id(self) -> str:
        return self._record_id

    @property
    def probe_pending(self) -> bool:
        return self._debouncer.pending

    def edit(self, name: str, endpoint_url: str, secret: str) -> None:
        """Save the edit, then probe once edits settle if this profile is selected."""

        self._manager.update_connection(self._record_id, name, endpoint_url, secret)
        if self._record_id != self._manager.selected_id:
            # the manager only probes the selected profile
            self._debouncer.cancel()
            return
        self._debouncer.submit(self._probe)

    async def _probe(self) -> None:
        if self._record_id == self._manager.selected_id:
            await self._manager.test_connection()

    def close(self) -> None:
        self._debouncer.cancel()


__all__ = ["Debouncer", "ProfileEditor"]
