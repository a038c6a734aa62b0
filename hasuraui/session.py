"""Multi-profile session manager: a named list of gateway connections with one selected."""

from __future__ import annotations

import dataclasses
import logging
import uuid

from .config import AppConfig
from .connections import GatewayStore
from .models import ConnectionRecord, Idle
from .query import GatewayClient, QueryExecutor
from .storage import (
    JsonFileStorage,
    KeyValueStorage,
    ProfilesSnapshot,
    ServerSnapshot,
    load_snapshot,
    remove_snapshot,
    save_snapshot,
)

LOG = logging.getLogger(__name__)


class SessionManager(GatewayStore):
    """Owns the saved connection profiles and routes queries to the selected one."""

    def __init__(
        self,
        *,
        storage: KeyValueStorage | None = None,
        storage_key: str = "hasura_servers",
        executor: QueryExecutor | None = None,
    ) -> None:
        super().__init__(executor=executor)
        self._storage = storage
        self._storage_key = storage_key
        self._records: list[ConnectionRecord] = []
        self._selected_id: str | None = None
        snapshot = load_snapshot(storage, storage_key, ProfilesSnapshot)
        if snapshot is not None:
            self._hydrate(snapshot)

    @classmethod
    def from_config(cls, config: AppConfig, *, executor: QueryExecutor | None = None) -> SessionManager:
        """Build a manager persisting to the configured storage file."""

        return cls(
            storage=JsonFileStorage(config.storage_path),
            storage_key=config.profiles_key,
            executor=executor or GatewayClient(timeout=config.request_timeout),
        )

    @property
    def records(self) -> tuple[ConnectionRecord, ...]:
        """Profiles in insertion order."""

        return tuple(self._records)

    @property
    def selected_id(self) -> str | None:
        return self._selected_id

    @property
    def selected_record(self) -> ConnectionRecord | None:
        if self._selected_id is None:
            return None
        return self.get(self._selected_id)

    @property
    def active_record(self) -> ConnectionRecord | None:
        return self.selected_record

    def get(self, record_id: str) -> ConnectionRecord | None:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def add_connection(self, name: str, endpoint_url: str, secret: str) -> str:
        """Append a profile and return its id; the first profile is auto-selected."""

        record = ConnectionRecord(id=uuid.uuid4().hex, name=name, endpoint_url=endpoint_url, secret=secret)
        self._records.append(record)
        if len(self._records) == 1:
            self._selected_id = record.id
        self._persist()
        self._notify()
        return record.id

    def update_connection(self, record_id: str, name: str, endpoint_url: str, secret: str) -> None:
        """Replace a profile's fields in place; unknown ids are ignored."""

        for index, record in enumerate(self._records):
            if record.id == record_id:
                break
        else:
            return
        self._records[index] = dataclasses.replace(record, name=name, endpoint_url=endpoint_url, secret=secret)
        self._persist()
        if record_id == self._selected_id:
            self._set_state(Idle())
        else:
            self._notify()

    def remove_connection(self, record_id: str) -> None:
        """Drop a profile; removing the selected one selects the new first profile."""

        remaining = [record for record in self._records if record.id != record_id]
        if len(remaining) == len(self._records):
            return
        self._records = remaining
        if record_id == self._selected_id:
            self._selected_id = remaining[0].id if remaining else None
            self._persist()
            self._set_state(Idle())
            return
        self._persist()
        self._notify()

    def select_connection(self, record_id: str) -> None:
        """Select a profile by id; unknown ids and re-selection are no-ops."""

        if record_id == self._selected_id or self.get(record_id) is None:
            return
        self._selected_id = record_id
        self._persist()
        self._set_state(Idle())

    def clear(self) -> None:
        """Remove every profile and drop the persisted snapshot."""

        self._records = []
        self._selected_id = None
        remove_snapshot(self._storage, self._storage_key)
        self._set_state(Idle())

    def snapshot(self) -> ProfilesSnapshot:
        """Serializable view of the current profiles and selection."""

        return ProfilesSnapshot(
            servers=[
                ServerSnapshot(
                    id=record.id,
                    name=record.name,
                    url=record.endpoint_url,
                    admin_password=record.secret,
                )
                for record in self._records
            ],
            selected_id=self._selected_id,
        )

    def _persist(self) -> None:
        save_snapshot(self._storage, self._storage_key, self.snapshot())

    def _hydrate(self, snapshot: ProfilesSnapshot) -> None:
        records: list[ConnectionRecord] = []
        seen: set[str] = set()
        for server in snapshot.servers:
            if server.id in seen:
                LOG.warning("Skipping duplicate saved profile", extra={"profile_id": server.id})
                continue
            seen.add(server.id)
            records.append(
                ConnectionRecord(
                    id=server.id,
                    name=server.name,
                    endpoint_url=server.url,
                    secret=server.admin_password,
                )
            )
        self._records = records
        if snapshot.selected_id is not None and snapshot.selected_id not in seen:
            LOG.warning("Saved selection names no profile", extra={"profile_id": snapshot.selected_id})
            self._selected_id = None
        else:
            self._selected_id = snapshot.selected_id


__all__ = ["SessionManager"]
