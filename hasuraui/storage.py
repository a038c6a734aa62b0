"""Key-value persistence capability and the snapshots the stores write to it."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, ValidationError

LOG = logging.getLogger(__name__)

SnapshotT = TypeVar("SnapshotT", bound=BaseModel)


@runtime_checkable
class KeyValueStorage(Protocol):
    """Subset of the Web Storage API the stores persist through."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    """In-process storage, handy for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()


class JsonFileStorage:
    """Storage backed by a single JSON object file on disk."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def get_item(self, key: str) -> str | None:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def _read(self) -> dict[str, object]:
        try:
            raw = json.loads(self._path.read_text())
        except FileNotFoundError:
            return {}
        except ValueError:
            # the next write replaces the unreadable file
            LOG.warning("Ignoring unreadable storage file", extra={"path": str(self._path)})
            return {}
        return raw if isinstance(raw, dict) else {}

    def _write(self, data: dict[str, object]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n")


class ConnectionSnapshot(BaseModel):
    """Persisted shape of the single-connection store."""

    model_config = ConfigDict(populate_by_name=True, strict=True)

    server: str
    admin_password: str = Field(alias="adminPassword")


class ServerSnapshot(BaseModel):
    model_config = ConfigDict(populate_by_name=True, strict=True)

    id: str
    name: str
    url: str
    admin_password: str = Field(alias="adminPassword")


class ProfilesSnapshot(BaseModel):
    """Persisted shape of the multi-profile store."""

    model_config = ConfigDict(populate_by_name=True, strict=True)

    servers: list[ServerSnapshot] = Field(default_factory=list)
    selected_id: str | None = Field(default=None, alias="selectedId")


def load_snapshot(storage: KeyValueStorage | None, key: str, model: type[SnapshotT]) -> SnapshotT | None:
    """Read and decode a snapshot; faults are logged and treated as no saved state."""

    if storage is None:
        return None
    try:
        raw = storage.get_item(key)
        if not raw:
            return None
        return model.model_validate_json(raw)
    except (OSError, ValueError, ValidationError):
        LOG.exception("Failed to load snapshot from storage", extra={"key": key})
        return None


def save_snapshot(storage: KeyValueStorage | None, key: str, snapshot: BaseModel) -> None:
    """Write a snapshot; faults are logged and swallowed."""

    if storage is None:
        return
    try:
        storage.set_item(key, snapshot.model_dump_json(by_alias=True))
    except (OSError, ValueError):
        LOG.exception("Failed to save snapshot to storage", extra={"key": key})


def remove_snapshot(storage: KeyValueStorage | None, key: str) -> None:
    if storage is None:
        return
    try:
        storage.remove_item(key)
    except (OSError, ValueError):
        LOG.exception("Failed to remove snapshot from storage", extra={"key": key})


__all__ = [
    "ConnectionSnapshot",
    "JsonFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "ProfilesSnapshot",
    "ServerSnapshot",
    "load_snapshot",
    "remove_snapshot",
    "save_snapshot",
]
