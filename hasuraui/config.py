"""App configuration loading helpers."""

from __future__ import annotations

from pathlib import Path

import tomllib

from pydantic import BaseModel, Field

CONFIG_FILE = Path.home() / ".config" / "hasuraui" / "config.toml"
DEFAULT_STORAGE_FILE = Path.home() / ".config" / "hasuraui" / "storage.json"


class AppConfig(BaseModel):
    """Shape of the application configuration file."""

    storage_path: Path = Field(default_factory=lambda: DEFAULT_STORAGE_FILE)
    connection_key: str = "hasura_connection"
    profiles_key: str = "hasura_servers"
    request_timeout: float = 10.0
    test_delay: float = 0.5

    def with_storage_path(self, path: Path) -> AppConfig:
        """Return a copy pointing at a different storage file."""

        return self.model_copy(update={"storage_path": path})


def load_config() -> AppConfig:
    """Load configuration from disk; fall back to defaults if missing."""

    try:
        data = _read_config_file()
    except FileNotFoundError:
        return AppConfig()
    except (tomllib.TOMLDecodeError, OSError):
        return AppConfig()
    return AppConfig(**data)


def save_config(config: AppConfig) -> None:
    """Persist configuration to disk."""

    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    lines: list[str] = [
        f'storage_path = "{config.storage_path.as_posix()}"',
        f'connection_key = "{config.connection_key}"',
        f'profiles_key = "{config.profiles_key}"',
        f"request_timeout = {config.request_timeout}",
        f"test_delay = {config.test_delay}",
    ]
    CONFIG_FILE.write_text("\n".join(lines) + "\n")


def _read_config_file() -> dict[str, object]:
    with CONFIG_FILE.open("rb") as handle:
        raw = tomllib.load(handle)
    data: dict[str, object] = {}
    storage_path = raw.get("storage_path")
    if isinstance(storage_path, str) and storage_path:
        data["storage_path"] = Path(storage_path).expanduser()
    for key in ("connection_key", "profiles_key"):
        value = raw.get(key)
        if isinstance(value, str) and value:
            data[key] = value
    for key in ("request_timeout", "test_delay"):
        value = raw.get(key)
        # bool is an int subclass
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0:
            data[key] = float(value)
    return data


__all__ = ["AppConfig", "CONFIG_FILE", "load_config", "save_config"]
