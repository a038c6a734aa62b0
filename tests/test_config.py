"""Tests for AppConfig helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from hasuraui import config as config_module
from hasuraui.config import AppConfig, load_config, save_config
from hasuraui.connections import ConnectionStore
from hasuraui.session import SessionManager


def test_load_config_returns_defaults_when_missing(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config_module, "CONFIG_FILE", tmp_path / "config.toml")

    result = load_config()

    assert result == AppConfig()


def test_load_config_reads_values(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text(
        f"""
storage_path = "{(tmp_path / 'state.json').as_posix()}"
profiles_key = "servers"
request_timeout = 3
test_delay = 0.25
connection_key = ""
"""
    )
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_path)

    result = load_config()

    assert result.storage_path == tmp_path / "state.json"
    assert result.profiles_key == "servers"
    assert result.connection_key == "hasura_connection"
    assert result.request_timeout == 3.0
    assert result.test_delay == 0.25


def test_load_config_handles_toml_errors(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text("storage_path = [unterminated")
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_path)

    result = load_config()

    assert result == AppConfig()


def test_save_config_round_trips(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "config.toml"
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_path)
    config = AppConfig(request_timeout=2.5).with_storage_path(tmp_path / "state.json")

    save_config(config)

    content = config_path.read_text()
    assert 'profiles_key = "hasura_servers"' in content
    assert "request_timeout = 2.5" in content
    assert load_config() == config


def test_stores_from_config_share_storage_file(tmp_path: Path) -> None:
    config = AppConfig().with_storage_path(tmp_path / "state.json")

    manager = SessionManager.from_config(config)
    server_id = manager.add_connection("S1", "http://h", "pw")
    store = ConnectionStore.from_config(config)
    store.update_connection("http://single", "pw")

    assert SessionManager.from_config(config).selected_id == server_id
    assert ConnectionStore.from_config(config).endpoint_url == "http://single"
