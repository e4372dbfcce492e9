from __future__ import annotations

import pytest

from apps.uuid_mcp.config import ServerSettings


def test_defaults() -> None:
    settings = ServerSettings()
    assert settings.server_name == "uuid-mcp"
    assert settings.server_version == "1.0.0"
    assert settings.history_capacity == 100
    assert settings.history_window == 20
    assert settings.max_generate_count == 10


def test_from_env_overrides() -> None:
    settings = ServerSettings.from_env(
        {
            "UUID_MCP_HISTORY_CAPACITY": "50",
            "UUID_MCP_HISTORY_WINDOW": "5",
            "UUID_MCP_KEEPALIVE_SECONDS": "2.5",
            "UNRELATED": "x",
        }
    )
    assert settings.history_capacity == 50
    assert settings.history_window == 5
    assert settings.keepalive_seconds == 2.5


def test_from_env_without_overrides() -> None:
    assert ServerSettings.from_env({}) == ServerSettings()


def test_from_env_reads_process_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("UUID_MCP_HISTORY_WINDOW", "7")
    assert ServerSettings.from_env().history_window == 7


@pytest.mark.parametrize(
    "overrides",
    [
        {"server_name": ""},
        {"history_capacity": 0},
        {"history_window": -1},
        {"max_generate_count": 0},
        {"keepalive_seconds": 0},
    ],
)
def test_rejects_invalid_values(overrides: dict) -> None:
    with pytest.raises(ValueError):
        ServerSettings(**overrides)


def test_settings_are_frozen() -> None:
    settings = ServerSettings()
    with pytest.raises(AttributeError):
        settings.history_window = 3  # type: ignore[misc]
