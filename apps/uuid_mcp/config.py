from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace

__all__ = ["ServerSettings"]

_ENV_PREFIX = "UUID_MCP_"


@dataclass(frozen=True, slots=True)
class ServerSettings:
    """Static configuration shared by every server instance."""

    server_name: str = "uuid-mcp"
    server_version: str = "1.0.0"
    history_capacity: int = 100
    history_window: int = 20
    max_generate_count: int = 10
    keepalive_seconds: float = 15.0

    def __post_init__(self) -> None:
        if not self.server_name:
            raise ValueError("server_name must be a non-empty string")
        if self.history_capacity <= 0:
            raise ValueError("history_capacity must be a positive integer")
        if self.history_window <= 0:
            raise ValueError("history_window must be a positive integer")
        if self.max_generate_count <= 0:
            raise ValueError("max_generate_count must be a positive integer")
        if self.keepalive_seconds <= 0:
            raise ValueError("keepalive_seconds must be positive")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ServerSettings:
        env = os.environ if environ is None else environ
        settings = cls()
        overrides: dict[str, object] = {}
        capacity = env.get(f"{_ENV_PREFIX}HISTORY_CAPACITY")
        if capacity:
            overrides["history_capacity"] = int(capacity)
        window = env.get(f"{_ENV_PREFIX}HISTORY_WINDOW")
        if window:
            overrides["history_window"] = int(window)
        keepalive = env.get(f"{_ENV_PREFIX}KEEPALIVE_SECONDS")
        if keepalive:
            overrides["keepalive_seconds"] = float(keepalive)
        return replace(settings, **overrides) if overrides else settings
