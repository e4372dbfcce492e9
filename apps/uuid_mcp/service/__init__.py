"""Dispatch layer for the UUID server (lazy exports)."""
from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING

__all__ = [
    "ActionDescriptor",
    "ActionRegistry",
    "CanonicalError",
    "McpError",
    "RequestDispatcher",
    "ResourceDescriptor",
]

_EXPORT_MAP = {
    "ActionDescriptor": "apps.uuid_mcp.service.registry",
    "ActionRegistry": "apps.uuid_mcp.service.registry",
    "CanonicalError": "apps.uuid_mcp.service.errors",
    "McpError": "apps.uuid_mcp.service.errors",
    "RequestDispatcher": "apps.uuid_mcp.service.dispatcher",
    "ResourceDescriptor": "apps.uuid_mcp.service.registry",
}

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from .dispatcher import RequestDispatcher
    from .errors import CanonicalError, McpError
    from .registry import ActionDescriptor, ActionRegistry, ResourceDescriptor


def __getattr__(name: str):  # pragma: no cover - thin loader
    if name not in _EXPORT_MAP:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module = import_module(_EXPORT_MAP[name])
    value = getattr(module, name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:  # pragma: no cover - thin loader
    return sorted(set(globals()) | set(__all__))
