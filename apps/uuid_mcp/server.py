from __future__ import annotations

from apps.uuid_mcp.config import ServerSettings
from apps.uuid_mcp.history import HistoryLog
from apps.uuid_mcp.identifiers import IdentifierCodec
from apps.uuid_mcp.logging import JsonLogWriter
from apps.uuid_mcp.service.dispatcher import RequestDispatcher
from apps.uuid_mcp.service.tools import build_registry
from apps.uuid_mcp.validation import ArgumentValidator

__all__ = ["create_uuid_server"]


def create_uuid_server(
    settings: ServerSettings | None = None,
    *,
    codec: IdentifierCodec | None = None,
    history: HistoryLog | None = None,
    transport: str = "stdio",
    session_id: str | None = None,
    log_writer: JsonLogWriter | None = None,
    validator: ArgumentValidator | None = None,
) -> RequestDispatcher:
    """Build one server instance: a fresh history, registry and dispatcher."""

    settings = settings or ServerSettings()
    history = history if history is not None else HistoryLog(settings.history_capacity)
    registry = build_registry(
        history=history,
        codec=codec or IdentifierCodec(),
        settings=settings,
    )
    return RequestDispatcher(
        registry=registry,
        settings=settings,
        validator=validator,
        transport=transport,
        session_id=session_id,
        log_writer=log_writer,
    )
