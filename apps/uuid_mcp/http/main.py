from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from apps.uuid_mcp.config import ServerSettings
from apps.uuid_mcp.identifiers import IdentifierCodec
from apps.uuid_mcp.logging import JsonLogWriter
from apps.uuid_mcp.server import create_uuid_server
from apps.uuid_mcp.validation import ArgumentValidator

from .routes import build_router
from .sessions import SessionManager

__all__ = ["create_app"]

LOGGER = logging.getLogger(__name__)


def create_app(
    settings: ServerSettings | None = None,
    *,
    codec: IdentifierCodec | None = None,
    log_writer: JsonLogWriter | None = None,
    manager: SessionManager | None = None,
    enable_openapi: bool = False,
) -> FastAPI:
    """Return a FastAPI application serving the session-oriented MCP endpoint."""

    settings = settings or ServerSettings()
    validator = ArgumentValidator()

    def _new_server(session_id: str):
        return create_uuid_server(
            settings,
            codec=codec,
            transport="http",
            session_id=session_id,
            log_writer=log_writer,
            validator=validator,
        )

    sessions = manager or SessionManager(_new_server)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        try:
            yield
        finally:
            closed = sessions.close_all()
            if closed:
                LOGGER.info("Closed %d session(s) on shutdown", closed)

    docs_url = "/docs" if enable_openapi else None
    openapi_url = "/openapi.json" if enable_openapi else None
    app = FastAPI(
        title="UUID MCP Server",
        version=settings.server_version,
        docs_url=docs_url,
        openapi_url=openapi_url,
        lifespan=lifespan,
    )
    app.state.sessions = sessions
    app.include_router(build_router(sessions, settings))
    return app
