from __future__ import annotations

import json
from collections.abc import Iterator
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse

from apps.uuid_mcp.config import ServerSettings
from apps.uuid_mcp.service.errors import McpError, ParseError
from apps.uuid_mcp.service.models import error_response, is_initialize_request

from .sessions import Session, SessionManager

__all__ = ["MCP_PATH", "SESSION_HEADER", "build_router"]

MCP_PATH = "/mcp"
SESSION_HEADER = "Mcp-Session-Id"


def _single_event(payload: dict[str, Any]) -> Iterator[str]:
    yield f"event: message\ndata: {json.dumps(payload)}\n\n"


def _wants_event_stream(request: Request) -> bool:
    accept = request.headers.get("accept", "").lower()
    return "text/event-stream" in accept and "application/json" not in accept


def _render_error(error: McpError) -> JSONResponse:
    return JSONResponse(error_response(None, error), status_code=error.http_status)


def build_router(manager: SessionManager, settings: ServerSettings) -> APIRouter:
    router = APIRouter()

    def _render(request: Request, session: Session, payload: dict[str, Any]) -> Response:
        headers = {SESSION_HEADER: session.id}
        if _wants_event_stream(request):
            return StreamingResponse(
                _single_event(payload),
                media_type="text/event-stream",
                headers=headers,
            )
        return JSONResponse(payload, headers=headers)

    @router.post(MCP_PATH)
    async def post_message(request: Request) -> Response:
        try:
            body = await request.json()
        except ValueError:
            return _render_error(ParseError("Parse error: invalid JSON"))

        if is_initialize_request(body):
            # Any token sent with a handshake is ignored; a new session is minted.
            session = manager.create()
            response = session.handle(body)
            if response is None or "error" in response:
                manager.close(session.id)
                return JSONResponse(response, status_code=400)
            return _render(request, session, response)

        try:
            session = manager.get(request.headers.get(SESSION_HEADER))
        except McpError as exc:
            return _render_error(exc)
        response = session.handle(body)
        if response is None:
            return Response(status_code=202, headers={SESSION_HEADER: session.id})
        return _render(request, session, response)

    @router.get(MCP_PATH)
    async def open_stream(request: Request) -> Response:
        try:
            session = manager.get(request.headers.get(SESSION_HEADER))
        except McpError as exc:
            return _render_error(exc)
        return StreamingResponse(
            session.stream(keepalive=settings.keepalive_seconds),
            media_type="text/event-stream",
            headers={SESSION_HEADER: session.id, "Cache-Control": "no-cache"},
        )

    @router.delete(MCP_PATH)
    async def terminate(request: Request) -> Response:
        try:
            session = manager.get(request.headers.get(SESSION_HEADER))
        except McpError as exc:
            return _render_error(exc)
        manager.close(session.id)
        return JSONResponse({"closed": True})

    @router.get("/health")
    async def health() -> dict[str, Any]:
        return {
            "status": "ok",
            "server": settings.server_name,
            "version": settings.server_version,
            "activeSessions": len(manager),
        }

    return router
