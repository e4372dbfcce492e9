from __future__ import annotations

import asyncio
import json
import sys
from collections.abc import Mapping
from typing import IO, Any

from apps.uuid_mcp.service.dispatcher import RequestDispatcher
from apps.uuid_mcp.service.errors import ParseError
from apps.uuid_mcp.service.models import error_response

__all__ = ["JsonRpcStdioServer"]


class JsonRpcStdioServer:
    """Newline-delimited JSON-RPC 2.0 over a pair of byte streams.

    The process has a single implicit session, so one dispatcher serves every
    request for the lifetime of the server.
    """

    def __init__(self, dispatcher: RequestDispatcher) -> None:
        self._dispatcher = dispatcher

    @property
    def dispatcher(self) -> RequestDispatcher:
        return self._dispatcher

    async def handle_request(self, message: Mapping[str, Any] | Any) -> dict[str, Any] | None:
        return self._dispatcher.handle(message)

    async def handle_line(self, line: str | bytes) -> dict[str, Any] | None:
        payload = line.strip()
        if not payload:
            return None
        try:
            if isinstance(payload, bytes):
                payload = payload.decode("utf-8")
            message = json.loads(payload)
        except UnicodeDecodeError:
            return error_response(None, ParseError("Parse error: input is not valid UTF-8"))
        except json.JSONDecodeError:
            return error_response(None, ParseError("Parse error: invalid JSON"))
        return await self.handle_request(message)

    async def serve_stdio(
        self,
        *,
        reader: IO[bytes] | IO[str] | None = None,
        writer: IO[str] | None = None,
    ) -> None:
        """Serve until ``reader`` reaches EOF.

        Defaults to the raw stdin buffer, so undecodable input becomes a parse
        error response instead of ending the loop, and to stdout for replies.
        """

        reader = reader or sys.stdin.buffer
        writer = writer or sys.stdout
        while True:
            line = await asyncio.to_thread(reader.readline)
            if not line:
                break
            response = await self.handle_line(line)
            if response is None:
                continue
            await asyncio.to_thread(writer.write, json.dumps(response) + "\n")
            await asyncio.to_thread(writer.flush)
