from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

from apps.uuid_mcp.config import ServerSettings
from apps.uuid_mcp.logging import JsonLogWriter, RequestLogEvent
from apps.uuid_mcp.observability import log_event
from apps.uuid_mcp.validation import ArgumentValidator

from .errors import InternalError, InvalidParams, McpError, MethodNotFound, ResourceNotFound
from .models import JsonRpcRequest, error_response, parse_request, success_response
from .registry import ActionRegistry

__all__ = ["LATEST_PROTOCOL_VERSION", "SUPPORTED_PROTOCOL_VERSIONS", "RequestDispatcher"]

LOGGER = logging.getLogger(__name__)

LATEST_PROTOCOL_VERSION = "2025-06-18"
SUPPORTED_PROTOCOL_VERSIONS = (LATEST_PROTOCOL_VERSION, "2025-03-26", "2024-11-05")

MethodHandler = Callable[[Mapping[str, Any]], Mapping[str, Any]]


def _safe_id(message: object) -> Any:
    if isinstance(message, Mapping):
        value = message.get("id")
        if isinstance(value, (str, int)) and not isinstance(value, bool):
            return value
    return None


class RequestDispatcher:
    """Resolve JSON-RPC requests against an :class:`ActionRegistry`."""

    def __init__(
        self,
        *,
        registry: ActionRegistry,
        settings: ServerSettings | None = None,
        validator: ArgumentValidator | None = None,
        transport: str = "stdio",
        session_id: str | None = None,
        log_writer: JsonLogWriter | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._registry = registry
        self._settings = settings or ServerSettings()
        self._validator = validator or ArgumentValidator()
        self._transport = transport
        self._session_id = session_id
        self._log_writer = log_writer
        self._logger = logger or LOGGER
        self._initialized = False
        self._methods: dict[str, MethodHandler] = {
            "initialize": self._initialize,
            "ping": self._ping,
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
            "resources/list": self._list_resources,
            "resources/read": self._read_resource,
            "resources/templates/list": self._list_resource_templates,
        }

    @property
    def registry(self) -> ActionRegistry:
        return self._registry

    @property
    def initialized(self) -> bool:
        return self._initialized

    def handle(self, message: object) -> dict[str, Any] | None:
        """Return the wire response for ``message``, or ``None`` for notifications."""

        start = time.perf_counter()
        try:
            request = parse_request(message)
        except McpError as exc:
            response = error_response(_safe_id(message), exc)
            self._record(None, None, exc, start)
            return response

        if request.is_notification:
            self._handle_notification(request)
            return None

        error: McpError | None = None
        try:
            result = self._dispatch(request)
        except McpError as exc:
            error = exc
        except Exception as exc:
            self._logger.exception("Unhandled error while handling %s", request.method)
            error = InternalError(f"Internal error: {exc}")

        self._record(request.method, request.id, error, start)
        if error is not None:
            return error_response(request.id, error)
        return success_response(request.id, result)

    def _dispatch(self, request: JsonRpcRequest) -> Mapping[str, Any]:
        method = self._methods.get(request.method)
        if method is None:
            raise MethodNotFound(f"Method not found: {request.method}")
        return method(request.params_mapping())

    def _handle_notification(self, request: JsonRpcRequest) -> None:
        if request.method == "notifications/initialized":
            self._initialized = True
        log_event(
            transport=self._transport,
            status="ok",
            method=request.method,
            session=self._session_id,
            notification=True,
        )

    # Protocol methods -----------------------------------------------------------------

    def _initialize(self, params: Mapping[str, Any]) -> Mapping[str, Any]:
        requested = params.get("protocolVersion")
        if isinstance(requested, str) and requested in SUPPORTED_PROTOCOL_VERSIONS:
            version = requested
        else:
            version = LATEST_PROTOCOL_VERSION
        client = params.get("clientInfo")
        if isinstance(client, Mapping):
            self._logger.info(
                "Client connected: %s %s", client.get("name"), client.get("version")
            )
        return {
            "protocolVersion": version,
            "capabilities": {
                "tools": {"listChanged": False},
                "resources": {"listChanged": False},
            },
            "serverInfo": {
                "name": self._settings.server_name,
                "version": self._settings.server_version,
            },
        }

    def _ping(self, params: Mapping[str, Any]) -> Mapping[str, Any]:
        return {}

    def _list_tools(self, params: Mapping[str, Any]) -> Mapping[str, Any]:
        return {"tools": [action.to_listing() for action in self._registry.list_actions()]}

    def _list_resources(self, params: Mapping[str, Any]) -> Mapping[str, Any]:
        return {
            "resources": [
                resource.to_listing() for resource in self._registry.list_resources()
            ]
        }

    def _list_resource_templates(self, params: Mapping[str, Any]) -> Mapping[str, Any]:
        return {"resourceTemplates": []}

    def _call_tool(self, params: Mapping[str, Any]) -> Mapping[str, Any]:
        name = params.get("name")
        if not isinstance(name, str) or not name:
            raise InvalidParams("Invalid params: name must be a non-empty string")
        action = self._registry.resolve_action(name)
        if action is None:
            raise MethodNotFound(f"Tool not found: {name}")
        arguments = self._validator.validate(action.input_schema, params.get("arguments"))
        return self._invoke(name, lambda: action.handler(arguments))

    def _read_resource(self, params: Mapping[str, Any]) -> Mapping[str, Any]:
        uri = params.get("uri")
        if not isinstance(uri, str) or not uri:
            raise InvalidParams("Invalid params: uri must be a non-empty string")
        resource = self._registry.resolve_resource(uri)
        if resource is None:
            raise ResourceNotFound(f"Resource not found: {uri}")
        return self._invoke(uri, lambda: resource.handler(uri))

    def _invoke(self, target: str, call: Callable[[], Mapping[str, Any]]) -> Mapping[str, Any]:
        try:
            return dict(call())
        except InternalError:
            self._logger.exception("Handler for %s failed", target)
            raise
        except Exception as exc:
            self._logger.exception("Handler for %s failed", target)
            raise InternalError(f"Internal error in {target}: {exc}") from exc

    # Logging --------------------------------------------------------------------------

    def _record(
        self,
        method: str | None,
        request_id: Any,
        error: McpError | None,
        start: float,
    ) -> None:
        duration_ms = (time.perf_counter() - start) * 1000.0
        status = "ok" if error is None else "error"
        log_event(
            transport=self._transport,
            status=status,
            method=method,
            session=self._session_id,
            request_id=request_id,
            error=error.canonical_code if error is not None else None,
        )
        if self._log_writer is None:
            return
        self._log_writer.write(
            RequestLogEvent(
                ts=datetime.now(UTC),
                transport=self._transport,
                session_id=self._session_id,
                method=method,
                request_id=request_id,
                status=status,
                duration_ms=duration_ms,
                error=error.to_jsonrpc_error() if error is not None else None,
            )
        )
