"""JSON-RPC 2.0 wire models."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError

from .errors import InvalidParams, InvalidRequest, McpError

__all__ = [
    "JsonRpcRequest",
    "error_response",
    "is_initialize_request",
    "parse_request",
    "success_response",
]

RequestId = StrictStr | StrictInt | None


class JsonRpcRequest(BaseModel):
    """An inbound request or notification."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    jsonrpc: Literal["2.0"] = "2.0"
    id: RequestId = None
    method: str = Field(..., min_length=1)
    params: dict[str, Any] | list[Any] | None = None
    has_id: bool = Field(default=True, exclude=True)

    @property
    def is_notification(self) -> bool:
        return not self.has_id

    def params_mapping(self) -> Mapping[str, Any]:
        if self.params is None:
            return {}
        if isinstance(self.params, Mapping):
            return self.params
        raise InvalidParams("Invalid params: expected object")


def parse_request(message: object) -> JsonRpcRequest:
    """Build a :class:`JsonRpcRequest`, raising :class:`InvalidRequest` on bad shape."""

    if not isinstance(message, Mapping):
        raise InvalidRequest()
    try:
        return JsonRpcRequest.model_validate({**message, "has_id": "id" in message})
    except ValidationError as exc:
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()))
        detail = f"{location}: {first.get('msg')}" if location else "malformed request"
        raise InvalidRequest(f"Invalid request: {detail}") from exc


def is_initialize_request(message: object) -> bool:
    return (
        isinstance(message, Mapping)
        and message.get("method") == "initialize"
        and "id" in message
    )


def success_response(request_id: Any, result: Mapping[str, Any]) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "result": dict(result)}


def error_response(request_id: Any, error: McpError) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "error": error.to_jsonrpc_error()}
