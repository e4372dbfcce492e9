from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

__all__ = [
    "CanonicalError",
    "DuplicateName",
    "GenerationUnavailable",
    "InternalError",
    "InvalidParams",
    "InvalidRequest",
    "InvalidSession",
    "McpError",
    "MethodNotFound",
    "ParseError",
    "ResourceNotFound",
]


@dataclass(frozen=True, slots=True)
class _WireError:
    """How one canonical code is rendered on each transport."""

    jsonrpc_code: int
    http_status: int
    message: str
    retryable: bool = False

    def payload(self, canonical_code: str, message: str | None = None) -> dict[str, object]:
        return {
            "code": self.jsonrpc_code,
            "message": message or self.message,
            "data": {
                "canonical": canonical_code,
                "httpStatus": self.http_status,
                "retryable": self.retryable,
            },
        }


class CanonicalError:
    """Canonical error codes shared by the stdio and HTTP transports."""

    # Only internal failures are retryable.
    _TABLE: dict[str, _WireError] = {
        "PARSE_ERROR": _WireError(-32700, 400, "Parse error"),
        "INVALID_REQUEST": _WireError(-32600, 400, "Invalid request"),
        "METHOD_NOT_FOUND": _WireError(-32601, 404, "Method not found"),
        "INVALID_PARAMS": _WireError(-32602, 400, "Invalid params"),
        "RESOURCE_NOT_FOUND": _WireError(-32002, 404, "Resource not found"),
        "INVALID_SESSION": _WireError(
            -32000, 400, "Invalid session. Send initialize request first."
        ),
        "INTERNAL_ERROR": _WireError(-32603, 500, "Internal error", retryable=True),
    }

    @classmethod
    def codes(cls) -> Sequence[str]:
        return tuple(cls._TABLE)

    @classmethod
    def _wire(cls, code: str) -> _WireError:
        try:
            return cls._TABLE[code]
        except KeyError:
            raise KeyError(f"{code} does not have a mapping to a wire error") from None

    @classmethod
    def to_http_status(cls, code: str) -> int:
        return cls._wire(code).http_status

    @classmethod
    def to_jsonrpc_error(cls, code: str, message: str | None = None) -> dict[str, object]:
        return cls._wire(code).payload(code, message)


class McpError(Exception):
    """Base class for failures that surface as JSON-RPC error responses."""

    canonical_code = "INTERNAL_ERROR"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or CanonicalError.to_jsonrpc_error(self.canonical_code)["message"]
        super().__init__(self.message)

    @property
    def http_status(self) -> int:
        return CanonicalError.to_http_status(self.canonical_code)

    def to_jsonrpc_error(self) -> dict[str, object]:
        return CanonicalError.to_jsonrpc_error(self.canonical_code, self.message)


class ParseError(McpError):
    canonical_code = "PARSE_ERROR"


class InvalidRequest(McpError):
    canonical_code = "INVALID_REQUEST"


class MethodNotFound(McpError):
    canonical_code = "METHOD_NOT_FOUND"


class InvalidParams(McpError):
    canonical_code = "INVALID_PARAMS"


class ResourceNotFound(McpError):
    canonical_code = "RESOURCE_NOT_FOUND"


class InvalidSession(McpError):
    canonical_code = "INVALID_SESSION"


class InternalError(McpError):
    canonical_code = "INTERNAL_ERROR"


class GenerationUnavailable(InternalError):
    """The random source could not supply bytes."""


class DuplicateName(ValueError):
    """An action name or resource URI was registered twice."""
