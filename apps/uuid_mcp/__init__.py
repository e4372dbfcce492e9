"""UUID MCP server package."""

from apps.uuid_mcp.http import create_app
from apps.uuid_mcp.server import create_uuid_server

__all__ = ["create_app", "create_uuid_server"]
