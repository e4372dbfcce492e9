"""Process-pipe transport."""

from .server import JsonRpcStdioServer

__all__ = ["JsonRpcStdioServer"]
