from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import sys
from pathlib import Path
from typing import Any, cast

import uvicorn

from apps.uuid_mcp.config import ServerSettings
from apps.uuid_mcp.http import create_app
from apps.uuid_mcp.logging import JsonLogWriter
from apps.uuid_mcp.server import create_uuid_server
from apps.uuid_mcp.stdio import JsonRpcStdioServer

LOGGER = logging.getLogger(__name__)

_UVICORN_LOG_LEVELS = {
    "DEBUG": "debug",
    "INFO": "info",
    "WARN": "warning",
    "ERROR": "error",
}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the UUID MCP server")
    parser.add_argument("--http", action="store_true", help="Enable HTTP transport")
    parser.add_argument(
        "--stdio",
        action="store_true",
        help="Enable STDIO JSON-RPC transport (default when no transport is given)",
    )
    parser.add_argument("--host", default="127.0.0.1", help="HTTP host")
    parser.add_argument("--port", type=int, default=3000, help="HTTP port")
    parser.add_argument(
        "--max-connections",
        type=int,
        default=256,
        help="Maximum concurrent HTTP connections",
    )
    parser.add_argument(
        "--shutdown-grace",
        type=int,
        default=10,
        help="Grace period in seconds for shutdown",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARN", "ERROR"],
        default="INFO",
        help="Logging level",
    )
    parser.add_argument(
        "--log-dir",
        default=None,
        help="Directory for structured request logs (disabled when omitted)",
    )
    return parser.parse_args(argv)


def configure_logging(level: str) -> None:
    # stdout carries protocol bytes in stdio mode; diagnostics go to stderr only.
    logging.basicConfig(
        level=getattr(logging, "WARNING" if level == "WARN" else level),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def _run_server(args: argparse.Namespace) -> None:
    settings = ServerSettings.from_env()
    log_writer = JsonLogWriter(Path(args.log_dir)) if args.log_dir else None

    if not args.http and not args.stdio:
        args.stdio = True

    tasks: list[asyncio.Task[Any]] = []
    http_server: uvicorn.Server | None = None
    http_task: asyncio.Task[Any] | None = None
    try:
        if args.http:
            config = uvicorn.Config(
                create_app(settings, log_writer=log_writer),
                host=args.host,
                port=args.port,
                log_level=_UVICORN_LOG_LEVELS[args.log_level],
                access_log=False,
                limit_concurrency=args.max_connections,
                timeout_graceful_shutdown=args.shutdown_grace,
            )
            http_server = uvicorn.Server(config)
            LOGGER.info("UUID MCP Server started (HTTP mode)")
            LOGGER.info("  MCP Endpoint: http://%s:%d/mcp", args.host, args.port)
            LOGGER.info("  Health Check: http://%s:%d/health", args.host, args.port)
            if not args.stdio:
                await http_server.serve()
                return
            http_task = asyncio.create_task(http_server.serve())
            tasks.append(http_task)

        if args.stdio:
            dispatcher = create_uuid_server(settings, transport="stdio", log_writer=log_writer)
            stdio_server = JsonRpcStdioServer(dispatcher)
            LOGGER.info("UUID MCP Server started (stdio mode)")
            tasks.append(asyncio.create_task(stdio_server.serve_stdio()))

        if tasks:
            try:
                await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
            finally:
                for task in tasks:
                    if task is http_task and http_server is not None:
                        cast(Any, http_server).should_exit = True
                    if not task.done():
                        task.cancel()
                    with contextlib.suppress(asyncio.CancelledError):
                        await task
    finally:
        if log_writer is not None:
            log_writer.close()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)
    try:
        asyncio.run(_run_server(args))
    except KeyboardInterrupt:
        return 0
    except Exception:
        LOGGER.exception("Failed to start server")
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
