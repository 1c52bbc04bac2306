"""
Command-line entry point.

Usage:
    mcp-filesystem                               # MCP over stdio
    mcp-filesystem --transport http --port 8787  # MCP over streamable HTTP
    mcp-filesystem --transport api --config config.yaml
"""

from __future__ import annotations

import argparse
import logging
import sys

import uvicorn

from mcp_filesystem.config import load_settings, set_settings
from mcp_filesystem.exceptions import ConfigurationError
from mcp_filesystem.logging_config import configure_json_logging
from mcp_filesystem.main import create_app
from mcp_filesystem.mcp_server import build_mcp_app, run_mcp_server
from mcp_filesystem.tools import create_tools

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments"""
    parser = argparse.ArgumentParser(
        prog="mcp-filesystem",
        description="Serve filesystem tools over MCP or an HTTP API",
    )
    parser.add_argument("--config", help="Path to the YAML config file (default: $CONFIG_PATH or ./config.yaml)")
    parser.add_argument(
        "--transport",
        choices=["stdio", "sse", "http", "api"],
        help="stdio/sse/http serve MCP; api serves the HTTP tool API (default: from config, else stdio)",
    )
    parser.add_argument("--host", help="Bind address for network transports")
    parser.add_argument("--port", type=int, help="Port for network transports")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        settings = load_settings(
            args.config,
            transport=args.transport,
            host=args.host,
            port=args.port,
        )
        configure_json_logging(log_level=settings.log_level, use_json=settings.log_json)
        set_settings(settings)

        if settings.transport == "api":
            app = create_app(settings)
            logger.info(
                "Starting HTTP API",
                extra={"host": settings.host, "port": settings.port},
            )
            uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
        else:
            run_mcp_server(build_mcp_app(create_tools(settings), settings), settings.transport)
    except ConfigurationError as e:
        print(f"Configuration error: {e.message}", file=sys.stderr)
        return 2

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
