import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from mcp_filesystem.api import health, tools
from mcp_filesystem.config import Settings, get_settings
from mcp_filesystem.middleware.request_id import RequestIDMiddleware
from mcp_filesystem.tools import create_tools, list_tool_specs
from mcp_filesystem.version import get_version

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create the HTTP API application.

    Args:
        settings: Settings to serve with (defaults to the process-wide settings)

    Raises:
        ConfigurationError: If no auth token is configured
    """
    settings = settings or get_settings()
    settings.validate_api_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Application startup and shutdown."""
        logger.info(
            "Filesystem tool API ready",
            extra={
                "tool_count": len(list_tool_specs()),
                "root_path": settings.root_path,
            },
        )
        yield
        logger.info("Filesystem tool API shutting down")

    app = FastAPI(
        title="MCP Filesystem",
        description="Filesystem tools for agents",
        version=get_version(),
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.tools = create_tools(settings)

    app.add_middleware(RequestIDMiddleware)

    app.include_router(health.router)
    app.include_router(tools.router)

    return app
