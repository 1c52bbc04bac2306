"""
MCP server exposing the tool registry through FastMCP.

Every registered operation becomes an MCP tool with the same name and the
camelCase wire parameters of its request model. Tool results are the
operation envelope rendered as JSON text.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Annotated, Any

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from mcp_filesystem.tools import list_tool_specs, render_envelope

if TYPE_CHECKING:
    from mcp_filesystem.config import Settings
    from mcp_filesystem.tools import FileSystemTools, ToolSpec

logger = logging.getLogger(__name__)

# CLI transport name -> FastMCP transport name
MCP_TRANSPORTS = {
    "stdio": "stdio",
    "sse": "sse",
    "http": "streamable-http",
}


def tool_signature(spec: ToolSpec) -> inspect.Signature:
    """Build the keyword-only signature FastMCP derives the tool input schema from."""
    parameters = []
    for field_name, field in spec.request_model.model_fields.items():
        annotation = Annotated[field.annotation, Field(description=field.description)]
        default = inspect.Parameter.empty if field.is_required() else field.default
        parameters.append(
            inspect.Parameter(
                field.alias or field_name,
                inspect.Parameter.KEYWORD_ONLY,
                default=default,
                annotation=annotation,
            )
        )
    return inspect.Signature(parameters, return_annotation=str)


def build_tool_function(tools: FileSystemTools, spec: ToolSpec) -> Callable[..., Awaitable[str]]:
    """
    Wrap a registered operation as an async MCP tool function.

    The blocking filesystem work runs in a worker thread so the MCP event
    loop keeps serving other requests.
    """

    async def call_tool(**params: Any) -> str:
        envelope = await asyncio.to_thread(tools.dispatch, spec.name, params)
        return render_envelope(envelope)

    call_tool.__name__ = spec.name
    call_tool.__doc__ = spec.description
    call_tool.__signature__ = tool_signature(spec)  # type: ignore[attr-defined]
    return call_tool


def build_mcp_app(tools: FileSystemTools, settings: Settings) -> FastMCP:
    """Create the FastMCP server with every registered tool."""
    mcp = FastMCP(settings.server_name, host=settings.host, port=settings.port)

    for spec in list_tool_specs():
        mcp.add_tool(
            build_tool_function(tools, spec),
            name=spec.name,
            description=spec.description,
        )

    logger.debug("MCP tools registered", extra={"tool_count": len(list_tool_specs())})
    return mcp


def run_mcp_server(mcp: FastMCP, transport: str) -> None:
    """Serve the MCP app on stdio, SSE or streamable HTTP (blocks until shutdown)."""
    logger.info(
        "Starting MCP server",
        extra={"transport": transport, "host": mcp.settings.host, "port": mcp.settings.port},
    )
    mcp.run(transport=MCP_TRANSPORTS[transport])
