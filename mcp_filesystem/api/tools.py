"""Tool invocation API endpoints."""

from __future__ import annotations

import asyncio
import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from mcp_filesystem.dependencies import get_tools, verify_token
from mcp_filesystem.exceptions import UnknownToolError
from mcp_filesystem.tools import FileSystemTools, list_tool_specs  # noqa: TC001
from mcp_filesystem.utils.error_handling import format_exception_for_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/tools", tags=["tools"], dependencies=[Depends(verify_token)])


class ToolDescription(BaseModel):
    """A tool as advertised to API clients."""

    name: str
    description: str
    parameters: dict[str, Any]


@router.get("", response_model=list[ToolDescription])
async def list_tools() -> list[ToolDescription]:
    """List every tool with its parameter JSON schema."""
    return [
        ToolDescription(
            name=spec.name,
            description=spec.description,
            parameters=spec.parameters_schema(),
        )
        for spec in list_tool_specs()
    ]


@router.post("/{name}")
async def call_tool(
    name: str,
    params: Annotated[dict[str, Any] | None, Body()] = None,
    tools: FileSystemTools = Depends(get_tools),
) -> JSONResponse:
    """
    Run a tool and return its envelope.

    Success and error envelopes are both returned with 200; the envelope's
    ``error`` field tells them apart.
    """
    try:
        envelope = await asyncio.to_thread(tools.dispatch, name, params or {})
    except UnknownToolError as exc:
        logger.info("Unknown tool requested", extra={"tool": name})
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=format_exception_for_response(exc),
        ) from exc
    except PydanticValidationError as exc:
        logger.warning(
            "Invalid tool parameters",
            extra={
                "tool": name,
                "error_count": exc.error_count(),
            },
        )
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=format_exception_for_response(exc),
        ) from exc

    return JSONResponse(content=envelope)
