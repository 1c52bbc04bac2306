"""Health check endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from mcp_filesystem.version import get_version

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    """
    Simple health check for liveness probe.

    Returns 200 if service is running. No authentication required.

    Returns:
        Status object with the server version
    """
    return {"status": "ok", "version": get_version()}
