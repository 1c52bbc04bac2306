from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from mcp_filesystem.config import Settings  # noqa: TC001
from mcp_filesystem.tools import FileSystemTools  # noqa: TC001

security = HTTPBearer()


async def get_app_settings(request: Request) -> Settings:
    """Get the settings the app was created with."""
    return request.app.state.settings


async def verify_token(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    settings: Settings = Depends(get_app_settings),
) -> None:
    """Verify the bearer token matches the configured auth.token."""
    if credentials.credentials != settings.auth_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
        )


async def get_tools(request: Request) -> FileSystemTools:
    """Get the tool operations via dependency injection."""
    return request.app.state.tools
