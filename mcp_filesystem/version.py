"""Version information for the filesystem tool server."""

from importlib.metadata import PackageNotFoundError, version

DISTRIBUTION_NAME = "mcp-filesystem"

_VERSION: str | None = None


def get_version() -> str:
    """
    Get the server version from the installed distribution metadata.

    Returns:
        Version string (e.g., "0.1.0"), or "unknown" when the package is not installed
    """
    global _VERSION

    if _VERSION is not None:
        return _VERSION

    try:
        _VERSION = version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return "unknown"
    return _VERSION
