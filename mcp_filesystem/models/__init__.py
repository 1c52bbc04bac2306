"""Models for the filesystem tool server."""

from mcp_filesystem.models.filesystem import (
    DirectoryEntry,
    DirectoryInfo,
    DirectorySize,
    FileInfo,
)
from mcp_filesystem.models.search import (
    FileMatch,
    FileSearchResult,
    LineMatch,
    SearchResult,
)

__all__ = [
    "DirectoryEntry",
    "DirectoryInfo",
    "DirectorySize",
    "FileInfo",
    "FileMatch",
    "FileSearchResult",
    "LineMatch",
    "SearchResult",
]
