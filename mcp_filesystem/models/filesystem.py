"""Models for single-step file and directory operations."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class DirectoryEntry(BaseModel):
    """An entry returned by directory listings."""

    type: Literal["file", "directory"] = Field(..., description="Entry type")
    name: str = Field(..., description="Entry name")
    path: str = Field(..., description="Path of the entry, as enumerated")
    size: int | None = Field(None, description="Size in bytes (null for directories)")
    last_modified: datetime = Field(..., alias="lastModified", description="Last modified timestamp")

    model_config = ConfigDict(populate_by_name=True)


class BasePathInfo(BaseModel):
    """Common metadata for files and directories."""

    name: str = Field(..., description="Entry name")
    path: str = Field(..., description="Absolute path")
    created: datetime = Field(..., description="Creation (or inode change) timestamp")
    last_modified: datetime = Field(..., alias="lastModified", description="Last modified timestamp")
    last_accessed: datetime = Field(..., alias="lastAccessed", description="Last accessed timestamp")
    attributes: str = Field(..., description="POSIX mode string, e.g. -rw-r--r--")

    model_config = ConfigDict(populate_by_name=True)


class FileInfo(BasePathInfo):
    """Detailed metadata for a file."""

    type: Literal["file"] = Field("file", description="Entry type")
    size: int = Field(..., description="Size in bytes")
    extension: str = Field(..., description="File extension including the dot")
    is_read_only: bool = Field(..., alias="isReadOnly", description="Whether the file is not writable")


class DirectoryInfo(BasePathInfo):
    """Detailed metadata for a directory."""

    type: Literal["directory"] = Field("directory", description="Entry type")
    file_count: int = Field(..., alias="fileCount", description="Files directly inside")
    subdirectory_count: int = Field(
        ...,
        alias="subdirectoryCount",
        description="Subdirectories directly inside",
    )


class DirectorySize(BaseModel):
    """Aggregate size of a directory tree."""

    total_size: int = Field(..., alias="totalSize", description="Total size in bytes")
    total_size_mb: float = Field(..., alias="totalSizeMB", description="Total size in MiB, 2 decimals")
    file_count: int = Field(..., alias="fileCount", description="Files in the tree")
    directory_count: int = Field(..., alias="directoryCount", description="Subdirectories in the tree")

    model_config = ConfigDict(populate_by_name=True)
