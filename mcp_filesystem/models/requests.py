"""Parameter models for the tool operations.

Field aliases are the wire parameter names agents send (camelCase).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PATTERN = "*"
DEFAULT_CONTENT_MAX_RESULTS = 50
DEFAULT_NAME_MAX_RESULTS = 100


class ToolRequest(BaseModel):
    """Base for tool parameter models."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class NoParamsRequest(ToolRequest):
    """Operation without parameters."""


class PathRequest(ToolRequest):
    """Operation on a single file or directory path."""

    path: str = Field(..., description="File or directory path")


class FileRequest(ToolRequest):
    """Operation on a single file."""

    file_path: str = Field(..., alias="filePath", description="Path of the file")


class WriteFileRequest(FileRequest):
    """Parameters for write_file."""

    content: str = Field(..., description="Text content to write")
    overwrite: bool = Field(True, description="Replace the file if it already exists")


class AppendToFileRequest(FileRequest):
    """Parameters for append_to_file."""

    content: str = Field(..., description="Text content to append")


class FileTransferRequest(ToolRequest):
    """Parameters for copy_file and move_file."""

    source_path: str = Field(..., alias="sourcePath", description="Existing file to copy or move")
    destination_path: str = Field(..., alias="destinationPath", description="Target file path")
    overwrite: bool = Field(False, description="Replace the destination if it already exists")


class DirectoryRequest(ToolRequest):
    """Operation on a single directory."""

    directory_path: str = Field(..., alias="directoryPath", description="Path of the directory")


class DeleteDirectoryRequest(DirectoryRequest):
    """Parameters for delete_directory."""

    recursive: bool = Field(False, description="Delete non-empty directories with their contents")


class ListDirectoryRequest(DirectoryRequest):
    """Parameters for list_directory."""

    search_pattern: str = Field(
        DEFAULT_PATTERN,
        alias="searchPattern",
        description="Glob pattern entry names must match",
    )
    include_subdirectories: bool = Field(
        False,
        alias="includeSubdirectories",
        description="List the whole tree instead of the top level only",
    )


class SearchFilesRequest(DirectoryRequest):
    """Parameters for search_files (name search)."""

    search_pattern: str = Field(
        DEFAULT_PATTERN,
        alias="searchPattern",
        description="Glob pattern file names must match",
    )
    include_subdirectories: bool = Field(
        True,
        alias="includeSubdirectories",
        description="Search the whole tree instead of the top level only",
    )
    max_results: int = Field(
        DEFAULT_NAME_MAX_RESULTS,
        alias="maxResults",
        description="Maximum number of files to return",
    )


class ContentSearchRequest(DirectoryRequest):
    """Parameters shared by the content search operations."""

    file_pattern: str = Field(
        DEFAULT_PATTERN,
        alias="filePattern",
        description="Glob pattern file names must match",
    )
    include_subdirectories: bool = Field(
        True,
        alias="includeSubdirectories",
        description="Search the whole tree instead of the top level only",
    )
    case_sensitive: bool = Field(
        False,
        alias="caseSensitive",
        description="Use case-sensitive matching",
    )
    max_results: int = Field(
        DEFAULT_CONTENT_MAX_RESULTS,
        alias="maxResults",
        description="Maximum number of matches to return across all files",
    )


class TextSearchRequest(ContentSearchRequest):
    """Parameters for search_in_files (literal search)."""

    search_text: str = Field(..., alias="searchText", description="Literal text to find")


class RegexSearchRequest(ContentSearchRequest):
    """Parameters for search_in_files_regex."""

    regex_pattern: str = Field(..., alias="regexPattern", description="Regular expression to find")
