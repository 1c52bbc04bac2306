"""
Tool registry for the filesystem operations.

Every operation is registered under its snake_case tool name together with
its parameter model and description. Handlers return a JSON-ready envelope:
a success envelope carrying ``success: true``, or an error envelope carrying
``error`` plus the path fields that identify the subject of the call.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from functools import wraps
from typing import TYPE_CHECKING, Any, TypeVar

from mcp_filesystem.exceptions import FileSystemToolError, UnknownToolError
from mcp_filesystem.models.requests import (
    AppendToFileRequest,
    DeleteDirectoryRequest,
    DirectoryRequest,
    FileRequest,
    FileTransferRequest,
    ListDirectoryRequest,
    NoParamsRequest,
    PathRequest,
    RegexSearchRequest,
    SearchFilesRequest,
    TextSearchRequest,
    ToolRequest,
    WriteFileRequest,
)
from mcp_filesystem.services.filesystem import FileSystemService
from mcp_filesystem.services.search import SearchService
from mcp_filesystem.utils.error_handling import build_error_envelope
from mcp_filesystem.utils.path_validation import PathResolver
from mcp_filesystem.utils.request_context import request_scope

if TYPE_CHECKING:
    from pydantic import BaseModel

    from mcp_filesystem.config import Settings
    from mcp_filesystem.models.search import SearchResult

logger = logging.getLogger(__name__)

Envelope = dict[str, object]
RequestT = TypeVar("RequestT", bound=ToolRequest)


@dataclass(frozen=True)
class ToolSpec:
    """A registered tool operation."""

    name: str
    description: str
    request_model: type[ToolRequest]
    handler: Callable[[FileSystemTools, Any], Envelope]

    def parameters_schema(self) -> dict[str, Any]:
        """JSON schema of the wire parameters (camelCase names)."""
        return self.request_model.model_json_schema(by_alias=True)


TOOL_SPECS: dict[str, ToolSpec] = {}


def tool_operation(
    name: str,
    description: str,
    request_model: type[RequestT],
    subject: Callable[[RequestT], Envelope],
) -> Callable[[Callable[[FileSystemTools, RequestT], Envelope]], Callable[[FileSystemTools, RequestT], Envelope]]:
    """
    Register a FileSystemTools method as a tool operation.

    The wrapped method only builds the success envelope; any exception it
    raises is logged and turned into an error envelope carrying the fields
    returned by ``subject`` for the request.

    Args:
        name: Tool name exposed to agents
        description: Tool description exposed to agents
        request_model: Parameter model for the operation
        subject: Builds the path fields that identify the call in error envelopes

    Example:
        @tool_operation("read_file", "Reads a file.", FileRequest,
                        subject=lambda r: {"path": r.file_path})
        def read_file(self, request: FileRequest) -> Envelope:
            ...
    """

    def decorator(
        method: Callable[[FileSystemTools, RequestT], Envelope],
    ) -> Callable[[FileSystemTools, RequestT], Envelope]:
        @wraps(method)
        def wrapper(self: FileSystemTools, request: RequestT) -> Envelope:
            start_time = time.monotonic()
            try:
                envelope = method(self, request)
            except FileSystemToolError as exc:
                logger.info(
                    "Tool operation failed",
                    extra={
                        "operation": name,
                        "error_type": type(exc).__name__,
                        "error": exc.message,
                        **exc.context,
                    },
                )
                return build_error_envelope(exc, **subject(request))
            except Exception as exc:
                logger.exception(
                    "Unexpected error in tool operation",
                    extra={
                        "operation": name,
                        "error_type": type(exc).__name__,
                    },
                )
                return build_error_envelope(exc, **subject(request))

            logger.debug(
                "Tool operation completed",
                extra={
                    "operation": name,
                    "duration_ms": int((time.monotonic() - start_time) * 1000),
                },
            )
            return envelope

        TOOL_SPECS[name] = ToolSpec(
            name=name,
            description=description,
            request_model=request_model,
            handler=wrapper,
        )
        return wrapper

    return decorator


def _dump(model: BaseModel, exclude_none: bool = False) -> dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True, exclude_none=exclude_none)


def _matches_payload(result: SearchResult) -> list[dict[str, Any]]:
    # match/groups only exist in regex mode
    return [_dump(line_match, exclude_none=True) for line_match in result.matches]


def _transfer_subject(request: FileTransferRequest) -> Envelope:
    return {"sourcePath": request.source_path, "destinationPath": request.destination_path}


class FileSystemTools:
    """The tool operations, bound to the services that implement them."""

    def __init__(self, filesystem: FileSystemService, search: SearchService) -> None:
        self.filesystem = filesystem
        self.search = search

    def dispatch(self, name: str, params: Mapping[str, object] | None = None) -> Envelope:
        """
        Validate parameters and run a tool operation.

        Args:
            name: Registered tool name
            params: Wire parameters (camelCase names)

        Returns:
            Success or error envelope

        Raises:
            UnknownToolError: No tool is registered under name
            pydantic.ValidationError: Parameters do not match the tool schema
        """
        spec = get_tool_spec(name)
        request = spec.request_model.model_validate(dict(params or {}))
        with request_scope():
            return spec.handler(self, request)

    # File operations

    @tool_operation(
        "read_file",
        "Reads the content of a file at the specified path.",
        FileRequest,
        subject=lambda r: {"path": r.file_path},
    )
    def read_file(self, request: FileRequest) -> Envelope:
        content = self.filesystem.read_file(request.file_path)
        return {"success": True, "content": content, "path": request.file_path, "size": len(content)}

    @tool_operation(
        "write_file",
        "Writes content to a file at the specified path. Creates the file if it doesn't exist.",
        WriteFileRequest,
        subject=lambda r: {"path": r.file_path},
    )
    def write_file(self, request: WriteFileRequest) -> Envelope:
        self.filesystem.write_file(request.file_path, request.content, overwrite=request.overwrite)
        return {
            "success": True,
            "message": "File written successfully",
            "path": request.file_path,
            "size": len(request.content),
        }

    @tool_operation(
        "append_to_file",
        "Appends content to an existing file or creates a new file if it doesn't exist.",
        AppendToFileRequest,
        subject=lambda r: {"path": r.file_path},
    )
    def append_to_file(self, request: AppendToFileRequest) -> Envelope:
        size = self.filesystem.append_to_file(request.file_path, request.content)
        return {
            "success": True,
            "message": "Content appended successfully",
            "path": request.file_path,
            "size": size,
        }

    @tool_operation(
        "delete_file",
        "Deletes a file at the specified path.",
        FileRequest,
        subject=lambda r: {"path": r.file_path},
    )
    def delete_file(self, request: FileRequest) -> Envelope:
        self.filesystem.delete_file(request.file_path)
        return {"success": True, "message": "File deleted successfully", "path": request.file_path}

    @tool_operation(
        "copy_file",
        "Copies a file from source to destination path.",
        FileTransferRequest,
        subject=_transfer_subject,
    )
    def copy_file(self, request: FileTransferRequest) -> Envelope:
        self.filesystem.copy_file(
            request.source_path,
            request.destination_path,
            overwrite=request.overwrite,
        )
        return {"success": True, "message": "File copied successfully", **_transfer_subject(request)}

    @tool_operation(
        "move_file",
        "Moves a file from source to destination path.",
        FileTransferRequest,
        subject=_transfer_subject,
    )
    def move_file(self, request: FileTransferRequest) -> Envelope:
        self.filesystem.move_file(
            request.source_path,
            request.destination_path,
            overwrite=request.overwrite,
        )
        return {"success": True, "message": "File moved successfully", **_transfer_subject(request)}

    # Directory operations

    @tool_operation(
        "create_directory",
        "Creates a directory at the specified path.",
        DirectoryRequest,
        subject=lambda r: {"path": r.directory_path},
    )
    def create_directory(self, request: DirectoryRequest) -> Envelope:
        created = self.filesystem.create_directory(request.directory_path)
        message = "Directory created successfully" if created else "Directory already exists"
        return {"success": True, "message": message, "path": request.directory_path}

    @tool_operation(
        "delete_directory",
        "Deletes a directory at the specified path. Use recursive=true to delete non-empty directories.",
        DeleteDirectoryRequest,
        subject=lambda r: {"path": r.directory_path},
    )
    def delete_directory(self, request: DeleteDirectoryRequest) -> Envelope:
        self.filesystem.delete_directory(request.directory_path, recursive=request.recursive)
        return {"success": True, "message": "Directory deleted successfully", "path": request.directory_path}

    @tool_operation(
        "list_directory",
        "Lists files and directories in the specified path.",
        ListDirectoryRequest,
        subject=lambda r: {"path": r.directory_path},
    )
    def list_directory(self, request: ListDirectoryRequest) -> Envelope:
        items = self.filesystem.list_directory(
            request.directory_path,
            request.search_pattern,
            include_subdirectories=request.include_subdirectories,
        )
        return {
            "success": True,
            "path": request.directory_path,
            "items": [_dump(item) for item in items],
            "count": len(items),
        }

    # Search operations

    @tool_operation(
        "search_files",
        "Searches for files by name pattern in the specified directory and optionally subdirectories.",
        SearchFilesRequest,
        subject=lambda r: {"path": r.directory_path},
    )
    def search_files(self, request: SearchFilesRequest) -> Envelope:
        result = self.search.search_files(request)
        return {
            "success": True,
            "searchPath": request.directory_path,
            "pattern": request.search_pattern,
            "files": [_dump(match) for match in result.files],
            "count": result.count,
            "truncated": result.truncated,
        }

    @tool_operation(
        "search_in_files",
        "Searches for content within files using text pattern matching.",
        TextSearchRequest,
        subject=lambda r: {"path": r.directory_path},
    )
    def search_in_files(self, request: TextSearchRequest) -> Envelope:
        result = self.search.search_in_files(request)
        return {
            "success": True,
            "searchPath": request.directory_path,
            "searchText": request.search_text,
            "filePattern": request.file_pattern,
            "caseSensitive": request.case_sensitive,
            "matches": _matches_payload(result),
            "count": result.count,
            "truncated": result.truncated,
        }

    @tool_operation(
        "search_in_files_regex",
        "Searches for content within files using regular expression pattern matching.",
        RegexSearchRequest,
        subject=lambda r: {"path": r.directory_path, "regex": r.regex_pattern},
    )
    def search_in_files_regex(self, request: RegexSearchRequest) -> Envelope:
        result = self.search.search_in_files_regex(request)
        return {
            "success": True,
            "searchPath": request.directory_path,
            "regexPattern": request.regex_pattern,
            "filePattern": request.file_pattern,
            "caseSensitive": request.case_sensitive,
            "matches": _matches_payload(result),
            "count": result.count,
            "truncated": result.truncated,
        }

    # File information

    @tool_operation(
        "get_file_info",
        "Gets detailed information about a file or directory.",
        PathRequest,
        subject=lambda r: {"path": r.path},
    )
    def get_file_info(self, request: PathRequest) -> Envelope:
        info = self.filesystem.get_info(request.path)
        return {"success": True, **_dump(info)}

    @tool_operation(
        "path_exists",
        "Checks if a file or directory exists at the specified path.",
        PathRequest,
        subject=lambda r: {"path": r.path},
    )
    def path_exists(self, request: PathRequest) -> Envelope:
        is_file, is_directory = self.filesystem.path_exists(request.path)
        return {
            "success": True,
            "path": request.path,
            "exists": is_file or is_directory,
            "isFile": is_file,
            "isDirectory": is_directory,
        }

    # Utility operations

    @tool_operation(
        "get_current_directory",
        "Gets the current working directory.",
        NoParamsRequest,
        subject=lambda r: {},
    )
    def get_current_directory(self, request: NoParamsRequest) -> Envelope:
        return {"success": True, "currentDirectory": self.filesystem.get_current_directory()}

    @tool_operation(
        "set_current_directory",
        "Changes the current working directory.",
        PathRequest,
        subject=lambda r: {"path": r.path},
    )
    def set_current_directory(self, request: PathRequest) -> Envelope:
        current = self.filesystem.set_current_directory(request.path)
        return {"success": True, "message": "Directory changed successfully", "currentDirectory": current}

    @tool_operation(
        "get_directory_size",
        "Calculates the total size of a directory including all subdirectories and files.",
        DirectoryRequest,
        subject=lambda r: {"path": r.directory_path},
    )
    def get_directory_size(self, request: DirectoryRequest) -> Envelope:
        size = self.filesystem.get_directory_size(request.directory_path)
        return {"success": True, "path": request.directory_path, **_dump(size)}


def get_tool_spec(name: str) -> ToolSpec:
    """Look up a registered tool.

    Raises:
        UnknownToolError: No tool is registered under name
    """
    try:
        return TOOL_SPECS[name]
    except KeyError:
        msg = f"Unknown tool: {name}"
        raise UnknownToolError(msg, context={"tool": name}) from None


def list_tool_specs() -> list[ToolSpec]:
    """All registered tools, in registration order."""
    return list(TOOL_SPECS.values())


def create_tools(settings: Settings) -> FileSystemTools:
    """Build the tool operations for the configured filesystem root."""
    resolver = PathResolver(settings.root_path)
    return FileSystemTools(
        filesystem=FileSystemService(resolver),
        search=SearchService(resolver),
    )


def render_envelope(envelope: Envelope) -> str:
    """Serialize an envelope as the JSON text returned to agents."""
    return json.dumps(envelope, ensure_ascii=False)
