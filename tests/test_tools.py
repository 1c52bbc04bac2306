"""Tests for the tool registry and operation envelopes."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError

from mcp_filesystem.exceptions import UnknownToolError
from mcp_filesystem.tools import FileSystemTools, get_tool_spec, list_tool_specs, render_envelope

EXPECTED_TOOLS = [
    "read_file",
    "write_file",
    "append_to_file",
    "delete_file",
    "copy_file",
    "move_file",
    "create_directory",
    "delete_directory",
    "list_directory",
    "search_files",
    "search_in_files",
    "search_in_files_regex",
    "get_file_info",
    "path_exists",
    "get_current_directory",
    "set_current_directory",
    "get_directory_size",
]


def test_registry_lists_every_operation() -> None:
    assert [spec.name for spec in list_tool_specs()] == EXPECTED_TOOLS


def test_parameters_schema_uses_wire_names() -> None:
    schema = get_tool_spec("search_in_files").parameters_schema()

    assert set(schema["properties"]) == {
        "directoryPath",
        "searchText",
        "filePattern",
        "includeSubdirectories",
        "caseSensitive",
        "maxResults",
    }
    assert set(schema["required"]) == {"directoryPath", "searchText"}
    assert schema["properties"]["maxResults"]["default"] == 50


def test_dispatch_unknown_tool(tools: FileSystemTools) -> None:
    with pytest.raises(UnknownToolError):
        tools.dispatch("format_disk", {})


def test_dispatch_rejects_invalid_parameters(tools: FileSystemTools) -> None:
    with pytest.raises(PydanticValidationError):
        tools.dispatch("read_file", {"path": "/tmp/x"})


def test_render_envelope_keeps_unicode() -> None:
    assert render_envelope({"content": "café"}) == '{"content": "café"}'


# Content search envelopes


def test_search_in_files_envelope(tools: FileSystemTools, search_tree: Path) -> None:
    envelope = tools.dispatch(
        "search_in_files",
        {"directoryPath": str(search_tree), "searchText": "foo", "maxResults": 10},
    )

    assert envelope["success"] is True
    assert envelope["searchPath"] == str(search_tree)
    assert envelope["searchText"] == "foo"
    assert envelope["filePattern"] == "*"
    assert envelope["caseSensitive"] is False
    assert envelope["count"] == 3
    assert envelope["truncated"] is False
    assert envelope["matches"][0] == {
        "file": os.path.join(str(search_tree), "a.txt"),
        "fileName": "a.txt",
        "lineNumber": 1,
        "line": "foo",
        "matchPosition": 0,
    }


def test_search_in_files_truncated_envelope(tools: FileSystemTools, search_tree: Path) -> None:
    envelope = tools.dispatch(
        "search_in_files",
        {"directoryPath": str(search_tree), "searchText": "foo", "maxResults": 1},
    )

    assert envelope["count"] == 1
    assert len(envelope["matches"]) == 1
    assert envelope["truncated"] is True


def test_search_in_files_regex_envelope(tools: FileSystemTools, tmp_path: Path) -> None:
    (tmp_path / "ids.txt").write_text("id=7 id=8\n", encoding="utf-8")

    envelope = tools.dispatch(
        "search_in_files_regex",
        {"directoryPath": str(tmp_path), "regexPattern": r"id=(\d)"},
    )

    assert envelope["regexPattern"] == r"id=(\d)"
    assert envelope["count"] == 2
    assert envelope["matches"][1]["match"] == "id=8"
    assert envelope["matches"][1]["groups"] == ["8"]
    assert envelope["matches"][1]["matchPosition"] == 5


def test_search_in_files_missing_directory_error(tools: FileSystemTools, tmp_path: Path) -> None:
    missing = str(tmp_path / "missing")

    envelope = tools.dispatch("search_in_files", {"directoryPath": missing, "searchText": "foo"})

    assert envelope == {"error": "Directory not found", "path": missing}


def test_search_in_files_regex_invalid_pattern_error(tools: FileSystemTools, search_tree: Path) -> None:
    envelope = tools.dispatch(
        "search_in_files_regex",
        {"directoryPath": str(search_tree), "regexPattern": "(unclosed"},
    )

    assert "success" not in envelope
    assert "matches" not in envelope
    assert envelope["error"]
    assert envelope["path"] == str(search_tree)
    assert envelope["regex"] == "(unclosed"


def test_search_in_files_validation_error_envelope(tools: FileSystemTools, search_tree: Path) -> None:
    envelope = tools.dispatch(
        "search_in_files",
        {"directoryPath": str(search_tree), "searchText": "foo", "maxResults": 0},
    )

    assert envelope == {"error": "maxResults must be at least 1", "path": str(search_tree)}


def test_unexpected_error_becomes_envelope(tools: FileSystemTools, search_tree: Path, monkeypatch) -> None:
    def broken(*args, **kwargs):
        raise PermissionError("Permission denied")

    monkeypatch.setattr("mcp_filesystem.services.search.search_text", broken)

    envelope = tools.dispatch("search_in_files", {"directoryPath": str(search_tree), "searchText": "foo"})

    assert envelope == {"error": "Permission denied", "path": str(search_tree)}


def test_search_files_envelope(tools: FileSystemTools, search_tree: Path) -> None:
    envelope = tools.dispatch("search_files", {"directoryPath": str(search_tree), "searchPattern": "*.txt"})

    assert envelope["success"] is True
    assert envelope["pattern"] == "*.txt"
    assert envelope["count"] == 2
    assert envelope["truncated"] is False
    assert [f["name"] for f in envelope["files"]] == ["a.txt", "b.txt"]
    assert set(envelope["files"][0]) == {"name", "path", "directory", "size", "lastModified"}


# File operations


def test_write_then_read_file(tools: FileSystemTools, tmp_path: Path) -> None:
    target = str(tmp_path / "new" / "note.txt")

    written = tools.dispatch("write_file", {"filePath": target, "content": "hello"})
    read = tools.dispatch("read_file", {"filePath": target})

    assert written == {"success": True, "message": "File written successfully", "path": target, "size": 5}
    assert read == {"success": True, "content": "hello", "path": target, "size": 5}


def test_write_file_without_overwrite_conflicts(tools: FileSystemTools, tmp_path: Path) -> None:
    target = tmp_path / "keep.txt"
    target.write_text("original", encoding="utf-8")

    envelope = tools.dispatch("write_file", {"filePath": str(target), "content": "new", "overwrite": False})

    assert envelope == {"error": "File already exists and overwrite is false", "path": str(target)}
    assert target.read_text(encoding="utf-8") == "original"


def test_read_missing_file(tools: FileSystemTools, tmp_path: Path) -> None:
    missing = str(tmp_path / "missing.txt")

    assert tools.dispatch("read_file", {"filePath": missing}) == {"error": "File not found", "path": missing}


def test_append_to_file_reports_size(tools: FileSystemTools, tmp_path: Path) -> None:
    target = str(tmp_path / "log.txt")

    tools.dispatch("append_to_file", {"filePath": target, "content": "one\n"})
    envelope = tools.dispatch("append_to_file", {"filePath": target, "content": "two\n"})

    assert envelope["success"] is True
    assert envelope["size"] == 8
    assert Path(target).read_text(encoding="utf-8") == "one\ntwo\n"


def test_delete_file(tools: FileSystemTools, tmp_path: Path) -> None:
    target = tmp_path / "gone.txt"
    target.write_text("x", encoding="utf-8")

    envelope = tools.dispatch("delete_file", {"filePath": str(target)})

    assert envelope["message"] == "File deleted successfully"
    assert not target.exists()


def test_copy_file(tools: FileSystemTools, tmp_path: Path) -> None:
    source = tmp_path / "src.txt"
    source.write_text("data", encoding="utf-8")
    destination = tmp_path / "out" / "copy.txt"

    envelope = tools.dispatch(
        "copy_file",
        {"sourcePath": str(source), "destinationPath": str(destination)},
    )

    assert envelope == {
        "success": True,
        "message": "File copied successfully",
        "sourcePath": str(source),
        "destinationPath": str(destination),
    }
    assert destination.read_text(encoding="utf-8") == "data"
    assert source.exists()


def test_copy_file_conflict_envelope(tools: FileSystemTools, tmp_path: Path) -> None:
    source = tmp_path / "src.txt"
    source.write_text("data", encoding="utf-8")
    destination = tmp_path / "dst.txt"
    destination.write_text("other", encoding="utf-8")

    envelope = tools.dispatch(
        "copy_file",
        {"sourcePath": str(source), "destinationPath": str(destination)},
    )

    assert envelope == {
        "error": "Destination file already exists and overwrite is false",
        "sourcePath": str(source),
        "destinationPath": str(destination),
    }


def test_move_file_with_overwrite(tools: FileSystemTools, tmp_path: Path) -> None:
    source = tmp_path / "src.txt"
    source.write_text("fresh", encoding="utf-8")
    destination = tmp_path / "dst.txt"
    destination.write_text("stale", encoding="utf-8")

    envelope = tools.dispatch(
        "move_file",
        {"sourcePath": str(source), "destinationPath": str(destination), "overwrite": True},
    )

    assert envelope["message"] == "File moved successfully"
    assert not source.exists()
    assert destination.read_text(encoding="utf-8") == "fresh"


def test_move_missing_source(tools: FileSystemTools, tmp_path: Path) -> None:
    envelope = tools.dispatch(
        "move_file",
        {"sourcePath": str(tmp_path / "nope"), "destinationPath": str(tmp_path / "dst")},
    )

    assert envelope["error"] == "Source file not found"
    assert set(envelope) == {"error", "sourcePath", "destinationPath"}


# Directory operations


def test_create_directory_twice(tools: FileSystemTools, tmp_path: Path) -> None:
    target = str(tmp_path / "a" / "b")

    first = tools.dispatch("create_directory", {"directoryPath": target})
    second = tools.dispatch("create_directory", {"directoryPath": target})

    assert first["message"] == "Directory created successfully"
    assert second == {"success": True, "message": "Directory already exists", "path": target}


def test_delete_non_empty_directory_requires_recursive(tools: FileSystemTools, tmp_path: Path) -> None:
    target = tmp_path / "full"
    target.mkdir()
    (target / "file.txt").write_text("x", encoding="utf-8")

    refused = tools.dispatch("delete_directory", {"directoryPath": str(target)})
    deleted = tools.dispatch("delete_directory", {"directoryPath": str(target), "recursive": True})

    assert "error" in refused
    assert refused["path"] == str(target)
    assert deleted["success"] is True
    assert not target.exists()


def test_list_directory_files_then_directories(tools: FileSystemTools, tmp_path: Path) -> None:
    (tmp_path / "zeta").mkdir()
    (tmp_path / "alpha.txt").write_text("abc", encoding="utf-8")
    (tmp_path / "zeta" / "inner.txt").write_text("x", encoding="utf-8")

    top = tools.dispatch("list_directory", {"directoryPath": str(tmp_path)})
    whole = tools.dispatch("list_directory", {"directoryPath": str(tmp_path), "includeSubdirectories": True})

    assert [(item["type"], item["name"]) for item in top["items"]] == [("file", "alpha.txt"), ("directory", "zeta")]
    assert top["items"][0]["size"] == 3
    assert top["count"] == 2
    assert [item["name"] for item in whole["items"]] == ["alpha.txt", "inner.txt", "zeta"]


# Information and utility operations


def test_get_file_info_for_file(tools: FileSystemTools, tmp_path: Path) -> None:
    target = tmp_path / "info.md"
    target.write_text("# title", encoding="utf-8")

    envelope = tools.dispatch("get_file_info", {"path": str(target)})

    assert envelope["success"] is True
    assert envelope["type"] == "file"
    assert envelope["name"] == "info.md"
    assert envelope["extension"] == ".md"
    assert envelope["size"] == 7
    assert {"created", "lastModified", "lastAccessed", "isReadOnly", "attributes"} <= set(envelope)


def test_get_file_info_for_directory(tools: FileSystemTools, tmp_path: Path) -> None:
    (tmp_path / "sub").mkdir()
    (tmp_path / "a.txt").write_text("a", encoding="utf-8")

    envelope = tools.dispatch("get_file_info", {"path": str(tmp_path)})

    assert envelope["type"] == "directory"
    assert envelope["fileCount"] == 1
    assert envelope["subdirectoryCount"] == 1


def test_get_file_info_missing(tools: FileSystemTools, tmp_path: Path) -> None:
    missing = str(tmp_path / "missing")

    assert tools.dispatch("get_file_info", {"path": missing}) == {"error": "Path not found", "path": missing}


def test_path_exists(tools: FileSystemTools, tmp_path: Path) -> None:
    (tmp_path / "f.txt").write_text("x", encoding="utf-8")

    file_envelope = tools.dispatch("path_exists", {"path": str(tmp_path / "f.txt")})
    missing_envelope = tools.dispatch("path_exists", {"path": str(tmp_path / "nope")})

    assert file_envelope == {
        "success": True,
        "path": str(tmp_path / "f.txt"),
        "exists": True,
        "isFile": True,
        "isDirectory": False,
    }
    assert missing_envelope["exists"] is False


def test_current_directory_round_trip(tools: FileSystemTools, tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "work").mkdir()

    changed = tools.dispatch("set_current_directory", {"path": "work"})
    current = tools.dispatch("get_current_directory", {})

    assert changed["message"] == "Directory changed successfully"
    assert Path(changed["currentDirectory"]) == (tmp_path / "work").resolve()
    assert current == {"success": True, "currentDirectory": changed["currentDirectory"]}


def test_get_directory_size(tools: FileSystemTools, tmp_path: Path) -> None:
    (tmp_path / "sub").mkdir()
    (tmp_path / "a.bin").write_bytes(b"x" * 1000)
    (tmp_path / "sub" / "b.bin").write_bytes(b"x" * 24)

    envelope = tools.dispatch("get_directory_size", {"directoryPath": str(tmp_path)})

    assert envelope["totalSize"] == 1024
    assert envelope["totalSizeMB"] == 0.0
    assert envelope["fileCount"] == 2
    assert envelope["directoryCount"] == 1


def test_envelopes_are_json_serializable(tools: FileSystemTools, search_tree: Path) -> None:
    envelope = tools.dispatch("get_file_info", {"path": str(search_tree / "a.txt")})

    assert json.loads(render_envelope(envelope))["name"] == "a.txt"


# Confinement


def test_confined_tools_deny_paths_outside_root(tmp_path: Path) -> None:
    from mcp_filesystem.config import Settings
    from mcp_filesystem.tools import create_tools

    root = tmp_path / "root"
    root.mkdir()
    confined = create_tools(Settings(root_path=str(root)))

    envelope = confined.dispatch("read_file", {"filePath": str(tmp_path / "secret.txt")})
    traversal = confined.dispatch("list_directory", {"directoryPath": "../"})

    assert envelope["error"] == "Access denied: path is outside the configured root"
    assert envelope["path"] == str(tmp_path / "secret.txt")
    assert traversal["error"] == "Access denied: path is outside the configured root"


@pytest.mark.parametrize("operation", ["copy_file", "move_file"])
def test_transfer_onto_existing_directory_conflicts(tools: FileSystemTools, tmp_path: Path, operation: str) -> None:
    source = tmp_path / "src.txt"
    source.write_text("data", encoding="utf-8")
    destination = tmp_path / "dest"
    destination.mkdir()

    envelope = tools.dispatch(
        operation,
        {"sourcePath": str(source), "destinationPath": str(destination), "overwrite": True},
    )

    assert envelope == {
        "error": "Destination path is an existing directory",
        "sourcePath": str(source),
        "destinationPath": str(destination),
    }
    assert source.read_text(encoding="utf-8") == "data"
    assert list(destination.iterdir()) == []


def test_list_directory_pattern_brackets_match_literally(tools: FileSystemTools, tmp_path: Path) -> None:
    (tmp_path / "draft[2].md").write_text("x", encoding="utf-8")
    (tmp_path / "draft2.md").write_text("x", encoding="utf-8")

    envelope = tools.dispatch("list_directory", {"directoryPath": str(tmp_path), "searchPattern": "draft[2].md"})

    assert [item["name"] for item in envelope["items"]] == ["draft[2].md"]
