"""Tests for the HTTP tool API."""

from __future__ import annotations

from pathlib import Path

import pytest

from mcp_filesystem.config import Settings
from mcp_filesystem.exceptions import ConfigurationError
from mcp_filesystem.main import create_app


def test_health_requires_no_auth(client) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_tools_require_bearer_token(client) -> None:
    missing = client.get("/api/v1/tools")
    wrong = client.get("/api/v1/tools", headers={"Authorization": "Bearer wrong"})

    assert missing.status_code in (401, 403)
    assert wrong.status_code == 401


def test_list_tools(client, auth_headers) -> None:
    response = client.get("/api/v1/tools", headers=auth_headers)

    assert response.status_code == 200
    tools = {tool["name"]: tool for tool in response.json()}
    assert len(tools) == 17
    assert "regexPattern" in tools["search_in_files_regex"]["parameters"]["properties"]
    assert tools["read_file"]["description"] == "Reads the content of a file at the specified path."


def test_call_tool_success(client, auth_headers, search_tree: Path) -> None:
    response = client.post(
        "/api/v1/tools/search_in_files",
        json={"directoryPath": str(search_tree), "searchText": "foo", "maxResults": 1},
        headers=auth_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["count"] == 1
    assert body["truncated"] is True


def test_call_tool_error_envelope_is_200(client, auth_headers, tmp_path: Path) -> None:
    missing = str(tmp_path / "missing")

    response = client.post(
        "/api/v1/tools/search_in_files",
        json={"directoryPath": missing, "searchText": "foo"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert response.json() == {"error": "Directory not found", "path": missing}


def test_call_tool_without_body(client, auth_headers) -> None:
    response = client.post("/api/v1/tools/get_current_directory", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["success"] is True


def test_call_unknown_tool(client, auth_headers) -> None:
    response = client.post("/api/v1/tools/format_disk", json={}, headers=auth_headers)

    assert response.status_code == 404
    assert response.json()["detail"]["error"] == "UnknownToolError"


def test_call_tool_invalid_parameters(client, auth_headers) -> None:
    response = client.post(
        "/api/v1/tools/search_in_files",
        json={"directoryPath": "/tmp", "maxResults": "many"},
        headers=auth_headers,
    )

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["error"] == "ValidationError"
    fields = {err["field"] for err in detail["context"]["errors"]}
    assert {"searchText", "maxResults"} <= fields


def test_request_id_is_echoed(client, auth_headers) -> None:
    response = client.get("/api/v1/tools", headers={**auth_headers, "X-Request-ID": "req-42"})

    assert response.headers["X-Request-ID"] == "req-42"


def test_request_id_is_generated(client) -> None:
    response = client.get("/health")

    assert response.headers["X-Request-ID"]


def test_create_app_requires_token() -> None:
    with pytest.raises(ConfigurationError):
        create_app(Settings(transport="api", auth_token=None))
