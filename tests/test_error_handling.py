"""Tests for error envelopes and API error payloads."""

from __future__ import annotations

import pytest
from pydantic import ValidationError as PydanticValidationError

from mcp_filesystem.exceptions import FileSystemToolError, InvalidPatternError, NotFoundError
from mcp_filesystem.models.requests import TextSearchRequest
from mcp_filesystem.utils.error_handling import build_error_envelope, format_exception_for_response


def test_build_error_envelope_from_tool_error() -> None:
    exc = NotFoundError("Directory not found", context={"path": "/data"})

    envelope = build_error_envelope(exc, path="/data")

    assert envelope == {"error": "Directory not found", "path": "/data"}
    assert list(envelope) == ["error", "path"]


def test_build_error_envelope_from_os_error() -> None:
    envelope = build_error_envelope(PermissionError("Permission denied"), sourcePath="a", destinationPath="b")

    assert envelope == {"error": "Permission denied", "sourcePath": "a", "destinationPath": "b"}


def test_build_error_envelope_without_message_uses_type_name() -> None:
    assert build_error_envelope(RuntimeError())["error"] == "RuntimeError"


def test_exception_context_defaults_to_empty_dict() -> None:
    exc = FileSystemToolError("boom")

    assert exc.message == "boom"
    assert exc.context == {}
    assert str(exc) == "boom"


def test_format_tool_error_with_context() -> None:
    exc = InvalidPatternError("missing ), unterminated subpattern", context={"regex": "(", "position": 0})

    payload = format_exception_for_response(exc)

    assert payload == {
        "error": "InvalidPatternError",
        "message": "missing ), unterminated subpattern",
        "context": {"regex": "(", "position": 0},
    }


def test_format_generic_exception() -> None:
    payload = format_exception_for_response(ValueError("bad"))

    assert payload == {"error": "ValueError", "message": "bad"}


def test_format_pydantic_validation_error() -> None:
    with pytest.raises(PydanticValidationError) as exc_info:
        TextSearchRequest.model_validate({"directoryPath": "/data"})

    payload = format_exception_for_response(exc_info.value)

    assert payload["error"] == "ValidationError"
    assert payload["message"] == "1 invalid parameter(s)"
    assert payload["context"]["errors"][0]["field"] == "searchText"
