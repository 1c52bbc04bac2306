"""
Error handling utilities for the filesystem tool server.

Turns exceptions into the two error shapes the server emits: the tool
error envelope returned to agents, and the detail payload of HTTP errors.
"""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError

from mcp_filesystem.exceptions import FileSystemToolError


def build_error_envelope(e: Exception, **fields: object) -> dict[str, object]:
    """
    Build a tool error envelope from an exception.

    The envelope always starts with ``error`` (the failure description) and
    never contains ``success``; callers tell success from failure by the
    presence of ``error``. Path fields identifying the subject of the
    operation are passed as keyword arguments, in envelope order.

    Args:
        e: Exception that aborted the operation
        **fields: Envelope fields such as ``path`` or ``sourcePath``

    Returns:
        Error envelope dictionary

    Example:
        except NotFoundError as exc:
            return build_error_envelope(exc, path=directory_path)
    """
    message = e.message if isinstance(e, FileSystemToolError) else str(e)
    envelope: dict[str, object] = {"error": message or type(e).__name__}
    envelope.update(fields)
    return envelope


def format_exception_for_response(e: Exception) -> dict[str, object]:
    """
    Format exception for API error response.

    Extracts error message and context from custom exceptions, flattens
    pydantic validation errors into per-field messages, or formats generic
    exceptions for HTTP responses.

    Args:
        e: Exception to format

    Returns:
        Dictionary with error details suitable for API response

    Example:
        try:
            envelope = registry.dispatch(name, params)
        except PydanticValidationError as e:
            raise HTTPException(
                status_code=422,
                detail=format_exception_for_response(e)
            )
    """
    error_dict: dict[str, object] = {
        "error": type(e).__name__,
        "message": str(e),
    }

    if isinstance(e, PydanticValidationError):
        error_dict["message"] = f"{e.error_count()} invalid parameter(s)"
        error_dict["context"] = {
            "errors": [
                {
                    "field": ".".join(str(part) for part in err["loc"]),
                    "message": err["msg"],
                }
                for err in e.errors()
            ]
        }
    elif isinstance(e, FileSystemToolError) and e.context:
        error_dict["context"] = e.context

    return error_dict
