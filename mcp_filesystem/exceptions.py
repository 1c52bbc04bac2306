"""
Custom exception classes with context for the filesystem tool server.

All exceptions inherit from FileSystemToolError and support attaching
contextual information for logging and for building error envelopes.
"""

from __future__ import annotations


class FileSystemToolError(Exception):
    """
    Base exception for the filesystem tool server.

    Attributes:
        message: Human-readable error message (becomes the envelope ``error``)
        context: Optional dictionary with additional context for logging/debugging
    """

    def __init__(self, message: str, context: dict[str, object] | None = None):
        """
        Initialize exception with message and optional context.

        Args:
            message: Human-readable error message
            context: Optional dictionary with contextual information
                    (operation name, paths, pattern, etc.)
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}


class NotFoundError(FileSystemToolError):
    """
    A path the operation depends on does not exist.

    Example:
        raise NotFoundError(
            "Directory not found",
            context={"path": "/data/missing"}
        )
    """


class InvalidPatternError(FileSystemToolError):
    """
    A regular expression failed to compile.

    Aborts the whole search call, unlike per-file read failures.

    Example:
        raise InvalidPatternError(
            "unterminated character set at position 0",
            context={"regex": "[", "position": 0}
        )
    """


class UnreadableFileError(FileSystemToolError):
    """
    A single candidate file could not be read as text.

    Always recovered inside the search: the file is skipped.
    """


class ConflictError(FileSystemToolError):
    """
    The target of a write, copy or move already exists and overwrite is off.

    Example:
        raise ConflictError(
            "Destination file already exists and overwrite is false",
            context={"destinationPath": "/data/out.txt"}
        )
    """


class AccessDeniedError(FileSystemToolError):
    """
    A path resolves outside the configured filesystem root.

    Example:
        raise AccessDeniedError(
            "Path is outside the configured root",
            context={"path": "../etc/passwd", "root": "/srv/data"}
        )
    """


class ValidationError(FileSystemToolError):
    """
    Input validation failed.

    Raised for parameter values the wire schema accepts but the operation
    cannot use (empty search text, non-positive result caps).

    Example:
        raise ValidationError(
            "maxResults must be at least 1",
            context={"field": "maxResults", "value": 0}
        )
    """


class ConfigurationError(FileSystemToolError):
    """
    Configuration loading, parsing or validation failed.

    Example:
        raise ConfigurationError(
            "auth.token is required to serve the HTTP API",
            context={"transport": "api"}
        )
    """


class UnknownToolError(FileSystemToolError):
    """No operation is registered under the requested name."""
