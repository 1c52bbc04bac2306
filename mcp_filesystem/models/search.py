"""Models for name and content search."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field


class LineMatch(BaseModel):
    """One reportable hit inside a file."""

    file: str = Field(..., description="Path of the file, as enumerated")
    file_name: str = Field(..., alias="fileName", description="File name component")
    line_number: int = Field(..., alias="lineNumber", description="1-based line number")
    line: str = Field(..., description="Matching line, trimmed")
    match_position: int = Field(
        ...,
        alias="matchPosition",
        description="0-based offset of the match within the untrimmed line",
    )
    match: str | None = Field(None, description="Matched substring (regex mode only)")
    groups: list[str] | None = Field(
        None,
        description="Captured group values in declaration order (regex mode only)",
    )

    model_config = ConfigDict(populate_by_name=True)


class SearchResult(BaseModel):
    """Outcome of a content search."""

    matches: list[LineMatch] = Field(default_factory=list, description="Matches in report order")
    truncated: bool = Field(False, description="Whether a match beyond the cap existed")

    @property
    def count(self) -> int:
        """Number of matches returned."""
        return len(self.matches)


class FileMatch(BaseModel):
    """A file found by name search."""

    name: str = Field(..., description="File name")
    path: str = Field(..., description="Path of the file, as enumerated")
    directory: str = Field(..., description="Containing directory")
    size: int = Field(..., description="Size in bytes")
    last_modified: datetime = Field(..., alias="lastModified", description="Last modified timestamp")

    model_config = ConfigDict(populate_by_name=True)


class FileSearchResult(BaseModel):
    """Outcome of a name search."""

    files: list[FileMatch] = Field(default_factory=list, description="Files in enumeration order")
    truncated: bool = Field(False, description="Whether a file beyond the cap existed")

    @property
    def count(self) -> int:
        """Number of files returned."""
        return len(self.files)
