from __future__ import annotations

import fnmatch
import logging
import os
import re
import time
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from mcp_filesystem.exceptions import InvalidPatternError, NotFoundError, UnreadableFileError, ValidationError
from mcp_filesystem.models.requests import (
    DEFAULT_CONTENT_MAX_RESULTS,
    DEFAULT_NAME_MAX_RESULTS,
    DEFAULT_PATTERN,
)
from mcp_filesystem.models.search import FileMatch, FileSearchResult, LineMatch, SearchResult

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

    from mcp_filesystem.models.requests import RegexSearchRequest, SearchFilesRequest, TextSearchRequest
    from mcp_filesystem.utils.path_validation import PathResolver

    LineMatcher = Callable[[str, list[str]], Iterator[LineMatch]]

logger = logging.getLogger(__name__)

MIN_MAX_RESULTS = 1
BINARY_MARKER = b"\x00"


def raise_walk_error(error: OSError) -> None:
    """os.walk error hook: listing failures abort the walk instead of being ignored."""
    raise error


def iter_candidate_files(
    root: str,
    name_pattern: str = DEFAULT_PATTERN,
    recursive: bool = True,
    skip_symlinks: bool = False,
) -> Iterator[str]:
    """Lazily enumerate files under root whose names match a glob pattern.

    Each directory yields its files in lexicographic order before its
    subdirectories are visited, also in lexicographic order. Symlinked
    directories are never descended, so link cycles cannot occur.

    Args:
        root: Directory to enumerate
        name_pattern: Glob pattern applied to file names
        recursive: Descend into subdirectories
        skip_symlinks: Leave out symlinked files

    Returns:
        Iterator of file paths built by joining root and the relative path

    Raises:
        NotFoundError: If root is not an existing directory (raised eagerly)
        OSError: If a directory cannot be listed (raised during iteration)
    """
    if not os.path.isdir(root):
        msg = "Directory not found"
        raise NotFoundError(msg, context={"path": root})

    return _walk(root, name_pattern or DEFAULT_PATTERN, recursive, skip_symlinks)


def name_matches(name: str, pattern: str) -> bool:
    """Glob match supporting only `*` and `?`; brackets match themselves."""
    return fnmatch.fnmatch(name, pattern.replace("[", "[[]"))


def _walk(root: str, name_pattern: str, recursive: bool, skip_symlinks: bool) -> Iterator[str]:
    for dirpath, dirnames, filenames in os.walk(root, onerror=raise_walk_error):
        dirnames.sort()
        for filename in sorted(filenames):
            if not name_matches(filename, name_pattern):
                continue
            path = os.path.join(dirpath, filename)
            if skip_symlinks and os.path.islink(path):
                continue
            yield path
        if not recursive:
            break


def read_text_lines(path: str) -> list[str]:
    """Read a whole file as UTF-8 text and split it on line feeds.

    The file is opened, read and closed before any matching happens.

    Raises:
        UnreadableFileError: If the file cannot be opened or read, holds
            binary content, or is not valid UTF-8
    """
    try:
        with open(path, "rb") as handle:
            raw = handle.read()
    except OSError as exc:
        msg = f"Cannot read file: {exc.strerror or exc}"
        raise UnreadableFileError(msg, context={"file": path, "reason": "io_error"}) from exc

    if BINARY_MARKER in raw:
        msg = "File has binary content"
        raise UnreadableFileError(msg, context={"file": path, "reason": "binary"})

    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        msg = "File is not valid UTF-8 text"
        raise UnreadableFileError(msg, context={"file": path, "reason": "encoding"}) from exc

    if not text:
        return []
    lines = text.split("\n")
    # A final line feed terminates the last line rather than starting a new one
    if lines[-1] == "":
        lines.pop()
    return lines


def compile_pattern(pattern: str, case_sensitive: bool, literal: bool = False) -> re.Pattern[str]:
    """Compile a search pattern once per call.

    Literal text is escaped rather than lower-cased so that case-insensitive
    offsets stay valid positions in the original line.

    Raises:
        InvalidPatternError: If the regular expression does not compile
    """
    flags = 0 if case_sensitive else re.IGNORECASE
    source = re.escape(pattern) if literal else pattern
    try:
        return re.compile(source, flags)
    except re.error as exc:
        raise InvalidPatternError(
            str(exc),
            context={"regex": pattern, "position": exc.pos},
        ) from exc


def literal_line_matcher(pattern: re.Pattern[str]) -> LineMatcher:
    """Report the first occurrence on each matching line."""

    def match_lines(path: str, lines: list[str]) -> Iterator[LineMatch]:
        file_name = os.path.basename(path)
        for index, line in enumerate(lines):
            found = pattern.search(line)
            if found is None:
                continue
            yield LineMatch(
                file=path,
                file_name=file_name,
                line_number=index + 1,
                line=line.strip(),
                match_position=found.start(),
            )

    return match_lines


def regex_line_matcher(pattern: re.Pattern[str]) -> LineMatcher:
    """Report every non-overlapping occurrence with its captured groups."""

    def match_lines(path: str, lines: list[str]) -> Iterator[LineMatch]:
        file_name = os.path.basename(path)
        for index, line in enumerate(lines):
            trimmed = line.strip()
            for found in pattern.finditer(line):
                yield LineMatch(
                    file=path,
                    file_name=file_name,
                    line_number=index + 1,
                    line=trimmed,
                    match_position=found.start(),
                    match=found.group(0),
                    # Groups that did not participate are reported as ""
                    groups=[value or "" for value in found.groups()],
                )

    return match_lines


def collect_matches(
    candidates: Iterable[str],
    match_lines: LineMatcher,
    max_results: int,
) -> SearchResult:
    """Accumulate matches across files up to max_results.

    Enumeration stops at the first match beyond the cap, which is what sets
    the truncation flag; no further lines or files are read. Files that
    cannot be read as text are skipped.
    """
    matches: list[LineMatch] = []

    for path in candidates:
        try:
            lines = read_text_lines(path)
        except UnreadableFileError as exc:
            logger.debug(
                "Skipping unreadable file",
                extra={
                    "file": path,
                    "reason": exc.context.get("reason"),
                },
            )
            continue

        for line_match in match_lines(path, lines):
            if len(matches) >= max_results:
                return SearchResult(matches=matches, truncated=True)
            matches.append(line_match)

    return SearchResult(matches=matches, truncated=False)


def search_text(
    root: str,
    search_text: str,
    file_pattern: str = DEFAULT_PATTERN,
    recursive: bool = True,
    case_sensitive: bool = False,
    max_results: int = DEFAULT_CONTENT_MAX_RESULTS,
    skip_symlinks: bool = False,
) -> SearchResult:
    """Find lines containing a literal string (first occurrence per line)."""
    _validate_max_results(max_results)
    if not search_text:
        msg = "searchText must be non-empty"
        raise ValidationError(msg, context={"field": "searchText"})

    candidates = iter_candidate_files(root, file_pattern, recursive, skip_symlinks)
    pattern = compile_pattern(search_text, case_sensitive, literal=True)
    return collect_matches(candidates, literal_line_matcher(pattern), max_results)


def search_regex(
    root: str,
    regex_pattern: str,
    file_pattern: str = DEFAULT_PATTERN,
    recursive: bool = True,
    case_sensitive: bool = False,
    max_results: int = DEFAULT_CONTENT_MAX_RESULTS,
    skip_symlinks: bool = False,
) -> SearchResult:
    """Find every regex match on every line, with captured groups."""
    _validate_max_results(max_results)
    if not regex_pattern:
        msg = "regexPattern must be non-empty"
        raise ValidationError(msg, context={"field": "regexPattern"})

    candidates = iter_candidate_files(root, file_pattern, recursive, skip_symlinks)
    pattern = compile_pattern(regex_pattern, case_sensitive)
    return collect_matches(candidates, regex_line_matcher(pattern), max_results)


def search_names(
    root: str,
    name_pattern: str = DEFAULT_PATTERN,
    recursive: bool = True,
    max_results: int = DEFAULT_NAME_MAX_RESULTS,
    skip_symlinks: bool = False,
) -> FileSearchResult:
    """Find files by name pattern and report their basic metadata."""
    _validate_max_results(max_results)
    files: list[FileMatch] = []

    for path in iter_candidate_files(root, name_pattern, recursive, skip_symlinks):
        try:
            stat = os.stat(path)
        except OSError:
            logger.debug("Skipping file without readable metadata", extra={"file": path})
            continue

        if len(files) >= max_results:
            return FileSearchResult(files=files, truncated=True)

        files.append(
            FileMatch(
                name=os.path.basename(path),
                path=path,
                directory=os.path.dirname(path),
                size=stat.st_size,
                last_modified=datetime.fromtimestamp(stat.st_mtime, tz=UTC),
            )
        )

    return FileSearchResult(files=files, truncated=False)


def _validate_max_results(max_results: int) -> None:
    if max_results < MIN_MAX_RESULTS:
        msg = f"maxResults must be at least {MIN_MAX_RESULTS}"
        raise ValidationError(
            msg,
            context={
                "field": "maxResults",
                "min": MIN_MAX_RESULTS,
                "value": max_results,
            },
        )


class SearchService:
    """Runs name and content searches against resolved tool paths."""

    def __init__(self, resolver: PathResolver) -> None:
        self.resolver = resolver

    def search_files(self, request: SearchFilesRequest) -> FileSearchResult:
        """Search for files by name pattern."""
        start_time = time.monotonic()
        result = search_names(
            self.resolver.resolve(request.directory_path),
            request.search_pattern,
            recursive=request.include_subdirectories,
            max_results=request.max_results,
            skip_symlinks=self.resolver.confined,
        )
        self._log_completed(
            "search_files",
            start_time,
            result_count=result.count,
            truncated=result.truncated,
            max_results=request.max_results,
            recursive=request.include_subdirectories,
        )
        return result

    def search_in_files(self, request: TextSearchRequest) -> SearchResult:
        """Search file contents for a literal string."""
        start_time = time.monotonic()
        result = search_text(
            self.resolver.resolve(request.directory_path),
            request.search_text,
            request.file_pattern,
            recursive=request.include_subdirectories,
            case_sensitive=request.case_sensitive,
            max_results=request.max_results,
            skip_symlinks=self.resolver.confined,
        )
        self._log_completed(
            "search_in_files",
            start_time,
            query_length=len(request.search_text),
            case_sensitive=request.case_sensitive,
            result_count=result.count,
            truncated=result.truncated,
            max_results=request.max_results,
        )
        return result

    def search_in_files_regex(self, request: RegexSearchRequest) -> SearchResult:
        """Search file contents with a regular expression."""
        start_time = time.monotonic()
        result = search_regex(
            self.resolver.resolve(request.directory_path),
            request.regex_pattern,
            request.file_pattern,
            recursive=request.include_subdirectories,
            case_sensitive=request.case_sensitive,
            max_results=request.max_results,
            skip_symlinks=self.resolver.confined,
        )
        self._log_completed(
            "search_in_files_regex",
            start_time,
            pattern_length=len(request.regex_pattern),
            case_sensitive=request.case_sensitive,
            result_count=result.count,
            truncated=result.truncated,
            max_results=request.max_results,
        )
        return result

    def _log_completed(self, operation: str, start_time: float, **fields: object) -> None:
        logger.info(
            "Search completed",
            extra={
                "operation": operation,
                "duration_ms": int((time.monotonic() - start_time) * 1000),
                **fields,
            },
        )
