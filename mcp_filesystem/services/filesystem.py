from __future__ import annotations

import logging
import os
import shutil
import stat as stat_module
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

from mcp_filesystem.exceptions import ConflictError, NotFoundError, UnreadableFileError
from mcp_filesystem.models.filesystem import DirectoryEntry, DirectoryInfo, DirectorySize, FileInfo
from mcp_filesystem.models.requests import DEFAULT_PATTERN
from mcp_filesystem.services.search import name_matches, raise_walk_error

if TYPE_CHECKING:
    from os import stat_result

    from mcp_filesystem.utils.path_validation import PathResolver

logger = logging.getLogger(__name__)

BYTES_PER_MB = 1024 * 1024


def _timestamp(seconds: float) -> datetime:
    return datetime.fromtimestamp(seconds, tz=UTC)


def _created_timestamp(stat: stat_result) -> datetime:
    """Birth time where the platform records it, else inode change time."""
    birth_time = getattr(stat, "st_birthtime", None)
    return _timestamp(birth_time if birth_time is not None else stat.st_ctime)


def _ensure_parent_directory(path: Path) -> None:
    parent = path.parent
    if str(parent) and not parent.is_dir():
        parent.mkdir(parents=True, exist_ok=True)


class FileSystemService:
    """Single-step file and directory operations on resolved tool paths.

    Each method raises a FileSystemToolError subclass for expected failures
    (missing paths, conflicts) and lets OSError propagate for everything else.
    """

    def __init__(self, resolver: PathResolver) -> None:
        """
        Initialize filesystem service.

        Args:
            resolver: Maps tool path parameters to filesystem paths
        """
        self.resolver = resolver

    # Files

    def read_file(self, file_path: str) -> str:
        """Read a whole UTF-8 text file.

        Raises:
            NotFoundError: File doesn't exist
            UnreadableFileError: Content is not valid UTF-8
        """
        path = self._existing_file(file_path)
        try:
            return path.read_text(encoding="utf-8-sig")
        except UnicodeDecodeError as exc:
            msg = "File encoding not supported (non-UTF-8)"
            raise UnreadableFileError(msg, context={"path": file_path}) from exc

    def write_file(self, file_path: str, content: str, overwrite: bool = True) -> None:
        """Write text to a file, creating parent directories as needed.

        Raises:
            ConflictError: File exists and overwrite is false
        """
        path = Path(self.resolver.resolve(file_path))
        if path.is_file() and not overwrite:
            msg = "File already exists and overwrite is false"
            raise ConflictError(msg, context={"path": file_path})

        _ensure_parent_directory(path)
        path.write_text(content, encoding="utf-8")

    def append_to_file(self, file_path: str, content: str) -> int:
        """Append text to a file (created if missing).

        Returns:
            File size in bytes after the append
        """
        path = Path(self.resolver.resolve(file_path))
        _ensure_parent_directory(path)
        with path.open("a", encoding="utf-8") as handle:
            handle.write(content)
        return path.stat().st_size

    def delete_file(self, file_path: str) -> None:
        """Delete a file.

        Raises:
            NotFoundError: File doesn't exist
        """
        self._existing_file(file_path).unlink()

    def copy_file(self, source_path: str, destination_path: str, overwrite: bool = False) -> None:
        """Copy a file's content and permission bits.

        Raises:
            NotFoundError: Source doesn't exist
            ConflictError: Destination is a directory, or a file and overwrite is false
        """
        source, destination = self._transfer_paths(source_path, destination_path, overwrite)
        shutil.copy2(source, destination)

    def move_file(self, source_path: str, destination_path: str, overwrite: bool = False) -> None:
        """Move a file, replacing the destination only when overwrite is set.

        Raises:
            NotFoundError: Source doesn't exist
            ConflictError: Destination is a directory, or a file and overwrite is false
        """
        source, destination = self._transfer_paths(source_path, destination_path, overwrite)
        shutil.move(source, destination)

    # Directories

    def create_directory(self, directory_path: str) -> bool:
        """Create a directory and any missing parents.

        Returns:
            False if the directory already existed, True if it was created
        """
        path = Path(self.resolver.resolve(directory_path))
        if path.is_dir():
            return False
        path.mkdir(parents=True)
        return True

    def delete_directory(self, directory_path: str, recursive: bool = False) -> None:
        """Delete a directory; non-empty ones only when recursive.

        Raises:
            NotFoundError: Directory doesn't exist
            OSError: Directory is not empty and recursive is false
        """
        path = self._existing_directory(directory_path)
        if recursive:
            shutil.rmtree(path)
        else:
            path.rmdir()

    def list_directory(
        self,
        directory_path: str,
        search_pattern: str = DEFAULT_PATTERN,
        include_subdirectories: bool = False,
    ) -> list[DirectoryEntry]:
        """List files then directories whose names match the pattern.

        Raises:
            NotFoundError: Directory doesn't exist
        """
        root = str(self._existing_directory(directory_path))
        pattern = search_pattern or DEFAULT_PATTERN
        files: list[DirectoryEntry] = []
        directories: list[DirectoryEntry] = []

        for dirpath, dirnames, filenames in os.walk(root, onerror=raise_walk_error):
            dirnames.sort()
            for name in sorted(filenames):
                if name_matches(name, pattern):
                    entry = self._directory_entry(os.path.join(dirpath, name), "file")
                    if entry is not None:
                        files.append(entry)
            for name in dirnames:
                if name_matches(name, pattern):
                    entry = self._directory_entry(os.path.join(dirpath, name), "directory")
                    if entry is not None:
                        directories.append(entry)
            if not include_subdirectories:
                break

        return files + directories

    # Information

    def get_info(self, path_str: str) -> FileInfo | DirectoryInfo:
        """Get detailed metadata for a file or directory.

        Raises:
            NotFoundError: Path doesn't exist
        """
        path = Path(self.resolver.resolve(path_str)).absolute()
        if path.is_file():
            stat = path.stat()
            return FileInfo(
                name=path.name,
                path=str(path),
                size=stat.st_size,
                extension=path.suffix,
                created=_created_timestamp(stat),
                last_modified=_timestamp(stat.st_mtime),
                last_accessed=_timestamp(stat.st_atime),
                is_read_only=not os.access(path, os.W_OK),
                attributes=stat_module.filemode(stat.st_mode),
            )

        if path.is_dir():
            stat = path.stat()
            file_count = 0
            subdirectory_count = 0
            for entry in path.iterdir():
                if entry.is_dir():
                    subdirectory_count += 1
                elif entry.is_file():
                    file_count += 1
            return DirectoryInfo(
                name=path.name,
                path=str(path),
                created=_created_timestamp(stat),
                last_modified=_timestamp(stat.st_mtime),
                last_accessed=_timestamp(stat.st_atime),
                file_count=file_count,
                subdirectory_count=subdirectory_count,
                attributes=stat_module.filemode(stat.st_mode),
            )

        msg = "Path not found"
        raise NotFoundError(msg, context={"path": path_str})

    def path_exists(self, path_str: str) -> tuple[bool, bool]:
        """Report whether a path is an existing file and/or directory.

        Returns:
            Tuple of (is_file, is_directory)
        """
        path = Path(self.resolver.resolve(path_str))
        return path.is_file(), path.is_dir()

    def get_current_directory(self) -> str:
        """Get the process working directory."""
        return os.getcwd()

    def set_current_directory(self, path_str: str) -> str:
        """Change the process working directory.

        Returns:
            The new working directory

        Raises:
            NotFoundError: Directory doesn't exist
        """
        os.chdir(self._existing_directory(path_str))
        return os.getcwd()

    def get_directory_size(self, directory_path: str) -> DirectorySize:
        """Sum file sizes and count entries across a whole tree.

        Raises:
            NotFoundError: Directory doesn't exist
        """
        root = str(self._existing_directory(directory_path))
        total_size = 0
        file_count = 0
        directory_count = 0

        for dirpath, dirnames, filenames in os.walk(root, onerror=raise_walk_error):
            directory_count += len(dirnames)
            for name in filenames:
                try:
                    total_size += os.stat(os.path.join(dirpath, name)).st_size
                except OSError:
                    logger.debug(
                        "Skipping unreadable entry in size calculation",
                        extra={"path": os.path.join(dirpath, name)},
                    )
                    continue
                file_count += 1

        return DirectorySize(
            total_size=total_size,
            total_size_mb=round(total_size / BYTES_PER_MB, 2),
            file_count=file_count,
            directory_count=directory_count,
        )

    # Helpers

    def _existing_file(self, file_path: str) -> Path:
        path = Path(self.resolver.resolve(file_path))
        if not path.is_file():
            msg = "File not found"
            raise NotFoundError(msg, context={"path": file_path})
        return path

    def _existing_directory(self, directory_path: str) -> Path:
        path = Path(self.resolver.resolve(directory_path))
        if not path.is_dir():
            msg = "Directory not found"
            raise NotFoundError(msg, context={"path": directory_path})
        return path

    def _transfer_paths(
        self,
        source_path: str,
        destination_path: str,
        overwrite: bool,
    ) -> tuple[Path, Path]:
        source = Path(self.resolver.resolve(source_path))
        if not source.is_file():
            msg = "Source file not found"
            raise NotFoundError(msg, context={"sourcePath": source_path})

        destination = Path(self.resolver.resolve(destination_path))
        if destination.is_dir():
            msg = "Destination path is an existing directory"
            raise ConflictError(msg, context={"destinationPath": destination_path})

        if destination.is_file() and not overwrite:
            msg = "Destination file already exists and overwrite is false"
            raise ConflictError(msg, context={"destinationPath": destination_path})

        _ensure_parent_directory(destination)
        return source, destination

    def _directory_entry(self, path: str, entry_type: str) -> DirectoryEntry | None:
        try:
            stat = os.stat(path)
        except OSError:
            logger.debug("Skipping unreadable directory entry", extra={"path": path})
            return None

        return DirectoryEntry.model_validate(
            {
                "type": entry_type,
                "name": os.path.basename(path),
                "path": path,
                "size": stat.st_size if entry_type == "file" else None,
                "last_modified": _timestamp(stat.st_mtime),
            }
        )

