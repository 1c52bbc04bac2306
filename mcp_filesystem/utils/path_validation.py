"""Path validation utilities to keep tool paths inside the configured root."""

from __future__ import annotations

from pathlib import Path

from mcp_filesystem.exceptions import AccessDeniedError


class PathValidationError(ValueError):
    """Raised when path validation fails."""


def validate_path_within_root(
    path: str | Path,
    root: Path,
    allow_symlinks: bool = False,
) -> Path:
    """Validate that path is within the filesystem root and safe to use.

    Relative paths are interpreted against the root. The path does not need
    to exist (write and create operations target new paths).

    Args:
        path: Path to validate (absolute or relative)
        root: Confinement root directory
        allow_symlinks: Whether to allow symlink components in the path

    Returns:
        Resolved absolute path within root

    Raises:
        PathValidationError: If path is invalid or outside root
    """
    path = Path(path)
    root_resolved = root.resolve()

    if "\x00" in str(path):
        msg = "Path contains null bytes"
        raise PathValidationError(msg)

    if ".." in path.parts:
        msg = "Path contains '..' which is not allowed"
        raise PathValidationError(msg)

    if path.is_absolute():
        try:
            path.relative_to(root_resolved)
        except ValueError:
            msg = f"Absolute path {path} is outside root {root_resolved}"
            raise PathValidationError(msg) from None
        full_path = path
    else:
        full_path = root_resolved / path

    # Check for symlinks BEFORE resolving (check should apply to any component)
    if not allow_symlinks:
        if full_path.is_symlink():
            msg = f"Symlink not allowed: {full_path}"
            raise PathValidationError(msg)
        try:
            for parent in full_path.parents:
                if parent == root_resolved or root_resolved.is_relative_to(parent):
                    break
                if parent.is_symlink():
                    msg = f"Symlink in path not allowed: {parent}"
                    raise PathValidationError(msg)
        except OSError:
            pass  # Some paths may not be accessible

    try:
        resolved_path = full_path.resolve()
    except (OSError, RuntimeError) as e:
        msg = f"Cannot resolve path: {e}"
        raise PathValidationError(msg) from e

    try:
        resolved_path.relative_to(root_resolved)
    except ValueError:
        msg = f"Path {resolved_path} is outside root {root_resolved}"
        raise PathValidationError(msg) from None

    return resolved_path


class PathResolver:
    """Maps tool path parameters onto filesystem paths.

    Without a root, paths are used exactly as given (relative paths follow
    the process working directory). With a root, every path is confined to
    it and symlink components are refused; relative paths are taken from the
    working directory while it lies inside the root, else from the root.
    """

    def __init__(self, root: str | Path | None = None) -> None:
        self.root = Path(root).resolve() if root is not None else None

    @property
    def confined(self) -> bool:
        """Whether paths are confined to a root directory."""
        return self.root is not None

    def resolve(self, path: str) -> str:
        """Resolve a tool path parameter.

        Raises:
            AccessDeniedError: If the path escapes the configured root
        """
        if self.root is None:
            return path

        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = self._relative_base(self.root) / candidate

        try:
            return str(validate_path_within_root(candidate, self.root, allow_symlinks=False))
        except PathValidationError as exc:
            msg = "Access denied: path is outside the configured root"
            raise AccessDeniedError(
                msg,
                context={
                    "path": path,
                    "reason": "outside_root",
                    "detail": str(exc),
                },
            ) from exc

    @staticmethod
    def _relative_base(root: Path) -> Path:
        cwd = Path.cwd().resolve()
        return cwd if cwd.is_relative_to(root) else root
