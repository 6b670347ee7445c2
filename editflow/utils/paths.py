"""
Project Path Utilities
======================
Path resolution and project-boundary checks shared by discovery, file
reading and change application.

Boundary rule: a path belongs to the project when its path relative to the
project root neither starts with a parent traversal segment nor is absolute.
Discovery drops violating paths silently; writes and deletes raise
ProjectBoundaryError.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List, Optional, Union

PathLike = Union[str, Path]

_LANGUAGE_BY_EXTENSION = {
    ".py": "python",
    ".pyi": "python",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "jsx",
}


class ProjectBoundaryError(ValueError):
    """Raised when a write or delete targets a path outside the project root."""

    def __init__(self, path: str, project_root: str):
        super().__init__(f"File path {path} is outside project root {project_root}")
        self.path = path
        self.project_root = project_root


class FileReadError(OSError):
    """Raised when a source file cannot be read."""


def resolve_file_path(file_path: PathLike, project_root: PathLike) -> str:
    """Return an absolute, normalized path; relative paths are joined to the root."""
    path = os.fspath(file_path)
    if os.path.isabs(path):
        return os.path.normpath(path)
    return os.path.normpath(os.path.join(os.path.abspath(os.fspath(project_root)), path))


def is_within_project_root(file_path: PathLike, project_root: PathLike) -> bool:
    """Return True when file_path lies inside project_root.

    Symlinks are resolved on both sides, so a link inside the project that
    points elsewhere is treated as outside.
    """
    resolved = os.path.realpath(resolve_file_path(file_path, project_root))
    root = os.path.realpath(os.fspath(project_root))
    try:
        relative = os.path.relpath(resolved, root)
    except ValueError:
        # Different drives on Windows
        return False
    if relative == os.pardir or relative.startswith(os.pardir + os.sep):
        return False
    return not os.path.isabs(relative)


def filter_paths_within_project(
    file_paths: Iterable[str],
    exclude_paths: Iterable[str],
    project_root: PathLike,
) -> List[str]:
    """Drop excluded paths and paths outside the project, preserving order."""
    excluded = set(exclude_paths)
    return [
        p for p in file_paths
        if p not in excluded and is_within_project_root(p, project_root)
    ]


def ensure_within_project_root(file_path: PathLike, project_root: PathLike) -> str:
    """Resolve file_path against the root or raise ProjectBoundaryError."""
    resolved = resolve_file_path(file_path, project_root)
    if not is_within_project_root(resolved, project_root):
        raise ProjectBoundaryError(os.fspath(file_path), os.fspath(project_root))
    return resolved


def detect_language(file_path: PathLike) -> Optional[str]:
    """Guess the source language from the file extension."""
    return _LANGUAGE_BY_EXTENSION.get(Path(file_path).suffix.lower())


def display_path(file_path: PathLike, project_root: Optional[PathLike] = None) -> str:
    """Project-relative path with forward slashes, for logs and reports."""
    path = os.fspath(file_path)
    if project_root is not None and is_within_project_root(path, project_root):
        path = os.path.relpath(resolve_file_path(path, project_root), os.path.abspath(os.fspath(project_root)))
    return os.path.normpath(path).replace("\\", "/")


def read_text_file(file_path: PathLike) -> str:
    """Read a UTF-8 text file.

    Raises:
        FileReadError: When the file is missing or unreadable.
    """
    try:
        return Path(file_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileReadError(f"Failed to read file {file_path}: {e}") from e


def safe_write_file(file_path: PathLike, content: str, project_root: PathLike) -> str:
    """Write content inside the project, creating parent directories.

    Returns:
        The resolved absolute path that was written.

    Raises:
        ProjectBoundaryError: When the path is outside the project root.
    """
    resolved = ensure_within_project_root(file_path, project_root)
    target = Path(resolved)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    return resolved


def safe_delete_file(file_path: PathLike, project_root: PathLike) -> bool:
    """Delete a file inside the project.

    Returns:
        True when a file was removed, False when it did not exist.

    Raises:
        ProjectBoundaryError: When the path is outside the project root.
        OSError: When the file exists but cannot be removed.
    """
    resolved = Path(ensure_within_project_root(file_path, project_root))
    if not resolved.exists():
        return False
    resolved.unlink()
    return True
