"""
Project Tree
============
Renders a compact directory tree of source-like files under a project root,
used as orientation context for the generation service.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from editflow.config import TREE


@dataclass
class _Node:
    dirs: Dict[str, "_Node"] = field(default_factory=dict)
    files: List[str] = field(default_factory=list)


def list_project_files(
    project_root: str | Path,
    extensions: Iterable[str] = TREE.EXTENSIONS,
    excluded_dirs: Iterable[str] = TREE.EXCLUDED_DIRS,
    max_files: int = TREE.MAX_FILES,
) -> List[str]:
    """Return up to max_files project-relative POSIX paths, sorted by path.

    Raises:
        NotADirectoryError: When project_root is not a directory.
    """
    root = Path(project_root)
    if not root.is_dir():
        raise NotADirectoryError(f"Project root is not a directory: {project_root}")

    suffixes = {"." + ext.lstrip(".").lower() for ext in extensions}
    excluded = set(excluded_dirs)
    found: List[str] = []

    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in excluded)
        rel_dir = Path(dirpath).relative_to(root)
        for name in sorted(filenames):
            if Path(name).suffix.lower() not in suffixes:
                continue
            found.append((rel_dir / name).as_posix())

    found.sort()
    return found[:max_files]


def render_tree(files: Iterable[str]) -> str:
    """Render relative POSIX paths as an ASCII tree, directories first."""
    root = _Node()
    for file_path in files:
        parts = file_path.split("/")
        node = root
        for part in parts[:-1]:
            node = node.dirs.setdefault(part, _Node())
        node.files.append(parts[-1])

    lines: List[str] = []
    _render_node(root, "", lines)
    return "\n".join(lines)


def _render_node(node: _Node, prefix: str, lines: List[str]) -> None:
    entries = [(name, child) for name, child in sorted(node.dirs.items())]
    entries += [(name, None) for name in sorted(node.files)]

    for idx, (name, child) in enumerate(entries):
        is_last = idx == len(entries) - 1
        connector = "└── " if is_last else "├── "
        if child is None:
            lines.append(f"{prefix}{connector}{name}")
        else:
            lines.append(f"{prefix}{connector}{name}/")
            _render_node(child, prefix + ("    " if is_last else "│   "), lines)


def build_project_tree(
    project_root: str | Path,
    extensions: Optional[Iterable[str]] = None,
    excluded_dirs: Optional[Iterable[str]] = None,
    max_files: Optional[int] = None,
) -> str:
    """List and render the project tree in one call."""
    files = list_project_files(
        project_root,
        extensions=extensions if extensions is not None else TREE.EXTENSIONS,
        excluded_dirs=excluded_dirs if excluded_dirs is not None else TREE.EXCLUDED_DIRS,
        max_files=max_files if max_files is not None else TREE.MAX_FILES,
    )
    return render_tree(files)
