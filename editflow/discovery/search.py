"""
Text Search Adapter
===================
Whole-word code search over a project using ripgrep.

The search is bounded by a hard timeout and never raises: a timeout, a
missing executable or any other failure yields an empty result. Returned
paths are absolute, inside the project root, deduplicated and capped.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

import asyncio
import os
import re
import subprocess
from typing import Dict, Iterable, List, Optional, Sequence

from loguru import logger

from editflow.config import SEARCH
from editflow.utils.paths import filter_paths_within_project, resolve_file_path

# Matching lines per file; only file names are used.
MAX_MATCHES_PER_FILE = 50

_ENV_ALLOWLIST = ("PATH", "HOME", "LANG", "LC_ALL", "LC_CTYPE", "TMPDIR", "TEMP", "TMP", "SYSTEMROOT")


def build_search_pattern(terms: Iterable[str]) -> str:
    """Alternation matching any term as a whole word."""
    escaped = [re.escape(t) for t in terms if t]
    if not escaped:
        raise ValueError("At least one search term is required")
    return r"\b(" + "|".join(escaped) + r")\b"


def _search_env() -> Dict[str, str]:
    """Minimal environment for the search subprocess (no inherited secrets)."""
    env = {key: os.environ[key] for key in _ENV_ALLOWLIST if key in os.environ}
    env.setdefault("LC_ALL", "C.UTF-8")
    return env


class RipgrepSearcher:
    """Runs `rg -l` scoped to source globs with build/VCS directories excluded."""

    def __init__(
        self,
        timeout_seconds: float = SEARCH.TIMEOUT_SECONDS,
        max_files: int = SEARCH.MAX_FILES,
        file_globs: Sequence[str] = SEARCH.FILE_GLOBS,
        excluded_dirs: Sequence[str] = SEARCH.EXCLUDED_DIRS,
        executable: str = SEARCH.EXECUTABLE,
    ):
        self.timeout_seconds = timeout_seconds
        self.max_files = max_files
        self.file_globs = tuple(file_globs)
        self.excluded_dirs = tuple(excluded_dirs)
        self.executable = executable

    def build_command(self, pattern: str, project_root: str) -> List[str]:
        args = [self.executable, "-l", "--no-ignore-vcs", "--max-count", str(MAX_MATCHES_PER_FILE)]
        for glob in self.file_globs:
            args += ["-g", glob]
        for directory in self.excluded_dirs:
            args.append(f"--glob=!**/{directory}/**")
        args += ["-e", pattern, project_root]
        return args

    async def search(self, terms: Sequence[str], project_root: str) -> List[str]:
        """Return absolute paths of files containing any term as a whole word."""
        terms = [t for t in terms if t]
        if not terms:
            return []

        pattern = build_search_pattern(terms)
        root = os.path.abspath(project_root)
        command = self.build_command(pattern, root)

        logger.info(f"Search: {pattern}")
        logger.debug(f"Search command: {' '.join(command)}")

        stdout = await self._run(command, root)
        if stdout is None:
            return []

        files = [
            resolve_file_path(line.strip(), root)
            for line in stdout.splitlines()
            if line.strip()
        ]
        files = filter_paths_within_project(files, [], root)
        return list(dict.fromkeys(files))[: self.max_files]

    async def _run(self, command: List[str], cwd: str) -> Optional[str]:
        try:
            completed = await asyncio.to_thread(
                subprocess.run,
                command,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout_seconds,
                cwd=cwd,
                env=_search_env(),
                stdin=subprocess.DEVNULL,
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"Search timed out after {self.timeout_seconds}s")
            return None
        except (OSError, ValueError) as e:
            logger.warning(f"Search failed: {type(e).__name__}: {e}")
            return None

        # ripgrep exits 1 when nothing matched
        if completed.returncode == 1:
            return ""
        if completed.returncode != 0:
            logger.warning(f"Search failed with exit code {completed.returncode}: {completed.stderr.strip()[:500]}")
            return None
        return completed.stdout
