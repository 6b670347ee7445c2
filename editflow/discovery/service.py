"""
File Discovery
==============
Expands the working file set from two independent signals:

- explicit paths named by intent analysis
- search hints (search terms and the intent description), reduced to
  keyword-like tokens and matched against project sources

Every admitted path lies inside the project root and is not already part of
the working set. Out-of-bounds candidates are dropped silently; discovery
never raises for them.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

from typing import Iterable, List, Protocol, Sequence

from loguru import logger

from editflow.config import SEARCH
from editflow.discovery.terms import TermExtractor, extract_terms, reduce_terms
from editflow.utils.paths import filter_paths_within_project, resolve_file_path


class TextSearcher(Protocol):
    """Returns absolute paths of files matching any of the terms."""

    async def search(self, terms: Sequence[str], project_root: str) -> List[str]:
        ...


class FileDiscovery:
    """Path- and term-based discovery bounded by the project root."""

    def __init__(
        self,
        searcher: TextSearcher,
        extractor: TermExtractor = extract_terms,
        max_files_per_term: int = SEARCH.MAX_FILES_PER_TERM,
    ):
        self.searcher = searcher
        self.extractor = extractor
        self.max_files_per_term = max_files_per_term

    def discover_from_paths(
        self,
        explicit_paths: Iterable[str],
        existing_paths: Iterable[str],
        project_root: str,
    ) -> List[str]:
        """Resolve explicit paths against the root and keep in-bounds, unseen ones."""
        resolved = [resolve_file_path(p, project_root) for p in explicit_paths if p and p.strip()]
        return filter_paths_within_project(resolved, existing_paths, project_root)

    async def discover_from_search_terms(
        self,
        hints: Iterable[str],
        existing_paths: Iterable[str],
        project_root: str,
    ) -> List[str]:
        """Search project sources for the reduced terms.

        Contributes nothing when no terms survive reduction (the searcher is
        not called) or when the search fails.
        """
        terms = reduce_terms(hints, self.extractor)
        if not terms:
            logger.debug("No search terms left after reduction")
            return []

        try:
            candidates = await self.searcher.search(terms, project_root)
        except Exception as e:
            logger.warning(f"Search-based discovery failed: {e}")
            return []

        filtered = filter_paths_within_project(candidates, existing_paths, project_root)
        return filtered[: len(terms) * self.max_files_per_term]

    async def discover(
        self,
        explicit_paths: Sequence[str],
        hints: Sequence[str],
        existing_paths: Iterable[str],
        project_root: str,
    ) -> List[str]:
        """Union of both sources, deduplicated, minus the existing set."""
        existing = set(existing_paths)
        existing |= {resolve_file_path(p, project_root) for p in existing}
        discovered: List[str] = []

        if explicit_paths:
            logger.debug("Discovering files based on paths\n" + "\n".join(explicit_paths))
            discovered.extend(self.discover_from_paths(explicit_paths, existing, project_root))

        if hints:
            logger.debug("Discovering files based on hints\n" + "\n".join(hints))
            discovered.extend(await self.discover_from_search_terms(hints, existing, project_root))

        return [p for p in dict.fromkeys(discovered) if p not in existing]
