"""
Request Phases
==============
The individual steps of the request pipeline. Each phase takes the request
context, mutates it and returns it. Phases are bound methods of
RequestPhases so that collaborators are injected once per pipeline.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from loguru import logger

from editflow.changes.apply import ChangeApplier
from editflow.changes.report import write_changes_report
from editflow.config import CHANGES_REPORT_FILENAME
from editflow.discovery.search import RipgrepSearcher
from editflow.discovery.service import FileDiscovery
from editflow.llm.assistant import CodeAssistant
from editflow.pipeline.context import FileRecord, PipelineContext
from editflow.semantics.extractor import SemanticExtractor
from editflow.utils.paths import (
    FileReadError,
    detect_language,
    is_within_project_root,
    read_text_file,
    resolve_file_path,
)
from editflow.utils.project_tree import build_project_tree


@dataclass
class PipelineServices:
    """Collaborators used by the request phases."""

    assistant: CodeAssistant = field(default_factory=CodeAssistant)
    extractor: SemanticExtractor = field(default_factory=SemanticExtractor)
    discovery: FileDiscovery = field(default_factory=lambda: FileDiscovery(RipgrepSearcher()))
    tree_builder: Callable[[str], str] = build_project_tree
    report_filename: str = CHANGES_REPORT_FILENAME


class RequestPhases:
    """Async phases over PipelineContext."""

    def __init__(self, services: Optional[PipelineServices] = None):
        self.services = services or PipelineServices()

    async def generate_project_tree(self, ctx: PipelineContext) -> PipelineContext:
        """Render the project tree; a failure leaves the tree unset."""
        try:
            ctx.project_tree = await asyncio.to_thread(self.services.tree_builder, ctx.project_root)
        except Exception as e:
            logger.warning(f"Could not generate project tree: {e}")
            ctx.project_tree = None
        return ctx

    async def read_files(self, ctx: PipelineContext) -> PipelineContext:
        """Load content for every record that has none yet.

        Records that already have content are kept as they are. Paths outside
        the project and unreadable files are dropped.
        """
        pending = [f for f in ctx.files if not f.has_content]
        if not pending:
            return ctx

        outcomes = await asyncio.gather(
            *[self._read_one(f, ctx.project_root) for f in pending],
            return_exceptions=True,
        )

        loaded = {}
        for record, outcome in zip(pending, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(f"Skipping file {record.path}: {outcome}")
                continue
            if outcome is not None:
                loaded[id(record)] = outcome

        files: List[FileRecord] = []
        seen = set()
        for record in ctx.files:
            if record.has_content:
                current = record
            elif id(record) in loaded:
                current = loaded[id(record)]
            else:
                continue
            if current.path in seen:
                continue
            seen.add(current.path)
            files.append(current)

        ctx.files = files
        logger.info(f"Read {len(loaded)} file(s); working set has {len(files)}")
        return ctx

    async def _read_one(self, record: FileRecord, project_root: str) -> Optional[FileRecord]:
        if not is_within_project_root(record.path, project_root):
            logger.warning(f"Ignoring file outside project root: {record.path}")
            return None

        resolved = resolve_file_path(record.path, project_root)
        try:
            content = await asyncio.to_thread(read_text_file, resolved)
        except FileReadError as e:
            logger.warning(str(e))
            return None

        return FileRecord(
            path=resolved,
            language=detect_language(resolved),
            content=content,
            semantic_summary=record.semantic_summary,
        )

    async def parse_semantics(self, ctx: PipelineContext) -> PipelineContext:
        for record in ctx.files:
            if record.has_content and record.semantic_summary is None:
                record.semantic_summary = self.services.extractor.parse_file(record)
        return ctx

    async def analyze_intent(self, ctx: PipelineContext) -> PipelineContext:
        ctx.intent = await self.services.assistant.analyze_intent(
            ctx.user_prompt, ctx.files, ctx.project_tree
        )
        logger.info(f"Intent: {ctx.intent.mode.value} - {ctx.intent.description}")
        return ctx

    async def discover_files(self, ctx: PipelineContext) -> PipelineContext:
        """Expand the working set from intent paths and search hints."""
        intent = ctx.intent
        hints = [*intent.search_terms, intent.description]
        candidates = await self.services.discovery.discover(
            list(intent.file_paths),
            [h for h in hints if h],
            ctx.known_paths(),
            ctx.project_root,
        )
        if not candidates:
            logger.info("Discovery found no additional files")
            return ctx

        relevant = await self.services.assistant.filter_relevant_file_paths(intent, candidates)
        allowed = set(candidates)
        relevant = [p for p in relevant if p in allowed]

        added = ctx.add_files(relevant)
        logger.info(f"Discovered {len(added)} relevant file(s) of {len(candidates)} candidate(s)")
        return ctx

    async def generate_changes(self, ctx: PipelineContext) -> PipelineContext:
        ctx.changes = await self.services.assistant.generate_changes(
            ctx.user_prompt, ctx.intent, ctx.files, ctx.project_tree
        )
        return ctx

    async def apply_changes(self, ctx: PipelineContext) -> PipelineContext:
        applier = ChangeApplier(self.services.assistant, ctx.project_root)
        await applier.apply(ctx.changes, ctx.result)
        return ctx

    async def write_changes(self, ctx: PipelineContext) -> PipelineContext:
        write_changes_report(
            ctx.changes,
            ctx.project_root,
            ctx.result,
            filename=self.services.report_filename,
        )
        return ctx

    async def generate_answer(self, ctx: PipelineContext) -> PipelineContext:
        ctx.answer = await self.services.assistant.generate_answer(
            ctx.user_prompt, ctx.intent, ctx.files, ctx.project_tree
        )
        return ctx
