"""
Request Runner
==============
Assembles the request pipeline from the phases and runs one request.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Awaitable, Callable, Iterable, Optional, Union

from loguru import logger

from editflow.pipeline.conditions import (
    applies_changes,
    is_ask_mode,
    needs_more_context,
    writes_report,
)
from editflow.pipeline.context import PipelineContext
from editflow.pipeline.engine import Guarded, GuardedGroup, PipelineObserver, Plain, pipeline
from editflow.pipeline.phases import PipelineServices, RequestPhases
from editflow.tracing import init_tracing, safe_set_span_attributes


def build_request_pipeline(
    phases: RequestPhases,
    observer: Optional[PipelineObserver] = None,
) -> Callable[[PipelineContext], Awaitable[PipelineContext]]:
    return pipeline(
        Plain(phases.generate_project_tree),
        Plain(phases.read_files),
        Plain(phases.parse_semantics),
        Plain(phases.analyze_intent),
        GuardedGroup(needs_more_context, [
            phases.discover_files,
            phases.read_files,
            phases.parse_semantics,
        ]),
        GuardedGroup(applies_changes, [
            phases.generate_changes,
            phases.apply_changes,
        ]),
        GuardedGroup(writes_report, [
            phases.generate_changes,
            phases.write_changes,
        ]),
        Guarded(is_ask_mode, phases.generate_answer),
        observer=observer,
    )


async def process_request(
    prompt: str,
    initial_file_paths: Iterable[str],
    project_root: Union[str, Path],
    *,
    write_only: bool = False,
    services: Optional[PipelineServices] = None,
    observer: Optional[PipelineObserver] = None,
) -> PipelineContext:
    """Run one request end to end and return the final context.

    Raises:
        ValueError: When the prompt is empty or project_root is not a directory.
    """
    if not prompt or not prompt.strip():
        raise ValueError("A prompt is required")
    if not os.path.isdir(os.fspath(project_root)):
        raise ValueError(f"Project root is not a directory: {project_root}")

    ctx = PipelineContext.create(prompt.strip(), initial_file_paths, project_root, write_only=write_only)
    run = build_request_pipeline(RequestPhases(services), observer=observer)

    logger.info(f"Processing request {ctx.run_id} in {ctx.project_root}")
    tracer = init_tracing()
    with tracer.start_as_current_span("editflow.process_request") as span:
        safe_set_span_attributes(span, {
            "editflow.run_id": ctx.run_id,
            "editflow.write_only": write_only,
            "editflow.seed_files": len(ctx.initial_file_paths),
        })
        ctx = await run(ctx)
        safe_set_span_attributes(span, {"editflow.intent_mode": ctx.intent.mode.value})

    return ctx
