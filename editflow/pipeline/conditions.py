"""Branch predicates over the current pipeline context."""

from __future__ import annotations

from editflow.pipeline.context import IntentMode, PipelineContext


def needs_more_context(ctx: PipelineContext) -> bool:
    return ctx.intent.needs_more_context


def is_edit_mode(ctx: PipelineContext) -> bool:
    return ctx.intent.mode is IntentMode.EDIT


def is_ask_mode(ctx: PipelineContext) -> bool:
    return ctx.intent.mode is IntentMode.ASK


def is_write_only(ctx: PipelineContext) -> bool:
    return ctx.write_only


def applies_changes(ctx: PipelineContext) -> bool:
    """Edit mode that rewrites project files directly."""
    return is_edit_mode(ctx) and not ctx.write_only


def writes_report(ctx: PipelineContext) -> bool:
    """Edit mode that only writes the Markdown change report."""
    return is_edit_mode(ctx) and ctx.write_only
