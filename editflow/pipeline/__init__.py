"""Request pipeline: context, engine, branch conditions, phases and runner."""

from .context import ApplyResult, FileRecord, Intent, IntentMode, PipelineContext
from .engine import (
    Guarded,
    GuardedGroup,
    LoguruObserver,
    NullObserver,
    PipelineObserver,
    Plain,
    phase_name,
    pipeline,
)
from .conditions import (
    applies_changes,
    is_ask_mode,
    is_edit_mode,
    is_write_only,
    needs_more_context,
    writes_report,
)
from .phases import PipelineServices, RequestPhases
from .runner import build_request_pipeline, process_request
