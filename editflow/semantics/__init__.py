"""Semantic summaries of source files."""

from .extractor import (
    SemanticExtractor,
    SemanticSummary,
    ImportInfo,
    ExportInfo,
    FunctionInfo,
    ClassInfo,
)
