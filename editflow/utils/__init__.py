"""
Utility Functions
=================
Path boundary checks, schema validation and project tree rendering.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from .paths import (
    ProjectBoundaryError,
    FileReadError,
    resolve_file_path,
    is_within_project_root,
    filter_paths_within_project,
    ensure_within_project_root,
    detect_language,
    display_path,
    read_text_file,
    safe_write_file,
    safe_delete_file,
)

from .schema_validation import (
    validate_against_schema,
    validate_intent_payload,
    validate_changes_payload,
    validate_relevant_paths_payload,
)

from .project_tree import build_project_tree, list_project_files
