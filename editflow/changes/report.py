"""
Change Formatting and Reports
=============================
Text renderings of change batches:

- format_changes: compact listing handed to the rewrite step
- build_changes_report: Markdown review document for write-only mode,
  grouped by file with before/after code blocks

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Sequence

from loguru import logger

from editflow.changes.models import Change, ChangeOperation, ModificationType, group_changes_by_file
from editflow.config import CHANGES_REPORT_FILENAME
from editflow.utils.paths import safe_write_file

if TYPE_CHECKING:
    from editflow.pipeline.context import ApplyResult


_ACTION_BY_MODIFICATION = {
    ModificationType.REPLACE_BLOCK: "Replace the old code block with the new code block above",
    ModificationType.ADD_BLOCK: "Add the new code block to the appropriate location in the file",
    ModificationType.REMOVE_BLOCK: "Remove the old code block from the file",
}

REPORT_HEADER = "\n".join([
    "# Code Changes",
    "Review the changes and apply manually to your codebase.",
    "",
    "---",
    "",
])


def format_changes(changes: Sequence[Change]) -> str:
    """Render changes as plain text for a rewrite prompt."""
    blocks: List[str] = []
    for change in changes:
        text = f"{change.file_path}: {change.operation.value}"
        if not change.is_delete:
            text += f" ({change.modification_type.value})"
        if change.modification_description:
            text += f"\n{change.modification_description}"
        if change.old_code_block:
            text += f"\nOld Code Block:\n{change.old_code_block}"
        if change.new_code_block:
            text += f"\nNew Code Block:\n{change.new_code_block}"
        blocks.append(text)
    return "\n\n".join(blocks)


def _describe(change: Change) -> str:
    if change.operation is ChangeOperation.NEW_FILE:
        return f"Create new file: {change.modification_description or 'New file creation'}"
    if change.operation is ChangeOperation.DELETE_FILE:
        return f"Delete file: {change.modification_description or 'Remove this file'}"
    return f"{change.modification_type.value}: {change.modification_description or 'Modify existing file'}"


def format_file_report(file_path: str, changes: Sequence[Change]) -> str:
    """Markdown section for all changes to one file."""
    output = [f"## File: {file_path}", ""]

    for change in changes:
        output.append(f"### {_describe(change)}\n")

        if change.old_code_block and change.operation is ChangeOperation.MODIFY_FILE:
            output.append("**Old Code:**\n```")
            output.append(change.old_code_block)
            output.append("```\n")

        if change.new_code_block and not change.is_delete:
            output.append("**New Code:**\n```")
            output.append(change.new_code_block)
            output.append("```\n")

        if change.is_delete:
            output.append("**Action:** Delete this file completely\n")
        elif change.is_new_file:
            output.append("**Action:** Create this file with the new code above\n")
        else:
            action = _ACTION_BY_MODIFICATION.get(change.modification_type)
            if action:
                output.append(f"**Action:** {action}\n")

        output.append("---\n")

    return "\n".join(output)


def build_changes_report(changes: Sequence[Change]) -> str:
    """Full Markdown report, one section per file in first-seen order."""
    sections = [
        format_file_report(file_path, file_changes)
        for file_path, file_changes in group_changes_by_file(changes).items()
    ]
    return REPORT_HEADER + "\n".join(sections)


def write_changes_report(
    changes: Sequence[Change],
    project_root: str,
    result: "ApplyResult",
    filename: str = CHANGES_REPORT_FILENAME,
) -> Optional[Path]:
    """Write the Markdown report under project_root instead of touching sources.

    Returns:
        Path of the written report, or None when there was nothing to write.
    """
    if not changes:
        logger.info("No changes to write to file")
        return None

    written = safe_write_file(filename, build_changes_report(changes), project_root)
    result.created_files.append(filename)
    logger.info(f"Changes written to {written}")
    return Path(written)
