"""editflow.llm.prompts

Generation Service Prompts
==========================

Prompt templates and context formatting for the five generation service
calls: intent analysis, relevant file filtering, change generation, per-file
rewriting and answering.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from textwrap import dedent
from typing import TYPE_CHECKING, List, Optional, Sequence

from editflow.changes.models import Change, ChangeOperation
from editflow.changes.report import format_changes
from editflow.config import PREVIEW

if TYPE_CHECKING:
    from editflow.pipeline.context import FileRecord, Intent


STRUCTURED_OUTPUT_SYSTEM_PROMPT = (
    "You must respond with valid JSON that matches the requested structure. "
    "Do not include any text outside the JSON response. "
    "Do not wrap the JSON in markdown code blocks or use ``` formatting."
)

REWRITE_SYSTEM_PROMPT = (
    "You are a code rewriting assistant. Return only the complete rewritten file "
    "content without any additional formatting or explanation."
)

ANSWER_SYSTEM_PROMPT = (
    "You are a helpful software engineering assistant. Provide clear, accurate, and "
    "detailed answers based on the code analysis provided."
)


# =============================================================================
# Context formatting
# =============================================================================

def format_file_preview(file: "FileRecord", max_lines: int = PREVIEW.MAX_LINES) -> str:
    lines = (file.content or "").split("\n")
    if len(lines) > max_lines:
        body = "\n".join(lines[:max_lines]) + "\n...[truncated]"
    else:
        body = file.content or ""
    return f"{file.path}:\n{body}"


def format_file_previews(files: Sequence["FileRecord"]) -> str:
    previews = [format_file_preview(f) for f in files if f.has_content]
    return "\n\n".join(previews) if previews else "(no files provided)"


def format_file_semantics(files: Sequence["FileRecord"]) -> str:
    lines: List[str] = []
    for f in files:
        summary = f.semantic_summary
        if summary is None:
            continue
        lines.append(
            f"{f.path}:\n"
            f"  - Imports: {', '.join(i.source for i in summary.imports)}\n"
            f"  - Exports: {', '.join(e.name for e in summary.exports)}\n"
            f"  - Functions: {', '.join(fn.name for fn in summary.functions)}\n"
            f"  - Classes: {', '.join(c.name for c in summary.classes)}"
        )
    return "\n".join(lines) if lines else "(no semantic information)"


def _tree_section(project_tree: Optional[str]) -> str:
    return project_tree if project_tree else "(project tree unavailable)"


# =============================================================================
# Prompts
# =============================================================================

def build_intent_prompt(user_prompt: str, files: Sequence["FileRecord"], project_tree: Optional[str]) -> str:
    return dedent("""
        Analyze this code request to understand the intent and scope.

        User Request: {user_prompt}

        Files provided:
        {previews}

        Semantic Analysis:
        {semantics}

        Project tree:
        {tree}

        Based on this information, determine:
        1. mode: "edit" if the user wants code changes, "ask" if the user wants information, explanation or review
        2. description: a clear description of what needs to be done (10 to 500 characters)
        3. needsMoreContext: true if additional files are needed to understand or complete the request
        4. filePaths: specific file paths relevant to this intent
        5. searchTerms: precise symbols that actually appear in the source code and help discover relevant files

        Return JSON with exactly these keys: mode, description, needsMoreContext, filePaths, searchTerms.
    """).format(
        user_prompt=user_prompt,
        previews=format_file_previews(files),
        semantics=format_file_semantics(files),
        tree=_tree_section(project_tree),
    ).strip()


def build_relevant_paths_prompt(intent: "Intent", candidate_paths: Sequence[str]) -> str:
    return dedent("""
        Select the files that are relevant to this intent.

        Intent: {description}

        Candidate files:
        {candidates}

        Return JSON of the form {{"filePaths": [...]}} containing only paths copied
        verbatim from the candidate list. Return an empty list when none are relevant.
    """).format(
        description=intent.description,
        candidates="\n".join(candidate_paths),
    ).strip()


def build_changes_prompt(
    user_prompt: str,
    intent: "Intent",
    files: Sequence["FileRecord"],
    project_tree: Optional[str],
) -> str:
    return dedent("""
        You are a senior software engineer generating precise code changes for the following request.

        User Request: {user_prompt}

        Intent: {description}

        Project Tree:
        {tree}

        Files provided:
        {previews}

        Code Quality Requirements:
        - Follow the existing file patterns and conventions
        - Maintain consistent indentation and formatting
        - Ensure all variables are properly scoped

        Return JSON with a "changes" array. Each change has:
        1. operation: new_file, delete_file or modify_file
        2. filePath: path of the file being created, deleted or modified
        3. modificationType: replace_block, add_block, remove_block, or none for deleted files
        4. modificationDescription: what the modification does; empty for deleted files
        5. oldCodeBlock: the existing code block for modifications; empty for new or deleted files
        6. newCodeBlock: the code to insert; empty for deleted files

        Generate several changes for one file when needed, but never mix operations for one file.
        Escape quotes and newlines properly in JSON strings.
    """).format(
        user_prompt=user_prompt,
        description=intent.description,
        tree=_tree_section(project_tree),
        previews=format_file_previews(files),
    ).strip()


def build_rewrite_prompt(changes: Sequence[Change], current_content: str) -> str:
    if changes[0].operation is ChangeOperation.NEW_FILE:
        header = "Create a new file with the requested code blocks."
    else:
        header = "Apply ONLY the specified modifications to this existing file."

    return (
        f"{header}\n\n"
        f"Current File Content:\n```\n{current_content}\n```\n\n"
        f"Modifications to Apply:\n{format_changes(changes)}\n\n"
        "Instructions:\n"
        "1. Start with the exact current file content shown above\n"
        "2. Apply ONLY the specified modifications - do not change anything else\n"
        "3. For replace_block: find the exact old code block and replace it with the new code block\n"
        "4. For add_block: insert the new code block at the appropriate location\n"
        "5. For remove_block: remove only the specified code block\n"
        "6. Keep all other formatting, imports and code exactly as they are\n"
        "7. Return the complete file content without explanations or markdown formatting"
    )


def build_answer_prompt(
    user_prompt: str,
    intent: "Intent",
    files: Sequence["FileRecord"],
    project_tree: Optional[str],
) -> str:
    tree = f"Project Structure:\n{project_tree}\n\n" if project_tree else ""
    return (
        f"User Question: {user_prompt}\n\n"
        f"Intent: {intent.description}\n\n"
        f"{tree}"
        f"Files analyzed:\n{format_file_previews(files)}\n\n"
        f"Semantic Analysis:\n{format_file_semantics(files)}\n\n"
        "Based on this codebase analysis, answer the question accurately. Include specific "
        "code references where relevant. If the provided files do not contain the requested "
        "information, state clearly what is missing instead of speculating."
    )
