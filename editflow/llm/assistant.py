"""
Code Assistant
==============
Generation service used by the request pipeline. Every structured call asks
Claude for JSON, strips optional markdown fences, parses the payload and
validates it against a schema under editflow/schemas before converting it
into domain objects.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

import json
import re
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Sequence

from loguru import logger

from editflow.changes.models import Change, InvalidChangeError
from editflow.llm import prompts
from editflow.utils.schema_validation import (
    validate_changes_payload,
    validate_intent_payload,
    validate_relevant_paths_payload,
)

if TYPE_CHECKING:
    from editflow.llm.claude_client import ClaudeClient
    from editflow.pipeline.context import FileRecord, Intent


_FENCE_RE = re.compile(r"^\s*```[a-zA-Z0-9_-]*\s*\n(.*?)\n?\s*```\s*$", re.DOTALL)


class StructuredOutputError(ValueError):
    """Raised when a model response is not valid JSON for the expected schema."""


def strip_code_fences(text: str) -> str:
    match = _FENCE_RE.match(text or "")
    return match.group(1) if match else (text or "").strip()


def parse_json_payload(text: str) -> Dict[str, Any]:
    """Parse a JSON object from a model response.

    Raises:
        StructuredOutputError: When the text is not a JSON object.
    """
    cleaned = strip_code_fences(text)
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise StructuredOutputError(f"Response is not valid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise StructuredOutputError("Response JSON must be an object")
    return payload


class CodeAssistant:
    """Claude-backed intent analysis, change generation, rewriting and answering."""

    def __init__(self, client: Optional["ClaudeClient"] = None):
        self._client = client

    @property
    def client(self) -> "ClaudeClient":
        # Created on first use; constructing it requires ANTHROPIC_API_KEY
        if self._client is None:
            from editflow.llm.claude_client import get_claude_client

            self._client = get_claude_client()
        return self._client

    async def complete_structured(
        self,
        prompt: str,
        validator: Callable[[Dict[str, Any]], None],
    ) -> Dict[str, Any]:
        """Request JSON output and validate it.

        Raises:
            StructuredOutputError: When the response fails parsing or validation.
        """
        text = await self.client.chat_async(
            messages=[{"role": "user", "content": prompt}],
            system=prompts.STRUCTURED_OUTPUT_SYSTEM_PROMPT,
        )
        payload = parse_json_payload(text)
        try:
            validator(payload)
        except ValueError as e:
            raise StructuredOutputError(str(e)) from e
        return payload

    async def analyze_intent(
        self,
        user_prompt: str,
        files: Sequence["FileRecord"],
        project_tree: Optional[str],
    ) -> "Intent":
        from editflow.pipeline.context import Intent

        payload = await self.complete_structured(
            prompts.build_intent_prompt(user_prompt, files, project_tree),
            validate_intent_payload,
        )
        try:
            intent = Intent.from_dict(payload)
        except ValueError as e:
            raise StructuredOutputError(f"Invalid intent: {e}") from e

        logger.debug(f"Intent analyzed: {intent.to_dict()}")
        return intent

    async def filter_relevant_file_paths(
        self,
        intent: "Intent",
        candidate_paths: Sequence[str],
    ) -> List[str]:
        """Narrow candidate paths to those relevant to the intent.

        Paths not present in the candidates are discarded.
        """
        if not candidate_paths:
            return []

        payload = await self.complete_structured(
            prompts.build_relevant_paths_prompt(intent, candidate_paths),
            validate_relevant_paths_payload,
        )
        allowed = set(candidate_paths)
        selected = [p for p in payload["filePaths"] if p in allowed]
        dropped = len(payload["filePaths"]) - len(selected)
        if dropped:
            logger.warning(f"Ignored {dropped} relevant path(s) outside the candidate list")
        return list(dict.fromkeys(selected))

    async def generate_changes(
        self,
        user_prompt: str,
        intent: "Intent",
        files: Sequence["FileRecord"],
        project_tree: Optional[str],
    ) -> List[Change]:
        payload = await self.complete_structured(
            prompts.build_changes_prompt(user_prompt, intent, files, project_tree),
            validate_changes_payload,
        )
        try:
            changes = [Change.from_dict(item) for item in payload["changes"]]
        except InvalidChangeError as e:
            raise StructuredOutputError(f"Invalid change: {e}") from e

        logger.info(f"Generated {len(changes)} change(s)")
        return changes

    async def apply_file_changes(self, changes: Sequence[Change], current_content: str) -> str:
        """Rewrite one file with all of its changes and return the full new content.

        Raises:
            ValueError: When changes is empty or holds delete changes.
        """
        if not changes:
            raise ValueError("No changes to apply")
        if any(c.is_delete for c in changes):
            raise ValueError(f"Cannot rewrite a file scheduled for deletion: {changes[0].file_path}")

        text = await self.client.chat_async(
            messages=[{"role": "user", "content": prompts.build_rewrite_prompt(changes, current_content)}],
            system=prompts.REWRITE_SYSTEM_PROMPT,
        )
        return strip_code_fences(text)

    async def generate_answer(
        self,
        user_prompt: str,
        intent: "Intent",
        files: Sequence["FileRecord"],
        project_tree: Optional[str],
    ) -> str:
        text = await self.client.chat_async(
            messages=[{"role": "user", "content": prompts.build_answer_prompt(user_prompt, intent, files, project_tree)}],
            system=prompts.ANSWER_SYSTEM_PROMPT,
            temperature=0.7,
        )
        return text.strip()
