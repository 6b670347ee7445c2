"""Pipeline request context.

This module defines the single mutable record threaded through every phase
of one request: the prompt and seed paths, the working file set, the
analyzed intent, proposed changes, the answer (ask mode) and the audit
trail of file-system effects.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set
from uuid import uuid4

from editflow.changes.models import Change
from editflow.semantics.extractor import SemanticSummary

DESCRIPTION_MIN_LENGTH = 10
DESCRIPTION_MAX_LENGTH = 500


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class IntentMode(Enum):
    """What the requester wants: information (ASK) or file changes (EDIT)."""
    ASK = "ask"
    EDIT = "edit"


@dataclass
class FileRecord:
    """One file in the working set. Content, once read, is never replaced."""

    path: str
    language: Optional[str] = None
    content: Optional[str] = None
    semantic_summary: Optional[SemanticSummary] = None

    @property
    def has_content(self) -> bool:
        return self.content is not None


@dataclass(frozen=True)
class Intent:
    """Analyzed request intent; drives every conditional branch."""

    mode: IntentMode
    description: str
    needs_more_context: bool = False
    file_paths: tuple = ()
    search_terms: tuple = ()

    @property
    def edit_mode(self) -> bool:
        return self.mode is IntentMode.EDIT

    @classmethod
    def placeholder(cls) -> "Intent":
        return cls(mode=IntentMode.ASK, description="")

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Intent":
        """Build an intent from structured collaborator output.

        Accepts `mode` ("ask"/"edit") or a legacy boolean `editMode`.

        Raises:
            ValueError: On an unknown mode or a description outside 10-500 characters.
        """
        if "mode" in payload:
            mode = IntentMode(str(payload["mode"]).lower())
        else:
            mode = IntentMode.EDIT if payload.get("editMode") else IntentMode.ASK

        description = str(payload.get("description") or "").strip()
        if not DESCRIPTION_MIN_LENGTH <= len(description) <= DESCRIPTION_MAX_LENGTH:
            raise ValueError(
                f"Intent description must be {DESCRIPTION_MIN_LENGTH}-{DESCRIPTION_MAX_LENGTH} "
                f"characters, got {len(description)}"
            )

        return cls(
            mode=mode,
            description=description,
            needs_more_context=bool(payload.get("needsMoreContext", False)),
            file_paths=tuple(str(p) for p in payload.get("filePaths") or [] if p),
            search_terms=tuple(str(t) for t in payload.get("searchTerms") or [] if t),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "description": self.description,
            "needsMoreContext": self.needs_more_context,
            "filePaths": list(self.file_paths),
            "searchTerms": list(self.search_terms),
        }


@dataclass
class ApplyResult:
    """Append-only audit trail of file-system side effects."""

    modified_files: List[str] = field(default_factory=list)
    deleted_files: List[str] = field(default_factory=list)
    created_files: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.modified_files or self.deleted_files or self.created_files)

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "modifiedFiles": list(self.modified_files),
            "deletedFiles": list(self.deleted_files),
            "createdFiles": list(self.created_files),
        }


@dataclass
class PipelineContext:
    """State passed through the request pipeline phases."""

    user_prompt: str
    project_root: str
    initial_file_paths: tuple = ()
    files: List[FileRecord] = field(default_factory=list)
    project_tree: Optional[str] = None
    intent: Intent = field(default_factory=Intent.placeholder)
    changes: List[Change] = field(default_factory=list)
    answer: Optional[str] = None
    result: ApplyResult = field(default_factory=ApplyResult)
    write_only: bool = False

    run_id: str = field(default_factory=lambda: uuid4().hex)
    created_at: str = field(default_factory=_utc_now_iso)

    @classmethod
    def create(
        cls,
        user_prompt: str,
        initial_file_paths: Iterable[str],
        project_root: str | Path,
        write_only: bool = False,
    ) -> "PipelineContext":
        seeds = tuple(str(p) for p in initial_file_paths if str(p).strip())
        return cls(
            user_prompt=user_prompt,
            project_root=os.path.abspath(os.fspath(project_root)),
            initial_file_paths=seeds,
            files=[FileRecord(path=p) for p in dict.fromkeys(seeds)],
            write_only=write_only,
        )

    def known_paths(self) -> Set[str]:
        return {f.path for f in self.files}

    def add_files(self, paths: Iterable[str]) -> List[str]:
        """Append records for unseen paths; returns the paths actually added."""
        known = self.known_paths()
        added: List[str] = []
        for path in paths:
            if path in known:
                continue
            self.files.append(FileRecord(path=path))
            known.add(path)
            added.append(path)
        return added

    def to_payload(self) -> Dict[str, Any]:
        return {
            "schema_version": "1.0",
            "run_id": self.run_id,
            "created_at": self.created_at,
            "user_prompt": self.user_prompt,
            "project_root": self.project_root,
            "initial_file_paths": list(self.initial_file_paths),
            "write_only": self.write_only,
            "files": [
                {"path": f.path, "language": f.language, "has_content": f.has_content}
                for f in self.files
            ],
            "project_tree_available": self.project_tree is not None,
            "intent": self.intent.to_dict(),
            "changes": [c.to_dict() for c in self.changes],
            "answer": self.answer,
            "result": self.result.to_dict(),
        }

    def write_json(self, path: Path) -> None:
        path.write_text(
            json.dumps(self.to_payload(), indent=2, sort_keys=True) + "\n",
            encoding="utf-8",
        )
