"""
Change Application Engine
=========================
Realizes a batch of changes as file-system effects and records the audit
trail (created, modified and deleted files).

Application runs in two phases:

1. Stage: file groups are processed concurrently. Each group is
   boundary-checked, current content is read for modifications, and the
   rewriter produces the complete new file content. Nothing is written.
2. Commit: staged contents are written one file at a time. If a write
   fails, files already written in this run are restored from their
   pre-run content (or removed, along with any directories created for
   them, when they were new) and the error is
   re-raised. Deletes run after all writes have been committed; a failed
   delete is logged and skipped.

All changes for one file are handed to the rewriter together and land as a
single content replacement.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Protocol, Sequence, Tuple

from loguru import logger

from editflow.changes.models import Change, group_changes_by_file, validate_change_batch
from editflow.utils.paths import (
    ensure_within_project_root,
    read_text_file,
    safe_delete_file,
    safe_write_file,
)

if TYPE_CHECKING:
    from editflow.pipeline.context import ApplyResult


class FileRewriter(Protocol):
    """Produces the full new content of one file from its change group."""

    async def apply_file_changes(self, changes: Sequence[Change], current_content: str) -> str:
        ...


class ChangeCommitError(RuntimeError):
    """Raised when committing staged writes fails; completed writes were rolled back."""

    def __init__(self, file_path: str, cause: BaseException, rolled_back: List[str]):
        super().__init__(f"Failed to write {file_path}: {cause}")
        self.file_path = file_path
        self.rolled_back = rolled_back


@dataclass(frozen=True)
class StagedWrite:
    """Rewritten content for one file, ready to commit."""

    file_path: str
    resolved_path: str
    content: str
    is_new_file: bool


@dataclass(frozen=True)
class _Backup:
    resolved_path: str
    previous_content: Optional[str]
    # deepest first
    created_dirs: Tuple[str, ...] = ()


def _missing_parent_dirs(target: Path) -> Tuple[str, ...]:
    """Parent directories that a write to target would create, deepest first."""
    missing: List[str] = []
    parent = target.parent
    while not parent.exists() and parent != parent.parent:
        missing.append(str(parent))
        parent = parent.parent
    return tuple(missing)


class ChangeApplier:
    """Applies change batches under a single project root."""

    def __init__(self, rewriter: FileRewriter, project_root: str):
        self.rewriter = rewriter
        self.project_root = project_root

    async def apply(self, changes: Sequence[Change], result: "ApplyResult") -> "ApplyResult":
        """Apply changes and append the effects to result.

        Raises:
            MixedChangeBatchError: When a file mixes operations (before any side effect).
            ProjectBoundaryError: When a write or delete target is outside the project
                (before any side effect).
            FileReadError: When a file to modify cannot be read.
            ChangeCommitError: When a write fails during commit.
        """
        if not changes:
            return result

        groups = group_changes_by_file(changes)
        validate_change_batch(groups)

        delete_paths = [path for path, group in groups.items() if group[0].is_delete]
        write_groups = [(path, group) for path, group in groups.items() if not group[0].is_delete]

        for file_path in delete_paths:
            ensure_within_project_root(file_path, self.project_root)

        staged = await self._stage_all(write_groups)
        await asyncio.to_thread(self._commit, staged, result)

        for file_path in delete_paths:
            await asyncio.to_thread(self._delete, file_path, result)

        return result

    async def _stage_all(self, write_groups: List[Tuple[str, List[Change]]]) -> List[StagedWrite]:
        outcomes = await asyncio.gather(
            *[self._stage(path, group) for path, group in write_groups],
            return_exceptions=True,
        )

        failures = [o for o in outcomes if isinstance(o, BaseException)]
        if failures:
            for extra in failures[1:]:
                logger.error(f"Additional staging failure: {extra}")
            raise failures[0]

        return list(outcomes)

    async def _stage(self, file_path: str, changes: List[Change]) -> StagedWrite:
        resolved = ensure_within_project_root(file_path, self.project_root)
        is_new_file = changes[0].is_new_file

        current_content = ""
        if not is_new_file:
            current_content = await asyncio.to_thread(read_text_file, resolved)

        new_content = await self.rewriter.apply_file_changes(changes, current_content)
        logger.debug(f"Staged {len(changes)} change(s) for {file_path}")

        return StagedWrite(
            file_path=file_path,
            resolved_path=resolved,
            content=new_content,
            is_new_file=is_new_file,
        )

    def _commit(self, staged: List[StagedWrite], result: "ApplyResult") -> None:
        backups: List[_Backup] = []

        for item in staged:
            target = Path(item.resolved_path)
            created_dirs = _missing_parent_dirs(target)
            try:
                previous = target.read_text(encoding="utf-8") if target.is_file() else None
                safe_write_file(item.resolved_path, item.content, self.project_root)
            except Exception as e:
                logger.error(f"Error writing file {item.file_path}: {e}")
                rolled_back = self._rollback(backups)
                self._remove_empty_dirs(created_dirs)
                raise ChangeCommitError(item.file_path, e, rolled_back) from e
            backups.append(_Backup(item.resolved_path, previous, created_dirs))
            logger.info(f"File written successfully: {item.file_path}")

        for item in staged:
            if item.is_new_file:
                result.created_files.append(item.file_path)
            else:
                result.modified_files.append(item.file_path)

    def _rollback(self, backups: List[_Backup]) -> List[str]:
        restored: List[str] = []
        for backup in reversed(backups):
            target = Path(backup.resolved_path)
            try:
                if backup.previous_content is None:
                    target.unlink(missing_ok=True)
                else:
                    target.write_text(backup.previous_content, encoding="utf-8")
                restored.append(backup.resolved_path)
            except OSError as e:
                logger.error(f"Rollback failed for {backup.resolved_path}: {e}")
                continue
            self._remove_empty_dirs(backup.created_dirs)
        if restored:
            logger.warning(f"Rolled back {len(restored)} file(s) after a failed write")
        return restored

    def _remove_empty_dirs(self, directories: Sequence[str]) -> None:
        for directory in directories:
            if not os.path.isdir(directory) or os.listdir(directory):
                break
            try:
                os.rmdir(directory)
            except OSError as e:
                logger.error(f"Could not remove directory {directory}: {e}")
                break

    def _delete(self, file_path: str, result: "ApplyResult") -> None:
        try:
            removed = safe_delete_file(file_path, self.project_root)
        except (OSError, ValueError) as e:
            logger.error(f"Error deleting file {file_path}: {e}")
            return

        if not removed:
            logger.warning(f"File to delete does not exist: {file_path}")
            return

        result.deleted_files.append(file_path)
        logger.info(f"File deleted successfully: {file_path}")
