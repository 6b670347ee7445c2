"""
Change Model
============
Typed, file-scoped description of a proposed edit.

A Change creates, deletes or modifies one file. Modifications carry a block
level kind (replace, add, remove) and the old/new code blocks the rewrite
step works from.

Invariants enforced at construction:
- delete_file changes carry modification_type NONE and empty code blocks
- new_file changes never carry an old_code_block
- file_path is never empty

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List


class ChangeOperation(Enum):
    """File-level operation of a change."""
    NEW_FILE = "new_file"
    DELETE_FILE = "delete_file"
    MODIFY_FILE = "modify_file"


class ModificationType(Enum):
    """Block-level kind of a modification."""
    REPLACE_BLOCK = "replace_block"
    ADD_BLOCK = "add_block"
    REMOVE_BLOCK = "remove_block"
    NONE = "none"


class InvalidChangeError(ValueError):
    """Raised when a change violates the change model invariants."""


class MixedChangeBatchError(InvalidChangeError):
    """Raised when one file receives changes with different operations."""

    def __init__(self, file_path: str, operations: Iterable[ChangeOperation]):
        ops = ", ".join(sorted({op.value for op in operations}))
        super().__init__(f"Conflicting operations for {file_path}: {ops}")
        self.file_path = file_path


@dataclass(frozen=True)
class Change:
    """A single proposed edit to one file."""

    operation: ChangeOperation
    file_path: str
    modification_type: ModificationType = ModificationType.NONE
    modification_description: str = ""
    old_code_block: str = ""
    new_code_block: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.operation, ChangeOperation):
            raise InvalidChangeError(f"Unknown operation: {self.operation!r}")
        if not isinstance(self.modification_type, ModificationType):
            raise InvalidChangeError(f"Unknown modification type: {self.modification_type!r}")
        if not self.file_path or not self.file_path.strip():
            raise InvalidChangeError("File path cannot be empty")

        if self.operation is ChangeOperation.DELETE_FILE:
            if self.modification_type is not ModificationType.NONE:
                raise InvalidChangeError(
                    f"delete_file change for {self.file_path} must use modification type 'none'"
                )
            if self.old_code_block or self.new_code_block:
                raise InvalidChangeError(
                    f"delete_file change for {self.file_path} must not carry code blocks"
                )

        if self.operation is ChangeOperation.NEW_FILE and self.old_code_block:
            raise InvalidChangeError(
                f"new_file change for {self.file_path} must not carry an old code block"
            )

    @property
    def is_delete(self) -> bool:
        return self.operation is ChangeOperation.DELETE_FILE

    @property
    def is_new_file(self) -> bool:
        return self.operation is ChangeOperation.NEW_FILE

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Change":
        """Build a change from collaborator output (camelCase) or to_dict() output.

        Raises:
            InvalidChangeError: On unknown enum values or invariant violations.
        """

        def _get(camel: str, snake: str, default: str = "") -> Any:
            if camel in data:
                return data[camel]
            return data.get(snake, default)

        try:
            operation = ChangeOperation(_get("operation", "operation"))
            modification_type = ModificationType(_get("modificationType", "modification_type", "none"))
        except ValueError as e:
            raise InvalidChangeError(str(e)) from e

        return cls(
            operation=operation,
            file_path=str(_get("filePath", "file_path")),
            modification_type=modification_type,
            modification_description=str(_get("modificationDescription", "modification_description") or ""),
            old_code_block=str(_get("oldCodeBlock", "old_code_block") or ""),
            new_code_block=str(_get("newCodeBlock", "new_code_block") or ""),
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "operation": self.operation.value,
            "filePath": self.file_path,
            "modificationType": self.modification_type.value,
            "modificationDescription": self.modification_description,
            "oldCodeBlock": self.old_code_block,
            "newCodeBlock": self.new_code_block,
        }


def group_changes_by_file(changes: Iterable[Change]) -> Dict[str, List[Change]]:
    """Group changes by file path, keeping first-seen order of files and changes."""
    groups: Dict[str, List[Change]] = {}
    for change in changes:
        groups.setdefault(change.file_path, []).append(change)
    return groups


def validate_change_batch(groups: Dict[str, List[Change]]) -> None:
    """Require every file group to use a single operation.

    Raises:
        MixedChangeBatchError: When a file mixes operations (for example a
            delete together with a modification).
    """
    for file_path, file_changes in groups.items():
        operations = {c.operation for c in file_changes}
        if len(operations) > 1:
            raise MixedChangeBatchError(file_path, operations)
