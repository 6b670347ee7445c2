"""
Tests for the Change Model and Change Reports
=============================================

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

import pytest

from editflow.changes.models import (
    Change,
    ChangeOperation,
    InvalidChangeError,
    MixedChangeBatchError,
    ModificationType,
    group_changes_by_file,
    validate_change_batch,
)
from editflow.changes.report import (
    REPORT_HEADER,
    build_changes_report,
    format_changes,
    write_changes_report,
)
from editflow.pipeline.context import ApplyResult


def _modify(path="src/a.ts", old="const a = 1;", new="const a = 2;"):
    return Change(
        ChangeOperation.MODIFY_FILE,
        path,
        ModificationType.REPLACE_BLOCK,
        "Bump the constant",
        old,
        new,
    )


class TestChangeInvariants:
    @pytest.mark.unit
    def test_delete_requires_modification_type_none(self):
        with pytest.raises(InvalidChangeError, match="none"):
            Change(ChangeOperation.DELETE_FILE, "a.py", ModificationType.REMOVE_BLOCK)

    @pytest.mark.unit
    def test_delete_rejects_code_blocks(self):
        with pytest.raises(InvalidChangeError, match="code blocks"):
            Change(ChangeOperation.DELETE_FILE, "a.py", new_code_block="x")

    @pytest.mark.unit
    def test_new_file_rejects_old_code_block(self):
        with pytest.raises(InvalidChangeError, match="old code block"):
            Change(ChangeOperation.NEW_FILE, "a.py", ModificationType.ADD_BLOCK, old_code_block="x")

    @pytest.mark.unit
    def test_empty_path_rejected(self):
        with pytest.raises(InvalidChangeError):
            Change(ChangeOperation.NEW_FILE, "  ")

    @pytest.mark.unit
    def test_valid_delete(self):
        change = Change(ChangeOperation.DELETE_FILE, "a.py")
        assert change.is_delete
        assert change.modification_type is ModificationType.NONE
        assert change.old_code_block == change.new_code_block == ""


class TestChangeSerialization:
    @pytest.mark.unit
    def test_from_dict_reads_camel_case(self):
        change = Change.from_dict({
            "operation": "new_file",
            "filePath": "src/new.ts",
            "modificationType": "add_block",
            "modificationDescription": "Create module",
            "oldCodeBlock": "",
            "newCodeBlock": "export const x = 1;",
        })

        assert change.is_new_file
        assert change.new_code_block == "export const x = 1;"
        assert Change.from_dict(change.to_dict()) == change

    @pytest.mark.unit
    def test_from_dict_reads_snake_case(self):
        change = Change.from_dict({"operation": "delete_file", "file_path": "old.py"})
        assert change.file_path == "old.py"
        assert change.is_delete

    @pytest.mark.unit
    def test_from_dict_rejects_unknown_operation(self):
        with pytest.raises(InvalidChangeError):
            Change.from_dict({"operation": "rename_file", "filePath": "a.py"})


class TestBatches:
    @pytest.mark.unit
    def test_grouping_keeps_first_seen_order(self):
        a1, b1, a2 = _modify("a.ts"), _modify("b.ts"), _modify("a.ts", old="x", new="y")

        groups = group_changes_by_file([a1, b1, a2])

        assert list(groups) == ["a.ts", "b.ts"]
        assert groups["a.ts"] == [a1, a2]

    @pytest.mark.unit
    def test_mixed_operations_for_one_file_rejected(self):
        groups = group_changes_by_file([
            Change(ChangeOperation.DELETE_FILE, "a.ts"),
            _modify("a.ts"),
        ])

        with pytest.raises(MixedChangeBatchError) as exc:
            validate_change_batch(groups)
        assert exc.value.file_path == "a.ts"
        assert "delete_file" in str(exc.value)


class TestReport:
    @pytest.mark.unit
    def test_format_changes_lists_blocks(self):
        text = format_changes([_modify()])

        assert "src/a.ts: modify_file (replace_block)" in text
        assert "Old Code Block:\nconst a = 1;" in text
        assert "New Code Block:\nconst a = 2;" in text

    @pytest.mark.unit
    def test_report_groups_by_file_with_before_after(self):
        report = build_changes_report([
            _modify("a.ts"),
            Change(ChangeOperation.DELETE_FILE, "old.ts"),
            Change(ChangeOperation.NEW_FILE, "new.ts", ModificationType.ADD_BLOCK, "Create", "", "x"),
        ])

        assert report.startswith(REPORT_HEADER)
        assert report.index("## File: a.ts") < report.index("## File: old.ts") < report.index("## File: new.ts")
        assert "**Old Code:**\n```\nconst a = 1;\n```" in report
        assert "**New Code:**\n```\nconst a = 2;\n```" in report
        assert "**Action:** Delete this file completely" in report
        assert "**Action:** Create this file with the new code above" in report

    @pytest.mark.unit
    def test_write_changes_report_records_created_file(self, tmp_path):
        result = ApplyResult()

        written = write_changes_report([_modify()], str(tmp_path), result)

        assert written == tmp_path / "CHANGES.md"
        assert "## File: src/a.ts" in written.read_text(encoding="utf-8")
        assert result.created_files == ["CHANGES.md"]
        assert not (tmp_path / "src" / "a.ts").exists()

    @pytest.mark.unit
    def test_write_changes_report_skips_empty_batch(self, tmp_path):
        result = ApplyResult()

        assert write_changes_report([], str(tmp_path), result) is None
        assert result.is_empty()
        assert not (tmp_path / "CHANGES.md").exists()
