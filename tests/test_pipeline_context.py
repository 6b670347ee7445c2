"""
Tests for the Pipeline Context and Branch Conditions
====================================================

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

import json

import pytest

from editflow.changes.models import Change, ChangeOperation
from editflow.pipeline.conditions import (
    applies_changes,
    is_ask_mode,
    is_edit_mode,
    is_write_only,
    needs_more_context,
    writes_report,
)
from editflow.pipeline.context import ApplyResult, Intent, IntentMode, PipelineContext


def _intent(**overrides):
    payload = {
        "mode": "edit",
        "description": "Add validation to the widget form",
        "needsMoreContext": False,
        "filePaths": [],
        "searchTerms": [],
    }
    payload.update(overrides)
    return Intent.from_dict(payload)


class TestIntent:
    @pytest.mark.unit
    def test_from_dict_parses_mode_and_lists(self):
        intent = _intent(mode="ask", filePaths=["a.py", ""], searchTerms=["Widget"])

        assert intent.mode is IntentMode.ASK
        assert intent.file_paths == ("a.py",)
        assert intent.search_terms == ("Widget",)
        assert not intent.edit_mode

    @pytest.mark.unit
    def test_from_dict_accepts_legacy_edit_mode_flag(self):
        payload = {"editMode": True, "description": "Rename the loader function"}

        intent = Intent.from_dict(payload)

        assert intent.mode is IntentMode.EDIT
        assert intent.edit_mode

    @pytest.mark.unit
    @pytest.mark.parametrize("description", ["too short", "x" * 501])
    def test_from_dict_rejects_description_length(self, description):
        with pytest.raises(ValueError, match="description"):
            _intent(description=description)

    @pytest.mark.unit
    def test_from_dict_rejects_unknown_mode(self):
        with pytest.raises(ValueError):
            _intent(mode="review")

    @pytest.mark.unit
    def test_placeholder_is_ask_without_context_request(self):
        intent = Intent.placeholder()
        assert intent.mode is IntentMode.ASK
        assert intent.needs_more_context is False


class TestPipelineContext:
    @pytest.mark.unit
    def test_create_seeds_unique_file_records(self, tmp_path):
        ctx = PipelineContext.create("Explain the app", ["a.py", "a.py", " ", "b.py"], tmp_path)

        assert [f.path for f in ctx.files] == ["a.py", "b.py"]
        assert ctx.project_root == str(tmp_path)
        assert ctx.result.is_empty()
        assert ctx.intent.mode is IntentMode.ASK

    @pytest.mark.unit
    def test_add_files_skips_known_paths(self, tmp_path):
        ctx = PipelineContext.create("Explain the app", ["a.py"], tmp_path)

        added = ctx.add_files(["a.py", "b.py", "b.py", "c.py"])

        assert added == ["b.py", "c.py"]
        assert ctx.known_paths() == {"a.py", "b.py", "c.py"}

    @pytest.mark.unit
    def test_write_json_round_trips_payload(self, tmp_path):
        ctx = PipelineContext.create("Add a widget", ["a.py"], tmp_path, write_only=True)
        ctx.changes = [Change(ChangeOperation.NEW_FILE, "src/new.ts", new_code_block="x")]
        ctx.result.created_files.append("src/new.ts")
        out = tmp_path / "context.json"

        ctx.write_json(out)

        payload = json.loads(out.read_text(encoding="utf-8"))
        assert payload["run_id"] == ctx.run_id
        assert payload["write_only"] is True
        assert payload["changes"][0]["filePath"] == "src/new.ts"
        assert payload["result"] == {"modifiedFiles": [], "deletedFiles": [], "createdFiles": ["src/new.ts"]}

    @pytest.mark.unit
    def test_apply_result_to_dict_uses_camel_case(self):
        result = ApplyResult(modified_files=["m"], deleted_files=["d"])
        assert result.to_dict() == {"modifiedFiles": ["m"], "deletedFiles": ["d"], "createdFiles": []}
        assert not result.is_empty()


class TestConditions:
    @pytest.mark.unit
    def test_mode_predicates(self, tmp_path):
        ctx = PipelineContext.create("Add a widget", [], tmp_path)
        ctx.intent = _intent(mode="edit", needsMoreContext=True)

        assert is_edit_mode(ctx)
        assert not is_ask_mode(ctx)
        assert needs_more_context(ctx)
        assert applies_changes(ctx)
        assert not writes_report(ctx)

    @pytest.mark.unit
    def test_write_only_routes_edit_to_report(self, tmp_path):
        ctx = PipelineContext.create("Add a widget", [], tmp_path, write_only=True)
        ctx.intent = _intent(mode="edit")

        assert is_write_only(ctx)
        assert writes_report(ctx)
        assert not applies_changes(ctx)

    @pytest.mark.unit
    def test_ask_mode_never_changes_files(self, tmp_path):
        ctx = PipelineContext.create("What does this do?", [], tmp_path, write_only=True)
        ctx.intent = _intent(mode="ask")

        assert is_ask_mode(ctx)
        assert not applies_changes(ctx)
        assert not writes_report(ctx)
