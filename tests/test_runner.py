"""
Tests for the Request Runner
============================
End-to-end runs of the assembled pipeline with faked generation service and
search, against a temporary project.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from editflow.changes.models import Change, ChangeOperation, ModificationType
from editflow.discovery.service import FileDiscovery
from editflow.pipeline.context import Intent
from editflow.pipeline.engine import NullObserver
from editflow.pipeline.phases import PipelineServices
from editflow.pipeline.runner import process_request
from editflow.semantics.extractor import SemanticExtractor


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


@pytest.fixture
def project(tmp_path):
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "form.ts").write_text("export const form = 1;\n", encoding="utf-8")
    (tmp_path / "src" / "widget.ts").write_text("export class Widget {}\n", encoding="utf-8")
    return tmp_path


def _services(intent, search_results=None, changes=None):
    assistant = MagicMock()
    assistant.analyze_intent = AsyncMock(return_value=intent)
    assistant.filter_relevant_file_paths = AsyncMock(side_effect=lambda i, paths: list(paths))
    assistant.generate_changes = AsyncMock(return_value=changes or [])
    assistant.apply_file_changes = AsyncMock(return_value="export const form = 2;\n")
    assistant.generate_answer = AsyncMock(return_value="The form lives in src/form.ts.")

    searcher = MagicMock()
    searcher.search = AsyncMock(return_value=search_results or [])

    return PipelineServices(
        assistant=assistant,
        extractor=SemanticExtractor(),
        discovery=FileDiscovery(searcher),
    ), searcher


@pytest.mark.unit
@pytest.mark.asyncio
async def test_ask_request_produces_answer_without_changes(project):
    services, searcher = _services(_intent(mode="ask"))

    ctx = await process_request("Where is the form?", ["src/form.ts"], project, services=services, observer=NullObserver())

    assert ctx.answer == "The form lives in src/form.ts."
    assert ctx.result.is_empty()
    services.assistant.generate_changes.assert_not_called()
    searcher.search.assert_not_called()
    assert ctx.project_tree is not None and "form.ts" in ctx.project_tree


@pytest.mark.unit
@pytest.mark.asyncio
async def test_edit_request_with_discovery_applies_changes(project):
    widget = str(project / "src" / "widget.ts")
    change = Change(
        ChangeOperation.MODIFY_FILE,
        "src/form.ts",
        ModificationType.REPLACE_BLOCK,
        "Bump",
        "export const form = 1;",
        "export const form = 2;",
    )
    services, searcher = _services(
        _intent(needsMoreContext=True, searchTerms=["Widget"]),
        search_results=[widget, "/etc/passwd"],
        changes=[change],
    )

    ctx = await process_request("Update the form", ["src/form.ts"], project, services=services, observer=NullObserver())

    assert [f.path for f in ctx.files] == [str(project / "src" / "form.ts"), widget]
    assert all(f.content is not None for f in ctx.files)
    assert ctx.files[1].semantic_summary is not None
    assert ctx.result.modified_files == ["src/form.ts"]
    assert (project / "src" / "form.ts").read_text(encoding="utf-8") == "export const form = 2;\n"
    assert ctx.answer is None
    services.assistant.generate_answer.assert_not_called()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_write_only_request_writes_report(project):
    change = Change(ChangeOperation.NEW_FILE, "src/new.ts", ModificationType.ADD_BLOCK, "Create", "", "x")
    services, _ = _services(_intent(), changes=[change])

    ctx = await process_request(
        "Create a module", [], project, write_only=True, services=services, observer=NullObserver()
    )

    assert ctx.result.created_files == ["CHANGES.md"]
    assert "## File: src/new.ts" in (project / "CHANGES.md").read_text(encoding="utf-8")
    assert not (project / "src" / "new.ts").exists()
    services.assistant.apply_file_changes.assert_not_called()
    services.assistant.generate_changes.assert_awaited_once()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_intent_failure_aborts_run(project):
    services, _ = _services(_intent())
    services.assistant.analyze_intent = AsyncMock(side_effect=ValueError("malformed output"))

    with pytest.raises(ValueError, match="malformed output"):
        await process_request("Update the form", [], project, services=services, observer=NullObserver())

    services.assistant.generate_changes.assert_not_called()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_process_request_validates_inputs(tmp_path):
    with pytest.raises(ValueError, match="prompt"):
        await process_request("   ", [], tmp_path)
    with pytest.raises(ValueError, match="not a directory"):
        await process_request("Explain", [], tmp_path / "missing")
