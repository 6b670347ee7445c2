"""
Tests for the Command Line Interface
====================================

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

import json
from unittest.mock import AsyncMock, patch

import pytest

from editflow import __version__
from editflow.cli import build_parser, main
from editflow.pipeline.context import PipelineContext


@pytest.mark.unit
def test_missing_prompt_exits_with_one(capsys):
    assert main([]) == 1


@pytest.mark.unit
def test_version_flag(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--version"])
    assert exc.value.code == 0
    assert __version__ in capsys.readouterr().out


@pytest.mark.unit
def test_parser_reads_flags():
    args = build_parser().parse_args(["-p", "Fix it", "-f", "a.py", "b.py", "-r", "/proj", "-w", "--verbose"])

    assert args.prompt == "Fix it"
    assert args.files == ["a.py", "b.py"]
    assert args.root == "/proj"
    assert args.write_only is True
    assert args.verbose is True


@pytest.mark.unit
def test_successful_run_prints_changes_and_writes_context(tmp_path, capsys):
    ctx = PipelineContext.create("Add a widget", [], tmp_path)
    ctx.result.created_files.append("src/widget.ts")
    out = tmp_path / "context.json"

    with patch("editflow.cli.process_request", new=AsyncMock(return_value=ctx)) as run, \
            patch("editflow.cli.configure_logging"):
        code = main(["Add a widget", "-r", str(tmp_path), "-f", "src/app.ts", "--context-out", str(out)])

    assert code == 0
    assert run.call_args.args[0] == "Add a widget"
    assert run.call_args.args[1] == ["src/app.ts"]
    assert run.call_args.kwargs["write_only"] is False
    assert "src/widget.ts" in capsys.readouterr().out
    assert json.loads(out.read_text(encoding="utf-8"))["result"]["createdFiles"] == ["src/widget.ts"]


@pytest.mark.unit
def test_ask_run_prints_answer(tmp_path, capsys):
    ctx = PipelineContext.create("What is this?", [], tmp_path)
    ctx.answer = "It is a widget factory."

    with patch("editflow.cli.process_request", new=AsyncMock(return_value=ctx)), \
            patch("editflow.cli.configure_logging"):
        assert main(["-p", "What is this?", "-r", str(tmp_path)]) == 0

    assert "widget factory" in capsys.readouterr().out


@pytest.mark.unit
def test_failure_exits_with_one(tmp_path, capsys):
    with patch("editflow.cli.process_request", new=AsyncMock(side_effect=RuntimeError("boom"))), \
            patch("editflow.cli.configure_logging"):
        assert main(["Fix it", "-r", str(tmp_path)]) == 1

    assert "boom" in capsys.readouterr().out
