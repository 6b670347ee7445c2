"""
Tests for Centralized Configuration
===================================

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

import os
from dataclasses import FrozenInstanceError

import pytest

from editflow.config import LLM, PREVIEW, SEARCH, TREE, load_env_file_lenient


@pytest.mark.unit
def test_load_env_file_lenient_sets_missing_keys_only(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "\n".join([
            "# comment",
            "export EDITFLOW_TEST_A='quoted'",
            "EDITFLOW_TEST_B=plain",
            "not a pair",
            "1BAD=value",
        ]),
        encoding="utf-8",
    )
    monkeypatch.delenv("EDITFLOW_TEST_A", raising=False)
    monkeypatch.setenv("EDITFLOW_TEST_B", "existing")

    load_env_file_lenient(env_file)

    assert os.environ["EDITFLOW_TEST_A"] == "quoted"
    assert os.environ["EDITFLOW_TEST_B"] == "existing"
    assert "1BAD" not in os.environ
    monkeypatch.delenv("EDITFLOW_TEST_A")


@pytest.mark.unit
def test_load_env_file_lenient_ignores_missing_file(tmp_path):
    load_env_file_lenient(tmp_path / "absent.env")


@pytest.mark.unit
def test_defaults_are_sane():
    assert SEARCH.TIMEOUT_SECONDS > 0
    assert SEARCH.MAX_FILES_PER_TERM >= 1
    assert "node_modules" in SEARCH.EXCLUDED_DIRS
    assert "py" in TREE.EXTENSIONS
    assert PREVIEW.MAX_LINES > 0
    assert LLM.MAX_ATTEMPTS >= 1


@pytest.mark.unit
def test_config_is_frozen():
    with pytest.raises(FrozenInstanceError):
        SEARCH.MAX_FILES = 1
