"""
Centralized Configuration
=========================
Centralized configuration values and constants for the editflow pipeline.

This module provides:
- Model and timeout settings for the generation service
- Search and discovery limits
- Project tree generation settings
- Tracing settings

Values are read from environment variables once, at import time. A `.env`
file in the working directory is loaded leniently first (existing variables win).

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple


def load_env_file_lenient(env_path: Optional[Path] = None) -> None:
    """Load a .env file without raising or printing parse warnings."""
    env_path = env_path or Path.cwd() / ".env"
    if not env_path.exists():
        return

    try:
        lines = env_path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError):
        return

    for raw_line in lines:
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if not key:
            continue
        if not re.match(r"^[A-Za-z_][A-Za-z0-9_]*$", key):
            continue
        os.environ.setdefault(key, value)


load_env_file_lenient()


def _env_list(name: str, default: str) -> Tuple[str, ...]:
    raw = os.getenv(name, default)
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class LLMConfig:
    """Generation service settings."""

    # Model tier name: opus, sonnet or haiku
    MODEL: str = os.getenv("EDITFLOW_MODEL", "sonnet")
    MAX_TOKENS: int = int(os.getenv("EDITFLOW_MAX_TOKENS", "8000"))
    TEMPERATURE: float = float(os.getenv("EDITFLOW_TEMPERATURE", "0"))

    # Timeouts in seconds
    API_TIMEOUT: int = int(os.getenv("EDITFLOW_LLM_TIMEOUT", "600"))
    CONNECT_TIMEOUT: int = 30

    # Attempts for transient API failures (rate limit, overload, network)
    MAX_ATTEMPTS: int = int(os.getenv("EDITFLOW_LLM_MAX_ATTEMPTS", "3"))


@dataclass(frozen=True)
class SearchConfig:
    """Text search and discovery limits."""

    TIMEOUT_SECONDS: float = float(os.getenv("EDITFLOW_SEARCH_TIMEOUT", "10"))

    # Hard cap on paths returned by one search invocation
    MAX_FILES: int = int(os.getenv("EDITFLOW_SEARCH_MAX_FILES", "50"))

    # Discovery keeps at most this many paths per extracted search term
    MAX_FILES_PER_TERM: int = int(os.getenv("EDITFLOW_MAX_FILES_PER_TERM", "3"))

    FILE_GLOBS: Tuple[str, ...] = _env_list(
        "EDITFLOW_SEARCH_GLOBS",
        "*.py,*.ts,*.tsx,*.js,*.jsx",
    )
    EXCLUDED_DIRS: Tuple[str, ...] = _env_list(
        "EDITFLOW_SEARCH_EXCLUDE",
        "node_modules,dist,build,.git,coverage,.next,.nuxt,__pycache__,.venv,venv,.tox",
    )

    EXECUTABLE: str = os.getenv("EDITFLOW_RG", "rg")


@dataclass(frozen=True)
class TreeConfig:
    """Project tree generation settings."""

    EXTENSIONS: Tuple[str, ...] = _env_list(
        "EDITFLOW_TREE_TYPES",
        "py,ts,tsx,js,jsx,json,md,yaml,yml,toml",
    )
    EXCLUDED_DIRS: Tuple[str, ...] = _env_list(
        "EDITFLOW_TREE_EXCLUDE",
        "node_modules,.git,dist,build,.next,coverage,__pycache__,.venv,venv,.tox",
    )
    MAX_FILES: int = int(os.getenv("EDITFLOW_TREE_MAX_FILES", "100"))


@dataclass(frozen=True)
class PreviewConfig:
    """File preview limits for prompts."""

    MAX_LINES: int = int(os.getenv("EDITFLOW_PREVIEW_MAX_LINES", "400"))


@dataclass(frozen=True)
class TracingConfig:
    """Tracing configuration."""

    SERVICE_NAME: str = "editflow"
    OTLP_ENDPOINT: str = os.getenv("OTLP_ENDPOINT", "http://localhost:4318/v1/traces")
    ENABLED: bool = os.getenv("ENABLE_TRACING", "false").lower() == "true"


# Global singleton instances
LLM = LLMConfig()
SEARCH = SearchConfig()
TREE = TreeConfig()
PREVIEW = PreviewConfig()
TRACING = TracingConfig()

# Default file name for the write-only change report
CHANGES_REPORT_FILENAME = "CHANGES.md"
