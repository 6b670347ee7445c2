"""Claude-backed generation service: client, prompts and the code assistant."""

from .assistant import CodeAssistant, StructuredOutputError, parse_json_payload, strip_code_fences
from .claude_client import ClaudeClient, ModelTier, MODELS, TokenUsage, get_claude_client
