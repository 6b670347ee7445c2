"""
Claude API Client
=================
Async Claude access for the generation service with:
- Model tier selection (Opus, Sonnet, Haiku)
- Retries with exponential backoff on transient API errors
- Token usage tracking and cost estimation

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

import anthropic
import httpx
from loguru import logger
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from editflow.config import LLM


class ModelTier(Enum):
    """Model tiers for task-based selection."""
    OPUS = "opus"       # Premium: Maximum intelligence, complex reasoning
    SONNET = "sonnet"   # Balanced: Coding, agents, general tasks
    HAIKU = "haiku"     # Fast: Classification, filtering


@dataclass
class ModelInfo:
    """Information about a Claude model."""
    id: str
    tier: ModelTier
    input_price_per_mtok: float
    output_price_per_mtok: float
    max_output: int


MODELS = {
    ModelTier.OPUS: ModelInfo(
        id="claude-opus-4-5-20251101",
        tier=ModelTier.OPUS,
        input_price_per_mtok=5.0,
        output_price_per_mtok=25.0,
        max_output=64_000,
    ),
    ModelTier.SONNET: ModelInfo(
        id="claude-sonnet-4-5-20250929",
        tier=ModelTier.SONNET,
        input_price_per_mtok=3.0,
        output_price_per_mtok=15.0,
        max_output=64_000,
    ),
    ModelTier.HAIKU: ModelInfo(
        id="claude-haiku-4-5-20251001",
        tier=ModelTier.HAIKU,
        input_price_per_mtok=1.0,
        output_price_per_mtok=5.0,
        max_output=64_000,
    ),
}

# Transient failures worth retrying
RETRYABLE_ERRORS = (
    anthropic.RateLimitError,
    anthropic.APIConnectionError,
    anthropic.InternalServerError,
)


def resolve_model_tier(model: Union[ModelTier, str, None], default: ModelTier = ModelTier.SONNET) -> ModelTier:
    if model is None:
        return default
    if isinstance(model, ModelTier):
        return model
    tier_map = {"opus": ModelTier.OPUS, "sonnet": ModelTier.SONNET, "haiku": ModelTier.HAIKU}
    return tier_map.get(model.lower(), default)


@dataclass
class TokenUsage:
    """Track token usage across requests."""
    input_tokens: int = 0
    output_tokens: int = 0
    requests: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    def add(self, usage: dict):
        """Add usage from API response."""
        self.input_tokens += usage.get("input_tokens", 0) or 0
        self.output_tokens += usage.get("output_tokens", 0) or 0
        self.requests += 1

    def estimate_cost(self, model: ModelTier) -> float:
        """Estimate cost in USD based on model pricing."""
        info = MODELS[model]
        input_cost = (self.input_tokens / 1_000_000) * info.input_price_per_mtok
        output_cost = (self.output_tokens / 1_000_000) * info.output_price_per_mtok
        return input_cost + output_cost


class ClaudeClient:
    """
    Async Claude API client used by the generation service.

    Each call is a single request/response exchange; no streaming.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        default_model: Union[ModelTier, str] = LLM.MODEL,
        max_attempts: int = LLM.MAX_ATTEMPTS,
    ):
        """
        Initialize Claude client.

        Args:
            api_key: Anthropic API key (defaults to ANTHROPIC_API_KEY env var)
            default_model: Default model tier (OPUS, SONNET, HAIKU) or string
            max_attempts: Attempts per request for transient API errors

        Raises:
            ValueError: When no API key is available.
        """
        self.api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        if not self.api_key:
            raise ValueError("ANTHROPIC_API_KEY not found in environment")

        timeout_config = httpx.Timeout(float(LLM.API_TIMEOUT), connect=float(LLM.CONNECT_TIMEOUT))
        self.async_client = anthropic.AsyncAnthropic(
            api_key=self.api_key,
            timeout=timeout_config,
        )

        self.default_model = resolve_model_tier(default_model)
        self.max_attempts = max(1, int(max_attempts))
        self.usage = TokenUsage()

        logger.info(f"Claude client initialized with model: {MODELS[self.default_model].id}")

    def get_model_id(self, model: Optional[Union[ModelTier, str]] = None) -> str:
        return MODELS[resolve_model_tier(model, self.default_model)].id

    async def chat_async(
        self,
        messages: list,
        system: Optional[str] = None,
        model: Optional[Union[ModelTier, str]] = None,
        max_tokens: int = LLM.MAX_TOKENS,
        temperature: float = LLM.TEMPERATURE,
    ) -> str:
        """
        Send a chat request and return the response text.

        Retries on transient API errors (rate limits, overload, network issues)
        with exponential backoff.
        """
        model_id = self.get_model_id(model)

        kwargs = {
            "model": model_id,
            "max_tokens": max_tokens,
            "messages": messages,
            "temperature": temperature,
        }
        if system:
            kwargs["system"] = system

        @retry(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            reraise=True,
        )
        async def _make_request():
            return await self.async_client.messages.create(**kwargs)

        response = await _make_request()
        self.usage.add(response.usage.model_dump())

        logger.debug(f"Chat response [{model_id}]: {response.usage}")

        if response.stop_reason == "max_tokens":
            logger.warning(f"Response from {model_id} hit the max_tokens limit and may be truncated")

        return "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )

    def get_usage_summary(self) -> dict:
        """Get token usage summary with cost estimates."""
        return {
            "requests": self.usage.requests,
            "input_tokens": self.usage.input_tokens,
            "output_tokens": self.usage.output_tokens,
            "total_tokens": self.usage.total_tokens,
            "estimated_cost_usd": f"${self.usage.estimate_cost(self.default_model):.4f}",
        }

    def reset_usage(self):
        """Reset token usage counters."""
        self.usage = TokenUsage()


def get_claude_client(model: Union[ModelTier, str] = LLM.MODEL) -> ClaudeClient:
    """
    Get a configured Claude client instance.

    Args:
        model: Default model tier (OPUS, SONNET, HAIKU) or string

    Returns:
        Configured ClaudeClient instance
    """
    return ClaudeClient(default_model=model)
