"""LLM client abstraction over the OpenAI chat completions API.

- Single long-lived client, constructed once and injected into agents
- Optional structured JSON output with Pydantic validation
- One attempt per call, bounded by a timeout (no retries)
- Token usage tracking

Every failure surfaces as an LLMError subclass so callers can substitute a
fallback value. Agents decide what that fallback is; the client never does.
"""

import asyncio
import json
import logging
import re
from dataclasses import dataclass
from typing import TypeVar

import openai
from openai import AsyncOpenAI
from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class LLMError(Exception):
    """Base class for reasoning-service failures."""


class LLMServiceUnavailable(LLMError):
    """The service could not be reached, refused the call, or timed out."""


class LLMMalformedResponse(LLMError):
    """The service answered, but not with usable content."""


# ---------------------------------------------------------------------------
# Token tracking
# ---------------------------------------------------------------------------


@dataclass
class TokenUsage:
    """Token usage for a single LLM call."""

    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


# ---------------------------------------------------------------------------
# Request / Response
# ---------------------------------------------------------------------------


@dataclass
class LLMRequest:
    """A single completion request."""

    system_prompt: str
    user_prompt: str
    json_output: bool = False
    max_tokens: int = 1024
    temperature: float = 0.0


@dataclass
class LLMResponse:
    """Raw completion text plus call metadata."""

    content: str
    model: str
    usage: TokenUsage


# ---------------------------------------------------------------------------
# JSON extraction helpers
# ---------------------------------------------------------------------------

_JSON_BLOCK_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?```", re.DOTALL)


def _extract_json(raw: str) -> str:
    """Extract JSON from raw LLM output, stripping markdown fences."""
    match = _JSON_BLOCK_RE.search(raw)
    if match:
        return match.group(1).strip()
    return raw.strip()


# ---------------------------------------------------------------------------
# LLM client
# ---------------------------------------------------------------------------


class LLMClient:
    """OpenAI-backed completion client with structured output and tracking."""

    def __init__(
        self,
        *,
        api_key: str = "",
        model: str = "gpt-4o-mini",
        timeout: float = 30.0,
        max_tokens: int = 1024,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self.model = model
        self.timeout = timeout
        self.max_tokens = max_tokens
        if client is None and api_key:
            client = AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        self._client = client
        self._total_usage = TokenUsage()

    @property
    def is_available(self) -> bool:
        """True when a provider client is configured."""
        return self._client is not None

    # ----- Completion -----

    async def complete(self, request: LLMRequest) -> LLMResponse:
        """Run one chat completion.

        Raises LLMServiceUnavailable on transport errors, API errors and
        timeouts; LLMMalformedResponse when no text comes back.
        """
        if self._client is None:
            raise LLMServiceUnavailable("No OpenAI API key configured")

        kwargs: dict = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": request.system_prompt},
                {"role": "user", "content": request.user_prompt},
            ],
            "max_tokens": min(request.max_tokens, self.max_tokens),
            "temperature": request.temperature,
        }
        if request.json_output:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            completion = await asyncio.wait_for(
                self._client.chat.completions.create(**kwargs),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as exc:
            raise LLMServiceUnavailable(
                f"Completion timed out after {self.timeout:.1f}s"
            ) from exc
        except openai.OpenAIError as exc:
            raise LLMServiceUnavailable(f"OpenAI request failed: {exc}") from exc

        if not completion.choices:
            raise LLMMalformedResponse("Completion returned no choices")
        content = completion.choices[0].message.content
        if not content or not content.strip():
            raise LLMMalformedResponse("Completion returned empty content")

        usage = TokenUsage()
        if completion.usage is not None:
            usage = TokenUsage(
                input_tokens=completion.usage.prompt_tokens,
                output_tokens=completion.usage.completion_tokens,
            )
        self.record_usage(usage)
        logger.debug(
            "LLM call on %s: %d input / %d output tokens",
            completion.model, usage.input_tokens, usage.output_tokens,
        )

        return LLMResponse(content=content, model=completion.model, usage=usage)

    # ----- Structured output parsing -----

    def parse_structured_output(self, *, raw: str, schema: type[T]) -> T:
        """Parse raw LLM output into a validated Pydantic model.

        Raises LLMMalformedResponse if JSON is invalid or fails schema validation.
        """
        cleaned = _extract_json(raw)
        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            raise LLMMalformedResponse(f"Invalid JSON from LLM: {exc}") from exc
        try:
            return schema.model_validate(data)
        except Exception as exc:
            raise LLMMalformedResponse(f"Schema validation failed: {exc}") from exc

    # ----- Token tracking -----

    def record_usage(self, usage: TokenUsage) -> None:
        """Add a call's token usage to the running totals."""
        self._total_usage.input_tokens += usage.input_tokens
        self._total_usage.output_tokens += usage.output_tokens

    def cumulative_usage(self) -> TokenUsage:
        """Return cumulative token usage across all recorded calls."""
        return TokenUsage(
            input_tokens=self._total_usage.input_tokens,
            output_tokens=self._total_usage.output_tokens,
        )

    def reset_usage(self) -> None:
        """Reset cumulative token usage."""
        self._total_usage = TokenUsage()
