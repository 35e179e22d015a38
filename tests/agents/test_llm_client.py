"""Tests for the LLM client abstraction.

Covers: request/response structures, OpenAI call wiring, failure
classification (unavailable, timeout, malformed), structured JSON output
with Pydantic validation, availability, token tracking.
"""

import asyncio

import httpx
import openai
import pytest
from pydantic import BaseModel

from src.agents.llm_client import (
    LLMClient,
    LLMError,
    LLMMalformedResponse,
    LLMRequest,
    LLMResponse,
    LLMServiceUnavailable,
    TokenUsage,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class MockOutput(BaseModel):
    summary: str
    score: float


def _connection_error() -> openai.APIConnectionError:
    return openai.APIConnectionError(
        request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"),
    )


# ===================================================================
# Request / response structures
# ===================================================================


class TestLLMRequestResponse:
    def test_request_defaults(self) -> None:
        req = LLMRequest(system_prompt="sys", user_prompt="user")
        assert req.json_output is False
        assert req.max_tokens == 1024
        assert req.temperature == 0.0

    def test_response_creation(self) -> None:
        resp = LLMResponse(
            content="hello",
            model="gpt-4o-mini",
            usage=TokenUsage(input_tokens=100, output_tokens=50),
        )
        assert resp.usage.total_tokens == 150


class TestTokenUsage:
    def test_total_tokens(self) -> None:
        usage = TokenUsage(input_tokens=100, output_tokens=50)
        assert usage.total_tokens == 150

    def test_zero_tokens(self) -> None:
        assert TokenUsage().total_tokens == 0


# ===================================================================
# Completion calls
# ===================================================================


class TestComplete:
    """complete() wiring against a mocked AsyncOpenAI."""

    @pytest.mark.anyio
    async def test_returns_content(self, llm_client, openai_stub, make_completion) -> None:
        openai_stub.chat.completions.create.return_value = make_completion("Looks clean.")
        resp = await llm_client.complete(LLMRequest(system_prompt="s", user_prompt="u"))
        assert resp.content == "Looks clean."
        assert resp.model == "gpt-4o-mini"
        assert resp.usage.input_tokens == 120

    @pytest.mark.anyio
    async def test_sends_system_and_user_messages(
        self, llm_client, openai_stub, make_completion,
    ) -> None:
        openai_stub.chat.completions.create.return_value = make_completion("ok")
        await llm_client.complete(LLMRequest(system_prompt="SYS", user_prompt="USR"))
        kwargs = openai_stub.chat.completions.create.call_args.kwargs
        assert kwargs["messages"] == [
            {"role": "system", "content": "SYS"},
            {"role": "user", "content": "USR"},
        ]
        assert "response_format" not in kwargs

    @pytest.mark.anyio
    async def test_json_output_requests_json_object(
        self, llm_client, openai_stub, make_completion,
    ) -> None:
        openai_stub.chat.completions.create.return_value = make_completion("{}")
        await llm_client.complete(
            LLMRequest(system_prompt="s", user_prompt="u", json_output=True),
        )
        kwargs = openai_stub.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}

    @pytest.mark.anyio
    async def test_single_attempt_per_call(
        self, llm_client, openai_stub,
    ) -> None:
        openai_stub.chat.completions.create.side_effect = _connection_error()
        with pytest.raises(LLMServiceUnavailable):
            await llm_client.complete(LLMRequest(system_prompt="s", user_prompt="u"))
        assert openai_stub.chat.completions.create.await_count == 1

    @pytest.mark.anyio
    async def test_api_error_is_service_unavailable(self, llm_client, openai_stub) -> None:
        openai_stub.chat.completions.create.side_effect = _connection_error()
        with pytest.raises(LLMServiceUnavailable):
            await llm_client.complete(LLMRequest(system_prompt="s", user_prompt="u"))

    @pytest.mark.anyio
    async def test_timeout_is_service_unavailable(self, openai_stub, make_completion) -> None:
        async def _slow(**kwargs):
            await asyncio.sleep(1.0)
            return make_completion("too late")

        openai_stub.chat.completions.create.side_effect = _slow
        client = LLMClient(client=openai_stub, timeout=0.01)
        with pytest.raises(LLMServiceUnavailable, match="timed out"):
            await client.complete(LLMRequest(system_prompt="s", user_prompt="u"))

    @pytest.mark.anyio
    async def test_empty_content_is_malformed(
        self, llm_client, openai_stub, make_completion,
    ) -> None:
        openai_stub.chat.completions.create.return_value = make_completion(None)
        with pytest.raises(LLMMalformedResponse):
            await llm_client.complete(LLMRequest(system_prompt="s", user_prompt="u"))

    @pytest.mark.anyio
    async def test_no_client_is_service_unavailable(self) -> None:
        client = LLMClient(api_key="")
        with pytest.raises(LLMServiceUnavailable):
            await client.complete(LLMRequest(system_prompt="s", user_prompt="u"))

    @pytest.mark.anyio
    async def test_usage_recorded(self, llm_client, openai_stub, make_completion) -> None:
        openai_stub.chat.completions.create.return_value = make_completion(
            "ok", prompt_tokens=10, completion_tokens=5,
        )
        await llm_client.complete(LLMRequest(system_prompt="s", user_prompt="u"))
        await llm_client.complete(LLMRequest(system_prompt="s", user_prompt="u"))
        assert llm_client.cumulative_usage().total_tokens == 30


# ===================================================================
# Structured output
# ===================================================================


class TestLLMClientStructuredOutput:
    """Validate structured JSON parsing with Pydantic."""

    def test_parse_valid_json(self) -> None:
        client = LLMClient()
        parsed = client.parse_structured_output(
            raw='{"summary": "Fine", "score": 0.92}',
            schema=MockOutput,
        )
        assert parsed.summary == "Fine"
        assert parsed.score == 0.92

    def test_parse_invalid_json_raises(self) -> None:
        client = LLMClient()
        with pytest.raises(LLMMalformedResponse):
            client.parse_structured_output(raw="not json at all", schema=MockOutput)

    def test_parse_missing_field_raises(self) -> None:
        client = LLMClient()
        with pytest.raises(LLMMalformedResponse):
            client.parse_structured_output(raw='{"summary": "x"}', schema=MockOutput)

    def test_malformed_is_an_llm_error(self) -> None:
        assert issubclass(LLMMalformedResponse, LLMError)
        assert issubclass(LLMServiceUnavailable, LLMError)

    def test_extract_json_from_markdown(self) -> None:
        """Handle LLM wrapping JSON in markdown code blocks."""
        client = LLMClient()
        raw = '```json\n{"summary": "Fine", "score": 0.85}\n```'
        parsed = client.parse_structured_output(raw=raw, schema=MockOutput)
        assert parsed.summary == "Fine"


# ===================================================================
# Availability
# ===================================================================


class TestAvailability:
    def test_no_key_unavailable(self) -> None:
        assert LLMClient(api_key="").is_available is False

    def test_key_available(self) -> None:
        assert LLMClient(api_key="sk-test").is_available is True

    def test_injected_client_available(self, openai_stub) -> None:
        assert LLMClient(client=openai_stub).is_available is True


# ===================================================================
# Cumulative token tracking
# ===================================================================


class TestCumulativeTracking:
    def test_record_usage(self) -> None:
        client = LLMClient()
        client.record_usage(TokenUsage(input_tokens=100, output_tokens=50))
        client.record_usage(TokenUsage(input_tokens=200, output_tokens=100))
        total = client.cumulative_usage()
        assert total.input_tokens == 300
        assert total.output_tokens == 150

    def test_reset_usage(self) -> None:
        client = LLMClient()
        client.record_usage(TokenUsage(input_tokens=100, output_tokens=50))
        client.reset_usage()
        assert client.cumulative_usage().total_tokens == 0
