"""Water-quality assessment agent.

Given the readings submitted in an update, asks the reasoning service for a
plain-language summary and remediation advice. Any failure (no client,
timeout, API error, unparseable or off-schema JSON) yields the fixed
fallback text instead of an exception.
"""

import logging
from dataclasses import dataclass

from pydantic import BaseModel, field_validator

from src.agents.llm_client import LLMClient, LLMError, LLMRequest
from src.agents.prompts import assessment as prompts
from src.models.common import GenerationMode
from src.models.experiment import SensorReadings

logger = logging.getLogger(__name__)

FALLBACK_SUMMARY = "AI analysis unavailable at this time."
FALLBACK_SOLUTION = ""


class AssessmentOutput(BaseModel):
    """Structured answer expected from the reasoning service."""

    summary: str = ""
    solution: str = ""

    @field_validator("summary", "solution", mode="before")
    @classmethod
    def _null_to_empty(cls, value: object) -> object:
        return "" if value is None else value


@dataclass(frozen=True)
class AssessmentResult:
    """Outcome of one assessment attempt. Fallback text counts as a result."""

    summary: str
    solution: str
    generation_mode: GenerationMode
    error: str | None = None

    @classmethod
    def fallback(cls, error: str) -> "AssessmentResult":
        return cls(
            summary=FALLBACK_SUMMARY,
            solution=FALLBACK_SOLUTION,
            generation_mode=GenerationMode.FALLBACK,
            error=error,
        )


class AssessmentAgent:
    """Produce a (summary, solution) pair for a set of sensor readings."""

    async def run(
        self,
        readings: SensorReadings,
        llm_client: LLMClient | None,
    ) -> AssessmentResult:
        if llm_client is None:
            return AssessmentResult.fallback("No reasoning service configured")

        request = LLMRequest(
            system_prompt=prompts.SYSTEM_PROMPT,
            user_prompt=prompts.build_prompt(readings),
            json_output=True,
        )
        try:
            response = await llm_client.complete(request)
            output = llm_client.parse_structured_output(
                raw=response.content, schema=AssessmentOutput,
            )
        except LLMError as exc:
            logger.warning("Assessment: falling back after LLM failure: %s", exc)
            return AssessmentResult.fallback(str(exc))
        except Exception as exc:
            logger.exception("Assessment: unexpected failure, using fallback")
            return AssessmentResult.fallback(f"Unexpected error: {exc}")

        return AssessmentResult(
            summary=output.summary,
            solution=output.solution,
            generation_mode=GenerationMode.LLM,
        )
