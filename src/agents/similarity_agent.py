"""Historical similarity agent.

Compares a new experiment's readings against the experiments bank through
the reasoning service and returns a short prose analysis naming the most
similar prior sample and the country it was taken in.

The analysis is optional enrichment: an empty bank produces no analysis
without calling the service, and any failure produces no analysis either.

Large banks are bounded before prompting. When the bank holds more than
``max_samples`` entries, the samples nearest to the submitted readings
(range-normalized Euclidean distance over the submitted fields) are kept and
listed in their original bank order. Samples lacking a submitted field rank
behind samples that have it.
"""

import logging
import warnings
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from src.agents.llm_client import LLMClient, LLMError, LLMRequest
from src.agents.prompts import similarity as prompts
from src.models.experiment import HistoricalSample, SensorReadings

logger = logging.getLogger(__name__)

DEFAULT_MAX_SAMPLES = 500


@dataclass(frozen=True)
class SimilarityResult:
    """Outcome of one similarity attempt; ``analysis`` is None when omitted."""

    analysis: str | None
    sample_count: int
    listed_count: int
    error: str | None = None

    @property
    def truncated(self) -> bool:
        return self.listed_count < self.sample_count


def select_nearest(
    readings: SensorReadings,
    samples: Sequence[HistoricalSample],
    limit: int,
) -> list[HistoricalSample]:
    """Keep at most ``limit`` samples, nearest first, returned in bank order."""
    if len(samples) <= limit:
        return list(samples)

    fields = [f.value for f in readings.present_fields()]
    if not fields:
        return list(samples[:limit])

    target = np.array([getattr(readings, f) for f in fields], dtype=float)
    matrix = np.array(
        [
            [np.nan if getattr(s, f) is None else getattr(s, f) for f in fields]
            for s in samples
        ],
        dtype=float,
    )

    # All-NaN columns (no sample recorded the field) warn in nanmax/nanmin.
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", RuntimeWarning)
        span = np.nanmax(matrix, axis=0) - np.nanmin(matrix, axis=0)
    span = np.where(np.isnan(span) | (span == 0), 1.0, span)

    diffs = (matrix - target) / span
    missing = np.isnan(diffs).sum(axis=1)
    distance = np.sqrt(np.nansum(diffs**2, axis=1))

    # lexsort: last key is primary.
    ranked = np.lexsort((distance, missing))
    keep = np.sort(ranked[:limit])
    return [samples[i] for i in keep]


class SimilarityAgent:
    """Find the historical sample most similar to a new set of readings."""

    def __init__(self, max_samples: int = DEFAULT_MAX_SAMPLES) -> None:
        if max_samples < 1:
            raise ValueError("max_samples must be at least 1")
        self.max_samples = max_samples

    async def run(
        self,
        readings: SensorReadings,
        samples: Sequence[HistoricalSample],
        llm_client: LLMClient | None,
    ) -> SimilarityResult:
        if not samples:
            return SimilarityResult(analysis=None, sample_count=0, listed_count=0)

        listed = select_nearest(readings, samples, self.max_samples)
        if len(listed) < len(samples):
            logger.info(
                "Similarity: bank bounded from %d to %d samples",
                len(samples), len(listed),
            )

        def omitted(error: str) -> SimilarityResult:
            return SimilarityResult(
                analysis=None,
                sample_count=len(samples),
                listed_count=len(listed),
                error=error,
            )

        if llm_client is None:
            return omitted("No reasoning service configured")

        request = LLMRequest(
            system_prompt=prompts.SYSTEM_PROMPT,
            user_prompt=prompts.build_prompt(readings, listed),
        )
        try:
            response = await llm_client.complete(request)
        except LLMError as exc:
            logger.warning("Similarity: analysis omitted after LLM failure: %s", exc)
            return omitted(str(exc))
        except Exception as exc:
            logger.exception("Similarity: unexpected failure, analysis omitted")
            return omitted(f"Unexpected error: {exc}")

        return SimilarityResult(
            analysis=response.content.strip() or None,
            sample_count=len(samples),
            listed_count=len(listed),
        )
