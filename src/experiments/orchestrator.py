"""Experiment update orchestrator: a sequential pipeline with tolerated steps.

RECEIVED -> VALIDATED -> MERGED -> ASSESSMENT_ATTEMPTED -> PERSISTED
-> SIMILARITY_ATTEMPTED -> RESPONDED

Failure semantics:
- Validation errors (400) and a missing experiment (404) short-circuit.
- The assessment and similarity steps never fail the pipeline: their agents
  return fallback results, and the orchestrator just reads them.
- Anything else is logged and re-raised as ExperimentUpdateFailed (500).

The assessment is merged into the update before the single experiment write.
The similarity text is attached to the same row inside the same unit of
work, so the request commits once.
"""

import logging
from dataclasses import dataclass
from enum import StrEnum
from uuid import UUID

from src.agents.assessment_agent import AssessmentAgent, AssessmentResult
from src.agents.llm_client import LLMClient
from src.agents.similarity_agent import SimilarityAgent, SimilarityResult
from src.experiments.errors import (
    ExperimentError,
    ExperimentNotFound,
    ExperimentUpdateFailed,
)
from src.experiments.validation import validate_update_request
from src.models.experiment import Experiment, HistoricalSample, SensorReadings
from src.repositories.experiments import ExperimentBankRepository, ExperimentRepository

logger = logging.getLogger(__name__)

UPDATE_MESSAGE = "Experiment updated with sensor data and AI analysis successfully"


class UpdateStage(StrEnum):
    """Pipeline stages, in execution order."""

    RECEIVED = "RECEIVED"
    VALIDATED = "VALIDATED"
    MERGED = "MERGED"
    ASSESSMENT_ATTEMPTED = "ASSESSMENT_ATTEMPTED"
    PERSISTED = "PERSISTED"
    SIMILARITY_ATTEMPTED = "SIMILARITY_ATTEMPTED"
    RESPONDED = "RESPONDED"


@dataclass(frozen=True)
class UpdateOutcome:
    """Successful result of one update transaction."""

    experiment: Experiment
    assessment: AssessmentResult
    similarity: SimilarityResult
    message: str = UPDATE_MESSAGE

    @property
    def similarity_analysis(self) -> str | None:
        return self.similarity.analysis

    def to_response(self) -> dict:
        """Response body; the analysis key appears only when there is one."""
        body: dict = {
            "message": self.message,
            "experiment": self.experiment.model_dump(mode="json"),
        }
        if self.similarity_analysis:
            body["similarExperimentAnalysis"] = self.similarity_analysis
        return body


class ExperimentUpdateOrchestrator:
    """Validate, assess, persist and enrich one experiment update."""

    def __init__(
        self,
        *,
        experiment_repo: ExperimentRepository,
        bank_repo: ExperimentBankRepository,
        llm_client: LLMClient | None = None,
        assessment_agent: AssessmentAgent | None = None,
        similarity_agent: SimilarityAgent | None = None,
    ) -> None:
        self._experiments = experiment_repo
        self._bank = bank_repo
        self._llm = llm_client
        self._assessment = assessment_agent or AssessmentAgent()
        self._similarity = similarity_agent or SimilarityAgent()

    async def run(
        self,
        *,
        experiment_id: str,
        content_type: str | None,
        body: bytes | str,
    ) -> UpdateOutcome:
        """Execute the update pipeline for a raw request.

        Raises ValidationError, ExperimentNotFound or ExperimentUpdateFailed.
        """
        stage = UpdateStage.RECEIVED
        try:
            validated = validate_update_request(experiment_id, content_type, body)
            stage = UpdateStage.VALIDATED

            readings = validated.readings
            update: dict[str, object] = dict(readings.as_update())
            stage = UpdateStage.MERGED

            assessment = await self._assessment.run(readings, self._llm)
            update["summary"] = assessment.summary
            update["solution"] = assessment.solution
            stage = UpdateStage.ASSESSMENT_ATTEMPTED

            row = await self._experiments.update(validated.experiment_id, update)
            if row is None:
                raise ExperimentNotFound()
            stage = UpdateStage.PERSISTED

            similarity = await self._find_similar(validated.experiment_id, readings)
            # Storing the analysis is part of the experiment write, not of the
            # similarity step: a store failure here fails the request and the
            # unit of work rolls back the sensor update with it.
            row = await self._experiments.update(
                validated.experiment_id,
                {"similarity_analysis": similarity.analysis},
            )
            stage = UpdateStage.SIMILARITY_ATTEMPTED

            outcome = UpdateOutcome(
                experiment=Experiment.model_validate(row),
                assessment=assessment,
                similarity=similarity,
            )
            stage = UpdateStage.RESPONDED
        except ExperimentError as exc:
            logger.info(
                "Experiment update %s rejected at %s: %s",
                experiment_id, stage.value, exc.message,
            )
            raise
        except Exception as exc:
            logger.exception(
                "Experiment update %s failed after %s", experiment_id, stage.value,
            )
            raise ExperimentUpdateFailed() from exc

        logger.info(
            "Experiment %s updated (fields=%s, assessment=%s, similarity=%s/%d)",
            experiment_id,
            ",".join(f.value for f in readings.present_fields()),
            assessment.generation_mode.value,
            "present" if similarity.analysis else "omitted",
            similarity.listed_count,
        )
        return outcome

    async def _find_similar(
        self,
        experiment_id: UUID,
        readings: SensorReadings,
    ) -> SimilarityResult:
        """Load the bank and run the similarity agent; never raises."""
        try:
            rows = await self._bank.list_all()
            samples = [HistoricalSample.model_validate(r) for r in rows]
        except Exception as exc:
            logger.exception(
                "Experiment %s: could not load experiments bank", experiment_id,
            )
            return SimilarityResult(
                analysis=None, sample_count=0, listed_count=0, error=str(exc),
            )
        return await self._similarity.run(readings, samples, self._llm)
