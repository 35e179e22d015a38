"""FastAPI experiment endpoints.

PATCH /experiments/{experiment_id}   — submit sensor readings, regenerate analysis
GET   /experiments/{experiment_id}   — fetch one experiment
POST  /experiments                   — create an experiment for a user
GET   /experiments?userId=           — list a user's experiments

Bodies are read raw so content-type and JSON errors get their own 400s.
Errors render as {"error": message} via the ExperimentError handler.
"""

import logging

from fastapi import APIRouter, Depends, Query, Request

from src.api.dependencies import (
    get_experiment_repo,
    get_update_orchestrator,
    get_user_repo,
)
from src.experiments.errors import (
    ExperimentError,
    ExperimentNotFound,
    InternalFailure,
    MissingField,
    UserNotFound,
)
from src.experiments.orchestrator import ExperimentUpdateOrchestrator
from src.experiments.validation import validate_create_experiment, validate_uuid
from src.models.experiment import Experiment
from src.repositories.experiments import ExperimentRepository
from src.repositories.users import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/experiments", tags=["experiments"])


@router.patch("/{experiment_id}")
async def update_experiment(
    experiment_id: str,
    request: Request,
    orchestrator: ExperimentUpdateOrchestrator = Depends(get_update_orchestrator),
) -> dict:
    """Merge sensor readings and attach assessment + similarity analysis."""
    outcome = await orchestrator.run(
        experiment_id=experiment_id,
        content_type=request.headers.get("content-type"),
        body=await request.body(),
    )
    return outcome.to_response()


@router.get("/{experiment_id}")
async def get_experiment(
    experiment_id: str,
    repo: ExperimentRepository = Depends(get_experiment_repo),
) -> dict:
    eid = validate_uuid(experiment_id)
    try:
        row = await repo.get(eid)
    except Exception as exc:
        logger.exception("Error fetching experiment %s", experiment_id)
        raise InternalFailure("Failed to fetch experiment") from exc
    if row is None:
        raise ExperimentNotFound()
    return {"experiment": Experiment.model_validate(row).model_dump(mode="json")}


@router.post("", status_code=201)
async def create_experiment(
    request: Request,
    repo: ExperimentRepository = Depends(get_experiment_repo),
    user_repo: UserRepository = Depends(get_user_repo),
) -> dict:
    """Create an experiment with only name and description populated."""
    validated = validate_create_experiment(
        request.headers.get("content-type"), await request.body(),
    )
    try:
        if await user_repo.get(validated.user_id) is None:
            raise UserNotFound()
        row = await repo.create(
            user_id=validated.user_id,
            name=validated.name,
            description=validated.description,
        )
    except ExperimentError:
        raise
    except Exception as exc:
        logger.exception("Error creating experiment")
        raise InternalFailure("Failed to create experiment") from exc

    experiment = Experiment.model_validate(row)
    logger.info("Experiment %s created for user %s", row.experiment_id, row.user_id)
    return {
        "message": "Experiment created successfully",
        "experimentId": str(experiment.experiment_id),
        "experiment": experiment.model_dump(mode="json"),
    }


@router.get("")
async def list_experiments(
    user_id: str | None = Query(default=None, alias="userId"),
    repo: ExperimentRepository = Depends(get_experiment_repo),
) -> dict:
    if not user_id:
        raise MissingField("Missing userId query parameter")
    uid = validate_uuid(user_id, "userId")
    try:
        rows = await repo.list_by_user(uid)
    except Exception as exc:
        logger.exception("Error listing experiments for user %s", user_id)
        raise InternalFailure("Failed to get experiments") from exc
    return {
        "experiments": [
            Experiment.model_validate(r).model_dump(mode="json") for r in rows
        ],
    }
