"""FastAPI user endpoints.

POST /users — register a user (optionally with a caller-supplied id)
"""

import logging

from fastapi import APIRouter, Depends, Request

from src.api.dependencies import get_user_repo
from src.experiments.errors import ExperimentError, InternalFailure, UserAlreadyExists
from src.experiments.validation import validate_create_user
from src.models.experiment import User
from src.repositories.users import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", status_code=201)
async def create_user(
    request: Request,
    repo: UserRepository = Depends(get_user_repo),
) -> dict:
    validated = validate_create_user(
        request.headers.get("content-type"), await request.body(),
    )
    try:
        if validated.user_id is not None and await repo.get(validated.user_id):
            raise UserAlreadyExists()
        row = await repo.create(email=validated.email, user_id=validated.user_id)
    except ExperimentError:
        raise
    except Exception as exc:
        logger.exception("Error creating user")
        raise InternalFailure("Failed to create user") from exc

    return {
        "message": "User created successfully",
        "user": User.model_validate(row).model_dump(mode="json"),
    }
