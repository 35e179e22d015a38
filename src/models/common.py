"""Shared types, enums, and base models used across AquaLab domain models."""

from datetime import datetime, timezone
from enum import StrEnum
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, Field
from uuid_extensions import uuid7


def utc_now() -> datetime:
    """Return the current UTC timestamp (timezone-aware)."""
    return datetime.now(tz=timezone.utc)


def new_uuid7() -> UUID:
    """Generate a new time-sortable UUID v7."""
    return uuid7()


# --- Reusable annotated types ---

UUIDv7 = Annotated[UUID, Field(description="Time-sortable UUID v7.")]
UTCTimestamp = Annotated[
    datetime, Field(description="UTC timezone-aware timestamp.")
]


# --- Shared enums ---


class GenerationMode(StrEnum):
    """How a piece of generated text was produced."""

    LLM = "LLM"
    FALLBACK = "FALLBACK"


class SensorField(StrEnum):
    """Sensor readings accepted by an experiment update."""

    PH = "ph"
    TDS = "tds"
    TURBIDITY = "turbidity"


# --- Base model ---


class AquaLabBase(BaseModel):
    """Base model with common configuration for all AquaLab Pydantic models."""

    model_config = {
        "populate_by_name": True,
        "from_attributes": True,
        "protected_namespaces": (),
    }
