"""Input validation for experiment and user payloads.

Pure functions: each returns a normalized value object or raises a
ValidationError subclass. Nothing here touches the database or the
reasoning service.

Update requests are checked in a fixed order and the first failure wins:
content type, JSON body, sensor presence, sensor values, identifier.
"""

import json
import math
import re
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from src.experiments.errors import (
    InvalidIdentifier,
    InvalidSensorValue,
    MalformedBody,
    MalformedContentType,
    MissingField,
    MissingSensorData,
    ValidationError,
)
from src.models.common import SensorField
from src.models.experiment import SensorReadings

_UUID_RE = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    re.IGNORECASE,
)

_JSON_CONTENT_TYPE = "application/json"


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ValidatedUpdate:
    """Normalized sensor update for one experiment."""

    experiment_id: UUID
    readings: SensorReadings


@dataclass(frozen=True)
class ValidatedExperiment:
    user_id: UUID
    name: str
    description: str | None = None


@dataclass(frozen=True)
class ValidatedUser:
    email: str
    user_id: UUID | None = None


# ---------------------------------------------------------------------------
# Primitives
# ---------------------------------------------------------------------------


def validate_uuid(value: Any, field: str = "experiment ID") -> UUID:
    """Return ``value`` as a UUID if it is an 8-4-4-4-12 hex string."""
    if not isinstance(value, str) or not _UUID_RE.fullmatch(value):
        raise InvalidIdentifier(field)
    return UUID(value)


def parse_json_object(content_type: str | None, body: bytes | str) -> dict:
    """Check the declared content type and decode the body as a JSON object."""
    if not content_type or _JSON_CONTENT_TYPE not in content_type.lower():
        raise MalformedContentType()
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise MalformedBody() from exc
    if not isinstance(data, dict):
        raise MalformedBody("Request body must be a JSON object")
    return data


def _coerce_sensor_value(field: SensorField, value: Any) -> float:
    """Accept finite ints, floats and numeric strings; reject everything else."""
    if isinstance(value, bool):
        raise InvalidSensorValue(field.value)
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError as exc:
            raise InvalidSensorValue(field.value) from exc
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError as exc:
            raise InvalidSensorValue(field.value) from exc
    else:
        raise InvalidSensorValue(field.value)
    if not math.isfinite(number):
        raise InvalidSensorValue(field.value)
    return number


# ---------------------------------------------------------------------------
# Payload validators
# ---------------------------------------------------------------------------


def validate_update_request(
    experiment_id: str,
    content_type: str | None,
    body: bytes | str,
) -> ValidatedUpdate:
    """Validate a sensor update payload and its target identifier.

    JSON null is treated the same as an absent field.
    """
    payload = parse_json_object(content_type, body)

    raw = {f: payload.get(f.value) for f in SensorField}
    if all(v is None for v in raw.values()):
        raise MissingSensorData()

    values = {
        f.value: _coerce_sensor_value(f, v)
        for f, v in raw.items()
        if v is not None
    }

    return ValidatedUpdate(
        experiment_id=validate_uuid(experiment_id),
        readings=SensorReadings(**values),
    )


def validate_create_experiment(
    content_type: str | None,
    body: bytes | str,
) -> ValidatedExperiment:
    payload = parse_json_object(content_type, body)

    user_id = payload.get("userId")
    if not user_id or not isinstance(user_id, str):
        raise MissingField("Valid userId is required")

    name = payload.get("name")
    if not name or not isinstance(name, str):
        raise MissingField("Valid experiment name is required")

    description = payload.get("description")
    if description is not None and not isinstance(description, str):
        raise ValidationError("Experiment description must be a string")

    return ValidatedExperiment(
        user_id=validate_uuid(user_id, "userId"),
        name=name,
        description=description or None,
    )


def validate_create_user(
    content_type: str | None,
    body: bytes | str,
) -> ValidatedUser:
    payload = parse_json_object(content_type, body)

    email = payload.get("email")
    if not email or not isinstance(email, str):
        raise MissingField("Email is required")

    user_id = payload.get("id")
    return ValidatedUser(
        email=email,
        user_id=validate_uuid(user_id, "user ID") if user_id is not None else None,
    )
