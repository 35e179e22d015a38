"""Experiment, sensor-reading, historical-sample and user models.

An Experiment starts with only identity, owner, name and description. Each
update merges newly submitted sensor readings (pH, TDS in ppm, turbidity in
NTU) and regenerates the assessment and similarity text. Sensor fields are
independently optional: None means "not measured", never zero.
"""

import datetime as dt
from uuid import UUID

from pydantic import Field

from src.models.common import (
    AquaLabBase,
    SensorField,
    UTCTimestamp,
    UUIDv7,
    new_uuid7,
    utc_now,
)


class SensorReadings(AquaLabBase):
    """Typed partial update of an experiment's sensor values.

    Merge rule is field-by-field: a present value overwrites the stored one,
    an absent value leaves storage untouched.
    """

    ph: float | None = None
    tds: float | None = None
    turbidity: float | None = None

    def present_fields(self) -> list[SensorField]:
        """Sensor fields carrying a value, in canonical order."""
        return [f for f in SensorField if getattr(self, f.value) is not None]

    def as_update(self) -> dict[str, float]:
        """Column updates for the present fields only."""
        return {f.value: getattr(self, f.value) for f in self.present_fields()}


class Experiment(AquaLabBase):
    """A water-quality experiment owned by a user."""

    experiment_id: UUIDv7 = Field(default_factory=new_uuid7)
    user_id: UUID
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    created_at: UTCTimestamp = Field(default_factory=utc_now)
    ph: float | None = None
    tds: float | None = None
    turbidity: float | None = None
    summary: str | None = None
    solution: str | None = None
    similarity_analysis: str | None = None


class HistoricalSample(AquaLabBase):
    """Read-only reference measurement from the experiments bank."""

    sample_id: UUID
    date: dt.date | None = None
    time: dt.time | None = None
    longitude: float | None = None
    latitude: float | None = None
    turbidity: float | None = None
    tds: float | None = None
    ph: float | None = None


class User(AquaLabBase):
    """Registered experiment owner."""

    user_id: UUID
    email: str
