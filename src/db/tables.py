"""SQLAlchemy ORM table models for AquaLab.

Categories:
- OPERATIONAL: User, Experiment (sensor readings + generated text updated in place)
- REFERENCE: ExperimentBank (historical samples, read-only to the service)
"""

import datetime as dt
from uuid import UUID

from sqlalchemy import Date, DateTime, Float, ForeignKey, String, Text, Time
from sqlalchemy.orm import Mapped, mapped_column

from src.db.session import Base


# ---------------------------------------------------------------------------
# Foundation
# ---------------------------------------------------------------------------


class UserRow(Base):
    __tablename__ = "users"

    user_id: Mapped[UUID] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False)


# ---------------------------------------------------------------------------
# Experiments: OPERATIONAL
# ---------------------------------------------------------------------------


class ExperimentRow(Base):
    """A user's water-quality experiment.

    Sensor columns are independently nullable: NULL means "not measured".
    """

    __tablename__ = "experiments"

    experiment_id: Mapped[UUID] = mapped_column(primary_key=True)
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.user_id"), nullable=False, index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    ph: Mapped[float | None] = mapped_column(Float, nullable=True)
    tds: Mapped[float | None] = mapped_column(Float, nullable=True)
    turbidity: Mapped[float | None] = mapped_column(Float, nullable=True)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    solution: Mapped[str | None] = mapped_column(Text, nullable=True)
    similarity_analysis: Mapped[str | None] = mapped_column(Text, nullable=True)


# ---------------------------------------------------------------------------
# Historical bank: REFERENCE
# ---------------------------------------------------------------------------


class ExperimentBankRow(Base):
    """Historical geolocated sample used for similarity comparison."""

    __tablename__ = "experiments_bank"

    sample_id: Mapped[UUID] = mapped_column(primary_key=True)
    date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    time: Mapped[dt.time | None] = mapped_column(Time, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    turbidity: Mapped[float | None] = mapped_column(Float, nullable=True)
    tds: Mapped[float | None] = mapped_column(Float, nullable=True)
    ph: Mapped[float | None] = mapped_column(Float, nullable=True)
