"""Experiment and historical-bank repositories."""

import datetime as dt
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.tables import ExperimentBankRow, ExperimentRow
from src.models.common import new_uuid7, utc_now

# Columns an update may touch. Identity, owner and creation time are fixed.
_UPDATABLE_FIELDS = frozenset({
    "ph", "tds", "turbidity",
    "summary", "solution", "similarity_analysis",
})


class ExperimentRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, user_id: UUID, name: str,
                     description: str | None = None,
                     experiment_id: UUID | None = None) -> ExperimentRow:
        row = ExperimentRow(
            experiment_id=experiment_id or new_uuid7(),
            user_id=user_id, name=name, description=description,
            created_at=utc_now(),
        )
        self._session.add(row)
        await self._session.flush()
        await self._session.refresh(row)
        return row

    async def get(self, experiment_id: UUID) -> ExperimentRow | None:
        return await self._session.get(ExperimentRow, experiment_id)

    async def list_by_user(self, user_id: UUID) -> list[ExperimentRow]:
        result = await self._session.execute(
            select(ExperimentRow)
            .where(ExperimentRow.user_id == user_id)
            .order_by(ExperimentRow.created_at.asc(), ExperimentRow.experiment_id.asc())
        )
        return list(result.scalars().all())

    async def update(self, experiment_id: UUID,
                     fields: dict[str, object]) -> ExperimentRow | None:
        """Overwrite the given columns; columns not in ``fields`` are untouched.

        Returns None if no experiment has this id.
        """
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update experiment fields: {sorted(unknown)}")

        row = await self.get(experiment_id)
        if row is not None:
            for name, value in fields.items():
                setattr(row, name, value)
            await self._session.flush()
        return row


class ExperimentBankRepository:
    """Read access to historical samples, plus bulk loading for seeding."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, date: dt.date | None = None,
                     time: dt.time | None = None,
                     longitude: float | None = None,
                     latitude: float | None = None,
                     turbidity: float | None = None,
                     tds: float | None = None,
                     ph: float | None = None) -> ExperimentBankRow:
        row = ExperimentBankRow(
            sample_id=new_uuid7(), date=date, time=time,
            longitude=longitude, latitude=latitude,
            turbidity=turbidity, tds=tds, ph=ph,
        )
        self._session.add(row)
        await self._session.flush()
        return row

    async def list_all(self) -> list[ExperimentBankRow]:
        """Every sample in insertion order (sample ids are time-sortable)."""
        result = await self._session.execute(
            select(ExperimentBankRow).order_by(ExperimentBankRow.sample_id.asc())
        )
        return list(result.scalars().all())

    async def count(self) -> int:
        result = await self._session.execute(
            select(func.count()).select_from(ExperimentBankRow)
        )
        return result.scalar_one()
