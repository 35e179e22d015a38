"""User repository."""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.db.tables import UserRow
from src.models.common import new_uuid7


class UserRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, email: str, user_id: UUID | None = None) -> UserRow:
        row = UserRow(user_id=user_id or new_uuid7(), email=email)
        self._session.add(row)
        await self._session.flush()
        return row

    async def get(self, user_id: UUID) -> UserRow | None:
        return await self._session.get(UserRow, user_id)
