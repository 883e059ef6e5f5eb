"""SQL implementation of the cooldown marker repository."""

from typing import Optional

from sqlalchemy import and_, delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from yayonay.domain.error import StoreUnavailableError
from yayonay.domain.model.cooldown import CooldownMarker
from yayonay.domain.repository import CooldownMarkerRepository
from yayonay.domain.value import UserId
from yayonay.persistence.mappers import marker_to_dict, row_to_marker
from yayonay.persistence.tables import cooldown_markers_table


class SqlCooldownMarkerRepository(CooldownMarkerRepository):
    """Cooldown markers in the local SQLite database."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize repository with a session factory.

        Args:
            session_factory: Session factory bound to the local store engine
        """
        self.session_factory = session_factory

    def _key(self, user_id: UserId, item_key: str):
        return and_(
            cooldown_markers_table.c.user_id == user_id,
            cooldown_markers_table.c.item_key == item_key,
        )

    async def get(self, user_id: UserId, item_key: str) -> Optional[CooldownMarker]:
        """Find the marker of a user for an item."""
        try:
            async with self.session_factory() as session:
                stmt = select(cooldown_markers_table).where(self._key(user_id, item_key))
                result = await session.execute(stmt)
                row = result.fetchone()
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Local marker store read failed: {e}") from e
        return row_to_marker(row._asdict()) if row else None

    async def save(self, marker: CooldownMarker) -> CooldownMarker:
        """Create or replace a marker."""
        values = marker_to_dict(marker)
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    stmt = (
                        update(cooldown_markers_table)
                        .where(self._key(marker.user_id, marker.item_key))
                        .values(
                            last_vote_at=values["last_vote_at"],
                            last_vote=values["last_vote"],
                        )
                    )
                    result = await session.execute(stmt)
                    if result.rowcount == 0:  # type: ignore[attr-defined]
                        await session.execute(
                            cooldown_markers_table.insert().values(**values)
                        )
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Local marker store write failed: {e}") from e
        return marker

    async def delete(self, user_id: UserId, item_key: str) -> None:
        """Remove a marker."""
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    stmt = delete(cooldown_markers_table).where(
                        self._key(user_id, item_key)
                    )
                    await session.execute(stmt)
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Local marker store write failed: {e}") from e
