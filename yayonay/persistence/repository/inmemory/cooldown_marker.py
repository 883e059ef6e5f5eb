"""In-memory cooldown marker repository for testing."""

from typing import Optional

from yayonay.domain.model.cooldown import CooldownMarker
from yayonay.domain.repository.cooldown_marker import CooldownMarkerRepository
from yayonay.domain.value import UserId


class InMemoryCooldownMarkerRepository(CooldownMarkerRepository):
    """In-memory implementation of CooldownMarkerRepository for testing."""

    def __init__(self) -> None:
        self._markers: dict[tuple[UserId, str], CooldownMarker] = {}

    async def get(self, user_id: UserId, item_key: str) -> Optional[CooldownMarker]:
        """Find the marker of a user for an item."""
        return self._markers.get((user_id, item_key))

    async def save(self, marker: CooldownMarker) -> CooldownMarker:
        """Create or replace a marker."""
        self._markers[(marker.user_id, marker.item_key)] = marker
        return marker

    async def delete(self, user_id: UserId, item_key: str) -> None:
        """Remove a marker."""
        self._markers.pop((user_id, item_key), None)
