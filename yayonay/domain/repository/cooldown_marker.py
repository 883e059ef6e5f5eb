"""Cooldown marker repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from yayonay.domain.model.cooldown import CooldownMarker
from yayonay.domain.value import UserId


class CooldownMarkerRepository(ABC):
    """Local key-value store of cooldown markers.

    Markers survive process restarts and are read before any network call,
    so eligibility can be decided locally.
    """

    @abstractmethod
    async def get(self, user_id: UserId, item_key: str) -> Optional[CooldownMarker]:
        """Find the marker of a user for an item.

        Args:
            user_id: The user's ID
            item_key: Ledger key of the item

        Returns:
            The marker if one was stored, None otherwise
        """
        pass

    @abstractmethod
    async def save(self, marker: CooldownMarker) -> CooldownMarker:
        """Create or replace a marker.

        Args:
            marker: The marker to store

        Returns:
            The stored marker
        """
        pass

    @abstractmethod
    async def delete(self, user_id: UserId, item_key: str) -> None:
        """Remove a marker (no-op when missing)."""
        pass
