"""Cooldown marker and status."""

from datetime import datetime, timedelta
from typing import Optional

from yayonay.domain.model.common import DomainModel
from yayonay.domain.value import UserId


class CooldownMarker(DomainModel):
    """Locally persisted record of a user's last vote on an item.

    Lets eligibility be decided without a network round-trip.
    """

    user_id: UserId
    item_key: str
    last_vote_at: datetime
    last_vote: Optional[bool] = None


class CooldownStatus(DomainModel):
    """Eligibility of a user to vote on an item, for display."""

    item_key: str
    can_vote: bool
    last_vote_at: Optional[datetime] = None
    next_eligible_at: Optional[datetime] = None
    remaining: timedelta = timedelta(0)
