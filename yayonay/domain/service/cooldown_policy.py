"""Vote cooldown policy.

Eligibility is decided on the wall clock of a configured time zone: a user
may vote on an item again once the same wall-clock time seven calendar days
later has been reached. Around daylight saving changes this is not the same
as 7 * 24 hours.
"""

from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Optional

from yayonay.domain.model.cooldown import CooldownStatus

from .base import Service


class CooldownPolicy(Service):
    """Pure eligibility rules for the per-item vote cooldown."""

    def __init__(self, cooldown_days: int = 7, tz: tzinfo = timezone.utc) -> None:
        """Initialize cooldown policy.

        Args:
            cooldown_days: Whole calendar days between two votes on an item
            tz: Time zone whose calendar defines a day
        """
        if cooldown_days < 0:
            raise ValueError("cooldown_days must not be negative")
        self.cooldown_days = cooldown_days
        self.tz = tz

    def _local(self, moment: datetime) -> datetime:
        # Naive datetimes are UTC
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return moment.astimezone(self.tz)

    def next_eligible_at(self, last_vote_at: Optional[datetime]) -> Optional[datetime]:
        """Earliest moment the user may vote again (None if never voted)."""
        if last_vote_at is None:
            return None
        # Aware arithmetic keeps the wall-clock time in self.tz
        return self._local(last_vote_at) + timedelta(days=self.cooldown_days)

    def can_vote(self, last_vote_at: Optional[datetime], now: datetime) -> bool:
        """Whether a vote is allowed now."""
        if last_vote_at is None:
            return True
        return self.days_since(last_vote_at, now) >= self.cooldown_days

    def cooldown_remaining(
        self, last_vote_at: Optional[datetime], now: datetime
    ) -> timedelta:
        """Time left until the next vote is allowed (zero when eligible)."""
        next_at = self.next_eligible_at(last_vote_at)
        if next_at is None or self.can_vote(last_vote_at, now):
            return timedelta(0)
        # Real duration, not wall-clock difference
        remaining = next_at.astimezone(timezone.utc) - self._local(now).astimezone(
            timezone.utc
        )
        return max(remaining, timedelta(seconds=1))

    def days_since(self, last_vote_at: datetime, now: datetime) -> int:
        """Whole wall-clock days elapsed between two moments."""
        last_wall = self._local(last_vote_at).replace(tzinfo=None)
        now_wall = self._local(now).replace(tzinfo=None)
        return (now_wall - last_wall).days

    def calendar_day(self, moment: datetime) -> date:
        """Calendar date of a moment in the policy's time zone."""
        return self._local(moment).date()

    def status(
        self, item_key: str, last_vote_at: Optional[datetime], now: datetime
    ) -> CooldownStatus:
        """Eligibility summary for display."""
        return CooldownStatus(
            item_key=item_key,
            can_vote=self.can_vote(last_vote_at, now),
            last_vote_at=last_vote_at,
            next_eligible_at=self.next_eligible_at(last_vote_at),
            remaining=self.cooldown_remaining(last_vote_at, now),
        )
