"""Get cooldown status use case."""

from typing import Optional

import logfire
from pydantic import BaseModel

from yayonay.application.usecase.base import BaseUseCase
from yayonay.domain.error import StoreUnavailableError
from yayonay.domain.model import CooldownStatus
from yayonay.domain.repository import CooldownMarkerRepository
from yayonay.domain.service import CooldownPolicy, IdentityService, VoteLedger, ledger_key
from yayonay.domain.value import ItemRef
from yayonay.util.clock import Clock


class GetCooldownStatusRequest(BaseModel):
    """Get cooldown status request."""

    item: ItemRef
    attribute: Optional[str] = None


class GetCooldownStatusUseCase(BaseUseCase):
    """Use case for showing when the user may vote on an item again."""

    def __init__(
        self,
        identity_service: IdentityService,
        cooldown_policy: CooldownPolicy,
        marker_repository: CooldownMarkerRepository,
        vote_ledger: VoteLedger,
        clock: Clock,
    ) -> None:
        """Initialize get cooldown status use case.

        Args:
            identity_service: Identity domain service
            cooldown_policy: Cooldown policy
            marker_repository: Local cooldown markers
            vote_ledger: Vote ledger (used when no local marker exists)
            clock: Time source
        """
        self.identity_service = identity_service
        self.cooldown_policy = cooldown_policy
        self.marker_repository = marker_repository
        self.vote_ledger = vote_ledger
        self.clock = clock

    async def execute(self, request: GetCooldownStatusRequest) -> CooldownStatus:
        """Execute get cooldown status flow.

        Signed-out users cannot vote. Without a local marker the ledger is
        consulted; if the store is unreachable the item is reported as
        votable and the write path decides.
        """
        key = ledger_key(request.item, request.attribute)
        now = self.clock.now()
        user_id = self.identity_service.current_user_id()
        if user_id is None:
            return CooldownStatus(item_key=key, can_vote=False)

        marker = await self.marker_repository.get(user_id, key)
        if marker is not None:
            return self.cooldown_policy.status(key, marker.last_vote_at, now)

        try:
            record = await self.vote_ledger.get_vote(user_id, request.item, request.attribute)
        except StoreUnavailableError as e:
            logfire.warn("Cooldown status from ledger unavailable", item=key, error=str(e))
            record = None
        last_vote_at = record.timestamp if record is not None else None
        return self.cooldown_policy.status(key, last_vote_at, now)
