"""Pending optimistic mutation."""

from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from yayonay.domain.model.common import DomainModel
from yayonay.domain.value import MutationId, MutationKind, MutationState


class PendingMutation(DomainModel):
    """An optimistic change applied to a projection before the write landed.

    ``before`` holds the prior value of every record the change touched
    (None for records that did not exist), so a rollback restores exactly
    what was there instead of recomputing it.
    """

    id: MutationId
    entity: str
    kind: MutationKind
    state: MutationState = MutationState.PENDING
    before: dict[str, Optional[Any]] = Field(default_factory=dict)
    after: dict[str, Optional[Any]] = Field(default_factory=dict)
    base_version: int = 0
    applied_at: datetime
    committed_version: Optional[int] = None
