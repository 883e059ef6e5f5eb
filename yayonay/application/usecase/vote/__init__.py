"""Vote use cases."""

from .cast_vote import CastVoteRequest, CastVoteUseCase
from .get_cooldown_status import GetCooldownStatusRequest, GetCooldownStatusUseCase

__all__ = [
    "CastVoteRequest",
    "CastVoteUseCase",
    "GetCooldownStatusRequest",
    "GetCooldownStatusUseCase",
]
