"""Domain services."""

from .base import Service
from .comment_service import CommentService, build_threads, replies_query
from .cooldown_policy import CooldownPolicy
from .counter_store import AggregateCounterStore
from .identity_service import IdentityProvider, IdentityService
from .reconciler import RealtimeReconciler
from .stats_service import StatsService
from .vote_ledger import VoteLedger, ledger_key, ledger_path
from .vote_service import VoteReceipt, VoteService

__all__ = [
    "AggregateCounterStore",
    "CommentService",
    "CooldownPolicy",
    "IdentityProvider",
    "IdentityService",
    "RealtimeReconciler",
    "Service",
    "StatsService",
    "VoteLedger",
    "VoteReceipt",
    "VoteService",
    "build_threads",
    "ledger_key",
    "ledger_path",
    "replies_query",
]
