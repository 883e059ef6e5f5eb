"""Domain layer DI providers."""

from dishka import Scope, provide

from yayonay.config import EngagementSettings
from yayonay.domain.repository import DocumentStore
from yayonay.domain.service import (
    AggregateCounterStore,
    CommentService,
    CooldownPolicy,
    IdentityProvider,
    IdentityService,
    RealtimeReconciler,
    StatsService,
    VoteLedger,
    VoteService,
)
from yayonay.util.clock import Clock
from yayonay.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are APP-scoped: one engine serves one client session,
    and the reconciler and the comment undo snapshot are session state.
    """

    scope = Scope.APP

    @provide
    def get_cooldown_policy(self, engagement: EngagementSettings) -> CooldownPolicy:
        """Provide cooldown policy."""
        return CooldownPolicy(cooldown_days=engagement.cooldown_days, tz=engagement.tzinfo)

    @provide
    def get_counter_store(self, document_store: DocumentStore) -> AggregateCounterStore:
        """Provide aggregate counter store."""
        return AggregateCounterStore(document_store=document_store)

    @provide
    def get_vote_ledger(self, document_store: DocumentStore) -> VoteLedger:
        """Provide vote ledger."""
        return VoteLedger(document_store=document_store)

    @provide
    def get_vote_service(
        self,
        document_store: DocumentStore,
        vote_ledger: VoteLedger,
        counter_store: AggregateCounterStore,
        cooldown_policy: CooldownPolicy,
        clock: Clock,
    ) -> VoteService:
        """Provide vote domain service."""
        return VoteService(
            document_store=document_store,
            vote_ledger=vote_ledger,
            counter_store=counter_store,
            cooldown_policy=cooldown_policy,
            clock=clock,
        )

    @provide
    def get_reconciler(
        self,
        document_store: DocumentStore,
        clock: Clock,
        engagement: EngagementSettings,
    ) -> RealtimeReconciler:
        """Provide realtime reconciler."""
        return RealtimeReconciler(
            document_store=document_store,
            clock=clock,
            pending_timeout=engagement.pending_timeout_seconds,
        )

    @provide
    def get_comment_service(
        self,
        document_store: DocumentStore,
        clock: Clock,
        engagement: EngagementSettings,
    ) -> CommentService:
        """Provide comment domain service."""
        return CommentService(
            document_store=document_store,
            clock=clock,
            max_length=engagement.comment_max_length,
        )

    @provide
    def get_identity_service(
        self,
        identity_provider: IdentityProvider,
        document_store: DocumentStore,
        engagement: EngagementSettings,
    ) -> IdentityService:
        """Provide identity domain service."""
        return IdentityService(
            identity_provider=identity_provider,
            document_store=document_store,
            anonymous_username=engagement.anonymous_username,
            default_avatar_url=engagement.default_avatar_url,
        )

    @provide
    def get_stats_service(
        self, document_store: DocumentStore, cooldown_policy: CooldownPolicy
    ) -> StatsService:
        """Provide stats domain service."""
        return StatsService(document_store=document_store, cooldown_policy=cooldown_policy)
