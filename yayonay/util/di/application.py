"""Application layer DI providers."""

from dishka import Scope, provide

from yayonay.application.engine import EngagementEngine
from yayonay.application.projections import Projections
from yayonay.application.usecase.comment import (
    AddCommentUseCase,
    DeleteCommentUseCase,
    GetCommentThreadsUseCase,
    LikeCommentUseCase,
    UndoDeleteCommentUseCase,
)
from yayonay.application.usecase.stats import (
    GetHotItemsUseCase,
    GetTodaysTopUseCase,
    GetTopCategoriesUseCase,
)
from yayonay.application.usecase.vote import CastVoteUseCase, GetCooldownStatusUseCase
from yayonay.domain.repository import CooldownMarkerRepository
from yayonay.domain.service import (
    AggregateCounterStore,
    CommentService,
    CooldownPolicy,
    IdentityService,
    RealtimeReconciler,
    StatsService,
    VoteLedger,
    VoteService,
)
from yayonay.util.clock import Clock
from yayonay.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    scope = Scope.APP

    @provide
    def get_projections(self, reconciler: RealtimeReconciler) -> Projections:
        """Provide projections."""
        return Projections(reconciler=reconciler)

    # Vote use cases
    @provide
    def get_cast_vote_use_case(
        self,
        identity_service: IdentityService,
        vote_service: VoteService,
        counter_store: AggregateCounterStore,
        cooldown_policy: CooldownPolicy,
        marker_repository: CooldownMarkerRepository,
        reconciler: RealtimeReconciler,
        projections: Projections,
        clock: Clock,
    ) -> CastVoteUseCase:
        """Provide cast vote use case."""
        return CastVoteUseCase(
            identity_service=identity_service,
            vote_service=vote_service,
            counter_store=counter_store,
            cooldown_policy=cooldown_policy,
            marker_repository=marker_repository,
            reconciler=reconciler,
            projections=projections,
            clock=clock,
        )

    @provide
    def get_cooldown_status_use_case(
        self,
        identity_service: IdentityService,
        cooldown_policy: CooldownPolicy,
        marker_repository: CooldownMarkerRepository,
        vote_ledger: VoteLedger,
        clock: Clock,
    ) -> GetCooldownStatusUseCase:
        """Provide get cooldown status use case."""
        return GetCooldownStatusUseCase(
            identity_service=identity_service,
            cooldown_policy=cooldown_policy,
            marker_repository=marker_repository,
            vote_ledger=vote_ledger,
            clock=clock,
        )

    # Comment use cases
    @provide
    def get_add_comment_use_case(
        self,
        identity_service: IdentityService,
        comment_service: CommentService,
        reconciler: RealtimeReconciler,
        projections: Projections,
    ) -> AddCommentUseCase:
        """Provide add comment use case."""
        return AddCommentUseCase(
            identity_service=identity_service,
            comment_service=comment_service,
            reconciler=reconciler,
            projections=projections,
        )

    @provide
    def get_like_comment_use_case(
        self,
        identity_service: IdentityService,
        comment_service: CommentService,
        reconciler: RealtimeReconciler,
        projections: Projections,
    ) -> LikeCommentUseCase:
        """Provide like comment use case."""
        return LikeCommentUseCase(
            identity_service=identity_service,
            comment_service=comment_service,
            reconciler=reconciler,
            projections=projections,
        )

    @provide
    def get_delete_comment_use_case(
        self,
        identity_service: IdentityService,
        comment_service: CommentService,
        reconciler: RealtimeReconciler,
        projections: Projections,
    ) -> DeleteCommentUseCase:
        """Provide delete comment use case."""
        return DeleteCommentUseCase(
            identity_service=identity_service,
            comment_service=comment_service,
            reconciler=reconciler,
            projections=projections,
        )

    @provide
    def get_undo_delete_comment_use_case(
        self,
        identity_service: IdentityService,
        comment_service: CommentService,
        reconciler: RealtimeReconciler,
        projections: Projections,
    ) -> UndoDeleteCommentUseCase:
        """Provide undo delete comment use case."""
        return UndoDeleteCommentUseCase(
            identity_service=identity_service,
            comment_service=comment_service,
            reconciler=reconciler,
            projections=projections,
        )

    @provide
    def get_comment_threads_use_case(
        self,
        identity_service: IdentityService,
        comment_service: CommentService,
        projections: Projections,
    ) -> GetCommentThreadsUseCase:
        """Provide get comment threads use case."""
        return GetCommentThreadsUseCase(
            identity_service=identity_service,
            comment_service=comment_service,
            projections=projections,
        )

    # Stats use cases
    @provide
    def get_hot_items_use_case(self, stats_service: StatsService) -> GetHotItemsUseCase:
        """Provide get hot items use case."""
        return GetHotItemsUseCase(stats_service=stats_service)

    @provide
    def get_top_categories_use_case(
        self, stats_service: StatsService
    ) -> GetTopCategoriesUseCase:
        """Provide get top categories use case."""
        return GetTopCategoriesUseCase(stats_service=stats_service)

    @provide
    def get_todays_top_use_case(
        self, stats_service: StatsService, clock: Clock
    ) -> GetTodaysTopUseCase:
        """Provide get today's top use case."""
        return GetTodaysTopUseCase(stats_service=stats_service, clock=clock)

    # Facade
    @provide
    def get_engine(
        self,
        cast_vote: CastVoteUseCase,
        get_cooldown_status: GetCooldownStatusUseCase,
        add_comment: AddCommentUseCase,
        like_comment: LikeCommentUseCase,
        delete_comment: DeleteCommentUseCase,
        undo_delete_comment: UndoDeleteCommentUseCase,
        get_comment_threads: GetCommentThreadsUseCase,
        get_hot_items: GetHotItemsUseCase,
        get_top_categories: GetTopCategoriesUseCase,
        get_todays_top: GetTodaysTopUseCase,
        projections: Projections,
        reconciler: RealtimeReconciler,
    ) -> EngagementEngine:
        """Provide the engagement engine facade."""
        return EngagementEngine(
            cast_vote=cast_vote,
            get_cooldown_status=get_cooldown_status,
            add_comment=add_comment,
            like_comment=like_comment,
            delete_comment=delete_comment,
            undo_delete_comment=undo_delete_comment,
            get_comment_threads=get_comment_threads,
            get_hot_items=get_hot_items,
            get_top_categories=get_top_categories,
            get_todays_top=get_todays_top,
            projections=projections,
            reconciler=reconciler,
        )
