"""Identity domain service."""

from typing import Optional

import logfire

from yayonay.domain.error import UnauthenticatedError
from yayonay.domain.model.user import UserProfile
from yayonay.domain.repository import DocumentStore
from yayonay.domain.value import UserId

from .base import Service


class IdentityProvider:
    """Generic identity interface for the signed-in user.

    Authentication and session handling live outside the engine; it only
    needs to know who is acting.
    """

    def current_user_id(self) -> Optional[UserId]:
        """Return the signed-in user's ID, or None when signed out."""
        raise NotImplementedError


class IdentityService(Service):
    """Resolves the acting user and their display profile."""

    def __init__(
        self,
        identity_provider: IdentityProvider,
        document_store: DocumentStore,
        anonymous_username: str = "Anonymous User",
        default_avatar_url: str = "",
    ) -> None:
        """Initialize identity service.

        Args:
            identity_provider: Source of the signed-in user
            document_store: Shared document store (user profiles)
            anonymous_username: Display name for users without one
            default_avatar_url: Avatar for users without one
        """
        self.identity_provider = identity_provider
        self.document_store = document_store
        self.anonymous_username = anonymous_username
        self.default_avatar_url = default_avatar_url

    def current_user_id(self) -> Optional[UserId]:
        return self.identity_provider.current_user_id()

    def require_user(self, operation: str) -> UserId:
        """Return the signed-in user or fail.

        Raises:
            UnauthenticatedError: If nobody is signed in
        """
        user_id = self.identity_provider.current_user_id()
        if user_id is None:
            logfire.warn("Unauthenticated operation attempt", operation=operation)
            raise UnauthenticatedError(operation)
        return user_id

    async def get_profile(self, user_id: UserId) -> UserProfile:
        """Get the display profile of a user.

        Missing profiles and blank fields fall back to the anonymous defaults.

        Raises:
            StoreUnavailableError: If the store cannot be reached
        """
        with logfire.span("identity_service.get_profile", user_id=str(user_id)):
            snapshot = await self.document_store.get(f"users/{user_id}")
            data = snapshot.data or {}
            profile = UserProfile.model_validate(
                {**data, "id": user_id, "username": data.get("username") or ""}
            )
            updates = {}
            if not profile.username.strip():
                updates["username"] = self.anonymous_username
            if not profile.image_url:
                updates["image_url"] = self.default_avatar_url
            return profile.model_copy(update=updates) if updates else profile
