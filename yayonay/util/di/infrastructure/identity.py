"""Identity infrastructure providers."""

from dishka import Scope, provide

from yayonay.adapter.identity import SessionIdentityProvider
from yayonay.domain.service.identity_service import IdentityProvider
from yayonay.util.di.base import ProviderBase


class IdentityComponentProvider(ProviderBase):
    """Identity component base."""

    __mock_component__ = "identity"


class ProdIdentityComponentProvider(IdentityComponentProvider):
    """Production identity provider (session held by the client)."""

    __is_mock__ = False

    scope = Scope.APP

    @provide(scope=Scope.APP)
    def get_session(self) -> SessionIdentityProvider:
        """Provide the session, signed out until the account system signs in."""
        return SessionIdentityProvider()

    @provide(scope=Scope.APP)
    def get_identity_provider(self, session: SessionIdentityProvider) -> IdentityProvider:
        """Expose the session as the engine's identity provider."""
        return session
