"""Session-backed identity provider.

The account system signs users in and out; the engine only reads who is
signed in right now.
"""

from typing import Optional

import logfire

from yayonay.adapter.error import InvalidSessionError
from yayonay.domain.service.identity_service import IdentityProvider
from yayonay.domain.value import UserId
from yayonay.domain.value.types import validate_segment


class SessionIdentityProvider(IdentityProvider):
    """Holds the signed-in user of this client session."""

    def __init__(self, user_id: Optional[UserId] = None) -> None:
        self._user_id: Optional[UserId] = None
        if user_id is not None:
            self.sign_in(user_id)

    def current_user_id(self) -> Optional[UserId]:
        return self._user_id

    def sign_in(self, user_id: str) -> UserId:
        """Start a session for ``user_id``.

        User ids become document path segments and field names, so they are
        validated here.

        Raises:
            InvalidSessionError: If the user id is not usable
        """
        try:
            validate_segment(user_id, "User id")
        except ValueError as e:
            raise InvalidSessionError(str(e)) from e
        self._user_id = UserId(user_id)
        logfire.info("Signed in", user_id=user_id)
        return self._user_id

    def sign_out(self) -> None:
        if self._user_id is not None:
            logfire.info("Signed out", user_id=str(self._user_id))
        self._user_id = None
