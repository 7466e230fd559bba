"""Request gate: turns a transport token into an identity and guards protected calls."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from agora.core import security
from agora.core.errors import AuthenticationRequired, InvalidCredentials, NotFound
from agora.repositories.records import SessionRecord, UserRecord
from agora.services.credentials import CredentialStore
from agora.services.sessions import SessionManager

__all__ = ["LoginResult", "RequestGate"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    """User and freshly minted session returned by login and registration."""

    user: UserRecord
    session: SessionRecord


class RequestGate:
    """Boundary between the transport layer and the session/credential services.

    Only the session token is trusted; a user id supplied by the caller is
    never taken at face value.
    """

    def __init__(self, sessions: SessionManager, credentials: CredentialStore) -> None:
        self.sessions = sessions
        self.credentials = credentials

    def authenticate(self, token: str | None) -> SessionRecord | None:
        """Return the live session behind ``token``; None means anonymous."""
        return self.sessions.resolve(token)

    def require_session(self, token: str | None) -> SessionRecord:
        """Return the live session behind ``token``.

        Raises:
            AuthenticationRequired: If there is no live session for ``token``.
        """
        record = self.authenticate(token)
        if record is None:
            raise AuthenticationRequired()
        return record

    def require_auth(self, token: str | None) -> int:
        """Return the caller's user id, or raise ``AuthenticationRequired``."""
        return self.require_session(token).user_id

    def current_user(self, user_id: int) -> UserRecord:
        """Return the account of an authenticated caller.

        Raises:
            AuthenticationRequired: If the account was removed since login.
        """
        try:
            return self.credentials.get(user_id)
        except NotFound as err:
            raise AuthenticationRequired() from err

    def login(self, identifier: str, password: str) -> LoginResult:
        """Check credentials and start a session, replacing any earlier one.

        Raises:
            InvalidCredentials: For an unknown identifier and a wrong password alike.
        """
        user = self.credentials.find_by_login(identifier)
        if user is None:
            security.dummy_verify()
            logger.info("Login failed: unknown identifier")
            raise InvalidCredentials()
        if not self.credentials.verify_password(user, password):
            logger.info("Login failed for user %s: wrong password", user.id)
            raise InvalidCredentials()
        return LoginResult(user=user, session=self.sessions.create_session(user.id))

    def register(self, email: str, username: str, password: str) -> LoginResult:
        """Create an account and log it in."""
        user = self.credentials.create_user(email, username, password)
        return LoginResult(user=user, session=self.sessions.create_session(user.id))

    def logout(self, token: str | None) -> None:
        """End the caller's session; a missing or stale token is not an error."""
        self.sessions.revoke(token)
