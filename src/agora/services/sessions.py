"""Session manager: mint, resolve and revoke login sessions."""
from __future__ import annotations

import datetime
import logging
from collections.abc import Callable
from dataclasses import replace

from agora.core.security import new_session_token
from agora.db.time import utcnow
from agora.repositories.records import SessionRecord
from agora.repositories.session_repo import SessionStore

__all__ = ["SessionManager"]

logger = logging.getLogger(__name__)


class SessionManager:
    """Owns the session lifecycle and the one-session-per-user rule.

    A session is live while ``now < expires_at``. Expiry is checked lazily in
    :meth:`resolve`; there is no background sweep. With ``sliding`` enabled
    every successful resolve pushes ``expires_at`` to ``now + ttl``, otherwise
    the expiry fixed at login stands.
    """

    def __init__(
        self,
        store: SessionStore,
        *,
        ttl: datetime.timedelta,
        sliding: bool = False,
        clock: Callable[[], datetime.datetime] = utcnow,
    ) -> None:
        if ttl <= datetime.timedelta(0):
            raise ValueError("Session TTL must be positive")
        self._store = store
        self._ttl = ttl
        self._sliding = sliding
        self._clock = clock

    @property
    def ttl(self) -> datetime.timedelta:
        return self._ttl

    def create_session(self, user_id: int) -> SessionRecord:
        """Start a new session for ``user_id``, ending every earlier one."""
        now = self._clock()
        record = SessionRecord(
            token=new_session_token(),
            user_id=user_id,
            created_at=now,
            expires_at=now + self._ttl,
        )
        self._store.replace_for_user(record)
        logger.info("Session started for user %s, expires %s", user_id, record.expires_at)
        return record

    def resolve(self, token: str | None) -> SessionRecord | None:
        """Return the live session for ``token``, or None.

        An expired session is deleted as a side effect.
        """
        if not token:
            return None
        record = self._store.get(token)
        if record is None:
            return None

        now = self._clock()
        if now >= record.expires_at:
            self._store.delete(token)
            logger.info("Session of user %s expired at %s", record.user_id, record.expires_at)
            return None

        if self._sliding:
            expires_at = now + self._ttl
            if not self._store.extend(token, expires_at):
                # Revoked or superseded between the read and the refresh.
                return None
            record = replace(record, expires_at=expires_at)
        return record

    def revoke(self, token: str | None) -> None:
        """End the session for ``token``. Unknown tokens are ignored."""
        if not token:
            return
        self._store.delete(token)
        logger.debug("Session %s... revoked", token[:6])

    def revoke_all(self, user_id: int) -> int:
        """End every session of ``user_id`` and return how many there were."""
        removed = self._store.delete_for_user(user_id)
        logger.info("Revoked %d session(s) of user %s", removed, user_id)
        return removed

    def count_for_user(self, user_id: int) -> int:
        return self._store.count_for_user(user_id)
