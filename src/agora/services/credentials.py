"""Credential store: user records, lookup by login and registration."""
from __future__ import annotations

import logging
from typing import Literal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from agora.core import security
from agora.core.errors import DuplicateIdentity, InvalidRegistration, NotFound
from agora.db.session import read_session, write_transaction
from agora.repositories.records import UserRecord
from agora.repositories.user_repo import UserRepository

__all__ = ["CredentialStore", "UniquenessPolicy"]

logger = logging.getLogger(__name__)

UniquenessPolicy = Literal["shared", "per_field"]


class CredentialStore:
    """Owns user accounts and their password hashes.

    ``uniqueness`` selects how registrations collide:

    - ``"shared"``: emails and usernames form one namespace, so a new email
      may not equal an existing username and vice versa.
    - ``"per_field"``: email is compared with emails and username with
      usernames only.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        *,
        uniqueness: UniquenessPolicy = "shared",
    ) -> None:
        self._session_factory = session_factory
        self._shared_namespace = uniqueness == "shared"

    def create_user(self, email: str, username: str, password: str) -> UserRecord:
        """Register a user with a freshly hashed password.

        Raises:
            InvalidRegistration: If any field is blank.
            DuplicateIdentity: If the email or username is already taken.
        """
        email = email.strip()
        username = username.strip()
        if not email or not username or not password:
            raise InvalidRegistration()

        password_hash = security.hash_password(password)
        try:
            with write_transaction(self._session_factory) as db:
                repo = UserRepository(db)
                if repo.identity_taken(email, username, shared_namespace=self._shared_namespace):
                    raise DuplicateIdentity()
                record = UserRecord.from_row(
                    repo.create(email=email, username=username, password_hash=password_hash)
                )
        except IntegrityError as err:
            raise DuplicateIdentity() from err
        logger.info("Registered user %s (%s)", record.id, record.username)
        return record

    def find_by_login(self, identifier: str) -> UserRecord | None:
        """Return the user whose email, or failing that username, equals ``identifier``."""
        identifier = identifier.strip()
        if not identifier:
            return None
        with read_session(self._session_factory) as db:
            repo = UserRepository(db)
            user = repo.get_by_email(identifier) or repo.get_by_username(identifier)
            return UserRecord.from_row(user) if user is not None else None

    def get(self, user_id: int) -> UserRecord:
        """Return a user by id.

        Raises:
            NotFound: If no such user exists.
        """
        with read_session(self._session_factory) as db:
            user = UserRepository(db).get_by_id(user_id)
            if user is None:
                raise NotFound("User not found")
            return UserRecord.from_row(user)

    @staticmethod
    def verify_password(record: UserRecord, password: str) -> bool:
        """Check ``password`` against the stored hash of ``record``."""
        return security.verify_password(password, record.password_hash)
