"""Shared API dependencies for authentication and common functionality."""

from collections.abc import Generator
from datetime import timedelta
from typing import Annotated

from fastapi import Depends, HTTPException, Response, status
from fastapi.security import APIKeyCookie
from sqlalchemy.orm import Session, sessionmaker

from agora.core.errors import AuthenticationRequired
from agora.core.settings import settings
from agora.db.session import get_session_factory
from agora.repositories.reaction_repo import SqlReactionStore
from agora.repositories.records import SessionRecord
from agora.repositories.session_repo import SqlSessionStore
from agora.services.credentials import CredentialStore
from agora.services.gate import RequestGate
from agora.services.reactions import ReactionLedger
from agora.services.sessions import SessionManager

# Session token travels in an HttpOnly cookie; a missing cookie means anonymous.
cookie_scheme = APIKeyCookie(name=settings.session_cookie_name, auto_error=False)

SessionFactoryDep = Annotated[sessionmaker[Session], Depends(get_session_factory)]
SessionTokenDep = Annotated[str | None, Depends(cookie_scheme)]


def get_db(session_factory: SessionFactoryDep) -> Generator[Session, None, None]:
    """Yield a database session for dependency injection."""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


SessionDep = Annotated[Session, Depends(get_db)]


def get_session_manager(session_factory: SessionFactoryDep) -> SessionManager:
    """Build the session manager over the SQL session store."""
    return SessionManager(
        SqlSessionStore(session_factory),
        ttl=timedelta(seconds=settings.session_ttl_seconds),
        sliding=settings.session_sliding_expiry,
    )


def get_credential_store(session_factory: SessionFactoryDep) -> CredentialStore:
    """Build the credential store with the configured uniqueness policy."""
    return CredentialStore(session_factory, uniqueness=settings.identity_uniqueness)


def get_request_gate(
    sessions: Annotated[SessionManager, Depends(get_session_manager)],
    credentials: Annotated[CredentialStore, Depends(get_credential_store)],
) -> RequestGate:
    """Compose the request gate from the session manager and credential store."""
    return RequestGate(sessions, credentials)


def get_reaction_ledger(session_factory: SessionFactoryDep) -> ReactionLedger:
    """Build the reaction ledger over the SQL reaction store."""
    return ReactionLedger(SqlReactionStore(session_factory))


RequestGateDep = Annotated[RequestGate, Depends(get_request_gate)]
ReactionLedgerDep = Annotated[ReactionLedger, Depends(get_reaction_ledger)]


def set_session_cookie(response: Response, session: SessionRecord) -> None:
    """Hand the session token to the client with an expiry mirroring the session."""
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session.token,
        expires=session.expires_at,
        path="/",
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    """Tell the client to drop its session cookie."""
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )


def get_optional_user_id(
    response: Response,
    token: SessionTokenDep,
    gate: RequestGateDep,
) -> int | None:
    """Return the caller's user id, or None for anonymous callers.

    With sliding expiry enabled the cookie is re-issued with the new expiry.
    """
    session = gate.authenticate(token)
    if session is None:
        return None
    if settings.session_sliding_expiry:
        set_session_cookie(response, session)
    return session.user_id


def get_current_user_id(
    response: Response,
    token: SessionTokenDep,
    gate: RequestGateDep,
) -> int:
    """Return the caller's user id or answer 401 with a sign-in prompt.

    Raises:
        HTTPException: If the request carries no live session.
    """
    try:
        session = gate.require_session(token)
    except AuthenticationRequired as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=err.message,
        ) from err
    if settings.session_sliding_expiry:
        set_session_cookie(response, session)
    return session.user_id


OptionalUserIdDep = Annotated[int | None, Depends(get_optional_user_id)]
CurrentUserIdDep = Annotated[int, Depends(get_current_user_id)]
