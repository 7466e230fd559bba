# tests/conftest.py
from __future__ import annotations

import datetime
import os
from collections.abc import Callable, Iterator
from contextlib import ExitStack
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

os.environ.setdefault("AUTO_CREATE_TABLES", "false")

from agora.core.settings import settings
from agora.db.session import build_engine, create_tables, drop_tables, get_session_factory
from agora.main import app as fastapi_app
from agora.repositories import (
    InMemoryReactionStore,
    InMemorySessionStore,
    SqlReactionStore,
    SqlSessionStore,
    UserRecord,
)
from agora.services import CredentialStore, ReactionLedger, RequestGate, SessionManager

DEFAULT_PASSWORD = "correct horse battery staple"
SESSION_TTL = datetime.timedelta(hours=1)


class FakeClock:
    """Manually advanced UTC clock for expiry tests."""

    def __init__(self, start: datetime.datetime) -> None:
        self.now = start

    def __call__(self) -> datetime.datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += datetime.timedelta(**kwargs)


@pytest.fixture()
def database_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'forum.db'}"


@pytest.fixture()
def engine(database_url: str) -> Iterator[Engine]:
    engine = build_engine(database_url, timeout=settings.store_timeout_seconds)
    create_tables(engine)
    try:
        yield engine
    finally:
        drop_tables(engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(datetime.datetime(2024, 5, 1, 12, 0, tzinfo=datetime.UTC))


@pytest.fixture()
def credentials(session_factory: sessionmaker[Session]) -> CredentialStore:
    return CredentialStore(session_factory)


@pytest.fixture(params=["sql", "memory"])
def session_store(request, session_factory: sessionmaker[Session]):
    """Run a test once against the SQL store and once against the in-memory one."""
    if request.param == "sql":
        return SqlSessionStore(session_factory)
    return InMemorySessionStore()


@pytest.fixture(params=["sql", "memory"])
def reaction_store(request, session_factory: sessionmaker[Session]):
    if request.param == "sql":
        return SqlReactionStore(session_factory)
    return InMemoryReactionStore()


@pytest.fixture()
def sessions(session_store, clock: FakeClock) -> SessionManager:
    return SessionManager(session_store, ttl=SESSION_TTL, clock=clock)


@pytest.fixture()
def ledger(reaction_store) -> ReactionLedger:
    return ReactionLedger(reaction_store)


@pytest.fixture()
def gate(session_factory: sessionmaker[Session], credentials: CredentialStore) -> RequestGate:
    return RequestGate(
        SessionManager(SqlSessionStore(session_factory), ttl=SESSION_TTL),
        credentials,
    )


@pytest.fixture()
def make_user(credentials: CredentialStore) -> Callable[[str], UserRecord]:
    """Return a factory registering ``name`` as ``name@example.com``."""

    def _make_user(name: str, password: str = DEFAULT_PASSWORD) -> UserRecord:
        return credentials.create_user(f"{name}@example.com", name, password)

    return _make_user


@pytest.fixture()
def test_user(make_user) -> UserRecord:
    """Create and return the primary test user."""
    return make_user("alice")


@pytest.fixture()
def other_user(make_user) -> UserRecord:
    """Create and return a second test user."""
    return make_user("bob")


@pytest.fixture()
def app(session_factory: sessionmaker[Session]) -> Iterator[FastAPI]:
    fastapi_app.dependency_overrides[get_session_factory] = lambda: session_factory
    try:
        yield fastapi_app
    finally:
        fastapi_app.dependency_overrides.pop(get_session_factory, None)


@pytest.fixture()
def client_factory(app: FastAPI) -> Iterator[Callable[..., TestClient]]:
    """Return a factory for independent clients, each with its own cookie jar."""
    with ExitStack() as stack:

        def _make_client(cookies: dict[str, str] | None = None) -> TestClient:
            return stack.enter_context(TestClient(app, cookies=cookies))

        yield _make_client


@pytest.fixture()
def client(client_factory) -> TestClient:
    return client_factory()


def register(
    client: TestClient,
    name: str,
    password: str = DEFAULT_PASSWORD,
) -> dict:
    """Register ``name`` through the API; the client keeps the session cookie."""
    response = client.post(
        "/api/v1/auth/register",
        json={
            "email": f"{name}@example.com",
            "username": name,
            "password": password,
            "confirm_password": password,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture()
def auth_client(client: TestClient) -> TestClient:
    """Client signed in as the freshly registered user ``alice``."""
    register(client, "alice")
    return client


@pytest.fixture()
def other_auth_client(client_factory) -> TestClient:
    """Second client signed in as ``bob``."""
    other = client_factory()
    register(other, "bob")
    return other
