# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Generator, Iterator
from itertools import count
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("PYTEST_RUNNING", "true")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-flokkk")

from flokkk.api.v1.endpoints import ai as ai_endpoints
from flokkk.core.security import create_access_token
from flokkk.db.session import Base
from flokkk.db.session import get_db as app_get_session
from flokkk.main import app as fastapi_app
from flokkk.models import CommunityLink, CommunityPost, CreatorLink, Post, User
from flokkk.services.ai import CategoryClassifier, ChatOrchestrator, TavilySearchClient
from flokkk.services.ai.cache import WebSearchCache, clear_local_cache
from flokkk.services.ai.rate_limiter import RateLimiter, reset_local_windows

TEST_DB_URL = "sqlite://"

_USER_COUNTER = count(1)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    session.begin_nested()

    @event.listens_for(session, "after_transaction_end")
    def restart_savepoint(sess: Session, trans) -> None:  # pragma: no cover - SQLAlchemy internals
        if trans.nested and not getattr(trans._parent, "nested", False):
            session.begin_nested()

    try:
        yield session
    finally:
        event.remove(session, "after_transaction_end", restart_savepoint)
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture(autouse=True)
def reset_ai_state() -> Iterator[None]:
    """Clear the in-process rate-limit windows and search cache between tests."""
    reset_local_windows()
    clear_local_cache()
    yield
    reset_local_windows()
    clear_local_cache()


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def _make_user(db_session: Session, username: str | None = None, **fields: Any) -> User:
    """Persist a user with a unique username."""
    username = username or f"user{next(_USER_COUNTER)}"
    user = User(username=username, name=username.title(), email=f"{username}@example.com")
    for name, value in fields.items():
        setattr(user, name, value)
    db_session.add(user)
    db_session.flush()
    db_session.refresh(user)
    return user


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture()
def test_user(db_session: Session) -> Iterator[User]:
    """Create and return a persisted test user."""
    yield _make_user(db_session, "alice")


@pytest.fixture()
def other_user(db_session: Session) -> Iterator[User]:
    """Create and return a second persisted user."""
    yield _make_user(db_session, "bob")


@pytest.fixture()
def third_user(db_session: Session) -> Iterator[User]:
    yield _make_user(db_session, "carol")


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return auth_headers(test_user)


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    return auth_headers(other_user)


@pytest.fixture()
def third_auth_token(third_user: User) -> dict[str, str]:
    return auth_headers(third_user)


@pytest.fixture()
def test_post(db_session: Session, test_user: User) -> Iterator[Post]:
    """A discussion owned by ``test_user`` with five creator links; the first has 5 votes."""
    post = Post(
        user_id=test_user.id,
        title="Best synth records",
        content="Share the records that got you into synthesizers.",
        category="Music",
        hashtags=["synth"],
        media_urls=["https://img.example.com/synth.png"],
        allow_contributions=True,
    )
    for position in range(5):
        post.creator_links.append(
            CreatorLink(
                position=position,
                title=f"Link {position}",
                url=f"https://example.com/{position}",
                vote_count=5 if position == 0 else 0,
            )
        )
    db_session.add(post)
    db_session.flush()
    db_session.refresh(post)
    yield post


@pytest.fixture()
def community_link(
    db_session: Session,
    test_post: Post,
    other_user: User,
) -> Iterator[CommunityLink]:
    link = CommunityLink(
        post_id=test_post.id,
        position=0,
        title="Analog primer",
        url="https://example.com/analog",
        contributor_id=other_user.id,
    )
    db_session.add(link)
    db_session.flush()
    db_session.refresh(link)
    db_session.expire(test_post, ["community_links"])
    yield link


@pytest.fixture()
def community_post(db_session: Session, test_user: User) -> Iterator[CommunityPost]:
    post = CommunityPost(user_id=test_user.id, title="Studio tour", content="New desk setup")
    db_session.add(post)
    db_session.flush()
    db_session.refresh(post)
    yield post


@pytest.fixture()
def install_orchestrator(app: FastAPI) -> Iterator[Any]:
    """Return a callable that routes the AI endpoints through a custom orchestrator."""

    def _install(**backends: Any) -> ChatOrchestrator:
        backends.setdefault("rate_limiter", RateLimiter(client=None))
        backends.setdefault("cache", WebSearchCache(client=None))
        # Unconfigured provider clients fail fast without touching the network.
        backends.setdefault("search_client", TavilySearchClient(api_key=""))
        backends.setdefault("classifier", CategoryClassifier(api_key=""))
        orchestrator = ChatOrchestrator(**backends)
        app.dependency_overrides[ai_endpoints.get_orchestrator_dep] = lambda: orchestrator
        return orchestrator

    try:
        yield _install
    finally:
        app.dependency_overrides.pop(ai_endpoints.get_orchestrator_dep, None)


@pytest.fixture()
def user_factory(db_session: Session) -> Any:
    """Return a callable creating extra users: ``user_factory("dave")``."""

    def _factory(username: str | None = None, **fields: Any) -> User:
        return _make_user(db_session, username, **fields)

    return _factory


@pytest.fixture()
def headers_for() -> Any:
    """Return a callable building bearer headers for any user."""
    return auth_headers
