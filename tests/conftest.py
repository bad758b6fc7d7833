from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from itertools import count

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from linkboard.core.security import create_access_token
from linkboard.db.session import Base, build_engine
from linkboard.db.session import get_db as app_get_session
from linkboard.main import app as fastapi_app
from linkboard.models import Post, User

TEST_DB_URL = "sqlite://"

_USER_COUNTER = count(1)

UserFactory = Callable[..., User]
PostFactory = Callable[..., Post]


def _create_user(db: Session, username: str | None = None) -> User:
    n = next(_USER_COUNTER)
    username = username or f"user{n}"
    user = User(username=f"{username}-{n}", email=f"{username}.{n}@example.com")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _create_post(db: Session, creator: User, title: str = "A link worth sharing") -> Post:
    post = Post(title=title, text="https://example.com", creator_id=creator.id)
    db.add(post)
    db.commit()
    db.refresh(post)
    return post


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = build_engine(TEST_DB_URL, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def file_engine(tmp_path) -> Generator[Engine, None, None]:
    """File-backed SQLite engine whose connections really contend for locks."""
    engine = build_engine(f"sqlite:///{tmp_path / 'votes.db'}")
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def file_session_factory(file_engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=file_engine, autocommit=False, autoflush=False)


@pytest.fixture()
def make_user() -> UserFactory:
    """Return a helper persisting a user in the given session."""
    return _create_user


@pytest.fixture()
def make_post() -> PostFactory:
    """Return a helper persisting a post in the given session."""
    return _create_post


@pytest.fixture()
def author(db_session: Session) -> User:
    """Create the user who owns ``test_post``."""
    return _create_user(db_session, "author")


@pytest.fixture()
def voter(db_session: Session) -> User:
    """Create the primary voting user."""
    return _create_user(db_session, "voter")


@pytest.fixture()
def other_voter(db_session: Session) -> User:
    """Create a second voting user."""
    return _create_user(db_session, "other")


@pytest.fixture()
def test_post(db_session: Session, author: User) -> Post:
    """Create a post with score 0 and no votes."""
    return _create_post(db_session, author)


@pytest.fixture()
def app(session_factory: sessionmaker[Session]) -> Iterator[FastAPI]:
    def _get_session_override() -> Generator[Session, None, None]:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    fastapi_app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield fastapi_app
    finally:
        fastapi_app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def auth_token(voter: User) -> dict[str, str]:
    """Return authorization headers for the primary voter."""
    return {"Authorization": f"Bearer {create_access_token(voter.id)}"}


@pytest.fixture()
def author_token(author: User) -> dict[str, str]:
    """Return authorization headers for the post author."""
    return {"Authorization": f"Bearer {create_access_token(author.id)}"}
