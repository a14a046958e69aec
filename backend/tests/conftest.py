import os
import tempfile

# configure the environment before any cinemamax module reads it
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ["USE_SQLITE"] = "true"
os.environ.setdefault("SQLITE_PATH", os.path.join(tempfile.gettempdir(), "cinemamax-test.db"))
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["TMDB_API_KEY"] = ""
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "cinemamax-test-logs"))

from datetime import timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from cinemamax.db.models import Base, UserORM, MovieORM
from cinemamax.domain.models import utcnow
from cinemamax.service.auth_service import get_password_hash


@pytest.fixture
def engine():
    """Create a fresh in-memory SQLite database shared by every session of a test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def session(session_factory):
    db = session_factory()
    yield db
    db.close()


@pytest.fixture
def make_user(session):
    """Insert a user row; later calls get later created_at values."""
    counter = {"n": 0}

    def _make_user(username, role="user", password=None, email=None, is_active=True, **fields):
        counter["n"] += 1
        now = utcnow() + timedelta(seconds=counter["n"])
        user = UserORM(
            username=username,
            email=email or f"{username}@test.com",
            hashed_password=get_password_hash(password) if password else "hashed_pw",
            role=role,
            is_active=is_active,
            created_at=fields.pop("created_at", now),
            updated_at=now,
            **fields
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_movie(session):
    """Insert a movie row; later calls get later created_at values."""
    counter = {"n": 0}

    def _make_movie(title, status="published", **fields):
        counter["n"] += 1
        now = utcnow() + timedelta(seconds=counter["n"])
        movie = MovieORM(
            title=title,
            status=status,
            created_at=fields.pop("created_at", now),
            updated_at=now,
            **fields
        )
        session.add(movie)
        session.commit()
        session.refresh(movie)
        return movie

    return _make_movie
