import pytest
from datetime import timedelta
from unittest.mock import patch

from cinemamax.db.models import UserORM, FavoriteORM, ReviewORM, WatchlistORM, WatchHistoryORM, AdminSessionORM
from cinemamax.domain.models import User, utcnow
from cinemamax.repositories.implementation.sql_alchemy_user_repo import SQLAlchemyUserRepo
from cinemamax.exceptions.repository import (
    EntityNotFoundException,
    DuplicateEntityException,
    RepositoryOperationException
)


@pytest.fixture
def user_repo(session):
    """Create a user repository instance."""
    return SQLAlchemyUserRepo(session)


@pytest.fixture
def test_users(make_user):
    """Create test users in the database."""
    return [
        make_user("alice", first_name="Alice", last_name="Anders"),
        make_user("bob", role="admin", email="bob@test.com", first_name="Bob", last_name="Brown")
    ]


def test_get_by_id_existing_user(user_repo, test_users):
    """Test retrieving an existing user by ID."""
    user = user_repo.get_by_id(test_users[0].id)
    assert user is not None
    assert user.username == "alice"
    assert user.email == "alice@test.com"
    assert user.first_name == "Alice"
    assert user.role == "user"
    assert user.is_active is True
    assert user.is_admin is False


def test_get_by_id_non_existent_user(user_repo):
    """Test retrieving a non-existent user by ID."""
    assert user_repo.get_by_id(999) is None


def test_get_by_email_or_username(user_repo, test_users):
    """Test that the identifier matches either the email or the username."""
    by_username = user_repo.get_by_email_or_username("alice")
    by_email = user_repo.get_by_email_or_username("bob@test.com")

    assert by_username.id == test_users[0].id
    assert by_email.id == test_users[1].id
    assert user_repo.get_by_email_or_username("nobody") is None


def test_get_by_email_or_username_prefers_email(user_repo, make_user):
    """Test that an email match wins when another user's username equals the identifier."""
    # Setup
    make_user("carol@test.com", email="other@test.com")
    carol = make_user("carol", email="carol@test.com")

    # Test
    user = user_repo.get_by_email_or_username("carol@test.com")

    # Verify
    assert user.id == carol.id


def test_create_user(user_repo):
    """Test creating a new user."""
    user = User(
        username="charlie",
        email="charlie@test.com",
        hashed_password="hashed_pw3",
        first_name="Charlie",
        last_name=""
    )

    created_user = user_repo.create(user)

    assert created_user.id is not None
    assert created_user.username == "charlie"
    assert created_user.role == "user"
    assert created_user.created_at is not None


def test_create_duplicate_user(user_repo, test_users):
    """Test creating a user with a duplicate username raises exception."""
    duplicate_user = User(
        username="alice",
        email="different@test.com",
        hashed_password="hashed_pw"
    )

    with pytest.raises(DuplicateEntityException):
        user_repo.create(duplicate_user)

    # session stays usable after the rollback
    assert user_repo.get_by_username("alice") is not None


def test_update_user(user_repo, test_users):
    """Test updating an existing user."""
    user = user_repo.get_by_id(test_users[0].id)
    user.first_name = "Alicia"
    user.is_active = False

    updated_user = user_repo.update(user)

    assert updated_user.first_name == "Alicia"
    assert updated_user.is_active is False


def test_update_non_existent_user(user_repo):
    """Test updating a non-existent user raises exception."""
    user = User(id=999, username="ghost", email="ghost@test.com", hashed_password="x")

    with pytest.raises(EntityNotFoundException):
        user_repo.update(user)


def test_update_user_duplicate_email(user_repo, test_users):
    """Test that taking another user's email is reported as a duplicate."""
    user = user_repo.get_by_id(test_users[0].id)
    user.email = "bob@test.com"

    with pytest.raises(DuplicateEntityException):
        user_repo.update(user)


def test_delete_with_dependents(user_repo, session, test_users, make_movie):
    """Test that deleting a user removes every dependent row in one go."""
    # Setup
    alice_id = test_users[0].id
    bob_id = test_users[1].id
    movie = make_movie("Inception", created_by=alice_id)
    now = utcnow()
    session.add_all([
        FavoriteORM(user_id=alice_id, movie_id=movie.id, created_at=now),
        FavoriteORM(user_id=bob_id, movie_id=movie.id, created_at=now),
        ReviewORM(user_id=alice_id, movie_id=movie.id, rating=8, created_at=now, updated_at=now),
        WatchlistORM(user_id=alice_id, movie_id=movie.id, created_at=now),
        WatchHistoryORM(user_id=alice_id, movie_id=movie.id, progress_seconds=10, watched_at=now),
        AdminSessionORM(user_id=alice_id, token="token", expires_at=now + timedelta(days=1), created_at=now)
    ])
    session.commit()

    # Test
    result = user_repo.delete_with_dependents(alice_id)

    # Verify
    assert result is True
    assert session.get(UserORM, alice_id) is None
    for model in (FavoriteORM, ReviewORM, WatchlistORM, WatchHistoryORM, AdminSessionORM):
        assert session.query(model).filter(model.user_id == alice_id).count() == 0
    assert session.query(FavoriteORM).filter(FavoriteORM.user_id == bob_id).count() == 1
    session.refresh(movie)
    assert movie.created_by is None


def test_delete_with_dependents_missing_user(user_repo):
    """Test deleting a non-existent user reports False."""
    assert user_repo.delete_with_dependents(999) is False


def test_list_with_activity(user_repo, session, make_user, make_movie):
    """Test the admin listing: role filter, search, newest first and aggregates."""
    # Setup
    first = make_user("first", first_name="Ann")
    second = make_user("second", first_name="Ben")
    make_user("staff", role="moderator")
    movie = make_movie("Up")
    now = utcnow()
    session.add_all([
        FavoriteORM(user_id=first.id, movie_id=movie.id, created_at=now),
        ReviewORM(user_id=first.id, movie_id=movie.id, rating=9, created_at=now, updated_at=now)
    ])
    session.commit()

    # Test
    users, total = user_repo.list_with_activity("user", None, 0, 10)
    searched, searched_total = user_repo.list_with_activity("user", "ANN", 0, 10)

    # Verify
    assert total == 2
    assert [user.id for user in users] == [second.id, first.id]
    assert users[1].total_favorites == 1
    assert users[1].total_reviews == 1
    assert users[0].total_favorites == 0
    assert searched_total == 1
    assert searched[0].username == "first"


def test_count_by_role(user_repo, make_user):
    """Test counting users by role and creation time."""
    make_user("old", created_at=utcnow() - timedelta(days=40))
    make_user("new")
    make_user("mod", role="moderator")

    assert user_repo.count_by_role("user") == 2
    assert user_repo.count_by_role("user", utcnow() - timedelta(days=30)) == 1
    assert user_repo.count_by_role("moderator") == 1


def test_delete_with_dependents_rolls_back_on_failure(user_repo, session, test_users, make_movie):
    """Test that a failure while deleting the user row keeps every dependent row."""
    # Setup
    alice_id = test_users[0].id
    movie = make_movie("Inception", created_by=alice_id)
    now = utcnow()
    session.add_all([
        FavoriteORM(user_id=alice_id, movie_id=movie.id, created_at=now),
        ReviewORM(user_id=alice_id, movie_id=movie.id, rating=8, created_at=now, updated_at=now),
        AdminSessionORM(user_id=alice_id, token="token", expires_at=now + timedelta(days=1), created_at=now)
    ])
    session.commit()

    # Test
    with patch.object(session, "delete", side_effect=RuntimeError("disk full")):
        with pytest.raises(RepositoryOperationException):
            user_repo.delete_with_dependents(alice_id)

    # Verify
    assert session.get(UserORM, alice_id) is not None
    for model in (FavoriteORM, ReviewORM, AdminSessionORM):
        assert session.query(model).filter(model.user_id == alice_id).count() == 1
    session.refresh(movie)
    assert movie.created_by == alice_id
