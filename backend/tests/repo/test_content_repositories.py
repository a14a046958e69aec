import pytest
from datetime import timedelta

from cinemamax.domain.models import Favorite, Review, WatchlistItem, WatchHistoryEntry, utcnow
from cinemamax.repositories import (
    SQLAlchemyFavoriteRepo,
    SQLAlchemyReviewRepo,
    SQLAlchemyWatchlistRepo,
    SQLAlchemyWatchHistoryRepo
)
from cinemamax.exceptions.repository import DuplicateEntityException


@pytest.fixture
def alice(make_user):
    return make_user("alice", first_name="Alice", last_name="Anders")


@pytest.fixture
def movies(make_movie):
    return [
        make_movie("Alien", poster_path="/alien.jpg", vote_average=8.5),
        make_movie("Brazil", poster_path="/brazil.jpg", vote_average=7.9)
    ]


# favorites

def test_add_and_list_favorites(session, alice, movies):
    """Test that favorites are listed newest first with movie fields."""
    # Setup
    favorite_repo = SQLAlchemyFavoriteRepo(session)
    favorite_repo.add(Favorite(user_id=alice.id, movie_id=movies[0].id, created_at=utcnow()))
    favorite_repo.add(Favorite(user_id=alice.id, movie_id=movies[1].id,
                               created_at=utcnow() + timedelta(seconds=1)))

    # Test
    favorites = favorite_repo.list_for_user(alice.id)

    # Verify
    assert [favorite.movie_id for favorite in favorites] == [movies[1].id, movies[0].id]
    assert favorites[0].title == "Brazil"
    assert favorites[0].poster_path == "/brazil.jpg"
    assert favorites[0].vote_average == pytest.approx(7.9)


def test_add_duplicate_favorite(session, alice, movies):
    """Test that the (user, movie) pair is unique."""
    favorite_repo = SQLAlchemyFavoriteRepo(session)
    favorite_repo.add(Favorite(user_id=alice.id, movie_id=movies[0].id))

    with pytest.raises(DuplicateEntityException, match="Favorite for user"):
        favorite_repo.add(Favorite(user_id=alice.id, movie_id=movies[0].id))

    assert len(favorite_repo.list_for_user(alice.id)) == 1


def test_delete_favorite_is_idempotent(session, alice, movies):
    """Test that deleting twice never errors."""
    favorite_repo = SQLAlchemyFavoriteRepo(session)
    favorite_repo.add(Favorite(user_id=alice.id, movie_id=movies[0].id))

    assert favorite_repo.delete(alice.id, movies[0].id) is True
    assert favorite_repo.delete(alice.id, movies[0].id) is False
    assert favorite_repo.get(alice.id, movies[0].id) is None


def test_recent_favorites(session, alice, movies):
    """Test the activity feed rows for favorites."""
    favorite_repo = SQLAlchemyFavoriteRepo(session)
    favorite_repo.add(Favorite(user_id=alice.id, movie_id=movies[0].id))

    recent = favorite_repo.get_recent(5)

    assert len(recent) == 1
    assert recent[0]["email"] == "alice@test.com"
    assert recent[0]["first_name"] == "Alice"
    assert recent[0]["title"] == "Alien"
    assert favorite_repo.count() == 1


# reviews

def test_add_update_delete_review(session, alice, movies):
    """Test the review lifecycle for a (user, movie) pair."""
    review_repo = SQLAlchemyReviewRepo(session)

    created = review_repo.add(Review(user_id=alice.id, movie_id=movies[0].id, rating=8, comment="great"))
    updated = review_repo.update(Review(user_id=alice.id, movie_id=movies[0].id, rating=9, comment="even better"))

    assert created.id == updated.id
    assert updated.rating == 9
    assert updated.comment == "even better"
    assert updated.updated_at >= created.updated_at
    assert review_repo.delete(alice.id, movies[0].id) is True
    assert review_repo.get(alice.id, movies[0].id) is None


def test_add_duplicate_review(session, alice, movies):
    """Test that one user reviews a movie at most once."""
    review_repo = SQLAlchemyReviewRepo(session)
    review_repo.add(Review(user_id=alice.id, movie_id=movies[0].id, rating=8))

    with pytest.raises(DuplicateEntityException, match="Review for user"):
        review_repo.add(Review(user_id=alice.id, movie_id=movies[0].id, rating=3))

    assert review_repo.get(alice.id, movies[0].id).rating == 8


def test_update_missing_review_returns_none(session, alice, movies):
    """Test that updating a review that does not exist returns None."""
    review_repo = SQLAlchemyReviewRepo(session)

    assert review_repo.update(Review(user_id=alice.id, movie_id=movies[0].id, rating=5)) is None
    assert review_repo.delete(alice.id, movies[0].id) is False


def test_list_reviews_for_user_and_movie(session, alice, make_user, movies):
    """Test review listings joined with movie and reviewer fields."""
    # Setup
    bob = make_user("bob", first_name="Bob")
    review_repo = SQLAlchemyReviewRepo(session)
    review_repo.add(Review(user_id=alice.id, movie_id=movies[0].id, rating=8))
    review_repo.add(Review(user_id=bob.id, movie_id=movies[0].id, rating=6))

    # Test
    user_reviews = review_repo.list_for_user(alice.id)
    movie_reviews = review_repo.list_for_movie(movies[0].id, 1)

    # Verify
    assert user_reviews[0].title == "Alien"
    assert user_reviews[0].poster_path == "/alien.jpg"
    assert len(movie_reviews) == 1
    assert movie_reviews[0].username == "bob"
    assert movie_reviews[0].first_name == "Bob"
    assert review_repo.count() == 2


# watchlist & history

def test_watchlist(session, alice, movies):
    """Test adding, listing and removing watchlist entries."""
    watchlist_repo = SQLAlchemyWatchlistRepo(session)
    watchlist_repo.add(WatchlistItem(user_id=alice.id, movie_id=movies[0].id))

    with pytest.raises(DuplicateEntityException):
        watchlist_repo.add(WatchlistItem(user_id=alice.id, movie_id=movies[0].id))

    items = watchlist_repo.list_for_user(alice.id)
    assert [item.title for item in items] == ["Alien"]
    assert watchlist_repo.delete(alice.id, movies[0].id) is True
    assert watchlist_repo.list_for_user(alice.id) == []


def test_watch_history_keeps_every_entry(session, alice, movies):
    """Test that history is append-only and listed newest first."""
    history_repo = SQLAlchemyWatchHistoryRepo(session)
    now = utcnow()
    history_repo.add(WatchHistoryEntry(user_id=alice.id, movie_id=movies[0].id, progress_seconds=30, watched_at=now))
    history_repo.add(WatchHistoryEntry(user_id=alice.id, movie_id=movies[0].id, progress_seconds=90,
                                       watched_at=now + timedelta(seconds=1)))
    history_repo.add(WatchHistoryEntry(user_id=alice.id, movie_id=movies[1].id, progress_seconds=10,
                                       watched_at=now + timedelta(seconds=2)))

    entries = history_repo.list_for_user(alice.id, 2)

    assert [entry.progress_seconds for entry in entries] == [10, 90]
    assert entries[0].title == "Brazil"
