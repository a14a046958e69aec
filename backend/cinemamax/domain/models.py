from datetime import datetime, date, timezone
from typing import Optional

from cinemamax.config.catalog import ADMIN_ROLES, ROLE_USER, STATUS_PUBLISHED


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every datetime column is stored in."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User:
    def __init__(
        self,
        username: str,
        email: str,
        hashed_password: str,
        id: Optional[int] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        role: str = ROLE_USER,
        is_active: bool = True,
        created_at: datetime = None,
        updated_at: datetime = None,
        total_favorites: Optional[int] = None,
        total_reviews: Optional[int] = None
    ):
        self.username = username
        self.email = email
        self.hashed_password = hashed_password
        self.id = id
        self.first_name = first_name
        self.last_name = last_name
        self.role = role
        self.is_active = is_active
        self.created_at = created_at
        self.updated_at = updated_at
        # aggregates, only filled by admin listings
        self.total_favorites = total_favorites
        self.total_reviews = total_reviews

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


class Movie:
    def __init__(
        self,
        title: str,
        id: Optional[int] = None,
        tmdb_id: Optional[int] = None,
        overview: Optional[str] = None,
        release_date: Optional[date] = None,
        runtime: Optional[int] = None,
        vote_average: float = 0.0,
        vote_count: int = 0,
        poster_path: Optional[str] = None,
        backdrop_path: Optional[str] = None,
        genres: Optional[str] = None,
        director: Optional[str] = None,
        movie_cast: Optional[str] = None,
        status: str = STATUS_PUBLISHED,
        created_by: Optional[int] = None,
        created_at: datetime = None,
        updated_at: datetime = None,
        favorite_count: Optional[int] = None,
        review_count: Optional[int] = None,
        average_rating: Optional[float] = None,
        source: str = "local"
    ):
        self.title = title
        self.id = id
        self.tmdb_id = tmdb_id
        self.overview = overview
        self.release_date = release_date
        self.runtime = runtime
        self.vote_average = vote_average
        self.vote_count = vote_count
        self.poster_path = poster_path
        self.backdrop_path = backdrop_path
        self.genres = genres
        self.director = director
        self.movie_cast = movie_cast
        self.status = status
        self.created_by = created_by
        self.created_at = created_at
        self.updated_at = updated_at
        # computed at query time
        self.favorite_count = favorite_count
        self.review_count = review_count
        self.average_rating = average_rating
        # "local" for catalog rows, "tmdb" for provider results
        self.source = source


class Favorite:
    def __init__(
        self,
        user_id: int,
        movie_id: int,
        id: Optional[int] = None,
        created_at: datetime = None,
        title: Optional[str] = None,
        poster_path: Optional[str] = None,
        vote_average: Optional[float] = None
    ):
        self.user_id = user_id
        self.movie_id = movie_id
        self.id = id
        self.created_at = created_at
        self.title = title
        self.poster_path = poster_path
        self.vote_average = vote_average


class Review:
    def __init__(
        self,
        user_id: int,
        movie_id: int,
        rating: int,
        comment: Optional[str] = None,
        id: Optional[int] = None,
        created_at: datetime = None,
        updated_at: datetime = None,
        title: Optional[str] = None,
        poster_path: Optional[str] = None,
        username: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None
    ):
        self.user_id = user_id
        self.movie_id = movie_id
        self.rating = rating
        self.comment = comment
        self.id = id
        self.created_at = created_at
        self.updated_at = updated_at
        # joined movie fields, for a user's review list
        self.title = title
        self.poster_path = poster_path
        # joined reviewer fields, for a movie's review list
        self.username = username
        self.first_name = first_name
        self.last_name = last_name


class WatchlistItem:
    def __init__(
        self,
        user_id: int,
        movie_id: int,
        id: Optional[int] = None,
        created_at: datetime = None,
        title: Optional[str] = None,
        poster_path: Optional[str] = None
    ):
        self.user_id = user_id
        self.movie_id = movie_id
        self.id = id
        self.created_at = created_at
        self.title = title
        self.poster_path = poster_path


class WatchHistoryEntry:
    def __init__(
        self,
        user_id: int,
        movie_id: int,
        progress_seconds: int = 0,
        id: Optional[int] = None,
        watched_at: datetime = None,
        title: Optional[str] = None
    ):
        self.user_id = user_id
        self.movie_id = movie_id
        self.progress_seconds = progress_seconds
        self.id = id
        self.watched_at = watched_at
        self.title = title


class AdminSession:
    def __init__(
        self,
        user_id: int,
        token: str,
        expires_at: datetime,
        id: Optional[int] = None,
        created_at: datetime = None
    ):
        self.user_id = user_id
        self.token = token
        self.expires_at = expires_at
        self.id = id
        self.created_at = created_at

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return self.expires_at <= (now or utcnow())
