import copy
import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from cinemamax.config.catalog import (
    ROLES,
    ROLE_ADMIN,
    ROLE_USER,
    MOVIE_STATUSES,
    STATUS_PUBLISHED,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE
)
from cinemamax.domain.models import User, Movie, utcnow
from cinemamax.repositories import UserRepository, MovieRepository, FavoriteRepository, ReviewRepository
from cinemamax.service.catalog_service import CatalogService
from cinemamax.exceptions.auth import ForbiddenException
from cinemamax.exceptions.repository import DuplicateEntityException, EntityNotFoundException
from cinemamax.exceptions.content import (
    ResourceNotFoundException,
    InvalidRequestException,
    DuplicateContentException
)

logger = logging.getLogger(__name__)

USER_FIELDS = ("first_name", "last_name", "email", "is_active", "role")

MOVIE_FIELDS = (
    "title", "overview", "release_date", "runtime", "vote_average", "vote_count",
    "poster_path", "backdrop_path", "genres", "director", "movie_cast", "status"
)


class AdminService:
    def __init__(
        self,
        user_repo: UserRepository,
        movie_repo: MovieRepository,
        favorite_repo: FavoriteRepository,
        review_repo: ReviewRepository,
        catalog_service: CatalogService,
        ping_database: Callable[[], Any]
    ):
        self.user_repo = user_repo
        self.movie_repo = movie_repo
        self.favorite_repo = favorite_repo
        self.review_repo = review_repo
        self.catalog_service = catalog_service
        self.ping_database = ping_database

    @staticmethod
    def _validate_paging(page: int, limit: int):
        if page < 1:
            raise InvalidRequestException("page must be at least 1")
        if limit < 1 or limit > MAX_PAGE_SIZE:
            raise InvalidRequestException(f"limit must be between 1 and {MAX_PAGE_SIZE}")

    def get_stats(self) -> Dict[str, int]:
        now = utcnow()
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        total_users = self.user_repo.count_by_role(ROLE_USER)

        return {
            "total_users": total_users,
            # no activity tracking yet, every registered user counts as active
            "active_users": total_users,
            "total_movies": self.movie_repo.count_published(),
            "total_favorites": self.favorite_repo.count(),
            "total_reviews": self.review_repo.count(),
            "new_users_today": self.user_repo.count_by_role(ROLE_USER, today),
            "new_users_this_week": self.user_repo.count_by_role(ROLE_USER, today - timedelta(days=7)),
            "new_users_this_month": self.user_repo.count_by_role(ROLE_USER, today - timedelta(days=30))
        }

    # users

    def list_users(self, page: int = 1, limit: int = DEFAULT_PAGE_SIZE, search: Optional[str] = None) -> Dict[str, Any]:
        self._validate_paging(page, limit)
        users, total = self.user_repo.list_with_activity(ROLE_USER, search or None, (page - 1) * limit, limit)
        return {
            "users": users,
            "total": total,
            "page": page,
            "total_pages": math.ceil(total / limit)
        }

    def update_user(self, actor: User, user_id: int, changes: Dict[str, Any]) -> User:
        changes = {key: value for key, value in changes.items() if key in USER_FIELDS and value is not None}
        if not changes:
            raise InvalidRequestException("No valid fields to update")

        if "role" in changes:
            if actor.role != ROLE_ADMIN:
                raise ForbiddenException("Only super admin can change user roles")
            if changes["role"] not in ROLES:
                raise InvalidRequestException(f"role must be one of {', '.join(ROLES)}")

        user = self.user_repo.get_by_id(user_id)
        if user is None:
            raise ResourceNotFoundException("User not found")

        for key, value in changes.items():
            setattr(user, key, value)

        try:
            updated = self.user_repo.update(user)
        except EntityNotFoundException:
            raise ResourceNotFoundException("User not found")
        except DuplicateEntityException:
            raise DuplicateContentException("Email or username already exists")

        logger.info(f"Admin {actor.id} updated user {user_id}: {', '.join(sorted(changes))}")
        return updated

    def delete_user(self, actor: User, user_id: int) -> None:
        if not self.user_repo.delete_with_dependents(user_id):
            raise ResourceNotFoundException("User not found")
        logger.info(f"Admin {actor.id} deleted user {user_id}")

    # movies

    def get_movie_stats(self, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> Dict[str, Any]:
        self._validate_paging(page, limit)
        movies, total = self.movie_repo.list_all_with_stats((page - 1) * limit, limit)
        for movie in movies:
            movie.average_rating = round(movie.average_rating, 1) if movie.average_rating is not None else 0
        return {
            "movies": movies,
            "total": total,
            "page": page,
            "total_pages": math.ceil(total / limit)
        }

    @staticmethod
    def _validate_status(status: str):
        if status not in MOVIE_STATUSES:
            raise InvalidRequestException(f"status must be one of {', '.join(MOVIE_STATUSES)}")

    def add_movie(self, actor: User, data: Dict[str, Any]) -> Movie:
        fields = {key: value for key, value in data.items() if key in MOVIE_FIELDS and value is not None}
        if not (fields.get("title") or "").strip():
            raise InvalidRequestException("Title is required")

        fields.setdefault("status", STATUS_PUBLISHED)
        self._validate_status(fields["status"])

        movie = self.movie_repo.create(Movie(created_by=actor.id, **fields))
        logger.info(f"Admin {actor.id} added movie {movie.id} ({movie.title})")
        return movie

    def update_movie(self, actor: User, movie_id: int, changes: Dict[str, Any]) -> Movie:
        changes = {key: value for key, value in changes.items() if key in MOVIE_FIELDS}
        if not changes:
            raise InvalidRequestException("No valid fields to update")
        if "status" in changes:
            self._validate_status(changes["status"])
        if "title" in changes and not (changes["title"] or "").strip():
            raise InvalidRequestException("Title is required")

        movie = self.movie_repo.get_by_id(movie_id)
        if movie is None:
            raise ResourceNotFoundException("Movie not found")

        for key, value in changes.items():
            setattr(movie, key, value)

        try:
            updated = self.movie_repo.update(movie)
        except EntityNotFoundException:
            raise ResourceNotFoundException("Movie not found")

        logger.info(f"Admin {actor.id} updated movie {movie_id}: {', '.join(sorted(changes))}")
        return updated

    def delete_movie(self, actor: User, movie_id: int) -> None:
        if not self.movie_repo.delete_with_dependents(movie_id):
            raise ResourceNotFoundException("Movie not found")
        logger.info(f"Admin {actor.id} deleted movie {movie_id}")

    def import_movie(self, actor: User, tmdb_id: int) -> Movie:
        if self.movie_repo.get_by_tmdb_id(tmdb_id):
            raise DuplicateContentException(f"Movie with TMDB ID {tmdb_id} already imported")

        remote = self.catalog_service.fetch_from_provider(tmdb_id)
        if remote is None:
            raise ResourceNotFoundException("Movie not found")

        # provider results may be shared through the cache
        local = copy.copy(remote)
        local.id = None
        local.source = "local"
        local.status = STATUS_PUBLISHED
        local.created_by = actor.id

        try:
            movie = self.movie_repo.create(local)
        except DuplicateEntityException:
            raise DuplicateContentException(f"Movie with TMDB ID {tmdb_id} already imported")

        logger.info(f"Admin {actor.id} imported TMDB movie {tmdb_id} as {movie.id}")
        return movie

    # activity & health

    def get_activity(self, limit: int = 50) -> list:
        if limit < 1:
            raise InvalidRequestException("limit must be at least 1")

        per_source = max(limit // 2, 1)
        activities = []

        for user in self.user_repo.get_recent(ROLE_USER, per_source):
            activities.append({
                "id": f"signup-{user.id}",
                "user_id": user.id,
                "user_name": user.full_name,
                "user_email": user.email,
                "activity_type": "signup",
                "movie_id": None,
                "movie_title": None,
                "created_at": user.created_at
            })

        for favorite in self.favorite_repo.get_recent(per_source):
            activities.append({
                "id": f"favorite-{favorite['id']}",
                "user_id": favorite["user_id"],
                "user_name": f"{favorite['first_name'] or ''} {favorite['last_name'] or ''}".strip(),
                "user_email": favorite["email"],
                "activity_type": "favorite",
                "movie_id": favorite["movie_id"],
                "movie_title": favorite["title"] or "Unknown Movie",
                "created_at": favorite["created_at"]
            })

        activities.sort(key=lambda activity: activity["created_at"] or datetime.min, reverse=True)
        return activities[:limit]

    def health(self) -> Dict[str, Any]:
        timestamp = datetime.now(timezone.utc).isoformat()
        try:
            self.ping_database()
        except Exception as e:
            logger.error(f"Database health check failed: {str(e)}")
            return {
                "status": "error",
                "timestamp": timestamp,
                "services": {"database": "error", "api": "degraded"}
            }

        return {
            "status": "healthy",
            "timestamp": timestamp,
            "services": {"database": "healthy", "api": "healthy"}
        }
