import logging
from typing import List, Optional

from cinemamax.config.catalog import RATING_MIN, RATING_MAX
from cinemamax.domain.models import Favorite, Review, WatchlistItem, WatchHistoryEntry
from cinemamax.repositories import (
    MovieRepository,
    FavoriteRepository,
    ReviewRepository,
    WatchlistRepository,
    WatchHistoryRepository
)
from cinemamax.exceptions.repository import DuplicateEntityException
from cinemamax.exceptions.content import (
    ResourceNotFoundException,
    InvalidRequestException,
    DuplicateContentException
)

logger = logging.getLogger(__name__)

# history entries returned when no limit is given
DEFAULT_HISTORY_LIMIT = 50


def validate_rating(rating) -> int:
    if isinstance(rating, bool) or not isinstance(rating, int) or not RATING_MIN <= rating <= RATING_MAX:
        raise InvalidRequestException(f"Rating must be between {RATING_MIN} and {RATING_MAX}")
    return rating


class ContentService:
    def __init__(
        self,
        movie_repo: MovieRepository,
        favorite_repo: FavoriteRepository,
        review_repo: ReviewRepository,
        watchlist_repo: WatchlistRepository,
        history_repo: WatchHistoryRepository
    ):
        self.movie_repo = movie_repo
        self.favorite_repo = favorite_repo
        self.review_repo = review_repo
        self.watchlist_repo = watchlist_repo
        self.history_repo = history_repo

    def _require_movie(self, movie_id: int):
        if not self.movie_repo.get_by_id(movie_id):
            raise ResourceNotFoundException(f"Movie with ID {movie_id} not found")

    # favorites

    def add_favorite(self, user_id: int, movie_id: int) -> Favorite:
        self._require_movie(movie_id)
        try:
            return self.favorite_repo.add(Favorite(user_id=user_id, movie_id=movie_id))
        except DuplicateEntityException:
            raise DuplicateContentException("Movie already in favorites")

    def remove_favorite(self, user_id: int, movie_id: int) -> bool:
        """Idempotent: returns whether a row was actually removed."""
        return self.favorite_repo.delete(user_id, movie_id)

    def list_favorites(self, user_id: int) -> List[Favorite]:
        return self.favorite_repo.list_for_user(user_id)

    # reviews

    def add_review(self, user_id: int, movie_id: int, rating: int, comment: Optional[str] = None) -> Review:
        validate_rating(rating)
        self._require_movie(movie_id)
        try:
            review = self.review_repo.add(Review(user_id=user_id, movie_id=movie_id, rating=rating, comment=comment))
        except DuplicateEntityException:
            raise DuplicateContentException("You have already reviewed this movie")

        logger.info(f"User {user_id} reviewed movie {movie_id} with {rating}")
        return review

    def update_review(self, user_id: int, movie_id: int, rating: int, comment: Optional[str] = None) -> Review:
        validate_rating(rating)
        review = self.review_repo.update(Review(user_id=user_id, movie_id=movie_id, rating=rating, comment=comment))
        if review is None:
            raise ResourceNotFoundException("Review not found")
        return review

    def delete_review(self, user_id: int, movie_id: int) -> None:
        if not self.review_repo.delete(user_id, movie_id):
            raise ResourceNotFoundException("Review not found")

    def list_reviews(self, user_id: int) -> List[Review]:
        return self.review_repo.list_for_user(user_id)

    # watchlist

    def add_to_watchlist(self, user_id: int, movie_id: int) -> WatchlistItem:
        self._require_movie(movie_id)
        try:
            return self.watchlist_repo.add(WatchlistItem(user_id=user_id, movie_id=movie_id))
        except DuplicateEntityException:
            raise DuplicateContentException("Movie already in watchlist")

    def remove_from_watchlist(self, user_id: int, movie_id: int) -> bool:
        return self.watchlist_repo.delete(user_id, movie_id)

    def list_watchlist(self, user_id: int) -> List[WatchlistItem]:
        return self.watchlist_repo.list_for_user(user_id)

    # history

    def record_watch(self, user_id: int, movie_id: int, progress_seconds: int = 0) -> WatchHistoryEntry:
        if progress_seconds is None or progress_seconds < 0:
            raise InvalidRequestException("progress_seconds must not be negative")
        self._require_movie(movie_id)
        return self.history_repo.add(WatchHistoryEntry(
            user_id=user_id, movie_id=movie_id, progress_seconds=progress_seconds
        ))

    def list_history(self, user_id: int, limit: int = DEFAULT_HISTORY_LIMIT) -> List[WatchHistoryEntry]:
        if limit < 1:
            raise InvalidRequestException("limit must be at least 1")
        return self.history_repo.list_for_user(user_id, limit)
