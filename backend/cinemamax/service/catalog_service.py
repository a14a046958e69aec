import logging
import math
from typing import Any, Callable, Dict, List, Optional

from cinemamax.config.catalog import (
    GENRES,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    LOCAL_LIST_LIMIT,
    MOVIE_DETAIL_REVIEWS,
    TRENDING_WINDOWS,
    get_genre_list
)
from cinemamax.domain.models import Movie, Review
from cinemamax.exceptions.catalog import MovieNotFoundException
from cinemamax.exceptions.content import InvalidRequestException
from cinemamax.providers.catalog_provider import CatalogProvider
from cinemamax.repositories import MovieRepository, ReviewRepository

logger = logging.getLogger(__name__)


def empty_envelope() -> Dict[str, Any]:
    return {"results": [], "page": 1, "total_pages": 0, "total_results": 0}


def local_envelope(movies: List[Movie]) -> Dict[str, Any]:
    return {"results": movies, "page": 1, "total_pages": 1, "total_results": len(movies)}


class CatalogService:
    """Answers movie queries from the local catalog first and the provider second.

    Provider failures never reach the caller: they are logged and treated as
    a miss, so the caller gets the next fallback or an empty result.
    """

    def __init__(self, movie_repository: MovieRepository, review_repository: ReviewRepository,
                 provider: Optional[CatalogProvider] = None):
        self.movie_repository = movie_repository
        self.review_repository = review_repository
        self.provider = provider

    def _from_provider(self, operation: str, call: Callable[[], Any], default: Any) -> Any:
        if self.provider is None:
            return default
        try:
            return call()
        except Exception as e:
            logger.warning(f"Catalog provider failed during {operation}, falling back: {str(e)}")
            return default

    @staticmethod
    def _validate_page(page: int):
        if page < 1:
            raise InvalidRequestException("page must be at least 1")

    def get_movies(self, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> Dict[str, Any]:
        self._validate_page(page)
        if limit < 1 or limit > MAX_PAGE_SIZE:
            raise InvalidRequestException(f"limit must be between 1 and {MAX_PAGE_SIZE}")

        movies, total = self.movie_repository.list_published((page - 1) * limit, limit)
        return {
            "movies": movies,
            "total": total,
            "page": page,
            "total_pages": math.ceil(total / limit)
        }

    def get_movie(self, movie_id: int) -> Dict[str, Any]:
        """Returns ``{"movie": Movie, "reviews": [Review]}``; reviews are empty for provider movies."""
        movie = self.movie_repository.get_with_stats(movie_id)
        if movie is not None:
            reviews: List[Review] = self.review_repository.list_for_movie(movie_id, MOVIE_DETAIL_REVIEWS)
            return {"movie": movie, "reviews": reviews}

        movie = self._from_provider("get_movie", lambda: self.provider.get_movie(movie_id), None)
        if movie is None:
            raise MovieNotFoundException("Movie not found")
        return {"movie": movie, "reviews": []}

    def search_movies(self, query: str, page: int = 1) -> Dict[str, Any]:
        query = (query or "").strip()
        if not query:
            raise InvalidRequestException("Search query is required")
        self._validate_page(page)

        movies = self.movie_repository.search(query)
        if movies:
            return local_envelope(movies)

        return self._from_provider(
            "search_movies", lambda: self.provider.search_movies(query, page), empty_envelope()
        )

    def get_popular(self, page: int = 1) -> Dict[str, Any]:
        self._validate_page(page)

        movies = self.movie_repository.get_popular(LOCAL_LIST_LIMIT)
        if movies:
            return local_envelope(movies)

        return self._from_provider("get_popular", lambda: self.provider.get_popular(page), empty_envelope())

    def get_trending(self, time_window: str = "week") -> Dict[str, Any]:
        if time_window not in TRENDING_WINDOWS:
            raise InvalidRequestException(f"time_window must be one of {', '.join(TRENDING_WINDOWS)}")

        movies = self.movie_repository.get_recent(LOCAL_LIST_LIMIT)
        if movies:
            return local_envelope(movies)

        return self._from_provider(
            "get_trending", lambda: self.provider.get_trending(time_window), empty_envelope()
        )

    def get_by_genre(self, genre_id: int, page: int = 1) -> Dict[str, Any]:
        self._validate_page(page)

        genre_name = GENRES.get(genre_id)
        if genre_name:
            movies = self.movie_repository.get_by_genre_name(genre_name, LOCAL_LIST_LIMIT)
            if movies:
                return local_envelope(movies)

        return self._from_provider(
            "get_by_genre", lambda: self.provider.get_by_genre(genre_id, page), empty_envelope()
        )

    def get_genres(self) -> Dict[str, Any]:
        genres = self._from_provider("get_genres", self.provider.get_genres if self.provider else None, None)
        if genres:
            return {"genres": genres}
        return get_genre_list()

    def fetch_from_provider(self, tmdb_id: int) -> Optional[Movie]:
        """Provider details for an import, None when the provider misses or fails."""
        return self._from_provider("fetch_from_provider", lambda: self.provider.get_movie(tmdb_id), None)
