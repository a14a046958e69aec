from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from cinemamax.domain.models import Movie


class CatalogProvider(ABC):
    """External movie catalog consulted when the local catalog has nothing.

    List operations return an envelope ``{"results": [Movie], "page",
    "total_pages", "total_results"}``. Any transport or upstream failure is
    raised as ``ProviderUnavailableException``.
    """

    @abstractmethod
    def get_movie(self, movie_id: int) -> Optional[Movie]:
        pass

    @abstractmethod
    def search_movies(self, query: str, page: int = 1) -> Dict[str, Any]:
        pass

    @abstractmethod
    def get_popular(self, page: int = 1) -> Dict[str, Any]:
        pass

    @abstractmethod
    def get_trending(self, time_window: str = "week") -> Dict[str, Any]:
        pass

    @abstractmethod
    def get_by_genre(self, genre_id: int, page: int = 1) -> Dict[str, Any]:
        pass

    @abstractmethod
    def get_genres(self) -> List[Dict[str, Any]]:
        pass
