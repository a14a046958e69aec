from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from cinemamax.domain.models import Movie


class MovieRepository(ABC):
    @abstractmethod
    def get_by_id(self, movie_id: int) -> Optional["Movie"]:
        pass

    @abstractmethod
    def get_with_stats(self, movie_id: int) -> Optional["Movie"]:
        pass

    @abstractmethod
    def get_by_tmdb_id(self, tmdb_id: int) -> Optional["Movie"]:
        pass

    @abstractmethod
    def list_published(self, offset: int, limit: int) -> Tuple[List["Movie"], int]:
        pass

    @abstractmethod
    def list_all_with_stats(self, offset: int, limit: int) -> Tuple[List["Movie"], int]:
        pass

    @abstractmethod
    def search(self, query: str) -> List["Movie"]:
        pass

    @abstractmethod
    def get_popular(self, limit: int) -> List["Movie"]:
        pass

    @abstractmethod
    def get_recent(self, limit: int) -> List["Movie"]:
        pass

    @abstractmethod
    def get_by_genre_name(self, genre_name: str, limit: int) -> List["Movie"]:
        pass

    @abstractmethod
    def count_published(self) -> int:
        pass

    @abstractmethod
    def create(self, movie: "Movie") -> "Movie":
        pass

    @abstractmethod
    def update(self, movie: "Movie") -> "Movie":
        pass

    @abstractmethod
    def delete_with_dependents(self, movie_id: int) -> bool:
        pass
