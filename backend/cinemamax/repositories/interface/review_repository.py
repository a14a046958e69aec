from abc import ABC, abstractmethod
from typing import List, Optional

from cinemamax.domain.models import Review


class ReviewRepository(ABC):
    @abstractmethod
    def add(self, review: Review) -> "Review":
        pass

    @abstractmethod
    def get(self, user_id: int, movie_id: int) -> Optional["Review"]:
        pass

    @abstractmethod
    def update(self, review: Review) -> Optional["Review"]:
        pass

    @abstractmethod
    def delete(self, user_id: int, movie_id: int) -> bool:
        pass

    @abstractmethod
    def list_for_user(self, user_id: int) -> List["Review"]:
        pass

    @abstractmethod
    def list_for_movie(self, movie_id: int, limit: int) -> List["Review"]:
        pass

    @abstractmethod
    def count(self) -> int:
        pass
