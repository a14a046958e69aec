from abc import ABC, abstractmethod
from typing import List, Optional

from cinemamax.domain.models import Favorite


class FavoriteRepository(ABC):
    @abstractmethod
    def add(self, favorite: Favorite) -> "Favorite":
        pass

    @abstractmethod
    def get(self, user_id: int, movie_id: int) -> Optional["Favorite"]:
        pass

    @abstractmethod
    def delete(self, user_id: int, movie_id: int) -> bool:
        pass

    @abstractmethod
    def list_for_user(self, user_id: int) -> List["Favorite"]:
        pass

    @abstractmethod
    def count(self) -> int:
        pass

    @abstractmethod
    def get_recent(self, limit: int) -> List[dict]:
        pass
