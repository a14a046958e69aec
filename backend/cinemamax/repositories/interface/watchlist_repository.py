from abc import ABC, abstractmethod
from typing import List

from cinemamax.domain.models import WatchlistItem, WatchHistoryEntry


class WatchlistRepository(ABC):
    @abstractmethod
    def add(self, item: WatchlistItem) -> "WatchlistItem":
        pass

    @abstractmethod
    def delete(self, user_id: int, movie_id: int) -> bool:
        pass

    @abstractmethod
    def list_for_user(self, user_id: int) -> List["WatchlistItem"]:
        pass


class WatchHistoryRepository(ABC):
    @abstractmethod
    def add(self, entry: WatchHistoryEntry) -> "WatchHistoryEntry":
        pass

    @abstractmethod
    def list_for_user(self, user_id: int, limit: int) -> List["WatchHistoryEntry"]:
        pass
