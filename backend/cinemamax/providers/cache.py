import logging
import time
from typing import Any, Callable, Dict, List, Optional, Tuple
from readerwriterlock import rwlock

from cinemamax.domain.models import Movie
from cinemamax.providers.catalog_provider import CatalogProvider

logger = logging.getLogger(__name__)


class CachedCatalogProvider(CatalogProvider):
    """Keeps successful provider answers for ``ttl_seconds``; failures are never cached.

    Expired entries are dropped when they are looked up, and every insert
    sweeps all expired keys at most once per ``ttl_seconds``, so the cache
    only holds entries written within roughly the last two TTL windows.
    """

    def __init__(self, provider: CatalogProvider, ttl_seconds: int = 300, clock: Callable[[], float] = time.monotonic):
        self.provider = provider
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries: Dict[Tuple, Tuple[float, Any]] = {}
        self._next_sweep = clock() + ttl_seconds
        self._lock = rwlock.RWLockWrite()

    @property
    def size(self) -> int:
        with self._lock.gen_rlock():
            return len(self._entries)

    def _cached(self, key: Tuple, loader: Callable[[], Any]) -> Any:
        if self.ttl_seconds <= 0:
            return loader()

        now = self.clock()
        with self._lock.gen_rlock():
            entry = self._entries.get(key)
        if entry:
            if entry[0] > now:
                return entry[1]
            with self._lock.gen_wlock():
                current = self._entries.get(key)
                if current and current[0] <= now:
                    del self._entries[key]

        value = loader()

        with self._lock.gen_wlock():
            self._entries[key] = (now + self.ttl_seconds, value)
            if now >= self._next_sweep:
                self._evict_expired(now)
                self._next_sweep = now + self.ttl_seconds
        return value

    def _evict_expired(self, now: float) -> int:
        # caller holds the write lock
        expired = [key for key, (expires_at, _) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Evicted {len(expired)} expired catalog cache entries")
        return len(expired)

    def clear(self):
        with self._lock.gen_wlock():
            self._entries.clear()

    def evict_expired(self) -> int:
        with self._lock.gen_wlock():
            return self._evict_expired(self.clock())

    def get_movie(self, movie_id: int) -> Optional[Movie]:
        return self._cached(("movie", movie_id), lambda: self.provider.get_movie(movie_id))

    def search_movies(self, query: str, page: int = 1) -> Dict[str, Any]:
        key = ("search", query.lower(), page)
        return self._cached(key, lambda: self.provider.search_movies(query, page))

    def get_popular(self, page: int = 1) -> Dict[str, Any]:
        return self._cached(("popular", page), lambda: self.provider.get_popular(page))

    def get_trending(self, time_window: str = "week") -> Dict[str, Any]:
        return self._cached(("trending", time_window), lambda: self.provider.get_trending(time_window))

    def get_by_genre(self, genre_id: int, page: int = 1) -> Dict[str, Any]:
        return self._cached(("genre", genre_id, page), lambda: self.provider.get_by_genre(genre_id, page))

    def get_genres(self) -> List[Dict[str, Any]]:
        return self._cached(("genres",), self.provider.get_genres)
