import logging
from datetime import datetime, date
from typing import Any, Dict, List, Optional

import requests

from cinemamax.config.catalog import GENRES
from cinemamax.domain.models import Movie
from cinemamax.exceptions.catalog import ProviderUnavailableException
from cinemamax.providers.catalog_provider import CatalogProvider

logger = logging.getLogger(__name__)

# cast members kept when flattening TMDB credits into free text
CAST_LIMIT = 5


class TMDBProvider(CatalogProvider):
    def __init__(self, api_key: str, base_url: str = "https://api.themoviedb.org/3",
                 timeout: float = 10.0, http: Optional[requests.Session] = None):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = http or requests.Session()

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if not self.api_key:
            raise ProviderUnavailableException("TMDB API key is not configured")

        params = {**(params or {}), "api_key": self.api_key}
        url = f"{self.base_url}{path}"
        try:
            response = self.http.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            raise ProviderUnavailableException(f"TMDB API error: {status_code}", status_code=status_code)
        except requests.RequestException as e:
            raise ProviderUnavailableException(f"TMDB request failed: {str(e)}")
        except ValueError as e:
            raise ProviderUnavailableException(f"TMDB returned invalid JSON: {str(e)}")

    @staticmethod
    def _parse_date(value: Optional[str]) -> Optional[date]:
        if not value:
            return None
        try:
            return datetime.strptime(value, "%Y-%m-%d").date()
        except (ValueError, TypeError):
            return None

    @staticmethod
    def _genre_names(item: Dict[str, Any]) -> Optional[str]:
        # details carry genre objects, list endpoints only genre ids
        if item.get("genres"):
            names = [genre.get("name") for genre in item["genres"] if genre.get("name")]
        else:
            names = [GENRES[genre_id] for genre_id in item.get("genre_ids", []) if genre_id in GENRES]
        return ", ".join(names) or None

    @staticmethod
    def _credits(item: Dict[str, Any]):
        credits = item.get("credits") or {}
        director = next(
            (member.get("name") for member in credits.get("crew", []) if member.get("job") == "Director"),
            None
        )
        cast = [member.get("name") for member in credits.get("cast", [])[:CAST_LIMIT] if member.get("name")]
        return director, ", ".join(cast) or None

    def normalize(self, item: Dict[str, Any]) -> Movie:
        director, cast = self._credits(item)
        return Movie(
            id=item.get("id"),
            tmdb_id=item.get("id"),
            title=item.get("title") or item.get("name") or "Untitled",
            overview=item.get("overview"),
            release_date=self._parse_date(item.get("release_date")),
            runtime=item.get("runtime"),
            vote_average=float(item.get("vote_average") or 0.0),
            vote_count=int(item.get("vote_count") or 0),
            poster_path=item.get("poster_path"),
            backdrop_path=item.get("backdrop_path"),
            genres=self._genre_names(item),
            director=director,
            movie_cast=cast,
            source="tmdb"
        )

    def _envelope(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "results": [self.normalize(item) for item in data.get("results", [])],
            "page": data.get("page", 1),
            "total_pages": data.get("total_pages", 0),
            "total_results": data.get("total_results", 0)
        }

    def get_movie(self, movie_id: int) -> Optional[Movie]:
        try:
            data = self._get(f"/movie/{movie_id}", {"append_to_response": "credits"})
        except ProviderUnavailableException as e:
            if e.status_code == 404:
                return None
            raise
        return self.normalize(data)

    def search_movies(self, query: str, page: int = 1) -> Dict[str, Any]:
        data = self._get("/search/movie", {"query": query, "page": page, "include_adult": "false"})
        return self._envelope(data)

    def get_popular(self, page: int = 1) -> Dict[str, Any]:
        return self._envelope(self._get("/movie/popular", {"page": page}))

    def get_trending(self, time_window: str = "week") -> Dict[str, Any]:
        return self._envelope(self._get(f"/trending/movie/{time_window}"))

    def get_by_genre(self, genre_id: int, page: int = 1) -> Dict[str, Any]:
        data = self._get("/discover/movie", {
            "with_genres": genre_id,
            "page": page,
            "sort_by": "popularity.desc"
        })
        return self._envelope(data)

    def get_genres(self) -> List[Dict[str, Any]]:
        data = self._get("/genre/movie/list")
        return data.get("genres", [])
