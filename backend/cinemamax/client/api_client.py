import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from cinemamax.client.session_store import SessionStore
from cinemamax.exceptions.client import ApiError

logger = logging.getLogger(__name__)


class CinemaMaxClient:
    """Thin HTTP client for the CinemaMax API that keeps its state in a SessionStore."""

    def __init__(self, base_url: str, store: SessionStore, http: Optional[requests.Session] = None,
                 timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.store = store
        self.http = http or requests.Session()
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        if self.store.token:
            return {"Authorization": f"Bearer {self.store.token}"}
        return {}

    def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None,
                 params: Optional[Dict[str, Any]] = None) -> Any:
        response = self.http.request(
            method,
            f"{self.base_url}{path}",
            json=json,
            params=params,
            headers=self._headers(),
            timeout=self.timeout
        )

        try:
            data = response.json()
        except ValueError:
            data = None

        if not response.ok:
            message = data.get("error") if isinstance(data, dict) else None
            raise ApiError(response.status_code, message or response.reason or "Request failed")
        return data

    # auth

    def _start_session(self, data: Dict[str, Any]) -> Dict[str, Any]:
        self.store.update(token=data["token"], user=data["user"], is_guest=False, favorites=[])
        return data["user"]

    def signup(self, username: str, email: str, password: str, name: str) -> Dict[str, Any]:
        data = self._request("POST", "/auth/signup", json={
            "username": username,
            "email": email,
            "password": password,
            "name": name
        })
        return self._start_session(data)

    def signin(self, identifier: str, password: str) -> Dict[str, Any]:
        data = self._request("POST", "/auth/signin", json={"email": identifier, "password": password})
        return self._start_session(data)

    def signout(self):
        try:
            if self.store.token:
                self._request("POST", "/auth/signout")
        finally:
            self.store.clear()

    def continue_as_guest(self):
        self.store.update(token=None, user=None, is_guest=True, favorites=[])

    def check_auth(self) -> Optional[Dict[str, Any]]:
        """Refresh the cached user from the server; a rejected token is dropped."""
        if self.store.is_guest or not self.store.token:
            return None

        try:
            data = self._request("GET", "/auth/user")
        except ApiError as e:
            if e.status_code == 401:
                self.store.update(token=None, user=None, favorites=[])
                return None
            raise

        self.store.update(user=data["user"])
        return data["user"]

    # favorites

    def load_favorites(self) -> List[int]:
        favorites = self._request("GET", "/users/favorites")
        movie_ids = [favorite["movie_id"] for favorite in favorites]
        self.store.update(favorites=movie_ids)
        return movie_ids

    def add_favorite(self, movie_id: int):
        self._request("POST", f"/users/favorites/{movie_id}")
        if movie_id not in self.store.favorites:
            self.store.update(favorites=[movie_id] + self.store.favorites)

    def remove_favorite(self, movie_id: int):
        self._request("DELETE", f"/users/favorites/{movie_id}")
        self.store.update(favorites=[favorite for favorite in self.store.favorites if favorite != movie_id])

    def is_favorite(self, movie_id: int) -> bool:
        return movie_id in self.store.favorites

    # catalog

    def list_movies(self, page: int = 1, limit: int = 20) -> Dict[str, Any]:
        return self._request("GET", "/movies", params={"page": page, "limit": limit})

    def get_movie(self, movie_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/movies/{movie_id}")

    def search_movies(self, query: str, page: int = 1) -> Dict[str, Any]:
        return self._request("GET", f"/movies/search/{quote(query, safe='')}", params={"page": page})
