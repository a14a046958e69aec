import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

Listener = Callable[[Dict[str, Any]], None]

STATE_KEYS = ("token", "user", "is_guest", "favorites")


class SessionStore:
    """Client-side auth and favorites state.

    Optionally persisted to a JSON file and reloaded on construction.
    Listeners registered with ``subscribe`` receive a snapshot of the state
    after every change. Concurrent writers are not coordinated: the last
    write wins.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path else None
        self.token: Optional[str] = None
        self.user: Optional[Dict[str, Any]] = None
        self.is_guest = False
        self.favorites: List[int] = []
        self._listeners: List[Listener] = []
        self._load()

    def _load(self):
        if self.path is None or not self.path.exists():
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            token = data.get("token")
            user = data.get("user")
            is_guest = bool(data.get("is_guest", False))
            favorites = [int(movie_id) for movie_id in data.get("favorites", [])]
        except (OSError, AttributeError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring unreadable session file {self.path}: {str(e)}")
            return

        self.token = token
        self.user = user
        self.is_guest = is_guest
        self.favorites = favorites

    def _save(self):
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self.snapshot()), encoding="utf-8")

    def snapshot(self) -> Dict[str, Any]:
        return {
            "token": self.token,
            "user": dict(self.user) if self.user else None,
            "is_guest": self.is_guest,
            "favorites": list(self.favorites)
        }

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None and self.user is not None

    def update(self, **changes):
        unknown = set(changes) - set(STATE_KEYS)
        if unknown:
            raise ValueError(f"Unknown session fields: {', '.join(sorted(unknown))}")

        for key, value in changes.items():
            setattr(self, key, list(value) if key == "favorites" else value)

        self._save()
        self._notify()

    def clear(self):
        self.update(token=None, user=None, is_guest=False, favorites=[])

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self):
        state = self.snapshot()
        for listener in list(self._listeners):
            listener(state)
