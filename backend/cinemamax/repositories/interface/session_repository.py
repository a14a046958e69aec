from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from cinemamax.domain.models import AdminSession


class AdminSessionRepository(ABC):
    @abstractmethod
    def upsert(self, session: AdminSession) -> "AdminSession":
        pass

    @abstractmethod
    def get_by_token(self, token: str) -> Optional["AdminSession"]:
        pass

    @abstractmethod
    def delete_by_token(self, token: str) -> bool:
        pass

    @abstractmethod
    def delete_expired(self, now: datetime) -> int:
        pass
