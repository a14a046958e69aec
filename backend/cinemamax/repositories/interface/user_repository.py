from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple

from cinemamax.domain.models import User


class UserRepository(ABC):
    @abstractmethod
    def get_by_id(self, user_id: int) -> Optional["User"]:
        pass

    @abstractmethod
    def get_by_username(self, username: str) -> Optional["User"]:
        pass

    @abstractmethod
    def get_by_email(self, email: str) -> Optional["User"]:
        pass

    @abstractmethod
    def get_by_email_or_username(self, identifier: str) -> Optional["User"]:
        pass

    @abstractmethod
    def create(self, user: "User") -> "User":
        pass

    @abstractmethod
    def update(self, user: "User") -> "User":
        pass

    @abstractmethod
    def delete_with_dependents(self, user_id: int) -> bool:
        pass

    @abstractmethod
    def list_with_activity(self, role: str, search: Optional[str], offset: int, limit: int) -> Tuple[List["User"], int]:
        pass

    @abstractmethod
    def count_by_role(self, role: str, created_since: Optional[datetime] = None) -> int:
        pass

    @abstractmethod
    def get_recent(self, role: str, limit: int) -> List["User"]:
        pass
