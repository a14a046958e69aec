from typing import Optional

from cinemamax.domain.models import User
from cinemamax.repositories import UserRepository
from cinemamax.exceptions.repository import DuplicateEntityException, EntityNotFoundException
from cinemamax.exceptions.content import (
    ResourceNotFoundException,
    InvalidRequestException,
    DuplicateContentException
)


class UserService:
    def __init__(self, user_repository: UserRepository):
        self.user_repository = user_repository

    def get_profile(self, user_id: int) -> User:
        user = self.user_repository.get_by_id(user_id)
        if user is None:
            raise ResourceNotFoundException(f"User with ID {user_id} not found")
        return user

    def update_profile(
        self,
        user_id: int,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        email: Optional[str] = None
    ) -> User:
        if not any((first_name, last_name, email)):
            raise InvalidRequestException("No valid fields to update")

        user = self.get_profile(user_id)

        if email and email != user.email:
            other = self.user_repository.get_by_email(email)
            if other and other.id != user.id:
                raise DuplicateContentException("Email already exists")
            user.email = email
        if first_name:
            user.first_name = first_name
        if last_name:
            user.last_name = last_name

        try:
            return self.user_repository.update(user)
        except EntityNotFoundException:
            raise ResourceNotFoundException(f"User with ID {user_id} not found")
        except DuplicateEntityException:
            raise DuplicateContentException("Email already exists")
