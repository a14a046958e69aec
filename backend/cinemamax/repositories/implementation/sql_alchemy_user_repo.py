from datetime import datetime
from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from typing import Optional, List, Tuple
from sqlalchemy.exc import IntegrityError

from cinemamax.domain.models import User, utcnow
from cinemamax.db.database import transaction
from cinemamax.db.models import (
    UserORM, MovieORM, FavoriteORM, ReviewORM, WatchlistORM, WatchHistoryORM, AdminSessionORM
)
from cinemamax.repositories.interface.user_repository import UserRepository
from cinemamax.exceptions.repository import (
    EntityNotFoundException,
    DuplicateEntityException,
    RepositoryOperationException,
)

class SQLAlchemyUserRepo(UserRepository):
    def __init__(self, db: Session):
        self.db = db

    def _to_domain(self, user_orm: UserORM) -> User:
        return User(
            id=user_orm.id,
            username=user_orm.username,
            email=user_orm.email,
            hashed_password=user_orm.hashed_password,
            first_name=user_orm.first_name,
            last_name=user_orm.last_name,
            role=user_orm.role,
            is_active=user_orm.is_active,
            created_at=user_orm.created_at,
            updated_at=user_orm.updated_at
        )

    def _to_orm(self, user: User) -> UserORM:
        now = utcnow()
        return UserORM(
            id=user.id,
            username=user.username,
            email=user.email,
            hashed_password=user.hashed_password,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role,
            is_active=user.is_active,
            created_at=user.created_at or now,
            updated_at=user.updated_at or now
        )

    def get_by_id(self, user_id: int) -> Optional[User]:
        """Get a user by ID"""
        try:
            user_orm = self.db.query(UserORM).filter(UserORM.id == user_id).first()
            return self._to_domain(user_orm) if user_orm else None
        except Exception as e:
            raise RepositoryOperationException(f"Failed to get user by ID: {str(e)}")

    def get_by_username(self, username: str) -> Optional[User]:
        """Get a user by username"""
        try:
            user_orm = self.db.query(UserORM).filter(UserORM.username == username).first()
            return self._to_domain(user_orm) if user_orm else None
        except Exception as e:
            raise RepositoryOperationException(f"Failed to get user by username: {str(e)}")

    def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by email"""
        try:
            user_orm = self.db.query(UserORM).filter(UserORM.email == email).first()
            return self._to_domain(user_orm) if user_orm else None
        except Exception as e:
            raise RepositoryOperationException(f"Failed to get user by email: {str(e)}")

    def get_by_email_or_username(self, identifier: str) -> Optional[User]:
        """Get a user whose email or username equals the identifier, email match first"""
        try:
            user_orm = (
                self.db.query(UserORM)
                .filter(or_(UserORM.email == identifier, UserORM.username == identifier))
                .order_by((UserORM.email == identifier).desc(), UserORM.id)
                .first()
            )
            return self._to_domain(user_orm) if user_orm else None
        except Exception as e:
            raise RepositoryOperationException(f"Failed to get user by email or username: {str(e)}")

    def create(self, user: User) -> User:
        """Create a new user"""
        try:
            user_orm = self._to_orm(user)
            self.db.add(user_orm)
            self.db.commit()
            self.db.refresh(user_orm)
            return self._to_domain(user_orm)
        except IntegrityError:
            self.db.rollback()
            raise DuplicateEntityException("User already exists with these credentials")
        except Exception as e:
            self.db.rollback()
            raise RepositoryOperationException(f"Failed to create user: {str(e)}")

    def update(self, user: User) -> User:
        try:
            user_orm = self.db.get(UserORM, user.id)
            if not user_orm:
                raise EntityNotFoundException(f"User {user.id} not found")

            user_orm.username = user.username
            user_orm.email = user.email
            user_orm.hashed_password = user.hashed_password
            user_orm.first_name = user.first_name
            user_orm.last_name = user.last_name
            user_orm.role = user.role
            user_orm.is_active = user.is_active
            user_orm.updated_at = utcnow()

            self.db.commit()
            self.db.refresh(user_orm)
            return self._to_domain(user_orm)
        except EntityNotFoundException:
            raise
        except IntegrityError:
            self.db.rollback()
            raise DuplicateEntityException("User with these credentials already exists")
        except Exception as e:
            self.db.rollback()
            raise RepositoryOperationException(f"Failed to update user: {str(e)}")

    def delete_with_dependents(self, user_id: int) -> bool:
        """Delete a user and every row that references it, all in one transaction"""
        try:
            with transaction(self.db):
                user_orm = self.db.get(UserORM, user_id)
                if not user_orm:
                    return False

                for model in (ReviewORM, FavoriteORM, WatchlistORM, WatchHistoryORM, AdminSessionORM):
                    self.db.query(model).filter(model.user_id == user_id).delete(synchronize_session=False)
                self.db.query(MovieORM).filter(MovieORM.created_by == user_id).update(
                    {MovieORM.created_by: None}, synchronize_session=False
                )
                self.db.delete(user_orm)
            return True
        except Exception as e:
            raise RepositoryOperationException(f"Failed to delete user: {str(e)}")

    def list_with_activity(self, role: str, search: Optional[str], offset: int, limit: int) -> Tuple[List[User], int]:
        try:
            favorites_count = (
                self.db.query(func.count(FavoriteORM.id))
                .filter(FavoriteORM.user_id == UserORM.id)
                .correlate(UserORM)
                .scalar_subquery()
            )
            reviews_count = (
                self.db.query(func.count(ReviewORM.id))
                .filter(ReviewORM.user_id == UserORM.id)
                .correlate(UserORM)
                .scalar_subquery()
            )

            filters = [UserORM.role == role]
            if search:
                pattern = f"%{search}%"
                filters.append(or_(
                    UserORM.first_name.ilike(pattern),
                    UserORM.last_name.ilike(pattern),
                    UserORM.email.ilike(pattern),
                    UserORM.username.ilike(pattern)
                ))

            total = self.db.query(func.count(UserORM.id)).filter(*filters).scalar()
            rows = (
                self.db.query(UserORM, favorites_count, reviews_count)
                .filter(*filters)
                .order_by(UserORM.created_at.desc(), UserORM.id.desc())
                .offset(offset)
                .limit(limit)
                .all()
            )

            users = []
            for user_orm, total_favorites, total_reviews in rows:
                user = self._to_domain(user_orm)
                user.total_favorites = int(total_favorites or 0)
                user.total_reviews = int(total_reviews or 0)
                users.append(user)
            return users, int(total or 0)
        except Exception as e:
            raise RepositoryOperationException(f"Failed to list users: {str(e)}")

    def count_by_role(self, role: str, created_since: Optional[datetime] = None) -> int:
        try:
            query = self.db.query(func.count(UserORM.id)).filter(UserORM.role == role)
            if created_since is not None:
                query = query.filter(UserORM.created_at >= created_since)
            return int(query.scalar() or 0)
        except Exception as e:
            raise RepositoryOperationException(f"Failed to count users: {str(e)}")

    def get_recent(self, role: str, limit: int) -> List[User]:
        try:
            user_orms = (
                self.db.query(UserORM)
                .filter(UserORM.role == role)
                .order_by(UserORM.created_at.desc(), UserORM.id.desc())
                .limit(limit)
                .all()
            )
            return [self._to_domain(user_orm) for user_orm in user_orms]
        except Exception as e:
            raise RepositoryOperationException(f"Failed to get recent users: {str(e)}")
