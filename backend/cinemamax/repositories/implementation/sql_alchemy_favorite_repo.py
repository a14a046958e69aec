from sqlalchemy import func
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import List, Optional

from cinemamax.db.models import FavoriteORM, MovieORM, UserORM
from cinemamax.domain.models import Favorite, utcnow
from cinemamax.repositories.interface.favorite_repository import FavoriteRepository
from cinemamax.exceptions.repository import (
    DuplicateEntityException,
    RepositoryOperationException
)


class SQLAlchemyFavoriteRepo(FavoriteRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_domain(self, favorite_orm: FavoriteORM, movie_orm: Optional[MovieORM] = None) -> Favorite:
        return Favorite(
            id=favorite_orm.id,
            user_id=favorite_orm.user_id,
            movie_id=favorite_orm.movie_id,
            created_at=favorite_orm.created_at,
            title=movie_orm.title if movie_orm else None,
            poster_path=movie_orm.poster_path if movie_orm else None,
            vote_average=movie_orm.vote_average if movie_orm else None
        )

    def add(self, favorite: Favorite) -> Favorite:
        try:
            favorite_orm = FavoriteORM(
                user_id=favorite.user_id,
                movie_id=favorite.movie_id,
                created_at=favorite.created_at or utcnow()
            )
            self.session.add(favorite_orm)
            self.session.commit()
            self.session.refresh(favorite_orm)
            return self._to_domain(favorite_orm)
        except IntegrityError:
            self.session.rollback()
            raise DuplicateEntityException(f"Favorite for user {favorite.user_id} and movie {favorite.movie_id} already exists")
        except Exception as e:
            self.session.rollback()
            raise RepositoryOperationException(f"Failed to add favorite: {str(e)}")

    def get(self, user_id: int, movie_id: int) -> Optional[Favorite]:
        try:
            favorite_orm = self.session.query(FavoriteORM).filter(
                FavoriteORM.user_id == user_id,
                FavoriteORM.movie_id == movie_id
            ).first()
            return self._to_domain(favorite_orm) if favorite_orm else None
        except Exception as e:
            raise RepositoryOperationException(f"Failed to get favorite: {str(e)}")

    def delete(self, user_id: int, movie_id: int) -> bool:
        try:
            deleted = self.session.query(FavoriteORM).filter(
                FavoriteORM.user_id == user_id,
                FavoriteORM.movie_id == movie_id
            ).delete(synchronize_session=False)
            self.session.commit()
            return deleted > 0
        except Exception as e:
            self.session.rollback()
            raise RepositoryOperationException(f"Failed to delete favorite: {str(e)}")

    def list_for_user(self, user_id: int) -> List[Favorite]:
        try:
            rows = (
                self.session.query(FavoriteORM, MovieORM)
                .outerjoin(MovieORM, FavoriteORM.movie_id == MovieORM.id)
                .filter(FavoriteORM.user_id == user_id)
                .order_by(FavoriteORM.created_at.desc(), FavoriteORM.id.desc())
                .all()
            )
            return [self._to_domain(favorite_orm, movie_orm) for favorite_orm, movie_orm in rows]
        except Exception as e:
            raise RepositoryOperationException(f"Failed to get user favorites: {str(e)}")

    def count(self) -> int:
        try:
            return int(self.session.query(func.count(FavoriteORM.id)).scalar() or 0)
        except Exception as e:
            raise RepositoryOperationException(f"Failed to count favorites: {str(e)}")

    def get_recent(self, limit: int) -> List[dict]:
        """Most recent favorites joined with the user and the movie title, for the activity feed"""
        try:
            rows = (
                self.session.query(FavoriteORM, UserORM, MovieORM.title)
                .join(UserORM, FavoriteORM.user_id == UserORM.id)
                .outerjoin(MovieORM, FavoriteORM.movie_id == MovieORM.id)
                .order_by(FavoriteORM.created_at.desc(), FavoriteORM.id.desc())
                .limit(limit)
                .all()
            )
            return [
                {
                    "id": favorite_orm.id,
                    "user_id": user_orm.id,
                    "username": user_orm.username,
                    "first_name": user_orm.first_name,
                    "last_name": user_orm.last_name,
                    "email": user_orm.email,
                    "movie_id": favorite_orm.movie_id,
                    "title": title,
                    "created_at": favorite_orm.created_at
                }
                for favorite_orm, user_orm, title in rows
            ]
        except Exception as e:
            raise RepositoryOperationException(f"Failed to get recent favorites: {str(e)}")
