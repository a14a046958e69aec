from sqlalchemy import func
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import List, Optional

from cinemamax.db.models import ReviewORM, MovieORM, UserORM
from cinemamax.domain.models import Review, utcnow
from cinemamax.repositories.interface.review_repository import ReviewRepository
from cinemamax.exceptions.repository import (
    DuplicateEntityException,
    RepositoryOperationException,
    InvalidEntityDataException
)


class SQLAlchemyReviewRepo(ReviewRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_domain(self, review_orm: ReviewORM, movie_orm: Optional[MovieORM] = None,
                   user_orm: Optional[UserORM] = None) -> Review:
        try:
            return Review(
                id=review_orm.id,
                user_id=review_orm.user_id,
                movie_id=review_orm.movie_id,
                rating=review_orm.rating,
                comment=review_orm.comment,
                created_at=review_orm.created_at,
                updated_at=review_orm.updated_at,
                title=movie_orm.title if movie_orm else None,
                poster_path=movie_orm.poster_path if movie_orm else None,
                username=user_orm.username if user_orm else None,
                first_name=user_orm.first_name if user_orm else None,
                last_name=user_orm.last_name if user_orm else None
            )
        except Exception as e:
            raise InvalidEntityDataException(f"Failed to convert review data: {str(e)}")

    def _get_orm(self, user_id: int, movie_id: int) -> Optional[ReviewORM]:
        return self.session.query(ReviewORM).filter(
            ReviewORM.user_id == user_id,
            ReviewORM.movie_id == movie_id
        ).first()

    def add(self, review: Review) -> Review:
        try:
            now = utcnow()
            review_orm = ReviewORM(
                user_id=review.user_id,
                movie_id=review.movie_id,
                rating=review.rating,
                comment=review.comment,
                created_at=now,
                updated_at=now
            )
            self.session.add(review_orm)
            self.session.commit()
            self.session.refresh(review_orm)
            return self._to_domain(review_orm)
        except IntegrityError:
            self.session.rollback()
            raise DuplicateEntityException(f"Review for user {review.user_id} and movie {review.movie_id} already exists")
        except Exception as e:
            self.session.rollback()
            raise RepositoryOperationException(f"Failed to add review: {str(e)}")

    def get(self, user_id: int, movie_id: int) -> Optional[Review]:
        try:
            review_orm = self._get_orm(user_id, movie_id)
            return self._to_domain(review_orm) if review_orm else None
        except InvalidEntityDataException:
            raise
        except Exception as e:
            raise RepositoryOperationException(f"Failed to get review: {str(e)}")

    def update(self, review: Review) -> Optional[Review]:
        """Overwrite rating and comment, returns None when the pair has no review"""
        try:
            review_orm = self._get_orm(review.user_id, review.movie_id)
            if not review_orm:
                return None

            review_orm.rating = review.rating
            review_orm.comment = review.comment
            review_orm.updated_at = utcnow()
            self.session.commit()
            self.session.refresh(review_orm)
            return self._to_domain(review_orm)
        except Exception as e:
            self.session.rollback()
            raise RepositoryOperationException(f"Failed to update review: {str(e)}")

    def delete(self, user_id: int, movie_id: int) -> bool:
        try:
            deleted = self.session.query(ReviewORM).filter(
                ReviewORM.user_id == user_id,
                ReviewORM.movie_id == movie_id
            ).delete(synchronize_session=False)
            self.session.commit()
            return deleted > 0
        except Exception as e:
            self.session.rollback()
            raise RepositoryOperationException(f"Failed to delete review: {str(e)}")

    def list_for_user(self, user_id: int) -> List[Review]:
        try:
            rows = (
                self.session.query(ReviewORM, MovieORM)
                .outerjoin(MovieORM, ReviewORM.movie_id == MovieORM.id)
                .filter(ReviewORM.user_id == user_id)
                .order_by(ReviewORM.created_at.desc(), ReviewORM.id.desc())
                .all()
            )
            return [self._to_domain(review_orm, movie_orm=movie_orm) for review_orm, movie_orm in rows]
        except InvalidEntityDataException:
            raise
        except Exception as e:
            raise RepositoryOperationException(f"Failed to get user reviews: {str(e)}")

    def list_for_movie(self, movie_id: int, limit: int) -> List[Review]:
        try:
            rows = (
                self.session.query(ReviewORM, UserORM)
                .join(UserORM, ReviewORM.user_id == UserORM.id)
                .filter(ReviewORM.movie_id == movie_id)
                .order_by(ReviewORM.created_at.desc(), ReviewORM.id.desc())
                .limit(limit)
                .all()
            )
            return [self._to_domain(review_orm, user_orm=user_orm) for review_orm, user_orm in rows]
        except InvalidEntityDataException:
            raise
        except Exception as e:
            raise RepositoryOperationException(f"Failed to get movie reviews: {str(e)}")

    def count(self) -> int:
        try:
            return int(self.session.query(func.count(ReviewORM.id)).scalar() or 0)
        except Exception as e:
            raise RepositoryOperationException(f"Failed to count reviews: {str(e)}")
