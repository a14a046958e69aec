from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import List, Optional

from cinemamax.db.models import WatchlistORM, WatchHistoryORM, MovieORM
from cinemamax.domain.models import WatchlistItem, WatchHistoryEntry, utcnow
from cinemamax.repositories.interface.watchlist_repository import WatchlistRepository, WatchHistoryRepository
from cinemamax.exceptions.repository import (
    DuplicateEntityException,
    RepositoryOperationException
)


class SQLAlchemyWatchlistRepo(WatchlistRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_domain(self, item_orm: WatchlistORM, movie_orm: Optional[MovieORM] = None) -> WatchlistItem:
        return WatchlistItem(
            id=item_orm.id,
            user_id=item_orm.user_id,
            movie_id=item_orm.movie_id,
            created_at=item_orm.created_at,
            title=movie_orm.title if movie_orm else None,
            poster_path=movie_orm.poster_path if movie_orm else None
        )

    def add(self, item: WatchlistItem) -> WatchlistItem:
        try:
            item_orm = WatchlistORM(user_id=item.user_id, movie_id=item.movie_id, created_at=utcnow())
            self.session.add(item_orm)
            self.session.commit()
            self.session.refresh(item_orm)
            return self._to_domain(item_orm)
        except IntegrityError:
            self.session.rollback()
            raise DuplicateEntityException(f"Watchlist item for user {item.user_id} and movie {item.movie_id} already exists")
        except Exception as e:
            self.session.rollback()
            raise RepositoryOperationException(f"Failed to add watchlist item: {str(e)}")

    def delete(self, user_id: int, movie_id: int) -> bool:
        try:
            deleted = self.session.query(WatchlistORM).filter(
                WatchlistORM.user_id == user_id,
                WatchlistORM.movie_id == movie_id
            ).delete(synchronize_session=False)
            self.session.commit()
            return deleted > 0
        except Exception as e:
            self.session.rollback()
            raise RepositoryOperationException(f"Failed to delete watchlist item: {str(e)}")

    def list_for_user(self, user_id: int) -> List[WatchlistItem]:
        try:
            rows = (
                self.session.query(WatchlistORM, MovieORM)
                .outerjoin(MovieORM, WatchlistORM.movie_id == MovieORM.id)
                .filter(WatchlistORM.user_id == user_id)
                .order_by(WatchlistORM.created_at.desc(), WatchlistORM.id.desc())
                .all()
            )
            return [self._to_domain(item_orm, movie_orm) for item_orm, movie_orm in rows]
        except Exception as e:
            raise RepositoryOperationException(f"Failed to get watchlist: {str(e)}")


class SQLAlchemyWatchHistoryRepo(WatchHistoryRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_domain(self, entry_orm: WatchHistoryORM, movie_orm: Optional[MovieORM] = None) -> WatchHistoryEntry:
        return WatchHistoryEntry(
            id=entry_orm.id,
            user_id=entry_orm.user_id,
            movie_id=entry_orm.movie_id,
            progress_seconds=entry_orm.progress_seconds or 0,
            watched_at=entry_orm.watched_at,
            title=movie_orm.title if movie_orm else None
        )

    def add(self, entry: WatchHistoryEntry) -> WatchHistoryEntry:
        try:
            entry_orm = WatchHistoryORM(
                user_id=entry.user_id,
                movie_id=entry.movie_id,
                progress_seconds=entry.progress_seconds,
                watched_at=entry.watched_at or utcnow()
            )
            self.session.add(entry_orm)
            self.session.commit()
            self.session.refresh(entry_orm)
            return self._to_domain(entry_orm)
        except Exception as e:
            self.session.rollback()
            raise RepositoryOperationException(f"Failed to record watch history: {str(e)}")

    def list_for_user(self, user_id: int, limit: int) -> List[WatchHistoryEntry]:
        try:
            rows = (
                self.session.query(WatchHistoryORM, MovieORM)
                .outerjoin(MovieORM, WatchHistoryORM.movie_id == MovieORM.id)
                .filter(WatchHistoryORM.user_id == user_id)
                .order_by(WatchHistoryORM.watched_at.desc(), WatchHistoryORM.id.desc())
                .limit(limit)
                .all()
            )
            return [self._to_domain(entry_orm, movie_orm) for entry_orm, movie_orm in rows]
        except Exception as e:
            raise RepositoryOperationException(f"Failed to get watch history: {str(e)}")
