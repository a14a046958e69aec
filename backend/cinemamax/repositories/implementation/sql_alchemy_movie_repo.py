from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import List, Optional, Tuple

from cinemamax.config.catalog import STATUS_PUBLISHED
from cinemamax.db.database import transaction
from cinemamax.db.models import MovieORM, FavoriteORM, ReviewORM, WatchlistORM, WatchHistoryORM
from cinemamax.domain.models import Movie, utcnow
from cinemamax.repositories.interface.movie_repository import MovieRepository
from cinemamax.exceptions.repository import (
    EntityNotFoundException,
    DuplicateEntityException,
    RepositoryOperationException,
    InvalidEntityDataException
)


class SQLAlchemyMovieRepo(MovieRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_domain(self, movie_orm: MovieORM, favorite_count=None, review_count=None, average_rating=None) -> Movie:
        try:
            return Movie(
                id=movie_orm.id,
                tmdb_id=movie_orm.tmdb_id,
                title=movie_orm.title,
                overview=movie_orm.overview,
                release_date=movie_orm.release_date,
                runtime=movie_orm.runtime,
                vote_average=movie_orm.vote_average if movie_orm.vote_average is not None else 0.0,
                vote_count=movie_orm.vote_count or 0,
                poster_path=movie_orm.poster_path,
                backdrop_path=movie_orm.backdrop_path,
                genres=movie_orm.genres,
                director=movie_orm.director,
                movie_cast=movie_orm.movie_cast,
                status=movie_orm.status,
                created_by=movie_orm.created_by,
                created_at=movie_orm.created_at,
                updated_at=movie_orm.updated_at,
                favorite_count=int(favorite_count) if favorite_count is not None else None,
                review_count=int(review_count) if review_count is not None else None,
                average_rating=float(average_rating) if average_rating is not None else None
            )
        except Exception as e:
            raise InvalidEntityDataException(f"Failed to convert movie data: {str(e)}")

    def _to_orm(self, movie: Movie) -> MovieORM:
        now = utcnow()
        return MovieORM(
            id=movie.id,
            tmdb_id=movie.tmdb_id,
            title=movie.title,
            overview=movie.overview,
            release_date=movie.release_date,
            runtime=movie.runtime,
            vote_average=movie.vote_average or 0,
            vote_count=movie.vote_count or 0,
            poster_path=movie.poster_path,
            backdrop_path=movie.backdrop_path,
            genres=movie.genres,
            director=movie.director,
            movie_cast=movie.movie_cast,
            status=movie.status,
            created_by=movie.created_by,
            created_at=movie.created_at or now,
            updated_at=movie.updated_at or now
        )

    def _stats_columns(self):
        favorite_count = (
            self.session.query(func.count(FavoriteORM.id))
            .filter(FavoriteORM.movie_id == MovieORM.id)
            .correlate(MovieORM)
            .scalar_subquery()
        )
        review_count = (
            self.session.query(func.count(ReviewORM.id))
            .filter(ReviewORM.movie_id == MovieORM.id)
            .correlate(MovieORM)
            .scalar_subquery()
        )
        average_rating = (
            self.session.query(func.avg(ReviewORM.rating))
            .filter(ReviewORM.movie_id == MovieORM.id)
            .correlate(MovieORM)
            .scalar_subquery()
        )
        return favorite_count, review_count, average_rating

    def _query_with_stats(self):
        favorite_count, review_count, average_rating = self._stats_columns()
        return self.session.query(MovieORM, favorite_count, review_count, average_rating), favorite_count

    def _rows_to_domain(self, rows) -> List[Movie]:
        return [self._to_domain(movie_orm, fav, rev, avg) for movie_orm, fav, rev, avg in rows]

    def get_by_id(self, movie_id: int) -> Optional[Movie]:
        try:
            movie_orm = self.session.get(MovieORM, movie_id)
            if not movie_orm:
                return None
            return self._to_domain(movie_orm)
        except InvalidEntityDataException:
            raise
        except Exception as e:
            raise RepositoryOperationException(f"Failed to get movie by ID: {str(e)}")

    def get_with_stats(self, movie_id: int) -> Optional[Movie]:
        try:
            query, _ = self._query_with_stats()
            row = query.filter(MovieORM.id == movie_id).first()
            if not row:
                return None
            movie_orm, fav, rev, avg = row
            return self._to_domain(movie_orm, fav, rev, avg)
        except InvalidEntityDataException:
            raise
        except Exception as e:
            raise RepositoryOperationException(f"Failed to get movie with stats: {str(e)}")

    def get_by_tmdb_id(self, tmdb_id: int) -> Optional[Movie]:
        try:
            movie_orm = self.session.query(MovieORM).filter(MovieORM.tmdb_id == tmdb_id).first()
            return self._to_domain(movie_orm) if movie_orm else None
        except InvalidEntityDataException:
            raise
        except Exception as e:
            raise RepositoryOperationException(f"Failed to get movie by TMDB ID: {str(e)}")

    def list_published(self, offset: int, limit: int) -> Tuple[List[Movie], int]:
        try:
            query, _ = self._query_with_stats()
            rows = (
                query.filter(MovieORM.status == STATUS_PUBLISHED)
                .order_by(MovieORM.created_at.desc(), MovieORM.id.desc())
                .offset(offset)
                .limit(limit)
                .all()
            )
            return self._rows_to_domain(rows), self.count_published()
        except InvalidEntityDataException:
            raise
        except Exception as e:
            raise RepositoryOperationException(f"Failed to list movies: {str(e)}")

    def list_all_with_stats(self, offset: int, limit: int) -> Tuple[List[Movie], int]:
        try:
            query, _ = self._query_with_stats()
            rows = (
                query.order_by(MovieORM.created_at.desc(), MovieORM.id.desc())
                .offset(offset)
                .limit(limit)
                .all()
            )
            total = self.session.query(func.count(MovieORM.id)).scalar()
            return self._rows_to_domain(rows), int(total or 0)
        except InvalidEntityDataException:
            raise
        except Exception as e:
            raise RepositoryOperationException(f"Failed to list movie stats: {str(e)}")

    def search(self, query: str) -> List[Movie]:
        try:
            pattern = f"%{query}%"
            stats_query, _ = self._query_with_stats()
            rows = (
                stats_query.filter(
                    MovieORM.status == STATUS_PUBLISHED,
                    or_(
                        MovieORM.title.ilike(pattern),
                        MovieORM.overview.ilike(pattern),
                        MovieORM.genres.ilike(pattern)
                    )
                )
                .order_by(MovieORM.title, MovieORM.id)
                .all()
            )
            return self._rows_to_domain(rows)
        except InvalidEntityDataException:
            raise
        except Exception as e:
            raise RepositoryOperationException(f"Failed to search movies: {str(e)}")

    def get_popular(self, limit: int) -> List[Movie]:
        try:
            query, favorite_count = self._query_with_stats()
            rows = (
                query.filter(MovieORM.status == STATUS_PUBLISHED)
                .order_by(favorite_count.desc(), MovieORM.vote_average.desc(), MovieORM.id)
                .limit(limit)
                .all()
            )
            return self._rows_to_domain(rows)
        except InvalidEntityDataException:
            raise
        except Exception as e:
            raise RepositoryOperationException(f"Failed to get popular movies: {str(e)}")

    def get_recent(self, limit: int) -> List[Movie]:
        try:
            query, favorite_count = self._query_with_stats()
            rows = (
                query.filter(MovieORM.status == STATUS_PUBLISHED)
                .order_by(MovieORM.created_at.desc(), favorite_count.desc(), MovieORM.id.desc())
                .limit(limit)
                .all()
            )
            return self._rows_to_domain(rows)
        except InvalidEntityDataException:
            raise
        except Exception as e:
            raise RepositoryOperationException(f"Failed to get recent movies: {str(e)}")

    def get_by_genre_name(self, genre_name: str, limit: int) -> List[Movie]:
        try:
            query, _ = self._query_with_stats()
            rows = (
                query.filter(
                    MovieORM.status == STATUS_PUBLISHED,
                    MovieORM.genres.ilike(f"%{genre_name}%")
                )
                .order_by(MovieORM.vote_average.desc(), MovieORM.id)
                .limit(limit)
                .all()
            )
            return self._rows_to_domain(rows)
        except InvalidEntityDataException:
            raise
        except Exception as e:
            raise RepositoryOperationException(f"Failed to get movies by genre: {str(e)}")

    def count_published(self) -> int:
        try:
            total = (
                self.session.query(func.count(MovieORM.id))
                .filter(MovieORM.status == STATUS_PUBLISHED)
                .scalar()
            )
            return int(total or 0)
        except Exception as e:
            raise RepositoryOperationException(f"Failed to count movies: {str(e)}")

    def create(self, movie: Movie) -> Movie:
        try:
            movie_orm = self._to_orm(movie)
            self.session.add(movie_orm)
            self.session.commit()
            self.session.refresh(movie_orm)
            return self._to_domain(movie_orm)
        except IntegrityError:
            self.session.rollback()
            raise DuplicateEntityException(f"Movie with TMDB ID {movie.tmdb_id} already exists")
        except Exception as e:
            self.session.rollback()
            raise RepositoryOperationException(f"Failed to create movie: {str(e)}")

    def update(self, movie: Movie) -> Movie:
        try:
            movie_orm = self.session.get(MovieORM, movie.id)
            if not movie_orm:
                raise EntityNotFoundException(f"Movie {movie.id} not found")

            for field in (
                "title", "overview", "release_date", "runtime", "vote_average", "vote_count",
                "poster_path", "backdrop_path", "genres", "director", "movie_cast", "status"
            ):
                setattr(movie_orm, field, getattr(movie, field))
            movie_orm.updated_at = utcnow()

            self.session.commit()
            self.session.refresh(movie_orm)
            return self._to_domain(movie_orm)
        except EntityNotFoundException:
            raise
        except IntegrityError:
            self.session.rollback()
            raise DuplicateEntityException(f"Movie {movie.id} conflicts with an existing movie")
        except Exception as e:
            self.session.rollback()
            raise RepositoryOperationException(f"Failed to update movie: {str(e)}")

    def delete_with_dependents(self, movie_id: int) -> bool:
        """Delete a movie with its favorites, reviews, watchlist and history rows in one transaction"""
        try:
            with transaction(self.session):
                movie_orm = self.session.get(MovieORM, movie_id)
                if not movie_orm:
                    return False

                for model in (ReviewORM, FavoriteORM, WatchlistORM, WatchHistoryORM):
                    self.session.query(model).filter(model.movie_id == movie_id).delete(synchronize_session=False)
                self.session.delete(movie_orm)
            return True
        except Exception as e:
            raise RepositoryOperationException(f"Failed to delete movie: {str(e)}")
