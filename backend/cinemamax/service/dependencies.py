from fastapi import Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from cinemamax.config.environment import TMDB_API_KEY, TMDB_BASE_URL, TMDB_TIMEOUT, TMDB_CACHE_TTL_SECONDS
from cinemamax.db.database import get_db
from cinemamax.providers import TMDBProvider, CachedCatalogProvider
from cinemamax.repositories import (
    SQLAlchemyUserRepo,
    SQLAlchemyMovieRepo,
    SQLAlchemyFavoriteRepo,
    SQLAlchemyReviewRepo,
    SQLAlchemyWatchlistRepo,
    SQLAlchemyWatchHistoryRepo,
    SQLAlchemyAdminSessionRepo
)
from cinemamax.service.auth_service import AuthService
from cinemamax.service.catalog_service import CatalogService
from cinemamax.service.content_service import ContentService
from cinemamax.service.user_service import UserService
from cinemamax.service.admin_service import AdminService

# one provider per process so the TTL cache is shared across requests
catalog_provider = CachedCatalogProvider(
    TMDBProvider(TMDB_API_KEY, base_url=TMDB_BASE_URL, timeout=TMDB_TIMEOUT),
    ttl_seconds=TMDB_CACHE_TTL_SECONDS
)

def get_catalog_provider() -> CachedCatalogProvider:
    return catalog_provider

def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(SQLAlchemyUserRepo(db), SQLAlchemyAdminSessionRepo(db))

def get_catalog_service(
    db: Session = Depends(get_db),
    provider: CachedCatalogProvider = Depends(get_catalog_provider)
) -> CatalogService:
    return CatalogService(SQLAlchemyMovieRepo(db), SQLAlchemyReviewRepo(db), provider)

def get_content_service(db: Session = Depends(get_db)) -> ContentService:
    return ContentService(
        movie_repo=SQLAlchemyMovieRepo(db),
        favorite_repo=SQLAlchemyFavoriteRepo(db),
        review_repo=SQLAlchemyReviewRepo(db),
        watchlist_repo=SQLAlchemyWatchlistRepo(db),
        history_repo=SQLAlchemyWatchHistoryRepo(db)
    )

def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(SQLAlchemyUserRepo(db))

def get_admin_service(
    db: Session = Depends(get_db),
    catalog_service: CatalogService = Depends(get_catalog_service)
) -> AdminService:
    return AdminService(
        user_repo=SQLAlchemyUserRepo(db),
        movie_repo=SQLAlchemyMovieRepo(db),
        favorite_repo=SQLAlchemyFavoriteRepo(db),
        review_repo=SQLAlchemyReviewRepo(db),
        catalog_service=catalog_service,
        ping_database=lambda: db.execute(text("SELECT 1"))
    )
