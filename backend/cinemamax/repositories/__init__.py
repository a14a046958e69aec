from cinemamax.repositories.interface.user_repository import UserRepository
from cinemamax.repositories.interface.movie_repository import MovieRepository
from cinemamax.repositories.interface.favorite_repository import FavoriteRepository
from cinemamax.repositories.interface.review_repository import ReviewRepository
from cinemamax.repositories.interface.watchlist_repository import WatchlistRepository, WatchHistoryRepository
from cinemamax.repositories.interface.session_repository import AdminSessionRepository
from cinemamax.repositories.implementation.sql_alchemy_user_repo import SQLAlchemyUserRepo
from cinemamax.repositories.implementation.sql_alchemy_movie_repo import SQLAlchemyMovieRepo
from cinemamax.repositories.implementation.sql_alchemy_favorite_repo import SQLAlchemyFavoriteRepo
from cinemamax.repositories.implementation.sql_alchemy_review_repo import SQLAlchemyReviewRepo
from cinemamax.repositories.implementation.sql_alchemy_watchlist_repo import SQLAlchemyWatchlistRepo, SQLAlchemyWatchHistoryRepo
from cinemamax.repositories.implementation.sql_alchemy_session_repo import SQLAlchemyAdminSessionRepo
