import argparse
import logging
from typing import Optional, Tuple
from tqdm import tqdm

from cinemamax.config.environment import TMDB_API_KEY, TMDB_BASE_URL, TMDB_TIMEOUT
from cinemamax.config.logging import setup_logging
from cinemamax.db.database import SessionLocal, engine, Base
from cinemamax.db import models  # registers the tables on Base.metadata
from cinemamax.providers import CatalogProvider, TMDBProvider
from cinemamax.repositories import SQLAlchemyMovieRepo
from cinemamax.exceptions.catalog import ProviderUnavailableException
from cinemamax.exceptions.repository import DuplicateEntityException

logger = logging.getLogger(__name__)


def import_popular_movies(provider: CatalogProvider, pages: int = 1, with_details: bool = False,
                          session_factory=SessionLocal) -> Tuple[int, int, int]:
    """Import TMDB popular movies into the local catalog.

    Returns:
        tuple: (added_count, skipped_count, total_count)
    """
    db_session = session_factory()
    movie_repo = SQLAlchemyMovieRepo(db_session)

    added = 0
    skipped = 0
    total = 0

    try:
        for page in range(1, pages + 1):
            try:
                envelope = provider.get_popular(page)
            except ProviderUnavailableException as e:
                logger.error(f"Stopping import, TMDB page {page} failed: {str(e)}")
                break

            movies = envelope["results"]
            total += len(movies)

            for movie in tqdm(movies, desc=f"Importing page {page}/{pages}"):
                if movie_repo.get_by_tmdb_id(movie.tmdb_id):
                    skipped += 1
                    continue

                if with_details:
                    # list results carry no runtime or credits
                    try:
                        movie = provider.get_movie(movie.tmdb_id) or movie
                    except ProviderUnavailableException as e:
                        logger.warning(f"Using list data for TMDB movie {movie.tmdb_id}: {str(e)}")

                movie.id = None
                movie.source = "local"
                try:
                    movie_repo.create(movie)
                    added += 1
                except DuplicateEntityException:
                    skipped += 1

            if page >= envelope.get("total_pages", pages):
                break

        logger.info(f"Movie import summary: {added} added, {skipped} skipped, {total} total")
        return added, skipped, total

    finally:
        db_session.close()


def main(argv: Optional[list] = None):
    parser = argparse.ArgumentParser(description="Import popular TMDB movies into the local catalog")
    parser.add_argument("--pages", type=int, default=1, help="Number of TMDB popular pages to import")
    parser.add_argument("--details", action="store_true", help="Fetch full details (runtime, credits) per movie")
    args = parser.parse_args(argv)

    if args.pages < 1:
        parser.error("--pages must be at least 1")
    if not TMDB_API_KEY:
        parser.error("TMDB_API_KEY is not set")

    setup_logging()
    Base.metadata.create_all(bind=engine)

    provider = TMDBProvider(TMDB_API_KEY, base_url=TMDB_BASE_URL, timeout=TMDB_TIMEOUT)
    import_popular_movies(provider, pages=args.pages, with_details=args.details)


if __name__ == "__main__":
    main()
