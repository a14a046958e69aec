import argparse
import logging
import os
from datetime import date
from typing import Optional

from cinemamax.config.catalog import ROLE_ADMIN, ROLE_MODERATOR, ROLE_USER, STATUS_PUBLISHED
from cinemamax.config.logging import setup_logging
from cinemamax.db.database import SessionLocal, engine, Base
from cinemamax.db.models import UserORM, MovieORM, FavoriteORM, ReviewORM
from cinemamax.domain.models import utcnow
from cinemamax.service.auth_service import get_password_hash

logger = logging.getLogger(__name__)

SAMPLE_PASSWORD = "user123"

SAMPLE_USERS = [
    ("john_doe", "john@example.com", "John", "Doe"),
    ("jane_smith", "jane@example.com", "Jane", "Smith"),
    ("mike_wilson", "mike@example.com", "Mike", "Wilson"),
    ("sarah_johnson", "sarah@example.com", "Sarah", "Johnson"),
    ("david_brown", "david@example.com", "David", "Brown"),
]

SAMPLE_MOVIES = [
    {
        "tmdb_id": 155,
        "title": "The Dark Knight",
        "overview": "Batman raises the stakes in his war on crime when the Joker wreaks havoc on Gotham.",
        "release_date": date(2008, 7, 18),
        "runtime": 152,
        "vote_average": 9.0,
        "vote_count": 2500000,
        "poster_path": "/qJ2tW6WMUDux911r6m7haRef0WH.jpg",
        "genres": "Action, Crime, Drama, Thriller",
        "director": "Christopher Nolan",
        "movie_cast": "Christian Bale, Heath Ledger, Aaron Eckhart, Michael Caine, Maggie Gyllenhaal",
    },
    {
        "tmdb_id": 27205,
        "title": "Inception",
        "overview": "A thief who steals corporate secrets through dream-sharing technology is asked to plant an idea.",
        "release_date": date(2010, 7, 16),
        "runtime": 148,
        "vote_average": 8.8,
        "vote_count": 2200000,
        "poster_path": "/9gk7adHYeDvHkCSEqAvQNLV5Uge.jpg",
        "genres": "Action, Science Fiction, Thriller",
        "director": "Christopher Nolan",
        "movie_cast": "Leonardo DiCaprio, Marion Cotillard, Tom Hardy, Elliot Page, Ken Watanabe",
    },
    {
        "tmdb_id": 157336,
        "title": "Interstellar",
        "overview": "A team of explorers travel through a wormhole in space to ensure humanity's survival.",
        "release_date": date(2014, 11, 7),
        "runtime": 169,
        "vote_average": 8.6,
        "vote_count": 1800000,
        "poster_path": "/gEU2QniE6E77NI6lCU6MxlNBvIx.jpg",
        "genres": "Adventure, Drama, Science Fiction",
        "director": "Christopher Nolan",
        "movie_cast": "Matthew McConaughey, Anne Hathaway, Jessica Chastain, Michael Caine",
    },
    {
        "tmdb_id": 603,
        "title": "The Matrix",
        "overview": "A computer hacker learns the true nature of his reality and his role in the war against its controllers.",
        "release_date": date(1999, 3, 31),
        "runtime": 136,
        "vote_average": 8.7,
        "vote_count": 1900000,
        "poster_path": "/f89U3ADr1oiB1s9GkdPOEpXUk5H.jpg",
        "genres": "Action, Science Fiction",
        "director": "Lana Wachowski, Lilly Wachowski",
        "movie_cast": "Keanu Reeves, Laurence Fishburne, Carrie-Anne Moss, Hugo Weaving",
    },
]

SAMPLE_COMMENTS = [
    "Amazing movie! Absolutely loved it.",
    "Great cinematography and acting.",
    "One of the best movies I've ever seen.",
    "A masterpiece of cinema.",
]


def upsert_staff_account(db_session, username: str, email: str, password: str, role: str,
                         first_name: str, last_name: str) -> UserORM:
    """Create the account, or reset its password and role when it already exists."""
    now = utcnow()
    user = db_session.query(UserORM).filter(UserORM.username == username).first()
    if user is None:
        user = UserORM(
            username=username,
            email=email,
            first_name=first_name,
            last_name=last_name,
            created_at=now
        )
        db_session.add(user)
        logger.info(f"Created {role} account {username}")
    else:
        logger.info(f"Updated {role} account {username}")

    user.hashed_password = get_password_hash(password)
    user.role = role
    user.is_active = True
    user.updated_at = now
    db_session.commit()
    return user


def seed_sample_data(db_session, created_by: Optional[int] = None):
    now = utcnow()
    password_hash = get_password_hash(SAMPLE_PASSWORD)

    users = []
    for username, email, first_name, last_name in SAMPLE_USERS:
        user = db_session.query(UserORM).filter(UserORM.username == username).first()
        if user is None:
            user = UserORM(
                username=username,
                email=email,
                hashed_password=password_hash,
                first_name=first_name,
                last_name=last_name,
                role=ROLE_USER,
                is_active=True,
                created_at=now,
                updated_at=now
            )
            db_session.add(user)
        users.append(user)
    db_session.commit()

    movies = []
    for fields in SAMPLE_MOVIES:
        movie = db_session.query(MovieORM).filter(MovieORM.tmdb_id == fields["tmdb_id"]).first()
        if movie is None:
            movie = MovieORM(status=STATUS_PUBLISHED, created_by=created_by, created_at=now, updated_at=now, **fields)
            db_session.add(movie)
        movies.append(movie)
    db_session.commit()

    for user in users[:3]:
        for movie in movies[:3]:
            exists = db_session.query(FavoriteORM).filter(
                FavoriteORM.user_id == user.id, FavoriteORM.movie_id == movie.id
            ).first()
            if exists is None:
                db_session.add(FavoriteORM(user_id=user.id, movie_id=movie.id, created_at=now))

    for i, user in enumerate(users[:4]):
        for j, movie in enumerate(movies):
            exists = db_session.query(ReviewORM).filter(
                ReviewORM.user_id == user.id, ReviewORM.movie_id == movie.id
            ).first()
            if exists is None:
                db_session.add(ReviewORM(
                    user_id=user.id,
                    movie_id=movie.id,
                    rating=7 + (i + j) % 4,
                    comment=SAMPLE_COMMENTS[(i + j) % len(SAMPLE_COMMENTS)],
                    created_at=now,
                    updated_at=now
                ))
    db_session.commit()

    logger.info(f"Seeded {len(users)} users and {len(movies)} movies")


def setup_database(seed: bool = False, session_factory=SessionLocal, bind=engine):
    Base.metadata.create_all(bind=bind)

    db_session = session_factory()
    try:
        admin = upsert_staff_account(
            db_session, "admin", "admin@cinemamax.com",
            os.getenv("ADMIN_PASSWORD", "admin123"), ROLE_ADMIN, "Super", "Admin"
        )
        upsert_staff_account(
            db_session, "moderator", "moderator@cinemamax.com",
            os.getenv("MODERATOR_PASSWORD", "mod123"), ROLE_MODERATOR, "Content", "Moderator"
        )
        if seed:
            seed_sample_data(db_session, created_by=admin.id)
    except Exception:
        db_session.rollback()
        logger.exception("Database setup failed")
        raise
    finally:
        db_session.close()


def main(argv: Optional[list] = None):
    parser = argparse.ArgumentParser(description="Create the CinemaMax tables and default accounts")
    parser.add_argument("--seed", action="store_true", help="Also insert sample users, movies, favorites and reviews")
    args = parser.parse_args(argv)

    setup_logging()
    setup_database(seed=args.seed)


if __name__ == "__main__":
    main()
