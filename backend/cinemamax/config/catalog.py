from typing import Dict, Any

ROLE_USER = "user"
ROLE_MODERATOR = "moderator"
ROLE_ADMIN = "admin"

ROLES = (ROLE_USER, ROLE_MODERATOR, ROLE_ADMIN)
ADMIN_ROLES = (ROLE_ADMIN, ROLE_MODERATOR)

STATUS_PUBLISHED = "published"
STATUS_DRAFT = "draft"
STATUS_ARCHIVED = "archived"

MOVIE_STATUSES = (STATUS_PUBLISHED, STATUS_DRAFT, STATUS_ARCHIVED)

# review rating bounds (inclusive)
RATING_MIN = 1
RATING_MAX = 10

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# popular/trending/genre lists read from the local catalog are capped here
LOCAL_LIST_LIMIT = 20

# reviews embedded in a movie detail response
MOVIE_DETAIL_REVIEWS = 10

TRENDING_WINDOWS = ("day", "week")

# standard TMDB movie genre table, also the fallback for the genre list
GENRES: Dict[int, str] = {
    28: "Action",
    12: "Adventure",
    16: "Animation",
    35: "Comedy",
    80: "Crime",
    99: "Documentary",
    18: "Drama",
    10751: "Family",
    14: "Fantasy",
    36: "History",
    27: "Horror",
    10402: "Music",
    9648: "Mystery",
    10749: "Romance",
    878: "Science Fiction",
    10770: "TV Movie",
    53: "Thriller",
    10752: "War",
    37: "Western",
}


def get_genre_list() -> Dict[str, Any]:
    return {"genres": [{"id": genre_id, "name": name} for genre_id, name in GENRES.items()]}
