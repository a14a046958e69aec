from cinemamax.config.catalog import *

VERSION = "0.1.0"
API_TITLE = "CinemaMax API"
API_DESCRIPTION = "Movie catalog, favorites, reviews and admin API"


def validate_config():
    if RATING_MIN >= RATING_MAX:
        raise ValueError("RATING_MIN must be less than RATING_MAX")
    if DEFAULT_PAGE_SIZE > MAX_PAGE_SIZE:
        raise ValueError("DEFAULT_PAGE_SIZE must not exceed MAX_PAGE_SIZE")


validate_config()
