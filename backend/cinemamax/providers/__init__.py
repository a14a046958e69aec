from cinemamax.providers.catalog_provider import CatalogProvider
from cinemamax.providers.tmdb_provider import TMDBProvider
from cinemamax.providers.cache import CachedCatalogProvider
