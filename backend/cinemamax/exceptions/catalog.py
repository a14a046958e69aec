class CatalogException(Exception):
    """Base exception for catalog errors."""
    pass

class MovieNotFoundException(CatalogException):
    """Raised when a movie is in neither the local catalog nor the provider."""
    pass

class ProviderUnavailableException(CatalogException):
    """Raised by a catalog provider when it is disabled, unreachable or answers with an error."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code
