class ContentServiceException(Exception):
    """Base exception for user content and admin service errors."""
    pass

class ResourceNotFoundException(ContentServiceException):
    """Raised when a requested resource (user, movie, favorite, review) is not found."""
    pass

class InvalidRequestException(ContentServiceException):
    """Raised when request parameters are invalid (e.g. missing fields, rating out of range)."""
    pass

class DuplicateContentException(ContentServiceException):
    """Raised when a (user, movie) pair already has a favorite, review or watchlist entry."""
    pass
