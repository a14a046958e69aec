class AuthException(Exception):
    """Base exception for authentication errors"""
    pass

class UserAlreadyExistsException(AuthException):
    """Raised when attempting to register a user with an existing username or email"""
    pass

class InvalidCredentialsException(AuthException):
    """Raised when login credentials are invalid"""
    pass

class UnauthorizedException(AuthException):
    """Raised when a token is missing, invalid, expired or has no live admin session"""
    pass

class ForbiddenException(AuthException):
    """Raised when an authenticated user lacks the role an operation needs"""
    pass
