from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from cinemamax.domain.models import User
from cinemamax.service.auth_service import AuthService
from cinemamax.service.dependencies import get_auth_service
from cinemamax.exceptions.auth import UnauthorizedException

# bearer scheme for FastAPI, missing headers are reported by us as 401
bearer_scheme = HTTPBearer(auto_error=False)

def get_optional_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> Optional[str]:
    if credentials is None or credentials.scheme.lower() != "bearer":
        return None
    return credentials.credentials or None

def get_token(token: Optional[str] = Depends(get_optional_token)) -> str:
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No authorization token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token

def get_current_user(
    token: str = Depends(get_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> User:
    try:
        return auth_service.get_user_from_token(token)
    except UnauthorizedException as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )

def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Inactive user")
    return current_user

def get_current_admin(
    token: str = Depends(get_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> User:
    try:
        return auth_service.verify_admin_token(token)
    except UnauthorizedException as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
