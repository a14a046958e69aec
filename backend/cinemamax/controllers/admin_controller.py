from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends, HTTPException, status

from cinemamax.config.catalog import DEFAULT_PAGE_SIZE
from cinemamax.domain.models import User
from cinemamax.domain.dto import (
    AdminUserUpdate,
    AdminUserResponse,
    UserResponse,
    UserEnvelope,
    UserListResponse,
    MovieCreate,
    MovieUpdate,
    MovieResponse,
    MovieStatsResponse,
    ActivityResponse,
    StatsResponse,
    MessageResponse
)
from cinemamax.auth.dependencies import get_current_admin
from cinemamax.service.dependencies import get_admin_service, get_auth_service
from cinemamax.service.admin_service import AdminService
from cinemamax.service.auth_service import AuthService
from cinemamax.exceptions.auth import ForbiddenException
from cinemamax.exceptions.content import (
    ResourceNotFoundException,
    InvalidRequestException,
    DuplicateContentException
)

# every route needs a bearer token backed by a live admin session
router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    responses={404: {"description": "Not found"}}
)


def to_http_exception(e: Exception) -> HTTPException:
    if isinstance(e, InvalidRequestException):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if isinstance(e, ForbiddenException):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    if isinstance(e, ResourceNotFoundException):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, DuplicateContentException):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    raise e


ADMIN_ERRORS = (InvalidRequestException, ForbiddenException, ResourceNotFoundException, DuplicateContentException)


@router.get("/stats", response_model=StatsResponse)
def get_stats(
    current_admin: User = Depends(get_current_admin),
    admin_service: AdminService = Depends(get_admin_service)
):
    return admin_service.get_stats()

# users

@router.get("/users", response_model=UserListResponse)
def list_users(
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    search: Optional[str] = None,
    current_admin: User = Depends(get_current_admin),
    admin_service: AdminService = Depends(get_admin_service)
):
    try:
        result = admin_service.list_users(page, limit, search)
    except ADMIN_ERRORS as e:
        raise to_http_exception(e)

    return UserListResponse(
        users=[AdminUserResponse.model_validate(user) for user in result["users"]],
        total=result["total"],
        page=result["page"],
        total_pages=result["total_pages"]
    )

@router.put("/users/{user_id}", response_model=UserEnvelope)
def update_user(
    user_id: int,
    user_data: AdminUserUpdate,
    current_admin: User = Depends(get_current_admin),
    admin_service: AdminService = Depends(get_admin_service)
):
    try:
        user = admin_service.update_user(current_admin, user_id, user_data.model_dump(exclude_none=True))
        return UserEnvelope(user=UserResponse.model_validate(user))
    except ADMIN_ERRORS as e:
        raise to_http_exception(e)

@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    current_admin: User = Depends(get_current_admin),
    admin_service: AdminService = Depends(get_admin_service)
):
    try:
        admin_service.delete_user(current_admin, user_id)
        return MessageResponse(message="User deleted successfully")
    except ADMIN_ERRORS as e:
        raise to_http_exception(e)

# movies

@router.get("/movies/stats", response_model=MovieStatsResponse)
def get_movie_stats(
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    current_admin: User = Depends(get_current_admin),
    admin_service: AdminService = Depends(get_admin_service)
):
    try:
        result = admin_service.get_movie_stats(page, limit)
    except ADMIN_ERRORS as e:
        raise to_http_exception(e)

    return MovieStatsResponse(
        movies=[MovieResponse.model_validate(movie) for movie in result["movies"]],
        total=result["total"],
        page=result["page"],
        total_pages=result["total_pages"]
    )

@router.post("/movies", status_code=status.HTTP_201_CREATED, response_model=MovieResponse)
def add_movie(
    movie_data: MovieCreate,
    current_admin: User = Depends(get_current_admin),
    admin_service: AdminService = Depends(get_admin_service)
):
    try:
        movie = admin_service.add_movie(current_admin, movie_data.model_dump(exclude_none=True))
        return MovieResponse.model_validate(movie)
    except ADMIN_ERRORS as e:
        raise to_http_exception(e)

@router.post("/movies/import/{tmdb_id}", status_code=status.HTTP_201_CREATED, response_model=MovieResponse)
def import_movie(
    tmdb_id: int,
    current_admin: User = Depends(get_current_admin),
    admin_service: AdminService = Depends(get_admin_service)
):
    try:
        movie = admin_service.import_movie(current_admin, tmdb_id)
        return MovieResponse.model_validate(movie)
    except ADMIN_ERRORS as e:
        raise to_http_exception(e)

@router.put("/movies/{movie_id}", response_model=MovieResponse)
def update_movie(
    movie_id: int,
    movie_data: MovieUpdate,
    current_admin: User = Depends(get_current_admin),
    admin_service: AdminService = Depends(get_admin_service)
):
    try:
        movie = admin_service.update_movie(current_admin, movie_id, movie_data.model_dump(exclude_unset=True))
        return MovieResponse.model_validate(movie)
    except ADMIN_ERRORS as e:
        raise to_http_exception(e)

@router.delete("/movies/{movie_id}", response_model=MessageResponse)
def delete_movie(
    movie_id: int,
    current_admin: User = Depends(get_current_admin),
    admin_service: AdminService = Depends(get_admin_service)
):
    try:
        admin_service.delete_movie(current_admin, movie_id)
        return MessageResponse(message="Movie deleted successfully")
    except ADMIN_ERRORS as e:
        raise to_http_exception(e)

# activity, health, sessions

@router.get("/activity", response_model=List[ActivityResponse])
def get_activity(
    limit: int = 50,
    current_admin: User = Depends(get_current_admin),
    admin_service: AdminService = Depends(get_admin_service)
):
    try:
        return admin_service.get_activity(limit)
    except ADMIN_ERRORS as e:
        raise to_http_exception(e)

@router.get("/health")
def health(
    current_admin: User = Depends(get_current_admin),
    admin_service: AdminService = Depends(get_admin_service)
) -> Dict[str, Any]:
    return admin_service.health()

@router.post("/sessions/purge")
def purge_sessions(
    current_admin: User = Depends(get_current_admin),
    auth_service: AuthService = Depends(get_auth_service)
) -> Dict[str, int]:
    return {"removed": auth_service.purge_expired_sessions()}
