from fastapi import APIRouter, Depends, HTTPException, status
from typing import List, Optional

from cinemamax.domain.models import User
from cinemamax.domain.dto import (
    UserEnvelope,
    UserResponse,
    ProfileUpdate,
    ReviewCreate,
    WatchRequest,
    FavoriteResponse,
    ReviewResponse,
    WatchlistResponse,
    WatchHistoryResponse,
    MessageResponse
)
from cinemamax.auth.dependencies import get_current_active_user
from cinemamax.service.dependencies import get_content_service, get_user_service
from cinemamax.service.content_service import ContentService, DEFAULT_HISTORY_LIMIT
from cinemamax.service.user_service import UserService
from cinemamax.exceptions.content import (
    ResourceNotFoundException,
    InvalidRequestException,
    DuplicateContentException
)


router = APIRouter(
    prefix="/users",
    tags=["Users"],
    responses={404: {"description": "Not found"}}
)

# profile

@router.get("/profile", response_model=UserEnvelope)
def read_profile(current_user: User = Depends(get_current_active_user)):
    return UserEnvelope(user=UserResponse.model_validate(current_user))

@router.put("/profile", response_model=UserEnvelope)
def update_profile(
    profile_data: ProfileUpdate,
    current_user: User = Depends(get_current_active_user),
    user_service: UserService = Depends(get_user_service)
):
    try:
        user = user_service.update_profile(
            current_user.id,
            first_name=profile_data.first_name,
            last_name=profile_data.last_name,
            email=profile_data.email
        )
        return UserEnvelope(user=UserResponse.model_validate(user))
    except InvalidRequestException as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DuplicateContentException as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ResourceNotFoundException as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

# favorites

@router.get("/favorites", response_model=List[FavoriteResponse])
def get_favorites(
    current_user: User = Depends(get_current_active_user),
    content_service: ContentService = Depends(get_content_service)
):
    favorites = content_service.list_favorites(current_user.id)
    return [FavoriteResponse.model_validate(favorite) for favorite in favorites]

@router.post("/favorites/{movie_id}", status_code=status.HTTP_201_CREATED, response_model=FavoriteResponse)
def add_favorite(
    movie_id: int,
    current_user: User = Depends(get_current_active_user),
    content_service: ContentService = Depends(get_content_service)
):
    try:
        favorite = content_service.add_favorite(current_user.id, movie_id)
        return FavoriteResponse.model_validate(favorite)
    except ResourceNotFoundException as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except DuplicateContentException as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

@router.delete("/favorites/{movie_id}", response_model=MessageResponse)
def remove_favorite(
    movie_id: int,
    current_user: User = Depends(get_current_active_user),
    content_service: ContentService = Depends(get_content_service)
):
    content_service.remove_favorite(current_user.id, movie_id)
    return MessageResponse(message="Removed from favorites")

# reviews

@router.get("/reviews", response_model=List[ReviewResponse])
def get_reviews(
    current_user: User = Depends(get_current_active_user),
    content_service: ContentService = Depends(get_content_service)
):
    reviews = content_service.list_reviews(current_user.id)
    return [ReviewResponse.model_validate(review) for review in reviews]

@router.post("/reviews/{movie_id}", status_code=status.HTTP_201_CREATED, response_model=ReviewResponse)
def add_review(
    movie_id: int,
    review_data: ReviewCreate,
    current_user: User = Depends(get_current_active_user),
    content_service: ContentService = Depends(get_content_service)
):
    try:
        review = content_service.add_review(current_user.id, movie_id, review_data.rating, review_data.comment)
        return ReviewResponse.model_validate(review)
    except InvalidRequestException as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ResourceNotFoundException as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except DuplicateContentException as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

@router.put("/reviews/{movie_id}", response_model=ReviewResponse)
def update_review(
    movie_id: int,
    review_data: ReviewCreate,
    current_user: User = Depends(get_current_active_user),
    content_service: ContentService = Depends(get_content_service)
):
    try:
        review = content_service.update_review(current_user.id, movie_id, review_data.rating, review_data.comment)
        return ReviewResponse.model_validate(review)
    except InvalidRequestException as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ResourceNotFoundException as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

@router.delete("/reviews/{movie_id}", response_model=MessageResponse)
def delete_review(
    movie_id: int,
    current_user: User = Depends(get_current_active_user),
    content_service: ContentService = Depends(get_content_service)
):
    try:
        content_service.delete_review(current_user.id, movie_id)
        return MessageResponse(message="Review deleted successfully")
    except ResourceNotFoundException as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

# watchlist

@router.get("/watchlist", response_model=List[WatchlistResponse])
def get_watchlist(
    current_user: User = Depends(get_current_active_user),
    content_service: ContentService = Depends(get_content_service)
):
    items = content_service.list_watchlist(current_user.id)
    return [WatchlistResponse.model_validate(item) for item in items]

@router.post("/watchlist/{movie_id}", status_code=status.HTTP_201_CREATED, response_model=WatchlistResponse)
def add_to_watchlist(
    movie_id: int,
    current_user: User = Depends(get_current_active_user),
    content_service: ContentService = Depends(get_content_service)
):
    try:
        item = content_service.add_to_watchlist(current_user.id, movie_id)
        return WatchlistResponse.model_validate(item)
    except ResourceNotFoundException as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except DuplicateContentException as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

@router.delete("/watchlist/{movie_id}", response_model=MessageResponse)
def remove_from_watchlist(
    movie_id: int,
    current_user: User = Depends(get_current_active_user),
    content_service: ContentService = Depends(get_content_service)
):
    content_service.remove_from_watchlist(current_user.id, movie_id)
    return MessageResponse(message="Removed from watchlist")

# history

@router.get("/history", response_model=List[WatchHistoryResponse])
def get_history(
    limit: int = DEFAULT_HISTORY_LIMIT,
    current_user: User = Depends(get_current_active_user),
    content_service: ContentService = Depends(get_content_service)
):
    try:
        entries = content_service.list_history(current_user.id, limit)
        return [WatchHistoryResponse.model_validate(entry) for entry in entries]
    except InvalidRequestException as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.post("/history/{movie_id}", status_code=status.HTTP_201_CREATED, response_model=WatchHistoryResponse)
def record_watch(
    movie_id: int,
    watch_data: Optional[WatchRequest] = None,
    current_user: User = Depends(get_current_active_user),
    content_service: ContentService = Depends(get_content_service)
):
    progress_seconds = watch_data.progress_seconds if watch_data else 0
    try:
        entry = content_service.record_watch(current_user.id, movie_id, progress_seconds)
        return WatchHistoryResponse.model_validate(entry)
    except InvalidRequestException as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ResourceNotFoundException as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
