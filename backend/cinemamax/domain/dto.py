from datetime import datetime, date
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional, List, Dict, Any

# users.email column width
EMAIL_MAX_LENGTH = 100


def check_email_length(v):
    if v is not None and len(v) > EMAIL_MAX_LENGTH:
        raise ValueError(f'Email must be at most {EMAIL_MAX_LENGTH} characters')
    return v

# requests

class SignupRequest(BaseModel):
    username: str = Field(..., max_length=50)
    email: EmailStr
    password: str
    name: str = Field(..., max_length=101)

    @field_validator('email')
    @classmethod
    def email_length(cls, v):
        return check_email_length(v)

class SigninRequest(BaseModel):
    # email or username
    email: str
    password: str

class AdminLoginRequest(BaseModel):
    username: str
    password: str

class ProfileUpdate(BaseModel):
    first_name: Optional[str] = Field(None, max_length=50)
    last_name: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None

    @field_validator('email')
    @classmethod
    def email_length(cls, v):
        return check_email_length(v)

class ReviewCreate(BaseModel):
    rating: int
    comment: Optional[str] = None

class WatchRequest(BaseModel):
    progress_seconds: int = 0

class AdminUserUpdate(BaseModel):
    first_name: Optional[str] = Field(None, max_length=50)
    last_name: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None
    is_active: Optional[bool] = None
    role: Optional[str] = None

    @field_validator('email')
    @classmethod
    def email_length(cls, v):
        return check_email_length(v)

class MovieCreate(BaseModel):
    title: str = Field(..., max_length=255)
    overview: Optional[str] = None
    release_date: Optional[date] = None
    runtime: Optional[int] = Field(None, ge=0)
    vote_average: Optional[float] = Field(None, ge=0, le=10)
    vote_count: Optional[int] = Field(None, ge=0)
    poster_path: Optional[str] = Field(None, max_length=500)
    backdrop_path: Optional[str] = Field(None, max_length=500)
    genres: Optional[str] = None
    director: Optional[str] = Field(None, max_length=100)
    movie_cast: Optional[str] = None
    status: Optional[str] = Field(None, max_length=20)

class MovieUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=255)
    overview: Optional[str] = None
    release_date: Optional[date] = None
    runtime: Optional[int] = Field(None, ge=0)
    vote_average: Optional[float] = Field(None, ge=0, le=10)
    vote_count: Optional[int] = Field(None, ge=0)
    poster_path: Optional[str] = Field(None, max_length=500)
    backdrop_path: Optional[str] = Field(None, max_length=500)
    genres: Optional[str] = None
    director: Optional[str] = Field(None, max_length=100)
    movie_cast: Optional[str] = None
    status: Optional[str] = Field(None, max_length=20)

# responses

class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str
    is_active: bool
    created_at: Optional[datetime] = None

class AdminUserResponse(UserResponse):
    total_favorites: int = 0
    total_reviews: int = 0

class AuthResponse(BaseModel):
    message: str
    user: UserResponse
    token: str

class UserEnvelope(BaseModel):
    user: UserResponse

class MovieResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tmdb_id: Optional[int] = None
    title: str
    overview: Optional[str] = None
    release_date: Optional[date] = None
    runtime: Optional[int] = None
    vote_average: float = 0.0
    vote_count: int = 0
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    genres: Optional[str] = None
    director: Optional[str] = None
    movie_cast: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None
    favorite_count: Optional[int] = None
    review_count: Optional[int] = None
    average_rating: Optional[float] = None
    source: str = "local"

class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    movie_id: int
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    title: Optional[str] = None
    poster_path: Optional[str] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

class FavoriteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    movie_id: int
    created_at: Optional[datetime] = None
    title: Optional[str] = None
    poster_path: Optional[str] = None
    vote_average: Optional[float] = None

class WatchlistResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    movie_id: int
    created_at: Optional[datetime] = None
    title: Optional[str] = None
    poster_path: Optional[str] = None

class WatchHistoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    movie_id: int
    progress_seconds: int = 0
    watched_at: Optional[datetime] = None
    title: Optional[str] = None

class MovieListResponse(BaseModel):
    movies: List[MovieResponse]
    total: int
    page: int
    total_pages: int

class MovieResultsResponse(BaseModel):
    results: List[MovieResponse]
    page: int
    total_pages: int
    total_results: int

class MovieDetailResponse(BaseModel):
    movie: MovieResponse
    reviews: List[ReviewResponse]

class GenreListResponse(BaseModel):
    genres: List[Dict[str, Any]]

class UserListResponse(BaseModel):
    users: List[AdminUserResponse]
    total: int
    page: int
    total_pages: int

class MovieStatsResponse(BaseModel):
    movies: List[MovieResponse]
    total: int
    page: int
    total_pages: int

class ActivityResponse(BaseModel):
    id: str
    user_id: int
    user_name: str
    user_email: str
    activity_type: str
    movie_id: Optional[int] = None
    movie_title: Optional[str] = None
    created_at: Optional[datetime] = None

class StatsResponse(BaseModel):
    total_users: int
    active_users: int
    total_movies: int
    total_favorites: int
    total_reviews: int
    new_users_today: int
    new_users_this_week: int
    new_users_this_month: int

class MessageResponse(BaseModel):
    message: str
