from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status

from cinemamax.domain.dto import (
    SignupRequest,
    SigninRequest,
    AdminLoginRequest,
    AuthResponse,
    UserEnvelope,
    UserResponse,
    MessageResponse
)
from cinemamax.domain.models import User
from cinemamax.auth.dependencies import get_current_user, get_current_admin, get_optional_token
from cinemamax.service.dependencies import get_auth_service
from cinemamax.service.auth_service import AuthService
from cinemamax.exceptions.auth import UserAlreadyExistsException, InvalidCredentialsException
from cinemamax.exceptions.content import InvalidRequestException

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
    responses={404: {"description": "Not found"}}
)

@router.post("/signup", status_code=status.HTTP_201_CREATED, response_model=AuthResponse)
def signup(
    user_data: SignupRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    try:
        user, token = auth_service.signup(user_data.username, user_data.email, user_data.password, user_data.name)
        return AuthResponse(
            message="User created successfully",
            user=UserResponse.model_validate(user),
            token=token
        )
    except UserAlreadyExistsException as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )
    except InvalidRequestException as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

@router.post("/signin", response_model=AuthResponse)
def signin(
    credentials: SigninRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    try:
        user, token = auth_service.signin(credentials.email, credentials.password)
        return AuthResponse(
            message="Login successful",
            user=UserResponse.model_validate(user),
            token=token
        )
    except (InvalidCredentialsException, InvalidRequestException) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

@router.post("/admin/login", response_model=AuthResponse)
def admin_login(
    credentials: AdminLoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    try:
        user, token = auth_service.admin_login(credentials.username, credentials.password)
        return AuthResponse(
            message="Admin login successful",
            user=UserResponse.model_validate(user),
            token=token
        )
    except (InvalidCredentialsException, InvalidRequestException) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

@router.get("/admin/verify", response_model=UserEnvelope)
def verify_admin(current_admin: User = Depends(get_current_admin)):
    return UserEnvelope(user=UserResponse.model_validate(current_admin))

@router.post("/signout", response_model=MessageResponse)
def signout(
    token: Optional[str] = Depends(get_optional_token),
    auth_service: AuthService = Depends(get_auth_service)
):
    auth_service.signout(token)
    return MessageResponse(message="Signed out successfully")

@router.get("/user", response_model=UserEnvelope)
def read_current_user(current_user: User = Depends(get_current_user)):
    return UserEnvelope(user=UserResponse.model_validate(current_user))
