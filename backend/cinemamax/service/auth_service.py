import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple
from jose import JWTError, jwt
from passlib.context import CryptContext
from cinemamax.config.catalog import ADMIN_ROLES, ROLE_USER
from cinemamax.config.environment import (
    JWT_SECRET_KEY,
    JWT_ALGORITHM,
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES,
    ADMIN_SESSION_EXPIRE_DAYS,
    BCRYPT_ROUNDS
)
from cinemamax.domain.models import User, AdminSession, utcnow
from cinemamax.repositories import UserRepository, AdminSessionRepository
from cinemamax.exceptions.auth import (
    UserAlreadyExistsException,
    InvalidCredentialsException,
    UnauthorizedException
)
from cinemamax.exceptions.content import InvalidRequestException
from cinemamax.exceptions.repository import DuplicateEntityException

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)

INVALID_CREDENTIALS = "Invalid credentials"

# users.first_name and users.last_name column width
NAME_PART_MAX_LENGTH = 50


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        # malformed or unknown hash format
        return False


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def split_name(name: str) -> Tuple[str, str]:
    parts = name.split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


class AuthService:
    def __init__(self, user_repository: UserRepository, session_repository: AdminSessionRepository):
        self.user_repository = user_repository
        self.session_repository = session_repository

    def create_access_token(self, data: dict, expires_delta: Optional[timedelta] = None) -> str:
        to_encode = data.copy()

        # Set expiration
        now = datetime.now(timezone.utc)
        if expires_delta:
            expire = now + expires_delta
        else:
            expire = now + timedelta(minutes=JWT_ACCESS_TOKEN_EXPIRE_MINUTES)

        # jti keeps tokens issued in the same second distinct
        to_encode.update({"exp": expire, "iat": now, "jti": uuid.uuid4().hex})

        # Create JWT token
        encoded_jwt = jwt.encode(to_encode, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)
        return encoded_jwt

    def decode_token(self, token: str) -> dict:
        if not token:
            raise UnauthorizedException("No authorization token")
        try:
            payload = jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
        except JWTError:
            raise UnauthorizedException("Invalid token")

        if payload.get("id") is None:
            raise UnauthorizedException("Invalid token")
        return payload

    def signup(self, username: str, email: str, password: str, name: str) -> Tuple[User, str]:
        if not all(value and value.strip() for value in (username, email, password, name)):
            raise InvalidRequestException("Email, password, name, and username are required")

        first_name, last_name = split_name(name)
        if len(first_name) > NAME_PART_MAX_LENGTH or len(last_name) > NAME_PART_MAX_LENGTH:
            raise InvalidRequestException(f"First and last name must be at most {NAME_PART_MAX_LENGTH} characters each")

        # check if username exists
        if self.user_repository.get_by_username(username):
            raise UserAlreadyExistsException("User with this email or username already exists")

        # check if email exists
        if self.user_repository.get_by_email(email):
            raise UserAlreadyExistsException("User with this email or username already exists")

        now = utcnow()

        user = User(
            username=username,
            email=email,
            hashed_password=get_password_hash(password),
            first_name=first_name,
            last_name=last_name,
            role=ROLE_USER,
            is_active=True,
            created_at=now,
            updated_at=now
        )

        try:
            created = self.user_repository.create(user)
        except DuplicateEntityException:
            # lost a race against a concurrent signup
            raise UserAlreadyExistsException("User with this email or username already exists")

        logger.info(f"User {created.id} signed up as {created.username}")
        return created, self._create_access_token_for_user(created)

    def signin(self, identifier: str, password: str) -> Tuple[User, str]:
        if not identifier or not password:
            raise InvalidRequestException("Email and password are required")

        user = self.user_repository.get_by_email_or_username(identifier)

        if not user or not user.is_active or not verify_password(password, user.hashed_password):
            raise InvalidCredentialsException(INVALID_CREDENTIALS)

        return user, self._create_access_token_for_user(user)

    def admin_login(self, username: str, password: str) -> Tuple[User, str]:
        if not username or not password:
            raise InvalidRequestException("Username and password are required")

        user = self.user_repository.get_by_username(username)

        if (
            not user
            or user.role not in ADMIN_ROLES
            or not user.is_active
            or not verify_password(password, user.hashed_password)
        ):
            logger.warning(f"Rejected admin login for {username}")
            raise InvalidCredentialsException(INVALID_CREDENTIALS)

        token = self._create_access_token_for_user(user)
        self.session_repository.upsert(AdminSession(
            user_id=user.id,
            token=token,
            expires_at=utcnow() + timedelta(days=ADMIN_SESSION_EXPIRE_DAYS)
        ))

        logger.info(f"Admin session opened for user {user.id} ({user.role})")
        return user, token

    def get_user_from_token(self, token: str) -> User:
        payload = self.decode_token(token)

        user = self.user_repository.get_by_id(int(payload["id"]))
        if user is None or not user.is_active:
            raise UnauthorizedException("Invalid token or inactive user")
        return user

    def verify_admin_token(self, token: str) -> User:
        payload = self.decode_token(token)

        admin_session = self.session_repository.get_by_token(token)
        if admin_session is None:
            raise UnauthorizedException("Invalid or expired admin session")

        if admin_session.is_expired():
            # lazy sweep, the row can never be used again
            self.session_repository.delete_by_token(token)
            raise UnauthorizedException("Invalid or expired admin session")

        user = self.user_repository.get_by_id(int(payload["id"]))
        if user is None or user.role not in ADMIN_ROLES or not user.is_active:
            raise UnauthorizedException("Admin user not found")
        return user

    def signout(self, token: Optional[str]) -> None:
        if token:
            self.session_repository.delete_by_token(token)

    def purge_expired_sessions(self) -> int:
        removed = self.session_repository.delete_expired(utcnow())
        if removed:
            logger.info(f"Purged {removed} expired admin sessions")
        return removed

    def _create_access_token_for_user(self, user: User) -> str:
        # create access token
        access_token_expires = timedelta(minutes=JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
        return self.create_access_token(
            data={
                "sub": str(user.id),
                "id": user.id,
                "username": user.username,
                "email": user.email,
                "role": user.role
            },
            expires_delta=access_token_expires
        )
