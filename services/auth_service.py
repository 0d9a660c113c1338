# services/auth_service.py
import asyncio
import logging
import re
from datetime import timedelta
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from config import Settings
from dtos import (
    LoginDTO, LoginResult, ProfileUpdateDTO, RegisterDTO, SessionCookie, UserDTO
)
from errors import AuthError, ConflictError, ValidationError, action
from repositories.user_repo import UserRepository
from security import (
    BCRYPT_MAX_BYTES, create_session_token, decode_session_token,
    hash_password, verify_password,
)

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6

# Одинаковый текст для "нет пользователя" и "неверный пароль"
INVALID_CREDENTIALS = "Invalid email or password"


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email))


def check_password_strength(password: str, label: str = "Password") -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"{label} must be at least {MIN_PASSWORD_LENGTH} characters")
    if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise ValidationError(f"{label} must be at most {BCRYPT_MAX_BYTES} bytes")


class AuthService:
    """
    Регистрация, вход и профиль пользователя. Токен сессии - JWT,
    который HTTP-слой кладёт в HTTP-only cookie.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], settings: Settings):
        self.session_factory = session_factory
        self.settings = settings

    @property
    def cookie_name(self) -> str:
        return self.settings.cookie_name

    async def _hash(self, raw: str) -> str:
        # bcrypt блокирует поток, поэтому уводим его из event loop
        return await asyncio.to_thread(hash_password, raw, self.settings.bcrypt_rounds)

    async def _verify(self, raw: str, hashed: str) -> bool:
        return await asyncio.to_thread(verify_password, raw, hashed)

    def _session_cookie(self, value: str, max_age: int) -> SessionCookie:
        return SessionCookie(
            key=self.settings.cookie_name,
            value=value,
            max_age=max_age,
            httponly=True,
            samesite="lax",
            secure=self.settings.is_production,
        )

    def resolve_user_id(self, token: Optional[str]) -> Optional[int]:
        """id пользователя из токена сессии или None для анонима."""
        return decode_session_token(token, self.settings.jwt_secret, self.settings.jwt_algorithm)

    @action
    async def register(self, payload: RegisterDTO) -> UserDTO:
        email = payload.email.strip()
        if not email or not payload.password:
            raise ValidationError("Email and password are required")
        if not is_valid_email(email):
            raise ValidationError("Invalid email format")
        check_password_strength(payload.password)

        async with self.session_factory() as session:
            ur = UserRepository(session)
            if await ur.get_by_email(email):
                raise ConflictError("Email is already registered")
            password_hash = await self._hash(payload.password)
            try:
                user = await ur.create_user(email, password_hash, payload.name or None)
            except IntegrityError:
                # гонка двух регистраций с одним email
                raise ConflictError("Email is already registered")
        logger.info("Registered user %s", user.id)
        return UserDTO.model_validate(user)

    @action
    async def login(self, payload: LoginDTO) -> LoginResult:
        email = payload.email.strip()
        # Некорректный email отсекается до обращения к базе
        if not email or not payload.password or not is_valid_email(email):
            raise AuthError(INVALID_CREDENTIALS)

        async with self.session_factory() as session:
            user = await UserRepository(session).get_by_email(email)
        if user is None or not await self._verify(payload.password, user.password_hash):
            raise AuthError(INVALID_CREDENTIALS)

        token = create_session_token(
            user.id,
            self.settings.jwt_secret,
            self.settings.jwt_algorithm,
            ttl=timedelta(days=self.settings.session_ttl_days),
        )
        return LoginResult(
            user=UserDTO.model_validate(user),
            cookie=self._session_cookie(token, self.settings.session_max_age),
        )

    @action
    async def logout(self) -> SessionCookie:
        # Пустое значение с max_age=0 стирает cookie в браузере
        return self._session_cookie("", 0)

    @action
    async def current_user(self, token: Optional[str]) -> Optional[UserDTO]:
        user_id = self.resolve_user_id(token)
        if user_id is None:
            return None
        async with self.session_factory() as session:
            user = await UserRepository(session).get_by_id(user_id)
        return UserDTO.model_validate(user) if user else None

    @action
    async def update_profile(self, user_id: Optional[int], payload: ProfileUpdateDTO) -> UserDTO:
        if user_id is None:
            raise AuthError("Not authenticated")

        async with self.session_factory() as session:
            ur = UserRepository(session)
            user = await ur.get_by_id(user_id)
            if user is None:
                raise AuthError("Not authenticated")

            new_hash = None
            if payload.new_password:
                if not payload.current_password:
                    raise AuthError("Current password is required")
                if not await self._verify(payload.current_password, user.password_hash):
                    raise AuthError("Current password is incorrect")
                check_password_strength(payload.new_password, label="New password")
                new_hash = await self._hash(payload.new_password)

            user = await ur.update_profile(user, payload.name, new_hash)
        return UserDTO.model_validate(user)
