# security.py
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

# bcrypt учитывает только первые 72 байта пароля
BCRYPT_MAX_BYTES = 72


def hash_password(raw: str, rounds: int = 12) -> str:
    return bcrypt.hashpw(raw.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(raw: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(raw.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


def create_session_token(
    user_id: int,
    secret: str,
    algorithm: str = "HS256",
    ttl: timedelta = timedelta(days=7),
    now: Optional[datetime] = None,
) -> str:
    issued = now or datetime.now(timezone.utc)
    payload = {"userId": user_id, "iat": issued, "exp": issued + ttl}
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_session_token(token: Optional[str], secret: str, algorithm: str = "HS256") -> Optional[int]:
    """
    Возвращает id пользователя из токена или None, если токена нет,
    подпись неверна или срок действия истёк.
    """
    if not token:
        return None
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except jwt.InvalidTokenError:
        return None
    user_id = payload.get("userId")
    if not isinstance(user_id, int):
        return None
    return user_id
