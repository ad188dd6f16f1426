from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from fieldreports.core.config import Settings, settings as default_settings


# ----------------------------
# Password hashing
# ----------------------------

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


# ----------------------------
# JWT access tokens (Authorization: Bearer ... or the auth cookie)
# ----------------------------

def create_access_token(
    subject: str | int,
    settings: Settings | None = None,
    expires_minutes: int | None = None,
    **extra_claims: Any,
) -> str:
    """
    Creates a JWT access token.
    subject: the user id
    """
    settings = settings or default_settings
    now = datetime.now(timezone.utc)
    expire = now + timedelta(minutes=expires_minutes or settings.access_token_expire_minutes)

    payload: dict[str, Any] = {
        "sub": str(subject),
        "exp": expire,
        "iat": now,
        **extra_claims,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: Settings | None = None) -> dict[str, Any]:
    """
    Decodes a JWT token and returns payload dict.
    Raises ValueError if invalid or expired.
    """
    settings = settings or default_settings
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise ValueError("Invalid token") from e


def issued_before(payload: dict[str, Any], moment: datetime | None) -> bool:
    """
    True when the token's iat precedes `moment` (naive UTC).
    Used to reject tokens minted before the last password change.
    """
    if moment is None:
        return False
    iat = payload.get("iat")
    if iat is None:
        return True
    changed_ts = int(moment.replace(tzinfo=timezone.utc).timestamp())
    return int(iat) < changed_ts
