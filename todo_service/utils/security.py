from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from ..core.config import get_settings


def create_access_token(subject: str, email: Optional[str] = None, expires_delta: timedelta | None = None) -> str:
    settings = get_settings()
    expire = datetime.now(timezone.utc) + (
        expires_delta if expires_delta else timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode = {"sub": str(subject), "exp": expire}
    if email:
        to_encode["email"] = email
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_token(token: str, secret_key: Optional[str] = None, algorithm: Optional[str] = None) -> Optional[dict]:
    """Decode a session token; None when the signature, expiry or format is bad."""
    settings = get_settings()
    try:
        return jwt.decode(
            token,
            secret_key or settings.secret_key,
            algorithms=[algorithm or settings.algorithm],
        )
    except JWTError:
        return None
