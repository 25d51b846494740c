"""Bearer token helpers."""

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt

from app.config.settings import settings


class TokenError(Exception):
    """Raised when a bearer token cannot be trusted."""

    def __init__(self, message: str, expired: bool = False) -> None:
        super().__init__(message)
        self.expired = expired


def create_access_token(subject: str, expires_minutes: int | None = None) -> str:
    """Sign a token whose subject is the person id."""
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=expires_minutes or settings.AUTH_TOKEN_EXPIRE_MINUTES
    )
    payload = {"sub": subject, "exp": expire}
    return jwt.encode(payload, settings.AUTH_SECRET_KEY, algorithm=settings.AUTH_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """Verify the token signature and expiry and return its claims."""
    try:
        payload = jwt.decode(token, settings.AUTH_SECRET_KEY, algorithms=[settings.AUTH_ALGORITHM])
    except ExpiredSignatureError as exc:
        raise TokenError("Token expired", expired=True) from exc
    except JWTError as exc:
        raise TokenError("Invalid token") from exc
    if not payload.get("sub"):
        raise TokenError("Token has no subject")
    return payload
