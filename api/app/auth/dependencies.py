"""FastAPI dependencies that resolve the verified principal."""

import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.auth.jwt import TokenError, decode_access_token
from app.crud.person import person_crud
from app.db.session import get_db
from app.models.person import Person

logger = logging.getLogger(__name__)

AUTH_EXPIRED_HEADER = "X-Auth-Expired"

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={AUTH_EXPIRED_HEADER: "1", "WWW-Authenticate": "Bearer"},
    )


def _resolve_person(db: Session, token: str) -> Person:
    try:
        payload = decode_access_token(token)
    except TokenError as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise _unauthorized(str(exc)) from exc
    try:
        person_id = int(payload["sub"])
    except (TypeError, ValueError) as exc:
        raise _unauthorized("Invalid token subject") from exc
    person = person_crud.get(db, person_id)
    if not person or not person.is_active:
        raise _unauthorized("Account not found or inactive")
    return person


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Person:
    """Return the authenticated person or answer 401."""
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Not authenticated")
    return _resolve_person(db, credentials.credentials)


def get_optional_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Person | None:
    """Return the authenticated person, or None when no token was sent."""
    if credentials is None or not credentials.credentials:
        return None
    return _resolve_person(db, credentials.credentials)
