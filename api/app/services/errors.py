"""Typed failures raised by the song request core and its collaborators."""

from __future__ import annotations

from fastapi import status


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code

    def to_detail(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class NotFound(DomainError):
    """Entity absent, or hidden from the principal."""

    status_code = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"


class Unauthorized(DomainError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_code = "UNAUTHORIZED"


class Forbidden(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    default_code = "FORBIDDEN"


class InvalidTransition(DomainError):
    """Raised when a status guard fails."""

    status_code = status.HTTP_409_CONFLICT
    default_code = "INVALID_TRANSITION"

    def __init__(self, operation: str, current_state: str | None, message: str | None = None) -> None:
        msg = message or f"Cannot {operation} a request in state '{current_state}'"
        super().__init__(msg)
        self.operation = operation
        self.current_state = current_state


class LimitExceeded(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "LIMIT_EXCEEDED"


class DuplicateRequest(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "DUPLICATE_REQUEST"


class EventNotActive(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "EVENT_NOT_ACTIVE"


class AlreadyJoined(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "ALREADY_JOINED"


class EventFull(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "EVENT_FULL"


class ValidationError(DomainError):
    """Raised when input passes schema validation but breaks a domain rule."""

    status_code = 422
    default_code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class EmailTaken(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "EMAIL_TAKEN"
