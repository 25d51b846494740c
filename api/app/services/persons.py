"""Person administration."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.crud.person import person_crud
from app.models.enums import Role
from app.models.person import Person
from app.schemas.person import PersonCreate
from app.services.authorization import is_admin
from app.services.errors import EmailTaken, Forbidden, NotFound, ValidationError

logger = logging.getLogger(__name__)


def _require_admin(principal: Person) -> None:
    if not is_admin(principal):
        raise Forbidden("Admin access required")


def _get_or_404(db: Session, person_id: int) -> Person:
    person = person_crud.get(db, person_id)
    if not person:
        raise NotFound("Person not found")
    return person


def create_person(db: Session, principal: Person, payload: PersonCreate) -> Person:
    _require_admin(principal)
    if person_crud.get_by_email(db, payload.email):
        raise EmailTaken("Email is already registered")
    data = payload.model_dump()
    data["role"] = payload.role.value
    try:
        person = person_crud.create(db, data)
    except IntegrityError as exc:
        raise EmailTaken("Email is already registered") from exc
    logger.info("Person %s created by admin %s", person.id, principal.id)
    return person


def get_person(db: Session, principal: Person, person_id: int) -> Person:
    """Admins read anyone; everyone else only themselves."""
    if person_id != principal.id:
        _require_admin(principal)
    return _get_or_404(db, person_id)


def change_role(db: Session, principal: Person, person_id: int, role: Role) -> Person:
    _require_admin(principal)
    person = _get_or_404(db, person_id)
    if person.id == principal.id and role != Role.admin:
        raise ValidationError("Admins cannot demote themselves", field="role")
    previous = person.role
    person = person_crud.update(db, person, {"role": role.value})
    logger.info("Person %s role changed from %s to %s by %s", person.id, previous, person.role, principal.id)
    return person


def set_active(db: Session, principal: Person, person_id: int, is_active: bool) -> Person:
    _require_admin(principal)
    person = _get_or_404(db, person_id)
    if person.id == principal.id and not is_active:
        raise ValidationError("Admins cannot deactivate themselves")
    person = person_crud.update(db, person, {"is_active": is_active})
    logger.info("Person %s active=%s set by %s", person.id, person.is_active, principal.id)
    return person
