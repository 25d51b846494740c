"""Person routes."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth.dependencies import get_current_user
from app.db.session import get_db
from app.models.person import Person
from app.schemas.person import PersonCreate, PersonOut, PersonRoleUpdate
from app.services import persons as person_service

router = APIRouter(prefix="/persons", tags=["persons"])


@router.post("", response_model=PersonOut)
def create_person(
    payload: PersonCreate,
    db: Session = Depends(get_db),
    current_user: Person = Depends(get_current_user),
):
    """Register a person (admin only)."""
    return person_service.create_person(db, current_user, payload)


@router.get("/me", response_model=PersonOut)
def get_me(current_user: Person = Depends(get_current_user)):
    """Return the authenticated person."""
    return current_user


@router.get("/{person_id}", response_model=PersonOut)
def get_person(
    person_id: int,
    db: Session = Depends(get_db),
    current_user: Person = Depends(get_current_user),
):
    return person_service.get_person(db, current_user, person_id)


@router.patch("/{person_id}/role", response_model=PersonOut)
def change_person_role(
    person_id: int,
    payload: PersonRoleUpdate,
    db: Session = Depends(get_db),
    current_user: Person = Depends(get_current_user),
):
    """Change a person's role (admin only)."""
    return person_service.change_role(db, current_user, person_id, payload.role)


@router.post("/{person_id}/activate", response_model=PersonOut)
def activate_person(
    person_id: int,
    db: Session = Depends(get_db),
    current_user: Person = Depends(get_current_user),
):
    return person_service.set_active(db, current_user, person_id, True)


@router.post("/{person_id}/deactivate", response_model=PersonOut)
def deactivate_person(
    person_id: int,
    db: Session = Depends(get_db),
    current_user: Person = Depends(get_current_user),
):
    return person_service.set_active(db, current_user, person_id, False)
