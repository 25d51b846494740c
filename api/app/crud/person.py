"""Person CRUD helpers"""

from typing import Optional
from sqlalchemy.orm import Session

from app.crud.base import BaseCRUD
from app.models.person import Person
from app.schemas.person import PersonCreate, PersonUpdate


class PersonCRUD(BaseCRUD[Person, PersonCreate, PersonUpdate]):
    def get_by_email(self, db: Session, email: str) -> Optional[Person]:
        """Return a person by normalized email."""
        return db.query(Person).filter(Person.email == email.strip().lower()).first()

    def get_active(self, db: Session, person_id: int) -> Optional[Person]:
        """Return the person only when the account is active."""
        return db.query(Person).filter(Person.id == person_id, Person.is_active.is_(True)).first()


person_crud = PersonCRUD(Person)
