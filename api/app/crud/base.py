"""Base CRUD operations for database models"""

import logging
from typing import Any, Generic, TypeVar

from pydantic import BaseModel as SchemaModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from app.models import BaseModel

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=BaseModel)
CreateSchemaType = TypeVar("CreateSchemaType", bound=SchemaModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=SchemaModel)


def _as_dict(obj_in: SchemaModel | dict[str, Any]) -> dict[str, Any]:
    if isinstance(obj_in, dict):
        return obj_in
    return obj_in.model_dump(exclude_unset=True)


class BaseCRUD(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """Base CRUD class for common database operations.

    Write helpers commit by default. Pass ``commit=False`` to only flush, so a
    caller can group several writes into one transaction and commit once.
    """

    def __init__(self, model: type[ModelType]):
        """Store the SQLAlchemy model class for CRUD operations."""
        self.model = model

    def _finish(self, db: Session, db_obj: ModelType | None, commit: bool) -> None:
        if commit:
            db.commit()
            if db_obj is not None:
                db.refresh(db_obj)
        else:
            db.flush()

    def get(self, db: Session, id: Any) -> ModelType | None:
        """Get a single record by ID"""
        try:
            return db.query(self.model).filter(self.model.id == id).first()
        except SQLAlchemyError as e:
            logger.error(f"Error getting {self.model.__name__} with id {id}: {e}")
            raise

    def paginate(self, query: Query, page: int, limit: int) -> tuple[int, list[ModelType]]:
        """Return the total row count and one page of a filtered query."""
        try:
            total = query.order_by(None).count()
            items = query.offset((page - 1) * limit).limit(limit).all()
            return total, items
        except SQLAlchemyError as e:
            logger.error(f"Error paginating {self.model.__name__}: {e}")
            raise

    def create(
        self,
        db: Session,
        obj_in: CreateSchemaType | dict[str, Any],
        *,
        commit: bool = True,
    ) -> ModelType:
        """Create a new record"""
        try:
            db_obj = self.model(**_as_dict(obj_in))
            db.add(db_obj)
            self._finish(db, db_obj, commit)
            return db_obj
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error creating {self.model.__name__}: {e}")
            raise

    def update(
        self,
        db: Session,
        db_obj: ModelType,
        obj_in: UpdateSchemaType | dict[str, Any],
        *,
        commit: bool = True,
    ) -> ModelType:
        """Update an existing record"""
        try:
            for key, value in _as_dict(obj_in).items():
                if hasattr(db_obj, key):
                    setattr(db_obj, key, value)

            db.add(db_obj)
            self._finish(db, db_obj, commit)
            return db_obj
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error updating {self.model.__name__}: {e}")
            raise

    def delete(self, db: Session, id: Any, *, commit: bool = True) -> bool:
        """Delete a record by ID"""
        try:
            db_obj = db.query(self.model).filter(self.model.id == id).first()
            if db_obj:
                db.delete(db_obj)
                self._finish(db, None, commit)
                return True
            return False
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error deleting {self.model.__name__} with id {id}: {e}")
            raise
