from typing import Type, TypeVar, Optional
from pydantic import BaseModel
from sqlalchemy.orm import Session

from services.exceptions import NotFoundError

ModelType = TypeVar("ModelType")


class BaseService:
    label = "Record"

    def __init__(self, model: Type[ModelType]):
        self.model = model

    def create(self, db: Session, obj_in, commit: bool = True) -> ModelType:
        """
        Add a new record.

        Args:
            db: Database session
            obj_in: Either a SQLAlchemy model or a Pydantic schema
            commit: Commit immediately, or only flush so the caller owns the transaction

        Returns:
            The created model instance
        """
        if isinstance(obj_in, BaseModel):
            db_obj = self.model(**obj_in.model_dump())
        else:
            db_obj = obj_in

        db.add(db_obj)
        if commit:
            db.commit()
            db.refresh(db_obj)
        else:
            db.flush()
        return db_obj

    def get(self, db: Session, id: int) -> Optional[ModelType]:
        return db.query(self.model).filter(self.model.id == id).first()

    def get_or_raise(self, db: Session, id: int) -> ModelType:
        db_obj = self.get(db, id)
        if db_obj is None:
            raise NotFoundError(f"{self.label} with ID {id} not found.")
        return db_obj

