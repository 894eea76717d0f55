"""
Base repository interface for data access layer.
This follows the Repository pattern to separate business logic from data access.
"""

from typing import Any, Generic, TypeVar, Optional, Type
from sqlalchemy import func
from sqlalchemy.orm import Session
from abc import ABC

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType], ABC):
    """
    Base repository providing common CRUD operations.
    All repositories should inherit from this class.
    """

    def __init__(self, db: Session, model: Type[ModelType]):
        self.db = db
        self.model = model

    def get_by_id(self, entity_id: Any) -> Optional[ModelType]:
        """
        Get entity by ID.

        Subclasses override this with their lookup column (``id`` for users,
        ``user_id`` for preference rows).
        """
        raise NotImplementedError(
            f"{self.__class__.__name__} must implement get_by_id() with specific ID field"
        )

    def count(self) -> int:
        """Number of rows in the model's table"""
        return self.db.query(func.count()).select_from(self.model).scalar() or 0

    def exists(self, entity_id: Any) -> bool:
        """Check if entity exists"""
        return self.get_by_id(entity_id) is not None
