"""
Base repository with standardized CRUD operations and error handling.

Repositories never commit: the owning service decides the transaction
boundary and repositories only ``flush`` so generated ids and constraint
violations surface inside that transaction.
"""

from typing import Any, Dict, Generic, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from homestay.core.exceptions import DatabaseError, ResourceNotFoundError
from homestay.core.logging import get_logger
from homestay.models.base import BaseModel

logger = get_logger(__name__)

# Type variable for model classes
ModelType = TypeVar("ModelType", bound=BaseModel)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository over one model class.
    """

    not_found_error: Type[ResourceNotFoundError] = ResourceNotFoundError

    def __init__(self, model: Type[ModelType], db: Session):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db

    # ==================== Create Operations ====================

    def create(self, entity: ModelType) -> ModelType:
        """
        Add a new entity and flush it.

        Raises:
            IntegrityError: Propagated so the service can map it to a conflict
            DatabaseError: For any other storage failure
        """
        try:
            self.db.add(entity)
            self.db.flush()
            logger.debug(f"Created {self.model.__name__} with id: {entity.id}")
            return entity
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            raise DatabaseError(f"Create failed: {str(e)}") from e

    # ==================== Read Operations ====================

    def find_by_id(self, id: str) -> Optional[ModelType]:
        """
        Find entity by ID.

        Returns:
            Entity or None
        """
        try:
            return self.db.get(self.model, id)
        except SQLAlchemyError as e:
            raise DatabaseError(f"Find by ID failed: {str(e)}") from e

    def get_by_id(self, id: str) -> ModelType:
        """
        Get entity by ID or raise the repository's not-found error.
        """
        entity = self.find_by_id(id)
        if entity is None:
            if self.not_found_error is ResourceNotFoundError:
                raise ResourceNotFoundError(self.model.__name__, id)
            raise self.not_found_error(id)
        return entity

    # ==================== Update Operations ====================

    def update(self, entity: ModelType, data: Dict[str, Any]) -> ModelType:
        """
        Apply attribute updates to a loaded entity and flush.

        Unknown keys are ignored.
        """
        try:
            for key, value in data.items():
                if hasattr(entity, key):
                    setattr(entity, key, value)
            self.db.flush()
            logger.debug(f"Updated {self.model.__name__} with id: {entity.id}")
            return entity
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            raise DatabaseError(f"Update failed: {str(e)}") from e

    # ==================== Delete Operations ====================

    def delete(self, entity: ModelType) -> None:
        try:
            self.db.delete(entity)
            self.db.flush()
            logger.debug(f"Deleted {self.model.__name__} with id: {entity.id}")
        except SQLAlchemyError as e:
            raise DatabaseError(f"Delete failed: {str(e)}") from e
