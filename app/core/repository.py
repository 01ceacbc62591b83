"""Base repository pattern implementation."""

from typing import Generic, TypeVar, cast
from uuid import UUID

from sqlalchemy.orm import Session

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType]):
    """Generic repository with the operations shared by domain repositories.

    Example:
        ```python
        class OrphanedFileRepository(BaseRepository[OrphanedFile]):
            def __init__(self, db: Session):
                super().__init__(db, OrphanedFile)
        ```
    """

    def __init__(self, db: Session, model: type[ModelType]):
        self.db = db
        self.model = model

    def get_by_id(self, entity_id: UUID) -> ModelType | None:
        result = self.db.query(self.model).filter(self.model.id == entity_id).first()  # type: ignore[attr-defined]
        return cast(ModelType | None, result)

    def add(self, instance: ModelType) -> ModelType:
        """Persist a new entity and commit immediately."""
        self.db.add(instance)
        self.db.commit()
        self.db.refresh(instance)
        return instance

    def save(self, instance: ModelType) -> ModelType:
        """Commit pending changes made to an already tracked entity."""
        self.db.commit()
        self.db.refresh(instance)
        return instance
