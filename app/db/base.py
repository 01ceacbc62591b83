"""
Database base module - imports all models for Alembic migration detection.

This module imports all SQLAlchemy models to ensure they are registered
with Alembic for automatic migration generation. While the imports appear
unused, they are essential for the migration system to work properly.
"""

from app.storage.models.orphaned_file import OrphanedFile

# Export all models for Alembic
__all__ = [
    "OrphanedFile",
]
