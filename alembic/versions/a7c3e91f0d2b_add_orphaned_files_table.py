"""add orphaned_files table

Revision ID: a7c3e91f0d2b
Revises:
Create Date: 2026-10-17 10:12:44.318902

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a7c3e91f0d2b'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('orphaned_files',
    sa.Column('id', sa.Uuid(), nullable=False),
    sa.Column('file_id', sa.String(length=1000), nullable=False),
    sa.Column('storage_kind', sa.Enum('CONTENT_STORE', 'FILESYSTEM', name='storage_kind'), nullable=False),
    sa.Column('entity_type', sa.String(length=100), nullable=False),
    sa.Column('reason', sa.Text(), nullable=False),
    sa.Column('resolved', sa.Boolean(), nullable=False),
    sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
    sa.Column('metadata', sa.JSON(), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_orphaned_files_id'), 'orphaned_files', ['id'], unique=False)
    op.create_index('ix_orphaned_files_resolved_kind', 'orphaned_files', ['resolved', 'storage_kind'], unique=False)
    op.create_index('ix_orphaned_files_entity_type', 'orphaned_files', ['entity_type'], unique=False)
    op.create_index('ix_orphaned_files_created_at', 'orphaned_files', ['created_at'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_orphaned_files_created_at', table_name='orphaned_files')
    op.drop_index('ix_orphaned_files_entity_type', table_name='orphaned_files')
    op.drop_index('ix_orphaned_files_resolved_kind', table_name='orphaned_files')
    op.drop_index(op.f('ix_orphaned_files_id'), table_name='orphaned_files')
    op.drop_table('orphaned_files')
    sa.Enum(name='storage_kind').drop(op.get_bind(), checkfirst=True)
