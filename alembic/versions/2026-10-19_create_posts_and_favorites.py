"""create posts and favorites tables

Revision ID: 3f9c1a7d2b10
Revises:
Create Date: 2026-10-19 09:12:44.512803

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9c1a7d2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('posts',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('title', sa.String(length=200), nullable=False),
    sa.Column('content', sa.Text(), nullable=False),
    sa.Column('image_url', sa.String(length=512), nullable=True),
    sa.Column('author_id', sa.String(length=128), nullable=False),
    sa.Column('author_name', sa.String(length=255), nullable=False),
    sa.Column('author_image_url', sa.String(length=512), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
    sa.PrimaryKeyConstraint('id', name=op.f('posts_pkey'))
    )
    op.create_index(op.f('posts_author_id_idx'), 'posts', ['author_id'], unique=False)
    # Feeds are read newest first
    op.create_index('posts_created_at_id_idx', 'posts', [sa.text('created_at DESC'), 'id'], unique=False)

    # No foreign key to posts: relations may outlive the post they point at
    op.create_table('favorites',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('post_id', sa.String(length=36), nullable=False),
    sa.Column('user_id', sa.String(length=128), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
    sa.PrimaryKeyConstraint('id', name=op.f('favorites_pkey')),
    sa.UniqueConstraint('post_id', 'user_id', name='unique_post_user_favorite')
    )
    op.create_index(op.f('favorites_post_id_idx'), 'favorites', ['post_id'], unique=False)
    op.create_index(op.f('favorites_user_id_idx'), 'favorites', ['user_id'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f('favorites_user_id_idx'), table_name='favorites')
    op.drop_index(op.f('favorites_post_id_idx'), table_name='favorites')
    op.drop_table('favorites')
    op.drop_index('posts_created_at_id_idx', table_name='posts')
    op.drop_index(op.f('posts_author_id_idx'), table_name='posts')
    op.drop_table('posts')
