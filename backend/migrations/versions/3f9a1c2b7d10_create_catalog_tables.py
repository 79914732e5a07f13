"""create_catalog_tables

Revision ID: 3f9a1c2b7d10
Revises: 
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = '3f9a1c2b7d10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    bind = op.get_bind()
    insp = sa.inspect(bind)
    tables = insp.get_table_names()
    
    if 'albums' not in tables:
        op.create_table(
            'albums',
            sa.Column('id', sa.String(), nullable=False),
            sa.Column('title', sa.String(length=200), nullable=False),
            sa.Column('artist', sa.String(length=100), nullable=False),
            sa.Column('image_url', sa.String(), nullable=False),
            sa.Column('release_year', sa.Integer(), nullable=False),
            sa.Column('songs', sa.JSON(), nullable=False),
            sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index('ix_albums_artist', 'albums', ['artist'])
        op.create_index('ix_albums_created_at', 'albums', ['created_at'])
    
    if 'songs' not in tables:
        op.create_table(
            'songs',
            sa.Column('id', sa.String(), nullable=False),
            sa.Column('title', sa.String(), nullable=False),
            sa.Column('artist', sa.String(), nullable=False),
            sa.Column('image_url', sa.String(), nullable=False),
            sa.Column('audio_url', sa.String(), nullable=False),
            sa.Column('duration', sa.Integer(), nullable=False),
            sa.Column('album_id', sa.String(), nullable=True),
            sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index('ix_songs_artist', 'songs', ['artist'])
        op.create_index('ix_songs_album_id', 'songs', ['album_id'])
        op.create_index('ix_songs_created_at', 'songs', ['created_at'])
    
    if 'users' not in tables:
        op.create_table(
            'users',
            sa.Column('id', sa.String(), nullable=False),
            sa.Column('clerk_id', sa.String(), nullable=False),
            sa.Column('full_name', sa.String(length=100), nullable=False),
            sa.Column('image_url', sa.String(), nullable=True),
            sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=True),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index('ix_users_clerk_id', 'users', ['clerk_id'], unique=True)


def downgrade() -> None:
    op.drop_table('users')
    op.drop_table('songs')
    op.drop_table('albums')
