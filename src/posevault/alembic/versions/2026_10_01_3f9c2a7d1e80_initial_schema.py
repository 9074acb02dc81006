"""initial schema

Revision ID: 3f9c2a7d1e80
Revises:
Create Date: 2026-10-01 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3f9c2a7d1e80'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema: galleries, images, shares, share activity and notifications."""
    op.create_table(
        'galleries',
        sa.Column('uid', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('notes', sa.Text(), nullable=False),
        sa.Column('cover_image_uid', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('uid'),
    )
    op.create_index(op.f('ix_galleries_owner_id'), 'galleries', ['owner_id'], unique=False)

    op.create_table(
        'tags',
        sa.Column('uid', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.PrimaryKeyConstraint('uid'),
    )
    op.create_index(op.f('ix_tags_owner_id'), 'tags', ['owner_id'], unique=False)

    op.create_table(
        'images',
        sa.Column('uid', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('category_uid', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('notes', sa.Text(), nullable=False),
        sa.Column('storage_key', sa.String(length=1024), nullable=False),
        sa.Column('favorite', sa.Boolean(), nullable=False),
        sa.Column('cover_image', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['category_uid'], ['galleries.uid'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('uid'),
    )
    op.create_index(op.f('ix_images_owner_id'), 'images', ['owner_id'], unique=False)
    op.create_index(op.f('ix_images_category_uid'), 'images', ['category_uid'], unique=False)

    op.create_table(
        'image_tags',
        sa.Column('image_uid', sa.Integer(), nullable=False),
        sa.Column('tag_uid', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['image_uid'], ['images.uid'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['tag_uid'], ['tags.uid'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('image_uid', 'tag_uid'),
    )

    op.create_table(
        'shared_galleries',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('gallery_id', sa.Integer(), nullable=False),
        sa.Column('share_token', sa.String(length=128), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('password_hash', sa.String(length=255), nullable=True),
        sa.Column('allow_favorites', sa.Boolean(), nullable=False),
        sa.Column('allow_comments', sa.Boolean(), nullable=False),
        sa.Column('allow_uploads', sa.Boolean(), nullable=False),
        sa.Column('require_upload_approval', sa.Boolean(), nullable=False),
        sa.Column('max_uploads_per_viewer', sa.Integer(), nullable=True),
        sa.Column('max_upload_size_mb', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['gallery_id'], ['galleries.uid'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_shared_galleries_owner_id'), 'shared_galleries', ['owner_id'], unique=False)
    op.create_index(op.f('ix_shared_galleries_gallery_id'), 'shared_galleries', ['gallery_id'], unique=False)
    op.create_index(op.f('ix_shared_galleries_share_token'), 'shared_galleries', ['share_token'], unique=True)

    op.create_table(
        'share_viewers',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('shared_gallery_id', sa.Uuid(), nullable=False),
        sa.Column('display_name', sa.String(length=100), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['shared_gallery_id'], ['shared_galleries.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_share_viewers_shared_gallery_id'), 'share_viewers', ['shared_gallery_id'], unique=False)

    op.create_table(
        'share_uploads',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('shared_gallery_id', sa.Uuid(), nullable=False),
        sa.Column('viewer_id', sa.Uuid(), nullable=False),
        sa.Column('storage_key', sa.String(length=1024), nullable=False),
        sa.Column('original_filename', sa.String(length=255), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=False),
        sa.Column('approved', sa.Boolean(), nullable=False),
        sa.Column('uploaded_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['shared_gallery_id'], ['shared_galleries.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['viewer_id'], ['share_viewers.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_share_uploads_shared_gallery_id'), 'share_uploads', ['shared_gallery_id'], unique=False)
    op.create_index(op.f('ix_share_uploads_viewer_id'), 'share_uploads', ['viewer_id'], unique=False)

    op.create_table(
        'share_favorites',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('shared_gallery_id', sa.Uuid(), nullable=False),
        sa.Column('viewer_id', sa.Uuid(), nullable=False),
        sa.Column('image_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['shared_gallery_id'], ['shared_galleries.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['viewer_id'], ['share_viewers.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_share_favorites_shared_gallery_id'), 'share_favorites', ['shared_gallery_id'], unique=False)

    op.create_table(
        'share_comments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('shared_gallery_id', sa.Uuid(), nullable=False),
        sa.Column('viewer_id', sa.Uuid(), nullable=False),
        sa.Column('image_id', sa.Integer(), nullable=False),
        sa.Column('comment_text', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['shared_gallery_id'], ['shared_galleries.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['viewer_id'], ['share_viewers.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_share_comments_shared_gallery_id'), 'share_comments', ['shared_gallery_id'], unique=False)

    op.create_table(
        'share_access_log',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('shared_gallery_id', sa.Uuid(), nullable=False),
        sa.Column('viewer_id', sa.Uuid(), nullable=True),
        sa.Column('action', sa.String(length=50), nullable=False),
        sa.Column('image_id', sa.Integer(), nullable=True),
        sa.Column('accessed_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['shared_gallery_id'], ['shared_galleries.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['viewer_id'], ['share_viewers.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_share_access_log_shared_gallery_id'), 'share_access_log', ['shared_gallery_id'], unique=False)

    op.create_table(
        'notification_preferences',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('shared_gallery_id', sa.Uuid(), nullable=True),
        sa.Column('quiet_mode', sa.Boolean(), nullable=False),
        sa.Column('notify_on_view', sa.Boolean(), nullable=False),
        sa.Column('notify_on_favorite', sa.Boolean(), nullable=False),
        sa.Column('notify_on_upload', sa.Boolean(), nullable=False),
        sa.Column('notify_on_comment', sa.Boolean(), nullable=False),
        sa.Column('notify_on_expiry', sa.Boolean(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['shared_gallery_id'], ['shared_galleries.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'shared_gallery_id', name='uq_notification_preferences_user_share'),
    )
    op.create_index(op.f('ix_notification_preferences_user_id'), 'notification_preferences', ['user_id'], unique=False)

    op.create_table(
        'notifications',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('shared_gallery_id', sa.Uuid(), nullable=True),
        sa.Column('type', sa.String(length=32), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('viewer_id', sa.Uuid(), nullable=True),
        sa.Column('image_id', sa.Integer(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['shared_gallery_id'], ['shared_galleries.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['viewer_id'], ['share_viewers.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_notifications_user_id'), 'notifications', ['user_id'], unique=False)


def downgrade() -> None:
    """Downgrade schema: drop every table in reverse dependency order."""
    op.drop_index(op.f('ix_notifications_user_id'), table_name='notifications')
    op.drop_table('notifications')
    op.drop_index(op.f('ix_notification_preferences_user_id'), table_name='notification_preferences')
    op.drop_table('notification_preferences')
    op.drop_index(op.f('ix_share_access_log_shared_gallery_id'), table_name='share_access_log')
    op.drop_table('share_access_log')
    op.drop_index(op.f('ix_share_comments_shared_gallery_id'), table_name='share_comments')
    op.drop_table('share_comments')
    op.drop_index(op.f('ix_share_favorites_shared_gallery_id'), table_name='share_favorites')
    op.drop_table('share_favorites')
    op.drop_index(op.f('ix_share_uploads_viewer_id'), table_name='share_uploads')
    op.drop_index(op.f('ix_share_uploads_shared_gallery_id'), table_name='share_uploads')
    op.drop_table('share_uploads')
    op.drop_index(op.f('ix_share_viewers_shared_gallery_id'), table_name='share_viewers')
    op.drop_table('share_viewers')
    op.drop_index(op.f('ix_shared_galleries_share_token'), table_name='shared_galleries')
    op.drop_index(op.f('ix_shared_galleries_gallery_id'), table_name='shared_galleries')
    op.drop_index(op.f('ix_shared_galleries_owner_id'), table_name='shared_galleries')
    op.drop_table('shared_galleries')
    op.drop_table('image_tags')
    op.drop_index(op.f('ix_images_category_uid'), table_name='images')
    op.drop_index(op.f('ix_images_owner_id'), table_name='images')
    op.drop_table('images')
    op.drop_index(op.f('ix_tags_owner_id'), table_name='tags')
    op.drop_table('tags')
    op.drop_index(op.f('ix_galleries_owner_id'), table_name='galleries')
    op.drop_table('galleries')
