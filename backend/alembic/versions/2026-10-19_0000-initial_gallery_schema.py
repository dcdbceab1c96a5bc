"""initial_gallery_schema

Revision ID: 5b2e9c41d7a3
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '5b2e9c41d7a3'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create the gallery schema.

    Tables:
    1. media_assets - read model of the external asset store
    2. products - read model of the commerce catalog
    3. feeds - named galleries
    4. feed_videos - ordered feed membership (no unique (feed_id, video_id))
    5. analytics_events - append-only engagement log
    """

    # ================================
    # Create media_assets table
    # ================================
    op.create_table(
        'media_assets',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False, comment='Auto-incrementing primary key'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, comment='Timestamp when record was created (UTC)'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, comment='Timestamp when record was last updated (UTC)'),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('url', sa.String(length=1000), nullable=False, comment='Public URL of the file'),
        sa.Column('thumbnail_url', sa.String(length=1000), nullable=True, comment='Thumbnail-size poster image, if one was generated'),
        sa.Column('alt_text', sa.String(length=255), nullable=True),
        sa.Column('mime_type', sa.String(length=100), nullable=False, comment='e.g. video/mp4'),
        sa.Column('author_id', sa.Integer(), nullable=True),
        sa.Column(
            'linked_product_ids',
            sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), 'postgresql'),
            nullable=False,
            comment='Commerce product ids tagged on this video',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_media_assets')),
    )
    op.create_index(op.f('ix_media_assets_mime_type'), 'media_assets', ['mime_type'], unique=False)
    op.create_index(op.f('ix_media_assets_author_id'), 'media_assets', ['author_id'], unique=False)

    # ================================
    # Create products table
    # ================================
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False, comment='Auto-incrementing primary key'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, comment='Timestamp when record was created (UTC)'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, comment='Timestamp when record was last updated (UTC)'),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('price', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('image_url', sa.String(length=1000), nullable=True),
        sa.Column('permalink', sa.String(length=1000), nullable=True),
        sa.Column('status', sa.String(length=50), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_products')),
    )
    op.create_index(op.f('ix_products_name'), 'products', ['name'], unique=False)

    # ================================
    # Create feeds table
    # ================================
    op.create_table(
        'feeds',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False, comment='Auto-incrementing primary key'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, comment='Timestamp when record was created (UTC)'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, comment='Timestamp when record was last updated (UTC)'),
        sa.Column('name', sa.String(length=255), nullable=False, comment='Gallery name shown to admins (unique)'),
        sa.Column('description', sa.Text(), nullable=True, comment='Free-form description'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_feeds')),
        sa.UniqueConstraint('name', name=op.f('uq_feeds_name')),
    )

    # ================================
    # Create feed_videos table
    # ================================
    op.create_table(
        'feed_videos',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False, comment='Auto-incrementing primary key'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, comment='Timestamp when record was created (UTC)'),
        sa.Column('feed_id', sa.Integer(), nullable=False, comment='Feed this membership belongs to'),
        sa.Column('video_id', sa.Integer(), nullable=False, comment='Video asset id'),
        sa.Column('sort_order', sa.Integer(), server_default='0', nullable=False, comment='Relative position inside the feed (ties broken by id)'),
        sa.ForeignKeyConstraint(['feed_id'], ['feeds.id'], name=op.f('fk_feed_videos_feed_id_feeds'), ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['video_id'], ['media_assets.id'], name=op.f('fk_feed_videos_video_id_media_assets'), ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_feed_videos')),
    )
    op.create_index(op.f('ix_feed_videos_feed_id'), 'feed_videos', ['feed_id'], unique=False)
    op.create_index(op.f('ix_feed_videos_video_id'), 'feed_videos', ['video_id'], unique=False)

    # ================================
    # Create analytics_events table
    # ================================
    # video_id has no foreign key: events outlive deleted assets
    op.create_table(
        'analytics_events',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False, comment='Auto-incrementing primary key'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, comment='Timestamp when record was created (UTC)'),
        sa.Column('video_id', sa.Integer(), nullable=False),
        sa.Column('feed_id', sa.Integer(), nullable=True),
        sa.Column('event_type', sa.String(length=50), nullable=False),
        sa.Column('watch_time', sa.Integer(), server_default='0', nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=True),
        sa.Column('session_id', sa.String(length=64), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_analytics_events')),
    )
    op.create_index(op.f('ix_analytics_events_video_id'), 'analytics_events', ['video_id'], unique=False)
    op.create_index(op.f('ix_analytics_events_event_type'), 'analytics_events', ['event_type'], unique=False)
    op.create_index('ix_analytics_events_created_at', 'analytics_events', ['created_at'], unique=False)


def downgrade() -> None:
    """Drop everything, children before parents."""
    op.drop_index('ix_analytics_events_created_at', table_name='analytics_events')
    op.drop_index(op.f('ix_analytics_events_event_type'), table_name='analytics_events')
    op.drop_index(op.f('ix_analytics_events_video_id'), table_name='analytics_events')
    op.drop_table('analytics_events')

    op.drop_index(op.f('ix_feed_videos_video_id'), table_name='feed_videos')
    op.drop_index(op.f('ix_feed_videos_feed_id'), table_name='feed_videos')
    op.drop_table('feed_videos')

    op.drop_table('feeds')

    op.drop_index(op.f('ix_products_name'), table_name='products')
    op.drop_table('products')

    op.drop_index(op.f('ix_media_assets_author_id'), table_name='media_assets')
    op.drop_index(op.f('ix_media_assets_mime_type'), table_name='media_assets')
    op.drop_table('media_assets')
