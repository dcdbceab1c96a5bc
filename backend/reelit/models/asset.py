"""
Media asset read model.

The asset store is the system of record for uploaded files. This table is the
slice of it the gallery core reads: titles, URLs, thumbnails and MIME types,
plus the one piece of per-asset metadata the core writes (linked product ids).

Uploading, transcoding and deleting files all happen in the asset store;
feed memberships follow deletions through ON DELETE CASCADE.
"""

from typing import Optional

from sqlalchemy import JSON, Integer, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from reelit.db.base import BaseModel, String100, String255, String1000


class MediaAsset(BaseModel):
    """An uploaded media file (only video/* assets are listed by the gallery)."""

    __tablename__ = "media_assets"

    title: Mapped[str] = mapped_column(String255, nullable=False, default="")

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    url: Mapped[str] = mapped_column(
        String1000,
        nullable=False,
        comment="Public URL of the file"
    )

    thumbnail_url: Mapped[Optional[str]] = mapped_column(
        String1000,
        nullable=True,
        comment="Thumbnail-size poster image, if one was generated"
    )

    alt_text: Mapped[Optional[str]] = mapped_column(String255, nullable=True)

    mime_type: Mapped[str] = mapped_column(
        String100,
        nullable=False,
        index=True,
        comment="e.g. video/mp4"
    )

    # Uploading principal; scopes library listings for non-admins
    author_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)

    # Replaced wholesale by product tagging; UI keeps at most one entry
    linked_product_ids: Mapped[list[int]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
        default=list,
        comment="Commerce product ids tagged on this video"
    )

    @property
    def is_video(self) -> bool:
        return (self.mime_type or "").startswith("video/")

    def __repr__(self) -> str:
        return f"MediaAsset(id={self.id}, title={self.title!r})"
