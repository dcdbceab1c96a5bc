"""
Commerce product read model.

Mirror of the storefront catalog, consulted read-only by product tagging.
Only rows with status "publish" are offered for tagging.
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import Numeric
from sqlalchemy.orm import Mapped, mapped_column

from reelit.db.base import BaseModel, String50, String255, String1000


class Product(BaseModel):
    """A storefront product that can be tagged on a video."""

    __tablename__ = "products"

    name: Mapped[str] = mapped_column(String255, nullable=False, index=True)

    price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)

    image_url: Mapped[Optional[str]] = mapped_column(String1000, nullable=True)

    permalink: Mapped[Optional[str]] = mapped_column(String1000, nullable=True)

    status: Mapped[str] = mapped_column(String50, nullable=False, default="publish")

    def __repr__(self) -> str:
        return f"Product(id={self.id}, name={self.name!r})"
