"""
Pydantic schemas for video listing and product tagging endpoints.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class VideoItem(BaseModel):
    """A hydrated video asset."""

    id: int
    title: str
    url: str
    thumbnail: str = ""
    mime: str


class VideoPage(BaseModel):
    """One page of video assets."""

    videos: List[VideoItem]
    total: int
    pages: int


class ProductSummary(BaseModel):
    """A product as offered by the tagging picker."""

    id: int
    text: str = Field(..., examples=["Beach Towel ($19.99)"])
    price: Optional[str] = None
    image: str = ""
    permalink: str = ""


class ProductList(BaseModel):
    products: List[ProductSummary]


class VideoProductsUpdate(BaseModel):
    """Replace the products tagged on a video (UI keeps at most one)."""

    product_ids: List[int] = Field(default_factory=list)
