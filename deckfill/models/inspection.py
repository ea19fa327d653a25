"""Inspector output contracts."""

from __future__ import annotations

from typing import List, Optional

from pydantic import Field

from .base import DeckBaseModel


class SlideSummary(DeckBaseModel):
    number: int
    path: str
    layout_path: Optional[str] = None
    title: Optional[str] = None
    text_preview: str = ""
    shape_count: int = 0
    image_count: int = 0
    has_notes: bool = False


class PackageSummary(DeckBaseModel):
    slide_count: int
    slides: List[SlideSummary] = Field(default_factory=list)
    layout_count: int = 0
    media: List[str] = Field(default_factory=list)
    thumbnail: Optional[str] = None
