"""Generation report contracts."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import Field

from .base import DeckBaseModel

Resolution = Literal["manifest", "heuristic"]

PPTX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.presentationml.presentation"


class RenderedSlide(DeckBaseModel):
    output_index: int
    record_index: int
    semantic_type: str
    layout_name: str
    source_slide_number: int
    tags: List[str] = Field(default_factory=list)


class SkippedRecord(DeckBaseModel):
    record_index: int
    semantic_type: str
    layout_name: Optional[str] = None
    reason: str


class GenerationReport(DeckBaseModel):
    template_id: Optional[str] = None
    resolution: Resolution
    record_count: int
    slide_count: int
    filename: str
    content_type: str = PPTX_CONTENT_TYPE
    slides: List[RenderedSlide] = Field(default_factory=list)
    skipped: List[SkippedRecord] = Field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.skipped
