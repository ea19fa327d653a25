"""Layout manifest contracts."""

from __future__ import annotations

from typing import List, Optional, Tuple

from pydantic import Field, conint, constr

from .base import DeckBaseModel

NonEmptyStr = constr(min_length=1)

TEXTBOX = "textbox"


class Geometry(DeckBaseModel):
    """Shape position and size in EMU."""

    x: int
    y: int
    cx: conint(ge=0)
    cy: conint(ge=0)


class Placeholder(DeckBaseModel):
    type: NonEmptyStr = Field(..., description="Structural role or 'textbox' for tag boxes")
    idx: Optional[int] = None
    default_text: Optional[str] = None
    tag: Optional[NonEmptyStr] = Field(None, description="{{NAME}} marker to substitute")
    name: Optional[str] = None
    geometry: Optional[Geometry] = None
    location: Optional[str] = None

    @property
    def key(self) -> Tuple[str, Optional[int]]:
        return (self.type, self.idx)

    @property
    def is_pattern(self) -> bool:
        return self.type == TEXTBOX


class LayoutManifestEntry(DeckBaseModel):
    name: NonEmptyStr
    source_slide_number: conint(ge=1)
    placeholders: List[Placeholder] = Field(default_factory=list)
    is_default: bool = False

    @property
    def tags(self) -> List[str]:
        seen: List[str] = []
        for placeholder in self.placeholders:
            if placeholder.tag and placeholder.tag not in seen:
                seen.append(placeholder.tag)
        return seen


class TemplateManifest(DeckBaseModel):
    template_id: NonEmptyStr
    file: NonEmptyStr
    title: Optional[str] = None
    default_layout: Optional[str] = None
    layouts: List[LayoutManifestEntry] = Field(default_factory=list)

    def layout(self, name: str) -> Optional[LayoutManifestEntry]:
        for entry in self.layouts:
            if entry.name == name:
                return entry
        return None
