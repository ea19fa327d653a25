"""Template author contracts."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import Field, conint, constr, field_validator

from .base import DeckBaseModel

NonEmptyStr = constr(min_length=1)
HexColor = constr(pattern=r"^[0-9A-Fa-f]{6}$")
Alignment = Literal["l", "ctr", "r", "just"]

# 16:9 widescreen, EMU
DEFAULT_SLIDE_WIDTH = 12192000
DEFAULT_SLIDE_HEIGHT = 6858000


class ThemeSpec(DeckBaseModel):
    name: NonEmptyStr = "Deckfill"
    major_font: NonEmptyStr = "Calibri Light"
    minor_font: NonEmptyStr = "Calibri"
    dark1: HexColor = "000000"
    light1: HexColor = "FFFFFF"
    dark2: HexColor = "1F3864"
    light2: HexColor = "E7E6E6"
    accent1: HexColor = "4472C4"
    accent2: HexColor = "ED7D31"
    accent3: HexColor = "A5A5A5"
    accent4: HexColor = "FFC000"
    accent5: HexColor = "5B9BD5"
    accent6: HexColor = "70AD47"
    hyperlink: HexColor = "0563C1"
    followed_hyperlink: HexColor = "954F72"


class PlaceholderSpec(DeckBaseModel):
    """One content slot on a layout, positioned in absolute EMU."""

    type: NonEmptyStr = Field(..., description="Structural role (title, body, ...) or 'textbox'")
    idx: Optional[conint(ge=0)] = None
    tag: NonEmptyStr = Field(..., description="{{NAME}} marker shown on the sample slide")
    name: Optional[str] = None
    x: conint(ge=0)
    y: conint(ge=0)
    cx: conint(gt=0)
    cy: conint(gt=0)
    font_size: Optional[float] = Field(None, gt=0, description="Points")
    color: Optional[HexColor] = None
    bold: bool = False
    align: Alignment = "l"
    suppress_bullets: bool = True

    @field_validator("tag")
    @classmethod
    def _tag_is_marker(cls, value: str) -> str:
        if not (value.startswith("{{") and value.endswith("}}") and len(value) > 4):
            raise ValueError(f"tag must look like {{{{NAME}}}}: {value!r}")
        return value


class LayoutDefinition(DeckBaseModel):
    name: NonEmptyStr
    placeholders: List[PlaceholderSpec] = Field(..., min_length=1)
    is_default: bool = False


class TemplateDefinition(DeckBaseModel):
    template_id: NonEmptyStr
    title: Optional[str] = None
    slide_width: conint(gt=0) = DEFAULT_SLIDE_WIDTH
    slide_height: conint(gt=0) = DEFAULT_SLIDE_HEIGHT
    theme: ThemeSpec = Field(default_factory=ThemeSpec)
    default_layout: Optional[str] = None
    layouts: List[LayoutDefinition] = Field(..., min_length=1)
