"""Content record contracts supplied by the authoring collaborator."""

from __future__ import annotations

from typing import List, Optional

from pydantic import ConfigDict, Field, constr

from .base import DeckBaseModel

NonEmptyStr = constr(min_length=1)

# Semantic slide types the layout matcher knows patterns for. Any other string is
# accepted and falls back to the general layout.
SLIDE_TYPES = (
    "title",
    "assertion",
    "definition",
    "process",
    "comparison",
    "quote",
    "question",
    "example",
    "summary",
    "default",
)


class ContentSlideRecord(DeckBaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    semantic_type: Optional[NonEmptyStr] = None
    title: str
    content_lines: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    raw_content: Optional[str] = None


class GenerationOptions(DeckBaseModel):
    title: NonEmptyStr
    subtitle: Optional[str] = None
    date: Optional[str] = None


class TextReplacement(DeckBaseModel):
    tag: NonEmptyStr
    value: str
