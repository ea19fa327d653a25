"""Pydantic models for deckfill contracts."""

from .authoring import LayoutDefinition, PlaceholderSpec, TemplateDefinition, ThemeSpec
from .base import DeckBaseModel
from .config import Config
from .content import SLIDE_TYPES, ContentSlideRecord, GenerationOptions, TextReplacement
from .inspection import PackageSummary, SlideSummary
from .manifest import TEXTBOX, Geometry, LayoutManifestEntry, Placeholder, TemplateManifest
from .report import GenerationReport, RenderedSlide, SkippedRecord
from .template import TemplateSource
from .validation import TemplateCheckReport, TemplateIssue

__all__ = [
    "Config",
    "DeckBaseModel",
    "ContentSlideRecord",
    "GenerationOptions",
    "TextReplacement",
    "SLIDE_TYPES",
    "Geometry",
    "Placeholder",
    "LayoutManifestEntry",
    "TemplateManifest",
    "TEXTBOX",
    "TemplateSource",
    "GenerationReport",
    "RenderedSlide",
    "SkippedRecord",
    "TemplateDefinition",
    "LayoutDefinition",
    "PlaceholderSpec",
    "ThemeSpec",
    "PackageSummary",
    "SlideSummary",
    "TemplateCheckReport",
    "TemplateIssue",
]
