"""Semantic slide type to layout matching."""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Sequence

from ..models.manifest import LayoutManifestEntry

# Slide type -> layout name patterns, highest priority first.
TYPE_TO_LAYOUT_PATTERNS: Dict[str, List[str]] = {
    "title": ["title", "cover", "opening"],
    "assertion": ["content", "assertion", "standard"],
    "default": ["content", "standard", "basic"],
    "definition": ["big text", "definition", "statement"],
    "quote": ["quote", "quotation", "callout"],
    "comparison": ["two column", "comparison", "side by side", "split"],
    "question": ["qa", "question", "discussion"],
    "process": ["content", "process", "steps"],
    "summary": ["content", "summary", "takeaway", "key points"],
    "example": ["content", "example", "case study"],
}

GENERAL_LAYOUT_NAMES = ("general", "default")
GENERAL_LAYOUT_HINT = "content"


def normalize_layout_name(name: str) -> str:
    """Lower-case, drop punctuation and collapse whitespace."""
    cleaned = re.sub(r"[^a-z0-9\s]", "", name.lower())
    return re.sub(r"\s+", " ", cleaned).strip()


class LayoutMatcher:
    """Map a semantic slide type to exactly one manifest entry.

    Rule, first hit wins:
      1. an entry whose name equals the type;
      2. each of the type's patterns in priority order: an entry named exactly
         the pattern, else the first entry (discovery order) containing it;
      3. the general entry: the manifest's ``default_layout``, else the first
         entry flagged ``is_default``, else the first entry named ``general`` or
         ``default``, else the first entry whose name contains ``content``;
      4. the first entry.
    """

    def __init__(
        self, layouts: Sequence[LayoutManifestEntry], default_layout: Optional[str] = None
    ) -> None:
        if not layouts:
            raise ValueError("LayoutMatcher needs at least one layout")
        self.layouts = list(layouts)
        self._names = [normalize_layout_name(layout.name) for layout in self.layouts]
        self.default_layout = default_layout
        self.general = self._find_general()

    def _exact(self, name: str) -> Optional[LayoutManifestEntry]:
        for normalized, layout in zip(self._names, self.layouts):
            if normalized == name:
                return layout
        return None

    def _containing(self, fragment: str) -> Optional[LayoutManifestEntry]:
        for normalized, layout in zip(self._names, self.layouts):
            if fragment in normalized:
                return layout
        return None

    def _find_general(self) -> LayoutManifestEntry:
        if self.default_layout:
            designated = self._exact(normalize_layout_name(self.default_layout))
            if designated is not None:
                return designated
        for layout in self.layouts:
            if layout.is_default:
                return layout
        for name in GENERAL_LAYOUT_NAMES:
            layout = self._exact(name)
            if layout is not None:
                return layout
        layout = self._containing(GENERAL_LAYOUT_HINT)
        if layout is not None:
            return layout
        return self.layouts[0]

    def match(self, semantic_type: str) -> LayoutManifestEntry:
        requested = normalize_layout_name(semantic_type or "")
        if requested:
            layout = self._exact(requested)
            if layout is not None:
                return layout

        for pattern in TYPE_TO_LAYOUT_PATTERNS.get(requested, []):
            layout = self._exact(pattern) or self._containing(pattern)
            if layout is not None:
                return layout

        return self.general
