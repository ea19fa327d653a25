"""Slide Markdown to content record parser.

Parses annotated slide Markdown (slides separated by ``---`` lines) into
ContentSlideRecord values ready for deck generation.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import List, Optional, Tuple

from ..models.content import SLIDE_TYPES, ContentSlideRecord

SLIDE_SEPARATOR = re.compile(r"\n---[ \t]*\n")

_TYPE_ANNOTATION = re.compile(r"<!--\s*type:\s*([\w-]+)\s*-->")
_STRIPPED_ANNOTATIONS = (
    re.compile(r"<!--\s*type:\s*[\w-]+\s*-->"),
    re.compile(r"<!--\s*layout:\s*[\w-]+\s*-->"),
    re.compile(r"<!--\s*emphasis:\s*[\w-]+\s*-->"),
)
_NOTES_BLOCK = re.compile(r"\n\s*Notes?:\s*(.*)\Z", re.IGNORECASE | re.DOTALL)


def _split_slides(content: str) -> List[str]:
    """Split a document on separator lines, dropping blank slides."""
    parts = SLIDE_SEPARATOR.split("\n" + content.replace("\r\n", "\n") + "\n")
    return [part for part in parts if part.strip()]


def _semantic_type(slide: str) -> Optional[str]:
    """Return the annotated slide type.

    Unknown types become ``default``; an unannotated slide returns None so the
    generator can apply its positional defaults.
    """
    match = _TYPE_ANNOTATION.search(slide)
    if not match:
        return None
    value = match.group(1).lower()
    return value if value in SLIDE_TYPES else "default"


def _split_notes(slide: str) -> Tuple[str, Optional[str]]:
    """Separate a trailing ``Notes:`` block from the slide body."""
    match = _NOTES_BLOCK.search(slide)
    if not match:
        return slide, None
    notes = match.group(1).strip()
    return slide[: match.start()], notes or None


def _strip_annotations(body: str) -> str:
    for pattern in _STRIPPED_ANNOTATIONS:
        body = pattern.sub("", body)
    return body.strip()


def _parse_heading(line: str) -> Optional[str]:
    if line.startswith("## ") or line.startswith("### "):
        return re.sub(r"^##+\s*", "", line)
    return None


def _parse_bullet(line: str) -> Optional[str]:
    if line.startswith("- ") or line.startswith("* "):
        return line[2:].strip()
    return None


def parse_slide(slide: str, deck_title: str) -> ContentSlideRecord:
    """Parse one slide's Markdown into a content record."""
    semantic_type = _semantic_type(slide)
    body, notes = _split_notes(slide)
    body = _strip_annotations(body)

    title = deck_title
    content_lines: List[str] = []
    for line in body.split("\n"):
        stripped = line.strip()
        if not stripped:
            continue
        heading = _parse_heading(stripped)
        if heading is not None:
            title = heading
            continue
        bullet = _parse_bullet(stripped)
        if bullet is not None:
            content_lines.append(bullet)
        elif stripped.startswith("<!--") or stripped.startswith("<div"):
            continue
        else:
            # Plain lines and **Term:** definitions are kept verbatim.
            content_lines.append(stripped)

    return ContentSlideRecord(
        semantic_type=semantic_type,
        title=title,
        content_lines=content_lines,
        notes=notes,
        raw_content=body or None,
    )


def parse_slides_string(content: str, deck_title: str) -> List[ContentSlideRecord]:
    """Parse annotated slide Markdown from a string."""
    return [parse_slide(slide, deck_title) for slide in _split_slides(content)]


def parse_slides(path: Path, deck_title: Optional[str] = None) -> List[ContentSlideRecord]:
    """Parse a slide Markdown file.

    Args:
        path: Markdown file with ``---`` separated slides
        deck_title: Title for slides without a heading; defaults to the file stem

    Returns:
        One record per non-blank slide, in document order
    """
    title = deck_title or path.stem.replace("_", " ").replace("-", " ").title()
    return parse_slides_string(path.read_text(encoding="utf-8"), title)


def load_records_json(path: Path) -> List[ContentSlideRecord]:
    """Load records from a JSON list (or an object with a ``slides`` list)."""
    with open(path, "r", encoding="utf-8") as handle:
        data = json.load(handle)
    if isinstance(data, dict):
        data = data.get("slides", [])
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of slide records in {path}")
    return [ContentSlideRecord.model_validate(item) for item in data]
