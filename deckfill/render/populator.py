"""Placeholder population: content record + layout -> text replacements."""

from __future__ import annotations

import re
from typing import Callable, Dict, List, Optional, Pattern, Tuple

from ..models.content import ContentSlideRecord, GenerationOptions, TextReplacement
from ..models.manifest import LayoutManifestEntry, Placeholder

FieldGetter = Callable[[ContentSlideRecord, GenerationOptions], str]


def format_as_bullets(lines: List[str]) -> str:
    return "\n".join(f"• {line}" for line in lines)


def format_as_numbered(lines: List[str]) -> str:
    return "\n".join(f"{i}. {line}" for i, line in enumerate(lines, start=1))


def format_big_text(record: ContentSlideRecord) -> str:
    if record.content_lines:
        return record.title + "\n\n" + "\n".join(record.content_lines)
    return record.title


def extract_quote_text(record: ContentSlideRecord) -> str:
    raw = record.raw_content or " ".join(record.content_lines)
    # Markdown quote: > "quote text" - Author
    match = re.search(r'>\s*"?([^"]+?)"?\s*(?:[-—–]|$)', raw, re.DOTALL)
    if match:
        return match.group(1).strip()
    if len(record.content_lines) == 1 and len(record.content_lines[0]) > 20:
        return record.content_lines[0]
    if len(record.title) > 30:
        return record.title
    return " ".join(record.content_lines) or record.title


def extract_attribution(record: ContentSlideRecord) -> str:
    match = re.search(r"[-—–]\s*(.+?)$", record.raw_content or "", re.MULTILINE)
    return match.group(1).strip() if match else ""


def parse_markdown_table(content: str) -> List[List[str]]:
    rows: List[List[str]] = []
    for line in content.split("\n"):
        stripped = line.strip()
        if not stripped.startswith("|") or not stripped.endswith("|"):
            continue
        # separator row |---|:---:|
        if re.match(r"^\|[\s\-:|]+\|$", stripped):
            continue
        cells = [cell.strip() for cell in stripped[1:-1].split("|")]
        if any(cells):
            rows.append(cells)
    return rows


def _column(record: ContentSlideRecord, index: int) -> str:
    table = parse_markdown_table(record.raw_content or "")
    if len(table) > 1 and len(table[0]) >= 2:
        column = [row[index] if index < len(row) else "" for row in table[1:]]
        return format_as_bullets([cell for cell in column if cell])
    half = (len(record.content_lines) + 1) // 2
    lines = record.content_lines[:half] if index == 0 else record.content_lines[half:]
    return format_as_bullets(lines)


def _blank(record: ContentSlideRecord, options: GenerationOptions) -> str:
    return ""


# Tag-name rules, most specific first. The first matching rule decides the field.
TAG_RULES: List[Tuple[Pattern[str], FieldGetter]] = [
    (re.compile(r"course[_\s]?title", re.I), lambda r, o: r.title),
    (re.compile(r"slide[_\s]?title", re.I), lambda r, o: r.title),
    (re.compile(r"section[_\s]?title", re.I), lambda r, o: r.title),
    (re.compile(r"competency[_\s]?title", re.I), lambda r, o: r.title),
    (re.compile(r"activity[_\s]?title", re.I), lambda r, o: r.title),
    (re.compile(r"^title$", re.I), lambda r, o: r.title),
    (re.compile(r"heading", re.I), lambda r, o: r.title),
    (re.compile(r"teaching[_\s]?notes|speaker[_\s]?notes", re.I), lambda r, o: r.notes or ""),
    (re.compile(r"activity[_\s]?instructions", re.I), lambda r, o: format_as_numbered(r.content_lines)),
    (re.compile(r"competency[_\s]?description", re.I), lambda r, o: "\n".join(r.content_lines)),
    (re.compile(r"big[_\s]?text[_\s]?content", re.I), lambda r, o: format_big_text(r)),
    (re.compile(r"quote[_\s]?text|quotation", re.I), lambda r, o: extract_quote_text(r)),
    (re.compile(r"attribution|author|source", re.I), lambda r, o: extract_attribution(r)),
    (re.compile(r"left[_\s]?column|column[_\s]?1|first[_\s]?column", re.I), lambda r, o: _column(r, 0)),
    (re.compile(r"right[_\s]?column|column[_\s]?2|second[_\s]?column", re.I), lambda r, o: _column(r, 1)),
    (re.compile(r"main[_\s]?content|section[_\s]?description", re.I), lambda r, o: format_as_bullets(r.content_lines)),
    (re.compile(r"learning[_\s]?objectives|discussion[_\s]?points", re.I), lambda r, o: format_as_bullets(r.content_lines)),
    (re.compile(r"content|body|bullets?|points?", re.I), lambda r, o: format_as_bullets(r.content_lines)),
    (re.compile(r"discussion[_\s]?prompt|prompt|question", re.I), lambda r, o: r.title),
    (re.compile(r"subtitle", re.I), lambda r, o: o.subtitle or ""),
    (re.compile(r"date", re.I), lambda r, o: o.date or ""),
    (re.compile(r"time[_\s]?estimate|materials[_\s]?needed|instructor[_\s]?name|image[_\s]?caption", re.I), _blank),
]

# Structural role -> field, used when the tag name itself says nothing.
ROLE_FIELDS: Dict[str, FieldGetter] = {
    "title": lambda r, o: r.title,
    "ctrTitle": lambda r, o: r.title,
    "subTitle": lambda r, o: o.subtitle or "",
    "body": lambda r, o: format_as_bullets(r.content_lines),
    "obj": lambda r, o: format_as_bullets(r.content_lines),
}


def tag_name(tag: str) -> str:
    return tag[2:-2].strip() if tag.startswith("{{") and tag.endswith("}}") else tag


def field_for(placeholder: Placeholder) -> Optional[FieldGetter]:
    """Return the declared field getter for a placeholder, or None if unmapped."""
    if placeholder.tag:
        name = tag_name(placeholder.tag)
        for pattern, getter in TAG_RULES:
            if pattern.search(name):
                return getter
    return ROLE_FIELDS.get(placeholder.type)


def populate(
    layout: LayoutManifestEntry, record: ContentSlideRecord, options: GenerationOptions
) -> List[TextReplacement]:
    """Turn a record into replacements for every mapped tag of the layout.

    Placeholders without a tag cannot be substituted literally and placeholders
    without a mapped field keep the template's own text.
    """
    replacements: List[TextReplacement] = []
    seen = set()
    for placeholder in layout.placeholders:
        if not placeholder.tag or placeholder.tag in seen:
            continue
        getter = field_for(placeholder)
        if getter is None:
            continue
        seen.add(placeholder.tag)
        replacements.append(TextReplacement(tag=placeholder.tag, value=getter(record, options)))
    return replacements
