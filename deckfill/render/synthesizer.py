"""Slide synthesis: clone a layout's backing slide and substitute its tags."""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, NamedTuple, Optional

from pptx.opc.constants import RELATIONSHIP_TYPE as RT

from ..errors import MissingLayoutSlideError
from ..models.content import TextReplacement
from ..models.manifest import LayoutManifestEntry
from ..package.relationships import Relationships
from ..package.store import (
    NOTES_SLIDE_PATH_PATTERN,
    SLIDE_PATH_PATTERN,
    Package,
    numbered_parts,
    rels_path_for,
    slide_path,
)
from ..package.xml import escape_element_text, escape_xml_text


class TemplateSlide(NamedTuple):
    number: int
    slide_xml: bytes
    rels_xml: Optional[bytes]


def snapshot_template_slides(
    package: Package, layouts: Iterable[LayoutManifestEntry]
) -> Dict[int, TemplateSlide]:
    """Capture the slides layouts point at before the template slides are cleared."""
    snapshot: Dict[int, TemplateSlide] = {}
    for layout in layouts:
        number = layout.source_slide_number
        if number in snapshot:
            continue
        path = slide_path(number)
        if not package.has(path):
            continue
        rels_path = rels_path_for(path)
        snapshot[number] = TemplateSlide(
            number=number,
            slide_xml=package.read(path),
            rels_xml=package.read(rels_path) if package.has(rels_path) else None,
        )
    return snapshot


def clear_template_slides(package: Package) -> List[str]:
    """Delete every slide part, its relationships and the notes slides it owned."""
    removed: List[str] = []
    for _, path in numbered_parts(package, SLIDE_PATH_PATTERN):
        rels = Relationships.load(package, path)
        for rel in rels.of_type(RT.NOTES_SLIDE):
            notes_path = rels.resolve(rel)
            package.delete(rels_path_for(notes_path))
            if package.delete(notes_path):
                removed.append(notes_path)
        package.delete(rels.path)
        package.delete(path)
        removed.append(path)

    # Orphaned notes slides cannot be reached once their slides are gone.
    for _, path in numbered_parts(package, NOTES_SLIDE_PATH_PATTERN):
        package.delete(rels_path_for(path))
        package.delete(path)
        removed.append(path)
    return removed


def apply_replacements(xml: str, replacements: Iterable[TextReplacement]) -> str:
    """Substitute escaped tags by escaped values in a single pass.

    Inserted values are never rescanned, so a value that contains another
    tag's text stays literal. The first replacement for a tag wins.
    """
    values: Dict[str, str] = {}
    for replacement in replacements:
        values.setdefault(escape_element_text(replacement.tag), escape_xml_text(replacement.value))
    if not values:
        return xml

    # Longest first so a tag never loses to one of its own prefixes.
    keys = sorted(values, key=len, reverse=True)
    pattern = re.compile("|".join(re.escape(key) for key in keys))
    return pattern.sub(lambda match: values[match.group(0)], xml)


class SlideSynthesizer:
    def __init__(self, package: Package, template_slides: Dict[int, TemplateSlide]) -> None:
        self.package = package
        self.template_slides = template_slides

    def synthesize(
        self,
        layout: LayoutManifestEntry,
        replacements: List[TextReplacement],
        output_index: int,
    ) -> str:
        """Write output slide ``output_index`` from ``layout`` and return its path."""
        source = self.template_slides.get(layout.source_slide_number)
        if source is None:
            raise MissingLayoutSlideError(layout.name, layout.source_slide_number)

        xml = apply_replacements(source.slide_xml.decode("utf-8"), replacements)
        path = slide_path(output_index)
        self.package.write(path, xml)

        rels = Relationships.load(self.package, path)
        if source.rels_xml is not None:
            self.package.write(rels.path, source.rels_xml)
            rels = Relationships.load(self.package, path)
        # Notes are rebuilt per output slide by the reindexer.
        rels.remove_type(RT.NOTES_SLIDE)
        rels.save()
        return path
