"""Read-only summary of a presentation package."""

from __future__ import annotations

import re
from typing import List, Optional

from lxml import etree
from pptx.opc.constants import RELATIONSHIP_TYPE as RT
from pptx.oxml.ns import qn

from ..layouts.discovery import TITLE_TYPES, placeholder_element, shape_tree
from ..models.inspection import PackageSummary, SlideSummary
from ..package.relationships import Relationships
from ..package.store import Package
from ..package.xml import shape_text

PREVIEW_LENGTH = 200

_SHAPE_TAGS = tuple(qn(tag) for tag in ("p:sp", "p:pic", "p:graphicFrame", "p:grpSp", "p:cxnSp"))
_LAYOUT_PATH_PATTERN = re.compile(r"^ppt/slideLayouts/slideLayout\d+\.xml$")


def _preview(texts: List[str]) -> str:
    text = " ".join(" ".join(t.split()) for t in texts if t.strip())
    if len(text) <= PREVIEW_LENGTH:
        return text
    return text[: PREVIEW_LENGTH - 3].rstrip() + "..."


def _slide_title(tree: etree._Element) -> Optional[str]:
    for shape in tree.iter(qn("p:sp")):
        ph = placeholder_element(shape)
        if ph is not None and ph.get("type") in TITLE_TYPES:
            return shape_text(shape).strip() or None
    return None


def summarize_slide(package: Package, number: int, path: str) -> SlideSummary:
    root = package.read_xml(path)
    tree = shape_tree(root)
    rels = Relationships.load(package, path)
    layouts = rels.targets(RT.SLIDE_LAYOUT)

    if tree is None:
        return SlideSummary(number=number, path=path, layout_path=layouts[0] if layouts else None)

    shapes = [child for child in tree if child.tag in _SHAPE_TAGS]
    texts = [shape_text(shape) for shape in tree.iter(qn("p:sp"))]
    return SlideSummary(
        number=number,
        path=path,
        layout_path=layouts[0] if layouts else None,
        title=_slide_title(tree),
        text_preview=_preview(texts),
        shape_count=len(shapes),
        image_count=sum(1 for _ in tree.iter(qn("p:pic"))),
        has_notes=bool(rels.of_type(RT.NOTES_SLIDE)),
    )


def _thumbnail(package: Package) -> Optional[str]:
    for path in Relationships.load(package, "").targets(RT.THUMBNAIL):
        if package.has(path):
            return path
    return None


def inspect_package(data: bytes) -> PackageSummary:
    """Summarize slides in presentation order plus media and thumbnail parts."""
    package = Package.from_bytes(data)
    presentation_path = package.main_document_path()
    presentation = package.read_xml(presentation_path)
    rels = Relationships.load(package, presentation_path)

    slides: List[SlideSummary] = []
    sld_id_lst = presentation.find(qn("p:sldIdLst"))
    if sld_id_lst is not None:
        for number, sld_id in enumerate(sld_id_lst.iter(qn("p:sldId")), start=1):
            rel = rels.get(sld_id.get(qn("r:id"), ""))
            if rel is None:
                continue
            path = rels.resolve(rel)
            if package.has(path):
                slides.append(summarize_slide(package, number, path))

    return PackageSummary(
        slide_count=len(slides),
        slides=slides,
        layout_count=sum(1 for name in package.names("ppt/slideLayouts/") if _LAYOUT_PATH_PATTERN.match(name)),
        media=sorted(package.names("ppt/media/")),
        thumbnail=_thumbnail(package),
    )
