"""Heuristic placeholder discovery over slide and layout XML.

A shape counts as a placeholder when it either declares a structural role
(``p:nvPr/p:ph``) or carries a ``{{NAME}}`` tag in its text. Decorative shapes
with neither are ignored. Shapes are visited in document order and slide parts
in numeric order, so identical bytes always discover identical layouts.
"""

from __future__ import annotations

from typing import Dict, List, NamedTuple, Optional, Set

from lxml import etree
from pptx.oxml.ns import qn

from ..errors import TemplateLoadError
from ..models.manifest import TEXTBOX, Geometry, LayoutManifestEntry, Placeholder
from ..package.store import SLIDE_PATH_PATTERN, Package, numbered_parts
from ..package.xml import find_tags, shape_text

# Placeholder type assumed by the format when p:ph has no type attribute.
DEFAULT_PLACEHOLDER_TYPE = "obj"

TITLE_TYPES = ("title", "ctrTitle")


class DiscoveredShape(NamedTuple):
    placeholder: Placeholder
    element: etree._Element


def shape_tree(root: etree._Element) -> Optional[etree._Element]:
    return root.find(f"{qn('p:cSld')}/{qn('p:spTree')}")


def placeholder_element(shape: etree._Element) -> Optional[etree._Element]:
    return shape.find(f"{qn('p:nvSpPr')}/{qn('p:nvPr')}/{qn('p:ph')}")


def shape_name(shape: etree._Element) -> Optional[str]:
    c_nv_pr = shape.find(f"{qn('p:nvSpPr')}/{qn('p:cNvPr')}")
    if c_nv_pr is None:
        return None
    return c_nv_pr.get("name") or None


def shape_geometry(shape: etree._Element) -> Optional[Geometry]:
    xfrm = shape.find(f"{qn('p:spPr')}/{qn('a:xfrm')}")
    if xfrm is None:
        return None
    off = xfrm.find(qn("a:off"))
    ext = xfrm.find(qn("a:ext"))
    if off is None or ext is None:
        return None
    return Geometry(
        x=int(off.get("x", "0")),
        y=int(off.get("y", "0")),
        cx=int(ext.get("cx", "0")),
        cy=int(ext.get("cy", "0")),
    )


def _assign_repeat_indexes(found: List[DiscoveredShape]) -> List[DiscoveredShape]:
    """Give every placeholder of a repeated type an idx so (type, idx) stays unique."""
    counts: Dict[str, int] = {}
    used: Dict[str, Set[int]] = {}
    for item in found:
        ph_type = item.placeholder.type
        counts[ph_type] = counts.get(ph_type, 0) + 1
        if item.placeholder.idx is not None:
            used.setdefault(ph_type, set()).add(item.placeholder.idx)

    result: List[DiscoveredShape] = []
    next_idx: Dict[str, int] = {}
    for item in found:
        ph_type = item.placeholder.type
        if counts[ph_type] > 1 and item.placeholder.idx is None:
            taken = used.setdefault(ph_type, set())
            candidate = next_idx.get(ph_type, 1)
            while candidate in taken:
                candidate += 1
            taken.add(candidate)
            next_idx[ph_type] = candidate + 1
            item = DiscoveredShape(item.placeholder.model_copy(update={"idx": candidate}), item.element)
        result.append(item)
    return result


def discover_shapes(root: etree._Element) -> List[DiscoveredShape]:
    """Return placeholders of a slide or layout tree with their shape elements."""
    tree = shape_tree(root)
    if tree is None:
        return []

    found: List[DiscoveredShape] = []
    for shape in tree.iter(qn("p:sp")):
        text = shape_text(shape)
        tags = find_tags(text)
        ph = placeholder_element(shape)
        if ph is not None:
            idx = ph.get("idx")
            placeholder = Placeholder(
                type=ph.get("type", DEFAULT_PLACEHOLDER_TYPE),
                idx=int(idx) if idx is not None else None,
                default_text=text or None,
                tag=tags[0] if tags else None,
                name=shape_name(shape),
                geometry=shape_geometry(shape),
            )
            found.append(DiscoveredShape(placeholder, shape))
            continue
        # A text box may hold several tags; each becomes its own slot.
        for tag in tags:
            placeholder = Placeholder(
                type=TEXTBOX,
                default_text=tag,
                tag=tag,
                name=shape_name(shape),
                geometry=shape_geometry(shape),
            )
            found.append(DiscoveredShape(placeholder, shape))
    return _assign_repeat_indexes(found)


def discover_placeholders(root: etree._Element) -> List[Placeholder]:
    return [item.placeholder for item in discover_shapes(root)]


def infer_layout_name(placeholders: List[Placeholder], slide_number: int) -> str:
    """Guess a layout name from the tags it carries."""
    tags = " ".join(p.tag for p in placeholders if p.tag).lower()

    if "course_title" in tags or "instructor" in tags:
        return "title slide"
    if "section_title" in tags and "slide_title" not in tags:
        return "section header"
    if "left_column" in tags or "right_column" in tags:
        return "two column"
    if "quote_text" in tags or "attribution" in tags:
        return "quote"
    if "discussion_prompt" in tags or "teaching_notes" in tags:
        return "q&a / discussion"
    if "competency_title" in tags or "competency_description" in tags:
        return "competency overview"
    if "activity_title" in tags or "time_estimate" in tags:
        return "activity instructions"
    if "big_text_content" in tags:
        return "big text"
    if "image_caption" in tags:
        return "full image"
    if "slide_title" in tags or "main_content" in tags:
        return "content slide"
    return f"slide {slide_number}"


def slide_layout_name(root: etree._Element) -> Optional[str]:
    c_sld = root.find(qn("p:cSld"))
    if c_sld is None:
        return None
    name = (c_sld.get("name") or "").strip()
    return name or None


def discover_layouts(package: Package) -> List[LayoutManifestEntry]:
    """Build a layout manifest from every slide part of a template."""
    entries: List[LayoutManifestEntry] = []
    seen: Set[str] = set()
    for number, path in numbered_parts(package, SLIDE_PATH_PATTERN):
        try:
            root = package.read_xml(path)
        except etree.XMLSyntaxError as exc:
            raise TemplateLoadError(f"Template slide {path} is not well-formed: {exc}") from exc

        placeholders = discover_placeholders(root)
        name = slide_layout_name(root) or infer_layout_name(placeholders, number)
        if name in seen:
            name = f"{name} (slide {number})"
        seen.add(name)
        entries.append(
            LayoutManifestEntry(
                name=name,
                source_slide_number=number,
                placeholders=placeholders,
            )
        )
    return entries
