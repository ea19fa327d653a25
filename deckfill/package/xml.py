"""XML parsing, serialization and escaping shared by every part editor."""

from __future__ import annotations

import re
from typing import List
from xml.sax.saxutils import escape

from lxml import etree
from pptx.opc.constants import NAMESPACE as NS
from pptx.oxml.ns import nsdecls, qn

# Any {{NAME}} marker inside a single text run is a substitution point.
TAG_PATTERN = re.compile(r"\{\{([^{}]+)\}\}")

PML_DECLS = nsdecls("a", "r", "p")

_XML_ENTITIES = {'"': "&quot;", "'": "&apos;"}


def parse_xml(data: bytes) -> etree._Element:
    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    return etree.fromstring(data, parser)


def serialize_xml(element: etree._Element) -> bytes:
    return etree.tostring(
        element, xml_declaration=True, encoding="UTF-8", standalone=True
    )


def escape_xml_text(text: str) -> str:
    """Escape & < > " ' so the value can be spliced into element text or attributes."""
    return escape(text, _XML_ENTITIES)


def escape_element_text(text: str) -> str:
    """Escape only & < >, the form lxml and PowerPoint write inside element text."""
    return escape(text)


def opc_tag(local_name: str, namespace: str = NS.OPC_RELATIONSHIPS) -> str:
    return f"{{{namespace}}}{local_name}"


def paragraph_text(paragraph: etree._Element) -> str:
    return "".join(t.text or "" for t in paragraph.iter(qn("a:t")))


def shape_text(shape: etree._Element) -> str:
    """Return a shape's text with paragraphs joined by newlines."""
    tx_body = shape.find(qn("p:txBody"))
    if tx_body is None:
        return ""
    return "\n".join(paragraph_text(p) for p in tx_body.iter(qn("a:p")))


def find_tags(text: str) -> List[str]:
    """Return distinct {{NAME}} markers in order of first appearance."""
    tags: List[str] = []
    for match in TAG_PATTERN.finditer(text):
        tag = match.group(0)
        if tag not in tags:
            tags.append(tag)
    return tags
