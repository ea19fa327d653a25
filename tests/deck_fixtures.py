"""Shared template fixtures for tests."""

from __future__ import annotations

import io
import posixpath
from functools import lru_cache
from typing import List

from pptx import Presentation
from pptx.opc.constants import CONTENT_TYPE as CT
from pptx.opc.constants import NAMESPACE as NS
from pptx.oxml.ns import qn

from deckfill.author.builder import AuthoredTemplate, build_template
from deckfill.models.authoring import LayoutDefinition, PlaceholderSpec, TemplateDefinition
from deckfill.models.content import ContentSlideRecord, GenerationOptions
from deckfill.package.relationships import Relationships
from deckfill.package.store import Package, rels_path_for
from deckfill.package.xml import opc_tag, parse_xml


def sample_definition() -> TemplateDefinition:
    return TemplateDefinition(
        template_id="sample",
        title="Sample Template",
        layouts=[
            LayoutDefinition(
                name="title slide",
                placeholders=[
                    PlaceholderSpec(type="ctrTitle", tag="{{COURSE_TITLE}}", x=914400, y=2130425, cx=10363200, cy=1470025, font_size=44, bold=True, align="ctr"),
                    PlaceholderSpec(type="subTitle", idx=1, tag="{{SUBTITLE}}", x=1828800, y=3886200, cx=8534400, cy=914400, font_size=24),
                    PlaceholderSpec(type="textbox", tag="{{DATE}}", x=1828800, y=5486400, cx=8534400, cy=457200, font_size=14, color="7F7F7F"),
                ],
            ),
            LayoutDefinition(
                name="content slide",
                is_default=True,
                placeholders=[
                    PlaceholderSpec(type="title", tag="{{SLIDE_TITLE}}", x=609600, y=365125, cx=10972800, cy=1143000, font_size=36),
                    PlaceholderSpec(type="body", idx=1, tag="{{MAIN_CONTENT}}", x=609600, y=1600200, cx=10972800, cy=4525963, font_size=20),
                ],
            ),
            LayoutDefinition(
                name="quote",
                placeholders=[
                    PlaceholderSpec(type="textbox", tag="{{QUOTE_TEXT}}", x=1524000, y=1828800, cx=9144000, cy=2286000, font_size=32, align="ctr"),
                    PlaceholderSpec(type="textbox", tag="{{ATTRIBUTION}}", x=1524000, y=4343400, cx=9144000, cy=609600, font_size=18, align="r"),
                ],
            ),
        ],
    )


@lru_cache(maxsize=1)
def sample_template() -> AuthoredTemplate:
    return build_template(sample_definition())


def sample_records() -> List[ContentSlideRecord]:
    return [
        ContentSlideRecord(semantic_type="title", title="Clinical Reasoning", notes="Welcome everyone."),
        ContentSlideRecord(
            semantic_type="assertion",
            title="Practice matters",
            content_lines=["Compare cases", "Name the pivot"],
        ),
        ContentSlideRecord(
            semantic_type="quote",
            title="Osler",
            content_lines=['> "Listen to your patient" - William Osler'],
            raw_content='> "Listen to your patient" - William Osler',
            notes="Pause here.\n\nAsk for reactions.",
        ),
    ]


def sample_options() -> GenerationOptions:
    return GenerationOptions(title="Clinical Reasoning", subtitle="Week 1", date="2026-10-19")


def open_presentation(data: bytes):
    return Presentation(io.BytesIO(data))


def slide_text(slide) -> str:
    return "\n".join(shape.text_frame.text for shape in slide.shapes if shape.has_text_frame)


def assert_package_consistent(testcase, package: Package) -> None:
    """Every internal relationship target exists and slide indexes agree."""
    for name in package.names():
        if not name.endswith(".rels"):
            continue
        base = posixpath.basename(name)[: -len(".rels")]
        source = posixpath.join(posixpath.dirname(posixpath.dirname(name)), base) if base else ""
        testcase.assertEqual(rels_path_for(source), name)
        rels = Relationships.load(package, source)
        for rel in rels:
            if rel.external:
                continue
            testcase.assertTrue(package.has(rels.resolve(rel)), f"{name} -> {rel.target} missing")

    presentation_path = package.main_document_path()
    presentation = package.read_xml(presentation_path)
    sld_ids = list(presentation.find(qn("p:sldIdLst")).iter(qn("p:sldId")))
    slide_parts = [n for n in package.names("ppt/slides/") if n.endswith(".xml") and "/_rels/" not in n]
    content_types = parse_xml(package.read("[Content_Types].xml"))
    slide_overrides = [
        element
        for element in content_types.iter(opc_tag("Override", NS.OPC_CONTENT_TYPES))
        if element.get("ContentType") == CT.PML_SLIDE
    ]
    testcase.assertEqual(len(sld_ids), len(slide_parts))
    testcase.assertEqual(len(slide_parts), len(slide_overrides))

    presentation_rels = Relationships.load(package, presentation_path)
    for sld_id in sld_ids:
        rel = presentation_rels.get(sld_id.get(qn("r:id")))
        testcase.assertIsNotNone(rel)
        testcase.assertTrue(package.has(presentation_rels.resolve(rel)))
