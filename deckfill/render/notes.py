"""Speaker-notes part XML."""

from __future__ import annotations

import re
from typing import List

from lxml import etree
from pptx.oxml import parse_from_template

from ..package.xml import PML_DECLS, escape_xml_text, parse_xml

NOTES_MASTER_PATH = "ppt/notesMasters/notesMaster1.xml"

_NOTES_SLIDE_XML = """\
<p:notes {decls}>
  <p:cSld>
    <p:spTree>
      <p:nvGrpSpPr>
        <p:cNvPr id="1" name=""/>
        <p:cNvGrpSpPr/>
        <p:nvPr/>
      </p:nvGrpSpPr>
      <p:grpSpPr/>
      <p:sp>
        <p:nvSpPr>
          <p:cNvPr id="2" name="Slide Image Placeholder 1"/>
          <p:cNvSpPr><a:spLocks noGrp="1" noRot="1" noChangeAspect="1"/></p:cNvSpPr>
          <p:nvPr><p:ph type="sldImg"/></p:nvPr>
        </p:nvSpPr>
        <p:spPr/>
      </p:sp>
      <p:sp>
        <p:nvSpPr>
          <p:cNvPr id="3" name="Notes Placeholder 2"/>
          <p:cNvSpPr><a:spLocks noGrp="1"/></p:cNvSpPr>
          <p:nvPr><p:ph type="body" idx="1"/></p:nvPr>
        </p:nvSpPr>
        <p:spPr/>
        <p:txBody>
          <a:bodyPr/>
          <a:lstStyle/>
          {paragraphs}
        </p:txBody>
      </p:sp>
    </p:spTree>
  </p:cSld>
  <p:clrMapOvr><a:masterClrMapping/></p:clrMapOvr>
</p:notes>"""

_PARAGRAPH_XML = '<a:p><a:r><a:rPr lang="en-US" dirty="0"/><a:t>{text}</a:t></a:r></a:p>'


def notes_paragraphs(text: str) -> List[str]:
    """Split notes on blank lines; single line breaks inside a paragraph become spaces."""
    paragraphs = [p.strip().replace("\n", " ") for p in re.split(r"\n\s*\n+", text)]
    paragraphs = [p for p in paragraphs if p]
    return paragraphs or [text]


def notes_slide_element(text: str) -> etree._Element:
    paragraphs = "".join(
        _PARAGRAPH_XML.format(text=escape_xml_text(p)) for p in notes_paragraphs(text)
    )
    xml = _NOTES_SLIDE_XML.format(decls=PML_DECLS, paragraphs=paragraphs)
    return parse_xml(xml.encode("utf-8"))


def notes_master_element() -> etree._Element:
    """Default notes master shipped with python-pptx."""
    return parse_from_template("notesMaster")


def default_theme_element() -> etree._Element:
    return parse_from_template("theme")
