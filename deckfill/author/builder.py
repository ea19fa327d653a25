"""Author a tagged PPTX template from a layout definition.

Every layout becomes one slide layout part plus one sample slide. Structural
placeholders live on the layout and are inherited by stub placeholders on the
sample slide; text boxes are moved onto the sample slide so their tags can be
substituted there. The sample slides are what generation later clones, and the
returned manifest is what heuristic discovery would find on them.
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import List, NamedTuple, Optional

from lxml import etree
from pptx.opc.constants import CONTENT_TYPE as CT
from pptx.opc.constants import RELATIONSHIP_TYPE as RT
from pptx.oxml import parse_from_template
from pptx.oxml.ns import qn
from pptx.util import Pt

from ..errors import TemplateError
from ..layouts.discovery import (
    TITLE_TYPES,
    discover_shapes,
    placeholder_element,
    shape_tree,
)
from ..logging_utils import log_event
from ..models.authoring import LayoutDefinition, PlaceholderSpec, TemplateDefinition, ThemeSpec
from ..models.manifest import TEXTBOX, LayoutManifestEntry, TemplateManifest
from ..package.content_types import ContentTypes
from ..package.relationships import Relationships
from ..package.store import Package, slide_path
from ..package.xml import PML_DECLS, escape_xml_text, parse_xml
from ..render.reindexer import PackageReindexer

PRESENTATION_PATH = "ppt/presentation.xml"
MASTER_PATH = "ppt/slideMasters/slideMaster1.xml"
THEME_PATH = "ppt/theme/theme1.xml"
CORE_PATH = "docProps/core.xml"
APP_PATH = "docProps/app.xml"

FIRST_MASTER_ID = 2147483648
NOTES_WIDTH = 6858000
NOTES_HEIGHT = 9144000

_CP_NS = "http://schemas.openxmlformats.org/package/2006/metadata/core-properties"
_EP_NS = "http://schemas.openxmlformats.org/officeDocument/2006/extended-properties"
_VT_NS = "http://schemas.openxmlformats.org/officeDocument/2006/docPropsVTypes"

_GROUP_XML = (
    '<p:nvGrpSpPr><p:cNvPr id="1" name=""/><p:cNvGrpSpPr/><p:nvPr/></p:nvGrpSpPr>'
    '<p:grpSpPr><a:xfrm><a:off x="0" y="0"/><a:ext cx="0" cy="0"/>'
    '<a:chOff x="0" y="0"/><a:chExt cx="0" cy="0"/></a:xfrm></p:grpSpPr>'
)

_PLACEHOLDER_XML = """\
<p:sp {decls}>
  <p:nvSpPr>
    <p:cNvPr id="{id}" name="{name}"/>
    <p:cNvSpPr><a:spLocks noGrp="1"/></p:cNvSpPr>
    <p:nvPr>{ph}</p:nvPr>
  </p:nvSpPr>
  <p:spPr>{xfrm}</p:spPr>
  <p:txBody>
    <a:bodyPr/>
    <a:lstStyle>{lvl1}</a:lstStyle>
    <a:p><a:r><a:rPr lang="en-US" dirty="0"/><a:t>{text}</a:t></a:r></a:p>
  </p:txBody>
</p:sp>"""

_TEXTBOX_XML = """\
<p:sp {decls}>
  <p:nvSpPr>
    <p:cNvPr id="{id}" name="{name}"/>
    <p:cNvSpPr txBox="1"/>
    <p:nvPr/>
  </p:nvSpPr>
  <p:spPr>{xfrm}<a:prstGeom prst="rect"><a:avLst/></a:prstGeom><a:noFill/></p:spPr>
  <p:txBody>
    <a:bodyPr wrap="square" rtlCol="0"/>
    <a:lstStyle>{lvl1}</a:lstStyle>
    <a:p><a:r><a:rPr lang="en-US" dirty="0"/><a:t>{text}</a:t></a:r></a:p>
  </p:txBody>
</p:sp>"""

_STUB_XML = """\
<p:sp {decls}>
  <p:nvSpPr>
    <p:cNvPr id="0" name="{name}"/>
    <p:cNvSpPr><a:spLocks noGrp="1"/></p:cNvSpPr>
    <p:nvPr/>
  </p:nvSpPr>
  <p:spPr/>
  <p:txBody>
    <a:bodyPr/>
    <a:lstStyle/>
  </p:txBody>
</p:sp>"""

_MASTER_XML = """\
<p:sldMaster {decls}>
  <p:cSld>
    <p:bg><p:bgRef idx="1001"><a:schemeClr val="bg1"/></p:bgRef></p:bg>
    <p:spTree>{group}{shapes}</p:spTree>
  </p:cSld>
  <p:clrMap bg1="lt1" tx1="dk1" bg2="lt2" tx2="dk2" accent1="accent1" accent2="accent2"
    accent3="accent3" accent4="accent4" accent5="accent5" accent6="accent6"
    hlink="hlink" folHlink="folHlink"/>
  <p:sldLayoutIdLst>{layout_ids}</p:sldLayoutIdLst>
  <p:txStyles>
    <p:titleStyle>
      <a:lvl1pPr algn="l"><a:buNone/><a:defRPr sz="4400" kern="1200"><a:solidFill><a:schemeClr val="tx1"/></a:solidFill><a:latin typeface="+mj-lt"/><a:ea typeface="+mj-ea"/><a:cs typeface="+mj-cs"/></a:defRPr></a:lvl1pPr>
    </p:titleStyle>
    <p:bodyStyle>
      <a:lvl1pPr marL="228600" indent="-228600" algn="l"><a:buFont typeface="Arial"/><a:buChar char="&#8226;"/><a:defRPr sz="2400" kern="1200"><a:solidFill><a:schemeClr val="tx1"/></a:solidFill><a:latin typeface="+mn-lt"/><a:ea typeface="+mn-ea"/><a:cs typeface="+mn-cs"/></a:defRPr></a:lvl1pPr>
    </p:bodyStyle>
    <p:otherStyle>
      <a:defPPr><a:defRPr lang="en-US"/></a:defPPr>
    </p:otherStyle>
  </p:txStyles>
</p:sldMaster>"""

_LAYOUT_XML = """\
<p:sldLayout {decls} preserve="1">
  <p:cSld name="{name}"><p:spTree>{group}</p:spTree></p:cSld>
  <p:clrMapOvr><a:masterClrMapping/></p:clrMapOvr>
</p:sldLayout>"""

_SLIDE_XML = """\
<p:sld {decls}>
  <p:cSld name="{name}"><p:spTree>{group}</p:spTree></p:cSld>
  <p:clrMapOvr><a:masterClrMapping/></p:clrMapOvr>
</p:sld>"""

_PRESENTATION_XML = """\
<p:presentation {decls} saveSubsetFonts="1">
  <p:sldMasterIdLst><p:sldMasterId id="{master_id}" r:id="{master_rid}"/></p:sldMasterIdLst>
  <p:sldSz cx="{width}" cy="{height}"/>
  <p:notesSz cx="{notes_width}" cy="{notes_height}"/>
</p:presentation>"""

_CORE_XML = (
    '<cp:coreProperties xmlns:cp="{cp}" xmlns:dc="http://purl.org/dc/elements/1.1/" '
    'xmlns:dcterms="http://purl.org/dc/terms/" '
    'xmlns:dcmitype="http://purl.org/dc/dcmitype/" '
    'xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">'
    "<dc:title>{title}</dc:title><cp:revision>1</cp:revision></cp:coreProperties>"
)

_APP_XML = (
    '<Properties xmlns="{ep}" xmlns:vt="{vt}">'
    "<Slides>0</Slides><Notes>0</Notes><Application>deckfill</Application>"
    "</Properties>"
)

_THEME_COLORS = (
    ("dk1", "dark1"),
    ("lt1", "light1"),
    ("dk2", "dark2"),
    ("lt2", "light2"),
    ("accent1", "accent1"),
    ("accent2", "accent2"),
    ("accent3", "accent3"),
    ("accent4", "accent4"),
    ("accent5", "accent5"),
    ("accent6", "accent6"),
    ("hlink", "hyperlink"),
    ("folHlink", "followed_hyperlink"),
)


class AuthoredTemplate(NamedTuple):
    data: bytes
    manifest: TemplateManifest


def _xfrm(x: int, y: int, cx: int, cy: int) -> str:
    return f'<a:xfrm><a:off x="{x}" y="{y}"/><a:ext cx="{cx}" cy="{cy}"/></a:xfrm>'


def _level_style(spec: PlaceholderSpec) -> str:
    run_attrs = ""
    if spec.font_size is not None:
        run_attrs += f' sz="{Pt(spec.font_size).centipoints}"'
    if spec.bold:
        run_attrs += ' b="1"'
    fill = f'<a:solidFill><a:srgbClr val="{spec.color.upper()}"/></a:solidFill>' if spec.color else ""
    bullet = '<a:buNone/>' if spec.suppress_bullets else ""
    indent = ' marL="0" indent="0"' if spec.suppress_bullets else ""
    return f'<a:lvl1pPr{indent} algn="{spec.align}">{bullet}<a:defRPr{run_attrs}>{fill}</a:defRPr></a:lvl1pPr>'


def _default_shape_name(spec: PlaceholderSpec, shape_id: int) -> str:
    if spec.type == TEXTBOX:
        return f"TextBox {shape_id - 1}"
    return f"{spec.type[0].upper()}{spec.type[1:]} Placeholder {shape_id - 1}"


def assign_placeholder_indexes(specs: List[PlaceholderSpec]) -> List[Optional[int]]:
    """Non-title structural placeholders need an idx to inherit from the layout."""
    taken = {spec.idx for spec in specs if spec.idx is not None}
    indexes: List[Optional[int]] = []
    candidate = 1
    for spec in specs:
        if spec.idx is not None or spec.type == TEXTBOX or spec.type in TITLE_TYPES:
            indexes.append(spec.idx)
            continue
        while candidate in taken:
            candidate += 1
        taken.add(candidate)
        indexes.append(candidate)
    return indexes


def build_shape(spec: PlaceholderSpec, shape_id: int, idx: Optional[int]) -> etree._Element:
    name = escape_xml_text(spec.name or _default_shape_name(spec, shape_id))
    xfrm = _xfrm(spec.x, spec.y, spec.cx, spec.cy)
    text = escape_xml_text(spec.tag)
    if spec.type == TEXTBOX:
        xml = _TEXTBOX_XML.format(
            decls=PML_DECLS, id=shape_id, name=name, xfrm=xfrm, lvl1=_level_style(spec), text=text
        )
    else:
        idx_attr = f' idx="{idx}"' if idx is not None else ""
        ph = f'<p:ph type="{escape_xml_text(spec.type)}"{idx_attr}/>'
        xml = _PLACEHOLDER_XML.format(
            decls=PML_DECLS, id=shape_id, name=name, ph=ph, xfrm=xfrm, lvl1=_level_style(spec), text=text
        )
    return parse_xml(xml.encode("utf-8"))


def build_layout(layout: LayoutDefinition) -> etree._Element:
    root = parse_xml(
        _LAYOUT_XML.format(decls=PML_DECLS, name=escape_xml_text(layout.name), group=_GROUP_XML).encode("utf-8")
    )
    tree = shape_tree(root)
    indexes = assign_placeholder_indexes(layout.placeholders)
    for offset, (spec, idx) in enumerate(zip(layout.placeholders, indexes)):
        tree.append(build_shape(spec, offset + 2, idx))
    return root


def _stub_for(shape: etree._Element) -> etree._Element:
    """Inheriting copy of a structural placeholder: same ph, same text, no geometry."""
    name = shape.find(f"{qn('p:nvSpPr')}/{qn('p:cNvPr')}").get("name", "")
    stub = parse_xml(_STUB_XML.format(decls=PML_DECLS, name=escape_xml_text(name)).encode("utf-8"))
    stub.find(f"{qn('p:nvSpPr')}/{qn('p:nvPr')}").append(copy.deepcopy(placeholder_element(shape)))
    tx_body = stub.find(qn("p:txBody"))
    for paragraph in shape.find(qn("p:txBody")).iter(qn("a:p")):
        tx_body.append(copy.deepcopy(paragraph))
    return stub


def _renumber_shapes(tree: etree._Element) -> None:
    for shape_id, c_nv_pr in enumerate(tree.iter(qn("p:cNvPr")), start=1):
        c_nv_pr.set("id", str(shape_id))


def build_sample_slide(layout: LayoutDefinition, layout_root: etree._Element) -> etree._Element:
    """Derive the sample slide from the layout and move text boxes onto it."""
    slide = parse_xml(
        _SLIDE_XML.format(decls=PML_DECLS, name=escape_xml_text(layout.name), group=_GROUP_XML).encode("utf-8")
    )
    slide_tree = shape_tree(slide)
    expected = [item.placeholder.key for item in discover_shapes(layout_root)]

    visited = set()
    for item in discover_shapes(layout_root):
        if id(item.element) in visited:
            continue
        visited.add(id(item.element))
        if placeholder_element(item.element) is not None:
            slide_tree.append(_stub_for(item.element))
        else:
            slide_tree.append(item.element)
    _renumber_shapes(slide_tree)
    _renumber_shapes(shape_tree(layout_root))

    actual = [item.placeholder.key for item in discover_shapes(slide)]
    if actual != expected:
        raise TemplateError(
            f"Sample slide for layout '{layout.name}' does not reproduce its placeholders: "
            f"expected {expected}, found {actual}"
        )
    return slide


def build_theme(theme: ThemeSpec) -> etree._Element:
    """Recolor and refont the python-pptx default theme."""
    root = parse_from_template("theme")
    root.set("name", theme.name)
    elements = root.find(qn("a:themeElements"))

    clr_scheme = elements.find(qn("a:clrScheme"))
    clr_scheme.set("name", theme.name)
    for slot, field in _THEME_COLORS:
        color = clr_scheme.find(qn(f"a:{slot}"))
        if color is None:
            color = etree.SubElement(clr_scheme, qn(f"a:{slot}"))
        for child in list(color):
            color.remove(child)
        etree.SubElement(color, qn("a:srgbClr")).set("val", getattr(theme, field).upper())

    font_scheme = elements.find(qn("a:fontScheme"))
    font_scheme.set("name", theme.name)
    for font_tag, typeface in (("a:majorFont", theme.major_font), ("a:minorFont", theme.minor_font)):
        latin = font_scheme.find(f"{qn(font_tag)}/{qn('a:latin')}")
        if latin is not None:
            latin.set("typeface", typeface)
    return root


def build_master(definition: TemplateDefinition, layout_rids: List[str]) -> etree._Element:
    width, height = definition.slide_width, definition.slide_height
    title = PlaceholderSpec(
        type="title", tag="{{TITLE}}", name="Title Placeholder 1",
        x=width // 16, y=height // 20, cx=width - width // 8, cy=height // 5,
    )
    body = PlaceholderSpec(
        type="body", idx=1, tag="{{CONTENT}}", name="Text Placeholder 2",
        x=width // 16, y=height * 3 // 10, cx=width - width // 8, cy=height * 3 // 5,
    )
    shapes = ""
    for shape_id, spec in ((2, title), (3, body)):
        idx_attr = f' idx="{spec.idx}"' if spec.idx is not None else ""
        shapes += _PLACEHOLDER_XML.format(
            decls="",
            id=shape_id,
            name=spec.name,
            ph=f'<p:ph type="{spec.type}"{idx_attr}/>',
            xfrm=_xfrm(spec.x, spec.y, spec.cx, spec.cy),
            lvl1="",
            text="",
        )
    layout_ids = "".join(
        f'<p:sldLayoutId id="{FIRST_MASTER_ID + offset}" r:id="{rid}"/>'
        for offset, rid in enumerate(layout_rids, start=1)
    )
    xml = _MASTER_XML.format(decls=PML_DECLS, group=_GROUP_XML, shapes=shapes, layout_ids=layout_ids)
    return parse_xml(xml.encode("utf-8"))


def _check_definition(definition: TemplateDefinition) -> None:
    names = [layout.name for layout in definition.layouts]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise TemplateError(f"Duplicate layout names: {', '.join(duplicates)}")
    if definition.default_layout and definition.default_layout not in names:
        raise TemplateError(f"default_layout '{definition.default_layout}' is not a defined layout")


def build_template(definition: TemplateDefinition, log_path: Optional[Path] = None) -> AuthoredTemplate:
    """Build template bytes and the manifest describing their sample slides."""
    _check_definition(definition)
    package = Package()
    content_types = ContentTypes.load(package)
    content_types.ensure_default("rels", CT.OPC_RELATIONSHIPS)
    content_types.ensure_default("xml", CT.XML)

    root_rels = Relationships.load(package, "")
    root_rels.add(RT.OFFICE_DOCUMENT, PRESENTATION_PATH)
    root_rels.add(RT.CORE_PROPERTIES, CORE_PATH)
    root_rels.add(RT.EXTENDED_PROPERTIES, APP_PATH)
    root_rels.save()

    package.write(CORE_PATH, _CORE_XML.format(cp=_CP_NS, title=escape_xml_text(definition.title or definition.template_id)))
    package.write(APP_PATH, _APP_XML.format(ep=_EP_NS, vt=_VT_NS))
    content_types.add_override(CORE_PATH, CT.OPC_CORE_PROPERTIES)
    content_types.add_override(APP_PATH, CT.OFC_EXTENDED_PROPERTIES)

    package.write_xml(THEME_PATH, build_theme(definition.theme))
    content_types.add_override(THEME_PATH, CT.OFC_THEME)

    master_rels = Relationships.load(package, MASTER_PATH)
    layout_rids: List[str] = []
    manifest_layouts: List[LayoutManifestEntry] = []
    for number, layout in enumerate(definition.layouts, start=1):
        layout_path = f"ppt/slideLayouts/slideLayout{number}.xml"
        layout_root = build_layout(layout)
        # Discovery on the layout, before text boxes move, carries the geometry.
        placeholders = [item.placeholder for item in discover_shapes(layout_root)]
        slide_root = build_sample_slide(layout, layout_root)

        package.write_xml(layout_path, layout_root)
        content_types.add_override(layout_path, CT.PML_SLIDE_LAYOUT)
        layout_rels = Relationships.load(package, layout_path)
        layout_rels.add(RT.SLIDE_MASTER, MASTER_PATH)
        layout_rels.save()
        layout_rids.append(master_rels.add(RT.SLIDE_LAYOUT, layout_path))

        path = slide_path(number)
        package.write_xml(path, slide_root)
        slide_rels = Relationships.load(package, path)
        slide_rels.add(RT.SLIDE_LAYOUT, layout_path)
        slide_rels.save()

        manifest_layouts.append(
            LayoutManifestEntry(
                name=layout.name,
                source_slide_number=number,
                placeholders=placeholders,
                is_default=layout.is_default,
            )
        )

    master_rels.add(RT.THEME, THEME_PATH)
    master_rels.save()
    package.write_xml(MASTER_PATH, build_master(definition, layout_rids))
    content_types.add_override(MASTER_PATH, CT.PML_SLIDE_MASTER)

    presentation_rels = Relationships.load(package, PRESENTATION_PATH)
    master_rid = presentation_rels.add(RT.SLIDE_MASTER, MASTER_PATH)
    presentation_rels.add(RT.THEME, THEME_PATH)
    for reltype, path, content_type, xml in (
        (RT.PRES_PROPS, "ppt/presProps.xml", CT.PML_PRES_PROPS, f"<p:presentationPr {PML_DECLS}/>"),
        (RT.VIEW_PROPS, "ppt/viewProps.xml", CT.PML_VIEW_PROPS, f"<p:viewPr {PML_DECLS}/>"),
        (
            RT.TABLE_STYLES,
            "ppt/tableStyles.xml",
            CT.PML_TABLE_STYLES,
            f'<a:tblStyleLst {PML_DECLS} def="{{5C22544A-7EE6-4342-B048-85BDC9FD1C3A}}"/>',
        ),
    ):
        presentation_rels.add(reltype, path)
        package.write(path, xml)
        content_types.add_override(path, content_type)
    presentation_rels.save()

    package.write(
        PRESENTATION_PATH,
        _PRESENTATION_XML.format(
            decls=PML_DECLS,
            master_id=FIRST_MASTER_ID,
            master_rid=master_rid,
            width=definition.slide_width,
            height=definition.slide_height,
            notes_width=NOTES_WIDTH,
            notes_height=NOTES_HEIGHT,
        ),
    )
    content_types.add_override(PRESENTATION_PATH, CT.PML_PRESENTATION_MAIN)
    content_types.save()

    PackageReindexer(package).reindex(len(definition.layouts))

    manifest = TemplateManifest(
        template_id=definition.template_id,
        file=f"{definition.template_id}.pptx",
        title=definition.title,
        default_layout=definition.default_layout,
        layouts=manifest_layouts,
    )
    data = package.to_bytes()
    log_event(
        log_path,
        "TEMPLATE_AUTHORED",
        {
            "template_id": definition.template_id,
            "layouts": [layout.name for layout in manifest_layouts],
            "bytes": len(data),
        },
    )
    return AuthoredTemplate(data=data, manifest=manifest)
