"""Package-wide bookkeeping after slides are synthesized.

The reindexer owns every cross-part index that depends on the slide set: the
presentation's slide edges and ``sldIdLst``, slide and notes-slide content-type
overrides, speaker notes parts and the extended-properties slide count. Each
step rewrites its index from the current slide parts, so running it twice on the
same package changes nothing.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional

from lxml import etree
from pptx.opc.constants import CONTENT_TYPE as CT
from pptx.opc.constants import RELATIONSHIP_TYPE as RT
from pptx.oxml.ns import qn

from ..errors import TemplateError
from ..package.content_types import ContentTypes
from ..package.relationships import Relationships
from ..package.store import (
    NOTES_SLIDE_PATH_PATTERN,
    Package,
    notes_slide_path,
    numbered_parts,
    rels_path_for,
    slide_path,
)
from ..package.xml import serialize_xml
from .notes import NOTES_MASTER_PATH, default_theme_element, notes_master_element, notes_slide_element

FIRST_SLIDE_ID = 256

_THEME_PATH_PATTERN = re.compile(r"^ppt/theme/theme(\d+)\.xml$")

# Children of p:presentation that precede p:sldIdLst / p:notesMasterIdLst.
_BEFORE_SLIDE_LIST = ("p:sldMasterIdLst", "p:notesMasterIdLst", "p:handoutMasterIdLst")
_BEFORE_NOTES_MASTER_LIST = ("p:sldMasterIdLst",)


def _insert_after(parent: etree._Element, element: etree._Element, predecessors) -> None:
    anchor = None
    for tag in predecessors:
        found = parent.find(qn(tag))
        if found is not None:
            anchor = found
    if anchor is not None:
        anchor.addnext(element)
    else:
        parent.insert(0, element)


def _local_name(element: etree._Element) -> str:
    return etree.QName(element).localname


class PackageReindexer:
    def __init__(self, package: Package) -> None:
        self.package = package
        self.presentation_path = package.main_document_path()

    def reindex(self, slide_count: int, notes: Optional[Dict[int, str]] = None) -> None:
        """Rebuild every slide-dependent index for slides 1..slide_count."""
        slides = [slide_path(n) for n in range(1, slide_count + 1)]
        for path in slides:
            if not self.package.has(path):
                raise TemplateError(f"Cannot reindex: slide part {path} is missing")

        notes = {n: text for n, text in (notes or {}).items() if 1 <= n <= slide_count}
        notes_master = self._ensure_notes_master() if notes else None
        self._relink_slides(slides)
        self._write_notes(slides, notes, notes_master)
        self._rebuild_content_types(slides, notes_master)
        self._update_app_properties(slide_count, len(notes))

    # -- presentation slide list -------------------------------------------------

    def _relink_slides(self, slides: List[str]) -> None:
        rels = Relationships.load(self.package, self.presentation_path)
        rels.remove_type(RT.SLIDE)
        rids = [rels.add(RT.SLIDE, path) for path in slides]
        rels.save()

        root = self.package.read_xml(self.presentation_path)
        sld_id_lst = root.find(qn("p:sldIdLst"))
        if sld_id_lst is None:
            sld_id_lst = etree.Element(qn("p:sldIdLst"))
            _insert_after(root, sld_id_lst, _BEFORE_SLIDE_LIST)
        for child in list(sld_id_lst):
            sld_id_lst.remove(child)
        for offset, rid in enumerate(rids):
            sld_id = etree.SubElement(sld_id_lst, qn("p:sldId"))
            sld_id.set("id", str(FIRST_SLIDE_ID + offset))
            sld_id.set(qn("r:id"), rid)
        self.package.write_xml(self.presentation_path, root)

    # -- speaker notes -------------------------------------------------------------

    def _ensure_notes_master(self) -> str:
        rels = Relationships.load(self.package, self.presentation_path)
        for rel in rels.of_type(RT.NOTES_MASTER):
            path = rels.resolve(rel)
            if self.package.has(path):
                return path
        rels.remove_type(RT.NOTES_MASTER)

        master_path = NOTES_MASTER_PATH
        self.package.write_xml(master_path, notes_master_element())
        theme_path = self._copy_theme(rels)
        master_rels = Relationships.load(self.package, master_path)
        master_rels.add(RT.THEME, theme_path)
        master_rels.save()

        rid = rels.add(RT.NOTES_MASTER, master_path)
        rels.save()

        root = self.package.read_xml(self.presentation_path)
        id_lst = root.find(qn("p:notesMasterIdLst"))
        if id_lst is None:
            id_lst = etree.Element(qn("p:notesMasterIdLst"))
            _insert_after(root, id_lst, _BEFORE_NOTES_MASTER_LIST)
        for child in list(id_lst):
            id_lst.remove(child)
        etree.SubElement(id_lst, qn("p:notesMasterId")).set(qn("r:id"), rid)
        self.package.write_xml(self.presentation_path, root)
        return master_path

    def _copy_theme(self, presentation_rels: Relationships) -> str:
        """Give the notes master its own copy of the presentation theme."""
        data: Optional[bytes] = None
        for rel in presentation_rels.of_type(RT.THEME):
            source = presentation_rels.resolve(rel)
            if self.package.has(source):
                data = self.package.read(source)
                break
        if data is None:
            data = serialize_xml(default_theme_element())

        numbers = [n for n, _ in numbered_parts(self.package, _THEME_PATH_PATTERN)]
        path = f"ppt/theme/theme{max(numbers, default=0) + 1}.xml"
        self.package.write(path, data)
        return path

    def _write_notes(
        self, slides: List[str], notes: Dict[int, str], notes_master: Optional[str]
    ) -> None:
        for number, path in numbered_parts(self.package, NOTES_SLIDE_PATH_PATTERN):
            if number not in notes:
                self.package.delete(rels_path_for(path))
                self.package.delete(path)

        for number, path in enumerate(slides, start=1):
            slide_rels = Relationships.load(self.package, path)
            slide_rels.remove_type(RT.NOTES_SLIDE)
            text = notes.get(number)
            if text is not None and notes_master is not None:
                notes_path = notes_slide_path(number)
                self.package.write_xml(notes_path, notes_slide_element(text))
                notes_rels = Relationships.load(self.package, notes_path)
                notes_rels.remove(lambda rel: True)
                notes_rels.add(RT.NOTES_MASTER, notes_master)
                notes_rels.add(RT.SLIDE, path)
                notes_rels.save()
                slide_rels.add(RT.NOTES_SLIDE, notes_path)
            slide_rels.save()

    # -- content types and properties ---------------------------------------------

    def _rebuild_content_types(self, slides: List[str], notes_master: Optional[str]) -> None:
        content_types = ContentTypes.load(self.package)
        content_types.ensure_default("rels", CT.OPC_RELATIONSHIPS)
        content_types.ensure_default("xml", CT.XML)
        # Stable entries first so slide overrides always trail them.
        if notes_master is not None:
            content_types.add_override(notes_master, CT.PML_NOTES_MASTER)
            master_rels = Relationships.load(self.package, notes_master)
            for rel in master_rels.of_type(RT.THEME):
                content_types.add_override(master_rels.resolve(rel), CT.OFC_THEME)
        content_types.remove_overrides(
            lambda name, ct: ct in (CT.PML_SLIDE, CT.PML_NOTES_SLIDE)
            or not self.package.has(name.lstrip("/"))
        )
        for path in slides:
            content_types.add_override(path, CT.PML_SLIDE)
        for _, path in numbered_parts(self.package, NOTES_SLIDE_PATH_PATTERN):
            content_types.add_override(path, CT.PML_NOTES_SLIDE)
        content_types.save()

    def _app_properties_path(self) -> Optional[str]:
        rels = Relationships.load(self.package, "")
        for rel in rels.of_type(RT.EXTENDED_PROPERTIES):
            path = rels.resolve(rel)
            if self.package.has(path):
                return path
        return None

    def _update_app_properties(self, slide_count: int, notes_count: int) -> None:
        path = self._app_properties_path()
        if path is None:
            return
        root = self.package.read_xml(path)
        counts = {"Slides": slide_count, "Notes": notes_count}
        changed = False
        for child in root:
            if not isinstance(child.tag, str):
                continue
            name = _local_name(child)
            if name in counts:
                child.text = str(counts[name])
                changed = True
        if changed:
            self.package.write_xml(path, root)
