"""Content-type registry ([Content_Types].xml) editing."""

from __future__ import annotations

import posixpath
from typing import Callable, Dict, Optional

from lxml import etree
from pptx.opc.constants import NAMESPACE as NS

from .store import CONTENT_TYPES_PATH, Package, partname
from .xml import opc_tag, parse_xml, serialize_xml


def _tag(local_name: str) -> str:
    return opc_tag(local_name, NS.OPC_CONTENT_TYPES)


class ContentTypes:
    def __init__(self, package: Package, root: etree._Element) -> None:
        self._package = package
        self._root = root

    @classmethod
    def load(cls, package: Package) -> "ContentTypes":
        if package.has(CONTENT_TYPES_PATH):
            root = parse_xml(package.read(CONTENT_TYPES_PATH))
        else:
            root = etree.Element(_tag("Types"), nsmap={None: NS.OPC_CONTENT_TYPES})
        return cls(package, root)

    def defaults(self) -> Dict[str, str]:
        return {
            element.get("Extension", "").lower(): element.get("ContentType", "")
            for element in self._root.iter(_tag("Default"))
        }

    def overrides(self) -> Dict[str, str]:
        return {
            element.get("PartName", ""): element.get("ContentType", "")
            for element in self._root.iter(_tag("Override"))
        }

    def content_type_for(self, part_path: str) -> Optional[str]:
        override = self.overrides().get(partname(part_path))
        if override:
            return override
        extension = posixpath.splitext(part_path)[1].lstrip(".").lower()
        return self.defaults().get(extension)

    def ensure_default(self, extension: str, content_type: str) -> None:
        if extension.lower() in self.defaults():
            return
        element = etree.Element(_tag("Default"))
        element.set("Extension", extension)
        element.set("ContentType", content_type)
        # Defaults precede overrides in the registry.
        overrides = list(self._root.iter(_tag("Override")))
        if overrides:
            overrides[0].addprevious(element)
        else:
            self._root.append(element)

    def add_override(self, part_path: str, content_type: str) -> None:
        name = partname(part_path)
        for element in self._root.iter(_tag("Override")):
            if element.get("PartName") == name:
                element.set("ContentType", content_type)
                return
        element = etree.SubElement(self._root, _tag("Override"))
        element.set("PartName", name)
        element.set("ContentType", content_type)

    def remove_overrides(self, predicate: Callable[[str, str], bool]) -> int:
        """Remove overrides for which predicate(partname, content_type) is true."""
        removed = 0
        for element in list(self._root.iter(_tag("Override"))):
            if predicate(element.get("PartName", ""), element.get("ContentType", "")):
                self._root.remove(element)
                removed += 1
        return removed

    def count(self, content_type: str) -> int:
        return sum(1 for ct in self.overrides().values() if ct == content_type)

    def save(self) -> None:
        self._package.write(CONTENT_TYPES_PATH, serialize_xml(self._root))
