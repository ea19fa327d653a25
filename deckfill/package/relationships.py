"""Relationship part editing with collision-free id allocation."""

from __future__ import annotations

import re
from typing import Callable, Iterator, List, NamedTuple, Optional

from lxml import etree
from pptx.opc.constants import NAMESPACE as NS

from .store import Package, rels_path_for, relative_target, resolve_target
from .xml import opc_tag, parse_xml, serialize_xml

_RID_PATTERN = re.compile(r"^rId(\d+)$")
_EXTERNAL = "External"


class Relationship(NamedTuple):
    rid: str
    type: str
    target: str
    external: bool = False


def _empty_root() -> etree._Element:
    return etree.Element(opc_tag("Relationships"), nsmap={None: NS.OPC_RELATIONSHIPS})


def empty_relationships_xml() -> bytes:
    return serialize_xml(_empty_root())


class Relationships:
    """Edges owned by one part, backed by its sibling .rels part."""

    def __init__(self, package: Package, source_path: str, root: etree._Element) -> None:
        self._package = package
        self.source_path = source_path
        self._root = root

    @classmethod
    def load(cls, package: Package, source_path: str) -> "Relationships":
        path = rels_path_for(source_path)
        root = parse_xml(package.read(path)) if package.has(path) else _empty_root()
        return cls(package, source_path, root)

    @property
    def path(self) -> str:
        return rels_path_for(self.source_path)

    def __iter__(self) -> Iterator[Relationship]:
        for element in self._root.iter(opc_tag("Relationship")):
            yield Relationship(
                rid=element.get("Id", ""),
                type=element.get("Type", ""),
                target=element.get("Target", ""),
                external=element.get("TargetMode") == _EXTERNAL,
            )

    def __len__(self) -> int:
        return sum(1 for _ in self._root.iter(opc_tag("Relationship")))

    def get(self, rid: str) -> Optional[Relationship]:
        for rel in self:
            if rel.rid == rid:
                return rel
        return None

    def of_type(self, reltype: str) -> List[Relationship]:
        return [rel for rel in self if rel.type == reltype]

    def resolve(self, rel: Relationship) -> str:
        """Return the package path a relationship points at."""
        return resolve_target(self.source_path, rel.target)

    def targets(self, reltype: str) -> List[str]:
        """Package paths of the internal edges of one type, in document order."""
        return [self.resolve(rel) for rel in self.of_type(reltype) if not rel.external]

    def next_rid(self) -> str:
        highest = 0
        for rel in self:
            match = _RID_PATTERN.match(rel.rid)
            if match:
                highest = max(highest, int(match.group(1)))
        return f"rId{highest + 1}"

    def add(self, reltype: str, target_path: str, external: bool = False) -> str:
        """Add an edge to a package path (or external URL) and return its new id."""
        rid = self.next_rid()
        target = target_path if external else relative_target(self.source_path, target_path)
        element = etree.SubElement(self._root, opc_tag("Relationship"))
        element.set("Id", rid)
        element.set("Type", reltype)
        element.set("Target", target)
        if external:
            element.set("TargetMode", _EXTERNAL)
        return rid

    def remove(self, predicate: Callable[[Relationship], bool]) -> List[Relationship]:
        removed: List[Relationship] = []
        for element in list(self._root.iter(opc_tag("Relationship"))):
            rel = Relationship(
                rid=element.get("Id", ""),
                type=element.get("Type", ""),
                target=element.get("Target", ""),
                external=element.get("TargetMode") == _EXTERNAL,
            )
            if predicate(rel):
                self._root.remove(element)
                removed.append(rel)
        return removed

    def remove_type(self, reltype: str) -> List[Relationship]:
        return self.remove(lambda rel: rel.type == reltype)

    def to_xml(self) -> bytes:
        return serialize_xml(self._root)

    def save(self) -> None:
        self._package.write(self.path, self.to_xml())
