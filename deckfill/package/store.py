"""In-memory part store for a zip-structured presentation package."""

from __future__ import annotations

import io
import posixpath
import re
import zipfile
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

from lxml import etree
from pptx.opc.constants import RELATIONSHIP_TYPE as RT

from ..errors import TemplateLoadError
from .xml import opc_tag, parse_xml, serialize_xml

CONTENT_TYPES_PATH = "[Content_Types].xml"
ROOT_RELS_PATH = "_rels/.rels"

# Fixed entry timestamp keeps serialization byte-stable across runs.
_ZIP_DATE_TIME = (1980, 1, 1, 0, 0, 0)

PartData = Union[str, bytes]


def rels_path_for(part_path: str) -> str:
    """Return the sibling relationship part path, e.g. ppt/_rels/presentation.xml.rels."""
    if not part_path:
        return ROOT_RELS_PATH
    directory, name = posixpath.split(part_path)
    return posixpath.join(directory, "_rels", f"{name}.rels")


def partname(part_path: str) -> str:
    """Return the content-type registry form of a part path (leading slash)."""
    return "/" + part_path.lstrip("/")


def resolve_target(source_path: str, target: str) -> str:
    """Resolve a relationship target relative to the part that owns it."""
    if target.startswith("/"):
        return target.lstrip("/")
    base = posixpath.dirname(source_path)
    return posixpath.normpath(posixpath.join(base, target))


def relative_target(source_path: str, target_path: str) -> str:
    base = posixpath.dirname(source_path)
    if not base:
        return target_path
    return posixpath.relpath(target_path, base)


class Package:
    """Ordered map of part path to content for one document instance."""

    def __init__(self, parts: Optional[Dict[str, bytes]] = None) -> None:
        self._parts: Dict[str, bytes] = dict(parts or {})

    @classmethod
    def from_bytes(cls, data: bytes) -> "Package":
        parts: Dict[str, bytes] = {}
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as archive:
                for info in archive.infolist():
                    if info.is_dir():
                        continue
                    parts[info.filename] = archive.read(info)
        except (zipfile.BadZipFile, NotImplementedError, ValueError) as exc:
            raise TemplateLoadError(f"Template is not a valid package: {exc}") from exc

        if CONTENT_TYPES_PATH not in parts:
            raise TemplateLoadError(f"Template package has no {CONTENT_TYPES_PATH}")
        if ROOT_RELS_PATH not in parts:
            raise TemplateLoadError(f"Template package has no {ROOT_RELS_PATH}")
        return cls(parts)

    @classmethod
    def from_path(cls, path: Path) -> "Package":
        try:
            data = Path(path).read_bytes()
        except OSError as exc:
            raise TemplateLoadError(f"Template not readable at {path}: {exc}") from exc
        return cls.from_bytes(data)

    def __contains__(self, path: str) -> bool:
        return path in self._parts

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._parts))

    def __len__(self) -> int:
        return len(self._parts)

    def has(self, path: str) -> bool:
        return path in self._parts

    def names(self, prefix: str = "") -> List[str]:
        return [name for name in self._parts if name.startswith(prefix)]

    def read(self, path: str) -> bytes:
        try:
            return self._parts[path]
        except KeyError:
            raise KeyError(f"Part not found: {path}") from None

    def read_text(self, path: str) -> str:
        return self.read(path).decode("utf-8")

    def read_xml(self, path: str) -> etree._Element:
        return parse_xml(self.read(path))

    def write(self, path: str, data: PartData) -> None:
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._parts[path] = data

    def write_xml(self, path: str, element: etree._Element) -> None:
        self._parts[path] = serialize_xml(element)

    def delete(self, path: str) -> bool:
        return self._parts.pop(path, None) is not None

    def main_document_path(self) -> str:
        """Return the part the root relationships mark as the office document."""
        root = self.read_xml(ROOT_RELS_PATH)
        for rel in root.iter(opc_tag("Relationship")):
            if rel.get("Type") == RT.OFFICE_DOCUMENT:
                return resolve_target("", rel.get("Target", ""))
        raise TemplateLoadError("Package has no main document relationship")

    def to_bytes(self) -> bytes:
        ordered = sorted(self._parts, key=lambda name: name != CONTENT_TYPES_PATH)
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
            for name in ordered:
                info = zipfile.ZipInfo(name, date_time=_ZIP_DATE_TIME)
                info.compress_type = zipfile.ZIP_DEFLATED
                archive.writestr(info, self._parts[name])
        return buffer.getvalue()


SLIDE_PATH_PATTERN = re.compile(r"^ppt/slides/slide(\d+)\.xml$")
NOTES_SLIDE_PATH_PATTERN = re.compile(r"^ppt/notesSlides/notesSlide(\d+)\.xml$")


def slide_path(number: int) -> str:
    return f"ppt/slides/slide{number}.xml"


def notes_slide_path(number: int) -> str:
    return f"ppt/notesSlides/notesSlide{number}.xml"


def numbered_parts(package: Package, pattern: "re.Pattern[str]") -> List[Tuple[int, str]]:
    """Return (number, path) for parts matching pattern, sorted by number."""
    found: List[Tuple[int, str]] = []
    for name in package.names():
        match = pattern.match(name)
        if match:
            found.append((int(match.group(1)), name))
    return sorted(found)
