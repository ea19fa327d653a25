"""Zip-of-XML-parts presentation package access."""

from .content_types import ContentTypes
from .relationships import Relationship, Relationships, empty_relationships_xml
from .store import (
    CONTENT_TYPES_PATH,
    ROOT_RELS_PATH,
    NOTES_SLIDE_PATH_PATTERN,
    SLIDE_PATH_PATTERN,
    Package,
    notes_slide_path,
    numbered_parts,
    partname,
    rels_path_for,
    relative_target,
    resolve_target,
    slide_path,
)

__all__ = [
    "CONTENT_TYPES_PATH",
    "NOTES_SLIDE_PATH_PATTERN",
    "ROOT_RELS_PATH",
    "SLIDE_PATH_PATTERN",
    "ContentTypes",
    "Package",
    "Relationship",
    "Relationships",
    "empty_relationships_xml",
    "notes_slide_path",
    "numbered_parts",
    "partname",
    "rels_path_for",
    "relative_target",
    "resolve_target",
    "slide_path",
]
