"""Template and manifest checks."""

from __future__ import annotations

from typing import List, Optional, Set, Tuple

from lxml import etree
from pptx.oxml.ns import qn

from ..errors import TemplateLoadError
from ..layouts.discovery import discover_layouts
from ..models.manifest import TemplateManifest
from ..models.validation import TemplateCheckReport, TemplateIssue
from ..package.store import Package, slide_path
from ..package.xml import find_tags

ZIP_SIGNATURE = b"PK\x03\x04"


def check_template_bytes(data: bytes) -> List[TemplateIssue]:
    """Return issues with the raw upload; empty list means it looks like a package."""
    if not data:
        return [TemplateIssue(code="PPTX_EMPTY_FILE", severity="error", message="Template file is empty")]
    if not data.startswith(ZIP_SIGNATURE):
        return [
            TemplateIssue(
                code="PPTX_INVALID_FORMAT",
                severity="error",
                message="Template is not a PPTX file (missing zip signature)",
            )
        ]
    return []


def _slide_tags(package: Package, number: int) -> Optional[Set[str]]:
    path = slide_path(number)
    if not package.has(path):
        return None
    # Substitution is literal, so a tag only counts when one run holds all of it.
    tags: Set[str] = set()
    for run_text in package.read_xml(path).iter(qn("a:t")):
        tags.update(find_tags(run_text.text or ""))
    return tags


def check_manifest(package: Package, manifest: TemplateManifest) -> List[TemplateIssue]:
    """Return manifest entries that would not resolve against the package."""
    issues: List[TemplateIssue] = []
    if not manifest.layouts:
        issues.append(
            TemplateIssue(code="NO_LAYOUTS", severity="error", message="Manifest declares no layouts")
        )
        return issues

    seen_names: Set[str] = set()
    for layout in manifest.layouts:
        if layout.name in seen_names:
            issues.append(
                TemplateIssue(
                    code="DUPLICATE_LAYOUT_NAME",
                    severity="error",
                    message=f"Duplicate layout name in manifest: {layout.name}",
                    layout_name=layout.name,
                )
            )
        seen_names.add(layout.name)

        seen_keys: Set[Tuple[str, Optional[int]]] = set()
        for placeholder in layout.placeholders:
            if placeholder.key in seen_keys:
                issues.append(
                    TemplateIssue(
                        code="DUPLICATE_PLACEHOLDER_KEY",
                        severity="error",
                        message=f"Layout {layout.name} repeats placeholder {placeholder.key}",
                        layout_name=layout.name,
                    )
                )
            seen_keys.add(placeholder.key)

        slide_tags = _slide_tags(package, layout.source_slide_number)
        if slide_tags is None:
            issues.append(
                TemplateIssue(
                    code="MISSING_SLIDE_PART",
                    severity="error",
                    message=f"Layout {layout.name} points at missing slide {layout.source_slide_number}",
                    layout_name=layout.name,
                    slide_number=layout.source_slide_number,
                )
            )
            continue
        for tag in layout.tags:
            if tag not in slide_tags:
                issues.append(
                    TemplateIssue(
                        code="MISSING_TAG",
                        severity="warning",
                        message=f"Layout {layout.name} declares {tag} but slide {layout.source_slide_number} does not contain it",
                        layout_name=layout.name,
                        slide_number=layout.source_slide_number,
                    )
                )

    if manifest.default_layout and manifest.layout(manifest.default_layout) is None:
        issues.append(
            TemplateIssue(
                code="UNKNOWN_DEFAULT_LAYOUT",
                severity="warning",
                message=f"default_layout '{manifest.default_layout}' is not a manifest layout",
            )
        )
    return issues


def check_template(data: bytes, manifest: Optional[TemplateManifest] = None) -> TemplateCheckReport:
    """Run every check that applies; without a manifest, discovery must find a layout."""
    issues = check_template_bytes(data)
    if issues:
        return TemplateCheckReport(issues=issues)
    try:
        package = Package.from_bytes(data)
        if manifest is not None:
            issues.extend(check_manifest(package, manifest))
        elif not discover_layouts(package):
            issues.append(
                TemplateIssue(code="NO_LAYOUTS", severity="error", message="No layouts found in template")
            )
    except (TemplateLoadError, etree.XMLSyntaxError) as exc:
        issues.append(TemplateIssue(code="PPTX_UNREADABLE", severity="error", message=str(exc)))
    return TemplateCheckReport(issues=issues)
