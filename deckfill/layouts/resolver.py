"""Layout manifest resolution: trust a stored manifest or discover one."""

from __future__ import annotations

from typing import List, Optional, Protocol

from ..errors import NoLayoutsError
from ..models.manifest import LayoutManifestEntry, TemplateManifest
from ..models.report import Resolution
from ..package.store import Package
from .discovery import discover_layouts


class LayoutResolver(Protocol):
    kind: Resolution

    def resolve(self, package: Package) -> List[LayoutManifestEntry]:
        ...


class ManifestResolver:
    """Use a hand-curated manifest verbatim."""

    kind: Resolution = "manifest"

    def __init__(self, manifest: TemplateManifest) -> None:
        self.manifest = manifest

    def resolve(self, package: Package) -> List[LayoutManifestEntry]:
        layouts = list(self.manifest.layouts)
        if not layouts:
            raise NoLayoutsError(
                f"Manifest for template '{self.manifest.template_id}' declares no layouts"
            )
        return layouts


class HeuristicResolver:
    """Discover layouts from the template's own slide parts."""

    kind: Resolution = "heuristic"

    def resolve(self, package: Package) -> List[LayoutManifestEntry]:
        layouts = discover_layouts(package)
        if not layouts:
            raise NoLayoutsError("No layouts found in template")
        return layouts


def select_resolver(manifest: Optional[TemplateManifest]) -> LayoutResolver:
    """Pick the resolution strategy once per template identity."""
    if manifest is not None:
        return ManifestResolver(manifest)
    return HeuristicResolver()
