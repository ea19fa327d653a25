"""Template identity contracts."""

from __future__ import annotations

from typing import Optional

from .base import DeckBaseModel
from .manifest import TemplateManifest


class TemplateSource(DeckBaseModel):
    """Packaged template bytes, optionally paired with a stored manifest.

    A source with a manifest is resolved by trusting the manifest; a source
    without one forces heuristic discovery.
    """

    template_id: Optional[str] = None
    data: bytes
    manifest: Optional[TemplateManifest] = None
