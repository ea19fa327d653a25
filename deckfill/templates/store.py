"""Stored templates and their pre-authored layout manifests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Optional

from pydantic import ValidationError

from ..author.builder import AuthoredTemplate
from ..errors import ManifestValidationError, TemplateLoadError
from ..models.config import Config
from ..models.manifest import TemplateManifest
from ..models.template import TemplateSource


def load_manifests(path: Path) -> Dict[str, TemplateManifest]:
    """Read a ``template_id -> manifest`` JSON file; a missing file holds none."""
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as handle:
        raw = json.load(handle)
    if not isinstance(raw, dict):
        raise ManifestValidationError([f"{path} must map template ids to manifests"])

    manifests: Dict[str, TemplateManifest] = {}
    issues = []
    for template_id, entry in raw.items():
        try:
            manifests[template_id] = TemplateManifest.model_validate(entry)
        except ValidationError as exc:
            for error in exc.errors():
                location = ".".join(str(part) for part in error["loc"])
                issues.append(f"{template_id}: {location}: {error['msg']}")
            continue
        if manifests[template_id].template_id != template_id:
            issues.append(
                f"{template_id}: template_id field is '{manifests[template_id].template_id}'"
            )
    if issues:
        raise ManifestValidationError(issues)
    return manifests


def save_manifests(path: Path, manifests: Dict[str, TemplateManifest]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {key: manifests[key].to_dict() for key in sorted(manifests)}
    with open(path, "w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, sort_keys=True, ensure_ascii=True)
        handle.write("\n")


class TemplateStore:
    def __init__(self, config: Config) -> None:
        self.templates_dir = Path(config.templates_dir)
        self.manifest_path = Path(config.manifest_path)
        self.default_template_id = config.default_template_id

    def manifests(self) -> Dict[str, TemplateManifest]:
        return load_manifests(self.manifest_path)

    def manifest(self, template_id: str) -> Optional[TemplateManifest]:
        return self.manifests().get(template_id)

    def template_path(self, template_id: str) -> Path:
        manifest = self.manifest(template_id)
        filename = manifest.file if manifest else f"{template_id}.pptx"
        return self.templates_dir / filename

    def load(self, template_id: Optional[str] = None) -> TemplateSource:
        """Load a stored template; a stored manifest, when present, is trusted."""
        template_id = template_id or self.default_template_id
        manifest = self.manifest(template_id)
        path = self.template_path(template_id)
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise TemplateLoadError(f"PPTX template not found at {path}: {exc}") from exc
        return TemplateSource(template_id=template_id, data=data, manifest=manifest)

    @staticmethod
    def from_bytes(data: bytes, template_id: Optional[str] = None) -> TemplateSource:
        """Wrap uploaded bytes; with no manifest, layouts are discovered."""
        return TemplateSource(template_id=template_id, data=data)

    @staticmethod
    def from_path(path: Path) -> TemplateSource:
        try:
            data = Path(path).read_bytes()
        except OSError as exc:
            raise TemplateLoadError(f"PPTX template not found at {path}: {exc}") from exc
        return TemplateSource(template_id=None, data=data)

    def save(self, authored: AuthoredTemplate, template_id: Optional[str] = None) -> Path:
        """Write template bytes and upsert the manifest entry."""
        template_id = template_id or authored.manifest.template_id
        manifest = authored.manifest.model_copy(
            update={"template_id": template_id, "file": f"{template_id}.pptx"}
        )
        self.templates_dir.mkdir(parents=True, exist_ok=True)
        path = self.templates_dir / manifest.file
        path.write_bytes(authored.data)

        manifests = self.manifests()
        manifests[template_id] = manifest
        save_manifests(self.manifest_path, manifests)
        return path
