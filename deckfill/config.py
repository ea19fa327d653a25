"""Runtime configuration loader."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .models.config import Config

DEFAULT_TEMPLATE_ID = "course-template-v1"


def _require_path(path: Path, label: str) -> None:
    if not path.exists():
        raise FileNotFoundError(f"Missing {label}: {path}")


def load_config(
    project_root: Optional[Path] = None, default_template_id: str = DEFAULT_TEMPLATE_ID
) -> Config:
    """Load configuration with canonical defaults and validate paths."""
    root = project_root or Path(__file__).resolve().parents[1]
    assets_dir = root / "assets"
    templates_dir = assets_dir / "templates"
    manifest_path = assets_dir / "manifests" / "pptx-manifest.json"

    _require_path(templates_dir, "templates_dir")
    _require_path(manifest_path, "layout_manifest")

    return Config(
        project_root=str(root),
        assets_dir=str(assets_dir),
        templates_dir=str(templates_dir),
        manifest_path=str(manifest_path),
        layouts_dir=str(assets_dir / "layouts"),
        inputs_dir=str(root / "inputs"),
        runs_dir=str(root / "runs"),
        default_template_id=default_template_id,
    )
