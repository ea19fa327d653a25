"""Config model."""

from __future__ import annotations

from pydantic import Field, constr

from .base import DeckBaseModel

NonEmptyStr = constr(min_length=1)


class Config(DeckBaseModel):
    project_root: NonEmptyStr = Field(..., description="Project root directory")
    assets_dir: NonEmptyStr = Field(..., description="Canonical assets directory")
    templates_dir: NonEmptyStr = Field(..., description="Stored PPTX templates directory")
    manifest_path: NonEmptyStr = Field(..., description="Pre-authored layout manifest JSON path")
    layouts_dir: NonEmptyStr = Field(..., description="Template author definitions directory")
    inputs_dir: NonEmptyStr = Field(..., description="Inputs directory")
    runs_dir: NonEmptyStr = Field(..., description="Runs output directory")
    default_template_id: NonEmptyStr = Field(..., description="Template used when none is given")
