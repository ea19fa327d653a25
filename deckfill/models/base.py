"""Shared Pydantic base model helpers."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict

ModelT = TypeVar("ModelT", bound="DeckBaseModel")


class DeckBaseModel(BaseModel):
    """Base model enforcing strict fields and stable JSON output."""

    model_config = ConfigDict(extra="forbid")

    def to_dict(self) -> dict[str, Any]:
        """Return a deterministic dict representation."""
        return self.model_dump(by_alias=True, exclude_none=False, mode="json")

    def to_json(self, indent: Optional[int] = None) -> str:
        """Return deterministic JSON with sorted keys."""
        return json.dumps(self.to_dict(), sort_keys=True, ensure_ascii=True, indent=indent)

    @classmethod
    def from_json_file(cls: Type[ModelT], path: Path) -> ModelT:
        with open(path, "r", encoding="utf-8") as handle:
            return cls.model_validate(json.load(handle))
