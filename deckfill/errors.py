"""Exceptions raised by the template pipeline."""

from __future__ import annotations

from typing import List


class TemplateError(ValueError):
    """Raised when a template cannot be used to generate a deck."""


class TemplateLoadError(TemplateError):
    """Raised when template bytes are unreadable or not a presentation package."""


class NoLayoutsError(TemplateError):
    """Raised when neither the stored manifest nor discovery yields a layout."""


class MissingLayoutSlideError(LookupError):
    """Raised when a layout's backing template slide is absent from the package."""

    def __init__(self, layout_name: str, slide_number: int):
        self.layout_name = layout_name
        self.slide_number = slide_number
        super().__init__(
            f"Template slide {slide_number} for layout '{layout_name}' not found"
        )


class ManifestValidationError(ValueError):
    """Raised when a stored layout manifest is malformed."""

    def __init__(self, issues: List[str]):
        self.issues = [str(i).strip() for i in issues if str(i).strip()]
        if not self.issues:
            self.issues = ["Invalid manifest"]
        super().__init__(self._format())

    def _format(self) -> str:
        lines = ["Manifest validation failed:"]
        for issue in self.issues:
            lines.append(f"- {issue}")
        return "\n".join(lines)
