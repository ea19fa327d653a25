"""Template check contracts."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import Field

from .base import DeckBaseModel

IssueSeverity = Literal["error", "warning"]
IssueCode = Literal[
    "PPTX_EMPTY_FILE",
    "PPTX_INVALID_FORMAT",
    "PPTX_UNREADABLE",
    "NO_LAYOUTS",
    "DUPLICATE_LAYOUT_NAME",
    "DUPLICATE_PLACEHOLDER_KEY",
    "MISSING_SLIDE_PART",
    "MISSING_TAG",
    "UNKNOWN_DEFAULT_LAYOUT",
]


class TemplateIssue(DeckBaseModel):
    code: IssueCode
    severity: IssueSeverity
    message: str
    layout_name: Optional[str] = None
    slide_number: Optional[int] = None


class TemplateCheckReport(DeckBaseModel):
    issues: List[TemplateIssue] = Field(default_factory=list)

    @property
    def errors(self) -> List[TemplateIssue]:
        return [issue for issue in self.issues if issue.severity == "error"]

    @property
    def is_valid(self) -> bool:
        return not self.errors
