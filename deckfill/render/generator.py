"""Content records + template to PPTX deck generator."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from ..errors import MissingLayoutSlideError
from ..layouts.matcher import LayoutMatcher
from ..layouts.resolver import select_resolver
from ..logging_utils import log_event
from ..models.content import ContentSlideRecord, GenerationOptions
from ..models.report import GenerationReport, RenderedSlide, SkippedRecord
from ..models.template import TemplateSource
from ..package.store import Package
from .populator import populate
from .reindexer import PackageReindexer
from .synthesizer import SlideSynthesizer, clear_template_slides, snapshot_template_slides


def deck_filename(title: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "-", title).lower() + ".pptx"


def effective_type(record: ContentSlideRecord, index: int) -> str:
    """Records without a semantic type open as a title slide, then default."""
    if record.semantic_type:
        return record.semantic_type
    return "title" if index == 0 else "default"


class DeckGenerator:
    def __init__(self, source: TemplateSource, log_path: Optional[Path] = None) -> None:
        self.source = source
        self.log_path = log_path

    def generate(
        self, records: Sequence[ContentSlideRecord], options: GenerationOptions
    ) -> Tuple[bytes, GenerationReport]:
        """Generate a deck and return its bytes with a per-record report."""
        if not records:
            raise ValueError("At least one content slide record is required")

        package = Package.from_bytes(self.source.data)
        log_event(
            self.log_path,
            "TEMPLATE_LOADED",
            {"template_id": self.source.template_id, "part_count": len(package)},
        )

        resolver = select_resolver(self.source.manifest)
        layouts = resolver.resolve(package)
        log_event(
            self.log_path,
            "LAYOUTS_RESOLVED",
            {"resolution": resolver.kind, "layouts": [layout.name for layout in layouts]},
        )

        default_layout = self.source.manifest.default_layout if self.source.manifest else None
        matcher = LayoutMatcher(layouts, default_layout)
        template_slides = snapshot_template_slides(package, layouts)
        clear_template_slides(package)
        synthesizer = SlideSynthesizer(package, template_slides)

        rendered: List[RenderedSlide] = []
        skipped: List[SkippedRecord] = []
        notes: Dict[int, str] = {}
        for index, record in enumerate(records):
            semantic_type = effective_type(record, index)
            layout = matcher.match(semantic_type)
            replacements = populate(layout, record, options)
            output_index = len(rendered) + 1
            try:
                synthesizer.synthesize(layout, replacements, output_index)
            except MissingLayoutSlideError as exc:
                skipped.append(
                    SkippedRecord(
                        record_index=index,
                        semantic_type=semantic_type,
                        layout_name=layout.name,
                        reason=str(exc),
                    )
                )
                log_event(self.log_path, "RECORD_SKIPPED", skipped[-1].to_dict())
                continue

            rendered.append(
                RenderedSlide(
                    output_index=output_index,
                    record_index=index,
                    semantic_type=semantic_type,
                    layout_name=layout.name,
                    source_slide_number=layout.source_slide_number,
                    tags=[r.tag for r in replacements],
                )
            )
            if record.notes and record.notes.strip():
                notes[output_index] = record.notes
            log_event(self.log_path, "SLIDE_SYNTHESIZED", rendered[-1].to_dict())

        PackageReindexer(package).reindex(len(rendered), notes)
        log_event(
            self.log_path,
            "REINDEX_DONE",
            {"slide_count": len(rendered), "notes_count": len(notes)},
        )

        data = package.to_bytes()
        report = GenerationReport(
            template_id=self.source.template_id,
            resolution=resolver.kind,
            record_count=len(records),
            slide_count=len(rendered),
            filename=deck_filename(options.title),
            slides=rendered,
            skipped=skipped,
        )
        log_event(
            self.log_path,
            "GENERATE_DONE",
            {
                "slide_count": report.slide_count,
                "skipped": len(report.skipped),
                "bytes": len(data),
            },
        )
        return data, report

    def render(
        self,
        records: Sequence[ContentSlideRecord],
        options: GenerationOptions,
        output_path: Path,
    ) -> GenerationReport:
        """Generate a deck and write it to output_path."""
        data, report = self.generate(records, options)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(data)
        return report
