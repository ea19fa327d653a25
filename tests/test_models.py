"""Model validation tests."""

import unittest

from pydantic import ValidationError

from deckfill.models import (
    ContentSlideRecord,
    GenerationReport,
    LayoutManifestEntry,
    Placeholder,
    RenderedSlide,
    SkippedRecord,
    TemplateCheckReport,
    TemplateIssue,
    TemplateManifest,
    TextReplacement,
)


class TestModels(unittest.TestCase):
    def test_content_record_minimal(self) -> None:
        record = ContentSlideRecord(title="Title")
        self.assertIsNone(record.semantic_type)
        self.assertEqual(record.content_lines, [])

    def test_content_record_is_frozen(self) -> None:
        record = ContentSlideRecord(title="Title")
        with self.assertRaises(ValidationError):
            record.title = "Other"

    def test_content_record_rejects_empty_type(self) -> None:
        with self.assertRaises(ValidationError):
            ContentSlideRecord(semantic_type="", title="Title")

    def test_manifest_roundtrip_json(self) -> None:
        manifest = TemplateManifest(
            template_id="course",
            file="course.pptx",
            default_layout="content slide",
            layouts=[
                LayoutManifestEntry(
                    name="content slide",
                    source_slide_number=2,
                    is_default=True,
                    placeholders=[
                        Placeholder(type="title", tag="{{SLIDE_TITLE}}"),
                        Placeholder(type="body", idx=1, tag="{{MAIN_CONTENT}}"),
                    ],
                )
            ],
        )
        round_tripped = TemplateManifest.model_validate_json(manifest.to_json())
        self.assertEqual(round_tripped, manifest)
        self.assertEqual(round_tripped.layout("content slide").tags, ["{{SLIDE_TITLE}}", "{{MAIN_CONTENT}}"])
        self.assertIsNone(round_tripped.layout("missing"))

    def test_layout_slide_numbers_are_one_based(self) -> None:
        with self.assertRaises(ValidationError):
            LayoutManifestEntry(name="x", source_slide_number=0)

    def test_placeholder_key(self) -> None:
        placeholder = Placeholder(type="textbox", idx=2, tag="{{DATE}}")
        self.assertEqual(placeholder.key, ("textbox", 2))
        self.assertTrue(placeholder.is_pattern)

    def test_manifest_rejects_unknown_fields(self) -> None:
        with self.assertRaises(ValidationError):
            TemplateManifest(template_id="t", file="t.pptx", slides=[])

    def test_report_completeness(self) -> None:
        report = GenerationReport(
            resolution="heuristic",
            record_count=2,
            slide_count=1,
            filename="deck.pptx",
            slides=[
                RenderedSlide(
                    output_index=1,
                    record_index=0,
                    semantic_type="title",
                    layout_name="title slide",
                    source_slide_number=1,
                )
            ],
            skipped=[SkippedRecord(record_index=1, semantic_type="quote", reason="missing slide")],
        )
        self.assertFalse(report.complete)
        self.assertIn('"resolution": "heuristic"', report.to_json())

    def test_report_rejects_unknown_resolution(self) -> None:
        with self.assertRaises(ValidationError):
            GenerationReport(resolution="guess", record_count=0, slide_count=0, filename="x.pptx")

    def test_check_report_validity(self) -> None:
        warning = TemplateIssue(code="MISSING_TAG", severity="warning", message="m")
        self.assertTrue(TemplateCheckReport(issues=[warning]).is_valid)
        with self.assertRaises(ValidationError):
            TemplateIssue(code="MISSING_TAG", severity="BAD", message="m")

    def test_replacement_requires_tag(self) -> None:
        with self.assertRaises(ValidationError):
            TextReplacement(tag="", value="x")


if __name__ == "__main__":
    unittest.main()
