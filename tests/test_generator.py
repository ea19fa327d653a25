import tempfile
import unittest
from pathlib import Path

from deckfill.logging_utils import read_events
from deckfill.models.content import ContentSlideRecord, GenerationOptions
from deckfill.models.manifest import LayoutManifestEntry
from deckfill.models.template import TemplateSource
from deckfill.package.store import Package
from deckfill.render.generator import DeckGenerator, deck_filename, effective_type
from deckfill.templates.store import TemplateStore

from deck_fixtures import (
    assert_package_consistent,
    open_presentation,
    sample_options,
    sample_records,
    sample_template,
    slide_text,
)


def _manifest_source() -> TemplateSource:
    authored = sample_template()
    return TemplateSource(template_id="sample", data=authored.data, manifest=authored.manifest)


class TestDeckGenerator(unittest.TestCase):
    def test_generates_deck_from_manifest(self) -> None:
        data, report = DeckGenerator(_manifest_source()).generate(sample_records(), sample_options())

        self.assertEqual(report.resolution, "manifest")
        self.assertEqual(report.slide_count, 3)
        self.assertEqual(report.filename, "clinical-reasoning.pptx")
        self.assertTrue(report.complete)
        self.assertEqual(
            [slide.layout_name for slide in report.slides],
            ["title slide", "content slide", "quote"],
        )

        prs = open_presentation(data)
        self.assertEqual(len(prs.slides), 3)
        title_text = slide_text(prs.slides[0])
        self.assertIn("Clinical Reasoning", title_text)
        self.assertIn("Week 1", title_text)
        self.assertIn("2026-10-19", title_text)

        content_text = slide_text(prs.slides[1])
        self.assertIn("Practice matters", content_text)
        self.assertIn("Compare cases", content_text)
        self.assertIn("Name the pivot", content_text)

        quote_text = slide_text(prs.slides[2])
        self.assertIn("Listen to your patient", quote_text)
        self.assertIn("William Osler", quote_text)

        for slide in prs.slides:
            self.assertNotIn("{{", slide_text(slide))

        self.assertEqual(prs.slides[0].notes_slide.notes_text_frame.text, "Welcome everyone.")
        self.assertFalse(prs.slides[1].has_notes_slide)
        self.assertEqual(prs.slides[2].notes_slide.notes_text_frame.text, "Pause here.\nAsk for reactions.")

        assert_package_consistent(self, Package.from_bytes(data))

    def test_heuristic_resolution_without_manifest(self) -> None:
        source = TemplateStore.from_bytes(sample_template().data, template_id="ad-hoc")
        self.assertIsNone(source.manifest)
        data, report = DeckGenerator(source).generate(sample_records(), sample_options())

        self.assertEqual(report.resolution, "heuristic")
        self.assertEqual(report.slide_count, 3)
        prs = open_presentation(data)
        self.assertIn("Practice matters", slide_text(prs.slides[1]))
        self.assertIn("William Osler", slide_text(prs.slides[2]))

    def test_layout_without_backing_slide_is_skipped(self) -> None:
        authored = sample_template()
        layouts = list(authored.manifest.layouts)
        layouts[2] = LayoutManifestEntry(name="quote", source_slide_number=99, placeholders=layouts[2].placeholders)
        manifest = authored.manifest.model_copy(update={"layouts": layouts})
        source = TemplateSource(template_id="sample", data=authored.data, manifest=manifest)

        data, report = DeckGenerator(source).generate(sample_records(), sample_options())
        self.assertEqual(report.slide_count, 2)
        self.assertFalse(report.complete)
        self.assertEqual(report.skipped[0].record_index, 2)
        self.assertEqual(report.skipped[0].layout_name, "quote")

        package = Package.from_bytes(data)
        assert_package_consistent(self, package)
        self.assertEqual(len(open_presentation(data).slides), 2)

    def test_slide_count_independent_of_template_slide_count(self) -> None:
        records = [ContentSlideRecord(semantic_type="assertion", title=f"Point {n}") for n in range(6)]
        data, report = DeckGenerator(_manifest_source()).generate(records, sample_options())
        prs = open_presentation(data)
        self.assertEqual(len(prs.slides), 6)
        self.assertIn("Point 5", slide_text(prs.slides[5]))
        self.assertEqual([slide.output_index for slide in report.slides], [1, 2, 3, 4, 5, 6])

    def test_values_are_xml_escaped(self) -> None:
        records = [ContentSlideRecord(semantic_type="assertion", title="R&D <Q1>", content_lines=['Say "hi"'])]
        data, _ = DeckGenerator(_manifest_source()).generate(records, sample_options())
        text = slide_text(open_presentation(data).slides[0])
        self.assertIn("R&D <Q1>", text)
        self.assertIn('Say "hi"', text)

    def test_output_is_deterministic(self) -> None:
        generator = DeckGenerator(_manifest_source())
        first, _ = generator.generate(sample_records(), sample_options())
        second, _ = generator.generate(sample_records(), sample_options())
        self.assertEqual(first, second)

    def test_empty_records_rejected(self) -> None:
        with self.assertRaises(ValueError):
            DeckGenerator(_manifest_source()).generate([], sample_options())

    def test_render_writes_file_and_logs_events(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            log_path = Path(tmp) / "run_log.jsonl"
            output = Path(tmp) / "out" / "deck.pptx"
            report = DeckGenerator(_manifest_source(), log_path=log_path).render(
                sample_records(), sample_options(), output
            )
            self.assertTrue(output.exists())
            self.assertEqual(report.slide_count, 3)
            self.assertEqual(len(read_events(log_path, "SLIDE_SYNTHESIZED")), 3)
            self.assertEqual(len(read_events(log_path, "GENERATE_DONE")), 1)
            self.assertEqual(read_events(log_path, "LAYOUTS_RESOLVED")[0]["payload"]["resolution"], "manifest")


class TestGeneratorHelpers(unittest.TestCase):
    def test_deck_filename(self) -> None:
        self.assertEqual(deck_filename("Intro: Week 1!"), "intro--week-1-.pptx")

    def test_effective_type_positional_default(self) -> None:
        untyped = ContentSlideRecord(title="x")
        self.assertEqual(effective_type(untyped, 0), "title")
        self.assertEqual(effective_type(untyped, 3), "default")
        self.assertEqual(effective_type(ContentSlideRecord(semantic_type="quote", title="x"), 0), "quote")

    def test_options_require_title(self) -> None:
        with self.assertRaises(ValueError):
            GenerationOptions(title="")


if __name__ == "__main__":
    unittest.main()
