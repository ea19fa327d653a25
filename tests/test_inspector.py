import unittest

from deckfill.author.inspector import PREVIEW_LENGTH, inspect_package
from deckfill.errors import TemplateLoadError
from deckfill.models.content import ContentSlideRecord
from deckfill.models.template import TemplateSource
from deckfill.package.store import Package
from deckfill.render.generator import DeckGenerator

from deck_fixtures import sample_options, sample_records, sample_template


class TestInspectPackage(unittest.TestCase):
    def test_template_summary(self) -> None:
        summary = inspect_package(sample_template().data)
        self.assertEqual(summary.slide_count, 3)
        self.assertEqual(summary.layout_count, 3)
        self.assertEqual(summary.media, [])
        self.assertIsNone(summary.thumbnail)

        first = summary.slides[0]
        self.assertEqual(first.number, 1)
        self.assertEqual(first.path, "ppt/slides/slide1.xml")
        self.assertEqual(first.layout_path, "ppt/slideLayouts/slideLayout1.xml")
        self.assertEqual(first.title, "{{COURSE_TITLE}}")
        self.assertEqual(first.shape_count, 3)
        self.assertFalse(first.has_notes)

        quote = summary.slides[2]
        self.assertIsNone(quote.title)
        self.assertIn("{{QUOTE_TEXT}}", quote.text_preview)

    def test_generated_deck_summary(self) -> None:
        authored = sample_template()
        source = TemplateSource(template_id="sample", data=authored.data, manifest=authored.manifest)
        data, _ = DeckGenerator(source).generate(sample_records(), sample_options())

        summary = inspect_package(data)
        self.assertEqual(summary.slide_count, 3)
        self.assertEqual(summary.slides[0].title, "Clinical Reasoning")
        self.assertEqual([slide.has_notes for slide in summary.slides], [True, False, True])

    def test_escaped_title_reads_back_literally(self) -> None:
        authored = sample_template()
        source = TemplateSource(template_id="sample", data=authored.data, manifest=authored.manifest)
        record = ContentSlideRecord(semantic_type="assertion", title="Q&A <Session>", content_lines=["Open floor"])
        data, _ = DeckGenerator(source).generate([record], sample_options())

        slide_xml = Package.from_bytes(data).read_text("ppt/slides/slide1.xml")
        self.assertIn("Q&amp;A &lt;Session&gt;", slide_xml)
        self.assertNotIn("Q&A <Session>", slide_xml)
        self.assertEqual(inspect_package(data).slides[0].title, "Q&A <Session>")

    def test_value_holding_another_tag_stays_literal(self) -> None:
        authored = sample_template()
        source = TemplateSource(template_id="sample", data=authored.data, manifest=authored.manifest)
        record = ContentSlideRecord(semantic_type="assertion", title="Use {{MAIN_CONTENT}} here", content_lines=["body"])
        data, _ = DeckGenerator(source).generate([record], sample_options())

        self.assertEqual(inspect_package(data).slides[0].title, "Use {{MAIN_CONTENT}} here")

    def test_preview_is_truncated(self) -> None:
        authored = sample_template()
        source = TemplateSource(template_id="sample", data=authored.data, manifest=authored.manifest)
        record = ContentSlideRecord(semantic_type="assertion", title="Long", content_lines=["word " * 100])
        data, _ = DeckGenerator(source).generate([record], sample_options())

        preview = inspect_package(data).slides[0].text_preview
        self.assertLessEqual(len(preview), PREVIEW_LENGTH)
        self.assertTrue(preview.endswith("..."))

    def test_rejects_non_package(self) -> None:
        with self.assertRaises(TemplateLoadError):
            inspect_package(b"nope")


if __name__ == "__main__":
    unittest.main()
