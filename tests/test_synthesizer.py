import unittest

from pptx.opc.constants import RELATIONSHIP_TYPE as RT

from deckfill.errors import MissingLayoutSlideError
from deckfill.models.content import TextReplacement
from deckfill.models.manifest import LayoutManifestEntry
from deckfill.package.relationships import Relationships
from deckfill.package.store import Package
from deckfill.render.reindexer import PackageReindexer
from deckfill.render.synthesizer import (
    SlideSynthesizer,
    apply_replacements,
    clear_template_slides,
    snapshot_template_slides,
)

from deck_fixtures import sample_template


class TestApplyReplacements(unittest.TestCase):
    def test_values_are_escaped(self) -> None:
        xml = "<a:t>{{SLIDE_TITLE}}</a:t>"
        result = apply_replacements(xml, [TextReplacement(tag="{{SLIDE_TITLE}}", value='R&D <Q1> "plan"')])
        self.assertEqual(result, "<a:t>R&amp;D &lt;Q1&gt; &quot;plan&quot;</a:t>")

    def test_every_occurrence_is_replaced(self) -> None:
        xml = "<a:t>{{A}}</a:t><a:t>{{A}} and {{B}}</a:t>"
        result = apply_replacements(xml, [TextReplacement(tag="{{A}}", value="x")])
        self.assertEqual(result, "<a:t>x</a:t><a:t>x and {{B}}</a:t>")

    def test_inserted_values_are_not_substituted_again(self) -> None:
        xml = "<a:t>{{SLIDE_TITLE}}</a:t><a:t>{{MAIN_CONTENT}}</a:t>"
        replacements = [
            TextReplacement(tag="{{SLIDE_TITLE}}", value="Use {{MAIN_CONTENT}} here"),
            TextReplacement(tag="{{MAIN_CONTENT}}", value="body"),
        ]
        result = apply_replacements(xml, replacements)
        self.assertEqual(result, "<a:t>Use {{MAIN_CONTENT}} here</a:t><a:t>body</a:t>")

    def test_first_replacement_for_a_tag_wins(self) -> None:
        replacements = [TextReplacement(tag="{{A}}", value="one"), TextReplacement(tag="{{A}}", value="two")]
        self.assertEqual(apply_replacements("<a:t>{{A}}</a:t>", replacements), "<a:t>one</a:t>")

    def test_tag_with_apostrophe_matches_raw_text(self) -> None:
        xml = "<a:t>{{O'NEIL}}</a:t>"
        result = apply_replacements(xml, [TextReplacement(tag="{{O'NEIL}}", value="Pat")])
        self.assertEqual(result, "<a:t>Pat</a:t>")

    def test_no_replacements_leaves_xml_untouched(self) -> None:
        self.assertEqual(apply_replacements("<a:t>{{A}}</a:t>", []), "<a:t>{{A}}</a:t>")


class TestSlideSynthesizer(unittest.TestCase):
    def setUp(self) -> None:
        authored = sample_template()
        self.layouts = authored.manifest.layouts
        self.package = Package.from_bytes(authored.data)
        self.snapshot = snapshot_template_slides(self.package, self.layouts)

    def test_snapshot_covers_every_layout_slide(self) -> None:
        self.assertEqual(sorted(self.snapshot), [1, 2, 3])
        self.assertIsNotNone(self.snapshot[2].rels_xml)

    def test_clear_removes_slides_and_their_notes(self) -> None:
        PackageReindexer(self.package).reindex(3, {1: "First", 3: "Third"})
        self.assertTrue(self.package.has("ppt/notesSlides/notesSlide1.xml"))

        clear_template_slides(self.package)
        self.assertEqual(self.package.names("ppt/slides/"), [])
        self.assertEqual(self.package.names("ppt/notesSlides/"), [])
        self.assertTrue(self.package.has("ppt/notesMasters/notesMaster1.xml"))

    def test_synthesize_clones_and_substitutes(self) -> None:
        clear_template_slides(self.package)
        synthesizer = SlideSynthesizer(self.package, self.snapshot)
        content = self.layouts[1]
        path = synthesizer.synthesize(
            content,
            [TextReplacement(tag="{{SLIDE_TITLE}}", value="Vitals"), TextReplacement(tag="{{MAIN_CONTENT}}", value="• Pulse")],
            output_index=1,
        )
        self.assertEqual(path, "ppt/slides/slide1.xml")
        xml = self.package.read_text(path)
        self.assertIn("Vitals", xml)
        self.assertNotIn("{{SLIDE_TITLE}}", xml)

        rels = Relationships.load(self.package, path)
        self.assertEqual(len(rels.of_type(RT.SLIDE_LAYOUT)), 1)
        self.assertEqual(rels.of_type(RT.NOTES_SLIDE), [])
        self.assertEqual(rels.resolve(rels.of_type(RT.SLIDE_LAYOUT)[0]), "ppt/slideLayouts/slideLayout2.xml")

    def test_one_layout_can_back_several_output_slides(self) -> None:
        clear_template_slides(self.package)
        synthesizer = SlideSynthesizer(self.package, self.snapshot)
        for index in (1, 2, 3):
            synthesizer.synthesize(self.layouts[1], [TextReplacement(tag="{{SLIDE_TITLE}}", value=f"S{index}")], index)
        self.assertIn("S3", self.package.read_text("ppt/slides/slide3.xml"))
        self.assertIn("S1", self.package.read_text("ppt/slides/slide1.xml"))

    def test_missing_backing_slide(self) -> None:
        synthesizer = SlideSynthesizer(self.package, self.snapshot)
        orphan = LayoutManifestEntry(name="ghost", source_slide_number=99)
        with self.assertRaises(MissingLayoutSlideError) as ctx:
            synthesizer.synthesize(orphan, [], output_index=1)
        self.assertEqual(ctx.exception.slide_number, 99)
        self.assertEqual(ctx.exception.layout_name, "ghost")


if __name__ == "__main__":
    unittest.main()
