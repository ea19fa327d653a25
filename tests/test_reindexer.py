import unittest

from pptx.opc.constants import CONTENT_TYPE as CT
from pptx.opc.constants import RELATIONSHIP_TYPE as RT
from pptx.oxml.ns import qn

from deckfill.errors import TemplateError
from deckfill.package.content_types import ContentTypes
from deckfill.package.relationships import Relationships
from deckfill.package.store import Package
from deckfill.render.reindexer import FIRST_SLIDE_ID, PackageReindexer
from deckfill.render.synthesizer import SlideSynthesizer, clear_template_slides, snapshot_template_slides

from deck_fixtures import assert_package_consistent, open_presentation, sample_template


class TestPackageReindexer(unittest.TestCase):
    def setUp(self) -> None:
        authored = sample_template()
        self.layouts = authored.manifest.layouts
        self.package = Package.from_bytes(authored.data)

    def _synthesize(self, count: int) -> None:
        snapshot = snapshot_template_slides(self.package, self.layouts)
        clear_template_slides(self.package)
        synthesizer = SlideSynthesizer(self.package, snapshot)
        for index in range(1, count + 1):
            synthesizer.synthesize(self.layouts[1], [], index)

    def test_slide_list_and_edges_are_rebuilt(self) -> None:
        self._synthesize(5)
        PackageReindexer(self.package).reindex(5)
        assert_package_consistent(self, self.package)

        presentation = self.package.read_xml("ppt/presentation.xml")
        ids = [int(el.get("id")) for el in presentation.find(qn("p:sldIdLst"))]
        self.assertEqual(ids, list(range(FIRST_SLIDE_ID, FIRST_SLIDE_ID + 5)))

        rels = Relationships.load(self.package, "ppt/presentation.xml")
        rids = [rel.rid for rel in rels]
        self.assertEqual(len(rids), len(set(rids)))
        self.assertEqual(
            [rels.resolve(rels.get(el.get(qn("r:id")))) for el in presentation.find(qn("p:sldIdLst"))],
            [f"ppt/slides/slide{n}.xml" for n in range(1, 6)],
        )

    def test_fewer_slides_than_template(self) -> None:
        self._synthesize(1)
        PackageReindexer(self.package).reindex(1)
        assert_package_consistent(self, self.package)
        self.assertEqual(ContentTypes.load(self.package).count(CT.PML_SLIDE), 1)
        self.assertEqual(len(open_presentation(self.package.to_bytes()).slides), 1)

    def test_reindex_is_idempotent(self) -> None:
        self._synthesize(3)
        notes = {1: "One", 3: "Three"}
        PackageReindexer(self.package).reindex(3, notes)
        first = self.package.to_bytes()
        PackageReindexer(self.package).reindex(3, notes)
        self.assertEqual(self.package.to_bytes(), first)

    def test_notes_parts_and_master(self) -> None:
        self._synthesize(3)
        PackageReindexer(self.package).reindex(3, {2: "Only the middle slide", 7: "ignored"})
        assert_package_consistent(self, self.package)

        self.assertEqual(self.package.names("ppt/notesSlides/notesSlide"), ["ppt/notesSlides/notesSlide2.xml"])
        content_types = ContentTypes.load(self.package)
        self.assertEqual(content_types.count(CT.PML_NOTES_SLIDE), 1)
        self.assertEqual(content_types.count(CT.PML_NOTES_MASTER), 1)

        slide_rels = Relationships.load(self.package, "ppt/slides/slide2.xml")
        notes_rel = slide_rels.of_type(RT.NOTES_SLIDE)[0]
        self.assertEqual(slide_rels.resolve(notes_rel), "ppt/notesSlides/notesSlide2.xml")
        self.assertEqual(Relationships.load(self.package, "ppt/slides/slide1.xml").of_type(RT.NOTES_SLIDE), [])

        prs = open_presentation(self.package.to_bytes())
        self.assertEqual(prs.slides[1].notes_slide.notes_text_frame.text, "Only the middle slide")
        self.assertFalse(prs.slides[0].has_notes_slide)

    def test_app_properties_count_slides(self) -> None:
        self._synthesize(2)
        PackageReindexer(self.package).reindex(2, {1: "n"})
        app = self.package.read_text("docProps/app.xml")
        self.assertIn("<Slides>2</Slides>", app)
        self.assertIn("<Notes>1</Notes>", app)

    def test_missing_slide_part(self) -> None:
        self._synthesize(1)
        with self.assertRaises(TemplateError):
            PackageReindexer(self.package).reindex(2)


if __name__ == "__main__":
    unittest.main()
