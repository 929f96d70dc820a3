"""Tests for relationship parsing, target resolution and content types."""
import unittest

from docx_engine.parser.docx_loader import DocxPackage, rels_path_for
from docx_engine.parser.rels_parser import (
    RELTYPE_IMAGE,
    ContentTypeTable,
    RelationshipManager,
    RelationshipTable,
)


doc_rels_xml = """
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
  <Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/header" Target="header1.xml"/>
  <Relationship Id="rId2" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/footer" Target="footer1.xml"/>
  <Relationship Id="rId3" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/image" Target="media/image1.png"/>
  <Relationship Id="rId4" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/image" Target="/media/image1.png"/>
  <Relationship Id="rId5" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/hyperlink" Target="https://example.com/a/../b" TargetMode="External"/>
  <Relationship Id="rId6" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/styles" Target="styles.xml"/>
</Relationships>
"""

header_rels_xml = """
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
  <Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/image" Target="../media/image2.png"/>
</Relationships>
"""

content_types_xml = """
<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">
  <Default Extension="xml" ContentType="application/xml"/>
  <Default Extension="PNG" ContentType="image/png"/>
  <Override PartName="/word/document.xml" ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"/>
  <Override PartName="/word/media/special.png" ContentType="image/x-special"/>
</Types>
"""


class RelationshipTableTest(unittest.TestCase):
    """Resolve targets relative to the owning part."""

    def setUp(self) -> None:
        self.table = RelationshipTable.from_xml("word/document.xml", doc_rels_xml)

    def test_relative_target_gets_part_directory(self) -> None:
        self.assertEqual(self.table.resolve_target("rId3"), "word/media/image1.png")

    def test_absolute_target_drops_leading_slash(self) -> None:
        self.assertEqual(self.table.resolve_target("rId4"), "media/image1.png")

    def test_external_target_is_unchanged(self) -> None:
        self.assertEqual(self.table.resolve_target("rId5"), "https://example.com/a/../b")

    def test_unknown_id_resolves_to_none(self) -> None:
        self.assertIsNone(self.table.resolve_target("rId99"))

    def test_parent_directory_segments_are_normalised(self) -> None:
        header = RelationshipTable.from_xml("word/header1.xml", header_rels_xml)
        self.assertEqual(header.resolve_target("rId1"), "media/image2.png")

    def test_relationship_predicates(self) -> None:
        image = self.table.peek("rId3")
        assert image is not None
        self.assertTrue(image.is_image)
        self.assertEqual(image.rel_type, RELTYPE_IMAGE)
        self.assertEqual(image.short_type, "image")
        self.assertTrue(self.table.peek("rId5").is_external)
        self.assertTrue(self.table.peek("rId1").is_header)
        self.assertTrue(self.table.peek("rId2").is_footer)
        self.assertEqual([rel.r_id for rel in self.table.by_type("image")], ["rId3", "rId4"])

    def test_first_target_does_not_mark_reference(self) -> None:
        self.assertEqual(self.table.first_target("styles"), "word/styles.xml")
        self.assertEqual(self.table.referenced_ids, [])

    def test_get_marks_and_peek_does_not(self) -> None:
        self.table.peek("rId7")
        self.assertEqual(self.table.validate_references(), [])
        self.table.get("rId7")
        self.table.get("rId3")
        self.assertEqual(self.table.validate_references(), ["rId7"])
        self.assertEqual(self.table.referenced_ids, ["rId7", "rId3"])

    def test_malformed_rels_yield_empty_table(self) -> None:
        with self.assertLogs("docx_engine.utils.xml_utils", level="WARNING"):
            table = RelationshipTable.from_xml("word/document.xml", "<Relationships><broken")
        self.assertEqual(len(table), 0)
        self.assertIsNone(table.resolve_target("rId1"))

    def test_missing_rels_yield_empty_table(self) -> None:
        self.assertEqual(len(RelationshipTable.from_xml("word/document.xml", None)), 0)


class ContentTypeTableTest(unittest.TestCase):
    """Overrides win over extension defaults."""

    def test_override_then_default(self) -> None:
        table = ContentTypeTable.from_xml(content_types_xml)
        self.assertEqual(table.content_type_for("word/media/special.png"), "image/x-special")
        self.assertEqual(table.content_type_for("/word/media/other.png"), "image/png")
        self.assertEqual(table.content_type_for("word/styles.xml"), "application/xml")
        self.assertIsNone(table.content_type_for("word/media/image.emf"))
        self.assertIsNone(table.content_type_for("word/noextension"))


class RelationshipManagerTest(unittest.TestCase):
    """Per-part tables are loaded lazily and validated together."""

    def setUp(self) -> None:
        self.package = DocxPackage(
            raw_parts={
                "[Content_Types].xml": content_types_xml.encode("utf-8"),
                "word/_rels/document.xml.rels": doc_rels_xml.encode("utf-8"),
                "word/_rels/header1.xml.rels": header_rels_xml.encode("utf-8"),
            }
        )

    def test_rels_path_for(self) -> None:
        self.assertEqual(rels_path_for("word/document.xml"), "word/_rels/document.xml.rels")
        self.assertEqual(rels_path_for(""), "_rels/.rels")

    def test_loading_is_idempotent(self) -> None:
        manager = RelationshipManager(self.package)
        first = manager.load_document_relationships()
        self.assertIs(first, manager.load_document_relationships())
        self.assertIs(manager.load_content_types(), manager.content_types)
        self.assertEqual(len(manager.load_package_relationships()), 0)

    def test_dangling_ids_are_prefixed_outside_document_scope(self) -> None:
        manager = RelationshipManager(self.package)
        manager.document.get("rId42")
        header = manager.for_part("word/header1.xml")
        header.get("rId1")
        header.get("rId9")
        self.assertEqual(manager.validate_references(), ["rId42", "word/header1.xml#rId9"])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
