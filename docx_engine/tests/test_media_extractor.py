"""Test cases for image payload resolution."""

import unittest
from unittest.mock import Mock

from docx_engine.parser.docx_loader import DocxPackage
from docx_engine.parser.media_extractor import MediaResolver
from docx_engine.parser.rels_parser import ContentTypeTable, Relationship, RelationshipTable

IMAGE_TYPE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/image"
PNG_DATA = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"


class MediaResolverTest(unittest.TestCase):
    """Payloads come from the archive; media types from the content-type table."""

    def setUp(self) -> None:
        self.package = Mock(spec=DocxPackage)
        self.package.get_part_data.return_value = PNG_DATA
        self.content_types = ContentTypeTable(
            defaults={"png": "image/png"},
            overrides={"word/media/chart.bin": "image/x-custom"},
        )
        self.relationships = RelationshipTable(
            "word/document.xml",
            {
                "rId1": Relationship("rId1", IMAGE_TYPE, "media/image1.png"),
                "rId2": Relationship("rId2", IMAGE_TYPE, "https://example.com/remote.jpg", "External"),
                "rId3": Relationship("rId3", IMAGE_TYPE, "media/chart.bin"),
            },
        )

    def test_resolve_embedded_image(self) -> None:
        resolver = MediaResolver(self.package, self.content_types)
        payload = resolver.resolve_image(self.relationships, "rId1")

        self.assertEqual(payload.target, "word/media/image1.png")
        self.assertEqual(payload.data, PNG_DATA)
        self.assertEqual(payload.content_type, "image/png")
        self.assertFalse(payload.is_external)
        self.package.get_part_data.assert_called_once_with("word/media/image1.png")
        self.assertEqual(self.relationships.referenced_ids, ["rId1"])

    def test_external_image_is_not_read(self) -> None:
        payload = MediaResolver(self.package, self.content_types).resolve_image(self.relationships, "rId2")
        self.assertTrue(payload.is_external)
        self.assertIsNone(payload.data)
        self.assertEqual(payload.content_type, "image/jpeg")
        self.package.get_part_data.assert_not_called()

    def test_override_content_type(self) -> None:
        payload = MediaResolver(self.package, self.content_types).resolve_image(self.relationships, "rId3")
        self.assertEqual(payload.content_type, "image/x-custom")

    def test_undefined_relationship(self) -> None:
        with self.assertLogs("docx_engine.parser.media_extractor", level="WARNING"):
            payload = MediaResolver(self.package, self.content_types).resolve_image(self.relationships, "rId9")
        self.assertIsNone(payload)
        self.assertEqual(self.relationships.validate_references(), ["rId9"])

    def test_missing_part_logs_warning(self) -> None:
        self.package.get_part_data.return_value = None
        with self.assertLogs("docx_engine.parser.media_extractor", level="WARNING"):
            payload = MediaResolver(self.package, self.content_types).resolve_image(self.relationships, "rId1")
        self.assertIsNone(payload.data)

    def test_embedding_can_be_disabled(self) -> None:
        payload = MediaResolver(self.package, self.content_types, embed_data=False).resolve_image(self.relationships, "rId1")
        self.assertIsNone(payload.data)
        self.assertEqual(payload.target, "word/media/image1.png")
        self.package.get_part_data.assert_not_called()

    def test_media_type_fallbacks(self) -> None:
        resolver = MediaResolver(self.package, ContentTypeTable())
        self.assertEqual(resolver.media_type("word/media/a.EMF"), "image/x-emf")
        self.assertEqual(resolver.media_type("word/media/a.jpeg"), "image/jpeg")
        self.assertEqual(resolver.media_type("word/media/a.unknownext"), "application/octet-stream")


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
