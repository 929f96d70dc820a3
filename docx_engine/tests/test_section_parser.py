"""Tests for section properties and header/footer loading."""
import unittest
from typing import Dict
from xml.etree import ElementTree as ET

from docx_engine.model.elements import Image
from docx_engine.model.numbering_model import NumberingCatalog
from docx_engine.model.style_model import StylesCatalog
from docx_engine.parser.document_parser import DocumentParser
from docx_engine.parser.docx_loader import DocxPackage
from docx_engine.parser.media_extractor import MediaResolver
from docx_engine.parser.rels_parser import RelationshipManager
from docx_engine.parser.section_parser import SectionParser, classify_page_size
from docx_engine.parser.style_resolver import StyleResolver
from docx_engine.utils.xml_utils import Namespaces

NS = (
    'xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main" '
    'xmlns:r="http://schemas.openxmlformats.org/officeDocument/2006/relationships" '
    'xmlns:v="urn:schemas-microsoft-com:vml"'
)

DOC_RELS = """
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
  <Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/header" Target="header1.xml"/>
  <Relationship Id="rId2" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/footer" Target="footer1.xml"/>
  <Relationship Id="rId3" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/header" Target="header2.xml"/>
</Relationships>
"""

HEADER_RELS = """
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
  <Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/image" Target="media/logo.png"/>
</Relationships>
"""

HEADER_XML = f"""
<w:hdr {NS}>
  <w:p><w:r><w:t>Company</w:t></w:r></w:p>
  <w:p><w:r><w:pict><v:shape><v:imagedata r:id="rId1"/></v:shape></w:pict></w:r></w:p>
</w:hdr>
"""

FOOTER_XML = f'<w:ftr {NS}><w:p><w:r><w:t>Page</w:t></w:r></w:p></w:ftr>'


def document(sect_pr: str, background: str = "") -> ET.Element:
    return ET.fromstring(f"<w:document {NS}>{background}<w:body><w:p/>{sect_pr}</w:body></w:document>")


def section_parser(parts: Dict[str, bytes], with_content: bool = True) -> SectionParser:
    package = DocxPackage(raw_parts=parts)
    relationships = RelationshipManager(package)
    block_parser = None
    if with_content:
        resolver = StyleResolver(StylesCatalog({}))
        media = MediaResolver(package, relationships.content_types)
        block_parser = DocumentParser(resolver, NumberingCatalog.empty(), relationships.document, media)
    return SectionParser(package, relationships, block_parser)


class PageSizeTest(unittest.TestCase):
    """Classification ignores orientation."""

    def test_classify(self) -> None:
        self.assertEqual(classify_page_size(12240, 15840), "letter")
        self.assertEqual(classify_page_size(15840, 12240), "letter")
        self.assertEqual(classify_page_size(11906, 16838), "a4")
        self.assertEqual(classify_page_size(16838, 11906), "a4")
        self.assertEqual(classify_page_size(10000, 14000), "custom")


class SectionParserTest(unittest.TestCase):
    """Geometry, margins, columns and references."""

    def test_defaults_without_page_elements(self) -> None:
        section = section_parser({}).parse(document("<w:sectPr/>"))
        self.assertEqual(section.page_size, "letter")
        self.assertEqual(section.orientation, "portrait")
        self.assertEqual((section.page_width, section.page_height), (12240, 15840))
        self.assertEqual(section.margin_top, 1440)
        self.assertEqual(section.margin_header, 720)
        self.assertEqual(section.margin_gutter, 0)
        self.assertEqual(section.columns.count, 1)
        self.assertIsNone(section.custom_width)

    def test_a4_landscape(self) -> None:
        sect_pr = '<w:sectPr><w:pgSz w:w="16838" w:h="11906" w:orient="landscape"/></w:sectPr>'
        section = section_parser({}).parse(document(sect_pr))
        self.assertEqual(section.page_size, "a4")
        self.assertEqual(section.orientation, "landscape")

    def test_orientation_inferred_from_dimensions(self) -> None:
        sect_pr = '<w:sectPr><w:pgSz w:w="15840" w:h="12240"/></w:sectPr>'
        self.assertEqual(section_parser({}).parse(document(sect_pr)).orientation, "landscape")

    def test_custom_size_records_dimensions(self) -> None:
        sect_pr = '<w:sectPr><w:pgSz w:w="10000" w:h="14000"/></w:sectPr>'
        section = section_parser({}).parse(document(sect_pr))
        self.assertEqual(section.page_size, "custom")
        self.assertEqual((section.custom_width, section.custom_height), (10000, 14000))

    def test_margins_columns_and_flags(self) -> None:
        sect_pr = """
        <w:sectPr>
          <w:pgMar w:top="1000" w:right="900" w:bottom="1100" w:left="800" w:header="500" w:footer="400" w:gutter="100"/>
          <w:cols w:num="2" w:space="360" w:sep="1" w:equalWidth="0">
            <w:col w:w="4000" w:space="360"/><w:col w:w="5000"/>
          </w:cols>
          <w:titlePg/>
          <w:type w:val="nextPage"/>
        </w:sectPr>
        """
        section = section_parser({}).parse(document(sect_pr))
        self.assertEqual(
            (section.margin_top, section.margin_right, section.margin_bottom, section.margin_left),
            (1000, 900, 1100, 800),
        )
        self.assertEqual((section.margin_header, section.margin_footer, section.margin_gutter), (500, 400, 100))
        self.assertEqual(section.columns.count, 2)
        self.assertEqual(section.columns.space, 360)
        self.assertTrue(section.columns.separator)
        self.assertFalse(section.columns.equal_width)
        self.assertEqual(section.columns.widths, (4000, 5000))
        self.assertTrue(section.title_page)
        self.assertEqual(section.section_type, "nextPage")

    def test_no_section_and_no_background(self) -> None:
        root = ET.fromstring(f"<w:document {NS}><w:body><w:p/></w:body></w:document>")
        self.assertIsNone(section_parser({}).parse(root))

    def test_paragraph_section_is_not_the_final_section(self) -> None:
        root = ET.fromstring(
            f"<w:document {NS}><w:body>"
            '<w:p><w:pPr><w:sectPr><w:pgSz w:w="11906" w:h="16838"/></w:sectPr></w:pPr></w:p>'
            "</w:body></w:document>"
        )
        parser = section_parser({})
        self.assertIsNone(parser.parse(root))
        sect_pr = root.find("w:body/w:p/w:pPr/w:sectPr", Namespaces.WORD)
        self.assertEqual(parser.parse_section_properties(sect_pr).page_size, "a4")

    def test_background_without_section(self) -> None:
        root = ET.fromstring(f'<w:document {NS}><w:background w:color="ffeedd"/><w:body><w:p/></w:body></w:document>')
        section = section_parser({}).parse(root)
        self.assertEqual(section.background_color, "FFEEDD")
        self.assertEqual(section.page_size, "letter")


class HeaderFooterTest(unittest.TestCase):
    """Header and footer parts are parsed in their own relationship scope."""

    SECT_PR = """
    <w:sectPr>
      <w:headerReference w:type="default" r:id="rId1"/>
      <w:headerReference w:type="first" r:id="rId3"/>
      <w:footerReference w:type="default" r:id="rId2"/>
      <w:footerReference w:type="even" r:id="rId8"/>
    </w:sectPr>
    """

    def setUp(self) -> None:
        self.parts = {
            "word/_rels/document.xml.rels": DOC_RELS.encode("utf-8"),
            "word/_rels/header1.xml.rels": HEADER_RELS.encode("utf-8"),
            "word/header1.xml": HEADER_XML.encode("utf-8"),
            "word/header2.xml": b"<w:hdr><broken",
            "word/footer1.xml": FOOTER_XML.encode("utf-8"),
            "word/media/logo.png": b"\x89PNGlogo",
        }

    def test_references_and_content(self) -> None:
        parser = section_parser(self.parts)
        with self.assertLogs("docx_engine", level="WARNING"):
            section = parser.parse(document(self.SECT_PR))

        self.assertEqual(section.header_refs, {"default": "rId1", "first": "rId3"})
        self.assertEqual(section.footer_refs, {"default": "rId2", "even": "rId8"})

        header = section.headers["default"]
        self.assertEqual(header.part_name, "word/header1.xml")
        self.assertEqual(header.kind, "header")
        self.assertEqual(header.children[0].text, "Company")
        image = header.children[1].children[0]
        self.assertIsInstance(image, Image)
        self.assertEqual(image.data, b"\x89PNGlogo")

        # malformed and undefined parts are skipped
        self.assertNotIn("first", section.headers)
        self.assertEqual(list(section.footers), ["default"])
        self.assertEqual(section.footers["default"].children[0].text, "Page")

    def test_content_loading_can_be_skipped(self) -> None:
        section = section_parser(self.parts, with_content=False).parse(document(self.SECT_PR))
        self.assertEqual(section.header_refs["default"], "rId1")
        self.assertEqual(section.headers, {})


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
