"""Tests for font deobfuscation and the font table."""
import unittest
from xml.etree import ElementTree as ET

from docx_engine.errors import DocxError, FontKeyError
from docx_engine.model.font_model import EmbeddedFont, FontCatalog, deobfuscate, parse_font_key
from docx_engine.parser.font_table_parser import FontTableParser
from docx_engine.parser.rels_parser import RelationshipTable

KEY = "{00112233-4455-6677-8899-AABBCCDDEEFF}"
SFNT = b"\x00\x01\x00\x00" + bytes(range(60))

FONT_TABLE_XML = """
<w:fonts xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main"
         xmlns:r="http://schemas.openxmlformats.org/officeDocument/2006/relationships">
  <w:font w:name="Brand Sans">
    <w:altName w:val="BrandSans"/>
    <w:charset w:val="00"/>
    <w:family w:val="swiss"/>
    <w:pitch w:val="variable"/>
    <w:embedRegular r:id="rId1" w:fontKey="{00112233-4455-6677-8899-AABBCCDDEEFF}"/>
    <w:embedBold r:id="rId2" w:fontKey="{not-a-guid}" w:subsetted="1"/>
    <w:embedItalic r:id="rId3" w:fontKey="{00112233-4455-6677-8899-AABBCCDDEEFF}"/>
  </w:font>
  <w:font w:name="Calibri">
    <w:family w:val="swiss"/>
  </w:font>
</w:fonts>
"""

FONT_TABLE_RELS = """
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
  <Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/font" Target="fonts/font1.odttf"/>
  <Relationship Id="rId2" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/font" Target="fonts/font2.odttf"/>
  <Relationship Id="rId3" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/font" Target="fonts/missing.odttf"/>
</Relationships>
"""


class DeobfuscationTest(unittest.TestCase):
    """The XOR transform over the leading 32 bytes."""

    def test_key_layout_is_mixed_endian(self) -> None:
        self.assertEqual(
            parse_font_key(KEY),
            bytes.fromhex("33221100554477668899AABBCCDDEEFF"),
        )

    def test_key_is_applied_in_reverse(self) -> None:
        result = deobfuscate(bytes(40), KEY)
        self.assertEqual(result[0], 0xFF)
        self.assertEqual(result[15], 0x33)
        self.assertEqual(result[16], 0xFF)
        self.assertEqual(result[31], 0x33)
        self.assertEqual(result[32:], bytes(8))

    def test_transform_is_self_inverse(self) -> None:
        for data in (SFNT, b"short", b""):
            self.assertEqual(deobfuscate(deobfuscate(data, KEY), KEY), data)

    def test_guid_forms_are_equivalent(self) -> None:
        forms = (
            KEY,
            KEY.strip("{}"),
            KEY.lower(),
            KEY.strip("{}").lower(),
            KEY.replace("-", ""),
        )
        keys = {parse_font_key(form) for form in forms}
        self.assertEqual(len(keys), 1)

    def test_malformed_keys_fail_fast(self) -> None:
        for bad in ("", "{0011}", KEY + "00", "{G0112233-4455-6677-8899-AABBCCDDEEFF}"):
            with self.assertRaises(FontKeyError):
                parse_font_key(bad)
        with self.assertRaises(DocxError):
            deobfuscate(SFNT, b"\x00" * 8)

    def test_embedded_font_round_trip(self) -> None:
        stored = deobfuscate(SFNT, KEY)
        font = EmbeddedFont.from_obfuscated("Brand Sans", stored, KEY)
        self.assertEqual(font.data, SFNT)
        self.assertEqual(font.obfuscated_bytes, stored)
        self.assertTrue(font.looks_like_sfnt)


class FontTableParserTest(unittest.TestCase):
    """Bad entries cost only the affected font."""

    def setUp(self) -> None:
        self.parts = {
            "word/fonts/font1.odttf": deobfuscate(SFNT, KEY),
            "word/fonts/font2.odttf": deobfuscate(SFNT, KEY),
        }
        self.rels = RelationshipTable.from_xml("word/fontTable.xml", FONT_TABLE_RELS)
        self.tree = ET.ElementTree(ET.fromstring(FONT_TABLE_XML))

    def test_font_table_entries(self) -> None:
        with self.assertLogs("docx_engine.parser.font_table_parser", level="WARNING"):
            catalog = FontTableParser(self.tree, self.rels, self.parts.get).parse()
        info = catalog.table["Brand Sans"]
        self.assertEqual(info.alt_name, "BrandSans")
        self.assertEqual(info.family, "swiss")
        self.assertEqual([embed.variant for embed in info.embeds], ["regular", "bold", "italic"])
        self.assertTrue(info.embeds[1].subsetted)
        self.assertIn("Calibri", catalog.table)

    def test_bad_key_and_missing_binary_degrade(self) -> None:
        with self.assertLogs("docx_engine.parser.font_table_parser", level="WARNING") as logs:
            catalog = FontTableParser(self.tree, self.rels, self.parts.get).parse()
        self.assertEqual(len(catalog), 1)
        self.assertEqual(catalog.get_bytes("brand sans"), SFNT)
        self.assertIsNone(catalog.get("Brand Sans", "bold"))
        self.assertIsNone(catalog.get_bytes("Brand Sans", "italic"))
        self.assertEqual(catalog.families(), ["Brand Sans"])
        self.assertEqual(len(logs.output), 2)

    def test_missing_font_table(self) -> None:
        catalog = FontTableParser(None, self.rels, self.parts.get).parse()
        self.assertEqual(len(catalog), 0)

    def test_catalogs_are_independent(self) -> None:
        first = FontCatalog()
        first.add(EmbeddedFont("Brand Sans", SFNT))
        self.assertEqual(len(FontCatalog()), 0)
        self.assertEqual(list(first), [EmbeddedFont("Brand Sans", SFNT)])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
