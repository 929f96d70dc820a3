"""Tests for numbering definitions, overrides and bullet glyphs."""
import unittest
from xml.etree import ElementTree as ET

from docx_engine.model.numbering_model import NO_BULLET, NumberingLevel
from docx_engine.model.theme_model import Theme, ThemeColors, ThemeFonts
from docx_engine.parser.numbering_parser import NumberingParser
from docx_engine.parser.rels_parser import RelationshipTable

NUMBERING_XML = """
<w:numbering xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main"
             xmlns:r="http://schemas.openxmlformats.org/officeDocument/2006/relationships"
             xmlns:v="urn:schemas-microsoft-com:vml">
  <w:numPicBullet w:numPicBulletId="0">
    <w:pict><v:shape><v:imagedata r:id="rId1"/></v:shape></w:pict>
  </w:numPicBullet>
  <w:numPicBullet w:numPicBulletId="1">
    <w:pict><v:shape><v:imagedata r:id="rId2"/></v:shape></w:pict>
  </w:numPicBullet>
  <w:abstractNum w:abstractNumId="0">
    <w:multiLevelType w:val="hybridMultilevel"/>
    <w:lvl w:ilvl="0">
      <w:start w:val="1"/>
      <w:numFmt w:val="decimal"/>
      <w:lvlText w:val="%1."/>
      <w:lvlJc w:val="left"/>
      <w:pPr><w:ind w:left="720" w:hanging="360"/></w:pPr>
    </w:lvl>
    <w:lvl w:ilvl="1">
      <w:start w:val="1"/>
      <w:numFmt w:val="lowerLetter"/>
      <w:lvlText w:val="%2)"/>
    </w:lvl>
    <w:lvl w:ilvl="9"><w:numFmt w:val="decimal"/></w:lvl>
  </w:abstractNum>
  <w:abstractNum w:abstractNumId="1">
    <w:lvl w:ilvl="0">
      <w:numFmt w:val="bullet"/>
      <w:lvlText w:val="•"/>
      <w:rPr><w:rFonts w:ascii="Symbol" w:hAnsi="Symbol"/><w:color w:val="ff0000"/></w:rPr>
    </w:lvl>
    <w:lvl w:ilvl="1">
      <w:numFmt w:val="bullet"/>
      <w:lvlText w:val="o"/>
      <w:rPr><w:rFonts w:asciiTheme="minorHAnsi"/><w:color w:val="auto" w:themeColor="accent1"/></w:rPr>
    </w:lvl>
    <w:lvl w:ilvl="2">
      <w:numFmt w:val="bullet"/>
      <w:lvlText w:val="•"/>
      <w:lvlPicBulletId w:val="0"/>
    </w:lvl>
    <w:lvl w:ilvl="3">
      <w:numFmt w:val="bullet"/>
      <w:lvlPicBulletId w:val="1"/>
    </w:lvl>
  </w:abstractNum>
  <w:num w:numId="1"><w:abstractNumId w:val="0"/></w:num>
  <w:num w:numId="2">
    <w:abstractNumId w:val="0"/>
    <w:lvlOverride w:ilvl="0"><w:startOverride w:val="5"/></w:lvlOverride>
    <w:lvlOverride w:ilvl="1">
      <w:lvl w:ilvl="1"><w:start w:val="3"/><w:numFmt w:val="upperRoman"/><w:lvlText w:val="%2."/></w:lvl>
    </w:lvlOverride>
  </w:num>
  <w:num w:numId="3"><w:abstractNumId w:val="1"/></w:num>
  <w:num w:numId="4"><w:abstractNumId w:val="7"/></w:num>
</w:numbering>
"""

NUMBERING_RELS = """
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
  <Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/image" Target="media/bullet.png"/>
  <Relationship Id="rId2" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/image" Target="media/gone.png"/>
</Relationships>
"""

BULLET_BYTES = b"\x89PNG\r\n\x1a\nbullet"


class NumberingParserTest(unittest.TestCase):
    """Abstract levels, instances and overrides."""

    def setUp(self) -> None:
        rels = RelationshipTable.from_xml("word/numbering.xml", NUMBERING_RELS)
        parts = {"word/media/bullet.png": BULLET_BYTES}
        with self.assertLogs("docx_engine.parser.numbering_parser", level="WARNING"):
            self.catalog = NumberingParser(ET.ElementTree(ET.fromstring(NUMBERING_XML)), rels, parts.get).parse()

    def test_levels_are_parsed(self) -> None:
        abstract = self.catalog.get_abstract(0)
        self.assertEqual(abstract.multi_level_type, "hybridMultilevel")
        self.assertEqual(sorted(abstract.levels), [0, 1])
        level = abstract.levels[0]
        self.assertEqual(level.level_text, "%1.")
        self.assertEqual(level.indent_left, 720)
        self.assertEqual(level.hanging, 360)
        self.assertEqual(level.alignment, "left")

    def test_instance_without_override(self) -> None:
        level = self.catalog.resolve_level(1, 0)
        self.assertEqual(level.start, 1)
        self.assertEqual(level.num_format, "decimal")

    def test_start_override(self) -> None:
        self.assertEqual(self.catalog.resolve_level(2, 0).start, 5)
        # the abstract definition is untouched
        self.assertEqual(self.catalog.get_abstract(0).levels[0].start, 1)

    def test_level_replacement_override(self) -> None:
        level = self.catalog.resolve_level(2, 1)
        self.assertEqual(level.num_format, "upperRoman")
        self.assertEqual(level.start, 3)

    def test_unknown_references(self) -> None:
        self.assertIsNone(self.catalog.resolve_level(99, 0))
        self.assertIsNone(self.catalog.resolve_level(4, 0))
        self.assertIsNone(self.catalog.resolve_level(1, 5))
        self.assertEqual(self.catalog.bullet_for(99), NO_BULLET)

    def test_picture_bullets_skip_missing_images(self) -> None:
        self.assertEqual(self.catalog.picture_bullets, {0: BULLET_BYTES})

    def test_missing_part_gives_empty_catalog(self) -> None:
        catalog = NumberingParser(None).parse()
        self.assertEqual(catalog.abstracts, {})
        self.assertEqual(catalog.instances, {})


class BulletGlyphTest(unittest.TestCase):
    """Markers resolve to a character, a theme pairing or a picture."""

    def setUp(self) -> None:
        rels = RelationshipTable.from_xml("word/numbering.xml", NUMBERING_RELS)
        parts = {"word/media/bullet.png": BULLET_BYTES}
        with self.assertLogs("docx_engine.parser.numbering_parser", level="WARNING"):
            self.catalog = NumberingParser(ET.ElementTree(ET.fromstring(NUMBERING_XML)), rels, parts.get).parse()
        self.theme = Theme(colors=ThemeColors(accent1="4472C4"), fonts=ThemeFonts(minor_latin="Aptos"))

    def test_character_bullet(self) -> None:
        glyph = self.catalog.bullet_for(3, 0, self.theme)
        self.assertEqual(glyph.kind, "character")
        self.assertEqual(glyph.character, "•")
        self.assertEqual(glyph.font, "Symbol")
        self.assertEqual(glyph.color, "FF0000")

    def test_theme_bullet(self) -> None:
        glyph = self.catalog.bullet_for(3, 1, self.theme)
        self.assertEqual(glyph.kind, "theme")
        self.assertEqual(glyph.font, "Aptos")
        self.assertEqual(glyph.color, "4472C4")

    def test_theme_bullet_without_theme_is_character(self) -> None:
        self.assertEqual(self.catalog.bullet_for(3, 1).kind, "character")

    def test_picture_bullet(self) -> None:
        glyph = self.catalog.bullet_for(3, 2, self.theme)
        self.assertEqual(glyph.kind, "picture")
        self.assertEqual(glyph.image, BULLET_BYTES)

    def test_missing_picture_falls_back_to_character(self) -> None:
        glyph = self.catalog.bullet_for(3, 3, self.theme)
        self.assertEqual(glyph.kind, "character")
        self.assertIsNone(glyph.character)

    def test_ordered_level_has_no_bullet(self) -> None:
        self.assertEqual(self.catalog.bullet_for(1, 0, self.theme), NO_BULLET)

    def test_is_bullet(self) -> None:
        self.assertTrue(NumberingLevel(level_index=0, num_format="bullet").is_bullet)
        self.assertFalse(NumberingLevel(level_index=0).is_bullet)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
