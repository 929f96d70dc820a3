"""Sequence the part parsers and assemble the immutable ``Document``."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from docx_engine.config import DEFAULT_OPTIONS, ReaderOptions
from docx_engine.errors import DocxLoadError
from docx_engine.model.elements import Document, PassThroughParts
from docx_engine.model.font_model import FontCatalog
from docx_engine.model.theme_model import Theme
from docx_engine.parser.docx_loader import (
    CONTENT_TYPES_PATH,
    DOCUMENT_XML_PATH,
    ENDNOTES_XML_PATH,
    FONT_TABLE_XML_PATH,
    FOOTNOTES_XML_PATH,
    HEADER_BG_XML_PATH,
    NUMBERING_XML_PATH,
    PACKAGE_REL_PATH,
    SETTINGS_XML_PATH,
    STYLES_XML_PATH,
    THEME_XML_PATH,
    DocxPackage,
    rels_path_for,
)
from docx_engine.parser.document_parser import DocumentParser
from docx_engine.parser.font_table_parser import FontTableParser
from docx_engine.parser.media_extractor import MediaResolver
from docx_engine.parser.numbering_parser import NumberingParser
from docx_engine.parser.rels_parser import RelationshipManager, RelationshipTable
from docx_engine.parser.section_parser import SectionParser
from docx_engine.parser.style_resolver import StyleResolver
from docx_engine.parser.styles_parser import StylesParser
from docx_engine.parser.theme_parser import ThemeParser
from docx_engine.utils.logger import get_logger
from docx_engine.utils.xml_utils import Namespaces

LOGGER = get_logger(__name__)


class DocxReader:
    """Reads DOCX archives. Every call to ``load`` builds and discards its own state."""

    def __init__(self, options: Optional[ReaderOptions] = None) -> None:
        self.options = options or DEFAULT_OPTIONS

    def load_path(self, docx_path: Path) -> Document:
        return self.load(Path(docx_path).read_bytes())

    def load(self, data: bytes) -> Document:
        """Parse archive bytes into a ``Document``.

        Only an unreadable archive or a missing/corrupt ``word/document.xml``
        raises (``DocxLoadError``); every other gap degrades to defaults.
        """
        package = DocxPackage.from_bytes(data)
        document_root = package.require_document_xml().getroot()
        if document_root.find("w:body", Namespaces.WORD) is None:
            raise DocxLoadError("Primary document part has no body", DOCUMENT_XML_PATH)

        # 1. content types and relationships
        relationships = RelationshipManager(package)
        content_types = relationships.load_content_types()
        document_rels = relationships.load_document_relationships()
        relationships.load_package_relationships()

        # 2. theme and styles
        theme_path = document_rels.first_target("theme") or THEME_XML_PATH
        theme_parser = ThemeParser(package.get_xml_part(theme_path))
        styles_path = self._part_path(document_rels, "styles", STYLES_XML_PATH)
        catalog = StylesParser(package.get_xml_part(styles_path)).parse()

        # 3. numbering
        numbering_path = self._part_path(document_rels, "numbering", NUMBERING_XML_PATH)
        numbering = NumberingParser(
            package.get_xml_part(numbering_path),
            relationships.for_part(numbering_path),
            package.get_part_data,
        ).parse()

        theme = Theme(
            colors=theme_parser.parse_colors(),
            fonts=theme_parser.parse_fonts(),
            latent_styles=catalog.latent_styles,
            numbering=numbering,
        )
        resolver = StyleResolver(catalog, theme)

        # 4. body and its section breaks
        media = MediaResolver(package, content_types, embed_data=self.options.embed_media)
        block_parser = DocumentParser(resolver, numbering, document_rels, media, group_lists=self.options.group_lists)
        section_parser = SectionParser(
            package,
            relationships,
            block_parser if self.options.load_headers_footers else None,
        )
        block_parser.section_reader = section_parser.parse_section_properties
        nodes = block_parser.parse_body(document_root)

        # 5. final section
        section = section_parser.parse(document_root)

        # 6. fonts
        fonts = FontCatalog()
        if self.options.load_fonts:
            font_table_path = self._part_path(document_rels, "fontTable", FONT_TABLE_XML_PATH)
            fonts = FontTableParser(
                package.get_xml_part(font_table_path),
                relationships.for_part(font_table_path),
                package.get_part_data,
            ).parse()

        # 7. verbatim pass-through
        pass_through = self._pass_through(package) if self.options.keep_pass_through else PassThroughParts()

        unresolved = relationships.validate_references()
        if unresolved:
            LOGGER.warning("Unresolved relationship ids: %s", ", ".join(unresolved))
        LOGGER.debug("Loaded document with %d top-level nodes and %d fonts", len(nodes), len(fonts))

        return Document(
            nodes=tuple(nodes),
            section=section,
            fonts=tuple(fonts.fonts),
            theme=theme,
            pass_through=pass_through,
            unresolved_relationships=tuple(unresolved),
        )

    def _part_path(self, document_rels: RelationshipTable, short_type: str, fallback: str) -> str:
        return document_rels.first_target(short_type) or fallback

    def _pass_through(self, package: DocxPackage) -> PassThroughParts:
        return PassThroughParts(
            styles_xml=package.read_content(STYLES_XML_PATH),
            numbering_xml=package.read_content(NUMBERING_XML_PATH),
            settings_xml=package.read_content(SETTINGS_XML_PATH),
            font_table_xml=package.read_content(FONT_TABLE_XML_PATH),
            content_types_xml=package.read_content(CONTENT_TYPES_PATH),
            root_rels_xml=package.read_content(PACKAGE_REL_PATH),
            header_bg_xml=package.read_content(HEADER_BG_XML_PATH),
            header_bg_rels_xml=package.read_content(rels_path_for(HEADER_BG_XML_PATH)),
            footnotes_xml=package.read_content(FOOTNOTES_XML_PATH),
            endnotes_xml=package.read_content(ENDNOTES_XML_PATH),
        )


def load(data: bytes, options: Optional[ReaderOptions] = None) -> Document:
    """Parse DOCX bytes with a fresh reader."""
    return DocxReader(options).load(data)
