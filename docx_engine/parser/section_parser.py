"""Parser for section properties and the headers/footers they reference."""
from __future__ import annotations

from typing import Dict, Optional, Tuple
from xml.etree import ElementTree as ET

from docx_engine.model.elements import Columns, HeaderFooter, SectionProperties
from docx_engine.parser.docx_loader import DocxPackage
from docx_engine.parser.document_parser import DocumentParser
from docx_engine.parser.rels_parser import RelationshipManager
from docx_engine.utils.logger import get_logger
from docx_engine.utils.xml_utils import Namespaces, get_attr, get_int_attr

LOGGER = get_logger(__name__)

LETTER_SIZE = (12240, 15840)
A4_SIZE = (11906, 16838)
DEFAULT_MARGIN = 1440
DEFAULT_HEADER_MARGIN = 720
PAGE_TYPES = ("default", "first", "even")


def classify_page_size(width: int, height: int) -> str:
    """Return ``letter``, ``a4`` or ``custom``; orientation does not matter."""
    dimensions = tuple(sorted((width, height)))
    if dimensions == LETTER_SIZE:
        return "letter"
    if dimensions == A4_SIZE:
        return "a4"
    return "custom"


class SectionParser:
    """Parse ``w:sectPr`` elements (the body's final one and paragraph-level breaks) into ``SectionProperties``."""

    def __init__(
        self,
        package: DocxPackage,
        relationships: RelationshipManager,
        block_parser: Optional[DocumentParser] = None,
    ) -> None:
        self._package = package
        self._relationships = relationships
        self._block_parser = block_parser

    def parse(self, document_root: ET.Element) -> Optional[SectionProperties]:
        """Return the body's section properties, or None when it declares none."""
        sect_pr = document_root.find("w:body/w:sectPr", Namespaces.WORD)
        background = self._background_color(document_root)
        if sect_pr is None:
            if background is None:
                return None
            return SectionProperties(background_color=background)
        return self.parse_section_properties(sect_pr, background)

    def parse_section_properties(self, sect_pr: ET.Element, background: Optional[str] = None) -> SectionProperties:
        pg_sz = sect_pr.find("w:pgSz", Namespaces.WORD)
        width = self._int_or(pg_sz, "w:w", LETTER_SIZE[0])
        height = self._int_or(pg_sz, "w:h", LETTER_SIZE[1])
        orientation = get_attr(pg_sz, "w:orient") or ("landscape" if width > height else "portrait")
        page_size = classify_page_size(width, height)

        pg_mar = sect_pr.find("w:pgMar", Namespaces.WORD)
        header_refs = self._references(sect_pr, "w:headerReference")
        footer_refs = self._references(sect_pr, "w:footerReference")

        section_type_el = sect_pr.find("w:type", Namespaces.WORD)
        return SectionProperties(
            page_width=width,
            page_height=height,
            orientation=orientation,
            page_size=page_size,
            custom_width=width if page_size == "custom" else None,
            custom_height=height if page_size == "custom" else None,
            margin_top=self._int_or(pg_mar, "w:top", DEFAULT_MARGIN),
            margin_bottom=self._int_or(pg_mar, "w:bottom", DEFAULT_MARGIN),
            margin_left=self._int_or(pg_mar, "w:left", DEFAULT_MARGIN),
            margin_right=self._int_or(pg_mar, "w:right", DEFAULT_MARGIN),
            margin_header=self._int_or(pg_mar, "w:header", DEFAULT_HEADER_MARGIN),
            margin_footer=self._int_or(pg_mar, "w:footer", DEFAULT_HEADER_MARGIN),
            margin_gutter=self._int_or(pg_mar, "w:gutter", 0),
            columns=self._parse_columns(sect_pr.find("w:cols", Namespaces.WORD)),
            header_refs=header_refs,
            footer_refs=footer_refs,
            headers=self._load_parts(header_refs, "header"),
            footers=self._load_parts(footer_refs, "footer"),
            title_page=sect_pr.find("w:titlePg", Namespaces.WORD) is not None,
            section_type=get_attr(section_type_el, "w:val"),
            background_color=background,
        )

    # ------------------------------------------------------------------
    def _background_color(self, document_root: ET.Element) -> Optional[str]:
        background = document_root.find("w:background", Namespaces.WORD)
        color = get_attr(background, "w:color")
        if not color or color.lower() == "auto":
            return None
        return color.upper()

    def _parse_columns(self, cols_el: Optional[ET.Element]) -> Columns:
        if cols_el is None:
            return Columns()
        widths: Tuple[int, ...] = tuple(
            width
            for width in (get_int_attr(col, "w:w") for col in cols_el.findall("w:col", Namespaces.WORD))
            if width is not None
        )
        equal_width = get_attr(cols_el, "w:equalWidth")
        return Columns(
            count=self._int_or(cols_el, "w:num", len(widths) or 1),
            space=self._int_or(cols_el, "w:space", 720),
            equal_width=equal_width not in ("0", "false", "off") if equal_width is not None else not widths,
            separator=get_attr(cols_el, "w:sep") in ("1", "true", "on"),
            widths=widths,
        )

    def _references(self, sect_pr: ET.Element, tag: str) -> Dict[str, str]:
        refs: Dict[str, str] = {}
        for ref_el in sect_pr.findall(tag, Namespaces.WORD):
            page_type = get_attr(ref_el, "w:type") or "default"
            r_id = get_attr(ref_el, "r:id")
            if page_type in PAGE_TYPES and r_id:
                refs[page_type] = r_id
        return refs

    def _load_parts(self, refs: Dict[str, str], kind: str) -> Dict[str, HeaderFooter]:
        loaded: Dict[str, HeaderFooter] = {}
        if self._block_parser is None:
            return loaded
        document_rels = self._relationships.document
        for page_type, r_id in refs.items():
            part_name = document_rels.resolve_target(r_id)
            if part_name is None:
                LOGGER.warning("%s reference %s is not defined", kind.capitalize(), r_id)
                continue
            tree = self._package.get_xml_part(part_name)
            if tree is None:
                LOGGER.warning("%s part %s missing or malformed", kind.capitalize(), part_name)
                continue
            parser = self._block_parser.for_part(self._relationships.for_part(part_name))
            loaded[page_type] = HeaderFooter(
                r_id=r_id,
                kind=kind,
                page_type=page_type,
                part_name=part_name,
                children=tuple(parser.parse_blocks(tree.getroot())),
            )
        return loaded

    def _int_or(self, element: Optional[ET.Element], attr_name: str, default: int) -> int:
        value = get_int_attr(element, attr_name)
        return default if value is None else value
