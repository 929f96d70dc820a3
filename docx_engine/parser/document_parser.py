"""Parse WordprocessingML block content into the document node tree."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Tuple
from xml.etree import ElementTree as ET

from docx_engine.model.elements import (
    Block,
    Bookmark,
    Image,
    Inline,
    ListBlock,
    ListItem,
    NumberingReference,
    Paragraph,
    Run,
    SectionProperties,
    Shape,
    Table,
    TableCell,
    TableLook,
    TableRow,
)
from docx_engine.model.numbering_model import NumberingCatalog
from docx_engine.model.style_model import Style
from docx_engine.parser.media_extractor import MediaResolver
from docx_engine.parser.properties_parser import (
    parse_cell_properties,
    parse_paragraph_properties,
    parse_run_properties,
)
from docx_engine.parser.rels_parser import RelationshipTable
from docx_engine.parser.style_resolver import StyleResolver
from docx_engine.utils.logger import get_logger
from docx_engine.utils.xml_utils import Namespaces, get_attr, get_int_attr, on_off, strip_namespace

LOGGER = get_logger(__name__)

_NS = {**Namespaces.WORD, **Namespaces.DRAWING}
_VML_TITLE = "{urn:schemas-microsoft-com:office:office}title"

# Wrappers whose children belong to the enclosing container.
_TRANSPARENT_BLOCKS = {"customXml", "ins", "moveTo", "smartTag"}
_TRANSPARENT_INLINES = {"ins", "moveTo", "smartTag", "customXml", "fldSimple", "dir", "bdo"}
_IGNORED_BLOCKS = {"sectPr", "bookmarkStart", "bookmarkEnd", "proofErr", "permStart", "permEnd", "del", "moveFrom"}
_IGNORED_INLINES = {"pPr", "bookmarkEnd", "proofErr", "del", "moveFrom", "commentRangeStart", "commentRangeEnd", "permStart", "permEnd"}
_IGNORED_RUN_CHILDREN = {"rPr", "lastRenderedPageBreak", "fldChar", "instrText", "delText", "commentReference"}


@dataclass
class _CellDraft:
    """Mutable cell state used while vertical merges are resolved."""

    children: Tuple[Block, ...]
    grid_start: int
    col_span: int
    v_merge: Optional[str]
    width: Optional[int]
    properties: Style
    row_span: int = 1


class DocumentParser:
    """Transforms Word block XML into model nodes.

    One instance is bound to the relationship scope of the part it reads
    (document body, a header, a footer); ``for_part`` derives a sibling parser
    for another scope that shares the style resolver and numbering.
    """

    def __init__(
        self,
        resolver: StyleResolver,
        numbering: NumberingCatalog,
        relationships: RelationshipTable,
        media: MediaResolver,
        group_lists: bool = True,
        section_reader: Optional[Callable[[ET.Element], SectionProperties]] = None,
    ) -> None:
        self._resolver = resolver
        self._numbering = numbering
        self._relationships = relationships
        self._media = media
        self._group_lists = group_lists
        # Reads paragraph-level ``w:sectPr``; unset for headers, footers and text boxes.
        self.section_reader = section_reader

    def for_part(self, relationships: RelationshipTable) -> "DocumentParser":
        return DocumentParser(self._resolver, self._numbering, relationships, self._media, self._group_lists)

    def parse_body(self, document_root: ET.Element) -> List[Block]:
        """Parse ``w:body``; the caller has already verified it exists."""
        body = document_root.find("w:body", Namespaces.WORD)
        if body is None:
            return []
        return self.parse_blocks(body)

    def parse_blocks(self, container: ET.Element) -> List[Block]:
        """Parse paragraphs and tables below ``container`` in document order."""
        blocks: List[Block] = []
        for child in self._iter_block_elements(container):
            tag = strip_namespace(child.tag)
            if tag == "p":
                blocks.append(self._parse_paragraph(child))
            elif tag == "tbl":
                blocks.append(self._parse_table(child))
        if self._group_lists:
            return self._group_list_items(blocks)
        return blocks

    def _iter_block_elements(self, container: ET.Element) -> Iterator[ET.Element]:
        for child in list(container):
            tag = strip_namespace(child.tag)
            if tag in ("p", "tbl"):
                yield child
            elif tag == "sdt":
                content = child.find("w:sdtContent", Namespaces.WORD)
                if content is not None:
                    yield from self._iter_block_elements(content)
            elif tag in _TRANSPARENT_BLOCKS:
                yield from self._iter_block_elements(child)
            elif tag == "AlternateContent":
                choice = self._alternate_choice(child)
                if choice is not None:
                    yield from self._iter_block_elements(choice)
            elif tag in _IGNORED_BLOCKS or tag in ("tcPr", "trPr", "tblPr"):
                continue
            else:
                LOGGER.debug("Skipping unsupported element: %s", tag)

    # ------------------------------------------------------------------
    # Paragraphs
    def _parse_paragraph(self, paragraph_el: ET.Element) -> Paragraph:
        ppr = paragraph_el.find("w:pPr", Namespaces.WORD)
        direct = parse_paragraph_properties(ppr)
        style_id = self._get_child_val(ppr, "w:pStyle") or self._resolver.default_style_id("paragraph")
        resolved = self._resolver.resolve_paragraph_style(style_id).overlay(direct, self._resolver.theme)

        children: List[Inline] = []
        bookmarks: List[Bookmark] = []
        self._collect_inlines(paragraph_el, style_id, children, bookmarks, hyperlink=None)

        section = None
        sect_pr = ppr.find("w:sectPr", Namespaces.WORD) if ppr is not None else None
        if sect_pr is not None and self.section_reader is not None:
            section = self.section_reader(sect_pr)

        return Paragraph(
            children=tuple(children),
            style=resolved,
            style_id=style_id,
            properties=None if direct.is_empty() else direct,
            numbering=self._numbering_reference(style_id, direct),
            bookmarks=tuple(bookmarks),
            section=section,
        )

    def _collect_inlines(
        self,
        parent: ET.Element,
        paragraph_style_id: Optional[str],
        children: List[Inline],
        bookmarks: List[Bookmark],
        hyperlink: Optional[Tuple[Optional[str], Optional[str], Optional[str]]],
    ) -> None:
        for child in list(parent):
            tag = strip_namespace(child.tag)
            if tag == "r":
                children.extend(self._parse_run(child, paragraph_style_id, hyperlink))
            elif tag == "hyperlink":
                self._collect_inlines(child, paragraph_style_id, children, bookmarks, self._hyperlink_info(child))
            elif tag == "bookmarkStart":
                bookmark_id = get_int_attr(child, "w:id")
                name = get_attr(child, "w:name")
                if bookmark_id is not None and name:
                    bookmarks.append(Bookmark(bookmark_id=bookmark_id, name=name))
            elif tag == "sdt":
                content = child.find("w:sdtContent", Namespaces.WORD)
                if content is not None:
                    self._collect_inlines(content, paragraph_style_id, children, bookmarks, hyperlink)
            elif tag in _TRANSPARENT_INLINES:
                self._collect_inlines(child, paragraph_style_id, children, bookmarks, hyperlink)
            elif tag in _IGNORED_INLINES:
                continue
            else:
                LOGGER.debug("Skipping paragraph child element: %s", tag)

    def _hyperlink_info(self, hyperlink_el: ET.Element) -> Tuple[Optional[str], Optional[str], Optional[str]]:
        r_id = get_attr(hyperlink_el, "r:id")
        anchor = get_attr(hyperlink_el, "w:anchor")
        target = None
        if r_id:
            target = self._relationships.resolve_target(r_id)
            if target is None:
                LOGGER.warning("Hyperlink relationship %s not defined", r_id)
        return r_id, anchor, target

    def _numbering_reference(self, style_id: Optional[str], direct: Style) -> Optional[NumberingReference]:
        num_id = direct.num_id
        level_index = direct.num_level
        if num_id is None and style_id is not None:
            chain = self._resolver.resolve_chain(style_id)
            num_id = chain.num_id
            if level_index is None:
                level_index = chain.num_level
        if not num_id:
            return None
        level_index = level_index or 0
        instance = self._numbering.get_instance(num_id)
        level = self._numbering.resolve_level(num_id, level_index)
        if level is None:
            return NumberingReference(
                num_id=num_id,
                level=level_index,
                abstract_num_id=instance.abstract_num_id if instance is not None else None,
            )
        return NumberingReference(
            num_id=num_id,
            level=level_index,
            abstract_num_id=instance.abstract_num_id if instance is not None else None,
            start=level.start,
            num_format=level.num_format,
            level_text=level.level_text,
            bullet=level.bullet_glyph(self._resolver.theme, self._numbering.picture_bullets),
        )

    # ------------------------------------------------------------------
    # Runs
    def _parse_run(
        self,
        run_el: ET.Element,
        paragraph_style_id: Optional[str],
        hyperlink: Optional[Tuple[Optional[str], Optional[str], Optional[str]]],
    ) -> List[Inline]:
        rpr = run_el.find("w:rPr", Namespaces.WORD)
        direct = parse_run_properties(rpr)
        run_style_id = self._get_child_val(rpr, "w:rStyle")
        resolved = self._resolver.resolve_run_style(paragraph_style_id, run_style_id, direct)
        hyperlink_id, hyperlink_anchor, hyperlink_target = hyperlink or (None, None, None)

        def make_run(text: str, footnote: Optional[int] = None, endnote: Optional[int] = None) -> Run:
            return Run(
                text=text,
                style=resolved,
                style_id=run_style_id,
                properties=None if direct.is_empty() else direct,
                hyperlink_id=hyperlink_id,
                hyperlink_anchor=hyperlink_anchor,
                hyperlink_target=hyperlink_target,
                footnote_reference=footnote,
                endnote_reference=endnote,
            )

        fragments: List[Inline] = []
        text_parts: List[str] = []

        def flush() -> None:
            if text_parts:
                fragments.append(make_run("".join(text_parts)))
                text_parts.clear()

        for child in self._iter_run_children(run_el):
            tag = strip_namespace(child.tag)
            if tag == "t":
                text_parts.append(child.text or "")
            elif tag == "tab":
                text_parts.append("\t")
            elif tag in ("br", "cr"):
                text_parts.append("\n")
            elif tag == "noBreakHyphen":
                text_parts.append("\u2011")
            elif tag == "softHyphen":
                text_parts.append("\u00ad")
            elif tag == "sym":
                char = self._symbol_char(child)
                if char:
                    text_parts.append(char)
            elif tag in ("drawing", "pict"):
                flush()
                node = self._parse_drawing(child) if tag == "drawing" else self._parse_vml_picture(child)
                if node is not None:
                    fragments.append(node)
            elif tag == "footnoteReference":
                flush()
                fragments.append(make_run("", footnote=get_int_attr(child, "w:id")))
            elif tag == "endnoteReference":
                flush()
                fragments.append(make_run("", endnote=get_int_attr(child, "w:id")))
            elif tag in _IGNORED_RUN_CHILDREN:
                continue
            else:
                LOGGER.debug("Skipping run child element: %s", tag)
        flush()
        return fragments

    def _iter_run_children(self, run_el: ET.Element) -> Iterator[ET.Element]:
        for child in list(run_el):
            if strip_namespace(child.tag) == "AlternateContent":
                choice = self._alternate_choice(child)
                if choice is not None:
                    yield from list(choice)
            else:
                yield child

    def _symbol_char(self, sym_el: ET.Element) -> Optional[str]:
        code = get_attr(sym_el, "w:char")
        if not code:
            return None
        try:
            value = int(code, 16)
        except ValueError:
            return None
        # Symbol fonts map into the private-use area starting at F000.
        if value >= 0xF000:
            value -= 0xF000
        if not 0 <= value <= 0x10FFFF:
            LOGGER.debug("Symbol code %s out of range", code)
            return None
        return chr(value)

    # ------------------------------------------------------------------
    # Drawings
    def _parse_drawing(self, drawing_el: ET.Element) -> Optional[Inline]:
        container = drawing_el.find("wp:inline", _NS)
        inline = True
        if container is None:
            container = drawing_el.find("wp:anchor", _NS)
            inline = False
        if container is None:
            return None

        extent = container.find("wp:extent", _NS)
        width_emu = self._int_attr(extent, "cx")
        height_emu = self._int_attr(extent, "cy")
        doc_pr = container.find("wp:docPr", _NS)

        shape_el = container.find(".//wps:wsp", _NS)
        if shape_el is not None:
            return self._parse_shape(shape_el, doc_pr, width_emu, height_emu, inline)

        blip = container.find(".//a:blip", _NS)
        if blip is None:
            LOGGER.debug("Drawing without picture or shape skipped")
            return None
        r_id = get_attr(blip, "r:embed") or get_attr(blip, "r:link")
        if not r_id:
            return None
        return self._build_image(
            r_id,
            width_emu=width_emu,
            height_emu=height_emu,
            description=doc_pr.attrib.get("descr") if doc_pr is not None else None,
            inline=inline,
        )

    def _parse_vml_picture(self, pict_el: ET.Element) -> Optional[Inline]:
        imagedata = pict_el.find(".//v:imagedata", _NS)
        if imagedata is None:
            return None
        r_id = get_attr(imagedata, "r:id")
        if not r_id:
            return None
        return self._build_image(r_id, description=imagedata.attrib.get(_VML_TITLE))

    def _build_image(
        self,
        r_id: str,
        width_emu: Optional[int] = None,
        height_emu: Optional[int] = None,
        description: Optional[str] = None,
        inline: bool = True,
    ) -> Image:
        payload = self._media.resolve_image(self._relationships, r_id)
        return Image(
            r_id=r_id,
            target=payload.target if payload is not None else None,
            data=payload.data if payload is not None else None,
            content_type=payload.content_type if payload is not None else None,
            width_emu=width_emu,
            height_emu=height_emu,
            description=description or None,
            inline=inline,
        )

    def _parse_shape(
        self,
        shape_el: ET.Element,
        doc_pr: Optional[ET.Element],
        width_emu: Optional[int],
        height_emu: Optional[int],
        inline: bool,
    ) -> Shape:
        sp_pr = shape_el.find("wps:spPr", _NS)
        geometry = sp_pr.find("a:prstGeom", _NS) if sp_pr is not None else None
        fill = sp_pr.find("a:solidFill/a:srgbClr", _NS) if sp_pr is not None else None
        line = sp_pr.find("a:ln/a:solidFill/a:srgbClr", _NS) if sp_pr is not None else None
        paragraphs: List[Paragraph] = []
        text_box = shape_el.find("wps:txbx/w:txbxContent", _NS)
        if text_box is not None:
            text_parser = DocumentParser(self._resolver, self._numbering, self._relationships, self._media, False)
            for block in text_parser.parse_blocks(text_box):
                if isinstance(block, Paragraph):
                    paragraphs.append(block)
        return Shape(
            name=doc_pr.attrib.get("name") if doc_pr is not None else None,
            preset=geometry.attrib.get("prst") if geometry is not None else None,
            width_emu=width_emu,
            height_emu=height_emu,
            fill_color=self._color_val(fill),
            outline_color=self._color_val(line),
            inline=inline,
            children=tuple(paragraphs),
        )

    def _color_val(self, color_el: Optional[ET.Element]) -> Optional[str]:
        if color_el is None:
            return None
        value = color_el.attrib.get("val")
        return value.upper() if value else None

    # ------------------------------------------------------------------
    # Tables
    def _parse_table(self, table_el: ET.Element) -> Table:
        tbl_pr = table_el.find("w:tblPr", Namespaces.WORD)
        grid = tuple(
            width
            for width in (get_int_attr(col, "w:w") for col in table_el.findall("w:tblGrid/w:gridCol", Namespaces.WORD))
            if width is not None
        )
        style_id = self._get_child_val(tbl_pr, "w:tblStyle")
        look = self._parse_table_look(tbl_pr.find("w:tblLook", Namespaces.WORD) if tbl_pr is not None else None)

        drafts: List[List[_CellDraft]] = []
        row_meta: List[Tuple[bool, Optional[int]]] = []
        for row_el in table_el.findall("w:tr", Namespaces.WORD):
            tr_pr = row_el.find("w:trPr", Namespaces.WORD)
            is_header = bool(on_off(tr_pr.find("w:tblHeader", Namespaces.WORD))) if tr_pr is not None else False
            height = self._get_child_int(tr_pr, "w:trHeight")
            row_meta.append((is_header, height))
            drafts.append(self._parse_row_cells(row_el))

        self._resolve_vertical_merges(drafts)

        column_count = len(grid) or max((sum(draft.col_span for draft in row) for row in drafts), default=0)
        rows = []
        for row_index, (row, (is_header, height)) in enumerate(zip(drafts, row_meta)):
            cells = []
            for draft in row:
                conditions: Tuple[str, ...] = ()
                if style_id is not None:
                    conditions = look.conditions_for(
                        row_index, draft.grid_start, len(drafts), column_count, max(draft.col_span, 1)
                    )
                cells.append(self._finish_cell(draft, style_id, conditions))
            rows.append(TableRow(cells=tuple(cells), is_header=is_header, height=height))

        return Table(
            rows=tuple(rows),
            grid_columns=grid,
            style_id=style_id,
            width=self._get_child_int(tbl_pr, "w:tblW", "w:w"),
            alignment=self._get_child_val(tbl_pr, "w:jc"),
            look=look,
        )

    def _parse_table_look(self, look_el: Optional[ET.Element]) -> TableLook:
        """Read ``w:tblLook`` from its attribute form, else from the legacy hex bitmask."""
        if look_el is None:
            return TableLook()
        first_row = get_attr(look_el, "w:firstRow")
        no_h_band = get_attr(look_el, "w:noHBand")
        if first_row is not None or no_h_band is not None:

            def flag(name: str) -> bool:
                return get_attr(look_el, name) in ("1", "true", "on")

            return TableLook(
                first_row=first_row not in ("0", "false", "off"),
                last_row=flag("w:lastRow"),
                first_column=flag("w:firstColumn"),
                last_column=flag("w:lastColumn"),
                banded_rows=not flag("w:noHBand"),
                banded_columns=not flag("w:noVBand"),
            )
        try:
            mask = int(get_attr(look_el, "w:val") or "0", 16)
        except ValueError:
            mask = 0
        return TableLook(
            first_row=bool(mask & 0x0020),
            last_row=bool(mask & 0x0040),
            first_column=bool(mask & 0x0080),
            last_column=bool(mask & 0x0100),
            banded_rows=not mask & 0x0200,
            banded_columns=not mask & 0x0400,
        )

    def _parse_row_cells(self, row_el: ET.Element) -> List[_CellDraft]:
        cells: List[_CellDraft] = []
        grid_index = self._get_child_int(row_el.find("w:trPr", Namespaces.WORD), "w:gridBefore") or 0
        for cell_el in self._iter_cells(row_el):
            tc_pr = cell_el.find("w:tcPr", Namespaces.WORD)
            span = self._get_child_int(tc_pr, "w:gridSpan")
            col_span = span if span is not None else 1
            v_merge = None
            v_merge_el = tc_pr.find("w:vMerge", Namespaces.WORD) if tc_pr is not None else None
            if v_merge_el is not None:
                v_merge = get_attr(v_merge_el, "w:val") or "continue"
            cells.append(
                _CellDraft(
                    children=tuple(self.parse_blocks(cell_el)),
                    grid_start=grid_index,
                    col_span=col_span,
                    v_merge=v_merge,
                    width=self._get_child_int(tc_pr, "w:tcW", "w:w"),
                    properties=parse_cell_properties(tc_pr),
                )
            )
            grid_index += max(col_span, 1)
        return cells

    def _iter_cells(self, row_el: ET.Element) -> Iterator[ET.Element]:
        for child in list(row_el):
            tag = strip_namespace(child.tag)
            if tag == "tc":
                yield child
            elif tag == "sdt":
                content = child.find("w:sdtContent", Namespaces.WORD)
                if content is not None:
                    yield from self._iter_cells(content)
            elif tag == "customXml":
                yield from self._iter_cells(child)

    def _resolve_vertical_merges(self, rows: List[List[_CellDraft]]) -> None:
        """Count the continuation cells below each ``restart`` cell into its row span."""
        for row_index, row in enumerate(rows):
            for cell in row:
                if cell.v_merge != "restart":
                    continue
                span = 1
                for below in rows[row_index + 1 :]:
                    match = next((c for c in below if c.grid_start == cell.grid_start), None)
                    if match is None or match.v_merge != "continue":
                        break
                    span += 1
                cell.row_span = span

    def _finish_cell(self, draft: _CellDraft, style_id: Optional[str], conditions: Tuple[str, ...]) -> TableCell:
        """Direct ``w:tcPr`` values win over the table style and its conditional formats."""
        conditional_style = None
        properties = draft.properties
        if style_id is not None:
            conditional = self._resolver.resolve_table_cell(style_id, conditions)
            conditional_style = self._resolver.default_style.overlay(conditional, self._resolver.theme)
            properties = conditional.merged(draft.properties)
        return TableCell(
            children=draft.children,
            col_span=draft.col_span,
            row_span=draft.row_span,
            v_merge=draft.v_merge,
            width=draft.width,
            shading=properties.cell_shading,
            vertical_align=properties.cell_vertical_align,
            border_top=properties.cell_border_top,
            border_bottom=properties.cell_border_bottom,
            border_left=properties.cell_border_left,
            border_right=properties.cell_border_right,
            conditions=conditions,
            conditional_style=conditional_style,
        )

    # ------------------------------------------------------------------
    # Lists
    def _group_list_items(self, blocks: List[Block]) -> List[Block]:
        grouped: List[Block] = []
        pending: List[Paragraph] = []

        def flush() -> None:
            if not pending:
                return
            first = pending[0].numbering
            grouped.append(
                ListBlock(
                    items=tuple(ListItem(paragraph=p, level=p.numbering.level if p.numbering else 0) for p in pending),
                    num_id=first.num_id if first else None,
                    is_ordered=first.is_ordered if first else False,
                )
            )
            pending.clear()

        for block in blocks:
            if not isinstance(block, Paragraph) or block.numbering is None:
                flush()
                grouped.append(block)
                continue
            current = pending[0].numbering if pending else None
            if current is not None and current.num_id != block.numbering.num_id:
                flush()
            pending.append(block)
        flush()
        return grouped

    # ------------------------------------------------------------------
    def _get_child_val(self, element: Optional[ET.Element], child_name: str) -> Optional[str]:
        if element is None:
            return None
        return get_attr(element.find(child_name, Namespaces.WORD), "w:val")

    def _get_child_int(self, element: Optional[ET.Element], child_name: str, attr_name: str = "w:val") -> Optional[int]:
        if element is None:
            return None
        return get_int_attr(element.find(child_name, Namespaces.WORD), attr_name)

    def _int_attr(self, element: Optional[ET.Element], attr_name: str) -> Optional[int]:
        if element is None:
            return None
        try:
            return int(element.attrib[attr_name])
        except (KeyError, ValueError):
            return None

    def _alternate_choice(self, element: ET.Element) -> Optional[ET.Element]:
        choice = element.find("mc:Choice", _NS)
        if choice is None:
            choice = element.find("mc:Fallback", _NS)
        return choice
