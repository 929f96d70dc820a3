"""In-memory representation of parsed document content."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Tuple, Union

from docx_engine.model.font_model import EmbeddedFont
from docx_engine.model.numbering_model import BulletGlyph
from docx_engine.model.style_model import DEFAULT_STYLE, BorderSide, ResolvedStyle, Style
from docx_engine.model.theme_model import Theme
from docx_engine.utils.units import emu_to_points


@dataclass(frozen=True, slots=True)
class Run:
    """A contiguous run of text with its resolved formatting."""

    text: str
    style: ResolvedStyle = DEFAULT_STYLE
    style_id: Optional[str] = None
    properties: Optional[Style] = None
    hyperlink_id: Optional[str] = None
    hyperlink_anchor: Optional[str] = None
    hyperlink_target: Optional[str] = None
    footnote_reference: Optional[int] = None
    endnote_reference: Optional[int] = None


@dataclass(frozen=True, slots=True)
class Image:
    """An inline or anchored picture."""

    r_id: str
    target: Optional[str] = None
    data: Optional[bytes] = None
    content_type: Optional[str] = None
    width_emu: Optional[int] = None
    height_emu: Optional[int] = None
    description: Optional[str] = None
    inline: bool = True

    @property
    def width_points(self) -> Optional[float]:
        return emu_to_points(self.width_emu) if self.width_emu is not None else None

    @property
    def height_points(self) -> Optional[float]:
        return emu_to_points(self.height_emu) if self.height_emu is not None else None


@dataclass(frozen=True, slots=True)
class Shape:
    """A DrawingML shape (``wps:wsp``), optionally holding a text box."""

    name: Optional[str] = None
    preset: Optional[str] = None
    width_emu: Optional[int] = None
    height_emu: Optional[int] = None
    fill_color: Optional[str] = None
    outline_color: Optional[str] = None
    inline: bool = True
    children: Tuple["Paragraph", ...] = ()


@dataclass(frozen=True, slots=True)
class Bookmark:
    """Bookmark start marker embedded within a paragraph."""

    bookmark_id: int
    name: str


@dataclass(frozen=True, slots=True)
class NumberingReference:
    """Resolved numbering reference applied to a paragraph."""

    num_id: int
    level: int
    abstract_num_id: Optional[int] = None
    start: Optional[int] = None
    num_format: Optional[str] = None
    level_text: Optional[str] = None
    bullet: Optional[BulletGlyph] = None

    @property
    def is_ordered(self) -> bool:
        return self.num_format not in (None, "bullet", "none")


Inline = Union[Run, Image, Shape]


@dataclass(frozen=True, slots=True)
class Paragraph:
    """Block element holding ordered inline children."""

    children: Tuple[Inline, ...] = ()
    style: ResolvedStyle = DEFAULT_STYLE
    style_id: Optional[str] = None
    properties: Optional[Style] = None
    numbering: Optional[NumberingReference] = None
    bookmarks: Tuple[Bookmark, ...] = ()
    # Set on the last paragraph of every section except the final one.
    section: Optional["SectionProperties"] = None

    @property
    def ends_section(self) -> bool:
        return self.section is not None

    @property
    def runs(self) -> Tuple[Run, ...]:
        return tuple(child for child in self.children if isinstance(child, Run))

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs)


@dataclass(frozen=True, slots=True)
class TableCell:
    """Single table cell container; its formatting stays on the cell."""

    children: Tuple["Block", ...] = ()
    col_span: int = 1
    row_span: int = 1
    v_merge: Optional[str] = None
    width: Optional[int] = None
    shading: Optional[str] = None
    vertical_align: Optional[str] = None
    border_top: Optional[BorderSide] = None
    border_bottom: Optional[BorderSide] = None
    border_left: Optional[BorderSide] = None
    border_right: Optional[BorderSide] = None
    conditions: Tuple[str, ...] = ()
    conditional_style: Optional[ResolvedStyle] = None

    @property
    def is_merge_continuation(self) -> bool:
        return self.v_merge == "continue"


@dataclass(frozen=True, slots=True)
class TableRow:
    """Row with a sequence of cells."""

    cells: Tuple[TableCell, ...] = ()
    is_header: bool = False
    height: Optional[int] = None

    @property
    def span_width(self) -> int:
        return sum(cell.col_span for cell in self.cells)


@dataclass(frozen=True, slots=True)
class TableLook:
    """Which conditional formats of the table style apply (``w:tblLook``)."""

    first_row: bool = True
    last_row: bool = False
    first_column: bool = True
    last_column: bool = False
    banded_rows: bool = True
    banded_columns: bool = False

    def conditions_for(
        self, row: int, column: int, row_count: int, column_count: int, column_span: int = 1
    ) -> Tuple[str, ...]:
        """Condition names for one cell, in the order they are applied."""
        names = []
        if self.banded_rows:
            names.append("band1Horz" if row % 2 == 0 else "band2Horz")
        if self.banded_columns:
            names.append("band1Vert" if column % 2 == 0 else "band2Vert")
        first_row = self.first_row and row == 0
        last_row = self.last_row and row == row_count - 1
        first_column = self.first_column and column == 0
        last_column = self.last_column and column + column_span == column_count
        if first_row:
            names.append("firstRow")
        if last_row:
            names.append("lastRow")
        if first_column:
            names.append("firstCol")
        if last_column:
            names.append("lastCol")
        if first_row and first_column:
            names.append("nwCell")
        if first_row and last_column:
            names.append("neCell")
        if last_row and first_column:
            names.append("swCell")
        if last_row and last_column:
            names.append("seCell")
        return tuple(names)


@dataclass(frozen=True, slots=True)
class Table:
    """Tabular structure with a declared column grid."""

    rows: Tuple[TableRow, ...] = ()
    grid_columns: Tuple[int, ...] = ()
    style_id: Optional[str] = None
    width: Optional[int] = None
    alignment: Optional[str] = None
    look: TableLook = field(default_factory=TableLook)


@dataclass(frozen=True, slots=True)
class ListItem:
    """One entry of a list, wrapping the numbered paragraph."""

    paragraph: Paragraph
    level: int = 0


@dataclass(frozen=True, slots=True)
class ListBlock:
    """Consecutive paragraphs sharing one numbering instance."""

    items: Tuple[ListItem, ...] = ()
    num_id: Optional[int] = None
    is_ordered: bool = False


Block = Union[Paragraph, Table, ListBlock]
Node = Union[Paragraph, Run, Table, TableRow, TableCell, ListBlock, ListItem, Image, Shape]


def iter_nodes(node: Node) -> Iterator[Node]:
    """Yield ``node`` and every node below it, depth first."""
    yield node
    if isinstance(node, Paragraph):
        for child in node.children:
            yield from iter_nodes(child)
    elif isinstance(node, Table):
        for row in node.rows:
            yield from iter_nodes(row)
    elif isinstance(node, TableRow):
        for cell in node.cells:
            yield from iter_nodes(cell)
    elif isinstance(node, TableCell):
        for block in node.children:
            yield from iter_nodes(block)
    elif isinstance(node, ListBlock):
        for item in node.items:
            yield from iter_nodes(item)
    elif isinstance(node, ListItem):
        yield from iter_nodes(node.paragraph)
    elif isinstance(node, Shape):
        for paragraph in node.children:
            yield from iter_nodes(paragraph)
    elif isinstance(node, (Run, Image)):
        return
    else:
        raise TypeError(f"Unsupported node type: {type(node).__name__}")


@dataclass(frozen=True, slots=True)
class Columns:
    """Text column layout of a section (``w:cols``)."""

    count: int = 1
    space: int = 720
    equal_width: bool = True
    separator: bool = False
    widths: Tuple[int, ...] = ()


@dataclass(frozen=True, slots=True)
class HeaderFooter:
    """Content of a header or footer part."""

    r_id: str
    kind: str
    page_type: str
    part_name: Optional[str] = None
    children: Tuple[Block, ...] = ()


@dataclass(frozen=True, slots=True)
class SectionProperties:
    """Page geometry, margins, columns and header/footer references (twips)."""

    page_width: int = 12240
    page_height: int = 15840
    orientation: str = "portrait"
    page_size: str = "letter"
    custom_width: Optional[int] = None
    custom_height: Optional[int] = None
    margin_top: int = 1440
    margin_bottom: int = 1440
    margin_left: int = 1440
    margin_right: int = 1440
    margin_header: int = 720
    margin_footer: int = 720
    margin_gutter: int = 0
    columns: Columns = field(default_factory=Columns)
    header_refs: Dict[str, str] = field(default_factory=dict)
    footer_refs: Dict[str, str] = field(default_factory=dict)
    headers: Dict[str, HeaderFooter] = field(default_factory=dict)
    footers: Dict[str, HeaderFooter] = field(default_factory=dict)
    title_page: bool = False
    section_type: Optional[str] = None
    background_color: Optional[str] = None


@dataclass(frozen=True, slots=True)
class PassThroughParts:
    """Auxiliary XML parts kept verbatim so a writer can re-emit them."""

    styles_xml: Optional[str] = None
    numbering_xml: Optional[str] = None
    settings_xml: Optional[str] = None
    font_table_xml: Optional[str] = None
    content_types_xml: Optional[str] = None
    root_rels_xml: Optional[str] = None
    header_bg_xml: Optional[str] = None
    header_bg_rels_xml: Optional[str] = None
    footnotes_xml: Optional[str] = None
    endnotes_xml: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Document:
    """The assembled, immutable result of one load."""

    nodes: Tuple[Block, ...] = ()
    section: Optional[SectionProperties] = None
    fonts: Tuple[EmbeddedFont, ...] = ()
    theme: Theme = field(default_factory=Theme)
    pass_through: PassThroughParts = field(default_factory=PassThroughParts)
    unresolved_relationships: Tuple[str, ...] = ()

    def iter_nodes(self) -> Iterator[Node]:
        for block in self.nodes:
            yield from iter_nodes(block)

    @property
    def paragraphs(self) -> Tuple[Paragraph, ...]:
        return tuple(node for node in self.iter_nodes() if isinstance(node, Paragraph))

    @property
    def sections(self) -> Tuple[SectionProperties, ...]:
        """Every section in document order; the body's final section comes last."""
        found = [node.section for node in self.iter_nodes() if isinstance(node, Paragraph) and node.section is not None]
        if self.section is not None:
            found.append(self.section)
        return tuple(found)
