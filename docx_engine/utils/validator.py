"""Structural consistency checks over an assembled document.

The validator never mutates the document. Warnings describe content a
consumer can still render in a degraded way; errors describe states the
model cannot represent faithfully. ``validate`` returns False only when
errors were found.
"""
from __future__ import annotations

from typing import List, Optional

from docx_engine.model.elements import (
    Document,
    Image,
    ListBlock,
    ListItem,
    Node,
    Paragraph,
    Run,
    SectionProperties,
    Shape,
    Table,
    TableCell,
    TableRow,
)
from docx_engine.utils.logger import get_logger

LOGGER = get_logger(__name__)


class DocxValidator:
    """Collects ``warnings`` and ``errors`` for one document."""

    def __init__(self) -> None:
        self.warnings: List[str] = []
        self.errors: List[str] = []

    def validate(self, document: Document) -> bool:
        self.warnings = []
        self.errors = []

        if not document.nodes:
            self.warnings.append("Document has no content")

        for node in document.iter_nodes():
            self._check_node(node)

        for section in document.sections:
            self._check_section(section)

        for r_id in document.unresolved_relationships:
            self.warnings.append(f"Relationship {r_id} is referenced but not defined")

        for message in self.warnings:
            LOGGER.debug("Validation warning: %s", message)
        for message in self.errors:
            LOGGER.debug("Validation error: %s", message)
        return not self.errors

    # ------------------------------------------------------------------
    def _check_node(self, node: Node) -> None:
        if isinstance(node, Table):
            self._check_table(node)
        elif isinstance(node, TableCell):
            self._check_cell(node)
        elif isinstance(node, Run):
            if "\x00" in node.text:
                self.errors.append("Run text contains a NUL character")
        elif isinstance(node, ListBlock):
            if not node.items:
                self.warnings.append(f"List {node.num_id} has no items")
        elif isinstance(node, (Paragraph, TableRow, ListItem, Image, Shape)):
            return
        else:
            raise TypeError(f"Unsupported node type: {type(node).__name__}")

    def _check_table(self, table: Table) -> None:
        if not table.rows:
            self.warnings.append("Table has no rows")
            return
        for index, width in enumerate(table.grid_columns):
            if width <= 0:
                self.warnings.append(f"Table grid column {index} has non-positive width {width}")
        if not table.grid_columns:
            return
        expected = len(table.grid_columns)
        for row_index, row in enumerate(table.rows):
            spanned = row.span_width
            if spanned != expected:
                self.warnings.append(
                    f"Row {row_index} spans {spanned} columns but the grid declares {expected}"
                )
            elif len(row.cells) != expected:
                self.warnings.append(
                    f"Row {row_index} has {len(row.cells)} cells for {expected} grid columns (merged cells)"
                )

    def _check_cell(self, cell: TableCell) -> None:
        if cell.col_span < 1:
            self.errors.append(f"Cell colSpan must be at least 1, got {cell.col_span}")
        if cell.row_span < 1:
            self.errors.append(f"Cell rowSpan must be at least 1, got {cell.row_span}")

    def _check_section(self, section: SectionProperties) -> None:
        if section.page_size == "custom":
            if section.custom_width is None:
                self.errors.append("Custom page size requires customWidth")
            if section.custom_height is None:
                self.errors.append("Custom page size requires customHeight")
        margins = {
            "top": section.margin_top,
            "bottom": section.margin_bottom,
            "left": section.margin_left,
            "right": section.margin_right,
        }
        for side, value in margins.items():
            if value < 0:
                self.warnings.append(f"Negative {side} margin: {value}")


def validate(document: Document, validator: Optional[DocxValidator] = None) -> bool:
    return (validator or DocxValidator()).validate(document)
