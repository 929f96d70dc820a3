"""Translate ``w:pPr``/``w:rPr``/``w:tcPr`` property blocks into partial ``Style`` records.

Shared by the styles parser (named styles, docDefaults) and the body parser
(direct formatting), so both produce identical field semantics.
"""
from __future__ import annotations

from typing import Dict, Optional
from xml.etree import ElementTree as ET

from docx_engine.model.style_model import EMPTY_STYLE, BorderSide, Style
from docx_engine.utils.units import half_points_to_points
from docx_engine.utils.xml_utils import Namespaces, get_attr, get_int_attr, on_off

_ALIGNMENTS: Dict[str, str] = {
    "left": "left",
    "start": "left",
    "right": "right",
    "end": "right",
    "center": "center",
    "both": "justify",
    "distribute": "justify",
}

_NO_BORDER = ("none", "nil")
_NO_FILL = ("auto", "")


def _find(element: Optional[ET.Element], name: str) -> Optional[ET.Element]:
    if element is None:
        return None
    return element.find(name, Namespaces.WORD)


def _find_first(element: Optional[ET.Element], *names: str) -> Optional[ET.Element]:
    for name in names:
        found = _find(element, name)
        if found is not None:
            return found
    return None


def parse_border(border_el: Optional[ET.Element]) -> Optional[BorderSide]:
    """Read one border side; ``none``/``nil`` mean there is no border."""
    if border_el is None:
        return None
    style = get_attr(border_el, "w:val") or "single"
    if style in _NO_BORDER:
        return None
    size = get_int_attr(border_el, "w:sz")
    color = get_attr(border_el, "w:color")
    return BorderSide(
        style=style,
        size=size if size is not None else 4,
        color=None if color in (None, "auto") else color.upper(),
        space=get_int_attr(border_el, "w:space") or 0,
    )


def parse_fill(shd_el: Optional[ET.Element]) -> Optional[str]:
    fill = get_attr(shd_el, "w:fill")
    if fill is None or fill.lower() in _NO_FILL:
        return None
    return fill.upper()


def parse_paragraph_properties(ppr: Optional[ET.Element]) -> Style:
    if ppr is None:
        return EMPTY_STYLE
    values: Dict[str, object] = {}

    jc = get_attr(_find(ppr, "w:jc"), "w:val")
    if jc is not None:
        values["alignment"] = _ALIGNMENTS.get(jc, "left")

    spacing = _find(ppr, "w:spacing")
    if spacing is not None:
        values["spacing_before"] = get_int_attr(spacing, "w:before")
        values["spacing_after"] = get_int_attr(spacing, "w:after")
        values["line_spacing"] = get_int_attr(spacing, "w:line")

    ind = _find(ppr, "w:ind")
    if ind is not None:
        left = get_int_attr(ind, "w:left")
        right = get_int_attr(ind, "w:right")
        values["indent_left"] = left if left is not None else get_int_attr(ind, "w:start")
        values["indent_right"] = right if right is not None else get_int_attr(ind, "w:end")
        first_line = get_int_attr(ind, "w:firstLine")
        if first_line is None:
            hanging = get_int_attr(ind, "w:hanging")
            first_line = -hanging if hanging is not None else None
        values["indent_first_line"] = first_line

    values["shading"] = parse_fill(_find(ppr, "w:shd"))
    values["keep_next"] = on_off(_find(ppr, "w:keepNext"))
    values["keep_lines"] = on_off(_find(ppr, "w:keepLines"))
    values["page_break_before"] = on_off(_find(ppr, "w:pageBreakBefore"))

    num_pr = _find(ppr, "w:numPr")
    if num_pr is not None:
        values["num_id"] = get_int_attr(_find(num_pr, "w:numId"), "w:val")
        values["num_level"] = get_int_attr(_find(num_pr, "w:ilvl"), "w:val")

    borders = _find(ppr, "w:pBdr")
    if borders is not None:
        values["border_top"] = parse_border(_find(borders, "w:top"))
        values["border_bottom"] = parse_border(_find(borders, "w:bottom"))
        values["border_left"] = parse_border(_find_first(borders, "w:left", "w:start"))
        values["border_right"] = parse_border(_find_first(borders, "w:right", "w:end"))

    return Style(**{key: value for key, value in values.items() if value is not None})


def parse_run_properties(rpr: Optional[ET.Element]) -> Style:
    if rpr is None:
        return EMPTY_STYLE
    values: Dict[str, object] = {
        "bold": on_off(_find(rpr, "w:b")),
        "italic": on_off(_find(rpr, "w:i")),
        "strike": on_off(_find(rpr, "w:strike")),
        "double_strike": on_off(_find(rpr, "w:dstrike")),
        "all_caps": on_off(_find(rpr, "w:caps")),
        "small_caps": on_off(_find(rpr, "w:smallCaps")),
        "outline": on_off(_find(rpr, "w:outline")),
        "shadow": on_off(_find(rpr, "w:shadow")),
        "emboss": on_off(_find(rpr, "w:emboss")),
        "imprint": on_off(_find(rpr, "w:imprint")),
        "run_shading": parse_fill(_find(rpr, "w:shd")),
        "text_border": parse_border(_find(rpr, "w:bdr")),
        "highlight": get_attr(_find(rpr, "w:highlight"), "w:val"),
        "character_spacing": get_int_attr(_find(rpr, "w:spacing"), "w:val"),
        "vertical_align": get_attr(_find(rpr, "w:vertAlign"), "w:val"),
    }

    underline = _find(rpr, "w:u")
    if underline is not None:
        values["underline"] = get_attr(underline, "w:val") or "single"

    color_el = _find(rpr, "w:color")
    if color_el is not None:
        values["color"] = get_attr(color_el, "w:val")
        values["theme_color"] = get_attr(color_el, "w:themeColor")
        values["theme_tint"] = get_attr(color_el, "w:themeTint")
        values["theme_shade"] = get_attr(color_el, "w:themeShade")

    size = get_int_attr(_find(rpr, "w:sz"), "w:val")
    if size is not None:
        values["font_size"] = half_points_to_points(size)

    fonts = _find(rpr, "w:rFonts")
    if fonts is not None:
        values["font_family"] = get_attr(fonts, "w:ascii") or get_attr(fonts, "w:hAnsi")
        values["font_theme"] = get_attr(fonts, "w:asciiTheme") or get_attr(fonts, "w:hAnsiTheme")

    return Style(**{key: value for key, value in values.items() if value is not None})


def parse_cell_properties(tc_pr: Optional[ET.Element]) -> Style:
    """Read ``w:tcPr`` shading, vertical alignment and borders."""
    if tc_pr is None:
        return EMPTY_STYLE
    borders = _find(tc_pr, "w:tcBorders")
    values: Dict[str, object] = {
        "cell_shading": parse_fill(_find(tc_pr, "w:shd")),
        "cell_vertical_align": get_attr(_find(tc_pr, "w:vAlign"), "w:val"),
        "cell_border_top": parse_border(_find(borders, "w:top")),
        "cell_border_bottom": parse_border(_find(borders, "w:bottom")),
        "cell_border_left": parse_border(_find_first(borders, "w:left", "w:start")),
        "cell_border_right": parse_border(_find_first(borders, "w:right", "w:end")),
    }
    return Style(**{key: value for key, value in values.items() if value is not None})


def parse_style_properties(element: ET.Element) -> Style:
    """Merge the ``w:pPr``, ``w:rPr`` and ``w:tcPr`` children of ``element`` into one partial style."""
    paragraph = parse_paragraph_properties(_find(element, "w:pPr"))
    return paragraph.merged(parse_run_properties(_find(element, "w:rPr"))).merged(
        parse_cell_properties(_find(element, "w:tcPr"))
    )
