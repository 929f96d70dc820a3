"""Parse the DrawingML theme part into colour and font schemes."""
from __future__ import annotations

import re
from dataclasses import fields
from typing import Dict, Optional
from xml.etree import ElementTree as ET

from docx_engine.model.theme_model import ThemeColors, ThemeFonts
from docx_engine.utils.logger import get_logger
from docx_engine.utils.xml_utils import Namespaces

LOGGER = get_logger(__name__)

_HEX_COLOR = re.compile(r"[0-9a-fA-F]{6}")
_SCRIPT_TAGS = (("latin", "latin"), ("ea", "east_asia"), ("cs", "complex_script"))


class ThemeParser:
    """Reads ``a:clrScheme`` and ``a:fontScheme``; anything missing keeps its default."""

    def __init__(self, theme_xml: Optional[ET.ElementTree]) -> None:
        self._theme_xml = theme_xml

    def parse_colors(self) -> ThemeColors:
        if self._theme_xml is None:
            return ThemeColors()
        scheme = self._theme_xml.getroot().find(".//a:clrScheme", Namespaces.DRAWING)
        if scheme is None:
            return ThemeColors()
        values: Dict[str, str] = {}
        for slot in (f.name for f in fields(ThemeColors)):
            slot_el = scheme.find(f"a:{slot}", Namespaces.DRAWING)
            color = self._slot_color(slot_el)
            if color is not None:
                values[slot] = color
        return ThemeColors(**values)

    def parse_fonts(self) -> ThemeFonts:
        if self._theme_xml is None:
            return ThemeFonts()
        scheme = self._theme_xml.getroot().find(".//a:fontScheme", Namespaces.DRAWING)
        if scheme is None:
            return ThemeFonts()
        values: Dict[str, str] = {}
        for group in ("major", "minor"):
            group_el = scheme.find(f"a:{group}Font", Namespaces.DRAWING)
            if group_el is None:
                continue
            for tag, suffix in _SCRIPT_TAGS:
                typeface_el = group_el.find(f"a:{tag}", Namespaces.DRAWING)
                if typeface_el is None:
                    continue
                typeface = typeface_el.attrib.get("typeface")
                if typeface is not None:
                    values[f"{group}_{suffix}"] = typeface
        return ThemeFonts(**values)

    def _slot_color(self, slot_el: Optional[ET.Element]) -> Optional[str]:
        if slot_el is None:
            return None
        srgb = slot_el.find("a:srgbClr", Namespaces.DRAWING)
        if srgb is not None:
            return self._normalize(srgb.attrib.get("val"))
        system = slot_el.find("a:sysClr", Namespaces.DRAWING)
        if system is not None:
            return self._normalize(system.attrib.get("lastClr") or system.attrib.get("val"))
        return None

    def _normalize(self, value: Optional[str]) -> Optional[str]:
        if value is None or not _HEX_COLOR.fullmatch(value):
            if value is not None:
                LOGGER.debug("Ignoring non-hex theme colour %s", value)
            return None
        return value.upper()
