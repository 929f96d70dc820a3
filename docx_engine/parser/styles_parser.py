"""Extract style definitions from styles.xml and produce a catalog."""
from __future__ import annotations

from typing import Dict, List, Optional
from xml.etree import ElementTree as ET

from docx_engine.model.style_model import EMPTY_STYLE, LatentStyle, Style, StyleDefinition, StylesCatalog
from docx_engine.parser.properties_parser import (
    parse_paragraph_properties,
    parse_run_properties,
    parse_style_properties,
)
from docx_engine.utils.logger import get_logger
from docx_engine.utils.xml_utils import Namespaces, get_attr, get_int_attr

LOGGER = get_logger(__name__)


class StylesParser:
    """Parse Word styles, document defaults and latent style exceptions."""

    def __init__(self, styles_xml: Optional[ET.ElementTree]) -> None:
        self._styles_xml = styles_xml

    def parse(self) -> StylesCatalog:
        """Parse the XML tree and return a catalog; no tree gives an empty catalog."""
        if self._styles_xml is None:
            return StylesCatalog({})
        root = self._styles_xml.getroot()
        styles = self._collect_styles(root)
        LOGGER.debug("Parsed %d style definitions", len(styles))
        return StylesCatalog(
            styles,
            doc_defaults=self._parse_doc_defaults(root),
            latent_styles=self._parse_latent_styles(root),
        )

    def _collect_styles(self, root: ET.Element) -> Dict[str, StyleDefinition]:
        styles: Dict[str, StyleDefinition] = {}
        for style_el in root.findall("w:style", Namespaces.WORD):
            style_id = get_attr(style_el, "w:styleId")
            if not style_id:
                continue
            styles[style_id] = StyleDefinition(
                style_id=style_id,
                style_type=get_attr(style_el, "w:type") or "paragraph",
                name=self._get_attr(style_el, "w:name", "w:val"),
                properties=parse_style_properties(style_el),
                based_on=self._get_attr(style_el, "w:basedOn", "w:val"),
                next_style=self._get_attr(style_el, "w:next", "w:val"),
                linked_style=self._get_attr(style_el, "w:link", "w:val"),
                is_default=get_attr(style_el, "w:default") in ("1", "true", "on"),
                ui_priority=get_int_attr(style_el.find("w:uiPriority", Namespaces.WORD), "w:val"),
                is_primary=style_el.find("w:qFormat", Namespaces.WORD) is not None,
                table_conditions=self._parse_table_conditions(style_el),
            )
        return styles

    def _parse_table_conditions(self, style_el: ET.Element) -> Dict[str, Style]:
        conditions: Dict[str, Style] = {}
        for condition_el in style_el.findall("w:tblStylePr", Namespaces.WORD):
            kind = get_attr(condition_el, "w:type")
            if kind:
                conditions[kind] = parse_style_properties(condition_el)
        return conditions

    def _parse_doc_defaults(self, root: ET.Element) -> Style:
        defaults_el = root.find("w:docDefaults", Namespaces.WORD)
        if defaults_el is None:
            return EMPTY_STYLE
        paragraph = parse_paragraph_properties(defaults_el.find("w:pPrDefault/w:pPr", Namespaces.WORD))
        run = parse_run_properties(defaults_el.find("w:rPrDefault/w:rPr", Namespaces.WORD))
        return paragraph.merged(run)

    def _parse_latent_styles(self, root: ET.Element) -> List[LatentStyle]:
        latent: List[LatentStyle] = []
        for exception_el in root.findall("w:latentStyles/w:lsdException", Namespaces.WORD):
            name = get_attr(exception_el, "w:name")
            if not name:
                continue
            latent.append(
                LatentStyle(
                    name=name,
                    semi_hidden=self._flag(exception_el, "w:semiHidden"),
                    unhide_when_used=self._flag(exception_el, "w:unhideWhenUsed"),
                    ui_priority=get_int_attr(exception_el, "w:uiPriority"),
                    q_format=self._flag(exception_el, "w:qFormat"),
                )
            )
        return latent

    # ------------------------------------------------------------------
    def _get_attr(self, element: ET.Element, child_name: str, attr_name: str) -> Optional[str]:
        child = element.find(child_name, Namespaces.WORD)
        if child is None:
            return None
        return get_attr(child, attr_name)

    def _flag(self, element: ET.Element, attr_name: str) -> Optional[bool]:
        value = get_attr(element, attr_name)
        if value is None:
            return None
        return value in ("1", "true", "on")

