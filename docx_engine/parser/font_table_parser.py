"""Read ``fontTable.xml`` and decode the embedded fonts it references."""
from __future__ import annotations

from typing import Callable, List, Optional
from xml.etree import ElementTree as ET

from docx_engine.errors import FontKeyError
from docx_engine.model.font_model import (
    FONT_VARIANTS,
    EmbeddedFont,
    FontCatalog,
    FontEmbedReference,
    FontInfo,
)
from docx_engine.parser.rels_parser import RelationshipTable
from docx_engine.utils.logger import get_logger
from docx_engine.utils.xml_utils import Namespaces, get_attr

LOGGER = get_logger(__name__)

PartReader = Callable[[str], Optional[bytes]]


class FontTableParser:
    """Builds a load-scoped ``FontCatalog``; a bad entry only loses that font."""

    def __init__(
        self,
        font_table_xml: Optional[ET.ElementTree],
        relationships: RelationshipTable,
        read_part: PartReader,
    ) -> None:
        self._font_table_xml = font_table_xml
        self._relationships = relationships
        self._read_part = read_part

    def parse(self) -> FontCatalog:
        catalog = FontCatalog()
        if self._font_table_xml is None:
            return catalog
        for font_el in self._font_table_xml.getroot().findall("w:font", Namespaces.WORD):
            info = self._parse_font_info(font_el)
            if info is None:
                continue
            catalog.table[info.name] = info
            for embed in info.embeds:
                font = self._load_embedded(info.name, embed)
                if font is not None:
                    catalog.add(font)
        LOGGER.debug("Decoded %d embedded fonts from %d table entries", len(catalog), len(catalog.table))
        return catalog

    def _parse_font_info(self, font_el: ET.Element) -> Optional[FontInfo]:
        name = get_attr(font_el, "w:name")
        if not name:
            return None
        embeds: List[FontEmbedReference] = []
        for variant in FONT_VARIANTS:
            embed_el = font_el.find(f"w:embed{variant[0].upper()}{variant[1:]}", Namespaces.WORD)
            if embed_el is None:
                continue
            r_id = get_attr(embed_el, "r:id")
            if not r_id:
                continue
            embeds.append(
                FontEmbedReference(
                    variant=variant,
                    r_id=r_id,
                    font_key=get_attr(embed_el, "w:fontKey"),
                    subsetted=get_attr(embed_el, "w:subsetted") in ("1", "true", "on"),
                )
            )
        return FontInfo(
            name=name,
            alt_name=self._child_val(font_el, "w:altName"),
            charset=self._child_val(font_el, "w:charset"),
            family=self._child_val(font_el, "w:family"),
            pitch=self._child_val(font_el, "w:pitch"),
            embeds=tuple(embeds),
        )

    def _load_embedded(self, family_name: str, embed: FontEmbedReference) -> Optional[EmbeddedFont]:
        target = self._relationships.resolve_target(embed.r_id)
        data = self._read_part(target) if target else None
        if not data:
            LOGGER.warning("Embedded font %s (%s) unavailable: missing part for %s", family_name, embed.variant, embed.r_id)
            return None
        if embed.font_key is None:
            return EmbeddedFont(family_name=family_name, data=data, variant=embed.variant)
        try:
            return EmbeddedFont.from_obfuscated(family_name, data, embed.font_key, variant=embed.variant)
        except FontKeyError as exc:
            LOGGER.warning("Embedded font %s (%s) unavailable: %s", family_name, embed.variant, exc)
            return None

    def _child_val(self, element: ET.Element, child_name: str) -> Optional[str]:
        return get_attr(element.find(child_name, Namespaces.WORD), "w:val")
