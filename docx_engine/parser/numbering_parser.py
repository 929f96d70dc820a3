"""Parse numbering.xml into numbering model definitions."""
from __future__ import annotations

from typing import Callable, Dict, Optional
from xml.etree import ElementTree as ET

from docx_engine.model.numbering_model import (
    AbstractNumberingDefinition,
    NumberingCatalog,
    NumberingInstance,
    NumberingLevel,
    NumberingOverride,
)
from docx_engine.parser.rels_parser import RelationshipTable
from docx_engine.utils.logger import get_logger
from docx_engine.utils.xml_utils import Namespaces, get_attr, get_int_attr, qualify

LOGGER = get_logger(__name__)

MAX_LEVELS = 9

PartReader = Callable[[str], Optional[bytes]]


class NumberingParser:
    """Parser for numbering definitions defined in numbering.xml."""

    def __init__(
        self,
        numbering_xml: Optional[ET.ElementTree],
        relationships: Optional[RelationshipTable] = None,
        read_part: Optional[PartReader] = None,
    ) -> None:
        self._numbering_xml = numbering_xml
        self._relationships = relationships
        self._read_part = read_part

    def parse(self) -> NumberingCatalog:
        if self._numbering_xml is None:
            return NumberingCatalog.empty()

        root = self._numbering_xml.getroot()
        abstracts = self._parse_abstract_nums(root)
        instances = self._parse_nums(root)
        pictures = self._parse_picture_bullets(root)
        LOGGER.debug(
            "Parsed %d abstract numberings, %d instances, %d picture bullets",
            len(abstracts),
            len(instances),
            len(pictures),
        )
        return NumberingCatalog(abstracts=abstracts, instances=instances, picture_bullets=pictures)

    # ------------------------------------------------------------------
    def _parse_abstract_nums(self, root: ET.Element) -> Dict[int, AbstractNumberingDefinition]:
        abstracts: Dict[int, AbstractNumberingDefinition] = {}
        for abstract_el in root.findall("w:abstractNum", Namespaces.WORD):
            abstract_id = get_int_attr(abstract_el, "w:abstractNumId")
            if abstract_id is None:
                continue
            abstracts[abstract_id] = AbstractNumberingDefinition(
                abstract_num_id=abstract_id,
                multi_level_type=self._get_attr(abstract_el, "w:multiLevelType", "w:val"),
                name=self._get_attr(abstract_el, "w:name", "w:val"),
                style_link=self._get_attr(abstract_el, "w:styleLink", "w:val"),
                levels=self._parse_levels(abstract_el),
            )
        return abstracts

    def _parse_levels(self, abstract_el: ET.Element) -> Dict[int, NumberingLevel]:
        levels: Dict[int, NumberingLevel] = {}
        for lvl_el in abstract_el.findall("w:lvl", Namespaces.WORD):
            level = self._parse_level(lvl_el)
            if level is not None:
                levels[level.level_index] = level
        return levels

    def _parse_level(self, lvl_el: ET.Element) -> Optional[NumberingLevel]:
        level_index = get_int_attr(lvl_el, "w:ilvl")
        if level_index is None or not 0 <= level_index < MAX_LEVELS:
            return None
        start = self._get_int_attr(lvl_el, "w:start", "w:val")
        ind = lvl_el.find("w:pPr/w:ind", Namespaces.WORD)
        fonts = lvl_el.find("w:rPr/w:rFonts", Namespaces.WORD)
        color = lvl_el.find("w:rPr/w:color", Namespaces.WORD)
        left = get_int_attr(ind, "w:left")
        color_value = get_attr(color, "w:val")
        return NumberingLevel(
            level_index=level_index,
            start=start if start is not None else 1,
            num_format=self._get_attr(lvl_el, "w:numFmt", "w:val") or "decimal",
            level_text=self._get_attr(lvl_el, "w:lvlText", "w:val"),
            alignment=self._get_attr(lvl_el, "w:lvlJc", "w:val"),
            indent_left=left if left is not None else get_int_attr(ind, "w:start"),
            hanging=get_int_attr(ind, "w:hanging"),
            bullet_font=get_attr(fonts, "w:ascii") or get_attr(fonts, "w:hAnsi"),
            theme_font=get_attr(fonts, "w:asciiTheme") or get_attr(fonts, "w:hAnsiTheme"),
            theme_color=get_attr(color, "w:themeColor"),
            theme_tint=get_attr(color, "w:themeTint"),
            theme_shade=get_attr(color, "w:themeShade"),
            color=None if color_value in (None, "auto") else color_value.upper(),
            pic_bullet_id=self._get_int_attr(lvl_el, "w:lvlPicBulletId", "w:val"),
        )

    def _parse_nums(self, root: ET.Element) -> Dict[int, NumberingInstance]:
        instances: Dict[int, NumberingInstance] = {}
        for num_el in root.findall("w:num", Namespaces.WORD):
            num_id = get_int_attr(num_el, "w:numId")
            if num_id is None:
                continue
            abstract_num_id = self._get_int_attr(num_el, "w:abstractNumId", "w:val")
            if abstract_num_id is None:
                continue
            instances[num_id] = NumberingInstance(
                num_id=num_id,
                abstract_num_id=abstract_num_id,
                overrides=self._parse_overrides(num_el),
            )
        return instances

    def _parse_overrides(self, num_el: ET.Element) -> Dict[int, NumberingOverride]:
        overrides: Dict[int, NumberingOverride] = {}
        for override_el in num_el.findall("w:lvlOverride", Namespaces.WORD):
            level_index = get_int_attr(override_el, "w:ilvl")
            if level_index is None:
                continue
            lvl_el = override_el.find("w:lvl", Namespaces.WORD)
            overrides[level_index] = NumberingOverride(
                level_index=level_index,
                start_override=self._get_int_attr(override_el, "w:startOverride", "w:val"),
                level=self._parse_level(lvl_el) if lvl_el is not None else None,
            )
        return overrides

    def _parse_picture_bullets(self, root: ET.Element) -> Dict[int, bytes]:
        pictures: Dict[int, bytes] = {}
        if self._relationships is None or self._read_part is None:
            return pictures
        for bullet_el in root.findall("w:numPicBullet", Namespaces.WORD):
            bullet_id = get_int_attr(bullet_el, "w:numPicBulletId")
            r_id = self._picture_rel_id(bullet_el)
            if bullet_id is None or r_id is None:
                continue
            target = self._relationships.resolve_target(r_id)
            data = self._read_part(target) if target else None
            if data is None:
                LOGGER.warning("Picture bullet %s references missing image %s", bullet_id, r_id)
                continue
            pictures[bullet_id] = data
        return pictures

    def _picture_rel_id(self, bullet_el: ET.Element) -> Optional[str]:
        imagedata = bullet_el.find("w:pict/v:shape/v:imagedata", {**Namespaces.WORD, **Namespaces.DRAWING})
        if imagedata is not None:
            return imagedata.attrib.get(qualify("r:id"))
        blip = bullet_el.find(".//a:blip", Namespaces.DRAWING)
        if blip is not None:
            return blip.attrib.get(qualify("r:embed"))
        return None

    # ------------------------------------------------------------------
    def _get_attr(self, element: ET.Element, child_name: str, attr_name: str) -> Optional[str]:
        return get_attr(element.find(child_name, Namespaces.WORD), attr_name)

    def _get_int_attr(self, element: ET.Element, child_name: str, attr_name: str) -> Optional[int]:
        return get_int_attr(element.find(child_name, Namespaces.WORD), attr_name)
