"""Helper functions to work with XML namespaces and parsing."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional
from xml.etree import ElementTree as ET

from docx_engine.utils.logger import get_logger

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class Namespaces:
    """Common OpenXML namespace prefixes used across parsers."""

    WORD: Dict[str, str] = None  # type: ignore[assignment]
    RELS: Dict[str, str] = None  # type: ignore[assignment]
    DRAWING: Dict[str, str] = None  # type: ignore[assignment]
    CONTENT_TYPES: Dict[str, str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:  # pragma: no cover
        raise RuntimeError("Namespaces should not be instantiated")


Namespaces.WORD = {  # type: ignore[attr-defined]
    "w": "http://schemas.openxmlformats.org/wordprocessingml/2006/main",
    "r": "http://schemas.openxmlformats.org/officeDocument/2006/relationships",
}
Namespaces.RELS = {  # type: ignore[attr-defined]
    "rel": "http://schemas.openxmlformats.org/package/2006/relationships",
}
Namespaces.DRAWING = {  # type: ignore[attr-defined]
    "a": "http://schemas.openxmlformats.org/drawingml/2006/main",
    "wp": "http://schemas.openxmlformats.org/drawingml/2006/wordprocessingDrawing",
    "pic": "http://schemas.openxmlformats.org/drawingml/2006/picture",
    "wps": "http://schemas.microsoft.com/office/word/2010/wordprocessingShape",
    "r": "http://schemas.openxmlformats.org/officeDocument/2006/relationships",
    "v": "urn:schemas-microsoft-com:vml",
    "mc": "http://schemas.openxmlformats.org/markup-compatibility/2006",
}
Namespaces.CONTENT_TYPES = {  # type: ignore[attr-defined]
    "ct": "http://schemas.openxmlformats.org/package/2006/content-types",
}

_ALL_PREFIXES: Dict[str, str] = {}
for _mapping in (Namespaces.WORD, Namespaces.DRAWING):
    _ALL_PREFIXES.update(_mapping)


def parse_xml(data: bytes | str) -> ET.ElementTree:
    """Parse XML from raw bytes with sane defaults."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return ET.ElementTree(ET.fromstring(data))


def try_parse_xml(data: Optional[bytes | str], part_name: str) -> Optional[ET.ElementTree]:
    """Parse an optional part, returning None when it is absent or malformed."""
    if data is None:
        return None
    try:
        return parse_xml(data)
    except ET.ParseError as exc:
        LOGGER.warning("Ignoring malformed XML in %s: %s", part_name, exc)
        return None


def find_text(element: ET.Element, xpath: str, namespaces: Optional[Dict[str, str]] = None) -> Optional[str]:
    """Return trimmed text from the first element that matches the xpath."""
    found = element.find(xpath, namespaces or {})
    if found is None or found.text is None:
        return None
    return found.text.strip()


def qualify(name: str) -> str:
    """Expand a ``prefix:local`` name into Clark notation."""
    prefix, local = name.split(":", 1)
    return f"{{{_ALL_PREFIXES[prefix]}}}{local}"


def strip_namespace(tag: str) -> str:
    return tag.split("}", 1)[-1]


def get_attr(element: Optional[ET.Element], attr_name: str) -> Optional[str]:
    """Read a namespaced attribute such as ``w:val`` from an element."""
    if element is None:
        return None
    return element.attrib.get(qualify(attr_name))


def get_int_attr(element: Optional[ET.Element], attr_name: str) -> Optional[int]:
    value = get_attr(element, attr_name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        try:
            return int(float(value))
        except (ValueError, OverflowError):
            return None


def on_off(element: Optional[ET.Element]) -> Optional[bool]:
    """Interpret an OOXML toggle element (``<w:b/>``, ``<w:b w:val="0"/>``)."""
    if element is None:
        return None
    value = get_attr(element, "w:val")
    if value is None:
        return True
    return value.lower() not in ("0", "false", "off", "none")
