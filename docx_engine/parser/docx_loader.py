"""DOCX package loader responsible for unpacking named parts."""
from __future__ import annotations

import io
import zipfile
import zlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional
from xml.etree import ElementTree as ET

from docx_engine.errors import DocxLoadError
from docx_engine.utils.logger import get_logger
from docx_engine.utils.xml_utils import parse_xml, try_parse_xml

LOGGER = get_logger(__name__)

CONTENT_TYPES_PATH = "[Content_Types].xml"
PACKAGE_REL_PATH = "_rels/.rels"
DOCUMENT_XML_PATH = "word/document.xml"
STYLES_XML_PATH = "word/styles.xml"
NUMBERING_XML_PATH = "word/numbering.xml"
SETTINGS_XML_PATH = "word/settings.xml"
FONT_TABLE_XML_PATH = "word/fontTable.xml"
THEME_XML_PATH = "word/theme/theme1.xml"
FOOTNOTES_XML_PATH = "word/footnotes.xml"
ENDNOTES_XML_PATH = "word/endnotes.xml"
HEADER_BG_XML_PATH = "word/header_bg.xml"

# Member reads fail with these as well as the archive open itself.
_ARCHIVE_ERRORS = (zipfile.BadZipFile, zipfile.LargeZipFile, zlib.error, RuntimeError, NotImplementedError, EOFError)


def rels_path_for(part_name: str) -> str:
    """Return the ``.rels`` part holding relationships owned by ``part_name``."""
    if not part_name:
        return PACKAGE_REL_PATH
    folder, _, base = part_name.rpartition("/")
    if folder:
        return f"{folder}/_rels/{base}.rels"
    return f"_rels/{base}.rels"


@dataclass(slots=True)
class DocxPackage:
    """Read-only view over the parts of a DOCX archive."""

    raw_parts: Mapping[str, bytes]
    xml_cache: Dict[str, Optional[ET.ElementTree]] = field(default_factory=dict)

    @classmethod
    def from_bytes(cls, data: bytes) -> "DocxPackage":
        """Open an in-memory archive; anything that is not a ZIP is fatal."""
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as docx_zip:
                parts = {name: docx_zip.read(name) for name in docx_zip.namelist() if not name.endswith("/")}
        except _ARCHIVE_ERRORS as exc:
            raise DocxLoadError(f"Not a readable DOCX archive: {exc}") from exc

        LOGGER.debug("Loaded %d parts from archive", len(parts))
        return cls(raw_parts=parts)

    @classmethod
    def load(cls, docx_path: Path) -> "DocxPackage":
        """Open a DOCX archive from disk."""
        return cls.from_bytes(Path(docx_path).read_bytes())

    # ------------------------------------------------------------------
    # Public helpers
    def names(self) -> List[str]:
        return list(self.raw_parts)

    def has_part(self, name: str) -> bool:
        return name in self.raw_parts

    def get_part_data(self, name: str) -> Optional[bytes]:
        """Return raw bytes of a part, or None when it does not exist."""
        return self.raw_parts.get(name.lstrip("/"))

    def read_content(self, name: str) -> Optional[str]:
        """Return the decoded text of a part, or None when missing or undecodable."""
        data = self.get_part_data(name)
        if data is None:
            LOGGER.debug("Optional part absent: %s", name)
            return None
        try:
            return data.decode("utf-8-sig")
        except UnicodeDecodeError:
            LOGGER.warning("Part %s is not valid UTF-8; ignoring it", name)
            return None

    def get_xml_part(self, name: str) -> Optional[ET.ElementTree]:
        """Parse an optional XML part; malformed content is treated as absent."""
        name = name.lstrip("/")
        if name in self.xml_cache:
            return self.xml_cache[name]
        tree = try_parse_xml(self.raw_parts.get(name), name)
        self.xml_cache[name] = tree
        return tree

    def require_document_xml(self) -> ET.ElementTree:
        """Return the main document part; missing or corrupt content aborts the load."""
        data = self.raw_parts.get(DOCUMENT_XML_PATH)
        if data is None:
            raise DocxLoadError("Primary document part missing from package", DOCUMENT_XML_PATH)
        try:
            return parse_xml(data)
        except ET.ParseError as exc:
            raise DocxLoadError(f"Primary document part is not well-formed XML: {exc}", DOCUMENT_XML_PATH) from exc
