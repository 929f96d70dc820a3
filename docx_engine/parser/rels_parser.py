"""Utilities for reading Open Packaging Convention relationship and content-type parts."""
from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from docx_engine.parser.docx_loader import CONTENT_TYPES_PATH, DOCUMENT_XML_PATH, DocxPackage, rels_path_for
from docx_engine.utils.logger import get_logger
from docx_engine.utils.xml_utils import Namespaces, try_parse_xml

LOGGER = get_logger(__name__)

WORD_REL_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"

RELTYPE_IMAGE = f"{WORD_REL_NS}/image"
RELTYPE_HYPERLINK = f"{WORD_REL_NS}/hyperlink"
RELTYPE_HEADER = f"{WORD_REL_NS}/header"
RELTYPE_FOOTER = f"{WORD_REL_NS}/footer"
RELTYPE_STYLES = f"{WORD_REL_NS}/styles"
RELTYPE_NUMBERING = f"{WORD_REL_NS}/numbering"
RELTYPE_FONT_TABLE = f"{WORD_REL_NS}/fontTable"
RELTYPE_SETTINGS = f"{WORD_REL_NS}/settings"
RELTYPE_THEME = f"{WORD_REL_NS}/theme"
RELTYPE_FONT = f"{WORD_REL_NS}/font"

EXTERNAL_MODE = "External"


@dataclass(frozen=True)
class Relationship:
    """Represents a single OPC relationship."""

    r_id: str
    rel_type: str
    target: str
    target_mode: Optional[str] = None

    @property
    def is_external(self) -> bool:
        return self.target_mode == EXTERNAL_MODE

    @property
    def short_type(self) -> str:
        """The relationship type without its namespace, e.g. ``image``."""
        return self.rel_type.rsplit("/", 1)[-1]

    @property
    def is_image(self) -> bool:
        return self.short_type == "image"

    @property
    def is_hyperlink(self) -> bool:
        return self.short_type == "hyperlink"

    @property
    def is_header(self) -> bool:
        return self.short_type == "header"

    @property
    def is_footer(self) -> bool:
        return self.short_type == "footer"


class RelationshipTable:
    """Relationships owned by one source part, with usage tracking."""

    def __init__(self, source_part: str, relationships: Optional[Dict[str, Relationship]] = None) -> None:
        self.source_part = source_part
        self.base_dir = posixpath.dirname(source_part)
        self._by_id: Dict[str, Relationship] = dict(relationships or {})
        self._referenced: List[str] = []
        self._referenced_set: Set[str] = set()

    @classmethod
    def from_xml(cls, source_part: str, xml_text: Optional[str | bytes]) -> "RelationshipTable":
        """Parse a ``.rels`` payload; malformed content yields an empty table."""
        table = cls(source_part)
        tree = try_parse_xml(xml_text, rels_path_for(source_part))
        if tree is None:
            return table
        for rel_el in tree.getroot().findall("rel:Relationship", Namespaces.RELS):
            r_id = rel_el.attrib.get("Id")
            if not r_id:
                continue
            table._by_id[r_id] = Relationship(
                r_id=r_id,
                rel_type=rel_el.attrib.get("Type", ""),
                target=rel_el.attrib.get("Target", ""),
                target_mode=rel_el.attrib.get("TargetMode"),
            )
        return table

    def get(self, r_id: str) -> Optional[Relationship]:
        """Look up a relationship and record that the document refers to it."""
        if r_id not in self._referenced_set:
            self._referenced_set.add(r_id)
            self._referenced.append(r_id)
        return self._by_id.get(r_id)

    def peek(self, r_id: str) -> Optional[Relationship]:
        """Look up a relationship without recording a reference."""
        return self._by_id.get(r_id)

    def resolve_target(self, r_id: str) -> Optional[str]:
        """Return the archive path (or external URL) the relationship points at."""
        rel = self.get(r_id)
        if rel is None:
            return None
        return self.resolve(rel)

    def resolve(self, rel: Relationship) -> str:
        if rel.is_external:
            return rel.target
        if rel.target.startswith("/"):
            return rel.target[1:]
        if not self.base_dir:
            return posixpath.normpath(rel.target)
        return posixpath.normpath(posixpath.join(self.base_dir, rel.target))

    def by_type(self, short_type: str) -> List[Relationship]:
        return [rel for rel in self._by_id.values() if rel.short_type == short_type]

    def first_target(self, short_type: str) -> Optional[str]:
        """Resolved target of the first relationship of a type, without marking it."""
        for rel in self._by_id.values():
            if rel.short_type == short_type:
                return self.resolve(rel)
        return None

    def validate_references(self) -> List[str]:
        """Return ids that were looked up with ``get`` but are not defined."""
        return [r_id for r_id in self._referenced if r_id not in self._by_id]

    @property
    def referenced_ids(self) -> List[str]:
        return list(self._referenced)

    def ids(self) -> List[str]:
        return list(self._by_id)

    def __contains__(self, r_id: object) -> bool:
        return r_id in self._by_id

    def __len__(self) -> int:
        return len(self._by_id)


@dataclass
class ContentTypeTable:
    """Extension defaults and per-part overrides from ``[Content_Types].xml``."""

    defaults: Dict[str, str] = field(default_factory=dict)
    overrides: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_xml(cls, xml_text: Optional[str | bytes]) -> "ContentTypeTable":
        table = cls()
        tree = try_parse_xml(xml_text, CONTENT_TYPES_PATH)
        if tree is None:
            return table
        root = tree.getroot()
        for default_el in root.findall("ct:Default", Namespaces.CONTENT_TYPES):
            extension = default_el.attrib.get("Extension")
            content_type = default_el.attrib.get("ContentType")
            if extension and content_type:
                table.defaults[extension.lower()] = content_type
        for override_el in root.findall("ct:Override", Namespaces.CONTENT_TYPES):
            part_name = override_el.attrib.get("PartName")
            content_type = override_el.attrib.get("ContentType")
            if part_name and content_type:
                table.overrides[part_name.lstrip("/")] = content_type
        return table

    def content_type_for(self, part_name: str) -> Optional[str]:
        """Override wins; otherwise fall back to the extension default."""
        normalized = part_name.lstrip("/")
        if normalized in self.overrides:
            return self.overrides[normalized]
        _, dot, extension = normalized.rpartition(".")
        if not dot:
            return None
        return self.defaults.get(extension.lower())


class RelationshipManager:
    """Load-scoped registry of content types and per-part relationship tables."""

    def __init__(self, package: DocxPackage) -> None:
        self._package = package
        self._tables: Dict[str, RelationshipTable] = {}
        self._content_types: Optional[ContentTypeTable] = None

    def load_content_types(self) -> ContentTypeTable:
        if self._content_types is None:
            self._content_types = ContentTypeTable.from_xml(self._package.read_content(CONTENT_TYPES_PATH))
        return self._content_types

    def load_document_relationships(self) -> RelationshipTable:
        return self.for_part(DOCUMENT_XML_PATH)

    def load_package_relationships(self) -> RelationshipTable:
        return self.for_part("")

    def for_part(self, part_name: str) -> RelationshipTable:
        """Return the table owned by ``part_name``, reading its ``.rels`` on first use."""
        table = self._tables.get(part_name)
        if table is None:
            rels_path = rels_path_for(part_name)
            table = RelationshipTable.from_xml(part_name, self._package.read_content(rels_path))
            LOGGER.debug("Loaded %d relationships for %s", len(table), part_name or "package")
            self._tables[part_name] = table
        return table

    @property
    def content_types(self) -> ContentTypeTable:
        return self.load_content_types()

    @property
    def document(self) -> RelationshipTable:
        return self.load_document_relationships()

    def validate_references(self) -> List[str]:
        """Dangling ids across every loaded scope, prefixed with the owning part."""
        dangling: List[str] = []
        for part_name, table in self._tables.items():
            for r_id in table.validate_references():
                dangling.append(r_id if part_name == DOCUMENT_XML_PATH else f"{part_name}#{r_id}")
        return dangling
