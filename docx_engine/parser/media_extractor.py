"""Resolve image relationships into binary payloads and media types."""
from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Dict, Optional

from docx_engine.parser.docx_loader import DocxPackage
from docx_engine.parser.rels_parser import ContentTypeTable, RelationshipTable
from docx_engine.utils.logger import get_logger

LOGGER = get_logger(__name__)

_FALLBACK_TYPES: Dict[str, str] = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
    ".svg": "image/svg+xml",
    ".emf": "image/x-emf",
    ".wmf": "image/x-wmf",
}


@dataclass(frozen=True, slots=True)
class MediaPayload:
    """An image part located through a relationship."""

    target: str
    data: Optional[bytes]
    content_type: Optional[str]
    is_external: bool = False


class MediaResolver:
    """Maps relationship identifiers to actual media payloads."""

    def __init__(self, package: DocxPackage, content_types: ContentTypeTable, embed_data: bool = True) -> None:
        self._package = package
        self._content_types = content_types
        self._embed_data = embed_data

    def resolve_image(self, relationships: RelationshipTable, r_id: str) -> Optional[MediaPayload]:
        """Return the payload for ``r_id``; None when the id is not defined in that scope."""
        rel = relationships.get(r_id)
        if rel is None:
            LOGGER.warning("Image relationship %s not defined for %s", r_id, relationships.source_part)
            return None
        target = relationships.resolve(rel)
        if rel.is_external:
            return MediaPayload(target=target, data=None, content_type=self.media_type(target), is_external=True)
        data = self._package.get_part_data(target) if self._embed_data else None
        if data is None and self._embed_data:
            LOGGER.warning("Image part %s referenced by %s is missing", target, r_id)
        return MediaPayload(target=target, data=data, content_type=self.media_type(target))

    def media_type(self, target_path: str) -> str:
        """Determine MIME type from the content-type table, then from the extension."""
        declared = self._content_types.content_type_for(target_path)
        if declared:
            return declared
        ext = PurePosixPath(target_path).suffix.lower()
        if ext in _FALLBACK_TYPES:
            return _FALLBACK_TYPES[ext]
        mime_type, _ = mimetypes.guess_type(target_path)
        return mime_type or "application/octet-stream"
