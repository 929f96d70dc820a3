"""Embedded font records and the OOXML font obfuscation transform.

Word obfuscates embedded fonts by XOR-ing the first 32 bytes of the binary
with a 16-byte key derived from the ``w:fontKey`` GUID. The GUID is laid out
with the usual mixed endianness (first three groups little-endian, last eight
bytes verbatim) and the key is applied in reverse order.
"""
from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from docx_engine.errors import FontKeyError

OBFUSCATED_LENGTH = 32
KEY_LENGTH = 16

FONT_VARIANTS: Tuple[str, ...] = ("regular", "bold", "italic", "boldItalic")

_GUID_SEPARATORS = re.compile(r"[{}\-]")
_HEX_32 = re.compile(r"[0-9a-fA-F]{32}")
_SFNT_SIGNATURES = (b"\x00\x01\x00\x00", b"OTTO", b"true", b"ttcf")


def parse_font_key(key: str) -> bytes:
    """Convert a ``{XXXXXXXX-XXXX-XXXX-XXXX-XXXXXXXXXXXX}`` GUID into 16 key bytes."""
    cleaned = _GUID_SEPARATORS.sub("", key or "")
    if not _HEX_32.fullmatch(cleaned):
        raise FontKeyError(f"Font key must contain exactly 32 hex digits, got {key!r}")
    return uuid.UUID(hex=cleaned).bytes_le


def deobfuscate(data: bytes, key: str | bytes) -> bytes:
    """XOR the leading 32 bytes of ``data`` with the reversed key. Self-inverse."""
    key_bytes = parse_font_key(key) if isinstance(key, str) else bytes(key)
    if len(key_bytes) != KEY_LENGTH:
        raise FontKeyError(f"Font key must be {KEY_LENGTH} bytes, got {len(key_bytes)}")
    buffer = bytearray(data)
    for index in range(min(OBFUSCATED_LENGTH, len(buffer))):
        buffer[index] ^= key_bytes[KEY_LENGTH - 1 - (index % KEY_LENGTH)]
    return bytes(buffer)


@dataclass(frozen=True, slots=True)
class EmbeddedFont:
    """A decoded font binary ready to hand to a font loader."""

    family_name: str
    data: bytes
    obfuscation_key: Optional[str] = None
    variant: str = "regular"

    @classmethod
    def from_obfuscated(
        cls,
        family_name: str,
        obfuscated_bytes: bytes,
        obfuscation_key: str,
        variant: str = "regular",
    ) -> "EmbeddedFont":
        return cls(
            family_name=family_name,
            data=deobfuscate(obfuscated_bytes, obfuscation_key),
            obfuscation_key=obfuscation_key,
            variant=variant,
        )

    @property
    def obfuscated_bytes(self) -> bytes:
        """Re-apply the transform, giving back the bytes as stored in the package."""
        if self.obfuscation_key is None:
            return self.data
        return deobfuscate(self.data, self.obfuscation_key)

    @property
    def looks_like_sfnt(self) -> bool:
        return self.data[:4] in _SFNT_SIGNATURES


@dataclass(frozen=True, slots=True)
class FontEmbedReference:
    """``w:embedRegular`` and friends: where a variant lives and how it is keyed."""

    variant: str
    r_id: str
    font_key: Optional[str] = None
    subsetted: bool = False


@dataclass(frozen=True, slots=True)
class FontInfo:
    """A ``w:font`` entry from ``fontTable.xml``."""

    name: str
    alt_name: Optional[str] = None
    charset: Optional[str] = None
    family: Optional[str] = None
    pitch: Optional[str] = None
    embeds: Tuple[FontEmbedReference, ...] = ()


@dataclass(slots=True)
class FontCatalog:
    """Fonts decoded during one load. Owned by the caller, never shared between loads."""

    table: Dict[str, FontInfo] = field(default_factory=dict)
    _fonts: Dict[Tuple[str, str], EmbeddedFont] = field(default_factory=dict)

    def add(self, font: EmbeddedFont) -> None:
        self._fonts[(font.family_name.lower(), font.variant)] = font

    def get(self, family_name: str, variant: str = "regular") -> Optional[EmbeddedFont]:
        return self._fonts.get((family_name.lower(), variant))

    def get_bytes(self, family_name: str, variant: str = "regular") -> Optional[bytes]:
        """Return embeddable bytes, or None when the font is unavailable."""
        font = self.get(family_name, variant)
        return font.data if font is not None else None

    def families(self) -> List[str]:
        seen: Dict[str, None] = {}
        for font in self._fonts.values():
            seen.setdefault(font.family_name, None)
        return list(seen)

    @property
    def fonts(self) -> List[EmbeddedFont]:
        return list(self._fonts.values())

    def __iter__(self) -> Iterator[EmbeddedFont]:
        return iter(self._fonts.values())

    def __len__(self) -> int:
        return len(self._fonts)
