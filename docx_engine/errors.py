"""Exception types raised by the reader."""
from __future__ import annotations

from typing import Optional


class DocxError(Exception):
    """Base class for every error raised by this package."""


class DocxLoadError(DocxError, ValueError):
    """A mandatory part is missing or unreadable, so the load cannot continue."""

    def __init__(self, message: str, part: Optional[str] = None) -> None:
        super().__init__(f"{message} ({part})" if part else message)
        self.part = part


class FontKeyError(DocxError, ValueError):
    """An embedded-font obfuscation key is not a 128-bit GUID."""
