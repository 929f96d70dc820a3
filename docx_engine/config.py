"""Options controlling a single document load."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ReaderOptions:
    """Per-load switches; the defaults read everything the package understands."""

    load_fonts: bool = True
    load_headers_footers: bool = True
    group_lists: bool = True
    keep_pass_through: bool = True
    embed_media: bool = True


DEFAULT_OPTIONS = ReaderOptions()
