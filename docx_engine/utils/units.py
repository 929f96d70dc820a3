"""Unit conversion helpers for WordprocessingML measurements."""
from __future__ import annotations

EMU_PER_INCH = 914400
TWIPS_PER_POINT = 20
POINTS_PER_INCH = 72
HALF_POINTS_PER_POINT = 2
EIGHTH_POINTS_PER_POINT = 8


def emu_to_points(value: int) -> float:
    """Convert English Metric Units to typographic points."""
    return (value / EMU_PER_INCH) * POINTS_PER_INCH


def twips_to_points(value: int) -> float:
    """Convert twips to points."""
    return value / TWIPS_PER_POINT


def half_points_to_points(value: int) -> float:
    """Font sizes (``w:sz``) are stored in half points."""
    return value / HALF_POINTS_PER_POINT


def eighth_points_to_points(value: int) -> float:
    """Border widths (``w:sz`` on border elements) are stored in eighths of a point."""
    return value / EIGHTH_POINTS_PER_POINT
