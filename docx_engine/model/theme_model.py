"""Theme colour and font schemes referenced symbolically from styles."""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Dict, Optional, Tuple

from docx_engine.model.numbering_model import NumberingCatalog
from docx_engine.model.style_model import LatentStyle

COLOR_ALIASES: Dict[str, str] = {
    "text1": "dk1",
    "background1": "lt1",
    "text2": "dk2",
    "background2": "lt2",
    "tx1": "dk1",
    "bg1": "lt1",
    "tx2": "dk2",
    "bg2": "lt2",
    "hyperlink": "hlink",
    "followedHyperlink": "folHlink",
}

FONT_REFERENCES: Dict[str, str] = {
    "majorHAnsi": "major_latin",
    "majorAscii": "major_latin",
    "majorLatin": "major_latin",
    "majorEastAsia": "major_east_asia",
    "majorBidi": "major_complex_script",
    "majorComplexScript": "major_complex_script",
    "minorHAnsi": "minor_latin",
    "minorAscii": "minor_latin",
    "minorLatin": "minor_latin",
    "minorEastAsia": "minor_east_asia",
    "minorBidi": "minor_complex_script",
    "minorComplexScript": "minor_complex_script",
}


@dataclass(frozen=True, slots=True)
class ThemeColors:
    """The twelve colour-scheme slots, as six-digit hex strings."""

    dk1: str = "000000"
    lt1: str = "FFFFFF"
    dk2: str = "1F497D"
    lt2: str = "EEECE1"
    accent1: str = "4F81BD"
    accent2: str = "C0504D"
    accent3: str = "9BBB59"
    accent4: str = "8064A2"
    accent5: str = "4BACC6"
    accent6: str = "F79646"
    hlink: str = "0000FF"
    folHlink: str = "800080"

    def get_color(self, name: Optional[str]) -> Optional[str]:
        """Resolve a scheme name or one of its aliases to a hex colour."""
        if not name:
            return None
        slot = COLOR_ALIASES.get(name, name)
        if slot not in _COLOR_SLOTS:
            return None
        return getattr(self, slot)

    def resolve(self, name: str, tint: Optional[str] = None, shade: Optional[str] = None) -> Optional[str]:
        """Resolve a theme colour and apply ``w:themeTint``/``w:themeShade`` modifiers."""
        base = self.get_color(name)
        if base is None:
            return None
        if tint is not None:
            base = apply_tint(base, tint)
        if shade is not None:
            base = apply_shade(base, shade)
        return base

    def as_dict(self) -> Dict[str, str]:
        return {slot: getattr(self, slot) for slot in _COLOR_SLOTS}


_COLOR_SLOTS: Tuple[str, ...] = tuple(f.name for f in fields(ThemeColors))


@dataclass(frozen=True, slots=True)
class ThemeFonts:
    """Major (headings) and minor (body) typefaces per script."""

    major_latin: str = "Calibri Light"
    major_east_asia: str = ""
    major_complex_script: str = ""
    minor_latin: str = "Calibri"
    minor_east_asia: str = ""
    minor_complex_script: str = ""

    def get_font(self, reference: Optional[str]) -> Optional[str]:
        """Resolve a theme font reference such as ``minorHAnsi``."""
        if not reference:
            return None
        slot = FONT_REFERENCES.get(reference)
        if slot is None:
            return None
        return getattr(self, slot) or None


@dataclass(frozen=True, slots=True)
class Theme:
    """Document-wide lookup tables: scheme colours and fonts, latent styles, numbering."""

    colors: ThemeColors = field(default_factory=ThemeColors)
    fonts: ThemeFonts = field(default_factory=ThemeFonts)
    latent_styles: Tuple[LatentStyle, ...] = ()
    numbering: NumberingCatalog = field(default_factory=NumberingCatalog.empty)

    def get_color(self, name: Optional[str]) -> Optional[str]:
        return self.colors.get_color(name)

    def get_font(self, reference: Optional[str]) -> Optional[str]:
        return self.fonts.get_font(reference)


def _parse_modifier(value: str) -> Optional[float]:
    try:
        return max(0, min(int(value, 16), 255)) / 255.0
    except ValueError:
        return None


def _split_rgb(color: str) -> Tuple[int, int, int]:
    return int(color[0:2], 16), int(color[2:4], 16), int(color[4:6], 16)


def apply_tint(color: str, tint: str) -> str:
    """Lighten ``color`` towards white; ``tint`` is a hex byte where FF keeps the colour."""
    ratio = _parse_modifier(tint)
    if ratio is None or len(color) != 6:
        return color
    channels = (round(c * ratio + 255 * (1 - ratio)) for c in _split_rgb(color))
    return "".join(f"{c:02X}" for c in channels)


def apply_shade(color: str, shade: str) -> str:
    """Darken ``color`` towards black; ``shade`` is a hex byte where FF keeps the colour."""
    ratio = _parse_modifier(shade)
    if ratio is None or len(color) != 6:
        return color
    channels = (round(c * ratio) for c in _split_rgb(color))
    return "".join(f"{c:02X}" for c in channels)
