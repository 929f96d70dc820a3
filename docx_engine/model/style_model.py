"""Style model captures Word style definitions and their resolved snapshots.

``Style`` is the partially specified form read from ``styles.xml`` or from
direct formatting: every field is optional and ``None`` means "inherit".
``ResolvedStyle`` is the fully populated snapshot produced by the resolver,
where every field carries a concrete default.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import TYPE_CHECKING, Dict, List, Mapping, Optional, Tuple

from docx_engine.utils.units import eighth_points_to_points

if TYPE_CHECKING:
    from docx_engine.model.theme_model import Theme

DEFAULT_LINE_SPACING = 240
DEFAULT_FONT_SIZE = 11.0
DEFAULT_FONT_FAMILY = "Calibri"
DEFAULT_COLOR = "000000"


@dataclass(frozen=True, slots=True)
class BorderSide:
    """One side of a paragraph, run or cell border."""

    style: str = "single"
    size: int = 4
    color: Optional[str] = None
    space: int = 0

    @property
    def width_points(self) -> float:
        return eighth_points_to_points(self.size)


@dataclass(frozen=True, slots=True)
class Style:
    """Partially specified formatting; ``None`` fields inherit."""

    # paragraph
    alignment: Optional[str] = None
    shading: Optional[str] = None
    spacing_before: Optional[int] = None
    spacing_after: Optional[int] = None
    line_spacing: Optional[int] = None
    indent_left: Optional[int] = None
    indent_right: Optional[int] = None
    indent_first_line: Optional[int] = None
    keep_next: Optional[bool] = None
    keep_lines: Optional[bool] = None
    page_break_before: Optional[bool] = None
    num_id: Optional[int] = None
    num_level: Optional[int] = None
    border_top: Optional[BorderSide] = None
    border_bottom: Optional[BorderSide] = None
    border_left: Optional[BorderSide] = None
    border_right: Optional[BorderSide] = None

    # run
    bold: Optional[bool] = None
    italic: Optional[bool] = None
    underline: Optional[str] = None
    strike: Optional[bool] = None
    color: Optional[str] = None
    theme_color: Optional[str] = None
    theme_tint: Optional[str] = None
    theme_shade: Optional[str] = None
    run_shading: Optional[str] = None
    font_size: Optional[float] = None
    font_family: Optional[str] = None
    font_theme: Optional[str] = None
    highlight: Optional[str] = None
    character_spacing: Optional[int] = None
    vertical_align: Optional[str] = None
    all_caps: Optional[bool] = None
    small_caps: Optional[bool] = None
    double_strike: Optional[bool] = None
    outline: Optional[bool] = None
    shadow: Optional[bool] = None
    emboss: Optional[bool] = None
    imprint: Optional[bool] = None
    text_border: Optional[BorderSide] = None

    # table cell (table styles and their conditional formats)
    cell_shading: Optional[str] = None
    cell_vertical_align: Optional[str] = None
    cell_border_top: Optional[BorderSide] = None
    cell_border_bottom: Optional[BorderSide] = None
    cell_border_left: Optional[BorderSide] = None
    cell_border_right: Optional[BorderSide] = None

    def merged(self, other: Optional["Style"]) -> "Style":
        """Return a copy where every field explicitly set on ``other`` wins.

        Colour and font fields move as groups: when ``other`` sets any member
        of a group, the whole group comes from ``other``, so an inherited theme
        reference cannot shadow a literal value set later.
        """
        if other is None:
            return self
        changes = {f.name: getattr(other, f.name) for f in fields(other) if getattr(other, f.name) is not None}
        for group in _GROUPED_FIELDS:
            if any(name in changes for name in group):
                for name in group:
                    changes.setdefault(name, None)
        return replace(self, **changes) if changes else self

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))


_GROUPED_FIELDS: Tuple[Tuple[str, ...], ...] = (
    ("color", "theme_color", "theme_tint", "theme_shade"),
    ("font_family", "font_theme"),
)

EMPTY_STYLE = Style()


@dataclass(frozen=True, slots=True)
class ResolvedStyle:
    """Fully populated formatting snapshot; never persisted, only derived."""

    alignment: str = "left"
    shading: Optional[str] = None
    spacing_before: int = 0
    spacing_after: int = 0
    line_spacing: int = DEFAULT_LINE_SPACING
    indent_left: int = 0
    indent_right: int = 0
    indent_first_line: int = 0
    keep_next: bool = False
    keep_lines: bool = False
    page_break_before: bool = False

    font_weight: str = "normal"
    font_style: str = "normal"
    underline: str = "none"
    strike: bool = False
    color: str = DEFAULT_COLOR
    run_shading: Optional[str] = None
    font_size: float = DEFAULT_FONT_SIZE
    font_family: str = DEFAULT_FONT_FAMILY
    highlight: str = "none"
    character_spacing: int = 0
    superscript: bool = False
    subscript: bool = False
    all_caps: bool = False
    small_caps: bool = False
    double_strike: bool = False
    outline: bool = False
    shadow: bool = False
    emboss: bool = False
    imprint: bool = False
    text_border: Optional[BorderSide] = None

    border_top: Optional[BorderSide] = None
    border_bottom: Optional[BorderSide] = None
    border_left: Optional[BorderSide] = None
    border_right: Optional[BorderSide] = None

    @property
    def text_decoration(self) -> str:
        parts = []
        if self.underline != "none":
            parts.append("underline")
        if self.strike:
            parts.append("line-through")
        return " ".join(parts) or "none"

    @property
    def is_bold(self) -> bool:
        return self.font_weight == "bold"

    @property
    def is_italic(self) -> bool:
        return self.font_style == "italic"

    def overlay(self, style: Optional[Style], theme: Optional["Theme"] = None) -> "ResolvedStyle":
        """Apply the explicit fields of ``style`` on top of this snapshot.

        With a ``theme``, theme colour and theme font references win over the
        literal ``color`` and ``font_family`` values.
        """
        if style is None:
            return self
        changes: Dict[str, object] = {}
        for name in _DIRECT_FIELDS:
            value = getattr(style, name)
            if value is not None:
                changes[name] = value
        if style.bold is not None:
            changes["font_weight"] = "bold" if style.bold else "normal"
        if style.italic is not None:
            changes["font_style"] = "italic" if style.italic else "normal"
        if style.color is not None and style.color.lower() != "auto":
            changes["color"] = style.color.upper()
        if theme is not None:
            if style.theme_color is not None:
                themed = theme.colors.resolve(style.theme_color, style.theme_tint, style.theme_shade)
                if themed is not None:
                    changes["color"] = themed
            if style.font_theme is not None:
                family = theme.get_font(style.font_theme)
                if family:
                    changes["font_family"] = family
        if style.vertical_align is not None:
            changes["superscript"] = style.vertical_align == "superscript"
            changes["subscript"] = style.vertical_align == "subscript"
        return replace(self, **changes) if changes else self


_DIRECT_FIELDS: Tuple[str, ...] = (
    "alignment",
    "shading",
    "spacing_before",
    "spacing_after",
    "line_spacing",
    "indent_left",
    "indent_right",
    "indent_first_line",
    "keep_next",
    "keep_lines",
    "page_break_before",
    "border_top",
    "border_bottom",
    "border_left",
    "border_right",
    "underline",
    "strike",
    "run_shading",
    "font_size",
    "font_family",
    "highlight",
    "character_spacing",
    "all_caps",
    "small_caps",
    "double_strike",
    "outline",
    "shadow",
    "emboss",
    "imprint",
    "text_border",
)

DEFAULT_STYLE = ResolvedStyle()


@dataclass(frozen=True, slots=True)
class StyleDefinition:
    """A named style entry from ``styles.xml``."""

    style_id: str
    style_type: str
    name: Optional[str]
    properties: Style = EMPTY_STYLE
    based_on: Optional[str] = None
    next_style: Optional[str] = None
    linked_style: Optional[str] = None
    is_default: bool = False
    ui_priority: Optional[int] = None
    is_primary: bool = False
    table_conditions: Mapping[str, Style] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class LatentStyle:
    """A ``w:lsdException`` entry describing a built-in style Word may create lazily."""

    name: str
    semi_hidden: Optional[bool] = None
    unhide_when_used: Optional[bool] = None
    ui_priority: Optional[int] = None
    q_format: Optional[bool] = None


class StylesCatalog:
    """Collection of style definitions keyed by identifier."""

    def __init__(
        self,
        styles: Mapping[str, StyleDefinition],
        doc_defaults: Optional[Style] = None,
        latent_styles: Optional[List[LatentStyle]] = None,
    ):
        self._styles = dict(styles)
        self.doc_defaults = doc_defaults or EMPTY_STYLE
        self.latent_styles = tuple(latent_styles or ())

    def get(self, style_id: Optional[str]) -> Optional[StyleDefinition]:
        """Return the style definition given its identifier."""
        if style_id is None:
            return None
        return self._styles.get(style_id)

    def all(self) -> Mapping[str, StyleDefinition]:
        """Return read-only view of styles."""
        return dict(self._styles)

    def default_for(self, style_type: str) -> Optional[StyleDefinition]:
        """Return the default style for the given style type if defined."""
        for style in self._styles.values():
            if style.style_type == style_type and style.is_default:
                return style
        return None

    def by_type(self, style_type: str) -> List[StyleDefinition]:
        return [style for style in self._styles.values() if style.style_type == style_type]

    def __contains__(self, style_id: object) -> bool:
        return style_id in self._styles

    def __len__(self) -> int:
        return len(self._styles)
