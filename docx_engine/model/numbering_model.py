"""Numbering model captures list definitions extracted from numbering.xml."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Dict, Optional

if TYPE_CHECKING:
    from docx_engine.model.theme_model import Theme

BULLET_FORMAT = "bullet"


@dataclass(frozen=True, slots=True)
class BulletGlyph:
    """How a list marker is drawn: ``character``, ``theme``, ``picture`` or ``none``."""

    kind: str
    character: Optional[str] = None
    font: Optional[str] = None
    color: Optional[str] = None
    image: Optional[bytes] = None


NO_BULLET = BulletGlyph(kind="none")


@dataclass(frozen=True, slots=True)
class NumberingLevel:
    """Defines numbering behavior for a specific indentation level."""

    level_index: int
    start: int = 1
    num_format: str = "decimal"
    level_text: Optional[str] = None
    alignment: Optional[str] = None
    indent_left: Optional[int] = None
    hanging: Optional[int] = None
    bullet_font: Optional[str] = None
    theme_font: Optional[str] = None
    theme_color: Optional[str] = None
    theme_tint: Optional[str] = None
    theme_shade: Optional[str] = None
    color: Optional[str] = None
    pic_bullet_id: Optional[int] = None

    @property
    def is_bullet(self) -> bool:
        return self.num_format == BULLET_FORMAT

    def bullet_glyph(self, theme: Optional["Theme"] = None, pictures: Optional[Dict[int, bytes]] = None) -> BulletGlyph:
        """Resolve the marker as a picture, a theme colour/font pairing or a literal character."""
        if self.pic_bullet_id is not None and pictures and self.pic_bullet_id in pictures:
            return BulletGlyph(kind="picture", image=pictures[self.pic_bullet_id])
        if not self.is_bullet:
            return NO_BULLET
        if (self.theme_color or self.theme_font) and theme is not None:
            color = None
            if self.theme_color:
                color = theme.colors.resolve(self.theme_color, self.theme_tint, self.theme_shade)
            font = theme.get_font(self.theme_font) if self.theme_font else None
            return BulletGlyph(
                kind="theme",
                character=self.level_text,
                font=font or self.bullet_font,
                color=color or self.color,
            )
        return BulletGlyph(kind="character", character=self.level_text, font=self.bullet_font, color=self.color)


@dataclass(frozen=True, slots=True)
class NumberingOverride:
    """Overrides applied to a numbering instance for specific levels."""

    level_index: int
    start_override: Optional[int] = None
    level: Optional[NumberingLevel] = None


@dataclass(frozen=True, slots=True)
class AbstractNumberingDefinition:
    """Template describing multi-level numbering behavior."""

    abstract_num_id: int
    multi_level_type: Optional[str] = None
    name: Optional[str] = None
    style_link: Optional[str] = None
    levels: Dict[int, NumberingLevel] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class NumberingInstance:
    """Concrete numbering instance bound to an abstract definition."""

    num_id: int
    abstract_num_id: int
    overrides: Dict[int, NumberingOverride] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class NumberingCatalog:
    """Collection of abstract definitions, concrete instances and picture bullets."""

    abstracts: Dict[int, AbstractNumberingDefinition]
    instances: Dict[int, NumberingInstance]
    picture_bullets: Dict[int, bytes] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "NumberingCatalog":
        return cls(abstracts={}, instances={})

    def get_abstract(self, abstract_num_id: Optional[int]) -> Optional[AbstractNumberingDefinition]:
        if abstract_num_id is None:
            return None
        return self.abstracts.get(abstract_num_id)

    def get_instance(self, num_id: Optional[int]) -> Optional[NumberingInstance]:
        if num_id is None:
            return None
        return self.instances.get(num_id)

    def resolve_level(self, num_id: Optional[int], level_index: int = 0) -> Optional[NumberingLevel]:
        """Return the effective level for ``num_id``, applying instance overrides."""
        instance = self.get_instance(num_id)
        if instance is None:
            return None
        override = instance.overrides.get(level_index)
        if override is not None and override.level is not None:
            level = override.level
        else:
            abstract = self.get_abstract(instance.abstract_num_id)
            if abstract is None:
                return None
            level = abstract.levels.get(level_index)
            if level is None:
                return None
        if override is not None and override.start_override is not None:
            level = replace(level, start=override.start_override)
        return level

    def bullet_for(self, num_id: Optional[int], level_index: int = 0, theme: Optional["Theme"] = None) -> BulletGlyph:
        level = self.resolve_level(num_id, level_index)
        if level is None:
            return NO_BULLET
        return level.bullet_glyph(theme, self.picture_bullets)
