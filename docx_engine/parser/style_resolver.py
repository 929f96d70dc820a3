"""Resolve the ``basedOn`` cascade into concrete formatting snapshots."""
from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from docx_engine.model.style_model import (
    DEFAULT_STYLE,
    EMPTY_STYLE,
    ResolvedStyle,
    Style,
    StyleDefinition,
    StylesCatalog,
)
from docx_engine.model.theme_model import Theme
from docx_engine.utils.logger import get_logger

LOGGER = get_logger(__name__)


class StyleResolver:
    """Computes resolved styles for one load.

    Paragraph-style results are memoized by id until ``clear_cache`` is called.
    Run resolution is composed per call and never cached.
    """

    def __init__(
        self,
        catalog: StylesCatalog,
        theme: Optional[Theme] = None,
        base: Optional[ResolvedStyle] = None,
    ) -> None:
        self._catalog = catalog
        self._theme = theme
        if base is None:
            base = DEFAULT_STYLE.overlay(catalog.doc_defaults, theme)
        self.default_style = base
        self._paragraph_cache: Dict[str, ResolvedStyle] = {}
        self._chain_cache: Dict[str, Style] = {}
        self._definition_cache: Dict[str, List[StyleDefinition]] = {}

    def default_style_id(self, style_type: str = "paragraph") -> Optional[str]:
        """Identifier of the style Word applies when an element names none."""
        definition = self._catalog.default_for(style_type)
        return definition.style_id if definition is not None else None

    @property
    def theme(self) -> Optional[Theme]:
        return self._theme

    @property
    def cache_size(self) -> int:
        return len(self._paragraph_cache)

    def clear_cache(self) -> None:
        self._paragraph_cache.clear()
        self._chain_cache.clear()
        self._definition_cache.clear()

    def resolve_paragraph_style(self, style_id: Optional[str] = None) -> ResolvedStyle:
        """Return the default snapshot overlaid by the flattened chain of ``style_id``."""
        if style_id is None:
            return self.default_style
        cached = self._paragraph_cache.get(style_id)
        if cached is not None:
            return cached
        resolved = self.default_style.overlay(self.resolve_chain(style_id), self._theme)
        self._paragraph_cache[style_id] = resolved
        return resolved

    def resolve_run_style(
        self,
        paragraph_style_id: Optional[str] = None,
        run_style_id: Optional[str] = None,
        direct: Optional[Style] = None,
    ) -> ResolvedStyle:
        """Compose paragraph style, character style and direct formatting, in that order."""
        resolved = self.resolve_paragraph_style(paragraph_style_id)
        if run_style_id is not None:
            resolved = resolved.overlay(self.resolve_chain(run_style_id), self._theme)
        if direct is not None:
            resolved = resolved.overlay(direct, self._theme)
        return resolved

    def resolve_chain(self, style_id: str) -> Style:
        """Flatten ``style_id`` and its ancestors into one partial style, parent first.

        Only fields some style in the chain sets are present, so a child value
        equal to a default still overrides its parent. A ``basedOn`` link that
        revisits a style already in the chain is treated as "no parent".
        """
        cached = self._chain_cache.get(style_id)
        if cached is not None:
            return cached

        flattened = EMPTY_STYLE
        for definition in reversed(self._definitions(style_id)):
            flattened = flattened.merged(definition.properties)
        self._chain_cache[style_id] = flattened
        return flattened

    def resolve_table_cell(self, style_id: Optional[str], conditions: Sequence[str]) -> Style:
        """Table style ``style_id`` with the named conditional formats applied in order."""
        if style_id is None:
            return EMPTY_STYLE
        definitions = list(reversed(self._definitions(style_id)))
        partial = self.resolve_chain(style_id)
        for name in conditions:
            for definition in definitions:
                partial = partial.merged(definition.table_conditions.get(name))
        return partial

    def _definitions(self, style_id: str) -> List[StyleDefinition]:
        """The ``basedOn`` chain of ``style_id``, child first."""
        cached = self._definition_cache.get(style_id)
        if cached is not None:
            return cached

        chain: List[StyleDefinition] = []
        visited: List[str] = []
        current: Optional[str] = style_id
        while current is not None:
            if current in visited:
                LOGGER.warning("Style inheritance cycle via %s: %s", current, " -> ".join(visited + [current]))
                break
            definition = self._catalog.get(current)
            if definition is None:
                if current != style_id:
                    LOGGER.debug("Style %s is based on unknown style %s", visited[-1], current)
                break
            visited.append(current)
            chain.append(definition)
            current = definition.based_on
        self._definition_cache[style_id] = chain
        return chain
