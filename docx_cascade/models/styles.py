"""Style definitions and the by-id style store."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Iterable, Optional

from .properties import CELL, PARAGRAPH, ROW, RUN, TABLE, PropertySet

logger = logging.getLogger(__name__)


class StyleKind(str, Enum):
    PARAGRAPH = "paragraph"
    CHARACTER = "character"
    TABLE = "table"
    NUMBERING = "numbering"


@dataclass
class Style:
    """A named formatting bundle with one property set per formatting section."""

    style_id: str
    kind: StyleKind = StyleKind.PARAGRAPH
    name: str = ""
    based_on: Optional[str] = None
    linked_style: Optional[str] = None
    next_style: Optional[str] = None
    is_default: bool = False
    run_properties: PropertySet = field(default_factory=PropertySet)
    paragraph_properties: PropertySet = field(default_factory=PropertySet)
    table_properties: PropertySet = field(default_factory=PropertySet)
    row_properties: PropertySet = field(default_factory=PropertySet)
    cell_properties: PropertySet = field(default_factory=PropertySet)

    def properties_for(self, section: str) -> PropertySet:
        return {
            RUN: self.run_properties,
            PARAGRAPH: self.paragraph_properties,
            TABLE: self.table_properties,
            ROW: self.row_properties,
            CELL: self.cell_properties,
        }[section]


@dataclass
class DocDefaults:
    """``docDefaults``: document-wide run and paragraph properties."""

    run_properties: PropertySet = field(default_factory=PropertySet)
    paragraph_properties: PropertySet = field(default_factory=PropertySet)

    def properties_for(self, section: str) -> PropertySet:
        if section == RUN:
            return self.run_properties
        if section == PARAGRAPH:
            return self.paragraph_properties
        return PropertySet()


class StyleSheet:
    """
    Style store keyed by style id.

    Lookups return views that fold in the linked character/paragraph style;
    the stored styles are never modified.
    """

    def __init__(self, styles: Iterable[Style] = (), doc_defaults: Optional[DocDefaults] = None):
        self._styles: Dict[str, Style] = {}
        for style in styles:
            self.add(style)
        self.doc_defaults = doc_defaults or DocDefaults()

    def add(self, style: Style) -> None:
        self._styles[style.style_id] = style

    def __contains__(self, style_id: object) -> bool:
        return style_id in self._styles

    def __len__(self) -> int:
        return len(self._styles)

    def raw(self, style_id: Optional[str]) -> Optional[Style]:
        if not style_id:
            return None
        return self._styles.get(style_id)

    def get_style(self, style_id: Optional[str]) -> Optional[Style]:
        """
        Get a style by id, combined with its linked style.

        A paragraph style linked to a character style takes the character
        style's run properties. A character style linked to a paragraph
        style resolves to that paragraph style carrying the character
        style's run properties. A linked style without run properties is
        ignored.

        Args:
            style_id: Style identifier

        Returns:
            Style view or None when the id is unknown
        """
        style = self.raw(style_id)
        if style is None:
            if style_id:
                logger.debug("Style '%s' referenced but not defined", style_id)
            return None
        linked = self.raw(style.linked_style)
        if linked is None or not linked.run_properties:
            return style

        if style.kind == StyleKind.PARAGRAPH:
            return replace(style, run_properties=linked.run_properties)
        if style.kind == StyleKind.CHARACTER and linked.kind == StyleKind.PARAGRAPH:
            if style.run_properties:
                return replace(linked, run_properties=style.run_properties)
            return linked
        return style

    def default_style(self, kind: StyleKind) -> Optional[Style]:
        for style in self._styles.values():
            if style.is_default and style.kind == kind:
                return self.get_style(style.style_id)
        return None
