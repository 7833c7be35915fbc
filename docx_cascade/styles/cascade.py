"""
Style cascade resolver.

Answers "what is the effective value of property X for node N" by walking
the precedence chain for N's kind:

* run:       direct rPr -> rStyle chain -> paragraph pStyle chain ->
             default character style -> default paragraph style -> docDefaults
* paragraph: direct pPr -> pStyle chain -> enclosing table (inside a cell) ->
             default paragraph style -> docDefaults
* table:     direct tblPr -> tblStyle chain -> default table style
* row/cell:  direct trPr/tcPr -> tblStyle chain -> default table style ->
             owning table

Every source contributes at most one partial value; ``resolve`` merges them
field by field with the most specific source winning per field.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Type

from ..diagnostics import MISSING_STYLE, STYLE_CHAIN, Diagnostics
from ..models.document import Document, DocumentNode, Paragraph, Run, Table, TableCell, TableRow
from ..models.properties import CELL, PARAGRAPH, ROW, RUN, TABLE, P, Property, merge_properties
from ..models.styles import Style, StyleKind, StyleSheet

logger = logging.getLogger(__name__)


def section_for(prop_type: Type[Property], preferred: str) -> str:
    """Section where ``prop_type`` is read for a node whose own section is ``preferred``."""
    if preferred in prop_type.SECTIONS or not prop_type.SECTIONS:
        return preferred
    return prop_type.SECTIONS[0]


class StyleCascadeResolver:
    """Resolves effective properties against an immutable document."""

    def __init__(self, document: Document, max_depth: int = 32, diagnostics: Optional[Diagnostics] = None):
        self.document = document
        self.styles: StyleSheet = document.styles
        self.max_depth = max_depth
        self.diagnostics = diagnostics
        self._dispatch: Dict[type, Callable[[DocumentNode, Type[Property]], List[Property]]] = {
            Run: self._run_sources,
            Paragraph: self._paragraph_sources,
            Table: self._table_sources,
            TableRow: self._row_sources,
            TableCell: self._cell_sources,
        }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def resolve(self, node: DocumentNode, prop_type: Type[P]) -> Optional[P]:
        """
        Resolve the effective value of a property for a node.

        Args:
            node: Run, paragraph, table, row or cell
            prop_type: Property class to resolve

        Returns:
            Merged property or None when no source defines it
        """
        return merge_properties(self.resolve_all(node, prop_type))  # type: ignore[return-value]

    def resolve_all(self, node: DocumentNode, prop_type: Type[P]) -> List[P]:
        """All partial values in precedence order, most specific first."""
        handler = self._dispatch.get(type(node))
        if handler is None:
            for node_type, candidate in self._dispatch.items():
                if isinstance(node, node_type):
                    handler = candidate
                    break
        if handler is None:
            return []
        return [value for value in handler(node, prop_type) if value is not None]  # type: ignore[misc]

    def style_value(self, style_id: Optional[str], prop_type: Type[P], section: str) -> Optional[P]:
        """
        First value of a property along a style's based-on chain.

        Args:
            style_id: Style to start from
            prop_type: Property class
            section: Formatting section to read (run, paragraph, ...)

        Returns:
            Property declared by the nearest style in the chain, or None
        """
        for style in self.style_chain(style_id):
            value = style.properties_for(section).get(prop_type)
            if value is not None:
                return value
        return None

    def style_chain(self, style_id: Optional[str]) -> List[Style]:
        """Styles from ``style_id`` up its based-on chain (leaf first)."""
        chain: List[Style] = []
        visited = set()
        style = self.styles.get_style(style_id)
        if style is None and style_id and self.diagnostics is not None:
            self.diagnostics.warn(MISSING_STYLE, f"style '{style_id}' is not defined")
        while style is not None:
            if style.style_id in visited or len(chain) >= self.max_depth:
                logger.debug("Style chain from '%s' stopped at '%s'", style_id, style.style_id)
                if self.diagnostics is not None:
                    self.diagnostics.warn(STYLE_CHAIN, f"based-on chain of '{style_id}' does not terminate")
                break
            visited.add(style.style_id)
            chain.append(style)
            style = self.styles.get_style(style.based_on)
        return chain

    def default_style_value(self, kind: StyleKind, prop_type: Type[P], section: str) -> Optional[P]:
        style = self.styles.default_style(kind)
        if style is None:
            return None
        return self.style_value(style.style_id, prop_type, section)

    def doc_default_value(self, prop_type: Type[P], section: str) -> Optional[P]:
        return self.styles.doc_defaults.properties_for(section).get(prop_type)

    # ------------------------------------------------------------------
    # Per node kind chains
    # ------------------------------------------------------------------
    def _run_sources(self, run: Run, prop_type: Type[P]) -> List[Optional[P]]:
        section = section_for(prop_type, RUN)
        paragraph = run.find_ancestor(Paragraph)
        sources: List[Optional[P]] = []
        if section == RUN:
            sources.append(run.properties.get(prop_type))
        sources.append(self.style_value(run.style_id, prop_type, section))
        if paragraph is not None:
            sources.append(self.style_value(paragraph.style_id, prop_type, section))
        sources.append(self.default_style_value(StyleKind.CHARACTER, prop_type, section))
        sources.append(self.default_style_value(StyleKind.PARAGRAPH, prop_type, section))
        sources.append(self.doc_default_value(prop_type, section))
        return sources

    def _paragraph_sources(self, paragraph: Paragraph, prop_type: Type[P]) -> List[Optional[P]]:
        section = section_for(prop_type, PARAGRAPH)
        sources: List[Optional[P]] = []
        if section == PARAGRAPH:
            sources.append(paragraph.properties.get(prop_type))
        elif section == RUN:
            sources.append(paragraph.run_properties.get(prop_type))
        sources.append(self.style_value(paragraph.style_id, prop_type, section))
        if paragraph.find_ancestor(TableCell) is not None:
            table = paragraph.find_ancestor(Table)
            if table is not None:
                sources.extend(self._table_style_sources(table, prop_type, section))
        sources.append(self.default_style_value(StyleKind.PARAGRAPH, prop_type, section))
        sources.append(self.doc_default_value(prop_type, section))
        return sources

    def _table_sources(self, table: Table, prop_type: Type[P]) -> List[Optional[P]]:
        section = section_for(prop_type, TABLE)
        sources: List[Optional[P]] = []
        if section == TABLE:
            sources.append(table.properties.get(prop_type))
        sources.extend(self._table_style_sources(table, prop_type, section))
        return sources

    def _row_sources(self, row: TableRow, prop_type: Type[P]) -> List[Optional[P]]:
        return self._part_sources(row, ROW, prop_type)

    def _cell_sources(self, cell: TableCell, prop_type: Type[P]) -> List[Optional[P]]:
        return self._part_sources(cell, CELL, prop_type)

    def _part_sources(self, node: DocumentNode, own_section: str, prop_type: Type[P]) -> List[Optional[P]]:
        table = node.find_ancestor(Table)
        section = section_for(prop_type, own_section)
        sources: List[Optional[P]] = []
        if section == own_section:
            sources.append(node.properties.get(prop_type))
            if table is not None:
                sources.extend(self._table_style_sources(table, prop_type, section))
        if table is not None and TABLE in prop_type.SECTIONS:
            sources.extend(self._table_sources(table, prop_type))
        return sources

    def _table_style_sources(self, table: Table, prop_type: Type[P], section: str) -> List[Optional[P]]:
        return [
            self.style_value(table.style_id, prop_type, section),
            self.default_style_value(StyleKind.TABLE, prop_type, section),
        ]
