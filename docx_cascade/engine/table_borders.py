"""
Table border rollup and adjacent-cell conflict resolution.

Resolution is done in two passes. The first computes every logical cell's
own border set without looking at its neighbours. The second compares each
shared edge and produces a new table of border sets keyed by cell id. A
shared edge is owned by the cell to its right (or below); the other side is
cleared so the edge is drawn once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

from ..models.document import Table, TableCell
from ..models.properties import Border, CellBorders, TableBorders, merge_properties
from ..models.styles import StyleKind
from ..styles.cascade import StyleCascadeResolver
from .table_grid import CellRegion, TableGrid

logger = logging.getLogger(__name__)

# Style ranking used when two borders meet; unknown styles rank 1
BORDER_WEIGHTS: Dict[str, int] = {
    "nil": 0,
    "none": 0,
    "single": 1,
    "thick": 2,
    "double": 3,
    "dotted": 4,
    "dashed": 5,
    "dotDash": 6,
    "dotDotDash": 7,
    "triple": 8,
    "thinThickSmallGap": 9,
    "thickThinSmallGap": 10,
    "thinThickThinSmallGap": 11,
    "thinThickMediumGap": 12,
    "thickThinMediumGap": 13,
    "thinThickThinMediumGap": 14,
    "thinThickLargeGap": 15,
    "thickThinLargeGap": 16,
    "thinThickThinLargeGap": 17,
    "wave": 18,
    "doubleWave": 19,
    "dashSmallGap": 20,
    "dashDotStroked": 21,
    "threeDEmboss": 22,
    "threeDEngrave": 23,
    "outset": 24,
    "inset": 25,
}


def border_weight(border: Optional[Border]) -> int:
    if border is None or border.style is None:
        return 0
    return BORDER_WEIGHTS.get(border.style, 1)


def border_brightness(color: Optional[str]) -> float:
    """Luminance-style brightness of a hex color; ``auto`` counts as black."""
    if not color or color == "auto":
        return 0.0
    try:
        value = int(color.lstrip("#"), 16)
    except ValueError:
        return 0.0
    red, green, blue = (value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF
    return 0.299 * red + 0.587 * green + 0.114 * blue


def border_wins(a: Optional[Border], b: Optional[Border]) -> bool:
    """
    Compare two opposing edges.

    Args:
        a: Edge of the first cell
        b: Edge of the neighbouring cell

    Returns:
        True when ``a`` beats ``b``; a full tie goes to ``b``
    """
    weight_a, weight_b = border_weight(a), border_weight(b)
    if weight_a != weight_b:
        return weight_a > weight_b
    if weight_a == 0:
        return False
    size_a, size_b = (a.size or 0.0), (b.size or 0.0)  # type: ignore[union-attr]
    if size_a != size_b:
        return size_a > size_b
    bright_a = border_brightness(a.color)  # type: ignore[union-attr]
    bright_b = border_brightness(b.color)  # type: ignore[union-attr]
    if bright_a != bright_b:
        return bright_a < bright_b
    return False


def stronger_border(a: Optional[Border], b: Optional[Border]) -> Optional[Border]:
    return a if border_wins(a, b) else b


def rollup_table_borders(table: Table, resolver: StyleCascadeResolver) -> TableBorders:
    """
    Table-wide borders: direct ``tblBorders`` over the table style chain
    (leaf to root) over the default table style chain, per edge.
    """
    layers: List[Optional[TableBorders]] = [table.properties.get(TableBorders)]
    layers.extend(style.table_properties.get(TableBorders) for style in resolver.style_chain(table.style_id))
    default = resolver.styles.default_style(StyleKind.TABLE)
    if default is not None:
        layers.extend(style.table_properties.get(TableBorders) for style in resolver.style_chain(default.style_id))
    return merge_properties([layer for layer in layers if layer is not None]) or TableBorders()


def _own_borders(cell: Optional[TableCell], resolver: StyleCascadeResolver) -> CellBorders:
    if cell is None:
        return CellBorders()
    return resolver.resolve(cell, CellBorders) or CellBorders()


def cell_borders(
    region: CellRegion,
    grid: TableGrid,
    table_borders: TableBorders,
    resolver: StyleCascadeResolver,
) -> CellBorders:
    """
    Border set of one logical cell before neighbour comparison.

    Each edge is the cell's own border, else the table border for that side
    when the cell touches it, else the table's inside variant. The bottom edge
    of a vertically merged cell comes from the cell in its last row.
    """
    own = _own_borders(region.cell, resolver)
    last = _own_borders(region.last_row_cell, resolver) if region.row_span > 1 else own

    first_row = region.row == 0
    last_row = region.row + region.row_span >= grid.row_count
    first_col = region.col == 0 or region.row_start
    last_col = region.col + region.col_span >= grid.column_count or region.row_end

    def pick(value: Optional[Border], outer: Optional[Border], inner: Optional[Border], at_edge: bool):
        if value is not None:
            return value
        return outer if at_edge else inner

    return CellBorders(
        top=pick(own.top, table_borders.top, table_borders.inside_h, first_row),
        bottom=pick(last.bottom, table_borders.bottom, table_borders.inside_h, last_row),
        left=pick(own.left, table_borders.left, table_borders.inside_v, first_col),
        right=pick(own.right, table_borders.right, table_borders.inside_v, last_col),
        tl2br=own.tl2br,
        tr2bl=own.tr2bl,
    )


@dataclass
class ResolvedTableBorders:
    """Final border sets keyed by cell id."""

    table_borders: TableBorders
    cells: Dict[int, CellBorders] = field(default_factory=dict)

    def get(self, cell_id: int) -> CellBorders:
        return self.cells.get(cell_id, CellBorders())

    def shared_edge(self, first_id: int, second_id: int, vertical: bool = True) -> Optional[Border]:
        """Drawn border between a cell and its right (or lower) neighbour."""
        second = self.get(second_id)
        return second.left if vertical else second.top


def _neighbours(grid: TableGrid, region: CellRegion, direction: str) -> List[int]:
    """Cells along the right or bottom perimeter; -1 marks a segment without a real neighbour."""
    ids: List[int] = []
    if direction == "right":
        positions = [(region.row + i, region.col + region.col_span) for i in range(region.row_span)]
    else:
        positions = [(region.row + region.row_span, region.col + j) for j in range(region.col_span)]
    for row, col in positions:
        neighbour = grid.cell(row, col)
        if neighbour is None or neighbour.blank:
            ids.append(-1)
        elif neighbour.cell_id not in ids:
            ids.append(neighbour.cell_id)
    return ids


def resolve_border_conflicts(
    grid: TableGrid,
    initial: Dict[int, CellBorders],
) -> Dict[int, CellBorders]:
    """
    Resolve every shared edge between adjacent logical cells.

    Args:
        grid: Reconstructed grid
        initial: Per-cell border sets from the first pass (not modified)

    Returns:
        New border sets keyed by cell id
    """
    regions = grid.regions()
    edges: Dict[int, Dict[str, Optional[Border]]] = {
        cell_id: {"top": b.top, "bottom": b.bottom, "left": b.left, "right": b.right}
        for cell_id, b in initial.items()
    }
    incoming: Dict[tuple, Optional[Border]] = {}

    for cell_id, borders in initial.items():
        region = regions[cell_id]
        for direction, own_side, opposite in (("right", "right", "left"), ("bottom", "bottom", "top")):
            neighbours = _neighbours(grid, region, direction)
            if not neighbours:
                continue
            mine = getattr(borders, own_side)
            for neighbour_id in neighbours:
                if neighbour_id < 0 or neighbour_id not in initial:
                    continue
                theirs = getattr(initial[neighbour_id], opposite)
                winner = mine if border_wins(mine, theirs) else theirs
                key = (neighbour_id, opposite)
                incoming[key] = stronger_border(incoming.get(key, theirs), winner)
            if all(n >= 0 and n in initial for n in neighbours):
                edges[cell_id][own_side] = None

    for (cell_id, side), border in incoming.items():
        edges[cell_id][side] = border

    return {cell_id: replace(initial[cell_id], **edges[cell_id]) for cell_id in initial}


def resolve_table_borders(grid: TableGrid, table: Table, resolver: StyleCascadeResolver) -> ResolvedTableBorders:
    """Roll up table borders, compute per-cell sets and resolve shared edges."""
    table_borders = rollup_table_borders(table, resolver)
    initial = {
        region.cell_id: cell_borders(region, grid, table_borders, resolver)
        for region in grid.iter_regions()
    }
    resolved = resolve_border_conflicts(grid, initial)
    logger.debug("Resolved borders for %d cells of table %s", len(resolved), table.id)
    return ResolvedTableBorders(table_borders, resolved)
