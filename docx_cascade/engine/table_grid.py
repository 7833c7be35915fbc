"""
Table grid reconstruction and column width adjustment.

Rows in a document table are irregular: they may skip leading or trailing
grid columns (``gridBefore``/``gridAfter``), cells may span several grid
columns (``gridSpan``) and cells may continue a merged region from the row
above (``vMerge``). The grid built here is rectangular; every position holds
the id of the logical cell covering it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

from ..diagnostics import TABLE_STRUCTURE, Diagnostics
from ..models.document import Table, TableCell, TableRow
from ..models.properties import (
    CellWidth,
    GridAfter,
    GridBefore,
    GridSpan,
    TableWidth,
    VerticalMerge,
    Width,
    WidthAfter,
    WidthBefore,
)
from ..styles.cascade import StyleCascadeResolver
from .geometry import parse_percentage, twips_to_points

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GridCell:
    """One grid position."""

    row: int
    col: int
    cell_id: int
    cell: Optional[TableCell] = None
    blank: bool = False
    spanned: bool = False
    continuation: bool = False
    row_start: bool = False
    row_end: bool = False


@dataclass(frozen=True, slots=True)
class CellRegion:
    """A logical (possibly merged) cell."""

    cell_id: int
    row: int
    col: int
    row_span: int
    col_span: int
    cell: Optional[TableCell]
    last_row_cell: Optional[TableCell]
    blank: bool
    row_start: bool
    row_end: bool


class TableGrid:
    """Rectangular rows x columns grid of cell ids."""

    def __init__(self, rows: List[List[GridCell]], column_widths: List[float]):
        self.rows = rows
        self.column_widths = column_widths
        self._regions: Optional[Dict[int, CellRegion]] = None

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return len(self.column_widths)

    def cell(self, row: int, col: int) -> Optional[GridCell]:
        if 0 <= row < len(self.rows) and 0 <= col < len(self.rows[row]):
            return self.rows[row][col]
        return None

    def cell_by_id(self, cell_id: int) -> Optional[GridCell]:
        """First grid position (row-major) holding ``cell_id``."""
        for row in self.rows:
            for grid_cell in row:
                if grid_cell.cell_id == cell_id:
                    return grid_cell
        return None

    def col_span(self, cell_id: int) -> int:
        anchor = self.cell_by_id(cell_id)
        if anchor is None:
            return 0
        span = 0
        for grid_cell in self.rows[anchor.row][anchor.col:]:
            if grid_cell.cell_id != cell_id:
                break
            span += 1
        return span

    def row_span(self, cell_id: int) -> int:
        anchor = self.cell_by_id(cell_id)
        if anchor is None:
            return 0
        span = 0
        for row in self.rows[anchor.row:]:
            if anchor.col >= len(row) or row[anchor.col].cell_id != cell_id:
                break
            span += 1
        return span

    def region(self, cell_id: int) -> Optional[CellRegion]:
        return self.regions().get(cell_id)

    def regions(self) -> Dict[int, CellRegion]:
        """Logical cells keyed by cell id, in row-major order of their anchors."""
        if self._regions is not None:
            return self._regions
        regions: Dict[int, CellRegion] = {}
        for row in self.rows:
            for grid_cell in row:
                if grid_cell.cell_id in regions:
                    continue
                row_span = self.row_span(grid_cell.cell_id)
                last = self.cell(grid_cell.row + row_span - 1, grid_cell.col)
                regions[grid_cell.cell_id] = CellRegion(
                    cell_id=grid_cell.cell_id,
                    row=grid_cell.row,
                    col=grid_cell.col,
                    row_span=row_span,
                    col_span=self.col_span(grid_cell.cell_id),
                    cell=grid_cell.cell,
                    last_row_cell=last.cell if last is not None else grid_cell.cell,
                    blank=grid_cell.blank,
                    row_start=grid_cell.row_start,
                    row_end=grid_cell.row_end,
                )
        self._regions = regions
        return regions

    def iter_regions(self, include_blank: bool = False) -> Iterator[CellRegion]:
        for region in self.regions().values():
            if include_blank or not region.blank:
                yield region


# ----------------------------------------------------------------------
# Grid reconstruction
# ----------------------------------------------------------------------


def _int_value(prop) -> int:
    if prop is None or prop.value is None:
        return 0
    try:
        return max(0, int(prop.value))
    except (TypeError, ValueError):
        return 0


def grid_columns(
    table: Table,
    resolver: StyleCascadeResolver,
    printable_width: float,
) -> Optional[List[float]]:
    """
    Column widths in points from ``tblGrid``.

    Without a grid the widths are inferred from percentage widths of the
    first row's cells, relative to the table's percentage width of the
    printable page width. Returns None when they cannot be inferred.
    """
    if table.grid:
        return [twips_to_points(width) for width in table.grid]

    rows = table.rows
    if not rows:
        return None
    table_width = resolver.resolve(table, TableWidth)
    if table_width is None or table_width.unit != "pct":
        return None
    total = printable_width * parse_percentage(table_width.value)
    widths: List[float] = []
    for cell in rows[0].cells:
        cell_width = cell.properties.get(CellWidth)
        if cell_width is None or cell_width.unit != "pct":
            return None
        widths.append(total * parse_percentage(cell_width.value))
    return widths or None


def _row_grid_units(row: TableRow) -> int:
    units = _int_value(row.properties.get(GridBefore)) + _int_value(row.properties.get(GridAfter))
    for cell in row.cells:
        units += max(1, _int_value(cell.properties.get(GridSpan)))
    return units


def build_grid(
    table: Table,
    resolver: StyleCascadeResolver,
    printable_width: float,
    diagnostics: Optional[Diagnostics] = None,
) -> TableGrid:
    """
    Reconstruct the logical grid of a table.

    Args:
        table: Table node
        resolver: Cascade resolver (for table width lookups)
        printable_width: Page width minus left/right margins, in points
        diagnostics: Collector for structural warnings

    Returns:
        TableGrid with one GridCell per row/column position
    """
    def warn(message: str) -> None:
        logger.debug("Table %s: %s", table.id, message)
        if diagnostics is not None:
            diagnostics.warn(TABLE_STRUCTURE, message, table.id)

    columns = grid_columns(table, resolver, printable_width)
    if not columns:
        count = max((_row_grid_units(row) for row in table.rows), default=0)
        total = _declared_total(table, resolver, printable_width) or printable_width
        columns = [total / count] * count if count else []
        if count:
            warn("table has no column grid; columns split evenly")
    column_count = len(columns)

    rows: List[List[GridCell]] = []
    next_id = 0
    for r, row in enumerate(table.rows):
        grid_row: List[GridCell] = []

        before = min(_int_value(row.properties.get(GridBefore)), column_count)
        if before:
            for c in range(before):
                grid_row.append(GridCell(r, c, next_id, blank=True))
            next_id += 1

        real_positions: List[int] = []
        for cell in row.cells:
            col = len(grid_row)
            if col >= column_count:
                warn(f"row {r} has more cells than grid columns; extra cells dropped")
                break
            span = max(1, _int_value(cell.properties.get(GridSpan)))
            if col + span > column_count:
                warn(f"cell span in row {r} exceeds the grid; span truncated")
                span = column_count - col

            merge = cell.properties.get(VerticalMerge)
            continuation = merge is not None and merge.value != "restart"
            cell_id = None
            if continuation:
                above = rows[r - 1][col] if r > 0 else None
                if above is not None and not above.blank:
                    cell_id = above.cell_id
                else:
                    warn(f"vertical merge in row {r} has no cell above; starting a new cell")
                    continuation = False
            if cell_id is None:
                cell_id = next_id
                next_id += 1

            real_positions.append(col)
            grid_row.append(GridCell(r, col, cell_id, cell=cell, continuation=continuation))
            for offset in range(1, span):
                grid_row.append(GridCell(r, col + offset, cell_id, spanned=True))

        if len(grid_row) < column_count:
            after = min(_int_value(row.properties.get(GridAfter)), column_count - len(grid_row))
            if after:
                for _ in range(after):
                    grid_row.append(GridCell(r, len(grid_row), next_id, blank=True))
                next_id += 1
        if len(grid_row) < column_count:
            warn(f"row {r} is shorter than the grid; padded with blank cells")
            for _ in range(column_count - len(grid_row)):
                grid_row.append(GridCell(r, len(grid_row), next_id, blank=True))
            next_id += 1

        if real_positions:
            first, last = real_positions[0], real_positions[-1]
            grid_row[first] = _flag(grid_row[first], row_start=True)
            grid_row[last] = _flag(grid_row[last], row_end=True)
        rows.append(grid_row)

    return TableGrid(rows, list(columns))


def _flag(grid_cell: GridCell, row_start: bool = False, row_end: bool = False) -> GridCell:
    return GridCell(
        grid_cell.row,
        grid_cell.col,
        grid_cell.cell_id,
        cell=grid_cell.cell,
        blank=grid_cell.blank,
        spanned=grid_cell.spanned,
        continuation=grid_cell.continuation,
        row_start=grid_cell.row_start or row_start,
        row_end=grid_cell.row_end or row_end,
    )


# ----------------------------------------------------------------------
# Width adjustment
# ----------------------------------------------------------------------


def _declared_total(table: Table, resolver: StyleCascadeResolver, printable_width: float) -> Optional[float]:
    """Fixed table width in points, or None for auto width."""
    width = resolver.resolve(table, TableWidth)
    if width is None or width.value is None:
        return None
    if width.unit == "dxa":
        total = twips_to_points(float(width.value))
        return total if total > 0 else None
    if width.unit == "pct":
        total = printable_width * parse_percentage(width.value)
        return total if total > 0 else None
    return None


def _width_to_points(width: Optional[Width], total: float) -> float:
    if width is None or width.value is None:
        return 0.0
    if width.unit == "dxa":
        return twips_to_points(float(width.value))
    if width.unit == "pct":
        return parse_percentage(width.value) * total
    return 0.0


def scale_column_widths(widths: List[float], total: float) -> List[float]:
    """Scale widths down (never up) so they sum to ``total``."""
    current = sum(widths)
    if current <= total or current <= 0:
        return list(widths)
    factor = total / current
    return [width * factor for width in widths]


def adjust_column_widths(
    grid: TableGrid,
    table: Table,
    resolver: StyleCascadeResolver,
    printable_width: float,
    minimum_widths: Optional[Dict[int, float]] = None,
) -> List[float]:
    """
    Widen grid columns to fit declared and minimum cell widths.

    For each row, the width each cell needs (its declared width, or a
    content minimum keyed by cell node id when larger) is compared with the
    columns it spans; any shortfall is added to the last spanned column.
    Fixed-width tables are scaled back down to their declared width.

    Args:
        grid: Reconstructed grid
        table: Table node
        resolver: Cascade resolver
        printable_width: Page printable width in points
        minimum_widths: Optional content-driven minimum widths in points

    Returns:
        Adjusted column widths; ``grid.column_widths`` is updated too
    """
    widths = list(grid.column_widths)
    fixed_total = _declared_total(table, resolver, printable_width)
    total = fixed_total if fixed_total is not None else sum(widths)
    if fixed_total is not None:
        widths = scale_column_widths(widths, fixed_total)

    table_rows = table.rows
    for r, grid_row in enumerate(grid.rows):
        row = table_rows[r] if r < len(table_rows) else None
        c = 0
        while c < len(grid_row):
            grid_cell = grid_row[c]
            span = 1
            while c + span < len(grid_row) and grid_row[c + span].cell_id == grid_cell.cell_id:
                span += 1

            required = 0.0
            if grid_cell.blank and row is not None:
                if c == 0:
                    required = _width_to_points(row.properties.get(WidthBefore), total)
                else:
                    required = _width_to_points(row.properties.get(WidthAfter), total)
            elif grid_cell.cell is not None:
                required = _width_to_points(resolver.resolve(grid_cell.cell, CellWidth), total)
                if minimum_widths:
                    required = max(required, minimum_widths.get(grid_cell.cell.id, 0.0))

            shortfall = required - sum(widths[c:c + span])
            if shortfall > 0:
                widths[c + span - 1] += shortfall
            c += span

        if fixed_total is not None:
            widths = scale_column_widths(widths, fixed_total)
        else:
            total = sum(widths)

    grid.column_widths = widths
    return widths
