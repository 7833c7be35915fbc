"""
Table layout: combines the grid, column widths and resolved borders into a
:class:`TableLayout` instruction.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from ..config import ConversionOptions
from ..diagnostics import Diagnostics
from ..models.document import Table, TableCell
from ..models.properties import (
    CantSplit,
    CellMargins,
    CellVerticalAlignment,
    RowHeight,
    Shading,
    TableHeader,
    TableIndentation,
    TableJustification,
    Width,
    is_on,
)
from ..styles.cascade import StyleCascadeResolver
from .geometry import Margins, eighths_to_points, twips_to_points
from .instructions import Block, CellLayout, RowLayout, TableLayout
from .table_borders import resolve_table_borders
from .table_grid import adjust_column_widths, build_grid

logger = logging.getLogger(__name__)

# Word's default left/right cell margin (108 twips)
DEFAULT_CELL_MARGINS = Margins(top=0.0, bottom=0.0, left=5.4, right=5.4)

TABLE_ALIGNMENTS = {"center": "center", "right": "right", "end": "right", "left": "left", "start": "left"}

BlockBuilder = Callable[[TableCell], List[Block]]


def _margin(width: Optional[Width], default: float) -> float:
    if width is None or width.value is None or width.unit not in (None, "dxa"):
        return default
    return twips_to_points(float(width.value))


class TableLayoutBuilder:
    """Builds table instructions; cell content is produced by a callback."""

    def __init__(
        self,
        resolver: StyleCascadeResolver,
        options: Optional[ConversionOptions] = None,
        diagnostics: Optional[Diagnostics] = None,
    ):
        self.resolver = resolver
        self.options = options or ConversionOptions()
        self.diagnostics = diagnostics

    def build(
        self,
        table: Table,
        printable_width: float,
        build_blocks: BlockBuilder,
        minimum_widths: Optional[Dict[int, float]] = None,
    ) -> TableLayout:
        """
        Lay out a table.

        Args:
            table: Table node
            printable_width: Available width in points
            build_blocks: Returns the layout blocks of a cell's content
            minimum_widths: Optional content minimum widths keyed by cell node id

        Returns:
            TableLayout with column widths, row policies and logical cells
        """
        resolve = self.resolver.resolve
        grid = build_grid(table, self.resolver, printable_width, self.diagnostics)
        widths = adjust_column_widths(grid, table, self.resolver, printable_width, minimum_widths)
        borders = resolve_table_borders(grid, table, self.resolver)

        layout = TableLayout(
            column_widths=widths,
            style_id=table.style_id,
            source_id=table.id,
            spacing_before=self.options.cell_spacing_before,
        )
        indent = resolve(table, TableIndentation)
        if indent is not None and indent.value is not None and indent.unit in (None, "dxa"):
            layout.indent = twips_to_points(float(indent.value))
        justification = resolve(table, TableJustification)
        if justification is not None and justification.value:
            layout.alignment = TABLE_ALIGNMENTS.get(justification.value, "left")

        for row in table.rows:
            height = resolve(row, RowHeight)
            row_layout = RowLayout(
                cant_split=is_on(resolve(row, CantSplit)),
                header=is_on(resolve(row, TableHeader)),
            )
            if height is not None and height.value:
                row_layout.height = twips_to_points(height.value)
                row_layout.height_rule = height.rule or "atLeast"
            layout.rows.append(row_layout)

        for region in grid.iter_regions(include_blank=True):
            cell_layout = CellLayout(
                cell_id=region.cell_id,
                row=region.row,
                col=region.col,
                row_span=region.row_span,
                col_span=region.col_span,
                width=sum(widths[region.col:region.col + region.col_span]),
                blank=region.blank,
            )
            if not region.blank and region.cell is not None:
                cell = region.cell
                cell_layout.borders = borders.get(region.cell_id)
                cell_layout.padding = self._padding(cell, cell_layout)
                shading = resolve(cell, Shading)
                if shading is not None and shading.fill and shading.fill != "auto":
                    cell_layout.background = shading.fill
                valign = resolve(cell, CellVerticalAlignment)
                if valign is not None and valign.value:
                    cell_layout.vertical_alignment = "middle" if valign.value == "center" else valign.value
                cell_layout.blocks = build_blocks(cell)
            layout.cells.append(cell_layout)

        self._equalize_row_padding(layout)
        logger.debug(
            "Table %s: %d rows x %d columns, %d logical cells",
            table.id,
            grid.row_count,
            grid.column_count,
            len(layout.cells),
        )
        return layout

    def _padding(self, cell: TableCell, cell_layout: CellLayout) -> Margins:
        margins = self.resolver.resolve(cell, CellMargins) or CellMargins()
        borders = cell_layout.borders

        def border_width(border) -> float:
            if border is None or border.is_nil:
                return 0.0
            return eighths_to_points(border.size)

        return Margins(
            top=_margin(margins.top, DEFAULT_CELL_MARGINS.top) + border_width(borders.top) / 2,
            bottom=_margin(margins.bottom, DEFAULT_CELL_MARGINS.bottom) + border_width(borders.bottom) / 2,
            left=_margin(margins.left, DEFAULT_CELL_MARGINS.left) + border_width(borders.left) / 2,
            right=_margin(margins.right, DEFAULT_CELL_MARGINS.right) + border_width(borders.right) / 2,
        )

    @staticmethod
    def _equalize_row_padding(layout: TableLayout) -> None:
        """Cells starting in one row share the row's largest top padding."""
        for index in range(len(layout.rows)):
            cells = [cell for cell in layout.cells_in_row(index) if not cell.blank]
            if not cells:
                continue
            top = max(cell.padding.top for cell in cells)
            for cell in cells:
                cell.padding.top = top
