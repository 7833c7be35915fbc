"""
Tests for table border rollup and shared-edge conflict resolution.
"""

import pytest

from docx_cascade.engine.table_borders import (
    border_brightness,
    border_wins,
    cell_borders,
    resolve_border_conflicts,
    resolve_table_borders,
    rollup_table_borders,
    stronger_border,
)
from docx_cascade.engine.table_grid import build_grid
from docx_cascade.models.properties import Border, CellBorders, PropertySet, TableBorders, VerticalMerge
from docx_cascade.models.styles import Style, StyleKind, StyleSheet
from docx_cascade.styles.cascade import StyleCascadeResolver

SINGLE = Border("single", 4, "000000")
THICK_SINGLE = Border("single", 12, "000000")
DOUBLE = Border("double", 4, "000000")
DOTTED = Border("dotted", 4, "auto")


def _resolve(table, document):
    resolver = StyleCascadeResolver(document)
    grid = build_grid(table, resolver, 451.3)
    return grid, resolve_table_borders(grid, table, resolver)


@pytest.mark.unit
class TestBorderComparison:
    """Test cases for border_wins and helpers."""

    def test_style_weight_first(self):
        """Test double outranks single regardless of size."""
        assert border_wins(DOUBLE, THICK_SINGLE)
        assert not border_wins(THICK_SINGLE, DOUBLE)

    def test_size_breaks_weight_tie(self):
        """Test the wider border wins between equal styles."""
        assert border_wins(THICK_SINGLE, SINGLE)

    def test_darker_color_wins(self):
        """Test lower brightness wins when style and size tie."""
        white = Border("single", 4, "FFFFFF")
        assert border_wins(SINGLE, white)
        assert not border_wins(white, SINGLE)

    def test_full_tie_goes_to_neighbour(self):
        """Test identical borders resolve to the second argument."""
        other = Border("single", 4, "000000")
        assert not border_wins(SINGLE, other)
        assert stronger_border(SINGLE, other) is other

    def test_nil_and_missing(self):
        """Test any border beats a missing or nil one."""
        assert border_wins(SINGLE, None)
        assert border_wins(SINGLE, Border("nil"))
        assert border_wins(SINGLE, Border("nil", 4, "000000"))
        assert not border_wins(Border("none", 24, "000000"), SINGLE)
        assert not border_wins(None, None)

    def test_brightness(self):
        """Test brightness of auto, black and white."""
        assert border_brightness("auto") == 0.0
        assert border_brightness("000000") == 0.0
        assert border_brightness("FFFFFF") == pytest.approx(255.0)


@pytest.mark.unit
class TestBorderRollup:
    """Test cases for table-wide border rollup."""

    def test_direct_over_style(self, make_table, make_document):
        """Test direct tblBorders beat the table style per edge."""
        styles = StyleSheet(
            [Style("Grid", kind=StyleKind.TABLE, table_properties=PropertySet([TableBorders(top=DOTTED, bottom=DOTTED)]))]
        )
        table = make_table([[[]]], style_id="Grid", properties=[TableBorders(top=DOUBLE)])
        borders = rollup_table_borders(table, StyleCascadeResolver(make_document(table, styles=styles)))

        assert borders.top == DOUBLE
        assert borders.bottom == DOTTED

    def test_default_table_style(self, make_table, make_document):
        """Test the default table style is the last layer."""
        styles = StyleSheet(
            [Style("TableNormal", kind=StyleKind.TABLE, is_default=True, table_properties=PropertySet([TableBorders(left=SINGLE)]))]
        )
        table = make_table([[[]]])
        borders = rollup_table_borders(table, StyleCascadeResolver(make_document(table, styles=styles)))

        assert borders.left == SINGLE

    def test_no_borders(self, make_table, make_document):
        """Test an unbordered table yields an empty set."""
        table = make_table([[[]]])
        assert rollup_table_borders(table, StyleCascadeResolver(make_document(table))) == TableBorders()


@pytest.mark.unit
class TestBorderConflicts:
    """Test cases for shared-edge resolution."""

    def test_double_beats_single(self, make_table, make_document):
        """Test the stronger edge is kept on the owning cell and the other side cleared."""
        table = make_table([[[CellBorders(right=SINGLE)], [CellBorders(left=DOUBLE)]]], grid=[1440, 1440])
        grid, resolved = _resolve(table, make_document(table))
        left_id, right_id = grid.rows[0][0].cell_id, grid.rows[0][1].cell_id

        assert resolved.get(left_id).right is None
        assert resolved.get(right_id).left == DOUBLE
        assert resolved.shared_edge(left_id, right_id) == DOUBLE

    def test_stronger_edge_moves_to_owner(self, make_table, make_document):
        """Test a winning left-cell edge is drawn by the right cell."""
        table = make_table([[[CellBorders(right=DOUBLE)], [CellBorders(left=SINGLE)]]], grid=[1440, 1440])
        grid, resolved = _resolve(table, make_document(table))

        assert resolved.get(grid.rows[0][0].cell_id).right is None
        assert resolved.get(grid.rows[0][1].cell_id).left == DOUBLE

    def test_vertical_edges_between_rows(self, make_table, make_document):
        """Test the lower cell owns the horizontal edge."""
        table = make_table([[[CellBorders(bottom=THICK_SINGLE)]], [[CellBorders(top=SINGLE)]]], grid=[1440])
        grid, resolved = _resolve(table, make_document(table))

        assert resolved.get(grid.rows[0][0].cell_id).bottom is None
        assert resolved.get(grid.rows[1][0].cell_id).top == THICK_SINGLE

    def test_table_inside_borders(self, make_table, make_document):
        """Test interior edges use insideV and outer edges the table border."""
        table = make_table(
            [[[], []]],
            grid=[1440, 1440],
            properties=[TableBorders(left=DOUBLE, right=DOUBLE, top=SINGLE, bottom=SINGLE, inside_v=DOTTED)],
        )
        grid, resolved = _resolve(table, make_document(table))
        first = resolved.get(grid.rows[0][0].cell_id)
        second = resolved.get(grid.rows[0][1].cell_id)

        assert first.left == DOUBLE
        assert first.right is None
        assert second.left == DOTTED
        assert second.right == DOUBLE

    def test_blank_neighbour_keeps_edge(self, make_table, make_document):
        """Test an edge facing padding is not cleared."""
        table = make_table(
            [[[], []], [[]]],
            grid=[1440, 1440],
            properties=[TableBorders(inside_h=SINGLE, bottom=SINGLE)],
        )
        grid, resolved = _resolve(table, make_document(table))

        assert resolved.get(grid.rows[0][0].cell_id).bottom is None
        assert resolved.get(grid.rows[1][0].cell_id).top == SINGLE
        assert resolved.get(grid.rows[0][1].cell_id).bottom == SINGLE

    def test_merged_cell_edge_per_segment(self, make_table, make_document):
        """Test a vertically merged cell resolves each neighbour separately."""
        table = make_table(
            [
                [[VerticalMerge("restart"), CellBorders(right=SINGLE)], [CellBorders(left=DOUBLE)]],
                [[VerticalMerge()], []],
            ],
            grid=[1440, 1440],
        )
        grid, resolved = _resolve(table, make_document(table))
        merged_id = grid.rows[0][0].cell_id

        assert resolved.get(merged_id).right is None
        assert resolved.get(grid.rows[0][1].cell_id).left == DOUBLE
        assert resolved.get(grid.rows[1][1].cell_id).left == SINGLE

    def test_merged_cell_bottom_from_last_row(self, make_table, make_document):
        """Test a vertically merged cell takes its bottom edge from its last row."""
        table = make_table(
            [
                [[VerticalMerge("restart"), CellBorders(bottom=SINGLE)]],
                [[VerticalMerge(), CellBorders(bottom=DOUBLE)]],
                [[]],
            ],
            grid=[1440],
        )
        resolver = StyleCascadeResolver(make_document(table))
        grid = build_grid(table, resolver, 451.3)
        merged = grid.regions()[grid.rows[0][0].cell_id]

        assert merged.row_span == 2
        assert cell_borders(merged, grid, rollup_table_borders(table, resolver), resolver).bottom == DOUBLE

        resolved = resolve_table_borders(grid, table, resolver)
        assert resolved.get(merged.cell_id).bottom is None
        assert resolved.get(grid.rows[2][0].cell_id).top == DOUBLE

    def test_initial_borders_not_modified(self, make_table, make_document):
        """Test the first-pass border sets are left unchanged."""
        table = make_table([[[CellBorders(right=SINGLE)], [CellBorders(left=DOUBLE)]]], grid=[1440, 1440])
        resolver = StyleCascadeResolver(make_document(table))
        grid = build_grid(table, resolver, 451.3)
        table_borders = rollup_table_borders(table, resolver)
        initial = {r.cell_id: cell_borders(r, grid, table_borders, resolver) for r in grid.iter_regions()}
        snapshot = dict(initial)

        resolve_border_conflicts(grid, initial)
        assert initial == snapshot
        assert initial[grid.rows[0][0].cell_id].right == SINGLE
