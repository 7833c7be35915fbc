"""Layout resolution engine: numbering, tables, paragraphs and the document walk."""

from .converter import ConversionContext, DocumentConverter, page_geometry
from .instructions import Block, CellLayout, PageGeometry, ParagraphLayout, RowLayout, TableLayout, TextChunk
from .numbering import NumberingCounter, ParagraphNumbering, format_number, render_level_text
from .paragraph_layout import ParagraphLayoutCalculator, insert_auto_spaces, line_spacing, merge_adjacent_spacing
from .run_formatter import FontNames, RunFormatter, RunStyle, split_by_script
from .table_borders import ResolvedTableBorders, border_wins, resolve_border_conflicts, resolve_table_borders, rollup_table_borders
from .table_grid import CellRegion, GridCell, TableGrid, adjust_column_widths, build_grid, scale_column_widths
from .table_layout import TableLayoutBuilder
from .text_metrics import TextMeasurer

__all__ = [
    "Block",
    "CellLayout",
    "CellRegion",
    "ConversionContext",
    "DocumentConverter",
    "FontNames",
    "GridCell",
    "NumberingCounter",
    "PageGeometry",
    "ParagraphLayout",
    "ParagraphLayoutCalculator",
    "ParagraphNumbering",
    "ResolvedTableBorders",
    "RowLayout",
    "RunFormatter",
    "RunStyle",
    "TableGrid",
    "TableLayout",
    "TableLayoutBuilder",
    "TextChunk",
    "TextMeasurer",
    "adjust_column_widths",
    "border_wins",
    "build_grid",
    "format_number",
    "insert_auto_spaces",
    "line_spacing",
    "merge_adjacent_spacing",
    "page_geometry",
    "render_level_text",
    "resolve_border_conflicts",
    "resolve_table_borders",
    "rollup_table_borders",
    "scale_column_widths",
    "split_by_script",
]
