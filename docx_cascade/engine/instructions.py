"""
Resolved layout instructions handed to a layout sink.

Every value here is final: fonts are concrete faces, sizes and lengths are
in points, colors are hex strings without ``#``. A sink never has to look
back at the document model or the style cascade.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional, Union

from ..fonts.selector import FontDescriptor
from ..models.properties import Border, CellBorders, ParagraphBorders
from .geometry import Margins

###############################################################################
# Page
###############################################################################


@dataclass(slots=True)
class PageGeometry:
    """Page size and margins in points."""

    width: float
    height: float
    margins: Margins
    header_distance: float = 35.4
    footer_distance: float = 35.4

    @property
    def printable_width(self) -> float:
        return self.width - self.margins.left - self.margins.right

    @property
    def printable_height(self) -> float:
        return self.height - self.margins.top - self.margins.bottom


###############################################################################
# Inline content
###############################################################################


ChunkKind = Literal["text", "space", "tab", "numbering", "line_break", "page_break", "image"]


@dataclass(slots=True)
class TextChunk:
    """A piece of inline content with fully resolved formatting."""

    text: str
    font_name: str
    size: float
    kind: ChunkKind = "text"
    font: Optional[FontDescriptor] = None
    bold: bool = False
    italic: bool = False
    synthetic_bold: bool = False
    synthetic_italic: bool = False
    underline: Optional[str] = None
    strike: bool = False
    double_strike: bool = False
    color: Optional[str] = None
    vertical_align: Optional[str] = None
    background: Optional[str] = None
    width: Optional[float] = None
    height: Optional[float] = None
    image: Optional[bytes] = None
    link: Optional[str] = None
    source_id: Optional[int] = None

    @property
    def is_break(self) -> bool:
        return self.kind in ("line_break", "page_break")


###############################################################################
# Blocks
###############################################################################


@dataclass(slots=True)
class ParagraphLayout:
    """Geometry and content of one paragraph."""

    chunks: List[TextChunk] = field(default_factory=list)
    alignment: str = "left"
    line_spacing: float = 0.0
    line_rule: str = "auto"
    spacing_before: float = 0.0
    spacing_after: float = 0.0
    indent_left: float = 0.0
    indent_right: float = 0.0
    first_line: float = 0.0
    keep_together: bool = False
    keep_with_next: bool = False
    page_break_before: bool = False
    background: Optional[str] = None
    borders: Optional[ParagraphBorders] = None
    numbering: Optional[TextChunk] = None
    style_id: Optional[str] = None
    font_size: float = 0.0
    source_id: Optional[int] = None


@dataclass(slots=True)
class CellLayout:
    """One logical cell (anchor position and spans)."""

    cell_id: int
    row: int
    col: int
    row_span: int = 1
    col_span: int = 1
    width: float = 0.0
    borders: CellBorders = field(default_factory=CellBorders)
    padding: Margins = field(default_factory=Margins)
    background: Optional[str] = None
    vertical_alignment: str = "top"
    blocks: List["Block"] = field(default_factory=list)
    blank: bool = False


@dataclass(slots=True)
class RowLayout:
    height: Optional[float] = None
    height_rule: str = "auto"
    cant_split: bool = False
    header: bool = False


@dataclass(slots=True)
class TableLayout:
    """Table geometry: columns, row policies and logical cells."""

    column_widths: List[float]
    rows: List[RowLayout] = field(default_factory=list)
    cells: List[CellLayout] = field(default_factory=list)
    indent: float = 0.0
    alignment: str = "left"
    spacing_before: float = 0.0
    style_id: Optional[str] = None
    source_id: Optional[int] = None

    @property
    def width(self) -> float:
        return sum(self.column_widths)

    def cells_in_row(self, row: int) -> List[CellLayout]:
        return [cell for cell in self.cells if cell.row == row]

    def edge(self, cell: CellLayout, side: str) -> Optional[Border]:
        return getattr(cell.borders, side)


Block = Union[ParagraphLayout, TableLayout]
