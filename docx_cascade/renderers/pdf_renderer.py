"""
ReportLab PDF sink.

Buffers the blocks it receives and, on :meth:`PdfSink.end_document`, breaks
paragraphs into lines, paginates top to bottom and draws text, images,
backgrounds and borders on a ReportLab canvas. Headers and footers are
repeated on every page.
"""

from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional, Tuple, Union

from reportlab.lib.colors import Color, HexColor, black
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas as pdf_canvas

from ..engine.geometry import eighths_to_points
from ..engine.instructions import Block, CellLayout, PageGeometry, ParagraphLayout, TableLayout, TextChunk
from ..engine.text_metrics import TextMeasurer
from ..exceptions import RenderingError
from ..models.properties import Border

logger = logging.getLogger(__name__)

CanvasTarget = Union[str, Path, BinaryIO]

# share of the font size below the baseline
DESCENT_RATIO = 0.22
SUPERSCRIPT_SCALE = 0.65
SUPERSCRIPT_RISE = 0.33
SUBSCRIPT_DROP = 0.12
SYNTHETIC_ITALIC_SKEW = 12
DEFAULT_BORDER_WIDTH = 0.5

_PIECES = re.compile(r"\S+\s*|\s+")


def to_color(value: Optional[str], fallback: Color = black) -> Color:
    """Hex string without ``#`` to a ReportLab color."""
    if not value or value == "auto":
        return fallback
    try:
        return HexColor(f"#{value.lstrip('#')}")
    except ValueError:
        return fallback


@dataclass
class _Line:
    items: List[Tuple[TextChunk, float]] = field(default_factory=list)
    width: float = 0.0
    height: float = 0.0
    descent: float = 0.0
    ends_with_break: bool = False
    page_break: bool = False


class PdfSink:
    """Layout sink that writes a PDF with ReportLab."""

    def __init__(
        self,
        output: CanvasTarget,
        measurer: Optional[TextMeasurer] = None,
        fallback_font: str = "Helvetica",
        title: Optional[str] = None,
    ) -> None:
        self.output = output
        self.measurer = measurer or TextMeasurer(fallback_font)
        self.fallback_font = fallback_font
        self.title = title
        self.page: Optional[PageGeometry] = None
        self.blocks: List[Block] = []
        self.header: List[Block] = []
        self.footer: List[Block] = []
        self.page_count = 0
        self.canvas: Optional[pdf_canvas.Canvas] = None
        self._cursor = 0.0
        self._fonts: Dict[str, str] = {}

    # ------------------------------------------------------------------
    # LayoutSink protocol
    # ------------------------------------------------------------------
    def begin_document(self, page: PageGeometry) -> None:
        self.page = page
        self.blocks = []
        self.header = []
        self.footer = []
        self.page_count = 0

    def add_block(self, block: Block) -> None:
        self.blocks.append(block)

    def set_header(self, blocks: List[Block]) -> None:
        self.header = list(blocks)

    def set_footer(self, blocks: List[Block]) -> None:
        self.footer = list(blocks)

    def end_document(self) -> None:
        """
        Paginate and write the PDF.

        Raises:
            RenderingError: The document was never begun or the output cannot be written
        """
        if self.page is None:
            raise RenderingError("end_document called before begin_document")
        target = str(self.output) if isinstance(self.output, (str, Path)) else self.output
        self.canvas = pdf_canvas.Canvas(target, pagesize=(self.page.width, self.page.height))
        if self.title:
            self.canvas.setTitle(self.title)

        self._start_page()
        for block in self.blocks:
            if isinstance(block, ParagraphLayout):
                self._flow_paragraph(block)
            else:
                self._flow_table(block)
        try:
            self.canvas.showPage()
            self.canvas.save()
        except OSError as exc:
            raise RenderingError("Cannot write PDF", str(exc)) from exc
        logger.info("Rendered %d page(s)", self.page_count)

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------
    @property
    def _top(self) -> float:
        return self.page.height - self.page.margins.top

    @property
    def _bottom(self) -> float:
        return self.page.margins.bottom

    @property
    def _left(self) -> float:
        return self.page.margins.left

    @property
    def _at_page_top(self) -> bool:
        return self._cursor >= self._top

    def _start_page(self) -> None:
        self.page_count += 1
        self._cursor = self._top
        width = self.page.printable_width
        if self.header:
            self.draw_blocks(self.header, self._left, self.page.height - self.page.header_distance, width)
        if self.footer:
            height = self.blocks_height(self.footer, width)
            self.draw_blocks(self.footer, self._left, self.page.footer_distance + height, width)

    def _new_page(self) -> None:
        self.canvas.showPage()
        self._start_page()

    def _ensure_room(self, height: float) -> None:
        if self._cursor - height < self._bottom and not self._at_page_top:
            self._new_page()

    # ------------------------------------------------------------------
    # Flowing top-level blocks
    # ------------------------------------------------------------------
    def _flow_paragraph(self, paragraph: ParagraphLayout) -> None:
        width = self.page.printable_width
        if paragraph.page_break_before and not self._at_page_top:
            self._new_page()
        lines = self.break_lines(paragraph, width)
        if paragraph.keep_together:
            self._ensure_room(self.paragraph_height(paragraph, width, lines))

        self._cursor -= paragraph.spacing_before
        for line in lines:
            self._ensure_room(line.height)
            self._draw_paragraph_decoration(paragraph, self._left, self._cursor, width, line.height)
            self._draw_line(paragraph, line, self._left, self._cursor, width, line is lines[0], line is lines[-1])
            self._cursor -= line.height
            if line.page_break:
                self._new_page()
        self._cursor -= paragraph.spacing_after

    def _flow_table(self, table: TableLayout) -> None:
        heights = self.row_heights(table)
        x = self._table_x(table, self.page.printable_width, self._left)
        self._cursor -= table.spacing_before
        header_rows = []
        for index, row in enumerate(table.rows):
            if not row.header or index != len(header_rows):
                break
            header_rows.append(index)

        for index in range(len(table.rows)):
            height = heights[index]
            if self._cursor - height < self._bottom and not self._at_page_top:
                self._new_page()
                if index not in header_rows:
                    for header in header_rows:
                        self._draw_row(table, header, heights, x, self._cursor)
                        self._cursor -= heights[header]
            self._draw_row(table, index, heights, x, self._cursor)
            self._cursor -= height

    # ------------------------------------------------------------------
    # Measuring
    # ------------------------------------------------------------------
    def blocks_height(self, blocks: List[Block], width: float) -> float:
        total = 0.0
        for block in blocks:
            if isinstance(block, ParagraphLayout):
                total += self.paragraph_height(block, width)
            else:
                total += block.spacing_before + sum(self.row_heights(block))
        return total

    def paragraph_height(self, paragraph: ParagraphLayout, width: float, lines: Optional[List[_Line]] = None) -> float:
        if lines is None:
            lines = self.break_lines(paragraph, width)
        return paragraph.spacing_before + sum(line.height for line in lines) + paragraph.spacing_after

    def row_heights(self, table: TableLayout) -> List[float]:
        """
        Row heights in points.

        Args:
            table: Table layout

        Returns:
            One height per row; content of vertically merged cells grows the
            last row they span
        """
        heights = []
        for index, row in enumerate(table.rows):
            content = 0.0
            for cell in table.cells_in_row(index):
                if cell.blank or cell.row_span > 1:
                    continue
                content = max(content, self._cell_content_height(cell))
            if row.height_rule == "exact" and row.height:
                heights.append(row.height)
            else:
                heights.append(max(content, row.height or 0.0))

        for cell in table.cells:
            if cell.blank or cell.row_span <= 1:
                continue
            last = min(cell.row + cell.row_span, len(heights)) - 1
            spanned = sum(heights[cell.row:last + 1])
            needed = self._cell_content_height(cell)
            if needed > spanned and table.rows[last].height_rule != "exact":
                heights[last] += needed - spanned
        return heights

    def _cell_content_height(self, cell: CellLayout) -> float:
        inner = max(cell.width - cell.padding.left - cell.padding.right, 1.0)
        return cell.padding.top + self.blocks_height(cell.blocks, inner) + cell.padding.bottom

    def break_lines(self, paragraph: ParagraphLayout, width: float) -> List[_Line]:
        """
        Break a paragraph into lines at whitespace.

        Args:
            paragraph: Paragraph layout
            width: Width of the containing column

        Returns:
            Lines with their heights; words wider than a line keep a line to themselves
        """
        base = max(width - paragraph.indent_left - paragraph.indent_right, 1.0)
        lines: List[_Line] = []
        line = _Line()
        available = max(base - paragraph.first_line, 1.0)

        for piece in self._pieces(paragraph.chunks):
            if piece.is_break:
                line.ends_with_break = True
                line.page_break = piece.kind == "page_break"
                lines.append(line)
                line = _Line()
                available = base
                continue
            piece_width = self.measurer.chunk_width(piece)
            if line.items and line.width + piece_width > available and piece.text.strip():
                lines.append(line)
                line = _Line()
                available = base
            line.items.append((piece, piece_width))
            line.width += piece_width
        if line.items or not lines:
            lines.append(line)

        for item in lines:
            self._measure_line(paragraph, item)
        return lines

    def _pieces(self, chunks: List[TextChunk]):
        for chunk in chunks:
            if chunk.kind in ("text", "space") and chunk.width is None and len(chunk.text) > 1:
                for match in _PIECES.finditer(chunk.text):
                    yield replace(chunk, text=match.group(0))
            else:
                yield chunk

    def _measure_line(self, paragraph: ParagraphLayout, line: _Line) -> None:
        text_size = max((chunk.size for chunk, _ in line.items if chunk.kind != "image"), default=paragraph.font_size)
        image_height = max((chunk.height or 0.0 for chunk, _ in line.items if chunk.kind == "image"), default=0.0)
        line.descent = text_size * DESCENT_RATIO
        if paragraph.line_rule == "exact":
            line.height = paragraph.line_spacing
        else:
            line.height = max(paragraph.line_spacing, image_height + line.descent)

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------
    def draw_blocks(self, blocks: List[Block], x: float, top: float, width: float) -> float:
        """Draw blocks without pagination; returns the height used."""
        cursor = top
        for block in blocks:
            if isinstance(block, ParagraphLayout):
                lines = self.break_lines(block, width)
                cursor -= block.spacing_before
                for line in lines:
                    self._draw_paragraph_decoration(block, x, cursor, width, line.height)
                    self._draw_line(block, line, x, cursor, width, line is lines[0], line is lines[-1])
                    cursor -= line.height
                cursor -= block.spacing_after
            else:
                heights = self.row_heights(block)
                cursor -= block.spacing_before
                table_x = self._table_x(block, width, x)
                for index, height in enumerate(heights):
                    self._draw_row(block, index, heights, table_x, cursor)
                    cursor -= height
        return top - cursor

    def _table_x(self, table: TableLayout, width: float, x: float) -> float:
        if table.alignment == "center":
            return x + max(width - table.width, 0.0) / 2.0
        if table.alignment == "right":
            return x + max(width - table.width, 0.0)
        return x + table.indent

    def _draw_row(self, table: TableLayout, index: int, heights: List[float], x: float, top: float) -> None:
        offsets = [0.0]
        for column_width in table.column_widths:
            offsets.append(offsets[-1] + column_width)
        for cell in table.cells_in_row(index):
            if cell.blank:
                continue
            left = x + offsets[min(cell.col, len(offsets) - 1)]
            right = x + offsets[min(cell.col + cell.col_span, len(offsets) - 1)]
            height = sum(heights[cell.row:cell.row + cell.row_span])
            bottom = top - height

            if cell.background:
                self.canvas.saveState()
                self.canvas.setFillColor(to_color(cell.background))
                self.canvas.rect(left, bottom, right - left, height, fill=1, stroke=0)
                self.canvas.restoreState()

            inner_width = max(right - left - cell.padding.left - cell.padding.right, 1.0)
            content = self.blocks_height(cell.blocks, inner_width)
            free = max(height - cell.padding.top - cell.padding.bottom - content, 0.0)
            shift = {"middle": free / 2.0, "bottom": free}.get(cell.vertical_alignment, 0.0)
            self.draw_blocks(cell.blocks, left + cell.padding.left, top - cell.padding.top - shift, inner_width)

            borders = cell.borders
            self._stroke(borders.top, left, top, right, top)
            self._stroke(borders.bottom, left, bottom, right, bottom)
            self._stroke(borders.left, left, bottom, left, top)
            self._stroke(borders.right, right, bottom, right, top)
            self._stroke(borders.tl2br, left, top, right, bottom)
            self._stroke(borders.tr2bl, right, top, left, bottom)

    def _draw_paragraph_decoration(self, paragraph: ParagraphLayout, x: float, top: float, width: float, height: float) -> None:
        left = x + paragraph.indent_left
        right = x + width - paragraph.indent_right
        if paragraph.background:
            self.canvas.saveState()
            self.canvas.setFillColor(to_color(paragraph.background))
            self.canvas.rect(left, top - height, right - left, height, fill=1, stroke=0)
            self.canvas.restoreState()
        if paragraph.borders is not None:
            self._stroke(paragraph.borders.left, left, top - height, left, top)
            self._stroke(paragraph.borders.right, right, top - height, right, top)

    def _draw_line(
        self,
        paragraph: ParagraphLayout,
        line: _Line,
        x: float,
        top: float,
        width: float,
        first: bool,
        last: bool,
    ) -> None:
        left = x + paragraph.indent_left + (paragraph.first_line if first else 0.0)
        available = x + width - paragraph.indent_right - left
        used = line.width - self._trailing_space(line)
        free = max(available - used, 0.0)

        gap = 0.0
        if paragraph.alignment == "center":
            left += free / 2.0
        elif paragraph.alignment == "right":
            left += free
        elif paragraph.alignment == "justify" and not last and not line.ends_with_break:
            gaps = sum(1 for chunk, _ in line.items[:-1] if chunk.text.endswith(" "))
            if gaps:
                gap = free / gaps

        baseline = top - line.height + line.descent
        cursor = left
        for chunk, chunk_width in line.items:
            self._draw_chunk(chunk, cursor, baseline, chunk_width)
            cursor += chunk_width
            if gap and chunk.text.endswith(" "):
                cursor += gap

        if paragraph.borders is not None:
            box_left = x + paragraph.indent_left
            box_right = x + width - paragraph.indent_right
            if first:
                self._stroke(paragraph.borders.top, box_left, top, box_right, top)
            if last:
                self._stroke(paragraph.borders.bottom, box_left, top - line.height, box_right, top - line.height)

    def _trailing_space(self, line: _Line) -> float:
        if not line.items:
            return 0.0
        chunk, chunk_width = line.items[-1]
        if chunk.kind in ("text", "space") and chunk.text and not chunk.text.strip():
            return chunk_width
        if chunk.kind == "text" and chunk.text != chunk.text.rstrip():
            stripped = chunk.text.rstrip()
            return chunk_width - self.measurer.string_width(stripped, chunk.font_name, chunk.size)
        return 0.0

    def _draw_chunk(self, chunk: TextChunk, x: float, baseline: float, width: float) -> None:
        if chunk.link:
            self._draw_link(chunk, x, baseline, width)
        if chunk.kind == "image":
            self._draw_image(chunk, x, baseline)
            return
        if chunk.background:
            self.canvas.saveState()
            self.canvas.setFillColor(to_color(chunk.background))
            self.canvas.rect(x, baseline - chunk.size * DESCENT_RATIO, width, chunk.size, fill=1, stroke=0)
            self.canvas.restoreState()
        if chunk.kind == "tab" or not chunk.text:
            return

        size = chunk.size
        rise = 0.0
        if chunk.vertical_align == "superscript":
            size, rise = chunk.size * SUPERSCRIPT_SCALE, chunk.size * SUPERSCRIPT_RISE
        elif chunk.vertical_align == "subscript":
            size, rise = chunk.size * SUPERSCRIPT_SCALE, -chunk.size * SUBSCRIPT_DROP

        self.canvas.saveState()
        origin_x, origin_y = x, baseline + rise
        if chunk.synthetic_italic:
            self.canvas.translate(origin_x, origin_y)
            self.canvas.skew(0, SYNTHETIC_ITALIC_SKEW)
            origin_x = origin_y = 0.0
        if chunk.synthetic_bold:
            self.canvas.setStrokeColor(to_color(chunk.color))
            self.canvas.setLineWidth(size / 30.0)
        text_object = self.canvas.beginText()
        text_object.setTextOrigin(origin_x, origin_y)
        text_object.setFont(self._font(chunk.font_name), size)
        text_object.setFillColor(to_color(chunk.color))
        if chunk.synthetic_bold:
            text_object.setTextRenderMode(2)
        text_object.textOut(chunk.text)
        self.canvas.drawText(text_object)
        self.canvas.restoreState()

        text_width = self.measurer.string_width(chunk.text.rstrip(), chunk.font_name, size)
        self.canvas.saveState()
        self.canvas.setStrokeColor(to_color(chunk.color))
        self.canvas.setLineWidth(max(size / 18.0, 0.5))
        if chunk.underline and chunk.underline != "none":
            y = baseline + rise - size * 0.12
            self.canvas.line(x, y, x + text_width, y)
            if chunk.underline == "double":
                self.canvas.line(x, y - size / 12.0, x + text_width, y - size / 12.0)
        if chunk.strike or chunk.double_strike:
            y = baseline + rise + size * 0.3
            self.canvas.line(x, y, x + text_width, y)
            if chunk.double_strike:
                self.canvas.line(x, y + size / 10.0, x + text_width, y + size / 10.0)
        self.canvas.restoreState()

    def _draw_link(self, chunk: TextChunk, x: float, baseline: float, width: float) -> None:
        # bookmarks are not parsed, so internal anchors have no destination
        if chunk.link.startswith("#") or width <= 0:
            return
        if chunk.kind == "image":
            rect = (x, baseline, x + width, baseline + (chunk.height or 0.0))
        else:
            rect = (x, baseline - chunk.size * DESCENT_RATIO, x + width, baseline + chunk.size * (1 - DESCENT_RATIO))
        self.canvas.linkURL(chunk.link, rect, relative=1)

    def _draw_image(self, chunk: TextChunk, x: float, baseline: float) -> None:
        if not chunk.image:
            return
        try:
            reader = ImageReader(io.BytesIO(chunk.image))
            self.canvas.drawImage(reader, x, baseline, width=chunk.width, height=chunk.height, mask="auto")
        except (OSError, ValueError) as exc:
            logger.warning("Cannot draw image: %s", exc)

    def _font(self, name: str) -> str:
        if name in self._fonts:
            return self._fonts[name]
        resolved = name
        try:
            pdfmetrics.getFont(name)
        except (KeyError, ValueError):
            logger.debug("Font %s is not registered; using %s", name, self.fallback_font)
            resolved = self.fallback_font
        self._fonts[name] = resolved
        return resolved

    def _stroke(self, border: Optional[Border], x1: float, y1: float, x2: float, y2: float) -> None:
        if border is None or border.is_nil or not border.style:
            return
        width = eighths_to_points(border.size) if border.size else DEFAULT_BORDER_WIDTH
        self.canvas.saveState()
        self.canvas.setStrokeColor(to_color(border.color))
        self.canvas.setLineWidth(width)
        if border.style == "dashed":
            self.canvas.setDash(3 * width, 2 * width)
        elif border.style == "dotted":
            self.canvas.setDash(width, width)
        if border.style == "double":
            offset = width
            dx, dy = (offset, 0.0) if x1 == x2 else (0.0, offset)
            self.canvas.line(x1 - dx, y1 - dy, x2 - dx, y2 - dy)
            self.canvas.line(x1 + dx, y1 + dy, x2 + dx, y2 + dy)
        else:
            self.canvas.line(x1, y1, x2, y2)
        self.canvas.restoreState()
