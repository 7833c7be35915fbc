"""
Tests for the ReportLab PDF sink.
"""

import io

import pytest
from PIL import Image
from reportlab.pdfgen import canvas as pdf_canvas

from docx_cascade.engine.geometry import Margins
from docx_cascade.engine.instructions import CellLayout, PageGeometry, ParagraphLayout, RowLayout, TableLayout, TextChunk
from docx_cascade.exceptions import RenderingError
from docx_cascade.models.properties import Border, CellBorders, ParagraphBorders
from docx_cascade.renderers import LayoutSink, PdfSink
from docx_cascade.renderers.pdf_renderer import to_color

A4 = PageGeometry(width=595.3, height=841.9, margins=Margins.uniform(72.0))
SINGLE = Border(style="single", size=4, color="000000")


def _chunk(text, kind="text", size=10.0, **fields):
    return TextChunk(text=text, font_name="Helvetica", size=size, kind=kind, **fields)


def _paragraph(*chunks, **fields):
    fields.setdefault("line_spacing", 12.0)
    fields.setdefault("font_size", 10.0)
    return ParagraphLayout(chunks=list(chunks), **fields)


def _render(*blocks, header=(), footer=(), **sink_fields):
    output = io.BytesIO()
    sink = PdfSink(output, **sink_fields)
    sink.begin_document(A4)
    for block in blocks:
        sink.add_block(block)
    sink.set_header(list(header))
    sink.set_footer(list(footer))
    sink.end_document()
    return sink, output.getvalue()


def _png():
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), "blue").save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.mark.unit
class TestPdfOutput:
    """Test cases for writing PDF files."""

    def test_writes_pdf_to_stream(self):
        """Test a simple paragraph renders to a one-page PDF."""
        sink, data = _render(_paragraph(_chunk("Hello world")))

        assert data.startswith(b"%PDF")
        assert sink.page_count == 1

    def test_writes_pdf_to_path(self, temp_dir):
        """Test output paths are written."""
        target = temp_dir / "out.pdf"
        sink = PdfSink(target)
        sink.begin_document(A4)
        sink.add_block(_paragraph(_chunk("file")))
        sink.end_document()

        assert target.read_bytes().startswith(b"%PDF")

    def test_title(self):
        """Test the document title lands in the PDF info."""
        _, data = _render(_paragraph(_chunk("x")), title="Quarterly")
        assert b"Quarterly" in data

    def test_end_without_begin(self):
        """Test end_document before begin_document raises RenderingError."""
        with pytest.raises(RenderingError):
            PdfSink(io.BytesIO()).end_document()

    def test_page_break_chunk(self):
        """Test page break chunks start a new page."""
        sink, _ = _render(_paragraph(_chunk("one"), _chunk("", kind="page_break"), _chunk("two")))
        assert sink.page_count == 2

    def test_page_break_before(self):
        """Test pageBreakBefore paragraphs start on a new page unless already at the top."""
        sink, _ = _render(_paragraph(_chunk("first"), page_break_before=True), _paragraph(_chunk("second"), page_break_before=True))
        assert sink.page_count == 2

    def test_overflow_paginates(self):
        """Test content taller than the printable area flows onto more pages."""
        paragraphs = [_paragraph(_chunk(f"line {index}"), line_spacing=100.0) for index in range(10)]
        sink, _ = _render(*paragraphs)
        assert sink.page_count == 2

    def test_everything_renders(self):
        """Test decorations, images, headers, footers and bordered tables render together."""
        borders = CellBorders(top=SINGLE, bottom=Border(style="double", size=8), left=Border(style="dashed"), right=Border(style="nil"))
        cell = CellLayout(0, 0, 0, width=200.0, borders=borders, padding=Margins.uniform(5.0), background="EEEEEE",
                          vertical_alignment="middle", blocks=[_paragraph(_chunk("cell"))])
        table = TableLayout([200.0, 100.0], rows=[RowLayout(height=40.0)], cells=[cell, CellLayout(1, 0, 1, width=100.0, blank=True)],
                            alignment="center")
        body = _paragraph(
            _chunk("under ", underline="double", color="FF0000"),
            _chunk("sup ", vertical_align="superscript", strike=True),
            _chunk("sub ", vertical_align="subscript", double_strike=True, background="FFFF00"),
            _chunk("fake ", synthetic_bold=True, synthetic_italic=True),
            _chunk("", kind="image", width=20.0, height=20.0, image=_png()),
            _chunk("", kind="tab", width=36.0),
            _chunk("end"),
            alignment="justify",
            borders=ParagraphBorders(top=SINGLE, bottom=SINGLE, left=SINGLE, right=SINGLE),
            background="DDDDDD",
        )
        sink, data = _render(
            body,
            table,
            header=[_paragraph(_chunk("Header"), alignment="center")],
            footer=[_paragraph(_chunk("Footer"), alignment="right")],
        )

        assert data.startswith(b"%PDF")
        assert sink.page_count == 1

    def test_unregistered_font(self):
        """Test unknown font names draw with the fallback font."""
        sink, _ = _render(_paragraph(TextChunk(text="x", font_name="NoSuchFont-Regular", size=10.0)))
        assert sink._font("NoSuchFont-Regular") == "Helvetica"
        assert sink._font("Times-Bold") == "Times-Bold"

    def test_is_layout_sink(self):
        """Test the sink satisfies the LayoutSink protocol."""
        assert isinstance(PdfSink(io.BytesIO()), LayoutSink)


@pytest.mark.unit
class TestLineBreaking:
    """Test cases for PdfSink.break_lines."""

    def test_wraps_at_whitespace(self):
        """Test words move to the next line once the width is used up."""
        lines = PdfSink(io.BytesIO()).break_lines(_paragraph(_chunk("aaa bbb ccc")), 40.0)

        assert [[chunk.text for chunk, _ in line.items] for line in lines] == [["aaa ", "bbb "], ["ccc"]]
        assert all(line.height == 12.0 for line in lines)

    def test_first_line_indent_narrows_first_line(self):
        """Test the first line indent reduces the first line only."""
        lines = PdfSink(io.BytesIO()).break_lines(_paragraph(_chunk("aaa bbb ccc"), first_line=25.0), 40.0)
        assert [[chunk.text for chunk, _ in line.items] for line in lines] == [["aaa "], ["bbb ", "ccc"]]

    def test_long_word_keeps_own_line(self):
        """Test a word wider than the line is not split."""
        lines = PdfSink(io.BytesIO()).break_lines(_paragraph(_chunk("abcdefghijkl")), 10.0)
        assert len(lines) == 1

    def test_line_breaks(self):
        """Test break chunks end the line."""
        lines = PdfSink(io.BytesIO()).break_lines(_paragraph(_chunk("a"), _chunk("", kind="line_break"), _chunk("b")), 500.0)

        assert len(lines) == 2
        assert lines[0].ends_with_break
        assert not lines[0].page_break

    def test_empty_paragraph(self):
        """Test empty paragraphs still take one line."""
        assert len(PdfSink(io.BytesIO()).break_lines(_paragraph(), 500.0)) == 1

    def test_exact_line_height(self):
        """Test exact line spacing is not grown by images."""
        paragraph = _paragraph(_chunk("", kind="image", width=10.0, height=50.0), line_spacing=12.0, line_rule="exact")
        assert PdfSink(io.BytesIO()).break_lines(paragraph, 500.0)[0].height == 12.0

    def test_image_grows_line(self):
        """Test tall images grow auto lines."""
        paragraph = _paragraph(_chunk("", kind="image", width=10.0, height=50.0), line_spacing=12.0)
        assert PdfSink(io.BytesIO()).break_lines(paragraph, 500.0)[0].height == pytest.approx(50.0 + 10.0 * 0.22)


@pytest.mark.unit
class TestRowHeights:
    """Test cases for PdfSink.row_heights."""

    def test_at_least_and_exact(self):
        """Test minimum heights grow with content and exact heights do not."""
        tall = [_paragraph(_chunk("x"), line_spacing=30.0)]
        table = TableLayout(
            [100.0],
            rows=[RowLayout(height=20.0, height_rule="atLeast"), RowLayout(height=50.0), RowLayout(height=10.0, height_rule="exact")],
            cells=[
                CellLayout(0, 0, 0, width=100.0, blocks=list(tall)),
                CellLayout(1, 1, 0, width=100.0, blocks=list(tall)),
                CellLayout(2, 2, 0, width=100.0, blocks=list(tall)),
            ],
        )
        assert PdfSink(io.BytesIO()).row_heights(table) == [30.0, 50.0, 10.0]

    def test_padding_counts(self):
        """Test cell padding adds to the content height."""
        table = TableLayout(
            [100.0],
            rows=[RowLayout()],
            cells=[CellLayout(0, 0, 0, width=100.0, padding=Margins(top=2.0, bottom=3.0), blocks=[_paragraph(_chunk("x"))])],
        )
        assert PdfSink(io.BytesIO()).row_heights(table) == [17.0]

    def test_row_span_grows_last_row(self):
        """Test vertically merged content grows the last spanned row."""
        table = TableLayout(
            [50.0, 50.0],
            rows=[RowLayout(height=10.0), RowLayout(height=10.0)],
            cells=[
                CellLayout(0, 0, 0, row_span=2, width=50.0, blocks=[_paragraph(_chunk("x"), line_spacing=30.0)]),
                CellLayout(1, 0, 1, width=50.0),
                CellLayout(2, 1, 1, width=50.0),
            ],
        )
        assert PdfSink(io.BytesIO()).row_heights(table) == [10.0, 20.0]


@pytest.mark.unit
class TestTablePagination:
    """Test cases for tables that do not fit on one page."""

    def test_header_rows_repeat(self, monkeypatch):
        """Test leading header rows are drawn again after a page break."""
        rows = [RowLayout(height=20.0, height_rule="exact", header=index == 0) for index in range(60)]
        cells = [CellLayout(index, index, 0, width=100.0) for index in range(60)]
        table = TableLayout([100.0], rows=rows, cells=cells)

        sink = PdfSink(io.BytesIO())
        drawn = []
        draw_row = sink._draw_row

        def record(table_layout, index, heights, x, top):
            drawn.append(index)
            draw_row(table_layout, index, heights, x, top)

        monkeypatch.setattr(sink, "_draw_row", record)
        sink.begin_document(A4)
        sink.add_block(table)
        sink.end_document()

        assert sink.page_count == 2
        assert drawn.count(0) == 2
        assert drawn[drawn.index(0, 1) + 1] == 34
        assert len(drawn) == 61


@pytest.mark.unit
class TestColors:
    """Test cases for to_color."""

    def test_hex(self):
        """Test hex strings with and without '#'."""
        assert to_color("FF0000").rgb() == (1.0, 0.0, 0.0)
        assert to_color("#0000FF").rgb() == (0.0, 0.0, 1.0)

    @pytest.mark.parametrize("value", [None, "", "auto", "not-a-color"])
    def test_fallback(self, value):
        """Test missing, automatic and invalid colors use the fallback."""
        assert to_color(value).rgb() == (0.0, 0.0, 0.0)


@pytest.mark.unit
class TestHyperlinks:
    """Test cases for link annotations."""

    @pytest.fixture
    def links(self, monkeypatch):
        """Record linkURL calls made by the canvas."""
        calls = []

        def record(canvas, url, rect, relative=0, **kwargs):
            calls.append((url, rect, relative))

        monkeypatch.setattr(pdf_canvas.Canvas, "linkURL", record)
        return calls

    def test_external_link(self, links):
        """Test a linked chunk gets a URI annotation over its own box."""
        _render(_paragraph(_chunk("See "), _chunk("docs", link="https://example.com/docs#intro")))

        assert len(links) == 1
        url, rect, relative = links[0]
        assert url == "https://example.com/docs#intro"
        assert relative == 1
        assert rect[0] == pytest.approx(72.0 + 20.57)
        assert rect[2] - rect[0] == pytest.approx(21.12)
        assert rect[3] - rect[1] == pytest.approx(10.0)

    def test_internal_anchor_not_linked(self, links):
        """Test anchors inside the document produce no annotation."""
        _render(_paragraph(_chunk("Contents", link="#_Toc1")))
        assert links == []

    def test_annotation_written(self):
        """Test the link annotation reaches the PDF file."""
        _, data = _render(_paragraph(_chunk("docs", link="https://example.com")))
        _, plain = _render(_paragraph(_chunk("docs")))

        assert b"/Link" in data
        assert b"/Link" not in plain
