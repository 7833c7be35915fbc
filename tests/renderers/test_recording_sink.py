"""
Tests for the in-memory recording sink.
"""

import pytest

from docx_cascade.engine.geometry import Margins
from docx_cascade.engine.instructions import PageGeometry, ParagraphLayout, TableLayout, TextChunk
from docx_cascade.renderers import LayoutSink, RecordingSink


def _paragraph(*texts):
    return ParagraphLayout(chunks=[TextChunk(text=text, font_name="Helvetica", size=11.0) for text in texts])


@pytest.mark.unit
class TestRecordingSink:
    """Test cases for RecordingSink."""

    def test_records_in_order(self):
        """Test blocks, header and footer are kept as received."""
        sink = RecordingSink()
        page = PageGeometry(595.3, 841.9, Margins.uniform(72.0))
        table = TableLayout([100.0])

        sink.begin_document(page)
        sink.add_block(_paragraph("a"))
        sink.add_block(table)
        sink.add_block(_paragraph("b", "c"))
        sink.set_header([_paragraph("head")])
        sink.set_footer([])
        sink.end_document()

        assert sink.page is page
        assert sink.finished
        assert sink.tables == [table]
        assert list(sink.texts()) == ["a", "bc"]
        assert len(sink.header) == 1
        assert sink.footer == []

    def test_texts_skip_breaks(self):
        """Test break chunks do not contribute text."""
        sink = RecordingSink()
        paragraph = _paragraph("x")
        paragraph.chunks.append(TextChunk(text="\n", font_name="Helvetica", size=11.0, kind="line_break"))
        sink.add_block(paragraph)

        assert list(sink.texts()) == ["x"]

    def test_begin_resets(self):
        """Test a new document starts with no blocks."""
        sink = RecordingSink()
        sink.add_block(_paragraph("old"))
        sink.begin_document(PageGeometry(100.0, 100.0, Margins()))

        assert sink.blocks == []
        assert not sink.finished

    def test_is_layout_sink(self):
        """Test the recorder satisfies the LayoutSink protocol."""
        assert isinstance(RecordingSink(), LayoutSink)
