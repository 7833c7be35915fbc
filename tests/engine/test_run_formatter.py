"""
Tests for run formatting and chunk generation.
"""

import io

import pytest
from PIL import Image

from docx_cascade.config import ConversionOptions
from docx_cascade.diagnostics import IMAGE
from docx_cascade.engine.run_formatter import FontNames, RunFormatter, base14_variant, image_size, split_by_script
from docx_cascade.models.document import Break, Drawing, DocumentSettings, Hyperlink, Run, Symbol, Tab, Text
from docx_cascade.models.properties import (
    Bold,
    Caps,
    Color,
    ComplexScriptFontSize,
    FontSize,
    Italic,
    PropertySet,
    RightToLeft,
    RunFonts,
    Underline,
    Vanish,
    VerticalAlign,
)
from docx_cascade.models.styles import DocDefaults, StyleSheet
from docx_cascade.models.theme import Theme


def _png(width=96, height=48):
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), "white").save(buffer, format="PNG")
    return buffer.getvalue()


def _run_in_document(make_paragraph, make_document, content, properties=(), **fields):
    paragraph = make_paragraph()
    run = paragraph.add_child(Run(content, properties=PropertySet(properties)))
    return run, make_document(paragraph, **fields)


class _FamilyNames(FontNames):
    """Names chunks after the selected family instead of registering faces."""

    def name_for(self, descriptor, bold, italic, node=None):
        return descriptor.name if descriptor is not None else "Helvetica"


@pytest.mark.unit
class TestSplitByScript:
    """Test cases for split_by_script."""

    def test_mixed_scripts(self):
        """Test text splits where the font slot changes; whitespace stays behind."""
        assert split_by_script("abc 中文 def") == ["abc ", "中文 ", "def"]

    def test_single_script(self):
        """Test uniform text is one segment."""
        assert split_by_script("hello world") == ["hello world"]

    def test_empty(self):
        """Test empty text has no segments."""
        assert split_by_script("") == []


@pytest.mark.unit
class TestRunStyle:
    """Test cases for RunFormatter.run_style."""

    def test_sizes_in_points(self, make_paragraph, make_document, context_factory):
        """Test half-point sizes convert to points."""
        run, document = _run_in_document(make_paragraph, make_document, [Text("x")], [FontSize(24)])
        style = context_factory(document).formatter.run_style(run)

        assert style.size == 12.0
        assert style.complex_size == 12.0

    def test_default_size(self, make_paragraph, make_document, context_factory):
        """Test runs without a size use the default."""
        run, document = _run_in_document(make_paragraph, make_document, [Text("x")])
        assert context_factory(document).formatter.run_style(run).size == 11.0

    def test_toggles_and_decoration(self, make_paragraph, make_document, context_factory):
        """Test bold, italic, underline and vertical alignment."""
        run, document = _run_in_document(
            make_paragraph,
            make_document,
            [Text("x")],
            [Bold(True), Italic(True), Underline("double"), VerticalAlign("superscript")],
        )
        style = context_factory(document).formatter.run_style(run)

        assert style.bold and style.italic
        assert style.underline == "double"
        assert style.vertical_align == "superscript"

    def test_underline_none(self, make_paragraph, make_document, context_factory):
        """Test an explicit 'none' underline is no underline."""
        run, document = _run_in_document(make_paragraph, make_document, [Text("x")], [Underline("none")])
        assert context_factory(document).formatter.run_style(run).underline is None

    def test_auto_color(self, make_paragraph, make_document, context_factory):
        """Test 'auto' color leaves the color unset."""
        run, document = _run_in_document(make_paragraph, make_document, [Text("x")], [Color("auto")])
        assert context_factory(document).formatter.run_style(run).color is None

    def test_theme_color(self, make_paragraph, make_document, context_factory):
        """Test theme colors are looked up in the theme."""
        run, document = _run_in_document(
            make_paragraph,
            make_document,
            [Text("x")],
            [Color(theme_color="accent1")],
            theme=Theme(colors={"accent1": "4472C4"}),
        )
        assert context_factory(document).formatter.run_style(run).color == "4472C4"


@pytest.mark.unit
class TestFormatRun:
    """Test cases for RunFormatter.format_run."""

    def test_caps(self, make_paragraph, make_document, context_factory):
        """Test caps uppercases the text."""
        run, document = _run_in_document(make_paragraph, make_document, [Text("hello")], [Caps(True)])
        chunks = context_factory(document).formatter.format_run(run)
        assert [chunk.text for chunk in chunks] == ["HELLO"]

    def test_hidden_run(self, make_paragraph, make_document, context_factory):
        """Test vanished runs produce no chunks."""
        run, document = _run_in_document(make_paragraph, make_document, [Text("secret")], [Vanish(True)])
        assert context_factory(document).formatter.format_run(run) == []

    def test_tab_width(self, make_paragraph, make_document, context_factory):
        """Test tabs advance by the default tab stop."""
        run, document = _run_in_document(make_paragraph, make_document, [Text("a"), Tab(), Text("b")])
        chunks = context_factory(document).formatter.format_run(run)

        assert [chunk.kind for chunk in chunks] == ["text", "tab", "text"]
        assert chunks[1].width == 36.0

    def test_document_tab_stop(self, make_paragraph, make_document, context_factory):
        """Test settings.defaultTabStop overrides the configured tab width."""
        run, document = _run_in_document(
            make_paragraph, make_document, [Tab()], settings=DocumentSettings(default_tab_stop=360)
        )
        assert context_factory(document).formatter.format_run(run)[0].width == 18.0

    def test_breaks(self, make_paragraph, make_document, context_factory):
        """Test page breaks and line breaks."""
        run, document = _run_in_document(make_paragraph, make_document, [Break("page"), Break(), Break("column")])
        chunks = context_factory(document).formatter.format_run(run)

        assert [chunk.kind for chunk in chunks] == ["page_break", "line_break", "line_break"]
        assert all(chunk.is_break for chunk in chunks)

    def test_fallback_font_variant(self, make_paragraph, make_document, context_factory):
        """Test non-embedded fonts map to the fallback's bold/italic variant."""
        run, document = _run_in_document(make_paragraph, make_document, [Text("x")], [Bold(True), Italic(True)])
        chunk = context_factory(document).formatter.format_run(run)[0]

        assert chunk.font_name == "Helvetica-BoldOblique"
        assert chunk.bold and chunk.italic

    def test_selected_face_per_script(self, make_paragraph, make_document, context_factory, options):
        """Test each script segment gets its own face."""
        styles = StyleSheet(doc_defaults=DocDefaults(run_properties=PropertySet([RunFonts(ascii="Calibri", east_asia="SimSun")])))
        run, document = _run_in_document(make_paragraph, make_document, [Text("ab中")], styles=styles)
        context = context_factory(document)
        formatter = RunFormatter(context.resolver, context.selector, options, font_names=_FamilyNames(options))
        chunks = formatter.format_run(run)

        assert [(chunk.text, chunk.font_name) for chunk in chunks] == [("ab", "Calibri"), ("中", "SimSun")]

    def test_segments_with_same_font_merge(self, make_paragraph, make_document, context_factory):
        """Test segments rendered with the same font and size become one chunk."""
        styles = StyleSheet(doc_defaults=DocDefaults(run_properties=PropertySet([RunFonts(ascii="Calibri", east_asia="SimSun")])))
        run, document = _run_in_document(make_paragraph, make_document, [Text("ab中")], styles=styles)
        chunks = context_factory(document).formatter.format_run(run)

        assert [chunk.text for chunk in chunks] == ["ab中"]
        assert chunks[0].font.name == "Calibri"

    def test_complex_script_size(self, make_paragraph, make_document, context_factory):
        """Test right-to-left runs use the complex script size."""
        run, document = _run_in_document(
            make_paragraph,
            make_document,
            [Text("abc")],
            [RightToLeft(True), FontSize(20), ComplexScriptFontSize(28)],
        )
        assert context_factory(document).formatter.format_run(run)[0].size == 14.0

    def test_symbol(self, make_paragraph, make_document, context_factory):
        """Test w:sym uses the named font."""
        run, document = _run_in_document(make_paragraph, make_document, [Symbol("Symbol", "\uf0b7")])
        chunk = context_factory(document).formatter.format_run(run)[0]

        assert chunk.text == "\uf0b7"
        assert chunk.font.name == "Symbol"

    @pytest.mark.parametrize(
        "target, anchor, expected",
        [
            ("https://example.com/docs", None, "https://example.com/docs"),
            ("https://example.com/docs", "intro", "https://example.com/docs#intro"),
            (None, "_Toc1", "#_Toc1"),
        ],
    )
    def test_hyperlink_target(self, make_paragraph, make_document, context_factory, target, anchor, expected):
        """Test runs inside a hyperlink carry its address."""
        paragraph = make_paragraph("before")
        run = Run([Text("docs")])
        paragraph.add_child(Hyperlink([run], target=target, anchor=anchor))
        context = context_factory(make_document(paragraph))

        assert context.formatter.format_run(run)[0].link == expected
        assert context.formatter.format_run(paragraph.children[0])[0].link is None

    def test_image_from_extent(self, make_paragraph, make_document, context_factory):
        """Test drawing extents convert from EMU."""
        drawing = Drawing(_png(), width_emu=127000, height_emu=254000, name="pic")
        run, document = _run_in_document(make_paragraph, make_document, [drawing])
        chunk = context_factory(document).formatter.format_run(run)[0]

        assert chunk.kind == "image"
        assert (chunk.width, chunk.height) == (10.0, 20.0)
        assert chunk.image == drawing.data

    def test_image_from_pixels(self, make_paragraph, make_document, context_factory):
        """Test images without extents are sized from their pixels."""
        run, document = _run_in_document(make_paragraph, make_document, [Drawing(_png(96, 48))])
        chunk = context_factory(document).formatter.format_run(run)[0]

        assert chunk.width == pytest.approx(72.0)
        assert chunk.height == pytest.approx(36.0)

    def test_unreadable_image(self, make_paragraph, make_document, context_factory):
        """Test unreadable images are skipped with a warning."""
        run, document = _run_in_document(make_paragraph, make_document, [Drawing(b"not an image", name="broken")])
        context = context_factory(document)

        assert context.formatter.format_run(run) == []
        assert IMAGE in context.diagnostics.codes()


@pytest.mark.unit
class TestFontNames:
    """Test cases for fallback font naming."""

    def test_base14_variants(self):
        """Test base-14 variants of the fallback families."""
        assert base14_variant("Helvetica", True, False) == "Helvetica-Bold"
        assert base14_variant("Times-Roman", False, True) == "Times-Italic"
        assert base14_variant("Courier", True, True) == "Courier-BoldOblique"
        assert base14_variant("Symbol", True, False) == "Symbol"

    def test_no_descriptor(self):
        """Test a missing descriptor uses the configured fallback."""
        names = FontNames(ConversionOptions(fallback_font="Times-Roman", embed_fonts=False))
        assert names.name_for(None, True, False) == "Times-Bold"

    def test_image_size_of_garbage(self):
        """Test image_size returns None for empty or invalid data."""
        assert image_size(b"") is None
        assert image_size(b"\x00\x01") is None
