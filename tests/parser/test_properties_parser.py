"""
Tests for the formatting property parsers.
"""

import xml.etree.ElementTree as ET

import pytest

from docx_cascade.models.properties import (
    Bold,
    CantSplit,
    CellBorders,
    CellMargins,
    CellVerticalAlignment,
    CellWidth,
    Color,
    ContextualSpacing,
    FontSize,
    GridBefore,
    GridSpan,
    Indentation,
    Italic,
    Justification,
    NumberingProperties,
    ParagraphBorders,
    RowHeight,
    RunFonts,
    Shading,
    Spacing,
    TableBorders,
    TableHeader,
    TableIndentation,
    TableLayoutType,
    TableWidth,
    Underline,
    Vanish,
    VerticalMerge,
)
from docx_cascade.parser.properties_parser import (
    W_NS,
    on_off,
    parse_borders,
    parse_cell_properties,
    parse_paragraph_properties,
    parse_row_properties,
    parse_run_properties,
    parse_table_properties,
    parse_width,
)


def _element(xml: str) -> ET.Element:
    """Parse a WordprocessingML fragment with the w: prefix bound."""
    return ET.fromstring(f'<w:root xmlns:w="{W_NS}">{xml}</w:root>')[0]


@pytest.mark.unit
class TestValueParsers:
    """Test cases for the shared value parsers."""

    @pytest.mark.parametrize(
        "xml, expected",
        [
            ("<w:b/>", True),
            ('<w:b w:val="1"/>', True),
            ('<w:b w:val="true"/>', True),
            ('<w:b w:val="0"/>', False),
            ('<w:b w:val="false"/>', False),
            ('<w:b w:val="off"/>', False),
        ],
    )
    def test_on_off(self, xml, expected):
        """Test toggle elements and their w:val spellings."""
        assert on_off(_element(xml)) is expected

    def test_width_defaults_to_twips(self):
        """Test widths without a type are dxa numbers."""
        width = parse_width(_element('<w:tcW w:w="2400"/>'))
        assert (width.value, width.unit) == (2400.0, "dxa")

    def test_percent_width(self):
        """Test fiftieths-of-a-percent widths stay numeric; literal percentages stay strings."""
        assert parse_width(_element('<w:tblW w:w="2500" w:type="pct"/>')).value == 2500.0
        assert parse_width(_element('<w:tblW w:w="50%" w:type="pct"/>')).value == "50%"

    def test_width_subclass(self):
        """Test the requested width type is constructed."""
        assert isinstance(parse_width(_element('<w:tblW w:w="0" w:type="auto"/>'), TableWidth), TableWidth)

    def test_borders_logical_edges(self):
        """Test start/end map to left/right and explicit left wins."""
        borders = parse_borders(
            _element(
                "<w:tblBorders>"
                '<w:left w:val="single" w:sz="4"/>'
                '<w:start w:val="double" w:sz="8"/>'
                '<w:end w:val="dotted" w:sz="2" w:color="FF0000"/>'
                '<w:insideH w:val="single" w:sz="6" w:space="0"/>'
                "</w:tblBorders>"
            ),
            TableBorders,
        )

        assert isinstance(borders, TableBorders)
        assert borders.left.style == "single"
        assert borders.right.style == "dotted"
        assert borders.right.color == "FF0000"
        assert borders.inside_h.size == 6.0
        assert borders.top is None

    def test_missing_element(self):
        """Test absent elements parse to None."""
        assert parse_borders(None, TableBorders) is None
        assert parse_width(None) is None


@pytest.mark.unit
class TestRunProperties:
    """Test cases for parse_run_properties."""

    def test_empty(self):
        """Test a missing w:rPr gives an empty set."""
        assert len(parse_run_properties(None)) == 0

    def test_toggles(self):
        """Test toggles keep their explicit off value."""
        props = parse_run_properties(_element('<w:rPr><w:b/><w:i w:val="0"/><w:vanish/></w:rPr>'))

        assert props.get(Bold).value is True
        assert props.get(Italic).value is False
        assert props.get(Vanish).value is True

    def test_fonts_and_size(self):
        """Test w:rFonts slots, themes and half-point sizes."""
        props = parse_run_properties(
            _element(
                "<w:rPr>"
                '<w:rFonts w:ascii="Calibri" w:eastAsia="SimSun" w:hAnsiTheme="minorHAnsi" w:hint="eastAsia"/>'
                '<w:sz w:val="24"/>'
                "</w:rPr>"
            )
        )
        fonts = props.get(RunFonts)

        assert fonts.ascii == "Calibri"
        assert fonts.east_asia == "SimSun"
        assert fonts.high_ansi is None
        assert fonts.high_ansi_theme == "minorHAnsi"
        assert fonts.hint == "eastAsia"
        assert props.get(FontSize).value == 24.0

    def test_color_and_underline(self):
        """Test color with theme reference and a bare underline."""
        props = parse_run_properties(_element('<w:rPr><w:color w:val="1F3864" w:themeColor="accent1"/><w:u/></w:rPr>'))

        assert props.get(Color) == Color(value="1F3864", theme_color="accent1")
        assert props.get(Underline).value == "single"

    def test_highlight_becomes_shading(self):
        """Test named highlights map to a shading fill."""
        props = parse_run_properties(_element('<w:rPr><w:highlight w:val="yellow"/></w:rPr>'))
        assert props.get(Shading).fill == "FFFF00"

    def test_shading_beats_highlight(self):
        """Test explicit shading is kept over a highlight."""
        props = parse_run_properties(_element('<w:rPr><w:shd w:val="clear" w:fill="DDDDDD"/><w:highlight w:val="red"/></w:rPr>'))
        assert props.get(Shading).fill == "DDDDDD"


@pytest.mark.unit
class TestParagraphProperties:
    """Test cases for parse_paragraph_properties."""

    def test_missing(self):
        """Test a missing w:pPr returns empty sets and no style."""
        props, style_id, mark = parse_paragraph_properties(None)
        assert (len(props), style_id, len(mark)) == (0, None, 0)

    def test_full(self):
        """Test style reference, spacing, indentation, numbering and mark properties."""
        props, style_id, mark = parse_paragraph_properties(
            _element(
                "<w:pPr>"
                '<w:pStyle w:val="Heading1"/>'
                "<w:contextualSpacing/>"
                '<w:spacing w:before="120" w:after="240" w:line="360" w:lineRule="auto"/>'
                '<w:ind w:left="720" w:hanging="360" w:firstLineChars="200"/>'
                '<w:jc w:val="center"/>'
                '<w:numPr><w:ilvl w:val="1"/><w:numId w:val="3"/></w:numPr>'
                '<w:pBdr><w:bottom w:val="single" w:sz="6"/></w:pBdr>'
                '<w:rPr><w:b/></w:rPr>'
                "</w:pPr>"
            )
        )

        assert style_id == "Heading1"
        assert props.get(ContextualSpacing).value is True
        assert props.get(Spacing) == Spacing(before=120.0, after=240.0, line=360.0, line_rule="auto")
        indent = props.get(Indentation)
        assert (indent.left, indent.hanging, indent.first_line_chars) == (720.0, 360.0, 200.0)
        assert props.get(Justification).value == "center"
        assert props.get(NumberingProperties) == NumberingProperties(num_id=3, level=1)
        assert props.get(ParagraphBorders).bottom.size == 6.0
        assert mark.get(Bold).value is True
        assert Bold not in props


@pytest.mark.unit
class TestTableProperties:
    """Test cases for table, row and cell property parsing."""

    def test_table(self):
        """Test table style, width, indentation, margins and layout."""
        props, style_id = parse_table_properties(
            _element(
                "<w:tblPr>"
                '<w:tblStyle w:val="TableGrid"/>'
                '<w:tblW w:w="5000" w:type="pct"/>'
                '<w:tblInd w:w="108" w:type="dxa"/>'
                '<w:tblCellMar><w:left w:w="108" w:type="dxa"/><w:end w:w="90" w:type="dxa"/></w:tblCellMar>'
                '<w:tblLayout w:type="fixed"/>'
                "</w:tblPr>"
            )
        )

        assert style_id == "TableGrid"
        assert props.get(TableWidth).unit == "pct"
        assert props.get(TableIndentation).value == 108.0
        margins = props.get(CellMargins)
        assert (margins.left.value, margins.right.value, margins.top) == (108.0, 90.0, None)
        assert props.get(TableLayoutType).value == "fixed"

    def test_row(self):
        """Test row height rule, grid offsets and row toggles."""
        props = parse_row_properties(
            _element(
                "<w:trPr>"
                '<w:trHeight w:val="400" w:hRule="exact"/>'
                '<w:gridBefore w:val="1"/>'
                "<w:cantSplit/>"
                "<w:tblHeader/>"
                "</w:trPr>"
            )
        )

        assert props.get(RowHeight) == RowHeight(value=400.0, rule="exact")
        assert props.get(GridBefore).value == 1
        assert props.get(CantSplit).value is True
        assert props.get(TableHeader).value is True

    def test_cell(self):
        """Test cell width, span, merge, borders, shading and alignment."""
        props = parse_cell_properties(
            _element(
                "<w:tcPr>"
                '<w:tcW w:w="2000" w:type="dxa"/>'
                '<w:gridSpan w:val="2"/>'
                '<w:vMerge w:val="restart"/>'
                '<w:tcBorders><w:top w:val="nil"/></w:tcBorders>'
                '<w:shd w:val="clear" w:fill="EEEEEE"/>'
                '<w:vAlign w:val="center"/>'
                "</w:tcPr>"
            )
        )

        assert props.get(CellWidth).value == 2000.0
        assert props.get(GridSpan).value == 2
        assert props.get(VerticalMerge).value == "restart"
        assert props.get(CellBorders).top.style == "nil"
        assert props.get(Shading).fill == "EEEEEE"
        assert props.get(CellVerticalAlignment).value == "center"

    def test_merge_continuation(self):
        """Test a bare w:vMerge continues the merge above."""
        props = parse_cell_properties(_element("<w:tcPr><w:vMerge/></w:tcPr>"))
        assert props.get(VerticalMerge).value == "continue"
