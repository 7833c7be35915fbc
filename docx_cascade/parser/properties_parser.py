"""
Formatting property parsers.

Turns ``w:rPr``, ``w:pPr``, ``w:tblPr``, ``w:trPr`` and ``w:tcPr`` elements
into typed property sets. Attributes that are missing stay ``None`` so the
cascade can fill them from less specific sources.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Dict, Optional, Tuple, Type

from ..models.properties import (
    AutoSpaceDE,
    AutoSpaceDN,
    Bold,
    Border,
    BorderSet,
    CantSplit,
    Caps,
    CellBorders,
    CellMargins,
    CellVerticalAlignment,
    CellWidth,
    Color,
    ComplexScript,
    ComplexScriptFontSize,
    ContextualSpacing,
    DoubleStrike,
    FontSize,
    GridAfter,
    GridBefore,
    GridSpan,
    Indentation,
    Italic,
    Justification,
    KeepLines,
    KeepNext,
    Languages,
    NumberingProperties,
    PageBreakBefore,
    ParagraphBorders,
    PropertySet,
    RightToLeft,
    RowHeight,
    RunFonts,
    Shading,
    Spacing,
    Strike,
    TableBorders,
    TableHeader,
    TableIndentation,
    TableJustification,
    TableLayoutType,
    TableWidth,
    Toggle,
    Underline,
    Vanish,
    VerticalAlign,
    VerticalMerge,
    Width,
    WidthAfter,
    WidthBefore,
)

logger = logging.getLogger(__name__)

W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
NS = {"w": W_NS}

FALSE_VALUES = ("0", "false", "off", "none")


def w(tag: str) -> str:
    """Qualified WordprocessingML tag or attribute name."""
    return f"{{{W_NS}}}{tag}"


def attr(element: Optional[ET.Element], name: str) -> Optional[str]:
    if element is None:
        return None
    value = element.get(w(name))
    if value is None:
        value = element.get(name)
    return value


def number(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def integer(value: Optional[str]) -> Optional[int]:
    parsed = number(value)
    return int(parsed) if parsed is not None else None


def on_off(element: ET.Element) -> bool:
    """``<w:b/>`` is on; ``w:val`` of 0/false/off switches it off."""
    value = attr(element, "val")
    return value is None or value.lower() not in FALSE_VALUES


def child(parent: Optional[ET.Element], tag: str) -> Optional[ET.Element]:
    if parent is None:
        return None
    return parent.find(w(tag))


# ----------------------------------------------------------------------
# Shared value parsers
# ----------------------------------------------------------------------


def parse_border(element: Optional[ET.Element]) -> Optional[Border]:
    if element is None:
        return None
    return Border(
        style=attr(element, "val"),
        size=number(attr(element, "sz")),
        color=attr(element, "color"),
        space=number(attr(element, "space")),
    )


BORDER_EDGES = (
    ("top", "top"),
    ("bottom", "bottom"),
    ("left", "left"),
    ("start", "left"),
    ("right", "right"),
    ("end", "right"),
    ("insideH", "inside_h"),
    ("insideV", "inside_v"),
    ("tl2br", "tl2br"),
    ("tr2bl", "tr2bl"),
)


def parse_borders(element: Optional[ET.Element], border_type: Type[BorderSet]) -> Optional[BorderSet]:
    if element is None:
        return None
    values: Dict[str, Border] = {}
    for tag, field_name in BORDER_EDGES:
        border = parse_border(child(element, tag))
        if border is not None and field_name not in values:
            values[field_name] = border
    return border_type(**values)


def parse_width(element: Optional[ET.Element], width_type: Type[Width] = Width) -> Optional[Width]:
    if element is None:
        return None
    unit = attr(element, "type") or "dxa"
    raw = attr(element, "w")
    value: object = raw
    if unit == "dxa":
        value = number(raw)
    elif unit == "pct" and raw is not None and not raw.endswith("%"):
        value = number(raw)
    return width_type(value=value, unit=unit)


def parse_shading(element: Optional[ET.Element]) -> Optional[Shading]:
    if element is None:
        return None
    return Shading(fill=attr(element, "fill"), color=attr(element, "color"), pattern=attr(element, "val"))


def parse_margins(element: Optional[ET.Element]) -> Optional[CellMargins]:
    if element is None:
        return None
    return CellMargins(
        top=parse_width(child(element, "top")),
        bottom=parse_width(child(element, "bottom")),
        left=parse_width(child(element, "left")) or parse_width(child(element, "start")),
        right=parse_width(child(element, "right")) or parse_width(child(element, "end")),
    )


# ----------------------------------------------------------------------
# Run properties
# ----------------------------------------------------------------------

RUN_TOGGLES: Dict[str, Type[Toggle]] = {
    "b": Bold,
    "i": Italic,
    "caps": Caps,
    "strike": Strike,
    "dstrike": DoubleStrike,
    "vanish": Vanish,
    "cs": ComplexScript,
    "rtl": RightToLeft,
}


def parse_run_properties(rpr: Optional[ET.Element]) -> PropertySet:
    """
    Parse a ``w:rPr`` element.

    Args:
        rpr: Run properties element or None

    Returns:
        PropertySet with the declared run properties
    """
    props = PropertySet()
    if rpr is None:
        return props

    for tag, toggle in RUN_TOGGLES.items():
        element = child(rpr, tag)
        if element is not None:
            props.add(toggle(on_off(element)))

    fonts = child(rpr, "rFonts")
    if fonts is not None:
        props.add(
            RunFonts(
                ascii=attr(fonts, "ascii"),
                high_ansi=attr(fonts, "hAnsi"),
                east_asia=attr(fonts, "eastAsia"),
                complex_script=attr(fonts, "cs"),
                ascii_theme=attr(fonts, "asciiTheme"),
                high_ansi_theme=attr(fonts, "hAnsiTheme"),
                east_asia_theme=attr(fonts, "eastAsiaTheme"),
                complex_script_theme=attr(fonts, "cstheme"),
                hint=attr(fonts, "hint"),
            )
        )

    size = number(attr(child(rpr, "sz"), "val"))
    if size is not None:
        props.add(FontSize(size))
    cs_size = number(attr(child(rpr, "szCs"), "val"))
    if cs_size is not None:
        props.add(ComplexScriptFontSize(cs_size))

    color = child(rpr, "color")
    if color is not None:
        props.add(Color(value=attr(color, "val"), theme_color=attr(color, "themeColor")))
    underline = child(rpr, "u")
    if underline is not None:
        props.add(Underline(value=attr(underline, "val") or "single", color=attr(underline, "color")))
    vertical = child(rpr, "vertAlign")
    if vertical is not None:
        props.add(VerticalAlign(attr(vertical, "val")))
    lang = child(rpr, "lang")
    if lang is not None:
        props.add(Languages(value=attr(lang, "val"), east_asia=attr(lang, "eastAsia"), bidi=attr(lang, "bidi")))
    shading = parse_shading(child(rpr, "shd"))
    if shading is not None:
        props.add(shading)
    highlight = child(rpr, "highlight")
    if highlight is not None and shading is None:
        fill = HIGHLIGHT_COLORS.get(attr(highlight, "val") or "")
        if fill:
            props.add(Shading(fill=fill))
    return props


HIGHLIGHT_COLORS = {
    "yellow": "FFFF00",
    "green": "00FF00",
    "cyan": "00FFFF",
    "magenta": "FF00FF",
    "blue": "0000FF",
    "red": "FF0000",
    "darkBlue": "000080",
    "darkCyan": "008080",
    "darkGreen": "008000",
    "darkMagenta": "800080",
    "darkRed": "800000",
    "darkYellow": "808000",
    "darkGray": "808080",
    "lightGray": "C0C0C0",
    "black": "000000",
    "white": "FFFFFF",
}


# ----------------------------------------------------------------------
# Paragraph properties
# ----------------------------------------------------------------------

PARAGRAPH_TOGGLES: Dict[str, Type[Toggle]] = {
    "contextualSpacing": ContextualSpacing,
    "keepLines": KeepLines,
    "keepNext": KeepNext,
    "pageBreakBefore": PageBreakBefore,
    "autoSpaceDE": AutoSpaceDE,
    "autoSpaceDN": AutoSpaceDN,
}


def parse_paragraph_properties(ppr: Optional[ET.Element]) -> Tuple[PropertySet, Optional[str], PropertySet]:
    """
    Parse a ``w:pPr`` element.

    Returns:
        (paragraph properties, referenced style id, paragraph mark run properties)
    """
    props = PropertySet()
    if ppr is None:
        return props, None, PropertySet()

    style_id = attr(child(ppr, "pStyle"), "val")

    for tag, toggle in PARAGRAPH_TOGGLES.items():
        element = child(ppr, tag)
        if element is not None:
            props.add(toggle(on_off(element)))

    spacing = child(ppr, "spacing")
    if spacing is not None:
        props.add(
            Spacing(
                before=number(attr(spacing, "before")),
                after=number(attr(spacing, "after")),
                before_lines=number(attr(spacing, "beforeLines")),
                after_lines=number(attr(spacing, "afterLines")),
                line=number(attr(spacing, "line")),
                line_rule=attr(spacing, "lineRule"),
            )
        )

    indent = child(ppr, "ind")
    if indent is not None:
        props.add(
            Indentation(
                left=number(attr(indent, "left")),
                right=number(attr(indent, "right")),
                start=number(attr(indent, "start")),
                end=number(attr(indent, "end")),
                left_chars=number(attr(indent, "leftChars")),
                right_chars=number(attr(indent, "rightChars")),
                start_chars=number(attr(indent, "startChars")),
                end_chars=number(attr(indent, "endChars")),
                hanging=number(attr(indent, "hanging")),
                hanging_chars=number(attr(indent, "hangingChars")),
                first_line=number(attr(indent, "firstLine")),
                first_line_chars=number(attr(indent, "firstLineChars")),
            )
        )

    justification = child(ppr, "jc")
    if justification is not None:
        props.add(Justification(attr(justification, "val")))

    num_pr = child(ppr, "numPr")
    if num_pr is not None:
        props.add(
            NumberingProperties(
                num_id=integer(attr(child(num_pr, "numId"), "val")),
                level=integer(attr(child(num_pr, "ilvl"), "val")),
            )
        )

    borders = parse_borders(child(ppr, "pBdr"), ParagraphBorders)
    if borders is not None:
        props.add(borders)
    shading = parse_shading(child(ppr, "shd"))
    if shading is not None:
        props.add(shading)

    return props, style_id, parse_run_properties(child(ppr, "rPr"))


# ----------------------------------------------------------------------
# Table, row and cell properties
# ----------------------------------------------------------------------


def parse_table_properties(tbl_pr: Optional[ET.Element]) -> Tuple[PropertySet, Optional[str]]:
    """
    Parse a ``w:tblPr`` element.

    Returns:
        (table properties, referenced table style id)
    """
    props = PropertySet()
    if tbl_pr is None:
        return props, None
    style_id = attr(child(tbl_pr, "tblStyle"), "val")

    _add(props, parse_width(child(tbl_pr, "tblW"), TableWidth))
    _add(props, parse_width(child(tbl_pr, "tblInd"), TableIndentation))
    _add(props, parse_borders(child(tbl_pr, "tblBorders"), TableBorders))
    _add(props, parse_margins(child(tbl_pr, "tblCellMar")))
    _add(props, parse_shading(child(tbl_pr, "shd")))
    justification = child(tbl_pr, "jc")
    if justification is not None:
        props.add(TableJustification(attr(justification, "val")))
    layout = child(tbl_pr, "tblLayout")
    if layout is not None:
        props.add(TableLayoutType(attr(layout, "type")))
    return props, style_id


def parse_row_properties(tr_pr: Optional[ET.Element]) -> PropertySet:
    props = PropertySet()
    if tr_pr is None:
        return props
    height = child(tr_pr, "trHeight")
    if height is not None:
        props.add(RowHeight(value=number(attr(height, "val")), rule=attr(height, "hRule")))
    before = integer(attr(child(tr_pr, "gridBefore"), "val"))
    if before is not None:
        props.add(GridBefore(before))
    after = integer(attr(child(tr_pr, "gridAfter"), "val"))
    if after is not None:
        props.add(GridAfter(after))
    _add(props, parse_width(child(tr_pr, "wBefore"), WidthBefore))
    _add(props, parse_width(child(tr_pr, "wAfter"), WidthAfter))
    for tag, toggle in (("cantSplit", CantSplit), ("tblHeader", TableHeader)):
        element = child(tr_pr, tag)
        if element is not None:
            props.add(toggle(on_off(element)))
    return props


def parse_cell_properties(tc_pr: Optional[ET.Element]) -> PropertySet:
    props = PropertySet()
    if tc_pr is None:
        return props
    _add(props, parse_width(child(tc_pr, "tcW"), CellWidth))
    span = integer(attr(child(tc_pr, "gridSpan"), "val"))
    if span is not None:
        props.add(GridSpan(span))
    merge = child(tc_pr, "vMerge")
    if merge is not None:
        props.add(VerticalMerge(attr(merge, "val") or "continue"))
    _add(props, parse_borders(child(tc_pr, "tcBorders"), CellBorders))
    _add(props, parse_margins(child(tc_pr, "tcMar")))
    _add(props, parse_shading(child(tc_pr, "shd")))
    valign = child(tc_pr, "vAlign")
    if valign is not None:
        props.add(CellVerticalAlignment(attr(valign, "val")))
    return props


def _add(props: PropertySet, value) -> None:
    if value is not None:
        props.add(value)

