"""Document model for docx_cascade."""

from .document import (
    Body,
    Break,
    Document,
    DocumentNode,
    DocumentSettings,
    Drawing,
    HeaderFooter,
    Hyperlink,
    Paragraph,
    Run,
    SectionLayout,
    SimpleField,
    Symbol,
    Tab,
    Table,
    TableCell,
    TableRow,
    Text,
)
from .numbering import AbstractNumbering, Level, LevelOverride, NumberingDefinitions, NumberingInstance
from .properties import Border, PropertySet, Width, merge_properties
from .styles import DocDefaults, Style, StyleKind, StyleSheet
from .theme import FontScheme, Theme

__all__ = [
    "AbstractNumbering",
    "Body",
    "Border",
    "Break",
    "DocDefaults",
    "Document",
    "DocumentNode",
    "DocumentSettings",
    "Drawing",
    "FontScheme",
    "HeaderFooter",
    "Hyperlink",
    "Level",
    "LevelOverride",
    "NumberingDefinitions",
    "NumberingInstance",
    "Paragraph",
    "PropertySet",
    "Run",
    "SectionLayout",
    "SimpleField",
    "Style",
    "StyleKind",
    "StyleSheet",
    "Symbol",
    "Tab",
    "Table",
    "TableCell",
    "TableRow",
    "Text",
    "Theme",
    "Width",
    "merge_properties",
]
