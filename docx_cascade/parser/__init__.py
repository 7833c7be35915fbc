"""DOCX package parsing into the document model."""

from .document_parser import DocxLoader, load_document
from .numbering_parser import NumberingParser
from .package_reader import PackageReader
from .style_parser import StyleParser
from .theme_parser import ThemeParser

__all__ = [
    "DocxLoader",
    "NumberingParser",
    "PackageReader",
    "StyleParser",
    "ThemeParser",
    "load_document",
]
