"""
docx_cascade - DOCX layout resolution and PDF conversion.

Resolves the Word style cascade, font selection, list numbering, table
grids and borders, and paragraph geometry into layout instructions, and
renders them to PDF with ReportLab.
"""

__version__ = "0.1.0"

from .api import convert_docx_to_pdf
from .config import ConversionOptions
from .diagnostics import ConversionWarning
from .engine.converter import DocumentConverter
from .exceptions import (
    DocxCascadeError,
    FontError,
    ParsingError,
    RenderingError,
)
from .parser.document_parser import DocxLoader, load_document
from .renderers import LayoutSink, PdfSink, RecordingSink
from .utils.logger import configure_logging, get_logger

__all__ = [
    "ConversionOptions",
    "ConversionWarning",
    "DocumentConverter",
    "DocxCascadeError",
    "DocxLoader",
    "FontError",
    "LayoutSink",
    "ParsingError",
    "PdfSink",
    "RecordingSink",
    "RenderingError",
    "configure_logging",
    "get_logger",
    "load_document",
    "convert_docx_to_pdf",
]
