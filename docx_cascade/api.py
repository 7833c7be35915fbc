"""
High-level API for docx_cascade.

Example:
    >>> from docx_cascade import convert_docx_to_pdf
    >>> warnings = convert_docx_to_pdf("report.docx", "report.pdf")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, BinaryIO, List, Mapping, Optional, Union

from .config import ConversionOptions
from .diagnostics import ConversionWarning
from .engine.converter import DocumentConverter
from .fonts.catalog import FontCatalog
from .parser.document_parser import load_document
from .renderers.pdf_renderer import PdfSink

logger = logging.getLogger(__name__)

__all__ = ["convert_docx_to_pdf"]

Source = Union[str, Path, bytes, BinaryIO]
Target = Union[str, Path, BinaryIO]


def convert_docx_to_pdf(
    source: Source,
    target: Target,
    options: Optional[Union[ConversionOptions, Mapping[str, Any]]] = None,
    catalog: Optional[FontCatalog] = None,
) -> List[ConversionWarning]:
    """
    Convert a DOCX document to PDF.

    Args:
        source: Path to the DOCX file, its bytes or a binary stream
        target: Output path or writable binary stream
        options: ConversionOptions or a mapping of option names to values
        catalog: Font catalog to use instead of scanning ``options.font_dirs``

    Returns:
        Soft warnings collected during the conversion

    Raises:
        FileNotFoundError: Source path does not exist
        ParsingError: Source is not a readable DOCX package
        RenderingError: The PDF cannot be written
    """
    if isinstance(options, Mapping):
        options = ConversionOptions.from_mapping(options)
    options = options or ConversionOptions()

    document = load_document(source)
    title = Path(source).stem if isinstance(source, (str, Path)) else None
    sink = PdfSink(target, fallback_font=options.fallback_font, title=title)
    warnings = DocumentConverter(options, catalog).convert(document, sink)
    logger.info("Converted document with %d warning(s)", len(warnings))
    return warnings
