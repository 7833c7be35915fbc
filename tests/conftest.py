"""
Pytest configuration for docx_cascade
"""

import logging
import sys
import tempfile
import zipfile
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

import pytest

from docx_cascade.config import ConversionOptions
from docx_cascade.engine.converter import ConversionContext
from docx_cascade.fonts.catalog import FontCatalog, FontFace
from docx_cascade.models.document import Document, Paragraph, Run, Table, TableCell, TableRow, Text
from docx_cascade.models.properties import Property, PropertySet

W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
R_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
REL_BASE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"


@pytest.fixture(autouse=True)
def configure_logging():
    """Configure logging for tests to avoid file handler issues."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.WARNING)  # Only show warnings and errors during tests
    console_handler.setFormatter(logging.Formatter("%(name)s - %(levelname)s - %(message)s"))

    root_logger.addHandler(console_handler)
    root_logger.setLevel(logging.WARNING)

    yield

    root_logger.handlers.clear()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


# ----------------------------------------------------------------------
# Fonts and options
# ----------------------------------------------------------------------


@pytest.fixture
def font_catalog():
    """Catalog with a handful of fake faces; no file system or fontconfig access."""
    return FontCatalog(
        faces=[
            FontFace("Calibri", "/fonts/calibri.ttf"),
            FontFace("Calibri", "/fonts/calibrib.ttf", bold=True),
            FontFace("Cambria", "/fonts/cambria.ttc"),
            FontFace("SimSun", "/fonts/simsun.ttc"),
            FontFace("Arial", "/fonts/arial.ttf"),
            FontFace("Times New Roman", "/fonts/times.ttf"),
            FontFace("Symbol", "/fonts/symbol.ttf"),
        ],
        use_fontconfig=False,
    )


@pytest.fixture
def options():
    """Options that never try to embed the fake catalog faces."""
    return ConversionOptions(embed_fonts=False, font_dirs=())


@pytest.fixture
def context_factory(font_catalog, options):
    """Build a ConversionContext for an in-memory document."""

    def factory(document: Document, conversion_options: Optional[ConversionOptions] = None) -> ConversionContext:
        return ConversionContext.create(document, conversion_options or options, font_catalog)

    return factory


# ----------------------------------------------------------------------
# In-memory document builders
# ----------------------------------------------------------------------


@pytest.fixture
def make_paragraph():
    """Paragraph with one run per text."""

    def factory(
        *texts: str,
        style_id: Optional[str] = None,
        properties: Iterable[Property] = (),
        mark: Iterable[Property] = (),
        run_properties: Iterable[Property] = (),
    ) -> Paragraph:
        runs = [Run([Text(text)], properties=PropertySet(run_properties)) for text in texts]
        return Paragraph(runs, style_id=style_id, properties=PropertySet(properties), run_properties=PropertySet(mark))

    return factory


@pytest.fixture
def make_table():
    """Table from rows of cell property lists; each cell gets one paragraph."""

    def factory(
        rows: Sequence[Sequence[Sequence[Property]]],
        grid: Optional[List[float]] = None,
        properties: Iterable[Property] = (),
        row_properties: Optional[Sequence[Sequence[Property]]] = None,
        style_id: Optional[str] = None,
    ) -> Table:
        table = Table(style_id=style_id, properties=PropertySet(properties), grid=grid)
        for index, cells in enumerate(rows):
            row_props = row_properties[index] if row_properties else ()
            row = table.add_child(TableRow(PropertySet(row_props)))
            for cell_props in cells:
                cell = row.add_child(TableCell(PropertySet(cell_props)))
                cell.add_child(Paragraph([Run([Text(f"r{index}")])]))
        return table

    return factory


@pytest.fixture
def make_document():
    """Document whose body holds the given blocks."""

    def factory(*blocks, **fields) -> Document:
        document = Document(**fields)
        for block in blocks:
            document.body.add_child(block)
        return document

    return factory


# ----------------------------------------------------------------------
# DOCX packages on disk
# ----------------------------------------------------------------------


def _wrap(tag: str, inner: str) -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<w:{tag} xmlns:w="{W_NS}" xmlns:r="{R_NS}" '
        'xmlns:wp="http://schemas.openxmlformats.org/drawingml/2006/wordprocessingDrawing" '
        'xmlns:a="http://schemas.openxmlformats.org/drawingml/2006/main" '
        'xmlns:pic="http://schemas.openxmlformats.org/drawingml/2006/picture">'
        f"{inner}</w:{tag}>"
    )


@pytest.fixture
def docx_factory(temp_dir):
    """
    Write a minimal DOCX package.

    ``body`` is the inner XML of ``w:body``; ``styles``, ``numbering``,
    ``settings`` and ``header`` are inner XML of their root elements.
    ``media`` maps relationship ids to (part name, bytes).
    """

    def factory(
        body: str,
        styles: Optional[str] = None,
        numbering: Optional[str] = None,
        settings: Optional[str] = None,
        header: Optional[str] = None,
        media: Optional[Dict[str, tuple]] = None,
        name: str = "sample.docx",
    ) -> Path:
        relationships = []
        overrides = [
            '<Override PartName="/word/document.xml" '
            'ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"/>'
        ]
        parts = {"word/document.xml": _wrap("document", f"<w:body>{body}</w:body>")}
        if styles is not None:
            parts["word/styles.xml"] = _wrap("styles", styles)
            relationships.append(("rIdStyles", "styles", "styles.xml"))
        if numbering is not None:
            parts["word/numbering.xml"] = _wrap("numbering", numbering)
            relationships.append(("rIdNumbering", "numbering", "numbering.xml"))
        if settings is not None:
            parts["word/settings.xml"] = _wrap("settings", settings)
            relationships.append(("rIdSettings", "settings", "settings.xml"))
        if header is not None:
            parts["word/header1.xml"] = _wrap("hdr", header)
            relationships.append(("rIdHeader1", "header", "header1.xml"))
        binary = {}
        for rel_id, (part_name, data) in (media or {}).items():
            binary[f"word/{part_name}"] = data
            relationships.append((rel_id, "image", part_name))

        rels = "".join(
            f'<Relationship Id="{rel_id}" Type="{REL_BASE}/{kind}" Target="{target}"/>'
            for rel_id, kind, target in relationships
        )
        path = temp_dir / name
        with zipfile.ZipFile(path, "w") as archive:
            archive.writestr(
                "[Content_Types].xml",
                '<?xml version="1.0" encoding="UTF-8"?>'
                '<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">'
                '<Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>'
                '<Default Extension="xml" ContentType="application/xml"/>'
                '<Default Extension="png" ContentType="image/png"/>'
                + "".join(overrides)
                + "</Types>",
            )
            archive.writestr(
                "_rels/.rels",
                '<?xml version="1.0" encoding="UTF-8"?>'
                '<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">'
                f'<Relationship Id="rId1" Type="{REL_BASE}/officeDocument" Target="word/document.xml"/>'
                "</Relationships>",
            )
            archive.writestr(
                "word/_rels/document.xml.rels",
                '<?xml version="1.0" encoding="UTF-8"?>'
                f'<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">{rels}</Relationships>',
            )
            for part_name, content in parts.items():
                archive.writestr(part_name, content)
            for part_name, data in binary.items():
                archive.writestr(part_name, data)
        return path

    return factory


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    # Ignore logging errors during tests
    logging.raiseExceptions = False
