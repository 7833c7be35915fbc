"""
Document walk.

:class:`DocumentConverter` visits the body top-down in document order and
hands one resolved :class:`ParagraphLayout` or :class:`TableLayout` per block
to a layout sink. All order-dependent state (numbering counters, collected
warnings) lives in one :class:`ConversionContext` per conversion.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..config import ConversionOptions
from ..diagnostics import ConversionWarning, Diagnostics
from ..fonts.catalog import FontCatalog
from ..fonts.selector import FontSelector
from ..models.document import Document, DocumentNode, Paragraph, SectionLayout, Table, TableCell
from ..styles.cascade import StyleCascadeResolver
from .geometry import Margins, twips_to_points
from .instructions import Block, PageGeometry, ParagraphLayout
from .numbering import ParagraphNumbering
from .paragraph_layout import ParagraphLayoutCalculator, merge_adjacent_spacing
from .run_formatter import RunFormatter
from .table_layout import TableLayoutBuilder
from .text_metrics import TextMeasurer

logger = logging.getLogger(__name__)


def page_geometry(section: Optional[SectionLayout]) -> PageGeometry:
    """Page size and margins in points; Word's A4 defaults when no section is given."""
    section = section or SectionLayout()
    return PageGeometry(
        width=twips_to_points(section.page_width),
        height=twips_to_points(section.page_height),
        margins=Margins(
            top=twips_to_points(section.margin_top),
            bottom=twips_to_points(section.margin_bottom),
            left=twips_to_points(section.margin_left),
            right=twips_to_points(section.margin_right),
        ),
        header_distance=twips_to_points(section.header_distance),
        footer_distance=twips_to_points(section.footer_distance),
    )


@dataclass
class ConversionContext:
    """State of one conversion run; must see blocks in document order."""

    document: Document
    options: ConversionOptions
    diagnostics: Diagnostics
    resolver: StyleCascadeResolver
    selector: FontSelector
    formatter: RunFormatter
    numbering: ParagraphNumbering
    paragraphs: ParagraphLayoutCalculator
    tables: TableLayoutBuilder
    page: PageGeometry

    @classmethod
    def create(
        cls,
        document: Document,
        options: Optional[ConversionOptions] = None,
        catalog: Optional[FontCatalog] = None,
    ) -> "ConversionContext":
        options = options or ConversionOptions()
        diagnostics = Diagnostics()
        resolver = StyleCascadeResolver(document, options.max_style_depth, diagnostics)
        selector = FontSelector(resolver, catalog or FontCatalog(options.font_dirs), diagnostics)
        formatter = RunFormatter(resolver, selector, options, diagnostics)
        numbering = ParagraphNumbering(document.numbering, resolver, diagnostics=diagnostics)
        paragraphs = ParagraphLayoutCalculator(
            resolver, formatter, numbering, TextMeasurer(options.fallback_font), options
        )
        return cls(
            document=document,
            options=options,
            diagnostics=diagnostics,
            resolver=resolver,
            selector=selector,
            formatter=formatter,
            numbering=numbering,
            paragraphs=paragraphs,
            tables=TableLayoutBuilder(resolver, options, diagnostics),
            page=page_geometry(document.section),
        )

    @property
    def warnings(self) -> List[ConversionWarning]:
        return list(self.diagnostics)


class DocumentConverter:
    """Resolves a document into layout instructions for a sink."""

    def __init__(self, options: Optional[ConversionOptions] = None, catalog: Optional[FontCatalog] = None):
        self.options = options or ConversionOptions()
        self.catalog = catalog

    def convert(self, document: Document, sink) -> List[ConversionWarning]:
        """
        Convert a document and feed the sink.

        Args:
            document: Loaded document
            sink: Object implementing the LayoutSink protocol

        Returns:
            Soft warnings collected during the conversion
        """
        context = ConversionContext.create(document, self.options, self.catalog)
        sink.begin_document(context.page)

        for block in self.layout_blocks(document.body.children, context, context.page.printable_width):
            sink.add_block(block)

        header = document.headers.get("default")
        if header is not None:
            sink.set_header(self.layout_blocks(header.children, context, context.page.printable_width))
        footer = document.footers.get("default")
        if footer is not None:
            sink.set_footer(self.layout_blocks(footer.children, context, context.page.printable_width))

        sink.end_document()
        for warning in context.warnings:
            logger.warning("%s: %s", warning.code, warning.message)
        return context.warnings

    def layout_blocks(
        self,
        children: Sequence[DocumentNode],
        context: ConversionContext,
        available_width: float,
        in_table: bool = False,
    ) -> List[Block]:
        """
        Lay out the block children of a container in order.

        Args:
            children: Paragraphs and tables of a body, cell, header or footer
            context: Conversion context
            available_width: Width available to tables, in points
            in_table: Whether the container is a table cell

        Returns:
            Layout blocks; adjacent paragraph spacing is already merged
        """
        nodes = [child for child in children if isinstance(child, (Paragraph, Table))]
        blocks: List[Block] = []
        for index, node in enumerate(nodes):
            if isinstance(node, Paragraph):
                previous = nodes[index - 1] if index > 0 else None
                following = nodes[index + 1] if index + 1 < len(nodes) else None
                layout = context.paragraphs.layout(
                    node,
                    previous if isinstance(previous, Paragraph) else None,
                    following if isinstance(following, Paragraph) else None,
                    in_table=in_table,
                )
                if blocks and isinstance(blocks[-1], ParagraphLayout):
                    merge_adjacent_spacing(blocks[-1], layout)
                blocks.append(layout)
            else:
                blocks.append(self._layout_table(node, context, available_width))
        return blocks

    def _layout_table(self, table: Table, context: ConversionContext, available_width: float):
        def cell_blocks(cell: TableCell) -> List[Block]:
            return self.layout_blocks(cell.children, context, available_width, in_table=True)

        return context.tables.build(table, available_width, cell_blocks)
