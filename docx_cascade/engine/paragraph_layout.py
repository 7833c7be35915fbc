"""
Paragraph layout calculator.

Computes the final geometry of one paragraph: line spacing, spacing
before/after (with the contextual spacing rule), indentation from direct,
numbering and style sources, the numbering prefix chunk and the auto-space
chunks inserted between East Asian and other text.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional, Tuple

from ..config import ConversionOptions
from ..fonts.classifier import is_east_asian
from ..models.document import Paragraph
from ..models.numbering import Level
from ..models.properties import (
    AutoSpaceDE,
    AutoSpaceDN,
    Bold,
    ContextualSpacing,
    FontSize,
    Indentation,
    Italic,
    Justification,
    KeepLines,
    KeepNext,
    PageBreakBefore,
    ParagraphBorders,
    Shading,
    Spacing,
    is_on,
    merge_properties,
)
from ..styles.cascade import StyleCascadeResolver
from .geometry import half_points_to_points, twips_to_points
from .instructions import ParagraphLayout, TextChunk
from .numbering import NumberingResult, ParagraphNumbering
from .run_formatter import RunFormatter, RunStyle
from .text_metrics import TextMeasurer

logger = logging.getLogger(__name__)

LINES_UNIT = 240  # w:line in "auto" rule is in 240ths of a line

ALIGNMENTS = {
    "both": "justify",
    "distribute": "justify",
    "center": "center",
    "right": "right",
    "end": "right",
    "left": "left",
    "start": "left",
}


def same_style(first: Optional[Paragraph], second: Optional[Paragraph]) -> bool:
    if first is None or second is None:
        return False
    return bool(first.style_id) and first.style_id == second.style_id


def line_spacing(spacing: Optional[Spacing], font_size: float, factor: float) -> Tuple[float, str]:
    """
    Line height in points and the rule it was derived from.

    Args:
        spacing: Effective spacing property
        font_size: Largest font size in the paragraph
        factor: Multiplier for single line spacing

    Returns:
        (line height, rule) where rule is ``auto``, ``exact`` or ``atLeast``
    """
    single = font_size * factor
    if spacing is None or spacing.line is None:
        return single, "auto"
    rule = spacing.line_rule or "auto"
    if rule == "exact":
        return twips_to_points(spacing.line), "exact"
    if rule == "atLeast":
        return max(twips_to_points(spacing.line), single), "atLeast"
    return single * float(spacing.line) / LINES_UNIT, "auto"


def spacing_values(spacing: Optional[Spacing], font_size: float) -> Tuple[float, float]:
    """Spacing before/after in points; ``*Lines`` values win and scale by font size."""
    if spacing is None:
        return 0.0, 0.0
    if spacing.before_lines is not None:
        before = float(spacing.before_lines) * font_size / 100.0
    else:
        before = twips_to_points(spacing.before)
    if spacing.after_lines is not None:
        after = float(spacing.after_lines) * font_size / 100.0
    else:
        after = twips_to_points(spacing.after)
    return before, after


def merge_adjacent_spacing(previous: ParagraphLayout, current: ParagraphLayout) -> None:
    """Keep the larger of spacing-after and the next spacing-before; zero the other."""
    if previous.spacing_after > 0 and current.spacing_before > 0:
        if previous.spacing_after >= current.spacing_before:
            current.spacing_before = 0.0
        else:
            previous.spacing_after = 0.0


def insert_auto_spaces(
    chunks: List[TextChunk],
    factor: float,
    letters: bool = True,
    digits: bool = True,
) -> List[TextChunk]:
    """
    Insert thin space chunks where East Asian and other characters meet.

    Only letters and digits on the other side of the boundary count,
    so punctuation and symbols never get a space.
    Whitespace, breaks and non-text chunks reset the boundary. The inserted
    chunk is ``factor`` times the size of the chunk before the boundary.

    Args:
        chunks: Paragraph chunks in order
        factor: Space size relative to the preceding font size
        letters: Space between East Asian text and letters (``autoSpaceDE``)
        digits: Space between East Asian text and digits (``autoSpaceDN``)

    Returns:
        New chunk list
    """
    if not (letters or digits):
        return list(chunks)

    result: List[TextChunk] = []
    previous_char: Optional[str] = None
    previous_chunk: Optional[TextChunk] = None
    for chunk in chunks:
        if chunk.kind != "text":
            previous_char = None
            result.append(chunk)
            continue
        start = 0
        for index, char in enumerate(chunk.text):
            if char.isspace():
                previous_char = None
                continue
            if previous_char is not None and is_east_asian(previous_char) != is_east_asian(char):
                other = char if is_east_asian(previous_char) else previous_char
                if other.isdigit():
                    wanted = digits
                elif other.isalpha():
                    wanted = letters
                else:
                    wanted = False
                if wanted:
                    if index > start:
                        result.append(replace(chunk, text=chunk.text[start:index]))
                        start = index
                    source = previous_chunk if previous_chunk is not None else chunk
                    result.append(replace(source, text=" ", kind="space", size=source.size * factor, width=None, image=None))
            previous_char = char
            previous_chunk = chunk
        if start < len(chunk.text) or not chunk.text:
            result.append(replace(chunk, text=chunk.text[start:]) if start else chunk)
    return result


class ParagraphLayoutCalculator:
    """Builds :class:`ParagraphLayout` instructions."""

    def __init__(
        self,
        resolver: StyleCascadeResolver,
        formatter: RunFormatter,
        numbering: ParagraphNumbering,
        measurer: Optional[TextMeasurer] = None,
        options: Optional[ConversionOptions] = None,
    ):
        self.resolver = resolver
        self.formatter = formatter
        self.numbering = numbering
        self.options = options or ConversionOptions()
        self.measurer = measurer or TextMeasurer(self.options.fallback_font)

    def layout(
        self,
        paragraph: Paragraph,
        previous: Optional[Paragraph] = None,
        following: Optional[Paragraph] = None,
        in_table: bool = False,
    ) -> ParagraphLayout:
        """
        Compute the layout of one paragraph.

        Must be called in document order: numbering counters advance here.

        Args:
            paragraph: Paragraph node
            previous: Paragraph before it in the same container, if any
            following: Paragraph after it in the same container, if any
            in_table: Whether the paragraph sits in a table cell

        Returns:
            ParagraphLayout with final values in points
        """
        resolve = self.resolver.resolve
        mark = self.formatter.run_style(paragraph)

        chunks: List[TextChunk] = []
        for run in paragraph.iter_runs():
            chunks.extend(self.formatter.format_run(run))
        if not chunks and not mark.hidden:
            chunks.append(self.formatter.text_chunks(paragraph, " ", mark)[0])
            chunks[0].kind = "space"

        auto_de = resolve(paragraph, AutoSpaceDE)
        auto_dn = resolve(paragraph, AutoSpaceDN)
        chunks = insert_auto_spaces(
            chunks,
            self.options.auto_space_factor,
            letters=auto_de is None or bool(auto_de.value),
            digits=auto_dn is None or bool(auto_dn.value),
        )

        font_size = max((chunk.size for chunk in chunks), default=self.options.empty_paragraph_size)
        layout = ParagraphLayout(chunks=chunks, style_id=paragraph.style_id, font_size=font_size, source_id=paragraph.id)

        spacing = resolve(paragraph, Spacing)
        layout.line_spacing, layout.line_rule = line_spacing(spacing, font_size, self.options.line_spacing_factor)
        if in_table:
            layout.line_spacing *= self.options.cell_leading
        layout.spacing_before, layout.spacing_after = spacing_values(spacing, font_size)

        contextual = resolve(paragraph, ContextualSpacing)
        if is_on(contextual):
            if same_style(previous, paragraph):
                layout.spacing_before = 0.0
            if same_style(paragraph, following):
                layout.spacing_after = 0.0

        numbered = self.numbering.number(paragraph)
        level = numbered.level if numbered is not None else None
        self._apply_indentation(layout, paragraph, level, chunks)
        if numbered is not None and numbered.text:
            prefix = self._numbering_chunk(paragraph, numbered, mark, layout)
            layout.numbering = prefix
            layout.chunks.insert(0, prefix)

        justification = resolve(paragraph, Justification)
        if justification is not None and justification.value:
            layout.alignment = ALIGNMENTS.get(justification.value, "left")

        layout.keep_together = is_on(resolve(paragraph, KeepLines))
        layout.keep_with_next = is_on(resolve(paragraph, KeepNext))
        layout.page_break_before = is_on(resolve(paragraph, PageBreakBefore))

        shading = resolve(paragraph, Shading)
        if shading is not None and shading.fill and shading.fill != "auto":
            layout.background = shading.fill
        borders = resolve(paragraph, ParagraphBorders)
        if borders is not None and not borders.is_empty():
            layout.borders = borders
        return layout

    # ------------------------------------------------------------------
    # Indentation
    # ------------------------------------------------------------------
    def _paragraph_font_size(self, paragraph: Paragraph) -> float:
        size = self.resolver.resolve(paragraph, FontSize)
        return half_points_to_points(size.value if size else None) or self.options.indent_font_size

    def _apply_indentation(
        self,
        layout: ParagraphLayout,
        paragraph: Paragraph,
        level: Optional[Level],
        chunks: List[TextChunk],
    ) -> None:
        direct = paragraph.properties.get(Indentation)
        inherited = self.resolver.resolve_all(paragraph, Indentation)
        if direct is not None and inherited and inherited[0] is direct:
            inherited = inherited[1:]
        level_indent = level.paragraph_properties.get(Indentation) if level is not None else None
        indent = merge_properties([item for item in [direct, level_indent, *inherited] if item is not None])
        if indent is None:
            return

        paragraph_size = self._paragraph_font_size(paragraph)
        first_size = chunks[0].size if chunks else paragraph_size

        def length(twips, chars, size):
            if chars is not None:
                return float(chars) * size / 100.0
            return twips_to_points(twips)

        left_chars = indent.left_chars if indent.left_chars is not None else indent.start_chars
        right_chars = indent.right_chars if indent.right_chars is not None else indent.end_chars
        left = indent.left if indent.left is not None else indent.start
        right = indent.right if indent.right is not None else indent.end

        layout.indent_left = length(left, left_chars, paragraph_size)
        layout.indent_right = length(right, right_chars, paragraph_size)
        hanging = length(indent.hanging, indent.hanging_chars, first_size)
        if hanging:
            layout.first_line = -hanging
        else:
            layout.first_line = length(indent.first_line, indent.first_line_chars, first_size)

    # ------------------------------------------------------------------
    # Numbering
    # ------------------------------------------------------------------
    def _numbering_chunk(
        self,
        paragraph: Paragraph,
        numbered: NumberingResult,
        mark: RunStyle,
        layout: ParagraphLayout,
    ) -> TextChunk:
        level = numbered.level
        level_bold = level.run_properties.get(Bold)
        level_italic = level.run_properties.get(Italic)
        bold = bool(level_bold.value) if level_bold is not None else mark.bold
        italic = bool(level_italic.value) if level_italic is not None else mark.italic

        level_size = level.run_properties.get(FontSize)
        size = half_points_to_points(level_size.value if level_size else None) or self.options.numbering_font_size

        text = numbered.text
        if level.suffix == "space":
            text += " "
        descriptor = self.formatter.selector.select_numbering_font(paragraph, level, numbered.text, bold, italic)
        font_name = self.formatter.font_names.name_for(descriptor, bold, italic, paragraph)
        chunk = TextChunk(
            text=text,
            font_name=font_name,
            size=size,
            kind="numbering",
            font=descriptor,
            bold=bold,
            italic=italic,
            synthetic_bold=descriptor.synthetic_bold if descriptor is not None else False,
            synthetic_italic=descriptor.synthetic_italic if descriptor is not None else False,
            color=mark.color,
            source_id=paragraph.id,
        )
        if level.suffix == "tab":
            width = self.measurer.string_width(text, font_name, size)
            chunk.width = width + self._tab_padding(width, -layout.first_line)
        return chunk

    def _tab_padding(self, width: float, hanging: float) -> float:
        """Space after a prefix so the text starts at the hanging indent or next tab stop."""
        if hanging > width:
            return hanging - width
        tab = self.formatter.tab_width
        if tab <= 0:
            return 0.0
        return tab - (width - max(hanging, 0.0)) % tab
