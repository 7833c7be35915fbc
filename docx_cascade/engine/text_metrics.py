"""
Text measurement backed by ReportLab font metrics.
"""

from __future__ import annotations

import logging
from typing import Dict, Tuple

from reportlab.pdfbase import pdfmetrics

from .instructions import TextChunk

logger = logging.getLogger(__name__)

# Rough advance of an average glyph, relative to the font size
AVERAGE_CHAR_WIDTH = 0.5


class TextMeasurer:
    """Measures strings in registered ReportLab fonts."""

    def __init__(self, fallback_font: str = "Helvetica"):
        self.fallback_font = fallback_font
        self._cache: Dict[Tuple[str, str, float], float] = {}

    def string_width(self, text: str, font_name: str, size: float) -> float:
        """
        Width of ``text`` in points.

        Args:
            text: Text to measure
            font_name: Registered ReportLab font name
            size: Font size in points

        Returns:
            Advance width; unregistered fonts are measured with the fallback font
        """
        if not text:
            return 0.0
        key = (text, font_name, size)
        if key in self._cache:
            return self._cache[key]
        try:
            width = pdfmetrics.stringWidth(text, font_name, size)
        except KeyError:
            logger.debug("Font %s is not registered; measuring with %s", font_name, self.fallback_font)
            try:
                width = pdfmetrics.stringWidth(text, self.fallback_font, size)
            except KeyError:
                width = len(text) * size * AVERAGE_CHAR_WIDTH
        self._cache[key] = width
        return width

    def chunk_width(self, chunk: TextChunk) -> float:
        if chunk.width is not None:
            return chunk.width
        if chunk.is_break:
            return 0.0
        return self.string_width(chunk.text, chunk.font_name, chunk.size)
