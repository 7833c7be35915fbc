"""
Run formatting: resolves a run's effective character properties and turns
its content into text chunks with concrete fonts.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from PIL import Image, UnidentifiedImageError

from ..config import ConversionOptions
from ..diagnostics import FONT_FALLBACK, IMAGE, Diagnostics
from ..exceptions import FontError
from ..fonts.catalog import register_face
from ..fonts.classifier import ScriptCategory, classify
from ..fonts.selector import FontDescriptor, FontSelector
from ..models.document import Break, DocumentNode, Drawing, Hyperlink, Run, Symbol, Tab, Text
from ..models.properties import (
    Bold,
    Caps,
    Color,
    ComplexScriptFontSize,
    DoubleStrike,
    FontSize,
    Italic,
    Shading,
    Strike,
    Underline,
    Vanish,
    VerticalAlign,
    is_on,
)
from ..styles.cascade import StyleCascadeResolver
from .geometry import emu_to_points, half_points_to_points, px_to_points, twips_to_points
from .instructions import TextChunk

logger = logging.getLogger(__name__)

BASE14_VARIANTS: Dict[str, Tuple[str, str, str, str]] = {
    "Helvetica": ("Helvetica", "Helvetica-Bold", "Helvetica-Oblique", "Helvetica-BoldOblique"),
    "Times-Roman": ("Times-Roman", "Times-Bold", "Times-Italic", "Times-BoldItalic"),
    "Courier": ("Courier", "Courier-Bold", "Courier-Oblique", "Courier-BoldOblique"),
}


def base14_variant(font_name: str, bold: bool, italic: bool) -> str:
    variants = BASE14_VARIANTS.get(font_name)
    if variants is None:
        return font_name
    return variants[(1 if bold else 0) + (2 if italic else 0)]


@dataclass(slots=True)
class RunStyle:
    """Effective character formatting of a run."""

    size: float
    complex_size: float
    bold: bool = False
    italic: bool = False
    underline: Optional[str] = None
    strike: bool = False
    double_strike: bool = False
    caps: bool = False
    hidden: bool = False
    color: Optional[str] = None
    vertical_align: Optional[str] = None
    background: Optional[str] = None


class FontNames:
    """Maps font descriptors to names registered with ReportLab."""

    def __init__(self, options: ConversionOptions, diagnostics: Optional[Diagnostics] = None):
        self.options = options
        self.diagnostics = diagnostics

    def name_for(self, descriptor: Optional[FontDescriptor], bold: bool, italic: bool, node: Optional[DocumentNode] = None) -> str:
        """
        ReportLab font name for a descriptor.

        Args:
            descriptor: Selected face or None
            bold: Requested bold flag
            italic: Requested italic flag
            node: Node reported in fallback warnings

        Returns:
            Registered TrueType name, or a base-14 variant of the fallback font
        """
        if descriptor is not None and descriptor.face is not None and self.options.embed_fonts:
            try:
                return register_face(descriptor.face)
            except FontError as exc:
                logger.debug("%s", exc)
                if self.diagnostics is not None:
                    self.diagnostics.warn(FONT_FALLBACK, f"cannot embed font '{descriptor.name}'", node.id if node else None)
        return base14_variant(self.options.fallback_font, bold, italic)


class RunFormatter:
    """Builds text chunks for runs."""

    def __init__(
        self,
        resolver: StyleCascadeResolver,
        selector: FontSelector,
        options: Optional[ConversionOptions] = None,
        diagnostics: Optional[Diagnostics] = None,
        font_names: Optional[FontNames] = None,
    ):
        self.resolver = resolver
        self.selector = selector
        self.options = options or ConversionOptions()
        self.diagnostics = diagnostics
        self.font_names = font_names or FontNames(self.options, diagnostics)
        tab_stop = resolver.document.settings.default_tab_stop
        self.tab_width = twips_to_points(tab_stop if tab_stop else self.options.default_tab_stop)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    def run_style(self, node: DocumentNode) -> RunStyle:
        """Effective character formatting for a run or a paragraph mark."""
        resolve = self.resolver.resolve
        font_size = resolve(node, FontSize)
        size = half_points_to_points(font_size.value if font_size else None) or self.options.default_font_size
        cs_size = resolve(node, ComplexScriptFontSize)
        complex_size = half_points_to_points(cs_size.value if cs_size else None) or size

        underline = resolve(node, Underline)
        underline_value = underline.value if underline is not None and underline.value not in (None, "none") else None

        color = resolve(node, Color)
        color_value = None
        if color is not None:
            if color.value and color.value != "auto":
                color_value = color.value
            elif color.theme_color:
                color_value = self.resolver.document.theme.colors.get(color.theme_color)

        shading = resolve(node, Shading)
        background = None
        if shading is not None and shading.fill and shading.fill != "auto":
            background = shading.fill

        vertical = resolve(node, VerticalAlign)
        return RunStyle(
            size=size,
            complex_size=complex_size,
            bold=is_on(resolve(node, Bold)),
            italic=is_on(resolve(node, Italic)),
            underline=underline_value,
            strike=is_on(resolve(node, Strike)),
            double_strike=is_on(resolve(node, DoubleStrike)),
            caps=is_on(resolve(node, Caps)),
            hidden=is_on(resolve(node, Vanish)),
            color=color_value,
            vertical_align=vertical.value if vertical is not None and vertical.value != "baseline" else None,
            background=background,
        )

    # ------------------------------------------------------------------
    # Chunks
    # ------------------------------------------------------------------
    def format_run(self, run: Run) -> List[TextChunk]:
        """
        Convert a run's content to chunks.

        Text is split where the font slot changes, so each chunk carries the
        face selected for its own script. Hidden runs produce no chunks.
        """
        style = self.run_style(run)
        if style.hidden:
            return []

        chunks: List[TextChunk] = []
        for item in run.content:
            if isinstance(item, Text):
                text = item.value.upper() if style.caps else item.value
                chunks.extend(self.text_chunks(run, text, style))
            elif isinstance(item, Tab):
                chunks.append(self._chunk(run, "", style, kind="tab", width=self.tab_width))
            elif isinstance(item, Break):
                kind = "page_break" if item.kind == "page" else "line_break"
                chunks.append(self._chunk(run, "", style, kind=kind))
            elif isinstance(item, Symbol):
                chunks.append(self._symbol_chunk(run, item, style))
            elif isinstance(item, Drawing):
                chunk = self._image_chunk(run, item, style)
                if chunk is not None:
                    chunks.append(chunk)
        return chunks

    def text_chunks(self, node: DocumentNode, text: str, style: RunStyle) -> List[TextChunk]:
        chunks: List[TextChunk] = []
        for segment in split_by_script(text):
            descriptor = self.selector.select_font(node, segment, style.bold, style.italic)
            category = descriptor.category if descriptor is not None else self.selector.script_category(node, segment)
            size = style.complex_size if category == ScriptCategory.COMPLEX_SCRIPT else style.size
            chunk = self._chunk(node, segment, style, descriptor=descriptor, size=size)
            previous = chunks[-1] if chunks else None
            if previous is not None and previous.font_name == chunk.font_name and previous.size == chunk.size:
                previous.text += chunk.text
            else:
                chunks.append(chunk)
        return chunks

    def _chunk(
        self,
        node: DocumentNode,
        text: str,
        style: RunStyle,
        kind: str = "text",
        descriptor: Optional[FontDescriptor] = None,
        size: Optional[float] = None,
        width: Optional[float] = None,
    ) -> TextChunk:
        font_name = self.font_names.name_for(descriptor, style.bold, style.italic, node)
        return TextChunk(
            text=text,
            font_name=font_name,
            size=size if size is not None else style.size,
            kind=kind,  # type: ignore[arg-type]
            font=descriptor,
            bold=style.bold,
            italic=style.italic,
            synthetic_bold=descriptor.synthetic_bold if descriptor is not None else False,
            synthetic_italic=descriptor.synthetic_italic if descriptor is not None else False,
            underline=style.underline,
            strike=style.strike,
            double_strike=style.double_strike,
            color=style.color,
            vertical_align=style.vertical_align,
            background=style.background,
            width=width,
            link=hyperlink_url(node),
            source_id=node.id,
        )

    def _symbol_chunk(self, run: Run, symbol: Symbol, style: RunStyle) -> TextChunk:
        descriptor = None
        if symbol.font:
            descriptor = self.selector.font_by_name(symbol.font, ScriptCategory.HIGH_ANSI, run, style.bold, style.italic)
        if descriptor is None:
            descriptor = self.selector.select_font(run, symbol.char, style.bold, style.italic)
        return self._chunk(run, symbol.char, style, descriptor=descriptor)

    def _image_chunk(self, run: Run, drawing: Drawing, style: RunStyle) -> Optional[TextChunk]:
        width = emu_to_points(drawing.width_emu) if drawing.width_emu else 0.0
        height = emu_to_points(drawing.height_emu) if drawing.height_emu else 0.0
        if not width or not height:
            size = image_size(drawing.data)
            if size is None:
                if self.diagnostics is not None:
                    self.diagnostics.warn(IMAGE, f"cannot read image '{drawing.name}'", run.id)
                return None
            width, height = size
        chunk = self._chunk(run, "", style, kind="image", width=width)
        chunk.height = height
        chunk.image = drawing.data
        return chunk


def hyperlink_url(node: DocumentNode) -> Optional[str]:
    hyperlink = node.find_ancestor(Hyperlink)
    return hyperlink.url if hyperlink is not None else None


def split_by_script(text: str) -> List[str]:
    """
    Split text where the font slot of consecutive characters changes.

    Whitespace stays with the preceding segment.
    """
    segments: List[str] = []
    current = ""
    current_category = None
    for char in text:
        if char.isspace() and current:
            current += char
            continue
        category = classify(char).category
        if category == ScriptCategory.UNKNOWN:
            category = ScriptCategory.HIGH_ANSI
        if current and category != current_category:
            segments.append(current)
            current = ""
        current += char
        current_category = category
    if current:
        segments.append(current)
    return segments


def image_size(data: bytes) -> Optional[Tuple[float, float]]:
    """Image size in points, from its pixel size at the stored DPI (96 when absent)."""
    if not data:
        return None
    try:
        with Image.open(io.BytesIO(data)) as image:
            width_px, height_px = image.size
            dpi = image.info.get("dpi", (96.0, 96.0))
    except (UnidentifiedImageError, OSError) as exc:
        logger.debug("Cannot read image: %s", exc)
        return None
    try:
        dpi_x, dpi_y = float(dpi[0]) or 96.0, float(dpi[1]) or 96.0
    except (TypeError, ValueError, IndexError):
        dpi_x = dpi_y = 96.0
    return px_to_points(width_px, dpi_x), px_to_points(height_px, dpi_y)
