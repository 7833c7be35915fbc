"""
Font selection for runs and numbering prefixes.

The first character of the text picks the font slot (ascii, hAnsi, eastAsia
or cs). The slot is then looked up source by source: direct run fonts, the
run style chain, the paragraph style chain, the default character and
paragraph styles and finally ``docDefaults``. Placeholder names (``minorHAnsi``,
``eastAsia``, ...) are resolved through the document defaults and the theme;
a language-to-script lookup in the theme is the last resort.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..diagnostics import FONT_FALLBACK, Diagnostics
from ..models.document import DocumentNode, Paragraph, Run
from ..models.numbering import Level
from ..models.properties import RUN, ComplexScript, Languages, RightToLeft, RunFonts
from ..styles.cascade import StyleCascadeResolver
from .catalog import FontCatalog, FontFace
from .classifier import ScriptCategory, classify
from .script_tags import script_tag_for_language

logger = logging.getLogger(__name__)

SLOT_PLACEHOLDERS = ("eastAsia", "cs", "hAnsi", "ascii")
THEME_PLACEHOLDERS = (
    "majorBidi",
    "minorBidi",
    "majorHAnsi",
    "minorHAnsi",
    "majorEastAsia",
    "minorEastAsia",
    "majorAscii",
    "minorAscii",
)
ILLEGAL_FONT_NAMES = frozenset(SLOT_PLACEHOLDERS + THEME_PLACEHOLDERS)


@dataclass(frozen=True, slots=True)
class FontDescriptor:
    """A resolved face for a piece of text."""

    name: str
    path: Optional[str]
    category: ScriptCategory
    exact_match: bool
    bold: bool = False
    italic: bool = False
    face: Optional[FontFace] = None

    @property
    def synthetic_bold(self) -> bool:
        return self.bold and not self.exact_match

    @property
    def synthetic_italic(self) -> bool:
        return self.italic and not self.exact_match


def slot_name(fonts: Optional[RunFonts], category: ScriptCategory) -> Optional[str]:
    """Font name for a slot; a theme reference wins over a plain name."""
    if fonts is None:
        return None
    if category == ScriptCategory.EAST_ASIAN:
        return fonts.east_asia_theme or fonts.east_asia
    if category == ScriptCategory.COMPLEX_SCRIPT:
        return fonts.complex_script_theme or fonts.complex_script
    if category == ScriptCategory.ASCII:
        return fonts.ascii_theme or fonts.ascii
    return fonts.high_ansi_theme or fonts.high_ansi


class FontSelector:
    """Chooses font faces with the cascade resolver and a font catalog."""

    def __init__(self, resolver: StyleCascadeResolver, catalog: FontCatalog, diagnostics: Optional[Diagnostics] = None):
        self.resolver = resolver
        self.catalog = catalog
        self.diagnostics = diagnostics
        self.theme = resolver.document.theme

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def select_font(self, node: DocumentNode, text: str, bold: bool = False, italic: bool = False) -> Optional[FontDescriptor]:
        """
        Select a face for text in a run (or a paragraph mark).

        Args:
            node: Run or paragraph the text belongs to
            text: Text to render; its first character decides the slot
            bold: Effective bold flag
            italic: Effective italic flag

        Returns:
            FontDescriptor, or None when no face can be found
        """
        sources = self.resolver.resolve_all(node, RunFonts)
        category = self.script_category(node, text, sources)
        return self._select(node, sources, category, bold, italic)

    def select_numbering_font(
        self,
        paragraph: Paragraph,
        level: Level,
        text: str,
        bold: bool = False,
        italic: bool = False,
    ) -> Optional[FontDescriptor]:
        """Face for a numbering prefix: level rPr, paragraph mark, paragraph style, docDefaults."""
        sources: List[RunFonts] = [
            value
            for value in (
                level.run_properties.get(RunFonts),
                paragraph.run_properties.get(RunFonts),
                self.resolver.style_value(paragraph.style_id, RunFonts, RUN),
                self.resolver.doc_default_value(RunFonts, RUN),
            )
            if value is not None
        ]
        category = self.script_category(paragraph, text, sources)
        return self._select(paragraph, sources, category, bold, italic)

    def script_category(self, node: DocumentNode, text: str, sources: Sequence[RunFonts] = ()) -> ScriptCategory:
        """Font slot used for ``text`` on ``node``."""
        if isinstance(node, Run):
            complex_script = self.resolver.resolve(node, ComplexScript)
            rtl = self.resolver.resolve(node, RightToLeft)
            if (complex_script and complex_script.value) or (rtl and rtl.value):
                return ScriptCategory.COMPLEX_SCRIPT
        info = classify(text[0] if text else " ")
        hint = next((fonts.hint for fonts in sources if fonts.hint), None)
        if info.east_asia_hint and hint == "eastAsia":
            return ScriptCategory.EAST_ASIAN
        if info.category == ScriptCategory.UNKNOWN:
            return ScriptCategory.HIGH_ANSI
        return info.category

    def font_by_name(
        self,
        name: Optional[str],
        category: ScriptCategory,
        node: DocumentNode,
        bold: bool = False,
        italic: bool = False,
    ) -> Optional[FontDescriptor]:
        """
        Resolve a font name (possibly a placeholder) to a concrete face.

        Args:
            name: Name from a font slot
            category: Slot category the name came from
            node: Node whose language is used as the last resort
            bold: Requested bold face
            italic: Requested italic face

        Returns:
            FontDescriptor or None
        """
        candidates: List[str] = []
        if name and name not in ILLEGAL_FONT_NAMES:
            candidates.append(name)
        if name in SLOT_PLACEHOLDERS:
            default_name = self._doc_default_slot(name)
            if default_name:
                name = default_name
                if default_name not in ILLEGAL_FONT_NAMES:
                    candidates.append(default_name)
        if name in THEME_PLACEHOLDERS:
            theme_name = self.theme.font_for_theme_name(name)
            if theme_name:
                candidates.append(theme_name)

        for candidate in candidates:
            descriptor = self._lookup(candidate, category, bold, italic)
            if descriptor is not None:
                return descriptor

        script_font = self.theme.font_for_script(script_tag_for_language(self._language(node, category)))
        if script_font:
            descriptor = self._lookup(script_font, category, bold, italic)
            if descriptor is not None:
                return descriptor

        if self.diagnostics is not None:
            self.diagnostics.warn(FONT_FALLBACK, f"no face found for font '{name or ''}'", node.id)
        return None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _select(
        self,
        node: DocumentNode,
        sources: Sequence[RunFonts],
        category: ScriptCategory,
        bold: bool,
        italic: bool,
    ) -> Optional[FontDescriptor]:
        name = None
        for fonts in sources:
            name = slot_name(fonts, category)
            if name:
                break
        if not name:
            name = next((fonts.hint for fonts in sources if fonts.hint), None)
        return self.font_by_name(name, category, node, bold, italic)

    def _lookup(self, name: str, category: ScriptCategory, bold: bool, italic: bool) -> Optional[FontDescriptor]:
        match = self.catalog.find(name, bold, italic)
        if match is None:
            return None
        logger.debug("Font '%s' -> %s (exact=%s)", name, match.face.path, match.exact_match)
        return FontDescriptor(
            name=match.face.family,
            path=match.face.path,
            category=category,
            exact_match=match.exact_match,
            bold=bold,
            italic=italic,
            face=match.face,
        )

    def _doc_default_slot(self, placeholder: str) -> Optional[str]:
        fonts = self.resolver.doc_default_value(RunFonts, RUN)
        category = {
            "eastAsia": ScriptCategory.EAST_ASIAN,
            "cs": ScriptCategory.COMPLEX_SCRIPT,
            "hAnsi": ScriptCategory.HIGH_ANSI,
            "ascii": ScriptCategory.ASCII,
        }[placeholder]
        return slot_name(fonts, category)

    def _language(self, node: DocumentNode, category: ScriptCategory) -> Optional[str]:
        languages = self.resolver.resolve(node, Languages)
        if languages is None:
            return None
        if category == ScriptCategory.EAST_ASIAN:
            return languages.east_asia
        if category == ScriptCategory.COMPLEX_SCRIPT:
            return languages.bidi
        return languages.value
