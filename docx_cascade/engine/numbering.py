"""
List numbering: per-list counters and numeral rendering.

Counters are keyed by abstract numbering id and level. Advancing a level
increments it, reads the shallower levels unchanged and restarts every
deeper level. The counter object is owned by one conversion run and must
see paragraphs in document order.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Set, Tuple

from ..diagnostics import MISSING_NUMBERING, Diagnostics
from ..models.document import Paragraph
from ..models.numbering import AbstractNumbering, Level, NumberingDefinitions
from ..models.properties import NumberingProperties
from ..styles.cascade import StyleCascadeResolver

logger = logging.getLogger(__name__)

ROMAN_NUMERALS = (
    ("", "I", "II", "III", "IV", "V", "VI", "VII", "VIII", "IX"),
    ("", "X", "XX", "XXX", "XL", "L", "LX", "LXX", "LXXX", "XC"),
    ("", "C", "CC", "CCC", "CD", "D", "DC", "DCC", "DCCC", "CM"),
    ("", "M", "MM", "MMM"),
)

TAIWANESE_NUMERALS = (
    ("", "一", "二", "三", "四", "五", "六", "七", "八", "九"),
    ("零", "一十", "二十", "三十", "四十", "五十", "六十", "七十", "八十", "九十"),
    ("零", "一百", "二百", "三百", "四百", "五百", "六百", "七百", "八百", "九百"),
    ("零", "一千", "二千", "三千", "四千", "五千", "六千", "七千", "八千", "九千"),
)

IDEOGRAPH_DIGITS = "〇一二三四五六七八九"

# Symbol-font private use bullets and their Unicode look-alikes
BULLET_GLYPHS = {
    "\uf0b7": "\u2022",
    "\uf0a7": "\u25aa",
    "\uf0d8": "\u27a2",
    "\uf0fc": "\u2713",
    "\uf076": "\u2756",
    "\uf06f": "o",
}

_PLACEHOLDER = re.compile(r"%([1-9])")


# ----------------------------------------------------------------------
# Numeral systems
# ----------------------------------------------------------------------


def _place_values(numerals: Sequence[Sequence[str]], number: int, skip_trailing_zeros: bool) -> str:
    digits = str(number)[::-1]
    end = 0
    if skip_trailing_zeros:
        while end < len(digits) - 1 and digits[end] == "0":
            end += 1
    return "".join(numerals[i][int(digits[i])] for i in range(len(digits) - 1, end - 1, -1))


def to_roman(number: int, upper: bool = True) -> str:
    if number <= 0 or number >= 4000:
        return str(number)
    text = _place_values(ROMAN_NUMERALS, number, False)
    return text if upper else text.lower()


def to_taiwanese(number: int, counting: bool = False) -> str:
    """Chinese counting numerals (一十, 一百零一, ...).

    With ``counting`` the leading 一 of 10-19 is dropped (十一 instead of 一十一).
    """
    if number <= 0 or number >= 10000:
        return str(number)
    text = _place_values(TAIWANESE_NUMERALS, number, True)
    text = re.sub("零+", "零", text)
    if counting and 10 <= number < 20:
        text = text[1:]
    return text


def to_letters(number: int, upper: bool = True) -> str:
    """Word letter numbering: A..Z, AA..ZZ, AAA..."""
    if number <= 0:
        return ""
    letter = chr(ord("A" if upper else "a") + (number - 1) % 26)
    return letter * ((number - 1) // 26 + 1)


def to_ordinal(number: int) -> str:
    if 10 <= number % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")
    return f"{number}{suffix}"


def format_number(value: int, number_format: Optional[str]) -> str:
    """
    Render one counter value in a numeral system.

    Args:
        value: Counter value
        number_format: ``w:numFmt`` value

    Returns:
        Rendered numeral; unknown formats render as decimal
    """
    fmt = number_format or "decimal"
    if fmt == "none":
        return ""
    if fmt == "decimalZero":
        return f"{value:02d}" if 0 <= value < 10 else str(value)
    if fmt == "upperRoman":
        return to_roman(value, True)
    if fmt == "lowerRoman":
        return to_roman(value, False)
    if fmt == "upperLetter":
        return to_letters(value, True)
    if fmt == "lowerLetter":
        return to_letters(value, False)
    if fmt in ("taiwaneseCountingThousand", "chineseCountingThousand"):
        return to_taiwanese(value)
    if fmt in ("taiwaneseCounting", "chineseCounting", "japaneseCounting"):
        return to_taiwanese(value, counting=True)
    if fmt in ("ideographDigital", "taiwaneseDigital"):
        return "".join(IDEOGRAPH_DIGITS[int(d)] for d in str(value)) if value >= 0 else str(value)
    if fmt == "decimalFullWidth":
        return "".join(chr(ord(d) + 0xFEE0) for d in str(value)) if value >= 0 else str(value)
    if fmt == "ordinal":
        return to_ordinal(value)
    return str(value)


def render_level_text(
    template: str,
    values: Sequence[int],
    number_format: Optional[str],
    level_formats: Optional[Dict[int, str]] = None,
) -> str:
    """
    Substitute ``%1``..``%9`` in a level text template.

    Args:
        template: ``w:lvlText`` value
        values: Counter values for levels 0..n
        number_format: Format of the level being rendered
        level_formats: Optional per-level formats for the referenced levels

    Returns:
        Rendered prefix; ``bullet`` templates are returned unmodified
    """
    if number_format == "bullet":
        return template

    def substitute(match: "re.Match[str]") -> str:
        index = int(match.group(1)) - 1
        if index >= len(values):
            return ""
        fmt = number_format
        if level_formats and index in level_formats and index != len(values) - 1:
            fmt = level_formats[index]
        return format_number(values[index], fmt)

    return _PLACEHOLDER.sub(substitute, template)


# ----------------------------------------------------------------------
# Counter state
# ----------------------------------------------------------------------


class LevelCounter:
    """Current value of one list level; ``None`` until first advanced."""

    __slots__ = ("start", "current")

    def __init__(self, start: int = 1):
        self.start = start
        self.current: Optional[int] = None

    @property
    def value(self) -> int:
        return self.current if self.current is not None else self.start

    def advance(self) -> int:
        self.current = self.start if self.current is None else self.current + 1
        return self.current

    def restart(self) -> None:
        self.current = None


class NumberingCounter:
    """Counters keyed by (abstractNumId, level)."""

    def __init__(self) -> None:
        self._lists: Dict[int, Dict[int, LevelCounter]] = {}

    @classmethod
    def from_definitions(cls, definitions: NumberingDefinitions) -> "NumberingCounter":
        counter = cls()
        for abstract in definitions.abstracts.values():
            counter.define(abstract)
        return counter

    def define(self, abstract: AbstractNumbering) -> None:
        for level in abstract.levels.values():
            self.set_start(abstract.abstract_id, level.level, level.start if level.start is not None else 1)

    def set_start(self, abstract_id: int, level: int, value: int) -> None:
        """Configure a level's first value; negative values are ignored."""
        if value < 0:
            return
        levels = self._lists.setdefault(abstract_id, {})
        counter = levels.get(level)
        if counter is None:
            levels[level] = LevelCounter(value)
        else:
            counter.start = value

    def restart(self, abstract_id: int, level: int, start: Optional[int] = None) -> None:
        counter = self._lists.get(abstract_id, {}).get(level)
        if counter is None:
            return
        if start is not None and start >= 0:
            counter.start = start
        counter.restart()

    def current(self, abstract_id: int, level: int) -> Optional[int]:
        counter = self._lists.get(abstract_id, {}).get(level)
        return counter.value if counter is not None else None

    def advance(self, abstract_id: int, level: int) -> List[int]:
        """
        Advance a level and return the values of levels 0..level.

        Shallower levels are read without changing them; every defined level
        deeper than ``level`` is restarted. An undefined level returns the
        values of the shallower levels only.
        """
        levels = self._lists.get(abstract_id)
        if not levels:
            return []
        values = [levels[i].value if i in levels else 0 for i in range(level)]
        counter = levels.get(level)
        if counter is None:
            return values
        values.append(counter.advance())
        for deeper, deeper_counter in levels.items():
            if deeper > level:
                deeper_counter.restart()
        return values


# ----------------------------------------------------------------------
# Paragraph numbering
# ----------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class NumberingResult:
    text: str
    level: Level
    abstract_id: int
    num_id: int
    values: Tuple[int, ...]


class ParagraphNumbering:
    """Finds the list level of a paragraph and renders its prefix."""

    def __init__(
        self,
        definitions: NumberingDefinitions,
        resolver: StyleCascadeResolver,
        counter: Optional[NumberingCounter] = None,
        diagnostics: Optional[Diagnostics] = None,
    ):
        self.definitions = definitions
        self.resolver = resolver
        self.counter = counter or NumberingCounter.from_definitions(definitions)
        self.diagnostics = diagnostics
        self._seen_instances: Set[int] = set()

    def level_for(self, paragraph: Paragraph) -> Optional[Tuple[int, Level]]:
        """
        Resolve the list level referenced by a paragraph.

        Returns:
            (numId, Level) or None when the paragraph is not numbered
        """
        num_pr = self.resolver.resolve(paragraph, NumberingProperties)
        if num_pr is None or num_pr.num_id is None or num_pr.num_id <= 0:
            return None
        abstract = self.definitions.abstract_for(num_pr.num_id)
        if abstract is None:
            if self.diagnostics is not None:
                self.diagnostics.warn(MISSING_NUMBERING, f"numbering {num_pr.num_id} is not defined", paragraph.id)
            return None

        ilvl = num_pr.level
        if ilvl is None:
            ilvl = 0
            for level in abstract.levels.values():
                if level.paragraph_style and level.paragraph_style == paragraph.style_id:
                    ilvl = level.level
                    break
        level = self.definitions.level(num_pr.num_id, ilvl)
        if level is None:
            return None
        return num_pr.num_id, level

    def number(self, paragraph: Paragraph) -> Optional[NumberingResult]:
        """Advance the paragraph's list counter and render its prefix."""
        found = self.level_for(paragraph)
        if found is None:
            return None
        num_id, level = found
        instance = self.definitions.instance(num_id)
        abstract_id = instance.abstract_id  # type: ignore[union-attr]
        self._apply_start_overrides(num_id)

        if level.number_format == "bullet":
            text = "".join(BULLET_GLYPHS.get(ch, ch) for ch in level.level_text)
            return NumberingResult(text, level, abstract_id, num_id, ())

        values = self.counter.advance(abstract_id, level.level)
        abstract = self.definitions.abstracts.get(abstract_id)
        level_formats = {}
        if abstract is not None:
            level_formats = {index: lvl.number_format for index, lvl in abstract.levels.items()}
        text = render_level_text(level.level_text, values, level.number_format, level_formats)
        logger.debug("Numbering %s/%s -> %r", abstract_id, level.level, text)
        return NumberingResult(text, level, abstract_id, num_id, tuple(values))

    def _apply_start_overrides(self, num_id: int) -> None:
        if num_id in self._seen_instances:
            return
        self._seen_instances.add(num_id)
        instance = self.definitions.instance(num_id)
        if instance is None:
            return
        for override in instance.overrides.values():
            start = override.start_override
            if start is None and override.replacement is not None:
                start = override.replacement.start
            if start is not None:
                self.counter.restart(instance.abstract_id, override.level, start)
