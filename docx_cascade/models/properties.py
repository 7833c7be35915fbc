"""
Typed formatting properties.

Every property is a frozen dataclass whose fields default to ``None``; a
``None`` field is *absent* and may be filled from a less specific source by
:func:`merge_properties`. ``SECTIONS`` names the formatting sections
(``rPr``, ``pPr``, ``tblPr``, ``trPr``, ``tcPr``) where the property can be
declared; the first entry is the primary one.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import ClassVar, Dict, Iterable, Iterator, Optional, Sequence, Tuple, Type, TypeVar

RUN = "run"
PARAGRAPH = "paragraph"
TABLE = "table"
ROW = "row"
CELL = "cell"

SECTION_NAMES = (RUN, PARAGRAPH, TABLE, ROW, CELL)


@dataclass(frozen=True)
class Property:
    """Base class for all formatting properties."""

    SECTIONS: ClassVar[Tuple[str, ...]] = ()

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))


P = TypeVar("P", bound=Property)


def merge_properties(items: Sequence[P]) -> Optional[P]:
    """Merge partial results field by field.

    The first item is the most specific one; later items only fill fields
    that are still ``None``.
    """
    items = [item for item in items if item is not None]
    if not items:
        return None
    if len(items) == 1:
        return items[0]
    prop_type = type(items[0])
    values = {}
    for f in fields(prop_type):
        value = None
        for item in items:
            if not isinstance(item, prop_type):
                continue
            value = getattr(item, f.name)
            if value is not None:
                break
        values[f.name] = value
    return prop_type(**values)


class PropertySet:
    """Ordered, type-keyed collection of properties for one formatting section."""

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[Property] = ()) -> None:
        self._items: Dict[Type[Property], Property] = {}
        for item in items:
            self._items[type(item)] = item

    def get(self, prop_type: Type[P]) -> Optional[P]:
        return self._items.get(prop_type)  # type: ignore[return-value]

    def add(self, item: Property) -> None:
        self._items[type(item)] = item

    def __contains__(self, prop_type: object) -> bool:
        return prop_type in self._items

    def __iter__(self) -> Iterator[Property]:
        return iter(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __repr__(self) -> str:
        return f"PropertySet({list(self._items.values())!r})"


# ----------------------------------------------------------------------
# Shared value types
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class Border:
    """One border edge; ``size`` is in eighths of a point."""

    style: Optional[str] = None
    size: Optional[float] = None
    color: Optional[str] = None
    space: Optional[float] = None

    @property
    def is_nil(self) -> bool:
        return self.style in ("nil", "none")


@dataclass(frozen=True)
class Width:
    """A measurement with its unit: ``dxa`` (twips), ``pct``, ``auto`` or ``nil``."""

    value: Optional[object] = None
    unit: Optional[str] = None


# ----------------------------------------------------------------------
# Toggles
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class Toggle(Property):
    value: Optional[bool] = True


def is_on(toggle: Optional[Toggle]) -> bool:
    """True when a resolved toggle is present and switched on."""
    return toggle is not None and bool(toggle.value)


@dataclass(frozen=True)
class Bold(Toggle):
    SECTIONS = (RUN,)


@dataclass(frozen=True)
class Italic(Toggle):
    SECTIONS = (RUN,)


@dataclass(frozen=True)
class Caps(Toggle):
    SECTIONS = (RUN,)


@dataclass(frozen=True)
class Strike(Toggle):
    SECTIONS = (RUN,)


@dataclass(frozen=True)
class DoubleStrike(Toggle):
    SECTIONS = (RUN,)


@dataclass(frozen=True)
class Vanish(Toggle):
    SECTIONS = (RUN,)


@dataclass(frozen=True)
class ComplexScript(Toggle):
    SECTIONS = (RUN,)


@dataclass(frozen=True)
class RightToLeft(Toggle):
    SECTIONS = (RUN,)


@dataclass(frozen=True)
class ContextualSpacing(Toggle):
    SECTIONS = (PARAGRAPH,)


@dataclass(frozen=True)
class KeepLines(Toggle):
    SECTIONS = (PARAGRAPH,)


@dataclass(frozen=True)
class KeepNext(Toggle):
    SECTIONS = (PARAGRAPH,)


@dataclass(frozen=True)
class PageBreakBefore(Toggle):
    SECTIONS = (PARAGRAPH,)


@dataclass(frozen=True)
class AutoSpaceDE(Toggle):
    SECTIONS = (PARAGRAPH,)


@dataclass(frozen=True)
class AutoSpaceDN(Toggle):
    SECTIONS = (PARAGRAPH,)


@dataclass(frozen=True)
class CantSplit(Toggle):
    SECTIONS = (ROW,)


@dataclass(frozen=True)
class TableHeader(Toggle):
    SECTIONS = (ROW,)


# ----------------------------------------------------------------------
# Run properties
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class RunFonts(Property):
    SECTIONS = (RUN,)

    ascii: Optional[str] = None
    high_ansi: Optional[str] = None
    east_asia: Optional[str] = None
    complex_script: Optional[str] = None
    ascii_theme: Optional[str] = None
    high_ansi_theme: Optional[str] = None
    east_asia_theme: Optional[str] = None
    complex_script_theme: Optional[str] = None
    hint: Optional[str] = None


@dataclass(frozen=True)
class FontSize(Property):
    """Font size in half-points."""

    SECTIONS = (RUN,)

    value: Optional[float] = None


@dataclass(frozen=True)
class ComplexScriptFontSize(Property):
    SECTIONS = (RUN,)

    value: Optional[float] = None


@dataclass(frozen=True)
class Color(Property):
    SECTIONS = (RUN,)

    value: Optional[str] = None
    theme_color: Optional[str] = None


@dataclass(frozen=True)
class Underline(Property):
    SECTIONS = (RUN,)

    value: Optional[str] = None
    color: Optional[str] = None


@dataclass(frozen=True)
class VerticalAlign(Property):
    SECTIONS = (RUN,)

    value: Optional[str] = None


@dataclass(frozen=True)
class Languages(Property):
    SECTIONS = (RUN,)

    value: Optional[str] = None
    east_asia: Optional[str] = None
    bidi: Optional[str] = None


@dataclass(frozen=True)
class Shading(Property):
    SECTIONS = (RUN, PARAGRAPH, CELL, TABLE)

    fill: Optional[str] = None
    color: Optional[str] = None
    pattern: Optional[str] = None


# ----------------------------------------------------------------------
# Paragraph properties
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class Spacing(Property):
    """Paragraph spacing; lengths in twips, ``*_lines`` in hundredths of a line."""

    SECTIONS = (PARAGRAPH,)

    before: Optional[float] = None
    after: Optional[float] = None
    before_lines: Optional[float] = None
    after_lines: Optional[float] = None
    line: Optional[float] = None
    line_rule: Optional[str] = None


@dataclass(frozen=True)
class Indentation(Property):
    """Paragraph indentation; lengths in twips, ``*_chars`` in hundredths of a character."""

    SECTIONS = (PARAGRAPH,)

    left: Optional[float] = None
    right: Optional[float] = None
    start: Optional[float] = None
    end: Optional[float] = None
    left_chars: Optional[float] = None
    right_chars: Optional[float] = None
    start_chars: Optional[float] = None
    end_chars: Optional[float] = None
    hanging: Optional[float] = None
    hanging_chars: Optional[float] = None
    first_line: Optional[float] = None
    first_line_chars: Optional[float] = None


@dataclass(frozen=True)
class Justification(Property):
    SECTIONS = (PARAGRAPH,)

    value: Optional[str] = None


@dataclass(frozen=True)
class NumberingProperties(Property):
    SECTIONS = (PARAGRAPH,)

    num_id: Optional[int] = None
    level: Optional[int] = None


@dataclass(frozen=True)
class BorderSet(Property):
    top: Optional[Border] = None
    bottom: Optional[Border] = None
    left: Optional[Border] = None
    right: Optional[Border] = None
    inside_h: Optional[Border] = None
    inside_v: Optional[Border] = None
    tl2br: Optional[Border] = None
    tr2bl: Optional[Border] = None


@dataclass(frozen=True)
class ParagraphBorders(BorderSet):
    SECTIONS = (PARAGRAPH,)


# ----------------------------------------------------------------------
# Table, row and cell properties
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class TableBorders(BorderSet):
    SECTIONS = (TABLE,)


@dataclass(frozen=True)
class CellBorders(BorderSet):
    SECTIONS = (CELL,)


@dataclass(frozen=True)
class TableWidth(Width, Property):
    SECTIONS = (TABLE,)


@dataclass(frozen=True)
class TableIndentation(Width, Property):
    SECTIONS = (TABLE,)


@dataclass(frozen=True)
class TableJustification(Property):
    SECTIONS = (TABLE,)

    value: Optional[str] = None


@dataclass(frozen=True)
class TableLayoutType(Property):
    SECTIONS = (TABLE,)

    value: Optional[str] = None


@dataclass(frozen=True)
class CellMargins(Property):
    """Cell padding; declared per cell (``tcMar``) or per table (``tblCellMar``)."""

    SECTIONS = (CELL, TABLE)

    top: Optional[Width] = None
    bottom: Optional[Width] = None
    left: Optional[Width] = None
    right: Optional[Width] = None


@dataclass(frozen=True)
class RowHeight(Property):
    SECTIONS = (ROW,)

    value: Optional[float] = None
    rule: Optional[str] = None


@dataclass(frozen=True)
class GridBefore(Property):
    SECTIONS = (ROW,)

    value: Optional[int] = None


@dataclass(frozen=True)
class GridAfter(Property):
    SECTIONS = (ROW,)

    value: Optional[int] = None


@dataclass(frozen=True)
class WidthBefore(Width, Property):
    SECTIONS = (ROW,)


@dataclass(frozen=True)
class WidthAfter(Width, Property):
    SECTIONS = (ROW,)


@dataclass(frozen=True)
class CellWidth(Width, Property):
    SECTIONS = (CELL,)


@dataclass(frozen=True)
class GridSpan(Property):
    SECTIONS = (CELL,)

    value: Optional[int] = None


@dataclass(frozen=True)
class VerticalMerge(Property):
    """``restart`` starts a merged region; ``continue`` (or no value) extends it."""

    SECTIONS = (CELL,)

    value: Optional[str] = None


@dataclass(frozen=True)
class CellVerticalAlignment(Property):
    SECTIONS = (CELL,)

    value: Optional[str] = None
