"""Geometry primitives and unit helpers for layout calculations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union


TWIPS_PER_POINT = 20
EMU_PER_POINT = 12700  # 914400 EMU per inch
PCT_BASE = 5000  # table widths in fiftieths of a percent


@dataclass(slots=True)
class Margins:
    top: float = 0.0
    bottom: float = 0.0
    left: float = 0.0
    right: float = 0.0

    @classmethod
    def uniform(cls, value: float) -> "Margins":
        return cls(value, value, value, value)


def twips_to_points(value: float | None) -> float:
    if value is None:
        return 0.0
    return float(value) / TWIPS_PER_POINT


def emu_to_points(value: float | None) -> float:
    if value is None:
        return 0.0
    return float(value) / EMU_PER_POINT


def px_to_points(value: float | None, dpi: float = 96.0) -> float:
    if value is None:
        return 0.0
    return float(value) * 72.0 / dpi


def eighths_to_points(value: float | None) -> float:
    """Border widths are stored in eighths of a point."""
    if value is None:
        return 0.0
    return float(value) / 8.0


def half_points_to_points(value: float | None) -> Optional[float]:
    if value is None:
        return None
    return float(value) / 2.0


def parse_percentage(value: Union[str, int, float, None]) -> float:
    """Convert a table percentage value to a ratio.

    ``"50%"`` becomes 0.5; a bare number is read as fiftieths of a percent,
    so ``2500`` also becomes 0.5.
    """
    if value is None:
        return 0.0
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("%"):
            try:
                return float(text[:-1]) / 100.0
            except ValueError:
                return 0.0
        try:
            value = float(text)
        except ValueError:
            return 0.0
    return float(value) / PCT_BASE
