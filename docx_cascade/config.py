"""Conversion options shared by the converter, font catalog and sinks."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping, Tuple

DEFAULT_FONT_DIRS: Tuple[Path, ...] = (
    Path("/usr/share/fonts"),
    Path("/usr/local/share/fonts"),
    Path.home() / ".fonts",
    Path.home() / ".local/share/fonts",
    Path("C:/Windows/Fonts"),
    Path("/System/Library/Fonts"),
    Path("/Library/Fonts"),
)


@dataclass(slots=True)
class ConversionOptions:
    """Tunable defaults used while resolving layout values."""

    default_font_size: float = 11.0
    numbering_font_size: float = 12.0
    indent_font_size: float = 12.0
    empty_paragraph_size: float = 16.0
    line_spacing_factor: float = 1.15
    auto_space_factor: float = 0.875
    default_tab_stop: int = 720  # twips
    max_style_depth: int = 32
    fallback_font: str = "Helvetica"
    font_dirs: Tuple[Path, ...] = field(default_factory=lambda: DEFAULT_FONT_DIRS)
    embed_fonts: bool = True
    cell_spacing_before: float = 5.0
    cell_leading: float = 0.9

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "ConversionOptions":
        """Build options from a plain mapping, ignoring unknown keys.

        Args:
            values: Mapping with option names as keys

        Returns:
            ConversionOptions instance
        """
        known = {f.name for f in fields(cls)}
        kwargs = {key: value for key, value in values.items() if key in known}
        if "font_dirs" in kwargs:
            kwargs["font_dirs"] = tuple(Path(p) for p in kwargs["font_dirs"])
        return cls(**kwargs)
