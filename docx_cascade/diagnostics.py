"""Soft conversion warnings collected while resolving layout values."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional

logger = logging.getLogger(__name__)

STYLE_CHAIN = "style-chain"
MISSING_STYLE = "missing-style"
MISSING_NUMBERING = "missing-numbering"
FONT_FALLBACK = "font-fallback"
TABLE_STRUCTURE = "table-structure"
IMAGE = "image"


@dataclass(frozen=True, slots=True)
class ConversionWarning:
    code: str
    message: str
    node_id: Optional[int] = None


class Diagnostics:
    """Collects warnings once per (code, message, node)."""

    def __init__(self) -> None:
        self._items: List[ConversionWarning] = []
        self._seen: set = set()

    def warn(self, code: str, message: str, node_id: Optional[int] = None) -> None:
        item = ConversionWarning(code, message, node_id)
        if item in self._seen:
            return
        self._seen.add(item)
        self._items.append(item)
        logger.debug("%s: %s", code, message)

    def codes(self) -> List[str]:
        return [item.code for item in self._items]

    def __iter__(self) -> Iterator[ConversionWarning]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)
