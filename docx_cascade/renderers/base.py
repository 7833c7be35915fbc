"""Interface between the converter and whatever consumes its layout instructions."""

from __future__ import annotations

from typing import List, Protocol, runtime_checkable

from ..engine.instructions import Block, PageGeometry


@runtime_checkable
class LayoutSink(Protocol):
    """
    Receives resolved blocks in document order.

    ``begin_document`` is called once before any block and ``end_document``
    once after the header and footer have been set.
    """

    def begin_document(self, page: PageGeometry) -> None:
        ...

    def add_block(self, block: Block) -> None:
        ...

    def set_header(self, blocks: List[Block]) -> None:
        ...

    def set_footer(self, blocks: List[Block]) -> None:
        ...

    def end_document(self) -> None:
        ...
