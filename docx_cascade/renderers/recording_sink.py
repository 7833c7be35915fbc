"""In-memory sink that keeps every instruction it receives."""

from __future__ import annotations

from typing import Iterator, List, Optional

from ..engine.instructions import Block, PageGeometry, ParagraphLayout, TableLayout


class RecordingSink:
    """Collects blocks for inspection; used by tests and for dumping layouts."""

    def __init__(self) -> None:
        self.page: Optional[PageGeometry] = None
        self.blocks: List[Block] = []
        self.header: List[Block] = []
        self.footer: List[Block] = []
        self.finished = False

    def begin_document(self, page: PageGeometry) -> None:
        self.page = page
        self.blocks = []
        self.finished = False

    def add_block(self, block: Block) -> None:
        self.blocks.append(block)

    def set_header(self, blocks: List[Block]) -> None:
        self.header = list(blocks)

    def set_footer(self, blocks: List[Block]) -> None:
        self.footer = list(blocks)

    def end_document(self) -> None:
        self.finished = True

    @property
    def paragraphs(self) -> List[ParagraphLayout]:
        return [block for block in self.blocks if isinstance(block, ParagraphLayout)]

    @property
    def tables(self) -> List[TableLayout]:
        return [block for block in self.blocks if isinstance(block, TableLayout)]

    def texts(self) -> Iterator[str]:
        """Plain text of each top-level paragraph, numbering included."""
        for paragraph in self.paragraphs:
            yield "".join(chunk.text for chunk in paragraph.chunks if not chunk.is_break)
