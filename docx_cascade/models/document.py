"""
Document node tree.

Nodes are built once by the loader and only read during conversion. Every
node knows its parent, so resolvers can navigate to the enclosing paragraph,
cell or table; styles and numbering definitions are looked up by id.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import ClassVar, Dict, Iterator, List, Optional, Type, TypeVar

from .numbering import NumberingDefinitions
from .properties import PropertySet
from .styles import StyleSheet
from .theme import Theme

_ids = itertools.count(1)

N = TypeVar("N", bound="DocumentNode")


class DocumentNode:
    """Base class for all tree nodes."""

    kind: ClassVar[str] = "node"

    def __init__(self, properties: Optional[PropertySet] = None, children: Optional[List["DocumentNode"]] = None):
        self.id = next(_ids)
        self.parent: Optional[DocumentNode] = None
        self.properties = properties if properties is not None else PropertySet()
        self.children: List[DocumentNode] = []
        for child in children or []:
            self.add_child(child)

    def add_child(self, child: N) -> N:
        child.parent = self
        self.children.append(child)
        return child

    def iter_children(self, node_type: Optional[Type[N]] = None) -> Iterator[N]:
        for child in self.children:
            if node_type is None or isinstance(child, node_type):
                yield child  # type: ignore[misc]

    def iter_descendants(self, node_type: Optional[Type[N]] = None) -> Iterator[N]:
        for child in self.children:
            if node_type is None or isinstance(child, node_type):
                yield child  # type: ignore[misc]
            yield from child.iter_descendants(node_type)

    def find_ancestor(self, node_type: Type[N]) -> Optional[N]:
        node = self.parent
        while node is not None:
            if isinstance(node, node_type):
                return node
            node = node.parent
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id})"


# ----------------------------------------------------------------------
# Run content
# ----------------------------------------------------------------------


@dataclass(slots=True)
class Text:
    value: str


@dataclass(slots=True)
class Tab:
    pass


@dataclass(slots=True)
class Break:
    """``textWrapping`` (line), ``page`` or ``column``."""

    kind: str = "textWrapping"


@dataclass(slots=True)
class Symbol:
    font: Optional[str]
    char: str


@dataclass(slots=True)
class Drawing:
    """Inline picture; extents are in EMU."""

    data: bytes
    width_emu: Optional[int] = None
    height_emu: Optional[int] = None
    name: str = ""
    content_type: str = ""


# ----------------------------------------------------------------------
# Inline nodes
# ----------------------------------------------------------------------


class Run(DocumentNode):
    kind = "run"

    def __init__(self, content: Optional[list] = None, style_id: Optional[str] = None, properties: Optional[PropertySet] = None):
        super().__init__(properties)
        self.style_id = style_id
        self.content: list = list(content or [])

    @property
    def text(self) -> str:
        parts = []
        for item in self.content:
            if isinstance(item, Text):
                parts.append(item.value)
            elif isinstance(item, Tab):
                parts.append("\t")
            elif isinstance(item, Break):
                parts.append("\n")
            elif isinstance(item, Symbol):
                parts.append(item.char)
        return "".join(parts)


class Hyperlink(DocumentNode):
    kind = "hyperlink"

    def __init__(self, children: Optional[List[DocumentNode]] = None, target: Optional[str] = None, anchor: Optional[str] = None):
        super().__init__(children=children)
        self.target = target
        self.anchor = anchor

    @property
    def url(self) -> Optional[str]:
        """Link address; an anchor is appended as a fragment."""
        if self.target and self.anchor:
            return f"{self.target}#{self.anchor}"
        if self.anchor:
            return f"#{self.anchor}"
        return self.target


class SimpleField(DocumentNode):
    """A ``fldSimple`` element; its cached result runs are rendered verbatim."""

    kind = "field"

    def __init__(self, instruction: str = "", children: Optional[List[DocumentNode]] = None):
        super().__init__(children=children)
        self.instruction = instruction


# ----------------------------------------------------------------------
# Block nodes
# ----------------------------------------------------------------------


class Paragraph(DocumentNode):
    kind = "paragraph"

    def __init__(
        self,
        children: Optional[List[DocumentNode]] = None,
        style_id: Optional[str] = None,
        properties: Optional[PropertySet] = None,
        run_properties: Optional[PropertySet] = None,
    ):
        super().__init__(properties, children)
        self.style_id = style_id
        self.run_properties = run_properties if run_properties is not None else PropertySet()

    def iter_runs(self) -> Iterator[Run]:
        """Runs in reading order, including runs nested in hyperlinks and fields."""
        for child in self.children:
            if isinstance(child, Run):
                yield child
            elif isinstance(child, (Hyperlink, SimpleField)):
                yield from child.iter_descendants(Run)

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.iter_runs())


class TableCell(DocumentNode):
    kind = "cell"

    @property
    def row(self) -> Optional["TableRow"]:
        return self.parent if isinstance(self.parent, TableRow) else None

    @property
    def table(self) -> Optional["Table"]:
        return self.find_ancestor(Table)


class TableRow(DocumentNode):
    kind = "row"

    @property
    def cells(self) -> List[TableCell]:
        return list(self.iter_children(TableCell))

    @property
    def table(self) -> Optional["Table"]:
        return self.parent if isinstance(self.parent, Table) else None


class Table(DocumentNode):
    kind = "table"

    def __init__(
        self,
        children: Optional[List[DocumentNode]] = None,
        style_id: Optional[str] = None,
        properties: Optional[PropertySet] = None,
        grid: Optional[List[float]] = None,
    ):
        super().__init__(properties, children)
        self.style_id = style_id
        # column widths in twips from tblGrid
        self.grid: List[float] = list(grid or [])

    @property
    def rows(self) -> List[TableRow]:
        return list(self.iter_children(TableRow))


class Body(DocumentNode):
    kind = "body"


class HeaderFooter(DocumentNode):
    kind = "header_footer"

    def __init__(self, part: str = "header", variant: str = "default", children: Optional[List[DocumentNode]] = None):
        super().__init__(children=children)
        self.part = part
        self.variant = variant


# ----------------------------------------------------------------------
# Document
# ----------------------------------------------------------------------


@dataclass
class SectionLayout:
    """Page geometry from ``sectPr``; all values in twips."""

    page_width: float = 11906
    page_height: float = 16838
    margin_top: float = 1440
    margin_bottom: float = 1440
    margin_left: float = 1440
    margin_right: float = 1440
    header_distance: float = 708
    footer_distance: float = 708
    orientation: str = "portrait"
    header_refs: Dict[str, str] = field(default_factory=dict)
    footer_refs: Dict[str, str] = field(default_factory=dict)

    @property
    def printable_width(self) -> float:
        """Printable width in points."""
        return (self.page_width - self.margin_left - self.margin_right) / 20.0


@dataclass
class DocumentSettings:
    default_tab_stop: Optional[float] = None


@dataclass
class Document:
    body: Body = field(default_factory=Body)
    styles: StyleSheet = field(default_factory=StyleSheet)
    numbering: NumberingDefinitions = field(default_factory=NumberingDefinitions)
    theme: Theme = field(default_factory=Theme)
    section: SectionLayout = field(default_factory=SectionLayout)
    settings: DocumentSettings = field(default_factory=DocumentSettings)
    headers: Dict[str, HeaderFooter] = field(default_factory=dict)
    footers: Dict[str, HeaderFooter] = field(default_factory=dict)
