"""
Document loader for DOCX packages.

Reads the main document part together with styles, numbering, theme,
settings and the default header/footer parts, and builds the node tree
described in :mod:`docx_cascade.models.document`.
"""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional, Union

from ..exceptions import ParsingError
from ..models.document import (
    Body,
    Break,
    Document,
    DocumentNode,
    DocumentSettings,
    Drawing,
    HeaderFooter,
    Hyperlink,
    Paragraph,
    Run,
    SectionLayout,
    SimpleField,
    Symbol,
    Tab,
    Table,
    TableCell,
    TableRow,
    Text,
)
from .numbering_parser import NumberingParser
from .package_reader import MAIN_DOCUMENT, PackageReader
from .properties_parser import (
    attr,
    child,
    number,
    parse_cell_properties,
    parse_paragraph_properties,
    parse_row_properties,
    parse_run_properties,
    parse_table_properties,
    w,
)
from .style_parser import StyleParser
from .theme_parser import ThemeParser

logger = logging.getLogger(__name__)

R_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
NS = {
    "w": "http://schemas.openxmlformats.org/wordprocessingml/2006/main",
    "wp": "http://schemas.openxmlformats.org/drawingml/2006/wordprocessingDrawing",
    "a": "http://schemas.openxmlformats.org/drawingml/2006/main",
    "pic": "http://schemas.openxmlformats.org/drawingml/2006/picture",
}

OFFICE_DOCUMENT_REL = "/officeDocument"
SETTINGS_PATH = "word/settings.xml"

# containers whose children are laid out as if they were inline in the parent
TRANSPARENT_INLINE = ("ins", "smartTag", "customXml", "bdo", "dir")
TRANSPARENT_BLOCK = ("customXml", "ins")


def _local(tag: str) -> str:
    return tag.split("}", 1)[1] if "}" in tag else tag


def _r(name: str) -> str:
    return f"{{{R_NS}}}{name}"


class DocxLoader:
    """
    Loads a DOCX package into a :class:`Document`.

    The loader owns its :class:`PackageReader` and closes it once
    :meth:`load` returns.
    """

    def __init__(self, source: Union[str, Path, bytes, BinaryIO]):
        self.source = source
        self.package_reader: Optional[PackageReader] = None
        self._part = MAIN_DOCUMENT

    def load(self) -> Document:
        """
        Parse the package.

        Returns:
            Document tree with styles, numbering, theme and page setup

        Raises:
            FileNotFoundError: The path does not exist
            ParsingError: The package or its main document part is unreadable
        """
        with PackageReader(self.source) as reader:
            self.package_reader = reader
            main_part = reader.target_of_type(OFFICE_DOCUMENT_REL, "") or MAIN_DOCUMENT
            content = reader.get_xml_if_exists(main_part)
            if content is None:
                raise ParsingError("Main document part missing", main_part)
            try:
                root = ET.fromstring(content)
            except ET.ParseError as exc:
                raise ParsingError("Malformed main document part", str(exc)) from exc

            theme_part = reader.target_of_type("/theme", main_part) or ThemeParser.THEME_PATH
            document = Document(
                styles=StyleParser(reader).parse_styles(),
                numbering=NumberingParser(reader).parse_numbering(),
                theme=ThemeParser(reader, theme_part).parse_theme(),
                settings=self.parse_settings(),
            )

            self._part = main_part
            body_element = child(root, "body")
            if body_element is not None:
                document.body = self.parse_body(body_element)
                section = child(body_element, "sectPr")
                if section is not None:
                    document.section = self.parse_section(section)

            document.headers = self._load_header_footers(document.section.header_refs, "header", main_part)
            document.footers = self._load_header_footers(document.section.footer_refs, "footer", main_part)
        self.package_reader = None
        logger.info(
            "Loaded document with %d top-level blocks", len(document.body.children)
        )
        return document

    # ------------------------------------------------------------------
    # Settings and sections
    # ------------------------------------------------------------------
    def parse_settings(self) -> DocumentSettings:
        settings = DocumentSettings()
        content = self.package_reader.get_xml_if_exists(SETTINGS_PATH)
        if not content:
            return settings
        try:
            root = ET.fromstring(content)
        except ET.ParseError as exc:
            logger.error("Failed to parse settings: %s", exc)
            return settings
        settings.default_tab_stop = number(attr(child(root, "defaultTabStop"), "val"))
        return settings

    def parse_section(self, sect_pr: ET.Element) -> SectionLayout:
        """
        Parse page size, margins and header/footer references of a ``w:sectPr``.

        Args:
            sect_pr: Section properties element

        Returns:
            SectionLayout with Word's defaults for anything absent
        """
        section = SectionLayout()
        page_size = child(sect_pr, "pgSz")
        if page_size is not None:
            section.page_width = number(attr(page_size, "w")) or section.page_width
            section.page_height = number(attr(page_size, "h")) or section.page_height
            section.orientation = attr(page_size, "orient") or "portrait"
        margins = child(sect_pr, "pgMar")
        if margins is not None:
            for side in ("top", "bottom", "left", "right"):
                value = number(attr(margins, side))
                if value is not None:
                    setattr(section, f"margin_{side}", abs(value))
            header = number(attr(margins, "header"))
            footer = number(attr(margins, "footer"))
            if header is not None:
                section.header_distance = header
            if footer is not None:
                section.footer_distance = footer
        for reference in sect_pr.findall(w("headerReference")):
            section.header_refs[attr(reference, "type") or "default"] = reference.get(_r("id"), "")
        for reference in sect_pr.findall(w("footerReference")):
            section.footer_refs[attr(reference, "type") or "default"] = reference.get(_r("id"), "")
        return section

    def _load_header_footers(self, references: Dict[str, str], part: str, main_part: str) -> Dict[str, HeaderFooter]:
        relationships = self.package_reader.get_relationships(main_part)
        loaded: Dict[str, HeaderFooter] = {}
        for variant, rel_id in references.items():
            entry = relationships.get(rel_id)
            if entry is None:
                logger.warning("Missing %s relationship %s", part, rel_id)
                continue
            content = self.package_reader.get_xml_if_exists(entry["target"])
            if not content:
                logger.warning("Missing %s part %s", part, entry["target"])
                continue
            try:
                root = ET.fromstring(content)
            except ET.ParseError as exc:
                logger.error("Failed to parse %s %s: %s", part, entry["target"], exc)
                continue
            self._part = entry["target"]
            container = HeaderFooter(part=part, variant=variant)
            for block in self.parse_blocks(root):
                container.add_child(block)
            loaded[variant] = container
        self._part = main_part
        return loaded

    # ------------------------------------------------------------------
    # Block content
    # ------------------------------------------------------------------
    def parse_body(self, body_element: ET.Element) -> Body:
        body = Body()
        for block in self.parse_blocks(body_element):
            body.add_child(block)
        return body

    def parse_blocks(self, container: ET.Element) -> List[DocumentNode]:
        blocks: List[DocumentNode] = []
        for element in container:
            tag = _local(element.tag)
            if tag == "p":
                blocks.append(self.parse_paragraph(element))
            elif tag == "tbl":
                blocks.append(self.parse_table(element))
            elif tag == "sdt":
                content = child(element, "sdtContent")
                if content is not None:
                    blocks.extend(self.parse_blocks(content))
            elif tag in TRANSPARENT_BLOCK:
                blocks.extend(self.parse_blocks(element))
        return blocks

    def parse_paragraph(self, p_element: ET.Element) -> Paragraph:
        properties, style_id, mark_properties = parse_paragraph_properties(child(p_element, "pPr"))
        paragraph = Paragraph(style_id=style_id, properties=properties, run_properties=mark_properties)
        for node in self.parse_inline(p_element):
            paragraph.add_child(node)
        return paragraph

    def parse_table(self, tbl_element: ET.Element) -> Table:
        properties, style_id = parse_table_properties(child(tbl_element, "tblPr"))
        grid_element = child(tbl_element, "tblGrid")
        grid = []
        if grid_element is not None:
            grid = [number(attr(col, "w")) or 0.0 for col in grid_element.findall(w("gridCol"))]
        table = Table(style_id=style_id, properties=properties, grid=grid)
        for row_element in self._iter_rows(tbl_element):
            row = table.add_child(TableRow(parse_row_properties(child(row_element, "trPr"))))
            for cell_element in self._iter_cells(row_element):
                cell = row.add_child(TableCell(parse_cell_properties(child(cell_element, "tcPr"))))
                for block in self.parse_blocks(cell_element):
                    cell.add_child(block)
        return table

    def _iter_rows(self, tbl_element: ET.Element):
        for element in tbl_element:
            tag = _local(element.tag)
            if tag == "tr":
                yield element
            elif tag == "sdt" and child(element, "sdtContent") is not None:
                yield from self._iter_rows(child(element, "sdtContent"))

    def _iter_cells(self, tr_element: ET.Element):
        for element in tr_element:
            tag = _local(element.tag)
            if tag == "tc":
                yield element
            elif tag == "sdt" and child(element, "sdtContent") is not None:
                yield from self._iter_cells(child(element, "sdtContent"))

    # ------------------------------------------------------------------
    # Inline content
    # ------------------------------------------------------------------
    def parse_inline(self, container: ET.Element) -> List[DocumentNode]:
        nodes: List[DocumentNode] = []
        for element in container:
            tag = _local(element.tag)
            if tag == "r":
                nodes.append(self.parse_run(element))
            elif tag == "hyperlink":
                nodes.append(self.parse_hyperlink(element))
            elif tag == "fldSimple":
                nodes.append(SimpleField(attr(element, "instr") or "", self.parse_inline(element)))
            elif tag == "sdt":
                content = child(element, "sdtContent")
                if content is not None:
                    nodes.extend(self.parse_inline(content))
            elif tag in TRANSPARENT_INLINE:
                nodes.extend(self.parse_inline(element))
        return nodes

    def parse_hyperlink(self, element: ET.Element) -> Hyperlink:
        target = None
        rel_id = element.get(_r("id"))
        if rel_id:
            entry = self.package_reader.get_relationships(self._part).get(rel_id)
            if entry is not None:
                target = entry["target"]
        return Hyperlink(self.parse_inline(element), target=target, anchor=attr(element, "anchor"))

    def parse_run(self, r_element: ET.Element) -> Run:
        rpr = child(r_element, "rPr")
        run = Run(style_id=attr(child(rpr, "rStyle"), "val"), properties=parse_run_properties(rpr))
        for element in r_element:
            tag = _local(element.tag)
            if tag == "t":
                run.content.append(Text(element.text or ""))
            elif tag == "tab":
                run.content.append(Tab())
            elif tag == "br":
                run.content.append(Break(attr(element, "type") or "textWrapping"))
            elif tag == "cr":
                run.content.append(Break())
            elif tag == "noBreakHyphen":
                run.content.append(Text("\u2011"))
            elif tag == "sym":
                symbol = self._parse_symbol(element)
                if symbol is not None:
                    run.content.append(symbol)
            elif tag == "drawing":
                drawing = self.parse_drawing(element)
                if drawing is not None:
                    run.content.append(drawing)
        return run

    def _parse_symbol(self, element: ET.Element) -> Optional[Symbol]:
        code = attr(element, "char")
        if not code:
            return None
        try:
            value = int(code, 16)
        except ValueError:
            logger.warning("Invalid symbol character code: %s", code)
            return None
        return Symbol(font=attr(element, "font"), char=chr(value))

    def parse_drawing(self, drawing_element: ET.Element) -> Optional[Drawing]:
        """
        Parse an inline or anchored picture.

        Args:
            drawing_element: ``w:drawing`` element

        Returns:
            Drawing with the embedded media bytes, or None for non-picture
            drawings and broken references
        """
        blip = drawing_element.find(".//a:blip", NS)
        if blip is None:
            return None
        rel_id = blip.get(_r("embed"))
        entry = self.package_reader.get_relationships(self._part).get(rel_id or "")
        if entry is None or "target_mode" in entry:
            logger.warning("Unresolved image relationship %s in %s", rel_id, self._part)
            return None
        data = self.package_reader.get_binary_content(entry["target"])
        if data is None:
            return None

        width = height = None
        extent = drawing_element.find(".//wp:extent", NS)
        if extent is not None:
            width = _emu(extent.get("cx"))
            height = _emu(extent.get("cy"))
        properties = drawing_element.find(".//wp:docPr", NS)
        return Drawing(
            data=data,
            width_emu=width,
            height_emu=height,
            name=properties.get("name", "") if properties is not None else "",
            content_type=self.package_reader.content_type_for(entry["target"]) or "",
        )


def _emu(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def load_document(source: Union[str, Path, bytes, BinaryIO]) -> Document:
    """Load a DOCX file, its bytes or a binary stream into a :class:`Document`."""
    return DocxLoader(source).load()
