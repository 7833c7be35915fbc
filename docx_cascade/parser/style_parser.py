"""
Style parser for DOCX documents.

Builds a :class:`StyleSheet` from ``word/styles.xml``.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Optional

from ..models.styles import DocDefaults, Style, StyleKind, StyleSheet
from .properties_parser import (
    attr,
    child,
    parse_cell_properties,
    parse_paragraph_properties,
    parse_row_properties,
    parse_run_properties,
    parse_table_properties,
    w,
)

logger = logging.getLogger(__name__)

STYLE_KINDS = {
    "paragraph": StyleKind.PARAGRAPH,
    "character": StyleKind.CHARACTER,
    "table": StyleKind.TABLE,
    "numbering": StyleKind.NUMBERING,
}


class StyleParser:
    """Parser for document styles."""

    STYLES_PATH = "word/styles.xml"

    def __init__(self, package_reader):
        """
        Initialize style parser.

        Args:
            package_reader: PackageReader instance for accessing styles.xml
        """
        self.package_reader = package_reader

    def parse_styles(self) -> StyleSheet:
        """
        Parse styles from styles.xml.

        Returns:
            StyleSheet; empty when the part is missing or malformed
        """
        content = self.package_reader.get_xml_if_exists(self.STYLES_PATH)
        if not content:
            logger.warning("No styles.xml found")
            return StyleSheet()
        try:
            root = ET.fromstring(content)
        except ET.ParseError as exc:
            logger.error("Failed to parse styles: %s", exc)
            return StyleSheet()
        return self.parse_root(root)

    def parse_root(self, root: ET.Element) -> StyleSheet:
        sheet = StyleSheet(doc_defaults=self.parse_doc_defaults(child(root, "docDefaults")))
        for element in root.findall(w("style")):
            style = self.parse_style_element(element)
            if style is not None:
                sheet.add(style)
        logger.info("Parsed %d styles", len(sheet))
        return sheet

    def parse_doc_defaults(self, element: Optional[ET.Element]) -> DocDefaults:
        if element is None:
            return DocDefaults()
        rpr = child(child(element, "rPrDefault"), "rPr")
        ppr = child(child(element, "pPrDefault"), "pPr")
        paragraph_properties, _, _ = parse_paragraph_properties(ppr)
        return DocDefaults(run_properties=parse_run_properties(rpr), paragraph_properties=paragraph_properties)

    def parse_style_element(self, element: ET.Element) -> Optional[Style]:
        """
        Parse one ``w:style`` element.

        Args:
            element: Style XML element

        Returns:
            Style, or None when it has no id
        """
        style_id = attr(element, "styleId")
        if not style_id:
            return None
        kind = STYLE_KINDS.get(attr(element, "type") or "paragraph", StyleKind.PARAGRAPH)
        default = attr(element, "default")

        paragraph_properties, _, _ = parse_paragraph_properties(child(element, "pPr"))
        table_properties, _ = parse_table_properties(child(element, "tblPr"))
        return Style(
            style_id=style_id,
            kind=kind,
            name=attr(child(element, "name"), "val") or "",
            based_on=attr(child(element, "basedOn"), "val"),
            linked_style=attr(child(element, "link"), "val"),
            next_style=attr(child(element, "next"), "val"),
            is_default=default in ("1", "true", "on"),
            run_properties=parse_run_properties(child(element, "rPr")),
            paragraph_properties=paragraph_properties,
            table_properties=table_properties,
            row_properties=parse_row_properties(child(element, "trPr")),
            cell_properties=parse_cell_properties(child(element, "tcPr")),
        )
