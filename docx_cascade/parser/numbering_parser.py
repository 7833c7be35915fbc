"""
Numbering parser for DOCX documents.

Builds :class:`NumberingDefinitions` from ``word/numbering.xml``.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Optional

from ..models.numbering import AbstractNumbering, Level, LevelOverride, NumberingDefinitions, NumberingInstance
from .properties_parser import attr, child, integer, parse_paragraph_properties, parse_run_properties, w

logger = logging.getLogger(__name__)


class NumberingParser:
    """Parser for abstract numbering definitions and numbering instances."""

    NUMBERING_PATH = "word/numbering.xml"

    def __init__(self, package_reader):
        self.package_reader = package_reader

    def parse_numbering(self) -> NumberingDefinitions:
        """
        Parse numbering definitions from numbering.xml.

        Returns:
            NumberingDefinitions; empty when the part is missing or malformed
        """
        content = self.package_reader.get_xml_if_exists(self.NUMBERING_PATH)
        if not content:
            logger.debug("No numbering.xml found")
            return NumberingDefinitions()
        try:
            root = ET.fromstring(content)
        except ET.ParseError as exc:
            logger.error("Failed to parse numbering: %s", exc)
            return NumberingDefinitions()
        return self.parse_root(root)

    def parse_root(self, root: ET.Element) -> NumberingDefinitions:
        abstracts = [a for a in (self.parse_abstract(e) for e in root.findall(w("abstractNum"))) if a is not None]
        instances = [n for n in (self.parse_instance(e) for e in root.findall(w("num"))) if n is not None]
        logger.info("Parsed %d abstract numberings and %d instances", len(abstracts), len(instances))
        return NumberingDefinitions(abstracts, instances)

    def parse_abstract(self, element: ET.Element) -> Optional[AbstractNumbering]:
        abstract_id = integer(attr(element, "abstractNumId"))
        if abstract_id is None:
            return None
        abstract = AbstractNumbering(
            abstract_id=abstract_id,
            multi_level_type=attr(child(element, "multiLevelType"), "val"),
        )
        for level_element in element.findall(w("lvl")):
            level = self.parse_level(level_element)
            if level is not None:
                abstract.levels[level.level] = level
        return abstract

    def parse_level(self, element: ET.Element) -> Optional[Level]:
        """
        Parse a ``w:lvl`` element.

        Args:
            element: Level XML element

        Returns:
            Level, or None without ``w:ilvl``
        """
        ilvl = integer(attr(element, "ilvl"))
        if ilvl is None:
            return None
        paragraph_properties, _, _ = parse_paragraph_properties(child(element, "pPr"))
        return Level(
            level=ilvl,
            start=integer(attr(child(element, "start"), "val")),
            number_format=attr(child(element, "numFmt"), "val") or "decimal",
            level_text=attr(child(element, "lvlText"), "val") or "",
            paragraph_style=attr(child(element, "pStyle"), "val"),
            suffix=attr(child(element, "suff"), "val") or "tab",
            justification=attr(child(element, "lvlJc"), "val"),
            paragraph_properties=paragraph_properties,
            run_properties=parse_run_properties(child(element, "rPr")),
        )

    def parse_instance(self, element: ET.Element) -> Optional[NumberingInstance]:
        num_id = integer(attr(element, "numId"))
        abstract_id = integer(attr(child(element, "abstractNumId"), "val"))
        if num_id is None or abstract_id is None:
            return None
        instance = NumberingInstance(num_id=num_id, abstract_id=abstract_id)
        for override in element.findall(w("lvlOverride")):
            ilvl = integer(attr(override, "ilvl"))
            if ilvl is None:
                continue
            replacement = child(override, "lvl")
            instance.overrides[ilvl] = LevelOverride(
                level=ilvl,
                start_override=integer(attr(child(override, "startOverride"), "val")),
                replacement=self.parse_level(replacement) if replacement is not None else None,
            )
        return instance
