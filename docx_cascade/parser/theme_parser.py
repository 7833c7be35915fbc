"""Theme parser for DOCX documents."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict, Optional

from ..models.theme import FontScheme, Theme

logger = logging.getLogger(__name__)


class ThemeParser:
    """Parse the Word theme part into a :class:`Theme`."""

    THEME_PATH = "word/theme/theme1.xml"
    NS = {
        "a": "http://schemas.openxmlformats.org/drawingml/2006/main",
    }

    def __init__(self, package_reader: Any, theme_path: Optional[str] = None) -> None:
        self.package_reader = package_reader
        self.theme_path = theme_path or self.THEME_PATH

    def parse_theme(self) -> Theme:
        root = self._load_xml(self.theme_path)
        if root is None:
            return Theme()
        return self.parse_root(root)

    def parse_root(self, root: ET.Element) -> Theme:
        clr_scheme = root.find(".//a:clrScheme", self.NS)
        font_scheme = root.find(".//a:fontScheme", self.NS)
        theme = Theme(colors=self.parse_color_scheme(clr_scheme) if clr_scheme is not None else {})
        if font_scheme is not None:
            theme.major = self.parse_font_branch(font_scheme.find("a:majorFont", self.NS))
            theme.minor = self.parse_font_branch(font_scheme.find("a:minorFont", self.NS))
        return theme

    def parse_color_scheme(self, color_scheme_element: ET.Element) -> Dict[str, str]:
        colors: Dict[str, str] = {}
        for color in color_scheme_element:
            tag = self._strip_namespace(color.tag)
            srgb = color.find("a:srgbClr", self.NS)
            if srgb is not None and srgb.get("val"):
                colors[tag] = srgb.get("val")  # hex string without '#'
                continue
            system = color.find("a:sysClr", self.NS)
            if system is not None and system.get("lastClr"):
                colors[tag] = system.get("lastClr")
        # w:themeColor uses the document names of the dk/lt slots
        aliases = {"dark1": "dk1", "light1": "lt1", "dark2": "dk2", "light2": "lt2", "text1": "dk1", "background1": "lt1"}
        for alias, slot in aliases.items():
            if slot in colors:
                colors.setdefault(alias, colors[slot])
        return colors

    def parse_font_branch(self, branch_element: Optional[ET.Element]) -> FontScheme:
        scheme = FontScheme()
        if branch_element is None:
            return scheme
        for tag, field_name in (("latin", "latin"), ("ea", "east_asia"), ("cs", "complex_script")):
            element = branch_element.find(f"a:{tag}", self.NS)
            if element is not None and element.get("typeface"):
                setattr(scheme, field_name, element.get("typeface"))
        for font in branch_element.findall("a:font", self.NS):
            script, typeface = font.get("script"), font.get("typeface")
            if script and typeface:
                scheme.scripts[script] = typeface
        return scheme

    # ------------------------------------------------------------------
    def _load_xml(self, path: str) -> Optional[ET.Element]:
        data = self.package_reader.get_xml_if_exists(path)
        if not data:
            return None
        try:
            return ET.fromstring(data)
        except ET.ParseError as exc:
            logger.error("Failed to parse theme %s: %s", path, exc)
            return None

    @staticmethod
    def _strip_namespace(tag: str) -> str:
        return tag.split("}", 1)[1] if "}" in tag else tag
