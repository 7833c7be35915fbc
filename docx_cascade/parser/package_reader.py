"""
Package reader for DOCX files.

Opens the ZIP container and gives access to its XML and binary parts,
content types and relationships.
"""

import io
import logging
import posixpath
import xml.etree.ElementTree as ET
import zipfile
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional, Union

from ..exceptions import ParsingError

logger = logging.getLogger(__name__)

CONTENT_TYPES_NS = "http://schemas.openxmlformats.org/package/2006/content-types"
RELATIONSHIPS_NS = "http://schemas.openxmlformats.org/package/2006/relationships"

MAIN_DOCUMENT = "word/document.xml"


class PackageReader:
    """
    Reads DOCX package contents.

    Usable as a context manager; parts are read lazily and cached.
    """

    def __init__(self, source: Union[str, Path, bytes, BinaryIO]):
        """
        Open a package.

        Args:
            source: Path to a DOCX file, its bytes, or a binary file object

        Raises:
            FileNotFoundError: The path does not exist
            ParsingError: The file is not a ZIP package
        """
        self.docx_path: Optional[Path] = None
        self._zip_file: Optional[zipfile.ZipFile] = None
        self._content_types: Dict[str, str] = {}
        self._relationships: Dict[str, Dict[str, Dict[str, str]]] = {}
        self._xml_cache: Dict[str, str] = {}
        self._media_cache: Dict[str, bytes] = {}

        self._open_package(source)
        self._parse_content_types()

    def _open_package(self, source) -> None:
        if isinstance(source, (str, Path)):
            self.docx_path = Path(source)
            if not self.docx_path.exists():
                raise FileNotFoundError(f"DOCX file not found: {self.docx_path}")
            target = self.docx_path
        elif isinstance(source, bytes):
            target = io.BytesIO(source)
        else:
            target = source
        try:
            self._zip_file = zipfile.ZipFile(target, "r")
        except zipfile.BadZipFile as exc:
            raise ParsingError("Not a DOCX package", str(exc)) from exc
        logger.info("Opened DOCX package: %s", self.docx_path or "<memory>")

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------
    def close(self) -> None:
        if self._zip_file is not None:
            self._zip_file.close()
            self._zip_file = None

    def __enter__(self) -> "PackageReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Content types and relationships
    # ------------------------------------------------------------------
    def _parse_content_types(self) -> None:
        """Parse [Content_Types].xml."""
        content = self.get_xml_if_exists("[Content_Types].xml")
        if not content:
            return
        try:
            root = ET.fromstring(content)
        except ET.ParseError as exc:
            logger.error("Failed to parse content types: %s", exc)
            return
        for override in root.findall(f"{{{CONTENT_TYPES_NS}}}Override"):
            part_name, content_type = override.get("PartName", ""), override.get("ContentType", "")
            if part_name and content_type:
                self._content_types[part_name] = content_type
        for default in root.findall(f"{{{CONTENT_TYPES_NS}}}Default"):
            extension, content_type = default.get("Extension", ""), default.get("ContentType", "")
            if extension and content_type:
                self._content_types[f"*.{extension}"] = content_type
        logger.debug("Parsed %d content types", len(self._content_types))

    def content_type_for(self, part_name: str) -> Optional[str]:
        key = "/" + part_name.lstrip("/")
        if key in self._content_types:
            return self._content_types[key]
        extension = posixpath.splitext(part_name)[1].lstrip(".").lower()
        return self._content_types.get(f"*.{extension}")

    def get_relationships(self, part_name: str = MAIN_DOCUMENT) -> Dict[str, Dict[str, str]]:
        """
        Relationships of a part, keyed by relationship id.

        Args:
            part_name: Source part, e.g. ``word/document.xml``

        Returns:
            ``{rId: {"target": ..., "type": ..., "target_mode": ...}}`` with
            targets resolved to package part names
        """
        if part_name in self._relationships:
            return self._relationships[part_name]
        directory, file_name = posixpath.split(part_name)
        rels_name = posixpath.join(directory, "_rels", f"{file_name}.rels")
        relationships: Dict[str, Dict[str, str]] = {}
        content = self.get_xml_if_exists(rels_name)
        if content:
            try:
                root = ET.fromstring(content)
            except ET.ParseError as exc:
                logger.error("Failed to parse relationships %s: %s", rels_name, exc)
                root = None
            if root is not None:
                for rel in root.findall(f"{{{RELATIONSHIPS_NS}}}Relationship"):
                    rel_id, target = rel.get("Id", ""), rel.get("Target", "")
                    if not rel_id or not target:
                        continue
                    entry = {"target": target, "type": rel.get("Type", "")}
                    mode = rel.get("TargetMode", "")
                    if mode:
                        entry["target_mode"] = mode
                    else:
                        entry["target"] = posixpath.normpath(posixpath.join(directory, target)).lstrip("/")
                    relationships[rel_id] = entry
        self._relationships[part_name] = relationships
        return relationships

    def target_of_type(self, suffix: str, part_name: str = MAIN_DOCUMENT) -> Optional[str]:
        """Target part of the first relationship whose type ends with ``suffix``."""
        for entry in self.get_relationships(part_name).values():
            if entry["type"].endswith(suffix) and "target_mode" not in entry:
                return entry["target"]
        return None

    # ------------------------------------------------------------------
    # Parts
    # ------------------------------------------------------------------
    def namelist(self) -> List[str]:
        if self._zip_file is None:
            return []
        return self._zip_file.namelist()

    def get_xml_content(self, part_name: str) -> str:
        """
        Get XML content for a part.

        Raises:
            KeyError: The part does not exist
        """
        if part_name in self._xml_cache:
            return self._xml_cache[part_name]
        if self._zip_file is None:
            raise ParsingError("Package is closed")
        if part_name not in self._zip_file.namelist():
            raise KeyError(f"Part not found: {part_name}")
        content = self._zip_file.read(part_name).decode("utf-8")
        self._xml_cache[part_name] = content
        return content

    def get_xml_if_exists(self, part_name: str) -> Optional[str]:
        try:
            return self.get_xml_content(part_name)
        except KeyError:
            return None

    def get_binary_content(self, part_name: str) -> Optional[bytes]:
        if part_name in self._media_cache:
            return self._media_cache[part_name]
        if self._zip_file is None or part_name not in self._zip_file.namelist():
            logger.warning("Part not found: %s", part_name)
            return None
        content = self._zip_file.read(part_name)
        self._media_cache[part_name] = content
        return content

    def get_media_files(self) -> List[str]:
        return [name for name in self.namelist() if name.startswith("word/media/")]
