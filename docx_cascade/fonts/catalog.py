"""
Font face catalog.

Enumerates font files (family name, face file, bold/italic flags) and
registers selected faces with ReportLab. Faces come from the configured
search directories, from ``fc-match`` when fontconfig is installed, or
from explicit :meth:`FontCatalog.add_face` calls.
"""

from __future__ import annotations

import logging
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFError, TTFont, TTFontFile

from ..exceptions import FontError

logger = logging.getLogger(__name__)

FONT_EXTENSIONS = (".ttf", ".ttc", ".otf")

_REGISTERED: Dict[Tuple[str, int], str] = {}


@dataclass(frozen=True, slots=True)
class FontFace:
    family: str
    path: str
    bold: bool = False
    italic: bool = False
    subfont_index: int = 0

    @property
    def pdf_name(self) -> str:
        return _variant_name(re.sub(r"[^A-Za-z0-9]+", "", self.family) or "Font", self.bold, self.italic)


@dataclass(frozen=True, slots=True)
class FontMatch:
    face: FontFace
    exact_match: bool


def _variant_name(font_name: str, bold: bool, italic: bool) -> str:
    variant = font_name
    if bold and italic:
        variant += "-BoldItalic"
    elif bold:
        variant += "-Bold"
    elif italic:
        variant += "-Italic"
    return variant


def read_face(path: Path, subfont_index: int = 0) -> Optional[FontFace]:
    """Read family and style names from a TrueType file."""
    try:
        info = TTFontFile(str(path), charInfo=0, subfontIndex=subfont_index)
    except (TTFError, OSError, ValueError) as exc:
        logger.debug("Skipping font file %s: %s", path, exc)
        return None
    style = (getattr(info, "styleName", "") or "").lower()
    family = getattr(info, "familyName", "") or info.name
    if isinstance(family, bytes):
        family = family.decode("latin-1", errors="replace")
    return FontFace(
        family=family,
        path=str(path),
        bold="bold" in style or "black" in style,
        italic="italic" in style or "oblique" in style,
        subfont_index=subfont_index,
    )


def _fc_match(family: str, bold: bool, italic: bool) -> Optional[Path]:
    style_parts = []
    if bold:
        style_parts.append("Bold")
    if italic:
        style_parts.append("Italic")
    pattern = family
    if style_parts:
        pattern = f"{family}:style={' '.join(style_parts)}"
    try:
        result = subprocess.run(
            ["fc-match", "-f", "%{family}\t%{file}\n", pattern],
            check=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
        )
    except (FileNotFoundError, subprocess.CalledProcessError):
        return None

    output = (result.stdout or "").strip().splitlines()
    if not output or "\t" not in output[0]:
        return None
    families, file_name = output[0].split("\t", 1)
    # fc-match always answers with some substitute; only accept the family asked for
    if family.lower() not in [name.strip().lower() for name in families.split(",")]:
        return None
    path = Path(file_name).expanduser()
    if path.suffix.lower() not in FONT_EXTENSIONS or not path.exists():
        return None
    return path


class FontCatalog:
    """Family name -> face file lookup with exact/approximate matching."""

    def __init__(
        self,
        search_dirs: Sequence[Path] = (),
        faces: Iterable[FontFace] = (),
        use_fontconfig: bool = True,
    ):
        self.search_dirs = [Path(d) for d in search_dirs]
        self.use_fontconfig = use_fontconfig
        self._faces: Dict[str, List[FontFace]] = {}
        self._scanned = not self.search_dirs
        self._fc_tried: set = set()
        for face in faces:
            self.add_face(face)

    def add_face(self, face: FontFace) -> None:
        bucket = self._faces.setdefault(face.family.lower(), [])
        if face not in bucket:
            bucket.append(face)

    def families(self) -> List[str]:
        self._ensure_scanned()
        return sorted({face.family for bucket in self._faces.values() for face in bucket})

    def find(self, family: Optional[str], bold: bool = False, italic: bool = False) -> Optional[FontMatch]:
        """
        Find a face for a family.

        Args:
            family: Family name as written in the document
            bold: Requested bold face
            italic: Requested italic face

        Returns:
            FontMatch with ``exact_match`` set when family, bold and italic all
            match, the first face of the family otherwise, or None
        """
        if not family:
            return None
        self._ensure_scanned()
        match = self._match(family, bold, italic)
        if match is not None and match.exact_match:
            return match
        key = (family.lower(), bold, italic)
        if self.use_fontconfig and key not in self._fc_tried:
            self._fc_tried.add(key)
            path = _fc_match(family, bold, italic)
            if path is not None:
                face = read_face(path)
                if face is not None:
                    self.add_face(FontFace(family, face.path, face.bold, face.italic, face.subfont_index))
                    match = self._match(family, bold, italic) or match
        return match

    def _match(self, family: str, bold: bool, italic: bool) -> Optional[FontMatch]:
        candidates = self._faces.get(family.lower(), [])
        if family.lower() == "symbol":
            # Symbol only matches case-sensitively
            candidates = [face for face in candidates if face.family == family]
        if not candidates:
            return None
        for face in candidates:
            if face.bold == bold and face.italic == italic:
                return FontMatch(face, True)
        return FontMatch(candidates[0], False)

    def _ensure_scanned(self) -> None:
        if self._scanned:
            return
        self._scanned = True
        for root in self.search_dirs:
            if not root.exists():
                continue
            for path in sorted(root.rglob("*")):
                if path.suffix.lower() not in FONT_EXTENSIONS:
                    continue
                face = read_face(path)
                if face is not None:
                    self.add_face(face)
        logger.debug("Font catalog scanned %d families", len(self._faces))


def register_face(face: FontFace) -> str:
    """
    Register a face with ReportLab.

    Args:
        face: Face to register

    Returns:
        The name to use with ReportLab canvases and ``stringWidth``
    """
    key = (face.path, face.subfont_index)
    if key in _REGISTERED:
        return _REGISTERED[key]
    name = face.pdf_name
    if name in _REGISTERED.values():
        name = f"{name}-{len(_REGISTERED)}"
    try:
        pdfmetrics.registerFont(TTFont(name, face.path, subfontIndex=face.subfont_index))
    except (TTFError, OSError) as exc:
        raise FontError(f"Cannot register font {face.family}", str(exc)) from exc
    _REGISTERED[key] = name
    logger.debug("Registered font %s (%s)", name, face.path)
    return name
