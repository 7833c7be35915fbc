"""Theme font and colour schemes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass
class FontScheme:
    """One branch (major or minor) of ``a:fontScheme``."""

    latin: Optional[str] = None
    east_asia: Optional[str] = None
    complex_script: Optional[str] = None
    # supplemental a:font entries keyed by ISO 15924 script tag
    scripts: Dict[str, str] = field(default_factory=dict)


@dataclass
class Theme:
    major: FontScheme = field(default_factory=FontScheme)
    minor: FontScheme = field(default_factory=FontScheme)
    colors: Dict[str, str] = field(default_factory=dict)

    def font_for_theme_name(self, name: Optional[str]) -> Optional[str]:
        """Resolve ``majorHAnsi``/``minorEastAsia``/... to a typeface name."""
        if not name:
            return None
        if name.startswith("major"):
            scheme, slot = self.major, name[len("major"):]
        elif name.startswith("minor"):
            scheme, slot = self.minor, name[len("minor"):]
        else:
            return None
        if slot in ("HAnsi", "Ascii"):
            return scheme.latin or None
        if slot == "EastAsia":
            return scheme.east_asia or None
        if slot == "Bidi":
            return scheme.complex_script or None
        return None

    def font_for_script(self, script_tag: Optional[str]) -> Optional[str]:
        if not script_tag:
            return None
        return self.minor.scripts.get(script_tag)
