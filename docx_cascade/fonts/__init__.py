"""Font classification, catalog and selection."""

from .catalog import FontCatalog, FontFace, FontMatch, register_face
from .classifier import ScriptCategory, ScriptInfo, classify, is_east_asian
from .script_tags import script_tag_for_language
from .selector import FontDescriptor, FontSelector

__all__ = [
    "FontCatalog",
    "FontDescriptor",
    "FontFace",
    "FontMatch",
    "FontSelector",
    "ScriptCategory",
    "ScriptInfo",
    "classify",
    "is_east_asian",
    "register_face",
    "script_tag_for_language",
]
