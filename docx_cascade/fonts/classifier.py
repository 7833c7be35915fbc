"""
Unicode block classification for font slot selection.

Word picks one of four font slots (ascii, hAnsi, eastAsia, cs) for every
character. The slot follows from the Unicode block of the character; some
blocks switch to the East Asian slot when the run carries
``w:hint="eastAsia"``.
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union


class ScriptCategory(str, Enum):
    ASCII = "ascii"
    HIGH_ANSI = "hAnsi"
    EAST_ASIAN = "eastAsia"
    COMPLEX_SCRIPT = "cs"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class UnicodeBlock:
    name: str
    first: int
    last: int
    category: ScriptCategory
    east_asia_hint: bool = False


@dataclass(frozen=True, slots=True)
class ScriptInfo:
    category: ScriptCategory
    block_name: str
    east_asia_hint: bool


A = ScriptCategory.ASCII
H = ScriptCategory.HIGH_ANSI
E = ScriptCategory.EAST_ASIAN

UNICODE_BLOCKS: Tuple[UnicodeBlock, ...] = (
    UnicodeBlock("Basic Latin", 0x0000, 0x007F, A),
    UnicodeBlock("Latin-1 Supplement", 0x00A0, 0x00FF, H),
    UnicodeBlock("Latin Extended-A", 0x0100, 0x017F, H),
    UnicodeBlock("Latin Extended-B", 0x0180, 0x024F, H),
    UnicodeBlock("IPA Extensions", 0x0250, 0x02AF, H),
    UnicodeBlock("Spacing Modifier Letters", 0x02B0, 0x02FF, H, True),
    UnicodeBlock("Combining Diacritical Marks", 0x0300, 0x036F, H, True),
    UnicodeBlock("Greek", 0x0370, 0x03CF, H, True),
    UnicodeBlock("Cyrillic", 0x0400, 0x04FF, H, True),
    UnicodeBlock("Hebrew", 0x0590, 0x05FF, A),
    UnicodeBlock("Arabic", 0x0600, 0x06FF, A),
    UnicodeBlock("Syriac", 0x0700, 0x074F, A),
    UnicodeBlock("Arabic Supplement", 0x0750, 0x077F, A),
    UnicodeBlock("Thaana", 0x0780, 0x07BF, A),
    UnicodeBlock("Hangul Jamo", 0x1100, 0x11FF, E),
    UnicodeBlock("Latin Extended Additional", 0x1E00, 0x1EFF, H),
    UnicodeBlock("Greek Extended", 0x1F00, 0x1FFF, H),
    UnicodeBlock("General Punctuation", 0x2000, 0x206F, H, True),
    UnicodeBlock("Superscripts and Subscripts", 0x2070, 0x209F, H, True),
    UnicodeBlock("Currency Symbols", 0x20A0, 0x20CF, H, True),
    UnicodeBlock("Combining Diacritical Marks for Symbols", 0x20D0, 0x20FF, H, True),
    UnicodeBlock("Letter-like Symbols", 0x2100, 0x214F, H, True),
    UnicodeBlock("Number Forms", 0x2150, 0x218F, H, True),
    UnicodeBlock("Arrows", 0x2190, 0x21FF, H, True),
    UnicodeBlock("Mathematical Operators", 0x2200, 0x22FF, H, True),
    UnicodeBlock("Miscellaneous Technical", 0x2300, 0x23FF, H, True),
    UnicodeBlock("Control Pictures", 0x2400, 0x243F, H, True),
    UnicodeBlock("Optical Character Recognition", 0x2440, 0x245F, H, True),
    UnicodeBlock("Enclosed Alphanumerics", 0x2460, 0x24FF, H, True),
    UnicodeBlock("Box Drawing", 0x2500, 0x257F, H, True),
    UnicodeBlock("Block Elements", 0x2580, 0x259F, H, True),
    UnicodeBlock("Geometric Shapes", 0x25A0, 0x25FF, H, True),
    UnicodeBlock("Miscellaneous Symbols", 0x2600, 0x26FF, H, True),
    UnicodeBlock("Dingbats", 0x2700, 0x27BF, H, True),
    UnicodeBlock("CJK Radicals Supplement", 0x2E80, 0x2EFF, E),
    UnicodeBlock("Kangxi Radicals", 0x2F00, 0x2FDF, E),
    UnicodeBlock("Ideographic Description Characters", 0x2FF0, 0x2FFF, E),
    UnicodeBlock("CJK Symbols and Punctuation", 0x3000, 0x303F, E),
    UnicodeBlock("Hiragana", 0x3040, 0x309F, E),
    UnicodeBlock("Katakana", 0x30A0, 0x30FF, E),
    UnicodeBlock("Bopomofo", 0x3100, 0x312F, E),
    UnicodeBlock("Hangul Compatibility Jamo", 0x3130, 0x318F, E),
    UnicodeBlock("Kanbun", 0x3190, 0x319F, E),
    UnicodeBlock("Enclosed CJK Letters and Months", 0x3200, 0x32FF, E),
    UnicodeBlock("CJK Compatibility", 0x3300, 0x33FF, E),
    UnicodeBlock("CJK Unified Ideographs Extension A", 0x3400, 0x4DBF, E),
    UnicodeBlock("CJK Unified Ideographs", 0x4E00, 0x9FAF, E),
    UnicodeBlock("Yi Syllables", 0xA000, 0xA48F, E),
    UnicodeBlock("Yi Radicals", 0xA490, 0xA4CF, E),
    UnicodeBlock("Hangul Syllables", 0xAC00, 0xD7AF, E),
    UnicodeBlock("High Surrogates", 0xD800, 0xDB7F, E),
    UnicodeBlock("High Use Surrogates", 0xDB80, 0xDBFF, E),
    UnicodeBlock("Low Surrogates", 0xDC00, 0xDFFF, E),
    UnicodeBlock("Use Area", 0xE000, 0xF8FF, H, True),
    UnicodeBlock("CJK Compatibility Ideographs", 0xF900, 0xFAFF, E),
    UnicodeBlock("Alphabetic Presentation Forms", 0xFB00, 0xFB1C, H, True),
    UnicodeBlock("Alphabetic Presentation Forms", 0xFB1D, 0xFB4F, A),
    UnicodeBlock("Arabic Presentation Forms-A", 0xFB50, 0xFDFF, A),
    UnicodeBlock("CJK Compatibility Forms", 0xFE30, 0xFE4F, E),
    UnicodeBlock("Small Form Variants", 0xFE50, 0xFE6F, E),
    UnicodeBlock("Arabic Presentation Forms-B", 0xFE70, 0xFEFE, A),
    UnicodeBlock("Halfwidth and Fullwidth Forms", 0xFF00, 0xFFEF, E),
)

_STARTS = [block.first for block in UNICODE_BLOCKS]
_UNKNOWN = ScriptInfo(ScriptCategory.UNKNOWN, "", False)


def classify(codepoint: Union[int, str]) -> ScriptInfo:
    """
    Classify a code point by Unicode block.

    Args:
        codepoint: Integer code point or a one-character string

    Returns:
        ScriptInfo; category UNKNOWN when no block matches
    """
    if isinstance(codepoint, str):
        if not codepoint:
            return _UNKNOWN
        codepoint = ord(codepoint[0])
    index = bisect_right(_STARTS, codepoint) - 1
    if index < 0:
        return _UNKNOWN
    block = UNICODE_BLOCKS[index]
    if codepoint > block.last:
        return _UNKNOWN
    return ScriptInfo(block.category, block.name, block.east_asia_hint)


def is_east_asian(char: str) -> bool:
    return classify(char).category == ScriptCategory.EAST_ASIAN
