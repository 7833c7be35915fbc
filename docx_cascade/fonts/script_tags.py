"""Language tag to ISO 15924 script tag mapping used by theme font lookup."""

from __future__ import annotations

from typing import Dict, Optional

# Locales whose script differs by region.
LOCALE_SCRIPTS: Dict[str, str] = {
    "zh-tw": "Hant",
    "zh-hk": "Hant",
    "zh-mo": "Hant",
    "zh-cn": "Hans",
    "zh-sg": "Hans",
    "sr-latn-rs": "Latn",
    "sr-cyrl-rs": "Cyrl",
    "az-latn-az": "Latn",
    "az-cyrl-az": "Cyrl",
    "uz-latn-uz": "Latn",
    "uz-cyrl-uz": "Cyrl",
    "mn-mong-cn": "Mong",
    "pa-arab-pk": "Arab",
}

LANGUAGE_SCRIPTS: Dict[str, str] = {
    "zh": "Hans",
    "ja": "Jpan",
    "ko": "Hang",
    "ar": "Arab",
    "fa": "Arab",
    "ur": "Arab",
    "ps": "Arab",
    "sd": "Arab",
    "ug": "Uigh",
    "he": "Hebr",
    "yi": "Hebr",
    "th": "Thai",
    "lo": "Laoo",
    "km": "Khmr",
    "my": "Mymr",
    "bo": "Tibt",
    "dv": "Thaa",
    "syr": "Syrc",
    "am": "Ethi",
    "ti": "Ethi",
    "hy": "Armn",
    "ka": "Geor",
    "hi": "Deva",
    "mr": "Deva",
    "ne": "Deva",
    "sa": "Deva",
    "kok": "Deva",
    "bn": "Beng",
    "as": "Beng",
    "gu": "Gujr",
    "pa": "Guru",
    "or": "Orya",
    "ta": "Taml",
    "te": "Telu",
    "kn": "Knda",
    "ml": "Mlym",
    "si": "Sinh",
    "mn": "Cyrl",
    "iu": "Cans",
    "chr": "Cher",
    "ii": "Yiii",
    "ru": "Cyrl",
    "uk": "Cyrl",
    "be": "Cyrl",
    "bg": "Cyrl",
    "mk": "Cyrl",
    "kk": "Cyrl",
    "ky": "Cyrl",
    "tg": "Cyrl",
    "tt": "Cyrl",
    "sr": "Cyrl",
    "el": "Grek",
}


def script_tag_for_language(language: Optional[str]) -> Optional[str]:
    """
    Map a BCP 47 language tag such as ``zh-TW`` to a script tag.

    Args:
        language: Language tag from ``w:lang``

    Returns:
        ISO 15924 script tag, or None for unknown and Latin-script languages
    """
    if not language:
        return None
    tag = language.strip().lower().replace("_", "-")
    if tag in LOCALE_SCRIPTS:
        return LOCALE_SCRIPTS[tag]
    primary = tag.split("-", 1)[0]
    return LANGUAGE_SCRIPTS.get(primary)
