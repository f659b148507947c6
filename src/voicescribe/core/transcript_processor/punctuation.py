"""
Context-sensitive punctuation width conversion.

A punctuation mark is only rewritten when one of its original neighbours is
a wide-script character (CJK, kana, Hangul). Marks surrounded by Latin prose
are left alone. Marks from the correspondence table never count as wide
context themselves, so applying the same style twice changes nothing.
"""

from typing import Dict, FrozenSet, List, Tuple

from ..session.state import PunctuationStyle

# (full width, half width)
PUNCTUATION_PAIRS: List[Tuple[str, str]] = [
    ("，", ","),
    ("。", "."),
    ("！", "!"),
    ("？", "?"),
    ("：", ":"),
    ("；", ";"),
    ("「", '"'),
    ("」", '"'),
    ("（", "("),
    ("）", ")"),
    ("、", ","),
]

FULL_TO_HALF: Dict[str, str] = {full: half for full, half in PUNCTUATION_PAIRS}

HALF_TO_FULL: Dict[str, str] = {}
for _full, _half in PUNCTUATION_PAIRS:
    HALF_TO_FULL.setdefault(_half, _full)

ALL_PUNCTUATION: FrozenSet[str] = frozenset(FULL_TO_HALF) | frozenset(HALF_TO_FULL)

OPEN_QUOTE = "「"
CLOSE_QUOTE = "」"

WIDE_SCRIPT_RANGES: Tuple[Tuple[int, int], ...] = (
    (0x1100, 0x11FF),  # Hangul Jamo
    (0x3000, 0x303F),  # CJK Symbols and Punctuation
    (0x3040, 0x309F),  # Hiragana
    (0x30A0, 0x30FF),  # Katakana
    (0x3130, 0x318F),  # Hangul Compatibility Jamo
    (0x3400, 0x4DBF),  # CJK Extension A
    (0x4E00, 0x9FFF),  # CJK Unified Ideographs
    (0xAC00, 0xD7AF),  # Hangul Syllables
    (0xF900, 0xFAFF),  # CJK Compatibility Ideographs
    (0x20000, 0x2A6DF),  # CJK Extension B
    (0x2A700, 0x2EBEF),  # CJK Extensions C-F
    (0x30000, 0x3134F),  # CJK Extension G
)


def is_wide_script(char: str) -> bool:
    code = ord(char)
    return any(start <= code <= end for start, end in WIDE_SCRIPT_RANGES)


def _is_wide_context(char: str) -> bool:
    return char not in ALL_PUNCTUATION and is_wide_script(char)


def _has_wide_neighbor(chars: str, index: int) -> bool:
    if index > 0 and _is_wide_context(chars[index - 1]):
        return True
    if index + 1 < len(chars) and _is_wide_context(chars[index + 1]):
        return True
    return False


def convert_punctuation(text: str, style: PunctuationStyle) -> str:
    if not text:
        return text

    if style == PunctuationStyle.FULL_WIDTH:
        return _to_full_width(text)
    if style == PunctuationStyle.HALF_WIDTH:
        return _to_half_width(text)
    return _to_spaces(text)


def _to_full_width(text: str) -> str:
    result = []
    quote_open = False
    for i, char in enumerate(text):
        if char in HALF_TO_FULL and _has_wide_neighbor(text, i):
            if char == '"':
                result.append(CLOSE_QUOTE if quote_open else OPEN_QUOTE)
                quote_open = not quote_open
            else:
                result.append(HALF_TO_FULL[char])
        else:
            result.append(char)
    return "".join(result)


def _to_half_width(text: str) -> str:
    result = []
    for i, char in enumerate(text):
        if char in FULL_TO_HALF and _has_wide_neighbor(text, i):
            result.append(FULL_TO_HALF[char])
        else:
            result.append(char)
    return "".join(result)


def _to_spaces(text: str) -> str:
    result = []
    last_was_replaced = False
    for i, char in enumerate(text):
        if char in ALL_PUNCTUATION and _has_wide_neighbor(text, i):
            if not last_was_replaced:
                result.append(" ")
            last_was_replaced = True
        else:
            result.append(char)
            last_was_replaced = False
    return "".join(result)
