import re
import unicodedata
from functools import lru_cache

# Katakana letters that have a hiragana counterpart (ァ..ヶ)
KATAKANA_RANGE = re.compile("[\u30a1-\u30f6]")
KATAKANA_TO_HIRAGANA_OFFSET = 0x60

KANJI_PATTERN = re.compile("[\u4e00-\u9faf\u3400-\u4dbf]")
KANA_PATTERN = re.compile("[\u3040-\u309f\u30a0-\u30ff]")


def is_kanji(char: str) -> bool:
    return bool(KANJI_PATTERN.match(char))


def is_kana(char: str) -> bool:
    return bool(KANA_PATTERN.match(char))


@lru_cache(maxsize=4096)
def katakana_to_hiragana(text: str) -> str:
    """Convert katakana letters to hiragana.

    Example: "センダイエキ" -> "せんだいえき"
    """
    return KATAKANA_RANGE.sub(lambda m: chr(ord(m.group(0)) - KATAKANA_TO_HIRAGANA_OFFSET), text)


@lru_cache(maxsize=4096)
def normalize_text(text: str) -> str:
    """Normalize text for matching.

    - NFKC normalization (full-width ASCII and half-width kana unified)
    - Converts to lowercase
    - Converts katakana to hiragana
    - Normalizes whitespace

    Example: "ＪＲ　センダイ" -> "jr せんだい"
    """
    result = unicodedata.normalize("NFKC", text).lower().strip()
    result = katakana_to_hiragana(result)
    return " ".join(result.split())


def flexible_match(name: str, yomi: str, query: str) -> bool:
    """Match a query against a stop name and its reading, in order.

    Query characters must appear in sequence: kanji are looked up in the
    name, kana in the reading, anything else in either. Mixed queries such
    as "仙台えき" therefore match "仙台駅" read "せんだいえき".
    All arguments are expected to be normalized already.
    """
    name_pos = 0
    yomi_pos = 0

    for char in query:
        if char.isspace():
            continue
        if is_kanji(char):
            pos = name.find(char, name_pos)
            if pos == -1:
                return False
            name_pos = pos + 1
        elif is_kana(char):
            pos = yomi.find(char, yomi_pos)
            if pos == -1:
                return False
            yomi_pos = pos + 1
        else:
            name_match = name.find(char, name_pos)
            yomi_match = yomi.find(char, yomi_pos)
            if name_match == -1 and yomi_match == -1:
                return False
            if name_match != -1:
                name_pos = name_match + 1
            if yomi_match != -1:
                yomi_pos = yomi_match + 1

    return True


def starts_like(name: str, yomi: str, query: str) -> bool:
    """Check whether the query's first character starts the name or reading."""
    if not query:
        return False
    first = query[0]
    if is_kanji(first):
        return name.startswith(first)
    if is_kana(first):
        return yomi.startswith(first)
    return name.startswith(first) or yomi.startswith(first)
