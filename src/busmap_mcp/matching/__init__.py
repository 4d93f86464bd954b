"""Text matching for stop name search."""

from busmap_mcp.matching.normalizers import (
    flexible_match,
    is_kana,
    is_kanji,
    katakana_to_hiragana,
    normalize_text,
    starts_like,
)

__all__ = [
    "flexible_match",
    "is_kana",
    "is_kanji",
    "katakana_to_hiragana",
    "normalize_text",
    "starts_like",
]
