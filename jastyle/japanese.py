"""日本語文字の判定ユーティリティ。

対象ブロック:
- ひらがな U+3040-309F / カタカナ U+30A0-30FF
- CJK統合漢字 U+4E00-9FFF
- CJK記号・句読点 U+3000-303F (比率計算のみ)
"""
from __future__ import annotations
import re

HIRAGANA_RE = re.compile(r"[\u3040-\u309F]")
KATAKANA_RE = re.compile(r"[\u30A0-\u30FF]")
KANJI_RE = re.compile(r"[\u4E00-\u9FFF]")
# 半角/全角の数字のみ
NUMERIC_RE = re.compile(r"^[0-9\uFF10-\uFF19]+$")

_JAPANESE_CHAR_RE = re.compile(r"[\u3040-\u309F\u30A0-\u30FF\u4E00-\u9FFF\u3000-\u303F]")


def japanese_ratio(text: str) -> float:
    if not text:
        return 0.0
    return len(_JAPANESE_CHAR_RE.findall(text)) / len(text)


def is_japanese_enough(text: str, min_ratio: float) -> bool:
    if not text:
        return False
    return japanese_ratio(text) >= min_ratio


def has_kana(text: str) -> bool:
    return bool(HIRAGANA_RE.search(text) or KATAKANA_RE.search(text))


def has_kanji(text: str) -> bool:
    return bool(KANJI_RE.search(text))


__all__ = [
    "japanese_ratio",
    "is_japanese_enough",
    "has_kana",
    "has_kanji",
    "NUMERIC_RE",
]
