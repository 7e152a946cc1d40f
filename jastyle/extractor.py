"""言語IDに応じた解析対象セグメントの抽出。

- 文章系 (plaintext/markdown/japanese): 文書全体を1セグメント
- HTML/LaTeX/プログラミング言語: AST 抽出が使えればそれを、
  使えなければ正規表現抽出を使う (LaTeX は常に正規表現)
- 未知の言語ID: 文書全体を1セグメント
"""
from __future__ import annotations
import logging
from typing import List

from .ast_extractor import AstExtractor
from .comments import extract_comments, has_regex_extractor
from .models import Segment

logger = logging.getLogger(__name__)

PROSE_LANGUAGES = ("plaintext", "markdown", "japanese")
MARKUP_LANGUAGES = ("html", "latex")
PROGRAMMING_LANGUAGES = (
    "javascript",
    "javascriptreact",
    "typescript",
    "typescriptreact",
    "python",
    "rust",
    "c",
    "cpp",
)
SUPPORTED_LANGUAGES = PROSE_LANGUAGES + MARKUP_LANGUAGES + PROGRAMMING_LANGUAGES

# AST 抽出を試さない言語
_REGEX_ONLY = ("latex",)


def is_prose(language_id: str) -> bool:
    return language_id in PROSE_LANGUAGES or language_id not in SUPPORTED_LANGUAGES


def extract(
    text: str,
    language_id: str,
    min_ratio: float = 0.1,
    ast: AstExtractor | None = None,
) -> List[Segment]:
    if is_prose(language_id):
        return [Segment(text, 0)] if text else []
    if ast is not None and language_id not in _REGEX_ONLY and ast.is_available(language_id):
        return ast.extract(text, language_id, min_ratio)
    if has_regex_extractor(language_id):
        logger.debug("regex extraction for %s", language_id)
        return extract_comments(text, language_id, min_ratio)
    return []


__all__ = [
    "PROSE_LANGUAGES",
    "MARKUP_LANGUAGES",
    "PROGRAMMING_LANGUAGES",
    "SUPPORTED_LANGUAGES",
    "is_prose",
    "extract",
]
