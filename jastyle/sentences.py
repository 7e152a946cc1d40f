"""トークン列の文分割。

句点・感嘆符・疑問符・改行のトークンで文を閉じる。終端記号のない末尾も1文とする。
"""
from __future__ import annotations
from typing import List, Sequence

from .models import Sentence, Token

SENTENCE_ENDERS = frozenset(["。", "！", "？", "!", "?", "\n"])
SYMBOL_POS = "記号"


def is_sentence_end(token: Token) -> bool:
    if token.surface in SENTENCE_ENDERS:
        return True
    # 空白類がまとめて1トークンになった改行 (例: " \n")
    return token.pos == SYMBOL_POS and "\n" in token.surface and not token.surface.strip()


def split_sentences(text: str, tokens: Sequence[Token]) -> List[Sentence]:
    sentences: List[Sentence] = []
    if not tokens:
        return sentences
    start = tokens[0].offset
    buf: List[Token] = []
    for token in tokens:
        buf.append(token)
        if is_sentence_end(token):
            end = token.end
            sentences.append(Sentence(text[start:end], start, end, buf))
            start = end
            buf = []
    if buf:
        end = buf[-1].end
        sentences.append(Sentence(text[start:end], start, end, buf))
    return sentences


__all__ = ["SENTENCE_ENDERS", "is_sentence_end", "split_sentences"]
