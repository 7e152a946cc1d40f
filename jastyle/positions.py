"""文字オフセットと (行, 桁) 座標の相互変換。

行・桁はともに 0 始まり。抽出されたセグメント内のローカルオフセットは
セグメントの開始オフセットを足してから変換する。
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, List, TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Diagnostic


@dataclass(frozen=True)
class Position:
    line: int
    character: int

    def to_dict(self) -> Dict[str, int]:
        return {"line": self.line, "character": self.character}


def to_position(text: str, offset: int) -> Position:
    # offset より前の改行数 = 行番号
    offset = max(0, min(offset, len(text)))
    line = text.count("\n", 0, offset)
    last_nl = text.rfind("\n", 0, offset)
    character = offset - (last_nl + 1)
    return Position(line, character)


def to_offset(text: str, position: Position) -> int:
    if position.line < 0:
        return 0
    idx = 0
    for _ in range(position.line):
        nl = text.find("\n", idx)
        if nl < 0:
            return len(text)
        idx = nl + 1
    line_end = text.find("\n", idx)
    if line_end < 0:
        line_end = len(text)
    return min(idx + max(0, position.character), line_end)


def to_range(text: str, start: int, end: int) -> Dict[str, Dict[str, int]]:
    return {
        "start": to_position(text, start).to_dict(),
        "end": to_position(text, end).to_dict(),
    }


def shift(diagnostics: Iterable["Diagnostic"], offset: int) -> List["Diagnostic"]:
    """セグメント内オフセットの診断を文書全体の座標へずらす。"""
    return [d.shifted(offset) for d in diagnostics]


__all__ = ["Position", "to_position", "to_offset", "to_range", "shift"]
