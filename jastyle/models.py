"""解析パイプラインで共有するデータ型。

- Token: 形態素1つ分。offset は tokenize に渡したテキスト内の文字位置
- Sentence: 終端記号で区切られたトークン列
- Segment: 抽出された解析対象テキストと、元文書内での開始位置
- Diagnostic: ルールが出す指摘。start/end は文字オフセット
- CacheEntry: 辞書引き(要約取得)キャッシュの1件
"""
from __future__ import annotations
from dataclasses import dataclass, field, asdict, replace
from typing import Any, Dict, List

from .positions import to_range

SOURCE = "jastyle"

# LSP の DiagnosticSeverity と同じ番号
SEVERITY_ERROR = 1
SEVERITY_WARNING = 2
SEVERITY_INFORMATION = 3
SEVERITY_HINT = 4

STATUS_SUCCESS = "success"
STATUS_NOT_FOUND = "not_found"
STATUS_ERROR = "error"


@dataclass(frozen=True)
class TokenModifiers:
    proper: bool = False
    numeric: bool = False
    kana: bool = False
    kanji: bool = False


@dataclass
class Token:
    surface: str
    pos: str = "*"
    pos_detail1: str = "*"
    pos_detail2: str = "*"
    pos_detail3: str = "*"
    conjugation_type: str = "*"
    conjugation_form: str = "*"
    base_form: str = ""
    reading: str = ""
    pronunciation: str = ""
    offset: int = 0
    length: int = 0  # UTF-8 でのバイト長
    modifiers: TokenModifiers = field(default_factory=TokenModifiers)

    @property
    def end(self) -> int:
        return self.offset + len(self.surface)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Sentence:
    text: str
    start: int
    end: int
    tokens: List[Token]


@dataclass(frozen=True)
class Segment:
    text: str
    offset: int

    @property
    def end(self) -> int:
        return self.offset + len(self.text)


@dataclass(frozen=True)
class Diagnostic:
    start: int
    end: int
    message: str
    severity: int = SEVERITY_WARNING
    code: str = ""
    source: str = SOURCE

    def shifted(self, delta: int) -> "Diagnostic":
        return replace(self, start=self.start + delta, end=self.end + delta)

    def to_dict(self, text: str) -> Dict[str, Any]:
        """LSP の Diagnostic 形式へ。text は診断の座標系の文書全体。"""
        return {
            "range": to_range(text, self.start, self.end),
            "message": self.message,
            "severity": self.severity,
            "code": self.code,
            "source": self.source,
        }


@dataclass
class CacheEntry:
    summary: str | None
    status: str
    timestamp: float


__all__ = [
    "SOURCE",
    "SEVERITY_ERROR",
    "SEVERITY_WARNING",
    "SEVERITY_INFORMATION",
    "SEVERITY_HINT",
    "STATUS_SUCCESS",
    "STATUS_NOT_FOUND",
    "STATUS_ERROR",
    "TokenModifiers",
    "Token",
    "Sentence",
    "Segment",
    "Diagnostic",
    "CacheEntry",
]
