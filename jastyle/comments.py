"""正規表現によるコメント/本文抽出と、抽出結果の共通後処理。

対応:
- C/JS/Rust 風: // 行コメント, /* ... */ ブロックコメント
- Python: # 行コメント, 三重引用符の文字列(docstring)
- HTML: タグの外側のテキストと <!-- --> コメント (script/style の中身は除外)
- LaTeX: コマンド・数式の外側の本文と % コメント

文字列リテラルも一緒にマッチさせて読み飛ばすので、"http://..." の '//' を
コメントと誤認することはない。ただし構文解析ではないのでヒューリスティック。
AST 抽出 (ast_extractor) もここの sanitize/to_segments を通すため、
どちらの経路でも同じ形のセグメントになる。
"""
from __future__ import annotations
from dataclasses import dataclass
import re
from typing import Callable, Dict, Iterable, Iterator, List, Tuple

from .japanese import is_japanese_enough
from .models import Segment


@dataclass(frozen=True)
class Candidate:
    """抽出候補。start は元文書内の original の開始位置 (文字単位)。"""

    start: int
    original: str
    markers: bool = True  # コメント記号を取り除くか


# 開始記号と、対になる終了記号
_MARKERS: List[Tuple[re.Pattern[str], re.Pattern[str] | None]] = [
    (re.compile(r"<!--"), re.compile(r"-->\Z")),
    (re.compile(r"/\*"), re.compile(r"\*+/\Z")),
    (re.compile(r'[rRuUbBfF]{0,2}"""'), re.compile(r'"""\Z')),
    (re.compile(r"[rRuUbBfF]{0,2}'''"), re.compile(r"'''\Z")),
    (re.compile(r"//+!?"), None),
    (re.compile(r"#+"), None),
    (re.compile(r"%+"), None),
]

# ブロックコメント先頭に残る '*' だけの行 (例: "/**" の残り) と行頭の " * "
_STAR_RESIDUE_RE = re.compile(r"\*+[ \t]*(?:\n\s*\*+[ \t]?)?")


def _strip_ws(text: str, start: int, end: int) -> Tuple[int, int]:
    while start < end and text[start].isspace():
        start += 1
    while end > start and text[end - 1].isspace():
        end -= 1
    return start, end


def sanitize(original: str, markers: bool = True) -> Tuple[int, str]:
    """コメント記号と前後の空白を除いた本文を返す。

    戻り値は (original 内での本文開始位置, 本文)。本文は常に original の
    連続した部分文字列なので、開始位置を足せば元文書の位置に戻せる。
    """
    start, end = 0, len(original)
    block = False
    if markers:
        for open_re, close_re in _MARKERS:
            m = open_re.match(original)
            if not m:
                continue
            start = m.end()
            if close_re is not None:
                c = close_re.search(original, start)
                if c:
                    end = c.start()
            block = open_re.pattern == r"/\*"
            break
    start, end = _strip_ws(original, start, end)
    if block:
        r = _STAR_RESIDUE_RE.match(original, start, end)
        if r:
            start, end = _strip_ws(original, r.end(), end)
    return start, original[start:end]


def to_segments(candidates: Iterable[Candidate], min_ratio: float) -> List[Segment]:
    segments: List[Segment] = []
    seen = set()
    for c in sorted(candidates, key=lambda c: c.start):
        lead, body = sanitize(c.original, c.markers)
        if not body or not is_japanese_enough(body, min_ratio):
            continue
        offset = c.start + lead
        if offset in seen:
            continue
        seen.add(offset)
        segments.append(Segment(body, offset))
    return segments


# ---- 言語ごとの抽出 ----

_DQ = r'"(?:\\.|[^"\\\n])*"'
_SQ = r"'(?:\\.|[^'\\\n])*'"
_C_COMMENT = r"(?P<comment>//[^\n]*|/\*.*?\*/)"

_C_RE = re.compile(rf"(?P<str>{_DQ}|'(?:\\.|[^'\\\n])')|{_C_COMMENT}", re.S)
_JS_RE = re.compile(rf"(?P<str>{_DQ}|{_SQ}|`(?:\\.|[^`\\])*`)|{_C_COMMENT}", re.S)
_RUST_RE = re.compile(rf"(?P<str>{_DQ}|'(?:\\.|[^'\\\n])')|{_C_COMMENT}", re.S)
_PY_RE = re.compile(
    r"(?P<comment>(?<![A-Za-z0-9_])[rRuUbBfF]{0,2}(?:\"\"\"[\s\S]*?\"\"\"|'''[\s\S]*?'''))"
    rf"|(?P<str>{_DQ}|{_SQ})"
    r"|(?P<line>#[^\n]*)"
)


def _scan(pattern: re.Pattern[str]) -> Callable[[str], Iterator[Candidate]]:
    def scan(text: str) -> Iterator[Candidate]:
        for m in pattern.finditer(text):
            if m.lastgroup == "str":
                continue
            yield Candidate(m.start(), m.group(0))
    return scan


_HTML_MARKUP_RE = re.compile(
    r"(?P<comment><!--.*?-->)"
    r"|<(?P<raw>script|style)\b.*?</(?P=raw)\s*>"
    r"""|<(?:"[^"]*"|'[^']*'|[^'">])*>""",
    re.S | re.I,
)


def _gaps(text: str, pattern: re.Pattern[str], keep: str) -> Iterator[Candidate]:
    # マークアップ/コマンドの間の地の文を候補にする。keep グループは記号付きで候補に
    pos = 0
    for m in pattern.finditer(text):
        if m.start() > pos:
            yield Candidate(pos, text[pos:m.start()], markers=False)
        if m.group(keep) is not None:
            yield Candidate(m.start(), m.group(0))
        pos = m.end()
    if pos < len(text):
        yield Candidate(pos, text[pos:], markers=False)


def html_candidates(text: str) -> Iterator[Candidate]:
    return _gaps(text, _HTML_MARKUP_RE, "comment")


_LATEX_STRUCT_CMDS = (
    "begin|end|label|ref|eqref|pageref|cite|citep|citet|usepackage|documentclass"
    "|input|include|includegraphics|bibliography|bibliographystyle|url|href"
)
_LATEX_RE = re.compile(
    r"(?P<comment>(?<!\\)%[^\n]*)"
    r"|\\begin\{(?P<env>equation|align|gather|multline|math|displaymath|eqnarray)\*?\}.*?\\end\{(?P=env)\*?\}"
    r"|\$\$.*?\$\$|(?<!\\)\$.*?(?<!\\)\$|\\\(.*?\\\)|\\\[.*?\\\]"
    rf"|\\(?:{_LATEX_STRUCT_CMDS})\*?(?:\[[^\]]*\])*(?:\{{[^}}]*\}})?"
    r"|\\[A-Za-z@]+\*?|\\."
    r"|[{}]",
    re.S,
)


def latex_candidates(text: str) -> Iterator[Candidate]:
    return _gaps(text, _LATEX_RE, "comment")


_REGEX_EXTRACTORS: Dict[str, Callable[[str], Iterable[Candidate]]] = {
    "javascript": _scan(_JS_RE),
    "javascriptreact": _scan(_JS_RE),
    "typescript": _scan(_JS_RE),
    "typescriptreact": _scan(_JS_RE),
    "python": _scan(_PY_RE),
    "rust": _scan(_RUST_RE),
    "c": _scan(_C_RE),
    "cpp": _scan(_C_RE),
    "html": html_candidates,
    "latex": latex_candidates,
}


def has_regex_extractor(language_id: str) -> bool:
    return language_id in _REGEX_EXTRACTORS


def extract_comments(text: str, language_id: str, min_ratio: float = 0.1) -> List[Segment]:
    extractor = _REGEX_EXTRACTORS.get(language_id)
    if extractor is None:
        return []
    return to_segments(extractor(text), min_ratio)


__all__ = [
    "Candidate",
    "sanitize",
    "to_segments",
    "html_candidates",
    "latex_candidates",
    "has_regex_extractor",
    "extract_comments",
]
