"""高レベル API: 文書の検査・ホバー・品詞分類

- 言語ごとのセグメント抽出 (AST / 正規表現)
- セグメントごとに形態素解析 -> 文分割 -> ルール評価
- セグメント内オフセットを文書全体のオフセットへ戻す
- ファイル/パス群の検査 (CLI 用、スレッド並列)

1文書の解析中の例外は AnalysisError として記録し、その文書の診断は空にする。
解析器の初期化失敗もホスト向け API (検査・ホバー・品詞分類) では空の結果になる。
CLI 用の check_paths だけは最初に初期化して失敗を呼び出し元へ送出する。
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Tuple

from .config import AnalysisConfig
from .context import AnalysisContext, default_context
from .exceptions import AnalysisError, InitializationFailure
from .extractor import extract, is_prose
from .file_scanner import iter_files, language_for_path, read_text
from .grammar import check_grammar
from .japanese import japanese_ratio
from .models import Diagnostic, Segment, Sentence, Token
from .positions import shift, to_position
from .sentences import split_sentences

logger = logging.getLogger(__name__)

# 品詞 -> セマンティックトークン種別
TOKEN_TYPES = [
    "noun",
    "verb",
    "adjective",
    "adverb",
    "particle",
    "auxiliary",
    "conjunction",
    "symbol",
    "interjection",
    "prefix",
    "suffix",
    "unknown",
]
TOKEN_MODIFIERS = ["proper", "numeric", "kana", "kanji"]

_POS_TYPES = {
    "名詞": "noun",
    "動詞": "verb",
    "形容詞": "adjective",
    "副詞": "adverb",
    "助詞": "particle",
    "助動詞": "auxiliary",
    "接続詞": "conjunction",
    "記号": "symbol",
    "感動詞": "interjection",
    "接頭詞": "prefix",
    "接尾辞": "suffix",
}


def pos_to_token_type(pos: str) -> int:
    return TOKEN_TYPES.index(_POS_TYPES.get(pos, "unknown"))


def modifier_bits(token: Token) -> int:
    m = token.modifiers
    bits = 0
    for i, flag in enumerate((m.proper, m.numeric, m.kana, m.kanji)):
        if flag:
            bits |= 1 << i
    return bits


@dataclass
class Issue:
    file: str | None
    start: int
    end: int
    line: int
    column: int
    snippet: str
    message: str
    severity: int
    code: str

    @classmethod
    def from_diagnostic(cls, file: str | None, text: str, d: Diagnostic) -> "Issue":
        pos = to_position(text, d.start)
        return cls(
            file=file,
            start=d.start,
            end=d.end,
            line=pos.line + 1,
            column=pos.character + 1,
            snippet=text[d.start:d.end],
            message=d.message,
            severity=d.severity,
            code=d.code,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": self.file,
            "start": self.start,
            "end": self.end,
            "line": self.line,
            "column": self.column,
            "snippet": self.snippet,
            "message": self.message,
            "severity": self.severity,
            "code": self.code,
        }


def analyze(text: str, context: AnalysisContext | None = None) -> Tuple[List[Token], List[Sentence]]:
    ctx = context or default_context()
    tokens = ctx.ready_tokenizer().tokenize(text)
    return tokens, split_sentences(text, tokens)


def _segments(text: str, language_id: str, config: AnalysisConfig, ctx: AnalysisContext) -> List[Segment]:
    if not config.enable or language_id not in config.target_languages:
        return []
    if is_prose(language_id) and japanese_ratio(text) < config.min_japanese_ratio:
        return []
    return extract(text, language_id, config.min_japanese_ratio, ctx.ast)


def _validate(text: str, language_id: str, config: AnalysisConfig, ctx: AnalysisContext) -> List[Diagnostic]:
    segments = _segments(text, language_id, config, ctx)
    if not segments:
        return []
    tokenizer = ctx.ready_tokenizer()
    diagnostics: List[Diagnostic] = []
    try:
        for seg in segments:
            tokens = tokenizer.tokenize(seg.text)
            sentences = split_sentences(seg.text, tokens)
            found = check_grammar(seg.text, sentences, config.rules)
            diagnostics.extend(shift(found, seg.offset))
    except InitializationFailure:
        raise
    except Exception as e:
        raise AnalysisError(f"analysis failed for {language_id} document: {e}") from e
    return [d for d in diagnostics if d.severity <= config.min_severity]


def validate_text(
    text: str,
    language_id: str = "plaintext",
    config: AnalysisConfig | None = None,
    context: AnalysisContext | None = None,
) -> List[Diagnostic]:
    """文書全体の診断を返す。オフセットは text 全体に対する位置。

    解析器が初期化できない場合や解析中の例外では空リストを返す。
    """
    config = config or AnalysisConfig()
    ctx = context or default_context()
    try:
        return _validate(text, language_id, config, ctx)
    except InitializationFailure as e:
        # 初期化失敗のログは初回の initialize で出ている
        logger.debug("tokenizer unavailable; no diagnostics: %s", e)
        return []
    except AnalysisError:
        logger.exception("analysis error; no diagnostics for this document")
        return []


def validate_document(
    key: str,
    text: str,
    language_id: str,
    publish: Callable[[str, List[Diagnostic]], Any],
    config: AnalysisConfig | None = None,
    context: AnalysisContext | None = None,
) -> bool:
    """検査して publish(key, diagnostics) を呼ぶ。

    同じ key に対して後から別の検査が始まっていたら公開せず False を返す。
    世代番号は key ごとに残るので、文書を閉じたら呼び出し側で
    context.generations.forget(key) を呼ぶこと。
    """
    ctx = context or default_context()
    generation = ctx.generations.begin(key)
    diagnostics = validate_text(text, language_id, config, ctx)
    if not ctx.generations.is_current(key, generation):
        logger.debug("discarding stale diagnostics for %s (generation %d)", key, generation)
        return False
    publish(key, diagnostics)
    return True


def _covering_token(text: str, language_id: str, offset: int, config: AnalysisConfig, ctx: AnalysisContext) -> Token | None:
    for seg in _segments(text, language_id, config, ctx):
        if not seg.offset <= offset < seg.end:
            continue
        local = offset - seg.offset
        for token in ctx.ready_tokenizer().tokenize(seg.text):
            if token.offset <= local < token.end:
                return token
    return None


def format_token(token: Token) -> str:
    return "\n".join([
        f"**{token.surface}**",
        "",
        "| 項目 | 値 |",
        "|------|------|",
        f"| 品詞 | {token.pos} |",
        f"| 品詞細分類1 | {token.pos_detail1} |",
        f"| 品詞細分類2 | {token.pos_detail2} |",
        f"| 品詞細分類3 | {token.pos_detail3} |",
        f"| 活用型 | {token.conjugation_type} |",
        f"| 活用形 | {token.conjugation_form} |",
        f"| 基本形 | {token.base_form} |",
        f"| 読み | {token.reading} |",
        f"| 発音 | {token.pronunciation} |",
    ])


def hover(
    text: str,
    language_id: str,
    offset: int,
    config: AnalysisConfig | None = None,
    context: AnalysisContext | None = None,
) -> str | None:
    """offset 位置のトークン情報を Markdown で返す。名詞には辞書の要約を添える。"""
    config = config or AnalysisConfig()
    ctx = context or default_context()
    try:
        token = _covering_token(text, language_id, offset, config, ctx)
    except InitializationFailure as e:
        logger.debug("tokenizer unavailable; no hover: %s", e)
        return None
    except Exception:
        logger.exception("hover analysis failed")
        return None
    if token is None:
        return None
    content = format_token(token)
    if config.enable_enrichment and token.pos == "名詞":
        try:
            summary = ctx.enrichment.lookup(token.base_form)
        except Exception as e:
            # 辞書引きの失敗はホバー本体に影響させない
            logger.debug("enrichment failed for %r: %s", token.base_form, e)
            summary = None
        if summary:
            content += f"\n\n---\n\n{summary}"
    return content


def semantic_tokens(
    text: str,
    language_id: str,
    config: AnalysisConfig | None = None,
    context: AnalysisContext | None = None,
) -> List[Tuple[int, int, int, int, int]]:
    """(行, 桁, 長さ, 種別番号, 修飾ビット) の列。座標は text 全体に対するもの。"""
    config = config or AnalysisConfig()
    ctx = context or default_context()
    out: List[Tuple[int, int, int, int, int]] = []
    try:
        for seg in _segments(text, language_id, config, ctx):
            for token in ctx.ready_tokenizer().tokenize(seg.text):
                if not token.surface.strip():
                    continue
                pos = to_position(text, seg.offset + token.offset)
                out.append((pos.line, pos.character, len(token.surface), pos_to_token_type(token.pos), modifier_bits(token)))
    except InitializationFailure as e:
        logger.debug("tokenizer unavailable; no semantic tokens: %s", e)
        return []
    except Exception:
        logger.exception("semantic token analysis failed")
        return []
    return out


def check_text(
    text: str,
    language_id: str = "plaintext",
    file: str | None = None,
    config: AnalysisConfig | None = None,
    context: AnalysisContext | None = None,
) -> List[Issue]:
    return [Issue.from_diagnostic(file, text, d) for d in validate_text(text, language_id, config, context)]


def check_file(
    path: str,
    config: AnalysisConfig | None = None,
    context: AnalysisContext | None = None,
    language_id: str | None = None,
) -> List[Issue]:
    content = read_text(Path(path))
    if content is None:
        return []
    lang = language_id or language_for_path(Path(path))
    return check_text(content, lang, file=path, config=config, context=context)


def check_paths(
    paths: Iterable[str],
    config: AnalysisConfig | None = None,
    jobs: int = 1,
    context: AnalysisContext | None = None,
    language_id: str | None = None,
) -> List[Issue]:
    ctx = context or default_context()
    files = [str(f) for f in iter_files(paths)]
    # 並列実行の前に解析器を初期化しておく (失敗はここで呼び出し元へ)
    ctx.ready_tokenizer()
    results: List[Issue] = []
    if jobs and jobs > 1:
        with ThreadPoolExecutor(max_workers=jobs) as ex:
            futs = {ex.submit(check_file, f, config, ctx, language_id): f for f in files}
            for fut in as_completed(futs):
                try:
                    results.extend(fut.result())
                except OSError as e:
                    logger.warning("failed to read %s: %s", futs[fut], e)
        results.sort(key=lambda i: (i.file or "", i.start))
    else:
        for f in files:
            results.extend(check_file(f, config, ctx, language_id))
    return results


__all__ = [
    "TOKEN_TYPES",
    "TOKEN_MODIFIERS",
    "Issue",
    "analyze",
    "validate_text",
    "validate_document",
    "hover",
    "format_token",
    "semantic_tokens",
    "pos_to_token_type",
    "check_text",
    "check_file",
    "check_paths",
]
