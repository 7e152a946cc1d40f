"""jastyle
日本語文章の文法/文体チェックライブラリ。

主な提供機能:
- プレーンテキスト/Markdown の本文、HTML/LaTeX の地の文、
  各種プログラミング言語のコメント・docstring から日本語部分を抽出
- 形態素解析(fugashi または Janome)による IPADIC 品詞付きトークン化
- 文分割とルールベースの文法チェック(読点過多、逆接「が」、助詞の重複、ら抜き など)
- エディタ向けのホバー情報・品詞分類
- CLI インターフェース
"""
from .checker import (
    Issue,
    analyze,
    check_file,
    check_paths,
    check_text,
    hover,
    semantic_tokens,
    validate_document,
    validate_text,
)
from .config import AnalysisConfig, RuleConfig, load_config
from .context import AnalysisContext
from .exceptions import AnalysisError, GrammarLoadFailure, InitializationFailure, JastyleError
from .extractor import extract
from .grammar import check_grammar
from .models import Diagnostic, Segment, Sentence, Token
from .sentences import split_sentences

__all__ = [
    "Issue",
    "analyze",
    "check_file",
    "check_paths",
    "check_text",
    "hover",
    "semantic_tokens",
    "validate_document",
    "validate_text",
    "AnalysisConfig",
    "RuleConfig",
    "load_config",
    "AnalysisContext",
    "AnalysisError",
    "GrammarLoadFailure",
    "InitializationFailure",
    "JastyleError",
    "extract",
    "check_grammar",
    "Diagnostic",
    "Segment",
    "Sentence",
    "Token",
    "split_sentences",
]

__version__ = "0.1.0"
