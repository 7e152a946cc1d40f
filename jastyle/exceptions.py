"""jastyle の例外クラス。

解析パイプラインの失敗はすべて JastyleError の派生として表現する。
未対応言語は例外ではなく空の結果で表す。
"""
from __future__ import annotations


class JastyleError(Exception):
    """jastyle が送出する例外の基底クラス。"""


class InitializationFailure(JastyleError):
    """形態素解析器の初期化に失敗した、または初期化前に解析しようとした。"""


class GrammarLoadFailure(JastyleError):
    """tree-sitter の文法をロードできなかった。

    抽出器側で捕捉され、その言語は正規表現抽出にフォールバックする。
    """

    def __init__(self, grammar: str, reason: str = ""):
        self.grammar = grammar
        msg = f"failed to load grammar {grammar!r}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class AnalysisError(JastyleError):
    """1文書の解析(トークン化・文分割・ルール評価)中に起きた失敗。"""


__all__ = [
    "JastyleError",
    "InitializationFailure",
    "GrammarLoadFailure",
    "AnalysisError",
]
