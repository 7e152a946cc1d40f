"""プロセス内で共有する状態の置き場所。

- 形態素解析器 (初期化は1回。失敗したら再試行しない)
- tree-sitter 文法キャッシュ (文法名ごと、追記のみ)
- 辞書引きキャッシュ
- 文書ごとの検査世代番号

グローバル変数にせず AnalysisContext に持たせて各 API に渡す。
テストはケースごとに新しいコンテキストを作ればよい。
"""
from __future__ import annotations
import threading
from typing import Dict

from .ast_extractor import AstExtractor, GrammarRegistry
from .cache import EnrichmentCache
from .exceptions import InitializationFailure
from .morph import Tokenizer, create_tokenizer


class DocumentGenerations:
    """文書キーごとの検査パス番号。新しいパスが始まると古いパスは公開しない。"""

    def __init__(self) -> None:
        self._current: Dict[str, int] = {}
        self._lock = threading.Lock()

    def begin(self, key: str) -> int:
        with self._lock:
            gen = self._current.get(key, 0) + 1
            self._current[key] = gen
            return gen

    def is_current(self, key: str, generation: int) -> bool:
        with self._lock:
            return self._current.get(key) == generation

    def forget(self, key: str) -> None:
        with self._lock:
            self._current.pop(key, None)


class AnalysisContext:
    def __init__(
        self,
        tokenizer: Tokenizer | None = None,
        grammars: GrammarRegistry | None = None,
        enrichment: EnrichmentCache | None = None,
        backend: str = "auto",
    ):
        self._tokenizer = tokenizer
        self._enrichment = enrichment
        self._backend = backend
        self._init_error: InitializationFailure | None = None
        self._lock = threading.Lock()
        self.ast = AstExtractor(grammars or GrammarRegistry())
        self.generations = DocumentGenerations()

    @property
    def tokenizer(self) -> Tokenizer:
        with self._lock:
            if self._tokenizer is None:
                self._tokenizer = create_tokenizer(self._backend)
            return self._tokenizer

    @property
    def enrichment(self) -> EnrichmentCache:
        with self._lock:
            if self._enrichment is None:
                self._enrichment = EnrichmentCache()
            return self._enrichment

    @property
    def initialization_error(self) -> InitializationFailure | None:
        return self._init_error

    def ready_tokenizer(self) -> Tokenizer:
        """初期化済みの解析器を返す。失敗時は InitializationFailure。

        一度失敗したらその失敗を覚えておき、ロードを再試行せず同じ例外を送出する。
        """
        if self._init_error is not None:
            raise self._init_error
        tokenizer = self.tokenizer
        try:
            tokenizer.initialize()
        except InitializationFailure as e:
            self._init_error = e
            raise
        return tokenizer


_default: AnalysisContext | None = None
_default_lock = threading.Lock()


def default_context() -> AnalysisContext:
    global _default
    with _default_lock:
        if _default is None:
            _default = AnalysisContext()
        return _default


__all__ = ["AnalysisContext", "DocumentGenerations", "default_context"]
