"""tree-sitter による構文木ベースのコメント抽出。

- 文法はプロセス内で文法名ごとに1回だけロードしてキャッシュする
- ロードに失敗した文法は「利用不可」として記録し、再試行しない
- tree-sitter はバイトオフセットを返すため、文字オフセットに換算する

抽出候補は comments.to_segments で正規表現経路と同じ後処理にかける。
"""
from __future__ import annotations
from bisect import bisect_left
import importlib
from itertools import accumulate
import logging
import threading
from typing import Any, Callable, Dict, Iterator, List, Set, Tuple

from .comments import Candidate, to_segments
from .exceptions import GrammarLoadFailure
from .models import Segment

logger = logging.getLogger(__name__)

# 文法名 -> (モジュール名, 言語関数名)
GRAMMAR_MODULES: Dict[str, Tuple[str, str]] = {
    "javascript": ("tree_sitter_javascript", "language"),
    "typescript": ("tree_sitter_typescript", "language_typescript"),
    "tsx": ("tree_sitter_typescript", "language_tsx"),
    "python": ("tree_sitter_python", "language"),
    "c": ("tree_sitter_c", "language"),
    "cpp": ("tree_sitter_cpp", "language"),
    "rust": ("tree_sitter_rust", "language"),
    "html": ("tree_sitter_html", "language"),
}

# 言語ID -> 文法名
LANGUAGE_GRAMMARS: Dict[str, str] = {
    "javascript": "javascript",
    "javascriptreact": "javascript",
    "typescript": "typescript",
    "typescriptreact": "tsx",
    "python": "python",
    "c": "c",
    "cpp": "cpp",
    "rust": "rust",
    "html": "html",
}

# 名前に 'comment' を含まないコメント系ノードはここに足す
COMMENT_NODE_TYPES: Dict[str, Tuple[str, ...]] = {
    "javascript": ("comment", "line_comment", "block_comment"),
    "typescript": ("comment", "line_comment", "block_comment"),
    "tsx": ("comment", "line_comment", "block_comment"),
    "python": ("comment",),
    "c": ("comment",),
    "cpp": ("comment",),
    "rust": ("line_comment", "block_comment"),
    "html": ("comment",),
}

_HTML_TEXT_TYPES = ("text", "raw_text")
_HTML_ELEMENT_TYPES = ("element", "script_element", "style_element")
_HTML_SKIP_TAGS = ("script", "style")


def _default_loader(grammar: str) -> Any:
    module_name, func_name = GRAMMAR_MODULES[grammar]
    from tree_sitter import Language

    module = importlib.import_module(module_name)
    return Language(getattr(module, func_name)())


class GrammarRegistry:
    """文法名ごとのロード済み tree-sitter Language のキャッシュ。

    ロード中は lock を保持するので、同時に要求したスレッドは同じロード完了を待つ。
    """

    def __init__(self, loader: Callable[[str], Any] | None = None):
        self._loader = loader or _default_loader
        self._languages: Dict[str, Any] = {}
        self._unavailable: Set[str] = set()
        self._lock = threading.Lock()

    def load(self, grammar: str) -> Any:
        with self._lock:
            if grammar in self._languages:
                return self._languages[grammar]
            if grammar in self._unavailable:
                raise GrammarLoadFailure(grammar, "previously failed")
            if grammar not in GRAMMAR_MODULES:
                self._unavailable.add(grammar)
                raise GrammarLoadFailure(grammar, "unknown grammar")
            try:
                language = self._loader(grammar)
            except Exception as e:
                self._unavailable.add(grammar)
                logger.warning("tree-sitter grammar %s unavailable: %s", grammar, e)
                raise GrammarLoadFailure(grammar, str(e)) from e
            self._languages[grammar] = language
            logger.info("loaded tree-sitter grammar %s", grammar)
            return language

    def get(self, grammar: str) -> Any | None:
        try:
            return self.load(grammar)
        except GrammarLoadFailure:
            return None

    def is_loaded(self, grammar: str) -> bool:
        with self._lock:
            return grammar in self._languages


class _ByteIndex:
    """UTF-8 バイト位置 -> 文字位置。"""

    def __init__(self, text: str):
        self.text = text
        self.data = text.encode("utf-8")
        # starts[i] = i 文字目の開始バイト位置 (末尾に全体長)
        self.starts = [0, *accumulate(len(c.encode("utf-8")) for c in text)]

    def char(self, byte_offset: int) -> int:
        return bisect_left(self.starts, byte_offset)


def _is_comment_node(node_type: str, grammar: str) -> bool:
    if node_type in COMMENT_NODE_TYPES.get(grammar, ()):
        return True
    return "comment" in node_type.lower()


def _is_docstring(node: Any, node_text: str) -> bool:
    if node.type not in ("string", "string_content"):
        return False
    return node_text.lstrip("rRuUbBfF")[:3] in ('"""', "'''")


def _html_tag_name(node: Any, index: _ByteIndex) -> str:
    for child in node.children:
        if child.type in ("start_tag", "self_closing_tag"):
            for grand in child.children:
                if grand.type == "tag_name":
                    return index.text[index.char(grand.start_byte):index.char(grand.end_byte)].lower()
    return ""


def _walk(root: Any, grammar: str, index: _ByteIndex) -> Iterator[Candidate]:
    # 深さ優先。子は逆順に積んで文書順に取り出す
    stack = [root]
    while stack:
        node = stack.pop()
        if grammar == "html" and node.type in _HTML_ELEMENT_TYPES:
            if _html_tag_name(node, index) in _HTML_SKIP_TAGS:
                continue
        start = index.char(node.start_byte)
        end = index.char(node.end_byte)
        if grammar == "html" and node.type in _HTML_TEXT_TYPES:
            yield Candidate(start, index.text[start:end], markers=False)
            continue
        if _is_comment_node(node.type, grammar):
            yield Candidate(start, index.text[start:end])
            continue
        if grammar == "python":
            node_text = index.text[start:end]
            if _is_docstring(node, node_text):
                yield Candidate(start, node_text)
                continue
        stack.extend(reversed(node.children))


class AstExtractor:
    def __init__(self, registry: GrammarRegistry | None = None):
        self.registry = registry or GrammarRegistry()

    @staticmethod
    def grammar_for(language_id: str) -> str | None:
        return LANGUAGE_GRAMMARS.get(language_id)

    def is_available(self, language_id: str) -> bool:
        grammar = self.grammar_for(language_id)
        if grammar is None:
            return False
        return self.registry.get(grammar) is not None

    def extract(self, text: str, language_id: str, min_ratio: float = 0.1) -> List[Segment]:
        grammar = self.grammar_for(language_id)
        if grammar is None:
            return []
        language = self.registry.get(grammar)
        if language is None:
            return []
        from tree_sitter import Parser

        index = _ByteIndex(text)
        tree = Parser(language).parse(index.data)
        return to_segments(_walk(tree.root_node, grammar, index), min_ratio)


__all__ = [
    "GRAMMAR_MODULES",
    "LANGUAGE_GRAMMARS",
    "GrammarRegistry",
    "AstExtractor",
]
