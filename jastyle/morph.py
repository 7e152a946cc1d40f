"""形態素解析器のアダプタ。

優先度:
- fugashi(MeCab) + ipadic があればそれを利用
- なければ Janome にフォールバック

どちらも IPADIC の品詞体系で、同じ Token に変換する。
解析器は表層形の位置を返さない(あるいは信用できない)ため、
テキストを先頭から走査して各表層形の位置を求め直す。
"""
from __future__ import annotations
from dataclasses import dataclass
import importlib.util
import logging
import threading
from pathlib import Path
from typing import Any, Iterable, Iterator, List

from .exceptions import InitializationFailure
from .japanese import NUMERIC_RE, has_kana, has_kanji
from .models import Token, TokenModifiers

logger = logging.getLogger(__name__)

_PKG_DIR = Path(__file__).resolve().parent
# 同梱辞書 -> 開発ツリーの順に探す
DICT_DIRS = (_PKG_DIR / "dict", _PKG_DIR.parent / "dict")


def find_resource(name: str) -> Path | None:
    for d in DICT_DIRS:
        p = d / name
        if p.is_file():
            return p
    return None


@dataclass
class RawMorpheme:
    """解析器ごとの出力を詰め替えた中間形。None は「解析器が値を持たない」。"""

    surface: str
    pos: str | None = None
    pos_detail1: str | None = None
    pos_detail2: str | None = None
    pos_detail3: str | None = None
    conjugation_type: str | None = None
    conjugation_form: str | None = None
    base_form: str | None = None
    reading: str | None = None
    pronunciation: str | None = None


def byte_length(surface: str) -> int:
    return len(surface.encode("utf-8"))


def compute_modifiers(raw: RawMorpheme) -> TokenModifiers:
    surface = raw.surface
    return TokenModifiers(
        proper=raw.pos_detail1 == "固有名詞",
        numeric=raw.pos_detail1 == "数" or raw.pos_detail2 == "数" or bool(NUMERIC_RE.match(surface)),
        kana=has_kana(surface),
        kanji=has_kanji(surface),
    )


def to_token(raw: RawMorpheme, offset: int) -> Token:
    base = raw.base_form
    if not base or base == "*":
        base = raw.surface
    return Token(
        surface=raw.surface,
        pos=raw.pos or "*",
        pos_detail1=raw.pos_detail1 or "*",
        pos_detail2=raw.pos_detail2 or "*",
        pos_detail3=raw.pos_detail3 or "*",
        conjugation_type=raw.conjugation_type or "*",
        conjugation_form=raw.conjugation_form or "*",
        base_form=base,
        reading=raw.reading or "",
        pronunciation=raw.pronunciation or "",
        offset=offset,
        length=byte_length(raw.surface),
        modifiers=compute_modifiers(raw),
    )


def anchor(text: str, morphemes: Iterable[RawMorpheme]) -> List[Token]:
    """表層形をカーソル位置以降で探して offset を振る。

    見つからなければカーソル位置をそのまま使う。offset は単調非減少になるが、
    近くに同じ表層形が繰り返されると位置がずれることはある。
    """
    tokens: List[Token] = []
    cursor = 0
    for raw in morphemes:
        found = text.find(raw.surface, cursor)
        offset = found if found >= 0 else cursor
        tokens.append(to_token(raw, offset))
        cursor = offset + len(raw.surface)
    return tokens


class Tokenizer:
    """解析器の共通インターフェース: initialize / is_ready / tokenize。

    initialize はロックで直列化され、並行して呼ばれても解析器のロードは1回。
    """

    backend = "base"

    def __init__(self) -> None:
        self._engine: Any = None
        self._lock = threading.Lock()

    def _load(self) -> Any:
        raise NotImplementedError

    def _morphemes(self, text: str) -> Iterator[RawMorpheme]:
        raise NotImplementedError

    def initialize(self) -> None:
        if self._engine is not None:
            return
        with self._lock:
            if self._engine is not None:
                return
            try:
                engine = self._load()
            except Exception as e:
                logger.error("failed to initialize %s tokenizer: %s", self.backend, e)
                raise InitializationFailure(f"{self.backend}: {e}") from e
            self._engine = engine
            logger.info("%s tokenizer initialized", self.backend)

    def is_ready(self) -> bool:
        return self._engine is not None

    def tokenize(self, text: str) -> List[Token]:
        if self._engine is None:
            raise InitializationFailure("tokenizer is not initialized; call initialize() first")
        return anchor(text, self._morphemes(text))


class JanomeTokenizer(Tokenizer):
    backend = "janome"
    USER_DICT = "userdic.csv"

    def _load(self) -> Any:
        from janome.tokenizer import Tokenizer as JanomeEngine

        udic = find_resource(self.USER_DICT)
        if udic is not None:
            logger.info("janome user dictionary: %s", udic)
            return JanomeEngine(udic=str(udic), udic_enc="utf8")
        return JanomeEngine()

    def _morphemes(self, text: str) -> Iterator[RawMorpheme]:
        for tok in self._engine.tokenize(text):
            parts = (tok.part_of_speech.split(",") + ["*"] * 4)[:4]
            yield RawMorpheme(
                surface=tok.surface,
                pos=parts[0],
                pos_detail1=parts[1],
                pos_detail2=parts[2],
                pos_detail3=parts[3],
                conjugation_type=tok.infl_type,
                conjugation_form=tok.infl_form,
                base_form=tok.base_form,
                reading=tok.reading,
                pronunciation=tok.phonetic,
            )


class FugashiTokenizer(Tokenizer):
    backend = "fugashi"
    USER_DICT = "user.dic"

    def _load(self) -> Any:
        from fugashi import GenericTagger
        import ipadic

        args = ipadic.MECAB_ARGS
        udic = find_resource(self.USER_DICT)
        if udic is not None:
            logger.info("mecab user dictionary: %s", udic)
            args += f' -u "{udic}"'
        return GenericTagger(args)

    def _morphemes(self, text: str) -> Iterator[RawMorpheme]:
        # IPADIC の素性: 品詞,細分類1,細分類2,細分類3,活用型,活用形,原形,読み,発音
        for word in self._engine(text):
            f = list(word.feature) + [None] * 9
            yield RawMorpheme(
                surface=word.surface,
                pos=f[0],
                pos_detail1=f[1],
                pos_detail2=f[2],
                pos_detail3=f[3],
                conjugation_type=f[4],
                conjugation_form=f[5],
                base_form=f[6],
                reading=f[7],
                pronunciation=f[8],
            )


BACKENDS = {"janome": JanomeTokenizer, "fugashi": FugashiTokenizer}


def fugashi_available() -> bool:
    return (
        importlib.util.find_spec("fugashi") is not None
        and importlib.util.find_spec("ipadic") is not None
    )


def create_tokenizer(backend: str = "auto") -> Tokenizer:
    if backend == "auto":
        backend = "fugashi" if fugashi_available() else "janome"
    try:
        cls = BACKENDS[backend]
    except KeyError:
        raise ValueError(f"unknown tokenizer backend: {backend}") from None
    return cls()


__all__ = [
    "RawMorpheme",
    "Tokenizer",
    "JanomeTokenizer",
    "FugashiTokenizer",
    "BACKENDS",
    "anchor",
    "byte_length",
    "compute_modifiers",
    "create_tokenizer",
    "fugashi_available",
    "find_resource",
]
