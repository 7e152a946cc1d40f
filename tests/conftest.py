from typing import Dict, Iterator, Tuple

import pytest

from jastyle.ast_extractor import GrammarRegistry
from jastyle.context import AnalysisContext
from jastyle.morph import RawMorpheme, Tokenizer
from jastyle.sentences import split_sentences

# 表層形 -> IPADIC 素性 (品詞,細分類1,細分類2,細分類3,活用型,活用形,原形,読み,発音)
LEXICON: Dict[str, Tuple[str, ...]] = {
    'これ': ('名詞', '代名詞', '一般', '*', '*', '*', 'これ', 'コレ', 'コレ'),
    'は': ('助詞', '係助詞', '*', '*', '*', '*', 'は', 'ハ', 'ワ'),
    'を': ('助詞', '格助詞', '一般', '*', '*', '*', 'を', 'ヲ', 'ヲ'),
    'に': ('助詞', '格助詞', '一般', '*', '*', '*', 'に', 'ニ', 'ニ'),
    'へ': ('助詞', '格助詞', '一般', '*', '*', '*', 'へ', 'ヘ', 'エ'),
    'が': ('助詞', '接続助詞', '*', '*', '*', '*', 'が', 'ガ', 'ガ'),
    '、': ('記号', '読点', '*', '*', '*', '*', '、', '、', '、'),
    '。': ('記号', '句点', '*', '*', '*', '*', '。', '。', '。'),
    '！': ('記号', '一般', '*', '*', '*', '*', '！', '！', '！'),
    '？': ('記号', '一般', '*', '*', '*', '*', '？', '？', '？'),
    '\n': ('記号', '空白', '*', '*', '*', '*', '\n', '', ''),
    ' ': ('記号', '空白', '*', '*', '*', '*', ' ', '', ''),
    'とても': ('副詞', '助詞類接続', '*', '*', '*', '*', 'とても', 'トテモ', 'トテモ'),
    'すごく': ('形容詞', '自立', '*', '*', '形容詞・アウオ段', '連用テ接続', 'すごい', 'スゴク', 'スゴク'),
    '非常に': ('副詞', '一般', '*', '*', '*', '*', '非常に', 'ヒジョウニ', 'ヒジョーニ'),
    '良い': ('形容詞', '自立', '*', '*', '形容詞・アウオ段', '基本形', '良い', 'ヨイ', 'ヨイ'),
    'しかし': ('接続詞', '*', '*', '*', '*', '*', 'しかし', 'シカシ', 'シカシ'),
    '見': ('動詞', '自立', '*', '*', '一段', '未然形', '見る', 'ミ', 'ミ'),
    'れる': ('動詞', '接尾', '*', '*', '一段', '基本形', 'れる', 'レル', 'レル'),
    '来れる': ('動詞', '自立', '*', '*', '一段', '基本形', '来れる', 'コレル', 'コレル'),
    '行く': ('動詞', '自立', '*', '*', '五段・カ行促音便', '基本形', '行く', 'イク', 'イク'),
    '読む': ('動詞', '自立', '*', '*', '五段・マ行', '基本形', '読む', 'ヨム', 'ヨム'),
    '東京': ('名詞', '固有名詞', '地域', '一般', '*', '*', '東京', 'トウキョウ', 'トーキョー'),
    '本': ('名詞', '一般', '*', '*', '*', '*', '本', 'ホン', 'ホン'),
    '雨': ('名詞', '一般', '*', '*', '*', '*', '雨', 'アメ', 'アメ'),
    'だ': ('助動詞', '*', '*', '*', '特殊・ダ', '基本形', 'だ', 'ダ', 'ダ'),
    'です': ('助動詞', '*', '*', '*', '特殊・デス', '基本形', 'です', 'デス', 'デス'),
    'テスト': ('名詞', 'サ変接続', '*', '*', '*', '*', 'テスト', 'テスト', 'テスト'),
    '１２３': ('名詞', '数', '*', '*', '*', '*', '１２３', 'イチニサン', 'イチニサン'),
}
_LONGEST = max(len(k) for k in LEXICON)


class FakeTokenizer(Tokenizer):
    """辞書の最長一致で IPADIC 形式の形態素を返すテスト用解析器。

    辞書にない文字は1文字ずつ 名詞,一般 として扱う。
    """

    backend = 'fake'

    def __init__(self, fail: bool = False):
        super().__init__()
        self.fail = fail
        self.loads = 0

    def _load(self):
        self.loads += 1
        if self.fail:
            raise RuntimeError('dictionary not found')
        return LEXICON

    def _morphemes(self, text: str) -> Iterator[RawMorpheme]:
        i = 0
        while i < len(text):
            for n in range(min(_LONGEST, len(text) - i), 0, -1):
                surf = text[i:i + n]
                feature = self._engine.get(surf)
                if feature is not None:
                    break
            else:
                surf = text[i]
                feature = ('名詞', '一般', '*', '*', '*', '*', surf, '', '')
            yield RawMorpheme(surf, *feature)
            i += len(surf)


def _no_grammar(name):
    raise ImportError(f'no grammar {name} in tests')


@pytest.fixture
def tokenizer():
    t = FakeTokenizer()
    t.initialize()
    return t


@pytest.fixture
def sentences_of(tokenizer):
    def run(text):
        return split_sentences(text, tokenizer.tokenize(text))
    return run


@pytest.fixture
def context():
    # tree-sitter の有無に左右されないよう、正規表現抽出だけを使う
    return AnalysisContext(tokenizer=FakeTokenizer(), grammars=GrammarRegistry(loader=_no_grammar))
