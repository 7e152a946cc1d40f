import threading

import pytest

from jastyle.exceptions import InitializationFailure
from jastyle.morph import JanomeTokenizer, RawMorpheme, anchor, create_tokenizer, to_token

from conftest import FakeTokenizer


def test_tokenize_before_initialize_raises():
    t = FakeTokenizer()
    assert not t.is_ready()
    with pytest.raises(InitializationFailure):
        t.tokenize('これ')


def test_initialize_failure_is_wrapped():
    t = FakeTokenizer(fail=True)
    with pytest.raises(InitializationFailure) as ei:
        t.initialize()
    assert isinstance(ei.value.__cause__, RuntimeError)
    assert not t.is_ready()


def test_initialize_runs_once_under_concurrency():
    t = FakeTokenizer()
    threads = [threading.Thread(target=t.initialize) for _ in range(8)]
    for th in threads:
        th.start()
    for th in threads:
        th.join()
    assert t.loads == 1
    assert t.is_ready()


def test_token_fields(tokenizer):
    tokens = tokenizer.tokenize('これは東京')
    assert [t.surface for t in tokens] == ['これ', 'は', '東京']
    kore = tokens[0]
    assert (kore.pos, kore.pos_detail1, kore.reading) == ('名詞', '代名詞', 'コレ')
    # length は UTF-8 のバイト長、offset は文字位置
    assert kore.length == 6
    assert [t.offset for t in tokens] == [0, 2, 3]


def test_modifiers(tokenizer):
    by_surface = {t.surface: t.modifiers for t in tokenizer.tokenize('東京のテスト１２３')}
    assert by_surface['東京'].proper and by_surface['東京'].kanji
    assert not by_surface['東京'].kana
    assert by_surface['テスト'].kana and not by_surface['テスト'].numeric
    assert by_surface['１２３'].numeric
    assert to_token(RawMorpheme('123', pos='名詞'), 0).modifiers.numeric


def test_base_form_falls_back_to_surface():
    assert to_token(RawMorpheme('ほげ', base_form='*'), 0).base_form == 'ほげ'
    assert to_token(RawMorpheme('ほげ'), 0).base_form == 'ほげ'
    assert to_token(RawMorpheme('ほげ', pos=None), 0).pos == '*'


def test_anchor_skips_dropped_whitespace():
    # 解析器が空白を返さなくても後続の位置は正しい
    tokens = anchor('を を', [RawMorpheme('を'), RawMorpheme('を')])
    assert [t.offset for t in tokens] == [0, 2]


def test_anchor_repeated_substring_is_monotonic():
    text = 'すもももももももものうち'
    surfaces = ['すもも', 'も', 'もも', 'も', 'もも', 'の', 'うち']
    tokens = anchor(text, [RawMorpheme(s) for s in surfaces])
    offsets = [t.offset for t in tokens]
    assert offsets == sorted(offsets)
    assert offsets == [0, 3, 4, 6, 7, 9, 10]
    for t in tokens:
        assert text[t.offset:t.end] == t.surface


def test_anchor_missing_surface_uses_cursor():
    # 正規化などで表層形が本文に見つからない場合
    tokens = anchor('ＡＢ', [RawMorpheme('A'), RawMorpheme('ＡＢ')])
    assert [t.offset for t in tokens] == [0, 1]
    offsets = [t.offset for t in tokens]
    assert offsets == sorted(offsets)


def test_create_tokenizer():
    assert isinstance(create_tokenizer('janome'), JanomeTokenizer)
    with pytest.raises(ValueError):
        create_tokenizer('nope')
