import subprocess
import sys
from pathlib import Path

import pytest

from jastyle.ast_extractor import GrammarRegistry
from jastyle.checker import validate_text
from jastyle.context import AnalysisContext
from jastyle.morph import JanomeTokenizer
from jastyle.sentences import split_sentences

ROOT = Path(__file__).resolve().parents[1]


@pytest.fixture(scope='module')
def janome_tokenizer():
    pytest.importorskip('janome')
    t = JanomeTokenizer()
    t.initialize()
    return t


def test_janome_offsets_cover_text(janome_tokenizer):
    text = 'これはテストです。\n明日は雨が降るでしょう。'
    tokens = janome_tokenizer.tokenize(text)
    assert ''.join(t.surface for t in tokens) == text
    for t in tokens:
        assert text[t.offset:t.end] == t.surface
    sentences = split_sentences(text, tokens)
    assert sentences[-1].text.endswith('でしょう。')


def test_janome_comma_limit(janome_tokenizer):
    ctx = AnalysisContext(tokenizer=janome_tokenizer, grammars=GrammarRegistry())
    text = 'これは、とても、すごく、非常に、良い。'
    diags = validate_text(text, 'plaintext', context=ctx)
    assert [(d.code, d.start, d.end) for d in diags] == [('comma-limit', 0, len(text))]


def test_janome_ipadic_fields(janome_tokenizer):
    tokens = janome_tokenizer.tokenize('東京へ行く')
    tokyo = tokens[0]
    assert (tokyo.surface, tokyo.pos, tokyo.pos_detail1) == ('東京', '名詞', '固有名詞')
    assert tokyo.modifiers.proper and tokyo.modifiers.kanji
    assert tokens[-1].base_form == '行く'


def test_smoke_cli(tmp_path):
    pytest.importorskip('janome')
    p = tmp_path / 'sample.txt'
    p.write_text('これはテストです。', encoding='utf-8')
    cp = subprocess.run(
        [sys.executable, '-m', 'jastyle.cli', '--backend', 'janome', str(p)],
        cwd=str(ROOT), capture_output=True, text=True,
    )
    assert cp.returncode == 0
    assert cp.stdout.strip() == 'No issues found.'
