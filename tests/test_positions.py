from jastyle.models import Diagnostic
from jastyle.positions import Position, shift, to_offset, to_position, to_range


def test_to_position_counts_newlines_before_offset():
    text = 'あいう\nえお\nか'
    assert to_position(text, 0) == Position(0, 0)
    assert to_position(text, 2) == Position(0, 2)
    # 改行文字そのものは前の行の末尾
    assert to_position(text, 3) == Position(0, 3)
    assert to_position(text, 4) == Position(1, 0)
    assert to_position(text, 7) == Position(2, 0)
    assert to_position(text, 8) == Position(2, 1)


def test_to_position_clamps():
    text = 'ab\ncd'
    assert to_position(text, -5) == Position(0, 0)
    assert to_position(text, 99) == Position(1, 2)


def test_to_offset_inverse_and_clamp():
    text = 'あいう\nえお\nか'
    for offset in range(len(text) + 1):
        assert to_offset(text, to_position(text, offset)) == offset
    # 行末を越える桁は行末に、存在しない行は文書末尾に
    assert to_offset(text, Position(1, 50)) == 6
    assert to_offset(text, Position(10, 0)) == len(text)
    assert to_offset(text, Position(-1, 3)) == 0


def test_range_and_shift():
    text = '# コメント\nx = 1\n# もう一つ'
    d = Diagnostic(2, 4, 'msg', code='test')
    moved = shift([d], 13)[0]
    assert (moved.start, moved.end) == (15, 17)
    assert moved.message == 'msg' and moved.code == 'test'
    assert to_range(text, moved.start, moved.end) == {
        'start': {'line': 2, 'character': 2},
        'end': {'line': 2, 'character': 4},
    }
