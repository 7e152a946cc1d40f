"""文・トークン列に対する文法/文体ルール。

ルール (出力順):
- comma-limit: 一文中の読点「、」が多すぎる
- adversative-ga: 逆接の接続助詞「が」が一文で複数回
- duplicate-particle: 助詞だけを並べた列で同じ助詞が続く
- adjacent-particles: 同じ種類の助詞が文字の間を空けず隣接
- conjunction-repeat: 同じ接続詞が続く (改行を挟めばリセット)
- ra-dropping: ら抜き言葉

各ルールは入力だけに依存する純粋関数で、設定の有効フラグで個別に無効化できる。
連続系のルールは「最初の1回より後の繰り返しすべて」を指摘する
(3連続なら2件)。
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, List, Sequence, Tuple

from .config import RuleConfig
from .models import SEVERITY_WARNING, SOURCE, Diagnostic, Sentence, Token

PARTICLE = "助詞"
CONJUNCTION = "接続詞"
VERB = "動詞"
JA_COMMA = "、"

# 一語で辞書登録されているら抜き形
RA_DROPPED_FORMS = frozenset(["来れる", "見れる"])


@dataclass
class StreakScanner:
    """直前の要素と連続回数だけを持つ2状態 (待機/連続中) のスキャナ。"""

    last: Token | None = None
    key: Any = None
    streak: int = 0

    def reset(self) -> None:
        self.last = None
        self.key = None
        self.streak = 0

    def feed(self, token: Token, key: Any, linked: bool = True) -> Token | None:
        """token を1つ進める。連続が伸びたら直前の要素を返す。"""
        prev = self.last
        if prev is not None and linked and key == self.key:
            self.streak += 1
        else:
            self.streak = 1
            prev = None
        self.last = token
        self.key = key
        return prev


def _diag(start: int, end: int, message: str, code: str) -> Diagnostic:
    return Diagnostic(start, end, message, SEVERITY_WARNING, code, SOURCE)


def is_particle(token: Token) -> bool:
    return token.pos == PARTICLE


def is_adversative_ga(token: Token) -> bool:
    return token.pos == PARTICLE and token.pos_detail1 == "接続助詞" and token.base_form == "が"


def is_conjunction(token: Token) -> bool:
    return token.pos == CONJUNCTION


def particle_key(token: Token) -> Tuple[str, str]:
    return (token.pos, token.pos_detail1)


def is_ra_target_verb(token: Token) -> bool:
    # 一段動詞・自立・未然形 (例: 見)
    return (
        token.pos == VERB
        and token.pos_detail1 == "自立"
        and token.conjugation_type == "一段"
        and token.conjugation_form == "未然形"
    )


def is_ra_suffix(token: Token) -> bool:
    return token.pos == VERB and token.pos_detail1 == "接尾" and token.base_form == "れる"


def is_ra_dropped_word(token: Token) -> bool:
    return token.pos == VERB and token.base_form in RA_DROPPED_FORMS


def check_comma_limit(text: str, sentences: Sequence[Sentence], rules: RuleConfig) -> List[Diagnostic]:
    limit = rules.comma_limit_max
    out: List[Diagnostic] = []
    for s in sentences:
        count = s.text.count(JA_COMMA)
        if count > limit:
            out.append(_diag(
                s.start, s.end,
                f"一文に使用できる読点「、」は最大{limit}個までです (現在{count}個)",
                "comma-limit",
            ))
    return out


def check_adversative_ga(text: str, sentences: Sequence[Sentence], rules: RuleConfig) -> List[Diagnostic]:
    limit = rules.adversative_ga_max
    out: List[Diagnostic] = []
    for s in sentences:
        count = sum(1 for t in s.tokens if is_adversative_ga(t))
        if count > limit:
            out.append(_diag(
                s.start, s.end,
                f"逆接の接続助詞「が」が同一文で{limit + 1}回以上使われています ({count}回)",
                "adversative-ga",
            ))
    return out


def check_duplicate_particle(text: str, sentences: Sequence[Sentence], rules: RuleConfig) -> List[Diagnostic]:
    out: List[Diagnostic] = []
    for s in sentences:
        scanner = StreakScanner()
        for token in s.tokens:
            if not is_particle(token):
                continue
            prev = scanner.feed(token, (token.surface,) + particle_key(token))
            if prev is not None and scanner.streak > rules.duplicate_particle_max_repeat:
                out.append(_diag(
                    prev.offset, token.end,
                    f"同じ助詞「{token.surface}」が連続しています",
                    "duplicate-particle",
                ))
    return out


def check_adjacent_particles(text: str, sentences: Sequence[Sentence], rules: RuleConfig) -> List[Diagnostic]:
    out: List[Diagnostic] = []
    for s in sentences:
        scanner = StreakScanner()
        for token in s.tokens:
            if not is_particle(token):
                scanner.reset()
                continue
            touching = scanner.last is not None and token.offset == scanner.last.end
            prev = scanner.feed(token, particle_key(token), linked=touching)
            if prev is not None and scanner.streak > rules.adjacent_particles_max_repeat:
                out.append(_diag(prev.offset, token.end, "助詞が連続して使われています", "adjacent-particles"))
    return out


def check_conjunction_repeat(text: str, sentences: Sequence[Sentence], rules: RuleConfig) -> List[Diagnostic]:
    out: List[Diagnostic] = []
    scanner = StreakScanner()
    for s in sentences:
        for token in s.tokens:
            if not is_conjunction(token):
                continue
            last = scanner.last
            same_line = last is None or "\n" not in text[last.end:token.offset]
            prev = scanner.feed(token, token.surface, linked=same_line)
            if prev is not None and scanner.streak > rules.conjunction_repeat_max:
                out.append(_diag(
                    prev.offset, token.end,
                    f"同じ接続詞「{token.surface}」が連続しています",
                    "conjunction-repeat",
                ))
    return out


def check_ra_dropping(text: str, sentences: Sequence[Sentence], rules: RuleConfig) -> List[Diagnostic]:
    message = "ら抜き言葉を使用しています"
    out: List[Diagnostic] = []
    for s in sentences:
        prev: Token | None = None
        for token in s.tokens:
            if is_ra_dropped_word(token):
                out.append(_diag(token.offset, token.end, message, "ra-dropping"))
            elif prev is not None and is_ra_target_verb(prev) and is_ra_suffix(token):
                out.append(_diag(prev.offset, token.end, message, "ra-dropping"))
            prev = token
    return out


Rule = Callable[[str, Sequence[Sentence], RuleConfig], List[Diagnostic]]

# (有効フラグ名, ルール関数)
RULES: List[Tuple[str, Rule]] = [
    ("comma_limit", check_comma_limit),
    ("adversative_ga", check_adversative_ga),
    ("duplicate_particle", check_duplicate_particle),
    ("adjacent_particles", check_adjacent_particles),
    ("conjunction_repeat", check_conjunction_repeat),
    ("ra_dropping", check_ra_dropping),
]


def check_grammar(text: str, sentences: Sequence[Sentence], rules: RuleConfig | None = None) -> List[Diagnostic]:
    """全ルールを順に実行する。オフセットは text (セグメント) 内の位置。"""
    rules = rules or RuleConfig()
    diagnostics: List[Diagnostic] = []
    for flag, rule in RULES:
        if getattr(rules, flag):
            diagnostics.extend(rule(text, sentences, rules))
    return diagnostics


__all__ = [
    "StreakScanner",
    "RULES",
    "check_grammar",
    "check_comma_limit",
    "check_adversative_ga",
    "check_duplicate_particle",
    "check_adjacent_particles",
    "check_conjunction_repeat",
    "check_ra_dropping",
    "is_particle",
    "is_conjunction",
]
