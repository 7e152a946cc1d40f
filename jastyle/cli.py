from __future__ import annotations
import argparse
from dataclasses import replace
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List

from .checker import Issue, check_paths
from .config import AnalysisConfig, load_config
from .context import AnalysisContext
from .exceptions import InitializationFailure
from .extractor import SUPPORTED_LANGUAGES
from .morph import BACKENDS, fugashi_available

# CLI フラグ名 -> RuleConfig の有効フラグ
RULE_FLAGS = {
    "comma-limit": "comma_limit",
    "adversative-ga": "adversative_ga",
    "duplicate-particle": "duplicate_particle",
    "adjacent-particles": "adjacent_particles",
    "conjunction-repeat": "conjunction_repeat",
    "ra-dropping": "ra_dropping",
}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="jastyle",
        description="文書・ソースコードのコメントから日本語を抽出し、文法/文体の問題を検出します"
    )
    p.add_argument("paths", nargs="+", help="走査するファイル/ディレクトリ")
    p.add_argument("--json", action="store_true", help="JSONで出力")
    p.add_argument("--config", help="設定ファイル(TOML: pyproject.toml の [tool.jastyle] / YAML / JSON)")
    p.add_argument("--language", choices=SUPPORTED_LANGUAGES, help="言語IDを固定 (既定: 拡張子から推定)")
    p.add_argument("--backend", choices=["auto", *BACKENDS], default="auto", help="形態素解析器 (既定: auto = fugashi があれば fugashi)")
    p.add_argument("--fail-on-issue", action="store_true", help="問題が1件でもあれば終了コード1")
    p.add_argument("--jobs", type=int, default=1, help="並列実行のワーカー数")
    p.add_argument("--min-ratio", type=float, help="日本語文字の最小比率 (既定: 0.1)")
    p.add_argument("--min-severity", type=int, choices=[1, 2, 3, 4], help="この番号以下の重大度だけを表示 (1=Error .. 4=Hint, 既定: 2)")
    p.add_argument("--comma-limit-max", type=int, help="一文の読点の上限 (既定: 3)")
    p.add_argument("--adversative-ga-max", type=int, help="一文の逆接「が」の上限 (既定: 1)")
    for flag in RULE_FLAGS:
        p.add_argument(f"--no-{flag}", action="store_true", help=f"{flag} ルールを無効化")
    p.add_argument("-v", "--verbose", action="store_true", help="デバッグログを出力")
    return p


def resolve_config(args: argparse.Namespace) -> AnalysisConfig:
    # 設定ファイル -> CLI 引数の順に上書き
    config = load_config(args.config) if args.config else AnalysisConfig()
    changes: Dict[str, object] = {}
    if args.min_ratio is not None:
        changes["min_japanese_ratio"] = args.min_ratio
    if args.min_severity is not None:
        changes["min_severity"] = args.min_severity
    if args.language and args.language not in config.target_languages:
        changes["target_languages"] = (*config.target_languages, args.language)
    if changes:
        config = replace(config, **changes)
    rule_changes: Dict[str, object] = {}
    for flag, attr in RULE_FLAGS.items():
        if getattr(args, "no_" + flag.replace("-", "_")):
            rule_changes[attr] = False
    if args.comma_limit_max is not None:
        rule_changes["comma_limit_max"] = args.comma_limit_max
    if args.adversative_ga_max is not None:
        rule_changes["adversative_ga_max"] = args.adversative_ga_max
    if rule_changes:
        config = config.with_rules(**rule_changes)
    return config


def format_issue(i: Issue) -> str:
    # VS Code でクリック可能な file:line:col 形式
    if i.file:
        loc = f"{Path(i.file).resolve()}:{i.line}:{i.column}"
    else:
        loc = "<memory>"
    msg = f"{loc}: [{i.code}] {i.message}"
    if i.snippet:
        msg += " | " + i.snippet.replace("\n", "\\n")
    return msg


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        config = resolve_config(args)
    except (OSError, ValueError) as e:
        print(f"[error] failed to load config {args.config}: {e}", file=sys.stderr)
        return 2

    backend = args.backend
    if backend == "fugashi" and not fugashi_available():
        print("[warn] --backend fugashi が指定されましたが 'fugashi/ipadic' が見つかりません。janome で実行します。", file=sys.stderr)
        backend = "janome"
    paths = []
    for p in args.paths:
        if Path(p).exists():
            paths.append(p)
        else:
            print(f"[warn] path not found: {p}", file=sys.stderr)

    context = AnalysisContext(backend=backend)
    try:
        issues = check_paths(paths, config=config, jobs=args.jobs, context=context, language_id=args.language)
    except InitializationFailure as e:
        print(f"[error] 形態素解析器を初期化できません: {e}", file=sys.stderr)
        return 2
    if args.json:
        print(json.dumps([i.to_dict() for i in issues], ensure_ascii=False, indent=2))
    elif not issues:
        print("No issues found.")
    else:
        for i in issues:
            print(format_issue(i))
        print(f"Total: {len(issues)} issue(s)")
    if args.fail_on_issue and issues:
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
