"""設定の読み込み。

エディタ設定と同じ camelCase のキーを受け付ける。

TOML (pyproject.toml の [tool.jastyle]):

    [tool.jastyle]
    minJapaneseRatio = 0.2
    [tool.jastyle.rules]
    commaLimitMax = 4
    raDropping = false

YAML / JSON: 上記 [tool.jastyle] の中身と同じ構造のマッピング。

設定値は検査1回分の不変なスナップショットとして扱い、エンジンは書き換えない。
"""
from __future__ import annotations
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple
import json
import tomllib

import yaml

DEFAULT_TARGET_LANGUAGES: Tuple[str, ...] = (
    "plaintext",
    "markdown",
    "japanese",
    "latex",
    "html",
    "javascript",
    "typescript",
    "javascriptreact",
    "typescriptreact",
    "python",
    "rust",
    "c",
    "cpp",
)


@dataclass(frozen=True)
class RuleConfig:
    comma_limit: bool = True
    comma_limit_max: int = 3
    adversative_ga: bool = True
    adversative_ga_max: int = 1
    duplicate_particle: bool = True
    duplicate_particle_max_repeat: int = 1
    adjacent_particles: bool = True
    adjacent_particles_max_repeat: int = 1
    conjunction_repeat: bool = True
    conjunction_repeat_max: int = 1
    ra_dropping: bool = True


@dataclass(frozen=True)
class AnalysisConfig:
    enable: bool = True
    target_languages: Tuple[str, ...] = DEFAULT_TARGET_LANGUAGES
    min_japanese_ratio: float = 0.1
    # この値以下(= より重大)の severity だけを報告する
    min_severity: int = 2
    enable_enrichment: bool = True
    rules: RuleConfig = field(default_factory=RuleConfig)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "AnalysisConfig":
        if not data:
            return cls()
        if not isinstance(data, Mapping):
            raise ValueError("設定はマッピングである必要があります")
        values = _convert(cls, data, exclude={"rules"})
        rules_data = data.get("rules")
        if rules_data is not None:
            if not isinstance(rules_data, Mapping):
                raise ValueError("'rules' はマッピングである必要があります")
            values["rules"] = RuleConfig(**_convert(RuleConfig, rules_data))
        return cls(**values)

    def with_rules(self, **changes: Any) -> "AnalysisConfig":
        return replace(self, rules=replace(self.rules, **changes))


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p.capitalize() for p in rest)


# エディタ拡張側の設定名
_ALIASES = {"warningMinSeverity": "min_severity", "enableWikipedia": "enable_enrichment"}


def _convert(cls, data: Mapping[str, Any], exclude: set[str] = frozenset()) -> Dict[str, Any]:
    by_key = {}
    for f in fields(cls):
        if f.name in exclude:
            continue
        by_key[f.name] = f
        by_key[_camel(f.name)] = f
    for alias, target in _ALIASES.items():
        if target in by_key:
            by_key[alias] = by_key[target]
    out: Dict[str, Any] = {}
    for key, value in data.items():
        f = by_key.get(key)
        if f is None:
            continue
        out[f.name] = _coerce(f.name, f.type, value)
    return out


def _coerce(name: str, type_name: Any, value: Any) -> Any:
    t = str(type_name)
    if t == "bool":
        if not isinstance(value, bool):
            raise ValueError(f"{name}: 真偽値が必要です ({value!r})")
        return value
    if t == "int":
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{name}: 整数が必要です ({value!r})")
        return value
    if t == "float":
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"{name}: 数値が必要です ({value!r})")
        return float(value)
    if t.startswith("Tuple"):
        if isinstance(value, str) or not isinstance(value, (list, tuple)):
            raise ValueError(f"{name}: 文字列の配列が必要です ({value!r})")
        return tuple(str(v) for v in value)
    return value


def _read_text(p: Path) -> str:
    # いくつかのエンコーディング候補を試す (PowerShell の UTF-16 出力にも対応)
    raw = p.read_bytes()
    for enc in ("utf-8", "utf-8-sig", "utf-16", "cp932"):
        try:
            return raw.decode(enc).lstrip("\ufeff")
        except UnicodeDecodeError:
            continue
    raise ValueError(f"設定ファイルをデコードできません: {p}")


def load_config(path: str | Path) -> AnalysisConfig:
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(str(p))
    suffix = p.suffix.lower()
    text = _read_text(p)
    if suffix == ".toml":
        try:
            doc = tomllib.loads(text)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"TOMLの解析に失敗しました: {p}: {e}") from e
        data = doc.get("tool", {}).get("jastyle", {})
    elif suffix in {".yaml", ".yml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ValueError(f"YAMLの解析に失敗しました: {p}: {e}") from e
    else:
        data = json.loads(text)
    return AnalysisConfig.from_mapping(data)


__all__ = ["RuleConfig", "AnalysisConfig", "load_config", "DEFAULT_TARGET_LANGUAGES"]
