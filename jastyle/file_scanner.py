"""ファイル走査と言語IDの推定。

- バイナリらしいファイルは読み飛ばす(ヒューリスティック)
- 拡張子から言語IDを決める。未知の拡張子は plaintext として文書全体を検査
"""
from __future__ import annotations
import os
from pathlib import Path
from typing import Iterable, Iterator

BINARY_BYTES = set(range(0, 9)) | {11, 12} | set(range(14, 32))

EXTENSION_LANGUAGES = {
    ".txt": "plaintext",
    ".md": "markdown",
    ".markdown": "markdown",
    ".tex": "latex",
    ".html": "html",
    ".htm": "html",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascriptreact",
    ".ts": "typescript",
    ".mts": "typescript",
    ".tsx": "typescriptreact",
    ".py": "python",
    ".pyi": "python",
    ".rs": "rust",
    ".c": "c",
    ".h": "c",
    ".cc": "cpp",
    ".cpp": "cpp",
    ".cxx": "cpp",
    ".hpp": "cpp",
}

_SKIP_DIRS = {".git", ".hg", ".svn", "node_modules", "__pycache__", ".venv", "venv"}


def language_for_path(path: Path) -> str:
    return EXTENSION_LANGUAGES.get(path.suffix.lower(), "plaintext")


def is_probably_text(data: bytes, threshold: float = 0.30) -> bool:
    if not data:
        return True
    non_text = sum(b in BINARY_BYTES for b in data)
    return non_text / len(data) < threshold


def read_text(path: Path, encoding_candidates=("utf-8", "utf-8-sig", "utf-16", "cp932", "shift_jis")) -> str | None:
    try:
        raw = path.read_bytes()
    except OSError:
        return None
    if not is_probably_text(raw):
        return None
    for enc in encoding_candidates:
        try:
            return raw.decode(enc)
        except UnicodeDecodeError:
            continue
    return None


def iter_files(paths: Iterable[str | os.PathLike[str]]) -> Iterator[Path]:
    for p in paths:
        path = Path(p)
        if path.is_file():
            yield path
        elif path.is_dir():
            for root, dirs, files in os.walk(path):
                dirs[:] = sorted(d for d in dirs if d not in _SKIP_DIRS)
                for f in sorted(files):
                    yield Path(root) / f


__all__ = ["iter_files", "read_text", "is_probably_text", "language_for_path", "EXTENSION_LANGUAGES"]
