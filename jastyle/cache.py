"""辞書引き(要約取得)のメモリ内キャッシュ。

ホバー表示で名詞の説明を添えるためだけに使い、診断には一切関与しない。

- キーは語の基本形。1時間以内のエントリはネットワークに問い合わせずに返す
- 404 は not_found、その他の非2xxは error としてキャッシュする
- 接続失敗・タイムアウトなど応答が得られなかった場合はキャッシュしない(次回再試行)
- ディスクには保存しない
"""
from __future__ import annotations
import logging
import threading
import time
from typing import Any, Callable, Dict
from urllib.parse import quote

import requests

from .models import CacheEntry, STATUS_ERROR, STATUS_NOT_FOUND, STATUS_SUCCESS

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://ja.wikipedia.org/api/rest_v1/page/summary/{term}"
DEFAULT_TTL = 60 * 60  # 秒
USER_AGENT = "jastyle/0.1.0 (Japanese proofreading)"


class EnrichmentCache:
    def __init__(
        self,
        session: Any = None,
        ttl: float = DEFAULT_TTL,
        clock: Callable[[], float] = time.time,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: float = 5.0,
    ):
        self.session = session or requests.Session()
        self.ttl = ttl
        self.clock = clock
        self.endpoint = endpoint
        self.timeout = timeout
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get_entry(self, term: str) -> CacheEntry | None:
        with self._lock:
            return self._entries.get(term)

    def _fresh(self, term: str) -> CacheEntry | None:
        with self._lock:
            entry = self._entries.get(term)
            if entry is not None and self.clock() - entry.timestamp < self.ttl:
                self.hits += 1
                return entry
            self.misses += 1
            return None

    def _store(self, term: str, summary: str | None, status: str) -> None:
        with self._lock:
            self._entries[term] = CacheEntry(summary, status, self.clock())

    def lookup(self, term: str) -> str | None:
        entry = self._fresh(term)
        if entry is not None:
            return entry.summary
        url = self.endpoint.format(term=quote(term, safe=""))
        try:
            resp = self.session.get(
                url,
                headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.debug("enrichment lookup failed for %r: %s", term, e)
            return None
        if resp.status_code == 404:
            self._store(term, None, STATUS_NOT_FOUND)
            return None
        if not 200 <= resp.status_code < 300:
            self._store(term, None, STATUS_ERROR)
            return None
        try:
            data = resp.json()
        except ValueError:
            self._store(term, None, STATUS_ERROR)
            return None
        summary = data.get("extract") if isinstance(data, dict) else None
        summary = summary or None
        self._store(term, summary, STATUS_SUCCESS)
        return summary

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {"size": len(self._entries), "hits": self.hits, "misses": self.misses}


__all__ = ["EnrichmentCache", "DEFAULT_ENDPOINT", "DEFAULT_TTL"]
