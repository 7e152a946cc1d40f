import requests

from jastyle.cache import EnrichmentCache
from jastyle.models import STATUS_ERROR, STATUS_NOT_FOUND, STATUS_SUCCESS


class FakeResponse:
    def __init__(self, status_code, data=None):
        self.status_code = status_code
        self._data = data

    def json(self):
        if self._data is None:
            raise ValueError('no json')
        return self._data


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.urls = []

    def get(self, url, headers=None, timeout=None):
        self.urls.append(url)
        r = self.responses.pop(0)
        if isinstance(r, Exception):
            raise r
        return r


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_success_is_cached():
    session = FakeSession(FakeResponse(200, {'extract': '東京は日本の首都。'}))
    cache = EnrichmentCache(session=session, clock=FakeClock())
    assert cache.lookup('東京') == '東京は日本の首都。'
    assert cache.lookup('東京') == '東京は日本の首都。'
    assert len(session.urls) == 1
    assert session.urls[0].endswith('/page/summary/%E6%9D%B1%E4%BA%AC')
    assert cache.get_entry('東京').status == STATUS_SUCCESS
    assert cache.stats() == {'size': 1, 'hits': 1, 'misses': 1}


def test_not_found_is_cached():
    session = FakeSession(FakeResponse(404))
    cache = EnrichmentCache(session=session, clock=FakeClock())
    assert cache.lookup('ほげ') is None
    assert cache.lookup('ほげ') is None
    assert len(session.urls) == 1
    assert cache.get_entry('ほげ').status == STATUS_NOT_FOUND


def test_server_error_and_bad_json_are_cached_as_error():
    session = FakeSession(FakeResponse(503), FakeResponse(200))
    cache = EnrichmentCache(session=session, clock=FakeClock())
    assert cache.lookup('a') is None
    assert cache.get_entry('a').status == STATUS_ERROR
    assert cache.lookup('b') is None
    assert cache.get_entry('b').status == STATUS_ERROR


def test_transport_error_is_not_cached():
    session = FakeSession(requests.ConnectionError('down'), FakeResponse(200, {'extract': '要約'}))
    cache = EnrichmentCache(session=session, clock=FakeClock())
    assert cache.lookup('雨') is None
    assert cache.get_entry('雨') is None
    assert cache.lookup('雨') == '要約'
    assert len(session.urls) == 2


def test_entries_expire_after_ttl():
    clock = FakeClock()
    session = FakeSession(FakeResponse(200, {'extract': '古い'}), FakeResponse(200, {'extract': '新しい'}))
    cache = EnrichmentCache(session=session, clock=clock, ttl=3600)
    assert cache.lookup('本') == '古い'
    clock.now += 3599
    assert cache.lookup('本') == '古い'
    clock.now += 2
    assert cache.lookup('本') == '新しい'
    assert len(session.urls) == 2


def test_clear():
    session = FakeSession(FakeResponse(404), FakeResponse(404))
    cache = EnrichmentCache(session=session, clock=FakeClock())
    cache.lookup('x')
    cache.clear()
    assert cache.stats() == {'size': 0, 'hits': 0, 'misses': 0}
    cache.lookup('x')
    assert len(session.urls) == 2


def test_not_found_then_transport_error_scenario():
    clock = FakeClock()
    session = FakeSession(FakeResponse(404), requests.Timeout('slow'), FakeResponse(200, {'extract': '猫は動物。'}))
    cache = EnrichmentCache(session=session, clock=clock)
    assert cache.lookup('猫') is None
    assert cache.lookup('猫') is None
    assert len(session.urls) == 1
    # 期限切れ後の再問い合わせがタイムアウト -> キャッシュされず次回再試行
    clock.now += 3600
    assert cache.lookup('猫') is None
    assert cache.get_entry('猫').status == STATUS_NOT_FOUND
    assert cache.lookup('猫') == '猫は動物。'
    assert len(session.urls) == 3
