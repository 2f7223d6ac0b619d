import asyncio
import pytest
from app.core import cache as cache_module
from app.core.cache import MemoryCacheBackend
from app.utils.throttle import ViolationThrottle


class FakeTime:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def time(self):
        return self.now


@pytest.fixture
def fake_time(monkeypatch):
    fake = FakeTime()
    monkeypatch.setattr(cache_module, "time", fake)
    return fake


class TestMemoryCacheBackend:
    def test_add_only_creates_once_inside_ttl(self, fake_time):
        backend = MemoryCacheBackend()
        assert asyncio.run(backend.add("k", 1, ttl=5)) is True
        fake_time.now += 4
        assert asyncio.run(backend.add("k", 1, ttl=5)) is False
        fake_time.now += 2
        assert asyncio.run(backend.add("k", 1, ttl=5)) is True

    def test_expired_keys_are_swept_on_write(self, fake_time):
        backend = MemoryCacheBackend()
        for session_id in range(50):
            asyncio.run(backend.add(f"violation-throttle:{session_id}:tab_switch", 1, ttl=2))
        assert len(backend._cache) == 50

        fake_time.now += 3
        asyncio.run(backend.add("violation-throttle:999:copy", 1, ttl=2))
        assert list(backend._cache) == ["violation-throttle:999:copy"]

    def test_zero_ttl_never_expires(self, fake_time):
        backend = MemoryCacheBackend()
        asyncio.run(backend.add("pinned", 1, ttl=0))
        fake_time.now += 10_000_000
        asyncio.run(backend.add("other", 1, ttl=1))
        assert "pinned" in backend._cache

    def test_clear(self, fake_time):
        backend = MemoryCacheBackend()
        asyncio.run(backend.add("k", 1, ttl=5))
        asyncio.run(backend.clear())
        assert asyncio.run(backend.add("k", 1, ttl=5)) is True


class TestViolationThrottle:
    def test_repeat_inside_window_is_dropped(self, fake_time):
        throttle = ViolationThrottle(MemoryCacheBackend(), window_seconds=3)
        assert asyncio.run(throttle.allow(1, "tab_switch")) is True
        assert asyncio.run(throttle.allow(1, "tab_switch")) is False
        assert asyncio.run(throttle.allow(1, "copy")) is True
        assert asyncio.run(throttle.allow(2, "tab_switch")) is True

        fake_time.now += 3
        assert asyncio.run(throttle.allow(1, "tab_switch")) is True

    def test_disabled_window_allows_everything(self):
        throttle = ViolationThrottle(MemoryCacheBackend(), window_seconds=0)
        assert all(asyncio.run(throttle.allow(1, "tab_switch")) for _ in range(3))
