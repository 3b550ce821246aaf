"""Tests for token stores and the dashboard cache"""
from lumin.client import DashboardCache, FileTokenStore, MemoryTokenStore


def test_memory_store_keeps_refresh_token():
    store = MemoryTokenStore()
    store.set_tokens("a1", "r1")
    store.set_tokens("a2")

    assert store.get_access_token() == "a2"
    assert store.get_refresh_token() == "r1"

    store.clear()
    assert store.get_access_token() is None


def test_file_store_shared_between_instances(tmp_path):
    path = tmp_path / "session" / "tokens.json"
    FileTokenStore(path).set_tokens("a1", "r1")

    other = FileTokenStore(path)
    assert other.get_access_token() == "a1"
    assert other.get_refresh_token() == "r1"

    other.clear()
    assert not path.exists()
    assert FileTokenStore(path).get_access_token() is None


def test_file_store_ignores_corrupt_file(tmp_path):
    path = tmp_path / "tokens.json"
    path.write_text("{not json", encoding="utf-8")

    store = FileTokenStore(path)

    assert store.get_access_token() is None
    store.set_tokens("a1")
    assert store.get_access_token() == "a1"


def test_dashboard_cache_ttl(clock):
    cache = DashboardCache(ttl_seconds=300, clock=clock)
    cache.set({"xp": 10})

    clock.advance(seconds=299)
    assert cache.get() == {"xp": 10}

    clock.advance(seconds=1)
    assert cache.get() is None


def test_dashboard_cache_invalidate(clock):
    cache = DashboardCache(clock=clock)
    cache.set({"xp": 10})
    cache.invalidate()

    assert cache.get() is None
