from __future__ import annotations

import threading
from unittest.mock import patch

from mealwizard.places.cache import cache_get, cache_set, clear_cache, get_cache_stats

URL = "https://maps.googleapis.com/maps/api/place/nearbysearch/json"


def test_cache_miss_then_hit():
    clear_cache()
    params = {"key": "k", "location": "1,2", "radius": "8000"}
    assert cache_get(URL, params) is None

    cache_set(URL, params, {"status": "OK", "results": []})
    assert cache_get(URL, params) == {"status": "OK", "results": []}

    stats = get_cache_stats()
    assert stats["misses"] == 1
    assert stats["hits"] == 1
    assert stats["size"] == 1
    assert stats["hit_rate"] == 50.0


def test_cache_key_ignores_api_key():
    clear_cache()
    cache_set(URL, {"key": "old", "query": "thai"}, {"status": "OK"})
    assert cache_get(URL, {"key": "rotated", "query": "thai"}) == {"status": "OK"}


def test_cache_different_params_miss():
    clear_cache()
    cache_set(URL, {"radius": "8000"}, {"status": "OK"})
    assert cache_get(URL, {"radius": "16000"}) is None
    assert get_cache_stats()["hits"] == 0


def test_cache_entries_expire():
    clear_cache()
    with patch("mealwizard.places.cache.time.time", return_value=1000.0):
        cache_set(URL, {"q": "x"}, {"status": "OK"})
    with patch("mealwizard.places.cache.time.time", return_value=1061.0):
        assert cache_get(URL, {"q": "x"}, ttl=60) is None
    assert get_cache_stats()["size"] == 0


def test_clear_cache_resets_stats():
    cache_get(URL, {"q": "y"})
    clear_cache()
    assert get_cache_stats() == {"size": 0, "hits": 0, "misses": 0, "hit_rate": 0.0}


def test_concurrent_reads_of_expired_entry():
    clear_cache()
    with patch("mealwizard.places.cache.time.time", return_value=1000.0):
        cache_set(URL, {"q": "z"}, {"status": "OK"})

    barrier = threading.Barrier(8)
    errors: list[Exception] = []
    results: list = []

    def read():
        barrier.wait()
        try:
            results.append(cache_get(URL, {"q": "z"}, ttl=60))
        except Exception as exc:
            errors.append(exc)

    with patch("mealwizard.places.cache.time.time", return_value=1061.0):
        threads = [threading.Thread(target=read) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

    assert errors == []
    assert results == [None] * 8
    assert get_cache_stats()["misses"] == 8
    assert get_cache_stats()["size"] == 0


def test_cache_set_evicts_stale_entries():
    clear_cache()
    with patch("mealwizard.places.cache.time.time", return_value=1000.0):
        cache_set(URL, {"lat": "1"}, {"status": "OK"})
        cache_set(URL, {"lat": "2"}, {"status": "OK"})
    with patch("mealwizard.places.cache.time.time", return_value=1030.0):
        cache_set(URL, {"lat": "3"}, {"status": "OK"}, ttl=60)
    assert get_cache_stats()["size"] == 3

    with patch("mealwizard.places.cache.time.time", return_value=1070.0):
        cache_set(URL, {"lat": "4"}, {"status": "OK"}, ttl=60)

    assert get_cache_stats()["size"] == 2
    with patch("mealwizard.places.cache.time.time", return_value=1071.0):
        assert cache_get(URL, {"lat": "3"}, ttl=60) == {"status": "OK"}
        assert cache_get(URL, {"lat": "1"}, ttl=60) is None
