from datetime import timedelta

import pytest
import redis

from admincore.storage.redis_cache import RedisCache
from admincore.storage.types import CacheError


class FakeRedis:
    def __init__(self, reachable=True):
        self.reachable = reachable
        self.data = {}
        self.hashes = {}
        self.ttls = {}

    def ping(self):
        if not self.reachable:
            raise redis.exceptions.ConnectionError("connection refused")
        return True

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value, ex=None):
        self.data[key] = str(value).encode()
        self.ttls[key] = ex
        return True

    def delete(self, key):
        return int(self.data.pop(key, None) is not None)

    def hget(self, hk, key):
        return self.hashes.get(hk, {}).get(key)

    def hdel(self, hk, key):
        return int(self.hashes.get(hk, {}).pop(key, None) is not None)

    def _add(self, key, step):
        raw = self.data.get(key, b"0")
        try:
            number = int(raw)
        except ValueError:
            raise redis.exceptions.ResponseError("value is not an integer") from None
        self.data[key] = str(number + step).encode()
        return number + step

    def incr(self, key):
        return self._add(key, 1)

    def decr(self, key):
        return self._add(key, -1)

    def pexpire(self, key, duration):
        self.ttls[key] = duration
        return key in self.data


@pytest.fixture
def fake():
    return FakeRedis()


@pytest.fixture
def cache(fake):
    return RedisCache(fake)


def test_name_and_client(cache, fake):
    assert str(cache) == "redis"
    assert cache.client is fake


def test_unreachable_server_raises():
    with pytest.raises(CacheError):
        RedisCache(FakeRedis(reachable=False))


def test_set_get_round_trip(cache, fake):
    cache.set("k", "v", 10)
    assert cache.get("k") == "v"
    assert fake.ttls["k"] == 10


def test_zero_expire_keeps_forever(cache, fake):
    cache.set("k", "v", 0)
    assert cache.get("k") == "v"
    assert fake.ttls["k"] is None


def test_missing_key_raises(cache):
    with pytest.raises(CacheError):
        cache.get("absent")


def test_delete(cache):
    cache.set("k", "v", 10)
    cache.delete("k")
    with pytest.raises(CacheError):
        cache.get("k")


def test_hash_get_and_del(cache, fake):
    fake.hashes["h"] = {"f": b"x"}
    assert cache.hash_get("h", "f") == "x"
    cache.hash_del("h", "f")
    with pytest.raises(CacheError):
        cache.hash_get("h", "f")


def test_increase_and_decrease(cache):
    cache.set("n", 5, 10)
    cache.increase("n")
    cache.increase("n")
    cache.decrease("n")
    assert cache.get("n") == "6"


def test_increase_non_integer_raises(cache):
    cache.set("n", "abc", 10)
    with pytest.raises(CacheError):
        cache.increase("n")


def test_expire_accepts_seconds_and_timedelta(cache, fake):
    cache.set("k", "v", 10)
    cache.expire("k", 30)
    assert fake.ttls["k"] == timedelta(seconds=30)
    cache.expire("k", timedelta(minutes=2))
    assert fake.ttls["k"] == timedelta(minutes=2)