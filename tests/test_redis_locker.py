from datetime import timedelta

import pytest

from admincore.storage.redis_locker import LockNotHeld, LockNotObtained, RedisLocker


class FakeRedis:
    def __init__(self):
        self.data = {}
        self.px = {}
        self.set_calls = 0

    def set(self, key, value, nx=False, px=None):
        self.set_calls += 1
        if nx and key in self.data:
            return None
        self.data[key] = value.encode()
        self.px[key] = px
        return True

    def eval(self, script, numkeys, key, token, *args):
        held = self.data.get(key) == token.encode()
        if "pexpire" in script:
            if not held:
                return 0
            self.px[key] = int(args[0])
            return 1
        if "pttl" in script:
            return self.px[key] if held else -3
        if not held:
            return 0
        del self.data[key]
        return 1


@pytest.fixture
def fake():
    return FakeRedis()


@pytest.fixture
def locker(fake):
    return RedisLocker(fake)


def test_name(locker):
    assert str(locker) == "redis"


def test_lock_obtains_and_blocks_second(locker, fake):
    lock = locker.lock("job", 10)
    assert lock.key == "job"
    assert fake.data["job"] == lock.token.encode()
    with pytest.raises(LockNotObtained):
        locker.lock("job", 10)


def test_release_allows_relock(locker):
    lock = locker.lock("job", 10)
    lock.release()
    again = locker.lock("job", 10)
    assert again.token != lock.token


def test_double_release_raises(locker):
    lock = locker.lock("job", 10)
    lock.release()
    with pytest.raises(LockNotHeld):
        lock.release()


def test_metadata_suffix(locker):
    lock = locker.lock("job", 10, metadata="meta")
    assert lock.metadata == "meta"
    assert lock.token.endswith("meta")


def test_ttl_and_refresh(locker):
    lock = locker.lock("job", 10)
    assert lock.ttl() == timedelta(seconds=10)
    lock.refresh(20)
    assert lock.ttl() == timedelta(seconds=20)


def test_ttl_is_zero_when_not_held(locker):
    lock = locker.lock("job", 10)
    lock.release()
    assert lock.ttl() == timedelta(0)
    with pytest.raises(LockNotObtained):
        lock.refresh(5)


def test_context_manager_releases(locker, fake):
    with locker.lock("job", 10) as lock:
        assert "job" in fake.data
    assert "job" not in fake.data
    with pytest.raises(LockNotHeld):
        lock.release()


def test_retries_before_giving_up(locker, fake):
    locker.lock("job", 10)
    fake.set_calls = 0
    with pytest.raises(LockNotObtained):
        locker.lock("job", 10, retry_count=2, retry_delay=0)
    assert fake.set_calls == 2 + 1


def test_unknown_option_rejected(locker):
    with pytest.raises(TypeError):
        locker.lock("job", 10, bogus=True)