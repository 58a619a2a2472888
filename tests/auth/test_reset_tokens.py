from datetime import datetime, timedelta

import pytest

from errors import AuthError
from modules.auth.tokens import CODE_ALPHABET, CODE_LENGTH, ResetTokenRegistry


class Clock:
    def __init__(self):
        self.now = datetime(2024, 1, 1, 12, 0, 0)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture()
def clock():
    return Clock()


@pytest.fixture()
def registry(clock):
    return ResetTokenRegistry(ttl=timedelta(minutes=15), clock=clock)


def test_issued_code_shape(registry, clock):
    token = registry.issue("admin")
    assert len(token.code) == CODE_LENGTH
    assert set(token.code) <= set(CODE_ALPHABET)
    assert token.expires_at - token.created_at == timedelta(minutes=15)
    assert registry.find_live(token.code) is token


def test_code_redeems_once(registry):
    token = registry.issue("admin")
    seen = []
    registry.redeem(token.code, seen.append)
    assert seen == [token]
    assert token.used

    with pytest.raises(AuthError):
        registry.redeem(token.code, seen.append)
    assert len(seen) == 1


def test_code_expires(registry, clock):
    token = registry.issue("admin")
    clock.advance(minutes=14, seconds=59)
    assert registry.find_live(token.code) is token

    clock.advance(seconds=2)
    assert registry.find_live(token.code) is None
    with pytest.raises(AuthError):
        registry.redeem(token.code, lambda t: None)


def test_failed_callback_keeps_token_live(registry):
    token = registry.issue("admin")

    def boom(_token):
        raise RuntimeError("store down")

    with pytest.raises(RuntimeError):
        registry.redeem(token.code, boom)
    assert not token.used
    assert registry.find_live(token.code) is token


def test_sweep_evicts_used_and_expired(registry, clock):
    used = registry.issue("admin")
    registry.redeem(used.code, lambda t: None)
    registry.issue("admin")
    clock.advance(minutes=10)
    fresh = registry.issue("admin")
    assert len(registry) == 3

    clock.advance(minutes=6)
    assert registry.sweep() == 2
    assert len(registry) == 1
    assert registry.find_live(fresh.code) is fresh


def test_non_ascii_code_is_rejected(registry):
    registry.issue("admin")
    assert registry.find_live("ÄÖÜ12345") is None


def test_background_sweep_starts_and_stops(clock):
    registry = ResetTokenRegistry(sweep_interval=0.01, clock=clock)
    registry.issue("admin")
    clock.advance(hours=1)
    registry.start()
    try:
        for _ in range(200):
            if len(registry) == 0:
                break
            registry._stop.wait(0.01)
        assert len(registry) == 0
    finally:
        registry.stop()
    assert registry._thread is None
