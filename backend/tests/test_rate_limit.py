"""
Tests for per-account rate limiting (in-memory and Redis-backed)
"""
import pytest
from unittest.mock import MagicMock

import redis

from aadhaar_auth.core.config import settings
from aadhaar_auth.core.errors import RateLimitedError
from aadhaar_auth.services import rate_limit as rate_limit_module
from aadhaar_auth.services.rate_limit import RateLimitService, get_rate_limit_service

ACCOUNT_ID = "735269466602"


def test_start_limit_within_window(rate_limiter, clock):
    for _ in range(5):
        rate_limiter.check_start(ACCOUNT_ID)
        rate_limiter.record_start(ACCOUNT_ID)

    with pytest.raises(RateLimitedError) as exc_info:
        rate_limiter.check_start(ACCOUNT_ID)
    assert exc_info.value.retry_after == 600

    # Limits are per account
    rate_limiter.check_start("111111111111")

    # Old deliveries age out of the window
    clock.advance(601)
    rate_limiter.check_start(ACCOUNT_ID)


def test_lockout_after_failures_then_expiry(rate_limiter, clock):
    for _ in range(9):
        rate_limiter.record_verify(ACCOUNT_ID, success=False)
    rate_limiter.check_verify(ACCOUNT_ID)

    rate_limiter.record_verify(ACCOUNT_ID, success=False)

    assert rate_limiter.is_locked_out(ACCOUNT_ID)
    with pytest.raises(RateLimitedError) as exc_info:
        rate_limiter.check_verify(ACCOUNT_ID)
    assert exc_info.value.retry_after == 900
    # A locked account cannot request new codes either
    with pytest.raises(RateLimitedError):
        rate_limiter.check_start(ACCOUNT_ID)

    clock.advance(901)
    assert not rate_limiter.is_locked_out(ACCOUNT_ID)
    rate_limiter.check_verify(ACCOUNT_ID)


def test_success_clears_failures(rate_limiter):
    for _ in range(9):
        rate_limiter.record_verify(ACCOUNT_ID, success=False)
    rate_limiter.record_verify(ACCOUNT_ID, success=True)
    rate_limiter.record_verify(ACCOUNT_ID, success=False)

    assert not rate_limiter.is_locked_out(ACCOUNT_ID)


def test_checks_do_not_accumulate_entries(rate_limiter):
    for i in range(10_000):
        account_id = f"{i:012d}"
        rate_limiter.check_start(account_id)
        rate_limiter.check_verify(account_id)
        rate_limiter.is_locked_out(account_id)

    assert len(rate_limiter._entries) == 0


def test_idle_entries_are_pruned(rate_limiter, clock):
    rate_limiter.record_start("111111111111")
    rate_limiter.record_verify("222222222222", success=False)
    for _ in range(10):
        rate_limiter.record_verify("333333333333", success=False)
    assert len(rate_limiter._entries) == 3

    # Past the window the first two are idle; the lockout keeps the third
    clock.advance(601)
    rate_limiter.record_start(ACCOUNT_ID)

    assert set(rate_limiter._entries) == {"333333333333", ACCOUNT_ID}

    clock.advance(900)
    assert rate_limiter.prune() == 2
    assert len(rate_limiter._entries) == 0


def test_explicit_zero_limit_is_kept(clock):
    limiter = RateLimitService(start_limit=0, verify_limit=0, clock=clock)

    assert limiter.start_limit == 0
    assert limiter.verify_limit == 0
    with pytest.raises(RateLimitedError):
        limiter.check_start(ACCOUNT_ID)


class TestRedisBackend:

    def test_count_uses_sorted_set(self, clock):
        client = MagicMock()
        pipe = client.pipeline.return_value
        pipe.execute.return_value = [0, 5]
        client.get.return_value = None
        limiter = RateLimitService(redis_client=client, start_limit=5, clock=clock)

        with pytest.raises(RateLimitedError):
            limiter.check_start(ACCOUNT_ID)
        pipe.zcard.assert_called_once_with(f"rate_limit:start:{ACCOUNT_ID}")

    def test_redis_lockout_is_honoured(self, clock):
        client = MagicMock()
        client.get.return_value = str(clock.now + 100)
        limiter = RateLimitService(redis_client=client, clock=clock)

        with pytest.raises(RateLimitedError) as exc_info:
            limiter.check_verify(ACCOUNT_ID)
        assert exc_info.value.retry_after == 100

    def test_redis_errors_fall_back_to_memory(self, clock):
        client = MagicMock()
        client.pipeline.side_effect = redis.ConnectionError("down")
        client.get.side_effect = redis.ConnectionError("down")
        limiter = RateLimitService(redis_client=client, start_limit=2, clock=clock)

        limiter.check_start(ACCOUNT_ID)
        limiter.record_start(ACCOUNT_ID)
        limiter.record_start(ACCOUNT_ID)
        with pytest.raises(RateLimitedError):
            limiter.check_start(ACCOUNT_ID)


class TestRateLimitFactory:

    @pytest.fixture(autouse=True)
    def _reset(self, monkeypatch):
        monkeypatch.setattr(rate_limit_module, "_rate_limit_service", None)

    def test_disabled_returns_none(self, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", False)
        assert get_rate_limit_service() is None

    def test_in_memory_singleton(self, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
        monkeypatch.setattr(settings, "REDIS_URL", "")

        service = get_rate_limit_service()

        assert isinstance(service, RateLimitService)
        assert get_rate_limit_service() is service
