"""
Rate limiting for verification flows.
Redis-backed when REDIS_URL is configured, in-memory otherwise.
"""
import time
import logging
from typing import Callable, Dict, List, Optional

import redis

from ..core.config import settings
from ..core.errors import RateLimitedError

logger = logging.getLogger(__name__)


class RateLimitEntry:
    """Rate limit entry for one Aadhaar number"""

    def __init__(self):
        self.starts: List[float] = []  # Timestamps of OTP deliveries (start + resend)
        self.failures: List[float] = []  # Timestamps of failed verifications
        self.locked_until: Optional[float] = None


class RateLimitService:
    """
    Per-account limits on OTP delivery and verification.

    - start/resend: max START_LIMIT deliveries per window
    - verify: max VERIFY_LIMIT failed attempts per window, then lockout
    - a successful verification clears failures and lockout
    """

    def __init__(
        self,
        redis_client: Optional[redis.Redis] = None,
        start_limit: Optional[int] = None,
        verify_limit: Optional[int] = None,
        window_seconds: Optional[int] = None,
        lockout_seconds: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._redis = redis_client
        self.start_limit = start_limit if start_limit is not None else settings.RATE_LIMIT_START_PER_WINDOW
        self.verify_limit = verify_limit if verify_limit is not None else settings.RATE_LIMIT_VERIFY_PER_WINDOW
        self.window_seconds = window_seconds if window_seconds is not None else settings.RATE_LIMIT_WINDOW_SECONDS
        self.lockout_seconds = lockout_seconds if lockout_seconds is not None else settings.RATE_LIMIT_LOCKOUT_SECONDS
        self._clock = clock
        self._entries: Dict[str, RateLimitEntry] = {}
        self._last_prune = clock()

    # Redis helpers: return None when Redis is not in use so callers use memory

    def _count_redis(self, key: str, now: float) -> Optional[int]:
        if not self._redis:
            return None
        try:
            pipe = self._redis.pipeline()
            pipe.zremrangebyscore(key, 0, now - self.window_seconds)
            pipe.zcard(key)
            _, count = pipe.execute()
            return int(count)
        except redis.RedisError as e:
            logger.warning(f"Redis rate limit check failed, using fallback: {e}")
            return None

    def _record_redis(self, key: str, now: float) -> None:
        if not self._redis:
            return
        try:
            pipe = self._redis.pipeline()
            pipe.zadd(key, {str(now): now})
            pipe.zremrangebyscore(key, 0, now - self.window_seconds)
            pipe.expire(key, self.window_seconds)
            pipe.execute()
        except redis.RedisError as e:
            logger.warning(f"Redis attempt record failed: {e}")

    def _locked_until_redis(self, account_id: str) -> Optional[float]:
        if not self._redis:
            return None
        try:
            value = self._redis.get(f"rate_limit:lockout:{account_id}")
            return float(value) if value else None
        except redis.RedisError:
            return None

    def _recent(self, timestamps: List[float], now: float) -> List[float]:
        return [ts for ts in timestamps if ts > now - self.window_seconds]

    def _entry(self, account_id: str) -> RateLimitEntry:
        entry = self._entries.get(account_id)
        if entry is None:
            entry = self._entries[account_id] = RateLimitEntry()
        return entry

    def _is_idle(self, entry: RateLimitEntry, now: float) -> bool:
        return (
            not self._recent(entry.starts, now)
            and not self._recent(entry.failures, now)
            and not (entry.locked_until and entry.locked_until > now)
        )

    def prune(self, now: Optional[float] = None) -> int:
        """Drop in-memory entries with nothing left in the window and no active lockout"""
        now = self._clock() if now is None else now
        idle = [account_id for account_id, entry in self._entries.items() if self._is_idle(entry, now)]
        for account_id in idle:
            del self._entries[account_id]
        self._last_prune = now
        return len(idle)

    def _maybe_prune(self, now: float) -> None:
        if now - self._last_prune >= self.window_seconds:
            self.prune(now)

    def _locked_until(self, account_id: str, now: float) -> Optional[float]:
        locked_until = self._locked_until_redis(account_id)
        if locked_until is None:
            entry = self._entries.get(account_id)
            locked_until = entry.locked_until if entry else None
        if locked_until and locked_until > now:
            return locked_until
        return None

    def check_start(self, account_id: str) -> None:
        """Raise RateLimitedError if another OTP delivery is not allowed"""
        now = self._clock()

        locked_until = self._locked_until(account_id, now)
        if locked_until:
            remaining = int(locked_until - now)
            raise RateLimitedError(
                f"Too many failed attempts. Please try again in {remaining} seconds.",
                retry_after=remaining,
            )

        count = self._count_redis(f"rate_limit:start:{account_id}", now)
        if count is None:
            entry = self._entries.get(account_id)
            if entry is None:
                count = 0
            else:
                entry.starts = self._recent(entry.starts, now)
                count = len(entry.starts)

        if count >= self.start_limit:
            raise RateLimitedError(
                "Too many OTP requests. Please wait before requesting a new code.",
                retry_after=self.window_seconds,
            )

    def record_start(self, account_id: str) -> None:
        now = self._clock()
        self._record_redis(f"rate_limit:start:{account_id}", now)
        self._entry(account_id).starts.append(now)
        self._maybe_prune(now)

    def check_verify(self, account_id: str) -> None:
        """Raise RateLimitedError while the account is locked out"""
        now = self._clock()
        locked_until = self._locked_until(account_id, now)
        if locked_until:
            remaining = int(locked_until - now)
            raise RateLimitedError(
                "Too many verification attempts. Please wait a few minutes and try again.",
                retry_after=remaining,
            )

    def record_verify(self, account_id: str, success: bool) -> None:
        now = self._clock()

        if success:
            entry = self._entries.get(account_id)
            if entry is not None:
                entry.failures = []
                entry.locked_until = None
                if self._is_idle(entry, now):
                    del self._entries[account_id]
            if self._redis:
                try:
                    self._redis.delete(f"rate_limit:verify:{account_id}", f"rate_limit:lockout:{account_id}")
                except redis.RedisError:
                    pass
            return

        entry = self._entry(account_id)
        self._record_redis(f"rate_limit:verify:{account_id}", now)
        entry.failures = self._recent(entry.failures, now)
        entry.failures.append(now)

        count = self._count_redis(f"rate_limit:verify:{account_id}", now)
        if count is None:
            count = len(entry.failures)

        if count >= self.verify_limit:
            entry.locked_until = now + self.lockout_seconds
            logger.warning(f"[RateLimit] Account ...{account_id[-4:]} locked for {self.lockout_seconds}s")
            if self._redis:
                try:
                    self._redis.setex(f"rate_limit:lockout:{account_id}", self.lockout_seconds, str(entry.locked_until))
                except redis.RedisError as e:
                    logger.warning(f"Redis lockout set failed: {e}")
        self._maybe_prune(now)

    def is_locked_out(self, account_id: str) -> bool:
        return self._locked_until(account_id, self._clock()) is not None


# Global singleton instance
_rate_limit_service: Optional[RateLimitService] = None


def get_rate_limit_service() -> Optional[RateLimitService]:
    """Get or create rate limit service singleton; None when disabled"""
    global _rate_limit_service
    if not settings.RATE_LIMIT_ENABLED:
        return None
    if _rate_limit_service is None:
        redis_client = None
        if settings.REDIS_URL:
            try:
                redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True, socket_connect_timeout=3, socket_timeout=3)
                redis_client.ping()  # Test connection
                logger.info("Redis rate limiting enabled")
            except redis.RedisError as e:
                logger.warning(f"Failed to initialize Redis for rate limiting, using in-memory fallback: {e}")
                redis_client = None
        _rate_limit_service = RateLimitService(redis_client=redis_client)
    return _rate_limit_service
