"""
In-memory OTP session store.

Sessions bridge a verification attempt (signup confirmation or OTP login) to
its outcome. They live in this process only and expire after a fixed TTL.
A background task sweeps expired entries; reads also refuse expired entries
so nothing is visible past its expiry even between sweeps.
"""
import asyncio
import logging
import secrets
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from ..core.config import settings

logger = logging.getLogger(__name__)

SIGNUP = "signup"
LOGIN = "login"


@dataclass(frozen=True)
class OTPSession:
    token: str
    account_id: str
    phone: str
    display_name: str
    password: str  # empty for login sessions
    region: str
    subregion: str
    provider_id: str
    created_at: float
    purpose: str = SIGNUP
    username: str = ""
    challenge: Optional[str] = None  # provider login challenge handle

    def is_expired(self, now: float, ttl_seconds: int) -> bool:
        return now - self.created_at > ttl_seconds


class OTPSessionStore:
    """
    Registry of pending verification sessions keyed by opaque token.

    Safe for concurrent use from request handlers and the sweep task.
    """

    TOKEN_BYTES = 32

    def __init__(
        self,
        ttl_seconds: Optional[int] = None,
        sweep_interval_seconds: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.OTP_SESSION_TTL_SECONDS
        self.sweep_interval_seconds = (
            sweep_interval_seconds if sweep_interval_seconds is not None
            else settings.OTP_SESSION_SWEEP_INTERVAL_SECONDS
        )
        self._clock = clock
        self._sessions: Dict[str, OTPSession] = {}
        self._lock = threading.Lock()
        self.running = False
        self.task: Optional[asyncio.Task] = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _new_token(self) -> str:
        # Caller holds the lock
        token = secrets.token_urlsafe(self.TOKEN_BYTES)
        while token in self._sessions:
            token = secrets.token_urlsafe(self.TOKEN_BYTES)
        return token

    def create(
        self,
        account_id: str,
        phone: str,
        display_name: str,
        region: str,
        subregion: str,
        provider_id: str,
        password: str = "",
        purpose: str = SIGNUP,
        username: str = "",
        challenge: Optional[str] = None,
    ) -> OTPSession:
        """Store a new session and return it with its freshly issued token"""
        with self._lock:
            session = OTPSession(
                token=self._new_token(),
                account_id=account_id,
                phone=phone,
                display_name=display_name,
                password=password,
                region=region,
                subregion=subregion,
                provider_id=provider_id,
                created_at=self._clock(),
                purpose=purpose,
                username=username,
                challenge=challenge,
            )
            self._sessions[session.token] = session
        logger.debug(f"[SessionStore] Created {purpose} session for account ...{account_id[-4:]}")
        return session

    def get(self, token: str) -> Optional[OTPSession]:
        """Return the live session for token, or None"""
        if not token:
            return None
        with self._lock:
            session = self._sessions.get(token)
            if session is None:
                return None
            if session.is_expired(self._clock(), self.ttl_seconds):
                del self._sessions[token]
                return None
            return session

    def pop(self, token: str, allow_expired: bool = False) -> Optional[OTPSession]:
        """
        Atomically remove and return the live session for token.

        Of several concurrent callers, exactly one receives the session.
        With allow_expired, an entry past its TTL that has not been swept yet
        is still handed out; confirm flows claim this way once the provider
        has already accepted the code.
        """
        if not token:
            return None
        with self._lock:
            session = self._sessions.pop(token, None)
            if session is None:
                return None
            if not allow_expired and session.is_expired(self._clock(), self.ttl_seconds):
                return None
            return session

    def delete(self, token: str) -> None:
        with self._lock:
            self._sessions.pop(token, None)

    def sweep(self, now: Optional[float] = None) -> int:
        """Remove every expired session. Returns the number removed."""
        now = self._clock() if now is None else now
        with self._lock:
            expired = [
                token for token, session in self._sessions.items()
                if session.is_expired(now, self.ttl_seconds)
            ]
            for token in expired:
                del self._sessions[token]
        if expired:
            logger.info(f"[SessionStore] Swept {len(expired)} expired session(s)")
        return len(expired)

    async def start(self):
        """Start the periodic sweep"""
        if self.running:
            logger.warning("[SessionStore] Sweep is already running")
            return

        self.running = True
        self.task = asyncio.create_task(self._run())
        logger.info(f"[SessionStore] Sweep started (interval={self.sweep_interval_seconds}s, ttl={self.ttl_seconds}s)")

    async def stop(self):
        """Stop the periodic sweep"""
        if not self.running:
            return

        self.running = False
        if self.task:
            self.task.cancel()
            try:
                await self.task
            except asyncio.CancelledError:
                pass
            self.task = None
        logger.info("[SessionStore] Sweep stopped")

    async def _run(self):
        while self.running:
            await asyncio.sleep(self.sweep_interval_seconds)
            try:
                self.sweep()
            except Exception as e:
                logger.error(f"[SessionStore] Sweep failed: {e}", exc_info=True)
