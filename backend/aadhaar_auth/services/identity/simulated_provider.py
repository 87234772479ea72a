"""
Simulated identity provider used when Cognito is not configured
"""
import logging
import secrets
from typing import Optional

from ...core.config import settings
from ...core.env import get_env_name, is_production_env
from ...core.errors import ProviderError
from ...utils.phone import get_phone_last4
from .provider import AuthTokens, IdentityProvider, IdentityRecord, PendingIdentity

logger = logging.getLogger(__name__)


class SimulatedIdentityProvider(IdentityProvider):
    """
    Deterministic stand-in for the identity provider.

    Every operation succeeds; the code it "delivers" is SIMULATED_OTP_CODE
    and confirmations compare against it. Logs carry the [Identity][Simulated]
    prefix so simulated traffic is distinguishable from real provider calls.
    """

    simulated = True
    INVALID_CODE_MESSAGE = "Invalid verification code provided, please try again."

    def __init__(self, code: Optional[str] = None):
        self.code = code or settings.SIMULATED_OTP_CODE
        if is_production_env():
            logger.warning("[Identity][Simulated] WARNING: Simulated provider enabled in production!")
        else:
            logger.info(f"[Identity][Simulated] Simulated provider enabled for environment: {get_env_name()}")

    def _check_code(self, username: str, code: str):
        if not secrets.compare_digest((code or "").strip(), self.code):
            logger.warning(f"[Identity][Simulated] Code mismatch for {username}")
            raise ProviderError(self.INVALID_CODE_MESSAGE)

    async def create_pending_identity(
        self,
        username: str,
        password: str,
        phone: str,
        account_id: str,
        display_name: str,
        region: str,
        subregion: str,
        email: Optional[str] = None,
    ) -> PendingIdentity:
        logger.info(f"[Identity][Simulated] Pending identity {username} created; code for ...{get_phone_last4(phone)}: {self.code}")
        return PendingIdentity(provider_id=f"sim_{username}")

    async def confirm_identity(self, username: str, code: str) -> None:
        self._check_code(username, code)
        logger.info(f"[Identity][Simulated] Identity confirmed for {username}")

    async def resend_code(self, username: str) -> None:
        logger.info(f"[Identity][Simulated] Code resent for {username}: {self.code}")

    async def password_authenticate(self, username: str, password: str) -> AuthTokens:
        logger.info(f"[Identity][Simulated] Password verified for {username}")
        return AuthTokens(
            access_token=f"sim-access-{username}",
            id_token=f"sim-id-{username}",
            refresh_token=None,
        )

    async def lookup_identity(self, username: str) -> Optional[IdentityRecord]:
        return IdentityRecord(username=username, status="SIMULATED")

    async def start_login_challenge(self, username: str) -> str:
        logger.info(f"[Identity][Simulated] Login code for {username}: {self.code}")
        return f"sim-challenge-{username}"

    async def answer_login_challenge(self, username: str, challenge: str, code: str) -> AuthTokens:
        self._check_code(username, code)
        logger.info(f"[Identity][Simulated] Login challenge answered for {username}")
        return AuthTokens(
            access_token=f"sim-access-{username}",
            id_token=f"sim-id-{username}",
            refresh_token=None,
        )
