"""
Abstract identity provider interface
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class PendingIdentity:
    provider_id: str


@dataclass
class AuthTokens:
    access_token: str
    id_token: str
    refresh_token: Optional[str] = None


@dataclass
class IdentityRecord:
    username: str
    status: str
    enabled: bool = True
    attributes: Dict[str, Any] = field(default_factory=dict)


class IdentityProvider(ABC):
    """
    Abstract base class for identity providers.

    Every operation is a remote call. Failures raise ProviderError (or
    AuthError for credential checks); nothing is retried here.
    """

    simulated = False

    @abstractmethod
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
        """Register an unconfirmed identity; the provider delivers a confirmation code"""
        pass

    @abstractmethod
    async def confirm_identity(self, username: str, code: str) -> None:
        """Confirm a pending identity with the delivered 6-digit code"""
        pass

    @abstractmethod
    async def resend_code(self, username: str) -> None:
        pass

    @abstractmethod
    async def password_authenticate(self, username: str, password: str) -> AuthTokens:
        pass

    @abstractmethod
    async def lookup_identity(self, username: str) -> Optional[IdentityRecord]:
        """Return the provider's record, or None if the identity is unknown"""
        pass

    @abstractmethod
    async def start_login_challenge(self, username: str) -> str:
        """
        Ask the provider to deliver a login code.

        Returns:
            Opaque challenge handle to present with the answer
        """
        pass

    @abstractmethod
    async def answer_login_challenge(self, username: str, challenge: str, code: str) -> AuthTokens:
        pass
