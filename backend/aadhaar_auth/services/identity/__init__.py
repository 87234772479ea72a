"""
Identity provider package: Cognito in production, simulated when unconfigured
"""
from .provider import IdentityProvider, PendingIdentity, AuthTokens, IdentityRecord
from .cognito_provider import CognitoIdentityProvider
from .simulated_provider import SimulatedIdentityProvider
from .factory import get_identity_provider, reset_identity_provider

__all__ = [
    "IdentityProvider",
    "PendingIdentity",
    "AuthTokens",
    "IdentityRecord",
    "CognitoIdentityProvider",
    "SimulatedIdentityProvider",
    "get_identity_provider",
    "reset_identity_provider",
]
