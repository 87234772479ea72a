"""
Identity provider factory
"""
import logging
from typing import Optional

from ...core.errors import ConfigurationError
from .cognito_provider import CognitoIdentityProvider
from .provider import IdentityProvider
from .simulated_provider import SimulatedIdentityProvider

logger = logging.getLogger(__name__)

_provider_instance: Optional[IdentityProvider] = None


def get_identity_provider() -> IdentityProvider:
    """
    Get identity provider instance based on configuration.

    Falls back to the simulated provider when Cognito is not configured.
    """
    global _provider_instance

    if _provider_instance is None:
        try:
            _provider_instance = CognitoIdentityProvider()
            logger.info("[Identity] Using Cognito identity provider")
        except ConfigurationError as e:
            logger.warning(f"[Identity] {e.message}; falling back to simulated provider")
            _provider_instance = SimulatedIdentityProvider()
    return _provider_instance


def reset_identity_provider() -> None:
    """Drop the cached provider (configuration changed, or between tests)"""
    global _provider_instance
    _provider_instance = None
