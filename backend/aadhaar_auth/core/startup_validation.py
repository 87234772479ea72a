"""
Startup validation functions.

Called from the application lifespan before the session store starts.
They raise ValueError when the configuration must not be served.
"""
import re
import logging
from aadhaar_auth.core.config import settings
from aadhaar_auth.core.env import is_local_env, is_production_env, get_env_name

logger = logging.getLogger(__name__)


def validate_database_url():
    """Validate database URL is not SQLite in non-local environments"""
    if is_local_env():
        return

    if re.match(r'^sqlite:', settings.database_url, re.IGNORECASE):
        error_msg = (
            "CRITICAL: SQLite database is not supported outside local environments. "
            f"ENV={get_env_name()}. Point DATABASE_URL at a managed database."
        )
        logger.error(error_msg)
        raise ValueError(error_msg)

    logger.info("Database URL validation passed (not SQLite)")


def validate_identity_provider():
    """
    Report which identity provider will serve requests.

    The simulated provider is a supported fallback, so this only warns, but it
    warns loudly in production where it accepts a fixed code.
    """
    if settings.cognito_configured:
        logger.info(f"[Startup] Cognito identity provider configured (region={settings.AWS_REGION})")
        if not settings.COGNITO_CLIENT_SECRET:
            logger.info("[Startup] No Cognito client secret configured; SecretHash will be omitted")
        return

    if is_production_env():
        logger.warning(
            "[Startup] WARNING: COGNITO_USER_POOL_ID/COGNITO_CLIENT_ID not set in production. "
            "Requests will be served by the SIMULATED identity provider."
        )
    else:
        logger.info(f"[Startup] Cognito not configured; simulated identity provider enabled (ENV={get_env_name()})")


def validate_session_settings():
    """The sweep must run at least as often as sessions expire"""
    if settings.OTP_SESSION_TTL_SECONDS <= 0:
        raise ValueError("OTP_SESSION_TTL_SECONDS must be positive")
    if settings.OTP_SESSION_SWEEP_INTERVAL_SECONDS <= 0:
        raise ValueError("OTP_SESSION_SWEEP_INTERVAL_SECONDS must be positive")
    if settings.IDENTITY_PROVIDER_TIMEOUT_SECONDS <= 0:
        raise ValueError("IDENTITY_PROVIDER_TIMEOUT_SECONDS must be positive")


def run_startup_validation():
    validate_database_url()
    validate_session_settings()
    validate_identity_provider()
