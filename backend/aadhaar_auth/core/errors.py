"""
Error taxonomy for the verification flows.

Every error carries the message shown to the caller and the HTTP status the
exception handlers answer with. Provider messages are passed through verbatim.
"""
from typing import Optional


class AuthServiceError(Exception):
    """Base class for all errors raised by the verification flows"""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AuthServiceError):
    """Malformed input: codes, identity numbers, password policy"""

    status_code = 400
    default_message = "Invalid request"


class NotFoundError(AuthServiceError):
    """Unknown account or identity number"""

    status_code = 404
    default_message = "Not found"


class SessionNotFoundError(NotFoundError):
    """
    Session lookup failed.

    Never-existed, already-consumed and timed-out sessions are reported
    identically.
    """

    status_code = 400
    default_message = "Invalid or expired session"


class AccountExistsError(AuthServiceError):
    status_code = 400
    default_message = "User already exists with this Aadhar number"


class ProviderError(AuthServiceError):
    """The identity provider rejected or could not complete the operation"""

    status_code = 400
    default_message = "Identity provider request failed"


class ProviderTimeoutError(ProviderError):
    status_code = 500
    default_message = "Identity provider did not respond in time"


class ProviderUnavailableError(ProviderError):
    status_code = 500
    default_message = "Identity provider is unavailable"


class AuthError(AuthServiceError):
    """Credential rejection. Never says which credential was wrong."""

    status_code = 401
    default_message = "Incorrect username or password"


class PersistenceError(AuthServiceError):
    status_code = 500
    default_message = "Account store is unavailable"


class ConfigurationError(AuthServiceError):
    """Identity provider is not configured; callers fall back to simulation"""

    status_code = 500
    default_message = "Identity provider is not configured"


class RateLimitedError(AuthServiceError):
    status_code = 429
    default_message = "Too many attempts. Please try again later."

    def __init__(self, message: Optional[str] = None, retry_after: Optional[int] = None):
        super().__init__(message)
        self.retry_after = retry_after
