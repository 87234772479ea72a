"""
Verification services: session store, identity provider adapters and flows
"""
from .session_store import OTPSession, OTPSessionStore
from .verification_service import VerificationService, SignupStarted, LoginStarted, LoginResult

__all__ = [
    "OTPSession",
    "OTPSessionStore",
    "VerificationService",
    "SignupStarted",
    "LoginStarted",
    "LoginResult",
]
