# Schemas package
from .auth import (
    AccountResponse,
    AccountSummary,
    CreateUserSendOTPRequest,
    CreateUserSendOTPResponse,
    LoginOTPRequest,
    LoginOTPResponse,
    LoginPasswordRequest,
    MessageResponse,
    ProfileResponse,
    ResendOTPRequest,
    TokenSet,
    VerifyOTPRequest,
)

__all__ = [
    "AccountResponse",
    "AccountSummary",
    "CreateUserSendOTPRequest",
    "CreateUserSendOTPResponse",
    "LoginOTPRequest",
    "LoginOTPResponse",
    "LoginPasswordRequest",
    "MessageResponse",
    "ProfileResponse",
    "ResendOTPRequest",
    "TokenSet",
    "VerifyOTPRequest",
]
