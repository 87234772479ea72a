"""
Aadhaar auth router: signup with OTP confirmation, OTP login and password login.

Errors raised by the verification service are shaped into
{"success": false, "message": ...} by the registered exception handlers.
"""
import logging
from fastapi import APIRouter, Depends

from ..dependencies import get_verification_service
from ..schemas import (
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
from ..services.identity import AuthTokens
from ..services.verification_service import VerificationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _token_set(tokens: AuthTokens) -> TokenSet:
    return TokenSet(
        access_token=tokens.access_token,
        id_token=tokens.id_token,
        refresh_token=tokens.refresh_token,
    )


@router.post("/create-user-send-otp", response_model=CreateUserSendOTPResponse)
async def create_user_send_otp(
    payload: CreateUserSendOTPRequest,
    service: VerificationService = Depends(get_verification_service),
):
    """Register a pending identity and send the confirmation OTP to the directory phone"""
    result = await service.start_signup(
        account_id=payload.account_id,
        display_name=payload.display_name,
        password=payload.password,
        region=payload.region,
        subregion=payload.subregion,
        email=payload.email,
    )
    message = f"User created and OTP sent to {result.phone}"
    if result.simulated:
        message += " (simulated)"
    return CreateUserSendOTPResponse(
        message=message,
        session_token=result.session_token,
        phone=result.phone,
        provider_id=result.provider_id,
    )


@router.post("/verify-otp-signup", response_model=AccountResponse)
async def verify_otp_signup(
    payload: VerifyOTPRequest,
    service: VerificationService = Depends(get_verification_service),
):
    account = await service.confirm_signup(payload.session_token, payload.otp)
    return AccountResponse(
        message="Account verified and created successfully",
        account=AccountSummary.from_account(account),
    )


@router.post("/resend-otp", response_model=MessageResponse)
async def resend_otp(
    payload: ResendOTPRequest,
    service: VerificationService = Depends(get_verification_service),
):
    await service.resend_code(payload.session_token)
    return MessageResponse(message="OTP resent successfully")


@router.post("/login-otp", response_model=LoginOTPResponse)
async def login_otp(
    payload: LoginOTPRequest,
    service: VerificationService = Depends(get_verification_service),
):
    result = await service.start_otp_login(payload.account_id)
    message = f"OTP sent successfully to {result.phone}"
    if result.simulated:
        message += " (simulated)"
    return LoginOTPResponse(
        message=message,
        session_token=result.session_token,
        phone=result.phone,
    )


@router.post("/verify-login-otp", response_model=AccountResponse)
async def verify_login_otp(
    payload: VerifyOTPRequest,
    service: VerificationService = Depends(get_verification_service),
):
    result = await service.confirm_otp_login(payload.session_token, payload.otp)
    return AccountResponse(
        message="Login successful",
        account=AccountSummary.from_account(result.account),
        tokens=_token_set(result.tokens) if result.tokens else None,
    )


@router.post("/login-password", response_model=AccountResponse)
async def login_password(
    payload: LoginPasswordRequest,
    service: VerificationService = Depends(get_verification_service),
):
    result = await service.login_with_password(payload.account_id, payload.password)
    return AccountResponse(
        message="Login successful",
        account=AccountSummary.from_account(result.account),
        tokens=_token_set(result.tokens) if result.tokens else None,
    )


@router.get("/profile/{account_id}", response_model=ProfileResponse)
async def get_profile(
    account_id: str,
    service: VerificationService = Depends(get_verification_service),
):
    """Account profile plus the identity provider's view of it"""
    account = await service.get_profile(account_id)
    identity_status = await service.describe_identity(account)
    return ProfileResponse(
        message="Profile retrieved",
        account=AccountSummary.from_account(account),
        identity_status=identity_status,
    )
