from typing import Optional
from pydantic import BaseModel, Field


class _CamelModel(BaseModel):
    class Config:
        populate_by_name = True


# Requests

class CreateUserSendOTPRequest(_CamelModel):
    account_id: Optional[str] = Field(None, alias="accountId")
    display_name: Optional[str] = Field(None, alias="displayName")
    password: Optional[str] = None
    region: Optional[str] = None
    subregion: Optional[str] = None
    email: Optional[str] = None


class VerifyOTPRequest(_CamelModel):
    session_token: Optional[str] = Field(None, alias="sessionToken")
    otp: Optional[str] = None


class ResendOTPRequest(_CamelModel):
    session_token: Optional[str] = Field(None, alias="sessionToken")


class LoginOTPRequest(_CamelModel):
    account_id: Optional[str] = Field(None, alias="accountId")


class LoginPasswordRequest(_CamelModel):
    account_id: Optional[str] = Field(None, alias="accountId")
    password: Optional[str] = None


# Responses

class AccountSummary(_CamelModel):
    id: str
    username: str
    display_name: str = Field(alias="displayName")
    account_id: str = Field(alias="accountId")
    region: str
    subregion: str
    is_verified: bool = Field(alias="isVerified")

    @classmethod
    def from_account(cls, account) -> "AccountSummary":
        return cls(
            id=account.public_id,
            username=account.username,
            display_name=account.display_name,
            account_id=account.aadhaar_no,
            region=account.region,
            subregion=account.subregion,
            is_verified=account.is_verified,
        )


class TokenSet(_CamelModel):
    access_token: str = Field(alias="accessToken")
    id_token: str = Field(alias="idToken")
    refresh_token: Optional[str] = Field(None, alias="refreshToken")


class MessageResponse(_CamelModel):
    success: bool = True
    message: str


class CreateUserSendOTPResponse(MessageResponse):
    session_token: str = Field(alias="sessionToken")
    phone: str
    provider_id: str = Field(alias="providerId")


class LoginOTPResponse(MessageResponse):
    session_token: str = Field(alias="sessionToken")
    phone: str


class AccountResponse(MessageResponse):
    account: AccountSummary
    tokens: Optional[TokenSet] = None


class ProfileResponse(MessageResponse):
    account: AccountSummary
    identity_status: Optional[str] = Field(None, alias="identityStatus")
