"""
AWS Cognito identity provider implementation
"""
import logging
import asyncio
from typing import Any, Dict, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ...core.config import settings
from ...core.errors import (
    AuthError,
    ConfigurationError,
    ProviderError,
    ProviderTimeoutError,
    ProviderUnavailableError,
)
from ...utils.secret_hash import compute_secret_hash
from .provider import AuthTokens, IdentityProvider, IdentityRecord, PendingIdentity

logger = logging.getLogger(__name__)

# Credential rejections that must not reveal whether the username exists
_GENERIC_AUTH_FAILURES = {"NotAuthorizedException", "UserNotConfirmedException", "UserNotFoundException"}


def _error_code(e: ClientError) -> str:
    return e.response.get("Error", {}).get("Code", "")


def _error_message(e: ClientError) -> str:
    return e.response.get("Error", {}).get("Message") or str(e)


class CognitoIdentityProvider(IdentityProvider):
    """
    Cognito user pool provider.

    Cognito generates and delivers confirmation codes itself. Blocking boto3
    calls run in a worker thread under an explicit deadline.
    """

    def __init__(self, client: Optional[Any] = None):
        if not settings.COGNITO_USER_POOL_ID or not settings.COGNITO_CLIENT_ID:
            raise ConfigurationError("COGNITO_USER_POOL_ID and COGNITO_CLIENT_ID must be configured")

        self.user_pool_id = settings.COGNITO_USER_POOL_ID
        self.client_id = settings.COGNITO_CLIENT_ID
        self.client_secret = settings.COGNITO_CLIENT_SECRET
        self.timeout_seconds = settings.IDENTITY_PROVIDER_TIMEOUT_SECONDS

        if client is None:
            # Single attempt with socket timeouts matching the call deadline
            boto_config = Config(
                connect_timeout=self.timeout_seconds,
                read_timeout=self.timeout_seconds,
                retries={"total_max_attempts": 1, "mode": "standard"},
            )
            client = boto3.client(
                "cognito-idp",
                region_name=settings.AWS_REGION,
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID or None,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY or None,
                config=boto_config,
            )
        self.client = client

    def _secret_params(self, username: str, key: str = "SecretHash") -> Dict[str, str]:
        secret_hash = compute_secret_hash(username, self.client_id, self.client_secret)
        return {key: secret_hash} if secret_hash else {}

    async def _call(self, operation: str, **params) -> Dict[str, Any]:
        method = getattr(self.client, operation)
        try:
            # Run blocking boto3 call in executor to avoid blocking event loop
            return await asyncio.wait_for(
                asyncio.to_thread(method, **params),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error(f"[Identity][Cognito] Timeout in {operation} (>{self.timeout_seconds}s)")
            raise ProviderTimeoutError(f"Identity provider did not respond within {self.timeout_seconds:g} seconds")
        except ClientError as e:
            logger.warning(f"[Identity][Cognito] {operation} rejected: {_error_code(e)}: {_error_message(e)}")
            raise
        except BotoCoreError as e:
            logger.error(f"[Identity][Cognito] Transport error in {operation}: {type(e).__name__}: {e}")
            raise ProviderUnavailableError(f"Identity provider is unavailable: {e}")

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
        attributes = [
            {"Name": "phone_number", "Value": phone},
            {"Name": "email", "Value": email or f"{username}@{settings.DEFAULT_EMAIL_DOMAIN}"},
            {"Name": "custom:aadhar_no", "Value": account_id},
            {"Name": "custom:username", "Value": username},
            {"Name": "custom:full_name", "Value": display_name},
            {"Name": "custom:state", "Value": region},
            {"Name": "custom:district_name", "Value": subregion},
        ]
        try:
            response = await self._call(
                "sign_up",
                ClientId=self.client_id,
                Username=username,
                Password=password,
                UserAttributes=attributes,
                **self._secret_params(username),
            )
        except ClientError as e:
            raise ProviderError(_error_message(e))

        provider_id = response.get("UserSub") or username
        logger.info(f"[Identity][Cognito] Pending identity created for {username}, confirmed={response.get('UserConfirmed', False)}")
        return PendingIdentity(provider_id=provider_id)

    async def confirm_identity(self, username: str, code: str) -> None:
        try:
            await self._call(
                "confirm_sign_up",
                ClientId=self.client_id,
                Username=username,
                ConfirmationCode=code,
                **self._secret_params(username),
            )
        except ClientError as e:
            raise ProviderError(_error_message(e))
        logger.info(f"[Identity][Cognito] Identity confirmed for {username}")

    async def resend_code(self, username: str) -> None:
        try:
            await self._call(
                "resend_confirmation_code",
                ClientId=self.client_id,
                Username=username,
                **self._secret_params(username),
            )
        except ClientError as e:
            raise ProviderError(_error_message(e))
        logger.info(f"[Identity][Cognito] Confirmation code resent for {username}")

    async def password_authenticate(self, username: str, password: str) -> AuthTokens:
        auth_parameters = {"USERNAME": username, "PASSWORD": password}
        auth_parameters.update(self._secret_params(username, key="SECRET_HASH"))
        try:
            response = await self._call(
                "initiate_auth",
                AuthFlow="USER_PASSWORD_AUTH",
                ClientId=self.client_id,
                AuthParameters=auth_parameters,
            )
        except ClientError as e:
            if _error_code(e) in _GENERIC_AUTH_FAILURES:
                raise AuthError("Incorrect username or password")
            raise AuthError(_error_message(e))

        result = response.get("AuthenticationResult")
        if not result:
            # A further challenge (e.g. NEW_PASSWORD_REQUIRED) cannot be completed here
            challenge = response.get("ChallengeName", "unknown")
            logger.warning(f"[Identity][Cognito] Password login for {username} returned challenge {challenge}")
            raise AuthError(f"Additional verification required: {challenge}")
        return AuthTokens(
            access_token=result.get("AccessToken", ""),
            id_token=result.get("IdToken", ""),
            refresh_token=result.get("RefreshToken"),
        )

    async def lookup_identity(self, username: str) -> Optional[IdentityRecord]:
        try:
            response = await self._call(
                "admin_get_user",
                UserPoolId=self.user_pool_id,
                Username=username,
            )
        except ClientError as e:
            if _error_code(e) == "UserNotFoundException":
                return None
            raise ProviderError(_error_message(e))

        attributes = {a["Name"]: a.get("Value") for a in response.get("UserAttributes", [])}
        return IdentityRecord(
            username=response.get("Username", username),
            status=response.get("UserStatus", "UNKNOWN"),
            enabled=response.get("Enabled", True),
            attributes=attributes,
        )

    async def start_login_challenge(self, username: str) -> str:
        auth_parameters = {"USERNAME": username}
        auth_parameters.update(self._secret_params(username, key="SECRET_HASH"))
        try:
            response = await self._call(
                "initiate_auth",
                AuthFlow="CUSTOM_AUTH",
                ClientId=self.client_id,
                AuthParameters=auth_parameters,
            )
        except ClientError as e:
            raise ProviderError(_error_message(e))

        challenge = response.get("Session")
        if not challenge:
            raise ProviderError("Identity provider did not issue a login challenge")
        logger.info(f"[Identity][Cognito] Login challenge {response.get('ChallengeName')} issued for {username}")
        return challenge

    async def answer_login_challenge(self, username: str, challenge: str, code: str) -> AuthTokens:
        responses = {"USERNAME": username, "ANSWER": code}
        responses.update(self._secret_params(username, key="SECRET_HASH"))
        try:
            response = await self._call(
                "respond_to_auth_challenge",
                ClientId=self.client_id,
                ChallengeName="CUSTOM_CHALLENGE",
                Session=challenge,
                ChallengeResponses=responses,
            )
        except ClientError as e:
            raise ProviderError(_error_message(e))

        result = response.get("AuthenticationResult")
        if not result:
            # Cognito re-issues the challenge when the answer is wrong
            raise ProviderError("Invalid OTP. Please enter the correct OTP.")
        return AuthTokens(
            access_token=result.get("AccessToken", ""),
            id_token=result.get("IdToken", ""),
            refresh_token=result.get("RefreshToken"),
        )
