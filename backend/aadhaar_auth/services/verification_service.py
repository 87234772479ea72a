"""
Aadhaar verification flows: signup with OTP confirmation, resend, OTP login
and password login.

A verification attempt moves INITIATED -> AWAITING_CODE when its session is
created, and ends CONFIRMED when the session is consumed. Expiry and
abandonment are the session store dropping the entry; a later lookup simply
finds nothing.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from ..core.errors import (
    AuthError,
    NotFoundError,
    ProviderError,
    ProviderTimeoutError,
    ProviderUnavailableError,
    SessionNotFoundError,
    ValidationError,
    AccountExistsError,
    PersistenceError,
    RateLimitedError,
)
from ..models import Account, DirectoryEntry
from ..utils.phone import normalize_phone, get_phone_last4
from ..utils.validation import (
    is_strong_password,
    is_valid_account_id,
    is_valid_otp_code,
    username_from_display_name,
)
from .account_service import AccountService
from .audit import AuditService
from .directory_service import DirectoryService
from .identity import AuthTokens, IdentityProvider
from .rate_limit import RateLimitService
from .session_store import LOGIN, SIGNUP, OTPSession, OTPSessionStore

logger = logging.getLogger(__name__)

INVALID_ACCOUNT_ID = "Please provide a valid 12-digit Aadhar number"
WEAK_PASSWORD = "Password must be at least 8 characters with uppercase, lowercase, and number"
INVALID_OTP_FORMAT = "OTP must be 6 digits"
LOGIN_RESEND_UNSUPPORTED = "OTP resend is only available during signup. Please request a new login OTP."
WRONG_FLOW_SESSION = "Session token does not belong to this verification flow"

# Transport failures say nothing about the code, so they do not count as attempts
_TRANSPORT_ERRORS = (ProviderTimeoutError, ProviderUnavailableError)


@dataclass
class SignupStarted:
    session_token: str
    phone: str
    provider_id: str
    simulated: bool = False


@dataclass
class LoginStarted:
    session_token: str
    phone: str
    simulated: bool = False


@dataclass
class LoginResult:
    account: Account
    tokens: Optional[AuthTokens] = None


class VerificationService:
    """
    Orchestrates the verification flows against the identity provider, the
    session store and the account/directory collaborators.

    One instance per request; the store and provider are shared.
    """

    def __init__(
        self,
        db: Session,
        store: OTPSessionStore,
        provider: IdentityProvider,
        rate_limiter: Optional[RateLimitService] = None,
    ):
        self.db = db
        self.store = store
        self.provider = provider
        self.rate_limiter = rate_limiter

    # Helpers

    def _require_account_id(self, account_id: str) -> None:
        if not is_valid_account_id(account_id):
            raise ValidationError(INVALID_ACCOUNT_ID)

    def _require_code_shape(self, token: str, code: str) -> None:
        if not token or not code:
            raise ValidationError("Session token and OTP are required")
        if not is_valid_otp_code(code):
            raise ValidationError(INVALID_OTP_FORMAT)

    def _lookup_session(self, token: str, purpose: str) -> OTPSession:
        session = self.store.get(token)
        if session is None:
            raise SessionNotFoundError()
        if session.purpose != purpose:
            raise ValidationError(WRONG_FLOW_SESSION)
        return session

    def _directory_phone(self, entry: DirectoryEntry) -> str:
        try:
            return normalize_phone(entry.phone)
        except ValueError as e:
            logger.error(f"[OTP] Directory phone for ...{entry.aadhaar[-4:]} is not usable: {e}")
            raise ValidationError("Registered phone number for this Aadhar number is invalid. Please contact support.")

    def _check_start(self, flow: str, account_id: str) -> None:
        if self.rate_limiter is None:
            return
        try:
            self.rate_limiter.check_start(account_id)
        except RateLimitedError as e:
            AuditService.log_rate_limited(flow, account_id, reason=str(e))
            raise
        self.rate_limiter.record_start(account_id)

    def _check_verify(self, flow: str, account_id: str) -> None:
        if self.rate_limiter is None:
            return
        try:
            self.rate_limiter.check_verify(account_id)
        except RateLimitedError as e:
            AuditService.log_rate_limited(flow, account_id, reason=str(e))
            raise

    def _record_verify(self, account_id: str, success: bool) -> None:
        if self.rate_limiter is not None:
            self.rate_limiter.record_verify(account_id, success)

    def resolve_login_username(self, account: Account) -> str:
        """
        Provider username for login: the canonical directory phone when the
        directory has an entry, otherwise the stored account username.
        """
        entry = DirectoryService.find_by_account_id(self.db, account.aadhaar_no)
        if entry is not None:
            try:
                return normalize_phone(entry.phone)
            except ValueError:
                logger.warning(f"[OTP] Unusable directory phone for ...{account.aadhaar_no[-4:]}, using account username")
        return account.username

    # Flows

    async def start_signup(
        self,
        account_id: str,
        display_name: str,
        password: str,
        region: str,
        subregion: str,
        email: Optional[str] = None,
    ) -> SignupStarted:
        """Validate registration fields, register a pending identity and open a session"""
        if not all([account_id, display_name, password, region, subregion]):
            raise ValidationError("All fields are required")
        self._require_account_id(account_id)
        if not is_strong_password(password):
            raise ValidationError(WEAK_PASSWORD)
        display_name, region, subregion = display_name.strip(), region.strip(), subregion.strip()
        if not (display_name and region and subregion):
            raise ValidationError("All fields are required")
        username = username_from_display_name(display_name)
        if not username:
            raise ValidationError("Full name must contain at least one letter or digit")

        entry = DirectoryService.find_by_account_id(self.db, account_id)
        if entry is None:
            raise NotFoundError("Aadhar number not found in our database. Please contact support.")
        if AccountService.find_by_account_id(self.db, account_id) is not None:
            raise AccountExistsError()

        phone = self._directory_phone(entry)
        self._check_start("signup", account_id)

        pending = await self.provider.create_pending_identity(
            username=username,
            password=password,
            phone=phone,
            account_id=account_id,
            display_name=display_name,
            region=region,
            subregion=subregion,
            email=email,
        )

        session = self.store.create(
            account_id=account_id,
            phone=phone,
            display_name=display_name,
            password=password,
            region=region,
            subregion=subregion,
            provider_id=pending.provider_id,
            purpose=SIGNUP,
            username=username,
        )
        AuditService.log_flow_started("signup", account_id, get_phone_last4(phone), simulated=self.provider.simulated)
        logger.info(f"[OTP] Signup started for ...{account_id[-4:]}, code sent to ...{get_phone_last4(phone)}")
        return SignupStarted(
            session_token=session.token,
            phone=phone,
            provider_id=pending.provider_id,
            simulated=self.provider.simulated,
        )

    async def confirm_signup(self, token: str, code: str) -> Account:
        """Confirm the pending identity and create the verified account"""
        self._require_code_shape(token, code)
        session = self._lookup_session(token, SIGNUP)
        self._check_verify("signup", session.account_id)

        try:
            await self.provider.confirm_identity(session.username, code)
        except ProviderError as e:
            if not isinstance(e, _TRANSPORT_ERRORS):
                self._record_verify(session.account_id, False)
            AuditService.log_verify_fail("signup", session.account_id, e.message, simulated=self.provider.simulated)
            raise
        self._record_verify(session.account_id, True)

        # Exactly one concurrent confirmation gets to persist. The provider has
        # already confirmed, so a session that expired meanwhile is still claimed.
        claimed = self.store.pop(token, allow_expired=True)
        if claimed is None:
            if AccountService.find_by_account_id(self.db, session.account_id) is not None:
                raise SessionNotFoundError()
            # Swept while the provider call was in flight
            logger.warning(f"[OTP] Session for ...{session.account_id[-4:]} swept after provider confirmation, persisting from read copy")
            claimed = session

        account = Account(
            provider_id=claimed.provider_id,
            username=claimed.username,
            aadhaar_no=claimed.account_id,
            phone=claimed.phone,
            display_name=claimed.display_name,
            region=claimed.region,
            subregion=claimed.subregion,
            is_verified=True,
        )
        try:
            account = AccountService.insert(self.db, account)
        except (PersistenceError, AccountExistsError) as e:
            AuditService.log_reconciliation_needed(
                claimed.account_id, claimed.provider_id, claimed.username, e.message
            )
            raise

        AuditService.log_verify_success("signup", claimed.account_id, simulated=self.provider.simulated, user_id=account.public_id)
        logger.info(f"[OTP] Account created for ...{claimed.account_id[-4:]}")
        return account

    async def resend_code(self, token: str) -> None:
        """Ask the provider to deliver the confirmation code again; the session is untouched"""
        if not token:
            raise ValidationError("Session token is required")
        session = self.store.get(token)
        if session is None:
            raise SessionNotFoundError()
        if session.purpose != SIGNUP:
            # A login challenge cannot be re-sent without replacing its handle
            raise ValidationError(LOGIN_RESEND_UNSUPPORTED)
        self._check_start("resend", session.account_id)
        await self.provider.resend_code(session.username)
        logger.info(f"[OTP] Code resent for ...{session.account_id[-4:]}")

    async def start_otp_login(self, account_id: str) -> LoginStarted:
        self._require_account_id(account_id)

        account = AccountService.find_by_account_id(self.db, account_id)
        if account is None:
            raise NotFoundError("User not found with this Aadhar number")
        entry = DirectoryService.find_by_account_id(self.db, account_id)
        if entry is None:
            raise NotFoundError("Aadhar number not found in our database")

        phone = self._directory_phone(entry)
        self._check_start("login", account_id)

        username = self.resolve_login_username(account)
        challenge = await self.provider.start_login_challenge(username)

        session = self.store.create(
            account_id=account_id,
            phone=phone,
            display_name=account.display_name,
            password="",
            region=account.region,
            subregion=account.subregion,
            provider_id=account.provider_id,
            purpose=LOGIN,
            username=username,
            challenge=challenge,
        )
        AuditService.log_flow_started("login", account_id, get_phone_last4(phone), simulated=self.provider.simulated)
        return LoginStarted(session_token=session.token, phone=phone, simulated=self.provider.simulated)

    async def confirm_otp_login(self, token: str, code: str) -> LoginResult:
        self._require_code_shape(token, code)
        session = self._lookup_session(token, LOGIN)
        self._check_verify("login", session.account_id)

        try:
            tokens = await self.provider.answer_login_challenge(session.username, session.challenge, code)
        except ProviderError as e:
            if not isinstance(e, _TRANSPORT_ERRORS):
                self._record_verify(session.account_id, False)
            AuditService.log_verify_fail("login", session.account_id, e.message, simulated=self.provider.simulated)
            raise
        self._record_verify(session.account_id, True)

        if self.store.pop(token, allow_expired=True) is None:
            raise SessionNotFoundError()

        account = AccountService.find_by_account_id(self.db, session.account_id)
        if account is None:
            raise NotFoundError("User not found")

        AuditService.log_verify_success("login", session.account_id, simulated=self.provider.simulated, user_id=account.public_id)
        return LoginResult(account=account, tokens=tokens)

    async def login_with_password(self, account_id: str, password: str) -> LoginResult:
        if not account_id or not password:
            raise ValidationError("Aadhar number and password are required")
        self._require_account_id(account_id)

        account = AccountService.find_by_account_id(self.db, account_id)
        if account is None:
            raise NotFoundError("User not found with this Aadhar number")

        self._check_verify("password_login", account_id)
        username = self.resolve_login_username(account)
        try:
            tokens = await self.provider.password_authenticate(username, password)
        except AuthError as e:
            self._record_verify(account_id, False)
            AuditService.log_verify_fail("password_login", account_id, e.message, simulated=self.provider.simulated)
            raise
        self._record_verify(account_id, True)

        AuditService.log_verify_success("password_login", account_id, simulated=self.provider.simulated, user_id=account.public_id)
        return LoginResult(account=account, tokens=tokens)

    async def get_profile(self, public_id: str) -> Account:
        account = AccountService.find_by_id(self.db, public_id)
        if account is None:
            raise NotFoundError("User not found")
        return account

    async def describe_identity(self, account: Account) -> Optional[str]:
        """Provider-side status of the account's identity, or None if the provider does not know it"""
        record = await self.provider.lookup_identity(account.username)
        return record.status if record else None
