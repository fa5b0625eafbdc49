"""Registration, OTP verification and PIN login.

An identity moves ``NONE -> PENDING_VERIFICATION -> ACTIVE``. Nothing is
written to the account table until the emailed code is verified; the client
resubmits its registration fields together with the code.
"""

from dataclasses import dataclass
import logging
from typing import Optional

from bestworkers.config import settings
from bestworkers.errors import (
    AuthError,
    ConflictError,
    NotFoundError,
    UpstreamError,
    ValidationError,
    classify_errors,
)
from bestworkers.schemas.accounts import (
    AccountResponse,
    AccountUpdate,
    BasicAccountView,
    ChangePinRequest,
    ProfessionalAccountView,
)
from bestworkers.schemas.auth import RegisterRequest, VerifyOtpRequest
from bestworkers.services.accounts import AccountStore, DUPLICATE_ACCOUNT_MESSAGE, account_store
from bestworkers.services.email import Mailer, build_otp_body, mailer
from bestworkers.services.hashing import PinHasher, pin_hasher
from bestworkers.services.otp import OtpStore, otp_store
from bestworkers.services.profiles import ProfileStore, profile_store
from bestworkers.services.tokens import IssuedToken, SessionIssuer, session_issuer

LOGGER = logging.getLogger(__name__)

INVALID_OTP_MESSAGE = "Invalid OTP or OTP has expired"
INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"
NOT_VERIFIED_MESSAGE = "Account not verified. Please verify your email first."
ALREADY_VERIFIED_MESSAGE = "Account already verified, please log in"


@dataclass(frozen=True)
class OtpIssue:
    email: str
    expires_in_seconds: int
    code: str


@dataclass(frozen=True)
class AuthResult:
    token: IssuedToken
    account: AccountResponse


class RegistrationService:
    def __init__(
        self,
        accounts: AccountStore,
        otps: OtpStore,
        hasher: PinHasher,
        issuer: SessionIssuer,
        mailer: Mailer,
        profiles: ProfileStore,
        email_subject: str = "Verify Your BestWorkers Account",
    ) -> None:
        self._accounts = accounts
        self._otps = otps
        self._hasher = hasher
        self._issuer = issuer
        self._mailer = mailer
        self._profiles = profiles
        self._email_subject = email_subject

    @classify_errors("registering")
    def initiate_registration(self, payload: RegisterRequest) -> OtpIssue:
        self._require_matching_pins(payload.pin, payload.confirm_pin)
        if self._accounts.find_active(payload.email, payload.mobile) is not None:
            raise ConflictError(DUPLICATE_ACCOUNT_MESSAGE)
        return self._issue_otp(payload.email, resend=False)

    @classify_errors("resending OTP")
    def resend_otp(self, email: str) -> OtpIssue:
        return self._issue_otp(email, resend=True)

    @classify_errors("verifying OTP")
    def verify_otp(self, payload: VerifyOtpRequest) -> AuthResult:
        self._require_matching_pins(payload.pin, payload.confirm_pin)
        record = self._otps.find(payload.email, payload.code)
        if record is None:
            raise ValidationError(INVALID_OTP_MESSAGE)
        if self._accounts.is_email_active(payload.email):
            self._otps.delete(record)
            raise ConflictError(ALREADY_VERIFIED_MESSAGE)

        account = self._accounts.create(
            name=payload.name,
            email=payload.email,
            mobile=payload.mobile,
            pin_hash=self._hasher.hash(payload.pin),
            verified=True,
        )
        self._otps.delete(record)
        LOGGER.info("Account %s created after email verification", account.id)
        return AuthResult(token=self._issuer.issue(account.id), account=account)

    @classify_errors("logging in")
    def login(self, email: str, pin: str) -> AuthResult:
        credentials = self._accounts.get_credentials(email)
        digest = credentials.pin_hash if credentials is not None else self._hasher.dummy_digest
        matched = self._hasher.verify(pin, digest)
        if credentials is None or not matched:
            LOGGER.warning("Rejected login attempt")
            raise AuthError(INVALID_CREDENTIALS_MESSAGE)
        if not credentials.verified:
            raise AuthError(NOT_VERIFIED_MESSAGE)
        account = self._accounts.get(credentials.account_id)
        LOGGER.info("Account %s logged in", credentials.account_id)
        return AuthResult(token=self._issuer.issue(credentials.account_id), account=account)

    def authenticate(self, token: Optional[str]) -> int:
        return self._issuer.verify(token)

    @classify_errors("fetching account")
    def get_current_account(
        self, account_id: int
    ) -> BasicAccountView | ProfessionalAccountView:
        account = self._accounts.get(account_id)
        if account is None:
            raise NotFoundError("User not found")
        if account.has_profile:
            profile = self._profiles.get_for_account(account_id)
            if profile is not None:
                return ProfessionalAccountView(account=account, profile=profile)
        return BasicAccountView(account=account)

    @classify_errors("updating account")
    def update_details(self, account_id: int, payload: AccountUpdate) -> AccountResponse:
        return self._accounts.update_details(
            account_id, payload.model_dump(exclude_unset=True, exclude_none=True)
        )

    @classify_errors("changing PIN")
    def change_pin(self, account_id: int, payload: ChangePinRequest) -> None:
        credentials = self._accounts.get_credentials_by_id(account_id)
        if credentials is None:
            raise NotFoundError("User not found")
        if not self._hasher.verify(payload.current_pin, credentials.pin_hash):
            raise AuthError("Current PIN is incorrect")
        self._require_matching_pins(payload.new_pin, payload.confirm_pin)
        self._accounts.set_pin_hash(account_id, self._hasher.hash(payload.new_pin))
        LOGGER.info("PIN changed for account %s", account_id)

    def _issue_otp(self, email: str, resend: bool) -> OtpIssue:
        code = self._otps.generate()
        record = self._otps.put(email, code)
        body = build_otp_body(code, self._otps.ttl_seconds, resend=resend)
        try:
            self._mailer.send(record.email, self._email_subject, body)
        except Exception as exc:
            self._otps.delete_all(record.email)
            LOGGER.error("OTP email delivery failed for %s: %s", record.email, exc)
            raise UpstreamError("Failed to send verification email") from exc
        LOGGER.info("OTP issued for %s", record.email)
        return OtpIssue(
            email=record.email,
            expires_in_seconds=self._otps.ttl_seconds,
            code=code,
        )

    @staticmethod
    def _require_matching_pins(pin: str, confirm_pin: str) -> None:
        if pin != confirm_pin:
            raise ValidationError("PINs do not match")


registration_service = RegistrationService(
    account_store,
    otp_store,
    pin_hasher,
    session_issuer,
    mailer,
    profile_store,
    email_subject=settings.otp_email_subject,
)
