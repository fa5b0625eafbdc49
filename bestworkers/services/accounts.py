from dataclasses import dataclass
from datetime import datetime, timezone
import logging

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError

from bestworkers.database import session_scope
from bestworkers.errors import ConflictError, NotFoundError
from bestworkers.models.schema.account import AccountEntry
from bestworkers.schemas.accounts import AccountResponse
from bestworkers.schemas.fields import clean_email

LOGGER = logging.getLogger(__name__)

DUPLICATE_ACCOUNT_MESSAGE = "User already exists with this email or mobile number"


@dataclass(frozen=True)
class Credentials:
    account_id: int
    pin_hash: str
    verified: bool


class AccountStore:
    def __init__(self, session_factory=None) -> None:
        self._session_factory = session_factory

    def find_active(self, email: str, mobile: str) -> AccountResponse | None:
        """Return a verified account holding either identity attribute."""
        with session_scope(self._session_factory) as session:
            entry = session.execute(
                select(AccountEntry)
                .where(
                    AccountEntry.verified.is_(True),
                    or_(
                        AccountEntry.email == clean_email(email),
                        AccountEntry.mobile == mobile,
                    ),
                )
                .limit(1)
            ).scalar_one_or_none()
            if entry is None:
                return None
            return self._to_response(entry)

    def is_email_active(self, email: str) -> bool:
        with session_scope(self._session_factory) as session:
            entry = session.execute(
                select(AccountEntry.id).where(
                    AccountEntry.email == clean_email(email),
                    AccountEntry.verified.is_(True),
                )
            ).first()
            return entry is not None

    def create(
        self,
        *,
        name: str,
        email: str,
        mobile: str,
        pin_hash: str,
        verified: bool = True,
    ) -> AccountResponse:
        now = datetime.now(timezone.utc)
        entry = AccountEntry(
            name=name,
            email=clean_email(email),
            mobile=mobile,
            pin_hash=pin_hash,
            verified=verified,
            has_profile=False,
            created_at=now,
            updated_at=now,
        )
        try:
            with session_scope(self._session_factory) as session:
                if verified:
                    self._supersede_unverified(session, entry.email, mobile)
                session.add(entry)
                session.flush()
                return self._to_response(entry)
        except IntegrityError as exc:
            LOGGER.warning("Duplicate account rejected for email=%s", entry.email)
            raise ConflictError(DUPLICATE_ACCOUNT_MESSAGE) from exc

    @staticmethod
    def _supersede_unverified(session, email: str, mobile: str) -> None:
        """Drop unverified rows holding the identity an account is about to claim."""
        result = session.execute(
            delete(AccountEntry)
            .where(
                AccountEntry.verified.is_(False),
                or_(AccountEntry.email == email, AccountEntry.mobile == mobile),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount:
            LOGGER.info("Superseded %s unverified account(s) for email=%s", result.rowcount, email)

    def get(self, account_id: int) -> AccountResponse | None:
        with session_scope(self._session_factory) as session:
            entry = session.get(AccountEntry, account_id)
            if entry is None:
                return None
            return self._to_response(entry)

    def get_credentials(self, email: str) -> Credentials | None:
        with session_scope(self._session_factory) as session:
            entry = session.execute(
                select(AccountEntry).where(AccountEntry.email == clean_email(email))
            ).scalar_one_or_none()
            return self._to_credentials(entry)

    def get_credentials_by_id(self, account_id: int) -> Credentials | None:
        with session_scope(self._session_factory) as session:
            return self._to_credentials(session.get(AccountEntry, account_id))

    def update_details(self, account_id: int, changes: dict) -> AccountResponse:
        allowed = {key: value for key, value in changes.items() if key in {"name", "email", "mobile"}}
        try:
            with session_scope(self._session_factory) as session:
                entry = session.get(AccountEntry, account_id)
                if entry is None:
                    raise NotFoundError("User not found")
                for field, value in allowed.items():
                    setattr(entry, field, value)
                if allowed:
                    entry.updated_at = datetime.now(timezone.utc)
                session.flush()
                return self._to_response(entry)
        except IntegrityError as exc:
            raise ConflictError(DUPLICATE_ACCOUNT_MESSAGE) from exc

    def set_pin_hash(self, account_id: int, pin_hash: str) -> None:
        with session_scope(self._session_factory) as session:
            entry = session.get(AccountEntry, account_id)
            if entry is None:
                raise NotFoundError("User not found")
            entry.pin_hash = pin_hash
            entry.updated_at = datetime.now(timezone.utc)

    def _to_credentials(self, entry: AccountEntry | None) -> Credentials | None:
        if entry is None:
            return None
        return Credentials(
            account_id=entry.id,
            pin_hash=entry.pin_hash,
            verified=bool(entry.verified),
        )

    def _to_response(self, entry: AccountEntry) -> AccountResponse:
        return AccountResponse(
            id=entry.id,
            name=entry.name,
            email=entry.email,
            mobile=entry.mobile,
            verified=bool(entry.verified),
            has_profile=bool(entry.has_profile),
            created_at=entry.created_at,
        )


account_store = AccountStore()
