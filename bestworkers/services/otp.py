from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import secrets
from typing import Callable

from sqlalchemy import delete, select

from bestworkers.config import settings
from bestworkers.database import session_scope
from bestworkers.models.schema.otp import OtpEntry
from bestworkers.schemas.fields import clean_email


@dataclass(frozen=True)
class OtpRecord:
    id: int
    email: str
    code: str
    issued_at: datetime
    expires_at: datetime


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_otp_code(length: int) -> str:
    value = secrets.randbelow(10**length)
    return str(value).zfill(length)


class OtpStore:
    """Email-keyed one-time codes; at most one live code per email."""

    def __init__(
        self,
        ttl_seconds: int,
        code_length: int,
        session_factory=None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._ttl_seconds = ttl_seconds
        self._code_length = code_length
        self._session_factory = session_factory
        self._clock = clock

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    def generate(self) -> str:
        return generate_otp_code(self._code_length)

    def put(self, email: str, code: str) -> OtpRecord:
        now = self._clock()
        normalized = clean_email(email)
        entry = OtpEntry(
            email=normalized,
            code=code,
            created_at=now,
            expires_at=now + timedelta(seconds=self._ttl_seconds),
        )
        with session_scope(self._session_factory) as session:
            session.execute(delete(OtpEntry).where(OtpEntry.expires_at <= now))
            session.execute(delete(OtpEntry).where(OtpEntry.email == normalized))
            session.add(entry)
            session.flush()
            return OtpRecord(
                id=entry.id,
                email=normalized,
                code=code,
                issued_at=now,
                expires_at=entry.expires_at,
            )

    def find(self, email: str, code: str) -> OtpRecord | None:
        now = self._clock()
        with session_scope(self._session_factory) as session:
            session.execute(delete(OtpEntry).where(OtpEntry.expires_at <= now))
            entry = session.execute(
                select(OtpEntry)
                .where(
                    OtpEntry.email == clean_email(email),
                    OtpEntry.code == code.strip(),
                    OtpEntry.expires_at > now,
                )
                .order_by(OtpEntry.created_at.desc())
                .limit(1)
            ).scalar_one_or_none()
            if entry is None:
                return None
            return OtpRecord(
                id=entry.id,
                email=entry.email,
                code=entry.code,
                issued_at=entry.created_at,
                expires_at=entry.expires_at,
            )

    def delete(self, record: OtpRecord) -> None:
        with session_scope(self._session_factory) as session:
            session.execute(delete(OtpEntry).where(OtpEntry.id == record.id))

    def delete_all(self, email: str) -> int:
        with session_scope(self._session_factory) as session:
            result = session.execute(
                delete(OtpEntry).where(OtpEntry.email == clean_email(email))
            )
            return result.rowcount


otp_store = OtpStore(settings.otp_ttl_seconds, settings.otp_length)
