import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Ensure predictable environment variables for tests before importing the app.
BASE_DIR = Path(__file__).resolve().parents[1]
TEST_DB_PATH = BASE_DIR / "test.db"

if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

os.environ.setdefault("DATABASE_URL", f"sqlite:///{TEST_DB_PATH}")
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-session-tokens-0123456789")
os.environ.setdefault("OTP_DEBUG", "true")
os.environ.setdefault("OTP_LENGTH", "6")
os.environ.setdefault("PIN_HASH_ROUNDS", "4")

from bestworkers.database import Base, init_db  # noqa: E402
from bestworkers.schemas.auth import RegisterRequest, VerifyOtpRequest  # noqa: E402
from bestworkers.schemas.profiles import ProfileCreate  # noqa: E402
from bestworkers.services.accounts import AccountStore  # noqa: E402
from bestworkers.services.email import EmailSendError  # noqa: E402
from bestworkers.services.hashing import PinHasher  # noqa: E402
from bestworkers.services.otp import OtpStore  # noqa: E402
from bestworkers.services.profiles import ProfileStore  # noqa: E402
from bestworkers.services.registration import RegistrationService  # noqa: E402
from bestworkers.services.tokens import SessionIssuer  # noqa: E402

JWT_SECRET = os.environ["JWT_SECRET"]


class FakeMailer:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str]] = []
        self.fail = False

    def send(self, to_address: str, subject: str, body: str) -> None:
        if self.fail:
            raise EmailSendError("Failed to reach Gmail API")
        self.sent.append((to_address, subject, body))


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture()
def session_factory(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'unit.db'}")
    init_db(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
    engine.dispose()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def mailer():
    return FakeMailer()


@pytest.fixture()
def accounts(session_factory):
    return AccountStore(session_factory)


@pytest.fixture()
def otps(session_factory, clock):
    return OtpStore(300, 6, session_factory=session_factory, clock=clock)


@pytest.fixture()
def profiles(session_factory):
    return ProfileStore(session_factory)


@pytest.fixture()
def hasher():
    return PinHasher(4)


@pytest.fixture()
def issuer():
    return SessionIssuer(JWT_SECRET, "HS256", 60)


@pytest.fixture()
def service(accounts, otps, hasher, issuer, mailer, profiles):
    return RegistrationService(accounts, otps, hasher, issuer, mailer, profiles)


def registration(**overrides) -> RegisterRequest:
    fields = {
        "name": "Asha Rao",
        "email": "a@x.com",
        "mobile": "9999999999",
        "pin": "1234",
        "confirm_pin": "1234",
    }
    fields.update(overrides)
    return RegisterRequest(**fields)


def verification(code: str, **overrides) -> VerifyOtpRequest:
    fields = registration(**overrides).model_dump()
    return VerifyOtpRequest(**fields, code=code)


def profile_payload(**overrides) -> ProfileCreate:
    fields = {
        "name": "Asha Rao",
        "email": "a@x.com",
        "mobile_no": "9999999999",
        "state": "Karnataka",
        "district": "Bengaluru Urban",
        "city": "Bengaluru",
        "service_category": "Home Repair",
        "service_name": "Plumber",
        "experience": "5 years",
        "service_price": 400,
    }
    fields.update(overrides)
    return ProfileCreate(**fields)


@pytest.fixture()
def client(monkeypatch, mailer):
    """Provide a TestClient on a clean database with mail delivery faked."""
    from fastapi.testclient import TestClient

    import bestworkers.main as main
    from bestworkers.database import engine
    from bestworkers.services.registration import registration_service

    Base.metadata.drop_all(bind=engine)
    monkeypatch.setattr(registration_service, "_mailer", mailer)

    with TestClient(main.app) as test_client:
        yield test_client

    Base.metadata.drop_all(bind=engine)
