from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from bestworkers.config import settings


def _build_database_url(raw_url: str) -> str:
    if raw_url.startswith("postgresql://"):
        return raw_url.replace("postgresql://", "postgresql+psycopg://", 1)
    return raw_url


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


DATABASE_URL = _build_database_url(settings.database_url)
engine = (
    create_engine(DATABASE_URL, **_engine_options(DATABASE_URL))
    if DATABASE_URL
    else None
)
SessionLocal = sessionmaker(
    bind=engine, autoflush=False, autocommit=False, expire_on_commit=False
)
Base = declarative_base()


def init_db(bind=None) -> None:
    target = bind if bind is not None else engine
    if target is None:
        raise RuntimeError("DATABASE_URL is not configured")
    from bestworkers.models.schema import account as _account  # noqa: F401
    from bestworkers.models.schema import otp as _otp  # noqa: F401
    from bestworkers.models.schema import profile as _profile  # noqa: F401

    Base.metadata.create_all(bind=target)


@contextmanager
def session_scope(session_factory=None):
    session = (session_factory or SessionLocal)()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
