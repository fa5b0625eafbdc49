from sqlalchemy import Boolean, Column, DateTime, Integer, String

from bestworkers.database import Base


class AccountEntry(Base):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    mobile = Column(String(10), nullable=False, unique=True)
    pin_hash = Column(String(255), nullable=False)
    verified = Column(Boolean, nullable=False, default=False)
    has_profile = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
