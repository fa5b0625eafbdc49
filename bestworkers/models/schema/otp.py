from sqlalchemy import Column, DateTime, Index, Integer, String

from bestworkers.database import Base


class OtpEntry(Base):
    __tablename__ = "otp_codes"

    id = Column(Integer, primary_key=True)
    email = Column(String(255), nullable=False)
    code = Column(String(10), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_otp_email", "email"),
        Index("ix_otp_expires_at", "expires_at"),
    )
