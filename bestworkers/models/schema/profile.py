from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)

from bestworkers.database import Base


class ProfileEntry(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True)
    account_id = Column(
        Integer, ForeignKey("accounts.id"), nullable=False, unique=True, index=True
    )
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    mobile_no = Column(String(10), nullable=False)
    secondary_mobile_no = Column(String(10), nullable=True)
    state = Column(String(100), nullable=False)
    district = Column(String(100), nullable=False)
    city = Column(String(100), nullable=False)
    service_category = Column(String(100), nullable=False, index=True)
    service_name = Column(String(100), nullable=False, index=True)
    designation = Column(String(100), nullable=True)
    experience = Column(String(50), nullable=False)
    service_price = Column(Float, nullable=True)
    price_unit = Column(String(32), nullable=False, default="per hour")
    need_support = Column(Boolean, nullable=False, default=False)
    profession_description = Column(Text, nullable=True)
    status = Column(String(32), nullable=False, default="pending")
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
