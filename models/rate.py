from sqlalchemy import Column, DateTime, Integer, Numeric, String

from database import Base, utcnow


class InterestRate(Base):
    """Administrator-set annual rate for a normalized loan purpose."""

    __tablename__ = "interest_rates"

    id = Column(String(64), primary_key=True, index=True)
    purpose = Column(String(128), unique=True, nullable=False, index=True)
    annual_rate_percent = Column(Numeric(5, 2), nullable=False)
    version = Column(Integer, nullable=False, default=1)
    updated_by = Column(String(64), nullable=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
