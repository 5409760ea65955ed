from sqlalchemy import Column, DateTime, Enum, Integer, Numeric, String, Text

from database import Base, utcnow
from models.enums import ApplicationStatus


class LoanApplication(Base):
    __tablename__ = "loan_applications"

    id = Column(String(64), primary_key=True, index=True)
    applicant_id = Column(String(64), nullable=False, index=True)
    amount = Column(Numeric(14, 2), nullable=False)
    term_months = Column(Integer, nullable=False)
    purpose = Column(String(128), nullable=False)
    # Frozen at creation from the rate table; never re-resolved
    interest_rate_percent = Column(Numeric(5, 2), nullable=False)
    status = Column(
        Enum(ApplicationStatus, native_enum=False, length=32),
        nullable=False,
        default=ApplicationStatus.APPLIED,
        index=True,
    )
    credit_score = Column(Integer, nullable=True)
    applied_date = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    decision_date = Column(DateTime(timezone=True), nullable=True)
    approved_amount = Column(Numeric(14, 2), nullable=True)
    paid_amount = Column(Numeric(14, 2), nullable=True)
    pending_amount = Column(Numeric(14, 2), nullable=True)
    assigned_loan_manager_id = Column(String(64), nullable=True)
    assigned_manager_id = Column(String(64), nullable=True)
    rejection_reason = Column(Text, nullable=True)
    version = Column(Integer, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    __mapper_args__ = {"version_id_col": version}
