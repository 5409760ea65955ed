from sqlalchemy import BigInteger, Column, DateTime, Enum, ForeignKey, Integer, String

from database import Base, utcnow
from models.enums import DocumentStatus, DocumentType


class Document(Base):
    __tablename__ = "documents"

    id = Column(String(64), primary_key=True, index=True)
    applicant_id = Column(String(64), nullable=False, index=True)
    # Null until the applicant submits (or uploads against) an application
    loan_application_id = Column(
        String(64), ForeignKey("loan_applications.id", ondelete="CASCADE"), nullable=True, index=True
    )
    document_type = Column(Enum(DocumentType, native_enum=False, length=32), nullable=False)
    file_ref = Column(String(512), nullable=False)
    file_name = Column(String(256), nullable=True)
    content_type = Column(String(128), nullable=False)
    file_size_bytes = Column(BigInteger, nullable=False)
    status = Column(
        Enum(DocumentStatus, native_enum=False, length=32),
        nullable=False,
        default=DocumentStatus.PENDING,
        index=True,
    )
    reviewed_by = Column(String(64), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    # Set on a REJECTED record once a replacement of the same type is uploaded
    superseded_by_id = Column(String(64), nullable=True)
    uploaded_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    @property
    def is_current(self) -> bool:
        return self.superseded_by_id is None
