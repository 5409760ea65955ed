from models.application import LoanApplication
from models.document import Document
from models.enums import ApplicationStatus, DocumentStatus, DocumentType, Role
from models.rate import InterestRate

__all__ = [
    "ApplicationStatus",
    "Document",
    "DocumentStatus",
    "DocumentType",
    "InterestRate",
    "LoanApplication",
    "Role",
]
