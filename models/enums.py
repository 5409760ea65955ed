import enum


class ApplicationStatus(str, enum.Enum):
    APPLIED = "APPLIED"
    VERIFIED = "VERIFIED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

    @property
    def is_terminal(self) -> bool:
        return self in (ApplicationStatus.APPROVED, ApplicationStatus.REJECTED)


class DocumentStatus(str, enum.Enum):
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


class DocumentType(str, enum.Enum):
    IDENTITY = "IDENTITY"
    INCOME = "INCOME"
    ADDRESS = "ADDRESS"
    BANK_STATEMENT = "BANK_STATEMENT"


class Role(str, enum.Enum):
    APPLICANT = "APPLICANT"
    LOAN_MANAGER = "LOAN_MANAGER"
    MANAGER = "MANAGER"
    ADMIN = "ADMIN"
