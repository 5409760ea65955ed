from schemas.application import ApplicationAdvance, ApplicationCreate, CreditScoreUpdate
from schemas.document import DocumentBulkReview, DocumentCreate, DocumentReview
from schemas.rate import RateUpsert

__all__ = [
    "ApplicationAdvance",
    "ApplicationCreate",
    "CreditScoreUpdate",
    "DocumentBulkReview",
    "DocumentCreate",
    "DocumentReview",
    "RateUpsert",
]
