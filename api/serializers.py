"""Entity -> camelCase dicts for the frontend. Enum values are emitted verbatim."""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from models import Document, InterestRate, LoanApplication
from services.amortization import quantize_money
from services.credit import credit_band
from services.rate_table import RateQuote


def money(value: Optional[Decimal]) -> Optional[float]:
    """Round to the currency unit at the response boundary."""
    if value is None:
        return None
    return float(quantize_money(Decimal(value)))


def _iso(dt) -> Optional[str]:
    return dt.isoformat() if dt else None


def application_to_response(app: LoanApplication) -> dict[str, Any]:
    return {
        "id": app.id,
        "applicantId": app.applicant_id,
        "amount": money(app.amount),
        "termMonths": app.term_months,
        "purpose": app.purpose,
        "interestRatePercent": float(app.interest_rate_percent),
        "status": app.status.value,
        "creditScore": app.credit_score,
        "creditBand": credit_band(app.credit_score),
        "appliedDate": _iso(app.applied_date),
        "decisionDate": _iso(app.decision_date),
        "approvedAmount": money(app.approved_amount),
        "paidAmount": money(app.paid_amount),
        "pendingAmount": money(app.pending_amount),
        "assignedLoanManagerId": app.assigned_loan_manager_id,
        "assignedManagerId": app.assigned_manager_id,
        "rejectionReason": app.rejection_reason,
    }


def document_to_response(doc: Document) -> dict[str, Any]:
    return {
        "id": doc.id,
        "applicantId": doc.applicant_id,
        "loanApplicationId": doc.loan_application_id,
        "documentType": doc.document_type.value,
        "fileRef": doc.file_ref,
        "fileName": doc.file_name,
        "contentType": doc.content_type,
        "fileSizeBytes": doc.file_size_bytes,
        "status": doc.status.value,
        "reviewedBy": doc.reviewed_by,
        "reviewedAt": _iso(doc.reviewed_at),
        "supersededById": doc.superseded_by_id,
        "uploadedAt": _iso(doc.uploaded_at),
    }


def rate_entry_to_response(entry: InterestRate) -> dict[str, Any]:
    return {
        "purpose": entry.purpose,
        "annualRatePercent": float(entry.annual_rate_percent),
        "source": "custom",
        "version": entry.version,
        "updatedBy": entry.updated_by,
        "updatedAt": _iso(entry.updated_at),
    }


def rate_quote_to_response(quote: RateQuote) -> dict[str, Any]:
    return {
        "purpose": quote.purpose,
        "annualRatePercent": float(quote.annual_rate_percent),
        "source": quote.source,
        "version": quote.version,
    }
