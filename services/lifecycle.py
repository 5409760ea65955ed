"""
Loan application and document state machine.

Every legal move is listed in APPLICATION_TRANSITIONS / DOCUMENT_TRANSITIONS and checked
here, not by callers. Guards run before any field is touched, so a failed transition
leaves status, amounts and document status exactly as they were.

    APPLIED -> VERIFIED -> APPROVED
       |          |
       +----------+-> REJECTED
"""
from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Optional

from database import utcnow
from models import ApplicationStatus, Document, DocumentStatus, LoanApplication, Role
from services.errors import IncompletePrerequisites, InvalidTransition, ValidationError

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")

SUBMIT_ROLES = frozenset({Role.APPLICANT})

APPLICATION_TRANSITIONS: dict[tuple[ApplicationStatus, ApplicationStatus], frozenset[Role]] = {
    (ApplicationStatus.APPLIED, ApplicationStatus.VERIFIED): frozenset({Role.LOAN_MANAGER}),
    (ApplicationStatus.APPLIED, ApplicationStatus.REJECTED): frozenset({Role.LOAN_MANAGER}),
    (ApplicationStatus.VERIFIED, ApplicationStatus.REJECTED): frozenset({Role.MANAGER}),
    (ApplicationStatus.VERIFIED, ApplicationStatus.APPROVED): frozenset({Role.MANAGER}),
}

DOCUMENT_TRANSITIONS: dict[tuple[DocumentStatus, DocumentStatus], frozenset[Role]] = {
    (DocumentStatus.PENDING, DocumentStatus.VERIFIED): frozenset({Role.LOAN_MANAGER}),
    (DocumentStatus.PENDING, DocumentStatus.REJECTED): frozenset({Role.LOAN_MANAGER}),
}

# Documents that satisfy the "has uploaded something" submission precondition
COUNTING_DOCUMENT_STATUSES = frozenset({DocumentStatus.PENDING, DocumentStatus.VERIFIED})


def allowed_transitions(status: ApplicationStatus, role: Role) -> list[ApplicationStatus]:
    """Targets `role` may move an application in `status` to."""
    return [dst for (src, dst), roles in APPLICATION_TRANSITIONS.items() if src == status and role in roles]


def check_application_transition(current: ApplicationStatus, target: ApplicationStatus, role: Role) -> None:
    roles = APPLICATION_TRANSITIONS.get((current, target))
    if roles is None:
        raise InvalidTransition(f"Cannot move application from {current.value} to {target.value}")
    if role not in roles:
        raise InvalidTransition(
            f"Role {role.value} may not move application from {current.value} to {target.value}"
        )


def check_submission(role: Role, prior_approved_loans: int, counting_documents: int) -> None:
    if role not in SUBMIT_ROLES:
        raise InvalidTransition(f"Role {role.value} may not submit loan applications")
    if prior_approved_loans <= 0 and counting_documents <= 0:
        raise ValidationError("Please upload at least one document before applying for a loan")


def verification_blockers(documents: Iterable[Document]) -> list[str]:
    """Ids of current attached documents that are not VERIFIED (superseded records are ignored)."""
    return [d.id for d in documents if d.is_current and d.status != DocumentStatus.VERIFIED]


def check_documents_verified(application_id: str, documents: Iterable[Document]) -> None:
    current = [d for d in documents if d.is_current]
    if not current:
        raise IncompletePrerequisites(
            f"Application {application_id} has no documents attached", blocking_ids=[]
        )
    blocking = verification_blockers(current)
    if blocking:
        raise IncompletePrerequisites(
            f"Application {application_id} has documents that are not verified: {', '.join(blocking)}",
            blocking_ids=blocking,
        )


def parse_approved_amount(value, requested: Decimal) -> Decimal:
    if value is None:
        return Decimal(requested)
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"Approved amount '{value}' is not a number")
    if not amount.is_finite() or amount <= 0 or amount > Decimal(requested):
        raise ValidationError("Approved amount must be greater than 0 and not exceed the requested amount")
    amount = amount.quantize(_CENT, rounding=ROUND_HALF_UP)
    if amount <= 0:
        raise ValidationError("Approved amount must be at least 0.01")
    return amount


def transition_application(
    application: LoanApplication,
    target: ApplicationStatus,
    actor_id: str,
    role: Role,
    *,
    documents: Optional[Iterable[Document]] = None,
    reason: Optional[str] = None,
    approved_amount=None,
) -> LoanApplication:
    """
    Validate and apply one application transition in place.
    `documents` must be a fresh read of the application's documents when target is VERIFIED.
    """
    current = ApplicationStatus(application.status)
    check_application_transition(current, target, role)

    if target == ApplicationStatus.VERIFIED:
        check_documents_verified(application.id, documents or [])
        application.assigned_loan_manager_id = actor_id
    elif target == ApplicationStatus.APPROVED:
        approved = parse_approved_amount(approved_amount, application.amount)
        application.approved_amount = approved
        application.paid_amount = Decimal("0.00")
        application.pending_amount = approved
        application.assigned_manager_id = actor_id
        application.decision_date = utcnow()
    elif target == ApplicationStatus.REJECTED:
        if role == Role.LOAN_MANAGER:
            application.assigned_loan_manager_id = actor_id
        else:
            application.assigned_manager_id = actor_id
        application.rejection_reason = (reason or "").strip() or None
        application.decision_date = utcnow()

    application.status = target
    logger.info("Application %s moved %s -> %s by %s (%s)", application.id, current.value, target.value, actor_id, role.value)
    return application


def review_document(
    document: Document,
    decision: DocumentStatus,
    actor_id: str,
    role: Role,
    owning_status: Optional[ApplicationStatus],
) -> Document:
    """Apply a loan manager's decision to one document. Does not advance the owning application."""
    current = DocumentStatus(document.status)
    roles = DOCUMENT_TRANSITIONS.get((current, decision))
    if roles is None:
        raise InvalidTransition(f"Cannot move document {document.id} from {current.value} to {decision.value}")
    if role not in roles:
        raise InvalidTransition(f"Role {role.value} may not review documents")
    if owning_status is None:
        raise InvalidTransition(f"Document {document.id} is not attached to a loan application")
    if ApplicationStatus(owning_status).is_terminal:
        raise InvalidTransition(
            f"Document {document.id} belongs to an application that is already {ApplicationStatus(owning_status).value}"
        )

    document.status = decision
    document.reviewed_by = actor_id
    document.reviewed_at = utcnow()
    logger.info("Document %s moved %s -> %s by %s", document.id, current.value, decision.value, actor_id)
    return document
