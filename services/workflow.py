"""
Role-scoped operations over loan applications, documents and rates.

Each mutating call loads its entity fresh, runs the lifecycle guards, and commits while
holding the entity's lock, then returns the updated entity so callers need no second read.
"""
from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from config import Settings, settings as default_settings
from models import ApplicationStatus, Document, DocumentStatus, DocumentType, InterestRate, LoanApplication, Role
from services import amortization, credit, lifecycle, locks, rate_table
from services.errors import InvalidTransition, LoanDeskError, NotFound, ValidationError
from services.stats import application_statistics

logger = logging.getLogger(__name__)

RATE_ADMIN_ROLES = frozenset({Role.MANAGER, Role.ADMIN})
SCORING_ROLES = frozenset({Role.ADMIN})

# Statuses each staff role sees when listing; applicants see their own, admins see all
LIST_SCOPES: dict[Role, tuple[ApplicationStatus, ...]] = {
    Role.LOAN_MANAGER: (ApplicationStatus.APPLIED,),
    Role.MANAGER: (ApplicationStatus.VERIFIED, ApplicationStatus.APPROVED, ApplicationStatus.REJECTED),
}


@dataclass(frozen=True)
class Principal:
    """Authenticated caller as supplied by the authentication service."""

    id: str
    role: Role


def _parse_enum(enum_cls, value, label: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).upper())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"Invalid {label} '{value}'. Expected one of: {allowed}")


class WorkflowGateway:
    def __init__(
        self,
        session: AsyncSession,
        scorer: Optional[credit.CreditScorer] = credit.heuristic_score,
        config: Settings = default_settings,
    ):
        self.session = session
        self.scorer = scorer
        self.config = config

    @asynccontextmanager
    async def _transaction(self):
        """Commit on success; roll back on any failure or cancellation so nothing half-applies."""
        try:
            yield
            await self.session.commit()
        except StaleDataError as e:
            await self.session.rollback()
            raise InvalidTransition("Entity was modified concurrently; reload and retry") from e
        except BaseException:
            await self.session.rollback()
            raise

    async def _load_application(self, application_id: str) -> LoanApplication:
        result = await self.session.execute(
            select(LoanApplication)
            .where(LoanApplication.id == application_id)
            .execution_options(populate_existing=True)
        )
        app = result.scalar_one_or_none()
        if not app:
            raise NotFound(f"Loan application {application_id} not found")
        return app

    async def _load_document(self, document_id: str) -> Document:
        result = await self.session.execute(
            select(Document).where(Document.id == document_id).execution_options(populate_existing=True)
        )
        doc = result.scalar_one_or_none()
        if not doc:
            raise NotFound(f"Document {document_id} not found")
        return doc

    async def _documents_for(self, application_id: str) -> list[Document]:
        """Latest committed documents of an application (bypasses the identity map)."""
        result = await self.session.execute(
            select(Document)
            .where(Document.loan_application_id == application_id)
            .order_by(Document.uploaded_at)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Applicant operations
    # ------------------------------------------------------------------

    def _validate_request(self, amount, term_months) -> tuple[Decimal, int]:
        try:
            value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
        except (InvalidOperation, ValueError, TypeError):
            raise ValidationError(f"Amount '{amount}' is not a number")
        if not value.is_finite() or value <= 0:
            raise ValidationError("Amount must be greater than 0")
        if value > self.config.max_loan_amount:
            raise ValidationError(f"Amount must not exceed {self.config.max_loan_amount:,}")
        if isinstance(term_months, bool) or not isinstance(term_months, int):
            raise ValidationError("Term must be a whole number of months")
        if not self.config.min_term_months <= term_months <= self.config.max_term_months:
            raise ValidationError(
                f"Term must be between {self.config.min_term_months} and {self.config.max_term_months} months"
            )
        value = value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        if value <= 0:
            raise ValidationError("Amount must be at least 0.01")
        return value, term_months

    async def submit_loan_application(
        self, principal: Principal, amount, term_months: int, purpose: str
    ) -> LoanApplication:
        if principal.role not in lifecycle.SUBMIT_ROLES:
            raise InvalidTransition(f"Role {principal.role.value} may not submit loan applications")
        value, term = self._validate_request(amount, term_months)
        # Rate is read once here and frozen onto the application
        quote = await rate_table.resolve_rate(self.session, purpose)

        async with locks.hold(locks.applicant_key(principal.id)):
            async with self._transaction():
                prior_approved = await self.session.scalar(
                    select(func.count())
                    .select_from(LoanApplication)
                    .where(
                        LoanApplication.applicant_id == principal.id,
                        LoanApplication.status == ApplicationStatus.APPROVED,
                    )
                )
                counting_docs = await self.session.scalar(
                    select(func.count())
                    .select_from(Document)
                    .where(
                        Document.applicant_id == principal.id,
                        Document.status.in_(list(lifecycle.COUNTING_DOCUMENT_STATUSES)),
                        Document.superseded_by_id.is_(None),
                    )
                )
                lifecycle.check_submission(principal.role, prior_approved or 0, counting_docs or 0)

                score = self.scorer(value, term, quote.purpose) if self.scorer else None
                app = LoanApplication(
                    id=f"app-{uuid.uuid4().hex[:12]}",
                    applicant_id=principal.id,
                    amount=value,
                    term_months=term,
                    purpose=quote.purpose,
                    interest_rate_percent=quote.annual_rate_percent,
                    status=ApplicationStatus.APPLIED,
                    credit_score=credit.validate_score(score) if score is not None else None,
                )
                self.session.add(app)
                await self.session.flush()

                unattached = await self.session.execute(
                    select(Document).where(
                        Document.applicant_id == principal.id,
                        Document.loan_application_id.is_(None),
                        Document.superseded_by_id.is_(None),
                    )
                )
                attached = 0
                for doc in unattached.scalars().all():
                    doc.loan_application_id = app.id
                    attached += 1

        logger.info(
            "Application %s submitted by %s: amount=%s term=%s purpose=%s rate=%s%% (%s), %d document(s) attached",
            app.id, principal.id, value, term, quote.purpose, quote.annual_rate_percent, quote.source, attached,
        )
        return app

    def _validate_upload(self, document_type, file_ref, file_size_bytes, content_type) -> DocumentType:
        doc_type = _parse_enum(DocumentType, document_type, "document type")
        if not file_ref or not str(file_ref).strip():
            raise ValidationError("File reference is required")
        if isinstance(file_size_bytes, bool) or not isinstance(file_size_bytes, int) or file_size_bytes <= 0:
            raise ValidationError("File is empty")
        if file_size_bytes > self.config.max_document_size_bytes:
            limit_mb = self.config.max_document_size_bytes / (1024 * 1024)
            raise ValidationError(f"File size must be at most {limit_mb:g} MB")
        if not content_type or content_type.strip().lower() not in self.config.allowed_document_type_set:
            raise ValidationError(
                f"Unsupported file type '{content_type}'. Allowed: {', '.join(sorted(self.config.allowed_document_type_set))}"
            )
        return doc_type

    async def upload_document(
        self,
        principal: Principal,
        document_type,
        file_ref: str,
        file_size_bytes: int,
        content_type: str,
        loan_application_id: Optional[str] = None,
        file_name: Optional[str] = None,
    ) -> Document:
        """
        Record an uploaded file. Uploading against an application replaces (supersedes) any
        REJECTED document of the same type; the old record is kept for audit.
        """
        if principal.role != Role.APPLICANT:
            raise InvalidTransition(f"Role {principal.role.value} may not upload documents")
        doc_type = self._validate_upload(document_type, file_ref, file_size_bytes, content_type)

        doc = Document(
            id=f"doc-{uuid.uuid4().hex[:12]}",
            applicant_id=principal.id,
            document_type=doc_type,
            file_ref=str(file_ref).strip(),
            file_name=file_name,
            content_type=content_type.strip().lower(),
            file_size_bytes=file_size_bytes,
            status=DocumentStatus.PENDING,
        )

        if loan_application_id is None:
            async with locks.hold(locks.applicant_key(principal.id)):
                async with self._transaction():
                    self.session.add(doc)
            logger.info("Document %s (%s) uploaded by %s", doc.id, doc_type.value, principal.id)
            return doc

        async with locks.hold(locks.application_key(loan_application_id)):
            async with self._transaction():
                app = await self._load_application(loan_application_id)
                if app.applicant_id != principal.id:
                    raise NotFound(f"Loan application {loan_application_id} not found")
                if ApplicationStatus(app.status) != ApplicationStatus.APPLIED:
                    raise ValidationError(
                        f"Documents can only be added while the application is APPLIED (currently {ApplicationStatus(app.status).value})"
                    )
                doc.loan_application_id = app.id
                self.session.add(doc)
                superseded = [
                    d for d in await self._documents_for(app.id)
                    if d.document_type == doc_type and d.status == DocumentStatus.REJECTED and d.is_current
                ]
                for old in superseded:
                    old.superseded_by_id = doc.id
        logger.info(
            "Document %s (%s) uploaded by %s for application %s, superseding %s",
            doc.id, doc_type.value, principal.id, loan_application_id, [d.id for d in superseded] or "nothing",
        )
        return doc

    # ------------------------------------------------------------------
    # Reviewer operations
    # ------------------------------------------------------------------

    async def review_document(self, principal: Principal, document_id: str, decision) -> Document:
        target = _parse_enum(DocumentStatus, decision, "document decision")
        if principal.role != Role.LOAN_MANAGER:
            raise InvalidTransition(f"Role {principal.role.value} may not review documents")
        async with locks.hold(locks.document_key(document_id)):
            doc = await self._load_document(document_id)
            if doc.loan_application_id is None:
                # Submission attaches documents under the applicant lock; re-read once it is free
                async with locks.hold(locks.applicant_key(doc.applicant_id)):
                    doc = await self._load_document(document_id)
            if doc.loan_application_id is None:
                async with self._transaction():
                    lifecycle.review_document(doc, target, principal.id, principal.role, None)
                return doc
            # Document lock first, then its application: advance never takes document locks
            async with locks.hold(locks.application_key(doc.loan_application_id)):
                async with self._transaction():
                    doc = await self._load_document(document_id)
                    app = await self._load_application(doc.loan_application_id)
                    lifecycle.review_document(doc, target, principal.id, principal.role, ApplicationStatus(app.status))
        return doc

    async def review_documents(self, principal: Principal, document_ids: Iterable[str], decision) -> list[dict[str, Any]]:
        """
        Review several documents one at a time. Not atomic: each outcome is reported
        separately and earlier successes stay committed when a later one fails.
        """
        outcomes: list[dict[str, Any]] = []
        for document_id in dict.fromkeys(document_ids):
            try:
                doc = await self.review_document(principal, document_id, decision)
            except LoanDeskError as e:
                outcomes.append({
                    "document_id": document_id,
                    "ok": False,
                    "error": type(e).__name__,
                    "detail": e.detail,
                })
            else:
                outcomes.append({"document_id": document_id, "ok": True, "status": doc.status.value})
        succeeded = sum(1 for o in outcomes if o["ok"])
        logger.info("Bulk review by %s: %d/%d documents updated", principal.id, succeeded, len(outcomes))
        return outcomes

    async def advance_application(
        self,
        principal: Principal,
        application_id: str,
        decision,
        reason: Optional[str] = None,
        approved_amount=None,
    ) -> LoanApplication:
        target = _parse_enum(ApplicationStatus, decision, "application decision")
        if not any(principal.role in roles for roles in lifecycle.APPLICATION_TRANSITIONS.values()):
            raise InvalidTransition(f"Role {principal.role.value} may not advance loan applications")
        async with locks.hold(locks.application_key(application_id)):
            try:
                async with self._transaction():
                    app = await self._load_application(application_id)
                    documents = await self._documents_for(app.id) if target == ApplicationStatus.VERIFIED else None
                    lifecycle.transition_application(
                        app,
                        target,
                        principal.id,
                        principal.role,
                        documents=documents,
                        reason=reason,
                        approved_amount=approved_amount,
                    )
            except LoanDeskError as e:
                logger.warning(
                    "Refused %s -> %s on %s by %s: %s",
                    principal.role.value, target.value, application_id, principal.id, e.detail,
                )
                raise
        return app

    async def attach_credit_score(self, principal: Principal, application_id: str, score: int) -> LoanApplication:
        """Record a score supplied by the external scoring service."""
        if principal.role not in SCORING_ROLES:
            raise InvalidTransition(f"Role {principal.role.value} may not set credit scores")
        value = credit.validate_score(score)
        async with locks.hold(locks.application_key(application_id)):
            async with self._transaction():
                app = await self._load_application(application_id)
                if ApplicationStatus(app.status).is_terminal:
                    raise InvalidTransition(
                        f"Application {application_id} is {ApplicationStatus(app.status).value}; credit score is final"
                    )
                app.credit_score = value
        logger.info("Credit score for %s set to %d (%s)", application_id, value, credit.credit_band(value))
        return app

    # ------------------------------------------------------------------
    # Rates and calculator
    # ------------------------------------------------------------------

    async def upsert_rate(self, principal: Principal, purpose: str, annual_rate_percent) -> InterestRate:
        if principal.role not in RATE_ADMIN_ROLES:
            raise InvalidTransition(f"Role {principal.role.value} may not change interest rates")
        return await rate_table.upsert_rate(self.session, purpose, annual_rate_percent, updated_by=principal.id)

    async def resolve_rate(self, purpose: str) -> rate_table.RateQuote:
        return await rate_table.resolve_rate(self.session, purpose)

    async def list_rates(self) -> list[rate_table.RateQuote]:
        return await rate_table.list_rates(self.session)

    @staticmethod
    def compute_amortization(principal, annual_rate_percent, term_months) -> Optional[amortization.Amortization]:
        return amortization.compute_amortization(principal, annual_rate_percent, term_months)

    # ------------------------------------------------------------------
    # Read-only, role-scoped queries
    # ------------------------------------------------------------------

    async def list_applications(
        self, principal: Principal, status: Optional[str] = None
    ) -> list[LoanApplication]:
        stmt = select(LoanApplication)
        if principal.role == Role.APPLICANT:
            stmt = stmt.where(LoanApplication.applicant_id == principal.id)
        elif principal.role in LIST_SCOPES:
            stmt = stmt.where(LoanApplication.status.in_(LIST_SCOPES[principal.role]))
        if status is not None:
            stmt = stmt.where(LoanApplication.status == _parse_enum(ApplicationStatus, status, "status"))
        result = await self.session.execute(stmt.order_by(LoanApplication.applied_date.desc()))
        return list(result.scalars().all())

    async def get_application(self, principal: Principal, application_id: str) -> LoanApplication:
        app = await self._load_application(application_id)
        if principal.role == Role.APPLICANT and app.applicant_id != principal.id:
            raise NotFound(f"Loan application {application_id} not found")
        return app

    async def list_documents(
        self, principal: Principal, loan_application_id: Optional[str] = None
    ) -> list[Document]:
        stmt = select(Document)
        if principal.role == Role.APPLICANT:
            stmt = stmt.where(Document.applicant_id == principal.id)
        if loan_application_id is not None:
            stmt = stmt.where(Document.loan_application_id == loan_application_id)
        result = await self.session.execute(stmt.order_by(Document.uploaded_at))
        return list(result.scalars().all())

    async def application_stats(self, principal: Principal) -> dict[str, Any]:
        return application_statistics(await self.list_applications(principal))
