"""
Dashboard statistics as pure projections over a snapshot of applications.
Nothing here is cached on the entities.
"""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable

from models import ApplicationStatus, LoanApplication


def application_statistics(applications: Iterable[LoanApplication]) -> dict[str, Any]:
    apps = list(applications)
    by_status = {s: 0 for s in ApplicationStatus}
    total_amount = Decimal(0)
    approved_amount = Decimal(0)
    for app in apps:
        status = ApplicationStatus(app.status)
        by_status[status] += 1
        total_amount += Decimal(app.amount)
        if status == ApplicationStatus.APPROVED:
            approved_amount += Decimal(app.approved_amount if app.approved_amount is not None else app.amount)

    total = len(apps)
    average = (total_amount / total).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP) if total else Decimal("0.00")
    approval_rate = (
        (Decimal(by_status[ApplicationStatus.APPROVED]) * 100 / total).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
        if total
        else Decimal("0.0")
    )
    return {
        "total_loans": total,
        "applied_loans": by_status[ApplicationStatus.APPLIED],
        "verified_loans": by_status[ApplicationStatus.VERIFIED],
        "approved_loans": by_status[ApplicationStatus.APPROVED],
        "rejected_loans": by_status[ApplicationStatus.REJECTED],
        "pending_loans": by_status[ApplicationStatus.APPLIED] + by_status[ApplicationStatus.VERIFIED],
        "total_loan_amount": total_amount,
        "approved_amount": approved_amount,
        "average_loan_amount": average,
        "approval_rate": approval_rate,
    }
