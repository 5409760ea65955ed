from decimal import Decimal

from fastapi import APIRouter, Query

from api.serializers import money
from config import settings
from services.amortization import amortization_schedule, compute_amortization, format_money

router = APIRouter(prefix="/api/calculator", tags=["calculator"])


@router.get("/emi")
async def emi(
    principal: Decimal = Query(...),
    annual_rate_percent: Decimal = Query(..., alias="annualRatePercent"),
    term_months: int = Query(..., alias="termMonths"),
):
    """EMI quote. Undefined inputs give nulls (displayed as a dash), never zero."""
    result = compute_amortization(principal, annual_rate_percent, term_months)
    if result is None:
        return {
            "defined": False,
            "emi": None,
            "totalPayment": None,
            "totalInterest": None,
            "display": {"emi": format_money(None), "totalPayment": format_money(None), "totalInterest": format_money(None)},
        }
    return {
        "defined": True,
        "emi": money(result.emi),
        "totalPayment": money(result.total_payment),
        "totalInterest": money(result.total_interest),
        "display": {
            "emi": format_money(result.emi, places=0),
            "totalPayment": format_money(result.total_payment, places=0),
            "totalInterest": format_money(result.total_interest, places=0),
        },
    }


@router.get("/schedule")
async def schedule(
    principal: Decimal = Query(...),
    annual_rate_percent: Decimal = Query(..., alias="annualRatePercent"),
    term_months: int = Query(..., alias="termMonths", le=settings.max_term_months),
):
    """One row per month, at most `max_term_months` rows."""
    rows = [
        {
            "period": row.period,
            "payment": money(row.payment),
            "principal": money(row.principal),
            "interest": money(row.interest),
            "balance": money(row.balance),
        }
        for row in amortization_schedule(principal, annual_rate_percent, term_months)
    ]
    return {"defined": bool(rows), "rows": rows}
