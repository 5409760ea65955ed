"""
Equated monthly instalment (EMI) calculator.
All arithmetic stays in full-precision Decimal; rounding to the currency unit happens
only in `format_money` / `quantize_money` at the presentation boundary.
An undefined result is returned as None and must be displayed as absent, never as zero.
"""
from __future__ import annotations

import decimal
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterator, Optional, Union

Number = Union[Decimal, int, float, str]

_PRECISION = 40
_CENT = Decimal("0.01")
_ZERO = Decimal(0)
UNDEFINED_DISPLAY = "—"


@dataclass(frozen=True)
class Amortization:
    emi: Decimal
    total_payment: Decimal
    total_interest: Decimal


@dataclass(frozen=True)
class ScheduleRow:
    period: int
    payment: Decimal
    principal: Decimal
    interest: Decimal
    balance: Decimal


def _to_decimal(value: Number) -> Optional[Decimal]:
    if isinstance(value, bool):
        return None
    try:
        d = value if isinstance(value, Decimal) else Decimal(str(value))
    except (decimal.InvalidOperation, ValueError, TypeError):
        return None
    return d if d.is_finite() else None


def _to_term(value: Number) -> Optional[int]:
    d = _to_decimal(value)
    if d is None or d != d.to_integral_value():
        return None
    return int(d)


def compute_amortization(principal: Number, annual_rate_percent: Number, term_months: Number) -> Optional[Amortization]:
    """
    Return EMI, total payment and total interest, or None when the result is undefined
    (non-positive principal or term, negative rate, non-finite input, or overflow).
    A zero rate (or one too small to move the compounding factor) degrades to principal / term.
    """
    p = _to_decimal(principal)
    rate = _to_decimal(annual_rate_percent)
    n = _to_term(term_months)
    if p is None or rate is None or n is None or p <= 0 or rate < 0 or n <= 0:
        return None

    with decimal.localcontext() as ctx:
        ctx.prec = _PRECISION
        ctx.traps[decimal.Overflow] = True
        ctx.traps[decimal.DivisionByZero] = True
        try:
            monthly_rate = rate / 12 / 100
            if monthly_rate == 0:
                emi = p / n
            else:
                factor = (1 + monthly_rate) ** n
                if factor == 1:
                    emi = p / n
                else:
                    emi = p * monthly_rate * factor / (factor - 1)
            total_payment = emi * n
            total_interest = total_payment - p
        except (decimal.Overflow, decimal.DivisionByZero, decimal.InvalidOperation):
            return None

    if not emi.is_finite() or emi <= 0 or not total_payment.is_finite():
        return None
    return Amortization(emi=emi, total_payment=total_payment, total_interest=total_interest)


def amortization_schedule(
    principal: Number, annual_rate_percent: Number, term_months: Number
) -> Iterator[ScheduleRow]:
    """Yield one row per month; the last payment absorbs the residual so the balance closes at zero."""
    result = compute_amortization(principal, annual_rate_percent, term_months)
    if result is None:
        return
    balance = _to_decimal(principal)
    n = _to_term(term_months)
    rows = []
    # Build inside the precision context, yield outside it
    with decimal.localcontext() as ctx:
        ctx.prec = _PRECISION
        monthly_rate = _to_decimal(annual_rate_percent) / 12 / 100
        for period in range(1, n + 1):
            interest = balance * monthly_rate
            if period == n:
                principal_part = balance
                payment = principal_part + interest
            else:
                payment = result.emi
                principal_part = payment - interest
            balance = balance - principal_part
            rows.append(ScheduleRow(
                period=period,
                payment=payment,
                principal=principal_part,
                interest=interest,
                balance=balance,
            ))
    yield from rows


def quantize_money(value: Optional[Decimal]) -> Optional[Decimal]:
    if value is None:
        return None
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def format_money(value: Optional[Decimal], places: int = 2) -> str:
    """Display form: grouped digits rounded half-up, or an em dash when undefined."""
    if value is None:
        return UNDEFINED_DISPLAY
    exp = Decimal(1).scaleb(-places) if places > 0 else Decimal(1)
    return f"{value.quantize(exp, rounding=ROUND_HALF_UP):,}"
