from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class ApplicationCreate(BaseModel):
    amount: Decimal
    term_months: int = Field(..., alias="termMonths")
    purpose: str

    model_config = {"populate_by_name": True}


class ApplicationAdvance(BaseModel):
    """Reviewer decision: VERIFIED, REJECTED or APPROVED."""
    decision: str
    reason: Optional[str] = None
    approved_amount: Optional[Decimal] = Field(None, alias="approvedAmount")

    model_config = {"populate_by_name": True}


class CreditScoreUpdate(BaseModel):
    credit_score: int = Field(..., alias="creditScore")

    model_config = {"populate_by_name": True}
