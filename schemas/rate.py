from decimal import Decimal

from pydantic import BaseModel, Field


class RateUpsert(BaseModel):
    annual_rate_percent: Decimal = Field(..., alias="annualRatePercent")

    model_config = {"populate_by_name": True}
