"""
Interest rate resolution by loan purpose.
Resolution order: normalize the purpose key, then an administrator-set entry, then the
fixed default table; anything else is an UnknownPurpose.
"""
from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Literal, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models import InterestRate
from services import locks
from services.errors import UnknownPurpose, ValidationError

logger = logging.getLogger(__name__)

MAX_RATE_PERCENT = Decimal("100")

DEFAULT_RATES: dict[str, Decimal] = {
    "home purchase": Decimal("8.5"),
    "car purchase": Decimal("9.5"),
    "education": Decimal("7.5"),
    "business": Decimal("10.5"),
    "personal": Decimal("12.0"),
    "health": Decimal("8.0"),
    "travel": Decimal("11.0"),
    "wedding": Decimal("9.0"),
    "home renovation": Decimal("8.75"),
    "debt consolidation": Decimal("11.5"),
}


@dataclass(frozen=True)
class RateQuote:
    purpose: str
    annual_rate_percent: Decimal
    source: Literal["custom", "default"]
    version: Optional[int] = None


def normalize_purpose(purpose: Optional[str]) -> str:
    """'Home_Purchase ', 'home-purchase' and 'HOME  PURCHASE' all map to 'home purchase'."""
    if purpose is None:
        raise ValidationError("Purpose is required")
    key = re.sub(r"[\s_\-]+", " ", str(purpose)).strip().lower()
    if not key:
        raise ValidationError("Purpose is required")
    return key


def parse_rate(value) -> Decimal:
    try:
        rate = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"Interest rate '{value}' is not a number")
    if not rate.is_finite() or rate <= 0 or rate > MAX_RATE_PERCENT:
        raise ValidationError(f"Interest rate must be greater than 0 and at most {MAX_RATE_PERCENT}%")
    # Stored to the cent; a positive rate can still round to zero
    rate = rate.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    if rate <= 0:
        raise ValidationError(f"Interest rate must be greater than 0 and at most {MAX_RATE_PERCENT}%")
    return rate


async def _find_entry(session: AsyncSession, key: str) -> InterestRate | None:
    result = await session.execute(select(InterestRate).where(InterestRate.purpose == key))
    return result.scalar_one_or_none()


async def resolve_rate(session: AsyncSession, purpose: str) -> RateQuote:
    key = normalize_purpose(purpose)
    entry = await _find_entry(session, key)
    if entry is not None:
        return RateQuote(
            purpose=key,
            annual_rate_percent=Decimal(entry.annual_rate_percent),
            source="custom",
            version=entry.version,
        )
    default = DEFAULT_RATES.get(key)
    if default is None:
        raise UnknownPurpose(key)
    return RateQuote(purpose=key, annual_rate_percent=default, source="default")


async def list_rates(session: AsyncSession) -> list[RateQuote]:
    """Defaults overlaid with administrator entries, sorted by purpose."""
    merged = {k: RateQuote(purpose=k, annual_rate_percent=v, source="default") for k, v in DEFAULT_RATES.items()}
    result = await session.execute(select(InterestRate))
    for entry in result.scalars().all():
        merged[entry.purpose] = RateQuote(
            purpose=entry.purpose,
            annual_rate_percent=Decimal(entry.annual_rate_percent),
            source="custom",
            version=entry.version,
        )
    return [merged[k] for k in sorted(merged)]


async def upsert_rate(session: AsyncSession, purpose: str, annual_rate_percent, updated_by: str) -> InterestRate:
    """
    Insert or overwrite the entry for a purpose (no history is kept).
    Writing the same rate again is a no-op and leaves the version unchanged.
    """
    key = normalize_purpose(purpose)
    rate = parse_rate(annual_rate_percent)
    async with locks.hold(locks.rate_key(key)):
        entry = await _find_entry(session, key)
        if entry is None:
            entry = InterestRate(
                id=f"rate-{uuid.uuid4().hex[:12]}",
                purpose=key,
                annual_rate_percent=rate,
                version=1,
                updated_by=updated_by,
            )
            session.add(entry)
            try:
                await session.commit()
            except IntegrityError:
                # Another process inserted the same purpose first; overwrite theirs
                await session.rollback()
                entry = await _find_entry(session, key)
                if entry is None:
                    raise
                _overwrite(entry, rate, updated_by)
                await session.commit()
        elif Decimal(entry.annual_rate_percent) != rate:
            _overwrite(entry, rate, updated_by)
            await session.commit()
        logger.info("Rate for '%s' set to %s%% by %s (version %s)", key, rate, updated_by, entry.version)
        return entry


def _overwrite(entry: InterestRate, rate: Decimal, updated_by: str) -> None:
    entry.annual_rate_percent = rate
    entry.version = (entry.version or 0) + 1
    entry.updated_by = updated_by
