"""
Rate table: purpose normalization, default vs administrator entries, idempotent upserts.
"""
import unittest
from decimal import Decimal

from services import rate_table
from services.errors import InvalidTransition, UnknownPurpose, ValidationError
from tests.base import ADMIN, APPLICANT, LOAN_MANAGER, MANAGER, AsyncDatabaseTestCase


class TestNormalizePurpose(unittest.TestCase):
    def test_spelling_variants_share_a_key(self):
        for raw in ("Home Purchase", "home_purchase", " HOME-PURCHASE ", "home   purchase"):
            self.assertEqual(rate_table.normalize_purpose(raw), "home purchase")

    def test_blank_purpose_rejected(self):
        for raw in (None, "", "  ", "__"):
            with self.assertRaises(ValidationError):
                rate_table.normalize_purpose(raw)


class TestParseRate(unittest.TestCase):
    def test_valid_rates_are_rounded_to_cents(self):
        self.assertEqual(rate_table.parse_rate("8.755"), Decimal("8.76"))
        self.assertEqual(rate_table.parse_rate(100), Decimal("100.00"))

    def test_out_of_range_or_garbage(self):
        for value in (0, "-1", "100.01", "abc", None, "NaN", "Infinity", "0.004", "-1e50", "1e50"):
            with self.assertRaises(ValidationError, msg=value):
                rate_table.parse_rate(value)


class TestResolveRate(AsyncDatabaseTestCase):
    async def test_default_rate(self):
        quote = await rate_table.resolve_rate(self.session, "Home_Purchase")
        self.assertEqual(quote.purpose, "home purchase")
        self.assertEqual(quote.annual_rate_percent, Decimal("8.5"))
        self.assertEqual(quote.source, "default")
        self.assertIsNone(quote.version)

    async def test_unknown_purpose(self):
        with self.assertRaises(UnknownPurpose) as ctx:
            await rate_table.resolve_rate(self.session, "Space Tourism")
        self.assertEqual(ctx.exception.purpose, "space tourism")
        self.assertEqual(ctx.exception.extra, {"purpose": "space tourism"})

    async def test_custom_entry_overrides_default(self):
        await self.gateway.upsert_rate(MANAGER, "home purchase", "9.25")
        quote = await rate_table.resolve_rate(self.session, "HOME PURCHASE")
        self.assertEqual(quote.annual_rate_percent, Decimal("9.25"))
        self.assertEqual(quote.source, "custom")
        self.assertEqual(quote.version, 1)

    async def test_custom_entry_for_new_purpose(self):
        await self.gateway.upsert_rate(ADMIN, "Gold Loan", "10")
        quote = await self.gateway.resolve_rate("gold-loan")
        self.assertEqual(quote.annual_rate_percent, Decimal("10.00"))


class TestUpsertRate(AsyncDatabaseTestCase):
    async def test_same_rate_twice_is_a_no_op(self):
        first = await self.gateway.upsert_rate(MANAGER, "education", "8")
        second = await self.gateway.upsert_rate(MANAGER, "Education", "8.00")
        self.assertEqual(first.id, second.id)
        self.assertEqual(second.version, 1)

    async def test_changed_rate_bumps_version(self):
        await self.gateway.upsert_rate(MANAGER, "education", "8")
        entry = await self.gateway.upsert_rate(ADMIN, "education", "8.25")
        self.assertEqual(entry.version, 2)
        self.assertEqual(entry.annual_rate_percent, Decimal("8.25"))
        self.assertEqual(entry.updated_by, ADMIN.id)

    async def test_rate_that_rounds_to_zero_is_refused(self):
        with self.assertRaises(ValidationError):
            await self.gateway.upsert_rate(MANAGER, "education", "0.004")
        quote = await self.gateway.resolve_rate("education")
        self.assertEqual(quote.annual_rate_percent, Decimal("7.5"))
        self.assertEqual(quote.source, "default")

    async def test_only_managers_and_admins(self):
        for principal in (APPLICANT, LOAN_MANAGER):
            with self.assertRaises(InvalidTransition):
                await self.gateway.upsert_rate(principal, "education", "8")

    async def test_invalid_rate_leaves_table_untouched(self):
        with self.assertRaises(ValidationError):
            await self.gateway.upsert_rate(MANAGER, "education", "0")
        quote = await self.gateway.resolve_rate("education")
        self.assertEqual(quote.source, "default")


class TestListRates(AsyncDatabaseTestCase):
    async def test_defaults_merged_with_custom_entries(self):
        await self.gateway.upsert_rate(MANAGER, "personal", "13.5")
        await self.gateway.upsert_rate(MANAGER, "gold loan", "10")
        quotes = await self.gateway.list_rates()
        by_purpose = {q.purpose: q for q in quotes}

        self.assertEqual([q.purpose for q in quotes], sorted(by_purpose))
        self.assertEqual(len(quotes), len(rate_table.DEFAULT_RATES) + 1)
        self.assertEqual(by_purpose["personal"].annual_rate_percent, Decimal("13.50"))
        self.assertEqual(by_purpose["personal"].source, "custom")
        self.assertEqual(by_purpose["gold loan"].source, "custom")
        self.assertEqual(by_purpose["travel"].source, "default")


if __name__ == "__main__":
    unittest.main()
