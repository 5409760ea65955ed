"""
Credit band classification, the fallback heuristic scorer and dashboard statistics.
"""
import unittest
from decimal import Decimal

from models import ApplicationStatus, LoanApplication
from services.credit import credit_band, heuristic_score, validate_score
from services.errors import ValidationError
from services.stats import application_statistics


class TestCreditBand(unittest.TestCase):
    def test_band_boundaries(self):
        self.assertEqual(credit_band(850), "excellent")
        self.assertEqual(credit_band(750), "excellent")
        self.assertEqual(credit_band(749), "good")
        self.assertEqual(credit_band(650), "good")
        self.assertEqual(credit_band(649), "fair")
        self.assertEqual(credit_band(550), "fair")
        self.assertEqual(credit_band(549), "poor")
        self.assertEqual(credit_band(300), "poor")

    def test_absent_score_has_no_band(self):
        self.assertIsNone(credit_band(None))

    def test_validate_score(self):
        self.assertEqual(validate_score(300), 300)
        for bad in (299, 851, 700.0, True, None):
            with self.assertRaises(ValidationError, msg=bad):
                validate_score(bad)


class TestHeuristicScore(unittest.TestCase):
    def test_adjustments(self):
        self.assertEqual(heuristic_score(Decimal("1000000"), 120, "home purchase"), 470)
        self.assertEqual(heuristic_score(Decimal("4000"), 12, "personal"), 510)
        self.assertEqual(heuristic_score(Decimal("8000"), 18, "business"), 455)

    def test_result_always_in_range(self):
        for amount, term, purpose in [(Decimal("1"), 1, "personal"), (Decimal("1e9"), 360, "business")]:
            score = heuristic_score(amount, term, purpose)
            self.assertGreaterEqual(score, 300)
            self.assertLessEqual(score, 850)


def _app(status, amount, approved_amount=None):
    return LoanApplication(
        id=f"app-{status.value}-{amount}",
        applicant_id="user-1",
        amount=Decimal(amount),
        term_months=60,
        purpose="personal",
        interest_rate_percent=Decimal("12"),
        status=status,
        approved_amount=Decimal(approved_amount) if approved_amount else None,
    )


class TestApplicationStatistics(unittest.TestCase):
    def test_empty(self):
        stats = application_statistics([])
        self.assertEqual(stats["total_loans"], 0)
        self.assertEqual(stats["average_loan_amount"], Decimal("0.00"))
        self.assertEqual(stats["approval_rate"], Decimal("0.0"))

    def test_counts_and_amounts(self):
        apps = [
            _app(ApplicationStatus.APPLIED, "100000"),
            _app(ApplicationStatus.VERIFIED, "200000"),
            _app(ApplicationStatus.APPROVED, "300000", approved_amount="250000"),
        ]
        stats = application_statistics(apps)
        self.assertEqual(stats["total_loans"], 3)
        self.assertEqual(stats["pending_loans"], 2)
        self.assertEqual(stats["approved_loans"], 1)
        self.assertEqual(stats["rejected_loans"], 0)
        self.assertEqual(stats["total_loan_amount"], Decimal("600000"))
        self.assertEqual(stats["approved_amount"], Decimal("250000"))
        self.assertEqual(stats["average_loan_amount"], Decimal("200000.00"))
        self.assertEqual(stats["approval_rate"], Decimal("33.3"))


if __name__ == "__main__":
    unittest.main()
