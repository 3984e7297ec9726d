"""Unit tests for tvm.py: spreadsheet-style PV / FV / PMT / NPER and deferred loans."""
import math

import pytest

from finance_engine.amortization import compute_payment
from finance_engine.annuity import present_value
from finance_engine.errors import NonFiniteInputError, PaymentTooLowError
from finance_engine.payoff import solve_term_from_payment
from finance_engine.tvm import deferred_amount_due, fv, nper, pmt, pv


class TestTvm:
    def test_pv_matches_annuity_evaluator(self):
        # Paying 100/month for a year at 12% is worth +1125.51 today
        assert pv(12, 12, -100) == pytest.approx(present_value(100, 12, 0.01))

    def test_fv_of_deposits(self):
        # 100/month for a year at 12% grows to 1268.25
        assert fv(12, 12, -100) == pytest.approx(1268.25, abs=0.01)

    def test_fv_with_starting_balance(self):
        assert fv(6, 120, -100, pv=-1000) == pytest.approx(
            1000 * 1.005 ** 120 + 100 * (1.005 ** 120 - 1) / 0.005
        )

    def test_pmt_of_loan(self):
        assert pmt(12, 12, 1000) == pytest.approx(-88.85, abs=0.01)

    def test_nper_of_loan(self):
        assert nper(12, -100, 1000) == pytest.approx(10.5886, abs=1e-4)

    def test_zero_rate(self):
        assert pv(0, 10, -100) == 1000
        assert fv(0, 10, -100) == 1000
        assert pmt(0, 10, 1000) == -100
        assert nper(0, -100, 1000) == 10

    @pytest.mark.parametrize("payment", [-10, -5, 0])
    def test_nper_payment_too_low(self, payment):
        with pytest.raises(PaymentTooLowError):
            nper(12, payment, 1000)

    def test_pmt_requires_periods(self):
        with pytest.raises(ValueError, match="nper"):
            pmt(5, 0, 1000)

    def test_pmt_at_tiny_rate(self):
        # 1.2e-9 % a year is 1e-12 a month
        assert pmt(1.2e-9, 360, 100_000) == pytest.approx(
            -compute_payment(100_000, 1e-12, 360), rel=1e-12
        )

    def test_fv_grows_with_rate_near_zero(self):
        values = [fv(pct, 120, -100) for pct in (0, 1.2e-9, 1.2e-8, 1.2e-7)]
        assert all(a < b for a, b in zip(values, values[1:]))

    def test_nper_at_tiny_rate(self):
        assert nper(1.2e-9, -300, 100_000) == pytest.approx(
            solve_term_from_payment(100_000, 1e-12, 300), rel=1e-12
        )

    @pytest.mark.parametrize("rate_pct", [-1200, -1500, math.nan])
    def test_rate_outside_domain(self, rate_pct):
        with pytest.raises(NonFiniteInputError):
            pv(rate_pct, 12, -100)


class TestDeferredAmountDue:
    def test_annual_compounding(self):
        result = deferred_amount_due(10_000, 6, 10)
        assert result.amount_due == pytest.approx(17_908.48, abs=0.01)
        assert result.total_interest == pytest.approx(result.amount_due - 10_000)

    @pytest.mark.parametrize("compounding,n", [
        ("annually", 1),
        ("semiannually", 2),
        ("quarterly", 4),
        ("monthly", 12),
        ("daily", 365),
    ])
    def test_compounding_table(self, compounding, n):
        result = deferred_amount_due(100_000, 6, 10, compounding)
        assert result.amount_due == pytest.approx(100_000 * (1 + 0.06 / n) ** (n * 10))

    def test_more_frequent_compounding_owes_more(self):
        due = [deferred_amount_due(100_000, 6, 10, c).amount_due for c in ("annually", "quarterly", "monthly", "daily")]
        assert all(a < b for a, b in zip(due, due[1:]))

    def test_zero_rate(self):
        result = deferred_amount_due(5_000, 0, 7)
        assert result.amount_due == 5_000
        assert result.total_interest == 0

    def test_unknown_compounding(self):
        with pytest.raises(ValueError, match="compounding"):
            deferred_amount_due(10_000, 6, 10, "weekly")

    def test_negative_principal(self):
        with pytest.raises(ValueError, match="principal"):
            deferred_amount_due(-1, 6, 10)

    @pytest.mark.parametrize("rate_pct,years", [(1e6, 1000), (-100, 5), (math.inf, 5)])
    def test_unrepresentable_inputs(self, rate_pct, years):
        with pytest.raises(NonFiniteInputError):
            deferred_amount_due(10_000, rate_pct, years)
