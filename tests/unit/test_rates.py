"""Unit tests for rates.py: Newton-Raphson rate solver, APR and APY conversion."""
import logging

import pytest

from finance_engine.amortization import compute_payment
from finance_engine.errors import CalculationError
from finance_engine.rates import (
    RateSolveRequest,
    annualize,
    apr_to_apy,
    apy_to_apr,
    compounding_periods,
    loan_apr,
    solve,
    solve_rate,
)


class TestSolveRate:
    @pytest.mark.parametrize("principal,rate,months", [
        (200_000, 0.04 / 12, 360),
        (250_000, 0.065 / 12, 360),
        (15_000, 0.07 / 12, 60),
        (5_000, 0.18 / 12, 24),
        (1_000, 0.01, 1),
    ])
    def test_round_trip(self, principal, rate, months):
        payment = compute_payment(principal, rate, months)
        result = solve_rate(principal, payment, months, initial_guess=rate * 0.5)
        assert result.converged
        assert abs(result.periodic_rate - rate) < 1e-5
        assert 1 <= result.iterations <= 30

    def test_seeded_at_nominal_rate_converges_fast(self):
        payment = compute_payment(100_000, 0.005, 120)
        result = solve_rate(100_000, payment, 120, initial_guess=0.005)
        assert result.converged
        assert result.periodic_rate == pytest.approx(0.005, abs=1e-9)
        assert result.iterations <= 2

    def test_zero_rate_root(self):
        result = solve_rate(1200, 100, 12, initial_guess=0.01)
        assert result.converged
        assert abs(result.periodic_rate) < 1e-5

    def test_round_trip_at_tiny_rate(self):
        payment = compute_payment(100_000, 1e-9, 360)
        result = solve_rate(100_000, payment, 360, initial_guess=1e-9)
        assert result.converged
        assert abs(result.periodic_rate - 1e-9) < 1e-6

    def test_request_wrapper(self):
        payment = compute_payment(15_000, 0.006, 48)
        request = RateSolveRequest(net_principal=15_000, payment=payment, period_count=48, initial_guess=0.006)
        assert solve(request) == solve_rate(15_000, payment, 48, 0.006)

    def test_iteration_cap_reports_not_converged(self, caplog):
        payment = compute_payment(100_000, 0.005, 360)
        with caplog.at_level(logging.WARNING, logger="finance_engine.rates"):
            result = solve_rate(100_000, payment, 360, initial_guess=0.5, max_iterations=1)
        assert not result.converged
        assert result.iterations == 1
        assert "did not converge" in caplog.text

    def test_guess_outside_domain(self):
        result = solve_rate(100_000, 1000, 120, initial_guess=-2.0)
        assert not result.converged
        assert result.iterations == 0
        assert result.periodic_rate == -2.0

    def test_invalid_period_count(self):
        with pytest.raises(ValueError, match="period_count"):
            solve_rate(1000, 100, 0, 0.01)


class TestLoanApr:
    def test_financed_fee_raises_apr(self):
        """100k at 6% over 10 years with a 2.5k fee: APR above the nominal rate."""
        quote = loan_apr(100_000, 2_500, 6.0, 10)
        assert quote.converged
        assert quote.iterations <= 30
        assert quote.net_principal == 97_500
        assert quote.payment == pytest.approx(compute_payment(100_000, 0.005, 120))
        assert quote.apr > 6.0
        assert 6.4 < quote.apr < 6.7

    def test_no_fees_apr_equals_nominal(self):
        quote = loan_apr(250_000, 0, 6.5, 30)
        assert quote.converged
        assert quote.apr == pytest.approx(6.5, abs=1e-4)

    def test_fees_exceeding_principal(self):
        with pytest.raises(CalculationError, match="Fees"):
            loan_apr(10_000, 10_000, 5.0, 5)

    def test_annualize(self):
        assert annualize(0.005) == pytest.approx(6.0)
        assert annualize(0.01, periods_per_year=4) == pytest.approx(4.0)


class TestAprApy:
    def test_apr_to_apy_monthly(self):
        assert apr_to_apy(5.0, "monthly") == pytest.approx(5.1162, abs=1e-4)

    def test_annual_compounding_is_identity(self):
        assert apr_to_apy(7.0, "annually") == pytest.approx(7.0)
        assert apy_to_apr(7.0, "annually") == pytest.approx(7.0)

    @pytest.mark.parametrize("compounding", ["annually", "semiannually", "quarterly", "monthly", "daily"])
    def test_conversions_are_inverse(self, compounding):
        assert apy_to_apr(apr_to_apy(4.25, compounding), compounding) == pytest.approx(4.25)

    def test_unknown_compounding(self):
        with pytest.raises(ValueError, match="compounding"):
            apr_to_apy(5.0, "weekly")

    @pytest.mark.parametrize("name,periods", [("annually", 1), ("quarterly", 4), ("daily", 365)])
    def test_compounding_periods(self, name, periods):
        assert compounding_periods(name) == periods
