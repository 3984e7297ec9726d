"""Unit tests for student.py: balance projection through school and grace period."""
import math

import pytest

from finance_engine.errors import NonFiniteInputError
from finance_engine.student import project_student_loan


class TestProjectStudentLoan:
    def test_interest_capitalizes_in_school_and_grace(self):
        g = 1 + 5.5 / 100 / 12
        result = project_student_loan(20_000, 10_000, 4, 6, 5.5)
        # Each annual disbursement accrues from the start of its school year
        expected_grad = 20_000 * g ** 48 + 10_000 * (g ** 48 + g ** 36 + g ** 24 + g ** 12)
        assert result.total_borrowed == 60_000
        assert result.balance_at_graduation == pytest.approx(expected_grad)
        assert result.balance_after_grace == pytest.approx(expected_grad * g ** 6)
        assert result.total_interest == pytest.approx(result.balance_after_grace - 60_000)

    def test_paying_interest_in_school(self):
        result = project_student_loan(20_000, 10_000, 4, 6, 5.5, pay_interest_in_school=True)
        assert result.total_borrowed == 60_000
        assert result.balance_at_graduation == 60_000
        assert result.balance_after_grace == 60_000
        assert result.total_interest == 0

    def test_zero_rate(self):
        result = project_student_loan(5_000, 8_000, 2, 6, 0)
        assert result.balance_after_grace == pytest.approx(21_000)
        assert result.total_interest == pytest.approx(0, abs=1e-9)

    def test_already_graduated(self):
        g = 1 + 6 / 100 / 12
        result = project_student_loan(30_000, 10_000, 0, 6, 6)
        assert result.total_borrowed == 30_000
        assert result.balance_at_graduation == 30_000
        assert result.balance_after_grace == pytest.approx(30_000 * g ** 6)

    def test_longer_grace_costs_more(self):
        short = project_student_loan(0, 10_000, 4, 0, 5)
        long = project_student_loan(0, 10_000, 4, 12, 5)
        assert short.balance_at_graduation == long.balance_at_graduation
        assert long.balance_after_grace > short.balance_after_grace

    def test_negative_years(self):
        with pytest.raises(ValueError, match="years_to_graduate"):
            project_student_loan(0, 10_000, -1, 6, 5)

    @pytest.mark.parametrize("kwargs", [
        dict(current_balance=math.nan),
        dict(annual_disbursement=math.inf),
        dict(annual_rate_pct=math.nan),
    ])
    def test_non_finite_inputs(self, kwargs):
        args = dict(
            current_balance=0.0,
            annual_disbursement=10_000.0,
            years_to_graduate=4,
            grace_months=6,
            annual_rate_pct=5.0,
        )
        args.update(kwargs)
        with pytest.raises(NonFiniteInputError):
            project_student_loan(**args)
