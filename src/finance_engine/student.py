"""Student-loan balance projection up to the start of repayment.

Loans are disbursed once a year at the start of each school year. Unless the
borrower pays the interest while in school, interest accrues monthly and
capitalizes through school and through the grace period.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

from .config import PERIODS_PER_YEAR
from .errors import NonFiniteInputError


@dataclass(frozen=True)
class StudentLoanProjection:
    total_borrowed: float
    balance_at_graduation: float
    balance_after_grace: float
    total_interest: float  # capitalized interest only; zero when paid in school


def project_student_loan(
    current_balance: float,
    annual_disbursement: float,
    years_to_graduate: int,
    grace_months: int,
    annual_rate_pct: float,
    pay_interest_in_school: bool = False,
) -> StudentLoanProjection:
    """Project the balance owed when repayment begins.

    With *pay_interest_in_school* the balance is just what was borrowed:
    interest is settled as it accrues and nothing capitalizes.
    """
    if years_to_graduate < 0 or grace_months < 0:
        raise ValueError("years_to_graduate and grace_months must be >= 0")
    for name, value in (
        ("current_balance", current_balance),
        ("annual_disbursement", annual_disbursement),
        ("annual_rate_pct", annual_rate_pct),
    ):
        if not math.isfinite(value):
            raise NonFiniteInputError(f"{name} must be a finite number, got {value!r}")

    monthly_rate = annual_rate_pct / 100 / PERIODS_PER_YEAR
    balance = current_balance
    total_borrowed = current_balance + annual_disbursement * years_to_graduate

    if pay_interest_in_school:
        balance += annual_disbursement * years_to_graduate
        balance_at_graduation = balance
    else:
        for month in range(years_to_graduate * PERIODS_PER_YEAR):
            if month % PERIODS_PER_YEAR == 0:
                balance += annual_disbursement
            balance *= 1 + monthly_rate
        balance_at_graduation = balance
        try:
            balance *= (1 + monthly_rate) ** grace_months
        except OverflowError:
            balance = math.inf

    if not math.isfinite(balance):
        raise NonFiniteInputError(
            f"Projected balance is not finite for rate={annual_rate_pct}%"
        )
    return StudentLoanProjection(
        total_borrowed=total_borrowed,
        balance_at_graduation=balance_at_graduation,
        balance_after_grace=balance,
        total_interest=balance - total_borrowed,
    )
