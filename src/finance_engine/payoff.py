"""Payoff-term and refinance break-even solving.

Inverts the amortization relation for the number of periods:

    n = -ln(1 - B * r / PMT) / ln(1 + r)

which is only defined when the payment exceeds the period interest B * r.
"""
from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from typing import Union

from .amortization import AmortizationRow, compute_payment
from .config import PERIODS_PER_YEAR
from .errors import NonFiniteInputError, PaymentTooLowError

# Slack for term values that land a hair above a whole number of periods.
_PERIOD_SLACK = 1e-9


class BreakEven(enum.Enum):
    NEVER = "never"


# Returned by break_even_periods when savings never recoup the costs.
NEVER_BREAKS_EVEN = BreakEven.NEVER

BreakEvenResult = Union[float, BreakEven]


@dataclass(frozen=True)
class RefinanceAnalysis:
    remaining_periods_current: float  # inf when the current payment never pays off
    new_principal: float
    new_payment: float
    monthly_savings: float
    lifetime_savings: float           # inf when the current loan never pays off
    break_even: BreakEvenResult


def solve_term_from_payment(balance: float, periodic_rate: float, payment: float) -> float:
    """Number of periods (fractional) a fixed *payment* needs to retire *balance*.

    Raises PaymentTooLowError when payment <= balance * periodic_rate and
    NonFiniteInputError for a rate at or below -100% per period.
    """
    if balance < 0:
        raise ValueError("balance must be >= 0")
    if not math.isfinite(periodic_rate) or periodic_rate <= -1:
        raise NonFiniteInputError(f"periodic_rate must be a finite number above -1, got {periodic_rate!r}")
    if balance == 0:
        return 0.0
    if payment <= 0 or payment <= balance * periodic_rate:
        raise PaymentTooLowError(balance, periodic_rate, payment)

    if periodic_rate == 0:
        return balance / payment
    return -math.log1p(-balance * periodic_rate / payment) / math.log1p(periodic_rate)


def break_even_periods(closing_costs: float, monthly_savings: float) -> BreakEvenResult:
    """Periods until *monthly_savings* recoup *closing_costs*, or NEVER_BREAKS_EVEN."""
    if monthly_savings > 0:
        return closing_costs / monthly_savings
    return NEVER_BREAKS_EVEN


def payoff_schedule(
    balance: float,
    periodic_rate: float,
    payment: float,
) -> list[AmortizationRow]:
    """Schedule for paying *balance* down with a fixed *payment* until it reaches zero.

    The last row is a partial payment covering the remaining balance plus interest.
    """
    term = solve_term_from_payment(balance, periodic_rate, payment)
    period_count = max(math.ceil(term - _PERIOD_SLACK), 1) if balance > 0 else 0

    rows: list[AmortizationRow] = []
    remaining = balance
    for period in range(1, period_count + 1):
        interest = remaining * periodic_rate
        if period == period_count:
            principal_portion = remaining
            row_payment = remaining + interest
            ending = 0.0
        else:
            principal_portion = payment - interest
            row_payment = payment
            ending = max(remaining - principal_portion, 0.0)
        rows.append(
            AmortizationRow(
                period=period,
                payment=row_payment,
                interest_portion=interest,
                principal_portion=principal_portion,
                ending_balance=ending,
            )
        )
        remaining = ending
    return rows


def analyze_refinance(
    current_balance: float,
    current_rate_pct: float,
    current_payment: float,
    new_rate_pct: float,
    new_term_years: int,
    closing_costs: float = 0.0,
) -> RefinanceAnalysis:
    """Compare keeping the current loan with refinancing the balance plus closing costs."""
    current_rate = current_rate_pct / 100 / PERIODS_PER_YEAR
    try:
        remaining = solve_term_from_payment(current_balance, current_rate, current_payment)
        total_paid_current = current_payment * remaining
    except PaymentTooLowError:
        remaining = math.inf
        total_paid_current = math.inf

    new_principal = current_balance + closing_costs
    new_period_count = new_term_years * PERIODS_PER_YEAR
    new_payment = compute_payment(
        new_principal, new_rate_pct / 100 / PERIODS_PER_YEAR, new_period_count
    )
    total_paid_new = new_payment * new_period_count

    monthly_savings = current_payment - new_payment
    return RefinanceAnalysis(
        remaining_periods_current=remaining,
        new_principal=new_principal,
        new_payment=new_payment,
        monthly_savings=monthly_savings,
        lifetime_savings=total_paid_current - total_paid_new,
        break_even=break_even_periods(closing_costs, monthly_savings),
    )
