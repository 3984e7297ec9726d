"""Fixed-payment amortization schedules.

All values are plain floats (IEEE-754 doubles). The final row of every
schedule pays off the exact remaining balance, so accumulated floating-point
drift never leaves a residue or a negative balance.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal, Optional

from .config import PERIODS_PER_YEAR
from .errors import DownPaymentTooLargeError, NonFinitePaymentError, NonFiniteInputError

DownPaymentType = Literal["amount", "percent"]


@dataclass(frozen=True)
class LoanTerms:
    principal: float
    periodic_rate: float
    period_count: int


@dataclass(frozen=True)
class AmortizationRow:
    period: int
    payment: float
    interest_portion: float
    principal_portion: float
    ending_balance: float


@dataclass(frozen=True)
class LoanSummary:
    payment: float
    period_count: int
    total_paid: float
    total_interest: float


@dataclass(frozen=True)
class YearSummary:
    year: int
    principal_paid: float
    interest_paid: float
    ending_balance: float


def _check_finite(**values: float) -> None:
    for name, value in values.items():
        if not math.isfinite(value):
            raise NonFiniteInputError(f"{name} must be a finite number, got {value!r}")


def compute_payment(principal: float, periodic_rate: float, period_count: int) -> float:
    """Return the fixed payment that amortizes *principal* over *period_count* periods.

    Uses the standard reducing-balance formula:
        PMT = P * r * (1 + r)^n / ((1 + r)^n - 1)

    Special case: if periodic_rate == 0, PMT = P / n. (1 + r)^n - 1 is taken
    through expm1/log1p so tiny positive rates still rank above zero.

    Raises NonFinitePaymentError when the result is not a finite positive number.
    """
    if period_count < 1:
        raise ValueError("period_count must be >= 1")
    if principal < 0:
        raise ValueError("principal must be >= 0")
    _check_finite(principal=principal, periodic_rate=periodic_rate)

    if periodic_rate == 0:
        payment = principal / period_count
    elif periodic_rate <= -1:
        payment = math.nan
    else:
        try:
            growth = math.expm1(period_count * math.log1p(periodic_rate))
            payment = principal * periodic_rate * (growth + 1) / growth
        except (OverflowError, ZeroDivisionError):
            payment = math.inf

    if not math.isfinite(payment) or payment <= 0:
        raise NonFinitePaymentError(principal, periodic_rate, period_count, payment)
    return payment


def generate_schedule(
    principal: float,
    periodic_rate: float,
    period_count: int,
) -> list[AmortizationRow]:
    """Build the full period-by-period amortization schedule."""
    payment = compute_payment(principal, periodic_rate, period_count)

    rows: list[AmortizationRow] = []
    balance = principal

    for period in range(1, period_count + 1):
        interest = balance * periodic_rate
        if period == period_count:
            # Pay off the exact remaining balance to absorb drift.
            principal_portion = balance
            row_payment = interest + balance
            ending = 0.0
        else:
            principal_portion = payment - interest
            row_payment = payment
            ending = max(balance - principal_portion, 0.0)

        rows.append(
            AmortizationRow(
                period=period,
                payment=row_payment,
                interest_portion=interest,
                principal_portion=principal_portion,
                ending_balance=ending,
            )
        )
        balance = ending

    return rows


def generate_schedule_for(terms: LoanTerms) -> list[AmortizationRow]:
    return generate_schedule(terms.principal, terms.periodic_rate, terms.period_count)


def summarize(
    principal: float,
    periodic_rate: float,
    period_count: int,
    schedule: Optional[list[AmortizationRow]] = None,
) -> LoanSummary:
    """Return payment and lifetime totals, computed from the schedule.

    Pass *schedule* when the caller already generated it for the same terms.
    """
    if schedule is None:
        schedule = generate_schedule(principal, periodic_rate, period_count)
    total_paid = math.fsum(row.payment for row in schedule)
    total_interest = math.fsum(row.interest_portion for row in schedule)
    return LoanSummary(
        payment=compute_payment(principal, periodic_rate, period_count),
        period_count=period_count,
        total_paid=total_paid,
        total_interest=total_interest,
    )


def yearly_summary(
    schedule: list[AmortizationRow],
    periods_per_year: int = PERIODS_PER_YEAR,
) -> list[YearSummary]:
    """Group schedule rows into years (period p belongs to year ceil(p / periods_per_year))."""
    if periods_per_year < 1:
        raise ValueError("periods_per_year must be >= 1")

    years: list[YearSummary] = []
    principal_paid = 0.0
    interest_paid = 0.0
    for row in schedule:
        principal_paid += row.principal_portion
        interest_paid += row.interest_portion
        if row.period % periods_per_year == 0 or row is schedule[-1]:
            years.append(
                YearSummary(
                    year=math.ceil(row.period / periods_per_year),
                    principal_paid=principal_paid,
                    interest_paid=interest_paid,
                    ending_balance=row.ending_balance,
                )
            )
            principal_paid = 0.0
            interest_paid = 0.0
    return years


# ── Mortgage monthly total ────────────────────────────────────────────────────

@dataclass(frozen=True)
class MortgagePayment:
    home_price: float
    down_payment: float
    principal: float
    principal_and_interest: float
    property_tax: float      # monthly
    home_insurance: float    # monthly
    hoa_fees: float          # monthly
    monthly_total: float
    total_interest: float
    total_paid: float        # principal + interest, excluding the down payment


def down_payment_amount(
    home_price: float,
    down_payment: float,
    down_payment_type: DownPaymentType = "amount",
) -> float:
    """Down payment in currency; *down_payment* is a percentage of the price when type is 'percent'."""
    if down_payment_type == "percent":
        amount = home_price * down_payment / 100
    elif down_payment_type == "amount":
        amount = down_payment
    else:
        raise ValueError(f"Unknown down payment type '{down_payment_type}'. Valid values: amount, percent")
    if amount >= home_price:
        raise DownPaymentTooLargeError(home_price, amount)
    return amount


def mortgage_payment(
    home_price: float,
    down_payment: float,
    annual_rate_pct: float,
    years: int,
    *,
    down_payment_type: DownPaymentType = "amount",
    annual_property_tax: float = 0.0,
    annual_home_insurance: float = 0.0,
    monthly_hoa: float = 0.0,
) -> MortgagePayment:
    """Monthly housing cost: principal and interest plus tax, insurance and HOA.

    Tax and insurance are annual amounts spread over twelve months; HOA fees
    are already monthly.
    """
    down = down_payment_amount(home_price, down_payment, down_payment_type)
    principal = home_price - down
    periodic_rate = annual_rate_pct / 100 / PERIODS_PER_YEAR
    summary = summarize(principal, periodic_rate, years * PERIODS_PER_YEAR)

    property_tax = annual_property_tax / PERIODS_PER_YEAR
    home_insurance = annual_home_insurance / PERIODS_PER_YEAR
    return MortgagePayment(
        home_price=home_price,
        down_payment=down,
        principal=principal,
        principal_and_interest=summary.payment,
        property_tax=property_tax,
        home_insurance=home_insurance,
        hoa_fees=monthly_hoa,
        monthly_total=summary.payment + property_tax + home_insurance + monthly_hoa,
        total_interest=summary.total_interest,
        total_paid=summary.total_paid,
    )
