"""Present value of level and geometrically growing annuities.

PV = PMT * (1 - ((1 + g) / (1 + d))^n) / (d - g)

When d == g the formula is 0/0; the limit PMT * n / (1 + d) is used instead.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

from .config import PERIODS_PER_YEAR, RATE_EPSILON
from .errors import NonFiniteInputError


@dataclass(frozen=True)
class CashFlowStream:
    payment: float
    periods: int
    growth_rate: float = 0.0
    discount_rate: float = 0.0


@dataclass(frozen=True)
class PensionComparison:
    lump_sum: float
    pension_present_value: float
    # > 0 means the pension stream is worth more than the lump sum
    difference: float


def present_value(
    payment: float,
    periods: int,
    discount_rate: float,
    growth_rate: float = 0.0,
) -> float:
    """Present value of *periods* end-of-period payments growing at *growth_rate*.

    The first payment is *payment*; each subsequent one is (1 + growth_rate)
    times the previous. A negative *periods* is a caller precondition and is
    not checked. Rates at or below -1 raise NonFiniteInputError.
    """
    for name, value in (
        ("payment", payment),
        ("discount_rate", discount_rate),
        ("growth_rate", growth_rate),
    ):
        if not math.isfinite(value):
            raise NonFiniteInputError(f"{name} must be a finite number, got {value!r}")
    for name, value in (("discount_rate", discount_rate), ("growth_rate", growth_rate)):
        if value <= -1:
            raise NonFiniteInputError(f"{name} must be above -1, got {value!r}")

    if abs(discount_rate - growth_rate) < RATE_EPSILON:
        pv = payment * periods / (1 + discount_rate)
    else:
        try:
            # 1 - ((1+g)/(1+d))^n, kept accurate when g and d are close
            shrink = -math.expm1(periods * (math.log1p(growth_rate) - math.log1p(discount_rate)))
            pv = payment * shrink / (discount_rate - growth_rate)
        except (OverflowError, ZeroDivisionError) as exc:
            raise NonFiniteInputError(
                f"Present value overflowed for discount_rate={discount_rate}, "
                f"growth_rate={growth_rate}, periods={periods}"
            ) from exc

    if not math.isfinite(pv):
        raise NonFiniteInputError(
            f"Present value is not finite for discount_rate={discount_rate}, "
            f"growth_rate={growth_rate}, periods={periods}"
        )
    return pv


def evaluate_stream(stream: CashFlowStream) -> float:
    return present_value(
        stream.payment, stream.periods, stream.discount_rate, stream.growth_rate
    )


def compare_pension(
    lump_sum: float,
    monthly_pension: float,
    retirement_age: float,
    life_expectancy: float,
    annual_return_pct: float,
    annual_cola_pct: float = 0.0,
) -> PensionComparison:
    """Compare a lump-sum offer with a monthly pension paid until *life_expectancy*.

    Rates are annual percentages; both are converted to monthly rates
    (rate / 100 / 12) and the pension grows monthly by the COLA rate.
    Validating life_expectancy > retirement_age is up to the caller.
    """
    stream = CashFlowStream(
        payment=monthly_pension,
        periods=round((life_expectancy - retirement_age) * PERIODS_PER_YEAR),
        growth_rate=annual_cola_pct / 100 / PERIODS_PER_YEAR,
        discount_rate=annual_return_pct / 100 / PERIODS_PER_YEAR,
    )
    pv = evaluate_stream(stream)
    return PensionComparison(
        lump_sum=lump_sum,
        pension_present_value=pv,
        difference=pv - lump_sum,
    )
