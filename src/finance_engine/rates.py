"""Rate solving (effective APR) and nominal/effective rate conversion.

The solver finds the periodic rate r at which a level payment stream repays
a net principal:

    f(r) = N - PMT * (1 - (1 + r)^-n) / r = 0

using Newton-Raphson with a closed-form derivative. There is no bracketing
fallback: when the iteration budget runs out or the iterate leaves the
domain (r <= -1), the last finite estimate is returned with
converged=False and callers decide whether to show it.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from .amortization import compute_payment
from .config import (
    COMPOUNDING_FREQUENCIES,
    PERIODS_PER_YEAR,
    RATE_EPSILON,
    SOLVER_MAX_ITERATIONS,
    SOLVER_TOLERANCE,
)
from .errors import CalculationError, NonFiniteInputError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateSolveRequest:
    net_principal: float
    payment: float
    period_count: int
    initial_guess: float


@dataclass(frozen=True)
class RateSolveResult:
    periodic_rate: float
    converged: bool
    iterations: int


@dataclass(frozen=True)
class AprQuote:
    nominal_rate: float    # annual, percent
    apr: float             # annual, percent
    periodic_rate: float   # solved, fraction per period
    payment: float
    net_principal: float
    converged: bool
    iterations: int


def _annuity_factor(rate: float, n: int) -> tuple[float, float]:
    """Return A(r) = (1 - (1+r)^-n) / r and its derivative dA/dr."""
    if abs(rate) < RATE_EPSILON:
        # Limits as r -> 0
        return float(n), -n * (n + 1) / 2.0
    log_growth = math.log1p(rate)
    # 1 - (1+r)^-n without cancellation for small r
    one_minus_discount = -math.expm1(-n * log_growth)
    factor = one_minus_discount / rate
    d_factor = (n * rate * math.exp((-n - 1) * log_growth) - one_minus_discount) / rate ** 2
    return factor, d_factor


def solve_rate(
    net_principal: float,
    payment: float,
    period_count: int,
    initial_guess: float,
    *,
    max_iterations: int = SOLVER_MAX_ITERATIONS,
    tolerance: float = SOLVER_TOLERANCE,
) -> RateSolveResult:
    """Solve for the periodic rate that equates *payment* x *period_count* with *net_principal*.

    Seed *initial_guess* from the nominal contract rate; a zero or wildly
    off seed may not converge within the iteration budget.
    """
    if period_count < 1:
        raise ValueError("period_count must be >= 1")
    for name, value in (
        ("net_principal", net_principal),
        ("payment", payment),
        ("initial_guess", initial_guess),
    ):
        if not math.isfinite(value):
            raise NonFiniteInputError(f"{name} must be a finite number, got {value!r}")

    rate = initial_guess
    iterations = 0
    converged = False

    for i in range(1, max_iterations + 1):
        if rate <= -1:
            break
        try:
            factor, d_factor = _annuity_factor(rate, period_count)
        except (OverflowError, ZeroDivisionError):
            break
        f = net_principal - payment * factor
        df = -payment * d_factor
        if df == 0 or not math.isfinite(f) or not math.isfinite(df):
            break

        step = f / df
        new_rate = rate - step
        if not math.isfinite(new_rate):
            break

        iterations = i
        rate = new_rate
        logger.debug("solve_rate iteration %d: rate=%.10f step=%.3e", i, rate, step)
        if abs(step) < tolerance:
            converged = True
            break

    if not converged:
        logger.warning(
            "Rate solver did not converge after %d iterations "
            "(net_principal=%s, payment=%s, period_count=%d, last rate=%s)",
            iterations, net_principal, payment, period_count, rate,
        )
    return RateSolveResult(periodic_rate=rate, converged=converged, iterations=iterations)


def solve(request: RateSolveRequest) -> RateSolveResult:
    return solve_rate(
        request.net_principal,
        request.payment,
        request.period_count,
        request.initial_guess,
    )


def annualize(periodic_rate: float, periods_per_year: int = PERIODS_PER_YEAR) -> float:
    """Nominal annual percentage for a periodic rate (r * periods_per_year * 100)."""
    return periodic_rate * periods_per_year * 100


def loan_apr(
    principal: float,
    fees: float,
    annual_rate_pct: float,
    years: float,
    periods_per_year: int = PERIODS_PER_YEAR,
) -> AprQuote:
    """APR of a loan whose fees/points are deducted from the amount received.

    The payment is set by the contract (full principal at the nominal rate);
    the APR is the rate at which that payment repays only principal - fees.
    """
    period_count = round(years * periods_per_year)
    nominal_periodic = annual_rate_pct / 100 / periods_per_year
    payment = compute_payment(principal, nominal_periodic, period_count)

    net_principal = principal - fees
    if net_principal <= 0:
        raise CalculationError(
            f"Fees ({fees:,.2f}) must be less than the loan amount ({principal:,.2f})."
        )

    result = solve_rate(net_principal, payment, period_count, nominal_periodic)
    return AprQuote(
        nominal_rate=annual_rate_pct,
        apr=annualize(result.periodic_rate, periods_per_year),
        periodic_rate=result.periodic_rate,
        payment=payment,
        net_principal=net_principal,
        converged=result.converged,
        iterations=result.iterations,
    )


def compounding_periods(compounding: str) -> int:
    """Compounding periods per year for a name in COMPOUNDING_FREQUENCIES."""
    try:
        return COMPOUNDING_FREQUENCIES[compounding]
    except KeyError:
        raise ValueError(
            f"Unknown compounding '{compounding}'. "
            f"Valid values: {', '.join(COMPOUNDING_FREQUENCIES)}"
        ) from None


def apr_to_apy(apr_pct: float, compounding: str = "monthly") -> float:
    """Effective annual yield (percent) for a nominal APR (percent)."""
    n = compounding_periods(compounding)
    return ((1 + apr_pct / 100 / n) ** n - 1) * 100


def apy_to_apr(apy_pct: float, compounding: str = "monthly") -> float:
    """Nominal APR (percent) that yields *apy_pct* under the given compounding."""
    n = compounding_periods(compounding)
    return n * ((1 + apy_pct / 100) ** (1 / n) - 1) * 100
