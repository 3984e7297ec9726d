"""Time-value-of-money helpers.

Spreadsheet sign convention: money received is positive, money paid out is
negative, so pv(...) of a stream of positive payments comes back negative.
Rates are annual percentages compounded monthly; nper is in months.

(1 + r)^n - 1 is evaluated as expm1(n * log1p(r)) throughout so that very
small rates do not collapse to the zero-rate case.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

from .config import PERIODS_PER_YEAR
from .errors import NonFiniteInputError, PaymentTooLowError
from .rates import compounding_periods


@dataclass(frozen=True)
class DeferredLoan:
    principal: float
    amount_due: float
    total_interest: float


def _monthly(rate_pct: float) -> float:
    rate = rate_pct / 100 / PERIODS_PER_YEAR
    if not math.isfinite(rate) or rate <= -1:
        raise NonFiniteInputError(
            f"rate must be a finite percentage above -{100 * PERIODS_PER_YEAR}, got {rate_pct!r}"
        )
    return rate


def _growth_minus_one(rate: float, nper: float) -> float:
    try:
        return math.expm1(nper * math.log1p(rate))
    except OverflowError as exc:
        raise NonFiniteInputError(f"(1 + {rate})^{nper} overflowed") from exc


def pv(rate_pct: float, nper: float, pmt: float, fv: float = 0.0) -> float:
    rate = _monthly(rate_pct)
    if rate == 0:
        return -(fv + pmt * nper)
    excess = _growth_minus_one(rate, nper)
    return -((pmt * excess / rate + fv) / (excess + 1))


def fv(rate_pct: float, nper: float, pmt: float, pv: float = 0.0) -> float:
    rate = _monthly(rate_pct)
    if rate == 0:
        return -(pv + pmt * nper)
    excess = _growth_minus_one(rate, nper)
    return -(pv * (excess + 1) + pmt * excess / rate)


def pmt(rate_pct: float, nper: float, pv: float, fv: float = 0.0) -> float:
    if nper <= 0:
        raise ValueError("nper must be > 0")
    rate = _monthly(rate_pct)
    if rate == 0:
        return -(pv + fv) / nper
    excess = _growth_minus_one(rate, nper)
    return -(fv + pv * (excess + 1)) * rate / excess


def nper(rate_pct: float, pmt: float, pv: float, fv: float = 0.0) -> float:
    """Number of monthly periods.

    Raises PaymentTooLowError when the payment can never reach *fv*.
    """
    rate = _monthly(rate_pct)
    if rate == 0:
        if pmt == 0:
            raise PaymentTooLowError(abs(pv), rate, pmt)
        return -(pv + fv) / pmt
    denominator = pmt + pv * rate
    if denominator == 0:
        raise PaymentTooLowError(abs(pv), rate, abs(pmt))
    # (pmt - fv*r) / (pmt + pv*r) written as 1 + shift
    shift = -(fv + pv) * rate / denominator
    if shift <= -1:
        raise PaymentTooLowError(abs(pv), rate, abs(pmt))
    return math.log1p(shift) / math.log1p(rate)


def deferred_amount_due(
    principal: float,
    annual_rate_pct: float,
    years: float,
    compounding: str = "annually",
) -> DeferredLoan:
    """Lump sum owed at maturity when nothing is paid until the end of the term.

    amount_due = P * (1 + r / n)^(n * years), with n taken from the
    compounding table.
    """
    if principal < 0:
        raise ValueError("principal must be >= 0")
    if years < 0:
        raise ValueError("years must be >= 0")
    n = compounding_periods(compounding)
    rate = annual_rate_pct / 100 / n
    if not math.isfinite(principal) or not math.isfinite(rate) or rate <= -1:
        raise NonFiniteInputError(
            f"principal and rate must be finite with rate above -{100 * n}%, "
            f"got principal={principal!r}, rate={annual_rate_pct!r}"
        )
    try:
        amount_due = principal * math.exp(n * years * math.log1p(rate))
    except OverflowError as exc:
        raise NonFiniteInputError(
            f"Amount due overflowed for rate={annual_rate_pct}%, years={years}"
        ) from exc
    return DeferredLoan(
        principal=principal,
        amount_due=amount_due,
        total_interest=amount_due - principal,
    )
