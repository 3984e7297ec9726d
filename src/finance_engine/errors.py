"""Engine error taxonomy.

Every engine failure derives from CalculationError so front ends can catch a
single type and keep serving independent calculations.
"""
from __future__ import annotations


class CalculationError(ValueError):
    """Base class for calculations that cannot produce a meaningful result."""


class NonFinitePaymentError(CalculationError):
    """Amortization inputs produce an unpayable or numerically invalid payment."""

    def __init__(self, principal: float, periodic_rate: float, period_count: int, payment: float):
        self.principal = principal
        self.periodic_rate = periodic_rate
        self.period_count = period_count
        self.payment = payment
        super().__init__(
            f"Could not calculate payment with these inputs "
            f"(principal={principal}, periodic_rate={periodic_rate}, "
            f"period_count={period_count}, payment={payment})."
        )


class PaymentTooLowError(CalculationError):
    """A fixed payment does not cover the interest accrued in one period."""

    def __init__(self, balance: float, periodic_rate: float, payment: float):
        self.balance = balance
        self.periodic_rate = periodic_rate
        self.payment = payment
        self.period_interest = balance * periodic_rate
        super().__init__(
            f"Payment {payment:,.2f} does not cover the period interest of "
            f"{self.period_interest:,.2f}; increase the payment to pay off the balance."
        )


class NonFiniteInputError(CalculationError):
    """An input or intermediate result is NaN or infinite."""


class DownPaymentTooLargeError(CalculationError):
    """The down payment leaves nothing to finance."""

    def __init__(self, home_price: float, down_payment: float):
        self.home_price = home_price
        self.down_payment = down_payment
        super().__init__(
            f"Down payment ({down_payment:,.2f}) must be less than the home price ({home_price:,.2f})."
        )
