"""Command-line front end: one click command per calculator.

Each command collects already-typed options, calls the engine, and renders
the result with rich. Rates are entered as annual percentages and terms in
years, as on the calculator forms.
"""
from __future__ import annotations

import logging
import math
import sys
from typing import Optional

import click
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from .amortization import (
    AmortizationRow,
    generate_schedule,
    mortgage_payment,
    summarize,
    yearly_summary,
)
from .annuity import compare_pension
from .config import (
    COMPOUNDING_FREQUENCIES,
    DEFAULT_ANNUAL_RATE_PCT,
    DEFAULT_COMPOUNDING,
    DEFAULT_CURRENCY,
    DEFAULT_PRINCIPAL,
    DEFAULT_TERM_YEARS,
    PERIODS_PER_YEAR,
)
from .errors import CalculationError
from .payoff import (
    NEVER_BREAKS_EVEN,
    BreakEvenResult,
    analyze_refinance,
    break_even_periods,
    payoff_schedule,
    solve_term_from_payment,
)
from .rates import apr_to_apy, apy_to_apr, loan_apr
from .student import project_student_loan
from .tvm import deferred_amount_due

console = Console()
err_console = Console(stderr=True, style="bold red")

logger = logging.getLogger(__name__)

# ──────────────────────────────────────────────────────────────────────────────
# Formatting helpers
# ──────────────────────────────────────────────────────────────────────────────

class FiniteFloat(click.ParamType):
    """A float option that rejects nan and infinity."""

    name = "float"

    def convert(self, value, param, ctx):
        try:
            number = float(value)
        except (TypeError, ValueError):
            self.fail(f"{value!r} is not a valid number.", param, ctx)
        if not math.isfinite(number):
            self.fail(f"{value!r} is not a finite number.", param, ctx)
        return number


FINITE_FLOAT = FiniteFloat()


def _fmt_money(value: float, currency: str = DEFAULT_CURRENCY) -> str:
    return f"{value:,.2f} {currency}"


def _fmt_pct(value: float, digits: int = 3) -> str:
    """Format a value that is already a percentage (6.5 → '6.500%')."""
    return f"{value:.{digits}f}%"


def _fmt_months(n: float) -> str:
    if math.isnan(n):
        return "n/a"
    if math.isinf(n):
        return "never"
    whole = math.ceil(n)
    years, months = divmod(whole, 12)
    if months == 0:
        return f"{whole} months ({years} years)"
    return f"{whole} months ({years}y {months}m)"


def _fmt_break_even(value: BreakEvenResult) -> str:
    if value is NEVER_BREAKS_EVEN:
        return "N/A"
    return _fmt_months(value)


def _fail(exc: Exception) -> None:
    logger.debug("Calculation failed", exc_info=exc)
    err_console.print(f"Calculation error: {exc}")
    sys.exit(1)


def _summary_table() -> Table:
    t = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
    t.add_column("Field", style="cyan")
    t.add_column("Value", justify="right")
    return t


# ──────────────────────────────────────────────────────────────────────────────
# Result display
# ──────────────────────────────────────────────────────────────────────────────

def display_schedule(schedule: list[AmortizationRow], currency: str) -> None:
    t = Table(title="Amortization Schedule", box=box.MINIMAL_HEAVY_HEAD)
    for col in ("Period", "Payment", "Principal", "Interest", "Balance"):
        t.add_column(col, justify="right")

    for row in schedule:
        t.add_row(
            str(row.period),
            _fmt_money(row.payment, currency),
            _fmt_money(row.principal_portion, currency),
            _fmt_money(row.interest_portion, currency),
            _fmt_money(row.ending_balance, currency),
        )
    console.print(t)


def display_yearly(schedule: list[AmortizationRow], currency: str) -> None:
    t = Table(title="Yearly Summary", box=box.MINIMAL_HEAVY_HEAD)
    for col in ("Year", "Principal", "Interest", "Balance"):
        t.add_column(col, justify="right")

    for year in yearly_summary(schedule):
        t.add_row(
            str(year.year),
            _fmt_money(year.principal_paid, currency),
            _fmt_money(year.interest_paid, currency),
            _fmt_money(year.ending_balance, currency),
        )
    console.print(t)


# ──────────────────────────────────────────────────────────────────────────────
# Click entry point
# ──────────────────────────────────────────────────────────────────────────────

@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool) -> None:
    """Loan, mortgage, APR, pension, student-loan and refinance calculators."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@main.command()
@click.option("--principal", type=FINITE_FLOAT, default=DEFAULT_PRINCIPAL, show_default=True, help="Loan amount")
@click.option("--rate", type=FINITE_FLOAT, default=DEFAULT_ANNUAL_RATE_PCT, show_default=True, help="Annual interest rate (%)")
@click.option("--years", type=click.IntRange(min=1), default=DEFAULT_TERM_YEARS, show_default=True, help="Loan term in years")
@click.option("--view", type=click.Choice(["summary", "yearly", "monthly"]), default="summary", show_default=True)
@click.option("--currency", default=DEFAULT_CURRENCY, show_default=True)
def schedule(principal: float, rate: float, years: int, view: str, currency: str) -> None:
    """Fixed-payment amortization schedule."""
    periodic_rate = rate / 100 / PERIODS_PER_YEAR
    period_count = years * PERIODS_PER_YEAR
    try:
        rows = generate_schedule(principal, periodic_rate, period_count)
        summary = summarize(principal, periodic_rate, period_count, schedule=rows)
    except CalculationError as exc:
        _fail(exc)
        return

    console.print(Panel(
        f"[bold green]Amortization[/bold green]: {_fmt_money(principal, currency)} "
        f"at {_fmt_pct(rate)} over {years} years",
        expand=False,
    ))
    t = _summary_table()
    t.add_row("Monthly payment", _fmt_money(summary.payment, currency))
    t.add_row("Number of payments", str(summary.period_count))
    t.add_row("Total paid", _fmt_money(summary.total_paid, currency))
    t.add_row("Total interest", _fmt_money(summary.total_interest, currency))
    console.print(t)

    if view == "yearly":
        display_yearly(rows, currency)
    elif view == "monthly":
        display_schedule(rows, currency)


@main.command()
@click.option("--principal", type=FINITE_FLOAT, required=True, help="Loan amount")
@click.option("--fees", type=FINITE_FLOAT, default=0.0, show_default=True, help="Financed fees and points")
@click.option("--rate", type=FINITE_FLOAT, required=True, help="Nominal annual rate (%)")
@click.option("--years", type=FINITE_FLOAT, required=True, help="Loan term in years")
def apr(principal: float, fees: float, rate: float, years: float) -> None:
    """Effective APR of a loan including fees."""
    try:
        quote = loan_apr(principal, fees, rate, years)
    except CalculationError as exc:
        _fail(exc)
        return

    t = _summary_table()
    t.add_row("Monthly payment", _fmt_money(quote.payment))
    t.add_row("Amount received", _fmt_money(quote.net_principal))
    t.add_row("Nominal rate", _fmt_pct(quote.nominal_rate))
    t.add_row("APR", _fmt_pct(quote.apr))
    console.print(t)
    if not quote.converged:
        console.print(
            f"[yellow]The APR estimate did not converge after {quote.iterations} "
            f"iterations and may be inaccurate.[/yellow]"
        )


@main.command()
@click.option("--apr", "apr_pct", type=FINITE_FLOAT, default=None, help="Nominal APR (%) to convert to APY")
@click.option("--apy", "apy_pct", type=FINITE_FLOAT, default=None, help="APY (%) to convert to APR")
@click.option(
    "--compounding",
    type=click.Choice(list(COMPOUNDING_FREQUENCIES)),
    default=DEFAULT_COMPOUNDING,
    show_default=True,
)
def apy(apr_pct: Optional[float], apy_pct: Optional[float], compounding: str) -> None:
    """Convert between APR and APY."""
    if (apr_pct is None) == (apy_pct is None):
        raise click.UsageError("Provide exactly one of --apr or --apy.")
    if apr_pct is not None:
        console.print(f"APY: [bold]{_fmt_pct(apr_to_apy(apr_pct, compounding))}[/bold] ({compounding})")
    else:
        console.print(f"APR: [bold]{_fmt_pct(apy_to_apr(apy_pct, compounding))}[/bold] ({compounding})")


@main.command()
@click.option("--lump-sum", type=FINITE_FLOAT, required=True, help="Lump-sum offer")
@click.option("--monthly-pension", type=FINITE_FLOAT, required=True, help="Monthly pension payment")
@click.option("--retirement-age", type=FINITE_FLOAT, required=True)
@click.option("--life-expectancy", type=FINITE_FLOAT, required=True)
@click.option("--return", "annual_return", type=FINITE_FLOAT, default=5.0, show_default=True, help="Expected investment return (%)")
@click.option("--cola", type=FINITE_FLOAT, default=0.0, show_default=True, help="Annual cost-of-living adjustment (%)")
def pension(
    lump_sum: float,
    monthly_pension: float,
    retirement_age: float,
    life_expectancy: float,
    annual_return: float,
    cola: float,
) -> None:
    """Lump sum vs. monthly pension."""
    if life_expectancy <= retirement_age:
        raise click.BadParameter(
            "must exceed the retirement age", param_hint="--life-expectancy"
        )
    try:
        result = compare_pension(
            lump_sum, monthly_pension, retirement_age, life_expectancy, annual_return, cola
        )
    except CalculationError as exc:
        _fail(exc)
        return

    t = _summary_table()
    t.add_row("Lump sum", _fmt_money(result.lump_sum))
    t.add_row("Present value of pension", _fmt_money(result.pension_present_value))
    console.print(t)
    better = "more" if result.difference > 0 else "less"
    console.print(
        f"The pension is worth [bold]{_fmt_money(abs(result.difference))}[/bold] "
        f"{better} than the lump sum today."
    )


@main.command()
@click.option("--balance", type=FINITE_FLOAT, required=True)
@click.option("--rate", type=FINITE_FLOAT, required=True, help="Annual interest rate (%)")
@click.option("--payment", type=FINITE_FLOAT, required=True, help="Fixed monthly payment")
@click.option("--show-schedule", is_flag=True)
def payoff(balance: float, rate: float, payment: float, show_schedule: bool) -> None:
    """Time to pay off a balance with a fixed monthly payment."""
    periodic_rate = rate / 100 / PERIODS_PER_YEAR
    try:
        months = solve_term_from_payment(balance, periodic_rate, payment)
        rows = payoff_schedule(balance, periodic_rate, payment)
    except CalculationError as exc:
        _fail(exc)
        return

    total_paid = math.fsum(row.payment for row in rows)
    t = _summary_table()
    t.add_row("Payoff time", _fmt_months(months))
    t.add_row("Total paid", _fmt_money(total_paid))
    t.add_row("Total interest", _fmt_money(total_paid - balance))
    console.print(t)
    if show_schedule:
        display_schedule(rows, DEFAULT_CURRENCY)


@main.command()
@click.option("--balance", type=FINITE_FLOAT, required=True, help="Current loan balance")
@click.option("--rate", type=FINITE_FLOAT, required=True, help="Current annual rate (%)")
@click.option("--payment", type=FINITE_FLOAT, required=True, help="Current monthly payment")
@click.option("--new-rate", type=FINITE_FLOAT, required=True, help="New annual rate (%)")
@click.option("--new-term", type=click.IntRange(min=1), required=True, help="New term in years")
@click.option("--closing-costs", type=FINITE_FLOAT, default=0.0, show_default=True)
def refinance(
    balance: float,
    rate: float,
    payment: float,
    new_rate: float,
    new_term: int,
    closing_costs: float,
) -> None:
    """Compare the current loan with a refinance."""
    try:
        result = analyze_refinance(balance, rate, payment, new_rate, new_term, closing_costs)
    except CalculationError as exc:
        _fail(exc)
        return

    t = _summary_table()
    t.add_row("Remaining term (current)", _fmt_months(result.remaining_periods_current))
    t.add_row("New principal", _fmt_money(result.new_principal))
    t.add_row("New monthly payment", _fmt_money(result.new_payment))
    t.add_row("Monthly savings", _fmt_money(result.monthly_savings))
    if math.isinf(result.lifetime_savings):
        t.add_row("Lifetime savings", "unbounded (current loan never pays off)")
    else:
        t.add_row("Lifetime savings", _fmt_money(result.lifetime_savings))
    t.add_row("Break-even", _fmt_break_even(result.break_even))
    console.print(t)


@main.command()
@click.option("--closing-costs", type=FINITE_FLOAT, required=True)
@click.option("--monthly-savings", type=FINITE_FLOAT, required=True)
def breakeven(closing_costs: float, monthly_savings: float) -> None:
    """Months until monthly savings recoup closing costs."""
    result = break_even_periods(closing_costs, monthly_savings)
    if result is NEVER_BREAKS_EVEN:
        console.print("Break-even: [bold]N/A[/bold], the refinance never pays for itself.")
    else:
        console.print(f"Break-even: [bold]{_fmt_months(result)}[/bold]")


@main.command()
@click.option("--principal", type=FINITE_FLOAT, required=True, help="Loan amount")
@click.option("--rate", type=FINITE_FLOAT, required=True, help="Annual interest rate (%)")
@click.option("--years", type=FINITE_FLOAT, required=True, help="Loan term in years")
@click.option(
    "--compounding",
    type=click.Choice(list(COMPOUNDING_FREQUENCIES)),
    default="annually",
    show_default=True,
)
def deferred(principal: float, rate: float, years: float, compounding: str) -> None:
    """Lump sum due at maturity on a loan with no payments until the end."""
    try:
        result = deferred_amount_due(principal, rate, years, compounding)
    except CalculationError as exc:
        _fail(exc)
        return

    t = _summary_table()
    t.add_row("Amount due at maturity", _fmt_money(result.amount_due))
    t.add_row("Total interest", _fmt_money(result.total_interest))
    console.print(t)


@main.command()
@click.option("--current-balance", type=FINITE_FLOAT, default=0.0, show_default=True, help="Amount already borrowed")
@click.option("--annual-loan", type=FINITE_FLOAT, required=True, help="Amount borrowed each school year")
@click.option("--years-to-graduate", type=click.IntRange(min=0), required=True)
@click.option("--grace-months", type=click.IntRange(min=0), default=6, show_default=True)
@click.option("--rate", type=FINITE_FLOAT, required=True, help="Annual interest rate (%)")
@click.option("--pay-interest-in-school", is_flag=True, help="Interest is paid while in school and does not capitalize.")
def student(
    current_balance: float,
    annual_loan: float,
    years_to_graduate: int,
    grace_months: int,
    rate: float,
    pay_interest_in_school: bool,
) -> None:
    """Student-loan balance when repayment begins."""
    try:
        result = project_student_loan(
            current_balance, annual_loan, years_to_graduate, grace_months, rate,
            pay_interest_in_school=pay_interest_in_school,
        )
    except CalculationError as exc:
        _fail(exc)
        return

    t = _summary_table()
    t.add_row("Total borrowed", _fmt_money(result.total_borrowed))
    t.add_row("Balance at graduation", _fmt_money(result.balance_at_graduation))
    t.add_row("Balance after grace period", _fmt_money(result.balance_after_grace))
    t.add_row("Capitalized interest", _fmt_money(result.total_interest))
    console.print(t)


@main.command()
@click.option("--price", type=FINITE_FLOAT, required=True, help="Home price")
@click.option("--down-payment", type=FINITE_FLOAT, default=0.0, show_default=True)
@click.option(
    "--down-payment-type",
    type=click.Choice(["amount", "percent"]),
    default="amount",
    show_default=True,
)
@click.option("--rate", type=FINITE_FLOAT, required=True, help="Annual interest rate (%)")
@click.option("--years", type=click.IntRange(min=1), default=DEFAULT_TERM_YEARS, show_default=True)
@click.option("--property-tax", type=FINITE_FLOAT, default=0.0, show_default=True, help="Annual property tax")
@click.option("--insurance", type=FINITE_FLOAT, default=0.0, show_default=True, help="Annual home insurance")
@click.option("--hoa", type=FINITE_FLOAT, default=0.0, show_default=True, help="Monthly HOA fees")
def mortgage(
    price: float,
    down_payment: float,
    down_payment_type: str,
    rate: float,
    years: int,
    property_tax: float,
    insurance: float,
    hoa: float,
) -> None:
    """Monthly mortgage cost including tax, insurance and HOA fees."""
    try:
        result = mortgage_payment(
            price, down_payment, rate, years,
            down_payment_type=down_payment_type,
            annual_property_tax=property_tax,
            annual_home_insurance=insurance,
            monthly_hoa=hoa,
        )
    except CalculationError as exc:
        _fail(exc)
        return

    console.print(Panel(
        f"[bold green]Mortgage[/bold green]: {_fmt_money(result.principal)} "
        f"at {_fmt_pct(rate)} over {years} years",
        expand=False,
    ))
    t = _summary_table()
    t.add_row("Down payment", _fmt_money(result.down_payment))
    t.add_row("Principal and interest", _fmt_money(result.principal_and_interest))
    t.add_row("Property tax", _fmt_money(result.property_tax))
    t.add_row("Home insurance", _fmt_money(result.home_insurance))
    t.add_row("HOA fees", _fmt_money(result.hoa_fees))
    t.add_row("Total monthly payment", _fmt_money(result.monthly_total))
    t.add_row("Total interest", _fmt_money(result.total_interest))
    console.print(t)
